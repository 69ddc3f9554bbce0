"""
Run configuration.

Everything here comes from the environment, optionally seeded from a .env
file in the run directory (INSTRUMENT_UPDATES_HOME, else the working
directory). Data and manifests default to paths under the same directory.
Constants that are part of the tracking rules, not deployment, live with
the code that uses them.
"""

from pathlib import Path
import os

from dotenv import load_dotenv


BASE_DIR = Path(os.getenv("INSTRUMENT_UPDATES_HOME") or Path.cwd())
ENV_FILE = BASE_DIR / ".env"

load_dotenv(ENV_FILE)


def require(*names: str) -> None:
    missing = [n for n in names if not os.getenv(n)]
    if missing:
        raise RuntimeError(f"Missing required env vars: {', '.join(missing)}")


# ---------------------------------------------------------------------
# Upstream
# ---------------------------------------------------------------------

INSTRUMENTS_DATA_URL = os.getenv(
    "INSTRUMENTS_DATA_URL",
    "https://randomcapital.hu/uploads/ik/basedata.json",
)
FETCH_TIMEOUT_SECONDS = float(os.getenv("FETCH_TIMEOUT_SECONDS", "30"))


# ---------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------

STORE_BACKEND = os.getenv("STORE_BACKEND", "local").strip().lower()   # "local" | "s3"

DATA_DIR = Path(os.getenv("DATA_DIR") or BASE_DIR / "data" / "instrument_updates")

DATA_FILE_NAME = "data.json"
DATA_FILE_CONTENT_TYPE = "application/json; charset=utf-8"

CHANGELOG_FILE_NAME = "instrument-updates.html"
CHANGELOG_CONTENT_TYPE = "text/html; charset=utf-8"


# ---------------------------------------------------------------------
# Run outputs
# ---------------------------------------------------------------------

MANIFEST_DIR = Path(os.getenv("MANIFEST_DIR") or BASE_DIR / "outputs" / "manifests")
LOCK_FILE = DATA_DIR / ".instrument_updates.lock"
LOCK_TIMEOUT_SECONDS = 5

GA_TRACKING_ID = os.getenv("GA_TRACKING_ID") or None

# 0 disables the guard: an empty selection then removes everything tracked.
MIN_SELECTED_INSTRUMENTS = int(os.getenv("MIN_SELECTED_INSTRUMENTS", "0"))
