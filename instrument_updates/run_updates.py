"""
Instrument Updates Run

Single entry point:

    python -m instrument_updates.run_updates

fetch → validate → select → reconcile (commit state) → render → publish,
then a run manifest. State is committed before rendering: a rendering
failure never loses recorded updates.
"""
from __future__ import annotations

from datetime import datetime
from typing import Callable
import os
import platform
import sys

from filelock import FileLock, Timeout

from instrument_updates.changelog import order_updates, render_changelog
from instrument_updates.config import (
    CHANGELOG_CONTENT_TYPE,
    CHANGELOG_FILE_NAME,
    DATA_DIR,
    DATA_FILE_NAME,
    GA_TRACKING_ID,
    LOCK_FILE,
    LOCK_TIMEOUT_SECONDS,
    MIN_SELECTED_INSTRUMENTS,
    STORE_BACKEND,
    require,
)
from instrument_updates.errors import ValidationError
from instrument_updates.fetch_instruments import fetch_instruments
from instrument_updates.manifest import body_hash, write_manifest
from instrument_updates.models import UpdateRecord, utc_now
from instrument_updates.storage import LocalStore, S3Store, SnapshotStore
from instrument_updates.universe.reconcile_updates import Reconciler
from instrument_updates.universe.select_instruments import select_instruments, summarise_types
from instrument_updates.universe.validate_instruments import parse_body, require_valid


STEPS = [
    "fetch",
    "validate",
    "select",
    "reconcile",
    "render",
    "publish",
]


def build_store(backend: str = STORE_BACKEND) -> SnapshotStore:
    if backend == "s3":
        require("HOST_S3_BUCKET_NAME")
        return S3Store(os.environ["HOST_S3_BUCKET_NAME"])
    if backend == "local":
        return LocalStore(DATA_DIR)
    raise RuntimeError(f"Unknown STORE_BACKEND: {backend!r} (expected 'local' or 's3')")


# ---------------------------------------------------------------------
# One run
# ---------------------------------------------------------------------

def run_once(
    store: SnapshotStore,
    details: dict,
    fetch: Callable[[], bytes] = fetch_instruments,
    clock: Callable[[], datetime] = utc_now,
    min_selected: int = MIN_SELECTED_INSTRUMENTS,
    ga_tracking_id: str | None = GA_TRACKING_ID,
) -> list[UpdateRecord]:
    """
    Execute every step against `store`. Progress counts are written into
    `details` as they become known so a failed run still reports them.
    Returns the update records appended by this run.
    """

    print("▶ Fetching instrument list")
    body = fetch()
    details["body_sha256"] = body_hash(body)

    print("▶ Validating instruments")
    rows = require_valid(parse_body(body))
    details["fetched"] = len(rows)
    print(f"✓ {len(rows):,} well-formed instruments")

    print("▶ Selecting tracked instruments")
    selected = select_instruments(rows)
    details["selected"] = len(selected)
    print(f"✓ {len(selected):,} tracked of {len(rows):,}")
    print(summarise_types(rows).to_string())

    if len(selected) < min_selected:
        raise ValidationError(
            f"selected set below minimum of {min_selected}",
            len(selected),
        )

    print(f"▶ Reconciling against {store!r}")
    reconciler = Reconciler(store, DATA_FILE_NAME, clock=clock)
    appended = reconciler.reconcile(selected)

    if reconciler.diff is None:
        print(f"✓ No previous state — initialised with {len(reconciler.state.instruments):,} instruments")
    else:
        if reconciler.diff.drifted:
            print(f"⚠ {len(reconciler.diff.drifted):,} instruments changed details (not recorded)")
        print(f"✓ State committed: +{len(reconciler.diff.added)} / -{len(reconciler.diff.removed)}")

    details["added"] = sum(1 for u in appended if u.type == "added")
    details["removed"] = sum(1 for u in appended if u.type == "removed")
    details["log_size"] = len(reconciler.state.updates)

    print("▶ Rendering changelog")
    html = render_changelog(
        order_updates(reconciler.state.updates),
        generated_at=clock(),
        ga_tracking_id=ga_tracking_id,
    )

    print(f"▶ Publishing {CHANGELOG_FILE_NAME}")
    store.write(CHANGELOG_FILE_NAME, html.encode("utf-8"), CHANGELOG_CONTENT_TYPE)

    return appended


# ---------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------

def main() -> None:
    print(
        f"▶ Starting instrument updates "
        f"(python {platform.python_version()}, {sys.platform}, "
        f"store={STORE_BACKEND}, analytics={'on' if GA_TRACKING_ID else 'off'})"
    )

    details: dict = {"store": STORE_BACKEND, "key": DATA_FILE_NAME}
    DATA_DIR.mkdir(parents=True, exist_ok=True)

    try:
        with FileLock(str(LOCK_FILE), timeout=LOCK_TIMEOUT_SECONDS):
            run_once(build_store(), details)
    except Timeout:
        print("⚠ Another run already in progress")
        manifest = write_manifest(steps=STEPS, status="SKIPPED", details=details)
        print(f"⚠ Manifest written: {manifest}")
        return
    except Exception as e:
        details["error"] = {"type": type(e).__name__, "message": str(e)}
        manifest = write_manifest(steps=STEPS, status="FAILED", details=details)
        print("\n✗ Instrument updates failed")
        print(f"✗ Manifest written: {manifest}")
        raise

    manifest = write_manifest(steps=STEPS, status="SUCCESS", details=details)
    print("\n✓ Instrument updates generated")
    print(f"✓ Manifest written: {manifest}")


if __name__ == "__main__":
    main()
