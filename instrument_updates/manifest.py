"""
Run Manifest

One JSON file per run: what ran, against which store, what came in,
what changed. No side effects beyond writing the file.
"""

from __future__ import annotations

from pathlib import Path
from datetime import datetime, timezone
import hashlib
import json
import uuid

from instrument_updates.config import MANIFEST_DIR


def body_hash(body: bytes | None) -> str | None:
    if body is None:
        return None
    return hashlib.sha256(body).hexdigest()


def write_manifest(
    steps: list[str],
    status: str,
    details: dict | None = None,
    manifest_dir: Path = MANIFEST_DIR,
) -> Path:
    manifest = {
        "run_id": str(uuid.uuid4()),
        "timestamp_utc": datetime.now(timezone.utc).isoformat(),
        "status": status,
        "steps": steps,
        **(details or {}),
    }

    manifest_dir.mkdir(parents=True, exist_ok=True)
    out = manifest_dir / f"run_{manifest['run_id']}.json"
    out.write_text(json.dumps(manifest, indent=2, ensure_ascii=False), encoding="utf-8")
    return out
