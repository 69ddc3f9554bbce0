"""
Snapshot stores.

A store moves opaque bytes under a key. It never interprets them:
the state schema belongs to reconciliation.

- LocalStore: files under a directory, atomic replace on write
- S3Store:    one bucket, boto3 client injected or created on demand
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol
import os
import tempfile

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from instrument_updates.errors import StorageError


NOT_FOUND_CODES = {"404", "NotFound", "NoSuchKey"}


class SnapshotStore(Protocol):
    def exists(self, key: str) -> bool: ...

    def read(self, key: str) -> bytes: ...

    def write(self, key: str, data: bytes, content_type: str) -> None: ...


# ---------------------------------------------------------------------
# Local filesystem
# ---------------------------------------------------------------------

class LocalStore:
    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def __repr__(self) -> str:
        return f"LocalStore({str(self.root)!r})"

    def _path(self, key: str) -> Path:
        return self.root / key

    def exists(self, key: str) -> bool:
        return self._path(key).is_file()

    def read(self, key: str) -> bytes:
        try:
            return self._path(key).read_bytes()
        except OSError as e:
            raise StorageError(f"Failed to read {key}: {e}", key) from e

    def write(self, key: str, data: bytes, content_type: str) -> None:
        # content_type only matters to object stores
        path = self._path(key)
        tmp = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.")
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp, path)
        except OSError as e:
            if tmp is not None:
                Path(tmp).unlink(missing_ok=True)
            raise StorageError(f"Failed to write {key}: {e}", key) from e


# ---------------------------------------------------------------------
# Amazon S3
# ---------------------------------------------------------------------

class S3Store:
    def __init__(self, bucket: str, client=None) -> None:
        self.bucket = bucket
        self.s3 = client or boto3.Session().client("s3")

    def __repr__(self) -> str:
        return f"S3Store({self.bucket!r})"

    def exists(self, key: str) -> bool:
        try:
            self.s3.head_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in NOT_FOUND_CODES:
                return False
            raise StorageError(f"S3 head_object failed for {key}: {e}", key) from e
        except BotoCoreError as e:
            raise StorageError(f"S3 head_object failed for {key}: {e}", key) from e
        return True

    def read(self, key: str) -> bytes:
        try:
            obj = self.s3.get_object(Bucket=self.bucket, Key=key)
            return obj["Body"].read()
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"S3 get_object failed for {key}: {e}", key) from e

    def write(self, key: str, data: bytes, content_type: str) -> None:
        try:
            self.s3.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
            )
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"S3 put_object failed for {key}: {e}", key) from e
