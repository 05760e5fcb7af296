"""
Blob storage for LockDrop

Structure Map for reference:
==============================
 - <upload_dir>/
      - {blob_id}        (sealed blob bytes, opaque)
      - {blob_id}.json   (record: size, uploaded_at, expires_at)
==============================
For reference:
> Blobs are stored exactly as the sealing core produced them; storage never
  interprets them and never sees a password or key.
> Identifiers are random UUID4 strings issued by new_id(); anything else is
  rejected before it reaches the filesystem.
> The sidecar record is what makes expiry enforceable.
"""

import json
import logging
import os
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, List

from .exceptions import BlobNotFoundError, InvalidBlobIdError, StorageError
from .models import BlobRecord, utcnow


logger = logging.getLogger(__name__)

RECORD_SUFFIX = ".json"
TMP_SUFFIX = ".tmp"


def _is_valid_id(blob_id: str) -> bool:
    try:
        return str(uuid.UUID(blob_id)) == blob_id
    except (ValueError, AttributeError, TypeError):
        return False


class BlobStorage:
    """Byte-addressable store of sealed blobs keyed by opaque identifier."""

    def __init__(self, root_path: str | Path):
        self.root = Path(root_path).expanduser()
        self.root.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def new_id() -> str:
        return str(uuid.uuid4())

    def blob_path(self, blob_id: str) -> Path:
        if not _is_valid_id(blob_id):
            raise InvalidBlobIdError(f"Invalid blob id: {blob_id!r}")
        return self.root / blob_id

    def record_path(self, blob_id: str) -> Path:
        return self.blob_path(blob_id).with_name(blob_id + RECORD_SUFFIX)

    def _write_atomic(self, destination: Path, data: bytes) -> None:
        tmp_path = destination.with_name(destination.name + TMP_SUFFIX)
        try:
            with open(tmp_path, "wb") as f:
                f.write(data)
            os.replace(tmp_path, destination)
        except OSError as e:
            tmp_path.unlink(missing_ok=True)
            raise StorageError(f"Failed to write {destination.name}: {e}") from e

    def put(
        self, blob_id: str, blob: bytes, expires_at: Optional[datetime] = None
    ) -> BlobRecord:
        """Write ``blob`` under ``blob_id`` together with its record."""
        path = self.blob_path(blob_id)
        record = BlobRecord(
            blob_id=blob_id,
            size=len(blob),
            uploaded_at=utcnow(),
            expires_at=expires_at,
        )
        self._write_atomic(path, blob)
        try:
            self._write_atomic(
                self.record_path(blob_id), json.dumps(record.to_dict()).encode("utf-8")
            )
        except StorageError:
            # a blob without its record would never expire
            path.unlink(missing_ok=True)
            raise
        logger.debug("Stored blob %s (%d bytes)", blob_id, record.size)
        return record

    def get(self, blob_id: str) -> bytes:
        path = self.blob_path(blob_id)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            raise BlobNotFoundError(f"Blob {blob_id} not found") from None
        except OSError as e:
            raise StorageError(f"Failed to read blob {blob_id}: {e}") from e

    def has(self, blob_id: str) -> bool:
        return self.blob_path(blob_id).exists()

    def get_record(self, blob_id: str) -> BlobRecord:
        """
        Return the record for ``blob_id``.

        Blobs written without a sidecar fall back to the file's size and mtime
        and carry no expiry. An unreadable sidecar counts as already expired.
        """
        path = self.blob_path(blob_id)
        record_path = self.record_path(blob_id)
        try:
            stat = path.stat()
        except FileNotFoundError:
            raise BlobNotFoundError(f"Blob {blob_id} not found") from None
        uploaded_at = datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc)
        expires_at = None
        if record_path.exists():
            try:
                with open(record_path, "r", encoding="utf-8") as f:
                    return BlobRecord.from_dict(json.load(f))
            except FileNotFoundError:
                # deleted together with its blob since the exists() check
                raise BlobNotFoundError(f"Blob {blob_id} not found") from None
            except (OSError, ValueError, KeyError) as e:
                logger.error("Unreadable record for %s, treating as expired: %s", blob_id, e)
                expires_at = uploaded_at
        return BlobRecord(
            blob_id=blob_id,
            size=stat.st_size,
            uploaded_at=uploaded_at,
            expires_at=expires_at,
        )

    def delete(self, blob_id: str) -> bool:
        path = self.blob_path(blob_id)
        existed = path.exists()
        path.unlink(missing_ok=True)
        self.record_path(blob_id).unlink(missing_ok=True)
        return existed

    def list_records(self) -> List[BlobRecord]:
        records = []
        for entry in self.root.iterdir():
            if not entry.is_file() or not _is_valid_id(entry.name):
                continue
            try:
                records.append(self.get_record(entry.name))
            except BlobNotFoundError:
                # removed between listing and stat
                continue
        records.sort(key=lambda r: r.uploaded_at)
        return records

    def sweep_expired(self, now: Optional[datetime] = None) -> int:
        """Delete every blob whose expiry has passed; return how many were removed."""
        now = now or utcnow()
        removed = 0
        for record in self.list_records():
            if record.is_expired(now) and self.delete(record.blob_id):
                removed += 1
        if removed:
            logger.info("Swept %d expired blob(s)", removed)
        return removed
