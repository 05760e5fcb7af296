"""
ShareService: upload/download/list operations on top of sealing and storage.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta
from typing import Optional, List

from ..config import AppConfig
from ..security.sealed_blob import seal, open_blob
from .exceptions import (
    BlobExpiredError,
    CryptoError,
    FileTooLargeError,
    InvalidUploadError,
)
from .models import FileInfo, UploadResult, format_timestamp, utcnow
from .storage import BlobStorage


logger = logging.getLogger(__name__)


def size_limit_message(limit: int) -> str:
    if limit % (1024 * 1024) == 0:
        return f"File size exceeds {limit // (1024 * 1024)}MB limit"
    return f"File size exceeds {limit} byte limit"


class ShareService:
    """High-level file drop operations.

    Key derivation is deliberately slow, so every seal/open is submitted to a
    bounded thread pool and request threads only wait on the result.
    """

    def __init__(self, config: AppConfig, storage: Optional[BlobStorage] = None):
        self.config = config
        self.storage = storage if storage is not None else BlobStorage(config.upload_dir)
        self._pool = ThreadPoolExecutor(
            max_workers=config.kdf_workers, thread_name_prefix="lockdrop-kdf"
        )

    def upload(self, data: bytes, password: Optional[str | bytes]) -> UploadResult:
        """Seal ``data`` with ``password`` and store it under a fresh identifier."""
        if not data:
            raise InvalidUploadError("No file provided")
        if password is None:
            raise InvalidUploadError("No password provided")
        if len(data) > self.config.max_file_size:
            raise FileTooLargeError(size_limit_message(self.config.max_file_size))

        blob = self._pool.submit(seal, data, password).result()

        file_id = self.storage.new_id()
        expires_at = utcnow() + timedelta(hours=self.config.expiry_hours)
        self.storage.put(file_id, blob, expires_at=expires_at)
        logger.info("Stored upload %s (%d bytes sealed)", file_id, len(blob))

        return UploadResult(
            file_id=file_id,
            message="File uploaded successfully",
            expires_at=format_timestamp(expires_at),
        )

    def download(self, file_id: str, password: str | bytes) -> bytes:
        """Return the original bytes of ``file_id`` if ``password`` opens it."""
        record = self.storage.get_record(file_id)
        if record.is_expired():
            self.storage.delete(file_id)
            logger.info("Refused expired download %s", file_id)
            raise BlobExpiredError(f"File {file_id} has expired")

        blob = self.storage.get(file_id)
        try:
            data = self._pool.submit(open_blob, blob, password).result()
        except CryptoError:
            logger.warning("Failed to open %s", file_id)
            raise
        logger.info("Served download %s", file_id)
        return data

    def list_files(self) -> List[FileInfo]:
        # expired but not yet swept blobs are refused by download
        return [
            FileInfo.from_record(r)
            for r in self.storage.list_records()
            if not r.is_expired()
        ]

    def shutdown(self) -> None:
        self._pool.shutdown(wait=True)
