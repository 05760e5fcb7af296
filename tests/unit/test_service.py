"""
Unit tests for ShareService: upload, download, listing and expiry.
"""

import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

from lockdrop.config import AppConfig
from lockdrop.core.exceptions import (
    AuthenticationFailedError,
    BlobExpiredError,
    BlobNotFoundError,
    FileTooLargeError,
    InvalidBlobIdError,
    InvalidUploadError,
    MalformedBlobError,
)
from lockdrop.core.models import DISPLAY_FORMAT
from lockdrop.core.service import ShareService, size_limit_message


# ==============================================================================
# Fixtures
# ==============================================================================

@pytest.fixture
def config(tmp_path):
    return AppConfig(upload_dir=tmp_path / "uploads", max_file_size=1024, kdf_workers=2)


@pytest.fixture
def service(config):
    svc = ShareService(config)
    yield svc
    svc.shutdown()


# ==============================================================================
# Upload / download
# ==============================================================================

def test_upload_download_roundtrip(service):
    result = service.upload(b"file contents", "pw")
    assert result.message == "File uploaded successfully"
    assert service.download(result.file_id, "pw") == b"file contents"


def test_upload_stores_only_sealed_bytes(service):
    result = service.upload(b"plain secret text", "pw")
    stored = service.storage.get(result.file_id)
    assert b"plain secret text" not in stored
    assert len(stored) == 28 + len(b"plain secret text") + 16


def test_upload_expiry_is_configured_hours_ahead(service, config):
    before = datetime.now(timezone.utc)
    result = service.upload(b"data", "pw")

    shown = datetime.strptime(result.expires_at, DISPLAY_FORMAT).replace(tzinfo=timezone.utc)
    expected = before + timedelta(hours=config.expiry_hours)
    assert abs((shown - expected).total_seconds()) < 5

    record = service.storage.get_record(result.file_id)
    assert record.expires_at is not None


def test_upload_rejects_empty_file(service):
    with pytest.raises(InvalidUploadError, match="No file provided"):
        service.upload(b"", "pw")


def test_upload_rejects_missing_password(service):
    with pytest.raises(InvalidUploadError, match="No password provided"):
        service.upload(b"data", None)


def test_upload_accepts_empty_password(service):
    result = service.upload(b"data", "")
    assert service.download(result.file_id, "") == b"data"


def test_upload_rejects_oversize(service):
    with pytest.raises(FileTooLargeError):
        service.upload(b"x" * 1025, "pw")
    assert service.storage.list_records() == []


def test_upload_at_size_limit(service):
    result = service.upload(b"x" * 1024, "pw")
    assert service.download(result.file_id, "pw") == b"x" * 1024


def test_download_wrong_password(service):
    result = service.upload(b"data", "right")
    with pytest.raises(AuthenticationFailedError):
        service.download(result.file_id, "wrong")
    # a failed attempt leaves the blob in place
    assert service.storage.has(result.file_id)


def test_download_unknown_id(service):
    with pytest.raises(BlobNotFoundError):
        service.download(service.storage.new_id(), "pw")


def test_download_invalid_id(service):
    with pytest.raises(InvalidBlobIdError):
        service.download("../../etc/passwd", "pw")


def test_download_truncated_blob(service):
    blob_id = service.storage.new_id()
    service.storage.put(blob_id, b"short")
    with pytest.raises(MalformedBlobError):
        service.download(blob_id, "pw")


def test_download_expired_is_refused_and_deleted(service):
    result = service.upload(b"data", "pw")
    later = datetime.now(timezone.utc) + timedelta(hours=25)

    with patch("lockdrop.core.models.utcnow", return_value=later), \
            patch("lockdrop.core.service.open_blob") as opener:
        with pytest.raises(BlobExpiredError):
            service.download(result.file_id, "pw")
        opener.assert_not_called()

    assert not service.storage.has(result.file_id)


def test_sealing_runs_on_worker_pool(service):
    """seal/open are submitted to the pool, never run on the calling thread."""
    import threading

    seen = []

    def recording_seal(data, password):
        seen.append(threading.current_thread().name)
        return b"\x00" * 28 + data

    with patch("lockdrop.core.service.seal", side_effect=recording_seal):
        service.upload(b"data", "pw")

    assert seen and seen[0].startswith("lockdrop-kdf")
    assert seen[0] != threading.current_thread().name


def test_concurrent_uploads(service):
    from concurrent.futures import ThreadPoolExecutor

    payloads = [f"file {i}".encode() for i in range(6)]
    with ThreadPoolExecutor(max_workers=6) as pool:
        results = list(pool.map(lambda p: service.upload(p, "pw"), payloads))

    assert len({r.file_id for r in results}) == 6
    for payload, result in zip(payloads, results):
        assert service.download(result.file_id, "pw") == payload


# ==============================================================================
# Listing
# ==============================================================================

def test_list_files(service):
    assert service.list_files() == []
    first = service.upload(b"a", "pw")
    second = service.upload(b"bb", "pw")

    listing = {info.id: info for info in service.list_files()}
    assert set(listing) == {first.file_id, second.file_id}
    assert listing[first.file_id].size == 28 + 1 + 16
    assert listing[first.file_id].uploaded_at.endswith(" UTC")
    assert listing[first.file_id].expires_at == first.expires_at


def test_list_files_hides_expired(service):
    live = service.upload(b"live", "pw")
    stale = service.storage.new_id()
    service.storage.put(
        stale, b"\x00" * 50, expires_at=datetime.now(timezone.utc) - timedelta(minutes=1)
    )

    assert [info.id for info in service.list_files()] == [live.file_id]
    with pytest.raises(BlobExpiredError):
        service.download(stale, "pw")


def test_default_storage_uses_config_dir(config):
    svc = ShareService(config)
    try:
        assert svc.storage.root == config.upload_dir
        assert config.upload_dir.is_dir()
    finally:
        svc.shutdown()


def test_size_limit_message():
    assert size_limit_message(10 * 1024 * 1024) == "File size exceeds 10MB limit"
    assert size_limit_message(1024) == "File size exceeds 1024 byte limit"
