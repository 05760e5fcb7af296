"""
Data models passed between storage, the share service and the web layer
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Dict, Any


DISPLAY_FORMAT = "%Y-%m-%d %H:%M:%S UTC"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    # Human-facing timestamp, matches what upload responses have always shown
    if value is None:
        return None
    return value.astimezone(timezone.utc).strftime(DISPLAY_FORMAT)


@dataclass
class BlobRecord:
    """What storage knows about one stored blob, never its contents."""

    blob_id: str
    size: int
    uploaded_at: datetime
    expires_at: Optional[datetime] = None

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        if self.expires_at is None:
            return False
        return (now or utcnow()) >= self.expires_at

    def to_dict(self) -> Dict[str, Any]:
        return {
            "blob_id": self.blob_id,
            "size": self.size,
            "uploaded_at": self.uploaded_at.isoformat(),
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BlobRecord":
        expires = data.get("expires_at")
        return cls(
            blob_id=data["blob_id"],
            size=int(data["size"]),
            uploaded_at=datetime.fromisoformat(data["uploaded_at"]),
            expires_at=datetime.fromisoformat(expires) if expires else None,
        )


@dataclass
class UploadResult:
    file_id: str
    message: str
    expires_at: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "file_id": self.file_id,
            "message": self.message,
            "expires_at": self.expires_at,
        }


@dataclass
class FileInfo:
    id: str
    uploaded_at: str
    size: int
    expires_at: Optional[str] = None

    @classmethod
    def from_record(cls, record: BlobRecord) -> "FileInfo":
        return cls(
            id=record.blob_id,
            uploaded_at=format_timestamp(record.uploaded_at),
            size=record.size,
            expires_at=format_timestamp(record.expires_at),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "uploaded_at": self.uploaded_at,
            "size": self.size,
            "expires_at": self.expires_at,
        }
