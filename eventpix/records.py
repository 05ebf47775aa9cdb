"""
Event and photo records, and their table-row and JSON representations.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

EVENT_PARTITION = "event"
ANONYMOUS_UPLOADER = "Anonymous"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _format_ts(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def _parse_ts(value) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass
class EventRecord:
    id: str
    name: str
    created_at: datetime
    expires_at: datetime
    partition_group: str = EVENT_PARTITION

    def to_entity(self) -> dict:
        return {
            "PartitionKey": self.partition_group,
            "RowKey": self.id,
            "name": self.name,
            "createdAt": _format_ts(self.created_at),
            "expiresAt": _format_ts(self.expires_at),
        }

    @classmethod
    def from_entity(cls, entity: dict) -> "EventRecord":
        return cls(
            id=entity["RowKey"],
            name=entity.get("name", ""),
            created_at=_parse_ts(entity["createdAt"]),
            expires_at=_parse_ts(entity["expiresAt"]),
            partition_group=entity.get("PartitionKey", EVENT_PARTITION),
        )

    def as_dict(self) -> dict:
        return {
            "slug": self.id,
            "name": self.name,
            "createdAt": _format_ts(self.created_at),
            "expiresAt": _format_ts(self.expires_at),
        }


@dataclass
class PhotoRecord:
    event_id: str
    id: str
    file_name: str
    content_type: str
    size_bytes: int
    blob_url: str
    uploader_name: str = ANONYMOUS_UPLOADER
    uploaded_at: datetime = field(default_factory=utcnow)

    def to_entity(self) -> dict:
        return {
            "PartitionKey": self.event_id,
            "RowKey": self.id,
            "uploaderName": self.uploader_name,
            "fileName": self.file_name,
            "blobUrl": self.blob_url,
            "size": self.size_bytes,
            "type": self.content_type,
            "uploadedAt": _format_ts(self.uploaded_at),
        }

    @classmethod
    def from_entity(cls, entity: dict) -> "PhotoRecord":
        return cls(
            event_id=entity["PartitionKey"],
            id=entity["RowKey"],
            uploader_name=entity.get("uploaderName") or ANONYMOUS_UPLOADER,
            file_name=entity.get("fileName", ""),
            content_type=entity.get("type", ""),
            size_bytes=int(entity.get("size") or 0),
            blob_url=entity.get("blobUrl", ""),
            uploaded_at=_parse_ts(entity["uploadedAt"]),
        )

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "eventSlug": self.event_id,
            "uploaderName": self.uploader_name,
            "fileName": self.file_name,
            "contentType": self.content_type,
            "size": self.size_bytes,
            "blobUrl": self.blob_url,
            "uploadedAt": _format_ts(self.uploaded_at),
        }
