"""
Photo upload and listing.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from eventpix.errors import PayloadTooLarge, ValidationError
from eventpix.records import ANONYMOUS_UPLOADER, PhotoRecord, utcnow
from eventpix.storage import StorageAdapter

logger = logging.getLogger(__name__)

MAX_UPLOAD_BYTES = 50 * 1024 * 1024
DEFAULT_CONTENT_TYPE = "application/octet-stream"


@dataclass
class PhotoFile:
    """An uploaded file as received from the client."""

    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


class PhotoService:
    def __init__(
        self,
        storage: StorageAdapter,
        max_upload_bytes: int = MAX_UPLOAD_BYTES,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._storage = storage
        self._max_upload_bytes = max_upload_bytes
        self._clock = clock

    def check_size(self, size: int) -> None:
        if size > self._max_upload_bytes:
            raise PayloadTooLarge(
                "File too large", size=size, limit=self._max_upload_bytes
            )

    def upload(
        self, event_id: str, file: PhotoFile | None, uploader_name: str | None = None
    ) -> PhotoRecord:
        """
        Store the photo bytes, then its metadata record.

        The two writes are not atomic. If the metadata write fails the blob
        stays behind and the error propagates.
        """
        if not event_id or file is None:
            raise ValidationError("Missing file or eventSlug")
        self.check_size(file.size)

        photo_id = str(uuid.uuid4())
        file_name = file.filename or "photo"
        content_type = file.content_type or DEFAULT_CONTENT_TYPE
        blob_path = f"{event_id}/{photo_id}-{file_name}"

        blob_url = self._storage.put_object(blob_path, file.data, content_type)

        photo = PhotoRecord(
            event_id=event_id,
            id=photo_id,
            uploader_name=(uploader_name or "").strip() or ANONYMOUS_UPLOADER,
            file_name=file_name,
            content_type=content_type,
            size_bytes=file.size,
            blob_url=blob_url,
            uploaded_at=self._clock(),
        )
        try:
            self._storage.put_record(self._storage.photos_table, photo.to_entity())
        except Exception:
            logger.warning("Orphaned blob %s: metadata write failed", blob_path)
            raise
        logger.info(
            "Uploaded %s (%d bytes) to %s by %s",
            file_name,
            photo.size_bytes,
            event_id,
            photo.uploader_name,
        )
        return photo

    def list(self, event_id: str) -> list[PhotoRecord]:
        entities = self._storage.list_records(self._storage.photos_table, event_id)
        photos = [PhotoRecord.from_entity(entity) for entity in entities]
        photos.sort(key=lambda photo: photo.uploaded_at, reverse=True)
        return photos
