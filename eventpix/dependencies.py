"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

import logging
from datetime import timedelta

from fastapi import Depends

from eventpix.blobs import (
    AzureBlobObjectStore,
    InMemoryObjectStore,
    ObjectStore,
    S3ObjectStore,
)
from eventpix.config import Settings, get_settings
from eventpix.events import EventService
from eventpix.photos import PhotoService
from eventpix.storage import StorageAdapter
from eventpix.tables import AzureTableStore, InMemoryTableStore, SqlTableStore, TableStore

logger = logging.getLogger(__name__)

_storage: StorageAdapter | None = None


def build_table_store(settings: Settings) -> TableStore:
    if settings.use_in_memory_backends:
        return InMemoryTableStore()
    if settings.azure_storage_connection_string:
        return AzureTableStore(settings.azure_storage_connection_string)
    if settings.database_url:
        return SqlTableStore(settings.database_url)
    raise RuntimeError(
        "No table store configured: set AZURE_STORAGE_CONNECTION_STRING or "
        "DATABASE_URL, or EVENTPIX_USE_IN_MEMORY_BACKENDS=true for development."
    )


def build_object_store(settings: Settings) -> ObjectStore:
    if settings.use_in_memory_backends:
        return InMemoryObjectStore()
    if settings.azure_storage_connection_string:
        return AzureBlobObjectStore(settings.azure_storage_connection_string)
    if settings.s3_bucket:
        return S3ObjectStore(
            region=settings.s3_region or "",
            endpoint=settings.s3_endpoint or "",
            access_key_id=settings.aws_access_key_id or "",
            secret_access_key=settings.aws_secret_access_key or "",
            public_base_url=settings.s3_public_base_url,
        )
    raise RuntimeError(
        "No object store configured: set AZURE_STORAGE_CONNECTION_STRING or "
        "S3_BUCKET, or EVENTPIX_USE_IN_MEMORY_BACKENDS=true for development."
    )


def get_storage() -> StorageAdapter:
    """
    Return a singleton storage adapter so backend clients are reused across requests.
    """
    global _storage
    if _storage:
        return _storage

    settings = get_settings()
    tables = build_table_store(settings)
    objects = build_object_store(settings)
    if settings.use_in_memory_backends:
        logger.warning("Running with in-memory backends; data resets on restart.")
    logger.info(
        "Using %s for metadata and %s for photos",
        type(tables).__name__,
        type(objects).__name__,
    )
    _storage = StorageAdapter(
        tables=tables,
        objects=objects,
        events_table=settings.events_table,
        photos_table=settings.photos_table,
        # With S3 the container is the bucket.
        photos_container=(
            settings.s3_bucket
            if isinstance(objects, S3ObjectStore)
            else settings.photos_container
        ),
    )
    return _storage


def _provisioned(storage: StorageAdapter) -> StorageAdapter:
    if not storage.provisioned:
        storage.ensure_schema()
    return storage


def get_event_service(storage: StorageAdapter = Depends(get_storage)) -> EventService:
    settings = get_settings()
    return EventService(_provisioned(storage), ttl=timedelta(days=settings.event_ttl_days))


def get_photo_service(storage: StorageAdapter = Depends(get_storage)) -> PhotoService:
    settings = get_settings()
    return PhotoService(_provisioned(storage), max_upload_bytes=settings.max_upload_bytes)
