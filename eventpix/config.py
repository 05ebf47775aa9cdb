"""
Configuration and settings for the photo sharing service.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    api_prefix: str = Field(default="", validation_alias="EVENTPIX_API_PREFIX")

    # Azure Storage (tables + blobs from one connection string)
    azure_storage_connection_string: Optional[str] = Field(default=None)

    # SQL table store (Postgres expected, any SQLAlchemy URL works)
    database_url: Optional[str] = Field(default=None)

    # S3-compatible object store
    s3_bucket: Optional[str] = Field(default=None)
    s3_endpoint: Optional[str] = Field(default=None)
    s3_region: Optional[str] = Field(default=None)
    s3_public_base_url: Optional[str] = Field(default=None)
    aws_access_key_id: Optional[str] = Field(default=None)
    aws_secret_access_key: Optional[str] = Field(default=None)

    # Development toggles
    use_in_memory_backends: bool = Field(
        default=False, validation_alias="EVENTPIX_USE_IN_MEMORY_BACKENDS"
    )

    # Logical resource names
    events_table: str = Field(default="events", validation_alias="EVENTPIX_EVENTS_TABLE")
    photos_table: str = Field(default="photos", validation_alias="EVENTPIX_PHOTOS_TABLE")
    photos_container: str = Field(
        default="photos", validation_alias="EVENTPIX_PHOTOS_CONTAINER"
    )

    # Limits
    event_ttl_days: int = Field(default=7, ge=1, validation_alias="EVENTPIX_EVENT_TTL_DAYS")
    max_upload_mb: int = Field(default=50, ge=1, validation_alias="EVENTPIX_MAX_UPLOAD_MB")

    log_level: str = Field(default="INFO", validation_alias="EVENTPIX_LOG_LEVEL")
    cors_origins: list[str] = Field(
        default_factory=list, validation_alias="EVENTPIX_CORS_ORIGINS"
    )

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
