"""
Pydantic schemas for the HTTP API.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel


class CheckEventResponse(BaseModel):
    exists: bool
    slug: Optional[str] = None
    message: Optional[str] = None


class CreateEventResponse(BaseModel):
    slug: str
    expiresAt: str


class EventPayload(BaseModel):
    slug: str
    name: str
    createdAt: str
    expiresAt: str


class PhotoPayload(BaseModel):
    id: str
    eventSlug: str
    uploaderName: str
    fileName: str
    contentType: str
    size: int
    blobUrl: str
    uploadedAt: str


class UploadPhotoResponse(BaseModel):
    status: Literal["success"]
    photo: PhotoPayload


class EventPageResponse(BaseModel):
    event: EventPayload
    photos: list[PhotoPayload]


class HealthResponse(BaseModel):
    status: Literal["ok"]
