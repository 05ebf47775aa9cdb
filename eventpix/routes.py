"""
HTTP routes for the photo sharing API.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, File, Form, HTTPException, UploadFile
from fastapi.responses import JSONResponse

from eventpix.dependencies import get_event_service, get_photo_service
from eventpix.errors import Expired, NotFound, ValidationError
from eventpix.events import EventService
from eventpix.photos import PhotoFile, PhotoService
from eventpix.schemas import (
    CheckEventResponse,
    CreateEventResponse,
    EventPageResponse,
    HealthResponse,
    UploadPhotoResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _body_field(payload: Any, key: str) -> str | None:
    """Read a field from a loosely shaped JSON body, stringifying scalars."""
    if not isinstance(payload, dict):
        return None
    value = payload.get(key)
    if not value or isinstance(value, (dict, list)):
        return None
    return str(value)


@router.get("/healthz", response_model=HealthResponse)
def healthz():
    return HealthResponse(status="ok")


@router.post(
    "/events/check",
    response_model=CheckEventResponse,
    response_model_exclude_none=True,
)
def check_event(
    payload: Any = Body(None),
    events: EventService = Depends(get_event_service),
):
    slug = _body_field(payload, "slug")
    if not slug:
        return JSONResponse({"exists": False}, status_code=400)

    try:
        event = events.get(slug)
    except Exception:
        logger.exception("Event lookup failed for %s", slug)
        return JSONResponse({"exists": False}, status_code=500)

    if event is None:
        return CheckEventResponse(exists=False)
    if events.is_expired(event):
        return CheckEventResponse(exists=False, message="Event expired")
    return CheckEventResponse(exists=True, slug=event.id)


@router.post("/events/create", response_model=CreateEventResponse)
def create_event(
    payload: Any = Body(None),
    events: EventService = Depends(get_event_service),
):
    name = _body_field(payload, "name")
    if not name:
        raise HTTPException(status_code=400, detail="Name is required")
    try:
        event = events.create(name)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except Exception:
        logger.exception("Failed to create event %r", name)
        raise HTTPException(status_code=500, detail="Failed to create event")
    data = event.as_dict()
    return CreateEventResponse(slug=data["slug"], expiresAt=data["expiresAt"])


@router.post("/photos/upload", response_model=UploadPhotoResponse)
def upload_photo(
    photo: UploadFile | None = File(None),
    uploader: str | None = Form(None),
    event_slug: str | None = Form(None, alias="eventSlug"),
    photos: PhotoService = Depends(get_photo_service),
):
    if photo is None or not event_slug:
        raise HTTPException(status_code=400, detail="Missing file or eventSlug")

    try:
        # Reject on the declared size before reading the body into memory.
        if photo.size is not None:
            photos.check_size(photo.size)
        data = photo.file.read()
        record = photos.upload(
            event_slug,
            PhotoFile(
                filename=photo.filename or "",
                content_type=photo.content_type or "",
                data=data,
            ),
            uploader,
        )
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except Exception:
        logger.exception("Upload failed for event %s", event_slug)
        raise HTTPException(status_code=500, detail="Upload failed")
    return UploadPhotoResponse(status="success", photo=record.as_dict())


@router.get("/{event_slug}", response_model=EventPageResponse)
def event_page(
    event_slug: str,
    events: EventService = Depends(get_event_service),
    photos: PhotoService = Depends(get_photo_service),
):
    try:
        event = events.require_live(event_slug)
        items = photos.list(event_slug)
    except NotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except Expired as exc:
        raise HTTPException(status_code=410, detail=str(exc))
    except Exception:
        logger.exception("Error loading event %s", event_slug)
        raise HTTPException(status_code=500, detail="Error loading event")
    return EventPageResponse(
        event=event.as_dict(),
        photos=[item.as_dict() for item in items],
    )
