"""
Event creation and lookup.
"""

from __future__ import annotations

import logging
import re
import uuid
from datetime import datetime, timedelta
from typing import Callable, Optional

from eventpix.errors import Conflict, Expired, NotFound, ValidationError
from eventpix.records import EVENT_PARTITION, EventRecord, utcnow
from eventpix.storage import StorageAdapter

logger = logging.getLogger(__name__)

DEFAULT_TTL = timedelta(days=7)
MAX_CREATE_ATTEMPTS = 5

_WHITESPACE = re.compile(r"\s+")
_NON_WORD = re.compile(r"[^\w-]+", re.ASCII)
_DASHES = re.compile(r"--+")


def random_token(length: int) -> str:
    return uuid.uuid4().hex[:length]


def slugify(name: str) -> str:
    """
    Turn a display name into a URL-safe identifier.

    "Sarah's Wedding!!" becomes "sarahs-wedding". Names with no usable
    characters get a random "event-xxxxxx" slug instead.
    """
    slug = _WHITESPACE.sub("-", str(name).lower().strip())
    slug = _NON_WORD.sub("", slug)
    slug = _DASHES.sub("-", slug).strip("-")
    if not slug:
        slug = f"event-{random_token(6)}"
    return slug


class EventService:
    def __init__(
        self,
        storage: StorageAdapter,
        ttl: timedelta = DEFAULT_TTL,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._storage = storage
        self._ttl = ttl
        self._clock = clock

    def create(self, name: str) -> EventRecord:
        if not name:
            raise ValidationError("Name is required")

        base = slugify(name)
        slug = base
        if self.get(slug) is not None:
            slug = f"{base}-{random_token(4)}"
            logger.info("Slug %s is taken, using %s", base, slug)

        for attempt in range(MAX_CREATE_ATTEMPTS):
            now = self._clock()
            event = EventRecord(
                id=slug,
                name=name,
                created_at=now,
                expires_at=now + self._ttl,
            )
            try:
                self._storage.put_record(self._storage.events_table, event.to_entity())
            except Conflict:
                # Lost the race between the existence check and the insert.
                slug = f"{base}-{random_token(4)}"
                logger.info("Slug collision on insert, retrying as %s", slug)
                continue
            logger.info("Created event %s (%s)", name, slug)
            return event

        raise Conflict(
            f"Could not find a free slug for {base!r}",
            table=self._storage.events_table,
        )

    def get(self, slug: str) -> Optional[EventRecord]:
        entity = self._storage.get_record(
            self._storage.events_table, EVENT_PARTITION, slug
        )
        if entity is None:
            return None
        return EventRecord.from_entity(entity)

    def is_expired(self, event: EventRecord) -> bool:
        return self._clock() >= event.expires_at

    def require_live(self, slug: str) -> EventRecord:
        event = self.get(slug)
        if event is None:
            raise NotFound("Event not found")
        if self.is_expired(event):
            raise Expired(
                "This event has expired and photos have been deleted.",
                expires_at=event.expires_at,
            )
        return event
