import re
import unittest
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock, patch

from eventpix.blobs import InMemoryObjectStore
from eventpix.errors import Conflict, Expired, NotFound, ValidationError
from eventpix.events import MAX_CREATE_ATTEMPTS, EventService, slugify
from eventpix.storage import StorageAdapter
from eventpix.tables import InMemoryTableStore

SLUG_PATTERN = re.compile(r"^[a-z0-9_]+(-[a-z0-9_]+)*$")


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class SlugifyTests(unittest.TestCase):
    def test_normalizes_display_name(self):
        self.assertEqual(slugify("Sarah's Wedding!!"), "sarahs-wedding")
        self.assertEqual(slugify("  Team   Offsite 2025 "), "team-offsite-2025")
        self.assertEqual(slugify("a - b"), "a-b")

    def test_output_is_url_safe(self):
        names = [
            "Hello World",
            "--leading and trailing--",
            "Émile's Birthday",
            "tabs\tand\nnewlines",
            "under_score & more!!",
            "x -- y",
            "end !",
        ]
        for name in names:
            slug = slugify(name)
            self.assertRegex(slug, SLUG_PATTERN, msg=name)
            self.assertNotIn("--", slug)

    def test_empty_result_gets_random_fallback(self):
        slug = slugify("!!!")
        self.assertTrue(slug.startswith("event-"))
        self.assertRegex(slug, SLUG_PATTERN)
        self.assertNotEqual(slugify("???"), slugify("???"))


class EventServiceTests(unittest.TestCase):
    def setUp(self):
        self.tables = InMemoryTableStore()
        self.storage = StorageAdapter(tables=self.tables, objects=InMemoryObjectStore())
        self.clock = FakeClock(datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc))
        self.service = EventService(self.storage, clock=self.clock)

    def test_create_then_get(self):
        created = self.service.create("Sarah's Wedding!!")
        self.assertEqual(created.id, "sarahs-wedding")

        fetched = self.service.get("sarahs-wedding")
        self.assertIsNotNone(fetched)
        self.assertEqual(fetched.name, "Sarah's Wedding!!")
        self.assertEqual(fetched.expires_at - fetched.created_at, timedelta(days=7))
        self.assertEqual(fetched.partition_group, "event")

    def test_get_missing_returns_none(self):
        self.assertIsNone(self.service.get("nope"))

    def test_colliding_names_get_distinct_slugs(self):
        first = self.service.create("Party")
        second = self.service.create("party!")
        self.assertEqual(first.id, "party")
        self.assertNotEqual(first.id, second.id)
        self.assertTrue(second.id.startswith("party-"))
        self.assertIsNotNone(self.service.get(second.id))
        self.assertEqual(self.service.get("party").name, "Party")

    def test_insert_conflict_after_check_picks_new_slug(self):
        self.service.create("Race")
        with patch.object(self.service, "get", return_value=None):
            event = self.service.create("Race")
        self.assertTrue(event.id.startswith("race-"))
        self.assertEqual(len(self.tables.tables["events"]), 2)

    def test_empty_name_rejected(self):
        with self.assertRaises(ValidationError):
            self.service.create("")

    def test_whitespace_name_gets_fallback_slug(self):
        event = self.service.create("   ")
        self.assertTrue(event.id.startswith("event-"))
        self.assertEqual(event.name, "   ")
        self.assertIsNotNone(self.service.get(event.id))

    def test_gives_up_after_repeated_insert_conflicts(self):
        tables = MagicMock()
        tables.get_record.return_value = None
        tables.put_record.side_effect = Conflict("taken")
        storage = StorageAdapter(tables=tables, objects=InMemoryObjectStore())
        service = EventService(storage, clock=self.clock)

        with self.assertRaises(Conflict):
            service.create("Crowded")
        self.assertEqual(tables.put_record.call_count, MAX_CREATE_ATTEMPTS)

    def test_is_expired_boundary(self):
        event = self.service.create("Boundary")
        self.clock.now = event.expires_at - timedelta(microseconds=1)
        self.assertFalse(self.service.is_expired(event))
        self.clock.now = event.expires_at
        self.assertTrue(self.service.is_expired(event))
        self.clock.now = event.expires_at + timedelta(seconds=1)
        self.assertTrue(self.service.is_expired(event))

    def test_require_live(self):
        with self.assertRaises(NotFound):
            self.service.require_live("missing")

        event = self.service.create("Live")
        self.assertEqual(self.service.require_live("live").id, event.id)

        self.clock.now = event.expires_at + timedelta(days=1)
        with self.assertRaises(Expired):
            self.service.require_live("live")

    def test_custom_ttl(self):
        service = EventService(self.storage, ttl=timedelta(days=1), clock=self.clock)
        event = service.create("Short")
        self.assertEqual(event.expires_at - event.created_at, timedelta(days=1))


if __name__ == "__main__":
    unittest.main()
