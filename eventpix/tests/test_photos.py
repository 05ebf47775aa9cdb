import unittest
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

from eventpix.blobs import InMemoryObjectStore
from eventpix.errors import Internal, PayloadTooLarge, ValidationError
from eventpix.photos import MAX_UPLOAD_BYTES, PhotoFile, PhotoService
from eventpix.storage import StorageAdapter
from eventpix.tables import InMemoryTableStore


class PhotoServiceTests(unittest.TestCase):
    def setUp(self):
        self.tables = InMemoryTableStore()
        self.objects = InMemoryObjectStore()
        self.storage = StorageAdapter(tables=self.tables, objects=self.objects)
        self.now = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)
        self.service = PhotoService(self.storage, clock=lambda: self.now)

    def _file(self, size=10 * 1024, name="pic.jpg"):
        return PhotoFile(filename=name, content_type="image/jpeg", data=b"\xff" * size)

    def test_upload_writes_blob_then_record(self):
        photo = self.service.upload("party", self._file(), "Bob")

        self.assertEqual(photo.uploader_name, "Bob")
        self.assertEqual(photo.size_bytes, 10 * 1024)
        self.assertEqual(photo.content_type, "image/jpeg")
        self.assertEqual(
            self.objects.get_bytes("photos", f"party/{photo.id}-pic.jpg"),
            b"\xff" * 10 * 1024,
        )
        self.assertTrue(photo.blob_url.endswith(f"photos/party/{photo.id}-pic.jpg"))

        listed = self.service.list("party")
        self.assertEqual(len(listed), 1)
        self.assertEqual(listed[0].id, photo.id)
        self.assertEqual(listed[0].uploader_name, "Bob")
        self.assertEqual(listed[0].blob_url, photo.blob_url)

    def test_blank_uploader_defaults_to_anonymous(self):
        self.assertEqual(self.service.upload("party", self._file(), None).uploader_name, "Anonymous")
        self.assertEqual(self.service.upload("party", self._file(), "  ").uploader_name, "Anonymous")

    def test_missing_inputs_rejected(self):
        with self.assertRaises(ValidationError):
            self.service.upload("", self._file(), "Bob")
        with self.assertRaises(ValidationError):
            self.service.upload("party", None, "Bob")

    def test_oversized_upload_never_touches_storage(self):
        storage = MagicMock()
        service = PhotoService(storage)
        too_big = PhotoFile(
            filename="big.jpg",
            content_type="image/jpeg",
            data=b"\0" * (MAX_UPLOAD_BYTES + 1),
        )
        with self.assertRaises(PayloadTooLarge):
            service.upload("party", too_big, "Bob")
        self.assertEqual(storage.mock_calls, [])

    def test_upload_at_limit_is_accepted(self):
        service = PhotoService(self.storage, max_upload_bytes=1024)
        photo = service.upload("party", self._file(size=1024), "Bob")
        self.assertEqual(photo.size_bytes, 1024)
        with self.assertRaises(PayloadTooLarge):
            service.upload("party", self._file(size=1025), "Bob")

    def test_list_is_newest_first(self):
        clock = {"now": self.now}
        service = PhotoService(self.storage, clock=lambda: clock["now"])
        first = service.upload("party", self._file(name="a.jpg"), "Alice")
        clock["now"] = self.now + timedelta(minutes=5)
        second = service.upload("party", self._file(name="b.jpg"), "Bob")
        clock["now"] = self.now + timedelta(minutes=1)
        middle = service.upload("party", self._file(name="c.jpg"), "Carol")

        listed = service.list("party")
        self.assertEqual([p.id for p in listed], [second.id, middle.id, first.id])

    def test_list_scoped_to_event(self):
        self.service.upload("party", self._file(), "Bob")
        self.service.upload("other", self._file(), "Eve")
        self.assertEqual([p.uploader_name for p in self.service.list("party")], ["Bob"])
        self.assertEqual(self.service.list("empty"), [])

    def test_metadata_failure_leaves_blob_behind(self):
        tables = MagicMock()
        tables.put_record.side_effect = RuntimeError("table down")
        storage = StorageAdapter(tables=tables, objects=self.objects)
        service = PhotoService(storage)

        with self.assertLogs("eventpix.photos", level="WARNING"):
            with self.assertRaises(Internal):
                service.upload("party", self._file(), "Bob")
        self.assertEqual(len(self.objects.stored_objects), 1)


if __name__ == "__main__":
    unittest.main()
