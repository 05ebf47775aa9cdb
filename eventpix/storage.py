"""
Storage adapter combining a table store for metadata with an object store
for photo bytes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from eventpix.blobs import ObjectStore
from eventpix.errors import Conflict, Internal
from eventpix.tables import TableStore

logger = logging.getLogger(__name__)

EVENTS_TABLE = "events"
PHOTOS_TABLE = "photos"
PHOTOS_CONTAINER = "photos"


@dataclass
class StorageAdapter:
    tables: TableStore
    objects: ObjectStore
    events_table: str = EVENTS_TABLE
    photos_table: str = PHOTOS_TABLE
    photos_container: str = PHOTOS_CONTAINER

    def __post_init__(self):
        self._tables_ready = False
        self._container_ready = False

    @property
    def provisioned(self) -> bool:
        return self._tables_ready and self._container_ready

    def ensure_schema(self) -> bool:
        """
        Create the tables and the photo container if they are missing.

        Failures are logged and left for the next call to retry; a step that
        succeeded once is not repeated. Returns True when everything exists.
        """
        if not self._tables_ready:
            try:
                self.tables.ensure_tables([self.events_table, self.photos_table])
                self._tables_ready = True
            except Exception:
                logger.exception("Table create error")
        if not self._container_ready:
            try:
                self.objects.ensure_container(self.photos_container)
                self._container_ready = True
            except Exception:
                logger.exception("Container create error")
        return self.provisioned

    def put_record(self, table: str, record: dict) -> None:
        try:
            self.tables.put_record(table, record)
        except Conflict:
            raise
        except Exception as exc:
            raise Internal(f"Failed to write {table} record") from exc

    def get_record(self, table: str, group_key: str, row_key: str) -> Optional[dict]:
        try:
            return self.tables.get_record(table, group_key, row_key)
        except Exception as exc:
            raise Internal(f"Failed to read {table} record") from exc

    def list_records(self, table: str, group_key: str) -> list[dict]:
        try:
            return self.tables.list_records(table, group_key)
        except Exception as exc:
            raise Internal(f"Failed to list {table} records") from exc

    def put_object(self, path: str, data: bytes, content_type: str) -> str:
        try:
            return self.objects.put_object(
                self.photos_container, path, data, content_type
            )
        except Exception as exc:
            raise Internal(f"Failed to upload {path}") from exc
