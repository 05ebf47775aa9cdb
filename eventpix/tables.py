"""
Table store abstraction for Azure Table Storage, SQL databases and in-memory
testing.

Records are plain dicts carrying ``PartitionKey`` and ``RowKey`` entries next
to their properties, the shape Azure Table Storage uses natively.
"""

from __future__ import annotations

import copy
import logging
from typing import Dict, Iterable, Optional, Protocol

from azure.core.exceptions import ResourceExistsError, ResourceNotFoundError
from azure.data.tables import TableServiceClient
from sqlalchemy import JSON, Column, String, create_engine, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from eventpix.errors import Conflict

logger = logging.getLogger(__name__)


class TableStore(Protocol):
    """Operations the services need from the metadata store."""

    def ensure_tables(self, names: Iterable[str]) -> None:
        ...

    def put_record(self, table: str, record: dict) -> None:
        ...

    def get_record(self, table: str, group_key: str, row_key: str) -> Optional[dict]:
        ...

    def list_records(self, table: str, group_key: str) -> list[dict]:
        ...


def _split_keys(record: dict) -> tuple[str, str]:
    try:
        return record["PartitionKey"], record["RowKey"]
    except KeyError as exc:
        raise ValueError(f"record is missing {exc.args[0]}") from exc


class InMemoryTableStore:
    """Simple in-memory table store for development and tests."""

    def __init__(self):
        self.tables: Dict[str, Dict[tuple[str, str], dict]] = {}

    def ensure_tables(self, names: Iterable[str]) -> None:
        for name in names:
            self.tables.setdefault(name, {})

    def put_record(self, table: str, record: dict) -> None:
        key = _split_keys(record)
        rows = self.tables.setdefault(table, {})
        if key in rows:
            raise Conflict(f"{table} record already exists", table=table, key=key)
        rows[key] = copy.deepcopy(record)

    def get_record(self, table: str, group_key: str, row_key: str) -> Optional[dict]:
        record = self.tables.get(table, {}).get((group_key, row_key))
        return copy.deepcopy(record) if record is not None else None

    def list_records(self, table: str, group_key: str) -> list[dict]:
        return [
            copy.deepcopy(record)
            for (partition, _), record in self.tables.get(table, {}).items()
            if partition == group_key
        ]

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.tables.clear()


Base = declarative_base()


class RecordRow(Base):
    __tablename__ = "records"

    table_name = Column(String, primary_key=True)
    partition_key = Column(String, primary_key=True)
    row_key = Column(String, primary_key=True)
    data = Column(JSON, nullable=False)


class SqlTableStore:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).

    Logical tables share one physical ``records`` table keyed by
    (table_name, partition_key, row_key).
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("DATABASE_URL is required for SqlTableStore")
        self.engine = create_engine(
            database_url,
            future=True,
            pool_pre_ping=True,
            pool_recycle=1800,
        )
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )

    def ensure_tables(self, names: Iterable[str]) -> None:
        Base.metadata.create_all(self.engine)

    def put_record(self, table: str, record: dict) -> None:
        partition_key, row_key = _split_keys(record)
        data = {
            k: v for k, v in record.items() if k not in ("PartitionKey", "RowKey")
        }
        with self.Session() as session:
            session.add(
                RecordRow(
                    table_name=table,
                    partition_key=partition_key,
                    row_key=row_key,
                    data=data,
                )
            )
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise Conflict(
                    f"{table} record already exists",
                    table=table,
                    key=(partition_key, row_key),
                ) from exc

    def get_record(self, table: str, group_key: str, row_key: str) -> Optional[dict]:
        with self.Session() as session:
            row = session.get(RecordRow, (table, group_key, row_key))
            return self._to_record(row) if row else None

    def list_records(self, table: str, group_key: str) -> list[dict]:
        with self.Session() as session:
            stmt = select(RecordRow).where(
                RecordRow.table_name == table,
                RecordRow.partition_key == group_key,
            )
            return [self._to_record(row) for row in session.execute(stmt).scalars()]

    @staticmethod
    def _to_record(row: RecordRow) -> dict:
        record = dict(row.data or {})
        record["PartitionKey"] = row.partition_key
        record["RowKey"] = row.row_key
        return record


class AzureTableStore:
    """Azure Table Storage client built from a storage connection string."""

    def __init__(self, connection_string: str):
        if not connection_string:
            raise RuntimeError("Azure Storage connection string is not set.")
        self._service = TableServiceClient.from_connection_string(connection_string)

    def ensure_tables(self, names: Iterable[str]) -> None:
        for name in names:
            try:
                self._service.create_table(name)
            except ResourceExistsError:
                logger.debug("Table %s already exists", name)

    def put_record(self, table: str, record: dict) -> None:
        client = self._service.get_table_client(table)
        try:
            client.create_entity(entity=record)
        except ResourceExistsError as exc:
            raise Conflict(
                f"{table} record already exists",
                table=table,
                key=_split_keys(record),
            ) from exc

    def get_record(self, table: str, group_key: str, row_key: str) -> Optional[dict]:
        client = self._service.get_table_client(table)
        try:
            return dict(client.get_entity(partition_key=group_key, row_key=row_key))
        except ResourceNotFoundError:
            return None

    def list_records(self, table: str, group_key: str) -> list[dict]:
        client = self._service.get_table_client(table)
        entities = client.query_entities(
            "PartitionKey eq @pk", parameters={"pk": group_key}
        )
        return [dict(entity) for entity in entities]
