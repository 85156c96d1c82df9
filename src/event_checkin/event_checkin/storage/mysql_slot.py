from __future__ import annotations

from typing import Optional

import mysql.connector

from ..core.exceptions import PersistenceError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .slot import StorageSlot

DEFAULT_TABLE = "kv_store"


class MySQLStorageSlot(StorageSlot):
    """Key/value rows in a MySQL table (see ``database.bootstrap.ensure_kv_table``)."""

    def __init__(self, conn_factory: DatabaseConnection, *, table: str = DEFAULT_TABLE):
        if not table.isidentifier():
            raise ValueError(f"Invalid table name: {table!r}")
        self._conn_factory = conn_factory
        self._table = table

    def read(self, key: str) -> Optional[bytes]:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(f"SELECT payload FROM {self._table} WHERE slot_key=%s", (key,))
                row = fetchone(cur)
        except mysql.connector.Error as exc:
            raise PersistenceError(f"Cannot read slot {key!r}: {exc}") from exc
        if not row:
            return None
        payload = row["payload"]
        return payload.encode("utf-8") if isinstance(payload, str) else bytes(payload)

    def write(self, key: str, data: bytes) -> None:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"""
                    INSERT INTO {self._table}(slot_key, payload, updated_at)
                    VALUES(%s, %s, CURRENT_TIMESTAMP)
                    ON DUPLICATE KEY UPDATE payload=VALUES(payload), updated_at=CURRENT_TIMESTAMP
                    """,
                    (key, data),
                )
        except mysql.connector.Error as exc:
            raise PersistenceError(f"Cannot write slot {key!r}: {exc}") from exc

    def delete(self, key: str) -> None:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(f"DELETE FROM {self._table} WHERE slot_key=%s", (key,))
        except mysql.connector.Error as exc:
            raise PersistenceError(f"Cannot delete slot {key!r}: {exc}") from exc
