from __future__ import annotations

from ..storage.mysql_slot import DEFAULT_TABLE
from .connection import DatabaseConnection

KV_TABLE_DDL = """
CREATE TABLE IF NOT EXISTS {table} (
    slot_key   VARCHAR(191) NOT NULL PRIMARY KEY,
    payload    LONGBLOB     NOT NULL,
    updated_at TIMESTAMP    NOT NULL DEFAULT CURRENT_TIMESTAMP ON UPDATE CURRENT_TIMESTAMP
) CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci
"""


def ensure_database_exists(conn_factory: DatabaseConnection) -> None:
    conn = conn_factory.connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{conn_factory.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def ensure_kv_table(conn_factory: DatabaseConnection, *, table: str = DEFAULT_TABLE) -> None:
    if not table.isidentifier():
        raise ValueError(f"Invalid table name: {table!r}")
    ensure_database_exists(conn_factory)

    conn = conn_factory.connect()
    try:
        cur = conn.cursor()
        cur.execute(KV_TABLE_DDL.format(table=table))
        conn.commit()
    finally:
        conn.close()


def list_tables(conn_factory: DatabaseConnection) -> list[str]:
    conn = conn_factory.connect()
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
