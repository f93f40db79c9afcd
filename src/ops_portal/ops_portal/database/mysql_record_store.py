from __future__ import annotations

import logging
from typing import Any

from ..storage.store import decode_payload, encode_payload
from .connection import DatabaseConnection
from .mysql_base import db_cursor, fetch_column, fetchone

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS record_store (
    name VARCHAR(64) NOT NULL PRIMARY KEY,
    payload LONGTEXT NOT NULL,
    updated_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP ON UPDATE CURRENT_TIMESTAMP
) CHARACTER SET utf8mb4
"""


class MySQLRecordStore:
    """Record store keeping one row per collection.

    Writes overwrite the whole row; there is no cross-collection transaction.
    """

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def ensure_schema(self) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(SCHEMA_SQL)

    def get(self, name: str, default: Any = None) -> Any:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT payload FROM record_store WHERE name=%s", (name,))
            r = fetchone(cur)
        return decode_payload(name, r["payload"] if r else None, default)

    def set(self, name: str, value: Any) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO record_store(name, payload)
                VALUES(%s,%s)
                ON DUPLICATE KEY UPDATE payload=VALUES(payload)
                """,
                (name, encode_payload(value)),
            )
        logger.debug("Wrote collection %r to MySQL", name)

    def delete(self, name: str) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM record_store WHERE name=%s", (name,))

    def names(self) -> list[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT name FROM record_store ORDER BY name")
            return fetch_column(cur, "name")
