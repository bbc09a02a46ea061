from __future__ import annotations
import logging

import psycopg2

from gitmarks.domain.entities import Snapshot
from gitmarks.domain.errors import CacheWriteFailure
from gitmarks.domain.interfaces import ISnapshotStore
from .snapshot_codec import decode_snapshot, encode_snapshot

log = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS gitmarks_snapshots (
    cache_key  TEXT PRIMARY KEY,
    payload    TEXT NOT NULL,
    stored_at  TIMESTAMPTZ NOT NULL DEFAULT NOW()
)
"""


class PostgresSnapshotStore(ISnapshotStore):
    """
    Concrete implementation of ISnapshotStore using PostgreSQL.

    Receives an already-connected psycopg2 connection (injected).
    Does not create or manage the connection itself — that's the
    responsibility of the caller (main.py / dependency wiring).

    The payload column holds the same JSON text the file store writes, so
    a snapshot is never merged, only replaced.
    """

    def __init__(self, conn) -> None:
        self._conn = conn

    def ensure_schema(self) -> None:
        with self._conn.cursor() as cur:
            cur.execute(SCHEMA)
        self._conn.commit()

    def read(self, key: str) -> Snapshot | None:
        try:
            with self._conn.cursor() as cur:
                cur.execute("SELECT payload FROM gitmarks_snapshots WHERE cache_key = %s", (key,))
                row = cur.fetchone()
        except psycopg2.Error as exc:
            self._conn.rollback()
            log.warning("Could not read snapshot %s from PostgreSQL: %s", key, exc)
            return None
        return decode_snapshot(row[0]) if row else None

    def write(self, key: str, snapshot: Snapshot) -> None:
        """
        ON CONFLICT (cache_key) DO UPDATE means:
          - New key      → INSERT
          - Existing key → the whole payload is overwritten
        """
        payload = encode_snapshot(snapshot)
        try:
            with self._conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO gitmarks_snapshots (cache_key, payload, stored_at)
                    VALUES (%s, %s, NOW())
                    ON CONFLICT (cache_key) DO UPDATE SET
                        payload   = EXCLUDED.payload,
                        stored_at = EXCLUDED.stored_at
                    """,
                    (key, payload),
                )
            self._conn.commit()
        except psycopg2.Error as exc:
            self._conn.rollback()
            raise CacheWriteFailure(f"Could not store snapshot {key}: {exc}") from exc
        log.debug("Upserted %d rows for %s to PostgreSQL", len(snapshot.rows), key)

    def clear(self, key: str) -> None:
        try:
            with self._conn.cursor() as cur:
                cur.execute("DELETE FROM gitmarks_snapshots WHERE cache_key = %s", (key,))
            self._conn.commit()
        except psycopg2.Error as exc:
            self._conn.rollback()
            raise CacheWriteFailure(f"Could not delete snapshot {key}: {exc}") from exc
