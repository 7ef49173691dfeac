"""Database-backed key/value storage for bot state."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Optional

import certifi
import psycopg2
from psycopg2.extensions import connection as PsycopgConnection
from psycopg2.extras import RealDictCursor

logger = logging.getLogger(__name__)


class Database:
    """psycopg2 wrapper exposing a JSON key/value table through asyncio.

    Without a database URL every read returns ``None`` and writes are
    dropped, leaving callers with in-memory state only.
    """

    def __init__(self, database_url: Optional[str]):
        self._url = database_url
        self._conn: Optional[PsycopgConnection] = None
        self._lock = asyncio.Lock()

    @property
    def is_enabled(self) -> bool:
        return bool(self._url)

    async def connect(self) -> None:
        if not self._url:
            logger.info("Database URL not configured; replied users are kept in memory only.")
            return
        async with self._lock:
            if self._conn and not self._conn.closed:
                return
            try:
                ssl_args = {}
                if "supabase.co" in self._url:
                    ssl_args = {"sslmode": "verify-full", "sslrootcert": certifi.where()}
                self._conn = await asyncio.to_thread(
                    lambda: psycopg2.connect(dsn=self._url, **ssl_args)
                )
                await asyncio.to_thread(self._run_initial_schema_statements, self._conn)
            except Exception:
                logger.exception(
                    "Failed to initialise database connection; persistence disabled."
                )
                if self._conn and not self._conn.closed:
                    self._conn.close()
                self._conn = None

    async def close(self) -> None:
        async with self._lock:
            if self._conn and not self._conn.closed:
                await asyncio.to_thread(self._conn.close)
            self._conn = None

    @property
    def is_connected(self) -> bool:
        return self._conn is not None and not self._conn.closed

    async def _ensure_connection(self) -> Optional[PsycopgConnection]:
        if not self._url:
            return None
        if not self.is_connected:
            await self.connect()
        return self._conn

    def _run_initial_schema_statements(self, conn: PsycopgConnection) -> None:
        with conn, conn.cursor() as cur:
            cur.execute(
                """
                create table if not exists bot_config (
                    key text primary key,
                    value jsonb not null
                );
                """
            )

    async def get(self, key: str) -> Optional[Any]:
        conn = await self._ensure_connection()
        if conn is None:
            return None
        row = await asyncio.to_thread(
            self._fetchone_sync, conn, "select value from bot_config where key = %s;", (key,)
        )
        if not row:
            return None
        value = row["value"]
        if isinstance(value, str):
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                return value
        return value

    async def set(self, key: str, value: Optional[Any]) -> None:
        conn = await self._ensure_connection()
        if conn is None:
            return
        if value is None:
            await asyncio.to_thread(
                self._execute, conn, "delete from bot_config where key = %s;", (key,)
            )
            return
        await asyncio.to_thread(
            self._execute,
            conn,
            """
            insert into bot_config (key, value)
            values (%s, %s::jsonb)
            on conflict (key)
            do update set value = excluded.value;
            """,
            (key, json.dumps(value)),
        )

    def _execute(
        self, conn: PsycopgConnection, query: str, params: tuple[Any, ...] | tuple[()]
    ) -> None:
        with conn, conn.cursor() as cur:
            cur.execute(query, params)

    def _fetchone_sync(
        self, conn: PsycopgConnection, query: str, params: tuple[Any, ...] | tuple[()]
    ) -> Optional[dict[str, Any]]:
        with conn.cursor(cursor_factory=RealDictCursor) as cur:
            cur.execute(query, params)
            row = cur.fetchone()
        conn.commit()
        return dict(row) if row else None
