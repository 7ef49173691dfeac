"""Tests for the key/value database wrapper."""

import json
from unittest.mock import MagicMock

import pytest

from dmredirect.db import Database


def _connected(url="postgres://example"):
    database = Database(url)
    database._conn = MagicMock(closed=False)
    return database


class TestWithoutUrl:
    """No database URL means in-memory only."""

    @pytest.mark.asyncio
    async def test_reads_nothing_and_drops_writes(self):
        """Without a database URL reads return None and writes are dropped."""
        database = Database(None)
        await database.connect()

        assert database.is_enabled is False
        assert database.is_connected is False
        assert await database.get("key") is None
        await database.set("key", {"user_ids": ["1"]})
        assert await database.get("key") is None


class TestKeyValue:
    """JSON round-trip through the bot_config table."""

    @pytest.mark.asyncio
    async def test_get_decodes_json_text(self):
        """JSON stored as text is decoded on read."""
        database = _connected()
        database._fetchone_sync = lambda conn, query, params: {"value": '{"user_ids": ["1"]}'}

        assert await database.get("DMRedirect_RepliedUsers") == {"user_ids": ["1"]}

    @pytest.mark.asyncio
    async def test_get_returns_decoded_jsonb(self):
        """Values already decoded by the driver pass through unchanged."""
        database = _connected()
        database._fetchone_sync = lambda conn, query, params: {"value": ["1", "2"]}

        assert await database.get("key") == ["1", "2"]

    @pytest.mark.asyncio
    async def test_get_missing_key(self):
        """An absent key reads as None."""
        database = _connected()
        database._fetchone_sync = lambda conn, query, params: None

        assert await database.get("key") is None

    @pytest.mark.asyncio
    async def test_set_upserts_json(self):
        """Writes upsert the value as JSON."""
        database = _connected()
        calls = []
        database._execute = lambda conn, query, params: calls.append((query, params))

        await database.set("key", {"user_ids": ["1"]})

        query, params = calls[0]
        assert "on conflict (key)" in query
        assert params == ("key", json.dumps({"user_ids": ["1"]}))

    @pytest.mark.asyncio
    async def test_set_none_deletes(self):
        """Writing None deletes the row."""
        database = _connected()
        calls = []
        database._execute = lambda conn, query, params: calls.append((query, params))

        await database.set("key", None)

        assert calls[0][0].startswith("delete from bot_config")
