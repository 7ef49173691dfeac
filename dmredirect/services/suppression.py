"""Durable record of users who already received the auto-reply."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any, Iterable, Optional, Set

from .interfaces import KeyValueStore

logger = logging.getLogger(__name__)

PERSIST_KEY = "DMRedirect_RepliedUsers"


def _coerce_user_ids(value: Any) -> Set[str]:
    if isinstance(value, Mapping):
        value = value.get("user_ids")
    if value is None:
        return set()
    if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
        raise TypeError(f"Unsupported replied-users payload: {type(value).__name__}")

    user_ids: Set[str] = set()
    for item in value:
        if isinstance(item, str) and item:
            user_ids.add(item)
        elif isinstance(item, int) and not isinstance(item, bool):
            user_ids.add(str(item))
        else:
            logger.debug("Skipping malformed replied-user entry %r", item)
    return user_ids


class SuppressionStore:
    """In-memory set of replied user ids, saved through a key-value store.

    Membership only grows while the process runs. Check-then-add is not
    locked, so two simultaneous first messages from the same user can both
    be answered. Writes are serialised so the last save holds the newest set.
    """

    def __init__(self, storage: Optional[KeyValueStore], key: str = PERSIST_KEY):
        self._storage = storage
        self._key = key
        self._user_ids: Set[str] = set()
        self._pending: Set[asyncio.Task] = set()
        self._write_lock = asyncio.Lock()

    async def load(self) -> None:
        """Load persisted ids; leaves the set empty on any failure."""

        if self._storage is None:
            return
        try:
            saved = await self._storage.get(self._key)
            loaded = _coerce_user_ids(saved)
        except Exception as exc:
            logger.warning("Failed to load replied users list: %s", exc)
            return
        self._user_ids = loaded
        logger.info("Loaded %d replied user(s)", len(loaded))

    def contains(self, user_id: str) -> bool:
        return str(user_id) in self._user_ids

    def add(self, user_id: str) -> None:
        self._user_ids.add(str(user_id))

    async def persist(self) -> None:
        """Best-effort save; failures are logged, never raised."""

        if self._storage is None:
            return
        async with self._write_lock:
            payload = {"user_ids": sorted(self._user_ids)}
            try:
                await self._storage.set(self._key, payload)
            except Exception as exc:
                logger.warning("Failed to persist replied users: %s", exc)

    def schedule_persist(self) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(self.persist())
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def flush(self) -> None:
        """Wait for background persists started by :meth:`schedule_persist`."""

        if self._pending:
            await asyncio.gather(*list(self._pending))

    def clear(self) -> None:
        """Forget in-memory ids; the persisted copy is left untouched."""

        self._user_ids.clear()

    def __len__(self) -> int:
        return len(self._user_ids)

    def __contains__(self, user_id: object) -> bool:
        return str(user_id) in self._user_ids
