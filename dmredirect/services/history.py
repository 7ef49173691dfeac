"""Detect whether a DM already holds messages besides the one that just arrived."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping, Sequence
from typing import Any, Callable, Optional

from .interfaces import MessageCache

logger = logging.getLogger(__name__)

READY_TIMEOUT_SECONDS = 0.4


def _entry_id(entry: Any) -> Any:
    if isinstance(entry, Mapping):
        return entry.get("id")
    return getattr(entry, "id", None)


def _as_sequence(data: Any) -> Optional[Sequence]:
    if isinstance(data, (str, bytes)):
        return None
    if isinstance(data, Sequence):
        return data
    wrapped = getattr(data, "messages", None)
    if isinstance(wrapped, Sequence) and not isinstance(wrapped, (str, bytes)):
        return wrapped
    return None


def _probe_sequence(data: Any, exclude_id: str) -> Optional[bool]:
    entries = _as_sequence(data)
    if entries is None:
        return None
    for entry in entries:
        entry_id = _entry_id(entry)
        if entry_id is not None and str(entry_id) != exclude_id:
            return True
    return False


def _probe_size(data: Any, exclude_id: str) -> Optional[bool]:
    size = getattr(data, "size", None)
    if isinstance(size, bool) or not isinstance(size, int):
        return None
    # The message that just arrived accounts for one.
    return size > 1


def _probe_for_each(data: Any, exclude_id: str) -> Optional[bool]:
    for_each = getattr(data, "for_each", None)
    if not callable(for_each):
        return None
    others = 0

    def visit(entry: Any) -> None:
        nonlocal others
        entry_id = _entry_id(entry)
        if entry_id is None or str(entry_id) != exclude_id:
            others += 1

    for_each(visit)
    return others > 0


_PROBES: tuple[Callable[[Any, str], Optional[bool]], ...] = (
    _probe_sequence,
    _probe_size,
    _probe_for_each,
)


def contains_other_messages(data: Any, exclude_id: str) -> Optional[bool]:
    """Answer "does any message other than ``exclude_id`` exist" for a cache shape.

    Returns ``None`` when the structure is not recognised.
    """

    for probe in _PROBES:
        answer = probe(data, exclude_id)
        if answer is not None:
            return answer
    return None


class HistoryProber:
    """Checks the host message cache for earlier messages in a DM.

    Errors never escape: any failure is reported as "no history", so a
    failed probe costs at most one reply before the sender is suppressed.
    """

    def __init__(self, cache: MessageCache, ready_timeout: float = READY_TIMEOUT_SECONDS):
        self._cache = cache
        self._ready_timeout = ready_timeout

    async def has_history(self, channel_id: str, exclude_message_id: str) -> bool:
        exclude_id = str(exclude_message_id)
        try:
            answer = self._inspect(channel_id, exclude_id)
            if answer is not None:
                return answer

            await self._wait_until_ready(channel_id)

            answer = self._inspect(channel_id, exclude_id)
            return bool(answer)
        except Exception:
            logger.debug("History probe failed for channel %s", channel_id, exc_info=True)
            return False

    def _inspect(self, channel_id: str, exclude_id: str) -> Optional[bool]:
        """Return the probe answer, or ``None`` if the cache is not populated yet."""

        if not self._cache.has_present(channel_id):
            return None
        data = self._cache.get_messages(channel_id)
        answer = contains_other_messages(data, exclude_id)
        return bool(answer)

    async def _wait_until_ready(self, channel_id: str) -> None:
        loop = asyncio.get_running_loop()
        waiter: asyncio.Future[None] = loop.create_future()

        def release() -> None:
            # Readiness and the timer can both fire; only the first one counts.
            if not waiter.done():
                waiter.set_result(None)

        timer = loop.call_later(self._ready_timeout, release)

        def on_ready() -> None:
            timer.cancel()
            release()

        try:
            self._cache.when_ready(channel_id, on_ready)
        except Exception:
            logger.debug("Readiness registration failed for channel %s", channel_id, exc_info=True)
            release()

        try:
            await waiter
        finally:
            timer.cancel()
