"""Send the configured replies and close the conversation."""

from __future__ import annotations

import asyncio
import logging

from ..models.config import ReplyConfiguration
from ..models.events import AllowedMentions
from .interfaces import ChannelCloser, MessageSender
from .suppression import SuppressionStore

logger = logging.getLogger(__name__)

FLUSH_DELAY_SECONDS = 0.25


class ReplyDispatcher:
    """Delivers the auto-reply bodies in order, then closes the DM."""

    def __init__(
        self,
        sender: MessageSender,
        closer: ChannelCloser,
        suppression: SuppressionStore,
        flush_delay: float = FLUSH_DELAY_SECONDS,
    ):
        self._sender = sender
        self._closer = closer
        self._suppression = suppression
        self._flush_delay = flush_delay

    async def dispatch(self, channel_id: str, author_id: str, config: ReplyConfiguration) -> int:
        """Send every non-blank reply body and return how many went out.

        An all-blank configuration sends nothing, leaves the channel open and
        does not mark the author as replied.
        """

        bodies = config.bodies()
        if not bodies:
            logger.info("No auto-reply text configured; skipping channel %s", channel_id)
            return 0

        sent = 0
        for content in bodies:
            try:
                await self._sender.send(
                    channel_id, content, allowed_mentions=AllowedMentions.none()
                )
                sent += 1
            except Exception:
                logger.exception("Failed to send auto-reply to channel %s", channel_id)

        await asyncio.sleep(self._flush_delay)
        try:
            await self._closer.close(channel_id)
        except Exception:
            logger.exception("Failed to close DM channel %s", channel_id)

        if not config.test_mode:
            self._suppression.add(author_id)
            self._suppression.schedule_persist()

        logger.info(
            "Auto-replied to user %s in channel %s (%d/%d sent)",
            author_id,
            channel_id,
            sent,
            len(bodies),
        )
        return sent
