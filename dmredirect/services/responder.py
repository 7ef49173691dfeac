"""Top-level handler for incoming direct messages."""

from __future__ import annotations

import logging
from typing import Optional

from ..models.events import ChannelInfo, IncomingDirectMessage
from .dispatcher import ReplyDispatcher
from .eligibility import EligibilityDecider
from .interfaces import ChannelDirectory, ConfigProvider

logger = logging.getLogger(__name__)


class AutoResponder:
    """Runs the eligibility chain and, when allowed, dispatches the replies."""

    def __init__(
        self,
        channels: ChannelDirectory,
        decider: EligibilityDecider,
        dispatcher: ReplyDispatcher,
        config: ConfigProvider,
    ):
        self._channels = channels
        self._decider = decider
        self._dispatcher = dispatcher
        self._config = config

    async def handle(self, message: Optional[IncomingDirectMessage]) -> None:
        # One bad event must not take the handler down for the next one.
        try:
            if message is None or message.optimistic:
                return

            channel = self._resolve_channel(message)
            if channel is None:
                return

            config = self._config()
            verdict = await self._decider.decide(message, channel, config)
            if not verdict.allowed:
                logger.debug(
                    "Suppressed auto-reply for message %s from %s: %s",
                    message.message_id,
                    message.author_id,
                    verdict.reason,
                )
                return

            await self._dispatcher.dispatch(channel.channel_id, message.author_id, config)
        except Exception:
            logger.exception("Direct message handler error")

    def _resolve_channel(self, message: IncomingDirectMessage) -> Optional[ChannelInfo]:
        """Look the channel up, falling back to the type carried on the event."""

        channel = self._channels.get_channel(message.channel_id)
        if channel is None and message.channel_type is not None:
            channel = ChannelInfo(channel_id=message.channel_id, type=message.channel_type)
        return channel
