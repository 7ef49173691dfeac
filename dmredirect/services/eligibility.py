"""Decide whether an incoming DM should receive the auto-reply."""

from __future__ import annotations

import logging

from ..models.config import ReplyConfiguration
from ..models.events import (
    ChannelInfo,
    Decision,
    EligibilityContext,
    IncomingDirectMessage,
    Verdict,
)
from .history import HistoryProber
from .interfaces import GuildDirectory, RelationshipDirectory, UserDirectory
from .suppression import SuppressionStore

logger = logging.getLogger(__name__)


class EligibilityDecider:
    """Ordered short-circuit rule chain; the first matching rule suppresses.

    Cheap identity checks run first. Suppression, guild membership and
    history are only consulted outside test mode.
    """

    def __init__(
        self,
        users: UserDirectory,
        relationships: RelationshipDirectory,
        guilds: GuildDirectory,
        suppression: SuppressionStore,
        prober: HistoryProber,
    ):
        self._users = users
        self._relationships = relationships
        self._guilds = guilds
        self._suppression = suppression
        self._prober = prober

    async def decide(
        self,
        message: IncomingDirectMessage,
        channel: ChannelInfo,
        config: ReplyConfiguration,
    ) -> Verdict:
        context = EligibilityContext()

        def suppress(reason: str) -> Verdict:
            return Verdict(Decision.SUPPRESS, reason, context)

        if message.optimistic:
            return suppress("optimistic echo")

        if not channel.is_direct_message:
            return suppress("not a direct message channel")

        context.is_self = message.author_id == self._users.current_user_id()
        if context.is_self:
            return suppress("own message")

        if message.author_is_bot:
            return suppress("author is a bot")

        context.is_friend = self._relationships.is_friend(message.author_id)
        if context.is_friend:
            return suppress("author is a friend")

        if not config.test_mode:
            context.already_suppressed = self._suppression.contains(message.author_id)
            if context.already_suppressed:
                return suppress("already replied")

            context.is_guild_member = self._guilds.is_member(config.guild_id, message.author_id)
            if not context.is_guild_member:
                return suppress("not a member of the target guild")

            context.has_history = await self._prober.has_history(
                channel.channel_id, message.message_id
            )
            if context.has_history:
                return suppress("conversation has earlier messages")

        return Verdict(Decision.ALLOW, "test mode" if config.test_mode else "first contact", context)
