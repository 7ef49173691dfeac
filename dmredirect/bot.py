"""Discord client wiring for DM Redirect."""

from __future__ import annotations

import logging

import discord

from .models.config import BotSettings
from .services.dispatcher import ReplyDispatcher
from .services.eligibility import EligibilityDecider
from .services.history import HistoryProber
from .services.responder import AutoResponder
from .services.suppression import SuppressionStore
from .utils.discord import (
    DiscordDirectory,
    DiscordMessageCache,
    DiscordMessenger,
    KnownContacts,
    to_incoming,
)

logger = logging.getLogger(__name__)


def create_bot(
    settings: BotSettings,
    suppression: SuppressionStore,
) -> discord.Client:
    intents = discord.Intents.default()
    intents.members = True
    intents.dm_messages = True

    bot = discord.Client(intents=intents)

    directory = DiscordDirectory(bot)
    cache = DiscordMessageCache(bot)
    messenger = DiscordMessenger(bot, cache)

    decider = EligibilityDecider(
        users=directory,
        relationships=KnownContacts(settings.known_user_ids),
        guilds=directory,
        suppression=suppression,
        prober=HistoryProber(cache),
    )
    dispatcher = ReplyDispatcher(messenger, messenger, suppression)
    responder = AutoResponder(
        channels=directory,
        decider=decider,
        dispatcher=dispatcher,
        config=settings.reply_configuration,
    )

    @bot.event
    async def on_ready() -> None:
        config = settings.reply_configuration()
        logger.info("Logged in as %s", bot.user)
        if config.test_mode:
            logger.warning("Test mode enabled: every eligible DM receives the auto-reply")
        elif not config.guild_id.isdigit() or bot.get_guild(int(config.guild_id)) is None:
            logger.warning(
                "Target guild %s is not visible to the bot; no DM will pass the membership check",
                config.guild_id,
            )

    @bot.event
    async def on_message(message: discord.Message) -> None:
        cache.record(message)
        try:
            incoming = to_incoming(message)
        except Exception:
            logger.exception("Failed to read incoming message %s", message.id)
            return
        await responder.handle(incoming)

    return bot
