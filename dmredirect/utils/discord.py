"""discord.py bindings for the responder's host collaborators."""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from typing import Callable, Deque, Dict, Iterable, List, Optional, Set

import discord

from ..models.events import AllowedMentions, ChannelInfo, IncomingDirectMessage

logger = logging.getLogger(__name__)

# Recent messages kept per DM channel.
HISTORY_SAMPLE = 10


def _snowflake(value: str) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def to_incoming(message: discord.Message) -> IncomingDirectMessage:
    """Convert a gateway message into the responder's event model."""

    channel_type = getattr(message.channel, "type", None)
    return IncomingDirectMessage(
        message_id=str(message.id),
        author_id=str(message.author.id),
        author_is_bot=bool(message.author.bot),
        channel_id=str(message.channel.id),
        channel_type=channel_type.value if channel_type is not None else None,
        optimistic=False,
    )


def to_discord_mentions(policy: AllowedMentions) -> discord.AllowedMentions:
    return discord.AllowedMentions(
        everyone="everyone" in policy.parse,
        users="users" in policy.parse,
        roles="roles" in policy.parse,
        replied_user=policy.replied_user,
    )


class DiscordDirectory:
    """Channel, identity and guild-membership lookups against the client cache."""

    def __init__(self, client: discord.Client):
        self._client = client

    def get_channel(self, channel_id: str) -> Optional[ChannelInfo]:
        snowflake = _snowflake(channel_id)
        if snowflake is None:
            return None
        channel = self._client.get_channel(snowflake)
        if channel is None:
            return None
        return ChannelInfo(channel_id=str(channel.id), type=channel.type.value)

    def current_user_id(self) -> Optional[str]:
        user = self._client.user
        return str(user.id) if user is not None else None

    def is_member(self, guild_id: str, user_id: str) -> bool:
        guild_snowflake = _snowflake(guild_id)
        user_snowflake = _snowflake(user_id)
        if guild_snowflake is None or user_snowflake is None:
            return False
        guild = self._client.get_guild(guild_snowflake)
        if guild is None:
            return False
        return guild.get_member(user_snowflake) is not None


class KnownContacts:
    """Configured set of user ids treated as friends.

    Bot accounts have no relationship list, so known contacts come from
    configuration instead.
    """

    def __init__(self, user_ids: Iterable[str] = ()):
        self._user_ids: Set[str] = {str(user_id) for user_id in user_ids}

    def is_friend(self, user_id: str) -> bool:
        return str(user_id) in self._user_ids


class DiscordMessageCache:
    """Per-channel message history, populated lazily from the API.

    A channel becomes present once its recent history has been fetched.
    Messages seen afterwards are appended by :meth:`record`.
    """

    def __init__(self, client: discord.Client, history_limit: int = HISTORY_SAMPLE):
        self._client = client
        self._history_limit = history_limit
        self._messages: Dict[str, Deque[discord.Message]] = {}
        self._ready: Set[str] = set()
        self._priming: Dict[str, asyncio.Task] = {}
        self._callbacks: Dict[str, List[Callable[[], None]]] = {}

    def record(self, message: discord.Message) -> None:
        channel_id = str(message.channel.id)
        if channel_id in self._ready:
            self._messages[channel_id].appendleft(message)

    def forget(self, channel_id: str) -> None:
        """Drop cached history for a closed channel."""

        self._messages.pop(channel_id, None)
        self._ready.discard(channel_id)

    def has_present(self, channel_id: str) -> bool:
        return channel_id in self._ready

    def get_messages(self, channel_id: str) -> List[discord.Message]:
        return list(self._messages.get(channel_id, ()))

    def when_ready(self, channel_id: str, callback: Callable[[], None]) -> None:
        if channel_id in self._ready:
            callback()
            return
        self._callbacks.setdefault(channel_id, []).append(callback)
        if channel_id not in self._priming:
            task = asyncio.get_running_loop().create_task(self._prime(channel_id))
            self._priming[channel_id] = task

    async def _prime(self, channel_id: str) -> None:
        try:
            snowflake = _snowflake(channel_id)
            if snowflake is None:
                return
            channel = self._client.get_channel(snowflake)
            if channel is None:
                channel = await self._client.fetch_channel(snowflake)
            recent = [message async for message in channel.history(limit=self._history_limit)]
            self._messages[channel_id] = deque(recent, maxlen=self._history_limit)
            self._ready.add(channel_id)
        except Exception:
            logger.warning("Failed to fetch message history for channel %s", channel_id, exc_info=True)
        finally:
            self._priming.pop(channel_id, None)
            for callback in self._callbacks.pop(channel_id, []):
                try:
                    callback()
                except Exception:
                    logger.exception("Readiness callback failed for channel %s", channel_id)


class DiscordMessenger:
    """Outbound sends and DM closing through the bot client."""

    def __init__(self, client: discord.Client, cache: Optional[DiscordMessageCache] = None):
        self._client = client
        self._cache = cache

    async def send(
        self, channel_id: str, content: str, *, allowed_mentions: AllowedMentions
    ) -> None:
        channel = await self._resolve(channel_id)
        await channel.send(content, allowed_mentions=to_discord_mentions(allowed_mentions))

    async def close(self, channel_id: str) -> None:
        # DELETE /channels/{id} on a DM closes it for the bot.
        await self._client.http.delete_channel(int(channel_id))
        if self._cache is not None:
            self._cache.forget(channel_id)

    async def _resolve(self, channel_id: str):
        snowflake = int(channel_id)
        channel = self._client.get_channel(snowflake)
        if channel is None:
            channel = await self._client.fetch_channel(snowflake)
        return channel
