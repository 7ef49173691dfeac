"""Host collaborators consumed by the responder.

The Discord bindings live in :mod:`dmredirect.utils.discord`; tests substitute
small in-memory fakes.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Protocol

from ..models.config import ReplyConfiguration
from ..models.events import AllowedMentions, ChannelInfo

ConfigProvider = Callable[[], ReplyConfiguration]


class ChannelDirectory(Protocol):
    def get_channel(self, channel_id: str) -> Optional[ChannelInfo]: ...


class UserDirectory(Protocol):
    def current_user_id(self) -> Optional[str]: ...


class RelationshipDirectory(Protocol):
    def is_friend(self, user_id: str) -> bool: ...


class GuildDirectory(Protocol):
    def is_member(self, guild_id: str, user_id: str) -> bool: ...


class MessageCache(Protocol):
    """Per-channel message cache that is populated asynchronously.

    ``get_messages`` may return a sequence of messages, an object exposing a
    ``messages`` sequence, an object exposing only an integer ``size``, or an
    object exposing only ``for_each(callback)``.
    """

    def has_present(self, channel_id: str) -> bool: ...

    def get_messages(self, channel_id: str) -> Any: ...

    def when_ready(self, channel_id: str, callback: Callable[[], None]) -> None: ...


class KeyValueStore(Protocol):
    async def get(self, key: str) -> Any: ...

    async def set(self, key: str, value: Any) -> None: ...


class MessageSender(Protocol):
    async def send(
        self, channel_id: str, content: str, *, allowed_mentions: AllowedMentions
    ) -> None: ...


class ChannelCloser(Protocol):
    async def close(self, channel_id: str) -> None: ...
