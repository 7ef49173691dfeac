"""Shared fakes for the host collaborators."""

from __future__ import annotations

from types import SimpleNamespace
from typing import Any, Callable, Dict, List, Optional

import pytest

from dmredirect.models.config import ReplyConfiguration
from dmredirect.models.events import DM_CHANNEL_TYPE, ChannelInfo, IncomingDirectMessage
from dmredirect.services.dispatcher import ReplyDispatcher
from dmredirect.services.eligibility import EligibilityDecider
from dmredirect.services.history import HistoryProber
from dmredirect.services.responder import AutoResponder
from dmredirect.services.suppression import SuppressionStore

ME = "100"
GUILD = "S1"
DM_CHANNEL = "500"


class FakeChannels:
    def __init__(self, channels: Optional[Dict[str, ChannelInfo]] = None):
        self.channels = channels or {}

    def get_channel(self, channel_id: str) -> Optional[ChannelInfo]:
        return self.channels.get(channel_id)


class FakeUsers:
    def __init__(self, user_id: Optional[str] = ME):
        self.user_id = user_id

    def current_user_id(self) -> Optional[str]:
        return self.user_id


class FakeRelationships:
    def __init__(self, friends=()):
        self.friends = set(friends)

    def is_friend(self, user_id: str) -> bool:
        return user_id in self.friends


class FakeGuilds:
    def __init__(self, members: Optional[Dict[str, set]] = None):
        self.members = members or {}
        self.lookups = 0

    def is_member(self, guild_id: str, user_id: str) -> bool:
        self.lookups += 1
        return user_id in self.members.get(guild_id, set())


class FakeMessageCache:
    """Message cache whose channels can be populated later via ``populate``."""

    def __init__(self):
        self.data: Dict[str, Any] = {}
        self.callbacks: Dict[str, List[Callable[[], None]]] = {}
        self.lookups = 0
        self.on_register: Optional[Callable[[str], None]] = None

    def has_present(self, channel_id: str) -> bool:
        self.lookups += 1
        return channel_id in self.data

    def get_messages(self, channel_id: str) -> Any:
        return self.data[channel_id]

    def when_ready(self, channel_id: str, callback: Callable[[], None]) -> None:
        self.callbacks.setdefault(channel_id, []).append(callback)
        if self.on_register is not None:
            self.on_register(channel_id)

    def populate(self, channel_id: str, data: Any) -> None:
        self.data[channel_id] = data
        for callback in self.callbacks.get(channel_id, []):
            callback()


class FakeKeyValueStore:
    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self.data: Dict[str, Any] = dict(initial or {})
        self.fail_get = False
        self.fail_set = False
        self.writes: List[Any] = []

    async def get(self, key: str) -> Any:
        if self.fail_get:
            raise RuntimeError("storage unavailable")
        return self.data.get(key)

    async def set(self, key: str, value: Any) -> None:
        if self.fail_set:
            raise RuntimeError("storage unavailable")
        self.writes.append(value)
        self.data[key] = value


class FakeSender:
    def __init__(self, fail_on=()):
        self.sent: List[SimpleNamespace] = []
        self.fail_on = set(fail_on)

    async def send(self, channel_id: str, content: str, *, allowed_mentions) -> None:
        if content in self.fail_on:
            raise RuntimeError(f"cannot send {content!r}")
        self.sent.append(
            SimpleNamespace(channel_id=channel_id, content=content, allowed_mentions=allowed_mentions)
        )


class FakeCloser:
    def __init__(self, fail: bool = False):
        self.closed: List[str] = []
        self.fail = fail

    async def close(self, channel_id: str) -> None:
        if self.fail:
            raise RuntimeError("cannot close")
        self.closed.append(channel_id)


def make_message(**overrides) -> IncomingDirectMessage:
    fields = {
        "message_id": "9001",
        "author_id": "200",
        "author_is_bot": False,
        "channel_id": DM_CHANNEL,
        "channel_type": DM_CHANNEL_TYPE,
        "optimistic": False,
    }
    fields.update(overrides)
    return IncomingDirectMessage(**fields)


def make_config(**overrides) -> ReplyConfiguration:
    fields = {
        "guild_id": GUILD,
        "reply1": "Please open a ticket.",
        "reply2": "",
        "reply3": "Thanks!",
        "test_mode": False,
    }
    fields.update(overrides)
    return ReplyConfiguration(**fields)


def dm_channel(channel_id: str = DM_CHANNEL) -> ChannelInfo:
    return ChannelInfo(channel_id=channel_id, type=DM_CHANNEL_TYPE)


@pytest.fixture
def host():
    """Fake host wired into real services, with tiny timeouts."""

    cache = FakeMessageCache()
    # An empty DM: only the incoming message is cached.
    cache.data[DM_CHANNEL] = [{"id": "9001"}]
    storage = FakeKeyValueStore()
    suppression = SuppressionStore(storage)
    ns = SimpleNamespace(
        channels=FakeChannels({DM_CHANNEL: dm_channel()}),
        users=FakeUsers(),
        relationships=FakeRelationships(),
        guilds=FakeGuilds({GUILD: {"200"}}),
        cache=cache,
        storage=storage,
        suppression=suppression,
        sender=FakeSender(),
        closer=FakeCloser(),
        config=make_config(),
    )
    ns.prober = HistoryProber(cache, ready_timeout=0.01)
    ns.decider = EligibilityDecider(
        users=ns.users,
        relationships=ns.relationships,
        guilds=ns.guilds,
        suppression=suppression,
        prober=ns.prober,
    )
    ns.dispatcher = ReplyDispatcher(ns.sender, ns.closer, suppression, flush_delay=0)
    ns.responder = AutoResponder(
        channels=ns.channels,
        decider=ns.decider,
        dispatcher=ns.dispatcher,
        config=lambda: ns.config,
    )
    return ns
