"""Event-scoped values passed between the responder components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

# Discord's channel type discriminator for one-to-one direct messages.
DM_CHANNEL_TYPE = 1


class ChannelInfo(BaseModel):
    """Minimal channel descriptor resolved from the host's channel store."""

    channel_id: str
    type: int

    @property
    def is_direct_message(self) -> bool:
        return self.type == DM_CHANNEL_TYPE


class IncomingDirectMessage(BaseModel):
    """A freshly received message, valid for one handler invocation.

    ``channel_type`` stands in for the channel store when the channel lookup
    comes back empty.
    """

    message_id: str
    author_id: str
    author_is_bot: bool = False
    channel_id: str
    channel_type: Optional[int] = None
    optimistic: bool = False


class AllowedMentions(BaseModel):
    """Mention policy attached to outbound messages."""

    parse: List[str] = Field(default_factory=list)
    replied_user: bool = False

    @classmethod
    def none(cls) -> "AllowedMentions":
        return cls(parse=[], replied_user=False)


class Decision(str, Enum):
    ALLOW = "allow"
    SUPPRESS = "suppress"


@dataclass
class EligibilityContext:
    """Facts gathered while deciding; ``None`` means the rule never ran."""

    is_self: Optional[bool] = None
    is_friend: Optional[bool] = None
    is_guild_member: Optional[bool] = None
    already_suppressed: Optional[bool] = None
    has_history: Optional[bool] = None


@dataclass
class Verdict:
    decision: Decision
    reason: str
    context: EligibilityContext = field(default_factory=EligibilityContext)

    @property
    def allowed(self) -> bool:
        return self.decision is Decision.ALLOW
