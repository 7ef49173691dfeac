"""Data models for DM Redirect."""

from .config import BotSettings, ReplyConfiguration, load_settings
from .events import (
    DM_CHANNEL_TYPE,
    AllowedMentions,
    ChannelInfo,
    Decision,
    EligibilityContext,
    IncomingDirectMessage,
    Verdict,
)

__all__ = [
    "DM_CHANNEL_TYPE",
    "AllowedMentions",
    "BotSettings",
    "ChannelInfo",
    "Decision",
    "EligibilityContext",
    "IncomingDirectMessage",
    "ReplyConfiguration",
    "Verdict",
    "load_settings",
]
