"""DM Redirect: one-time auto-replies to new direct messages."""

from .bot import create_bot

__all__ = ["create_bot"]
