"""Configuration helpers for the DM Redirect bot."""

from __future__ import annotations

import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import AliasChoices, BaseModel, Field, ValidationError, field_validator

DEFAULT_GUILD_ID = "1283383478913732628"
DEFAULT_FIRST_REPLY = (
    "Hey 👋 I don’t respond to DMs. Please open a ticket in our support server instead."
)


class ReplyConfiguration(BaseModel):
    """Reply texts and gating switches consulted for every incoming DM."""

    guild_id: str = DEFAULT_GUILD_ID
    reply1: str = DEFAULT_FIRST_REPLY
    reply2: str = ""
    reply3: str = ""
    test_mode: bool = True

    def bodies(self) -> List[str]:
        """Return the non-blank reply bodies, trimmed, in configured order."""

        candidates = (self.reply1, self.reply2, self.reply3)
        return [text.strip() for text in candidates if text and text.strip()]


class BotSettings(BaseModel):
    """Runtime configuration parsed from environment variables."""

    version: Optional[str] = Field(
        default=None,
        alias="VERSION",
        validation_alias=AliasChoices("VERSION", "APP_VERSION", "BOT_VERSION"),
    )
    discord_token: str = Field(..., alias="DISCORD_TOKEN")
    database_url: Optional[str] = Field(
        default=None,
        alias="DATABASE_URL",
        validation_alias=AliasChoices("DATABASE_URL", "SUPABASE_DB_URL", "database_url"),
    )
    guild_id: str = Field(
        default=DEFAULT_GUILD_ID,
        alias="TARGET_GUILD_ID",
        validation_alias=AliasChoices("TARGET_GUILD_ID", "GUILD_ID", "guild_id"),
    )
    reply1: str = Field(default=DEFAULT_FIRST_REPLY, alias="REPLY_1")
    reply2: str = Field(default="", alias="REPLY_2")
    reply3: str = Field(default="", alias="REPLY_3")
    test_mode: bool = Field(default=True, alias="TEST_MODE")
    known_user_ids: List[str] = Field(default_factory=list, alias="KNOWN_USER_IDS")
    health_host: str = Field(default="0.0.0.0", alias="HEALTH_HOST")
    health_port: int = Field(default=8080, alias="HEALTH_PORT")

    class Config:
        populate_by_name = True

    @field_validator("known_user_ids", mode="before")
    @classmethod
    def _split_user_ids(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        return [str(item) for item in value]

    def reply_configuration(self) -> ReplyConfiguration:
        return ReplyConfiguration(
            guild_id=self.guild_id,
            reply1=self.reply1,
            reply2=self.reply2,
            reply3=self.reply3,
            test_mode=self.test_mode,
        )


def load_settings(env_file: str | None = ".env") -> BotSettings:
    """Load and validate configuration, raising a helpful error if missing."""

    if env_file and Path(env_file).exists():
        load_dotenv(env_file)

    try:
        settings = BotSettings.model_validate(os.environ)
    except ValidationError as exc:
        missing = [err["loc"][0] for err in exc.errors() if err["type"] == "missing"]
        if not missing:
            raise RuntimeError(f"Invalid configuration: {exc}") from exc
        raise RuntimeError(
            (
                "Missing required configuration values: "
                f"{', '.join(str(name) for name in missing)}. "
                "Ensure DISCORD_TOKEN is set before running the bot."
            )
        ) from exc

    return settings
