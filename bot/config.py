"""
Configuration management for the guild assistant bot.
Loads environment variables and provides configuration settings.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from utils.logger import parse_level
from utils.validation import ValidationUtils

# Load environment variables from .env file
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(dotenv_path=env_path)


def _optional_int(value: Optional[str]) -> Optional[int]:
    """Parse an optional numeric id, keeping malformed values for validate()."""
    if value is None or not value.strip():
        return None
    value = value.strip()
    return int(value) if value.isdigit() else -1


def _bool(value: Optional[str], default: bool) -> bool:
    if value is None or not value.strip():
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Config:
    """Bot configuration settings."""

    # Discord
    DISCORD_TOKEN: str
    OWNER_ID: str
    GUILD_ID: Optional[int] = None

    # Logging
    LOG_LEVEL: str = "INFO"

    # AI chat
    GEMINI_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-2.5-flash"

    # Channels
    AI_CHAT_CHANNEL_ID: Optional[int] = None
    FEEDBACK_CHANNEL_ID: Optional[int] = None
    TICKET_CHANNEL_ID: Optional[int] = None
    COMMISSION_CHANNEL_ID: Optional[int] = None
    REMINDER_CHANNEL_ID: Optional[int] = None

    # Storage
    DATA_DIR: str = "data"

    # Web Server (keep-alive)
    KEEP_ALIVE: bool = True
    PORT: int = 8080
    HOST: str = "0.0.0.0"

    # Debug
    DEBUG: bool = False

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        return cls(
            DISCORD_TOKEN=os.getenv("DISCORD_TOKEN", "").strip(),
            OWNER_ID=os.getenv("OWNER_ID", "").strip(),
            GUILD_ID=_optional_int(os.getenv("GUILD_ID")),
            LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO").strip() or "INFO",
            GEMINI_API_KEY=os.getenv("GEMINI_API_KEY", "").strip(),
            GEMINI_MODEL=os.getenv("GEMINI_MODEL", "gemini-2.5-flash").strip() or "gemini-2.5-flash",
            AI_CHAT_CHANNEL_ID=_optional_int(os.getenv("AI_CHAT_CHANNEL_ID")),
            FEEDBACK_CHANNEL_ID=_optional_int(os.getenv("FEEDBACK_CHANNEL_ID")),
            TICKET_CHANNEL_ID=_optional_int(os.getenv("TICKET_CHANNEL_ID")),
            COMMISSION_CHANNEL_ID=_optional_int(os.getenv("COMMISSION_CHANNEL_ID")),
            REMINDER_CHANNEL_ID=_optional_int(os.getenv("REMINDER_CHANNEL_ID")),
            DATA_DIR=os.getenv("DATA_DIR", "data").strip() or "data",
            KEEP_ALIVE=_bool(os.getenv("KEEP_ALIVE"), True),
            PORT=int(os.getenv("PORT", "8080")),
            HOST=os.getenv("HOST", "0.0.0.0"),
            DEBUG=_bool(os.getenv("DEBUG"), False),
        )

    @property
    def owner_id(self) -> int:
        """Owner snowflake as an integer."""
        return int(self.OWNER_ID)

    @property
    def effective_log_level(self) -> str:
        """Log level after applying DEBUG."""
        return "DEBUG" if self.DEBUG else self.LOG_LEVEL

    @property
    def ai_enabled(self) -> bool:
        """Whether the AI chat channel can be served."""
        return bool(self.GEMINI_API_KEY and self.AI_CHAT_CHANNEL_ID)

    def validate(self) -> None:
        """Validate required configuration."""
        if not self.DISCORD_TOKEN:
            raise ValueError("DISCORD_TOKEN is required")
        if not self.OWNER_ID:
            raise ValueError("OWNER_ID is required")
        if not ValidationUtils.is_valid_snowflake(self.OWNER_ID):
            raise ValueError("OWNER_ID must be a Discord user ID")

        for name in (
            "GUILD_ID",
            "AI_CHAT_CHANNEL_ID",
            "FEEDBACK_CHANNEL_ID",
            "TICKET_CHANNEL_ID",
            "COMMISSION_CHANNEL_ID",
            "REMINDER_CHANNEL_ID",
        ):
            value = getattr(self, name)
            if value is not None and not ValidationUtils.is_valid_snowflake(value):
                raise ValueError(f"{name} must be a Discord ID")

        parse_level(self.LOG_LEVEL)

        if not 0 < self.PORT < 65536:
            raise ValueError("PORT must be between 1 and 65535")


# Global config instance
config = Config.from_env()
