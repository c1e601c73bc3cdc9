"""
Shared fixtures. The environment is set before any project module reads it.
"""

import os

os.environ.update({
    "DISCORD_TOKEN": "test-token",
    "OWNER_ID": "111111111111111111",
    "GEMINI_API_KEY": "test-key",
    "AI_CHAT_CHANNEL_ID": "333333333333333333",
    "FEEDBACK_CHANNEL_ID": "222222222222222222",
    "REMINDER_CHANNEL_ID": "444444444444444444",
    "TICKET_CHANNEL_ID": "555555555555555555",
    "COMMISSION_CHANNEL_ID": "666666666666666666",
    "KEEP_ALIVE": "false",
    "LOG_LEVEL": "WARNING",
})

from types import SimpleNamespace  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402

from bot.storage import DataStore  # noqa: E402

OWNER_ID = 111111111111111111
AI_CHANNEL_ID = 333333333333333333
FEEDBACK_CHANNEL_ID = 222222222222222222
REMINDER_CHANNEL_ID = 444444444444444444


@pytest.fixture
def store(tmp_path):
    data_store = DataStore(tmp_path / "bot_data.json")
    data_store.load()
    return data_store


def make_user(user_id=42, name="alice", admin=False, manage_messages=False, bot=False):
    user = MagicMock()
    user.id = user_id
    user.name = name
    user.display_name = name.capitalize()
    user.mention = f"<@{user_id}>"
    user.bot = bot
    user.guild_permissions = SimpleNamespace(administrator=admin, manage_messages=manage_messages)
    user.display_avatar.url = f"https://cdn.example/{user_id}.png"
    user.__str__.return_value = name
    return user


def make_interaction(user=None, guild=True, data=None):
    interaction = MagicMock()
    interaction.user = user or make_user()
    interaction.guild = MagicMock() if guild else None
    interaction.data = data or {}
    interaction.response.send_message = AsyncMock()
    interaction.response.edit_message = AsyncMock()
    interaction.response.defer = AsyncMock()
    interaction.response.is_done = MagicMock(return_value=False)
    interaction.followup.send = AsyncMock()
    return interaction


@pytest.fixture
def interaction():
    return make_interaction()


@pytest.fixture
def client():
    bot = MagicMock()
    bot.user.id = 999
    bot.latency = 0.042
    bot.guilds = []
    bot.monitoring = MagicMock()
    return bot


@pytest.fixture
def user_factory():
    return make_user


@pytest.fixture
def interaction_factory():
    return make_interaction
