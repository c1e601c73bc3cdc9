"""
Discord helper functions and the asset catalog.
"""

import json
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import discord

from bot.assets import AssetCatalog
from commands import help_command
from commands.command_handler import CommandHandler
from managers.reminder_manager import ReminderManager
from utils.discord import DEFAULT_AVATAR_URL, ComponentRow, DiscordUtils


def test_format_duration_omits_leading_zero_units():
    assert DiscordUtils.format_duration(42) == "42s"
    assert DiscordUtils.format_duration(65) == "1m 5s"
    assert DiscordUtils.format_duration(3 * 3600 + 2 * 60 + 5) == "3h 2m 5s"
    assert DiscordUtils.format_duration(86400 + 1) == "1d 0h 0m 1s"
    assert DiscordUtils.format_duration(0) == "0s"


def test_format_timestamp():
    moment = datetime(2024, 1, 1, tzinfo=timezone.utc)
    assert DiscordUtils.format_timestamp(moment) == f"<t:{int(moment.timestamp())}:R>"
    assert DiscordUtils.format_timestamp(moment, "F").endswith(":F>")


def test_format_number():
    assert DiscordUtils.format_number(1234567) == "1,234,567"
    assert DiscordUtils.format_number("n/a") == "n/a"


def test_permission_checks():
    admin = SimpleNamespace(guild_permissions=SimpleNamespace(administrator=True, manage_messages=False))
    mod = SimpleNamespace(guild_permissions=SimpleNamespace(administrator=False, manage_messages=True))
    dm_user = SimpleNamespace()

    assert DiscordUtils.is_admin(admin)
    assert not DiscordUtils.is_admin(mod)
    assert DiscordUtils.can_manage_messages(mod)
    assert DiscordUtils.can_manage_messages(admin)
    assert not DiscordUtils.can_manage_messages(dm_user)


async def test_safe_send_swallows_http_errors():
    channel = MagicMock()
    channel.send = AsyncMock(side_effect=discord.HTTPException(MagicMock(status=403), "Missing Access"))
    assert await DiscordUtils.safe_send(channel, "hi") is None

    channel.send = AsyncMock(return_value="sent")
    assert await DiscordUtils.safe_send(channel, "hi") == "sent"


async def test_get_channel_falls_back_to_fetch():
    client = MagicMock()
    client.get_channel.return_value = None
    client.fetch_channel = AsyncMock(return_value="fetched")

    assert await DiscordUtils.get_channel(client, 123) == "fetched"
    assert await DiscordUtils.get_channel(client, None) is None


async def test_component_rows_are_not_tracked(client):
    row = ComponentRow(discord.ui.Button(label="Go", custom_id="ticket_create"))

    # discord.py only stores views that are dispatchable and not finished
    assert row.is_finished()
    assert row.timeout is None
    assert row.to_components()[0]["components"][0]["custom_id"] == "ticket_create"

    CommandHandler(client)
    views = [
        help_command.build_overview()[1],
        help_command.build_command_detail("ping")[1],
        ReminderManager(client, MagicMock()).build_status_view("abc"),
    ]
    assert all(isinstance(view, ComponentRow) and view.is_finished() for view in views)


def test_asset_catalog(tmp_path):
    path = tmp_path / "assets.json"
    path.write_text(json.dumps({
        "images": {
            "avatar": {"pointing": "https://img/pointing.png"},
            "emotions": {"love": "https://img/love.png"},
        },
        "emojis": {"status": {"online": "<:online:1>"}},
    }), encoding="utf-8")

    catalog = AssetCatalog.load(path)

    assert catalog.find_image("love") == "https://img/love.png"
    assert catalog.resolve_thumbnail("missing", ("emotions", "love")) == "https://img/love.png"
    assert catalog.resolve_thumbnail(None) == "https://img/pointing.png"
    assert catalog.get_emoji("status", "online") == "<:online:1>"
    assert catalog.total_images() == 2
    assert catalog.list_images("emotions") == ["love"]


def test_asset_catalog_defaults_when_missing(tmp_path):
    catalog = AssetCatalog.load(tmp_path / "missing.json")
    assert catalog.get_random_avatar() == DEFAULT_AVATAR_URL
