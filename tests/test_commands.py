"""
Slash command handlers and the dispatch path.
"""

from datetime import timedelta
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from commands import help_command
from commands.command_handler import CommandHandler
from commands.command_registry import registry
from commands.general_commands import PONG

REMINDER_CHANNEL_ID = 444444444444444444


@pytest.fixture
def handler(client):
    return CommandHandler(client)


async def test_ping_replies_pong(handler, interaction):
    await handler.dispatch("ping", interaction)

    args, kwargs = interaction.response.send_message.call_args
    assert args[0] == PONG
    assert isinstance(kwargs["embed"], discord.Embed)
    assert kwargs["embed"].fields[0].value == "42ms"
    handler.bot.monitoring.record_command.assert_called_once_with("ping")


async def test_hola_mentions_user(handler, interaction):
    await handler.dispatch("hello", interaction)

    content = interaction.response.send_message.call_args.args[0]
    assert interaction.user.mention in content
    assert content.startswith("👋 Hola")


async def test_unknown_command_is_ignored(handler, interaction):
    await handler.dispatch("nope", interaction)
    interaction.response.send_message.assert_not_called()


async def test_guild_only_outside_guild(handler, interaction_factory):
    interaction = interaction_factory(guild=False)
    await handler.dispatch("purge", interaction, amount=5)

    args, kwargs = interaction.response.send_message.call_args
    assert "server" in args[0]
    assert kwargs["ephemeral"] is True


async def test_admin_only_rejects_members(handler, interaction):
    await handler.dispatch("reminder", interaction, time="5m", message="hi")

    embed = interaction.response.send_message.call_args.kwargs["embed"]
    assert embed.title == "❌ Permission Denied"


async def test_handler_errors_are_reported(handler, interaction):
    async def boom(interaction, options, handler):
        raise RuntimeError("boom")

    registry.register({"name": "boom", "description": "Always fails"}, boom)
    try:
        await handler.dispatch("boom", interaction)
    finally:
        registry.unregister("boom")

    handler.bot.monitoring.record_error.assert_called_once()
    args, kwargs = interaction.response.send_message.call_args
    assert args[0].startswith("❌")
    assert kwargs["ephemeral"] is True


async def test_purge_requires_permission(handler, interaction):
    await handler.dispatch("purge", interaction, amount=5)

    embed = interaction.response.send_message.call_args.kwargs["embed"]
    assert embed.title == "❌ Missing Permission"


async def test_purge_rejects_invalid_amount(handler, interaction_factory, user_factory):
    interaction = interaction_factory(user=user_factory(manage_messages=True))
    await handler.dispatch("purge", interaction, amount=500)

    embed = interaction.response.send_message.call_args.kwargs["embed"]
    assert embed.title == "❌ Invalid Amount"
    interaction.channel.purge.assert_not_called()


async def test_purge_deletes_messages(handler, interaction_factory, user_factory):
    interaction = interaction_factory(user=user_factory(manage_messages=True))
    interaction.channel.purge = AsyncMock(return_value=[object()] * 3)

    await handler.dispatch("purge", interaction, amount=3)

    interaction.channel.purge.assert_awaited_once_with(limit=3)
    interaction.response.defer.assert_awaited_once()
    embed = interaction.followup.send.call_args.kwargs["embed"]
    assert "**3**" in embed.description


async def test_reminder_creates_reminder(handler, interaction_factory, user_factory):
    interaction = interaction_factory(user=user_factory(admin=True))
    created = SimpleNamespace(
        id="abc",
        reminder_time=discord.utils.utcnow() + timedelta(hours=2),
        channel_id=str(REMINDER_CHANNEL_ID),
        has_status=True,
    )
    handler.bot.reminder_manager.create_reminder = AsyncMock(return_value=created)

    await handler.dispatch(
        "reminder",
        interaction,
        time="2h",
        message="Stand-up",
        visibility="private",
        mention_type=None,
        has_status=True,
    )

    args, kwargs = handler.bot.reminder_manager.create_reminder.call_args
    assert args[1] == "Stand-up"
    assert args[2] == timedelta(hours=2)
    assert kwargs["is_private"] is True
    assert kwargs["has_status"] is True
    embed = interaction.response.send_message.call_args.kwargs["embed"]
    assert embed.title == "✅ Reminder Created"


async def test_reminder_rejects_bad_time(handler, interaction_factory, user_factory):
    interaction = interaction_factory(user=user_factory(admin=True))
    handler.bot.reminder_manager.create_reminder = AsyncMock()

    await handler.dispatch("reminder", interaction, time="soon", message="x")

    embed = interaction.response.send_message.call_args.kwargs["embed"]
    assert embed.title == "❌ Invalid Time"
    handler.bot.reminder_manager.create_reminder.assert_not_called()


async def test_help_overview_lists_categories(handler, interaction):
    await handler.dispatch("help", interaction)

    kwargs = interaction.response.send_message.call_args.kwargs
    names = [field.name for field in kwargs["embed"].fields]
    assert any("General" in name for name in names)
    select = kwargs["view"].children[0]
    assert select.custom_id == help_command.SELECT_ID
    assert "reminder" in [option.value for option in select.options]


async def test_help_select_and_back(handler, interaction_factory):
    interaction = interaction_factory(data={"custom_id": help_command.SELECT_ID, "values": ["purge"]})
    await help_command.handle_help_select(interaction, help_command.SELECT_ID)

    kwargs = interaction.response.edit_message.call_args.kwargs
    assert kwargs["embed"].title.endswith("/purge")
    assert kwargs["view"].children[0].custom_id == help_command.BACK_ID

    await help_command.handle_help_back(interaction, help_command.BACK_ID)
    assert interaction.response.edit_message.call_args.kwargs["embed"].title == "📖 Guild Assistant Help"


async def test_help_select_unknown_command(handler, interaction_factory):
    interaction = interaction_factory(data={"values": ["missing"]})
    await help_command.handle_help_select(interaction, help_command.SELECT_ID)

    assert interaction.response.send_message.call_args.kwargs["ephemeral"] is True


async def test_user_info_shows_summary(handler, interaction, user_factory):
    member = user_factory(user_id=77, name="bob")
    member.created_at = discord.utils.utcnow()
    member.joined_at = None
    member.roles = []
    member.colour = None
    context = MagicMock()
    context.has_summary.return_value = True
    context.user_summary = "Likes Python"
    handler.bot.conversations.get_context = AsyncMock(return_value=context)

    await handler.dispatch("user info", interaction, member=member)

    embed = interaction.response.send_message.call_args.kwargs["embed"]
    assert embed.title == "👤 Bob"
    assert embed.fields[-1].value == "Likes Python"


async def test_help_for_single_command(handler, interaction):
    await handler.dispatch("help", interaction, command="purge")

    args, kwargs = interaction.response.send_message.call_args
    assert "`/purge amount:<1-100>`" in args[0]
    assert kwargs["ephemeral"] is True


async def test_stats_lists_top_commands(handler, interaction, store, monkeypatch):
    from bot import storage
    from utils.monitoring import Monitoring

    monkeypatch.setattr(storage, "_store", store)
    handler.bot.monitoring = Monitoring(handler.bot)
    handler.bot.monitoring.record_command("ping")
    handler.bot.monitoring.record_command("ping")

    await handler.dispatch("stats", interaction)

    embed = interaction.response.send_message.call_args.kwargs["embed"]
    fields = {field.name: field.value for field in embed.fields}
    assert fields["💬 Conversations"] == "0"
    assert "`/ping` × 2" in fields["🏆 Top Commands"]


async def test_failing_command_is_paused(handler, interaction, monkeypatch):
    from utils import error_handler

    errors = error_handler.ErrorHandler(max_errors_per_minute=1)
    errors.handle_exception(RuntimeError("down"), "command:ping")
    monkeypatch.setattr(error_handler, "_error_handler", errors)

    await handler.dispatch("ping", interaction)

    args, kwargs = interaction.response.send_message.call_args
    assert "paused for a minute" in args[0]
    assert kwargs["ephemeral"] is True
    handler.bot.monitoring.record_command.assert_not_called()

    await handler.dispatch("hola", interaction)
    assert interaction.response.send_message.call_args.args[0].startswith("👋 Hola")


async def test_ticket_setup_defers_before_posting(handler, interaction_factory, user_factory):
    interaction = interaction_factory(user=user_factory(admin=True))
    channel = MagicMock(mention="<#555555555555555555>")
    handler.bot.get_channel.return_value = channel
    handler.bot.ticket_manager.post_panel = AsyncMock()

    await handler.dispatch("ticket_setup", interaction)

    interaction.response.defer.assert_awaited_once_with(ephemeral=True, thinking=True)
    handler.bot.ticket_manager.post_panel.assert_awaited_once_with(channel)
    interaction.response.send_message.assert_not_called()
    kwargs = interaction.followup.send.call_args.kwargs
    assert kwargs["embed"].title == "✅ Ticket Panel Posted"
    assert kwargs["ephemeral"] is True


async def test_setup_without_channel_reports_error(handler, interaction_factory, user_factory):
    interaction = interaction_factory(user=user_factory(admin=True))
    handler.bot.get_channel.return_value = None
    handler.bot.fetch_channel = AsyncMock(side_effect=discord.NotFound(MagicMock(status=404, reason="missing"), "gone"))
    handler.bot.feedback_manager.post_setup = AsyncMock()

    await handler.dispatch("feedback_setup", interaction)

    interaction.response.defer.assert_awaited_once()
    handler.bot.feedback_manager.post_setup.assert_not_called()
    assert interaction.followup.send.call_args.kwargs["embed"].title == "❌ Channel Not Configured"
