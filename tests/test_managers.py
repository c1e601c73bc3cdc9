"""
Feature managers: event routing, feedback, reminders, AI chat and support channels.
"""

import json
from datetime import timedelta
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from ai.errors import AIRateLimitError
from ai.prompts import OwnerInfo
from bot.assets import AssetCatalog
from managers.chat_manager import ChatManager
from managers import commission_manager, ticket_manager
from managers.commission_manager import CommissionManager, commission_channel_name, creator_from_channel_name
from managers.event_handler import EventHandler
from managers.feedback_manager import DOWNVOTE, RATING_FIELD, UPVOTE, FeedbackManager, count_votes
from managers.reminder_manager import STATUS_FIELD, STATUS_PREFIX, ReminderManager
from managers.ticket_manager import TicketManager
from repositories import (
    ButtonMessageRepository,
    ConversationRepository,
    FeedbackRepository,
    ReminderRepository,
)
from repositories.models import ButtonMessage, MessageRole, MessageType, utcnow

OWNER_ID = 111111111111111111
AI_CHANNEL_ID = 333333333333333333
FEEDBACK_CHANNEL_ID = 222222222222222222
REMINDER_CHANNEL_ID = 444444444444444444


def make_message(user, channel_id, content="hello", message_id=1):
    message = MagicMock()
    message.id = message_id
    message.author = user
    message.content = content
    message.channel.id = channel_id
    message.channel.send = AsyncMock()
    message.delete = AsyncMock()
    message.reply = AsyncMock(return_value=SimpleNamespace(id=message_id + 1))
    return message


def http_error(status=500):
    return discord.HTTPException(MagicMock(status=status, reason="error"), "failed")


# Event handler

class TestEventHandler:
    def test_longest_prefix_wins(self, client):
        events = EventHandler(client)
        short, long = AsyncMock(), AsyncMock()
        events.register_component("ticket_", short, prefix=True)
        events.register_component("ticket_close_", long, prefix=True)

        assert events.resolve_component("ticket_close_abc") is long
        assert events.resolve_component("ticket_other") is short
        assert events.resolve_component("unknown") is None

    def test_exact_route_before_prefix(self, client):
        events = EventHandler(client)
        exact, prefixed = AsyncMock(), AsyncMock()
        events.register_component("help_", prefixed, prefix=True)
        events.register_component("help_back", exact)

        assert events.resolve_component("help_back") is exact

    async def test_feedback_channel_messages_go_to_feedback(self, client, user_factory):
        events = EventHandler(client)
        client.feedback_manager.handle_message = AsyncMock()
        client.chat_manager.handle_message = AsyncMock()
        message = make_message(user_factory(), FEEDBACK_CHANNEL_ID)

        await events.handle_message(message)

        client.feedback_manager.handle_message.assert_awaited_once_with(message)
        client.chat_manager.handle_message.assert_not_called()
        client.monitoring.record_message.assert_called_once()

    async def test_chat_messages_go_to_chat(self, client, user_factory):
        events = EventHandler(client)
        client.chat_manager.should_process = MagicMock(return_value=True)
        client.chat_manager.handle_message = AsyncMock()
        message = make_message(user_factory(), AI_CHANNEL_ID)

        await events.handle_message(message)

        client.chat_manager.handle_message.assert_awaited_once_with(message)

    async def test_bot_messages_are_ignored(self, client, user_factory):
        events = EventHandler(client)
        client.feedback_manager.handle_message = AsyncMock()

        await events.handle_message(make_message(user_factory(bot=True), FEEDBACK_CHANNEL_ID))

        client.feedback_manager.handle_message.assert_not_called()
        client.monitoring.record_message.assert_not_called()

    async def test_mention_replies_with_help(self, client, user_factory):
        events = EventHandler(client)
        client.chat_manager.should_process = MagicMock(return_value=False)
        message = make_message(user_factory(), 1)
        message.mentions = [client.user]

        await events.handle_message(message)

        text = message.channel.send.call_args.args[0]
        assert text.startswith("📖 **Guild Assistant Commands**")

    async def test_own_reactions_are_ignored(self, client):
        events = EventHandler(client)
        client.feedback_manager.handle_reaction = AsyncMock()

        await events.handle_reaction(SimpleNamespace(user_id=client.user.id, member=None))

        client.feedback_manager.handle_reaction.assert_not_called()

    async def test_component_errors_are_reported(self, client, interaction_factory):
        events = EventHandler(client)
        events.register_component("ticket_create", AsyncMock(side_effect=RuntimeError("broken")))
        interaction = interaction_factory(data={"custom_id": "ticket_create"})
        interaction.type = discord.InteractionType.component

        await events.handle_interaction(interaction)

        client.monitoring.record_error.assert_called_once()
        assert interaction.response.send_message.call_args.kwargs["ephemeral"] is True

    async def test_slash_commands_are_not_routed(self, client, interaction_factory):
        events = EventHandler(client)
        handler = AsyncMock()
        events.register_component("ping", handler)
        interaction = interaction_factory(data={"custom_id": "ping"})
        interaction.type = discord.InteractionType.application_command

        await events.handle_interaction(interaction)

        handler.assert_not_called()


# Feedback

def test_count_votes_excludes_own_reaction():
    reactions = [
        SimpleNamespace(emoji=UPVOTE, count=4, me=True),
        SimpleNamespace(emoji=DOWNVOTE.replace("\ufe0f", ""), count=1, me=False),
        SimpleNamespace(emoji="🔥", count=9, me=False),
    ]
    assert count_votes(reactions) == (3, 1)
    assert count_votes(None) == (0, 0)


class TestFeedbackManager:
    @pytest.fixture
    def manager(self, client, store):
        manager = FeedbackManager(client, FeedbackRepository(store))
        yield manager
        manager.cleanup()

    async def test_filtered_message_is_removed(self, manager, user_factory):
        message = make_message(user_factory(), FEEDBACK_CHANNEL_ID, content="this is a SCAM")
        message.channel.send = AsyncMock(return_value=SimpleNamespace(id=9, delete=AsyncMock()))

        await manager.handle_message(message)

        message.delete.assert_awaited_once()
        embed = message.channel.send.call_args.kwargs["embed"]
        assert embed.title == "⚠️ Message Removed"
        assert await manager.feedback.get("9") is None

    async def test_feedback_is_reposted(self, manager, user_factory):
        repost = MagicMock(id=500)
        repost.edit = AsyncMock()
        repost.add_reaction = AsyncMock()
        message = make_message(user_factory(), FEEDBACK_CHANNEL_ID, content="Add a dark mode please")
        message.channel.send = AsyncMock(return_value=repost)

        await manager.handle_message(message)

        message.delete.assert_awaited_once()
        assert [call.args[0] for call in repost.add_reaction.await_args_list] == [UPVOTE, DOWNVOTE]
        footer = repost.edit.call_args.kwargs["embed"].footer.text
        assert footer == "Feedback • ID: 500"

        record = await manager.feedback.get("500")
        assert record.content == "Add a dark mode please"
        assert record.original_author_id == "42"

    async def test_reaction_updates_rating(self, manager, user_factory, client):
        repost = MagicMock(id=500)
        repost.edit = AsyncMock()
        repost.add_reaction = AsyncMock()
        message = make_message(user_factory(), FEEDBACK_CHANNEL_ID, content="More emotes")
        message.channel.send = AsyncMock(return_value=repost)
        await manager.handle_message(message)

        embed = discord.Embed(title="💬 Feedback")
        embed.add_field(name=RATING_FIELD, value="old", inline=False)
        fetched = MagicMock()
        fetched.embeds = [embed]
        fetched.reactions = [SimpleNamespace(emoji=UPVOTE, count=3, me=True)]
        fetched.edit = AsyncMock()
        channel = MagicMock()
        channel.fetch_message = AsyncMock(return_value=fetched)
        client.get_channel.return_value = channel

        payload = SimpleNamespace(emoji=UPVOTE, message_id=500, channel_id=FEEDBACK_CHANNEL_ID)
        await manager.handle_reaction(payload)

        record = await manager.feedback.get("500")
        assert (record.upvotes, record.downvotes) == (2, 0)
        edited = fetched.edit.call_args.kwargs["embed"]
        assert edited.fields[0].value == record.star_rating()


# Reminders

class TestReminderManager:
    @pytest.fixture
    def manager(self, client, store):
        return ReminderManager(client, ReminderRepository(store))

    @pytest.fixture
    def channel(self, client):
        channel = MagicMock()
        channel.send = AsyncMock()
        client.get_channel.return_value = channel
        return channel

    async def test_due_reminder_is_delivered(self, manager, channel, user_factory):
        reminder = await manager.create_reminder(user_factory(), "Deploy", timedelta(minutes=5))

        assert await manager.check_reminders() == 0
        assert await manager.check_reminders(utcnow() + timedelta(minutes=10)) == 1

        args, kwargs = channel.send.call_args
        assert args[0] is None
        assert kwargs["embed"].title == "⏰ Reminder"
        assert "view" not in kwargs
        assert (await manager.reminders.get(reminder.id)).is_sent

    async def test_private_reminder_mentions_creator(self, manager, channel, user_factory):
        await manager.create_reminder(
            user_factory(), "Secret", timedelta(seconds=30), is_private=True, has_status=True
        )

        await manager.check_reminders(utcnow() + timedelta(minutes=1))

        args, kwargs = channel.send.call_args
        assert args[0] == "<@42>"
        select = kwargs["view"].children[0]
        assert select.custom_id.startswith(STATUS_PREFIX)

    async def test_failed_delivery_stays_pending(self, manager, channel, user_factory):
        channel.send.side_effect = http_error()
        reminder = await manager.create_reminder(user_factory(), "Retry", timedelta(seconds=1))

        assert await manager.check_reminders(utcnow() + timedelta(minutes=1)) == 0
        assert not (await manager.reminders.get(reminder.id)).is_sent

    async def test_status_select_completes_reminder(self, manager, user_factory, interaction_factory):
        reminder = await manager.create_reminder(user_factory(), "Ship it", timedelta(seconds=1), has_status=True)
        custom_id = f"{STATUS_PREFIX}{reminder.id}"
        interaction = interaction_factory(data={"custom_id": custom_id, "values": ["completed"]})
        interaction.message.embeds = [manager.build_reminder_embed(reminder)]

        await manager.handle_status_select(interaction, custom_id)

        kwargs = interaction.response.edit_message.call_args.kwargs
        assert kwargs["view"] is None
        assert kwargs["embed"].footer.text == "Reminder completed • Thank you!"
        assert kwargs["embed"].fields[-1].name == STATUS_FIELD
        assert await manager.reminders.get(reminder.id) is None

    async def test_unknown_status_is_rejected(self, manager, interaction_factory):
        interaction = interaction_factory(data={"values": ["maybe"]})

        await manager.handle_status_select(interaction, f"{STATUS_PREFIX}x")

        interaction.response.edit_message.assert_not_called()
        assert interaction.response.send_message.call_args.kwargs["ephemeral"] is True

    async def test_create_without_channel_fails(self, manager, user_factory):
        manager.set_channel(None)
        with pytest.raises(ValueError):
            await manager.create_reminder(user_factory(), "Nowhere", timedelta(minutes=1))


# AI chat

class TestChatManager:
    @pytest.fixture
    def gemini(self):
        gemini = MagicMock()
        gemini.generate_response = AsyncMock(return_value=json.dumps({
            "content": "Hello there!",
            "color": "#FF0000",
            "thumbnail": "pointing",
        }))
        return gemini

    @pytest.fixture
    def manager(self, client, store, gemini):
        return ChatManager(client, ConversationRepository(store), gemini, OwnerInfo.fallback(), AssetCatalog.defaults())

    def test_should_process(self, manager, user_factory):
        assert manager.should_process(make_message(user_factory(), AI_CHANNEL_ID))
        assert not manager.should_process(make_message(user_factory(user_id=OWNER_ID), AI_CHANNEL_ID))
        assert not manager.should_process(make_message(user_factory(bot=True), AI_CHANNEL_ID))
        assert not manager.should_process(make_message(user_factory(), FEEDBACK_CHANNEL_ID))
        assert not manager.should_process(make_message(user_factory(), AI_CHANNEL_ID, content="   "))

    def test_disabled_without_gemini(self, client, store):
        manager = ChatManager(client, ConversationRepository(store), None, OwnerInfo.fallback(), AssetCatalog.defaults())
        assert not manager.is_enabled()

    async def test_reply_is_sent_and_stored(self, manager, client, user_factory):
        message = make_message(user_factory(), AI_CHANNEL_ID, content="hi bot", message_id=10)

        await manager.handle_message(message)

        embed = message.reply.call_args.kwargs["embed"]
        assert embed.description == "Hello there!"
        assert embed.colour == discord.Colour.from_rgb(255, 0, 0)
        assert embed.footer.text == f"Assistant of {manager.owner_info.name}"
        assert message.reply.call_args.kwargs["mention_author"] is False

        context = await manager.conversations.get_context("42")
        assert [m.role for m in context.messages] == [MessageRole.USER, MessageRole.ASSISTANT]
        assert context.messages[1].discord_message_id == "11"
        client.monitoring.record_ai_response.assert_called_once()

    async def test_prompt_holds_only_earlier_turns(self, manager, gemini, user_factory):
        await manager.handle_message(make_message(user_factory(), AI_CHANNEL_ID, content="what is a borrow checker"))

        first = gemini.generate_response.call_args.args[0]
        assert first.count("what is a borrow checker") == 1
        assert "## Previous conversation:" not in first

        await manager.handle_message(make_message(user_factory(), AI_CHANNEL_ID, content="and lifetimes?", message_id=20))

        second = gemini.generate_response.call_args.args[0]
        assert "## Previous conversation:" in second
        assert second.count("what is a borrow checker") == 1
        assert second.count("and lifetimes?") == 1

    async def test_ai_failure_sends_error_embed(self, manager, gemini, client, user_factory):
        gemini.generate_response.side_effect = AIRateLimitError("429 RESOURCE_EXHAUSTED")
        message = make_message(user_factory(), AI_CHANNEL_ID, content="hi bot")

        await manager.handle_message(message)

        message.reply.assert_not_called()
        embed = message.channel.send.call_args.kwargs["embed"]
        assert embed.title == "❌ AI Assistant"
        client.monitoring.record_error.assert_called_once()

        context = await manager.conversations.get_context("42")
        assert len(context.messages) == 1

    async def test_refresh_summary_saves_update(self, manager, gemini, user_factory):
        await manager.handle_message(make_message(user_factory(), AI_CHANNEL_ID, content="I love Rust"))
        gemini.generate_response.return_value = json.dumps({"update_summary": True, "content": "Likes Rust"})

        assert await manager.refresh_summary("42")
        assert (await manager.conversations.get_context("42")).user_summary == "Likes Rust"

    async def test_refresh_summary_without_history(self, manager):
        assert not await manager.refresh_summary("404")


# Tickets and commissions

def history_of(*message_ids):
    async def history(limit=None):
        for message_id in message_ids:
            yield SimpleNamespace(id=message_id)
    return MagicMock(side_effect=history)


def make_guild(channel=None):
    guild = MagicMock()
    guild.name = "Test Guild"
    guild.get_channel.return_value = channel
    guild.text_channels = []
    guild.create_text_channel = AsyncMock()
    return guild


def make_channel(channel_id, name="general"):
    channel = MagicMock()
    channel.id = channel_id
    channel.name = name
    channel.mention = f"<#{channel_id}>"
    channel.send = AsyncMock(return_value=SimpleNamespace(id=channel_id + 1))
    channel.delete = AsyncMock()
    return channel


def test_commission_channel_name_round_trip():
    name = commission_channel_name("Alice W.", 12345)
    assert name == "commission-alicew-12345"
    assert creator_from_channel_name(name) == "12345"
    assert creator_from_channel_name("general") is None


class TestTicketManager:
    @pytest.fixture
    def manager(self, client, store):
        manager = TicketManager(client, ButtonMessageRepository(store))
        yield manager
        manager.cleanup()

    async def add_ticket(self, manager, channel_id=900, creator_id="42"):
        await manager.button_messages.add(ButtonMessage(
            message_id=str(channel_id + 1),
            channel_id=str(channel_id),
            message_type=MessageType.TICKET,
            button_actions={f"{ticket_manager.CLOSE_PREFIX}ticket-{creator_id}-x": "close_ticket"},
            metadata={"ticket_id": f"ticket-{creator_id}-x", "creator_id": creator_id},
        ))

    async def test_owner_can_always_close(self, manager):
        assert await manager.can_close(1, OWNER_ID)
        assert not await manager.can_close(1, 42)

    async def test_existing_ticket_is_reported(self, manager, interaction):
        existing = make_channel(900)
        interaction.guild = make_guild(channel=existing)
        await self.add_ticket(manager)

        await manager.create_ticket(interaction)

        kwargs = interaction.response.send_message.call_args.kwargs
        assert kwargs["embed"].title == "🎫 Ticket Already Exists"
        assert existing.mention in kwargs["embed"].description
        assert kwargs["ephemeral"] is True
        interaction.guild.create_text_channel.assert_not_called()

    async def test_stale_ticket_record_is_dropped(self, manager, interaction):
        interaction.guild = make_guild(channel=None)
        interaction.guild.create_text_channel.return_value = make_channel(950)
        await self.add_ticket(manager)

        await manager.create_ticket(interaction)

        assert not await manager.button_messages.is_ticket_channel("900")
        interaction.guild.create_text_channel.assert_awaited_once()

    async def test_new_ticket_channel_is_private(self, manager, interaction, user_factory):
        owner = user_factory(user_id=OWNER_ID, name="owner")
        guild = make_guild()
        guild.get_member.return_value = owner
        channel = make_channel(900)
        guild.create_text_channel.return_value = channel
        interaction.guild = guild
        interaction.channel.category = None

        await manager.create_ticket(interaction)

        interaction.response.defer.assert_awaited_once_with(ephemeral=True, thinking=True)
        name = guild.create_text_channel.call_args.args[0]
        assert name.startswith("ticket-42-")

        overwrites = guild.create_text_channel.call_args.kwargs["overwrites"]
        assert overwrites[guild.default_role].view_channel is False
        assert overwrites[interaction.user].send_messages is True
        assert overwrites[guild.me].manage_channels is True
        assert overwrites[owner].view_channel is True

        view = channel.send.call_args.kwargs["view"]
        close_id = view.children[0].custom_id
        assert close_id == f"{ticket_manager.CLOSE_PREFIX}{name}"

        record = await manager.button_messages.get("901")
        assert record.button_actions == {close_id: "close_ticket"}
        assert record.metadata == {"ticket_id": name, "creator_id": "42"}
        assert interaction.followup.send.call_args.kwargs["embed"].title == "✅ Ticket Created"

    async def test_close_outside_ticket_channel(self, manager, interaction):
        interaction.channel.id = 1

        await manager.close_ticket(interaction)

        embed = interaction.response.send_message.call_args.kwargs["embed"]
        assert embed.title == "❌ Not a Ticket Channel"

    async def test_only_creator_or_owner_closes(self, manager, interaction_factory, user_factory):
        await self.add_ticket(manager)
        interaction = interaction_factory(user=user_factory(user_id=77, name="bob"))
        interaction.channel = make_channel(900)

        await manager.close_ticket(interaction)

        embed = interaction.response.send_message.call_args.kwargs["embed"]
        assert embed.title == "❌ Permission Denied"
        assert "bot owner" in embed.description
        assert await manager.button_messages.is_ticket_channel("900")

    async def test_close_deletes_channel_after_delay(self, manager, interaction):
        await self.add_ticket(manager)
        channel = make_channel(900)
        interaction.channel = channel
        manager.set_managed_timer = MagicMock()

        await manager.close_ticket(interaction)

        assert interaction.response.send_message.call_args.kwargs["embed"].title == "🗑️ Closing Ticket..."
        assert not await manager.button_messages.is_ticket_channel("900")

        name, callback, delay_ms = manager.set_managed_timer.call_args.args
        assert name == "ticket_delete_900"
        assert delay_ms == ticket_manager.CLOSE_DELAY_MS == 3000
        channel.delete.assert_not_called()

        await callback()
        channel.delete.assert_awaited_once_with(reason="Ticket closed")


class TestCommissionManager:
    @pytest.fixture
    def manager(self, client, store):
        manager = CommissionManager(client, ButtonMessageRepository(store))
        yield manager
        manager.cleanup()

    async def test_existing_commission_is_reported(self, manager, interaction):
        guild = make_guild()
        guild.text_channels = [make_channel(700, name="commission-alice-42")]
        interaction.guild = guild

        await manager.create_commission(interaction)

        kwargs = interaction.response.send_message.call_args.kwargs
        assert "<#700>" in kwargs["embed"].description
        assert kwargs["ephemeral"] is True
        guild.create_text_channel.assert_not_called()

    async def test_new_commission_channel(self, manager, interaction):
        guild = make_guild()
        channel = make_channel(700, name="commission-alice-42")
        guild.create_text_channel.return_value = channel
        interaction.guild = guild

        await manager.create_commission(interaction)

        assert guild.create_text_channel.call_args.args[0] == "commission-alice-42"
        overwrites = guild.create_text_channel.call_args.kwargs["overwrites"]
        assert overwrites[guild.default_role].view_channel is False
        assert overwrites[interaction.user].attach_files is True

        close_id = channel.send.call_args.kwargs["view"].children[0].custom_id
        assert close_id == f"{commission_manager.CLOSE_PREFIX}42"

        record = await manager.button_messages.get("701")
        assert record.message_type == MessageType.COMMISSION
        assert record.metadata == {"commission_creator": "42", "commission_creator_name": "alice"}

    async def test_close_outside_commission_channel(self, manager, interaction):
        interaction.channel = make_channel(1, name="general")

        await manager.close_commission(interaction)

        embed = interaction.response.send_message.call_args.kwargs["embed"]
        assert "commission channels" in embed.description
        assert interaction.response.send_message.call_args.kwargs["ephemeral"] is True

    async def test_members_cannot_close_others_commission(self, manager, interaction):
        channel = make_channel(700, name="commission-bob-77")
        channel.history = history_of()
        interaction.channel = channel
        manager.set_managed_timer = MagicMock()

        await manager.close_commission(interaction)

        embed = interaction.response.send_message.call_args.kwargs["embed"]
        assert "creator or an administrator" in embed.description
        channel.history.assert_not_called()
        manager.set_managed_timer.assert_not_called()

    async def test_admin_closes_by_channel_name(self, manager, interaction_factory, user_factory):
        interaction = interaction_factory(user=user_factory(user_id=5, name="mod", admin=True))
        channel = make_channel(700, name="commission-bob-77")
        channel.history = history_of()
        interaction.channel = channel
        manager.set_managed_timer = MagicMock()

        await manager.close_commission(interaction)

        assert interaction.response.send_message.call_args.kwargs["embed"].title == "🔒 Commission Closed"
        manager.set_managed_timer.assert_called_once()

    async def test_creator_close_drops_records_and_deletes(self, manager, interaction):
        repo = manager.button_messages
        await repo.add(ButtonMessage(
            message_id="701",
            channel_id="700",
            message_type=MessageType.COMMISSION,
            button_actions={f"{commission_manager.CLOSE_PREFIX}42": "close_commission"},
            metadata={"commission_creator": "42", "commission_creator_name": "alice"},
        ))
        await repo.add(ButtonMessage(message_id="801", channel_id="800", message_type=MessageType.GENERAL))

        channel = make_channel(700, name="commission-alicew-99")
        channel.history = history_of(705, 701)
        interaction.channel = channel
        manager.set_managed_timer = MagicMock()

        await manager.close_commission(interaction)

        channel.history.assert_called_once_with(limit=commission_manager.HISTORY_SCAN_LIMIT)
        assert commission_manager.HISTORY_SCAN_LIMIT == 50
        assert await repo.get("701") is None
        assert await repo.get("801") is not None

        name, callback, delay_ms = manager.set_managed_timer.call_args.args
        assert name == "commission_delete_700"
        assert delay_ms == commission_manager.CLOSE_DELAY_MS == 10000

        await callback()
        channel.delete.assert_awaited_once_with(reason="Commission closed")
