"""
Reminder Manager
Schedules reminders and delivers them from a background loop
"""

import asyncio
import uuid
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

import discord

from bot.config import config
from managers.base_manager import BaseManager
from repositories.models import Reminder, utcnow
from repositories.reminder_repository import ReminderRepository
from utils.discord import COLORS, ComponentRow, DiscordUtils

STATUS_PREFIX = "reminder_status_"
CHECK_INTERVAL_SECONDS = 60

# status value -> (option label, embed text, colour)
REMINDER_STATUSES: Dict[str, tuple] = {
    "confirmed": ("✅ Confirmed", "✅ **Confirmed** - Task has been confirmed and will be done", discord.Colour.green()),
    "created": ("⭐ Created", "⭐ **Created** - Task has been created/started", discord.Colour.gold()),
    "completed": ("🎉 Completed", "🎉 **Completed** - Task has been finished successfully", discord.Colour.from_rgb(0, 255, 127)),
    "cancelled": ("❌ Cancelled", "❌ **Cancelled** - Task has been cancelled", discord.Colour.dark_grey()),
    "failed": ("💥 Failed", "💥 **Failed** - Task failed to complete", discord.Colour.red()),
}

STATUS_PLACEHOLDER = "Select the status of this reminder..."
STATUS_FIELD = "📌 Status"


class ReminderManager(BaseManager):
    """Creates reminders and sends them when they are due."""

    def __init__(self, client: Any, reminders: ReminderRepository):
        super().__init__(client, "Reminder")
        self.reminders = reminders
        self.set_channel(config.REMINDER_CHANNEL_ID)
        self._loop_task: Optional[asyncio.Task] = None

    async def create_reminder(
        self,
        user: Any,
        message: str,
        delay: timedelta,
        is_private: bool = False,
        mention_type: str = "none",
        has_status: bool = False,
        channel_id: Optional[int] = None,
    ) -> Reminder:
        """
        Store a new reminder.

        Args:
            user: Creator (discord user or member)
            message: Reminder text
            delay: Time until delivery
            is_private: Always ping the creator
            mention_type: none, creator or everyone
            has_status: Attach the status dropdown on delivery
            channel_id: Delivery channel (default: configured reminder channel)

        Returns:
            Stored reminder
        """
        target = channel_id or self.channel_id
        if not target:
            raise ValueError("No reminder channel configured")

        reminder = Reminder(
            id=str(uuid.uuid4()),
            user_id=str(user.id),
            user_name=getattr(user, "display_name", None) or user.name,
            message=message,
            channel_id=str(target),
            reminder_time=utcnow() + delay,
            is_private=is_private,
            mention_type=mention_type,
            has_status=has_status,
        )
        await self.reminders.add(reminder)
        self.info(f"Reminder {reminder.id} scheduled for {reminder.reminder_time.isoformat()}")
        return reminder

    def start(self) -> None:
        """Start the delivery loop."""
        if self._loop_task and not self._loop_task.done():
            return
        self._loop_task = asyncio.create_task(self._run_loop())
        self.info(f"Reminder loop started (every {CHECK_INTERVAL_SECONDS}s)")

    async def stop(self) -> None:
        if self._loop_task and not self._loop_task.done():
            self._loop_task.cancel()
            try:
                await self._loop_task
            except asyncio.CancelledError:
                pass
        self._loop_task = None

    async def _run_loop(self) -> None:
        await self.client.wait_until_ready()
        while True:
            try:
                await self.check_reminders()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                self.error(f"Reminder check failed: {e}")
            await asyncio.sleep(CHECK_INTERVAL_SECONDS)

    async def check_reminders(self, now: Optional[datetime] = None) -> int:
        """
        Send every due reminder.

        Returns:
            Number of reminders delivered
        """
        delivered = 0
        for reminder in await self.reminders.get_pending(now):
            if await self.send_reminder(reminder):
                await self.reminders.mark_sent(reminder.id)
                delivered += 1
        if delivered:
            self.success(f"Delivered {delivered} reminder(s)")
        return delivered

    def build_reminder_embed(self, reminder: Reminder) -> discord.Embed:
        embed = discord.Embed(
            title="⏰ Reminder",
            description=reminder.message,
            colour=COLORS["NOTICE"],
            timestamp=reminder.reminder_time,
        )
        embed.add_field(name="👤 Created by", value=f"<@{reminder.user_id}>", inline=True)
        embed.add_field(name="🕒 Scheduled", value=DiscordUtils.format_timestamp(reminder.created_at, "R"), inline=True)
        if reminder.is_private:
            embed.add_field(name="🔒 Visibility", value="Private", inline=True)
        embed.set_footer(text=f"Reminder ID: {reminder.id}")
        return embed

    def build_status_view(self, reminder_id: str) -> discord.ui.View:
        return ComponentRow(discord.ui.Select(
            custom_id=f"{STATUS_PREFIX}{reminder_id}",
            placeholder=STATUS_PLACEHOLDER,
            options=[
                discord.SelectOption(label=label, value=value)
                for value, (label, _, _) in REMINDER_STATUSES.items()
            ],
        ))

    async def send_reminder(self, reminder: Reminder) -> bool:
        """
        Deliver one reminder to its channel.

        Returns:
            True if the message was sent
        """
        channel = self.client.get_channel(int(reminder.channel_id))
        try:
            if channel is None:
                channel = await self.client.fetch_channel(int(reminder.channel_id))

            kwargs: Dict[str, Any] = {
                "embed": self.build_reminder_embed(reminder),
                "allowed_mentions": discord.AllowedMentions(everyone=True, users=True, roles=False),
            }
            if reminder.has_status:
                kwargs["view"] = self.build_status_view(reminder.id)

            await channel.send(reminder.mention_content(), **kwargs)
        except discord.HTTPException as e:
            self.error(f"Failed to send reminder {reminder.id}: {e}")
            return False

        self.debug(f"Reminder {reminder.id} sent to {reminder.channel_id}")
        return True

    async def handle_status_select(self, interaction: discord.Interaction, custom_id: str) -> None:
        """Apply the chosen status to a delivered reminder and drop it."""
        reminder_id = custom_id[len(STATUS_PREFIX):]
        values = (interaction.data or {}).get("values") or []
        status = values[0] if values else ""
        if status not in REMINDER_STATUSES:
            await interaction.response.send_message("❌ Unknown reminder status.", ephemeral=True)
            return

        _, text, colour = REMINDER_STATUSES[status]
        source = interaction.message.embeds[0] if interaction.message and interaction.message.embeds else None
        embed = source.copy() if source else discord.Embed(title="⏰ Reminder")
        embed.colour = colour

        for index, field in enumerate(embed.fields):
            if field.name == STATUS_FIELD:
                embed.set_field_at(index, name=STATUS_FIELD, value=text, inline=False)
                break
        else:
            embed.add_field(name=STATUS_FIELD, value=text, inline=False)

        if status == "completed":
            embed.set_footer(text="Reminder completed • Thank you!")

        await interaction.response.edit_message(embed=embed, view=None)
        await self.reminders.remove(reminder_id)
        self.info(f"Reminder {reminder_id} marked {status} by {interaction.user}")

    def cleanup(self) -> None:
        if self._loop_task and not self._loop_task.done():
            self._loop_task.cancel()
        super().cleanup()
