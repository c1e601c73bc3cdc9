"""
Reminder Commands
Handles /reminder
"""

from typing import Any, Dict

import discord

from bot.config import config
from utils.discord import COLORS, DiscordUtils
from utils.validation import ValidationUtils

MAX_REMINDER_LENGTH = 1000


async def reminder_command(interaction: discord.Interaction, options: Dict[str, Any], handler: Any) -> None:
    """
    Schedule a reminder in the reminder channel.

    Args:
        interaction: Slash command interaction
        options: time, message, visibility, mention_type, has_status
        handler: Command handler cog
    """
    if not config.REMINDER_CHANNEL_ID:
        await interaction.response.send_message(
            embed=DiscordUtils.error_embed("❌ Reminders Disabled", "No reminder channel is configured."),
            ephemeral=True,
        )
        return

    duration = ValidationUtils.parse_duration(options.get("time"))
    if not duration:
        await interaction.response.send_message(
            embed=DiscordUtils.error_embed("❌ Invalid Time", duration.error),
            ephemeral=True,
        )
        return

    message = ValidationUtils.sanitize_input(options.get("message") or "")
    length = ValidationUtils.validate_message_length(message, MAX_REMINDER_LENGTH)
    if not message or not length:
        await interaction.response.send_message(
            embed=DiscordUtils.error_embed(
                "❌ Invalid Message",
                length.error or "The reminder message can't be empty.",
            ),
            ephemeral=True,
        )
        return

    reminder_options = ValidationUtils.validate_reminder_options(
        options.get("visibility"),
        options.get("mention_type"),
    )
    if not reminder_options:
        await interaction.response.send_message(
            embed=DiscordUtils.error_embed("❌ Invalid Options", reminder_options.error),
            ephemeral=True,
        )
        return

    visibility, mention_type = reminder_options.value
    reminder = await handler.bot.reminder_manager.create_reminder(
        interaction.user,
        message,
        duration.value,
        is_private=visibility == "private",
        mention_type=mention_type,
        has_status=bool(options.get("has_status")),
    )

    embed = discord.Embed(
        title="✅ Reminder Created",
        description=message,
        colour=COLORS["SUCCESS"],
    )
    embed.add_field(name="⏰ When", value=DiscordUtils.format_timestamp(reminder.reminder_time, "R"), inline=True)
    embed.add_field(name="📍 Channel", value=f"<#{reminder.channel_id}>", inline=True)
    embed.add_field(name="👁️ Visibility", value=visibility.capitalize(), inline=True)
    embed.add_field(name="🔔 Mention", value=mention_type.capitalize(), inline=True)
    embed.add_field(name="📌 Status Menu", value="Yes" if reminder.has_status else "No", inline=True)
    embed.set_footer(text=f"Reminder ID: {reminder.id}")
    await interaction.response.send_message(embed=embed, ephemeral=True)
