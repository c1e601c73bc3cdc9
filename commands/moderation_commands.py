"""
Moderation Commands
Handles /purge
"""

from typing import Any, Dict

import discord

from utils.discord import COLORS, DiscordUtils
from utils.logger import get_logger
from utils.validation import ValidationUtils

logger = get_logger("Moderation")


async def purge_command(interaction: discord.Interaction, options: Dict[str, Any], handler: Any) -> None:
    """
    Bulk-delete recent messages in the current channel.

    Args:
        interaction: Slash command interaction
        options: {"amount": number of messages, 1-100}
        handler: Command handler cog
    """
    if not DiscordUtils.can_manage_messages(interaction.user):
        await interaction.response.send_message(
            embed=DiscordUtils.error_embed("❌ Missing Permission", "You need the Manage Messages permission to use this command."),
            ephemeral=True,
        )
        return

    result = ValidationUtils.validate_purge_amount(options.get("amount"))
    if not result:
        await interaction.response.send_message(
            embed=DiscordUtils.error_embed("❌ Invalid Amount", result.error),
            ephemeral=True,
        )
        return

    channel = interaction.channel
    if not hasattr(channel, "purge"):
        await interaction.response.send_message(
            embed=DiscordUtils.error_embed("❌ Unsupported Channel", "Messages can't be purged in this channel."),
            ephemeral=True,
        )
        return

    await interaction.response.defer(ephemeral=True, thinking=True)

    try:
        deleted = await channel.purge(limit=result.value)
    except discord.Forbidden:
        await interaction.followup.send(
            embed=DiscordUtils.error_embed("❌ Missing Permission", "I don't have permission to delete messages here."),
            ephemeral=True,
        )
        return

    logger.info(f"{interaction.user} purged {len(deleted)} messages in #{getattr(channel, 'name', channel.id)}")
    await interaction.followup.send(
        embed=discord.Embed(
            title="🧹 Messages Deleted",
            description=f"Deleted **{len(deleted)}** message(s).",
            colour=COLORS["SUCCESS"],
        ),
        ephemeral=True,
    )
