"""
Support Commands
Panel setup and close commands for tickets, commissions and feedback
"""

from typing import Any, Dict, Optional

import discord

from bot.config import config
from utils.discord import COLORS, DiscordUtils


async def _configured_channel(interaction: discord.Interaction, handler: Any, channel_id: Optional[int], label: str) -> Optional[Any]:
    """Defer the reply, then look up the channel a panel is posted in."""
    await interaction.response.defer(ephemeral=True, thinking=True)

    channel = await DiscordUtils.get_channel(handler.bot, channel_id)
    if channel is None:
        await interaction.followup.send(
            embed=DiscordUtils.error_embed(
                "❌ Channel Not Configured",
                f"The {label} channel is not configured or I can't see it.",
            ),
            ephemeral=True,
        )
    return channel


async def _confirm_posted(interaction: discord.Interaction, title: str, channel: Any) -> None:
    await interaction.followup.send(
        embed=discord.Embed(
            title=title,
            description=f"Posted in {channel.mention}.",
            colour=COLORS["SUCCESS"],
        ),
        ephemeral=True,
    )


async def ticket_setup_command(interaction: discord.Interaction, options: Dict[str, Any], handler: Any) -> None:
    channel = await _configured_channel(interaction, handler, config.TICKET_CHANNEL_ID, "ticket")
    if channel is None:
        return
    await handler.bot.ticket_manager.post_panel(channel)
    await _confirm_posted(interaction, "✅ Ticket Panel Posted", channel)


async def ticket_close_command(interaction: discord.Interaction, options: Dict[str, Any], handler: Any) -> None:
    await handler.bot.ticket_manager.close_ticket(interaction)


async def commission_setup_command(interaction: discord.Interaction, options: Dict[str, Any], handler: Any) -> None:
    channel = await _configured_channel(interaction, handler, config.COMMISSION_CHANNEL_ID, "commission")
    if channel is None:
        return
    await handler.bot.commission_manager.post_panel(channel)
    await _confirm_posted(interaction, "✅ Commission Panel Posted", channel)


async def commission_close_command(interaction: discord.Interaction, options: Dict[str, Any], handler: Any) -> None:
    await handler.bot.commission_manager.close_commission(interaction)


async def feedback_setup_command(interaction: discord.Interaction, options: Dict[str, Any], handler: Any) -> None:
    channel = await _configured_channel(interaction, handler, config.FEEDBACK_CHANNEL_ID, "feedback")
    if channel is None:
        return
    await handler.bot.feedback_manager.post_setup(channel)
    await _confirm_posted(interaction, "✅ Feedback Info Posted", channel)
