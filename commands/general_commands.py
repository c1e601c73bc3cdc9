"""
General Commands
ping, info, hola, stats, images and the User Info context menu
"""

import math
from typing import Any, Dict

import discord

from bot.storage import get_store, is_connected
from utils.discord import COLORS, DiscordUtils
from utils.monitoring import Monitoring

PONG = "Pong!"
MAX_ROLES_SHOWN = 10


def _latency_ms(client: Any) -> int:
    latency = getattr(client, "latency", 0.0) or 0.0
    if math.isnan(latency) or math.isinf(latency):
        return 0
    return round(latency * 1000)


async def ping_command(interaction: discord.Interaction, options: Dict[str, Any], handler: Any) -> None:
    """Reply with Pong! and live latency, uptime and memory figures."""
    client = handler.bot
    monitoring = getattr(client, "monitoring", None)
    uptime = monitoring.uptime_seconds() if monitoring else 0

    embed = discord.Embed(title="🏓 Pong!", colour=COLORS["PRIMARY"])
    embed.add_field(name="📡 Latency", value=f"{_latency_ms(client)}ms", inline=True)
    embed.add_field(name="⏱️ Uptime", value=DiscordUtils.format_duration(uptime), inline=True)
    embed.add_field(name="💾 Memory", value=f"{Monitoring.get_memory_mb()}MB", inline=True)

    await interaction.response.send_message(PONG, embed=embed)


async def info_command(interaction: discord.Interaction, options: Dict[str, Any], handler: Any) -> None:
    embed = discord.Embed(
        title="ℹ️ Guild Assistant",
        description=(
            "A helper bot for this server: support tickets, commissions, feedback voting, "
            "scheduled reminders and an AI assistant channel.\n\n"
            "Use `/help` to see every command."
        ),
        colour=COLORS["PRIMARY"],
    )
    embed.add_field(name="🐍 Library", value=f"discord.py {discord.__version__}", inline=True)
    embed.add_field(name="🌐 Servers", value=str(len(handler.bot.guilds)), inline=True)
    await interaction.response.send_message(embed=embed)


async def hola_command(interaction: discord.Interaction, options: Dict[str, Any], handler: Any) -> None:
    await interaction.response.send_message(f"👋 Hola, {interaction.user.mention}! How can I help you today?")


async def stats_command(interaction: discord.Interaction, options: Dict[str, Any], handler: Any) -> None:
    """Show storage and usage counters."""
    client = handler.bot
    monitoring = getattr(client, "monitoring", None)

    embed = discord.Embed(title="📊 Bot Statistics", colour=COLORS["ACCENT"])

    if is_connected():
        stats = get_store().get_stats()
        embed.add_field(name="💬 Conversations", value=DiscordUtils.format_number(stats["conversations_count"]), inline=True)
        embed.add_field(name="📝 AI Messages", value=DiscordUtils.format_number(stats["total_messages"]), inline=True)
        embed.add_field(name="🔘 Button Messages", value=DiscordUtils.format_number(stats["button_messages_count"]), inline=True)
        embed.add_field(name="⏰ Reminders", value=DiscordUtils.format_number(stats["reminders_count"]), inline=True)
        embed.add_field(name="⭐ Feedback", value=DiscordUtils.format_number(stats["feedback_count"]), inline=True)
        if stats.get("last_updated"):
            embed.set_footer(text=f"Data last updated {stats['last_updated']}")
    else:
        embed.add_field(name="💾 Storage", value="Not loaded", inline=False)

    if monitoring:
        metrics = monitoring.metrics
        embed.add_field(
            name="⚡ Commands Executed",
            value=f"{DiscordUtils.format_number(metrics['commandsExecuted'])} ({monitoring.per_hour('commandsExecuted')}/hr)",
            inline=True,
        )
        embed.add_field(name="📨 Messages Processed", value=DiscordUtils.format_number(metrics["messagesProcessed"]), inline=True)
        embed.add_field(name="🤖 AI Replies", value=DiscordUtils.format_number(metrics["aiResponses"]), inline=True)
        embed.add_field(name="⚠️ Errors", value=DiscordUtils.format_number(metrics["errors"]), inline=True)
        embed.add_field(name="⏱️ Uptime", value=DiscordUtils.format_duration(monitoring.uptime_seconds()), inline=True)

        top = monitoring.top_commands()
        if top:
            embed.add_field(
                name="🏆 Top Commands",
                value="\n".join(f"`/{name}` × {count}" for name, count in top),
                inline=False,
            )

    await interaction.response.send_message(embed=embed)


async def images_command(interaction: discord.Interaction, options: Dict[str, Any], handler: Any) -> None:
    assets = handler.bot.assets
    lines = [
        f"**{category}**: {len(assets.list_images(category))} images"
        for category in assets.list_categories()
    ]

    embed = discord.Embed(
        title="🖼️ Image Gallery",
        description="\n".join(lines) or "No images configured.",
        colour=COLORS["ACCENT"],
    )
    embed.set_thumbnail(url=assets.get_random_avatar())
    embed.set_footer(text=f"{assets.total_images()} images in total")
    await interaction.response.send_message(embed=embed, ephemeral=True)


async def user_info_command(interaction: discord.Interaction, options: Dict[str, Any], handler: Any) -> None:
    """
    Show account details for a member, plus the stored AI summary.

    Args:
        interaction: Context menu interaction
        options: {"member": target user or member}
        handler: Command handler cog
    """
    member = options["member"]

    embed = discord.Embed(
        title=f"👤 {member.display_name}",
        colour=getattr(member, "colour", None) or COLORS["PRIMARY"],
    )
    embed.set_thumbnail(url=member.display_avatar.url)
    embed.add_field(name="🆔 User ID", value=str(member.id), inline=True)
    embed.add_field(name="📅 Account Created", value=DiscordUtils.format_timestamp(member.created_at, "F"), inline=True)

    joined_at = getattr(member, "joined_at", None)
    if joined_at:
        embed.add_field(name="📥 Joined Server", value=DiscordUtils.format_timestamp(joined_at, "F"), inline=True)

    # Skip @everyone, highest first
    roles = [role for role in reversed(getattr(member, "roles", [])[1:])]
    if roles:
        shown = " ".join(role.mention for role in roles[:MAX_ROLES_SHOWN])
        if len(roles) > MAX_ROLES_SHOWN:
            shown += f" (+{len(roles) - MAX_ROLES_SHOWN} more)"
        embed.add_field(name=f"🎭 Roles ({len(roles)})", value=shown, inline=False)

    conversations = getattr(handler.bot, "conversations", None)
    context = await conversations.get_context(str(member.id)) if conversations else None
    if context and context.has_summary():
        embed.add_field(name="🤖 AI Summary", value=context.user_summary[:1024], inline=False)

    await interaction.response.send_message(embed=embed, ephemeral=True)
