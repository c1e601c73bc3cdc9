"""
Help Command
Shows available commands and command details
"""

from typing import Any, Dict, Optional, Tuple

import discord

from commands.command_registry import registry
from utils.discord import COLORS, ComponentRow

SELECT_ID = "help_select"
BACK_ID = "help_back"

# Entries offered in the dropdown, looked up by name or alias
HELP_ENTRIES = ("ping", "info", "hello", "stats", "images", "userinfo", "purge", "reminder")


def _short_usage(cmd: Any) -> str:
    if cmd.usage.startswith("/"):
        return f"/{cmd.name}"
    return cmd.usage


def build_overview() -> Tuple[discord.Embed, discord.ui.View]:
    """Help overview embed with the command dropdown."""
    embed = discord.Embed(
        title="📖 Guild Assistant Help",
        description="Pick a command from the menu below for details.",
        colour=COLORS["PRIMARY"],
    )

    for category in registry.get_categories():
        commands = registry.get_by_category(category)
        if not commands:
            continue
        icon = registry._get_category_icon(category)
        embed.add_field(
            name=f"{icon} {category}",
            value="\n".join(f"`{_short_usage(cmd)}` - {cmd.description}" for cmd in commands),
            inline=False,
        )
    embed.set_footer(text="Guild Assistant • /help")

    options = []
    for entry in HELP_ENTRIES:
        cmd = registry.get(entry)
        if not cmd:
            continue
        options.append(discord.SelectOption(
            label=entry,
            value=entry,
            description=cmd.description[:100],
            emoji=cmd.emoji or None,
        ))

    view = ComponentRow()
    if options:
        view.add_item(discord.ui.Select(
            custom_id=SELECT_ID,
            placeholder="Choose a command to learn more...",
            options=options,
        ))
    return embed, view


def build_command_detail(name: str) -> Optional[Tuple[discord.Embed, discord.ui.View]]:
    """
    Detail embed for one command, with a button back to the overview.

    Returns:
        (embed, view) or None if the command is unknown
    """
    cmd = registry.get(name)
    if not cmd:
        return None

    embed = discord.Embed(
        title=f"{cmd.emoji or '📖'} /{cmd.name}",
        description=cmd.description,
        colour=COLORS["ACCENT"],
    )
    embed.add_field(name="📝 Usage", value=f"`{cmd.usage}`", inline=False)
    embed.add_field(name="📖 Details", value=cmd.details, inline=False)
    if cmd.admin_only:
        embed.add_field(name="🔒 Permissions", value="Administrator only", inline=False)

    view = ComponentRow(discord.ui.Button(
        label="← Back to Help Menu",
        style=discord.ButtonStyle.secondary,
        custom_id=BACK_ID,
    ))
    return embed, view


async def help_command(interaction: discord.Interaction, options: Dict[str, Any], handler: Any) -> None:
    name = options.get("command")
    if name:
        text = registry.generate_command_help(name)
        await interaction.response.send_message(text or f"❌ Unknown command: `{name}`", ephemeral=True)
        return

    embed, view = build_overview()
    await interaction.response.send_message(embed=embed, view=view)


async def handle_help_select(interaction: discord.Interaction, custom_id: str) -> None:
    """Show the details of the command picked in the dropdown."""
    values = (interaction.data or {}).get("values") or []
    detail = build_command_detail(values[0]) if values else None
    if detail is None:
        await interaction.response.send_message("❌ Unknown command.", ephemeral=True)
        return

    embed, view = detail
    await interaction.response.edit_message(embed=embed, view=view)


async def handle_help_back(interaction: discord.Interaction, custom_id: str) -> None:
    embed, view = build_overview()
    await interaction.response.edit_message(embed=embed, view=view)
