"""
Commission Manager
Private commission channels opened from a panel button
"""

import re
from typing import Any, Optional

import discord

from bot.config import config
from managers.base_manager import BaseManager
from repositories.button_message_repository import ButtonMessageRepository
from repositories.models import ButtonMessage, MessageType
from utils.discord import COLORS, ComponentRow, DiscordUtils

CREATE_ID = "commission_create"
CLOSE_PREFIX = "commission_close_"
CHANNEL_PREFIX = "commission-"

CLOSE_DELAY_MS = 10000
HISTORY_SCAN_LIMIT = 50


def commission_channel_name(username: str, user_id: int) -> str:
    """Channel name for a user's commission."""
    slug = re.sub(r"[^a-z0-9_-]", "", username.lower()) or "user"
    return f"{CHANNEL_PREFIX}{slug}-{user_id}"


def creator_from_channel_name(name: str) -> Optional[str]:
    """Read the creator id back from a commission channel name."""
    if not name.startswith(CHANNEL_PREFIX):
        return None
    suffix = name.rsplit("-", 1)[-1]
    return suffix if suffix.isdigit() else None


class CommissionManager(BaseManager):
    """Creates and closes commission channels."""

    def __init__(self, client: Any, button_messages: ButtonMessageRepository):
        super().__init__(client, "Commission")
        self.button_messages = button_messages
        self.set_channel(config.COMMISSION_CHANNEL_ID)

    def build_panel(self) -> tuple:
        embed = discord.Embed(
            title="💼 Commissions",
            description=(
                "Interested in a custom bot, website or design? Press the button below to open "
                "a private channel and tell us about your project."
            ),
            colour=COLORS["PRIMARY"],
        )
        embed.add_field(
            name="📋 What to include",
            value="• What you need\n• Deadline\n• Budget range\n• Any references",
            inline=False,
        )
        embed.set_footer(text="Commission System")

        view = ComponentRow(discord.ui.Button(
            label="💼 Request Commission",
            style=discord.ButtonStyle.success,
            custom_id=CREATE_ID,
        ))
        return embed, view

    async def post_panel(self, channel: discord.abc.Messageable) -> discord.Message:
        embed, view = self.build_panel()
        message = await channel.send(embed=embed, view=view)
        self.success(f"Commission panel posted in {getattr(channel, 'id', '?')}")
        return message

    @staticmethod
    def find_existing_channel(guild: discord.Guild, user_id: int) -> Optional[discord.TextChannel]:
        suffix = f"-{user_id}"
        for channel in guild.text_channels:
            if channel.name.startswith(CHANNEL_PREFIX) and channel.name.endswith(suffix):
                return channel
        return None

    async def create_commission(self, interaction: discord.Interaction, custom_id: str = CREATE_ID) -> None:
        """Handle the create button."""
        guild = interaction.guild
        user = interaction.user
        if guild is None:
            await interaction.response.send_message("❌ Commissions can only be requested in a server.", ephemeral=True)
            return

        existing = self.find_existing_channel(guild, user.id)
        if existing is not None:
            await interaction.response.send_message(
                embed=discord.Embed(
                    title="💼 Commissions",
                    description=f"You already have an open commission channel: {existing.mention}",
                    colour=COLORS["WARNING"],
                ).set_footer(text="Commission System"),
                ephemeral=True,
            )
            return

        await interaction.response.defer(ephemeral=True, thinking=True)

        overwrites = {
            guild.default_role: discord.PermissionOverwrite(view_channel=False),
            user: discord.PermissionOverwrite(view_channel=True, send_messages=True, attach_files=True, read_message_history=True),
            guild.me: discord.PermissionOverwrite(
                view_channel=True, send_messages=True, manage_channels=True, read_message_history=True
            ),
        }

        try:
            channel = await guild.create_text_channel(
                commission_channel_name(user.name, user.id),
                overwrites=overwrites,
                category=getattr(interaction.channel, "category", None),
                topic=f"Commission requested by {user.name}",
                reason=f"Commission opened by {user}",
            )
        except discord.HTTPException as e:
            self.error(f"Failed to create commission channel: {e}")
            await interaction.followup.send(
                embed=DiscordUtils.error_embed("💼 Commissions", f"Failed to create commission channel: {e}"),
                ephemeral=True,
            )
            return

        welcome = discord.Embed(
            title="👋 Welcome to your commission channel",
            description=(
                f"Hi {user.mention}! Tell us what you have in mind and we'll get back to you soon.\n"
                "Use the button below or `/commission_close` when you're done."
            ),
            colour=COLORS["SUCCESS"],
        )
        welcome.add_field(name="👤 Client", value=user.mention, inline=True)
        welcome.add_field(name="🕒 Opened", value=DiscordUtils.format_timestamp(discord.utils.utcnow(), "F"), inline=True)
        welcome.set_footer(text=f"Commission for {user.name}")

        close_id = f"{CLOSE_PREFIX}{user.id}"
        view = ComponentRow(discord.ui.Button(label="🔒 Close Commission", style=discord.ButtonStyle.danger, custom_id=close_id))

        message = await channel.send(embed=welcome, view=view)
        await self.button_messages.add(ButtonMessage(
            message_id=str(message.id),
            channel_id=str(channel.id),
            message_type=MessageType.COMMISSION,
            button_actions={close_id: "close_commission"},
            metadata={"commission_creator": str(user.id), "commission_creator_name": user.name},
        ))

        self.success(f"Commission channel {channel.name} created")
        await interaction.followup.send(
            embed=discord.Embed(
                title="✅ Commission Channel Created!",
                description=f"Your private commission channel has been created: {channel.mention}",
                colour=COLORS["SUCCESS"],
            ).set_footer(text="Commission System"),
            ephemeral=True,
        )

    async def get_creator(self, channel: Any) -> Optional[str]:
        creator = await self.button_messages.get_commission_creator(str(channel.id))
        return creator or creator_from_channel_name(channel.name)

    async def close_commission(self, interaction: discord.Interaction, custom_id: str = "") -> None:
        """Handle the close button and the /commission_close command."""
        channel = interaction.channel
        name = getattr(channel, "name", "") or ""
        if not name.startswith(CHANNEL_PREFIX):
            await interaction.response.send_message(
                embed=DiscordUtils.error_embed("🔒 Commission Closed", "This command can only be used in commission channels."),
                ephemeral=True,
            )
            return

        creator = await self.get_creator(channel)
        member = interaction.user
        if str(member.id) != creator and not DiscordUtils.is_admin(member):
            await interaction.response.send_message(
                embed=DiscordUtils.error_embed(
                    "🔒 Commission Closed",
                    "Only the commission creator or an administrator can close this channel.",
                ),
                ephemeral=True,
            )
            return

        closed = discord.Embed(
            title="🔒 Commission Closed",
            description="This commission is closed and the channel will be deleted in 10 seconds.",
            colour=COLORS["NOTICE"],
        )
        closed.add_field(name="Closed by", value=member.mention, inline=True)
        closed.add_field(name="Closed at", value=DiscordUtils.format_timestamp(discord.utils.utcnow(), "F"), inline=True)
        closed.add_field(name="Contact", value="Open a new commission any time from the commission panel.", inline=False)
        closed.set_footer(text="Commission System")
        await interaction.response.send_message(embed=closed)

        message_ids = [str(message.id) async for message in channel.history(limit=HISTORY_SCAN_LIMIT)]
        await self.button_messages.remove_messages(message_ids)
        await self.button_messages.remove_channel(str(channel.id))

        self.info(f"Commission channel {name} closed by {member}")
        self.set_managed_timer(
            f"commission_delete_{channel.id}",
            lambda: self._delete_channel(channel),
            CLOSE_DELAY_MS,
        )

    async def _delete_channel(self, channel: Any) -> None:
        try:
            await channel.delete(reason="Commission closed")
        except discord.HTTPException as e:
            self.error(f"Failed to delete commission channel {channel.id}: {e}")
