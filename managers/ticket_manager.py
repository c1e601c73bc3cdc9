"""
Ticket Manager
Private support channels opened from a panel button
"""

import uuid
from typing import Any, Optional

import discord

from bot.config import config
from managers.base_manager import BaseManager
from repositories.button_message_repository import ButtonMessageRepository
from repositories.models import ButtonMessage, MessageType
from utils.discord import COLORS, ComponentRow, DiscordUtils

CREATE_ID = "ticket_create"
CLOSE_PREFIX = "ticket_close_"

CLOSE_DELAY_MS = 3000


def new_ticket_id(user_id: int) -> str:
    """Ticket id doubling as the channel name."""
    return f"ticket-{user_id}-{uuid.uuid4().hex[:8]}"


class TicketManager(BaseManager):
    """Creates and closes support tickets."""

    def __init__(self, client: Any, button_messages: ButtonMessageRepository):
        super().__init__(client, "Ticket")
        self.button_messages = button_messages
        self.set_channel(config.TICKET_CHANNEL_ID)

    def build_panel(self) -> tuple:
        """Panel embed and its create button."""
        embed = discord.Embed(
            title="🎫 Support Ticket System",
            description=(
                "Need help or have questions? Click the button below to create a private "
                "support ticket. Our team will assist you as soon as possible!"
            ),
            colour=COLORS["PRIMARY"],
        )
        embed.set_footer(text="Support Tickets")

        view = ComponentRow(discord.ui.Button(
            label="🎫 Create Ticket",
            style=discord.ButtonStyle.primary,
            custom_id=CREATE_ID,
        ))
        return embed, view

    async def post_panel(self, channel: discord.abc.Messageable) -> discord.Message:
        embed, view = self.build_panel()
        message = await channel.send(embed=embed, view=view)
        self.success(f"Ticket panel posted in {getattr(channel, 'id', '?')}")
        return message

    async def _find_open_ticket(self, guild: discord.Guild, user_id: int) -> Optional[discord.abc.GuildChannel]:
        """Return the user's live ticket channel, dropping records of deleted ones."""
        for record in await self.button_messages.get_user_active_tickets(str(user_id)):
            channel = guild.get_channel(int(record.channel_id))
            if channel is not None:
                return channel
            await self.button_messages.cleanup_ticket_data(record.channel_id)
        return None

    async def create_ticket(self, interaction: discord.Interaction, custom_id: str = CREATE_ID) -> None:
        """Handle the create button."""
        guild = interaction.guild
        user = interaction.user
        if guild is None:
            await interaction.response.send_message("❌ Tickets can only be created in a server.", ephemeral=True)
            return

        existing = await self._find_open_ticket(guild, user.id)
        if existing is not None:
            await interaction.response.send_message(
                embed=discord.Embed(
                    title="🎫 Ticket Already Exists",
                    description=f"You already have an active ticket channel: {existing.mention}",
                    colour=COLORS["WARNING"],
                ),
                ephemeral=True,
            )
            return

        await interaction.response.defer(ephemeral=True, thinking=True)

        ticket_id = new_ticket_id(user.id)
        overwrites = {
            guild.default_role: discord.PermissionOverwrite(view_channel=False),
            user: discord.PermissionOverwrite(view_channel=True, send_messages=True, read_message_history=True),
            guild.me: discord.PermissionOverwrite(
                view_channel=True, send_messages=True, manage_channels=True, read_message_history=True
            ),
        }
        owner = guild.get_member(config.owner_id)
        if owner is None:
            try:
                owner = await guild.fetch_member(config.owner_id)
            except discord.HTTPException:
                self.warning(f"Owner {config.owner_id} is not a member of {guild.name}")
        if owner is not None:
            overwrites[owner] = discord.PermissionOverwrite(view_channel=True, send_messages=True, read_message_history=True)

        category = getattr(interaction.channel, "category", None)
        try:
            channel = await guild.create_text_channel(
                ticket_id,
                overwrites=overwrites,
                category=category,
                topic=f"Support ticket for {user.name}",
                reason=f"Ticket opened by {user}",
            )
        except discord.HTTPException as e:
            self.error(f"Failed to create ticket channel: {e}")
            await interaction.followup.send(
                embed=DiscordUtils.error_embed("❌ Ticket Creation Failed", f"Failed to create ticket channel: {e}"),
                ephemeral=True,
            )
            return

        welcome = discord.Embed(
            title="🎫 Ticket Created Successfully",
            description=(
                f"Welcome {user.mention}! Describe your issue and the team will be with you shortly.\n"
                "Press the button below when your question has been resolved."
            ),
            colour=COLORS["SUCCESS"],
        )
        welcome.add_field(name="👤 Ticket Creator", value=user.mention, inline=True)
        welcome.add_field(name="🕒 Created", value=DiscordUtils.format_timestamp(discord.utils.utcnow(), "F"), inline=True)
        welcome.set_footer(text=f"Support Ticket • {ticket_id[:16]}")

        close_id = f"{CLOSE_PREFIX}{ticket_id}"
        view = ComponentRow(discord.ui.Button(label="🗑️ Close Ticket", style=discord.ButtonStyle.danger, custom_id=close_id))

        message = await channel.send(embed=welcome, view=view)
        await self.button_messages.add(ButtonMessage(
            message_id=str(message.id),
            channel_id=str(channel.id),
            message_type=MessageType.TICKET,
            button_actions={close_id: "close_ticket"},
            metadata={"ticket_id": ticket_id, "creator_id": str(user.id)},
        ))

        self.success(f"Ticket {ticket_id} created for {user}")
        await interaction.followup.send(
            embed=discord.Embed(
                title="✅ Ticket Created",
                description=f"Your ticket has been created: {channel.mention}",
                colour=COLORS["SUCCESS"],
            ),
            ephemeral=True,
        )

    async def can_close(self, channel_id: int, user_id: int) -> bool:
        if user_id == config.owner_id:
            return True
        return await self.button_messages.is_ticket_creator(str(channel_id), str(user_id))

    async def close_ticket(self, interaction: discord.Interaction, custom_id: str = "") -> None:
        """Handle the close button and the /ticket_close command."""
        channel = interaction.channel
        if channel is None or not await self.button_messages.is_ticket_channel(str(channel.id)):
            await interaction.response.send_message(
                embed=DiscordUtils.error_embed("❌ Not a Ticket Channel", "This command can only be used in ticket channels."),
                ephemeral=True,
            )
            return

        if not await self.can_close(channel.id, interaction.user.id):
            await interaction.response.send_message(
                embed=DiscordUtils.error_embed(
                    "❌ Permission Denied",
                    "You don't have permission to close this ticket. "
                    "Only the ticket creator or the bot owner can close tickets.",
                ),
                ephemeral=True,
            )
            return

        await interaction.response.send_message(embed=discord.Embed(
            title="🗑️ Closing Ticket...",
            description="This ticket is being closed. Thank you for using our support system!",
            colour=COLORS["NOTICE"],
        ))

        await self.button_messages.cleanup_ticket_data(str(channel.id))
        self.info(f"Ticket channel {channel.id} closed by {interaction.user}")
        self.set_managed_timer(
            f"ticket_delete_{channel.id}",
            lambda: self._delete_channel(channel),
            CLOSE_DELAY_MS,
        )

    async def _delete_channel(self, channel: Any) -> None:
        try:
            await channel.delete(reason="Ticket closed")
        except discord.HTTPException as e:
            self.error(f"Failed to delete ticket channel {channel.id}: {e}")
