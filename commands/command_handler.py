"""
Command Handler
Slash command surface; every command is dispatched through the Command Registry
"""

from typing import Any, Optional

import discord
from discord import app_commands
from discord.ext import commands

from commands import general_commands, help_command, moderation_commands, reminder_commands, support_commands
from commands.command_registry import registry
from utils.discord import DiscordUtils
from utils.error_handler import get_error_handler
from utils.logger import get_logger


class CommandHandler(commands.Cog):
    """Registers slash commands and runs them."""

    def __init__(self, bot: commands.Bot):
        self.logger = get_logger("Command")
        self.bot = bot

        self.user_info_menu = app_commands.ContextMenu(name="User Info", callback=self._user_info_menu)

        self._register_commands()

    def _register_commands(self) -> None:
        """Register all commands to the registry."""
        # General
        registry.register(
            {
                "name": "ping",
                "description": "Check the bot's latency",
                "category": "General",
                "emoji": "🏓",
                "details": "Replies with Pong! and shows the gateway latency, uptime and memory usage.",
            },
            general_commands.ping_command,
        )

        registry.register(
            {
                "name": "info",
                "description": "About this bot",
                "category": "General",
                "emoji": "ℹ️",
                "details": "Shows what the bot does and which library it runs on.",
            },
            general_commands.info_command,
        )

        registry.register(
            {
                "name": "hola",
                "description": "Say hello",
                "category": "General",
                "aliases": ["hello"],
                "emoji": "👋",
                "details": "The bot greets you by name.",
            },
            general_commands.hola_command,
        )

        registry.register(
            {
                "name": "help",
                "description": "List all commands",
                "category": "General",
                "emoji": "📖",
                "args": [{"name": "command", "description": "Command to explain", "required": False}],
                "examples": ["/help", "/help command:reminder"],
                "details": "Shows this menu. Pick a command from the dropdown for its details.",
            },
            help_command.help_command,
        )

        # Utility
        registry.register(
            {
                "name": "stats",
                "description": "Show bot statistics",
                "category": "Utility",
                "emoji": "📊",
                "details": "Stored conversations, reminders and feedback plus how many commands have run.",
            },
            general_commands.stats_command,
        )

        registry.register(
            {
                "name": "images",
                "description": "Browse the image gallery",
                "category": "Utility",
                "emoji": "🖼️",
                "details": "Lists the image categories used by the AI assistant and how many images each has.",
            },
            general_commands.images_command,
        )

        registry.register(
            {
                "name": "userinfo",
                "description": "Show information about a member",
                "category": "Utility",
                "aliases": ["user info"],
                "emoji": "👤",
                "usage": "Right-click a user → Apps → User Info",
                "details": (
                    "Shows the account ID, creation date, server join date and up to 10 roles. "
                    "If the AI assistant knows the user, its summary is shown too."
                ),
                "guild_only": True,
            },
            general_commands.user_info_command,
        )

        registry.register(
            {
                "name": "reminder",
                "description": "Schedule a reminder",
                "category": "Utility",
                "emoji": "⏰",
                "args": [
                    {"name": "time", "description": "Delay such as 30s, 5m, 2h or 1d", "required": True},
                    {"name": "message", "description": "What to remind about", "required": True},
                    {"name": "visibility", "description": "public or private", "required": False},
                    {"name": "mention_type", "description": "none, creator or everyone", "required": False},
                    {"name": "has_status", "description": "Add a status dropdown", "required": False},
                ],
                "examples": ["/reminder time:2h message:Stand-up meeting", "/reminder time:1d message:Deploy visibility:private"],
                "usage": "/reminder time:<30s|5m|2h|1d> message:<text> [visibility] [mention_type] [has_status]",
                "details": (
                    "Posts the reminder in the reminder channel when the time is up (checked every minute). "
                    "Private reminders always mention you. The status dropdown lets anyone mark the task as "
                    "confirmed, created, completed, cancelled or failed. Maximum 365 days."
                ),
                "guild_only": True,
                "admin_only": True,
            },
            reminder_commands.reminder_command,
        )

        # Moderation
        registry.register(
            {
                "name": "purge",
                "description": "Bulk-delete recent messages",
                "category": "Moderation",
                "emoji": "🧹",
                "args": [{"name": "amount", "description": "Number of messages (1-100)", "required": True}],
                "examples": ["/purge amount:20"],
                "usage": "/purge amount:<1-100>",
                "details": "Deletes up to 100 recent messages in this channel. Requires Manage Messages.",
                "guild_only": True,
            },
            moderation_commands.purge_command,
        )

        # Support
        registry.register(
            {
                "name": "ticket_setup",
                "description": "Post the support ticket panel",
                "category": "Support",
                "emoji": "🎫",
                "guild_only": True,
                "admin_only": True,
            },
            support_commands.ticket_setup_command,
        )

        registry.register(
            {
                "name": "ticket_close",
                "description": "Close the current ticket",
                "category": "Support",
                "emoji": "🗑️",
                "details": "Only the ticket creator or the bot owner can close a ticket.",
                "guild_only": True,
            },
            support_commands.ticket_close_command,
        )

        registry.register(
            {
                "name": "commission_setup",
                "description": "Post the commission panel",
                "category": "Support",
                "emoji": "💼",
                "guild_only": True,
                "admin_only": True,
            },
            support_commands.commission_setup_command,
        )

        registry.register(
            {
                "name": "commission_close",
                "description": "Close the current commission",
                "category": "Support",
                "emoji": "🔒",
                "details": "Only the commission creator or an administrator can close a commission.",
                "guild_only": True,
            },
            support_commands.commission_close_command,
        )

        # Community
        registry.register(
            {
                "name": "feedback_setup",
                "description": "Post the feedback channel info",
                "category": "Community",
                "emoji": "💬",
                "guild_only": True,
                "admin_only": True,
            },
            support_commands.feedback_setup_command,
        )

    async def cog_load(self) -> None:
        self.bot.tree.add_command(self.user_info_menu)

    async def cog_unload(self) -> None:
        self.bot.tree.remove_command(self.user_info_menu.name, type=self.user_info_menu.type)

    async def dispatch(self, name: str, interaction: discord.Interaction, **options: Any) -> None:
        """
        Run a registered command.

        Args:
            name: Command name or alias
            interaction: Slash command interaction
            **options: Command options
        """
        command = registry.get(name)
        if not command:
            self.logger.warning(f"Unknown command: {name}")
            return

        if command.guild_only and interaction.guild is None:
            await interaction.response.send_message("❌ This command must be used in a server", ephemeral=True)
            return

        if command.admin_only and not DiscordUtils.is_admin(interaction.user):
            await interaction.response.send_message(
                embed=DiscordUtils.error_embed("❌ Permission Denied", "Only administrators can use this command."),
                ephemeral=True,
            )
            return

        context = f"command:{command.name}"
        errors = get_error_handler()
        if errors.is_circuit_broken(context):
            await interaction.response.send_message(
                "⏳ This command is failing repeatedly and is paused for a minute. Please try again later.",
                ephemeral=True,
            )
            return

        monitoring = getattr(self.bot, "monitoring", None)
        try:
            self.logger.debug(f"Executing: {command.name} ({interaction.user})")
            if monitoring:
                monitoring.record_command(command.name)
            await command.handler(interaction, options, self)
        except Exception as error:
            if monitoring:
                monitoring.record_error()
            await errors.report_interaction_error(interaction, error, context)

    # General

    @app_commands.command(name="ping", description="Check the bot's latency")
    async def ping(self, interaction: discord.Interaction) -> None:
        await self.dispatch("ping", interaction)

    @app_commands.command(name="info", description="About this bot")
    async def info(self, interaction: discord.Interaction) -> None:
        await self.dispatch("info", interaction)

    @app_commands.command(name="hola", description="Say hello")
    async def hola(self, interaction: discord.Interaction) -> None:
        await self.dispatch("hola", interaction)

    @app_commands.command(name="help", description="List all commands")
    @app_commands.describe(command="Show the full usage of one command")
    async def help_menu(self, interaction: discord.Interaction, command: Optional[str] = None) -> None:
        await self.dispatch("help", interaction, command=command)

    # Utility

    @app_commands.command(name="stats", description="Show bot statistics")
    async def stats(self, interaction: discord.Interaction) -> None:
        await self.dispatch("stats", interaction)

    @app_commands.command(name="images", description="Browse the image gallery")
    async def images(self, interaction: discord.Interaction) -> None:
        await self.dispatch("images", interaction)

    @app_commands.command(name="reminder", description="Schedule a reminder")
    @app_commands.describe(
        time="Delay such as 30s, 5m, 2h or 1d",
        message="What to remind about",
        visibility="Who the reminder is for",
        mention_type="Who gets pinged when it fires",
        has_status="Add a status dropdown to the reminder",
    )
    @app_commands.choices(
        visibility=[
            app_commands.Choice(name="Public", value="public"),
            app_commands.Choice(name="Private", value="private"),
        ],
        mention_type=[
            app_commands.Choice(name="None", value="none"),
            app_commands.Choice(name="Creator", value="creator"),
            app_commands.Choice(name="Everyone", value="everyone"),
        ],
    )
    @app_commands.default_permissions(administrator=True)
    @app_commands.guild_only()
    async def reminder(
        self,
        interaction: discord.Interaction,
        time: str,
        message: str,
        visibility: Optional[app_commands.Choice[str]] = None,
        mention_type: Optional[app_commands.Choice[str]] = None,
        has_status: bool = False,
    ) -> None:
        await self.dispatch(
            "reminder",
            interaction,
            time=time,
            message=message,
            visibility=visibility.value if visibility else None,
            mention_type=mention_type.value if mention_type else None,
            has_status=has_status,
        )

    async def _user_info_menu(self, interaction: discord.Interaction, member: discord.Member) -> None:
        await self.dispatch("userinfo", interaction, member=member)

    # Moderation

    @app_commands.command(name="purge", description="Bulk-delete recent messages")
    @app_commands.describe(amount="Number of messages to delete (1-100)")
    @app_commands.default_permissions(manage_messages=True)
    @app_commands.guild_only()
    async def purge(self, interaction: discord.Interaction, amount: int) -> None:
        await self.dispatch("purge", interaction, amount=amount)

    # Support

    @app_commands.command(name="ticket_setup", description="Post the support ticket panel")
    @app_commands.default_permissions(administrator=True)
    @app_commands.guild_only()
    async def ticket_setup(self, interaction: discord.Interaction) -> None:
        await self.dispatch("ticket_setup", interaction)

    @app_commands.command(name="ticket_close", description="Close the current ticket")
    @app_commands.guild_only()
    async def ticket_close(self, interaction: discord.Interaction) -> None:
        await self.dispatch("ticket_close", interaction)

    @app_commands.command(name="commission_setup", description="Post the commission panel")
    @app_commands.default_permissions(administrator=True)
    @app_commands.guild_only()
    async def commission_setup(self, interaction: discord.Interaction) -> None:
        await self.dispatch("commission_setup", interaction)

    @app_commands.command(name="commission_close", description="Close the current commission")
    @app_commands.guild_only()
    async def commission_close(self, interaction: discord.Interaction) -> None:
        await self.dispatch("commission_close", interaction)

    # Community

    @app_commands.command(name="feedback_setup", description="Post the feedback channel info")
    @app_commands.default_permissions(administrator=True)
    @app_commands.guild_only()
    async def feedback_setup(self, interaction: discord.Interaction) -> None:
        await self.dispatch("feedback_setup", interaction)


async def setup(bot: Any) -> None:
    await bot.add_cog(CommandHandler(bot))
