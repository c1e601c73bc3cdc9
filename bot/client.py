"""
Discord bot client setup using discord.py.
"""

import asyncio
import sys
from pathlib import Path
from typing import Optional

import discord
from discord.ext import commands

from ai.gemini_client import GeminiClient
from ai.prompts import OWNER_INFO_FILE, OwnerInfo
from bot.assets import ASSETS_FILE_NAME, AssetCatalog
from bot.config import config
from bot.keep_alive import run_server, stop_server, update_bot_status
from bot.storage import close_storage, init_storage
from repositories import (
    ButtonMessageRepository,
    ConversationRepository,
    FeedbackRepository,
    ReminderRepository,
)
from utils.error_handler import get_error_handler, setup_error_handler
from utils.logger import get_logger, set_default_level
from utils.monitoring import Monitoring

logger = get_logger("Client")

HOUSEKEEPING_INTERVAL_SECONDS = 6 * 3600
REMINDER_RETENTION_DAYS = 7
CONVERSATION_RETENTION_DAYS = 30


def build_intents() -> discord.Intents:
    intents = discord.Intents.default()
    intents.message_content = True
    intents.reactions = True
    intents.guilds = True
    return intents


class AssistantBot(commands.Bot):
    """Guild assistant bot client."""

    def __init__(self):
        super().__init__(
            command_prefix=commands.when_mentioned,
            help_command=None,
            intents=build_intents(),
        )

        self.monitoring = Monitoring(self)

        # Loaded in setup_hook
        self.assets: Optional[AssetCatalog] = None
        self.owner_info: Optional[OwnerInfo] = None
        self.gemini: Optional[GeminiClient] = None

        self.button_messages: Optional[ButtonMessageRepository] = None
        self.conversations: Optional[ConversationRepository] = None
        self.reminders: Optional[ReminderRepository] = None
        self.feedback: Optional[FeedbackRepository] = None

        self.event_handler = None
        self.ticket_manager = None
        self.commission_manager = None
        self.feedback_manager = None
        self.reminder_manager = None
        self.chat_manager = None

        self._housekeeping_task: Optional[asyncio.Task] = None

    async def setup_hook(self):
        """Called when bot is starting up."""
        logger.info("Setting up bot...")

        store = await init_storage(config.DATA_DIR)
        self.button_messages = ButtonMessageRepository(store)
        self.conversations = ConversationRepository(store)
        self.reminders = ReminderRepository(store)
        self.feedback = FeedbackRepository(store)

        data_dir = Path(config.DATA_DIR)
        self.assets = AssetCatalog.load(data_dir / ASSETS_FILE_NAME)
        self.owner_info = OwnerInfo.load(data_dir / OWNER_INFO_FILE)

        if config.GEMINI_API_KEY:
            self.gemini = GeminiClient(config.GEMINI_API_KEY, config.GEMINI_MODEL)
        else:
            logger.info("GEMINI_API_KEY not set, AI chat disabled")

        self._init_managers()
        self._register_components()

        await self.load_extension("commands.command_handler")
        await self._sync_commands()

        self.reminder_manager.start()
        self._housekeeping_task = asyncio.create_task(self._housekeeping_loop())

        logger.info("Bot setup complete")

    def _init_managers(self) -> None:
        from managers.chat_manager import ChatManager
        from managers.commission_manager import CommissionManager
        from managers.event_handler import EventHandler
        from managers.feedback_manager import FeedbackManager
        from managers.reminder_manager import ReminderManager
        from managers.ticket_manager import TicketManager

        self.event_handler = EventHandler(self)
        self.ticket_manager = TicketManager(self, self.button_messages)
        self.commission_manager = CommissionManager(self, self.button_messages)
        self.feedback_manager = FeedbackManager(self, self.feedback)
        self.reminder_manager = ReminderManager(self, self.reminders)
        self.chat_manager = ChatManager(self, self.conversations, self.gemini, self.owner_info, self.assets)

    def _register_components(self) -> None:
        from commands import help_command
        from managers import commission_manager, reminder_manager, ticket_manager

        events = self.event_handler
        events.register_component(help_command.SELECT_ID, help_command.handle_help_select)
        events.register_component(help_command.BACK_ID, help_command.handle_help_back)
        events.register_component(ticket_manager.CREATE_ID, self.ticket_manager.create_ticket)
        events.register_component(ticket_manager.CLOSE_PREFIX, self.ticket_manager.close_ticket, prefix=True)
        events.register_component(commission_manager.CREATE_ID, self.commission_manager.create_commission)
        events.register_component(commission_manager.CLOSE_PREFIX, self.commission_manager.close_commission, prefix=True)
        events.register_component(reminder_manager.STATUS_PREFIX, self.reminder_manager.handle_status_select, prefix=True)

    async def _sync_commands(self) -> None:
        try:
            if config.GUILD_ID:
                guild = discord.Object(id=config.GUILD_ID)
                self.tree.copy_global_to(guild=guild)
                synced = await self.tree.sync(guild=guild)
                logger.info(f"Synced {len(synced)} commands to guild {config.GUILD_ID}")
            else:
                synced = await self.tree.sync()
                logger.info(f"Synced {len(synced)} global commands")
        except discord.HTTPException as e:
            logger.error(f"Failed to sync commands: {e}")

    async def _housekeeping_loop(self) -> None:
        await self.wait_until_ready()
        while True:
            try:
                reminders = await self.reminders.clean_old(REMINDER_RETENTION_DAYS)
                conversations = await self.conversations.clean_old(CONVERSATION_RETENTION_DAYS)
                if reminders or conversations:
                    logger.info(f"Housekeeping removed {reminders} reminders and {conversations} conversations")
                get_error_handler().log_system_state()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                get_error_handler().handle_exception(e, "housekeeping")
            await asyncio.sleep(HOUSEKEEPING_INTERVAL_SECONDS)

    async def on_ready(self):
        """Called when bot is ready."""
        update_bot_status(
            status="ready",
            discord_connected=True,
            user=str(self.user),
            guilds=len(self.guilds),
        )

        logger.info(f"Connected as {self.user}")
        logger.info("Use /help to see available commands")

    async def on_disconnect(self):
        update_bot_status(discord_connected=False)

    async def on_resumed(self):
        update_bot_status(discord_connected=True)

    async def on_message(self, message: discord.Message):
        """Handle incoming messages."""
        if self.event_handler:
            await self.event_handler.handle_message(message)

    async def on_raw_reaction_add(self, payload: discord.RawReactionActionEvent):
        if self.event_handler:
            await self.event_handler.handle_reaction(payload)

    async def on_raw_reaction_remove(self, payload: discord.RawReactionActionEvent):
        if self.event_handler:
            await self.event_handler.handle_reaction(payload)

    async def on_interaction(self, interaction: discord.Interaction):
        """Route button and select presses; slash commands go through the tree."""
        if self.event_handler:
            await self.event_handler.handle_interaction(interaction)

    async def on_error(self, event_method: str, *args, **kwargs):
        error = sys.exc_info()[1]
        if error is not None:
            self.monitoring.record_error()
            get_error_handler().handle_exception(error, f"event:{event_method}")

    async def close(self):
        """Clean shutdown."""
        if self.is_closed():
            return
        logger.info("Shutting down bot...")

        if self._housekeeping_task:
            self._housekeeping_task.cancel()

        for manager in (
            self.ticket_manager,
            self.commission_manager,
            self.feedback_manager,
            self.chat_manager,
            self.event_handler,
        ):
            if manager:
                manager.cleanup()
        if self.reminder_manager:
            await self.reminder_manager.stop()
            self.reminder_manager.cleanup()

        await close_storage()
        get_error_handler().log_system_state()

        update_bot_status(status="offline", discord_connected=False)
        await super().close()


# Global bot instance
bot: Optional[AssistantBot] = None


def create_bot() -> AssistantBot:
    """Create and return bot instance."""
    global bot
    bot = AssistantBot()
    return bot


async def run_bot():
    """Run the bot."""
    global bot

    # Raises before login when required settings are missing
    config.validate()
    set_default_level(config.effective_log_level)

    bot = create_bot()
    setup_error_handler(on_shutdown=bot.close)

    try:
        if config.KEEP_ALIVE:
            await run_server()

        async with bot:
            await bot.start(config.DISCORD_TOKEN)
    except Exception as e:
        logger.error(f"Bot error: {e}")
        raise
    finally:
        await stop_server()
