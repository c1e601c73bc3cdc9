"""
Event Handler
Routes gateway events (messages, reactions, component interactions)
to the feature managers
"""

from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

import discord

from bot.config import config
from commands.command_registry import registry
from managers.base_manager import BaseManager
from utils.discord import DiscordUtils
from utils.error_handler import get_error_handler

ComponentHandler = Callable[[discord.Interaction, str], Awaitable[None]]


class EventHandler(BaseManager):
    """Dispatches inbound events to the managers that own them."""

    def __init__(self, client: Any):
        super().__init__(client, "Event")
        self._exact_routes: Dict[str, ComponentHandler] = {}
        self._prefix_routes: List[Tuple[str, ComponentHandler]] = []

    def register_component(self, custom_id: str, handler: ComponentHandler, prefix: bool = False) -> None:
        """
        Register a handler for a component custom_id.

        Args:
            custom_id: Exact id, or id prefix when prefix=True
            handler: Coroutine called with (interaction, custom_id)
            prefix: Match ids starting with custom_id
        """
        if prefix:
            self._prefix_routes.append((custom_id, handler))
            # Longest prefix wins
            self._prefix_routes.sort(key=lambda route: len(route[0]), reverse=True)
        else:
            self._exact_routes[custom_id] = handler
        self.debug(f"Registered component route: {custom_id}{'*' if prefix else ''}")

    def resolve_component(self, custom_id: str) -> Optional[ComponentHandler]:
        """
        Find the handler for a custom_id.

        Returns:
            Handler or None if the id is unknown
        """
        handler = self._exact_routes.get(custom_id)
        if handler:
            return handler
        for prefix, prefix_handler in self._prefix_routes:
            if custom_id.startswith(prefix):
                return prefix_handler
        return None

    async def handle_message(self, message: discord.Message) -> None:
        """
        Handle incoming message.

        Args:
            message: Discord message object
        """
        if not self.enabled or message.author.bot:
            return

        monitoring = getattr(self.client, "monitoring", None)
        if monitoring:
            monitoring.record_message()

        channel_id = message.channel.id

        feedback = getattr(self.client, "feedback_manager", None)
        if feedback and config.FEEDBACK_CHANNEL_ID and channel_id == config.FEEDBACK_CHANNEL_ID:
            await feedback.handle_message(message)
            return

        chat = getattr(self.client, "chat_manager", None)
        if chat and chat.should_process(message):
            await chat.handle_message(message)
            return

        if self.client.user is not None and self.client.user in message.mentions:
            await self.send_mention_help(message)

    async def send_mention_help(self, message: discord.Message) -> None:
        """Answer a bare mention with the plain-text command list."""
        await DiscordUtils.safe_send(message.channel, registry.generate_help())
        self.debug(f"Sent mention help to {message.author}")

    async def handle_reaction(self, payload: discord.RawReactionActionEvent) -> None:
        """Handle a raw reaction add/remove event."""
        if not self.enabled:
            return

        user = self.client.user
        if user is not None and payload.user_id == user.id:
            return
        if payload.member is not None and payload.member.bot:
            return

        feedback = getattr(self.client, "feedback_manager", None)
        if feedback:
            await feedback.handle_reaction(payload)

    async def handle_interaction(self, interaction: discord.Interaction) -> None:
        """
        Route a component interaction by its custom_id.

        Args:
            interaction: Discord interaction
        """
        if interaction.type != discord.InteractionType.component:
            return

        custom_id = (interaction.data or {}).get("custom_id", "")
        handler = self.resolve_component(custom_id)
        if handler is None:
            self.debug(f"Unhandled component: {custom_id}")
            return

        try:
            await handler(interaction, custom_id)
        except Exception as e:
            monitoring = getattr(self.client, "monitoring", None)
            if monitoring:
                monitoring.record_error()
            await get_error_handler().report_interaction_error(
                interaction,
                e,
                f"component:{custom_id.split('_')[0]}",
            )
