"""
Chat Manager
Answers messages in the AI chat channel with Gemini
"""

from typing import Any, Optional

import discord

from ai.errors import AIError, parse_error_message, user_friendly_error
from ai.gemini_client import GeminiClient
from ai.prompts import OwnerInfo, build_chat_prompt, build_summary_prompt
from ai.responses import AIResponse, parse_ai_response, parse_summary_analysis
from bot.assets import AssetCatalog
from bot.config import config
from managers.base_manager import BaseManager
from repositories.conversation_repository import ConversationRepository
from repositories.models import AIMessage, MessageRole
from utils.discord import COLORS, DiscordUtils

EMBED_DESCRIPTION_LIMIT = 4096


class ChatManager(BaseManager):
    """Gemini conversation in a single channel."""

    def __init__(
        self,
        client: Any,
        conversations: ConversationRepository,
        gemini: Optional[GeminiClient],
        owner_info: OwnerInfo,
        assets: AssetCatalog,
    ):
        super().__init__(client, "Chat")
        self.conversations = conversations
        self.gemini = gemini
        self.owner_info = owner_info
        self.assets = assets
        self.set_channel(config.AI_CHAT_CHANNEL_ID)
        self.set_enabled(gemini is not None and self.channel_id is not None)

    def should_process(self, message: discord.Message) -> bool:
        """Whether a message belongs to the AI conversation."""
        if not self.enabled or self.gemini is None:
            return False
        if message.author.bot or message.author.id == config.owner_id:
            return False
        if message.channel.id != self.channel_id:
            return False
        return bool((message.content or "").strip())

    def build_reply_embed(self, response: AIResponse) -> discord.Embed:
        emoji = response.emotion.emoji if response.emotion else "🤖"
        embed = discord.Embed(
            title=f"{emoji} AI Assistant",
            description=response.content[:EMBED_DESCRIPTION_LIMIT],
            colour=discord.Colour.from_rgb(*response.color),
        )
        fallback = response.emotion.image if response.emotion else None
        embed.set_thumbnail(url=self.assets.resolve_thumbnail(response.thumbnail, fallback))
        embed.set_footer(text=f"Assistant of {self.owner_info.name}")
        return embed

    async def handle_message(self, message: discord.Message) -> None:
        """
        Reply to a chat message and update the user's context.

        Args:
            message: Discord message in the AI channel
        """
        author = message.author
        user_id = str(author.id)

        try:
            async with message.channel.typing():
                # History before this message; the message itself ends the prompt
                context = await self.conversations.get_context(user_id)
                prompt = build_chat_prompt(message.content, self.owner_info, context, self.assets.emojis)

                await self.conversations.add_message(
                    user_id,
                    author.display_name,
                    AIMessage(
                        role=MessageRole.USER,
                        content=message.content,
                        channel_id=str(message.channel.id),
                        discord_message_id=str(message.id),
                    ),
                )

                raw = await self.gemini.generate_response(prompt)
                response = parse_ai_response(raw)

                reply = await message.reply(embed=self.build_reply_embed(response), mention_author=False)
        except AIError as e:
            self.error(f"AI reply failed for {author}: {parse_error_message(e)}")
            self._record_error()
            await DiscordUtils.safe_send(
                message.channel,
                embed=discord.Embed(
                    title="❌ AI Assistant",
                    description=user_friendly_error(e),
                    colour=COLORS["ERROR"],
                ),
            )
            return

        await self.conversations.add_message(
            user_id,
            author.display_name,
            AIMessage(
                role=MessageRole.ASSISTANT,
                content=response.content,
                channel_id=str(message.channel.id),
                discord_message_id=str(reply.id),
            ),
        )

        monitoring = getattr(self.client, "monitoring", None)
        if monitoring:
            monitoring.record_ai_response()

        if await self.conversations.increment_and_check(user_id):
            await self.refresh_summary(user_id)

    async def refresh_summary(self, user_id: str) -> bool:
        """
        Ask Gemini whether the stored user summary needs an update.

        Returns:
            True if a new summary was saved
        """
        context = await self.conversations.get_context(user_id)
        if context is None or context.is_empty():
            return False

        try:
            raw = await self.gemini.generate_response(build_summary_prompt(context))
        except AIError as e:
            self.warning(f"Summary analysis failed for {user_id}: {parse_error_message(e)}")
            return False

        summary = parse_summary_analysis(raw)
        if not summary:
            self.debug(f"Summary for {user_id} unchanged")
            return False

        await self.conversations.update_summary(user_id, summary)
        self.info(f"Updated summary for {context.user_name or user_id}")
        return True

    def _record_error(self) -> None:
        monitoring = getattr(self.client, "monitoring", None)
        if monitoring:
            monitoring.record_error()
