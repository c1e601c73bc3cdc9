"""
Feedback Manager
Reposts feedback messages as embeds and keeps their vote rating current
"""

from typing import Any, Optional, Tuple

import discord

from bot.config import config
from managers.base_manager import BaseManager
from repositories.feedback_repository import FeedbackRepository
from repositories.models import FeedbackMessage
from utils.discord import COLORS, DEFAULT_AVATAR_URL, DiscordUtils
from utils.validation import ValidationUtils

UPVOTE = "⬆️"
DOWNVOTE = "⬇️"

RATING_FIELD = "⭐ Rating"
WARNING_DELETE_MS = 10000


def _normalize_emoji(emoji: Any) -> str:
    # Clients send the arrows with or without the variation selector
    return str(emoji).replace("\ufe0f", "")


def count_votes(reactions: Any) -> Tuple[int, int]:
    """
    Count up and down votes on a message, excluding the bot's own reaction.

    Returns:
        (upvotes, downvotes)
    """
    up = down = 0
    for reaction in reactions or []:
        key = _normalize_emoji(reaction.emoji)
        count = max(reaction.count - (1 if reaction.me else 0), 0)
        if key == _normalize_emoji(UPVOTE):
            up = count
        elif key == _normalize_emoji(DOWNVOTE):
            down = count
    return up, down


class FeedbackManager(BaseManager):
    """Handles the feedback channel."""

    def __init__(self, client: Any, feedback: FeedbackRepository):
        super().__init__(client, "Feedback")
        self.feedback = feedback
        self.set_channel(config.FEEDBACK_CHANNEL_ID)

    def build_setup_embed(self) -> discord.Embed:
        embed = discord.Embed(
            title="💬 Feedback",
            description="Share your ideas, suggestions and opinions in this channel!",
            colour=COLORS["PRIMARY"],
        )
        embed.add_field(
            name="📝 How it works",
            value=(
                "• Write your feedback as a normal message\n"
                "• It will be reposted as a card with your name\n"
                f"• Everyone can vote with {UPVOTE} and {DOWNVOTE}"
            ),
            inline=False,
        )
        embed.add_field(
            name="⚠️ Rules",
            value="Be respectful. Spam, scams and abuse are removed automatically.",
            inline=False,
        )
        embed.set_footer(text="Feedback System")
        return embed

    async def post_setup(self, channel: discord.abc.Messageable) -> discord.Message:
        message = await channel.send(embed=self.build_setup_embed())
        self.success(f"Feedback info posted in {getattr(channel, 'id', '?')}")
        return message

    def build_feedback_embed(self, record: FeedbackMessage) -> discord.Embed:
        embed = discord.Embed(
            title="💬 Feedback",
            description=record.content,
            colour=COLORS["ACCENT"],
            timestamp=record.created_at,
        )
        embed.set_author(name=record.original_author_name, icon_url=record.original_author_avatar or DEFAULT_AVATAR_URL)
        embed.add_field(name=RATING_FIELD, value=record.star_rating(), inline=False)
        return embed

    async def handle_message(self, message: discord.Message) -> None:
        """Filter or repost a message sent to the feedback channel."""
        content = message.content or ""

        bad_word = ValidationUtils.find_filtered_word(content)
        if bad_word:
            self.warning(f"Filtered feedback from {message.author} ({bad_word})")
            await DiscordUtils.safe_delete(message)
            warning = await DiscordUtils.safe_send(
                message.channel,
                embed=discord.Embed(
                    title="⚠️ Message Removed",
                    description=f"{message.author.mention}, your message contained inappropriate content and was removed.",
                    colour=COLORS["WARNING"],
                ),
            )
            if warning:
                self.set_managed_timer(
                    f"feedback_warning_{warning.id}",
                    lambda: DiscordUtils.safe_delete(warning),
                    WARNING_DELETE_MS,
                )
            return

        if not content.strip():
            return

        await DiscordUtils.safe_delete(message)

        author = message.author
        avatar = author.display_avatar.url if getattr(author, "display_avatar", None) else DEFAULT_AVATAR_URL
        record = FeedbackMessage(
            message_id="",
            original_author_id=str(author.id),
            original_author_name=author.display_name,
            original_author_avatar=avatar,
            content=content[:4000],
            channel_id=str(message.channel.id),
        )

        repost = await message.channel.send(embed=self.build_feedback_embed(record))
        record.message_id = str(repost.id)

        embed = self.build_feedback_embed(record)
        embed.set_footer(text=f"Feedback • ID: {repost.id}")
        await repost.edit(embed=embed)

        await repost.add_reaction(UPVOTE)
        await repost.add_reaction(DOWNVOTE)

        await self.feedback.add(record)
        self.info(f"Feedback from {author} reposted as {repost.id}")

    async def handle_reaction(self, payload: discord.RawReactionActionEvent) -> None:
        """Recount votes after a reaction was added or removed."""
        key = _normalize_emoji(payload.emoji)
        if key not in (_normalize_emoji(UPVOTE), _normalize_emoji(DOWNVOTE)):
            return

        record = await self.feedback.get(str(payload.message_id))
        if record is None:
            return

        message = await self._fetch_message(payload.channel_id, payload.message_id)
        if message is None:
            return

        up, down = count_votes(message.reactions)
        updated = await self.feedback.update_votes(record.message_id, up, down)
        if updated is None or not message.embeds:
            return

        embed = message.embeds[0]
        for index, field in enumerate(embed.fields):
            if field.name == RATING_FIELD:
                embed.set_field_at(index, name=RATING_FIELD, value=updated.star_rating(), inline=False)
                break
        else:
            embed.add_field(name=RATING_FIELD, value=updated.star_rating(), inline=False)

        await message.edit(embed=embed)
        self.debug(f"Feedback {record.message_id} now {up} up / {down} down")

    async def _fetch_message(self, channel_id: int, message_id: int) -> Optional[discord.Message]:
        channel = self.client.get_channel(channel_id)
        try:
            if channel is None:
                channel = await self.client.fetch_channel(channel_id)
            return await channel.fetch_message(message_id)
        except discord.HTTPException as e:
            self.warning(f"Could not fetch feedback message {message_id}: {e}")
            return None
