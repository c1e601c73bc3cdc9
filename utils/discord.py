"""
Discord Utilities
Helper functions for Discord interactions
"""

import re
from datetime import datetime
from typing import Any, Optional

import discord

REGEX = {
    "NUMBER_FORMAT": re.compile(r"\B(?=(\d{3})+(?!\d))"),
}

# Embed colours used across the bot
COLORS = {
    "PRIMARY": discord.Colour.from_rgb(105, 90, 205),
    "SUCCESS": discord.Colour.from_rgb(0, 255, 127),
    "ERROR": discord.Colour.red(),
    "WARNING": discord.Colour.orange(),
    "NOTICE": discord.Colour.from_rgb(255, 165, 0),
    "ACCENT": discord.Colour.from_rgb(138, 43, 226),
}

DEFAULT_AVATAR_URL = "https://cdn.discordapp.com/embed/avatars/0.png"


class ComponentRow(discord.ui.View):
    """
    Buttons and selects sent as plain message components.

    Clicks are routed by custom_id in EventHandler, so these views are
    never kept in the client's view store.
    """

    def __init__(self, *items: discord.ui.Item):
        super().__init__(timeout=None)
        for item in items:
            self.add_item(item)

    def is_finished(self) -> bool:
        # discord.py only stores views that are still listening
        return True


class DiscordUtils:
    """Utility class for Discord-related helper functions."""

    @staticmethod
    async def safe_delete(message: Any) -> bool:
        """
        Delete a message, ignoring Discord API failures.

        Args:
            message: Discord message

        Returns:
            True if deleted successfully, False otherwise
        """
        if not message or not hasattr(message, "delete"):
            return False
        try:
            await message.delete()
            return True
        except discord.HTTPException:
            return False

    @staticmethod
    async def safe_send(channel: Any, content: Optional[str] = None, **kwargs) -> Optional[Any]:
        """
        Send a message to a channel, ignoring Discord API failures.

        Args:
            channel: Discord channel
            content: Message content
            **kwargs: Extra send options (embed, view, ...)

        Returns:
            Sent message or None if failed
        """
        if not channel or not hasattr(channel, "send"):
            return None
        try:
            return await channel.send(content, **kwargs)
        except discord.HTTPException:
            return None

    @staticmethod
    async def get_channel(client: Any, channel_id: Optional[int]) -> Optional[Any]:
        """
        Resolve a channel from cache, falling back to the API.

        Args:
            client: Discord client
            channel_id: Channel ID (None returns None)

        Returns:
            Channel or None if it doesn't exist or isn't visible
        """
        if not channel_id:
            return None
        channel = client.get_channel(channel_id)
        if channel is not None:
            return channel
        try:
            return await client.fetch_channel(channel_id)
        except discord.HTTPException:
            return None

    @staticmethod
    def error_embed(title: str, description: str) -> discord.Embed:
        """
        Build a red embed for a rejected request.

        Args:
            title: Embed title
            description: What went wrong

        Returns:
            Embed instance
        """
        return discord.Embed(title=title, description=description, colour=COLORS["ERROR"])

    @staticmethod
    def format_duration(seconds: int) -> str:
        """
        Format duration as ``Xd Xh Xm Xs``, dropping leading zero units.

        Args:
            seconds: Duration in seconds

        Returns:
            Formatted duration string
        """
        seconds = max(int(seconds), 0)
        days = seconds // 86400
        hours = (seconds % 86400) // 3600
        mins = (seconds % 3600) // 60
        secs = seconds % 60

        if days > 0:
            return f"{days}d {hours}h {mins}m {secs}s"
        if hours > 0:
            return f"{hours}h {mins}m {secs}s"
        if mins > 0:
            return f"{mins}m {secs}s"
        return f"{secs}s"

    @staticmethod
    def format_timestamp(moment: datetime, style: str = "R") -> str:
        """
        Format a datetime as a Discord timestamp tag.

        Args:
            moment: Aware datetime
            style: Discord style letter (R relative, F full, ...)

        Returns:
            Timestamp markup such as ``<t:1700000000:R>``
        """
        return f"<t:{int(moment.timestamp())}:{style}>"

    @staticmethod
    def format_number(num: Any) -> str:
        """
        Format number with commas.

        Args:
            num: Number to format

        Returns:
            Formatted number string
        """
        if not isinstance(num, (int, float)):
            return str(num)
        return REGEX["NUMBER_FORMAT"].sub(",", str(num))

    @staticmethod
    def is_admin(member: Any) -> bool:
        """Check whether a guild member has the Administrator permission."""
        permissions = getattr(member, "guild_permissions", None)
        return bool(permissions and permissions.administrator)

    @staticmethod
    def can_manage_messages(member: Any) -> bool:
        """Check whether a guild member may delete other people's messages."""
        permissions = getattr(member, "guild_permissions", None)
        return bool(permissions and (permissions.manage_messages or permissions.administrator))
