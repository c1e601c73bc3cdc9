"""
Button Message Repository
Tracks bot messages that carry ticket and commission buttons
"""

from typing import Iterable, List, Optional

from bot.storage import DataStore
from repositories.base_repository import BaseRepository
from repositories.models import ButtonMessage, MessageType


class ButtonMessageRepository(BaseRepository):
    """Repository for the button_messages collection."""

    def __init__(self, store: DataStore):
        """
        Create ButtonMessageRepository instance.

        Args:
            store: Loaded data store
        """
        super().__init__(store, "button_messages", "message_id")

    async def add(self, button_message: ButtonMessage) -> ButtonMessage:
        """Store (or replace) a button message record."""
        await self.upsert(button_message.to_dict())
        return button_message

    async def get(self, message_id: str) -> Optional[ButtonMessage]:
        row = await self.find_by_id(message_id)
        return ButtonMessage.from_dict(row) if row else None

    async def find_by_channel(self, channel_id: str) -> List[ButtonMessage]:
        rows = await self.find_where({"channel_id": str(channel_id)})
        return [ButtonMessage.from_dict(row) for row in rows]

    async def get_user_active_tickets(self, user_id: str) -> List[ButtonMessage]:
        """
        Get open ticket records created by a user.

        Args:
            user_id: Discord user ID

        Returns:
            Ticket records, oldest first
        """
        rows = await self.find_where(
            {"message_type": MessageType.TICKET.value},
            {"order_by": "created_at"},
        )
        return [
            ButtonMessage.from_dict(row)
            for row in rows
            if row.get("metadata", {}).get("creator_id") == str(user_id)
        ]

    async def is_ticket_channel(self, channel_id: str) -> bool:
        return await self.exists({
            "channel_id": str(channel_id),
            "message_type": MessageType.TICKET.value,
        })

    async def get_ticket_creator(self, channel_id: str) -> Optional[str]:
        """Get the creator of the ticket living in a channel."""
        for record in await self.find_by_channel(channel_id):
            if record.is_ticket_message() and record.metadata.get("creator_id"):
                return record.metadata["creator_id"]
        return None

    async def is_ticket_creator(self, channel_id: str, user_id: str) -> bool:
        return await self.get_ticket_creator(channel_id) == str(user_id)

    async def cleanup_ticket_data(self, channel_id: str) -> int:
        """
        Drop ticket records for a channel.

        Returns:
            Number of removed records
        """
        removed = await self.delete_where({
            "channel_id": str(channel_id),
            "message_type": MessageType.TICKET.value,
        })
        if removed:
            self.logger.info(f"Removed {removed} ticket records for channel {channel_id}")
        return removed

    async def get_commission_creator(self, channel_id: str) -> Optional[str]:
        """Get the creator of the commission living in a channel."""
        for record in await self.find_by_channel(channel_id):
            creator = record.metadata.get("commission_creator")
            if record.message_type == MessageType.COMMISSION and creator:
                return creator
        return None

    async def remove_messages(self, message_ids: Iterable[str]) -> int:
        """
        Drop records for the given message ids.

        Returns:
            Number of removed records
        """
        wanted = {str(message_id) for message_id in message_ids}
        if not wanted:
            return 0
        return await self.delete_matching(lambda record: record.get("message_id") in wanted)

    async def remove_channel(self, channel_id: str) -> int:
        """Drop every record that lives in a channel."""
        return await self.delete_where({"channel_id": str(channel_id)})
