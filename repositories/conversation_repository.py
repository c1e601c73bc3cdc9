"""
Conversation Repository
Per-user AI conversation context and summaries
"""

from datetime import timedelta
from typing import Optional

from bot.storage import DataStore
from repositories.base_repository import BaseRepository
from repositories.models import AIMessage, ConversationContext, from_iso, utcnow


class ConversationRepository(BaseRepository):
    """Repository for the conversations collection."""

    def __init__(self, store: DataStore):
        super().__init__(store, "conversations", "user_id")

    async def get_context(self, user_id: str) -> Optional[ConversationContext]:
        row = await self.find_by_id(user_id)
        return ConversationContext.from_dict(row) if row else None

    async def add_message(
        self,
        user_id: str,
        user_name: str,
        message: AIMessage,
    ) -> ConversationContext:
        """
        Append a message to a user's context, creating it if needed.

        Args:
            user_id: Discord user ID
            user_name: Current display name (refreshes the stored one)
            message: Message to append

        Returns:
            Updated context
        """
        user_id = str(user_id)

        def mutate(document) -> ConversationContext:
            records = document[self.collection]
            if user_id in records:
                context = ConversationContext.from_dict(records[user_id])
            else:
                context = ConversationContext(user_id=user_id)
            if user_name:
                context.user_name = user_name
            context.add_message(message)
            records[user_id] = context.to_dict()
            return context

        return await self.store.update(mutate)

    async def increment_and_check(self, user_id: str) -> bool:
        """
        Count one message toward the summary refresh.

        Returns:
            True when a summary analysis is due
        """
        user_id = str(user_id)
        if user_id not in self._records():
            return False

        def mutate(document) -> bool:
            context = ConversationContext.from_dict(document[self.collection][user_id])
            due = context.increment_message_counter()
            document[self.collection][user_id] = context.to_dict()
            return due

        return await self.store.update(mutate)

    async def update_summary(self, user_id: str, summary: str) -> bool:
        user_id = str(user_id)
        if user_id not in self._records():
            return False

        def mutate(document) -> bool:
            context = ConversationContext.from_dict(document[self.collection][user_id])
            context.update_summary(summary)
            document[self.collection][user_id] = context.to_dict()
            return True

        return await self.store.update(mutate)

    async def clean_old(self, max_age_days: int) -> int:
        """
        Drop contexts that have not been touched for a while.

        Returns:
            Number of removed contexts
        """
        cutoff = utcnow() - timedelta(days=max_age_days)
        removed = await self.delete_matching(
            lambda record: from_iso(record.get("last_updated") or utcnow()) < cutoff
        )
        if removed:
            self.logger.info(f"Removed {removed} stale conversations")
        return removed
