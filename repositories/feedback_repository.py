"""
Feedback Repository
Reposted feedback messages and their votes
"""

from typing import Optional

from bot.storage import DataStore
from repositories.base_repository import BaseRepository
from repositories.models import FeedbackMessage, from_iso

MAX_FEEDBACK_MESSAGES = 30


class FeedbackRepository(BaseRepository):
    """Repository for the feedback_messages collection."""

    def __init__(self, store: DataStore, max_messages: int = MAX_FEEDBACK_MESSAGES):
        super().__init__(store, "feedback_messages", "message_id")
        self.max_messages = max_messages

    async def add(self, feedback: FeedbackMessage) -> FeedbackMessage:
        """
        Store a feedback message, keeping only the newest entries.

        Args:
            feedback: Record to store

        Returns:
            The stored record
        """
        limit = self.max_messages

        def mutate(document) -> None:
            records = document[self.collection]
            records[feedback.message_id] = feedback.to_dict()
            if len(records) > limit:
                newest = sorted(
                    records.items(),
                    key=lambda item: from_iso(item[1]["created_at"]),
                    reverse=True,
                )[:limit]
                records.clear()
                records.update(dict(newest))

        await self.store.update(mutate)
        return feedback

    async def get(self, message_id: str) -> Optional[FeedbackMessage]:
        row = await self.find_by_id(message_id)
        return FeedbackMessage.from_dict(row) if row else None

    async def update_votes(self, message_id: str, upvotes: int, downvotes: int) -> Optional[FeedbackMessage]:
        """
        Store a fresh vote tally.

        Returns:
            Updated record or None if the message is not tracked
        """
        row = await self.update(message_id, {"upvotes": upvotes, "downvotes": downvotes})
        return FeedbackMessage.from_dict(row) if row else None
