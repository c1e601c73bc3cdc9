"""
Reminder Repository
Scheduled reminders and their delivery state
"""

from datetime import datetime, timedelta
from typing import List, Optional

from bot.storage import DataStore
from repositories.base_repository import BaseRepository
from repositories.models import Reminder, from_iso, utcnow


class ReminderRepository(BaseRepository):
    """Repository for the reminders collection."""

    def __init__(self, store: DataStore):
        super().__init__(store, "reminders", "id")

    async def add(self, reminder: Reminder) -> Reminder:
        await self.create(reminder.to_dict())
        return reminder

    async def get(self, reminder_id: str) -> Optional[Reminder]:
        row = await self.find_by_id(reminder_id)
        return Reminder.from_dict(row) if row else None

    async def get_pending(self, now: Optional[datetime] = None) -> List[Reminder]:
        """
        Get reminders that are due and not yet sent.

        Args:
            now: Reference time (default: current UTC time)

        Returns:
            Due reminders ordered by their scheduled time
        """
        now = now or utcnow()
        reminders = [
            Reminder.from_dict(row)
            for row in await self.find_where({"is_sent": False})
        ]
        due = [reminder for reminder in reminders if reminder.is_due(now)]
        due.sort(key=lambda reminder: reminder.reminder_time)
        return due

    async def get_user_reminders(self, user_id: str) -> List[Reminder]:
        rows = await self.find_where({"user_id": str(user_id)}, {"order_by": "reminder_time"})
        return [Reminder.from_dict(row) for row in rows]

    async def mark_sent(self, reminder_id: str) -> bool:
        return await self.update(reminder_id, {"is_sent": True}) is not None

    async def remove(self, reminder_id: str) -> bool:
        return await self.delete(reminder_id)

    async def clean_old(self, max_age_days: int) -> int:
        """
        Drop delivered reminders created before the cutoff.

        Unsent reminders are always kept.

        Returns:
            Number of removed reminders
        """
        cutoff = utcnow() - timedelta(days=max_age_days)
        removed = await self.delete_matching(
            lambda record: record.get("is_sent") and from_iso(record["created_at"]) <= cutoff
        )
        if removed:
            self.logger.info(f"Removed {removed} old reminders")
        return removed
