"""
Data repositories for the guild assistant bot.
"""

from repositories.base_repository import BaseRepository
from repositories.button_message_repository import ButtonMessageRepository
from repositories.conversation_repository import ConversationRepository
from repositories.feedback_repository import FeedbackRepository
from repositories.reminder_repository import ReminderRepository

__all__ = [
    "BaseRepository",
    "ButtonMessageRepository",
    "ConversationRepository",
    "FeedbackRepository",
    "ReminderRepository",
]
