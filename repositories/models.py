"""
Record models
Plain dataclasses for everything kept in the JSON data store
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

MAX_CONTEXT_MESSAGES = 15
SUMMARY_EVERY_MESSAGES = 20


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_iso(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).isoformat()


def from_iso(value: Any) -> datetime:
    """Parse an ISO string (naive values are treated as UTC)."""
    if isinstance(value, datetime):
        moment = value
    else:
        moment = datetime.fromisoformat(str(value))
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


class MessageType(str, Enum):
    """Kind of bot message that carries buttons."""

    TICKET = "ticket"
    COMMISSION = "commission"
    FEEDBACK = "feedback"
    GENERAL = "general"


class MessageRole(str, Enum):
    """Author role of a conversation message."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


@dataclass
class Reminder:
    """A scheduled reminder."""

    id: str
    user_id: str
    user_name: str
    message: str
    channel_id: str
    reminder_time: datetime
    created_at: datetime = field(default_factory=utcnow)
    is_sent: bool = False
    is_private: bool = False
    mention_type: str = "none"
    has_status: bool = False

    def is_due(self, now: Optional[datetime] = None) -> bool:
        """Whether the reminder should be delivered now."""
        now = now or utcnow()
        return not self.is_sent and self.reminder_time <= now

    def mention_content(self) -> Optional[str]:
        """
        Text to ping when the reminder is delivered.

        Private reminders always ping the creator; public ones follow mention_type.
        """
        if self.is_private or self.mention_type == "creator":
            return f"<@{self.user_id}>"
        if self.mention_type == "everyone":
            return "@everyone"
        return None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["reminder_time"] = to_iso(self.reminder_time)
        data["created_at"] = to_iso(self.created_at)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Reminder":
        return cls(
            id=data["id"],
            user_id=str(data["user_id"]),
            user_name=data.get("user_name", ""),
            message=data.get("message", ""),
            channel_id=str(data["channel_id"]),
            reminder_time=from_iso(data["reminder_time"]),
            created_at=from_iso(data.get("created_at") or data["reminder_time"]),
            is_sent=bool(data.get("is_sent", False)),
            is_private=bool(data.get("is_private", False)),
            mention_type=data.get("mention_type", "none"),
            has_status=bool(data.get("has_status", False)),
        )


@dataclass
class FeedbackMessage:
    """A reposted feedback message and its vote tally."""

    message_id: str
    original_author_id: str
    original_author_name: str
    original_author_avatar: str
    content: str
    channel_id: str
    upvotes: int = 0
    downvotes: int = 0
    created_at: datetime = field(default_factory=utcnow)

    @property
    def total_votes(self) -> int:
        return self.upvotes + self.downvotes

    def star_rating(self) -> str:
        """
        Render the vote tally as five stars.

        Returns:
            e.g. ``⭐⭐⭐❌❌ (⬆️ 3 | ⬇️ 2)`` or ``❌❌❌❌❌ (No votes yet)``
        """
        total = self.total_votes
        if total == 0:
            return "❌" * 5 + " (No votes yet)"

        stars = (self.upvotes * 5) // total
        return "⭐" * stars + "❌" * (5 - stars) + f" (⬆️ {self.upvotes} | ⬇️ {self.downvotes})"

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["created_at"] = to_iso(self.created_at)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FeedbackMessage":
        return cls(
            message_id=str(data["message_id"]),
            original_author_id=str(data.get("original_author_id", "")),
            original_author_name=data.get("original_author_name", ""),
            original_author_avatar=data.get("original_author_avatar", ""),
            content=data.get("content", ""),
            channel_id=str(data.get("channel_id", "")),
            upvotes=int(data.get("upvotes", 0)),
            downvotes=int(data.get("downvotes", 0)),
            created_at=from_iso(data.get("created_at") or utcnow()),
        )


@dataclass
class AIMessage:
    """One turn of an AI conversation."""

    role: MessageRole
    content: str
    timestamp: datetime = field(default_factory=utcnow)
    channel_id: Optional[str] = None
    discord_message_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "role": self.role.value,
            "content": self.content,
            "timestamp": to_iso(self.timestamp),
            "channel_id": self.channel_id,
            "discord_message_id": self.discord_message_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AIMessage":
        return cls(
            role=MessageRole(data.get("role", "user")),
            content=data.get("content", ""),
            timestamp=from_iso(data.get("timestamp") or utcnow()),
            channel_id=data.get("channel_id"),
            discord_message_id=data.get("discord_message_id"),
        )


@dataclass
class ConversationContext:
    """Recent AI conversation with one user plus their summary."""

    user_id: str
    user_name: str = ""
    messages: List[AIMessage] = field(default_factory=list)
    last_updated: datetime = field(default_factory=utcnow)
    user_summary: Optional[str] = None
    message_count_for_summary: int = 0

    def add_message(self, message: AIMessage) -> None:
        """Append a message, dropping the oldest beyond the context limit."""
        self.messages.append(message)
        if len(self.messages) > MAX_CONTEXT_MESSAGES:
            self.messages = self.messages[-MAX_CONTEXT_MESSAGES:]
        self.last_updated = utcnow()

    def get_recent_messages(self, count: int) -> List[AIMessage]:
        if count <= 0:
            return []
        return self.messages[-count:]

    def get_conversation_summary(self) -> str:
        """Render the context as ``Role: content`` lines for a prompt."""
        if not self.messages:
            return "No previous conversation."

        lines = []
        for message in self.messages:
            role = {
                MessageRole.USER: "User",
                MessageRole.ASSISTANT: "Assistant",
                MessageRole.SYSTEM: "System",
            }[message.role]
            lines.append(f"{role}: {message.content}")
        return "\n".join(lines) + "\n"

    def increment_message_counter(self) -> bool:
        """
        Count a user message toward the next summary refresh.

        Returns:
            True on every 20th message (the counter then restarts)
        """
        self.message_count_for_summary += 1
        if self.message_count_for_summary >= SUMMARY_EVERY_MESSAGES:
            self.message_count_for_summary = 0
            return True
        return False

    def update_summary(self, summary: str) -> None:
        self.user_summary = summary
        self.last_updated = utcnow()

    def has_summary(self) -> bool:
        return bool(self.user_summary and self.user_summary.strip())

    def is_empty(self) -> bool:
        return not self.messages

    def to_dict(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "user_name": self.user_name,
            "messages": [m.to_dict() for m in self.messages],
            "last_updated": to_iso(self.last_updated),
            "user_summary": self.user_summary,
            "message_count_for_summary": self.message_count_for_summary,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConversationContext":
        return cls(
            user_id=str(data["user_id"]),
            user_name=data.get("user_name", ""),
            messages=[AIMessage.from_dict(m) for m in data.get("messages", [])],
            last_updated=from_iso(data.get("last_updated") or utcnow()),
            user_summary=data.get("user_summary"),
            message_count_for_summary=int(data.get("message_count_for_summary", 0)),
        )


@dataclass
class ButtonMessage:
    """A bot message with interactive buttons, plus what they are for."""

    message_id: str
    channel_id: str
    message_type: MessageType
    button_actions: Dict[str, str] = field(default_factory=dict)
    created_at: datetime = field(default_factory=utcnow)
    metadata: Dict[str, str] = field(default_factory=dict)

    def is_ticket_message(self) -> bool:
        return self.message_type == MessageType.TICKET

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message_id": self.message_id,
            "channel_id": self.channel_id,
            "message_type": self.message_type.value,
            "button_actions": dict(self.button_actions),
            "created_at": to_iso(self.created_at),
            "metadata": dict(self.metadata),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ButtonMessage":
        return cls(
            message_id=str(data["message_id"]),
            channel_id=str(data["channel_id"]),
            message_type=MessageType(data.get("message_type", "general")),
            button_actions=dict(data.get("button_actions", {})),
            created_at=from_iso(data.get("created_at") or utcnow()),
            metadata={k: str(v) for k, v in data.get("metadata", {}).items()},
        )
