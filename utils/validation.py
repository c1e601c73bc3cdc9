"""
Validation Utilities
Helper functions for validating Discord IDs and user input
"""

import re
from datetime import timedelta
from typing import Any, Iterable, Optional, Union

# Discord snowflake ID pattern: 17-20 digits
SNOWFLAKE_REGEX = re.compile(r"^[0-9]{17,20}$")

# Reminder durations: integer followed by a single unit letter
DURATION_REGEX = re.compile(r"^(\d+)\s*([smhd])$", re.IGNORECASE)

DURATION_UNITS = {
    "s": 1,
    "m": 60,
    "h": 3600,
    "d": 86400,
}

MAX_REMINDER_SECONDS = 365 * 86400

# Words that get a feedback message removed
FILTERED_WORDS = ["spam", "scam", "abuse"]

VALID_VISIBILITY = ["public", "private"]
VALID_MENTION_TYPES = ["none", "creator", "everyone"]

PURGE_MIN = 1
PURGE_MAX = 100


class ValidationResult:
    """Result of a validation operation."""

    def __init__(
        self,
        valid: bool,
        error: Optional[str] = None,
        value: Optional[Any] = None,
    ):
        self.valid = valid
        self.error = error
        self.value = value

    def __bool__(self) -> bool:
        return self.valid

    def __repr__(self) -> str:
        return f"ValidationResult(valid={self.valid}, error={self.error!r}, value={self.value!r})"


class ValidationUtils:
    """Utility class for input validation."""

    @staticmethod
    def is_valid_snowflake(id_value: Union[str, int]) -> bool:
        """
        Check if value is a valid Discord snowflake ID.

        Args:
            id_value: ID to validate

        Returns:
            True if valid snowflake
        """
        if isinstance(id_value, bool) or not isinstance(id_value, (str, int)):
            return False
        return bool(SNOWFLAKE_REGEX.match(str(id_value)))

    @staticmethod
    def validate_purge_amount(amount: Any) -> ValidationResult:
        """
        Validate the number of messages to purge.

        Args:
            amount: Requested amount

        Returns:
            ValidationResult with the amount as value
        """
        if isinstance(amount, bool):
            return ValidationResult(valid=False, error="Amount must be a whole number")
        try:
            number = int(amount)
        except (TypeError, ValueError):
            return ValidationResult(valid=False, error="Amount must be a whole number")

        if number < PURGE_MIN or number > PURGE_MAX:
            return ValidationResult(
                valid=False,
                error=f"Amount must be between {PURGE_MIN} and {PURGE_MAX}",
            )

        return ValidationResult(valid=True, value=number)

    @staticmethod
    def parse_duration(time_str: Optional[str]) -> ValidationResult:
        """
        Parse a reminder duration such as ``5m``, ``2h`` or ``1d``.

        Args:
            time_str: Duration string

        Returns:
            ValidationResult with a timedelta as value
        """
        if not time_str or not isinstance(time_str, str):
            return ValidationResult(valid=False, error="Time is required (e.g. 5m, 2h, 1d)")

        match = DURATION_REGEX.match(time_str.strip())
        if not match:
            return ValidationResult(
                valid=False,
                error="Invalid time format. Use a number followed by s, m, h or d (e.g. 5m, 2h, 1d)",
            )

        amount = int(match.group(1))
        seconds = amount * DURATION_UNITS[match.group(2).lower()]

        if seconds <= 0:
            return ValidationResult(valid=False, error="Time must be greater than zero")

        if seconds > MAX_REMINDER_SECONDS:
            return ValidationResult(valid=False, error="Time cannot be longer than 365 days")

        return ValidationResult(valid=True, value=timedelta(seconds=seconds))

    @staticmethod
    def validate_reminder_options(
        visibility: Optional[str],
        mention_type: Optional[str],
    ) -> ValidationResult:
        """
        Validate reminder visibility and mention options.

        Args:
            visibility: "public" or "private" (default public)
            mention_type: "none", "creator" or "everyone" (default none)

        Returns:
            ValidationResult with a (visibility, mention_type) tuple as value
        """
        visibility = (visibility or "public").lower()
        mention_type = (mention_type or "none").lower()

        if visibility not in VALID_VISIBILITY:
            return ValidationResult(
                valid=False,
                error=f"Invalid visibility. Valid: {', '.join(VALID_VISIBILITY)}",
            )

        if mention_type not in VALID_MENTION_TYPES:
            return ValidationResult(
                valid=False,
                error=f"Invalid mention type. Valid: {', '.join(VALID_MENTION_TYPES)}",
            )

        return ValidationResult(valid=True, value=(visibility, mention_type))

    @staticmethod
    def find_filtered_word(content: Optional[str], words: Iterable[str] = FILTERED_WORDS) -> Optional[str]:
        """
        Find the first filtered word contained in a message.

        Args:
            content: Message content
            words: Words to look for (case-insensitive substring match)

        Returns:
            The matched word or None
        """
        if not content:
            return None
        lowered = content.lower()
        for word in words:
            if word in lowered:
                return word
        return None

    @staticmethod
    def sanitize_input(input_value: str) -> str:
        """
        Sanitize user input to prevent injection.

        Args:
            input_value: Input to sanitize

        Returns:
            Sanitized input string
        """
        if not isinstance(input_value, str):
            return ""

        sanitized = input_value.strip()

        # Remove zero-width characters
        sanitized = re.sub(r"[\u200B-\u200D\uFEFF]", "", sanitized)

        # Remove control characters
        sanitized = re.sub(r"[\x00-\x1F\x7F-\x9F]", "", sanitized)

        return sanitized

    @staticmethod
    def validate_message_length(
        content: Optional[str],
        max_length: int = 2000,
    ) -> ValidationResult:
        """
        Validate message content length.

        Args:
            content: Message content
            max_length: Maximum length (default: 2000 for Discord)

        Returns:
            ValidationResult with valid status and optional truncated content
        """
        if not content:
            return ValidationResult(valid=True, value=content or "")

        if len(content) > max_length:
            truncated = content[: max_length - 3] + "..."
            return ValidationResult(
                valid=False,
                error=f"Message too long ({len(content)}/{max_length})",
                value=truncated,
            )

        return ValidationResult(valid=True, value=content)

