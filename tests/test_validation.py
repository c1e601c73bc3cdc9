"""
Input validation helpers.
"""

from datetime import timedelta

import pytest

from utils.validation import ValidationUtils


@pytest.mark.parametrize("text, expected", [
    ("30s", timedelta(seconds=30)),
    ("5m", timedelta(minutes=5)),
    ("2h", timedelta(hours=2)),
    ("1d", timedelta(days=1)),
    ("365d", timedelta(days=365)),
])
def test_parse_duration_accepts(text, expected):
    result = ValidationUtils.parse_duration(text)
    assert result.valid
    assert result.value == expected


@pytest.mark.parametrize("text", ["0m", "abc", "5w", "", None, "366d", "-5m"])
def test_parse_duration_rejects(text):
    result = ValidationUtils.parse_duration(text)
    assert not result.valid
    assert result.error


def test_purge_amount_bounds():
    assert ValidationUtils.validate_purge_amount(1).value == 1
    assert ValidationUtils.validate_purge_amount(100).value == 100
    assert not ValidationUtils.validate_purge_amount(0)
    assert not ValidationUtils.validate_purge_amount(101)
    assert not ValidationUtils.validate_purge_amount("ten")
    assert not ValidationUtils.validate_purge_amount(True)


def test_reminder_options_defaults():
    result = ValidationUtils.validate_reminder_options(None, None)
    assert result.value == ("public", "none")


def test_reminder_options_rejects_unknown():
    assert not ValidationUtils.validate_reminder_options("secret", None)
    assert not ValidationUtils.validate_reminder_options("public", "someone")
    assert ValidationUtils.validate_reminder_options("PRIVATE", "Everyone").value == ("private", "everyone")


def test_filtered_words():
    assert ValidationUtils.find_filtered_word("Free SCAM here") == "scam"
    assert ValidationUtils.find_filtered_word("Great idea for the bot") is None
    assert ValidationUtils.find_filtered_word(None) is None


def test_snowflakes():
    assert ValidationUtils.is_valid_snowflake("123456789012345678")
    assert ValidationUtils.is_valid_snowflake(123456789012345678)
    assert not ValidationUtils.is_valid_snowflake("1234")
    assert not ValidationUtils.is_valid_snowflake("not_a_number")


def test_message_length():
    assert ValidationUtils.validate_message_length("hello").valid
    result = ValidationUtils.validate_message_length("x" * 30, max_length=10)
    assert not result.valid
    assert result.value == "x" * 7 + "..."


def test_sanitize_input_strips_invisible_characters():
    assert ValidationUtils.sanitize_input("  ship\u200b it\x07 ") == "ship it"
    assert ValidationUtils.sanitize_input(None) == ""
