"""
AI error types and message mapping.
"""

from typing import Tuple


class AIError(Exception):
    """Base error for AI chat failures."""


class AIAuthError(AIError):
    pass


class AIRateLimitError(AIError):
    pass


class AIConnectionError(AIError):
    pass


class AIResponseError(AIError):
    """The model answered but the answer was unusable."""


def classify_error(error: Exception) -> AIError:
    """
    Wrap a raw client exception into the matching AIError subclass.

    Args:
        error: Exception raised by the Gemini client

    Returns:
        AIError instance (the input itself if it already is one)
    """
    if isinstance(error, AIError):
        return error

    s, t = str(error), type(error).__name__
    code = getattr(error, "code", None)

    if code == 429 or "429" in s or "RESOURCE_EXHAUSTED" in s:
        return AIRateLimitError(s)
    if code in (401, 403) or "401" in s or "API key" in s or "PERMISSION_DENIED" in s:
        return AIAuthError(s)
    if "Connect" in t or "Timeout" in t or "ECONNREFUSED" in s or "ETIMEDOUT" in s:
        return AIConnectionError(s)
    return AIResponseError(f"{t}: {s.splitlines()[0][:200] if s else ''}")


def parse_error_message(error: Exception) -> str:
    """
    Map an exception into a short line for logs.
    """
    error = classify_error(error)
    first_line = str(error).split("\n")[0][:100]
    if isinstance(error, AIRateLimitError):
        return "⚠️ Rate Limited: Gemini is temporarily rate-limited."
    if isinstance(error, AIAuthError):
        return "❌ Authentication Error: Invalid Gemini API key."
    if isinstance(error, AIConnectionError):
        return "❌ Connection Error: Unable to reach Gemini."
    return f"❌ {type(error).__name__}: {first_line}"


def user_friendly_error(error: Exception) -> str:
    """
    Short, safe error message suitable for end users.
    """
    error = classify_error(error)
    if isinstance(error, AIRateLimitError):
        return "I'm getting a lot of messages right now, please try again in a moment."
    if isinstance(error, AIAuthError):
        return "The AI service is not configured correctly. Please let an administrator know."
    if isinstance(error, AIConnectionError):
        return "I couldn't reach the AI service. It may be a network problem, try again later."
    return "Something went wrong while generating a reply."


def error_messages(error: Exception) -> Tuple[str, str]:
    """
    Convenience helper returning (log_message, user_message).
    """
    return parse_error_message(error), user_friendly_error(error)
