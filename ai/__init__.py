"""
Gemini-backed chat support for the guild assistant bot.
"""

from ai.emotions import EmotionType, analyze_emotion
from ai.errors import (
    AIAuthError,
    AIConnectionError,
    AIError,
    AIRateLimitError,
    AIResponseError,
    user_friendly_error,
)
from ai.gemini_client import GeminiClient
from ai.prompts import OwnerInfo, build_chat_prompt, build_summary_prompt
from ai.responses import AIResponse, parse_ai_response, parse_color, parse_summary_analysis

__all__ = [
    "AIAuthError",
    "AIConnectionError",
    "AIError",
    "AIRateLimitError",
    "AIResponse",
    "AIResponseError",
    "EmotionType",
    "GeminiClient",
    "OwnerInfo",
    "analyze_emotion",
    "build_chat_prompt",
    "build_summary_prompt",
    "parse_ai_response",
    "parse_color",
    "parse_summary_analysis",
    "user_friendly_error",
]
