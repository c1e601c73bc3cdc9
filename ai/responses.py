"""
Parsing of Gemini answers into embed-ready responses.
"""

import json
import random
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from ai.emotions import EmotionType, analyze_emotion
from utils.logger import get_logger

logger = get_logger("AIResponses")

DEFAULT_COLOR: Tuple[int, int, int] = (105, 90, 205)
DEFAULT_THUMBNAIL = "pointing"
FALLBACK_COLOR_HEX = "#00BFFF"

# Colour palette offered to the model: hex, name, mood
COLOR_PALETTE = (
    ("#695acd", "base-purple", "neutral/default/calm"),
    ("#7b6fd3", "light-purple", "happy/positive"),
    ("#5048c7", "deep-purple", "thoughtful/contemplative"),
    ("#4a90e2", "cool-blue", "helpful/informative"),
    ("#6fa8dc", "sky-blue", "friendly/welcoming"),
    ("#8e7cc3", "soft-violet", "curious/interested"),
    ("#2d3748", "dark-slate", "professional/serious"),
    ("#805ad5", "bright-violet", "excited/energetic"),
    ("#4c51bf", "indigo", "creative/artistic"),
    ("#667eea", "periwinkle", "encouraging/supportive"),
)

COLOR_NAMES = {name: hex_code for hex_code, name, _ in COLOR_PALETTE}

# Thumbnail names offered to the model with their mood
THUMBNAILS = (
    ("pointing", "neutral/default"),
    ("what_pointing", "confused/questioning"),
    ("standbye", "waiting/calm"),
    ("head", "simple/minimal"),
    ("love", "happy/loving"),
    ("angry", "frustrated/annoyed"),
    ("really_sad", "sad/disappointed"),
    ("dissapoiment", "disappointed"),
    ("thanks", "grateful/thankful"),
    ("hand_on_heart", "caring/emotional"),
    ("wow_alert", "surprised/excited"),
    ("wow_hands_in_head", "very surprised"),
    ("what", "confused/questioning"),
    ("nya, nya_super_cute", "playful/cute"),
    ("que_pro", "proud/confident"),
    ("talk1, talk2, talk3, talk_looking_at_camera, talk5", "conversational"),
    ("hmmm_thinking", "thoughtful/contemplating"),
    ("showing1, showing_finish", "presenting/explaining"),
)

_CONTENT_RE = re.compile(r'"content"\s*:\s*"((?:[^"\\]|\\.)*)"', re.DOTALL)
_COLOR_RE = re.compile(r'"color"\s*:\s*"([^"]+)"')
_THUMBNAIL_RE = re.compile(r'"thumbnail"\s*:\s*"([^"]+)"')
_HEX_RE = re.compile(r"^#?([0-9a-fA-F]{6})$")


@dataclass
class AIResponse:
    """A parsed chat answer."""

    content: str
    color: Tuple[int, int, int] = DEFAULT_COLOR
    thumbnail: Optional[str] = None
    emotion: Optional[EmotionType] = None

    @property
    def is_structured(self) -> bool:
        """Whether the answer came from the JSON format."""
        return self.emotion is None


def parse_color(color: Optional[str]) -> Tuple[int, int, int]:
    """
    Convert ``#rrggbb`` or a palette name to an RGB tuple.

    Unknown values fall back to the base purple.
    """
    if not color:
        return DEFAULT_COLOR

    value = COLOR_NAMES.get(color.strip().lower(), color.strip())
    match = _HEX_RE.match(value)
    if not match:
        return DEFAULT_COLOR

    number = int(match.group(1), 16)
    return ((number >> 16) & 0xFF, (number >> 8) & 0xFF, number & 0xFF)


def extract_json(text: str) -> Optional[str]:
    """Return the substring between the first ``{`` and the last ``}``."""
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        return None
    return text[start:end + 1]


def fix_malformed_json(json_text: str) -> Optional[str]:
    """
    Rebuild a chat answer whose content field broke the JSON syntax.

    Returns:
        Valid JSON text, or None if no content field can be found
    """
    content: Optional[str] = None

    marker = json_text.find('"content":"')
    if marker != -1:
        start = marker + len('"content":"')
        end = json_text.find('","color"', start)
        if end != -1:
            content = json_text[start:end]

    if content is None:
        match = _CONTENT_RE.search(json_text)
        if not match:
            return None
        content = match.group(1).replace('\\"', '"').replace("\\n", "\n")

    color_match = _COLOR_RE.search(json_text)
    thumbnail_match = _THUMBNAIL_RE.search(json_text)

    return json.dumps({
        "content": content,
        "color": color_match.group(1) if color_match else FALLBACK_COLOR_HEX,
        "thumbnail": thumbnail_match.group(1) if thumbnail_match else DEFAULT_THUMBNAIL,
    })


def _load_object(text: Optional[str]) -> Optional[Dict[str, Any]]:
    if not text:
        return None
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, ValueError):
        return None
    return data if isinstance(data, dict) else None


def _load_chat_object(raw: str) -> Optional[Dict[str, Any]]:
    data = _load_object(raw)
    if data is not None and "content" in data:
        return data

    extracted = extract_json(raw)
    if extracted is None:
        return None

    data = _load_object(extracted)
    if data is not None and "content" in data:
        return data

    return _load_object(fix_malformed_json(extracted))


def parse_ai_response(raw: str, rng: Optional[random.Random] = None) -> AIResponse:
    """
    Turn a model answer into an AIResponse.

    Tries raw JSON, then the embedded object, then a regex repair.
    Plain text falls back to keyword emotion analysis.
    """
    raw = (raw or "").strip()
    data = _load_chat_object(raw)

    if data is None or not str(data.get("content", "")).strip():
        logger.debug("Model answer was not JSON, using plain text")
        emotion = analyze_emotion(raw, rng)
        return AIResponse(content=raw, color=emotion.color, emotion=emotion)

    return AIResponse(
        content=str(data["content"]).strip(),
        color=parse_color(data.get("color")),
        thumbnail=str(data.get("thumbnail") or DEFAULT_THUMBNAIL),
    )


def parse_summary_analysis(raw: str) -> Optional[str]:
    """
    Read a ``{update_summary, content}`` answer.

    Returns:
        The new summary, or None when no update is requested or the answer is unreadable
    """
    raw = (raw or "").strip()
    data = _load_object(raw) or _load_object(extract_json(raw))
    if data is None:
        logger.warning("No valid JSON found in summary analysis response")
        return None

    if not data.get("update_summary"):
        return None

    content = data.get("content")
    if not isinstance(content, str) or not content.strip():
        return None
    return content.strip()
