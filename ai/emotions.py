"""
Keyword-based emotion detection for plain-text AI replies.
"""

import random
from enum import Enum
from typing import Dict, List, Optional, Tuple


class EmotionType(Enum):
    HAPPY = "happy"
    EXCITED = "excited"
    HELPFUL = "helpful"
    THOUGHTFUL = "thoughtful"
    CURIOUS = "curious"
    FRIENDLY = "friendly"
    PROFESSIONAL = "professional"
    CREATIVE = "creative"
    ENCOURAGING = "encouraging"
    NEUTRAL = "neutral"

    @property
    def keywords(self) -> List[str]:
        return EMOTION_KEYWORDS.get(self, [])

    @property
    def emoji(self) -> str:
        return EMOTION_EMOJIS[self]

    @property
    def color(self) -> Tuple[int, int, int]:
        return EMOTION_COLORS[self]

    @property
    def image(self) -> Tuple[str, str]:
        """(category, name) of the thumbnail for this emotion."""
        return EMOTION_IMAGES[self]


EMOTION_KEYWORDS: Dict[EmotionType, List[str]] = {
    EmotionType.HAPPY: ["feliz", "genial", "excelente", "perfecto", "increíble", "happy", "great", "😊", "🎉"],
    EmotionType.EXCITED: ["emocionante", "fantástico", "asombroso", "wow", "guau", "amazing", "🚀", "⭐"],
    EmotionType.HELPFUL: ["ayuda", "puedo ayudar", "aquí tienes", "te explico", "help", "here is", "💡", "🤝"],
    EmotionType.THOUGHTFUL: ["considera", "piensa", "reflexiona", "analiza", "consider", "🤔", "💭"],
    EmotionType.CURIOUS: ["interesante", "dime más", "cuéntame", "explícame", "interesting", "tell me more", "❓", "🔍"],
    EmotionType.FRIENDLY: ["hola", "saludos", "encantado", "un placer", "hello", "👋", "😄"],
    EmotionType.PROFESSIONAL: ["servicio", "trabajo", "proyecto", "empresa", "negocio", "project", "💼", "👔"],
    EmotionType.CREATIVE: ["diseño", "arte", "creatividad", "idea", "innovador", "design", "🎨", "✨"],
    EmotionType.ENCOURAGING: ["puedes", "lograrás", "adelante", "ánimo", "éxito", "you can", "💪", "🌟"],
}

EMOTION_EMOJIS: Dict[EmotionType, str] = {
    EmotionType.HAPPY: "😊",
    EmotionType.EXCITED: "🎉",
    EmotionType.HELPFUL: "🤝",
    EmotionType.THOUGHTFUL: "🤔",
    EmotionType.CURIOUS: "🔍",
    EmotionType.FRIENDLY: "👋",
    EmotionType.PROFESSIONAL: "💼",
    EmotionType.CREATIVE: "🎨",
    EmotionType.ENCOURAGING: "💪",
    EmotionType.NEUTRAL: "🤖",
}

EMOTION_COLORS: Dict[EmotionType, Tuple[int, int, int]] = {
    EmotionType.HAPPY: (255, 215, 0),
    EmotionType.EXCITED: (255, 69, 0),
    EmotionType.HELPFUL: (0, 191, 255),
    EmotionType.THOUGHTFUL: (138, 43, 226),
    EmotionType.CURIOUS: (255, 20, 147),
    EmotionType.FRIENDLY: (50, 205, 50),
    EmotionType.PROFESSIONAL: (25, 25, 112),
    EmotionType.CREATIVE: (186, 85, 211),
    EmotionType.ENCOURAGING: (34, 139, 34),
    EmotionType.NEUTRAL: (128, 128, 128),
}

EMOTION_IMAGES: Dict[EmotionType, Tuple[str, str]] = {
    EmotionType.HAPPY: ("emotions", "love"),
    EmotionType.EXCITED: ("emotions", "wow_alert"),
    EmotionType.HELPFUL: ("showing", "showing1"),
    EmotionType.THOUGHTFUL: ("thinking", "hmmm_thinking"),
    EmotionType.CURIOUS: ("avatar", "what_pointing"),
    EmotionType.FRIENDLY: ("talking", "talk1"),
    EmotionType.PROFESSIONAL: ("avatar", "que_pro"),
    EmotionType.CREATIVE: ("emotions", "nya"),
    EmotionType.ENCOURAGING: ("reactions", "thanks"),
    EmotionType.NEUTRAL: ("avatar", "pointing"),
}

# Picked at random when no keyword matches
FALLBACK_EMOTIONS = (
    EmotionType.HELPFUL,
    EmotionType.FRIENDLY,
    EmotionType.PROFESSIONAL,
    EmotionType.NEUTRAL,
)


def analyze_emotion(text: str, rng: Optional[random.Random] = None) -> EmotionType:
    """
    Pick the emotion whose keywords appear most often in the text.

    Ties keep declaration order. With no match a common emotion is picked at random.
    """
    lowered = (text or "").lower()
    best: Optional[EmotionType] = None
    best_score = 0

    for emotion, keywords in EMOTION_KEYWORDS.items():
        score = sum(1 for keyword in keywords if keyword in lowered)
        if score > best_score:
            best, best_score = emotion, score

    if best is not None:
        return best

    return (rng or random).choice(FALLBACK_EMOTIONS)
