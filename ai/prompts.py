"""
Prompt building for the AI chat channel.
"""

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from ai.responses import COLOR_PALETTE, THUMBNAILS
from repositories.models import ConversationContext, MessageRole
from utils.logger import get_logger

logger = get_logger("AIPrompts")

OWNER_INFO_FILE = "owner_info.toml"


@dataclass
class OwnerInfo:
    """Who the assistant speaks for."""

    name: str
    email: str
    skills: List[str] = field(default_factory=list)
    bio: str = ""
    discord_id: str = ""
    personality: Optional[str] = None
    communication_style: Optional[str] = None
    specialties_focus: Optional[str] = None
    sarcasm_level: Optional[str] = None
    humor_style: Optional[str] = None
    formality: Optional[str] = None
    intelligence_display: Optional[str] = None
    response_style: Optional[str] = None

    @classmethod
    def fallback(cls) -> "OwnerInfo":
        return cls(
            name="TheLorian",
            email="the_lorian@centaury.net",
            skills=[
                "Discord Bot Development",
                "Python Programming",
                "Web Development",
                "Graphic Design",
                "Technology Consulting",
            ],
            bio=(
                "Passionate and creative developer specialized in innovative technological "
                "solutions. Expert in creating Discord bots, web applications, and providing "
                "consulting services for unique projects."
            ),
            personality=(
                "Functional and direct, with adjustable humor levels like TARS. Intelligent "
                "and capable, but doesn't rub it in your face (much)."
            ),
            communication_style=(
                "Formal, precise, with a touch of elegant British sarcasm. "
                "Quick responses with confidence."
            ),
            specialties_focus="Technology solutions, bot development, and creative projects",
            sarcasm_level="Moderate",
            humor_style="British-elegant",
            formality="Professional-casual",
            intelligence_display="Subtle",
            response_style="Quick and confident",
        )

    @classmethod
    def load(cls, path: Path) -> "OwnerInfo":
        """
        Load owner info from a TOML file with ``[owner]``, ``[context]``
        and ``[ai_behavior]`` tables.

        Falls back to built-in values when the file is missing or invalid.
        """
        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
            owner = data["owner"]
            context = data.get("context", {})
            behavior = data.get("ai_behavior", {})
            info = cls(
                name=owner["name"],
                email=owner.get("email", ""),
                skills=list(owner.get("skills", [])),
                bio=owner.get("bio", ""),
                discord_id=str(owner.get("discord_id", "")),
                personality=context.get("personality"),
                communication_style=context.get("communication_style"),
                specialties_focus=context.get("specialties_focus"),
                sarcasm_level=behavior.get("sarcasm_level"),
                humor_style=behavior.get("humor_style"),
                formality=behavior.get("formality"),
                intelligence_display=behavior.get("intelligence_display"),
                response_style=behavior.get("response_style"),
            )
        except FileNotFoundError:
            logger.info(f"No owner info at {path}, using built-in profile")
            return cls.fallback()
        except (tomllib.TOMLDecodeError, KeyError, TypeError) as e:
            logger.warning(f"Failed to load owner info from {path}: {e}")
            return cls.fallback()

        logger.info(f"Owner info loaded from {path}")
        return info


def build_chat_prompt(
    user_message: str,
    owner: OwnerInfo,
    context: Optional[ConversationContext] = None,
    emojis: Optional[Mapping[str, Mapping[str, str]]] = None,
) -> str:
    """
    Build the full single-turn prompt for a chat message.

    Args:
        user_message: Text the user just sent
        owner: Owner profile
        context: Stored conversation (may be None for first contact)
        emojis: Custom emojis by category, offered to the model

    Returns:
        Prompt text
    """
    lines: List[str] = [
        f"You are the AI assistant of {owner.name}. Here is what you know about {owner.name}:",
        f"- Name: {owner.name}",
        f"- Email: {owner.email}",
        f"- Skills: {', '.join(owner.skills)}",
        f"- Bio: {owner.bio}",
    ]
    if owner.personality:
        lines.append(f"- Personality: {owner.personality}")
    if owner.communication_style:
        lines.append(f"- Communication Style: {owner.communication_style}")
    if owner.specialties_focus:
        lines.append(f"- Focus Areas: {owner.specialties_focus}")
    lines.append("")

    lines.append("## AI PERSONALITY CONFIGURATION")
    lines.append(f"You are {owner.name}'s AI assistant with a specific personality profile:")
    lines.append("")
    behavior = (
        ("Sarcasm Level", owner.sarcasm_level, "Use this level of subtle sarcasm and wit in your responses"),
        ("Humor Style", owner.humor_style, "Apply this type of humor when appropriate"),
        ("Formality Level", owner.formality, "Maintain this level of formality"),
        ("Intelligence Display", owner.intelligence_display, "Show your knowledge in this manner"),
        ("Response Style", owner.response_style, "Deliver responses in this manner"),
    )
    for label, value, hint in behavior:
        if value:
            lines.append(f"**{label}:** {value} - {hint}")
    lines.append("")

    lines.extend([
        "**CORE PERSONALITY DIRECTIVE:**",
        "Channel the spirit of TARS from Interstellar but with British elegance. You're "
        "sophisticated, intelligent, occasionally sarcastic, but ultimately helpful. Think "
        "'witty butler who happens to be an AI genius.'",
        "Avoid overly casual, robotic, or genuinely rude responses. Be playfully sarcastic, "
        "never mean-spirited.",
        "",
        f"Answer questions about {owner.name}'s work and services, and help users with "
        "whatever they need. Keep answers concise and useful.",
        "",
    ])

    if context is not None and context.user_name:
        lines.append(f"**Current User:** You are speaking with {context.user_name}")
        if context.has_summary():
            lines.append(f"**User Summary:** {context.user_summary}")
        lines.append("")

    if emojis:
        lines.append("## Available Custom Emojis")
        lines.append(
            "**IMPORTANT: Use emojis sparingly and only when they truly add meaningful value. "
            "ONLY use the custom emojis listed here, never standard Unicode emojis.**"
        )
        for category, entries in emojis.items():
            if not entries:
                continue
            lines.append(f"**{category.title()}:**")
            lines.extend(f"- {name}: {emoji}" for name, emoji in entries.items())
        lines.append("")

    lines.append("Available thumbnail images (choose ONE that matches your response emotion):")
    lines.extend(f"- {name} ({mood})" for name, mood in THUMBNAILS)
    lines.append("")

    lines.append("Available colors for embed (use hex codes, choose ONE that matches emotion):")
    lines.extend(f"- {hex_code} ({name} - {mood})" for hex_code, name, mood in COLOR_PALETTE)
    lines.append("")

    if context is not None and not context.is_empty():
        lines.append("## Previous conversation:")
        lines.append(context.get_conversation_summary())

    lines.extend([
        "You MUST respond with a valid JSON object in this exact format:",
        "{",
        '  "content": "Your helpful response text here",',
        '  "color": "#hexcode-from-list-above",',
        '  "thumbnail": "image-name-from-list-above"',
        "}",
        "",
        "**CRITICAL JSON RULES:**",
        '- NEVER use unescaped quotes (") inside the content field',
        "- If you need quotes in content, use single quotes (') instead",
        "- Avoid line breaks, tabs, and special characters in content",
        "- Keep content as a single line of text",
        "- If you need formatting, use markdown symbols (**, *, etc.)",
        "",
        f"User: {user_message}",
        "",
        "Respond with JSON only, no additional text:",
    ])

    return "\n".join(lines)


SUMMARY_INCLUDE = (
    "User's real name (if mentioned)",
    "Age or age range (if mentioned)",
    "Gender/pronouns (if mentioned)",
    "Relationship with the AI or its owner",
    "Personal goals, objectives, or ambitions",
    "Professional background or studies",
    "Significant hobbies or interests (not casual mentions)",
    "Important personal context or situations",
    "Personality traits that are clearly evident",
)

SUMMARY_EXCLUDE = (
    "Trivial preferences (likes pizza, prefers blue, etc.)",
    "Temporary emotions or moods",
    "Casual game mentions unless significant",
    "Random questions or one-off topics",
    "Information that doesn't add meaningful context",
    "Overly detailed descriptions",
)


def build_summary_prompt(context: ConversationContext, recent: int = 15) -> str:
    """Build the prompt asking whether the stored user summary needs an update."""
    role_names: Dict[MessageRole, str] = {
        MessageRole.USER: context.user_name or "User",
        MessageRole.ASSISTANT: "AI",
        MessageRole.SYSTEM: "System",
    }

    lines: List[str] = [
        "# USER SUMMARY ANALYSIS SYSTEM",
        "",
        "You are an AI assistant that analyzes conversations to create and update user summaries.",
        "",
        "## SUMMARY RULES - WHAT TO INCLUDE:",
    ]
    lines.extend(f"- {item}" for item in SUMMARY_INCLUDE)
    lines.append("")
    lines.append("## SUMMARY RULES - WHAT TO EXCLUDE:")
    lines.extend(f"- {item}" for item in SUMMARY_EXCLUDE)
    lines.append("")

    lines.append("## CURRENT USER SUMMARY:")
    if context.has_summary():
        lines.extend(["```", context.user_summary, "```"])
    else:
        lines.append("No summary exists yet.")
    lines.append("")

    lines.append("## RECENT CONVERSATION MESSAGES:")
    lines.extend(
        f"{role_names[message.role]}: {message.content}"
        for message in context.get_recent_messages(recent)
    )

    lines.extend([
        "",
        "## TASK:",
        "Analyze the conversation and determine if the user summary should be updated with "
        "new important information.",
        "",
        "Respond with a JSON object in this exact format:",
        "{",
        '  "update_summary": true/false,',
        '  "content": "Complete updated summary here"',
        "}",
        "",
        "**IMPORTANT:**",
        "- If update_summary is false, do NOT include the content field",
        "- If update_summary is true, include the COMPLETE updated summary (not just new info)",
        "- Keep summaries concise but comprehensive",
        "- Only update if there's genuinely new important information",
        "",
        "Respond with JSON only, no additional text:",
    ])

    return "\n".join(lines)
