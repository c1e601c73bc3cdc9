"""
Image and emoji catalog used by embeds and the AI chat.
Loaded from DATA_DIR/assets.json with built-in defaults.
"""

import json
import random
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from utils.discord import DEFAULT_AVATAR_URL
from utils.logger import get_logger

logger = get_logger("Assets")

ASSETS_FILE_NAME = "assets.json"

IMAGE_CATEGORIES = ("avatar", "emotions", "reactions", "talking", "thinking", "showing", "misc")

# Searched in this order when resolving a bare thumbnail name
THUMBNAIL_SEARCH_ORDER = IMAGE_CATEGORIES

DEFAULT_ASSETS: Dict[str, Any] = {
    "images": {
        "avatar": {"pointing": DEFAULT_AVATAR_URL},
        "emotions": {},
        "reactions": {},
        "talking": {},
        "thinking": {},
        "showing": {},
        "misc": {},
    },
    "emojis": {
        "status": {},
        "confirmations": {},
        "emotions": {},
        "technology": {},
        "actions": {},
        "interface": {},
    },
}


class AssetCatalog:
    """Named image URLs and custom emoji strings, grouped by category."""

    def __init__(self, images: Dict[str, Dict[str, str]], emojis: Dict[str, Dict[str, str]]):
        self.images = {category: dict(images.get(category, {})) for category in IMAGE_CATEGORIES}
        for category, entries in images.items():
            self.images.setdefault(category, dict(entries))
        self.emojis = {category: dict(entries) for category, entries in emojis.items()}

    @classmethod
    def defaults(cls) -> "AssetCatalog":
        return cls(DEFAULT_ASSETS["images"], DEFAULT_ASSETS["emojis"])

    @classmethod
    def load(cls, path: Path) -> "AssetCatalog":
        """
        Load the catalog from JSON, falling back to defaults when missing or invalid.

        Expected layout: ``{"images": {category: {name: url}}, "emojis": {category: {name: emoji}}}``
        """
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8"))
        except FileNotFoundError:
            logger.info(f"No asset file at {path}, using defaults")
            return cls.defaults()
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Failed to read assets from {path}: {e}")
            return cls.defaults()

        if not isinstance(data, dict):
            logger.warning(f"Unexpected asset format in {path}")
            return cls.defaults()

        images = data.get("images") or {}
        emojis = data.get("emojis") or {}
        catalog = cls(images, emojis)
        if not any(catalog.images.values()):
            catalog.images["avatar"] = dict(DEFAULT_ASSETS["images"]["avatar"])
        logger.info(f"Loaded {catalog.total_images()} images from {path}")
        return catalog

    def get_image(self, category: str, name: str) -> Optional[str]:
        return self.images.get(category, {}).get(name)

    def find_image(self, name: str) -> Optional[str]:
        """Find an image by name across categories."""
        for category in THUMBNAIL_SEARCH_ORDER:
            url = self.get_image(category, name)
            if url:
                return url
        return None

    def get_random_avatar(self, rng: Optional[random.Random] = None) -> str:
        avatars = list(self.images.get("avatar", {}).values())
        if not avatars:
            return DEFAULT_AVATAR_URL
        return (rng or random).choice(avatars)

    def resolve_thumbnail(self, name: Optional[str], fallback: Optional[Tuple[str, str]] = None) -> str:
        """
        Get a thumbnail URL by bare name, then by (category, name), then any avatar.
        """
        if name:
            url = self.find_image(name)
            if url:
                return url
        if fallback:
            url = self.get_image(*fallback)
            if url:
                return url
        return self.get_random_avatar()

    def list_categories(self) -> List[str]:
        return list(self.images.keys())

    def list_images(self, category: str) -> List[str]:
        return sorted(self.images.get(category, {}).keys())

    def total_images(self) -> int:
        return sum(len(entries) for entries in self.images.values())

    def get_emoji(self, category: str, name: str) -> Optional[str]:
        return self.emojis.get(category, {}).get(name)
