"""
Enumeration Types
------------------

Enum classes for the Daybook database models.

Enums:
    - Mood: Daily mood category attached to an entry
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from enum import Enum
from typing import List


class Mood(str, Enum):
    """
    Enumeration of mood categories, best to worst.

    The display glyph is stored separately on the entry and is not
    checked against the category.
    """

    AMAZING = "amazing"
    HAPPY = "happy"
    NEUTRAL = "neutral"
    SAD = "sad"
    AWFUL = "awful"

    @classmethod
    def choices(cls) -> List[str]:
        """Get all available mood choices."""
        return [mood.value for mood in cls]

    @property
    def emoji(self) -> str:
        """Default display glyph for the mood."""
        emoji_map = {
            Mood.AMAZING: "😄",
            Mood.HAPPY: "😊",
            Mood.NEUTRAL: "😐",
            Mood.SAD: "😢",
            Mood.AWFUL: "😭",
        }
        return emoji_map[self]

    @property
    def display_name(self) -> str:
        """Get human-readable display name."""
        return self.value.title()
