"""
Character Fields
The closed sets of form fields: history-tracked bio fields and plain sheet fields.
"""

from enum import Enum
from typing import Dict, List, Optional

from app.core.errors import UnknownField


class BioField(str, Enum):
    """Bio fields written by the AI and tracked in version history.

    Values are the keys the AI reply and the API use. Declaration order is the
    order generation results are applied and bio sections are exported.
    """
    APPEARANCE = "appearance"
    BACKGROUND = "background"
    PERSONALITY = "personality"
    AFFILIATIONS = "affiliations"
    CATCHPHRASE = "catchphrase"
    LANGUAGE_QUIRKS = "languageQuirks"
    SUPERSTITIONS = "superstitions"
    DIET = "diet"
    SECRETS = "secrets"
    CHARACTER_FLAWS = "characterFlaws"
    WHAT_EXCITES = "whatExcites"
    DYNAMIC_GOALS = "dynamicGoals"
    MOST_WANT = "mostWant"
    WONT_DO = "wontDo"

    @property
    def label(self) -> str:
        return BIO_LABELS[self]

    @classmethod
    def coerce(cls, field) -> "BioField":
        """Resolve a member or wire key, raising UnknownField otherwise."""
        if isinstance(field, cls):
            return field
        try:
            return cls(field)
        except ValueError:
            raise UnknownField(field) from None


BIO_LABELS: Dict[BioField, str] = {
    BioField.APPEARANCE: "Appearance",
    BioField.BACKGROUND: "Background",
    BioField.PERSONALITY: "Personality",
    BioField.AFFILIATIONS: "Affiliations",
    BioField.CATCHPHRASE: "Catchphrase",
    BioField.LANGUAGE_QUIRKS: "Language Quirks",
    BioField.SUPERSTITIONS: "Superstitions",
    BioField.DIET: "Diet",
    BioField.SECRETS: "Secrets",
    BioField.CHARACTER_FLAWS: "Character Flaws",
    BioField.WHAT_EXCITES: "What Excites",
    BioField.DYNAMIC_GOALS: "Dynamic Goals",
    BioField.MOST_WANT: "Most Want",
    BioField.WONT_DO: "Won't Do",
}


# Character sheet fields: prompt and export input only, never versioned
SHEET_FIELDS: List[str] = [
    "playerName", "characterName", "sex", "level", "ancestry", "alignment",
    "strength", "speed", "intellect", "willpower", "awareness", "presence",
    "health", "focus", "marks", "liftingCapacity", "movement", "recoveryDie",
    "sensesRange", "conditionsInjuries", "expertises", "talents",
    "weapons", "armorEquipment", "connections",
]

ATTRIBUTE_FIELDS: List[str] = ["strength", "speed", "intellect", "willpower", "awareness", "presence"]


class Alignment(str, Enum):
    """The alignment grid tiles."""
    LAWFUL_GOOD = "Lawful Good"
    NEUTRAL_GOOD = "Neutral Good"
    CHAOTIC_GOOD = "Chaotic Good"
    LAWFUL_NEUTRAL = "Lawful Neutral"
    TRUE_NEUTRAL = "True Neutral"
    CHAOTIC_NEUTRAL = "Chaotic Neutral"
    LAWFUL_EVIL = "Lawful Evil"
    NEUTRAL_EVIL = "Neutral Evil"
    CHAOTIC_EVIL = "Chaotic Evil"


def toggle_alignment(current: str, chosen: Alignment) -> Optional[Alignment]:
    """Selecting the selected tile clears it; any other tile replaces the selection."""
    if current == chosen.value:
        return None
    return chosen
