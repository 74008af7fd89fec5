from __future__ import annotations

from typing import Dict

from heromarket.domain.models.character import CharacterClass, Stats


TRAINING_COOLDOWN_SECONDS = 21600
TRAINING_BASE_GAIN_SPREAD = 3
LUCK_BONUS_DIVISOR = 10
TRAINING_HISTORY_MAX_DEFAULT = 10

STARTING_LEVEL = 1
STARTING_EXPERIENCE = 0

MAX_CHARACTER_RECORD_BYTES = 2048
MAX_LISTING_RECORD_BYTES = 512

# Matches the owner column width of the SQL store.
PRINCIPAL_MAX_LENGTH = 255

U64_MAX = 2**64 - 1

# Classes missing from this table start from the uniform baseline.
CLASS_BASE_STATS: Dict[CharacterClass, tuple[int, int, int, int, int]] = {
    CharacterClass.WARRIOR: (10, 5, 3, 8, 5),
    CharacterClass.MAGE: (3, 5, 10, 4, 6),
}
BASELINE_STATS: tuple[int, int, int, int, int] = (5, 5, 5, 5, 5)


def base_stats_for_class(character_class: CharacterClass) -> Stats:
    strength, agility, intelligence, vitality, luck = CLASS_BASE_STATS.get(character_class, BASELINE_STATS)
    return Stats(
        strength=strength,
        agility=agility,
        intelligence=intelligence,
        vitality=vitality,
        luck=luck,
    )


def luck_bonus(luck: int) -> int:
    """floor(luck * 0.1), computed in integers so large luck values stay exact."""
    return max(int(luck), 0) // LUCK_BONUS_DIVISOR
