from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class CharacterClass(str, Enum):
    WARRIOR = "warrior"
    MAGE = "mage"
    ROGUE = "rogue"
    CLERIC = "cleric"
    RANGER = "ranger"

    @classmethod
    def normalize(cls, value: "str | CharacterClass | None") -> "CharacterClass":
        if isinstance(value, cls):
            return value
        raw = str(value or "").strip().lower()
        for item in cls:
            if item.value == raw:
                return item
        valid = ", ".join(item.value for item in cls)
        raise ValueError(f"Unknown character class '{value}'. Expected one of: {valid}")


class Stat(str, Enum):
    STRENGTH = "strength"
    AGILITY = "agility"
    INTELLIGENCE = "intelligence"
    VITALITY = "vitality"
    LUCK = "luck"

    @classmethod
    def normalize(cls, value: "str | Stat | None") -> "Stat":
        if isinstance(value, cls):
            return value
        raw = str(value or "").strip().lower()
        aliases = {"str": "strength", "agi": "agility", "int": "intelligence", "vit": "vitality", "lck": "luck"}
        resolved = aliases.get(raw, raw)
        for item in cls:
            if item.value == resolved:
                return item
        valid = ", ".join(item.value for item in cls)
        raise ValueError(f"Unknown stat '{value}'. Expected one of: {valid}")


class Element(str, Enum):
    FIRE = "fire"
    WATER = "water"
    EARTH = "earth"
    AIR = "air"
    LIGHT = "light"
    DARK = "dark"


class Rarity(str, Enum):
    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"


@dataclass
class Stats:
    strength: int = 5
    agility: int = 5
    intelligence: int = 5
    vitality: int = 5
    luck: int = 5

    def value_of(self, stat: Stat) -> int:
        return int(getattr(self, stat.value))

    def raise_stat(self, stat: Stat, gain: int) -> None:
        """Add a non-negative gain to one stat; stats never decrease."""
        if int(gain) < 0:
            raise ValueError("Stat gains cannot be negative")
        setattr(self, stat.value, self.value_of(stat) + int(gain))


@dataclass
class Skill:
    id: int
    name: str
    damage: int
    cooldown: int
    element: Element
    mastery_level: int = 0


@dataclass
class Item:
    id: int
    name: str
    rarity: Rarity
    stat_bonus: Stats = field(default_factory=lambda: Stats(0, 0, 0, 0, 0))
    required_level: int = 1


@dataclass
class Equipment:
    weapon: Optional[Item] = None
    armor: Optional[Item] = None
    accessory: Optional[Item] = None


@dataclass(frozen=True)
class TrainingSession:
    timestamp: int
    stat_trained: Stat
    gain: int


@dataclass
class Character:
    id: int
    owner: str
    name: str
    character_class: CharacterClass
    stats: Stats
    level: int = 1
    experience: int = 0
    skills: List[Skill] = field(default_factory=list)
    equipment: Equipment = field(default_factory=Equipment)
    training_history: List[TrainingSession] = field(default_factory=list)
    creation_date: int = 0
    last_training: int = 0

    def is_owned_by(self, principal: str) -> bool:
        return self.owner == str(principal)

    def seconds_since_training(self, now: int) -> int:
        return int(now) - int(self.last_training)

    def record_training(self, session: TrainingSession, *, history_max: int) -> None:
        """Apply a training session and keep only the newest ``history_max`` entries."""
        if session.timestamp < self.last_training:
            raise ValueError("Training time cannot move backwards")
        self.stats.raise_stat(session.stat_trained, session.gain)
        self.training_history.append(session)
        if history_max > 0 and len(self.training_history) > history_max:
            del self.training_history[:-history_max]
        self.last_training = int(session.timestamp)
