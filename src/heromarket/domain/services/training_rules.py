"""Training cooldown and stat-gain rules.

The base gain is a small bounded reward in ``1..TRAINING_BASE_GAIN_SPREAD``.
Two policies produce it:

``legacy_xor``
    ``((now XOR character_id) mod 3) + 1``. Existing training histories were
    written with this formula, so it stays the default. Any caller who knows
    the clock can predict (and time) the roll.

``seeded``
    Draws the roll from ``random.Random`` seeded by a SHA-256 digest of the
    deployment seed, the character id and the timestamp. Still reproducible
    for audits, but not predictable without the deployment seed.
"""

from __future__ import annotations

import hashlib
import json
import random
from dataclasses import dataclass
from typing import Callable

from heromarket.domain.models.character import Character, Stat, TrainingSession
from heromarket.domain.services.balance_tables import (
    TRAINING_BASE_GAIN_SPREAD,
    TRAINING_COOLDOWN_SECONDS,
    luck_bonus,
)


BaseGainPolicy = Callable[[int, int], int]

GAIN_MODES: tuple[str, ...] = ("legacy_xor", "seeded")


def legacy_xor_base_gain(now: int, character_id: int) -> int:
    return ((int(now) ^ int(character_id)) % TRAINING_BASE_GAIN_SPREAD) + 1


def seeded_base_gain_policy(seed: int) -> BaseGainPolicy:
    def _roll(now: int, character_id: int) -> int:
        payload = json.dumps(
            {"namespace": "training.base_gain", "seed": int(seed), "character_id": int(character_id), "now": int(now)},
            sort_keys=True,
            separators=(",", ":"),
        )
        digest = hashlib.sha256(payload.encode("utf-8")).hexdigest()
        rng = random.Random(int(digest, 16) % (2**32))
        return rng.randint(1, TRAINING_BASE_GAIN_SPREAD)

    return _roll


def resolve_gain_policy(mode: str | None, *, seed: int = 1) -> BaseGainPolicy:
    normalized = str(mode or "legacy_xor").strip().lower()
    if normalized == "legacy_xor":
        return legacy_xor_base_gain
    if normalized == "seeded":
        return seeded_base_gain_policy(seed)
    raise ValueError(f"Unsupported training gain mode '{mode}'. Choose from: {', '.join(GAIN_MODES)}")


def cooldown_remaining(character: Character, now: int) -> int:
    """Seconds left before ``character`` may train again; 0 when ready."""
    elapsed = character.seconds_since_training(now)
    if elapsed < 0:
        # Clock went backwards: hold the full window from the stored timestamp.
        return TRAINING_COOLDOWN_SECONDS - elapsed
    return max(TRAINING_COOLDOWN_SECONDS - elapsed, 0)


@dataclass(frozen=True)
class TrainingOutcome:
    base_gain: int
    luck_bonus: int

    @property
    def total_gain(self) -> int:
        return self.base_gain + self.luck_bonus


def roll_training_gain(character: Character, now: int, policy: BaseGainPolicy = legacy_xor_base_gain) -> TrainingOutcome:
    base = int(policy(int(now), int(character.id)))
    if not 1 <= base <= TRAINING_BASE_GAIN_SPREAD:
        raise ValueError(f"Gain policy returned {base}; expected 1..{TRAINING_BASE_GAIN_SPREAD}")
    return TrainingOutcome(base_gain=base, luck_bonus=luck_bonus(character.stats.luck))


def build_training_session(character: Character, stat: Stat, now: int, policy: BaseGainPolicy = legacy_xor_base_gain) -> TrainingSession:
    outcome = roll_training_gain(character, now, policy)
    return TrainingSession(timestamp=int(now), stat_trained=stat, gain=outcome.total_gain)
