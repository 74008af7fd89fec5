from __future__ import annotations

import logging

from heromarket.application.services.clock import Clock, system_clock
from heromarket.application.services.event_bus import EventBus
from heromarket.application.services.principal import validate_principal
from heromarket.domain.errors import CooldownActive, InvalidInput, NotFound, Unauthorized
from heromarket.domain.events import CharacterCreated, CharacterTrained
from heromarket.domain.models.character import Character, CharacterClass, Stat
from heromarket.domain.repositories import MarketStore
from heromarket.domain.services.balance_tables import (
    STARTING_EXPERIENCE,
    STARTING_LEVEL,
    TRAINING_HISTORY_MAX_DEFAULT,
    base_stats_for_class,
)
from heromarket.domain.services.training_rules import (
    BaseGainPolicy,
    build_training_session,
    cooldown_remaining,
    legacy_xor_base_gain,
)


logger = logging.getLogger(__name__)

NAME_MAX_LENGTH = 64


class CharacterLedgerService:
    def __init__(
        self,
        store: MarketStore,
        *,
        clock: Clock = system_clock,
        event_bus: EventBus | None = None,
        gain_policy: BaseGainPolicy = legacy_xor_base_gain,
        history_max: int = TRAINING_HISTORY_MAX_DEFAULT,
    ) -> None:
        self._store = store
        self._clock = clock
        self._event_bus = event_bus
        self._gain_policy = gain_policy
        self._history_max = max(1, int(history_max))

    @staticmethod
    def _validate_name(name: str) -> str:
        if not isinstance(name, str) or not name.strip():
            raise InvalidInput("Name cannot be empty")
        if len(name) > NAME_MAX_LENGTH:
            raise InvalidInput(f"Name cannot exceed {NAME_MAX_LENGTH} characters")
        return name

    @staticmethod
    def _resolve_stat(stat: Stat | str) -> Stat:
        try:
            return Stat.normalize(stat)
        except ValueError as exc:
            raise InvalidInput(str(exc)) from exc

    def create(self, name: str, character_class: CharacterClass | str, caller: str) -> Character:
        name = self._validate_name(name)
        owner = validate_principal(caller)
        try:
            resolved_class = CharacterClass.normalize(character_class)
        except ValueError as exc:
            raise InvalidInput(str(exc)) from exc

        now = int(self._clock())
        with self._store.unit_of_work() as uow:
            character = Character(
                id=uow.identifiers.next_id(),
                owner=owner,
                name=name,
                character_class=resolved_class,
                stats=base_stats_for_class(resolved_class),
                level=STARTING_LEVEL,
                experience=STARTING_EXPERIENCE,
                creation_date=now,
                last_training=now,
            )
            uow.characters.save(character)

        logger.debug("Created character %s for %s", character.id, character.owner)
        self._publish(
            CharacterCreated(
                character_id=character.id,
                owner=character.owner,
                character_class=resolved_class.value,
                created_at=now,
            )
        )
        return character

    def train(self, character_id: int, stat: Stat | str, caller: str) -> Character:
        target = self._resolve_stat(stat)
        now = int(self._clock())
        with self._store.unit_of_work() as uow:
            character = uow.characters.get_for_update(int(character_id))
            if character is None:
                raise NotFound("character", int(character_id))
            if not character.is_owned_by(caller):
                raise Unauthorized("Not the character owner")

            remaining = cooldown_remaining(character, now)
            if remaining > 0:
                raise CooldownActive(remaining)

            session = build_training_session(character, target, now, self._gain_policy)
            character.record_training(session, history_max=self._history_max)
            uow.characters.save(character)

        self._publish(
            CharacterTrained(
                character_id=character.id,
                stat=target.value,
                gain=session.gain,
                trained_at=now,
            )
        )
        return character

    def get(self, character_id: int) -> Character:
        with self._store.unit_of_work() as uow:
            character = uow.characters.get(int(character_id))
        if character is None:
            raise NotFound("character", int(character_id))
        return character

    def _publish(self, event: object) -> None:
        if self._event_bus is not None:
            self._event_bus.publish(event)
