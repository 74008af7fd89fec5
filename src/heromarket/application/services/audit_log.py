from __future__ import annotations

import logging
from dataclasses import asdict

from heromarket.application.services.event_bus import EventBus
from heromarket.domain.events import CharacterCreated, CharacterListed, CharacterPurchased, CharacterTrained


logger = logging.getLogger("heromarket.audit")

_AUDITED_EVENTS = (CharacterCreated, CharacterTrained, CharacterListed, CharacterPurchased)


def _audit(event: object) -> None:
    fields = asdict(event)
    summary = " ".join(f"{key}={value}" for key, value in fields.items())
    logger.info("%s %s", type(event).__name__, summary, extra={"event": type(event).__name__})


def register_audit_handlers(event_bus: EventBus, *, priority: int = 1000) -> None:
    for event_type in _AUDITED_EVENTS:
        event_bus.subscribe(event_type, _audit, priority=priority)
