"""Request/response surface of the market.

Each public method mirrors one intent in ``heromarket.application.contract``.
Domain failures come back as ``OperationResult`` values carrying a stable error
code. Storage failures are not caught: the unit of work has already rolled
back, and the host decides how to report a broken store.
"""

from __future__ import annotations

import logging
from typing import Callable, List, TypeVar

from heromarket.application.dtos import (
    CreateCharacterPayload,
    ListCharacterPayload,
    OperationResult,
    PurchaseCharacterPayload,
    TrainCharacterPayload,
)
from heromarket.application.services.character_ledger import CharacterLedgerService
from heromarket.application.services.market_ledger import MarketLedgerService
from heromarket.application.services.purchase_service import PurchaseService
from heromarket.domain.errors import InvalidInput, MarketError
from heromarket.domain.models.character import Character
from heromarket.domain.models.listing import MarketListing


logger = logging.getLogger(__name__)

T = TypeVar("T")


class MarketGateway:
    def __init__(
        self,
        character_ledger: CharacterLedgerService,
        market_ledger: MarketLedgerService,
        purchase_service: PurchaseService,
    ) -> None:
        self.character_ledger = character_ledger
        self.market_ledger = market_ledger
        self.purchase_service = purchase_service

    @staticmethod
    def _record_id(value: object, field: str) -> int:
        if isinstance(value, (bool, float)):
            raise InvalidInput(f"{field} must be a whole number, got {value!r}")
        try:
            return int(value)  # type: ignore[call-overload]
        except (TypeError, ValueError) as exc:
            raise InvalidInput(f"{field} must be a whole number, got {value!r}") from exc

    @staticmethod
    def _run(intent: str, action: Callable[[], T]) -> OperationResult[T]:
        try:
            return OperationResult.success(action())
        except MarketError as exc:
            logger.info("%s rejected: %s", intent, exc.message, extra={"intent": intent, "error_code": exc.code})
            return OperationResult.failure(exc.code, exc.message)

    def create_character(self, payload: CreateCharacterPayload, caller: str) -> OperationResult[Character]:
        return self._run(
            "create_character",
            lambda: self.character_ledger.create(payload.name, payload.character_class, caller),
        )

    def train_character(self, payload: TrainCharacterPayload, caller: str) -> OperationResult[Character]:
        return self._run(
            "train_character",
            lambda: self.character_ledger.train(
                self._record_id(payload.character_id, "character_id"), payload.stat, caller
            ),
        )

    def list_character(self, payload: ListCharacterPayload, caller: str) -> OperationResult[MarketListing]:
        return self._run(
            "list_character",
            lambda: self.market_ledger.list_character(
                self._record_id(payload.character_id, "character_id"), payload.price, caller
            ),
        )

    def purchase_character(self, payload: PurchaseCharacterPayload, caller: str) -> OperationResult[Character]:
        return self._run(
            "purchase_character",
            lambda: self.purchase_service.purchase(self._record_id(payload.listing_id, "listing_id"), caller),
        )

    def get_character(self, character_id: int) -> OperationResult[Character]:
        return self._run(
            "get_character",
            lambda: self.character_ledger.get(self._record_id(character_id, "character_id")),
        )

    def get_market_listings(self) -> List[MarketListing]:
        return self.market_ledger.get_active_listings()
