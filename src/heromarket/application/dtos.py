from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from heromarket.domain.models.character import CharacterClass, Stat


T = TypeVar("T")


@dataclass
class CreateCharacterPayload:
    name: str
    character_class: CharacterClass | str


@dataclass
class TrainCharacterPayload:
    character_id: int
    stat: Stat | str


@dataclass
class ListCharacterPayload:
    character_id: int
    price: int


@dataclass
class PurchaseCharacterPayload:
    listing_id: int


@dataclass
class OperationResult(Generic[T]):
    ok: bool
    value: Optional[T] = None
    error: Optional[str] = None
    message: str = ""

    @classmethod
    def success(cls, value: T) -> "OperationResult[T]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: str, message: str) -> "OperationResult[T]":
        return cls(ok=False, error=error, message=message)

    def unwrap(self) -> T:
        if not self.ok:
            raise ValueError(f"{self.error}: {self.message}")
        return self.value  # type: ignore[return-value]
