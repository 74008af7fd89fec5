from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Iterator, Optional

from heromarket.domain.models.character import Character
from heromarket.domain.models.listing import ListingStatus, MarketListing


class IdentifierIssuer(ABC):
    @abstractmethod
    def next_id(self) -> int:
        """Return the current counter value and persist counter + 1."""
        raise NotImplementedError

    @abstractmethod
    def peek(self) -> int:
        raise NotImplementedError


class CharacterRepository(ABC):
    @abstractmethod
    def get(self, character_id: int) -> Optional[Character]:
        raise NotImplementedError

    def get_for_update(self, character_id: int) -> Optional[Character]:
        """Read a character the caller is about to rewrite, locking it until the unit of work ends."""
        return self.get(character_id)

    @abstractmethod
    def save(self, character: Character) -> None:
        raise NotImplementedError

    @abstractmethod
    def iter_all(self) -> Iterator[Character]:
        raise NotImplementedError


class ListingRepository(ABC):
    @abstractmethod
    def get(self, listing_id: int) -> Optional[MarketListing]:
        raise NotImplementedError

    @abstractmethod
    def save(self, listing: MarketListing) -> None:
        raise NotImplementedError

    @abstractmethod
    def iter_all(self) -> Iterator[MarketListing]:
        """Yield every listing in ascending id order."""
        raise NotImplementedError

    @abstractmethod
    def compare_and_set(self, listing: MarketListing, *, expected: ListingStatus) -> bool:
        """Store ``listing`` only if the stored status still equals ``expected``."""
        raise NotImplementedError

    def iter_by_status(self, status: ListingStatus) -> Iterator[MarketListing]:
        for listing in self.iter_all():
            if listing.status is status:
                yield listing


class UnitOfWork(ABC):
    """Both ledgers and the counter, bound to one atomic store transaction."""

    characters: CharacterRepository
    listings: ListingRepository
    identifiers: IdentifierIssuer


class MarketStore(ABC):
    @abstractmethod
    def unit_of_work(self) -> AbstractContextManager[UnitOfWork]:
        """Open a unit of work; every write inside it commits or rolls back together."""
        raise NotImplementedError

    def close(self) -> None:
        return None
