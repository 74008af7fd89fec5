from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Dict, Iterator, Optional

from heromarket.domain.errors import IdentifierExhaustedError
from heromarket.domain.models.character import Character
from heromarket.domain.models.listing import ListingStatus, MarketListing
from heromarket.domain.repositories import (
    CharacterRepository,
    IdentifierIssuer,
    ListingRepository,
    MarketStore,
    UnitOfWork,
)
from heromarket.domain.services.balance_tables import U64_MAX
from heromarket.infrastructure.record_codec import (
    decode_character,
    decode_listing,
    encode_character,
    encode_listing,
)


class InMemoryIdentifierIssuer(IdentifierIssuer):
    def __init__(self, store: "InMemoryMarketStore") -> None:
        self._store = store

    def next_id(self) -> int:
        current = self._store._counter
        if current > U64_MAX:
            raise IdentifierExhaustedError("Identifier counter exhausted the 64-bit range")
        self._store._counter = current + 1
        return current

    def peek(self) -> int:
        return self._store._counter


class InMemoryCharacterRepository(CharacterRepository):
    def __init__(self, store: "InMemoryMarketStore") -> None:
        self._store = store

    def get(self, character_id: int) -> Character | None:
        raw = self._store._characters.get(int(character_id))
        return decode_character(raw) if raw is not None else None

    def save(self, character: Character) -> None:
        self._store._characters[int(character.id)] = encode_character(character)

    def iter_all(self) -> Iterator[Character]:
        for key in sorted(self._store._characters):
            yield decode_character(self._store._characters[key])


class InMemoryListingRepository(ListingRepository):
    def __init__(self, store: "InMemoryMarketStore") -> None:
        self._store = store

    def get(self, listing_id: int) -> MarketListing | None:
        raw = self._store._listings.get(int(listing_id))
        return decode_listing(raw) if raw is not None else None

    def save(self, listing: MarketListing) -> None:
        self._store._listings[int(listing.id)] = encode_listing(listing)

    def iter_all(self) -> Iterator[MarketListing]:
        for key in sorted(self._store._listings):
            yield decode_listing(self._store._listings[key])

    def compare_and_set(self, listing: MarketListing, *, expected: ListingStatus) -> bool:
        current = self.get(listing.id)
        if current is None or current.status is not expected:
            return False
        self.save(listing)
        return True


class _InMemoryUnitOfWork(UnitOfWork):
    def __init__(self, store: "InMemoryMarketStore") -> None:
        self.characters = InMemoryCharacterRepository(store)
        self.listings = InMemoryListingRepository(store)
        self.identifiers = InMemoryIdentifierIssuer(store)


class InMemoryMarketStore(MarketStore):
    """Ordered in-process store holding encoded records.

    Records are kept as encoded bytes so readers always get detached copies and
    the size ceilings apply exactly as they do for the SQL store. A unit of work
    holds the store lock for its whole duration and restores the previous
    regions if anything inside it raises.
    """

    def __init__(self, *, initial_counter: int = 0) -> None:
        self._characters: Dict[int, bytes] = {}
        self._listings: Dict[int, bytes] = {}
        self._counter = int(initial_counter)
        self._lock = threading.RLock()

    @contextmanager
    def unit_of_work(self) -> Iterator[UnitOfWork]:
        with self._lock:
            snapshot = {
                "characters": dict(self._characters),
                "listings": dict(self._listings),
                "counter": self._counter,
            }
            try:
                yield _InMemoryUnitOfWork(self)
            except BaseException:
                self._characters = snapshot["characters"]
                self._listings = snapshot["listings"]
                self._counter = snapshot["counter"]
                raise

    def counter_value(self) -> int:
        return self._counter

    def raw_character(self, character_id: int) -> Optional[bytes]:
        return self._characters.get(int(character_id))
