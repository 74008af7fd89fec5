from __future__ import annotations

from typing import List

from heromarket.application.services.clock import Clock, system_clock
from heromarket.application.services.event_bus import EventBus
from heromarket.application.services.principal import validate_principal
from heromarket.domain.errors import InvalidInput, NotFound, Unauthorized
from heromarket.domain.events import CharacterListed
from heromarket.domain.models.listing import ListingStatus, MarketListing
from heromarket.domain.repositories import MarketStore
from heromarket.domain.services.balance_tables import U64_MAX


class MarketLedgerService:
    def __init__(self, store: MarketStore, *, clock: Clock = system_clock, event_bus: EventBus | None = None) -> None:
        self._store = store
        self._clock = clock
        self._event_bus = event_bus

    @staticmethod
    def _validate_price(price: int) -> int:
        if isinstance(price, bool) or not isinstance(price, int):
            raise InvalidInput("Price must be a whole number")
        if price < 0 or price > U64_MAX:
            raise InvalidInput(f"Price must be between 0 and {U64_MAX}")
        return price

    def list_character(self, character_id: int, price: int, caller: str) -> MarketListing:
        """Offer a character for sale.

        The character is not locked: listing it again while an earlier listing
        is still active creates a second, independent offer.
        """
        price = self._validate_price(price)
        seller = validate_principal(caller)
        now = int(self._clock())
        with self._store.unit_of_work() as uow:
            character = uow.characters.get_for_update(int(character_id))
            if character is None:
                raise NotFound("character", int(character_id))
            if not character.is_owned_by(caller):
                raise Unauthorized("Not the character owner")

            listing = MarketListing(
                id=uow.identifiers.next_id(),
                character_id=character.id,
                seller=seller,
                price=price,
                listing_date=now,
                status=ListingStatus.ACTIVE,
            )
            uow.listings.save(listing)

        if self._event_bus is not None:
            self._event_bus.publish(
                CharacterListed(
                    listing_id=listing.id,
                    character_id=listing.character_id,
                    seller=listing.seller,
                    price=listing.price,
                    listed_at=now,
                )
            )
        return listing

    def get_active_listings(self) -> List[MarketListing]:
        with self._store.unit_of_work() as uow:
            return list(uow.listings.iter_by_status(ListingStatus.ACTIVE))

    def get_listing(self, listing_id: int) -> MarketListing:
        with self._store.unit_of_work() as uow:
            listing = uow.listings.get(int(listing_id))
        if listing is None:
            raise NotFound("listing", int(listing_id))
        return listing
