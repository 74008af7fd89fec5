from __future__ import annotations

import logging

from heromarket.application.services.event_bus import EventBus
from heromarket.application.services.principal import validate_principal
from heromarket.domain.errors import ListingNotActive, NotFound
from heromarket.domain.events import CharacterPurchased
from heromarket.domain.models.character import Character
from heromarket.domain.models.listing import ListingStatus
from heromarket.domain.repositories import MarketStore


logger = logging.getLogger(__name__)


class PurchaseService:
    """Moves a character to a buyer and closes the listing in one unit of work."""

    def __init__(self, store: MarketStore, *, event_bus: EventBus | None = None) -> None:
        self._store = store
        self._event_bus = event_bus

    def purchase(self, listing_id: int, buyer: str) -> Character:
        buyer = validate_principal(buyer)
        with self._store.unit_of_work() as uow:
            listing = uow.listings.get(int(listing_id))
            if listing is None:
                raise NotFound("listing", int(listing_id))
            if not listing.is_active:
                raise ListingNotActive(listing.id, listing.status.value)

            character = uow.characters.get_for_update(listing.character_id)
            if character is None:
                raise NotFound("character", listing.character_id)

            seller = listing.seller
            listing.mark_sold()
            if not uow.listings.compare_and_set(listing, expected=ListingStatus.ACTIVE):
                # Another buyer closed it between our read and the flip.
                current = uow.listings.get(listing.id)
                status = current.status.value if current is not None else "missing"
                raise ListingNotActive(listing.id, status)

            character.owner = buyer
            uow.characters.save(character)

        logger.debug("Listing %s sold to %s", listing.id, character.owner)
        if self._event_bus is not None:
            self._event_bus.publish(
                CharacterPurchased(
                    listing_id=listing.id,
                    character_id=character.id,
                    seller=seller,
                    buyer=character.owner,
                    price=listing.price,
                )
            )
        return character
