from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ListingStatus(str, Enum):
    ACTIVE = "active"
    SOLD = "sold"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self is not ListingStatus.ACTIVE


@dataclass
class MarketListing:
    id: int
    character_id: int
    seller: str
    price: int
    listing_date: int
    status: ListingStatus = ListingStatus.ACTIVE

    @property
    def is_active(self) -> bool:
        return self.status is ListingStatus.ACTIVE

    def mark_sold(self) -> None:
        if self.status.is_terminal:
            raise ValueError(f"Listing {self.id} is already {self.status.value}")
        self.status = ListingStatus.SOLD
