"""Exception hierarchy for ledger operations.

Two families live here:

* ``MarketError`` subclasses are ordinary outcomes a caller can act on
  (bad input, unknown id, wrong owner, cooldown, stale listing). The gateway
  turns them into result values.
* ``StorageError`` subclasses mean the durable store could not be trusted for
  this call. They abort the unit of work and propagate to the host.
"""

from __future__ import annotations


class MarketError(Exception):
    code = "market_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidInput(MarketError):
    code = "invalid_input"


class NotFound(MarketError):
    code = "not_found"

    def __init__(self, kind: str, record_id: int) -> None:
        super().__init__(f"{kind.capitalize()} {record_id} not found")
        self.kind = kind
        self.record_id = record_id


class Unauthorized(MarketError):
    code = "unauthorized"


class CooldownActive(MarketError):
    code = "cooldown_active"

    def __init__(self, remaining_seconds: int) -> None:
        super().__init__(f"Training cooldown not finished ({remaining_seconds}s remaining)")
        self.remaining_seconds = remaining_seconds


class ListingNotActive(MarketError):
    code = "listing_not_active"

    def __init__(self, listing_id: int, status: str) -> None:
        super().__init__(f"Listing {listing_id} is not active (status: {status})")
        self.listing_id = listing_id
        self.status = status


class StorageError(RuntimeError):
    """Base exception for durable-store failures."""


class RecordTooLargeError(StorageError):
    def __init__(self, kind: str, size: int, limit: int) -> None:
        super().__init__(f"Encoded {kind} record is {size} bytes; limit is {limit}")
        self.kind = kind
        self.size = size
        self.limit = limit


class RecordDecodeError(StorageError):
    pass


class IdentifierExhaustedError(StorageError):
    pass
