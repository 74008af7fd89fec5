"""Byte encoding for stored records.

Every record is a compact UTF-8 JSON envelope::

    {"kind": "character", "v": 1, "data": {...}}

``kind`` and ``v`` let a reader refuse bytes it does not understand instead of
misreading them after a schema change. Encoders enforce the per-kind byte
ceilings before anything reaches the store.
"""

from __future__ import annotations

import json
from typing import Any, Callable, Dict, Mapping

from heromarket.application.mappers.record_mapper import (
    character_from_dict,
    character_to_dict,
    listing_from_dict,
    listing_to_dict,
)
from heromarket.domain.errors import RecordDecodeError, RecordTooLargeError
from heromarket.domain.models.character import Character
from heromarket.domain.models.listing import MarketListing
from heromarket.domain.services.balance_tables import MAX_CHARACTER_RECORD_BYTES, MAX_LISTING_RECORD_BYTES


CHARACTER_KIND = "character"
LISTING_KIND = "market_listing"
CURRENT_VERSION = 1

# Per kind: version -> upgrade step producing the next version's data.
_UPGRADES: Dict[str, Dict[int, Callable[[Dict[str, Any]], Dict[str, Any]]]] = {
    CHARACTER_KIND: {},
    LISTING_KIND: {},
}

_LIMITS = {
    CHARACTER_KIND: MAX_CHARACTER_RECORD_BYTES,
    LISTING_KIND: MAX_LISTING_RECORD_BYTES,
}


def _encode(kind: str, data: Mapping[str, Any]) -> bytes:
    payload = json.dumps(
        {"kind": kind, "v": CURRENT_VERSION, "data": data},
        separators=(",", ":"),
        ensure_ascii=False,
    ).encode("utf-8")
    limit = _LIMITS[kind]
    if len(payload) > limit:
        raise RecordTooLargeError(kind, len(payload), limit)
    return payload


def _decode(kind: str, raw: bytes) -> Dict[str, Any]:
    try:
        envelope = json.loads(bytes(raw).decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise RecordDecodeError(f"Stored {kind} record is not valid JSON: {exc}") from exc

    if not isinstance(envelope, dict) or envelope.get("kind") != kind:
        found = envelope.get("kind") if isinstance(envelope, dict) else type(envelope).__name__
        raise RecordDecodeError(f"Expected a {kind} record, found {found!r}")

    try:
        version = int(envelope.get("v", 0))
    except (TypeError, ValueError) as exc:
        raise RecordDecodeError(f"Stored {kind} record has an invalid version") from exc
    if version < 1 or version > CURRENT_VERSION:
        raise RecordDecodeError(f"Unsupported {kind} record version {version} (reader supports <= {CURRENT_VERSION})")

    data = envelope.get("data")
    if not isinstance(data, dict):
        raise RecordDecodeError(f"Stored {kind} record has no data object")
    while version < CURRENT_VERSION:
        data = _UPGRADES[kind][version](data)
        version += 1
    return data


def encode_character(character: Character) -> bytes:
    return _encode(CHARACTER_KIND, character_to_dict(character))


def decode_character(raw: bytes) -> Character:
    data = _decode(CHARACTER_KIND, raw)
    try:
        return character_from_dict(data)
    except (KeyError, TypeError, ValueError) as exc:
        raise RecordDecodeError(f"Malformed character record: {exc}") from exc


def encode_listing(listing: MarketListing) -> bytes:
    return _encode(LISTING_KIND, listing_to_dict(listing))


def decode_listing(raw: bytes) -> MarketListing:
    data = _decode(LISTING_KIND, raw)
    try:
        return listing_from_dict(data)
    except (KeyError, TypeError, ValueError) as exc:
        raise RecordDecodeError(f"Malformed listing record: {exc}") from exc
