import json
import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from heromarket.domain.errors import RecordDecodeError, RecordTooLargeError
from heromarket.domain.models.character import (
    Character,
    CharacterClass,
    Element,
    Equipment,
    Item,
    Rarity,
    Skill,
    Stat,
    Stats,
    TrainingSession,
)
from heromarket.domain.models.listing import ListingStatus, MarketListing
from heromarket.domain.services.balance_tables import MAX_CHARACTER_RECORD_BYTES, MAX_LISTING_RECORD_BYTES
from heromarket.infrastructure.record_codec import (
    decode_character,
    decode_listing,
    encode_character,
    encode_listing,
)


def _geared_character() -> Character:
    return Character(
        id=12,
        owner="principal-aaaa-bbbb",
        name="Séraphine",
        character_class=CharacterClass.CLERIC,
        stats=Stats(6, 5, 7, 9, 11),
        level=3,
        experience=420,
        skills=[
            Skill(id=1, name="Smite", damage=12, cooldown=3, element=Element.LIGHT, mastery_level=2),
            Skill(id=2, name="Gust", damage=4, cooldown=1, element=Element.AIR),
        ],
        equipment=Equipment(
            weapon=Item(id=10, name="Mace", rarity=Rarity.RARE, stat_bonus=Stats(2, 0, 0, 0, 0), required_level=2),
            armor=Item(id=11, name="Chain Shirt", rarity=Rarity.UNCOMMON, stat_bonus=Stats(0, 0, 0, 3, 0)),
            accessory=None,
        ),
        training_history=[
            TrainingSession(1_700_021_600, Stat.VITALITY, 3),
            TrainingSession(1_700_043_200, Stat.LUCK, 2),
        ],
        creation_date=1_700_000_000,
        last_training=1_700_043_200,
    )


class CharacterCodecTests(unittest.TestCase):
    def test_geared_character_survives_encoding(self) -> None:
        character = _geared_character()

        raw = encode_character(character)

        self.assertLessEqual(len(raw), MAX_CHARACTER_RECORD_BYTES)
        self.assertEqual(character, decode_character(raw))

    def test_envelope_is_self_describing(self) -> None:
        envelope = json.loads(encode_character(_geared_character()).decode("utf-8"))
        self.assertEqual("character", envelope["kind"])
        self.assertEqual(1, envelope["v"])
        self.assertEqual("cleric", envelope["data"]["class"])

    def test_oversized_character_is_rejected_before_storage(self) -> None:
        character = _geared_character()
        character.owner = "p" * MAX_CHARACTER_RECORD_BYTES

        with self.assertRaises(RecordTooLargeError) as ctx:
            encode_character(character)

        self.assertEqual(MAX_CHARACTER_RECORD_BYTES, ctx.exception.limit)
        self.assertGreater(ctx.exception.size, ctx.exception.limit)

    def test_full_training_history_fits_the_ceiling(self) -> None:
        character = _geared_character()
        character.equipment.accessory = Item(id=12, name="Lucky Charm", rarity=Rarity.LEGENDARY, stat_bonus=Stats(0, 0, 0, 0, 5))
        character.training_history = [
            TrainingSession(1_700_000_000 + 21_600 * index, Stat.INTELLIGENCE, 4) for index in range(10)
        ]
        self.assertLessEqual(len(encode_character(character)), MAX_CHARACTER_RECORD_BYTES)

    def test_decode_rejects_other_kinds_and_newer_versions(self) -> None:
        listing_bytes = encode_listing(MarketListing(1, 2, "alice", 10, 0))
        with self.assertRaises(RecordDecodeError):
            decode_character(listing_bytes)

        future = json.dumps({"kind": "character", "v": 99, "data": {}}).encode("utf-8")
        with self.assertRaises(RecordDecodeError):
            decode_character(future)

    def test_decode_rejects_garbage_and_malformed_data(self) -> None:
        with self.assertRaises(RecordDecodeError):
            decode_character(b"\xff\xfe not json")
        with self.assertRaises(RecordDecodeError):
            decode_character(json.dumps({"kind": "character", "v": 1, "data": {"id": 1}}).encode("utf-8"))


class ListingCodecTests(unittest.TestCase):
    def test_listing_survives_encoding(self) -> None:
        listing = MarketListing(
            id=5,
            character_id=2,
            seller="principal-aaaa-bbbb",
            price=2**64 - 1,
            listing_date=1_700_000_000,
            status=ListingStatus.SOLD,
        )
        raw = encode_listing(listing)
        self.assertLessEqual(len(raw), MAX_LISTING_RECORD_BYTES)
        self.assertEqual(listing, decode_listing(raw))

    def test_oversized_listing_is_rejected(self) -> None:
        listing = MarketListing(id=5, character_id=2, seller="s" * 600, price=1, listing_date=0)
        with self.assertRaises(RecordTooLargeError):
            encode_listing(listing)

    def test_unknown_status_is_a_decode_error(self) -> None:
        raw = json.dumps(
            {
                "kind": "market_listing",
                "v": 1,
                "data": {"id": 1, "character_id": 2, "seller": "a", "price": 3, "listing_date": 4, "status": "frozen"},
            }
        ).encode("utf-8")
        with self.assertRaises(RecordDecodeError):
            decode_listing(raw)


if __name__ == "__main__":
    unittest.main()
