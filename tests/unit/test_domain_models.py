import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from heromarket.domain.models.character import Character, CharacterClass, Stat, Stats, TrainingSession
from heromarket.domain.models.listing import ListingStatus, MarketListing


def _character(**overrides) -> Character:
    values = dict(
        id=4,
        owner="alice",
        name="Lyra",
        character_class=CharacterClass.RANGER,
        stats=Stats(),
        creation_date=100,
        last_training=100,
    )
    values.update(overrides)
    return Character(**values)


class CharacterModelTests(unittest.TestCase):
    def test_class_normalize_accepts_enum_and_case_insensitive_names(self) -> None:
        self.assertIs(CharacterClass.MAGE, CharacterClass.normalize("Mage"))
        self.assertIs(CharacterClass.CLERIC, CharacterClass.normalize(CharacterClass.CLERIC))
        with self.assertRaises(ValueError):
            CharacterClass.normalize("bard")

    def test_stat_normalize_supports_short_aliases(self) -> None:
        self.assertIs(Stat.STRENGTH, Stat.normalize("str"))
        self.assertIs(Stat.LUCK, Stat.normalize(" LUCK "))
        with self.assertRaises(ValueError):
            Stat.normalize("charisma")

    def test_raise_stat_rejects_negative_gain(self) -> None:
        stats = Stats()
        stats.raise_stat(Stat.AGILITY, 2)
        self.assertEqual(7, stats.agility)
        with self.assertRaises(ValueError):
            stats.raise_stat(Stat.AGILITY, -1)
        self.assertEqual(7, stats.agility)

    def test_record_training_evicts_oldest_sessions_beyond_cap(self) -> None:
        character = _character()
        for offset in range(1, 6):
            character.record_training(TrainingSession(100 + offset, Stat.VITALITY, 1), history_max=3)

        self.assertEqual([103, 104, 105], [row.timestamp for row in character.training_history])
        self.assertEqual(10, character.stats.vitality)
        self.assertEqual(105, character.last_training)

    def test_record_training_refuses_to_move_time_backwards(self) -> None:
        character = _character(last_training=500)
        with self.assertRaises(ValueError):
            character.record_training(TrainingSession(499, Stat.LUCK, 1), history_max=10)
        self.assertEqual([], character.training_history)

    def test_ownership_is_plain_principal_equality(self) -> None:
        character = _character(owner="principal-abc")
        self.assertTrue(character.is_owned_by("principal-abc"))
        self.assertFalse(character.is_owned_by("principal-ABC"))


class ListingModelTests(unittest.TestCase):
    def test_listing_starts_active_and_sold_is_terminal(self) -> None:
        listing = MarketListing(id=9, character_id=4, seller="alice", price=100, listing_date=0)
        self.assertTrue(listing.is_active)

        listing.mark_sold()

        self.assertIs(ListingStatus.SOLD, listing.status)
        self.assertTrue(listing.status.is_terminal)
        with self.assertRaises(ValueError):
            listing.mark_sold()

    def test_cancelled_listing_cannot_be_sold(self) -> None:
        listing = MarketListing(
            id=9, character_id=4, seller="alice", price=100, listing_date=0, status=ListingStatus.CANCELLED
        )
        with self.assertRaises(ValueError):
            listing.mark_sold()
        self.assertIs(ListingStatus.CANCELLED, listing.status)


if __name__ == "__main__":
    unittest.main()
