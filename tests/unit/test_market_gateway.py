import sys
from pathlib import Path
import unittest
from unittest import mock

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from heromarket.application.dtos import (
    CreateCharacterPayload,
    ListCharacterPayload,
    PurchaseCharacterPayload,
    TrainCharacterPayload,
)
from heromarket.application.services.clock import FrozenClock
from heromarket.bootstrap import build_gateway
from heromarket.domain.errors import RecordTooLargeError
from heromarket.domain.models.listing import ListingStatus
from heromarket.domain.services.balance_tables import TRAINING_COOLDOWN_SECONDS
from heromarket.infrastructure import record_codec
from heromarket.infrastructure.inmemory.market_store import InMemoryMarketStore


T0 = 1_700_000_000


class MarketGatewayTests(unittest.TestCase):
    def setUp(self) -> None:
        self.store = InMemoryMarketStore()
        self.clock = FrozenClock(T0)
        self.gateway = build_gateway(self.store, clock=self.clock)

    def _create(self, name: str = "Conan", character_class: str = "warrior", caller: str = "alice"):
        return self.gateway.create_character(CreateCharacterPayload(name, character_class), caller).unwrap()

    def test_warrior_trains_only_after_cooldown(self) -> None:
        conan = self._create()
        self.assertEqual(
            (10, 5, 3, 8, 5),
            (conan.stats.strength, conan.stats.agility, conan.stats.intelligence, conan.stats.vitality, conan.stats.luck),
        )

        early = self.gateway.train_character(TrainCharacterPayload(conan.id, "strength"), "alice")
        self.assertFalse(early.ok)
        self.assertEqual("cooldown_active", early.error)

        now = self.clock.advance(TRAINING_COOLDOWN_SECONDS)
        trained = self.gateway.train_character(TrainCharacterPayload(conan.id, "strength"), "alice")

        self.assertTrue(trained.ok)
        self.assertEqual(10 + ((now ^ conan.id) % 3) + 1, trained.value.stats.strength)
        self.assertEqual(1, len(trained.value.training_history))

    def test_listing_sells_once(self) -> None:
        hero = self._create()
        listed = self.gateway.list_character(ListCharacterPayload(hero.id, 100), "alice")
        self.assertTrue(listed.ok)
        listing = listed.value

        bought = self.gateway.purchase_character(PurchaseCharacterPayload(listing.id), "bob")
        self.assertTrue(bought.ok)
        self.assertEqual("bob", self.gateway.get_character(hero.id).value.owner)

        again = self.gateway.purchase_character(PurchaseCharacterPayload(listing.id), "carol")
        self.assertFalse(again.ok)
        self.assertEqual("listing_not_active", again.error)
        self.assertIn(str(listing.id), again.message)
        self.assertIs(ListingStatus.SOLD, self.gateway.market_ledger.get_listing(listing.id).status)
        self.assertEqual([], self.gateway.get_market_listings())

    def test_domain_errors_come_back_as_values(self) -> None:
        hero = self._create()

        cases = [
            (self.gateway.create_character(CreateCharacterPayload("", "warrior"), "alice"), "invalid_input"),
            (self.gateway.create_character(CreateCharacterPayload("Bob", "bard"), "alice"), "invalid_input"),
            (self.gateway.get_character(404), "not_found"),
            (self.gateway.train_character(TrainCharacterPayload(hero.id, "strength"), "mallory"), "unauthorized"),
            (self.gateway.list_character(ListCharacterPayload(hero.id, -5), "alice"), "invalid_input"),
            (self.gateway.list_character(ListCharacterPayload(hero.id, 5), "mallory"), "unauthorized"),
            (self.gateway.purchase_character(PurchaseCharacterPayload(77), "bob"), "not_found"),
        ]

        for result, code in cases:
            self.assertFalse(result.ok)
            self.assertIsNone(result.value)
            self.assertEqual(code, result.error)
            self.assertTrue(result.message)

    def test_malformed_record_ids_are_invalid_input(self) -> None:
        hero = self._create()

        cases = [
            self.gateway.get_character("zero"),
            self.gateway.get_character(None),
            self.gateway.get_character(1.5),
            self.gateway.train_character(TrainCharacterPayload("abc", "strength"), "alice"),
            self.gateway.list_character(ListCharacterPayload([hero.id], 10), "alice"),
            self.gateway.purchase_character(PurchaseCharacterPayload(True), "bob"),
        ]

        for result in cases:
            self.assertFalse(result.ok)
            self.assertEqual("invalid_input", result.error)
            self.assertIn("must be a whole number", result.message)
        self.assertEqual("Conan", self.gateway.get_character(str(hero.id)).value.name)

    def test_overlong_principal_is_invalid_input(self) -> None:
        hero = self._create()
        listing = self.gateway.list_character(ListCharacterPayload(hero.id, 10), "alice").unwrap()
        principal = "p" * 256

        created = self.gateway.create_character(CreateCharacterPayload("Giant", "warrior"), principal)
        bought = self.gateway.purchase_character(PurchaseCharacterPayload(listing.id), principal)

        self.assertEqual(("invalid_input", "invalid_input"), (created.error, bought.error))
        self.assertEqual(2, self.store.counter_value())
        self.assertEqual("alice", self.gateway.get_character(hero.id).value.owner)
        self.assertTrue(self.gateway.create_character(CreateCharacterPayload("Edge", "mage"), "p" * 255).ok)

    def test_queries_do_not_mutate(self) -> None:
        hero = self._create()
        self.gateway.list_character(ListCharacterPayload(hero.id, 10), "alice")
        counter = self.store.counter_value()

        first = (self.gateway.get_character(hero.id).value, self.gateway.get_market_listings())
        second = (self.gateway.get_character(hero.id).value, self.gateway.get_market_listings())

        self.assertEqual(first, second)
        self.assertEqual(counter, self.store.counter_value())

    def test_oversized_record_is_fatal_and_rolls_back(self) -> None:
        self._create()
        with mock.patch.dict(record_codec._LIMITS, {record_codec.CHARACTER_KIND: 64}):
            with self.assertRaises(RecordTooLargeError):
                self.gateway.create_character(CreateCharacterPayload("Giant", "warrior"), "alice")

        self.assertEqual(1, self.store.counter_value())
        self.assertIsNone(self.store.raw_character(1))

    def test_audit_log_records_commits(self) -> None:
        with self.assertLogs("heromarket.audit", "INFO") as captured:
            hero = self._create()
            self.gateway.list_character(ListCharacterPayload(hero.id, 10), "alice")

        self.assertEqual(["CharacterCreated", "CharacterListed"], [record.event for record in captured.records])


if __name__ == "__main__":
    unittest.main()
