import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from heromarket.application.services.audit_log import register_audit_handlers
from heromarket.application.services.event_bus import EventBus
from heromarket.domain.events import CharacterListed, CharacterPurchased


class AuditLogTests(unittest.TestCase):
    def test_ledger_events_are_written_to_audit_logger(self) -> None:
        bus = EventBus()
        register_audit_handlers(bus)

        with self.assertLogs("heromarket.audit", "INFO") as captured:
            bus.publish(CharacterListed(listing_id=1, character_id=0, seller="alice", price=100, listed_at=5))
            bus.publish(CharacterPurchased(listing_id=1, character_id=0, seller="alice", buyer="bob", price=100))

        self.assertEqual(2, len(captured.records))
        self.assertIn("CharacterListed", captured.output[0])
        self.assertIn("price=100", captured.output[0])
        self.assertIn("buyer=bob", captured.output[1])
        self.assertEqual("CharacterPurchased", captured.records[1].event)

    def test_unaudited_event_types_stay_silent(self) -> None:
        bus = EventBus()
        register_audit_handlers(bus)

        class Unrelated:
            pass

        with self.assertNoLogs("heromarket.audit", "INFO"):
            bus.publish(Unrelated())


if __name__ == "__main__":
    unittest.main()
