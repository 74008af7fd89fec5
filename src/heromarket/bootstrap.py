import logging
import os
import socket
from urllib.parse import urlparse

from heromarket.application.gateway import MarketGateway
from heromarket.application.services.audit_log import register_audit_handlers
from heromarket.application.services.character_ledger import CharacterLedgerService
from heromarket.application.services.clock import Clock, system_clock
from heromarket.application.services.event_bus import EventBus
from heromarket.application.services.market_ledger import MarketLedgerService
from heromarket.application.services.purchase_service import PurchaseService
from heromarket.domain.repositories import MarketStore
from heromarket.domain.services.balance_tables import TRAINING_HISTORY_MAX_DEFAULT
from heromarket.domain.services.training_rules import resolve_gain_policy
from heromarket.infrastructure.inmemory.market_store import InMemoryMarketStore


logger = logging.getLogger(__name__)

_DEFAULT_PORTS = {"mysql": 3306, "postgresql": 5432}


def _looks_like_local_database_unreachable(database_url: str) -> bool:
    if not database_url:
        return False

    parsed = urlparse(database_url)
    scheme = parsed.scheme.split("+", 1)[0]
    if scheme not in _DEFAULT_PORTS:
        return False

    host = (parsed.hostname or "").strip().lower()
    if host not in {"localhost", "127.0.0.1", "::1"}:
        return False

    port = parsed.port or _DEFAULT_PORTS[scheme]
    timeout = float(os.getenv("HEROMARKET_DB_CONNECT_PROBE_TIMEOUT_S", "0.35"))

    try:
        with socket.create_connection((host, port), timeout=timeout):
            return False
    except OSError:
        return True


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r; using %s", name, raw, default)
        return default


def create_market_store() -> MarketStore:
    database_url = os.getenv("HEROMARKET_DATABASE_URL")
    if database_url:
        if _looks_like_local_database_unreachable(database_url):
            print("Database appears unreachable, falling back to in-memory.")
            return InMemoryMarketStore()
        from heromarket.infrastructure.db.sql.market_store import SqlMarketStore

        try:
            return SqlMarketStore.from_url(database_url)
        except Exception as exc:  # pragma: no cover - best-effort fallback
            print(f"Database unavailable, falling back to in-memory. Reason: {exc}")

    return InMemoryMarketStore()


def build_gateway(store: MarketStore, *, clock: Clock = system_clock, event_bus: EventBus | None = None) -> MarketGateway:
    event_bus = event_bus or EventBus()
    register_audit_handlers(event_bus)

    gain_policy = resolve_gain_policy(
        os.getenv("HEROMARKET_TRAINING_GAIN_MODE", "legacy_xor"),
        seed=_env_int("HEROMARKET_TRAINING_SEED", 1),
    )
    history_max = _env_int("HEROMARKET_TRAINING_HISTORY_MAX", TRAINING_HISTORY_MAX_DEFAULT)

    return MarketGateway(
        CharacterLedgerService(
            store,
            clock=clock,
            event_bus=event_bus,
            gain_policy=gain_policy,
            history_max=history_max,
        ),
        MarketLedgerService(store, clock=clock, event_bus=event_bus),
        PurchaseService(store, event_bus=event_bus),
    )


def create_market_gateway() -> MarketGateway:
    return build_gateway(create_market_store())
