from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from heromarket.domain.errors import IdentifierExhaustedError, StorageError
from heromarket.domain.models.character import Character
from heromarket.domain.models.listing import ListingStatus, MarketListing
from heromarket.domain.repositories import (
    CharacterRepository,
    IdentifierIssuer,
    ListingRepository,
    MarketStore,
    UnitOfWork,
)
from heromarket.infrastructure.db.sql.connection import create_market_engine, create_session_factory
from heromarket.infrastructure.db.sql.schema import COUNTER_ROW_ID, ensure_schema
from heromarket.infrastructure.record_codec import (
    decode_character,
    decode_listing,
    encode_character,
    encode_listing,
)


# SQLite integers are signed 64-bit; MySQL columns are unsigned.
_ID_LIMITS = {"sqlite": 2**63 - 1, "mysql": 2**64 - 1}


def _dialect(session: Session) -> str:
    return session.bind.dialect.name if session.bind is not None else "mysql"


class SqlIdentifierIssuer(IdentifierIssuer):
    def __init__(self, session: Session) -> None:
        self._session = session

    def next_id(self) -> int:
        # Increment first so the row is write-locked before we read it back.
        result = self._session.execute(
            text("UPDATE id_counter SET next_value = next_value + 1 WHERE counter_id = :cid"),
            {"cid": COUNTER_ROW_ID},
        )
        if result.rowcount != 1:
            raise StorageError("Identifier counter row is missing; run the schema migration first")
        issued = self.peek() - 1
        if issued > _ID_LIMITS.get(_dialect(self._session), 2**63 - 1) - 1:
            raise IdentifierExhaustedError("Identifier counter exhausted the storable id range")
        return issued

    def peek(self) -> int:
        value = self._session.execute(
            text("SELECT next_value FROM id_counter WHERE counter_id = :cid"),
            {"cid": COUNTER_ROW_ID},
        ).scalar_one_or_none()
        if value is None:
            raise StorageError("Identifier counter row is missing; run the schema migration first")
        return int(value)


class SqlCharacterRepository(CharacterRepository):
    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, character_id: int) -> Optional[Character]:
        raw = self._session.execute(
            text("SELECT payload FROM character_record WHERE character_id = :cid"),
            {"cid": int(character_id)},
        ).scalar_one_or_none()
        return decode_character(raw) if raw is not None else None

    def get_for_update(self, character_id: int) -> Optional[Character]:
        # SQLite has no row locks; its transactions already open with BEGIN IMMEDIATE.
        if _dialect(self._session) != "mysql":
            return self.get(character_id)
        raw = self._session.execute(
            text("SELECT payload FROM character_record WHERE character_id = :cid FOR UPDATE"),
            {"cid": int(character_id)},
        ).scalar_one_or_none()
        return decode_character(raw) if raw is not None else None

    def save(self, character: Character) -> None:
        payload = encode_character(character)
        if _dialect(self._session) == "mysql":
            statement = text(
                """
                INSERT INTO character_record (character_id, owner, payload)
                VALUES (:cid, :owner, :payload)
                ON DUPLICATE KEY UPDATE
                    owner = VALUES(owner),
                    payload = VALUES(payload)
                """
            )
        else:
            statement = text(
                """
                INSERT INTO character_record (character_id, owner, payload)
                VALUES (:cid, :owner, :payload)
                ON CONFLICT(character_id) DO UPDATE SET
                    owner = excluded.owner,
                    payload = excluded.payload
                """
            )
        self._session.execute(statement, {"cid": int(character.id), "owner": character.owner, "payload": payload})

    def iter_all(self) -> Iterator[Character]:
        rows = self._session.execute(text("SELECT payload FROM character_record ORDER BY character_id")).all()
        for row in rows:
            yield decode_character(row.payload)


class SqlListingRepository(ListingRepository):
    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, listing_id: int) -> Optional[MarketListing]:
        raw = self._session.execute(
            text("SELECT payload FROM market_listing WHERE listing_id = :lid"),
            {"lid": int(listing_id)},
        ).scalar_one_or_none()
        return decode_listing(raw) if raw is not None else None

    def save(self, listing: MarketListing) -> None:
        payload = encode_listing(listing)
        if _dialect(self._session) == "mysql":
            statement = text(
                """
                INSERT INTO market_listing (listing_id, character_id, status, payload)
                VALUES (:lid, :cid, :status, :payload)
                ON DUPLICATE KEY UPDATE
                    status = VALUES(status),
                    payload = VALUES(payload)
                """
            )
        else:
            statement = text(
                """
                INSERT INTO market_listing (listing_id, character_id, status, payload)
                VALUES (:lid, :cid, :status, :payload)
                ON CONFLICT(listing_id) DO UPDATE SET
                    status = excluded.status,
                    payload = excluded.payload
                """
            )
        self._session.execute(
            statement,
            {
                "lid": int(listing.id),
                "cid": int(listing.character_id),
                "status": listing.status.value,
                "payload": payload,
            },
        )

    def iter_all(self) -> Iterator[MarketListing]:
        rows = self._session.execute(text("SELECT payload FROM market_listing ORDER BY listing_id")).all()
        for row in rows:
            yield decode_listing(row.payload)

    def iter_by_status(self, status: ListingStatus) -> Iterator[MarketListing]:
        rows = self._session.execute(
            text("SELECT payload FROM market_listing WHERE status = :status ORDER BY listing_id"),
            {"status": status.value},
        ).all()
        for row in rows:
            yield decode_listing(row.payload)

    def compare_and_set(self, listing: MarketListing, *, expected: ListingStatus) -> bool:
        result = self._session.execute(
            text(
                """
                UPDATE market_listing
                SET status = :status, payload = :payload
                WHERE listing_id = :lid AND status = :expected
                """
            ),
            {
                "lid": int(listing.id),
                "status": listing.status.value,
                "payload": encode_listing(listing),
                "expected": expected.value,
            },
        )
        return result.rowcount == 1


class _SqlUnitOfWork(UnitOfWork):
    def __init__(self, session: Session) -> None:
        self.session = session
        self.characters = SqlCharacterRepository(session)
        self.listings = SqlListingRepository(session)
        self.identifiers = SqlIdentifierIssuer(session)


class SqlMarketStore(MarketStore):
    """Market store backed by SQLAlchemy; one database transaction per unit of work."""

    def __init__(self, session_factory: sessionmaker, *, engine: Engine | None = None) -> None:
        self._session_factory = session_factory
        self._engine = engine

    @classmethod
    def from_url(cls, database_url: str | None = None, *, create_schema: bool = True) -> "SqlMarketStore":
        engine = create_market_engine(database_url)
        if create_schema:
            ensure_schema(engine)
        return cls(create_session_factory(engine), engine=engine)

    @contextmanager
    def unit_of_work(self) -> Iterator[UnitOfWork]:
        try:
            with self._session_factory.begin() as session:
                yield _SqlUnitOfWork(session)
        except SQLAlchemyError as exc:
            raise StorageError(f"Market store transaction failed: {exc}") from exc

    def close(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
