from __future__ import annotations

import os

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool


def resolve_database_url(database_url: str | None = None) -> str:
    url = (database_url or os.getenv("HEROMARKET_DATABASE_URL") or "").strip()
    if not url:
        raise ValueError("No database URL configured. Set HEROMARKET_DATABASE_URL or pass --database-url.")
    return url


def _take_write_lock_on_begin(engine: Engine) -> None:
    # pysqlite defers BEGIN until the first write, so a read-check-write would
    # run unlocked. Hand transaction control to SQLAlchemy and open every
    # transaction with BEGIN IMMEDIATE so concurrent writers queue up.
    @event.listens_for(engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection, connection_record) -> None:
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn) -> None:
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def create_market_engine(database_url: str | None = None, *, echo: bool = False) -> Engine:
    url = resolve_database_url(database_url)
    if url in {"sqlite://", "sqlite:///:memory:"}:
        # One shared connection, otherwise every checkout sees an empty database.
        engine = create_engine(
            url,
            echo=echo,
            future=True,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    elif url.startswith("sqlite"):
        engine = create_engine(url, echo=echo, future=True, connect_args={"check_same_thread": False})
    else:
        return create_engine(url, echo=echo, future=True, pool_pre_ping=True)

    _take_write_lock_on_begin(engine)
    return engine


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
