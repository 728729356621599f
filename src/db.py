"""Database engine/session helpers."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.orm import Session, sessionmaker

from domain.errors import StoreUnavailableError


def create_db_engine(db_url: str) -> Engine:
    """Create a SQLAlchemy engine with conservative defaults."""
    return create_engine(db_url, pool_pre_ping=True, future=True)


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Create a session factory bound to the provided engine."""
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False, future=True)


@contextmanager
def session_scope(session_factory: sessionmaker[Session]) -> Iterator[Session]:
    """Run one unit of work: commit on success, roll back and re-raise on failure.

    Connectivity failures surface as ``StoreUnavailableError`` so callers can
    tell a retryable outage apart from a business-rule violation.
    """
    with session_factory() as session:
        try:
            yield session
            session.commit()
        except (OperationalError, InterfaceError) as exc:
            session.rollback()
            raise StoreUnavailableError(f"store unavailable: {exc.orig}") from exc
        except Exception:
            session.rollback()
            raise
