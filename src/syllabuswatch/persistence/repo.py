"""
Repository-backed key-value store.

Implements the snapshot storage capability on top of a SQL table.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from syllabuswatch.core.tracking.store import StorageError
from .db import DEFAULT_DATABASE_URL, create_db_engine, make_session_factory, session_scope
from .models import KeyValueEntry


class KeyValueRepository:
    """Repository for reading and writing KeyValueEntry rows."""

    def __init__(self, session: Session):
        self.session = session

    def get(self, key: str) -> KeyValueEntry | None:
        """Get entry by key."""
        return self.session.get(KeyValueEntry, key)

    def upsert(self, key: str, value: Any) -> KeyValueEntry:
        """Create or replace the value stored under a key."""
        entry = self.get(key)
        if entry is None:
            entry = KeyValueEntry(key=key, value=value)
            self.session.add(entry)
        else:
            entry.value = value
        self.session.flush()
        return entry


class SqlStore:
    """Key-value store persisted in a SQL database."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self._factory: sessionmaker[Session] = make_session_factory(engine)

    @classmethod
    def from_url(cls, url: str = DEFAULT_DATABASE_URL, echo: bool = False) -> "SqlStore":
        """Create a store (and its schema) from a database URL."""
        try:
            return cls(create_db_engine(url, echo=echo))
        except SQLAlchemyError as e:
            raise StorageError(f"Cannot open database {url}: {e}") from e

    def get(self, key: str) -> Any | None:
        try:
            with session_scope(self._factory) as session:
                entry = KeyValueRepository(session).get(key)
                return entry.value if entry is not None else None
        except SQLAlchemyError as e:
            raise StorageError(f"Database read failed: {e}", key=key) from e

    def set(self, key: str, value: Any) -> None:
        try:
            with session_scope(self._factory) as session:
                KeyValueRepository(session).upsert(key, value)
        except SQLAlchemyError as e:
            raise StorageError(f"Database write failed: {e}", key=key) from e

    def dispose(self) -> None:
        """Close pooled connections."""
        self.engine.dispose()
