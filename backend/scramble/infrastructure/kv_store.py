"""Key-Value Stores: persistence backends for the puzzle cache snapshot.

Invariants:
    - get() returns exactly the last value set for a key, or None
    - All SQLAlchemy exceptions mapped to DatabaseError (core/errors.py)
    - Every session auto-rolls-back on exception (no partial commits leak)

Design Decisions:
    - Synchronous SQLAlchemy engine: PuzzleCache persists before returning
    - No cross-process locking: two engines sharing one store are last-writer-wins,
      an accepted limitation rather than something to engineer around
    - InMemoryKeyValueStore for tests and store-less runs
"""

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, select, text
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

import scramble.models  # noqa: F401
from scramble.core.errors import DatabaseError
from scramble.db.base import Base
from scramble.models.kv_entry import KeyValueEntry

logger = logging.getLogger(__name__)


class SqlKeyValueStore:
    """KeyValueStore over a `kv_entries` table."""

    def __init__(self, database_url: str):
        try:
            self.engine = create_engine(database_url, pool_pre_ping=True)
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as e:
            logger.error(f"Key-value store init failed: {e}")
            raise DatabaseError(str(e), "init")
        self._session_factory = sessionmaker(self.engine, expire_on_commit=False)

    @contextmanager
    def _session(self, operation: str) -> Iterator[Session]:
        session = self._session_factory()
        try:
            yield session
        except OperationalError as e:
            session.rollback()
            logger.error(f"KV store operational error: {e}")
            raise DatabaseError("Connection or operational error", operation)
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"KV store error: {e}")
            raise DatabaseError("Database operation failed", operation)
        finally:
            session.close()

    def get(self, key: str) -> str | None:
        with self._session("get") as session:
            row = session.execute(
                select(KeyValueEntry).where(KeyValueEntry.key == key),
            ).scalar_one_or_none()
            return row.value if row else None

    def set(self, key: str, value: str) -> None:
        with self._session("set") as session:
            row = session.get(KeyValueEntry, key)
            if row is None:
                session.add(KeyValueEntry(key=key, value=value))
            else:
                row.value = value
            session.commit()

    def health_check(self) -> bool:
        try:
            with self._session("health") as session:
                session.execute(text("SELECT 1"))
            return True
        except DatabaseError:
            return False

    def close(self) -> None:
        self.engine.dispose()


class InMemoryKeyValueStore:
    """Dict-backed KeyValueStore."""

    def __init__(self, initial: dict[str, str] | None = None):
        self.data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def health_check(self) -> bool:
        return True

    def close(self) -> None:
        pass
