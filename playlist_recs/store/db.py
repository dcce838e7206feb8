"""
Edge store handle: engine ownership, scoped transactions, and the clock.

One EdgeStore is created by the host (or by RecsEngine.open) and passed into
every operation; there is no module-level connection. Close it on shutdown.

Usage:
    store = EdgeStore.open("./data/recs.db")
    with store.transaction() as conn:
        merge_adjacency(conn, "a", "b", 1.0, store.now())
    store.close()
"""

import logging
import threading
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator, Optional, Union

from sqlalchemy import Connection, Engine, create_engine, event
from sqlalchemy.pool import StaticPool

from .migrations import run_migrations

logger = logging.getLogger(__name__)

MEMORY_PATH = ":memory:"


def _set_sqlite_pragmas(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA journal_mode = WAL")
        cursor.execute("PRAGMA foreign_keys = ON")
        cursor.execute("PRAGMA busy_timeout = 5000")
    finally:
        cursor.close()


def create_store_engine(path: Union[str, Path]) -> Engine:
    """Build a SQLite engine for a file path, or a single shared connection for :memory:."""
    if str(path) == MEMORY_PATH:
        engine = create_engine(
            "sqlite://",
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    else:
        db_path = Path(path).resolve()
        db_path.parent.mkdir(parents=True, exist_ok=True)
        engine = create_engine(
            f"sqlite:///{db_path}",
            connect_args={"check_same_thread": False, "timeout": 5},
        )
    event.listen(engine, "connect", _set_sqlite_pragmas)
    return engine


class EdgeStore:
    """
    Handle over the recommendation database.

    transaction() is the atomicity boundary for every mutating operation:
    it commits when the block exits normally and rolls back when it raises.
    read() is for queries that do not write.
    """

    def __init__(self, engine: Engine, clock: Optional[Callable[[], float]] = None):
        self.engine = engine
        self._clock = clock or time.time
        # Maintenance jobs mutate overlapping rows; they take this lock one at a time.
        self.maintenance_lock = threading.RLock()
        self._closed = False

    @classmethod
    def open(
        cls,
        path: Union[str, Path] = MEMORY_PATH,
        clock: Optional[Callable[[], float]] = None,
        migrate: bool = True,
    ) -> "EdgeStore":
        """Open (creating if needed) the database at path and apply pending migrations."""
        engine = create_store_engine(path)
        store = cls(engine, clock=clock)
        if migrate:
            run_migrations(engine)
        logger.debug("Opened recs store at %s", path)
        return store

    def now(self) -> int:
        """Current time as integer Unix seconds."""
        return int(self._clock())

    @contextmanager
    def transaction(self) -> Iterator[Connection]:
        """Scoped transaction: commit on exit, rollback on exception."""
        with self.engine.begin() as conn:
            yield conn

    @contextmanager
    def read(self) -> Iterator[Connection]:
        """Connection for read-only queries."""
        with self.engine.connect() as conn:
            yield conn

    @contextmanager
    def autocommit(self) -> Iterator[Connection]:
        """Connection outside any transaction (needed for VACUUM)."""
        with self.engine.connect().execution_options(isolation_level="AUTOCOMMIT") as conn:
            yield conn

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Dispose of the engine and its pooled connections."""
        if not self._closed:
            self.engine.dispose()
            self._closed = True

    def __enter__(self) -> "EdgeStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
