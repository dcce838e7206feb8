"""
Schema migrations for the recommendation store.

Migrations run in version order; each one runs in its own transaction together
with the row recording it in _migrations. A step is either a SQL statement or a
callable receiving the open connection. Applied versions are never re-run.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, List, Sequence, Union

from sqlalchemy import Connection, Engine, func, inspect, insert, select

from ..models.results import AppliedMigration, MigrationStatus
from .schema import migrations_table

logger = logging.getLogger(__name__)

Step = Union[str, Callable[[Connection], None]]


@dataclass(frozen=True)
class Migration:
    version: int
    name: str
    steps: Sequence[Step]


def _add_artist_names_column(conn: Connection) -> None:
    columns = {c["name"] for c in inspect(conn).get_columns("tracks")}
    if "artist_names" not in columns:
        conn.exec_driver_sql("ALTER TABLE tracks ADD COLUMN artist_names TEXT")


RECS_MIGRATIONS: List[Migration] = [
    Migration(
        version=1,
        name="initial_schema",
        steps=[
            """
            CREATE TABLE IF NOT EXISTS tracks (
              track_id TEXT PRIMARY KEY,
              uri TEXT,
              name TEXT,
              artist_ids TEXT,
              album_id TEXT,
              popularity INTEGER,
              duration_ms INTEGER,
              updated_at INTEGER NOT NULL
            )
            """,
            """
            CREATE TABLE IF NOT EXISTS adjacency_edges (
              from_track_id TEXT NOT NULL,
              to_track_id TEXT NOT NULL,
              weight REAL NOT NULL DEFAULT 1.0,
              last_seen_at INTEGER NOT NULL,
              PRIMARY KEY (from_track_id, to_track_id)
            )
            """,
            """
            CREATE TABLE IF NOT EXISTS cooccurrence_edges (
              track_id_a TEXT NOT NULL,
              track_id_b TEXT NOT NULL,
              weight REAL NOT NULL DEFAULT 1.0,
              last_seen_at INTEGER NOT NULL,
              PRIMARY KEY (track_id_a, track_id_b),
              CHECK (track_id_a < track_id_b)
            )
            """,
            "CREATE INDEX IF NOT EXISTS idx_cooccurrence_edges_b ON cooccurrence_edges(track_id_b)",
            """
            CREATE TABLE IF NOT EXISTS dismissals (
              context_id TEXT NOT NULL,
              track_id TEXT NOT NULL,
              dismissed_at INTEGER NOT NULL,
              PRIMARY KEY (context_id, track_id)
            )
            """,
        ],
    ),
    Migration(
        version=2,
        name="add_track_artist_names",
        steps=[_add_artist_names_column],
    ),
    Migration(
        version=3,
        name="add_collection_snapshots",
        steps=[
            """
            CREATE TABLE IF NOT EXISTS collection_tracks (
              collection_id TEXT NOT NULL,
              track_id TEXT NOT NULL,
              position INTEGER NOT NULL,
              snapshot_at INTEGER NOT NULL,
              PRIMARY KEY (collection_id, track_id, snapshot_at)
            )
            """,
            "CREATE INDEX IF NOT EXISTS idx_collection_tracks_snapshot ON collection_tracks(collection_id, snapshot_at)",
        ],
    ),
]


def _ensure_migrations_table(engine: Engine) -> None:
    migrations_table.create(engine, checkfirst=True)


def _current_version(conn: Connection) -> int:
    version = conn.execute(select(func.max(migrations_table.c.version))).scalar()
    return version or 0


def run_migrations(
    engine: Engine,
    migrations: Sequence[Migration] = RECS_MIGRATIONS,
    db_name: str = "recs",
) -> int:
    """
    Apply pending migrations in version order.

    Returns the number of migrations applied. A failing migration rolls back
    and re-raises; earlier migrations in the same run stay applied.
    """
    _ensure_migrations_table(engine)
    with engine.connect() as conn:
        current = _current_version(conn)

    pending = sorted((m for m in migrations if m.version > current), key=lambda m: m.version)
    if not pending:
        return 0

    logger.info("[%s] Running %d migration(s) from v%d", db_name, len(pending), current)
    for migration in pending:
        try:
            with engine.begin() as conn:
                logger.info("[%s] Applying migration %d: %s", db_name, migration.version, migration.name)
                for step in migration.steps:
                    if callable(step):
                        step(conn)
                    else:
                        conn.exec_driver_sql(step)
                conn.execute(
                    insert(migrations_table).values(
                        version=migration.version,
                        name=migration.name,
                        applied_at=int(time.time()),
                    )
                )
        except Exception:
            logger.exception("[%s] Migration %d failed", db_name, migration.version)
            raise

    with engine.connect() as conn:
        logger.info("[%s] Applied %d migration(s), now at v%d", db_name, len(pending), _current_version(conn))
    return len(pending)


def get_migration_status(
    engine: Engine,
    migrations: Sequence[Migration] = RECS_MIGRATIONS,
) -> MigrationStatus:
    """Current/latest versions, pending count, and the applied list."""
    _ensure_migrations_table(engine)
    with engine.connect() as conn:
        current = _current_version(conn)
        rows = conn.execute(
            select(
                migrations_table.c.version,
                migrations_table.c.name,
                migrations_table.c.applied_at,
            ).order_by(migrations_table.c.version)
        ).all()

    latest = max((m.version for m in migrations), default=0)
    return MigrationStatus(
        current_version=current,
        latest_version=latest,
        pending_count=sum(1 for m in migrations if m.version > current),
        applied=[
            AppliedMigration(version=r.version, name=r.name, applied_at=r.applied_at)
            for r in rows
        ],
    )
