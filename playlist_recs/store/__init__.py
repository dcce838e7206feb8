"""Edge store: SQLite schema, migrations, scoped transactions, edge operations, and collection snapshots."""

from .db import MEMORY_PATH, EdgeStore, create_store_engine
from .edges import (
    cooccurrence_neighbors,
    get_adjacency_weight,
    get_cooccurrence_weight,
    get_popularities,
    get_tracks,
    merge_adjacency,
    merge_cooccurrence,
    top_adjacency_from,
    upsert_track,
)
from .migrations import RECS_MIGRATIONS, Migration, get_migration_status, run_migrations
from .schema import GLOBAL_CONTEXT
from .snapshots import (
    delete_snapshots_before,
    latest_collection_track_ids,
    latest_snapshot_at,
    prune_collection_snapshots,
    write_snapshot,
)

__all__ = [
    "MEMORY_PATH",
    "EdgeStore",
    "create_store_engine",
    "cooccurrence_neighbors",
    "get_adjacency_weight",
    "get_cooccurrence_weight",
    "get_popularities",
    "get_tracks",
    "merge_adjacency",
    "merge_cooccurrence",
    "top_adjacency_from",
    "upsert_track",
    "RECS_MIGRATIONS",
    "Migration",
    "get_migration_status",
    "run_migrations",
    "GLOBAL_CONTEXT",
    "delete_snapshots_before",
    "latest_collection_track_ids",
    "latest_snapshot_at",
    "prune_collection_snapshots",
    "write_snapshot",
]
