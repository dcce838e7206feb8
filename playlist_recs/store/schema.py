"""
Table definitions for the recommendation store.

These mirror the schema after the latest migration and are used for queries.
DDL itself lives in migrations.py so older databases upgrade in order.
"""

from sqlalchemy import Column, Float, Index, Integer, MetaData, String, Table, Text

metadata = MetaData()

GLOBAL_CONTEXT = "global"

# Track metadata cache. artist_ids / artist_names hold JSON arrays.
tracks = Table(
    "tracks",
    metadata,
    Column("track_id", String, primary_key=True),
    Column("uri", String),
    Column("name", String),
    Column("artist_ids", Text),
    Column("album_id", String),
    Column("popularity", Integer),
    Column("duration_ms", Integer),
    Column("updated_at", Integer, nullable=False),
    Column("artist_names", Text),
)

# Directed adjacency: to_track_id followed from_track_id in an observed ordering.
adjacency_edges = Table(
    "adjacency_edges",
    metadata,
    Column("from_track_id", String, primary_key=True),
    Column("to_track_id", String, primary_key=True),
    Column("weight", Float, nullable=False),
    Column("last_seen_at", Integer, nullable=False),
)

# Undirected co-occurrence, stored once per pair with track_id_a < track_id_b.
cooccurrence_edges = Table(
    "cooccurrence_edges",
    metadata,
    Column("track_id_a", String, primary_key=True),
    Column("track_id_b", String, primary_key=True),
    Column("weight", Float, nullable=False),
    Column("last_seen_at", Integer, nullable=False),
    Index("idx_cooccurrence_edges_b", "track_id_b"),
)

# context_id is a collection ID or GLOBAL_CONTEXT.
dismissals = Table(
    "dismissals",
    metadata,
    Column("context_id", String, primary_key=True),
    Column("track_id", String, primary_key=True),
    Column("dismissed_at", Integer, nullable=False),
)

migrations_table = Table(
    "_migrations",
    metadata,
    Column("version", Integer, primary_key=True),
    Column("name", String, nullable=False),
    Column("applied_at", Integer, nullable=False),
)

# Observed orderings per collection; one snapshot is every row sharing snapshot_at.
collection_tracks = Table(
    "collection_tracks",
    metadata,
    Column("collection_id", String, primary_key=True),
    Column("track_id", String, primary_key=True),
    Column("position", Integer, nullable=False),
    Column("snapshot_at", Integer, primary_key=True),
    Index("idx_collection_tracks_snapshot", "collection_id", "snapshot_at"),
)
