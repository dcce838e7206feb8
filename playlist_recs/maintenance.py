"""
Maintenance jobs for the edge store: decay, cap-top-K, snapshot retention,
weak-edge pruning, compaction.

Run periodically (e.g. weekly from cron via server/scripts/recs_maintenance.py).
Each step runs in its own transaction and holds the store's maintenance lock,
so two steps never interleave. Every step is idempotent and safe to re-run.
"""

import logging
import time
from typing import List, Optional, Tuple

from sqlalchemy import Connection, Table, bindparam, delete, func, select, text, update

from .models.config import RecsConfig, resolve_config
from .models.results import CompactResult, EdgeCounts, MaintenanceReport, StoreStats
from .store.db import EdgeStore
from .store.snapshots import count_snapshot_rows, delete_snapshots_before
from .store.schema import adjacency_edges, cooccurrence_edges, dismissals, tracks

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60


def decay(store: EdgeStore, factor: float = 0.98, older_than_days: float = 7) -> EdgeCounts:
    """
    Multiply the weight of every edge last seen before the cutoff by factor.

    last_seen_at is left as is, so re-running decays old edges again.
    """
    if not 0 <= factor <= 1:
        raise ValueError(f"decay factor must be within [0, 1], got {factor}")
    if older_than_days < 0:
        raise ValueError(f"older_than_days must be >= 0, got {older_than_days}")

    with store.maintenance_lock, store.transaction() as conn:
        cutoff = store.now() - int(older_than_days * SECONDS_PER_DAY)
        adj = conn.execute(
            update(adjacency_edges)
            .where(adjacency_edges.c.last_seen_at < cutoff)
            .values(weight=adjacency_edges.c.weight * factor)
        )
        co = conn.execute(
            update(cooccurrence_edges)
            .where(cooccurrence_edges.c.last_seen_at < cutoff)
            .values(weight=cooccurrence_edges.c.weight * factor)
        )
        counts = EdgeCounts(adjacency_edges=adj.rowcount, cooccurrence_edges=co.rowcount)

    logger.info(
        "[maintenance] decayed %d adjacency / %d co-occurrence edges (factor=%s, older than %s days)",
        counts.adjacency_edges, counts.cooccurrence_edges, factor, older_than_days,
    )
    return counts


def _excess_keys(
    conn: Connection,
    table: Table,
    group_col: str,
    other_col: str,
    k: int,
) -> List[Tuple[str, str]]:
    """Keys of rows beyond the k heaviest per group_col value (ties broken by the other ID)."""
    group = table.c[group_col]
    other = table.c[other_col]
    overflow = conn.execute(
        select(group).group_by(group).having(func.count() > k)
    ).scalars().all()

    keys: List[Tuple[str, str]] = []
    for node_id in overflow:
        rows = conn.execute(
            select(group, other)
            .where(group == node_id)
            .order_by(table.c.weight.desc(), other)
            .offset(k)
        ).all()
        keys.extend((r[0], r[1]) for r in rows)
    return keys


def _delete_keys(conn: Connection, table: Table, key_cols: Tuple[str, str], keys: List[Tuple[str, str]]) -> int:
    if not keys:
        return 0
    first, second = key_cols
    stmt = delete(table).where(
        table.c[first] == bindparam("key_first"),
        table.c[second] == bindparam("key_second"),
    )
    conn.execute(stmt, [{"key_first": a, "key_second": b} for a, b in keys])
    return len(keys)


def cap_top_k(store: EdgeStore, k: int = 200) -> EdgeCounts:
    """
    Keep at most k edges per node: the k highest-weight outgoing adjacency rows per
    source, and the k highest-weight co-occurrence rows per side of the pair.
    """
    if k < 1:
        raise ValueError(f"k must be >= 1, got {k}")

    with store.maintenance_lock, store.transaction() as conn:
        adj_keys = _excess_keys(conn, adjacency_edges, "from_track_id", "to_track_id", k)
        adj_removed = _delete_keys(conn, adjacency_edges, ("from_track_id", "to_track_id"), adj_keys)

        pair = ("track_id_a", "track_id_b")
        co_removed = _delete_keys(
            conn, cooccurrence_edges, pair,
            _excess_keys(conn, cooccurrence_edges, "track_id_a", "track_id_b", k),
        )
        # Side b is evaluated after side a's deletions.
        b_keys = [(a, b) for b, a in _excess_keys(conn, cooccurrence_edges, "track_id_b", "track_id_a", k)]
        co_removed += _delete_keys(conn, cooccurrence_edges, pair, b_keys)

        counts = EdgeCounts(adjacency_edges=adj_removed, cooccurrence_edges=co_removed)

    logger.info(
        "[maintenance] capped to %d per track: removed %d adjacency / %d co-occurrence edges",
        k, counts.adjacency_edges, counts.cooccurrence_edges,
    )
    return counts


def prune_snapshots(store: EdgeStore, retention_days: float = 90) -> int:
    """Delete collection snapshot rows taken more than retention_days ago. Returns rows removed."""
    if retention_days < 0:
        raise ValueError(f"retention_days must be >= 0, got {retention_days}")

    with store.maintenance_lock, store.transaction() as conn:
        cutoff = store.now() - int(retention_days * SECONDS_PER_DAY)
        removed = delete_snapshots_before(conn, cutoff)

    logger.info("[maintenance] pruned %d snapshot rows older than %s days", removed, retention_days)
    return removed


def prune_weak(store: EdgeStore, min_weight: float = 0.01) -> EdgeCounts:
    """Delete edges of either graph whose weight is below min_weight."""
    if min_weight < 0:
        raise ValueError(f"min_weight must be >= 0, got {min_weight}")

    with store.maintenance_lock, store.transaction() as conn:
        adj = conn.execute(delete(adjacency_edges).where(adjacency_edges.c.weight < min_weight))
        co = conn.execute(delete(cooccurrence_edges).where(cooccurrence_edges.c.weight < min_weight))
        counts = EdgeCounts(adjacency_edges=adj.rowcount, cooccurrence_edges=co.rowcount)

    logger.info(
        "[maintenance] pruned %d adjacency / %d co-occurrence edges below %s",
        counts.adjacency_edges, counts.cooccurrence_edges, min_weight,
    )
    return counts


def _db_size_bytes(conn: Connection) -> int:
    page_count = conn.execute(text("PRAGMA page_count")).scalar() or 0
    page_size = conn.execute(text("PRAGMA page_size")).scalar() or 0
    return int(page_count) * int(page_size)


def compact(store: EdgeStore) -> CompactResult:
    """VACUUM the database to reclaim space left by deletes."""
    with store.maintenance_lock, store.autocommit() as conn:
        before = _db_size_bytes(conn)
        conn.execute(text("VACUUM"))
        after = _db_size_bytes(conn)
    result = CompactResult(size_before_bytes=before, size_after_bytes=after)
    logger.info("[maintenance] compacted database, reclaimed %d bytes", result.reclaimed_bytes)
    return result


def get_stats(store: EdgeStore) -> StoreStats:
    """Row counts and on-disk size for monitoring."""
    with store.read() as conn:
        track_count = conn.execute(select(func.count()).select_from(tracks)).scalar_one()
        adj_count = conn.execute(select(func.count()).select_from(adjacency_edges)).scalar_one()
        co_count = conn.execute(select(func.count()).select_from(cooccurrence_edges)).scalar_one()
        dismissal_count = conn.execute(select(func.count()).select_from(dismissals)).scalar_one()
        snapshot_count = count_snapshot_rows(conn)
        size = _db_size_bytes(conn)
    return StoreStats(
        tracks=track_count,
        adjacency_edges=adj_count,
        cooccurrence_edges=co_count,
        dismissals=dismissal_count,
        snapshot_rows=snapshot_count,
        total_edges=adj_count + co_count,
        db_size_bytes=size,
        db_size_mb=round(size / 1024 / 1024, 2),
    )


def run_maintenance(
    store: EdgeStore,
    config: Optional[RecsConfig] = None,
    include_compact: bool = True,
) -> MaintenanceReport:
    """Decay, cap, snapshot retention, prune and (optionally) compact in sequence, with before/after stats."""
    config = resolve_config(config)
    start = time.perf_counter()

    with store.maintenance_lock:
        before = get_stats(store)
        logger.info(
            "[maintenance] starting: %d tracks, %d edges, %.2f MB",
            before.tracks, before.total_edges, before.db_size_mb,
        )

        decayed = decay(store, config.decay_factor, config.decay_older_than_days)
        capped = cap_top_k(store, config.max_edges_per_track)
        snapshots_pruned = prune_snapshots(store, config.snapshot_retention_days)
        pruned = prune_weak(store, config.prune_min_weight)
        compacted = compact(store) if include_compact else None

        after = get_stats(store)

    duration_ms = int((time.perf_counter() - start) * 1000)
    logger.info(
        "[maintenance] done in %d ms: %d tracks, %d edges, %.2f MB",
        duration_ms, after.tracks, after.total_edges, after.db_size_mb,
    )
    return MaintenanceReport(
        before=before,
        after=after,
        decayed=decayed,
        capped=capped,
        pruned=pruned,
        snapshots_pruned=snapshots_pruned,
        compacted=compacted,
        duration_ms=duration_ms,
    )
