"""
Capture: turn a collection's current track order into edge updates.

Called whenever the host has a fresh, complete ordering for a collection
(first load, after a bulk mutation). Everything for one call happens in a
single transaction: track metadata upserts, the collection snapshot, adjacency
merges for consecutive pairs, and windowed co-occurrence merges.

The public entry point is capture_collection; get_latest_collection_track_ids and
is_snapshot_stale read the stored snapshots back.
"""

import logging
from typing import List, Optional, Sequence, Set, Tuple

from sqlalchemy import Connection

from ..models.config import RecsConfig, resolve_config
from ..models.edges import canonical_pair
from ..models.results import CaptureStats
from ..models.track import ensure_tracks, track_ids_of
from ..store.db import EdgeStore
from ..store.edges import merge_adjacency, merge_cooccurrence, upsert_track
from ..store.snapshots import latest_collection_track_ids, latest_snapshot_at, write_snapshot

logger = logging.getLogger(__name__)


def dedupe_preserving_order(track_ids: Sequence[str]) -> List[str]:
    """Drop repeated IDs, keeping each at its first position."""
    return list(dict.fromkeys(t for t in track_ids if t))


def cooccurrence_weight(distance: int, base_weight: float, falloff: float) -> float:
    """Weight for a pair `distance` positions apart: full at 1, linearly less after."""
    return max(0.0, base_weight * (1.0 - (distance - 1) * falloff))


def merge_consecutive_adjacency(
    conn: Connection,
    track_ids: Sequence[str],
    weight: float,
    seen_at: int,
) -> int:
    """Merge t[i] -> t[i+1] for every consecutive pair. Returns edges merged."""
    merged = 0
    for from_id, to_id in zip(track_ids, track_ids[1:]):
        if merge_adjacency(conn, from_id, to_id, weight, seen_at):
            merged += 1
    return merged


def merge_window_cooccurrence(
    conn: Connection,
    track_ids: Sequence[str],
    window: int,
    base_weight: float,
    falloff: float,
    seen_at: int,
) -> int:
    """
    Merge co-occurrence for every pair within `window` positions of the deduplicated list.

    Each unordered pair is merged at most once per call. Returns edges merged.
    """
    unique_ids = dedupe_preserving_order(track_ids)
    if len(unique_ids) < 2:
        return 0

    processed: Set[Tuple[str, str]] = set()
    merged = 0
    for i, track_a in enumerate(unique_ids):
        for j in range(i + 1, min(i + window + 1, len(unique_ids))):
            track_b = unique_ids[j]
            pair = canonical_pair(track_a, track_b)
            if pair in processed:
                continue
            processed.add(pair)
            weight = cooccurrence_weight(j - i, base_weight, falloff)
            if merge_cooccurrence(conn, track_a, track_b, weight, seen_at):
                merged += 1
    return merged


def capture_collection(
    store: EdgeStore,
    collection_id: str,
    tracks: list,
    cooccurrence_only: bool = False,
    config: Optional[RecsConfig] = None,
) -> CaptureStats:
    """
    Capture one observed ordering of a collection.

    tracks may hold Track models, dicts, or bare ID strings. Entries without an
    ID (local files) are skipped everywhere. When cooccurrence_only is set (order
    is not meaningful, e.g. a liked-songs bucket) adjacency edges are not touched.
    """
    config = resolve_config(config)
    if not tracks:
        return CaptureStats()

    typed = ensure_tracks(tracks)
    track_ids = track_ids_of(typed)
    if not track_ids:
        return CaptureStats()

    with store.transaction() as conn:
        now = store.now()

        # 1) Track metadata
        for track in typed:
            upsert_track(conn, track, now)

        # 2) Snapshot of the observed ordering
        if collection_id:
            write_snapshot(
                conn,
                collection_id,
                [(position, t.id) for position, t in enumerate(typed) if t.has_id],
                now,
            )

        # 3) Adjacency for consecutive pairs
        adjacency = 0
        if not cooccurrence_only:
            adjacency = merge_consecutive_adjacency(conn, track_ids, config.capture_weight, now)

        # 4) Windowed co-occurrence
        cooccurrence = merge_window_cooccurrence(
            conn,
            track_ids,
            config.cooccurrence_window,
            config.capture_weight,
            config.cooccurrence_distance_falloff,
            now,
        )

    stats = CaptureStats(
        tracks_captured=len(track_ids),
        adjacency_edges=adjacency,
        cooccurrence_edges=cooccurrence,
    )
    logger.info(
        "[capture] collection=%s tracks=%d adjacency=%d cooccurrence=%d cooccurrence_only=%s",
        collection_id, stats.tracks_captured, stats.adjacency_edges,
        stats.cooccurrence_edges, cooccurrence_only,
    )
    return stats


def get_latest_collection_track_ids(store: EdgeStore, collection_id: str) -> List[str]:
    """Ordering recorded by the most recent capture of collection_id."""
    with store.read() as conn:
        return latest_collection_track_ids(conn, collection_id)


def is_snapshot_stale(store: EdgeStore, collection_id: str, max_age_seconds: int = 3600) -> bool:
    """True when the collection was never captured or its last capture is older than max_age_seconds."""
    with store.read() as conn:
        latest = latest_snapshot_at(conn, collection_id)
    if latest is None:
        return True
    return store.now() - latest > max_age_seconds
