"""
Incremental updates for localized collection changes (add / remove / reorder).

Used instead of a full capture when the host knows exactly what changed. Each
call runs in one transaction and only merges: no edge is ever deleted here,
that is left to decay and pruning.

All positions are 0-based. track_ids is always the collection AFTER the change.
"""

import logging
from typing import List, Optional, Sequence, Set, Tuple

from sqlalchemy import Connection

from ..models.config import RecsConfig, resolve_config
from ..models.results import UpdateStats
from ..store.db import EdgeStore
from ..store.edges import merge_adjacency
from .capture import merge_window_cooccurrence

logger = logging.getLogger(__name__)


def _in_range(position: Optional[int], length: int) -> bool:
    return position is not None and 0 <= position < length


def _merge_neighbors(
    conn: Connection,
    track_ids: Sequence[str],
    position: int,
    weight: float,
    seen_at: int,
) -> int:
    """Merge prev -> track and track -> next around `position`, skipping boundaries."""
    track_id = track_ids[position]
    merged = 0
    if position > 0 and merge_adjacency(conn, track_ids[position - 1], track_id, weight, seen_at):
        merged += 1
    if position < len(track_ids) - 1 and merge_adjacency(
        conn, track_id, track_ids[position + 1], weight, seen_at
    ):
        merged += 1
    return merged


def update_for_add(
    store: EdgeStore,
    track_ids: Sequence[str],
    added_track_ids: Sequence[str],
    positions: Sequence[int],
    config: Optional[RecsConfig] = None,
) -> UpdateStats:
    """
    Tracks were inserted; positions are their final positions in track_ids.

    Adjacency to the immediate neighbors at full weight, then co-occurrence for a
    local window around the affected positions at the reduced incremental weight.
    """
    config = resolve_config(config)
    placed = [
        pos for tid, pos in zip(added_track_ids, positions)
        if tid and _in_range(pos, len(track_ids)) and track_ids[pos] == tid
    ]
    if not placed:
        return UpdateStats()

    with store.transaction() as conn:
        now = store.now()
        adjacency = 0
        for pos in placed:
            adjacency += _merge_neighbors(conn, track_ids, pos, config.capture_weight, now)

        window = config.cooccurrence_window
        lo = max(0, min(placed) - window)
        hi = min(len(track_ids), max(placed) + window + 1)
        cooccurrence = merge_window_cooccurrence(
            conn,
            track_ids[lo:hi],
            window,
            config.incremental_cooccurrence_weight,
            config.cooccurrence_distance_falloff,
            now,
        )

    logger.debug("[incremental] add positions=%s adjacency=%d cooccurrence=%d", placed, adjacency, cooccurrence)
    return UpdateStats(adjacency=adjacency, cooccurrence=cooccurrence)


def closed_gap_indices(removed_positions: Sequence[int], remaining_length: int) -> List[int]:
    """
    Map removed positions (in the list before removal) to gap indices in the list after.

    A gap index g means track_ids[g - 1] and track_ids[g] became neighbors.
    Consecutive removals collapse into one gap. Gaps at either end are dropped.
    """
    removed = sorted(set(p for p in removed_positions if p is not None and p >= 0))
    gaps: Set[int] = set()
    for offset, pos in enumerate(removed):
        gap = pos - offset
        if 0 < gap < remaining_length:
            gaps.add(gap)
    return sorted(gaps)


def update_for_remove(
    store: EdgeStore,
    track_ids: Sequence[str],
    removed_positions: Sequence[int],
    config: Optional[RecsConfig] = None,
) -> UpdateStats:
    """Tracks were removed; bridge each closed gap with a reduced-weight repair edge."""
    config = resolve_config(config)
    if not removed_positions or len(track_ids) < 2:
        return UpdateStats()

    gaps = closed_gap_indices(removed_positions, len(track_ids))
    if not gaps:
        return UpdateStats()

    adjacency = 0
    with store.transaction() as conn:
        now = store.now()
        for gap in gaps:
            if merge_adjacency(conn, track_ids[gap - 1], track_ids[gap], config.repair_edge_weight, now):
                adjacency += 1

    logger.debug("[incremental] remove gaps=%s adjacency=%d", gaps, adjacency)
    return UpdateStats(adjacency=adjacency)


def left_behind_pair(from_position: int, to_position: int) -> Tuple[int, int]:
    """
    Indices (in the list after the move) of the two tracks that closed up over the old slot.

    Moving later shifts the following tracks up, so the old slot is now held by
    its former right neighbor. Moving earlier shifts the tracks in between down by one.
    """
    if from_position < to_position:
        return from_position - 1, from_position
    return from_position, from_position + 1


def update_for_reorder(
    store: EdgeStore,
    track_ids: Sequence[str],
    from_position: int,
    to_position: int,
    config: Optional[RecsConfig] = None,
) -> UpdateStats:
    """
    One track moved from from_position to to_position.

    Full-weight edges to its new neighbors, plus a repair edge between the
    tracks left behind at the old slot (never touching the moved track).
    """
    config = resolve_config(config)
    n = len(track_ids)
    if from_position == to_position or n < 2:
        return UpdateStats()
    if not _in_range(to_position, n) or not _in_range(from_position, n):
        return UpdateStats()

    moved = track_ids[to_position]
    adjacency = 0
    with store.transaction() as conn:
        now = store.now()
        adjacency += _merge_neighbors(conn, track_ids, to_position, config.capture_weight, now)

        left, right = left_behind_pair(from_position, to_position)
        if 0 <= left and right < n:
            prev_id, next_id = track_ids[left], track_ids[right]
            if moved not in (prev_id, next_id) and merge_adjacency(
                conn, prev_id, next_id, config.repair_edge_weight, now
            ):
                adjacency += 1

    logger.debug(
        "[incremental] reorder %d -> %d adjacency=%d", from_position, to_position, adjacency
    )
    return UpdateStats(adjacency=adjacency)


def update_for_operation(
    store: EdgeStore,
    operation: str,
    track_ids: Sequence[str],
    added_track_ids: Optional[Sequence[str]] = None,
    add_positions: Optional[Sequence[int]] = None,
    removed_positions: Optional[Sequence[int]] = None,
    from_position: Optional[int] = None,
    to_position: Optional[int] = None,
    config: Optional[RecsConfig] = None,
) -> UpdateStats:
    """Dispatch one of 'add' / 'remove' / 'reorder'. Unknown operations update nothing."""
    if operation == "add":
        return update_for_add(store, track_ids, added_track_ids or [], add_positions or [], config)
    if operation == "remove":
        return update_for_remove(store, track_ids, removed_positions or [], config)
    if operation == "reorder":
        if from_position is None or to_position is None:
            return UpdateStats()
        return update_for_reorder(store, track_ids, from_position, to_position, config)
    logger.warning("[incremental] Unknown operation %r ignored", operation)
    return UpdateStats()
