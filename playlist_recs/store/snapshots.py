"""
Collection snapshots: the ordered track list observed at each capture.

A snapshot is the set of collection_tracks rows sharing one snapshot_at.
Written inside the capture transaction; read back for staleness checks and
for the latest known ordering; pruned by age during maintenance.
"""

from typing import List, Optional, Sequence, Tuple

from sqlalchemy import Connection, delete, func, select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from .schema import collection_tracks


def write_snapshot(
    conn: Connection,
    collection_id: str,
    positioned_ids: Sequence[Tuple[int, str]],
    snapshot_at: int,
) -> int:
    """
    Store (position, track_id) pairs as one snapshot. Returns rows written.

    A track listed twice keeps its last position.
    """
    written = 0
    for position, track_id in positioned_ids:
        if not track_id:
            continue
        stmt = sqlite_insert(collection_tracks).values(
            collection_id=collection_id,
            track_id=track_id,
            position=position,
            snapshot_at=snapshot_at,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[
                collection_tracks.c.collection_id,
                collection_tracks.c.track_id,
                collection_tracks.c.snapshot_at,
            ],
            set_={"position": stmt.excluded.position},
        )
        conn.execute(stmt)
        written += 1
    return written


def latest_snapshot_at(conn: Connection, collection_id: str) -> Optional[int]:
    return conn.execute(
        select(func.max(collection_tracks.c.snapshot_at)).where(
            collection_tracks.c.collection_id == collection_id
        )
    ).scalar()


def latest_collection_track_ids(conn: Connection, collection_id: str) -> List[str]:
    """Track IDs of the most recent snapshot, in position order. Empty if none."""
    latest = latest_snapshot_at(conn, collection_id)
    if latest is None:
        return []
    rows = conn.execute(
        select(collection_tracks.c.track_id)
        .where(
            collection_tracks.c.collection_id == collection_id,
            collection_tracks.c.snapshot_at == latest,
        )
        .order_by(collection_tracks.c.position)
    ).all()
    return [r.track_id for r in rows]


def prune_collection_snapshots(conn: Connection, collection_id: str, keep: int = 3) -> int:
    """Keep the `keep` most recent snapshots of one collection. Returns rows removed."""
    if keep < 1:
        raise ValueError(f"keep must be >= 1, got {keep}")
    timestamps = conn.execute(
        select(collection_tracks.c.snapshot_at)
        .where(collection_tracks.c.collection_id == collection_id)
        .distinct()
        .order_by(collection_tracks.c.snapshot_at.desc())
    ).scalars().all()
    if len(timestamps) <= keep:
        return 0
    result = conn.execute(
        delete(collection_tracks).where(
            collection_tracks.c.collection_id == collection_id,
            collection_tracks.c.snapshot_at < timestamps[keep - 1],
        )
    )
    return result.rowcount


def delete_snapshots_before(conn: Connection, cutoff: int) -> int:
    """Drop snapshot rows taken before cutoff, across all collections."""
    result = conn.execute(delete(collection_tracks).where(collection_tracks.c.snapshot_at < cutoff))
    return result.rowcount


def count_snapshot_rows(conn: Connection) -> int:
    return conn.execute(select(func.count()).select_from(collection_tracks)).scalar_one()
