"""
Edge store operations over the two weighted graphs and the track cache.

Every function takes an open connection so the caller decides the transaction
boundary (one capture, one incremental update, one maintenance step).

Merges are additive: an existing row gains the new weight and its
last_seen_at moves to seen_at. Co-occurrence pairs are canonicalized on
every write so each unordered pair has exactly one row.
"""

import json
from typing import Dict, Iterable, List, Optional, Sequence

from sqlalchemy import Connection, case, func, or_, select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from ..models.edges import Edge, canonical_pair
from ..models.track import Track, TrackRecord
from .schema import adjacency_edges, cooccurrence_edges, tracks


def _check_weight(weight: float) -> None:
    if weight < 0:
        raise ValueError(f"Edge weight must be >= 0, got {weight}")


def _check_limit(limit: int) -> None:
    if limit < 1:
        raise ValueError(f"limit must be >= 1, got {limit}")


def merge_adjacency(
    conn: Connection,
    from_track_id: str,
    to_track_id: str,
    weight: float,
    seen_at: int,
) -> bool:
    """
    Upsert a directed edge with merge-by-sum semantics.

    Returns False (and writes nothing) for self-loops or missing IDs.
    """
    if not from_track_id or not to_track_id or from_track_id == to_track_id:
        return False
    _check_weight(weight)
    stmt = sqlite_insert(adjacency_edges).values(
        from_track_id=from_track_id,
        to_track_id=to_track_id,
        weight=weight,
        last_seen_at=seen_at,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=[adjacency_edges.c.from_track_id, adjacency_edges.c.to_track_id],
        set_={
            "weight": adjacency_edges.c.weight + stmt.excluded.weight,
            "last_seen_at": stmt.excluded.last_seen_at,
        },
    )
    conn.execute(stmt)
    return True


def merge_cooccurrence(
    conn: Connection,
    track_a: str,
    track_b: str,
    weight: float,
    seen_at: int,
) -> bool:
    """Upsert an undirected edge, canonicalizing the pair first."""
    if not track_a or not track_b or track_a == track_b:
        return False
    _check_weight(weight)
    id_a, id_b = canonical_pair(track_a, track_b)
    stmt = sqlite_insert(cooccurrence_edges).values(
        track_id_a=id_a,
        track_id_b=id_b,
        weight=weight,
        last_seen_at=seen_at,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=[cooccurrence_edges.c.track_id_a, cooccurrence_edges.c.track_id_b],
        set_={
            "weight": cooccurrence_edges.c.weight + stmt.excluded.weight,
            "last_seen_at": stmt.excluded.last_seen_at,
        },
    )
    conn.execute(stmt)
    return True


def top_adjacency_from(conn: Connection, track_id: str, limit: int = 50) -> List[Edge]:
    """Outgoing edges of track_id, heaviest first."""
    _check_limit(limit)
    rows = conn.execute(
        select(adjacency_edges.c.to_track_id, adjacency_edges.c.weight)
        .where(adjacency_edges.c.from_track_id == track_id)
        .order_by(adjacency_edges.c.weight.desc(), adjacency_edges.c.to_track_id)
        .limit(limit)
    ).all()
    return [Edge(track_id=r.to_track_id, weight=r.weight) for r in rows]


def cooccurrence_neighbors(conn: Connection, track_id: str, limit: int = 50) -> List[Edge]:
    """Neighbors of track_id from either side of the canonical pair, heaviest first."""
    _check_limit(limit)
    neighbor = case(
        (cooccurrence_edges.c.track_id_a == track_id, cooccurrence_edges.c.track_id_b),
        else_=cooccurrence_edges.c.track_id_a,
    ).label("neighbor_id")
    rows = conn.execute(
        select(neighbor, cooccurrence_edges.c.weight)
        .where(
            or_(
                cooccurrence_edges.c.track_id_a == track_id,
                cooccurrence_edges.c.track_id_b == track_id,
            )
        )
        .order_by(cooccurrence_edges.c.weight.desc(), neighbor)
        .limit(limit)
    ).all()
    return [Edge(track_id=r.neighbor_id, weight=r.weight) for r in rows]


def get_adjacency_weight(conn: Connection, from_track_id: str, to_track_id: str) -> Optional[float]:
    return conn.execute(
        select(adjacency_edges.c.weight).where(
            adjacency_edges.c.from_track_id == from_track_id,
            adjacency_edges.c.to_track_id == to_track_id,
        )
    ).scalar()


def get_cooccurrence_weight(conn: Connection, track_a: str, track_b: str) -> Optional[float]:
    id_a, id_b = canonical_pair(track_a, track_b)
    return conn.execute(
        select(cooccurrence_edges.c.weight).where(
            cooccurrence_edges.c.track_id_a == id_a,
            cooccurrence_edges.c.track_id_b == id_b,
        )
    ).scalar()


# ---------------------------------------------------------------------------
# Track metadata
# ---------------------------------------------------------------------------


def upsert_track(conn: Connection, track: Track, updated_at: int) -> bool:
    """
    Insert or refresh a track row. Fields the new observation leaves empty
    keep their stored values. Tracks without an ID are skipped.
    """
    if not track.has_id:
        return False
    stmt = sqlite_insert(tracks).values(
        track_id=track.id,
        uri=track.uri,
        name=track.name,
        artist_ids=json.dumps(track.artist_ids) if track.artist_ids else None,
        artist_names=json.dumps(track.artist_names) if track.artist_names else None,
        album_id=track.album_id,
        popularity=track.popularity,
        duration_ms=track.duration_ms,
        updated_at=updated_at,
    )
    ex = stmt.excluded
    stmt = stmt.on_conflict_do_update(
        index_elements=[tracks.c.track_id],
        set_={
            "uri": func.coalesce(ex.uri, tracks.c.uri),
            "name": func.coalesce(ex.name, tracks.c.name),
            "artist_ids": func.coalesce(ex.artist_ids, tracks.c.artist_ids),
            "artist_names": func.coalesce(ex.artist_names, tracks.c.artist_names),
            "album_id": func.coalesce(ex.album_id, tracks.c.album_id),
            "popularity": func.coalesce(ex.popularity, tracks.c.popularity),
            "duration_ms": func.coalesce(ex.duration_ms, tracks.c.duration_ms),
            "updated_at": ex.updated_at,
        },
    )
    conn.execute(stmt)
    return True


def _track_record(row) -> TrackRecord:
    return TrackRecord(
        track_id=row.track_id,
        uri=row.uri,
        name=row.name,
        artist_ids=json.loads(row.artist_ids) if row.artist_ids else [],
        artist_names=json.loads(row.artist_names) if row.artist_names else [],
        album_id=row.album_id,
        popularity=row.popularity,
        duration_ms=row.duration_ms,
        updated_at=row.updated_at,
    )


def get_tracks(conn: Connection, track_ids: Iterable[str]) -> Dict[str, TrackRecord]:
    """Stored metadata for the given IDs; unknown IDs are absent from the result."""
    ids = list(dict.fromkeys(track_ids))
    out: Dict[str, TrackRecord] = {}
    for start in range(0, len(ids), 500):
        chunk = ids[start:start + 500]
        rows = conn.execute(select(tracks).where(tracks.c.track_id.in_(chunk))).all()
        for row in rows:
            out[row.track_id] = _track_record(row)
    return out


def get_popularities(conn: Connection, track_ids: Sequence[str]) -> Dict[str, int]:
    """Known popularity (0-100) per track ID."""
    ids = list(dict.fromkeys(track_ids))
    out: Dict[str, int] = {}
    for start in range(0, len(ids), 500):
        chunk = ids[start:start + 500]
        rows = conn.execute(
            select(tracks.c.track_id, tracks.c.popularity).where(
                tracks.c.track_id.in_(chunk),
                tracks.c.popularity.is_not(None),
            )
        ).all()
        out.update({r.track_id: r.popularity for r in rows})
    return out
