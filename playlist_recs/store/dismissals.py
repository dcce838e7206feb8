"""Dismissal store: per-collection and global suppression of recommended tracks."""

from typing import Optional, Set

from sqlalchemy import Connection, delete, select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from .schema import GLOBAL_CONTEXT, dismissals


def dismiss(conn: Connection, track_id: str, context_id: str, dismissed_at: int) -> None:
    """Record a dismissal, replacing the timestamp if it already exists."""
    stmt = sqlite_insert(dismissals).values(
        context_id=context_id,
        track_id=track_id,
        dismissed_at=dismissed_at,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=[dismissals.c.context_id, dismissals.c.track_id],
        set_={"dismissed_at": stmt.excluded.dismissed_at},
    )
    conn.execute(stmt)


def clear(conn: Connection, context_id: str) -> int:
    """Delete every dismissal for one context. Returns rows removed."""
    result = conn.execute(delete(dismissals).where(dismissals.c.context_id == context_id))
    return result.rowcount


def dismissed_track_ids(conn: Connection, context_id: Optional[str] = None) -> Set[str]:
    """Persisted dismissals that apply to context_id; global ones always apply."""
    contexts = {GLOBAL_CONTEXT}
    if context_id:
        contexts.add(context_id)
    rows = conn.execute(
        select(dismissals.c.track_id).where(dismissals.c.context_id.in_(contexts))
    ).all()
    return {r.track_id for r in rows}
