"""
Exclusion filtering for candidates.

A candidate is dropped when it is in the caller's exclude set (typically the
collection's own tracks) or dismissed: session dismissals held by the host,
persisted dismissals for the collection, and persisted global dismissals.
"""

from typing import Dict, List, Set

from sqlalchemy import Connection

from ..models.scoring import Candidate, RecommendationContext
from ..store.dismissals import dismissed_track_ids


def load_dismissed_ids(conn: Connection, context: RecommendationContext) -> Set[str]:
    """Union of session dismissals and persisted (collection + global) dismissals."""
    return set(context.dismissed_track_ids) | dismissed_track_ids(conn, context.collection_id)


def filter_excluded(
    candidates: Dict[str, Candidate],
    context: RecommendationContext,
    dismissed_ids: Set[str],
) -> List[Candidate]:
    """Candidates that are neither excluded nor dismissed, in insertion order."""
    return [
        c for track_id, c in candidates.items()
        if track_id not in context.exclude_track_ids and track_id not in dismissed_ids
    ]
