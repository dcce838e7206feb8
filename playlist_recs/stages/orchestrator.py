"""
Pipeline orchestrator: gather candidates, filter, enrich, then rank.

The entry points are get_seed_recommendations (Mode A) and
get_collection_appendix_recommendations (Mode B). Both read the store in one
connection; enrichment runs afterwards and never blocks the graph result.
"""

import logging
from typing import Callable, Dict, List, Optional, Sequence

from sqlalchemy import Connection

from ..enrichment import SignalSource
from ..models.config import RecsConfig, resolve_config
from ..models.scoring import ENRICHMENT, Candidate, Recommendation, RecommendationContext
from ..store.db import EdgeStore
from .candidate_pool import gather_appendix_candidates, gather_seed_candidates
from .filtering import filter_excluded, load_dismissed_ids
from .ranking import rank_candidates

logger = logging.getLogger(__name__)

Gatherer = Callable[[Connection], Dict[str, Candidate]]


def apply_enrichment(
    candidates: List[Candidate],
    source: Optional[SignalSource],
    config: RecsConfig,
) -> None:
    """Add enrichment scores in place. Any failure of the source is logged and ignored."""
    if source is None or config.weight_enrichment <= 0 or not candidates:
        return
    try:
        scores = source.scores_for([c.track_id for c in candidates])
    except Exception as e:
        logger.warning("[enrichment] %s unavailable, scoring without it: %s", getattr(source, "name", source), e)
        return
    source_name = getattr(source, "name", ENRICHMENT)
    for c in candidates:
        value = scores.get(c.track_id)
        if value is not None:
            c.add(ENRICHMENT, float(value), source_name)


def _recommend(
    store: EdgeStore,
    gather: Gatherer,
    context: RecommendationContext,
    config: RecsConfig,
    signal_source: Optional[SignalSource],
) -> List[Recommendation]:
    # 1) Gather and filter in a single read
    with store.read() as conn:
        candidates = gather(conn)
        dismissed = load_dismissed_ids(conn, context) if candidates else set()
    filtered = filter_excluded(candidates, context, dismissed)

    # 2) Optional enrichment (best effort)
    apply_enrichment(filtered, signal_source, config)

    # 3) Normalize, blend, rank
    return rank_candidates(filtered, config, top_n=context.top_n, min_score=context.min_score)


def get_seed_recommendations(
    store: EdgeStore,
    seed_track_ids: Sequence[str],
    context: Optional[RecommendationContext] = None,
    config: Optional[RecsConfig] = None,
    signal_source: Optional[SignalSource] = None,
) -> List[Recommendation]:
    """Mode A: recommendations that follow or sit near the given seed tracks."""
    seeds = [s for s in seed_track_ids if s]
    if not seeds:
        return []
    config = resolve_config(config)
    context = context or RecommendationContext()
    return _recommend(
        store,
        lambda conn: gather_seed_candidates(conn, seeds, config),
        context,
        config,
        signal_source,
    )


def get_collection_appendix_recommendations(
    store: EdgeStore,
    track_ids: Sequence[str],
    context: Optional[RecommendationContext] = None,
    config: Optional[RecsConfig] = None,
    signal_source: Optional[SignalSource] = None,
) -> List[Recommendation]:
    """Mode B: recommendations to append to a whole collection, favoring its tail."""
    if not track_ids:
        return []
    config = resolve_config(config)
    context = context or RecommendationContext()
    return _recommend(
        store,
        lambda conn: gather_appendix_candidates(conn, list(track_ids), config),
        context,
        config,
        signal_source,
    )
