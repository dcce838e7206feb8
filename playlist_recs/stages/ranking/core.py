"""
Main ranking orchestration: blend, threshold, sort, and cut to top N.

Ties on score are broken by track ID so repeated queries return a stable order.
"""

import logging
from typing import List, Optional

from ...models.config import RecsConfig, DEFAULT_CONFIG
from ...models.scoring import Candidate, Recommendation
from .blended_scoring import compute_final_scores

logger = logging.getLogger(__name__)


def rank_candidates(
    candidates: List[Candidate],
    config: RecsConfig = DEFAULT_CONFIG,
    top_n: Optional[int] = None,
    min_score: Optional[float] = None,
) -> List[Recommendation]:
    """
    Rank filtered candidates into Recommendations with 1-based rank.

    top_n defaults to config.default_top_n and is capped at config.max_top_n;
    candidates scoring below min_score (default config.min_score_threshold) are dropped.
    """
    limit = min(top_n or config.default_top_n, config.max_top_n)
    threshold = config.min_score_threshold if min_score is None else min_score

    scored = compute_final_scores(candidates, config)
    kept = [c for c in scored if c.final_score >= threshold]
    kept.sort(key=lambda c: (-c.final_score, c.track_id))

    if len(kept) < len(scored):
        logger.debug("[ranking] %d candidate(s) below min score %.3f", len(scored) - len(kept), threshold)

    return [
        Recommendation(track_id=c.track_id, score=c.final_score, rank=i + 1)
        for i, c in enumerate(kept[:limit])
    ]
