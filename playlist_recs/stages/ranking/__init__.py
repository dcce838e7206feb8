"""
Ranking: normalize and blend signals into a sorted, cut recommendation list.

Public API: rank_candidates, compute_final_scores.
- core: main orchestration (rank_candidates).
- blended_scoring: per-signal normalization and the weighted blend.
"""

from .blended_scoring import compute_final_scores
from .core import rank_candidates

__all__ = [
    "rank_candidates",
    "compute_final_scores",
]
