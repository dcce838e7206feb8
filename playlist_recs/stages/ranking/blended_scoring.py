"""
Blended scoring: normalize each signal by its max across candidates, then weight.

final = weight_adjacency * adj/max_adj
      + weight_cooccurrence * co/max_co
      + weight_enrichment * enrichment        (already in [0, 1])
      + diversity_bonus                       (when more than one distinct source)
"""

from typing import Dict, List

from ...models.config import RecsConfig
from ...models.scoring import ADJACENCY, COOCCURRENCE, Candidate


def signal_maxima(candidates: List[Candidate]) -> Dict[str, float]:
    """Max accumulated value per graph signal; a zero max is reported as 1."""
    maxima = {ADJACENCY: 0.0, COOCCURRENCE: 0.0}
    for c in candidates:
        maxima[ADJACENCY] = max(maxima[ADJACENCY], c.adjacency)
        maxima[COOCCURRENCE] = max(maxima[COOCCURRENCE], c.cooccurrence)
    return {k: (v if v > 0 else 1.0) for k, v in maxima.items()}


def blend_score(candidate: Candidate, maxima: Dict[str, float], config: RecsConfig) -> float:
    score = (
        config.weight_adjacency * (candidate.adjacency / maxima[ADJACENCY])
        + config.weight_cooccurrence * (candidate.cooccurrence / maxima[COOCCURRENCE])
        + config.weight_enrichment * min(max(candidate.enrichment, 0.0), 1.0)
    )
    if len(candidate.sources) > 1:
        score += config.diversity_bonus
    return score


def compute_final_scores(candidates: List[Candidate], config: RecsConfig) -> List[Candidate]:
    """Set final_score on every candidate (in place) and return the list."""
    maxima = signal_maxima(candidates)
    for c in candidates:
        c.final_score = blend_score(c, maxima, config)
    return candidates
