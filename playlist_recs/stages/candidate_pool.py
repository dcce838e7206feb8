"""
Candidate gathering: pull edges around source tracks into a candidate map.

Mode A (seeds): every seed contributes its outgoing adjacency edges and its
co-occurrence neighbors at face value; a candidate reachable from several
seeds accumulates every contribution.

Mode B (collection appendix): a sample of positions acts as sources. Adjacency
contributions are scaled by a position weight rising from the floor (first
track) to 1.0 (last track); co-occurrence contributions use a fixed factor.
"""

from typing import Dict, List, Sequence

from sqlalchemy import Connection

from ..models.config import RecsConfig
from ..models.scoring import ADJACENCY, COOCCURRENCE, Candidate, merge_candidate_score
from ..store.edges import cooccurrence_neighbors, top_adjacency_from


def gather_seed_candidates(
    conn: Connection,
    seed_track_ids: Sequence[str],
    config: RecsConfig,
) -> Dict[str, Candidate]:
    """Mode A: accumulate adjacency and co-occurrence edges of every seed."""
    candidates: Dict[str, Candidate] = {}
    for seed_id in seed_track_ids:
        for edge in top_adjacency_from(conn, seed_id, config.candidates_per_seed):
            merge_candidate_score(candidates, edge.track_id, ADJACENCY, edge.weight)
        for edge in cooccurrence_neighbors(conn, seed_id, config.max_cooccurrence_neighbors):
            merge_candidate_score(candidates, edge.track_id, COOCCURRENCE, edge.weight)
    return candidates


def get_sampled_indices(total: int, max_samples: int, tail_size: int = 5) -> List[int]:
    """
    Positions to use as sources, sorted ascending.

    All positions when total <= max_samples. Otherwise the last tail_size
    positions plus an evenly spaced sample of the rest, up to max_samples.
    """
    if total <= 0:
        return []
    if total <= max_samples:
        return list(range(total))

    tail_count = min(tail_size, max_samples)
    indices = list(range(total - tail_count, total))

    remaining = max_samples - tail_count
    body_length = total - tail_count
    # body_length > remaining here, so these are distinct and span the whole body.
    for i in range(remaining):
        indices.append(i * body_length // remaining)

    return sorted(set(indices))


def position_weight(index: int, total: int, floor: float = 0.3) -> float:
    """Linear ramp from floor at the first position to 1.0 at the last."""
    span = (total - 1) or 1
    return floor + (1.0 - floor) * (index / span)


def gather_appendix_candidates(
    conn: Connection,
    track_ids: Sequence[str],
    config: RecsConfig,
) -> Dict[str, Candidate]:
    """Mode B: accumulate edges of sampled positions, weighted toward the end."""
    candidates: Dict[str, Candidate] = {}
    total = len(track_ids)
    sampled = get_sampled_indices(total, config.appendix_sample_cap, config.appendix_tail_size)

    for idx in sampled:
        track_id = track_ids[idx]
        if not track_id:
            continue
        weight = position_weight(idx, total, config.appendix_position_weight_floor)

        for edge in top_adjacency_from(conn, track_id, config.appendix_edges_per_source):
            merge_candidate_score(candidates, edge.track_id, ADJACENCY, edge.weight * weight)

        for edge in cooccurrence_neighbors(conn, track_id, config.appendix_edges_per_source):
            merge_candidate_score(
                candidates,
                edge.track_id,
                COOCCURRENCE,
                edge.weight * config.appendix_cooccurrence_factor,
            )
    return candidates
