"""
Scoring model: candidates, final recommendations, and the query context.

Contains:
- Candidate: per-track signal accumulators filled during gathering
- Recommendation: a ranked result handed back to the host
- RecommendationContext: exclusions, dismissals, and limits for one query
"""

from typing import Dict, Optional, Set

from pydantic import BaseModel, Field

ADJACENCY = "adjacency"
COOCCURRENCE = "cooccurrence"
ENRICHMENT = "enrichment"

SIGNALS = (ADJACENCY, COOCCURRENCE, ENRICHMENT)


class Candidate(BaseModel):
    """A track being considered, with accumulated raw signal values."""

    track_id: str
    adjacency: float = 0.0
    cooccurrence: float = 0.0
    enrichment: float = 0.0
    sources: Set[str] = Field(default_factory=set)
    final_score: float = 0.0

    def add(self, signal: str, value: float, source: Optional[str] = None) -> None:
        """Accumulate value into one signal; the source defaults to the signal name."""
        if signal not in SIGNALS:
            raise ValueError(f"Unknown signal: {signal}")
        setattr(self, signal, getattr(self, signal) + value)
        self.sources.add(source or signal)


class Recommendation(BaseModel):
    """Final recommendation output. rank is 1-based."""

    track_id: str
    score: float
    rank: int


class RecommendationContext(BaseModel):
    """Context for generating recommendations."""

    # Track IDs to exclude from results (e.g., already in the collection)
    exclude_track_ids: Set[str] = Field(default_factory=set)

    # Session-level dismissals held by the host, not yet persisted
    dismissed_track_ids: Set[str] = Field(default_factory=set)

    # Collection ID for context-specific persisted dismissals
    collection_id: Optional[str] = None

    top_n: Optional[int] = Field(default=None, ge=1)
    min_score: Optional[float] = Field(default=None, ge=0.0)


def merge_candidate_score(
    candidates: Dict[str, Candidate],
    track_id: str,
    signal: str,
    value: float,
    source: Optional[str] = None,
) -> Candidate:
    """Merge a score into a candidate's accumulator, creating the candidate when new."""
    candidate = candidates.get(track_id)
    if candidate is None:
        candidate = Candidate(track_id=track_id)
        candidates[track_id] = candidate
    candidate.add(signal, value, source)
    return candidate
