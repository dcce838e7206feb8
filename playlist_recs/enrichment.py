"""
Optional external signal sources.

A SignalSource scores candidates from data outside the graph (catalog
popularity and the like). Scoring treats it as best effort: a source that is
missing or raises leaves the graph signals to rank on their own.

Implementations: StoredPopularitySource (popularity captured with track
metadata), StaticSignalSource (fixed mapping, used by the harness and tests).
"""

from typing import Dict, Mapping, Protocol, Sequence

from .store.db import EdgeStore
from .store.edges import get_popularities


class SignalSource(Protocol):
    """Protocol for enrichment signals. Values are expected in [0, 1]."""

    name: str

    def scores_for(self, track_ids: Sequence[str]) -> Dict[str, float]:
        """Return a score per known track ID; unknown IDs may be omitted."""
        ...


class StoredPopularitySource:
    """Popularity (0-100) captured into the tracks table, normalized to [0, 1]."""

    name = "popularity"

    def __init__(self, store: EdgeStore):
        self._store = store

    def scores_for(self, track_ids: Sequence[str]) -> Dict[str, float]:
        if not track_ids:
            return {}
        with self._store.read() as conn:
            popularities = get_popularities(conn, track_ids)
        return {tid: pop / 100.0 for tid, pop in popularities.items()}


class StaticSignalSource:
    """Signal source backed by a fixed mapping."""

    def __init__(self, scores: Mapping[str, float], name: str = "static"):
        self.name = name
        self._scores = dict(scores)

    def scores_for(self, track_ids: Sequence[str]) -> Dict[str, float]:
        return {tid: self._scores[tid] for tid in track_ids if tid in self._scores}
