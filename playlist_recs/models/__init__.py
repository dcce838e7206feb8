"""Pydantic models used across the store, stages, and engine."""

from .config import DEFAULT_CONFIG, RecsConfig, resolve_config
from .edges import Edge, canonical_pair
from .results import (
    AppliedMigration,
    CaptureStats,
    CompactResult,
    EdgeCounts,
    MaintenanceReport,
    MigrationStatus,
    StoreStats,
    UpdateStats,
)
from .scoring import (
    ADJACENCY,
    COOCCURRENCE,
    ENRICHMENT,
    Candidate,
    Recommendation,
    RecommendationContext,
    merge_candidate_score,
)
from .track import Track, TrackRecord, ensure_tracks, track_ids_of

__all__ = [
    "DEFAULT_CONFIG",
    "RecsConfig",
    "resolve_config",
    "Edge",
    "canonical_pair",
    "AppliedMigration",
    "CaptureStats",
    "CompactResult",
    "EdgeCounts",
    "MaintenanceReport",
    "MigrationStatus",
    "StoreStats",
    "UpdateStats",
    "ADJACENCY",
    "COOCCURRENCE",
    "ENRICHMENT",
    "Candidate",
    "Recommendation",
    "RecommendationContext",
    "merge_candidate_score",
    "Track",
    "TrackRecord",
    "ensure_tracks",
    "track_ids_of",
]
