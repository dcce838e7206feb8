"""
Playlist recommendations: graph-based track suggestions from observed orderings.

Single entry point for the package:
- models/: RecsConfig, Track, Candidate, Recommendation, result models
- store/: EdgeStore (SQLite via SQLAlchemy), migrations, edge, dismissal and snapshot operations
- stages/: capture, incremental updates, candidate_pool, filtering, ranking, orchestrator
- maintenance: decay, cap_top_k, prune_weak, prune_snapshots, compact, get_stats, run_maintenance
- engine: RecsEngine facade with the feature flag
"""

from .engine import RecsEngine
from .enrichment import SignalSource, StaticSignalSource, StoredPopularitySource
from .maintenance import cap_top_k, compact, decay, get_stats, prune_snapshots, prune_weak, run_maintenance
from .models.config import DEFAULT_CONFIG, RecsConfig, resolve_config
from .models.results import CaptureStats, EdgeCounts, MaintenanceReport, StoreStats, UpdateStats
from .models.scoring import Recommendation, RecommendationContext
from .models.track import Track, TrackRecord, ensure_tracks
from .stages import (
    capture_collection,
    get_collection_appendix_recommendations,
    get_latest_collection_track_ids,
    get_seed_recommendations,
    is_snapshot_stale,
    update_for_add,
    update_for_operation,
    update_for_remove,
    update_for_reorder,
)
from .store import GLOBAL_CONTEXT, EdgeStore

__all__ = [
    "RecsEngine",
    "RecsConfig",
    "DEFAULT_CONFIG",
    "resolve_config",
    "EdgeStore",
    "GLOBAL_CONTEXT",
    "Track",
    "TrackRecord",
    "ensure_tracks",
    "Recommendation",
    "RecommendationContext",
    "CaptureStats",
    "UpdateStats",
    "EdgeCounts",
    "StoreStats",
    "MaintenanceReport",
    "SignalSource",
    "StoredPopularitySource",
    "StaticSignalSource",
    "capture_collection",
    "get_latest_collection_track_ids",
    "is_snapshot_stale",
    "update_for_add",
    "update_for_remove",
    "update_for_reorder",
    "update_for_operation",
    "get_seed_recommendations",
    "get_collection_appendix_recommendations",
    "decay",
    "cap_top_k",
    "prune_weak",
    "prune_snapshots",
    "compact",
    "get_stats",
    "run_maintenance",
]
