"""
RecsEngine: the host-facing facade over the edge store.

Owns one EdgeStore and one RecsConfig. When the feature flag is off, every
entry point returns an empty or zeroed result without opening the database.
"""

import logging
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Union

from .maintenance import cap_top_k, compact, decay, get_stats, prune_snapshots, prune_weak, run_maintenance
from .models.config import RecsConfig, resolve_config
from .models.results import (
    CaptureStats,
    CompactResult,
    EdgeCounts,
    MaintenanceReport,
    MigrationStatus,
    StoreStats,
    UpdateStats,
)
from .models.scoring import Recommendation, RecommendationContext
from .models.track import TrackRecord
from .enrichment import SignalSource
from .stages import capture as capture_stage
from .stages import incremental
from .stages.orchestrator import get_collection_appendix_recommendations, get_seed_recommendations
from .store import dismissals, snapshots
from .store.db import MEMORY_PATH, EdgeStore
from .store.edges import get_tracks
from .store.migrations import get_migration_status
from .store.schema import GLOBAL_CONTEXT

logger = logging.getLogger(__name__)


class RecsEngine:
    def __init__(
        self,
        store: Optional[EdgeStore] = None,
        enabled: bool = True,
        config: Optional[RecsConfig] = None,
        signal_source: Optional[SignalSource] = None,
    ):
        self.enabled = enabled and store is not None
        self.store = store
        self.config = resolve_config(config)
        self.signal_source = signal_source

    @classmethod
    def open(
        cls,
        enabled: bool = True,
        db_path: Union[str, Path] = MEMORY_PATH,
        config: Optional[RecsConfig] = None,
        clock: Optional[Callable[[], float]] = None,
        signal_source: Optional[SignalSource] = None,
    ) -> "RecsEngine":
        """Open the store at db_path when enabled; a disabled engine never touches disk."""
        if not enabled:
            return cls(store=None, enabled=False, config=config)
        store = EdgeStore.open(db_path, clock=clock)
        return cls(store=store, enabled=True, config=config, signal_source=signal_source)

    # ---- Capture and incremental updates ----

    def capture(self, collection_id: str, tracks: list, cooccurrence_only: bool = False) -> CaptureStats:
        if not self.enabled:
            return CaptureStats()
        return capture_stage.capture_collection(
            self.store, collection_id, tracks, cooccurrence_only=cooccurrence_only, config=self.config
        )

    def update_for_add(
        self,
        track_ids: Sequence[str],
        added_track_ids: Sequence[str],
        positions: Sequence[int],
    ) -> UpdateStats:
        if not self.enabled:
            return UpdateStats()
        return incremental.update_for_add(self.store, track_ids, added_track_ids, positions, self.config)

    def update_for_remove(self, track_ids: Sequence[str], removed_positions: Sequence[int]) -> UpdateStats:
        if not self.enabled:
            return UpdateStats()
        return incremental.update_for_remove(self.store, track_ids, removed_positions, self.config)

    def update_for_reorder(self, track_ids: Sequence[str], from_position: int, to_position: int) -> UpdateStats:
        if not self.enabled:
            return UpdateStats()
        return incremental.update_for_reorder(self.store, track_ids, from_position, to_position, self.config)

    def update_for_operation(self, operation: str, track_ids: Sequence[str], **kwargs) -> UpdateStats:
        if not self.enabled:
            return UpdateStats()
        return incremental.update_for_operation(self.store, operation, track_ids, config=self.config, **kwargs)

    # ---- Collection snapshots ----

    def get_latest_collection_track_ids(self, collection_id: str) -> List[str]:
        if not self.enabled:
            return []
        return capture_stage.get_latest_collection_track_ids(self.store, collection_id)

    def is_snapshot_stale(self, collection_id: str, max_age_seconds: int = 3600) -> bool:
        """A disabled engine reports every collection as fresh so hosts skip capturing."""
        if not self.enabled:
            return False
        return capture_stage.is_snapshot_stale(self.store, collection_id, max_age_seconds)

    def prune_collection_snapshots(self, collection_id: str, keep: int = 3) -> int:
        if not self.enabled:
            return 0
        with self.store.transaction() as conn:
            return snapshots.prune_collection_snapshots(conn, collection_id, keep)

    # ---- Recommendations ----

    def get_seed_recommendations(
        self,
        seed_track_ids: Sequence[str],
        context: Optional[RecommendationContext] = None,
    ) -> List[Recommendation]:
        if not self.enabled:
            return []
        return get_seed_recommendations(
            self.store, seed_track_ids, context, self.config, self.signal_source
        )

    def get_collection_appendix_recommendations(
        self,
        track_ids: Sequence[str],
        context: Optional[RecommendationContext] = None,
    ) -> List[Recommendation]:
        if not self.enabled:
            return []
        return get_collection_appendix_recommendations(
            self.store, track_ids, context, self.config, self.signal_source
        )

    def get_tracks(self, track_ids: Iterable[str]) -> Dict[str, TrackRecord]:
        """Cached metadata for display, keyed by track ID."""
        if not self.enabled:
            return {}
        with self.store.read() as conn:
            return get_tracks(conn, track_ids)

    def get_track(self, track_id: str) -> Optional[TrackRecord]:
        return self.get_tracks([track_id]).get(track_id)

    # ---- Dismissals ----

    def dismiss_recommendation(self, track_id: str, context_id: str = GLOBAL_CONTEXT) -> bool:
        if not self.enabled or not track_id:
            return False
        with self.store.transaction() as conn:
            dismissals.dismiss(conn, track_id, context_id or GLOBAL_CONTEXT, self.store.now())
        return True

    def clear_dismissals(self, context_id: str = GLOBAL_CONTEXT) -> int:
        if not self.enabled:
            return 0
        with self.store.transaction() as conn:
            return dismissals.clear(conn, context_id or GLOBAL_CONTEXT)

    # ---- Maintenance ----

    def decay(self, factor: Optional[float] = None, older_than_days: Optional[float] = None) -> EdgeCounts:
        if not self.enabled:
            return EdgeCounts()
        return decay(
            self.store,
            self.config.decay_factor if factor is None else factor,
            self.config.decay_older_than_days if older_than_days is None else older_than_days,
        )

    def cap_top_k(self, k: Optional[int] = None) -> EdgeCounts:
        if not self.enabled:
            return EdgeCounts()
        return cap_top_k(self.store, self.config.max_edges_per_track if k is None else k)

    def prune_weak(self, min_weight: Optional[float] = None) -> EdgeCounts:
        if not self.enabled:
            return EdgeCounts()
        return prune_weak(self.store, self.config.prune_min_weight if min_weight is None else min_weight)

    def prune_snapshots(self, retention_days: Optional[float] = None) -> int:
        if not self.enabled:
            return 0
        return prune_snapshots(
            self.store,
            self.config.snapshot_retention_days if retention_days is None else retention_days,
        )

    def compact(self) -> CompactResult:
        if not self.enabled:
            return CompactResult()
        return compact(self.store)

    def get_stats(self) -> StoreStats:
        if not self.enabled:
            return StoreStats()
        return get_stats(self.store)

    def run_maintenance(self, include_compact: bool = True) -> Optional[MaintenanceReport]:
        if not self.enabled:
            logger.info("[maintenance] Recommendations not enabled, skipping")
            return None
        return run_maintenance(self.store, self.config, include_compact=include_compact)

    def migration_status(self) -> MigrationStatus:
        if not self.enabled:
            return MigrationStatus()
        return get_migration_status(self.store.engine)

    def close(self) -> None:
        if self.store is not None:
            self.store.close()
