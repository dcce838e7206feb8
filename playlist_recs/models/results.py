"""Result models returned by capture, incremental updates, and maintenance."""

from typing import List, Optional

from pydantic import BaseModel


class CaptureStats(BaseModel):
    tracks_captured: int = 0
    adjacency_edges: int = 0
    cooccurrence_edges: int = 0


class UpdateStats(BaseModel):
    adjacency: int = 0
    cooccurrence: int = 0


class EdgeCounts(BaseModel):
    """Rows affected per graph by one maintenance step."""

    adjacency_edges: int = 0
    cooccurrence_edges: int = 0

    @property
    def total(self) -> int:
        return self.adjacency_edges + self.cooccurrence_edges


class CompactResult(BaseModel):
    size_before_bytes: int = 0
    size_after_bytes: int = 0

    @property
    def reclaimed_bytes(self) -> int:
        return max(0, self.size_before_bytes - self.size_after_bytes)


class StoreStats(BaseModel):
    tracks: int = 0
    adjacency_edges: int = 0
    cooccurrence_edges: int = 0
    dismissals: int = 0
    snapshot_rows: int = 0
    total_edges: int = 0
    db_size_bytes: int = 0
    db_size_mb: float = 0.0


class MaintenanceReport(BaseModel):
    before: StoreStats
    after: StoreStats
    decayed: EdgeCounts
    capped: EdgeCounts
    pruned: EdgeCounts
    snapshots_pruned: int = 0
    compacted: Optional[CompactResult] = None
    duration_ms: int = 0


class AppliedMigration(BaseModel):
    version: int
    name: str
    applied_at: int


class MigrationStatus(BaseModel):
    current_version: int = 0
    latest_version: int = 0
    pending_count: int = 0
    applied: List[AppliedMigration] = []
