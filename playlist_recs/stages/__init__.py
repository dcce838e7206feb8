"""
Pipeline stages: capture, incremental updates, candidate gathering, filtering, ranking.

The recommendation entry points live in orchestrator.
"""

from .capture import capture_collection, get_latest_collection_track_ids, is_snapshot_stale
from .incremental import update_for_add, update_for_operation, update_for_remove, update_for_reorder
from .orchestrator import get_collection_appendix_recommendations, get_seed_recommendations

__all__ = [
    "capture_collection",
    "get_latest_collection_track_ids",
    "is_snapshot_stale",
    "update_for_add",
    "update_for_remove",
    "update_for_reorder",
    "update_for_operation",
    "get_seed_recommendations",
    "get_collection_appendix_recommendations",
]
