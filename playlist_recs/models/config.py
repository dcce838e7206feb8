"""
Algorithm configuration: capture, scoring, blend weights, and maintenance parameters.

RecsConfig defaults are defined here. The server may pass a dict
(e.g. from a JSON file named by RECS_CONFIG_PATH); from_dict() merges it with these defaults.
"""

from typing import Dict, Optional

from pydantic import BaseModel, Field, model_validator


class RecsConfig(BaseModel):
    """Configuration for edge capture, recommendation scoring, and maintenance."""

    # -------------------------------------------------------------------------
    # Capture / Incremental Updates
    # -------------------------------------------------------------------------

    # Sliding window for co-occurrence pairs (tracks within N positions co-occur).
    cooccurrence_window: int = Field(default=5, ge=1)

    # Weight of a full observation (adjacency and nearest co-occurrence pair).
    capture_weight: float = Field(default=1.0, ge=0.0)

    # Per-step weight falloff inside the co-occurrence window.
    # weight = capture_weight * (1 - (distance - 1) * cooccurrence_distance_falloff)
    cooccurrence_distance_falloff: float = Field(default=0.1, ge=0.0)

    # Co-occurrence weight used when refreshing a local window after an add.
    incremental_cooccurrence_weight: float = Field(default=0.5, ge=0.0)

    # Weight of inferred "repair" edges bridging a gap after remove/reorder.
    repair_edge_weight: float = Field(default=0.5, ge=0.0)

    # -------------------------------------------------------------------------
    # Candidate Gathering
    # -------------------------------------------------------------------------

    # Mode A: outgoing adjacency edges pulled per seed track.
    candidates_per_seed: int = Field(default=50, ge=1)
    # Mode A: co-occurrence neighbors pulled per seed track.
    max_cooccurrence_neighbors: int = Field(default=100, ge=1)

    # Mode B: edges pulled per sampled source position (both graphs).
    appendix_edges_per_source: int = Field(default=30, ge=1)
    # Mode B: max positions sampled from the collection. All positions used when total <= cap.
    appendix_sample_cap: int = Field(default=20, ge=1)
    # Mode B: trailing positions always sampled.
    appendix_tail_size: int = Field(default=5, ge=0)
    # Mode B: position weight rises linearly from this floor (first track) to 1.0 (last track).
    appendix_position_weight_floor: float = Field(default=0.3, ge=0.0, le=1.0)
    # Mode B: fixed factor applied to co-occurrence contributions.
    appendix_cooccurrence_factor: float = Field(default=0.5, ge=0.0)

    # -------------------------------------------------------------------------
    # Blended Scoring Weights (must sum to 1.0)
    # final_score = weight_adjacency * adj + weight_cooccurrence * co + weight_enrichment * enr
    # -------------------------------------------------------------------------

    # Weight for the directed "what follows" signal. Higher = stronger flow continuity.
    weight_adjacency: float = 0.6
    # Weight for the undirected "observed nearby" signal.
    weight_cooccurrence: float = 0.4
    # Weight for the optional external signal source. 0.0 keeps scoring graph-only.
    weight_enrichment: float = 0.0

    # Flat bonus when a candidate is supported by more than one distinct signal source.
    diversity_bonus: float = Field(default=0.05, ge=0.0)

    # -------------------------------------------------------------------------
    # Ranking
    # -------------------------------------------------------------------------

    default_top_n: int = Field(default=20, ge=1)
    max_top_n: int = Field(default=50, ge=1)
    min_score_threshold: float = Field(default=0.01, ge=0.0)
    max_seed_tracks: int = Field(default=5, ge=1)

    # -------------------------------------------------------------------------
    # Maintenance
    # -------------------------------------------------------------------------

    # Multiplier applied to stale edges. 0.98 weekly roughly halves weight in ~8 months.
    decay_factor: float = Field(default=0.98, ge=0.0, le=1.0)
    # Edges not seen for this many days are decayed.
    decay_older_than_days: int = Field(default=7, ge=0)
    # Max outgoing adjacency edges (and co-occurrence rows per side) kept per track.
    max_edges_per_track: int = Field(default=200, ge=1)
    # Edges below this absolute weight are deleted.
    prune_min_weight: float = Field(default=0.01, ge=0.0)
    # Collection snapshots older than this many days are deleted.
    snapshot_retention_days: int = Field(default=90, ge=0)

    @model_validator(mode="after")
    def weights_sum_to_one(self):
        total = self.weight_adjacency + self.weight_cooccurrence + self.weight_enrichment
        if abs(total - 1.0) > 0.01:
            raise ValueError(f"Scoring weights must sum to 1.0, got {total}")
        return self

    @classmethod
    def from_dict(cls, config_dict: Dict) -> "RecsConfig":
        """Create config from dictionary (e.g., loaded from JSON)."""
        flat = {}
        for section in ("capture", "scoring", "ranking", "maintenance"):
            if section in config_dict:
                flat.update(config_dict[section])
        if "weights" in config_dict:
            w = config_dict["weights"]
            if "adjacency" in w:
                flat["weight_adjacency"] = w["adjacency"]
            if "cooccurrence" in w:
                flat["weight_cooccurrence"] = w["cooccurrence"]
            if "enrichment" in w:
                flat["weight_enrichment"] = w["enrichment"]
        # Flat keys at the top level win over sectioned ones
        flat.update({k: v for k, v in config_dict.items() if not isinstance(v, dict)})
        allowed = set(cls.model_fields)
        filtered = {k: v for k, v in flat.items() if k in allowed}
        return cls.model_validate(filtered)


DEFAULT_CONFIG = RecsConfig()


def resolve_config(config: Optional["RecsConfig"]) -> "RecsConfig":
    """Return config or DEFAULT_CONFIG when none is provided."""
    return config if config is not None else DEFAULT_CONFIG
