"""Pydantic request/response models for the API."""

from .recs import (
    AppendixRequest,
    CaptureRequest,
    DismissRequest,
    RecommendationItem,
    RecommendationsResponse,
    SeedRequest,
    TrackInfo,
    UpdateRequest,
)

__all__ = [
    "CaptureRequest",
    "UpdateRequest",
    "SeedRequest",
    "AppendixRequest",
    "DismissRequest",
    "TrackInfo",
    "RecommendationItem",
    "RecommendationsResponse",
]
