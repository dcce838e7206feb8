"""Recommendation-related Pydantic models."""

from typing import List, Optional, Union

from pydantic import BaseModel

from playlist_recs import GLOBAL_CONTEXT, Track


class CaptureRequest(BaseModel):
    playlist_id: str
    tracks: List[Union[str, Track, None]] = []
    cooccurrence_only: bool = False


class UpdateRequest(BaseModel):
    operation: str  # add | remove | reorder
    track_ids: List[str] = []
    added_track_ids: List[str] = []
    add_positions: List[int] = []
    removed_positions: List[int] = []
    from_position: Optional[int] = None
    to_position: Optional[int] = None


class SeedRequest(BaseModel):
    seed_track_ids: List[str] = []
    exclude_track_ids: List[str] = []
    dismissed_track_ids: List[str] = []
    playlist_id: Optional[str] = None
    top_n: int = 20
    include_metadata: bool = True


class AppendixRequest(BaseModel):
    playlist_id: str
    track_ids: List[str] = []
    dismissed_track_ids: List[str] = []
    top_n: int = 20
    include_metadata: bool = True


class DismissRequest(BaseModel):
    track_id: str
    context_id: str = GLOBAL_CONTEXT


class TrackInfo(BaseModel):
    id: str
    uri: Optional[str] = None
    name: Optional[str] = None
    artist_ids: List[str] = []
    artist_names: List[str] = []
    album_id: Optional[str] = None
    popularity: Optional[int] = None
    duration_ms: Optional[int] = None


class RecommendationItem(BaseModel):
    track_id: str
    score: float
    rank: int
    track: Optional[TrackInfo] = None


class RecommendationsResponse(BaseModel):
    recommendations: List[RecommendationItem]
    enabled: bool = True
    message: Optional[str] = None
