"""
Track model: typed representation of a collection entry handed over by the host.

Used by capture to upsert metadata and derive the ordered ID list for edges.
Built from host dicts via Track.model_validate(d); bare strings are treated as IDs.
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Track(BaseModel):
    """
    Track payload observed in a collection.

    Only id matters for the graph. Tracks without an id (local files)
    are kept in the input but never stored or linked.
    """

    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    uri: Optional[str] = None
    name: Optional[str] = None
    artist_ids: List[str] = []
    artist_names: List[str] = []
    album_id: Optional[str] = None
    popularity: Optional[int] = Field(default=None, ge=0, le=100)
    duration_ms: Optional[int] = None

    @property
    def has_id(self) -> bool:
        return bool(self.id)

    @model_validator(mode="before")
    @classmethod
    def from_host_shape(cls, data: Any) -> Any:
        """Accept the host's camelCase payload: artistObjects[], album{id}, durationMs."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        artists = data.get("artistObjects")
        if isinstance(artists, list):
            artists = [a for a in artists if isinstance(a, dict)]
            data.setdefault("artist_ids", [a["id"] for a in artists if a.get("id")])
            data.setdefault("artist_names", [a["name"] for a in artists if a.get("name")])
        album = data.get("album")
        if isinstance(album, dict) and album.get("id"):
            data.setdefault("album_id", album["id"])
        if "durationMs" in data:
            data.setdefault("duration_ms", data["durationMs"])
        return data


class TrackRecord(BaseModel):
    """A stored track row, as returned by metadata lookups."""

    track_id: str
    uri: Optional[str] = None
    name: Optional[str] = None
    artist_ids: List[str] = []
    artist_names: List[str] = []
    album_id: Optional[str] = None
    popularity: Optional[int] = None
    duration_ms: Optional[int] = None
    updated_at: int = 0


def ensure_tracks(tracks: List[Union[str, Dict[str, Any], "Track", None]]) -> List["Track"]:
    """Convert list of IDs, dicts or Tracks to list of Track models for capture."""
    out = []
    for t in tracks:
        if t is None:
            out.append(Track())
        elif isinstance(t, str):
            out.append(Track(id=t))
        elif isinstance(t, dict):
            out.append(Track.model_validate(t))
        else:
            out.append(t)
    return out


def track_ids_of(tracks: List["Track"]) -> List[str]:
    """Ordered IDs of tracks that have one (duplicates kept)."""
    return [t.id for t in tracks if t.has_id]
