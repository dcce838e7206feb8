"""Edge lookup results shared by the store and candidate gathering."""

from typing import Tuple

from pydantic import BaseModel


class Edge(BaseModel):
    """A weighted edge seen from one track: the other endpoint and its weight."""

    track_id: str
    weight: float


def canonical_pair(a: str, b: str) -> Tuple[str, str]:
    """Order an unordered pair so the smaller ID comes first."""
    return (a, b) if a < b else (b, a)
