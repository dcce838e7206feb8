"""Root and health endpoints."""

from typing import Dict

from fastapi import APIRouter

from ..state import get_state

router = APIRouter()


def _migrations(state) -> Dict:
    """Migration status, or an error message when the store cannot be read."""
    if not state.enabled:
        return {"available": False, "message": "recommendations disabled"}
    try:
        status = state.engine.migration_status()
    except Exception as e:
        return {"available": False, "message": str(e)}
    return {"available": True, **status.model_dump(exclude={"applied"})}


@router.get("/")
def root():
    state = get_state()
    return {
        "name": "Playlist Recommendations API",
        "version": "1.0.0",
        "enabled": state.enabled,
        "endpoints": {
            "capture": ["/api/recs/capture", "/api/recs/update"],
            "recommendations": ["/api/recs/seed", "/api/recs/playlist-appendix"],
            "dismissals": ["/api/recs/dismiss"],
            "maintenance": ["/api/recs/maintenance", "/api/stats/recs"],
        },
    }


@router.get("/api/health")
def health():
    state = get_state()
    return {
        "status": "healthy",
        "enabled": state.enabled,
        "migrations": _migrations(state),
    }
