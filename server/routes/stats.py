"""Stats endpoint."""

import logging

from fastapi import APIRouter, HTTPException

from ..state import get_state

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/stats/recs")
def get_recs_stats():
    """Row counts and database size for the recommendation store."""
    state = get_state()
    if not state.enabled:
        return {"enabled": False, "message": "Recommendation system is not enabled"}
    try:
        stats = state.engine.get_stats()
    except Exception as e:
        logger.exception("[api/stats/recs] Error: %s", e)
        raise HTTPException(status_code=500, detail="Internal server error")
    return {"enabled": True, **stats.model_dump()}
