"""Recommendation endpoints: capture, incremental update, seed, appendix, dismissals, maintenance."""

import logging
from typing import Dict, List

from fastapi import APIRouter, HTTPException
from pydantic import ValidationError

from playlist_recs import GLOBAL_CONTEXT, Recommendation, RecommendationContext

from ..models import (
    AppendixRequest,
    CaptureRequest,
    DismissRequest,
    RecommendationItem,
    RecommendationsResponse,
    SeedRequest,
    TrackInfo,
    UpdateRequest,
)
from ..state import get_state

logger = logging.getLogger(__name__)

router = APIRouter()

DISABLED_MESSAGE = "Recommendation system is not enabled"
MAX_SEED_TRACKS = 5
MIN_TOP_N = 1
MAX_TOP_N = 50
OPERATIONS = ("add", "remove", "reorder")


def _disabled(**extra) -> Dict:
    return {"enabled": False, "message": DISABLED_MESSAGE, **extra}


def _clamp_top_n(top_n: int) -> int:
    return min(max(top_n, MIN_TOP_N), MAX_TOP_N)


def _internal_error(endpoint: str, e: Exception) -> HTTPException:
    logger.exception("[api/recs/%s] Error: %s", endpoint, e)
    return HTTPException(status_code=500, detail="Internal server error")


def _with_metadata(engine, recs: List[Recommendation], include_metadata: bool) -> List[RecommendationItem]:
    """Attach cached track metadata when asked; unknown tracks go without."""
    records = engine.get_tracks([r.track_id for r in recs]) if include_metadata and recs else {}
    items = []
    for r in recs:
        record = records.get(r.track_id)
        track = None
        if record is not None:
            track = TrackInfo(id=record.track_id, **record.model_dump(exclude={"track_id", "updated_at"}))
        items.append(RecommendationItem(track_id=r.track_id, score=r.score, rank=r.rank, track=track))
    return items


@router.post("/capture")
def capture(request: CaptureRequest):
    """Capture a playlist snapshot and merge its edges."""
    state = get_state()
    if not state.enabled:
        return _disabled(success=False)
    if not request.playlist_id.strip():
        raise HTTPException(status_code=400, detail="playlist_id is required")
    try:
        stats = state.engine.capture(
            request.playlist_id, request.tracks, cooccurrence_only=request.cooccurrence_only
        )
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=f"Invalid track payload: {e.error_count()} error(s)")
    except Exception as e:
        raise _internal_error("capture", e)
    return {"success": True, "enabled": True, "stats": stats.model_dump()}


@router.post("/update")
def update(request: UpdateRequest):
    """Apply an incremental add / remove / reorder to the graph."""
    state = get_state()
    if not state.enabled:
        return _disabled(success=False)
    if request.operation not in OPERATIONS:
        raise HTTPException(
            status_code=400,
            detail=f"operation must be one of {', '.join(OPERATIONS)}",
        )
    if request.operation == "reorder" and (request.from_position is None or request.to_position is None):
        raise HTTPException(status_code=400, detail="from_position and to_position are required for reorder")
    try:
        stats = state.engine.update_for_operation(
            request.operation,
            request.track_ids,
            added_track_ids=request.added_track_ids,
            add_positions=request.add_positions,
            removed_positions=request.removed_positions,
            from_position=request.from_position,
            to_position=request.to_position,
        )
    except Exception as e:
        raise _internal_error("update", e)
    return {"success": True, "enabled": True, "stats": stats.model_dump()}


@router.post("/seed", response_model=RecommendationsResponse, response_model_exclude_none=True)
def seed(request: SeedRequest):
    """Recommendations from 1-5 seed tracks."""
    state = get_state()
    if not state.enabled:
        return RecommendationsResponse(recommendations=[], enabled=False, message=DISABLED_MESSAGE)
    if not request.seed_track_ids:
        raise HTTPException(status_code=400, detail="seed_track_ids is required and must be a non-empty array")
    if len(request.seed_track_ids) > MAX_SEED_TRACKS:
        raise HTTPException(status_code=400, detail=f"Maximum {MAX_SEED_TRACKS} seed tracks allowed")

    context = RecommendationContext(
        exclude_track_ids=set(request.exclude_track_ids),
        dismissed_track_ids=set(request.dismissed_track_ids),
        collection_id=request.playlist_id,
        top_n=_clamp_top_n(request.top_n),
    )
    try:
        recs = state.engine.get_seed_recommendations(request.seed_track_ids, context)
        items = _with_metadata(state.engine, recs, request.include_metadata)
    except Exception as e:
        raise _internal_error("seed", e)
    return RecommendationsResponse(recommendations=items, enabled=True)


@router.post("/playlist-appendix", response_model=RecommendationsResponse, response_model_exclude_none=True)
def playlist_appendix(request: AppendixRequest):
    """Recommendations to append to a playlist; its own tracks are excluded."""
    state = get_state()
    if not state.enabled:
        return RecommendationsResponse(recommendations=[], enabled=False, message=DISABLED_MESSAGE)
    if not request.playlist_id.strip():
        raise HTTPException(status_code=400, detail="playlist_id is required")
    if not request.track_ids:
        return RecommendationsResponse(
            recommendations=[],
            enabled=True,
            message="track_ids is required - provide the current playlist tracks",
        )

    context = RecommendationContext(
        exclude_track_ids=set(request.track_ids),
        dismissed_track_ids=set(request.dismissed_track_ids),
        collection_id=request.playlist_id,
        top_n=_clamp_top_n(request.top_n),
    )
    try:
        recs = state.engine.get_collection_appendix_recommendations(request.track_ids, context)
        items = _with_metadata(state.engine, recs, request.include_metadata)
    except Exception as e:
        raise _internal_error("playlist-appendix", e)
    return RecommendationsResponse(recommendations=items, enabled=True)


@router.post("/dismiss")
def dismiss(request: DismissRequest):
    """Dismiss a recommendation for a playlist, or everywhere with context 'global'."""
    state = get_state()
    if not state.enabled:
        return _disabled(success=False)
    if not request.track_id.strip():
        raise HTTPException(status_code=400, detail="track_id is required")
    try:
        state.engine.dismiss_recommendation(request.track_id, request.context_id or GLOBAL_CONTEXT)
    except Exception as e:
        raise _internal_error("dismiss", e)
    return {"success": True, "enabled": True}


@router.delete("/dismiss")
def clear_dismissals(context_id: str):
    """Clear all dismissals for a context. context_id is required; pass 'global' to clear global ones."""
    state = get_state()
    if not state.enabled:
        return _disabled(success=False)
    if not context_id.strip():
        raise HTTPException(status_code=400, detail="context_id is required")
    try:
        cleared = state.engine.clear_dismissals(context_id)
    except Exception as e:
        raise _internal_error("dismiss", e)
    return {"success": True, "enabled": True, "cleared": cleared}


@router.post("/maintenance")
def maintenance(include_compact: bool = True):
    """Run decay, cap, prune and compact now."""
    state = get_state()
    if not state.enabled:
        return _disabled(success=False)
    try:
        report = state.engine.run_maintenance(include_compact=include_compact)
    except Exception as e:
        raise _internal_error("maintenance", e)
    return {"success": True, "enabled": True, "report": report.model_dump()}
