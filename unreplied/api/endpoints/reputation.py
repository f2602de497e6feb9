# /unreplied/api/endpoints/reputation.py
"""
Reputation-related API endpoints.
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, Query
from unreplied.errors import InvalidFidError
from unreplied.models.reputation_models import (
    CacheStatusResponse,
    ScoreRequest,
    ScoreResponse,
)
from unreplied.reputation.orchestrator import ReputationOrchestrator
from unreplied.services import get_orchestrator
from unreplied.utils.helpers import parse_fid_csv, quotient_tier
from typing import Dict, Any, Optional

# Set up logger for this module
logger = logging.getLogger(__name__)

# Create router
router = APIRouter()


@router.get(
    "/reputation/rank",
    summary="Get OpenRank ranks for multiple users",
    description="Returns the global rank for each requested FID, or null when the rank is unknown or not yet available.",
    responses={
        200: {"description": "Map of FID to rank"},
        400: {"description": "Missing or invalid FIDs"},
    }
)
async def get_reputation_ranks(
    fids: str = Query(..., description="Comma-separated FIDs, e.g. 3,7,9"),
    orchestrator: ReputationOrchestrator = Depends(get_orchestrator),
) -> Dict[str, Optional[int]]:
    """
    GET endpoint to retrieve ranks for multiple Farcaster users.

    - Serves cached ranks and fetches only uncached FIDs
    - A FID whose provider call failed is reported as null
    """
    try:
        fid_list = parse_fid_csv(fids)
    except InvalidFidError as e:
        raise HTTPException(status_code=400, detail=str(e))

    logger.info(f"GET /reputation/rank - {len(fid_list)} FIDs")
    await orchestrator.fetch(fid_list)

    ranks = orchestrator.lookup_ranks(fid_list)
    return {
        str(fid): ranks[fid].rank if ranks.get(fid) is not None else None
        for fid in fid_list
    }


@router.post(
    "/reputation/score",
    summary="Get reputation scores for multiple users",
    description="Retrieves Quotient scores and ranking for up to 1000 Farcaster users.",
    response_model=ScoreResponse,
    responses={
        200: {"description": "Successfully retrieved reputation data", "model": ScoreResponse},
        422: {"description": "Invalid request body"},
    }
)
async def get_reputation_scores(
    request: ScoreRequest,
    orchestrator: ReputationOrchestrator = Depends(get_orchestrator),
) -> Dict[str, Any]:
    """
    POST endpoint to retrieve reputation scores for multiple Farcaster users.

    - Returns score, rank and display tier for every FID the provider knows
    - Unknown FIDs, and FIDs whose provider call failed, are left out
    """
    logger.info(f"POST /reputation/score - Processing reputation request for {len(request.fids)} FIDs")

    await orchestrator.fetch(request.fids)
    scores = orchestrator.lookup_scores(request.fids)

    data = []
    seen = set()
    for fid in request.fids:
        score = scores.get(fid)
        if score is None or fid in seen:
            continue
        seen.add(fid)
        data.append({
            "fid": fid,
            "score": score.value,
            "rank": score.rank,
            "username": score.raw.get("username"),
            "tier": quotient_tier(score.value),
            "scoreRaw": score.raw.get("quotientScoreRaw"),
            "profileUrl": score.raw.get("quotientProfileUrl"),
        })

    logger.info(f"Returning reputation data for {len(data)} users")
    return {
        "data": data,
        "count": len(data)
    }


@router.get(
    "/reputation/cache",
    summary="Reputation cache status",
    response_model=CacheStatusResponse,
)
async def get_cache_status(
    orchestrator: ReputationOrchestrator = Depends(get_orchestrator),
) -> Dict[str, Any]:
    return {kind: status.to_dict() for kind, status in orchestrator.status().items()}


@router.delete(
    "/reputation/cache",
    summary="Clear both reputation caches",
)
async def clear_cache(
    orchestrator: ReputationOrchestrator = Depends(get_orchestrator),
) -> Dict[str, Any]:
    orchestrator.clear()
    logger.info("Reputation caches cleared")
    return {"cleared": True}
