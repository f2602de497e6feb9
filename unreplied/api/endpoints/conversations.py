"""
Unreplied conversation API endpoints.
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, Query
from unreplied.conversations.query_builder import MAX_PAGE_SIZE
from unreplied.conversations.resolver import DEFAULT_PAGE_SIZE, ConversationResolver
from unreplied.errors import ValidationError
from unreplied.models.conversation_models import ConversationsResponse
from unreplied.services import get_resolver
from typing import Optional

# Set up logging
logger = logging.getLogger(__name__)

# Create router
router = APIRouter()


@router.get(
    "/conversations",
    summary="Get unreplied conversations",
    description="Root casts by the user that received a reply from someone else, with the earliest such reply. Most recent first reply first.",
    response_model=ConversationsResponse,
    responses={
        200: {"description": "Page of conversations (empty when the database is unavailable)"},
        400: {"description": "Invalid FID or cursor"},
    }
)
async def get_unreplied_conversations(
    fid: int = Query(..., description="Farcaster ID of the user whose feed to build"),
    cursor: Optional[str] = Query(None, description="Opaque cursor from a previous page's nextCursor"),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, description=f"Page size, capped at {MAX_PAGE_SIZE}"),
    days: Optional[int] = Query(None, ge=1, description="Only consider root casts from the last N days"),
    resolver: ConversationResolver = Depends(get_resolver),
) -> ConversationsResponse:
    logger.info(f"GET /conversations - FID {fid}, limit={limit}, cursor={'yes' if cursor else 'no'}")
    try:
        return await resolver.resolve(fid, page_size=limit, cursor=cursor, window_days=days)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
