# /unreplied/api/router.py
"""
API router that includes all endpoint routers.
"""
from fastapi import APIRouter
from unreplied.api.endpoints import (
    conversations,
    reputation,
)

# Create main router
router = APIRouter()

# Include all endpoint routers
router.include_router(conversations.router, tags=["Conversations"])
router.include_router(reputation.router, tags=["Reputation"])
