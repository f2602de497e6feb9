# /unreplied/models/reputation_models.py
"""
Pydantic models for reputation-related endpoints.
"""
from pydantic import BaseModel, Field, validator
from typing import Any, Dict, Optional, List

MAX_FIDS_PER_REQUEST = 1000


class ReputationScore(BaseModel):
    """One provider's view of one FID."""
    fid: int = Field(..., description="Farcaster user ID the score is about")
    value: Optional[float] = Field(None, description="Provider score (normalized where the provider offers it)")
    rank: Optional[int] = Field(None, description="Rank across Farcaster according to the provider")
    raw: Dict[str, Any] = Field(default_factory=dict, description="Unmodified provider payload")


class ScoreData(BaseModel):
    """Model for a score-provider entry returned to the UI."""
    fid: int = Field(..., description="Farcaster user ID")
    score: Optional[float] = Field(None, description="Normalized reputation score")
    rank: Optional[int] = Field(None, description="Account rank across Farcaster")
    username: Optional[str] = Field(None, description="Farcaster username")
    tier: Optional[str] = Field(None, description="Display tier derived from the score")
    scoreRaw: Optional[float] = Field(None, description="Raw score - use for rewards multipliers.")
    profileUrl: Optional[str] = Field(None, description="Profile link in the provider's portal")


class ScoreResponse(BaseModel):
    """Response model for the score endpoint."""
    data: List[ScoreData] = Field(..., description="Scores for the requested FIDs that the provider knows")
    count: int = Field(..., description="Number of users found")


class ScoreRequest(BaseModel):
    """Request model for the score endpoint."""
    fids: List[int] = Field(..., description="List of Farcaster IDs (FIDs) to retrieve scores for")

    @validator('fids')
    def validate_fids(cls, v):
        if len(v) == 0:
            raise ValueError('At least one FID must be provided')
        if len(v) > MAX_FIDS_PER_REQUEST:
            raise ValueError(f'Maximum {MAX_FIDS_PER_REQUEST} FIDs allowed per request')
        if any(fid <= 0 for fid in v):
            raise ValueError('FIDs must be positive integers')
        return v


class CacheStatusData(BaseModel):
    valid: bool
    ageSeconds: int
    cachedCount: int
    ttlSeconds: int


class CacheStatusResponse(BaseModel):
    """Diagnostic view of both reputation caches."""
    rank: CacheStatusData
    score: CacheStatusData
