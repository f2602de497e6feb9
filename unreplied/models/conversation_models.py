"""
Pydantic models for conversation-related endpoints.
"""
from datetime import datetime
from pydantic import BaseModel, Field
from typing import List, Optional


class Cast(BaseModel):
    """Model for a single cast."""
    fid: int = Field(..., description="Author's Farcaster user ID")
    hash: str = Field(..., description="Unique cast identifier")
    timestamp: Optional[datetime] = Field(None, description="Cast creation timestamp")
    text: str = Field("", description="Cast content")
    parentCastHash: Optional[str] = Field(None, description="Hash of the cast this replies to; null for root casts")


class Conversation(BaseModel):
    """A root cast by the user together with the earliest reply from someone else."""
    rootCastHash: str = Field(..., description="Hash of the user's root cast")
    rootCast: Cast = Field(..., description="The user's root cast")
    firstReply: Cast = Field(..., description="Earliest reply by another user")
    replyCount: int = Field(1, description="1 unless true reply counts were requested")
    firstReplyAuthorFid: int = Field(..., description="FID of the first reply's author")


class ConversationsResponse(BaseModel):
    """Response model for the conversations endpoint."""
    conversations: List[Conversation] = Field(default_factory=list, description="Most recent first reply first")
    nextCursor: Optional[str] = Field(None, description="Opaque continuation token; null when there is nothing older")
    totalCount: int = Field(0, description="Number of conversations in this page")
