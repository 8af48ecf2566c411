"""
Outfit chat request schemas.
"""
from pydantic import BaseModel, Field
from typing import Optional


class MessageCreate(BaseModel):
    """New chat message, or a retry of a previously failed one"""
    content: Optional[str] = Field(None, max_length=2000)
    retry_message_id: Optional[int] = None


class FeedbackRatings(BaseModel):
    helpfulness: int = Field(..., ge=1, le=5)
    clarity: int = Field(..., ge=1, le=5)
    relevance: int = Field(..., ge=1, le=5)
    tone: int = Field(..., ge=1, le=5)


class FeedbackCreate(BaseModel):
    """Rating of a finished chat"""
    ratings: FeedbackRatings
    comment: Optional[str] = Field(None, max_length=500)
