"""
Database models for DressGenius.

Import all models here for easy access and to ensure they are registered with SQLAlchemy.
"""
from .base import Base
from .user import User, PersonalAccessToken
from .outfit import OutfitScan, OutfitAnalysisProcess, OutfitDetectedItem
from .chat import (
    MAX_TURNS,
    OutfitChatSession,
    OutfitChatMessage,
    OutfitChatAttachment,
    OutfitChatFeedback,
)
from .wardrobe import WardrobeItem

__all__ = [
    "Base",
    "User",
    "PersonalAccessToken",
    "OutfitScan",
    "OutfitAnalysisProcess",
    "OutfitDetectedItem",
    "MAX_TURNS",
    "OutfitChatSession",
    "OutfitChatMessage",
    "OutfitChatAttachment",
    "OutfitChatFeedback",
    "WardrobeItem",
]
