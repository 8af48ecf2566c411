"""
Pydantic schemas for the DressGenius API.

Import all schemas here for easy access.
"""
from .common import HealthResponse
from .user import (
    UserBase,
    RegisterRequest,
    LoginRequest,
    UserResponse,
    AuthResponse,
    UserEnvelope,
    MessageResponse,
    ProfileUpdate,
    PasswordUpdate,
)
from .intake import Intake
from .chat import MessageCreate, FeedbackRatings, FeedbackCreate
from .wardrobe import WardrobeItemCreate, WardrobeItemUpdate
from .preferences import PreferencesUpdate, PreferencesResponse

__all__ = [
    # Common
    "HealthResponse",
    # User
    "UserBase",
    "RegisterRequest",
    "LoginRequest",
    "UserResponse",
    "AuthResponse",
    "UserEnvelope",
    "MessageResponse",
    "ProfileUpdate",
    "PasswordUpdate",
    # Outfit analysis
    "Intake",
    "MessageCreate",
    "FeedbackRatings",
    "FeedbackCreate",
    # Wardrobe
    "WardrobeItemCreate",
    "WardrobeItemUpdate",
    # AI preferences
    "PreferencesUpdate",
    "PreferencesResponse",
]
