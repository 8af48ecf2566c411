"""
User-related schemas for authentication and profile management.
"""
import re
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator, EmailStr
from typing import Optional
from datetime import datetime


def _check_password_complexity(v: str) -> str:
    if not re.search(r'[A-Za-z]', v):
        raise ValueError('Password must contain at least one letter')
    if not re.search(r'\d', v):
        raise ValueError('Password must contain at least one digit')
    return v


class UserBase(BaseModel):
    """Base user schema"""
    email: EmailStr = Field(..., description="User email address")


class RegisterRequest(UserBase):
    """Schema for creating a new account"""
    name: str = Field(..., min_length=1, max_length=255, description="Display name")
    password: str = Field(
        ...,
        min_length=8,
        max_length=128,
        description="User password (8-128 chars, must contain letter and digit)"
    )

    @field_validator('name')
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError('Name is required')
        return v

    @field_validator('password')
    @classmethod
    def validate_password_complexity(cls, v: str) -> str:
        """Ensure password has at least one letter and one digit."""
        return _check_password_complexity(v)


class LoginRequest(UserBase):
    """Schema for user login"""
    password: str = Field(..., min_length=1, description="User password")


class UserResponse(UserBase):
    """Schema for user response"""
    id: int
    name: str
    profile_photo_url: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AuthResponse(BaseModel):
    """Register/login response: the user and a bearer token"""
    user: UserResponse
    token: str


class UserEnvelope(BaseModel):
    user: UserResponse


class MessageResponse(BaseModel):
    message: str


class ProfileUpdate(BaseModel):
    """Partial profile update"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None


class PasswordUpdate(BaseModel):
    """Password change; the new password must be confirmed"""
    current_password: str = Field(..., min_length=1)
    password: str = Field(..., min_length=8, max_length=128)
    password_confirmation: str

    @field_validator('password')
    @classmethod
    def validate_password_complexity(cls, v: str) -> str:
        return _check_password_complexity(v)

    @model_validator(mode='after')
    def passwords_match(self) -> 'PasswordUpdate':
        if self.password != self.password_confirmation:
            raise ValueError('Password confirmation does not match')
        return self
