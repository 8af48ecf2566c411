"""
User and access token models.
"""
from sqlalchemy import Column, Integer, String, JSON, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from .base import Base, TimestampMixin


class User(TimestampMixin, Base):
    """Account holder"""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    hashed_password = Column(String(255), nullable=False)
    profile_photo_path = Column(String(512), nullable=True)
    # Slider values 0-100 keyed by tone, strictness, detail, ...
    ai_preferences = Column(JSON, nullable=True)

    tokens = relationship("PersonalAccessToken", back_populates="user", cascade="all, delete-orphan")


class PersonalAccessToken(Base):
    """Issued bearer token; deleting the row revokes it"""
    __tablename__ = "personal_access_tokens"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    jti = Column(String(64), nullable=False, unique=True, index=True)
    name = Column(String(64), nullable=False, default="api")
    created_at = Column(DateTime, nullable=False)
    last_used_at = Column(DateTime, nullable=True)
    expires_at = Column(DateTime, nullable=True)

    user = relationship("User", back_populates="tokens")
