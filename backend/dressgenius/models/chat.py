"""
Outfit chat session, message, attachment and feedback models.
"""
from sqlalchemy import Column, Integer, String, Text, JSON, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from .base import Base, TimestampMixin

MAX_TURNS = 10


class OutfitChatSession(TimestampMixin, Base):
    """Conversation anchored to one outfit image"""
    __tablename__ = "outfit_chat_sessions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=True)
    image_path = Column(String(512), nullable=False)
    intake = Column(JSON, nullable=True)
    vision = Column(JSON, nullable=True)
    analysis = Column(JSON, nullable=True)
    score = Column(Integer, nullable=True)
    turns_used = Column(Integer, nullable=False, default=0)
    status = Column(String(16), nullable=False, default="active")  # active | closed
    closed_at = Column(DateTime, nullable=True)

    messages = relationship(
        "OutfitChatMessage",
        back_populates="session",
        order_by="OutfitChatMessage.id",
        cascade="all, delete-orphan",
    )
    attachments = relationship("OutfitChatAttachment", cascade="all, delete-orphan")


class OutfitChatMessage(TimestampMixin, Base):
    """A single user or assistant turn"""
    __tablename__ = "outfit_chat_messages"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("outfit_chat_sessions.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(String(16), nullable=False)  # user | assistant
    content = Column(Text, nullable=False)
    meta = Column(JSON, nullable=True)

    session = relationship("OutfitChatSession", back_populates="messages")

    @property
    def is_failed(self) -> bool:
        return isinstance(self.meta, dict) and str(self.meta.get("status")) == "failed"


class OutfitChatAttachment(TimestampMixin, Base):
    """File attached to a chat message"""
    __tablename__ = "outfit_chat_attachments"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("outfit_chat_sessions.id", ondelete="CASCADE"), nullable=False, index=True)
    message_id = Column(Integer, ForeignKey("outfit_chat_messages.id", ondelete="SET NULL"), nullable=True)
    kind = Column(String(32), nullable=False)
    path = Column(String(512), nullable=False)
    mime = Column(String(128), nullable=True)
    size = Column(Integer, nullable=True)


class OutfitChatFeedback(TimestampMixin, Base):
    """User rating of a finished chat"""
    __tablename__ = "outfit_chat_feedback"
    __table_args__ = (UniqueConstraint("session_id", name="uq_chat_feedback_session"),)

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("outfit_chat_sessions.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    ratings = Column(JSON, nullable=False)
    comment = Column(String(500), nullable=True)
