"""
Outfit chat sessions and messages, always scoped by owner.
"""
from typing import List, Optional

from sqlalchemy.orm import Session

from dressgenius.core.exceptions import NotFoundError
from dressgenius.models import OutfitChatSession, OutfitChatMessage, OutfitChatFeedback

RECENT_MESSAGES = 12


def find_session(db: Session, session_id: int, user_id: int, for_update: bool = False) -> OutfitChatSession:
    query = db.query(OutfitChatSession).filter(
        OutfitChatSession.id == session_id,
        OutfitChatSession.user_id == user_id,
    )
    if for_update:
        # Row lock serializes concurrent sends on the same session (no-op on SQLite)
        query = query.with_for_update()
    session = query.first()
    if session is None:
        raise NotFoundError()
    return session


def list_sessions(db: Session, user_id: int, limit: int = 50) -> List[OutfitChatSession]:
    return (
        db.query(OutfitChatSession)
        .filter(OutfitChatSession.user_id == user_id)
        .order_by(OutfitChatSession.id.desc())
        .limit(limit)
        .all()
    )


def add_message(db: Session, session_id: int, role: str, content: str, meta: Optional[dict] = None) -> OutfitChatMessage:
    message = OutfitChatMessage(session_id=session_id, role=role, content=content, meta=meta)
    db.add(message)
    db.flush()
    return message


def find_user_message(db: Session, session_id: int, message_id: int) -> Optional[OutfitChatMessage]:
    return (
        db.query(OutfitChatMessage)
        .filter(
            OutfitChatMessage.session_id == session_id,
            OutfitChatMessage.role == "user",
            OutfitChatMessage.id == message_id,
        )
        .first()
    )


def recent_messages(db: Session, session_id: int, limit: int = RECENT_MESSAGES) -> List[OutfitChatMessage]:
    """Last ``limit`` messages oldest first, minus the ones whose send failed"""
    rows = (
        db.query(OutfitChatMessage)
        .filter(OutfitChatMessage.session_id == session_id)
        .order_by(OutfitChatMessage.id.desc())
        .limit(limit)
        .all()
    )
    return [m for m in reversed(rows) if not m.is_failed]


def find_feedback(db: Session, session_id: int) -> Optional[OutfitChatFeedback]:
    return db.query(OutfitChatFeedback).filter(OutfitChatFeedback.session_id == session_id).first()
