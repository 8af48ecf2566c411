"""
Outfit chat session lifecycle: analyze-to-open, message turns with failed-send
retry, finish and feedback.

A session starts ``active`` with one turn used and closes for good once
MAX_TURNS is reached or the user finishes it.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from dressgenius.core.exceptions import (
    ExternalServiceError,
    NotFoundError,
    RateLimitError,
    TurnLimitError,
    ValidationError,
)
from dressgenius.models import (
    MAX_TURNS,
    OutfitAnalysisProcess,
    OutfitChatAttachment,
    OutfitChatFeedback,
    OutfitChatSession,
    OutfitDetectedItem,
    User,
)
from dressgenius.repositories import chats as chat_repo
from dressgenius.repositories import outfits as outfit_repo
from dressgenius.schemas import FeedbackCreate, MessageCreate
from dressgenius.services.analysis import persist_detected_items, run_outfit_analysis
from dressgenius.services.serializers import serialize_message
from dressgenius.utils.gemini_chat import GeminiChatService
from dressgenius.utils.gemini_client import GeminiError, is_quota_error, parse_retry_after
from dressgenius.utils.gemini_vision import GeminiVisionService
from dressgenius.utils.storage import Storage

logger = logging.getLogger(__name__)

DEFAULT_OPENING_MESSAGE = "Analyze my outfit with the provided context."
REPLY_FAILED_MESSAGE = "AI reply failed. Please try again."
REPLY_QUOTA_MESSAGE = "AI quota exceeded. Please wait a bit and try again."
FAILED_META_KEYS = ("status", "error_status", "error_message", "retry_after")


def fallback_summary(analysis: Dict[str, Any]) -> str:
    """Plain-text stand-in for the assistant's first reply when the chat call fails"""
    context_lines = []
    for field, row in (analysis.get("context_feedback") or {}).items():
        if not isinstance(row, dict):
            continue
        message = str(row.get("message") or "")
        if message:
            status = str(row.get("status") or "neutral")
            context_lines.append(f"{str(field)[:1].upper()}{str(field)[1:]} ({status}): {message}")

    parts = [f"Score: {analysis.get('score')}"]
    if context_lines:
        parts.append("Context:\n" + "\n".join(context_lines))
    parts.append("Pros: " + " ".join(analysis.get("pros") or []))
    parts.append("Issues: " + " ".join(analysis.get("issues") or []))
    parts.append("Suggestions: " + " ".join(analysis.get("suggestions") or []))
    return "\n\n".join(parts)


def analyze_and_open_session(
    db: Session,
    user: User,
    storage: Storage,
    image_bytes: bytes,
    mime_type: str,
    original_name: Optional[str],
    intake: Dict[str, Any],
    message: Optional[str],
    vision_service: GeminiVisionService,
    chat_service: GeminiChatService,
) -> Tuple[OutfitChatSession, List[OutfitDetectedItem], OutfitAnalysisProcess]:
    """Store the photo, analyze it and open a chat session with the first exchange."""
    path = storage.store(image_bytes, f"outfit-chats/{user.id}", mime_type, original_name)

    process, vision, analysis = run_outfit_analysis(
        db, user, "chat_analyze", image_bytes, mime_type, path, intake, vision_service, chat_service,
    )

    session = OutfitChatSession(
        user_id=user.id,
        title=intake.get("occasion"),
        image_path=path,
        intake=intake,
        vision=vision,
        analysis=analysis,
        score=analysis.get("score"),
        turns_used=1,
        status="active",
    )
    db.add(session)
    db.flush()

    detected = persist_detected_items(db, user.id, "chat_session", session.id, process.id, vision, path)
    outfit_repo.complete_process(db, process, chat_session_id=session.id)

    opening_text = (message or "").strip() or DEFAULT_OPENING_MESSAGE
    user_message = chat_repo.add_message(db, session.id, "user", opening_text)
    db.add(OutfitChatAttachment(
        session_id=session.id,
        message_id=user_message.id,
        kind="image",
        path=path,
        mime=mime_type,
        size=len(image_bytes),
    ))
    db.commit()

    try:
        assistant_text = chat_service.reply({
            "intake": intake,
            "ai_preferences": dict(user.ai_preferences or {}),
            "vision": vision,
            "analysis": analysis,
            "recent_messages": [{"role": "user", "content": opening_text}],
        })
    except Exception as e:
        logger.warning(f"Opening reply failed for session {session.id}, using summary: {e}")
        assistant_text = fallback_summary(analysis)

    process.assistant_text = assistant_text
    chat_repo.add_message(db, session.id, "assistant", assistant_text, meta={"score": analysis.get("score")})
    db.commit()
    db.refresh(session)

    return session, detected, process


def post_message(
    db: Session,
    user: User,
    session_id: int,
    payload: MessageCreate,
    chat_service: GeminiChatService,
) -> Dict[str, Any]:
    """
    Send one user turn and store the assistant's answer.

    A failed reply keeps the user message tagged ``failed`` without spending
    a turn; sending ``retry_message_id`` later reuses that message.
    """
    session = chat_repo.find_session(db, session_id, user.id, for_update=True)

    if session.turns_used >= MAX_TURNS:
        raise TurnLimitError(session.turns_used, MAX_TURNS)
    if session.status == "closed":
        raise TurnLimitError(session.turns_used, MAX_TURNS, message="This chat has been closed.")

    user_message = None
    if payload.retry_message_id:
        user_message = chat_repo.find_user_message(db, session.id, payload.retry_message_id)
        if user_message is None:
            raise NotFoundError("Message not found.")
        if not user_message.is_failed:
            raise ValidationError("This message cannot be retried.", field="retry_message_id")
        content = user_message.content
    else:
        content = payload.content or ""
        if not content.strip():
            raise ValidationError("Content is required.", field="content")

    recent = [{"role": m.role, "content": m.content} for m in chat_repo.recent_messages(db, session.id)]
    recent.append({"role": "user", "content": content})

    try:
        assistant_text = chat_service.reply({
            "intake": session.intake,
            "ai_preferences": dict(user.ai_preferences or {}),
            "vision": session.vision,
            "analysis": session.analysis,
            "recent_messages": recent,
        })
    except GeminiError as e:
        quota = is_quota_error(e)
        error_status = 429 if quota else 502
        public_message = REPLY_QUOTA_MESSAGE if quota else REPLY_FAILED_MESSAGE
        retry_after = getattr(e, "retry_after", None) or parse_retry_after(str(e))
        logger.warning(f"Chat reply failed for session {session.id}: {e}")

        failed_meta = {
            "status": "failed",
            "error_status": error_status,
            "error_message": public_message,
            "retry_after": retry_after,
        }
        if user_message is None:
            user_message = chat_repo.add_message(db, session.id, "user", content, meta=failed_meta)
        else:
            user_message.meta = {**(user_message.meta or {}), **failed_meta}
        db.commit()

        details = {
            "retry_after": retry_after,
            "messages": [serialize_message(user_message)],
            "turns_used": session.turns_used,
            "turns_max": MAX_TURNS,
        }
        if quota:
            raise RateLimitError(public_message, retry_after=retry_after, details=details) from e
        raise ExternalServiceError(public_message, details=details) from e

    if user_message is None:
        user_message = chat_repo.add_message(db, session.id, "user", content)
    else:
        meta = {k: v for k, v in (user_message.meta or {}).items() if k not in FAILED_META_KEYS}
        user_message.meta = meta or None

    assistant_message = chat_repo.add_message(db, session.id, "assistant", assistant_text)

    session.turns_used = session.turns_used + 1
    if session.turns_used >= MAX_TURNS:
        session.status = "closed"
        session.closed_at = datetime.utcnow()
    db.commit()

    return {
        "messages": [serialize_message(user_message), serialize_message(assistant_message)],
        "turns_used": session.turns_used,
        "turns_max": MAX_TURNS,
        "status": session.status,
    }


def finish_session(db: Session, user: User, session_id: int) -> OutfitChatSession:
    """Close an active session; closing a closed one changes nothing."""
    session = chat_repo.find_session(db, session_id, user.id, for_update=True)
    if session.status != "closed":
        session.status = "closed"
        session.closed_at = datetime.utcnow()
        db.commit()
        db.refresh(session)
    return session


def save_feedback(db: Session, user: User, session_id: int, payload: FeedbackCreate) -> OutfitChatFeedback:
    """Create or replace the session's rating"""
    session = chat_repo.find_session(db, session_id, user.id)
    feedback = chat_repo.find_feedback(db, session.id)
    ratings = payload.ratings.model_dump()
    comment = (payload.comment or "").strip() or None

    if feedback is None:
        feedback = OutfitChatFeedback(session_id=session.id, user_id=user.id, ratings=ratings, comment=comment)
        db.add(feedback)
    else:
        feedback.ratings = ratings
        feedback.comment = comment
    db.commit()
    db.refresh(feedback)
    return feedback
