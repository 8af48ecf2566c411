from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.orm import Session

from dressgenius.core.exceptions import ValidationError
from dressgenius.database import get_db
from dressgenius.dependencies import get_chat_service, get_storage, get_vision_service
from dressgenius.models import User
from dressgenius.repositories import chats as chat_repo
from dressgenius.repositories import outfits as outfit_repo
from dressgenius.schemas import FeedbackCreate, MessageCreate
from dressgenius.services import chat as chat_service_ops
from dressgenius.services.serializers import (
    serialize_detected_item,
    serialize_session,
    serialize_session_summary,
)
from dressgenius.services.uploads import CHAT_EXTENSIONS, parse_intake, read_image
from dressgenius.utils.auth import get_current_user
from dressgenius.utils.gemini_chat import GeminiChatService
from dressgenius.utils.gemini_vision import GeminiVisionService
from dressgenius.utils.storage import Storage

router = APIRouter(prefix="/outfit-chats", tags=["Outfit Chats"])

MAX_OPENING_MESSAGE = 2000


def _session_payload(db: Session, session, storage: Storage) -> dict:
    detected = outfit_repo.list_detected_items(db, "chat_session", session.id)
    return serialize_session(session, storage, detected)


@router.get("")
def list_sessions(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """Newest 50 chat sessions of the current user"""
    sessions = chat_repo.list_sessions(db, current_user.id)
    return {"sessions": [serialize_session_summary(s, storage) for s in sessions]}


@router.post("/analyze", status_code=status.HTTP_201_CREATED)
def analyze(
    image: UploadFile = File(...),
    intake: Optional[str] = Form(None, description="JSON object: occasion, weather, dress_code, budget, desired_vibe, custom_note"),
    message: Optional[str] = Form(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
    vision_service: GeminiVisionService = Depends(get_vision_service),
    chat_service: GeminiChatService = Depends(get_chat_service),
):
    """Analyze an outfit photo and open a chat session about it"""
    if message is not None and len(message) > MAX_OPENING_MESSAGE:
        raise ValidationError(f"The message may not be greater than {MAX_OPENING_MESSAGE} characters.", field="message")
    intake_data = parse_intake(intake)
    data, mime_type = read_image(image, CHAT_EXTENSIONS)

    session, detected, process = chat_service_ops.analyze_and_open_session(
        db,
        current_user,
        storage,
        data,
        mime_type,
        image.filename,
        intake_data,
        message,
        vision_service,
        chat_service,
    )

    return {
        "session": serialize_session(session, storage, detected),
        "detected_items": [serialize_detected_item(d) for d in detected],
        "process_id": process.id,
    }


@router.get("/{session_id}")
def get_session(
    session_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    session = chat_repo.find_session(db, session_id, current_user.id)
    return {"session": _session_payload(db, session, storage)}


@router.post("/{session_id}/messages")
def post_message(
    session_id: int,
    payload: MessageCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    chat_service: GeminiChatService = Depends(get_chat_service),
):
    """Send a message (or retry a failed one) and get the stylist's reply"""
    return chat_service_ops.post_message(db, current_user, session_id, payload, chat_service)


@router.post("/{session_id}/finish")
def finish(
    session_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    session = chat_service_ops.finish_session(db, current_user, session_id)
    return {"session": _session_payload(db, session, storage)}


@router.post("/{session_id}/feedback")
def feedback(
    session_id: int,
    payload: FeedbackCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    row = chat_service_ops.save_feedback(db, current_user, session_id, payload)
    return {
        "feedback": {
            "id": row.id,
            "session_id": row.session_id,
            "ratings": row.ratings,
            "comment": row.comment,
            "updated_at": row.updated_at,
        }
    }
