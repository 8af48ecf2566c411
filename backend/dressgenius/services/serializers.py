"""
Response shapes for ORM rows. Storage paths become public URLs here.
"""
from typing import Any, Dict, List

from dressgenius.models import (
    MAX_TURNS,
    OutfitChatMessage,
    OutfitChatSession,
    OutfitDetectedItem,
    OutfitScan,
    User,
    WardrobeItem,
)
from dressgenius.utils.storage import Storage


def serialize_user(user: User, storage: Storage) -> Dict[str, Any]:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "profile_photo_url": storage.url(user.profile_photo_path),
        "created_at": user.created_at,
    }


def serialize_detected_item(item: OutfitDetectedItem) -> Dict[str, Any]:
    return {
        "id": item.id,
        "label": item.label,
        "category": item.category,
        "colors": item.colors,
    }


def serialize_message(message: OutfitChatMessage) -> Dict[str, Any]:
    return {
        "id": message.id,
        "role": message.role,
        "content": message.content,
        "meta": message.meta,
        "created_at": message.created_at,
    }


def serialize_session_summary(session: OutfitChatSession, storage: Storage) -> Dict[str, Any]:
    return {
        "id": session.id,
        "title": session.title,
        "score": session.score,
        "turns_used": session.turns_used,
        "status": session.status,
        "image_url": storage.url(session.image_path),
        "created_at": session.created_at,
    }


def serialize_session(
    session: OutfitChatSession,
    storage: Storage,
    detected_items: List[OutfitDetectedItem],
) -> Dict[str, Any]:
    return {
        "id": session.id,
        "title": session.title,
        "intake": session.intake,
        "vision": session.vision,
        "analysis": session.analysis,
        "score": session.score,
        "turns_used": session.turns_used,
        "turns_max": MAX_TURNS,
        "status": session.status,
        "closed_at": session.closed_at,
        "image_url": storage.url(session.image_path),
        "created_at": session.created_at,
        "detected_items": [serialize_detected_item(d) for d in detected_items],
        "messages": [serialize_message(m) for m in session.messages],
    }


def serialize_scan(scan: OutfitScan, storage: Storage) -> Dict[str, Any]:
    return {
        "id": scan.id,
        "image_url": storage.url(scan.image_path),
        "vision": scan.vision,
        "analysis": scan.analysis,
        "score": scan.score,
        "created_at": scan.created_at,
    }


def serialize_wardrobe_item(item: WardrobeItem, storage: Storage) -> Dict[str, Any]:
    return {
        "id": item.id,
        "label": item.label,
        "category": item.category,
        "colors": item.colors,
        "cover_image_path": item.cover_image_path,
        "cover_image_url": storage.url(item.cover_image_path),
        "created_at": item.created_at,
    }
