from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from dressgenius.database import get_db
from dressgenius.models import User
from dressgenius.schemas import PreferencesResponse, PreferencesUpdate
from dressgenius.utils.auth import get_current_user

router = APIRouter(prefix="/ai-preferences", tags=["AI Preferences"])

PREFERENCE_KEYS = ("tone", "strictness", "detail", "creativity", "trendiness", "comfort", "weather", "budget")


def sanitize_preferences(raw: dict) -> dict:
    """Known slider keys only; numeric values truncated to int and clamped to 0..100"""
    cleaned = {}
    for key in PREFERENCE_KEYS:
        value = raw.get(key)
        if isinstance(value, str):
            try:
                value = float(value)
            except ValueError:
                continue
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            continue
        if value != value:  # NaN
            continue
        cleaned[key] = int(max(0, min(100, value)))
    return cleaned


@router.get("", response_model=PreferencesResponse)
def get_preferences(current_user: User = Depends(get_current_user)):
    return {"preferences": current_user.ai_preferences}


@router.put("", response_model=PreferencesResponse)
def update_preferences(
    payload: PreferencesUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    current_user.ai_preferences = sanitize_preferences(payload.preferences)
    db.commit()
    db.refresh(current_user)
    return {"preferences": current_user.ai_preferences}
