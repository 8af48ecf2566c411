"""
Shared outfit analysis pipeline: vision call, heuristic scoring and best-effort
context feedback, recorded on an OutfitAnalysisProcess audit row.
"""
import logging
from typing import Any, Dict, List, Tuple

from sqlalchemy.orm import Session

from dressgenius.config import settings
from dressgenius.core.exceptions import ExternalServiceError, RateLimitError, safe_execute
from dressgenius.models import OutfitAnalysisProcess, OutfitDetectedItem, User
from dressgenius.reco.scoring import analyze_outfit
from dressgenius.repositories import outfits as outfit_repo
from dressgenius.utils.gemini_chat import GeminiChatService
from dressgenius.utils.gemini_client import is_quota_error, parse_retry_after
from dressgenius.utils.gemini_json import ITEM_CATEGORIES
from dressgenius.utils.gemini_vision import GeminiVisionService
from dressgenius.utils.profiler import reset_profiler

logger = logging.getLogger(__name__)

QUOTA_MESSAGE = "AI quota exceeded. Please retry shortly."
VISION_FAILED_MESSAGE = "Vision analysis failed. Please try again."


def merge_context_feedback(analysis: Dict[str, Any], ai_feedback: Any) -> Dict[str, Any]:
    """AI verdicts replace the heuristic ones field by field"""
    if not isinstance(ai_feedback, dict) or not ai_feedback:
        return analysis
    merged = dict(analysis.get("context_feedback") or {})
    merged.update(ai_feedback)
    return {**analysis, "context_feedback": merged}


def run_outfit_analysis(
    db: Session,
    user: User,
    kind: str,
    image_bytes: bytes,
    mime_type: str,
    image_path: str,
    intake: Dict[str, Any],
    vision_service: GeminiVisionService,
    chat_service: GeminiChatService,
) -> Tuple[OutfitAnalysisProcess, Dict[str, Any], Dict[str, Any]]:
    """
    Analyze an uploaded outfit photo.

    Returns (process, vision, analysis). The process is left in ``processing``
    for the caller to link and complete. On failure the process is marked
    ``failed`` and RateLimitError (quota) or ExternalServiceError is raised.
    """
    ai_preferences = dict(user.ai_preferences or {})
    process = outfit_repo.create_process(db, user.id, kind, image_path, intake, ai_preferences)
    profiler = reset_profiler()

    try:
        with profiler.measure("vision"):
            vision = vision_service.analyze_outfit_image(image_bytes, mime_type, intake)
        with profiler.measure("scoring"):
            analysis = analyze_outfit(vision, intake)

        process.vision = vision
        process.analysis = analysis
        db.commit()

        with profiler.measure("context_feedback"):
            ai_feedback = safe_execute(
                chat_service.context_feedback,
                {
                    "intake": intake,
                    "ai_preferences": ai_preferences,
                    "vision": vision,
                    "analysis": analysis,
                },
            )
        analysis = merge_context_feedback(analysis, ai_feedback)

        process.context_feedback = dict(analysis.get("context_feedback") or {})
        process.analysis = analysis
        process.timings = profiler.get_timings_ms()
        db.commit()
    except Exception as e:
        db.rollback()
        quota = is_quota_error(e)
        error_status = 429 if quota else 502
        retry_after = (getattr(e, "retry_after", None) or parse_retry_after(str(e))) if quota else None

        outfit_repo.fail_process(db, process, error_status, str(e))
        if settings.GEMINI_DEBUG:
            logger.error(f"Outfit analysis failed ({kind}): {type(e).__name__}: {e}")

        details = {"process_id": process.id, "retry_after": retry_after}
        if quota:
            raise RateLimitError(QUOTA_MESSAGE, retry_after=retry_after, details=details) from e
        raise ExternalServiceError(VISION_FAILED_MESSAGE, details=details) from e

    profiler.log_summary(prefix=f"[{kind}] ")
    return process, vision, analysis


def persist_detected_items(
    db: Session,
    user_id: int,
    source_type: str,
    source_id: int,
    process_id: int,
    vision: Dict[str, Any],
    cover_image_path: str,
) -> List[OutfitDetectedItem]:
    """One row per non-blank label per category, sharing the outfit's colors"""
    items: List[OutfitDetectedItem] = []
    by_category = vision.get("items") or {}
    colors = vision.get("colors")

    for category in ITEM_CATEGORIES:
        for label in by_category.get(category) or []:
            label = str(label).strip()
            if not label:
                continue
            item = OutfitDetectedItem(
                user_id=user_id,
                source_type=source_type,
                source_id=source_id,
                process_id=process_id,
                label=label,
                category=category,
                colors=colors,
                meta={"cover_image_path": cover_image_path},
            )
            db.add(item)
            items.append(item)

    db.flush()
    return items
