"""
Service providers injected into route handlers.

Tests swap these out through ``app.dependency_overrides``.
"""
from functools import lru_cache

from dressgenius.config import settings
from dressgenius.utils.gemini_chat import GeminiChatService
from dressgenius.utils.gemini_vision import GeminiVisionService
from dressgenius.utils.storage import Storage, build_storage


@lru_cache(maxsize=1)
def get_storage() -> Storage:
    return build_storage()


def get_vision_service() -> GeminiVisionService:
    return GeminiVisionService(
        api_key=settings.GEMINI_API_KEY,
        model=settings.GEMINI_MODEL,
        max_models=settings.GEMINI_VISION_MAX_MODELS,
        connect_timeout=settings.GEMINI_CONNECT_TIMEOUT,
        timeout=settings.GEMINI_TIMEOUT,
    )


def get_chat_service() -> GeminiChatService:
    return GeminiChatService(
        api_key=settings.GEMINI_API_KEY,
        model=settings.GEMINI_MODEL,
        connect_timeout=settings.GEMINI_CONNECT_TIMEOUT,
        timeout=settings.GEMINI_TIMEOUT,
    )
