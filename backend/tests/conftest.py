"""
Shared fixtures: in-memory database, local storage in a temp dir and fake
Gemini services, wired into the app through dependency overrides.
"""
import os
import tempfile

# Settings are read at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["USE_CLOUDINARY"] = "false"
os.environ["GEMINI_API_KEY"] = "test-key"
os.environ["APP_URL"] = "http://testserver"
os.environ["MEDIA_ROOT"] = tempfile.mkdtemp(prefix="dressgenius-media-")
os.environ["LOG_LEVEL"] = "WARNING"

import json
from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from dressgenius.database import SessionLocal, engine
from dressgenius.dependencies import get_chat_service, get_storage, get_vision_service
from dressgenius.main import app
from dressgenius.models import Base
from dressgenius.routers.auth import limiter
from dressgenius.utils.storage import LocalStorage

COMPLETE_VISION = {
    "items": {
        "tops": ["t-shirt"],
        "bottoms": ["jeans"],
        "shoes": ["sneakers"],
        "outerwear": [],
        "accessories": [],
    },
    "colors": ["blue"],
    "patterns": [],
    "materials": [],
    "style_tags": ["casual"],
    "description": "A blue t-shirt with jeans and sneakers.",
}


class FakeVisionService:
    """Returns a canned vision result, or raises ``error`` when set"""

    def __init__(self):
        self.result: Dict[str, Any] = json.loads(json.dumps(COMPLETE_VISION))
        self.error: Optional[Exception] = None
        self.calls: List[Dict[str, Any]] = []

    def analyze_outfit_image(self, image_bytes, mime_type="image/jpeg", intake=None):
        self.calls.append({"size": len(image_bytes), "mime_type": mime_type, "intake": intake})
        if self.error is not None:
            raise self.error
        return json.loads(json.dumps(self.result))


class FakeChatService:
    """Scripted stylist: replies with ``reply_text`` unless an error is queued"""

    def __init__(self):
        self.reply_text = "Looks great! Try a watch."
        self.reply_errors: List[Exception] = []
        self.feedback: Optional[Dict[str, Dict[str, str]]] = None
        self.feedback_error: Optional[Exception] = None
        self.contexts: List[Dict[str, Any]] = []

    def reply(self, context):
        self.contexts.append(context)
        if self.reply_errors:
            raise self.reply_errors.pop(0)
        return self.reply_text

    def context_feedback(self, context):
        if self.feedback_error is not None:
            raise self.feedback_error
        return self.feedback


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    limiter.reset()
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(str(tmp_path / "media"), "http://testserver")


@pytest.fixture
def vision():
    return FakeVisionService()


@pytest.fixture
def chat():
    return FakeChatService()


@pytest.fixture
def client(storage, vision, chat):
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_vision_service] = lambda: vision
    app.dependency_overrides[get_chat_service] = lambda: chat
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def register(client, email="alice@mail.com", password="secret123", name="Alice"):
    res = client.post("/register", json={"name": name, "email": email, "password": password})
    assert res.status_code == 201, res.text
    return res.json()


def auth_headers(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user_headers(client):
    return auth_headers(register(client)["token"])


@pytest.fixture
def other_headers(client):
    return auth_headers(register(client, email="bob@mail.com", name="Bob")["token"])


JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 64 + b"\xff\xd9"


def image_file(name="look.jpg", content=JPEG_BYTES, mime="image/jpeg"):
    return {"image": (name, content, mime)}
