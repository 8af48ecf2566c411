import json

from conftest import image_file

from dressgenius.dependencies import get_chat_service
from dressgenius.main import app
from dressgenius.models import MAX_TURNS, OutfitChatAttachment, OutfitChatMessage, OutfitChatSession
from dressgenius.services.chat import fallback_summary
from dressgenius.utils.gemini_chat import GeminiChatService
from dressgenius.utils.gemini_client import GeminiError, GeminiQuotaError


def open_session(client, headers, intake=None, message=None):
    data = {}
    if intake is not None:
        data["intake"] = json.dumps(intake)
    if message is not None:
        data["message"] = message
    res = client.post("/outfit-chats/analyze", files=image_file(), data=data, headers=headers)
    assert res.status_code == 201, res.text
    return res.json()


def send(client, headers, session_id, **payload):
    return client.post(f"/outfit-chats/{session_id}/messages", json=payload, headers=headers)


def test_analyze_opens_active_session(client, user_headers, db, chat):
    body = open_session(client, user_headers, intake={"occasion": "Work"})
    session = body["session"]

    assert session["score"] == 85
    assert session["turns_used"] == 1
    assert session["turns_max"] == MAX_TURNS
    assert session["status"] == "active"
    assert session["title"] == "Work"
    assert [m["role"] for m in session["messages"]] == ["user", "assistant"]
    assert session["messages"][0]["content"] == "Analyze my outfit with the provided context."
    assert session["messages"][1]["content"] == chat.reply_text
    assert session["messages"][1]["meta"] == {"score": 85}
    assert [d["label"] for d in body["detected_items"]] == ["t-shirt", "jeans", "sneakers"]

    attachment = db.query(OutfitChatAttachment).one()
    assert attachment.kind == "image"
    assert attachment.message_id == session["messages"][0]["id"]


def test_analyze_uses_custom_opening_message(client, user_headers, chat):
    open_session(client, user_headers, message="Is this ok for a date?")
    assert chat.contexts[0]["recent_messages"] == [{"role": "user", "content": "Is this ok for a date?"}]


def test_analyze_accepts_webp(client, user_headers):
    res = client.post(
        "/outfit-chats/analyze",
        files=image_file("look.webp", b"RIFFxxxxWEBP", "image/webp"),
        headers=user_headers,
    )
    assert res.status_code == 201


def test_analyze_falls_back_to_summary_when_reply_fails(client, user_headers, chat):
    chat.reply_errors.append(GeminiError("Gemini request failed: 500 boom"))

    session = open_session(client, user_headers, intake={"occasion": "Work"})["session"]

    reply = session["messages"][1]["content"]
    assert reply.startswith("Score: 85\n\nContext:\nOccasion (positive): ")
    assert "Pros: Complete outfit detected (top, bottom, shoes). Color palette seems cohesive." in reply
    assert reply.endswith("Suggestions: ")


def test_analyze_vision_failure_creates_no_session(client, user_headers, db, vision):
    vision.error = GeminiQuotaError("Gemini quota exceeded (429). Details: RESOURCE_EXHAUSTED")

    res = client.post("/outfit-chats/analyze", files=image_file(), headers=user_headers)

    assert res.status_code == 429
    assert res.json()["message"] == "AI quota exceeded. Please retry shortly."
    assert db.query(OutfitChatSession).count() == 0


def test_post_message_appends_turn(client, user_headers, chat):
    session_id = open_session(client, user_headers)["session"]["id"]
    chat.reply_text = "Add a belt."

    res = send(client, user_headers, session_id, content="What accessory?")

    assert res.status_code == 200
    body = res.json()
    assert body["turns_used"] == 2
    assert body["turns_max"] == MAX_TURNS
    assert [m["role"] for m in body["messages"]] == ["user", "assistant"]
    assert body["messages"][1]["content"] == "Add a belt."

    recent = chat.contexts[-1]["recent_messages"]
    assert recent[-1] == {"role": "user", "content": "What accessory?"}
    assert recent[0]["content"] == "Analyze my outfit with the provided context."


def test_blank_content_is_rejected(client, user_headers):
    session_id = open_session(client, user_headers)["session"]["id"]

    res = send(client, user_headers, session_id, content="   ")

    assert res.status_code == 422
    assert res.json()["message"] == "Content is required."


def test_turn_limit_closes_session_and_rejects_further_messages(client, user_headers, db):
    session_id = open_session(client, user_headers)["session"]["id"]

    for i in range(MAX_TURNS - 1):
        res = send(client, user_headers, session_id, content=f"question {i}")
        assert res.status_code == 200

    assert res.json()["turns_used"] == MAX_TURNS
    assert res.json()["status"] == "closed"

    rejected = send(client, user_headers, session_id, content="one more")
    assert rejected.status_code == 429
    body = rejected.json()
    assert body["error_code"] == "TURN_LIMIT_REACHED"
    assert body["message"] == "This chat has reached the 10-turn limit."
    assert body["details"] == {"turns_used": MAX_TURNS, "turns_max": MAX_TURNS}

    session = db.get(OutfitChatSession, session_id)
    assert session.turns_used == MAX_TURNS
    assert session.closed_at is not None


def test_quota_failure_keeps_turn_and_retry_clears_failed_flag(client, user_headers, db, chat):
    session_id = open_session(client, user_headers)["session"]["id"]
    chat.reply_errors.append(GeminiQuotaError("Gemini quota exceeded (429). Details: Please retry in 7s."))

    failed = send(client, user_headers, session_id, content="Shoes?")

    assert failed.status_code == 429
    body = failed.json()
    assert body["message"] == "AI quota exceeded. Please wait a bit and try again."
    assert body["details"]["retry_after"] == 7
    assert body["details"]["turns_used"] == 1
    failed_message = body["details"]["messages"][0]
    assert failed_message["meta"]["status"] == "failed"
    assert failed_message["meta"]["error_status"] == 429

    # Failed messages stay out of the model context
    chat.reply_text = "Go with white sneakers."
    ok = send(client, user_headers, session_id, retry_message_id=failed_message["id"])

    assert ok.status_code == 200
    body = ok.json()
    assert body["turns_used"] == 2
    assert body["messages"][0]["id"] == failed_message["id"]
    assert body["messages"][0]["content"] == "Shoes?"
    assert body["messages"][0]["meta"] is None
    assert [m["content"] for m in chat.contexts[-1]["recent_messages"]].count("Shoes?") == 1

    user_messages = (
        db.query(OutfitChatMessage)
        .filter_by(session_id=session_id, role="user")
        .order_by(OutfitChatMessage.id)
        .all()
    )
    assert [m.content for m in user_messages] == ["Analyze my outfit with the provided context.", "Shoes?"]


def test_non_quota_failure_is_502(client, user_headers, chat):
    session_id = open_session(client, user_headers)["session"]["id"]
    chat.reply_errors.append(GeminiError("Gemini request failed: 500 boom"))

    res = send(client, user_headers, session_id, content="Hello?")

    assert res.status_code == 502
    assert res.json()["message"] == "AI reply failed. Please try again."
    assert res.json()["details"]["messages"][0]["meta"]["error_status"] == 502


class HtmlResponse:
    status_code = 200
    text = "<html><body>Bad gateway</body></html>"

    def json(self):
        raise ValueError("Expecting value: line 1 column 1 (char 0)")


class HtmlHttp:
    def post(self, url, params=None, json=None, timeout=None):
        return HtmlResponse()


def test_unreadable_reply_body_keeps_failed_message(client, user_headers, db):
    session_id = open_session(client, user_headers)["session"]["id"]
    app.dependency_overrides[get_chat_service] = lambda: GeminiChatService("key", "gemini-2.5-flash", http=HtmlHttp())

    res = send(client, user_headers, session_id, content="hi")

    assert res.status_code == 502
    body = res.json()
    assert body["message"] == "AI reply failed. Please try again."
    assert body["details"]["turns_used"] == 1
    assert body["details"]["messages"][0]["meta"]["status"] == "failed"

    stored = db.query(OutfitChatMessage).filter_by(session_id=session_id, role="user", content="hi").one()
    assert stored.is_failed


def test_retry_of_unknown_or_healthy_message(client, user_headers):
    session = open_session(client, user_headers)["session"]
    healthy_id = session["messages"][0]["id"]

    assert send(client, user_headers, session["id"], retry_message_id=9999).status_code == 404

    res = send(client, user_headers, session["id"], retry_message_id=healthy_id)
    assert res.status_code == 422
    assert res.json()["message"] == "This message cannot be retried."


def test_sessions_are_scoped_to_owner(client, user_headers, other_headers):
    session_id = open_session(client, user_headers)["session"]["id"]

    assert client.get(f"/outfit-chats/{session_id}", headers=other_headers).status_code == 404
    assert send(client, other_headers, session_id, content="hi").status_code == 404
    assert client.post(f"/outfit-chats/{session_id}/finish", headers=other_headers).status_code == 404
    assert client.get("/outfit-chats", headers=other_headers).json() == {"sessions": []}

    mine = client.get(f"/outfit-chats/{session_id}", headers=user_headers)
    assert mine.status_code == 200
    assert len(mine.json()["session"]["detected_items"]) == 3


def test_list_sessions_newest_first(client, user_headers):
    first = open_session(client, user_headers)["session"]["id"]
    second = open_session(client, user_headers)["session"]["id"]

    sessions = client.get("/outfit-chats", headers=user_headers).json()["sessions"]
    assert [s["id"] for s in sessions] == [second, first]


def test_finish_closes_session(client, user_headers):
    session_id = open_session(client, user_headers)["session"]["id"]

    res = client.post(f"/outfit-chats/{session_id}/finish", headers=user_headers)
    assert res.status_code == 200
    assert res.json()["session"]["status"] == "closed"
    assert res.json()["session"]["closed_at"] is not None

    again = client.post(f"/outfit-chats/{session_id}/finish", headers=user_headers)
    assert again.status_code == 200

    rejected = send(client, user_headers, session_id, content="still there?")
    assert rejected.status_code == 429
    assert rejected.json()["error_code"] == "TURN_LIMIT_REACHED"


def test_feedback_is_stored_and_replaced(client, user_headers):
    session_id = open_session(client, user_headers)["session"]["id"]
    ratings = {"helpfulness": 5, "clarity": 4, "relevance": 4, "tone": 5}

    res = client.post(f"/outfit-chats/{session_id}/feedback", json={"ratings": ratings, "comment": "Great"}, headers=user_headers)
    assert res.status_code == 200
    feedback_id = res.json()["feedback"]["id"]

    ratings["clarity"] = 2
    res = client.post(f"/outfit-chats/{session_id}/feedback", json={"ratings": ratings}, headers=user_headers)
    assert res.json()["feedback"]["id"] == feedback_id
    assert res.json()["feedback"]["ratings"]["clarity"] == 2
    assert res.json()["feedback"]["comment"] is None


def test_feedback_validates_ratings(client, user_headers):
    session_id = open_session(client, user_headers)["session"]["id"]

    bad = {"helpfulness": 6, "clarity": 4, "relevance": 4, "tone": 5}
    res = client.post(f"/outfit-chats/{session_id}/feedback", json={"ratings": bad}, headers=user_headers)
    assert res.status_code == 422

    ok = {"helpfulness": 1, "clarity": 1, "relevance": 1, "tone": 1}
    res = client.post(f"/outfit-chats/{session_id}/feedback", json={"ratings": ok, "comment": "x" * 501}, headers=user_headers)
    assert res.status_code == 422


def test_fallback_summary_without_context():
    text = fallback_summary({"score": 55, "pros": [], "issues": ["Too busy."], "suggestions": ["Fewer colors."]})
    assert text == "Score: 55\n\nPros: \n\nIssues: Too busy.\n\nSuggestions: Fewer colors."
