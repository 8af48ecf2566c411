import json

from conftest import image_file

from dressgenius.models import OutfitAnalysisProcess, OutfitDetectedItem
from dressgenius.utils.gemini_client import GeminiError, GeminiQuotaError


def test_create_scan_scores_and_stores_detected_items(client, user_headers, db, vision):
    res = client.post(
        "/outfit-scans",
        files=image_file(),
        data={"intake": json.dumps({"occasion": "Work", "weather": "Warm"})},
        headers=user_headers,
    )

    assert res.status_code == 201, res.text
    body = res.json()
    assert body["scan"]["score"] == 85
    assert body["scan"]["analysis"]["context_feedback"]["occasion"]["status"] == "positive"
    assert body["scan"]["image_url"].startswith("http://testserver/storage/outfit-scans/")
    assert [d["label"] for d in body["detected_items"]] == ["t-shirt", "jeans", "sneakers"]
    assert [d["category"] for d in body["detected_items"]] == ["tops", "bottoms", "shoes"]
    assert vision.calls[0]["intake"] == {"occasion": "Work", "weather": "Warm"}

    process = db.get(OutfitAnalysisProcess, body["process_id"])
    assert process.kind == "scan_analyze"
    assert process.status == "completed"
    assert process.scan_id == body["scan"]["id"]
    assert set(process.timings) >= {"vision", "scoring"}

    item = db.query(OutfitDetectedItem).first()
    assert item.source_type == "scan"
    assert item.meta["cover_image_path"].startswith("outfit-scans/")


def test_ai_context_feedback_overrides_heuristic_per_field(client, user_headers, chat):
    chat.feedback = {"occasion": {"status": "negative", "message": "Too casual for this office."}}

    res = client.post(
        "/outfit-scans",
        files=image_file(),
        data={"intake": json.dumps({"occasion": "Work", "weather": "Warm"})},
        headers=user_headers,
    )

    feedback = res.json()["scan"]["analysis"]["context_feedback"]
    assert feedback["occasion"] == {"status": "negative", "message": "Too casual for this office."}
    assert feedback["weather"]["status"] == "positive"


def test_context_feedback_failure_is_ignored(client, user_headers, chat):
    chat.feedback_error = GeminiError("Gemini request failed: 500 boom")

    res = client.post(
        "/outfit-scans",
        files=image_file(),
        data={"intake": json.dumps({"occasion": "Work"})},
        headers=user_headers,
    )

    assert res.status_code == 201
    assert res.json()["scan"]["analysis"]["context_feedback"]["occasion"]["status"] == "positive"


def test_vision_failure_marks_process_failed(client, user_headers, db, vision):
    vision.error = GeminiError("Gemini request failed: 500 boom")

    res = client.post("/outfit-scans", files=image_file(), headers=user_headers)

    assert res.status_code == 502
    body = res.json()
    assert body["message"] == "Vision analysis failed. Please try again."
    process = db.get(OutfitAnalysisProcess, body["details"]["process_id"])
    assert process.status == "failed"
    assert process.error_status == 502
    assert "boom" in process.error_message
    assert process.completed_at is not None


def test_vision_quota_failure_is_429_with_retry_after(client, user_headers, db, vision):
    vision.error = GeminiQuotaError("Gemini quota exceeded (429). Details: Please retry in 20s.")

    res = client.post("/outfit-scans", files=image_file(), headers=user_headers)

    assert res.status_code == 429
    assert res.headers["Retry-After"] == "20"
    body = res.json()
    assert body["message"] == "AI quota exceeded. Please retry shortly."
    assert body["details"]["retry_after"] == 20
    assert db.get(OutfitAnalysisProcess, body["details"]["process_id"]).error_status == 429


def test_scan_rejects_webp_and_oversize(client, user_headers):
    webp = client.post("/outfit-scans", files=image_file("look.webp", b"RIFF", "image/webp"), headers=user_headers)
    assert webp.status_code == 422

    big = client.post("/outfit-scans", files=image_file(content=b"\xff" * (5 * 1024 * 1024 + 1)), headers=user_headers)
    assert big.status_code == 422
    assert big.json()["details"] == {"field": "image"}


def test_scan_rejects_malformed_intake(client, user_headers):
    res = client.post("/outfit-scans", files=image_file(), data={"intake": "not json"}, headers=user_headers)
    assert res.status_code == 422

    too_long = json.dumps({"occasion": "x" * 121})
    res = client.post("/outfit-scans", files=image_file(), data={"intake": too_long}, headers=user_headers)
    assert res.status_code == 422
    assert res.json()["details"] == {"field": "intake.occasion"}


def test_scans_are_scoped_to_owner(client, user_headers, other_headers):
    scan_id = client.post("/outfit-scans", files=image_file(), headers=user_headers).json()["scan"]["id"]

    assert client.get(f"/outfit-scans/{scan_id}", headers=user_headers).status_code == 200
    assert client.get(f"/outfit-scans/{scan_id}", headers=other_headers).status_code == 404
    assert client.get("/outfit-scans", headers=other_headers).json() == {"scans": []}
    assert len(client.get("/outfit-scans", headers=user_headers).json()["scans"]) == 1
