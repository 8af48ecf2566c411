"""
Gemini integration for stylist chat replies and structured context feedback.
"""
import json
import logging
from typing import Any, Dict, Optional

from dressgenius.reco.context_feedback import CONTEXT_FIELDS, POSITIVE, NEGATIVE, NEUTRAL
from dressgenius.utils.gemini_client import GeminiClient, GeminiError
from dressgenius.utils.gemini_json import parse_model_json

logger = logging.getLogger(__name__)

STYLIST_PROMPT = """You are DressGenius, an expert fashion stylist.

You will receive JSON context including:
- intake (occasion, weather, dress_code, budget, desired_vibe)
- ai_preferences (0-100 sliders: tone, strictness, detail, creativity, trendiness, comfort, weather, budget)
- vision (detected outfit items/colors/description)
- analysis (score, pros, issues, suggestions, context_feedback)
- recent_messages (a short list of conversation messages, oldest first)

Write a helpful response in plain text.
Rules:
- Be concise but actionable.
- Respect the user's intake constraints.
- Follow the ai_preferences sliders (higher strictness = harsher critique, higher detail = longer answer).
- If the user asks for more than you can infer, ask 1-2 clarifying questions."""

CONTEXT_FEEDBACK_PROMPT = """You are DressGenius, an expert fashion stylist.

You will receive JSON context with the user's intake (occasion, weather, dress_code, budget, desired_vibe),
their ai_preferences, the detected outfit (vision) and a heuristic analysis.

For every intake field that has a value, judge whether the outfit suits it.

Return ONLY valid JSON (no markdown) of the form:
{
  "occasion": {"status": "positive|negative|neutral", "message": "one short sentence"},
  "weather": {"status": "...", "message": "..."},
  "dress_code": {"status": "...", "message": "..."},
  "budget": {"status": "...", "message": "..."},
  "desired_vibe": {"status": "...", "message": "..."}
}
Omit fields the user left empty."""

VALID_STATUSES = (POSITIVE, NEGATIVE, NEUTRAL)


def _encode_context(context: Dict[str, Any]) -> str:
    return json.dumps(context, ensure_ascii=False, default=str)


class GeminiChatService(GeminiClient):
    """Stylist chat backed by Gemini text generation"""

    FALLBACK_MODELS = (
        "gemini-2.5-flash",
        "gemini-2.5-flash-lite",
        "gemini-2.0-flash",
        "gemini-1.5-flash-latest",
        "gemini-1.5-pro-latest",
    )
    service_name = "gemini_chat"

    def reply(self, context: Dict[str, Any]) -> str:
        """Return the stylist's plain-text answer, joining every text part of the first candidate."""
        payload = {
            "contents": [{
                "parts": [
                    {"text": STYLIST_PROMPT},
                    {"text": _encode_context(context)},
                ]
            }],
            "generationConfig": {
                "temperature": 0.6,
                "maxOutputTokens": 700,
            },
        }

        response = self.generate(payload)
        texts = [p.get("text") for p in self.candidate_parts(response) if isinstance(p.get("text"), str)]
        text = "".join(texts).strip()
        if not text:
            raise GeminiError("Gemini returned an empty response.")
        return text

    def context_feedback(self, context: Dict[str, Any]) -> Optional[Dict[str, Dict[str, str]]]:
        """
        Ask Gemini to judge the outfit against each intake field.

        Returns ``{field: {"status", "message"}}`` or None when the reply
        had nothing usable. Raises GeminiError on request or parse failure.
        """
        intake = context.get("intake") or {}
        if not any(str(intake.get(f) or "").strip() for f in CONTEXT_FIELDS):
            return None

        payload = {
            "contents": [{
                "parts": [
                    {"text": CONTEXT_FEEDBACK_PROMPT},
                    {"text": _encode_context(context)},
                ]
            }],
            "generationConfig": {
                "temperature": 0.3,
                "maxOutputTokens": 512,
                "response_mime_type": "application/json",
            },
        }

        response = self.generate(payload)
        texts = [p.get("text") for p in self.candidate_parts(response) if isinstance(p.get("text"), str)]
        text = "".join(texts).strip()
        if not text:
            raise GeminiError("Gemini returned an empty response.")

        decoded = parse_model_json(text)
        feedback: Dict[str, Dict[str, str]] = {}
        for field in CONTEXT_FIELDS:
            row = decoded.get(field)
            if not isinstance(row, dict):
                continue
            message = str(row.get("message") or "").strip()
            if not message:
                continue
            status = str(row.get("status") or "").strip().lower()
            feedback[field] = {
                "status": status if status in VALID_STATUSES else NEUTRAL,
                "message": message,
            }

        return feedback or None
