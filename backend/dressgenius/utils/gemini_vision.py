"""
Outfit photo description using the Gemini vision API
"""
import base64
import json
import logging
from typing import Any, Dict, Optional

from dressgenius.utils.gemini_client import GeminiClient, GeminiError
from dressgenius.utils.gemini_json import parse_model_json, normalize_vision_payload

logger = logging.getLogger(__name__)

VISION_PROMPT = """You are analyzing a fashion outfit photo.

Return ONLY valid JSON (no markdown) matching this schema:
{
  "items": {
    "tops": ["..."],
    "bottoms": ["..."],
    "shoes": ["..."],
    "outerwear": ["..."],
    "accessories": ["..."]
  },
  "colors": ["..."],
  "patterns": ["..."],
  "materials": ["..."],
  "style_tags": ["..."],
  "description": "Objective neutral description of the outfit in 1-2 sentences."
}

Rules:
- Be objective and descriptive.
- If something is not visible, use an empty array."""


class GeminiVisionService(GeminiClient):
    """Turns an outfit photo into a normalized vision dict"""

    FALLBACK_MODELS = (
        "gemini-2.5-flash",
        "gemini-2.5-flash-lite",
        "gemini-2.0-flash",
        "gemini-1.5-flash-latest",
        "gemini-1.5-pro-latest",
    )
    service_name = "gemini_vision"

    def build_payload(self, image_bytes: bytes, mime_type: str, intake: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        parts = [{"text": VISION_PROMPT}]
        if intake:
            # Context only; the description itself stays objective
            parts.append({"text": "User context (do not let it bias detection): " + json.dumps(intake, ensure_ascii=False)})
        parts.append({
            "inline_data": {
                "mime_type": mime_type or "image/jpeg",
                "data": base64.b64encode(image_bytes).decode("utf-8"),
            }
        })
        return {
            "contents": [{"parts": parts}],
            "generationConfig": {
                "temperature": 0.2,
                "maxOutputTokens": 1024,
                "response_mime_type": "application/json",
            },
        }

    def analyze_outfit_image(
        self,
        image_bytes: bytes,
        mime_type: str = "image/jpeg",
        intake: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Describe the outfit in a photo.

        Args:
            image_bytes: Raw image content
            mime_type: Content type sent alongside the base64 data
            intake: Optional user context (occasion, weather, ...)

        Returns:
            dict with items.{tops,bottoms,shoes,outerwear,accessories}, colors,
            patterns, materials, style_tags (lists of strings) and description

        Raises:
            GeminiError: request failed, reply empty, or reply not valid JSON
        """
        logger.info(f"Vision analysis start mime={mime_type} size_bytes={len(image_bytes)}")
        response = self.generate(self.build_payload(image_bytes, mime_type, intake))

        parts = self.candidate_parts(response)
        text = parts[0].get("text") if parts else None
        if not isinstance(text, str) or not text.strip():
            raise GeminiError("Gemini returned an empty response.")

        return normalize_vision_payload(parse_model_json(text))
