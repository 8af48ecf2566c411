"""
JSON extraction, repair and normalization for Gemini free-text replies.
"""
import json
import re
from typing import Any, Dict, List

from dressgenius.utils.gemini_client import GeminiError

ITEM_CATEGORIES = ("tops", "bottoms", "shoes", "outerwear", "accessories")
LIST_FIELDS = ("colors", "patterns", "materials", "style_tags")

_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")
_OPEN_FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*\n?")
_CLOSE_FENCE_RE = re.compile(r"\n?```\s*$")


def extract_json(text: str) -> str:
    """
    Pull the JSON object out of a model reply.

    Strips Markdown code fences, then slices from the first '{' to the last '}'.
    Falls back to the stripped text when no braces are found.
    """
    text = (text or "").strip()

    if text.startswith("```"):
        text = _OPEN_FENCE_RE.sub("", text, count=1)
        text = _CLOSE_FENCE_RE.sub("", text, count=1)
        text = text.strip()

    start = text.find("{")
    end = text.rfind("}")
    if start != -1 and end != -1 and end > start:
        candidate = text[start:end + 1].strip()
        if candidate:
            return candidate

    return text


def repair_json(text: str) -> str:
    """
    Best-effort fix for truncated or sloppy JSON.

    Removes trailing commas before a closing bracket/brace and appends
    missing ']' then '}' so the counts balance.
    """
    text = text.strip()
    text = _TRAILING_COMMA_RE.sub(r"\1", text)
    # A reply cut off right after a comma
    text = text.rstrip(",").rstrip()

    open_curly = text.count("{")
    close_curly = text.count("}")
    open_square = text.count("[")
    close_square = text.count("]")

    if close_square < open_square:
        text += "]" * (open_square - close_square)
    if close_curly < open_curly:
        text += "}" * (open_curly - close_curly)

    return text


def _decode_object(text: str):
    try:
        decoded = json.loads(text)
    except json.JSONDecodeError:
        return None
    return decoded if isinstance(decoded, dict) else None


def parse_model_json(text: str) -> Dict[str, Any]:
    """Extract, decode and if needed repair a JSON object from a model reply."""
    candidate = extract_json(text)
    decoded = _decode_object(candidate)
    if decoded is None:
        decoded = _decode_object(repair_json(candidate))
    if decoded is None:
        snippet = candidate[:400]
        raise GeminiError(f"Gemini returned invalid JSON. Snippet: {snippet}")
    return decoded


def _string_list(value: Any) -> List[str]:
    if value is None:
        return []
    if not isinstance(value, (list, tuple)):
        value = [value]
    return [str(v) for v in value if v]


def normalize_vision_payload(decoded: Dict[str, Any]) -> Dict[str, Any]:
    """Guarantee the vision shape: every item category and list field present, description a string."""
    items = decoded.get("items")
    items = dict(items) if isinstance(items, dict) else {}
    for category in ITEM_CATEGORIES:
        items[category] = _string_list(items.get(category))
    decoded["items"] = items

    for field in LIST_FIELDS:
        decoded[field] = _string_list(decoded.get(field))

    description = decoded.get("description")
    decoded["description"] = "" if description is None else str(description)

    return decoded
