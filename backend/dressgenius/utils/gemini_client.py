"""
Shared HTTP plumbing for Google Gemini generateContent calls.

Every call walks an ordered list of candidate models across two API versions
until one answers. 404 and 400 mean "not available here, try the next one";
429 is a quota error and stops immediately; anything else is fatal.
"""
import logging
import math
import re
from typing import Any, Dict, Iterable, List, Optional, Tuple

import requests

from dressgenius.utils.profiler import get_profiler

logger = logging.getLogger(__name__)

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com"
API_VERSIONS: Tuple[str, ...] = ("v1beta", "v1")

# Statuses that mean the model/version pair is unavailable rather than broken
SKIP_STATUSES = (400, 404)

QUOTA_SIGNATURES = (
    "quota exceeded (429)",
    "RESOURCE_EXHAUSTED",
    "generate_content_free_tier_requests",
)

_RETRY_IN_RE = re.compile(r"retry in\s+([0-9.]+)\s*(ms|s)\b", re.IGNORECASE)
_RETRY_DELAY_RE = re.compile(r'"retryDelay"\s*:\s*"(\d+(?:\.\d+)?)s"', re.IGNORECASE)


class GeminiError(RuntimeError):
    """Gemini call failed; carries the last HTTP status and body when known."""

    def __init__(self, message: str, status: Optional[int] = None, body: Optional[str] = None):
        super().__init__(message)
        self.status = status
        self.body = body


class GeminiQuotaError(GeminiError):
    """Gemini answered 429; retry_after is a best-effort hint in seconds."""

    def __init__(self, message: str, body: Optional[str] = None):
        super().__init__(message, status=429, body=body)
        self.retry_after = parse_retry_after(message)


def parse_retry_after(message: str) -> Optional[int]:
    """
    Pull a retry delay in seconds out of provider error text.

    Understands "Please retry in 12.5s." / "retry in 900ms" and the JSON
    field "retryDelay": "30s". Returns None when no hint is present.
    """
    if not message:
        return None

    match = _RETRY_IN_RE.search(message)
    if match:
        value = float(match.group(1))
        if match.group(2).lower() == "ms":
            return max(1, math.ceil(value / 1000))
        return max(1, math.ceil(value))

    match = _RETRY_DELAY_RE.search(message)
    if match:
        return max(1, int(float(match.group(1))))

    return None


def is_quota_error(exc: BaseException) -> bool:
    """True when the error text carries one of the provider's quota signatures."""
    if isinstance(exc, GeminiQuotaError):
        return True
    text = str(exc)
    return any(sig in text for sig in QUOTA_SIGNATURES)


def build_model_fallback_list(configured: str, fallbacks: Iterable[str]) -> List[str]:
    """Configured models (comma-separated) first, then fallbacks; 'models/' prefix dropped, de-duplicated."""
    candidates = [m.strip() for m in (configured or "").split(",") if m.strip()]
    normalized: List[str] = []
    for model in [*candidates, *fallbacks]:
        model = re.sub(r"^models/", "", model.strip())
        if model and model not in normalized:
            normalized.append(model)
    return normalized


class GeminiClient:
    """Base client: owns the model list, timeouts and the HTTP session."""

    FALLBACK_MODELS: Tuple[str, ...] = ()
    service_name = "gemini"

    def __init__(
        self,
        api_key: str,
        model: str,
        http: Optional[Any] = None,
        max_models: Optional[int] = None,
        connect_timeout: float = 8,
        timeout: float = 30,
    ):
        self.api_key = api_key
        self.models = build_model_fallback_list(model, self.FALLBACK_MODELS)
        if max_models:
            self.models = self.models[:max_models]
        self.http = http or requests.Session()
        self.timeout = (connect_timeout, timeout)

    def _url(self, version: str, model: str) -> str:
        return f"{GEMINI_BASE_URL}/{version}/models/{model}:generateContent"

    def generate(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """POST payload to the first model/version pair that accepts it and return the JSON body."""
        if not self.api_key:
            raise GeminiError("Missing GEMINI_API_KEY.")

        last_status: Optional[int] = None
        last_error: Optional[str] = None
        profiler = get_profiler()

        for model in self.models:
            for version in API_VERSIONS:
                logger.info(f"{self.service_name} request start model={model} version={version}")
                try:
                    with profiler.measure(f"{self.service_name}_request"):
                        res = self.http.post(
                            self._url(version, model),
                            params={"key": self.api_key},
                            json=payload,
                            timeout=self.timeout,
                        )
                except requests.RequestException as exc:
                    raise GeminiError(f"Gemini request failed: 0 {exc}") from exc

                logger.info(f"{self.service_name} request done model={model} version={version} status={res.status_code}")

                if 200 <= res.status_code < 300:
                    try:
                        return res.json()
                    except ValueError as exc:
                        raise GeminiError(
                            "Gemini returned an invalid response body.",
                            status=res.status_code,
                            body=res.text,
                        ) from exc

                last_status = res.status_code
                last_error = res.text

                if last_status == 429:
                    raise GeminiQuotaError(
                        "Gemini quota exceeded (429). Enable billing / adjust quotas in Google AI Studio, "
                        f"or choose a model with available limits. Details: {last_error}",
                        body=last_error,
                    )

                if last_status in SKIP_STATUSES:
                    logger.warning(f"{self.service_name}: {model} on {version} unavailable ({last_status}), trying next")
                    continue

                raise GeminiError(
                    f"Gemini request failed: {last_status} {last_error}",
                    status=last_status,
                    body=last_error,
                )

        raise GeminiError(
            f"Gemini request failed: {last_status or 0} {last_error or 'Unknown error'}",
            status=last_status,
            body=last_error,
        )

    @staticmethod
    def candidate_parts(response: Any) -> List[Dict[str, Any]]:
        if not isinstance(response, dict):
            raise GeminiError("Gemini returned an invalid response body.")
        candidates = response.get("candidates") or []
        if not isinstance(candidates, list) or not candidates or not isinstance(candidates[0], dict):
            return []
        content = candidates[0].get("content") or {}
        parts = content.get("parts") if isinstance(content, dict) else None
        if not isinstance(parts, list):
            return []
        return [p for p in parts if isinstance(p, dict)]
