"""Decorative motivational text for a freshly collected stamp (Gemini over REST)."""

from __future__ import annotations

import json
from typing import Any, Dict, Mapping, Optional

import requests

from stampcard.applog import log_warning

GEMINI_ENDPOINT = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
DEFAULT_MODEL = "gemini-3-flash-preview"
DEFAULT_TIMEOUT_SECONDS = 10

FALLBACK_MOTIVATION: Dict[str, str] = {
    "message": "太棒了！繼續加油！",
    "encouragement": "你知道嗎？世界上第一枚郵票是 1840 年發行的黑便士。",
}

RESPONSE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "message": {"type": "STRING"},
        "encouragement": {"type": "STRING"},
    },
    "required": ["message", "encouragement"],
}


class MotivationError(Exception):
    """Raised internally when the model reply cannot be turned into a message pair."""


def fallback_motivation() -> Dict[str, str]:
    return dict(FALLBACK_MOTIVATION)


def build_prompt(stamp_index: int, total: int) -> str:
    return (
        f"User just collected stamp #{stamp_index + 1} out of {total}. "
        "Give a short, enthusiastic, one-sentence motivational message in Traditional Chinese (Taiwan). "
        'Then give a very short "Did you know?" fun fact about stamp collecting.'
    )


class MotivationFetcher:
    """Ask the text model for a message pair; every failure resolves to the fallback pair."""

    def __init__(
        self,
        api_key: Optional[str],
        model: str = DEFAULT_MODEL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        endpoint: str = GEMINI_ENDPOINT,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.api_key = (api_key or "").strip() or None
        self.model = model
        self.timeout = timeout
        self.endpoint = endpoint
        self.session = session or requests.Session()

    def fetch(self, stamp_index: int, total: int) -> Dict[str, str]:
        if not self.api_key:
            return fallback_motivation()
        try:
            return self._request(stamp_index, total)
        except Exception as exc:  # decorative text only; never surface the failure
            log_warning("Motivation fetch failed for stamp #%s: %s", stamp_index + 1, exc)
            return fallback_motivation()

    def _request(self, stamp_index: int, total: int) -> Dict[str, str]:
        url = self.endpoint.format(model=self.model)
        payload = {
            "contents": [{"parts": [{"text": build_prompt(stamp_index, total)}]}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": RESPONSE_SCHEMA,
            },
        }
        resp = self.session.post(
            url,
            params={"key": self.api_key},
            json=payload,
            timeout=self.timeout,
        )
        if resp.status_code >= 400:
            raise MotivationError(f"HTTP {resp.status_code}: {resp.text[:300]}")
        return parse_motivation(resp.json())


def parse_motivation(body: Any) -> Dict[str, str]:
    """Pull the JSON message pair out of a generateContent response body."""
    try:
        text = body["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError) as exc:
        raise MotivationError(f"Unexpected response shape: {exc!r}") from exc

    try:
        data = json.loads(text)
    except (TypeError, ValueError) as exc:
        raise MotivationError("Model reply was not JSON") from exc

    if not isinstance(data, dict):
        raise MotivationError("Model reply was not an object")
    message = data.get("message")
    encouragement = data.get("encouragement")
    if not isinstance(message, str) or not isinstance(encouragement, str):
        raise MotivationError("Model reply is missing message or encouragement")
    return {"message": message.strip(), "encouragement": encouragement.strip()}


def fetcher_from_config(config: Mapping[str, Any]) -> MotivationFetcher:
    api_key = config.get("GEMINI_API_KEY") if config.get("USE_MOTIVATION", True) else None
    return MotivationFetcher(
        api_key=api_key,
        model=config.get("GEMINI_MODEL") or DEFAULT_MODEL,
        timeout=config.get("MOTIVATION_TIMEOUT_SECONDS") or DEFAULT_TIMEOUT_SECONDS,
    )

