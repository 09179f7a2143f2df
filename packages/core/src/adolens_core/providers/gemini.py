from __future__ import annotations

import requests

from adolens_core.exceptions import ModelCallFailed
from adolens_core.providers.base import BaseReviewer

GEMINI_API_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"

SAFETY_SETTINGS = [
    {"category": "HARM_CATEGORY_HARASSMENT", "threshold": "BLOCK_NONE"},
    {"category": "HARM_CATEGORY_HATE_SPEECH", "threshold": "BLOCK_NONE"},
    {"category": "HARM_CATEGORY_SEXUALLY_EXPLICIT", "threshold": "BLOCK_NONE"},
    {"category": "HARM_CATEGORY_DANGEROUS_CONTENT", "threshold": "BLOCK_NONE"},
]


def first_candidate_text(data: dict) -> str:
    """Text of the first part of the first candidate, or "" when the reply has none."""
    try:
        return data["candidates"][0]["content"]["parts"][0].get("text") or ""
    except (KeyError, IndexError, TypeError, AttributeError):
        return ""


class GeminiReviewer(BaseReviewer):
    MODEL = "gemini-2.5-flash-lite"
    TEMPERATURE = 0.3

    def __init__(self, api_key: str, session: requests.Session | None = None, **kwargs):
        super().__init__(**kwargs)
        if not api_key:
            raise ValueError("A Gemini API key is required.")
        self.api_key = api_key
        self.session = session or requests.Session()

    def _call_api(self, prompt: str, model: str) -> str:
        payload = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {"temperature": self.TEMPERATURE, "maxOutputTokens": self.MAX_TOKENS},
            "safetySettings": SAFETY_SETTINGS,
        }
        try:
            response = self.session.post(
                GEMINI_API_URL.format(model=model),
                params={"key": self.api_key},
                json=payload,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise ModelCallFailed(f"Could not reach the review model: {e}") from e

        if not response.ok:
            raise ModelCallFailed(self._error_message(response), status_code=response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            raise ModelCallFailed(f"Review model returned invalid JSON: {e}") from e
        return first_candidate_text(data)

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        try:
            message = (response.json().get("error") or {}).get("message")
        except (ValueError, AttributeError):
            message = None
        return message or f"API error: {response.status_code}"
