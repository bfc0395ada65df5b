from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol

import httpx

from app.errors import UpstreamError
from config.settings import Settings


logger = logging.getLogger("portal.assistant")

# Status reported when the request never got an HTTP answer.
NETWORK_FAILURE_STATUS = 502
NETWORK_FAILURE_MESSAGE = "Could not reach the Gemini API."


@dataclass(frozen=True)
class GenerationParams:
    temperature: float = 0.7
    max_output_tokens: int = 800


class LanguageService(Protocol):
    """Single request/response call to a generative-language backend.

    Returns the reply text, ``None`` when the backend answered successfully
    but produced no usable text, and raises ``UpstreamError`` otherwise.
    """

    def send(self, prompt: str, params: GenerationParams) -> Optional[str]:
        ...


def _extract_reply(data: Any) -> Optional[str]:
    if not isinstance(data, dict):
        return None
    candidates = data.get("candidates")
    if not isinstance(candidates, list) or not candidates or not isinstance(candidates[0], dict):
        return None
    content = candidates[0].get("content")
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list) or not parts or not isinstance(parts[0], dict):
        return None
    text = parts[0].get("text")
    return text if isinstance(text, str) and text else None


def _extract_error_message(data: Any) -> Optional[str]:
    if not isinstance(data, dict):
        return None
    error = data.get("error")
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    return None


class GeminiClient:
    """Calls the Gemini ``generateContent`` REST endpoint once per prompt.

    No retries: a failed call is reported back to the caller, never repeated.
    """

    def __init__(self, settings: Settings):
        self._settings = settings

    @property
    def endpoint(self) -> str:
        return f"{self._settings.gemini_base_url}/models/{self._settings.gemini_model}:generateContent"

    def build_payload(self, prompt: str, params: GenerationParams) -> Dict[str, Any]:
        return {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": params.temperature,
                "maxOutputTokens": params.max_output_tokens,
            },
        }

    def send(self, prompt: str, params: GenerationParams) -> Optional[str]:
        payload = self.build_payload(prompt, params)
        try:
            with httpx.Client(timeout=self._settings.gemini_timeout) as client:
                response = client.post(
                    self.endpoint,
                    json=payload,
                    headers={
                        "Content-Type": "application/json",
                        "x-goog-api-key": self._settings.gemini_api_key or "",
                    },
                )
        except httpx.RequestError as exc:
            logger.error("Gemini request failed: %s: %s", exc.__class__.__name__, exc)
            raise UpstreamError(NETWORK_FAILURE_STATUS, NETWORK_FAILURE_MESSAGE) from exc

        try:
            data = response.json()
        except ValueError:
            data = None

        if not 200 <= response.status_code < 300:
            logger.error(
                "Gemini API error status=%s body=%s",
                response.status_code,
                json.dumps(data, indent=2) if data is not None else response.text[:2000],
            )
            raise UpstreamError(response.status_code, _extract_error_message(data))

        reply = _extract_reply(data)
        if reply is None:
            logger.warning("Gemini returned no candidate text (status=%s)", response.status_code)
        return reply
