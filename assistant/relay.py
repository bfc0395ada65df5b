from __future__ import annotations

import logging
from typing import Optional

from pydantic import BaseModel

from app.errors import ConfigurationError, ValidationError
from assistant.gemini import GenerationParams, LanguageService
from assistant.prompt import FALLBACK_REPLY, build_prompt
from config.settings import Settings


logger = logging.getLogger("portal.assistant")


class ChatRequest(BaseModel):
    message: Optional[str] = None


class AssistantRelay:
    """Forwards one user question to the language service and returns its reply.

    Stateless: nothing about the exchange is kept after ``reply`` returns.
    """

    def __init__(self, upstream: LanguageService, settings: Settings):
        self._upstream = upstream
        self._settings = settings

    @property
    def params(self) -> GenerationParams:
        return GenerationParams(
            temperature=self._settings.temperature,
            max_output_tokens=self._settings.max_output_tokens,
        )

    def reply(self, message: Optional[str]) -> str:
        if not message:
            raise ValidationError("message is required")
        if not self._settings.gemini_api_key:
            raise ConfigurationError("upstream credential missing")

        logger.info("Incoming chat: message_len=%s model=%s", len(message), self._settings.gemini_model)
        text = self._upstream.send(build_prompt(message), self.params)
        if text is None:
            return FALLBACK_REPLY
        logger.info("Model responded: %s chars", len(text))
        return text
