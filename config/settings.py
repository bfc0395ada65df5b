from __future__ import annotations

import os
from functools import lru_cache
from typing import Any, List, Optional

from dotenv import load_dotenv


load_dotenv()


def _env_list(name: str, default: str) -> List[str]:
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


class Settings:
    """Application settings loaded from environment variables.

    Keep all credentials and config centralized here. Keyword overrides win
    over the environment, which is how tests build isolated instances.
    """

    def __init__(self, **overrides: Any) -> None:
        self.app_env: str = os.getenv("APP_ENV", "development")
        self.port: int = int(os.getenv("PORT", "5000"))
        self.api_prefix: str = os.getenv("API_PREFIX", "").rstrip("/")
        self.cors_origins: List[str] = _env_list("CORS_ORIGINS", "*")
        self.log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()

        self.gemini_api_key: Optional[str] = (
            os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY") or None
        )
        self.gemini_model: str = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
        self.gemini_base_url: str = os.getenv(
            "GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta"
        ).rstrip("/")
        self.temperature: float = float(os.getenv("MODEL_TEMPERATURE", "0.7"))
        self.max_output_tokens: int = int(os.getenv("MODEL_MAX_OUTPUT_TOKENS", "800"))
        self.gemini_timeout: float = float(os.getenv("GEMINI_TIMEOUT", "60"))

        self.mongo_url: Optional[str] = os.getenv("MONGO_URL") or None
        self.mongo_db: str = os.getenv("MONGO_DB", "portal")
        self.store_backend: str = os.getenv("STORE_BACKEND", "mongo").lower()
        self.bcrypt_rounds: int = int(os.getenv("BCRYPT_ROUNDS", "10"))

        for key, value in overrides.items():
            if not hasattr(self, key):
                raise AttributeError(f"Unknown setting: {key}")
            setattr(self, key, value)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
