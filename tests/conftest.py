"""Shared fixtures for the portal API tests."""

import os
from typing import List, Optional, Tuple

import pytest
from fastapi.testclient import TestClient

# Importing app.main builds the default app; keep it off any real database.
os.environ["MONGO_URL"] = ""

from accounts.store import InMemoryAccountStore  # noqa: E402
from app.main import create_app  # noqa: E402
from assistant.gemini import GenerationParams  # noqa: E402
from config.settings import Settings  # noqa: E402


class FakeUpstream:
    """Records every prompt and answers with a canned reply or error."""

    def __init__(self, reply: Optional[str] = "PCOS is...", error: Optional[Exception] = None):
        self.reply = reply
        self.error = error
        self.calls: List[Tuple[str, GenerationParams]] = []

    def send(self, prompt: str, params: GenerationParams) -> Optional[str]:
        self.calls.append((prompt, params))
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def settings() -> Settings:
    # Low bcrypt cost keeps the suite fast; the default cost is checked separately.
    return Settings(
        gemini_api_key="test-key",
        bcrypt_rounds=4,
        api_prefix="",
        cors_origins=["*"],
        mongo_url=None,
    )


@pytest.fixture
def store() -> InMemoryAccountStore:
    return InMemoryAccountStore()


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def client(settings, store, upstream) -> TestClient:
    return TestClient(create_app(settings, store=store, upstream=upstream))
