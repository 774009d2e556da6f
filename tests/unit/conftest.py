"""Shared fixtures for unit tests.

Unit tests never call Gemini: generation clients are in-memory stubs.
"""

import json
from typing import Optional

import pytest
from fastapi.testclient import TestClient

from recipe_generator.api.app import create_app
from recipe_generator.pipeline.errors import ProviderError
from recipe_generator.pipeline.rate_limiter import RateLimiter
from recipe_generator.utils.config import Config


PANCAKES = {
    "name": "Simple Pancakes",
    "servings": "2",
    "prepTime": "5",
    "cookTime": "15",
    "ingredients": ["2 eggs", "1 cup flour"],
    "instructions": ["Mix ingredients", "Bake until golden"],
}

PANCAKE_COMPLETION = "```json\n" + json.dumps(PANCAKES, separators=(",", ":")) + "\n```"


class StubGenerationClient:
    """Returns a canned completion (or raises) and records every prompt."""

    def __init__(self, completion: str = PANCAKE_COMPLETION, error: Optional[Exception] = None) -> None:
        self.completion = completion
        self.error = error
        self.prompts: list[str] = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.completion


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def pancakes() -> dict:
    return dict(PANCAKES)


@pytest.fixture
def stub_client() -> StubGenerationClient:
    return StubGenerationClient()


@pytest.fixture
def failing_client() -> StubGenerationClient:
    return StubGenerationClient(error=ProviderError("Gemini request failed: 503 UNAVAILABLE"))


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings(monkeypatch) -> Config:
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("RATE_LIMIT_MAX_REQUESTS", raising=False)
    monkeypatch.delenv("RATE_LIMIT_WINDOW_SECONDS", raising=False)
    monkeypatch.delenv("MAX_INPUT_CHARS", raising=False)
    return Config()


@pytest.fixture
def app_client(settings, stub_client):
    """TestClient over an app wired to the stub generation client."""
    app = create_app(settings, generation_client=stub_client, rate_limiter=RateLimiter())
    with TestClient(app) as client:
        yield client


@pytest.fixture
def make_stub_client():
    """Factory for stub clients with a custom completion or error."""
    return StubGenerationClient
