"""Pytest configuration and fixtures for integration tests.

Loads .env from the project root and skips every test when GEMINI_API_KEY
is not configured. Rate limiting is relaxed so repeated runs do not trip it.
"""

import os
import pytest
from dotenv import load_dotenv
from pathlib import Path


def pytest_configure(config):
    """Load .env before collection and register the integration marker."""
    env_path = Path(__file__).parent.parent.parent / ".env"
    load_dotenv(env_path)

    os.environ.setdefault("RATE_LIMIT_MAX_REQUESTS", "1000")

    print("\n" + "=" * 70)
    print("Note: These tests call the live Gemini API (GEMINI_API_KEY required)")
    print(f"Environment loaded from: {env_path}")
    print("=" * 70 + "\n")


@pytest.fixture(scope="session", autouse=True)
def check_api_keys():
    """Skip the session if GEMINI_API_KEY is missing."""
    if not os.getenv("GEMINI_API_KEY"):
        pytest.skip(
            "Integration tests skipped. Missing API key: GEMINI_API_KEY. Please set it in your .env file.",
            allow_module_level=True,
        )
