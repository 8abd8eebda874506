"""Pytest configuration and fixtures for integration tests.

Ensures environment variables are loaded and skips the live tests when no
Gemini API key is configured.
"""

import os
from pathlib import Path

import pytest
from dotenv import load_dotenv


def pytest_configure(config):
    """Load .env before collection and keep live runs small.

    A live run should fail fast rather than wait through the full backoff
    schedule, so the retry budget and delays are reduced unless set explicitly.
    """
    env_path = Path(__file__).parent.parent.parent / ".env"
    load_dotenv(env_path)

    os.environ.setdefault("MAX_RETRIES", "2")
    os.environ.setdefault("RETRY_BASE_DELAY", "0.5")
    os.environ.setdefault("RETRY_MAX_JITTER", "0.5")

    print("\n" + "=" * 70)
    print("Note: These tests require a valid GEMINI_API_KEY")
    print(f"Environment loaded from: {env_path}")
    print(f"  - Model: {os.getenv('GEMINI_MODEL', 'gemini-2.5-flash-preview-09-2025')}")
    print(f"  - Max attempts: {os.environ['MAX_RETRIES']}")
    print("=" * 70 + "\n")


@pytest.fixture(scope="session", autouse=True)
def check_api_keys():
    """Skip every integration test if GEMINI_API_KEY is not configured."""
    if not os.getenv("GEMINI_API_KEY"):
        pytest.skip(
            "Integration tests skipped. Missing API key: GEMINI_API_KEY. Please set it in your .env file.",
            allow_module_level=True,
        )
