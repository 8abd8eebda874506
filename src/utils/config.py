"""Configuration management for Recipe Chef.

Loads environment variables from system environment and .env file.
Priority order: system environment > .env file > hardcoded defaults
"""

import os

from dotenv import load_dotenv


# Load .env file (if exists, silently continues if missing)
load_dotenv()


class Config:
    """Application configuration loaded from environment variables."""

    def __init__(self) -> None:
        """Initialize configuration from environment variables."""
        self.GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
        # Model used for recipe generation (generateContent endpoint)
        self.GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.5-flash-preview-09-2025")
        # REST root for the Generative Language API, without trailing slash
        self.GEMINI_API_BASE_URL: str = os.getenv(
            "GEMINI_API_BASE_URL", "https://generativelanguage.googleapis.com/v1beta"
        ).rstrip("/")
        # Temperature: Controls randomness (0.0 = deterministic, 2.0 = max randomness)
        # For recipes: 0.7 leaves room for creative dishes
        self.TEMPERATURE: float = float(os.getenv("TEMPERATURE", "0.7"))

        # Retry Configuration - handles transient API failures
        # MAX_RETRIES: Total number of attempts per generation (HTTP 400 is never retried)
        self.MAX_RETRIES: int = int(os.getenv("MAX_RETRIES", "5"))
        # RETRY_BASE_DELAY: Delay in seconds before the second attempt, doubled on each retry
        # (a base below 1.0 makes the i-th wait shorter than 2**i seconds)
        self.RETRY_BASE_DELAY: float = float(os.getenv("RETRY_BASE_DELAY", "1.0"))
        # RETRY_MAX_JITTER: Upper bound in seconds of the random delay added to each wait,
        # at most RETRY_BASE_DELAY so successive waits keep increasing
        self.RETRY_MAX_JITTER: float = float(os.getenv("RETRY_MAX_JITTER", "1.0"))
        # REQUEST_TIMEOUT_SECONDS: Total timeout of a single HTTP attempt
        self.REQUEST_TIMEOUT_SECONDS: float = float(os.getenv("REQUEST_TIMEOUT_SECONDS", "60"))

    def validate(self) -> None:
        """Validate required configuration.

        Raises:
            ValueError: If the API key is missing or invalid values provided.
        """
        if not self.GEMINI_API_KEY:
            raise ValueError("GEMINI_API_KEY environment variable is required")
        if not self.GEMINI_MODEL:
            raise ValueError("GEMINI_MODEL must not be empty")
        if not self.GEMINI_API_BASE_URL.startswith(("http://", "https://")):
            raise ValueError(
                f"GEMINI_API_BASE_URL must be an http(s) URL, got: {self.GEMINI_API_BASE_URL}"
            )
        if not (0.0 <= self.TEMPERATURE <= 2.0):
            raise ValueError(
                f"TEMPERATURE must be between 0.0 and 2.0, got: {self.TEMPERATURE}"
            )
        if self.MAX_RETRIES < 1:
            raise ValueError(
                f"MAX_RETRIES must be at least 1, got: {self.MAX_RETRIES}"
            )
        if self.RETRY_BASE_DELAY <= 0:
            raise ValueError(
                f"RETRY_BASE_DELAY must be greater than 0, got: {self.RETRY_BASE_DELAY}"
            )
        if self.RETRY_MAX_JITTER < 0:
            raise ValueError(
                f"RETRY_MAX_JITTER must not be negative, got: {self.RETRY_MAX_JITTER}"
            )
        if self.RETRY_MAX_JITTER > self.RETRY_BASE_DELAY:
            raise ValueError(
                f"RETRY_MAX_JITTER ({self.RETRY_MAX_JITTER}) must not exceed "
                f"RETRY_BASE_DELAY ({self.RETRY_BASE_DELAY})"
            )
        if self.REQUEST_TIMEOUT_SECONDS <= 0:
            raise ValueError(
                f"REQUEST_TIMEOUT_SECONDS must be greater than 0, got: {self.REQUEST_TIMEOUT_SECONDS}"
            )


# Module-level config instance; entry points call config.validate()
config = Config()
