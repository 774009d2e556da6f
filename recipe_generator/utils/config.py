"""Configuration management for Recipe Generator.

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
        # Default: gemini-1.5-flash
        self.GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-1.5-flash")
        # Temperature: Controls randomness (0.0 = deterministic, 2.0 = max randomness)
        self.TEMPERATURE: float = float(os.getenv("TEMPERATURE", "0.7"))
        # Max Output Tokens: upper bound on completion length
        self.MAX_OUTPUT_TOKENS: int = int(os.getenv("MAX_OUTPUT_TOKENS", "2048"))
        # Server
        self.HOST: str = os.getenv("HOST", "0.0.0.0")
        self.PORT: int = int(os.getenv("PORT", "8000"))
        # Comma-separated list of allowed CORS origins. Default: "*"
        self.CORS_ORIGINS: list[str] = [
            origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()
        ]
        # Maximum combined length of ingredients + steps
        self.MAX_INPUT_CHARS: int = int(os.getenv("MAX_INPUT_CHARS", "30000"))
        # Rate limiting: fixed window counter per client key
        self.RATE_LIMIT_MAX_REQUESTS: int = int(os.getenv("RATE_LIMIT_MAX_REQUESTS", "20"))
        self.RATE_LIMIT_WINDOW_SECONDS: int = int(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "3600"))
        # Bucket shared by clients with neither a forwarding header nor a peer address
        self.RATE_LIMIT_FALLBACK_KEY: str = os.getenv("RATE_LIMIT_FALLBACK_KEY", "unknown")
        # How often (seconds) to check whether the client went away while the model is generating
        self.DISCONNECT_POLL_SECONDS: float = float(os.getenv("DISCONNECT_POLL_SECONDS", "0.5"))

    def validate(self, require_api_key: bool = True) -> None:
        """Validate configuration.

        Args:
            require_api_key: Whether GEMINI_API_KEY must be set. Disabled when a
                generation client is injected (tests, offline runs).

        Raises:
            ValueError: If required API keys are missing or invalid values provided.
        """
        if require_api_key and not self.GEMINI_API_KEY:
            raise ValueError("GEMINI_API_KEY environment variable is required")
        if not self.GEMINI_MODEL:
            raise ValueError("GEMINI_MODEL must not be empty")
        if not (0.0 <= self.TEMPERATURE <= 2.0):
            raise ValueError(
                f"TEMPERATURE must be between 0.0 and 2.0, got: {self.TEMPERATURE}"
            )
        if self.MAX_OUTPUT_TOKENS < 256:
            raise ValueError(
                f"MAX_OUTPUT_TOKENS must be at least 256, got: {self.MAX_OUTPUT_TOKENS}"
            )
        if not (1 <= self.PORT <= 65535):
            raise ValueError(f"PORT must be between 1 and 65535, got: {self.PORT}")
        if self.MAX_INPUT_CHARS < 1:
            raise ValueError(
                f"MAX_INPUT_CHARS must be at least 1, got: {self.MAX_INPUT_CHARS}"
            )
        if self.RATE_LIMIT_MAX_REQUESTS < 1:
            raise ValueError(
                f"RATE_LIMIT_MAX_REQUESTS must be at least 1, got: {self.RATE_LIMIT_MAX_REQUESTS}"
            )
        if self.RATE_LIMIT_WINDOW_SECONDS < 1:
            raise ValueError(
                f"RATE_LIMIT_WINDOW_SECONDS must be at least 1 second, got: {self.RATE_LIMIT_WINDOW_SECONDS}"
            )
        if not self.RATE_LIMIT_FALLBACK_KEY:
            raise ValueError("RATE_LIMIT_FALLBACK_KEY must not be empty")
        if self.DISCONNECT_POLL_SECONDS <= 0:
            raise ValueError(
                f"DISCONNECT_POLL_SECONDS must be positive, got: {self.DISCONNECT_POLL_SECONDS}"
            )


# Module-level config instance (validated by the entry points, not at import)
config = Config()
