"""
Configuration module for the Zipplign backend.

Loads environment variables and validates required settings.
"""
import logging
import os
from typing import List

from dotenv import load_dotenv

# Load .env file
load_dotenv()

logger = logging.getLogger(__name__)


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """Application settings loaded from environment variables."""

    # Supabase Configuration
    SUPABASE_URL: str = os.getenv("SUPABASE_URL", "")
    SUPABASE_PUBLISHABLE_KEY: str = os.getenv("SUPABASE_PUBLISHABLE_KEY", "")

    # JWT Verification uses Supabase JWT Signing Keys (ES256 with JWKS)
    @property
    def SUPABASE_JWKS_URL(self) -> str:
        """Get the JWKS URL for JWT verification."""
        if not self.SUPABASE_URL:
            return ""
        return f"{self.SUPABASE_URL}/auth/v1/.well-known/jwks.json"

    # Google Gemini API
    GOOGLE_API_KEY: str = os.getenv("GOOGLE_API_KEY", "")

    # Recommendation flow
    RECOMMENDATION_MODEL: str = os.getenv("RECOMMENDATION_MODEL", "gemini-2.5-flash")
    RECOMMENDATION_TEMPERATURE: float = float(os.getenv("RECOMMENDATION_TEMPERATURE", "0.2"))
    # Set to false for providers/models without schema-constrained generation
    RECOMMENDATION_STRUCTURED_OUTPUT: bool = _env_bool("RECOMMENDATION_STRUCTURED_OUTPUT", "true")
    RECOMMENDATION_TIMEOUT_SECONDS: float = float(os.getenv("RECOMMENDATION_TIMEOUT_SECONDS", "30"))

    # Trending hashtags
    TRENDING_TAGS_TTL_SECONDS: int = int(os.getenv("TRENDING_TAGS_TTL_SECONDS", "300"))
    TRENDING_WINDOW_DAYS: int = int(os.getenv("TRENDING_WINDOW_DAYS", "7"))

    # Application Settings
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # CORS Settings (production only; other environments allow all origins)
    CORS_ALLOWED_ORIGINS: List[str] = [
        origin.strip()
        for origin in os.getenv("CORS_ALLOWED_ORIGINS", "").split(",")
        if origin.strip()
    ]

    @classmethod
    def validate(cls) -> None:
        """
        Validate that all required settings are configured.

        Raises:
            ValueError: If any required setting is missing.
        """
        required_settings = {
            "SUPABASE_URL": cls.SUPABASE_URL,
            "SUPABASE_PUBLISHABLE_KEY": cls.SUPABASE_PUBLISHABLE_KEY,
            "GOOGLE_API_KEY": cls.GOOGLE_API_KEY,
        }

        missing = [key for key, value in required_settings.items() if not value]

        if missing:
            raise ValueError(
                f"Missing required environment variables: {', '.join(missing)}. "
                "Please check your .env file."
            )

    @classmethod
    def is_production(cls) -> bool:
        """Check if running in production environment."""
        return cls.ENVIRONMENT.lower() == "production"

    @classmethod
    def is_development(cls) -> bool:
        """Check if running in development environment."""
        return cls.ENVIRONMENT.lower() == "development"


# Create a singleton instance
settings = Settings()

# Validate settings on module import (fail fast if misconfigured).
# Skipped during tests via VALIDATE_CONFIG=false.
if os.getenv("VALIDATE_CONFIG", "true").lower() == "true":
    try:
        settings.validate()
    except ValueError as e:
        # In development, warn but don't crash
        if settings.is_development():
            logger.warning(f"{e} The app may not work correctly until you configure your .env file.")
        else:
            raise
