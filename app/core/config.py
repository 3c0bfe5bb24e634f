"""Configuration management for the Capability Readiness Engine."""

from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file (only if accessible)
try:
    load_dotenv()
except (PermissionError, OSError):
    # Sandboxed environments may not expose .env; variables are set directly
    pass


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    # Supabase configuration (required)
    SUPABASE_URL: str = Field(..., description="Supabase project URL")
    SUPABASE_SERVICE_ROLE_KEY: str = Field(..., description="Supabase service role key")

    # Environment
    CAPABILITY_ENGINE_ENV: str = Field(
        default="dev", description="Environment: dev, staging, prod, test"
    )

    # Scale and evidence lookups
    DEFAULT_SCALE_ID: Optional[str] = Field(
        default=None,
        description="Proficiency scale to load when a request names none (built-in 5-level scale if unset)",
    )
    MAX_EVIDENCE_ROWS: int = Field(
        default=1000, description="Max evidence rows fetched per employee"
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings instance

    Raises:
        ValidationError: If required environment variables are missing
    """
    return Settings()
