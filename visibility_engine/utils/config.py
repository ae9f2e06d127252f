"""
Configuration Management

Uses Pydantic Settings for environment-based configuration.
Loads from .env file automatically.
"""

from typing import List, Optional
from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # Model used for profiling, validation, alias enrichment and confirmation
    ANTHROPIC_API_KEY: Optional[str] = None
    CLAUDE_MODEL: str = "claude-sonnet-4-20250514"

    # Providers that answer the scan queries
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_MODEL: str = "gpt-4o-mini"
    GEMINI_API_KEY: Optional[str] = None
    GEMINI_MODEL: str = "gemini-1.5-flash"
    ACTIVE_PROVIDERS: str = "openai,claude"

    # Application Settings
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    DATABASE_URL: Optional[str] = None

    # Limits
    DEFAULT_PLAN: str = "free"
    MAX_QUERIES_PER_SCAN: Optional[int] = None

    # Timeouts
    API_TIMEOUT: int = 60
    SCAN_TIMEOUT: int = 600

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"  # Ignore extra fields in .env file
        case_sensitive = False  # Allow both UPPERCASE and lowercase

    @property
    def active_providers(self) -> List[str]:
        """Active provider names, lowercased, in declared order."""
        return [p.strip().lower() for p in self.ACTIVE_PROVIDERS.split(",") if p.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get or create cached settings instance."""
    return Settings()
