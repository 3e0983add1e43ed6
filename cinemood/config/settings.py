"""
Centralized configuration using Pydantic BaseSettings.
All credentials and tunables are loaded here - no hardcoded values in services.
"""
from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "CineMood Recommendation API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Movie catalog (TMDB)
    TMDB_API_KEY: Optional[str] = None
    TMDB_BASE_URL: str = "https://api.themoviedb.org/3"
    TMDB_IMAGE_BASE_URL: str = "https://image.tmdb.org/t/p/w500"
    TMDB_TIMEOUT_SEC: float = 8.0
    TMDB_LANGUAGE: str = "en-US"
    TMDB_MIN_VOTE_COUNT: int = 5

    # Discovery
    DISCOVERY_PAGES: int = 4  # Hard-capped at 4 by the discovery service
    DISCOVERY_RESULT_CAP: int = 60
    TRAILER_LOOKUP_ENABLED: bool = True
    TRAILER_LOOKUP_LIMIT: int = 30

    # Reranking
    RERANK_RESULT_CAP: int = 50
    RERANK_ENFORCE_LIMIT: bool = False

    # Generative parser (OpenAI-compatible chat completions endpoint)
    LLM_API_KEY: Optional[str] = None
    LLM_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta/openai/"
    LLM_MODEL: str = "gemini-2.5-pro"
    LLM_TIMEOUT_SEC: float = 20.0
    LLM_TEMPERATURE: float = 0.8
    LLM_TOP_P: float = 0.95
    LLM_MAX_TOKENS: int = 800

    # Circuit Breaker (generative parser)
    CIRCUIT_BREAKER_FAILURE_THRESHOLD: int = 5
    CIRCUIT_BREAKER_RECOVERY_TIMEOUT_SEC: int = 30

    # Cache TTLs (seconds)
    MOVIE_DETAILS_TTL_SEC: int = 3600  # 1 hour

    # Randomness - set to make sort/page selection, swaps and rotation reproducible
    RANDOM_SEED: Optional[int] = None

    # Telemetry
    ENABLE_OTEL: bool = False  # Default to False to prevent gRPC errors in dev
    ENABLE_PROMETHEUS: bool = True

    class Config:
        env_file = ".env"
        case_sensitive = True

    def missing_credentials(self) -> List[str]:
        """Names of required credentials that are not configured."""
        missing = []
        if not self.TMDB_API_KEY:
            missing.append("TMDB_API_KEY")
        if not self.LLM_API_KEY:
            missing.append("LLM_API_KEY")
        return missing


@lru_cache()
def get_settings() -> Settings:
    """Cached settings instance - singleton pattern."""
    return Settings()
