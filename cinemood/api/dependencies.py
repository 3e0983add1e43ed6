"""
Dependency injection container.
Creates and wires all application components.
Uses FastAPI's dependency injection system.
"""
import random
from functools import lru_cache

from cinemood.config import get_settings
from cinemood.core.cache import InMemoryCache
from cinemood.core.circuit_breaker import CircuitBreaker
from cinemood.core.exceptions import ConfigurationError
from cinemood.models.schemas import MovieDetails
from cinemood.services.discovery import DiscoveryService
from cinemood.services.generator import OpenAICompatibleGenerator
from cinemood.services.movies import MovieDetailsService
from cinemood.services.parser import QueryParser
from cinemood.services.recommendations import RecommendationService
from cinemood.services.reranker import Reranker
from cinemood.services.tmdb import TMDBClient


# =============================================================================
# Singleton Instances (Application Lifetime)
# =============================================================================


@lru_cache()
def get_random_source() -> random.Random:
    """Shared random source, seeded when RANDOM_SEED is set."""
    return random.Random(get_settings().RANDOM_SEED)


@lru_cache()
def get_catalog_client() -> TMDBClient:
    """Get singleton TMDB client."""
    return TMDBClient(get_settings())


@lru_cache()
def get_text_generator() -> OpenAICompatibleGenerator:
    """Get singleton generative client."""
    return OpenAICompatibleGenerator(get_settings())


@lru_cache()
def get_generator_circuit_breaker() -> CircuitBreaker:
    """Get singleton circuit breaker for the generative parser."""
    settings = get_settings()
    return CircuitBreaker(
        name="generative_parser",
        failure_threshold=settings.CIRCUIT_BREAKER_FAILURE_THRESHOLD,
        recovery_timeout_sec=settings.CIRCUIT_BREAKER_RECOVERY_TIMEOUT_SEC,
    )


@lru_cache()
def get_query_parser() -> QueryParser:
    """Get singleton query parser."""
    return QueryParser(
        generator=get_text_generator(),
        circuit_breaker=get_generator_circuit_breaker(),
        rng=get_random_source(),
    )


@lru_cache()
def get_discovery_service() -> DiscoveryService:
    """Get singleton discovery service."""
    settings = get_settings()
    return DiscoveryService(
        catalog=get_catalog_client(),
        rng=get_random_source(),
        min_vote_count=settings.TMDB_MIN_VOTE_COUNT,
        language=settings.TMDB_LANGUAGE,
        result_cap=settings.DISCOVERY_RESULT_CAP,
        trailer_lookup_enabled=settings.TRAILER_LOOKUP_ENABLED,
        trailer_lookup_limit=settings.TRAILER_LOOKUP_LIMIT,
    )


@lru_cache()
def get_reranker() -> Reranker:
    """Get singleton reranker."""
    settings = get_settings()
    return Reranker(
        rng=get_random_source(),
        image_base_url=settings.TMDB_IMAGE_BASE_URL,
        result_cap=settings.RERANK_RESULT_CAP,
        enforce_limit=settings.RERANK_ENFORCE_LIMIT,
    )


@lru_cache()
def get_movie_details_cache() -> InMemoryCache[MovieDetails]:
    """Get singleton movie details cache."""
    return InMemoryCache(default_ttl_seconds=get_settings().MOVIE_DETAILS_TTL_SEC)


# =============================================================================
# Request-Scoped Dependencies (Per-Request Lifetime)
# =============================================================================


def get_recommendation_service() -> RecommendationService:
    """
    Get recommendation service with all dependencies wired.
    This is the main entry point for the recommendation and parse endpoints.
    """
    return RecommendationService(
        parser=get_query_parser(),
        discovery=get_discovery_service(),
        reranker=get_reranker(),
        discovery_pages=get_settings().DISCOVERY_PAGES,
    )


def get_movie_details_service() -> MovieDetailsService:
    """Get movie details service backed by the shared cache."""
    settings = get_settings()
    return MovieDetailsService(
        catalog=get_catalog_client(),
        cache=get_movie_details_cache(),
        image_base_url=settings.TMDB_IMAGE_BASE_URL,
    )


# =============================================================================
# Startup / Cleanup Functions
# =============================================================================


def verify_configuration() -> None:
    """
    Fail fast when credentials are missing.

    Raises:
        ConfigurationError: Listing every missing credential
    """
    missing = get_settings().missing_credentials()
    if missing:
        raise ConfigurationError(missing)
    get_recommendation_service()


async def close_clients() -> None:
    """Close network clients that were created, then drop every singleton."""
    if get_catalog_client.cache_info().currsize:
        await get_catalog_client().close()
    if get_text_generator.cache_info().currsize:
        await get_text_generator().close()
    clear_caches()


def clear_caches() -> None:
    """Clear all cached singleton instances (for testing)."""
    get_random_source.cache_clear()
    get_catalog_client.cache_clear()
    get_text_generator.cache_clear()
    get_generator_circuit_breaker.cache_clear()
    get_query_parser.cache_clear()
    get_discovery_service.cache_clear()
    get_reranker.cache_clear()
    get_movie_details_cache.cache_clear()
