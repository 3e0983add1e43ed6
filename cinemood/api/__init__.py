"""API package - FastAPI routes and dependencies."""
from .dependencies import get_movie_details_service, get_recommendation_service
from .routers import health_router, movies_router, parse_router, recommendations_router

__all__ = [
    "get_movie_details_service",
    "get_recommendation_service",
    "health_router",
    "movies_router",
    "parse_router",
    "recommendations_router",
]
