"""API routers package."""
from .health import router as health_router
from .movies import router as movies_router
from .parse import router as parse_router
from .recommendations import router as recommendations_router

__all__ = ["health_router", "movies_router", "parse_router", "recommendations_router"]
