"""
Health check router for observability.
"""
from fastapi import APIRouter

from cinemood.api.dependencies import get_generator_circuit_breaker
from cinemood.config import get_settings

router = APIRouter(tags=["health"])


@router.get("/health", summary="Health Check")
async def health_check() -> dict:
    """Basic health check endpoint."""
    return {"status": "healthy"}


@router.get("/health/ready", summary="Readiness Check")
async def readiness_check() -> dict:
    """
    Readiness check for Kubernetes.
    Returns circuit breaker state and which credentials are configured.
    """
    circuit_breaker = get_generator_circuit_breaker()
    missing = get_settings().missing_credentials()

    return {
        "status": "ready" if not missing else "not_ready",
        "circuit_breaker": {
            "name": circuit_breaker.name,
            "state": circuit_breaker.state.value,
        },
        "credentials": {
            "catalog": "TMDB_API_KEY" not in missing,
            "generator": "LLM_API_KEY" not in missing,
        },
    }
