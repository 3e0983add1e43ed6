"""Core infrastructure components."""
from .cache import InMemoryCache
from .circuit_breaker import CircuitBreaker, CircuitState
from .exceptions import (
    AmbiguousInputError,
    AppException,
    CatalogUnavailableError,
    CircuitBreakerOpenError,
    ConfigurationError,
    GeneratorError,
    NotFoundError,
    ParseError,
    ServiceUnavailableError,
)

__all__ = [
    "AmbiguousInputError",
    "AppException",
    "CatalogUnavailableError",
    "CircuitBreaker",
    "CircuitBreakerOpenError",
    "CircuitState",
    "ConfigurationError",
    "GeneratorError",
    "InMemoryCache",
    "NotFoundError",
    "ParseError",
    "ServiceUnavailableError",
]
