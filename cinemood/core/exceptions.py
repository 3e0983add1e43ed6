"""
Custom exception hierarchy for centralized error handling.
All exceptions map to appropriate HTTP status codes.

Only ParseError and AmbiguousInputError are meant to reach API callers during
a recommendation request; catalog and generator failures are absorbed by the
services that call them.
"""
from typing import Any, Dict, Optional


class AppException(Exception):
    """Base exception for all application errors."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to API response format."""
        return {
            "error": {
                "code": self.error_code,
                "message": self.message,
                "details": self.details,
            }
        }


class AmbiguousInputError(AppException):
    """Input carried no actionable signal - the caller should ask for clarification."""

    def __init__(self, parsed: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(
            message="Mood unclear - please add a little more detail and try again",
            status_code=400,
            error_code="AMBIGUOUS",
            details={"parsed": parsed or {}},
        )


class ParseError(AppException):
    """Generator output could not be recovered into JSON."""

    def __init__(self, reason: str = "Unparseable output", raw: Optional[str] = None) -> None:
        details: Dict[str, Any] = {"reason": reason}
        if raw is not None:
            details["raw_excerpt"] = raw[:200]
        super().__init__(
            message="Could not understand that request - try rephrasing it",
            status_code=422,
            error_code="PARSE_ERROR",
            details=details,
        )
        self.reason = reason


class NotFoundError(AppException):
    """Resource not found."""

    def __init__(self, resource: str, identifier: str) -> None:
        super().__init__(
            message=f"{resource} not found: {identifier}",
            status_code=404,
            error_code="NOT_FOUND",
            details={"resource": resource, "identifier": identifier},
        )


class CatalogUnavailableError(AppException):
    """Movie catalog request failed (non-2xx, timeout, transport or bad JSON)."""

    def __init__(
        self,
        endpoint: str,
        reason: str = "Unknown",
        status: Optional[int] = None,
    ) -> None:
        super().__init__(
            message=f"Catalog request failed for {endpoint}: {reason}",
            status_code=503,
            error_code="CATALOG_UNAVAILABLE",
            details={"endpoint": endpoint, "reason": reason, "upstream_status": status},
        )
        self.endpoint = endpoint
        self.upstream_status = status


class GeneratorError(AppException):
    """Generative parser call failed or returned nothing."""

    def __init__(self, reason: str = "Unknown error") -> None:
        super().__init__(
            message=f"Generative parser error: {reason}",
            status_code=502,
            error_code="GENERATOR_ERROR",
            details={"reason": reason},
        )


class ServiceUnavailableError(AppException):
    """Dependency service is unavailable."""

    def __init__(self, service_name: str) -> None:
        super().__init__(
            message=f"Service temporarily unavailable: {service_name}",
            status_code=503,
            error_code="SERVICE_UNAVAILABLE",
            details={"service": service_name},
        )


class CircuitBreakerOpenError(AppException):
    """Circuit breaker is open - service calls blocked."""

    def __init__(self, service_name: str) -> None:
        super().__init__(
            message=f"Circuit breaker open for: {service_name}",
            status_code=503,
            error_code="CIRCUIT_BREAKER_OPEN",
            details={"service": service_name},
        )


class ConfigurationError(AppException):
    """Required credentials are missing - the affected subsystem must not start."""

    def __init__(self, missing: list) -> None:
        super().__init__(
            message=f"Missing required configuration: {', '.join(missing)}",
            status_code=500,
            error_code="CONFIGURATION_ERROR",
            details={"missing": list(missing)},
        )
        self.missing = list(missing)
