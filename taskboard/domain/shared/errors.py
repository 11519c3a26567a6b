"""
Domain exceptions.

Typed exceptions for explicit error handling inside the client.
None of these cross the request facade: they are classified into
result envelopes at that boundary.
"""

from __future__ import annotations

from typing import Optional


# ═══════════════════════════════════════════════════════════
# BASE EXCEPTION
# ═══════════════════════════════════════════════════════════


class DomainError(Exception):
    """
    Base exception for all client errors.

    All client-specific exceptions inherit from this.
    Allows catching all client errors with single except clause.
    """

    pass


# ═══════════════════════════════════════════════════════════
# LOCAL EXCEPTIONS
# ═══════════════════════════════════════════════════════════


class ValidationError(DomainError):
    """
    Input validation failed before any network call.

    Raised when:
    - Required identifier missing
    - Project fields invalid (name, dates, status, users)

    Example:
        >>> raise ValidationError("Project ID is required")
    """

    def __init__(self, message: str, errors: Optional[list[str]] = None) -> None:
        super().__init__(message)
        self.errors = list(errors or [message])


class OfflineError(DomainError):
    """
    Client reports no connectivity.

    Example:
        >>> raise OfflineError("No internet connection")
    """

    pass


# ═══════════════════════════════════════════════════════════
# EXTERNAL SERVICE EXCEPTIONS
# ═══════════════════════════════════════════════════════════


class ExternalServiceError(DomainError):
    """
    API call failed.

    Base class for all transport-level failures.

    Raised when:
    - API call fails
    - Network error
    - Service unavailable
    """

    pass


class RequestTimeoutError(ExternalServiceError):
    """
    API call exceeded its deadline.

    Raised when:
    - Request exceeds timeout
    - No response within deadline

    Example:
        >>> raise RequestTimeoutError("GET /projects timed out after 10s")
    """

    pass


class ApiConnectionError(ExternalServiceError):
    """
    Server could not be reached.

    Raised when:
    - DNS resolution or TCP connect fails
    - Connection dropped mid-request

    Example:
        >>> raise ApiConnectionError("Cannot connect to localhost:3000")
    """

    pass


class HttpStatusError(ExternalServiceError):
    """
    Server answered with a non-2xx status.

    Example:
        >>> err = HttpStatusError(404, "Not Found")
        >>> assert err.status == 404
        >>> str(HttpStatusError(400, "Bad Request", detail="Name taken"))
        'HTTP 400: Name taken'
    """

    def __init__(self, status: int, reason: str = "", detail: Optional[str] = None) -> None:
        super().__init__(f"HTTP {status}: {detail or reason}".rstrip(": "))
        self.status = status
        self.reason = reason
        self.detail = detail

    @property
    def is_server_error(self) -> bool:
        """5xx responses."""
        return self.status >= 500


class InvalidResponseError(ExternalServiceError):
    """
    Response body is not the JSON the API promises.

    Raised when:
    - Body is not valid JSON
    - Envelope is malformed

    Example:
        >>> raise InvalidResponseError("Response body is not valid JSON")
    """

    pass
