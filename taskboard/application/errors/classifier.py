"""
Failure classification.

Maps any raised error to the closed ErrorCode taxonomy with a
user-facing message. Never raises.
"""

from dataclasses import dataclass

from taskboard.domain.shared.envelope import ErrorCode, ResultEnvelope
from taskboard.domain.shared.errors import (
    ApiConnectionError,
    HttpStatusError,
    OfflineError,
    RequestTimeoutError,
    ValidationError,
)

MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.TIMEOUT: "Timeout: the request took too long",
    ErrorCode.CONNECTION_ERROR: "Connection error: cannot reach the server",
    ErrorCode.OFFLINE: "No internet connection",
    ErrorCode.NOT_FOUND: "Resource not found",
    ErrorCode.UNAUTHORIZED: "Unauthorized: check your credentials",
    ErrorCode.FORBIDDEN: "Access denied: insufficient permissions",
    ErrorCode.SERVER_ERROR: "Internal server error",
    ErrorCode.VALIDATION_ERROR: "Invalid data",
    ErrorCode.UNKNOWN_ERROR: "Unknown error",
}

_STATUS_CODES = {
    400: ErrorCode.VALIDATION_ERROR,
    401: ErrorCode.UNAUTHORIZED,
    403: ErrorCode.FORBIDDEN,
    404: ErrorCode.NOT_FOUND,
}


@dataclass(frozen=True)
class ClassifiedError:
    """Code and message for one failure."""

    code: ErrorCode
    message: str

    def to_envelope(self) -> ResultEnvelope:
        return ResultEnvelope.fail(self.code, self.message)


def _status_code(status: int) -> ErrorCode:
    if status >= 500:
        return ErrorCode.SERVER_ERROR
    return _STATUS_CODES.get(status, ErrorCode.UNKNOWN_ERROR)


def classify(error: BaseException, *, online: bool = True) -> ClassifiedError:
    """Classify a failure.

    Precedence: local validation, offline state, timeout, connection
    failure, HTTP status, then UNKNOWN_ERROR.

    Args:
        error: Raised exception
        online: Current connectivity

    Returns:
        ClassifiedError usable directly in a ResultEnvelope

    Example:
        >>> classify(HttpStatusError(403)).code
        <ErrorCode.FORBIDDEN: 'FORBIDDEN'>
    """
    if isinstance(error, ValidationError):
        message = MESSAGES[ErrorCode.VALIDATION_ERROR]
        if error.errors:
            message = f"{message}: {', '.join(error.errors)}"
        return ClassifiedError(ErrorCode.VALIDATION_ERROR, message)

    if not online or isinstance(error, OfflineError):
        return ClassifiedError(ErrorCode.OFFLINE, MESSAGES[ErrorCode.OFFLINE])

    if isinstance(error, RequestTimeoutError):
        return ClassifiedError(ErrorCode.TIMEOUT, MESSAGES[ErrorCode.TIMEOUT])

    if isinstance(error, ApiConnectionError):
        return ClassifiedError(ErrorCode.CONNECTION_ERROR, MESSAGES[ErrorCode.CONNECTION_ERROR])

    if isinstance(error, HttpStatusError):
        code = _status_code(error.status)
        if code is ErrorCode.UNKNOWN_ERROR:
            return ClassifiedError(code, str(error))
        if code is ErrorCode.VALIDATION_ERROR and error.detail:
            return ClassifiedError(code, f"{MESSAGES[code]}: {error.detail}")
        return ClassifiedError(code, MESSAGES[code])

    try:
        message = str(error).strip()
    except Exception:  # noqa: BLE001
        message = ""
    return ClassifiedError(ErrorCode.UNKNOWN_ERROR, message or MESSAGES[ErrorCode.UNKNOWN_ERROR])
