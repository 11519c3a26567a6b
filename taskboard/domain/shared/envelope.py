"""
Result envelope returned by every client operation.

Mirrors the API wire shape:
    {"success": true, "data": ..., "status": 200}
    {"success": false, "error": "...", "code": "NOT_FOUND"}
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class ErrorCode(str, Enum):
    """Closed set of failure classifications surfaced to callers."""

    TIMEOUT = "TIMEOUT"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    OFFLINE = "OFFLINE"
    NOT_FOUND = "NOT_FOUND"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    SERVER_ERROR = "SERVER_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class ResultEnvelope(BaseModel):
    """
    Uniform success/failure wrapper.

    Build instances with ``ok`` / ``fail`` rather than directly.

    Example:
        >>> env = ResultEnvelope.ok([{"id": "1"}])
        >>> assert env.success and env.status == 200
        >>> bad = ResultEnvelope.fail(ErrorCode.NOT_FOUND, "Resource not found")
        >>> assert bad.to_dict()["code"] == "NOT_FOUND"
    """

    model_config = ConfigDict(frozen=True)

    success: bool = Field(..., description="Whether the operation succeeded")
    data: Any = Field(None, description="Payload on success")
    status: Optional[int] = Field(None, description="HTTP status on success")
    error: Optional[str] = Field(None, description="Human readable failure")
    code: Optional[ErrorCode] = Field(None, description="Machine readable failure")

    @classmethod
    def ok(cls, data: Any, status: int = 200) -> ResultEnvelope:
        """Successful result."""
        return cls(success=True, data=data, status=status)

    @classmethod
    def fail(cls, code: ErrorCode, error: str) -> ResultEnvelope:
        """Failed result."""
        return cls(success=False, error=error, code=code)

    def to_dict(self) -> dict[str, Any]:
        """Wire representation with only the keys of its variant."""
        if self.success:
            return {"success": True, "data": self.data, "status": self.status}
        return {
            "success": False,
            "error": self.error,
            "code": self.code.value if self.code else ErrorCode.UNKNOWN_ERROR.value,
        }
