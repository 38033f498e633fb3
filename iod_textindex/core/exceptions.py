"""Error type raised by the text index clients.

Every failure surfaced by a client call is an ``IodErrorException``: transport
problems, non-2xx responses, error-flagged bodies and malformed payloads alike.
The ``category`` attribute tells them apart, and ``errors`` carries the
structured server errors when the response body contained any.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from iod_textindex.domain.models import IodError


class ErrorCategory(str, Enum):
    """Where a failure originated."""

    REQUEST = "request"
    TRANSPORT = "transport"
    SERVER = "server"
    RESPONSE = "response"


class IodErrorException(Exception):
    """Domain error for every failed text index operation.

    Attributes:
        message: Human-readable error message
        error_code: Client-side error code (e.g. ``HTTP_500``, ``TRANSPORT_TIMEOUT``)
        category: Error category for classification
        http_status: HTTP status of the response, ``None`` if none was received
        errors: Server-reported errors parsed from the response body
        details: Additional context (dict)
        retryable: Whether repeating the call may succeed
    """

    def __init__(
        self,
        message: str,
        error_code: str,
        category: ErrorCategory,
        http_status: Optional[int] = None,
        errors: Optional[list[IodError]] = None,
        details: Optional[dict[str, Any]] = None,
        retryable: bool = False,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.category = category
        self.http_status = http_status
        self.errors = list(errors or [])
        self.details = details or {}
        self.retryable = retryable

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dict suitable for structured logs.

        Returns:
            Dict containing the error fields and serialised server errors
        """
        return {
            "code": self.error_code,
            "message": self.message,
            "category": self.category.value,
            "status": self.http_status,
            "errors": [e.model_dump(by_alias=True, exclude_none=True) for e in self.errors],
            "details": self.details,
            "retryable": self.retryable,
        }

    @classmethod
    def invalid_request(cls, message: str, **details: Any) -> "IodErrorException":
        return cls(
            message=message,
            error_code="INVALID_REQUEST",
            category=ErrorCategory.REQUEST,
            details=details,
        )

    @classmethod
    def transport(cls, exc: Exception, *, timeout: bool = False) -> "IodErrorException":
        error_type = "timeout" if timeout else "error"
        return cls(
            message=f"Transport {error_type}: {exc}",
            error_code=f"TRANSPORT_{error_type.upper()}",
            category=ErrorCategory.TRANSPORT,
            details={"exception": type(exc).__name__},
            retryable=timeout,
        )

    @classmethod
    def server(
        cls,
        http_status: int,
        errors: list[IodError],
        *,
        detail: Optional[str] = None,
    ) -> "IodErrorException":
        if errors:
            first = errors[0]
            summary = first.reason or first.message or f"error {first.error}"
        else:
            summary = detail or "no error details"
        return cls(
            message=f"Server returned HTTP {http_status}: {summary}",
            error_code=f"HTTP_{http_status}",
            category=ErrorCategory.SERVER,
            http_status=http_status,
            errors=errors,
            details={"detail": detail} if detail else None,
            retryable=http_status >= 500,
        )

    @classmethod
    def malformed(
        cls,
        reason: str,
        *,
        http_status: Optional[int] = None,
        body: Optional[str] = None,
    ) -> "IodErrorException":
        details: dict[str, Any] = {"reason": reason}
        if body:
            details["body"] = body[:500]
        return cls(
            message=f"Malformed response: {reason}",
            error_code="MALFORMED_RESPONSE",
            category=ErrorCategory.RESPONSE,
            http_status=http_status,
            details=details,
        )
