"""Error types for Scell SDK."""

from enum import Enum
from typing import Any, Mapping, Optional


class ErrorKind(str, Enum):
    """Kind of failure carried by every SDK error."""

    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    VALIDATION = "validation"
    RATE_LIMITED = "rate_limited"
    NOT_FOUND = "not_found"
    INSUFFICIENT_BALANCE = "insufficient_balance"
    SERVER = "server"
    NETWORK = "network"
    TIMEOUT = "timeout"
    CANCELLED = "cancelled"
    UNKNOWN = "unknown"


_STATUS_KINDS = {
    401: ErrorKind.AUTHENTICATION,
    402: ErrorKind.INSUFFICIENT_BALANCE,
    403: ErrorKind.AUTHORIZATION,
    404: ErrorKind.NOT_FOUND,
    422: ErrorKind.VALIDATION,
    429: ErrorKind.RATE_LIMITED,
}


def kind_for_status(status_code: int) -> ErrorKind:
    """Map an HTTP status code to an error kind."""
    if status_code in _STATUS_KINDS:
        return _STATUS_KINDS[status_code]
    if status_code >= 500:
        return ErrorKind.SERVER
    return ErrorKind.UNKNOWN


class ScellError(Exception):
    """Base error class for Scell SDK."""

    def __init__(
        self,
        message: str,
        *,
        kind: ErrorKind = ErrorKind.UNKNOWN,
        status_code: int = 0,
        code: Optional[str] = None,
        details: Optional[Any] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.status_code = status_code
        self.code = code
        self.details = details

    def __str__(self) -> str:
        if self.status_code and self.code:
            return f"scell: {self.message} (HTTP {self.status_code}, code: {self.code})"
        if self.status_code:
            return f"scell: {self.message} (HTTP {self.status_code})"
        return f"scell: {self.message}"

    def is_unauthorized(self) -> bool:
        """Check if this is an authentication error."""
        return self.kind is ErrorKind.AUTHENTICATION

    def is_forbidden(self) -> bool:
        """Check if this is an authorization error."""
        return self.kind is ErrorKind.AUTHORIZATION

    def is_not_found(self) -> bool:
        """Check if this is a not found error."""
        return self.kind is ErrorKind.NOT_FOUND

    def is_rate_limited(self) -> bool:
        """Check if this is a rate limit error."""
        return self.kind is ErrorKind.RATE_LIMITED

    def is_server_error(self) -> bool:
        """Check if this is a server error."""
        return self.kind is ErrorKind.SERVER


class APIError(ScellError):
    """Error returned by the Scell API."""

    def __init__(
        self,
        message: str,
        status_code: int,
        code: Optional[str] = None,
        details: Optional[Any] = None,
        *,
        kind: Optional[ErrorKind] = None,
    ) -> None:
        super().__init__(
            message,
            kind=kind if kind is not None else kind_for_status(status_code),
            status_code=status_code,
            code=code,
            details=details,
        )

    @classmethod
    def from_response(
        cls,
        status_code: int,
        body: Any,
        headers: Optional[Mapping[str, str]] = None,
    ) -> "APIError":
        """Create the matching error from an API response."""
        if isinstance(body, dict):
            message = body.get("message") or body.get("error") or f"HTTP {status_code}"
            code = body.get("code")
            errors = body.get("errors")
        else:
            message = str(body) if body else f"HTTP {status_code}"
            code = None
            errors = None

        kind = kind_for_status(status_code)
        if kind is ErrorKind.VALIDATION:
            return ValidationError(
                message,
                errors=errors if isinstance(errors, dict) else {},
                code=code,
                details=body,
            )
        if kind is ErrorKind.RATE_LIMITED:
            retry_after = parse_retry_after(headers.get("Retry-After") if headers else None)
            return RateLimitError(message, retry_after=retry_after, code=code, details=body)
        return cls(message, status_code, code=code, details=body)


class ValidationError(APIError):
    """Request was rejected with field-level validation errors (422)."""

    def __init__(
        self,
        message: str,
        errors: Optional[dict[str, list[str]]] = None,
        code: Optional[str] = None,
        details: Optional[Any] = None,
    ) -> None:
        super().__init__(message, 422, code=code, details=details)
        self.errors = errors or {}

    def all_messages(self) -> list[str]:
        """Get all error messages as a flat list."""
        return [message for messages in self.errors.values() for message in messages]

    def field_errors(self, field: str) -> list[str]:
        """Get error messages for a specific field."""
        return self.errors.get(field, [])

    def has_field_error(self, field: str) -> bool:
        """Check if a specific field has errors."""
        return bool(self.errors.get(field))


class RateLimitError(APIError):
    """Request quota exceeded (429)."""

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        retry_after: Optional[int] = None,
        code: Optional[str] = None,
        details: Optional[Any] = None,
    ) -> None:
        super().__init__(message, 429, code=code, details=details)
        self.retry_after = retry_after


class NetworkError(ScellError):
    """Transport-level connectivity failure."""

    def __init__(self, message: str, original_error: Optional[BaseException] = None) -> None:
        super().__init__(message, kind=ErrorKind.NETWORK, code="NETWORK_ERROR")
        self.original_error = original_error


class RequestTimeoutError(ScellError):
    """Request did not complete within its timeout."""

    def __init__(self, message: str = "Request timed out") -> None:
        super().__init__(message, kind=ErrorKind.TIMEOUT, code="TIMEOUT")


class RequestCancelledError(ScellError):
    """Operation was cancelled through a cancellation token."""

    def __init__(self, message: str = "Operation cancelled") -> None:
        super().__init__(message, kind=ErrorKind.CANCELLED, code="CANCELLED")


def parse_retry_after(value: Optional[str]) -> Optional[int]:
    """Parse a Retry-After header given in whole seconds."""
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None
