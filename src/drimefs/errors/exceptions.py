"""Exception hierarchy and HTTP error mapping for drimefs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


class DrimeFsError(Exception):
    """
    Base exception for drimefs.

    Attributes:
        details: Optional structured information (e.g., HTTP status, path).
        cause: Optional original exception that triggered this error.
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.details = details or {}
        self.cause = cause


class InvalidArgumentError(DrimeFsError):
    """Raised when caller-supplied arguments are invalid."""


class InvalidResponseError(DrimeFsError):
    """Raised when the service returns a body that cannot be decoded."""


class CancelledError(DrimeFsError):
    """Raised when the caller's context is done before any attempt was made."""


# ----------------------------
# Retryable (pacer absorbs these until retries run out)
# ----------------------------
class TransientError(DrimeFsError):
    """Base for failures that are worth another attempt."""


class NetworkError(TransientError):
    """Raised when network/timeout issues prevent the request."""


class RateLimitError(TransientError):
    """Raised when rate-limited (HTTP 429)."""


class ServerError(TransientError):
    """Raised for server-side failures (HTTP 5xx)."""


# ----------------------------
# Terminal (never retried)
# ----------------------------
class TerminalError(DrimeFsError):
    """Base for failures that must be surfaced immediately."""


class AuthError(TerminalError):
    """Raised when authentication fails (HTTP 401, missing credentials)."""


class PermissionError(TerminalError):
    """Raised when access is denied (HTTP 403)."""


class ValidationError(TerminalError):
    """Raised when the service rejects a request semantically (HTTP 422)."""


class AlreadyExistsError(ValidationError):
    """Raised when a folder creation is rejected because the name is taken."""


class ApiError(TerminalError):
    """Raised for unclassified client errors (unknown 4xx, etc.)."""


class NotFoundError(TerminalError):
    """Raised when a path or id is absent remotely (HTTP 404 or walk miss)."""


class DirectoryNotFoundError(NotFoundError):
    """Raised when a directory path does not resolve."""


# ----------------------------
# Filesystem vocabulary
# ----------------------------
class NotADirectoryError(DrimeFsError):
    """Raised when a folder was expected but a file was found."""


class IsDirectoryError(DrimeFsError):
    """Raised when a file was expected but a folder was found."""


class IsFileError(DrimeFsError):
    """Raised when a directory operation targets a file."""


class DirectoryNotEmptyError(DrimeFsError):
    """Raised when removing a folder that still has children."""


class CannotMoveError(DrimeFsError):
    """Raised when a move cannot be performed server-side."""


class CannotCopyError(DrimeFsError):
    """Raised for copies; the service has no server-side copy."""


class CannotSetModTimeError(DrimeFsError):
    """Raised when asked to change a modification time."""


class PartialMutationError(DrimeFsError):
    """
    Raised when a multi-step mutation committed its first step only.

    Attributes:
        entry_id: Id of the entry that was mutated.
        committed: Name of the step that committed (e.g. "move").
        intermediate_path: Path at which the entry now lives.
    """

    def __init__(
        self,
        message: str,
        *,
        entry_id: int,
        committed: str,
        intermediate_path: str,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(
            message,
            details={
                "entry_id": entry_id,
                "committed": committed,
                "intermediate_path": intermediate_path,
            },
            cause=cause,
        )
        self.entry_id = entry_id
        self.committed = committed
        self.intermediate_path = intermediate_path


@dataclass(frozen=True)
class HttpErrorInfo:
    """Lightweight HTTP error information for mapping to drimefs exceptions."""

    status_code: int
    reason: str | None = None
    message: str | None = None
    details: dict[str, Any] | None = None


def map_http_error(
    info: HttpErrorInfo,
    *,
    cause: Optional[BaseException] = None,
) -> DrimeFsError:
    """
    Map an HTTP error to a drimefs exception.

    Policy:
        - 401 -> AuthError
        - 403 -> PermissionError
        - 404 -> NotFoundError
        - 422 -> ValidationError
        - 429 -> RateLimitError
        - 5xx -> ServerError
        - otherwise -> ApiError
    """
    details: dict[str, Any] = {
        "status_code": info.status_code,
        "reason": info.reason,
    }
    if info.details:
        details.update(info.details)

    message = info.message or f"HTTP error {info.status_code}"

    if info.status_code == 401:
        return AuthError(message, details=details, cause=cause)
    if info.status_code == 403:
        return PermissionError(message, details=details, cause=cause)
    if info.status_code == 404:
        return NotFoundError(message, details=details, cause=cause)
    if info.status_code == 422:
        return ValidationError(message, details=details, cause=cause)
    if info.status_code == 429:
        return RateLimitError(message, details=details, cause=cause)
    if 500 <= info.status_code <= 599:
        return ServerError(message, details=details, cause=cause)

    return ApiError(message, details=details, cause=cause)
