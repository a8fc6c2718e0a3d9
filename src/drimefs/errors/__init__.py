"""Public error exports for drimefs."""

from __future__ import annotations

from .exceptions import (
    AlreadyExistsError,
    ApiError,
    AuthError,
    CancelledError,
    CannotCopyError,
    CannotMoveError,
    CannotSetModTimeError,
    DirectoryNotEmptyError,
    DirectoryNotFoundError,
    DrimeFsError,
    HttpErrorInfo,
    InvalidArgumentError,
    InvalidResponseError,
    IsDirectoryError,
    IsFileError,
    NetworkError,
    NotADirectoryError,
    NotFoundError,
    PartialMutationError,
    PermissionError,
    RateLimitError,
    ServerError,
    TerminalError,
    TransientError,
    ValidationError,
    map_http_error,
)

__all__ = [
    "DrimeFsError",
    "InvalidArgumentError",
    "InvalidResponseError",
    "CancelledError",
    "TransientError",
    "NetworkError",
    "RateLimitError",
    "ServerError",
    "TerminalError",
    "AuthError",
    "PermissionError",
    "ValidationError",
    "AlreadyExistsError",
    "ApiError",
    "NotFoundError",
    "DirectoryNotFoundError",
    "NotADirectoryError",
    "IsDirectoryError",
    "IsFileError",
    "DirectoryNotEmptyError",
    "CannotMoveError",
    "CannotCopyError",
    "CannotSetModTimeError",
    "PartialMutationError",
    "HttpErrorInfo",
    "map_http_error",
]
