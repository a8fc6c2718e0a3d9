"""drimefs public API."""

from __future__ import annotations

from drimefs.auth import AuthInfo
from drimefs.cache import PathCache, PathResolver
from drimefs.config import Config
from drimefs.controller import DrimeController
from drimefs.errors import (
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
from drimefs.filesystem import Directory, DrimeFs, RemoteObject
from drimefs.models import ContentStream, Entry, RangeOption, SeekOption
from drimefs.mutation import MutationCoordinator
from drimefs.pacer import Context, Pacer

__all__ = [
    # High-level
    "DrimeFs",
    "Directory",
    "RemoteObject",
    "Config",
    "AuthInfo",
    # Core
    "DrimeController",
    "PathCache",
    "PathResolver",
    "MutationCoordinator",
    "Pacer",
    "Context",
    # Models
    "Entry",
    "RangeOption",
    "SeekOption",
    "ContentStream",
    # Errors
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
