from __future__ import annotations
from enum import Enum


class ErrorKind(str, Enum):
    MISSING_IDENTITY    = "MissingIdentity"
    IDENTITY_NOT_FOUND  = "IdentityNotFound"
    TRANSPORT_ERROR     = "TransportError"
    CACHE_WRITE_FAILURE = "CacheWriteFailure"


class GitmarksError(Exception):
    """Base class for every error the core raises. Carries an ErrorKind."""
    kind: ErrorKind

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class MissingIdentity(GitmarksError):
    """No usable identity in the input. No session is ever started."""
    kind = ErrorKind.MISSING_IDENTITY


class IdentityNotFound(GitmarksError):
    """Upstream answered 404 for the identity."""
    kind = ErrorKind.IDENTITY_NOT_FOUND

    def __init__(self, identity: str) -> None:
        super().__init__(f'User "{identity}" not found.')
        self.identity = identity


class TransportError(GitmarksError):
    """Any other non-success response or network-level failure."""
    kind = ErrorKind.TRANSPORT_ERROR

    def __init__(self, message: str = "Error fetching data from github.com.", status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class CacheWriteFailure(GitmarksError):
    """Persisting a snapshot failed. Never fatal to the in-memory rows."""
    kind = ErrorKind.CACHE_WRITE_FAILURE
