"""
Custom exception hierarchy for qbit-remote.
Callers can tell "not logged in" from "server unreachable" from
"server returned unexpected data" by exception type alone.
"""

from typing import Optional


class QbitRemoteError(Exception):
    """Base exception for all qbit-remote errors."""

    def __init__(self, message: str, details: str | None = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


# Configuration errors
class ConfigurationError(QbitRemoteError):
    """Raised when there's a configuration problem."""

    pass


# Authorization errors
class AuthorizationError(QbitRemoteError):
    """Raised when there is no active session or the login was rejected."""

    def __init__(self, message: str = "Not logged in", details: str | None = None):
        super().__init__(message, details)


class LoginFailedError(AuthorizationError):
    """Raised when the login endpoint does not answer with ``Ok.``."""

    def __init__(self, body: str, status: Optional[int] = None):
        super().__init__("Login rejected", f"HTTP {status}, body {body!r}")
        self.body = body
        self.status = status


# Transport errors
class TransportError(QbitRemoteError):
    """Raised on network failure, timeout or a non-2xx response."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        reason: Optional[str] = None,
    ):
        super().__init__(message)
        self.status = status
        self.reason = reason


# Decode errors
class DecodeError(QbitRemoteError):
    """Raised when a response body does not have the expected shape."""

    def __init__(self, message: str, body: Optional[str] = None):
        super().__init__(message)
        self.body = body


# Validation errors
class ValidationError(QbitRemoteError):
    """Raised when a request builder is given an invalid configuration."""

    pass


class EmptyUploadError(ValidationError):
    """Raised when an upload has neither URLs nor torrent files."""

    def __init__(self, message: str = "Either urls or torrent files must be set"):
        super().__init__(message)


class TorrentFileError(ValidationError):
    """Raised when a torrent file cannot be read from disk."""

    def __init__(self, path: str, details: str | None = None):
        super().__init__(f"Cannot read torrent file {path}", details)
        self.path = path
