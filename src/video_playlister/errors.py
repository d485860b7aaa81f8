"""Exceptions raised by the playlist pipeline.

Front-ends catch these and turn them into user-facing messages.
"""


class PlaylisterError(Exception):
    """Base exception for all video-playlister errors."""


class AuthError(PlaylisterError):
    """Raised when Spotify rejects the client credentials or the access token."""


class NotFoundError(PlaylisterError):
    """Raised when the playlist (or the requested offset) does not exist."""


class ServerError(PlaylisterError):
    """Raised for transport failures and responses that cannot be decoded."""


class ValidationError(PlaylisterError):
    """Raised for malformed page numbers. Recovered locally by defaulting to page 1."""


class ConfigurationError(PlaylisterError):
    """Raised for missing credentials or an unknown search mode at startup."""
