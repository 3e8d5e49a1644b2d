"""
Domain exceptions for the movie catalog.

These carry no HTTP knowledge; the API layer maps them to responses.
"""

from typing import Optional


class CatalogError(Exception):
    """Base class for all catalog errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ConfigError(CatalogError):
    """A required configuration value is missing or invalid."""


class TokenError(CatalogError):
    """A token could not be validated."""


class ExpiredError(TokenError):
    """The token's expiry claim is in the past."""


class InvalidSignatureError(TokenError):
    """Bad signature, malformed token, or unexpected signing method."""


class ContextMissingError(CatalogError):
    """Identity was read before authentication populated it."""


class StoreError(CatalogError):
    """A database operation failed or timed out."""


class DuplicateKeyError(StoreError):
    """An insert or update collided with a unique key."""


class UpstreamError(CatalogError):
    """The text-generation call failed."""


class UpstreamParseError(UpstreamError):
    """The text-generation response did not have the expected shape."""

    def __init__(self, message: str, raw_response: Optional[str] = None):
        super().__init__(message)
        self.raw_response = raw_response
