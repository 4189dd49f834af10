from __future__ import annotations


class CacheServiceError(Exception):
    """Base error for the cache service."""


class InvalidConfigError(CacheServiceError):
    """Raised when a cache is constructed with invalid options."""


class InvalidPatternError(CacheServiceError):
    """Raised when a key pattern cannot be compiled."""


class ValidationError(CacheServiceError):
    """Raised when user input is invalid."""


class ExternalServiceError(CacheServiceError):
    """Raised when an upstream HTTP service fails."""


class NotFoundError(CacheServiceError):
    """Raised when a requested resource is not found."""
