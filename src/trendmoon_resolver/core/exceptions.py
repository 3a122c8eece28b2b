"""Custom exceptions for the Trendmoon resolver."""


class ResolverError(Exception):
    """Base exception for resolver operations."""

    pass


class SourceUnavailableError(ResolverError):
    """Raised when the remote lookup service cannot deliver a list."""

    def __init__(self, source_id: str, message: str = ""):
        self.source_id = source_id
        super().__init__(message or f"Source unavailable: {source_id}")


class CacheCorruptError(ResolverError):
    """Raised when a snapshot or fallback file cannot be read."""

    def __init__(self, path: str, message: str = ""):
        self.path = path
        super().__init__(message or f"Unreadable cache file: {path}")


class ConfigurationError(ResolverError):
    """Raised when resolver configuration is invalid."""

    pass


class CacheUnavailableError(ResolverError):
    """Raised when an operation needs an initialized cache and none exists."""

    def __init__(self, reason: str | None = None):
        self.reason = reason
        message = "Entity cache is not initialized"
        if reason:
            message += f": {reason}"
        super().__init__(message)
