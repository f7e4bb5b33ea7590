"""Custom exceptions for the chapter resolver domain."""


class ResolverError(Exception):
    """Base exception for this project."""


class ConfigError(ResolverError):
    """Raised when runtime configuration is invalid."""


class NetworkError(ResolverError):
    """Raised when a page cannot be fetched or decoded."""


class NoResults(ResolverError):
    """Raised when a search page parses to zero candidate rows."""


class NoChaptersFound(ResolverError):
    """Raised when a detail page has no chapter table or an empty one."""
