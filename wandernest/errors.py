"""Exception types raised by WanderNest."""


class WanderNestError(Exception):
    """Base class for all WanderNest errors."""


class CatalogError(WanderNestError):
    """Raised when the destination catalog cannot be built from its source data."""


class IndexConfigError(WanderNestError, ValueError):
    """Raised when a fuzzy index is configured with invalid keys or options."""


class ConfigError(WanderNestError):
    """Raised when settings read from the environment are invalid."""
