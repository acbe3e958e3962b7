"""Custom exceptions for the dashboard."""


class DashboardError(Exception):
    """Base exception for dashboard errors."""
    pass


class DataError(DashboardError):
    """Raised when price or stock data is missing, invalid, or unreachable."""
    pass


class CacheError(DashboardError):
    """Raised when caching operations fail."""
    pass


class ConfigError(DashboardError):
    """Raised when settings cannot be loaded or are invalid."""
    pass
