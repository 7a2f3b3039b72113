"""Exceptions raised by data source reads."""


class DataSourceError(Exception):
    """Base exception for data source failures."""
    pass


class DataSourceConfigError(DataSourceError, ValueError):
    """Raised when selectors are missing, conflicting or malformed."""
    pass


class DataSourceNotFoundError(DataSourceError):
    """Raised when no remote entity matches the selector."""
    pass
