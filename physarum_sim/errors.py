"""Exceptions raised by the physarum simulation."""


class ConfigurationError(ValueError):
    """Raised for invalid simulation parameters, before any step runs."""
