"""
Exception types shared across the service.
"""


class ValidationError(ValueError):
    """Raised for malformed input, before any I/O is attempted."""


class InvalidFidError(ValidationError):
    """A FID that is not a positive integer, or an empty FID list."""


class InvalidCursorError(ValidationError):
    """A pagination cursor that cannot be decoded."""


class ProviderError(Exception):
    """A reputation provider batch call failed."""

    def __init__(self, provider, message):
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.message = message


class QueryExecutionError(Exception):
    """A database query could not be executed."""
