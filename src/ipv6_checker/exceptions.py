"""
Exception classes for the IPv6 connectivity checker.

All exceptions inherit from IPv6CheckerError and provide structured
error information with codes, messages, and optional details.

Probe failures (DNS resolution errors, connection errors, timeouts) are
never raised; they are folded into probe results. Only configuration and
registry store problems surface as exceptions.
"""

from typing import Optional


class IPv6CheckerError(Exception):
    """Base exception for all IPv6 checker errors."""

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[dict] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"

    def to_dict(self) -> dict:
        """Convert exception to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(IPv6CheckerError):
    """Raised when a configuration file or option cannot be used."""

    pass


class PersistenceError(IPv6CheckerError):
    """Raised when the registry store cannot be read, parsed or written."""

    pass


class RegistryError(PersistenceError):
    """Raised when the registry content is structurally unusable (e.g. duplicate ids)."""

    pass
