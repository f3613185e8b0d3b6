"""
Enumeration types for the IPv6 connectivity checker.

These enums provide type-safe constants for statuses, test outcomes,
error codes, and configuration options throughout the system.
"""

from enum import Enum
from typing import Optional


class IPv6Status(Enum):
    """Overall IPv6 adoption status of an endpoint."""

    UNKNOWN = "unknown"
    NONE = "none"
    PARTIAL = "partial"
    FULL = "full"


class TestResult(Enum):
    """Outcome of a single connectivity test.

    Persisted as ``true`` / ``false`` / ``null``.
    """

    __test__ = False

    CONFIRMED = True
    REFUTED = False
    UNEVALUATED = None

    @classmethod
    def from_bool(cls, value: Optional[bool]) -> "TestResult":
        """Map a stored tri-state value onto the enum."""
        if value is None:
            return cls.UNEVALUATED
        return cls.CONFIRMED if value else cls.REFUTED

    def to_bool(self) -> Optional[bool]:
        return self.value

    @property
    def works(self) -> bool:
        return self is TestResult.CONFIRMED


class ProvidedForm(Enum):
    """Which form of hostname an endpoint URL was given in."""

    APEX = "apex"
    WWW = "www"
    SUBDOMAIN = "subdomain"


class VariantKind(Enum):
    """The hostname variants that are probed for an endpoint."""

    APEX = "apex"
    WWW = "www"


class LogLevel(Enum):
    """Logging severity levels."""

    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


class ProbeErrorCode(Enum):
    """Named error classifications for HTTP probes.

    Socket-level failures are reported by their errno name instead
    (e.g. ``ECONNREFUSED``).
    """

    TIMEOUT = "TIMEOUT"
    TLS_ERROR = "TLS_ERROR"
    CONNECT_ERROR = "CONNECT_ERROR"
    INVALID_URL = "INVALID_URL"
    NO_HOSTNAME = "NO_HOSTNAME"
    PROTOCOL_ERROR = "PROTOCOL_ERROR"
