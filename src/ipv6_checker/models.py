"""
Data models for the IPv6 connectivity checker.

This module defines the registry structures (endpoints, IPv6 records and
their connectivity tests), the derived hostname variants, and the
ephemeral probe results produced during a run.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from .enums import IPv6Status, ProvidedForm, TestResult, VariantKind


APEX_TEST_ID = "apex_domain"
WWW_TEST_ID = "www_domain"


@dataclass
class ConnectivityTest:
    """A named connectivity test stored on an endpoint."""

    id: str
    name: str
    description: str
    result: TestResult = TestResult.UNEVALUATED
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass
class IPv6Record:
    """IPv6 state of an endpoint."""

    status: IPv6Status = IPv6Status.UNKNOWN
    notes: Optional[str] = None
    last_checked: Optional[str] = None
    tests: list[ConnectivityTest] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)

    def get_test(self, test_id: str) -> Optional[ConnectivityTest]:
        for test in self.tests:
            if test.id == test_id:
                return test
        return None


@dataclass
class Endpoint:
    """A monitored endpoint in the registry."""

    id: str
    name: str
    url: str
    ipv6: IPv6Record = field(default_factory=IPv6Record)
    category: Optional[str] = None
    description: Optional[str] = None
    extra: dict[str, Any] = field(default_factory=dict)  # unknown keys, kept verbatim


@dataclass
class Registry:
    """The full set of endpoints plus any other top-level document keys."""

    endpoints: list[Endpoint] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)

    def get(self, endpoint_id: str) -> Optional[Endpoint]:
        for endpoint in self.endpoints:
            if endpoint.id == endpoint_id:
                return endpoint
        return None


@dataclass(frozen=True)
class DomainVariant:
    """Hostnames derived from an endpoint URL. Not persisted."""

    apex: Optional[str]
    www: Optional[str]
    provided_form: Optional[ProvidedForm]

    @property
    def is_valid(self) -> bool:
        return self.apex is not None

    def hostname_for(self, kind: VariantKind) -> Optional[str]:
        return self.apex if kind == VariantKind.APEX else self.www

    def kinds(self) -> list[VariantKind]:
        """Variant kinds that apply to this endpoint."""
        kinds = [VariantKind.APEX]
        if self.www is not None:
            kinds.append(VariantKind.WWW)
        return kinds


@dataclass(frozen=True)
class DNSLookup:
    """Outcome of a single address-record lookup."""

    has_records: bool
    addresses: tuple[str, ...] = ()


@dataclass(frozen=True)
class HTTPProbeResult:
    """Outcome of a single HTTP reachability attempt."""

    success: bool
    status_code: Optional[int] = None
    error: Optional[str] = None
    response_time_ms: float = 0.0


@dataclass(frozen=True)
class ProbeResult:
    """Combined DNS and HTTP observations for one hostname."""

    hostname: Optional[str]
    has_aaaa: bool
    has_a: bool
    http_works: bool
    error: Optional[str] = None
    addresses: tuple[str, ...] = ()
    http_status_code: Optional[int] = None
    overrides: tuple[str, ...] = ()  # reasons of applied overrides

    @property
    def works(self) -> bool:
        """Both DNS presence and HTTP reachability are required."""
        return self.has_aaaa and self.http_works

    @property
    def dual_stack(self) -> bool:
        return self.has_aaaa and self.has_a


@dataclass
class StatusMismatch:
    """Advisory difference between the stored and the suggested status."""

    endpoint_id: str
    current: IPv6Status
    suggested: IPv6Status


@dataclass
class EndpointReport:
    """What happened to one endpoint during a run."""

    endpoint_id: str
    name: str
    url: str
    variant: DomainVariant
    probes: dict[VariantKind, ProbeResult]
    apex_result: TestResult
    www_result: Optional[TestResult]
    previous_status: IPv6Status
    status: IPv6Status
    dirty: bool
    changes: list[str] = field(default_factory=list)
    mismatch: Optional[StatusMismatch] = None
    overrides_applied: list[str] = field(default_factory=list)
