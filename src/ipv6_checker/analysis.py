"""
Registry analysis and run summaries.

Read-only views over the registry: the per-run summary printed after a
probing pass, and the status analysis table comparing each endpoint's
stored status with the status its test results suggest.
"""

from dataclasses import dataclass, field
from typing import Optional

from .enums import IPv6Status, TestResult
from .models import APEX_TEST_ID, WWW_TEST_ID, EndpointReport, IPv6Record, Registry
from .status_engine import StatusEngine


@dataclass
class RunSummary:
    """Aggregate figures for a registry after a probing pass."""

    total: int
    apex_working: int
    www_working: int
    status_counts: dict[IPv6Status, int] = field(default_factory=dict)
    changed: int = 0
    written: bool = False

    @property
    def apex_percentage(self) -> int:
        return _percentage(self.apex_working, self.total)

    @property
    def www_percentage(self) -> int:
        return _percentage(self.www_working, self.total)


def _percentage(part: int, total: int) -> int:
    if total == 0:
        return 0
    return round(part / total * 100)


def _test_works(record: IPv6Record, test_id: str) -> bool:
    test = record.get_test(test_id)
    return test is not None and test.result is TestResult.CONFIRMED


def summarize_run(
    registry: Registry,
    reports: Optional[list[EndpointReport]] = None,
    written: bool = False,
) -> RunSummary:
    """Compute the summary figures for ``registry``."""
    counts = {status: 0 for status in IPv6Status}
    for endpoint in registry.endpoints:
        counts[endpoint.ipv6.status] += 1

    return RunSummary(
        total=len(registry.endpoints),
        apex_working=sum(1 for e in registry.endpoints if _test_works(e.ipv6, APEX_TEST_ID)),
        www_working=sum(1 for e in registry.endpoints if _test_works(e.ipv6, WWW_TEST_ID)),
        status_counts=counts,
        changed=sum(1 for r in reports or [] if r.dirty),
        written=written,
    )


@dataclass
class StatusAnalysisRow:
    """One line of the status analysis table."""

    endpoint_id: str
    name: str
    current: IPv6Status
    apex: bool
    www: Optional[bool]  # None when the endpoint has no www test
    suggested: IPv6Status

    @property
    def mismatch(self) -> bool:
        return self.current != self.suggested


def analyze_registry(
    registry: Registry,
    status_engine: Optional[StatusEngine] = None,
) -> list[StatusAnalysisRow]:
    """Compare stored and suggested statuses for every endpoint."""
    engine = status_engine or StatusEngine()
    rows = []
    for endpoint in registry.endpoints:
        www_test = endpoint.ipv6.get_test(WWW_TEST_ID)
        rows.append(StatusAnalysisRow(
            endpoint_id=endpoint.id,
            name=endpoint.name,
            current=endpoint.ipv6.status,
            apex=_test_works(endpoint.ipv6, APEX_TEST_ID),
            www=None if www_test is None else www_test.result is TestResult.CONFIRMED,
            suggested=engine.suggest(endpoint.ipv6),
        ))
    return rows


def _symbol(value: Optional[bool]) -> str:
    if value is None:
        return "-"
    return "✓" if value else "✗"


def format_analysis_table(rows: list[StatusAnalysisRow]) -> str:
    """Render analysis rows as a fixed-width text table."""
    lines = [
        "Service".ljust(25) + "Current".ljust(10) + "Main".ljust(6)
        + "WWW".ljust(6) + "Suggested".ljust(12) + "Notes",
        "-" * 80,
    ]
    for row in rows:
        lines.append(
            row.name[:24].ljust(25)
            + row.current.value.ljust(10)
            + _symbol(row.apex).ljust(6)
            + _symbol(row.www).ljust(6)
            + row.suggested.value.ljust(12)
            + ("⚠️" if row.mismatch else "")
        )
    return "\n".join(lines)
