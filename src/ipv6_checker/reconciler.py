"""
Test record reconciliation.

Maps fresh probe outcomes onto the stable set of named tests stored per
endpoint. Tests stored under the previous identifier scheme are renamed in
place so their recorded results survive the migration, tests are created
for newly applicable variants, and the ``www_domain`` test is removed when
the endpoint no longer has a www variant.

Both functions here are pure: they return new lists and never mutate the
tests they are given.
"""

from dataclasses import dataclass, field, replace
from typing import Mapping, Optional

from .enums import TestResult, VariantKind
from .models import (
    APEX_TEST_ID,
    WWW_TEST_ID,
    ConnectivityTest,
    DomainVariant,
    ProbeResult,
)


TEST_DEFINITIONS: dict[str, tuple[str, str]] = {
    APEX_TEST_ID: (
        "Main Domain",
        "Main domain works over IPv6 (both DNS and HTTP connectivity)",
    ),
    WWW_TEST_ID: (
        "WWW Variant",
        "Alternative www/non-www hostname works over IPv6 (both DNS and HTTP connectivity)",
    ),
}

# Previous identifier -> current identifier
LEGACY_TEST_IDS: dict[str, str] = {
    "aaaa_record": APEX_TEST_ID,
    "www_variant": WWW_TEST_ID,
}

TEST_ID_FOR_VARIANT: dict[VariantKind, str] = {
    VariantKind.APEX: APEX_TEST_ID,
    VariantKind.WWW: WWW_TEST_ID,
}


@dataclass
class ReconcileOutcome:
    """Result of reconciling one endpoint's tests."""

    tests: list[ConnectivityTest]
    dirty: bool
    changes: list[str] = field(default_factory=list)


def new_test(test_id: str) -> ConnectivityTest:
    """Create a test with its canonical name and no result yet."""
    name, description = TEST_DEFINITIONS[test_id]
    return ConnectivityTest(
        id=test_id,
        name=name,
        description=description,
        result=TestResult.UNEVALUATED,
    )


def reconcile_legacy(
    tests: list[ConnectivityTest],
) -> tuple[list[ConnectivityTest], list[str]]:
    """
    Rename tests that still use a legacy identifier.

    A legacy test keeps its position and result and gets the canonical
    name and description of its successor. If the successor already
    exists, the legacy entry is dropped.

    Args:
        tests: Stored tests of one endpoint

    Returns:
        Tuple of (new test list, descriptions of the migrations performed)
    """
    present = {test.id for test in tests}
    migrated: list[ConnectivityTest] = []
    changes: list[str] = []

    for test in tests:
        successor = LEGACY_TEST_IDS.get(test.id)
        if successor is None:
            migrated.append(replace(test))
            continue

        if successor in present:
            changes.append(f"dropped legacy test {test.id} (superseded by {successor})")
            continue

        name, description = TEST_DEFINITIONS[successor]
        migrated.append(replace(test, id=successor, name=name, description=description))
        present.add(successor)
        changes.append(f"migrated {test.id} -> {successor}")

    return migrated, changes


def _dedupe(tests: list[ConnectivityTest]) -> tuple[list[ConnectivityTest], list[str]]:
    seen: set[str] = set()
    unique: list[ConnectivityTest] = []
    changes: list[str] = []
    for test in tests:
        if test.id in seen:
            changes.append(f"removed duplicate test {test.id}")
            continue
        seen.add(test.id)
        unique.append(test)
    return unique, changes


def reconcile_tests(
    tests: list[ConnectivityTest],
    variant: DomainVariant,
    probes: Mapping[VariantKind, Optional[ProbeResult]],
) -> ReconcileOutcome:
    """
    Fold probe outcomes into an endpoint's tests.

    ``apex_domain`` is always maintained; ``www_domain`` only while the
    variant has a www hostname. A test works only when its hostname has
    AAAA records AND answered over IPv6 HTTP. A missing probe (e.g. for a
    malformed URL) counts as a failure.

    Args:
        tests: Stored tests of one endpoint
        variant: Hostname variants of the endpoint
        probes: Post-override probe results per variant kind

    Returns:
        ReconcileOutcome with the new test list and the dirty flag
    """
    working, changes = reconcile_legacy(tests)
    working, dedupe_changes = _dedupe(working)
    changes.extend(dedupe_changes)

    applicable = variant.kinds()

    for kind in applicable:
        test_id = TEST_ID_FOR_VARIANT[kind]
        index = next((i for i, t in enumerate(working) if t.id == test_id), None)
        if index is None:
            working.append(new_test(test_id))
            index = len(working) - 1
            changes.append(f"created test {test_id}")

        probe = probes.get(kind)
        works = probe is not None and probe.works
        computed = TestResult.from_bool(works)

        current = working[index]
        if current.result != computed:
            working[index] = replace(current, result=computed)
            changes.append(
                f"{test_id}: {current.result.to_bool()} -> {computed.to_bool()}"
            )

    if VariantKind.WWW not in applicable:
        before = len(working)
        working = [t for t in working if t.id != WWW_TEST_ID]
        if len(working) != before:
            changes.append(f"removed test {WWW_TEST_ID} (no www variant)")

    return ReconcileOutcome(tests=working, dirty=bool(changes), changes=changes)
