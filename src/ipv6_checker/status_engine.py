"""
Status inference for endpoints.

Derives the overall IPv6 status from reconciled test results. The engine
only fills in a status that is still ``unknown``; a status set by a
maintainer or an earlier run is authoritative and is never overwritten.
Disagreements are reported as advisory mismatches instead.

Rule:
- apex and www both work -> full
- exactly one of them works -> partial
- neither works -> none
- no www variant: apex works -> full, otherwise none
"""

from typing import Optional

from .enums import IPv6Status, TestResult
from .models import APEX_TEST_ID, WWW_TEST_ID, IPv6Record, StatusMismatch


def infer_status(apex_works: bool, www_works: Optional[bool]) -> IPv6Status:
    """
    Compute the status implied by the apex and www outcomes.

    Args:
        apex_works: Whether the apex hostname works over IPv6
        www_works: Whether the www hostname works, or None when the
            endpoint has no www variant

    Returns:
        The implied IPv6Status (never UNKNOWN)
    """
    if www_works is None:
        return IPv6Status.FULL if apex_works else IPv6Status.NONE

    if apex_works and www_works:
        return IPv6Status.FULL
    if apex_works or www_works:
        return IPv6Status.PARTIAL
    return IPv6Status.NONE


class StatusEngine:
    """Applies and checks inferred statuses on IPv6 records."""

    def apply(
        self,
        record: IPv6Record,
        apex_works: bool,
        www_works: Optional[bool],
    ) -> bool:
        """
        Set the inferred status if the record's status is still unknown.

        Returns:
            True if the status was changed
        """
        if record.status != IPv6Status.UNKNOWN:
            return False

        record.status = infer_status(apex_works, www_works)
        return record.status != IPv6Status.UNKNOWN

    def suggest(self, record: IPv6Record) -> IPv6Status:
        """
        Recompute the status from the record's stored tests.

        An unevaluated test counts as not working; a missing www test is
        neutral.
        """
        apex = record.get_test(APEX_TEST_ID)
        www = record.get_test(WWW_TEST_ID)

        apex_works = apex is not None and apex.result is TestResult.CONFIRMED
        www_works = None if www is None else www.result is TestResult.CONFIRMED
        return infer_status(apex_works, www_works)

    def check_mismatch(
        self,
        endpoint_id: str,
        record: IPv6Record,
    ) -> Optional[StatusMismatch]:
        """Return a mismatch if the stored status differs from the suggestion."""
        suggested = self.suggest(record)
        if record.status == suggested:
            return None
        return StatusMismatch(
            endpoint_id=endpoint_id,
            current=record.status,
            suggested=suggested,
        )
