"""
Property-based tests for the status inference engine.

Uses Hypothesis for property-based testing to verify the inference rule,
monotonicity of maintained statuses and advisory mismatch detection.
"""

from typing import Optional

from hypothesis import given, settings
from hypothesis import strategies as st

from ipv6_checker.enums import IPv6Status, TestResult
from ipv6_checker.models import APEX_TEST_ID, WWW_TEST_ID, ConnectivityTest, IPv6Record
from ipv6_checker.status_engine import StatusEngine, infer_status


def optional_bool_strategy() -> st.SearchStrategy[Optional[bool]]:
    return st.one_of(st.none(), st.booleans())


def _record(status: IPv6Status, apex: Optional[TestResult], www: Optional[TestResult]) -> IPv6Record:
    tests = []
    if apex is not None:
        tests.append(ConnectivityTest(id=APEX_TEST_ID, name="Main Domain", description="", result=apex))
    if www is not None:
        tests.append(ConnectivityTest(id=WWW_TEST_ID, name="WWW Variant", description="", result=www))
    return IPv6Record(status=status, tests=tests)


class TestInferenceRuleProperty:
    """Property 1: The inferred status follows the full/partial/none rule."""

    def test_truth_table(self) -> None:
        assert infer_status(True, True) == IPv6Status.FULL
        assert infer_status(True, False) == IPv6Status.PARTIAL
        assert infer_status(False, True) == IPv6Status.PARTIAL
        assert infer_status(False, False) == IPv6Status.NONE
        assert infer_status(True, None) == IPv6Status.FULL
        assert infer_status(False, None) == IPv6Status.NONE

    @given(apex_works=st.booleans())
    @settings(max_examples=10)
    def test_partial_unreachable_without_www(self, apex_works: bool) -> None:
        assert infer_status(apex_works, None) != IPv6Status.PARTIAL

    @given(apex_works=st.booleans(), www_works=optional_bool_strategy())
    @settings(max_examples=20)
    def test_never_unknown(self, apex_works: bool, www_works: Optional[bool]) -> None:
        assert infer_status(apex_works, www_works) != IPv6Status.UNKNOWN


class TestMonotonicityProperty:
    """Property 2: Only unknown statuses are ever set automatically."""

    @given(
        status=st.sampled_from([IPv6Status.FULL, IPv6Status.PARTIAL, IPv6Status.NONE]),
        outcomes=st.lists(st.tuples(st.booleans(), optional_bool_strategy()), min_size=1, max_size=10),
    )
    @settings(max_examples=100)
    def test_known_status_never_changes(
        self,
        status: IPv6Status,
        outcomes: list[tuple[bool, Optional[bool]]],
    ) -> None:
        engine = StatusEngine()
        record = IPv6Record(status=status)

        for apex_works, www_works in outcomes:
            assert engine.apply(record, apex_works, www_works) is False
            assert record.status == status

    @given(apex_works=st.booleans(), www_works=optional_bool_strategy())
    @settings(max_examples=20)
    def test_unknown_is_filled_once(self, apex_works: bool, www_works: Optional[bool]) -> None:
        engine = StatusEngine()
        record = IPv6Record(status=IPv6Status.UNKNOWN)

        assert engine.apply(record, apex_works, www_works) is True
        assert record.status == infer_status(apex_works, www_works)

        assert engine.apply(record, not apex_works, www_works) is False
        assert record.status == infer_status(apex_works, www_works)


class TestSuggestionProperty:
    """Property 3: Suggestions are computed from stored tests and never mutate."""

    def test_unevaluated_counts_as_not_working(self) -> None:
        record = _record(IPv6Status.UNKNOWN, TestResult.UNEVALUATED, TestResult.CONFIRMED)
        assert StatusEngine().suggest(record) == IPv6Status.PARTIAL

    def test_missing_www_test_is_neutral(self) -> None:
        record = _record(IPv6Status.UNKNOWN, TestResult.CONFIRMED, None)
        assert StatusEngine().suggest(record) == IPv6Status.FULL

    def test_missing_apex_test_is_failure(self) -> None:
        record = _record(IPv6Status.UNKNOWN, None, None)
        assert StatusEngine().suggest(record) == IPv6Status.NONE

    @given(
        status=st.sampled_from(list(IPv6Status)),
        apex=st.sampled_from(list(TestResult)),
        www=st.one_of(st.none(), st.sampled_from(list(TestResult))),
    )
    @settings(max_examples=100)
    def test_mismatch_is_advisory(
        self,
        status: IPv6Status,
        apex: TestResult,
        www: Optional[TestResult],
    ) -> None:
        engine = StatusEngine()
        record = _record(status, apex, www)

        mismatch = engine.check_mismatch("svc", record)

        assert record.status == status
        suggested = engine.suggest(record)
        if suggested == status:
            assert mismatch is None
        else:
            assert mismatch is not None
            assert mismatch.endpoint_id == "svc"
            assert mismatch.current == status
            assert mismatch.suggested == suggested
