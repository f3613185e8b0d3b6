"""
Property-based tests for Audit Logger module.

Uses Hypothesis for property-based testing to verify output formats,
level filtering and sensitive data masking.
"""

import json
from io import StringIO

import pytest
from hypothesis import given, settings, assume
from hypothesis import strategies as st

from ipv6_checker.audit_logger import AuditLogger
from ipv6_checker.enums import LogLevel


SENSITIVE_PATTERNS = [
    'token', 'secret', 'password', 'api_key', 'auth', 'authorization',
    'credential', 'private_key', 'cookie',
]


# Strategies for generating valid test data

@st.composite
def component_name_strategy(draw) -> str:
    """Generate valid component names."""
    return draw(st.text(
        alphabet=st.sampled_from("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_-"),
        min_size=1,
        max_size=50,
    ))


@st.composite
def message_strategy(draw) -> str:
    """Generate valid log messages."""
    return draw(st.text(
        alphabet=st.characters(
            whitelist_categories=('L', 'N', 'P', 'S', 'Z'),
            blacklist_characters='\x00\n\r',
        ),
        min_size=1,
        max_size=200,
    ))


@st.composite
def non_sensitive_key_strategy(draw) -> str:
    """Generate keys that are NOT sensitive."""
    key = draw(st.text(
        alphabet=st.sampled_from("abcdefghijklmnopqrstuvwxyz_"),
        min_size=1,
        max_size=20,
    ))
    for pattern in SENSITIVE_PATTERNS:
        assume(pattern not in key)
    return key


@st.composite
def sensitive_key_strategy(draw) -> str:
    """Generate keys that ARE sensitive."""
    base = draw(st.sampled_from(SENSITIVE_PATTERNS))
    prefix = draw(st.sampled_from(['', 'my_', 'proxy_']))
    suffix = draw(st.sampled_from(['', '_value', '_1']))
    return f"{prefix}{base}{suffix}"


@st.composite
def non_sensitive_data_strategy(draw) -> dict:
    """Generate data dictionaries without sensitive keys."""
    return draw(st.dictionaries(
        non_sensitive_key_strategy(),
        st.one_of(
            st.text(max_size=30),
            st.integers(min_value=-1000, max_value=1000),
            st.booleans(),
            st.none(),
        ),
        max_size=5,
    ))


class TestOutputFormatProperty:
    """Property 1: Entries are written in the configured format(s)."""

    @given(
        level=st.sampled_from(list(LogLevel)),
        component=component_name_strategy(),
        message=message_strategy(),
        data=non_sensitive_data_strategy(),
    )
    @settings(max_examples=100)
    def test_both_format_writes_json_then_text(
        self,
        level: LogLevel,
        component: str,
        message: str,
        data: dict,
    ) -> None:
        """
        *For any* entry with output_format "both", the logger writes one
        JSON line followed by one text line.
        """
        output = StringIO()
        logger = AuditLogger(output_format="both", output_stream=output, min_level=LogLevel.DEBUG)

        logger.log(level, component, message, data)

        lines = output.getvalue().strip().split('\n')
        assert len(lines) == 2

        parsed = json.loads(lines[0])
        assert parsed["level"] == level.value
        assert parsed["component"] == component
        assert parsed["message"] == message
        assert parsed["data"] == data

        assert level.value.upper() in lines[1]
        assert f"[{component}]" in lines[1]

    @given(component=component_name_strategy(), message=message_strategy())
    @settings(max_examples=50)
    def test_text_format_has_no_json_line(self, component: str, message: str) -> None:
        output = StringIO()
        logger = AuditLogger(output_format="text", output_stream=output)

        logger.log(LogLevel.INFO, component, message)

        text = output.getvalue()
        assert text.count('\n') == 1
        assert text.startswith("[")
        assert f"INFO [{component}] {message}" in text

    def test_invalid_output_format_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            AuditLogger(output_format="xml")


class TestLevelFilterProperty:
    """Property 2: Entries below the minimum level are discarded."""

    LEVELS = [LogLevel.DEBUG, LogLevel.INFO, LogLevel.WARN, LogLevel.ERROR]

    @given(
        min_level=st.sampled_from(LEVELS),
        level=st.sampled_from(LEVELS),
        message=message_strategy(),
    )
    @settings(max_examples=100)
    def test_filtering_follows_severity_order(
        self,
        min_level: LogLevel,
        level: LogLevel,
        message: str,
    ) -> None:
        output = StringIO()
        logger = AuditLogger(output_stream=output, min_level=min_level)

        entry = logger.log(level, "Test", message)

        expected = self.LEVELS.index(level) >= self.LEVELS.index(min_level)
        assert (entry is not None) == expected
        assert len(logger.entries) == int(expected)
        assert bool(output.getvalue()) == expected

    @pytest.mark.parametrize("name,expected", [
        ("debug", LogLevel.DEBUG),
        ("INFO", LogLevel.INFO),
        ("warn", LogLevel.WARN),
        ("error", LogLevel.ERROR),
    ])
    def test_from_level_name(self, name: str, expected: LogLevel) -> None:
        logger = AuditLogger.from_level_name(name, output_stream=StringIO())
        assert logger.min_level == expected

    def test_from_level_name_rejects_unknown_level(self) -> None:
        with pytest.raises(ValueError):
            AuditLogger.from_level_name("verbose")


class TestSensitiveDataMaskingProperty:
    """Property 3: Sensitive values never reach the output."""

    @given(
        key=sensitive_key_strategy(),
        value=st.text(alphabet="abcdefghijklmnopqrstuvwxyz0123456789", min_size=12, max_size=40),
    )
    @settings(max_examples=100)
    def test_sensitive_values_are_masked(self, key: str, value: str) -> None:
        output = StringIO()
        logger = AuditLogger(output_format="both", output_stream=output)

        entry = logger.log(LogLevel.INFO, "Test", "message", {key: value, "nested": {key: value}})

        assert entry.data[key] == AuditLogger.MASK_VALUE
        assert entry.data["nested"][key] == AuditLogger.MASK_VALUE
        assert value not in output.getvalue()

    @given(data=non_sensitive_data_strategy())
    @settings(max_examples=100)
    def test_non_sensitive_data_is_preserved(self, data: dict) -> None:
        logger = AuditLogger(output_stream=StringIO())
        assert logger.mask_sensitive_data(data) == data

    def test_masking_does_not_modify_input(self) -> None:
        logger = AuditLogger(output_stream=StringIO())
        data = {"token": "abc", "items": [{"password": "x"}, 1]}

        masked = logger.mask_sensitive_data(data)

        assert data == {"token": "abc", "items": [{"password": "x"}, 1]}
        assert masked == {"token": AuditLogger.MASK_VALUE, "items": [{"password": AuditLogger.MASK_VALUE}, 1]}


class TestErrorContextProperty:
    """Property 4: Logged errors carry the exception type and message."""

    @given(message=message_strategy(), error_text=message_strategy())
    @settings(max_examples=50)
    def test_log_error_includes_exception(self, message: str, error_text: str) -> None:
        logger = AuditLogger(output_stream=StringIO())

        entry = logger.log_error("RegistryStore", message, OSError(error_text), {"file_path": "data/x.yaml"})

        assert entry.level == LogLevel.ERROR
        assert entry.data["error_type"] == "OSError"
        assert entry.data["error_message"] == error_text
        assert entry.data["file_path"] == "data/x.yaml"

    def test_clear_entries(self) -> None:
        logger = AuditLogger(output_stream=StringIO())
        logger.warn("Test", "one")
        logger.warn("Test", "two")
        assert len(logger.entries) == 2

        logger.clear_entries()

        assert logger.entries == []
