"""
Property-based tests for internationalization (i18n) module.

Uses Hypothesis for property-based testing to verify translation coverage,
placeholder consistency and language fallback.
"""

import string

from hypothesis import given, settings
from hypothesis import strategies as st

from ipv6_checker.i18n import (
    TRANSLATIONS,
    SUPPORTED_LANGUAGES,
    DEFAULT_LANGUAGE,
    get_message,
    get_missing_translations,
    validate_translations,
)


def _placeholders(template: str) -> set[str]:
    return {name for _, name, _, _ in string.Formatter().parse(template) if name}


class TestTranslationCoverageProperty:
    """Property 1: Every message exists in every supported language."""

    def test_all_languages_have_all_translations(self) -> None:
        assert len(TRANSLATIONS) > 0
        for language in SUPPORTED_LANGUAGES:
            assert get_missing_translations(language) == set(), language

    def test_validate_translations_returns_empty_sets(self) -> None:
        result = validate_translations()
        assert set(result) == set(SUPPORTED_LANGUAGES)
        assert all(missing == set() for missing in result.values())

    @given(key=st.sampled_from(sorted(TRANSLATIONS)))
    @settings(max_examples=100)
    def test_translations_share_placeholders(self, key: str) -> None:
        """
        *For any* message key, every language uses the same format
        placeholders, so callers can pass one set of arguments.
        """
        placeholders = {
            language: _placeholders(TRANSLATIONS[key][language])
            for language in SUPPORTED_LANGUAGES
        }
        assert placeholders["en"] == placeholders["de"], key

    @given(
        key=st.sampled_from(sorted(TRANSLATIONS)),
        language=st.sampled_from(sorted(SUPPORTED_LANGUAGES)),
    )
    @settings(max_examples=100)
    def test_get_message_returns_non_empty_string(self, key: str, language: str) -> None:
        message = get_message(key, language)
        assert isinstance(message, str)
        assert message


class TestMessageFormattingProperty:
    """Property 2: Arguments are substituted and lookups never raise."""

    @given(error=st.text(alphabet=string.ascii_letters + " ", min_size=1, max_size=40))
    @settings(max_examples=50)
    def test_arguments_are_substituted(self, error: str) -> None:
        assert get_message("cli.error", "en", error=error) == f"Error: {error}"
        assert get_message("cli.error", "de", error=error) == f"Fehler: {error}"

    def test_missing_argument_leaves_template(self) -> None:
        assert get_message("cli.error", "en", unrelated="x") == "Error: {error}"

    @given(key=st.text(alphabet=string.ascii_lowercase + ".", min_size=1, max_size=30))
    @settings(max_examples=50)
    def test_unknown_key_returns_key(self, key: str) -> None:
        if key not in TRANSLATIONS:
            assert get_message(key, "en") == key

    @given(language=st.text(alphabet=string.ascii_lowercase, min_size=0, max_size=5))
    @settings(max_examples=50)
    def test_unsupported_language_falls_back_to_default(self, language: str) -> None:
        if language not in SUPPORTED_LANGUAGES:
            assert get_message("cli.updated", language) == get_message("cli.updated", DEFAULT_LANGUAGE)

    def test_default_language_is_english(self) -> None:
        assert DEFAULT_LANGUAGE == "en"
        assert get_message("cli.updated") == "Updated data file"
