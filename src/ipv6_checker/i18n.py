"""
Internationalization (i18n) module for the IPv6 connectivity checker.

Provides translations for all user-facing CLI messages in English (en)
and German (de).
"""

from typing import Optional


# Supported languages
SUPPORTED_LANGUAGES = frozenset({"en", "de"})
DEFAULT_LANGUAGE = "en"


# Structure: {message_key: {language_code: translated_message}}
TRANSLATIONS: dict[str, dict[str, str]] = {
    # Check pass
    "cli.header": {
        "en": "IPv6 Checker{modes}",
        "de": "IPv6-Prüfung{modes}",
    },
    "cli.mode_verbose": {
        "en": " (verbose)",
        "de": " (ausführlich)",
    },
    "cli.mode_detail": {
        "en": " (detailed)",
        "de": " (detailliert)",
    },
    "cli.endpoint": {
        "en": "{name} ({url})",
        "de": "{name} ({url})",
    },
    "cli.current_status": {
        "en": "   Current Status: {status}",
        "de": "   Aktueller Status: {status}",
    },
    "cli.description": {
        "en": "   Description: {description}",
        "de": "   Beschreibung: {description}",
    },
    "cli.notes": {
        "en": "   Notes: {notes}",
        "de": "   Notizen: {notes}",
    },
    "cli.probe_line": {
        "en": "  AAAA: {aaaa}, HTTP: {http}, WWW: {www} ({www_host}){addresses}",
        "de": "  AAAA: {aaaa}, HTTP: {http}, WWW: {www} ({www_host}){addresses}",
    },
    "cli.variant_detail": {
        "en": "   [{kind}] {hostname}: AAAA {aaaa}, A {a}, HTTP {http}{extra}",
        "de": "   [{kind}] {hostname}: AAAA {aaaa}, A {a}, HTTP {http}{extra}",
    },
    "cli.subdomain": {
        "en": "subdomain",
        "de": "Subdomain",
    },
    "cli.change": {
        "en": "  → {change}",
        "de": "  → {change}",
    },
    "cli.no_changes": {
        "en": "  No changes (Main: {main}, WWW: {www})",
        "de": "  Keine Änderungen (Haupt: {main}, WWW: {www})",
    },
    "cli.override": {
        "en": "  ⚑ Override applied: {reason}",
        "de": "  ⚑ Ausnahme angewendet: {reason}",
    },
    "cli.mismatch": {
        "en": "  ⚠️  Status mismatch: currently \"{current}\" but tests suggest \"{suggested}\"",
        "de": "  ⚠️  Status-Abweichung: aktuell \"{current}\", Tests ergeben \"{suggested}\"",
    },
    "cli.summary": {
        "en": "Summary: {total} services, {main} Main ({main_pct}%), {www} WWW ({www_pct}%) | {full}F {partial}P {none}N {unknown}U",
        "de": "Zusammenfassung: {total} Dienste, {main} Haupt ({main_pct}%), {www} WWW ({www_pct}%) | {full}F {partial}P {none}N {unknown}U",
    },
    "cli.updated": {
        "en": "Updated data file",
        "de": "Datendatei aktualisiert",
    },
    "cli.not_updated": {
        "en": "No changes to data file",
        "de": "Keine Änderungen an der Datendatei",
    },
    "cli.dry_run": {
        "en": "Dry run: data file not written",
        "de": "Testlauf: Datendatei nicht geschrieben",
    },
    "cli.error": {
        "en": "Error: {error}",
        "de": "Fehler: {error}",
    },

    # Status analysis
    "analysis.title": {
        "en": "Status Analysis - Current vs Test Results",
        "de": "Statusanalyse - Aktuell vs. Testergebnisse",
    },
    "analysis.legend": {
        "en": "⚠️ = Status mismatch between current and test results",
        "de": "⚠️ = Abweichung zwischen aktuellem Status und Testergebnissen",
    },

    # Cloud survey
    "cloud.title": {
        "en": "Testing {provider} IPv6 Support",
        "de": "Teste IPv6-Unterstützung von {provider}",
    },
    "cloud.api_endpoints": {
        "en": "API Endpoints:",
        "de": "API-Endpunkte:",
    },
    "cloud.service_endpoints": {
        "en": "Service Endpoints:",
        "de": "Dienst-Endpunkte:",
    },
    "cloud.ipv6": {
        "en": "✅ IPv6 ({address})",
        "de": "✅ IPv6 ({address})",
    },
    "cloud.no_ipv6": {
        "en": "❌ No IPv6",
        "de": "❌ Kein IPv6",
    },
    "cloud.not_found": {
        "en": "⚠️  Not found",
        "de": "⚠️  Nicht gefunden",
    },
    "cloud.summary": {
        "en": "Summary: {total} endpoints tested, {enabled} IPv6 enabled ({percentage}%)",
        "de": "Zusammenfassung: {total} Endpunkte getestet, {enabled} mit IPv6 ({percentage}%)",
    },
    "cloud.saved": {
        "en": "Results saved to {path}",
        "de": "Ergebnisse gespeichert in {path}",
    },
}


def get_message(
    key: str,
    language: Optional[str] = None,
    **kwargs,
) -> str:
    """
    Get a translated message by key.

    Args:
        key: The message key (e.g., 'cli.updated')
        language: Language code ('en' or 'de'). Defaults to DEFAULT_LANGUAGE.
        **kwargs: Format arguments for the message template

    Returns:
        The translated and formatted message string.
        If the key is not found, returns the key itself.
        If the language is not found, falls back to DEFAULT_LANGUAGE.

    Examples:
        >>> get_message('cli.updated', 'en')
        'Updated data file'
        >>> get_message('cli.error', 'de', error='kaputt')
        'Fehler: kaputt'
    """
    if language is None or language not in SUPPORTED_LANGUAGES:
        language = DEFAULT_LANGUAGE

    translations = TRANSLATIONS.get(key)
    if translations is None:
        return key

    message = translations.get(language) or translations.get(DEFAULT_LANGUAGE)
    if message is None:
        return key

    if kwargs:
        try:
            message = message.format(**kwargs)
        except KeyError:
            # Leave the template unformatted if an argument is missing
            pass

    return message


def get_missing_translations(language: str) -> set[str]:
    """
    Get all message keys that are missing translations for a language.

    Args:
        language: The language code to check

    Returns:
        Set of message keys missing translations for the specified language.
    """
    return {
        key for key, translations in TRANSLATIONS.items()
        if language not in translations
    }


def validate_translations() -> dict[str, set[str]]:
    """
    Validate that all languages have all translations.

    Returns:
        Dictionary mapping language codes to sets of missing message keys.
        Empty sets indicate complete translations.
    """
    return {language: get_missing_translations(language) for language in SUPPORTED_LANGUAGES}
