"""
IPv6 Checker - IPv6 connectivity verification for a registry of web endpoints.

This package probes each endpoint's apex and www hostnames over DNS (AAAA, A)
and IPv6-only HTTP, reconciles the results into the per-endpoint test list,
infers an IPv6 status for new entries, and writes the registry back only when
something observable changed.
"""

__version__ = "0.1.0"
__author__ = "IPv6 Checker Team"

from ipv6_checker.exceptions import (
    IPv6CheckerError,
    ConfigurationError,
    PersistenceError,
    RegistryError,
)
from ipv6_checker.enums import (
    IPv6Status,
    TestResult,
    ProvidedForm,
    VariantKind,
    LogLevel,
    ProbeErrorCode,
)
from ipv6_checker.config import (
    ProbeConfig,
    PersistenceConfig,
    LoggingConfig,
    OverrideConfig,
    RunConfig,
    SystemConfig,
)
from ipv6_checker.models import (
    APEX_TEST_ID,
    WWW_TEST_ID,
    ConnectivityTest,
    IPv6Record,
    Endpoint,
    Registry,
    DomainVariant,
    DNSLookup,
    HTTPProbeResult,
    ProbeResult,
    StatusMismatch,
    EndpointReport,
)
from ipv6_checker.variant_resolver import (
    normalize_hostname,
    extract_hostname,
    resolve_variant,
    variant_url,
)
from ipv6_checker.dns_probe import DNSProbe
from ipv6_checker.http_probe import HTTPProbe, classify_error
from ipv6_checker.overrides import ProbeOverride, OverridePolicy
from ipv6_checker.reconciler import (
    ReconcileOutcome,
    reconcile_legacy,
    reconcile_tests,
)
from ipv6_checker.status_engine import StatusEngine, infer_status
from ipv6_checker.registry_store import (
    RegistryStore,
    has_observable_changes,
    utc_timestamp,
)
from ipv6_checker.audit_logger import (
    AuditLogger,
    LogEntry,
)
from ipv6_checker.analysis import (
    RunSummary,
    StatusAnalysisRow,
    summarize_run,
    analyze_registry,
    format_analysis_table,
)
from ipv6_checker.cloud_survey import (
    CloudSurveyResult,
    EndpointSurvey,
    survey_provider,
    save_survey,
)
from ipv6_checker.i18n import (
    get_message,
    get_missing_translations,
    validate_translations,
    TRANSLATIONS,
    SUPPORTED_LANGUAGES,
    DEFAULT_LANGUAGE,
)
from ipv6_checker.orchestrator import (
    CheckOrchestrator,
    OrchestratorResult,
)
from ipv6_checker.cli import (
    main as cli_main,
    create_parser,
    create_default_config,
    load_config_from_file,
)

__all__ = [
    # Exceptions
    "IPv6CheckerError",
    "ConfigurationError",
    "PersistenceError",
    "RegistryError",
    # Enums
    "IPv6Status",
    "TestResult",
    "ProvidedForm",
    "VariantKind",
    "LogLevel",
    "ProbeErrorCode",
    # Configuration
    "ProbeConfig",
    "PersistenceConfig",
    "LoggingConfig",
    "OverrideConfig",
    "RunConfig",
    "SystemConfig",
    # Models
    "APEX_TEST_ID",
    "WWW_TEST_ID",
    "ConnectivityTest",
    "IPv6Record",
    "Endpoint",
    "Registry",
    "DomainVariant",
    "DNSLookup",
    "HTTPProbeResult",
    "ProbeResult",
    "StatusMismatch",
    "EndpointReport",
    # Variant Resolver
    "normalize_hostname",
    "extract_hostname",
    "resolve_variant",
    "variant_url",
    # Probes
    "DNSProbe",
    "HTTPProbe",
    "classify_error",
    # Overrides
    "ProbeOverride",
    "OverridePolicy",
    # Reconciler
    "ReconcileOutcome",
    "reconcile_legacy",
    "reconcile_tests",
    # Status Engine
    "StatusEngine",
    "infer_status",
    # Registry Store
    "RegistryStore",
    "has_observable_changes",
    "utc_timestamp",
    # Audit Logger
    "AuditLogger",
    "LogEntry",
    # Analysis
    "RunSummary",
    "StatusAnalysisRow",
    "summarize_run",
    "analyze_registry",
    "format_analysis_table",
    # Cloud Survey
    "CloudSurveyResult",
    "EndpointSurvey",
    "survey_provider",
    "save_survey",
    # I18n
    "get_message",
    "get_missing_translations",
    "validate_translations",
    "TRANSLATIONS",
    "SUPPORTED_LANGUAGES",
    "DEFAULT_LANGUAGE",
    # Orchestrator
    "CheckOrchestrator",
    "OrchestratorResult",
    # CLI
    "cli_main",
    "create_parser",
    "create_default_config",
    "load_config_from_file",
]
