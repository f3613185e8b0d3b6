"""
Command-line interface for the IPv6 connectivity checker.

This module provides the main CLI entry point with commands for:
- check: Probe every registry endpoint once and update the registry (default)
- analyze: Compare stored statuses with the statuses the tests suggest
- cloud: DNS-only IPv6 survey of cloud provider endpoints
"""

import argparse
import asyncio
import json
import os
import sys
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from . import __version__
from .analysis import RunSummary, analyze_registry, format_analysis_table
from .audit_logger import AuditLogger
from .cloud_survey import CLOUD_ENDPOINTS, CloudSurveyResult, save_survey, survey_provider
from .config import (
    DEFAULT_HTTP_TIMEOUT_SECONDS,
    DEFAULT_REGISTRY_PATH,
    LoggingConfig,
    OverrideConfig,
    PersistenceConfig,
    ProbeConfig,
    RunConfig,
    SystemConfig,
)
from .dns_probe import DNSProbe
from .enums import IPv6Status, TestResult, VariantKind
from .exceptions import ConfigurationError, IPv6CheckerError
from .i18n import SUPPORTED_LANGUAGES, get_message
from .models import Endpoint, EndpointReport, ProbeResult
from .orchestrator import CheckOrchestrator
from .registry_store import RegistryStore


COMMANDS = ("check", "analyze", "cloud")
DEFAULT_CLOUD_TESTS_DIR = Path("data") / "cloud-tests"


def _float_env(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except ValueError:
        return default


def create_default_config() -> SystemConfig:
    """
    Create the default configuration, honouring environment variables.

    Recognised variables (also read from a ``.env`` file):
    IPV6_CHECKER_REGISTRY, IPV6_CHECKER_LANG, IPV6_CHECKER_HTTP_TIMEOUT,
    IPV6_CHECKER_DEBUG.
    """
    language = (os.getenv("IPV6_CHECKER_LANG", "en") or "en").lower()
    if language not in SUPPORTED_LANGUAGES:
        language = "en"

    return SystemConfig(
        probe=ProbeConfig(
            http_timeout_seconds=_float_env("IPV6_CHECKER_HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT_SECONDS),
        ),
        persistence=PersistenceConfig(
            registry_path=Path(os.getenv("IPV6_CHECKER_REGISTRY") or DEFAULT_REGISTRY_PATH),
        ),
        logging=LoggingConfig(
            level="debug" if os.getenv("IPV6_CHECKER_DEBUG", "0") == "1" else "info",
        ),
        language=language,
    )


def load_config_from_file(config_path: Path) -> SystemConfig:
    """
    Load configuration from a JSON file on top of the defaults.

    Args:
        config_path: Path to the configuration file

    Returns:
        SystemConfig with file values applied

    Raises:
        ConfigurationError: If the file is missing or malformed
    """
    defaults = create_default_config()

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        raise ConfigurationError(
            code="not_found",
            message=f"Configuration file not found: {config_path}",
            details={"config_path": str(config_path)},
        )
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(
            code="parse_error",
            message=f"Could not load config from {config_path}: {e}",
            details={"config_path": str(config_path)},
        )

    try:
        probe_data = data.get("probe", {})
        probe = ProbeConfig(
            http_timeout_seconds=float(
                probe_data.get("http_timeout_seconds", defaults.probe.http_timeout_seconds)
            ),
            user_agent=probe_data.get("user_agent", defaults.probe.user_agent),
            verify_tls=bool(probe_data.get("verify_tls", True)),
        )

        persistence_data = data.get("persistence", {})
        registry_path = persistence_data.get("registry_path")
        persistence = PersistenceConfig(
            registry_path=Path(registry_path) if registry_path else defaults.persistence.registry_path,
        )

        logging_data = data.get("logging", {})
        logging_config = LoggingConfig(
            level=logging_data.get("level", defaults.logging.level),
            output_format=logging_data.get("output_format", "text"),
        )

        run_data = data.get("run", {})
        run = RunConfig(
            max_parallel_endpoints=int(run_data.get("max_parallel_endpoints", 1)),
        )

        overrides = [
            OverrideConfig(
                endpoint_id=item["endpoint_id"],
                reason=item.get("reason", ""),
                variant=item.get("variant"),
                has_aaaa=item.get("has_aaaa"),
                http_works=item.get("http_works"),
            )
            for item in data.get("overrides", [])
        ]
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise ConfigurationError(
            code="invalid_config",
            message=f"Invalid configuration in {config_path}: {e}",
            details={"config_path": str(config_path)},
        )

    return SystemConfig(
        probe=probe,
        persistence=persistence,
        logging=logging_config,
        run=run,
        overrides=overrides,
        language=data.get("language", defaults.language),
    )


def build_config(args: argparse.Namespace) -> SystemConfig:
    """Resolve the configuration: CLI flag > config file > environment > default."""
    if getattr(args, "config", None):
        config = load_config_from_file(Path(args.config))
    else:
        config = create_default_config()

    if getattr(args, "registry", None):
        config.persistence.registry_path = Path(args.registry)
    if getattr(args, "language", None):
        config.language = args.language

    if args.command == "check":
        config.run = RunConfig(
            verbose=args.verbose,
            detail=args.detail,
            dry_run=args.dry_run,
            max_parallel_endpoints=(
                args.parallel if args.parallel is not None else config.run.max_parallel_endpoints
            ),
            only_ids=list(args.only or []),
        )
        if config.run.max_parallel_endpoints < 1:
            raise ConfigurationError(
                code="invalid_parallelism",
                message="--parallel must be at least 1",
                details={},
            )

    return config


def create_logger(config: SystemConfig, force: bool = False) -> Optional[AuditLogger]:
    """Create a logger when requested by flags or a debug log level."""
    if not force and config.logging.level != "debug":
        return None
    try:
        return AuditLogger.from_level_name(
            config.logging.level,
            output_format=config.logging.output_format,
        )
    except ValueError as e:
        raise ConfigurationError(code="invalid_logging", message=str(e), details={})


def _mark(value: Optional[bool]) -> str:
    return "✓" if value else "✗"


def _result_mark(result: Optional[TestResult]) -> str:
    if result is None:
        return "N/A"
    return _mark(result.works)


class ReportPrinter:
    """Prints per-endpoint lines as reports arrive."""

    def __init__(self, run: RunConfig, language: str) -> None:
        self._run = run
        self._language = language

    def _say(self, key: str, **kwargs) -> None:
        print(get_message(key, self._language, **kwargs))

    def header(self) -> None:
        modes = ""
        if self._run.verbose:
            modes += get_message("cli.mode_verbose", self._language)
        if self._run.detail:
            modes += get_message("cli.mode_detail", self._language)
        self._say("cli.header", modes=modes)

    def __call__(self, endpoint: Endpoint, report: EndpointReport) -> None:
        print()
        self._say("cli.endpoint", name=report.name, url=report.url)

        if self._run.detail:
            self._say("cli.current_status", status=report.previous_status.value)
            if endpoint.description:
                self._say("cli.description", description=endpoint.description)
            if endpoint.ipv6.notes:
                self._say("cli.notes", notes=endpoint.ipv6.notes)

        if self._run.verbose or self._run.detail:
            self._print_probe_line(report)

        if self._run.detail:
            for kind, probe in report.probes.items():
                self._print_variant_detail(kind, probe)

        for reason in report.overrides_applied:
            self._say("cli.override", reason=reason)

        if report.dirty:
            for change in report.changes:
                self._say("cli.change", change=change)
        elif not (self._run.verbose or self._run.detail):
            self._say(
                "cli.no_changes",
                main=_result_mark(report.apex_result),
                www=_result_mark(report.www_result),
            )

        if report.mismatch is not None:
            self._say(
                "cli.mismatch",
                current=report.mismatch.current.value,
                suggested=report.mismatch.suggested.value,
            )

    def _print_probe_line(self, report: EndpointReport) -> None:
        apex = report.probes[VariantKind.APEX]
        www = report.probes.get(VariantKind.WWW)
        addresses = ""
        if self._run.verbose and apex.addresses:
            addresses = " [" + ", ".join(apex.addresses) + "]"
        self._say(
            "cli.probe_line",
            aaaa=_mark(apex.has_aaaa),
            http=_mark(apex.http_works),
            www="N/A" if www is None else _mark(www.works),
            www_host=get_message("cli.subdomain", self._language) if www is None else www.hostname,
            addresses=addresses,
        )

    def _print_variant_detail(self, kind: VariantKind, probe: ProbeResult) -> None:
        extra = []
        if probe.http_status_code is not None:
            extra.append(f"status {probe.http_status_code}")
        if probe.error:
            extra.append(probe.error)
        if probe.addresses:
            extra.append(", ".join(probe.addresses))
        if probe.dual_stack:
            extra.append("dual-stack")
        self._say(
            "cli.variant_detail",
            kind=kind.value,
            hostname=probe.hostname or "-",
            aaaa=_mark(probe.has_aaaa),
            a=_mark(probe.has_a),
            http=_mark(probe.http_works),
            extra=f" ({'; '.join(extra)})" if extra else "",
        )

    def summary(self, summary: RunSummary, written: bool) -> None:
        print()
        counts = summary.status_counts
        self._say(
            "cli.summary",
            total=summary.total,
            main=summary.apex_working,
            main_pct=summary.apex_percentage,
            www=summary.www_working,
            www_pct=summary.www_percentage,
            full=counts.get(IPv6Status.FULL, 0),
            partial=counts.get(IPv6Status.PARTIAL, 0),
            none=counts.get(IPv6Status.NONE, 0),
            unknown=counts.get(IPv6Status.UNKNOWN, 0),
        )
        if self._run.dry_run:
            self._say("cli.dry_run")
        elif written:
            self._say("cli.updated")
        else:
            self._say("cli.not_updated")


async def run_check(config: SystemConfig, logger: Optional[AuditLogger] = None) -> int:
    """
    Run one probing pass over the registry.

    Returns:
        Exit code (0 on success; store errors propagate as exceptions)
    """
    printer = ReportPrinter(config.run, config.language)
    printer.header()

    store = RegistryStore(config.persistence.registry_path, logger=logger)
    async with CheckOrchestrator(config=config, logger=logger) as orchestrator:
        result = await orchestrator.run_pass(store, config.run, on_report=printer)

    printer.summary(result.summary, result.written)
    return 0


def cmd_check(args: argparse.Namespace) -> int:
    """Handle the 'check' command."""
    config = build_config(args)
    logger = create_logger(config, force=config.run.verbose or config.run.detail)
    return asyncio.run(run_check(config, logger))


def cmd_analyze(args: argparse.Namespace) -> int:
    """Handle the 'analyze' command."""
    config = build_config(args)
    registry = RegistryStore(config.persistence.registry_path).load()

    print(get_message("analysis.title", config.language))
    print()
    print(format_analysis_table(analyze_registry(registry)))
    print()
    print(get_message("analysis.legend", config.language))
    return 0


def print_cloud_survey(result: CloudSurveyResult, language: str) -> None:
    def outcome_text(survey) -> str:
        if survey.error:
            return get_message("cloud.not_found", language)
        if survey.has_ipv6:
            return get_message("cloud.ipv6", language, address=survey.addresses[0])
        return get_message("cloud.no_ipv6", language)

    print(get_message("cloud.title", language, provider=result.provider.upper()))
    print("=" * 50)
    print()
    print(get_message("cloud.api_endpoints", language))
    for hostname, survey in result.api_endpoints.items():
        print(f"   {hostname.ljust(40)}{outcome_text(survey)}")

    print()
    print(get_message("cloud.service_endpoints", language))
    for service, endpoints in result.service_endpoints.items():
        print(f"   {service.upper()}:")
        for hostname, survey in endpoints.items():
            print(f"     {hostname.ljust(45)}{outcome_text(survey)}")

    print()
    print(get_message(
        "cloud.summary",
        language,
        total=result.total,
        enabled=result.ipv6_enabled,
        percentage=result.ipv6_percentage,
    ))


def cmd_cloud(args: argparse.Namespace) -> int:
    """Handle the 'cloud' command."""
    config = build_config(args)
    logger = create_logger(config)

    result = asyncio.run(survey_provider(args.provider, DNSProbe(logger=logger)))
    print_cloud_survey(result, config.language)

    if args.save:
        path = save_survey(result, Path(args.output_dir))
        print(get_message("cloud.saved", config.language, path=path))
    return 0


def _add_common_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config", "-c",
        help="Path to JSON configuration file",
    )
    parser.add_argument(
        "--language", "-l",
        choices=sorted(SUPPORTED_LANGUAGES),
        help="Output language (default: en)",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="ipv6-checker",
        description="Verify IPv6 reachability (DNS and HTTP) of registry endpoints",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # 'check' command
    check_parser = subparsers.add_parser(
        "check",
        help="Probe all endpoints once and update the registry (default)",
    )
    _add_common_options(check_parser)
    check_parser.add_argument(
        "--registry", "-r",
        help=f"Path to the registry file (default: {DEFAULT_REGISTRY_PATH})",
    )
    check_parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Print per-endpoint probe results inline",
    )
    check_parser.add_argument(
        "--detail", "-d",
        action="store_true",
        help="Print per-variant DNS/HTTP breakdown and status mismatches",
    )
    check_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Probe and report without writing the registry",
    )
    check_parser.add_argument(
        "--parallel", "-p",
        type=int,
        help="Number of endpoints probed at the same time (default: 1)",
    )
    check_parser.add_argument(
        "--only",
        action="append",
        metavar="ID",
        help="Only check the endpoint with this id (repeatable)",
    )
    check_parser.set_defaults(func=cmd_check)

    # 'analyze' command
    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Compare stored statuses with the statuses suggested by test results",
    )
    _add_common_options(analyze_parser)
    analyze_parser.add_argument(
        "--registry", "-r",
        help=f"Path to the registry file (default: {DEFAULT_REGISTRY_PATH})",
    )
    analyze_parser.set_defaults(func=cmd_analyze)

    # 'cloud' command
    cloud_parser = subparsers.add_parser(
        "cloud",
        help="Survey IPv6 DNS records of a cloud provider's endpoints",
    )
    _add_common_options(cloud_parser)
    cloud_parser.add_argument(
        "provider",
        choices=sorted(CLOUD_ENDPOINTS),
        help="Cloud provider to survey",
    )
    cloud_parser.add_argument(
        "--save",
        action="store_true",
        help="Save the survey as JSON",
    )
    cloud_parser.add_argument(
        "--output-dir",
        default=str(DEFAULT_CLOUD_TESTS_DIR),
        help=f"Directory for saved surveys (default: {DEFAULT_CLOUD_TESTS_DIR})",
    )
    cloud_parser.set_defaults(func=cmd_cloud)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Without a command, ``check`` is run.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    load_dotenv()

    argv = list(sys.argv[1:] if argv is None else argv)
    if not argv or (argv[0] not in COMMANDS and argv[0] not in ("-h", "--help", "--version")):
        argv.insert(0, "check")

    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        return args.func(args)
    except IPv6CheckerError as e:
        print(get_message("cli.error", error=e.message), file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
