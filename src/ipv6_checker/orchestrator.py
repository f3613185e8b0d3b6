"""
Check Orchestrator for the IPv6 connectivity checker.

This module coordinates one probing pass over the registry:
- Hostname variant derivation per endpoint
- Concurrent DNS (AAAA, A) and IPv6 HTTP probes for every variant
- Probe overrides for known false negatives
- Test reconciliation and status inference
- A single, change-suppressed write of the registry at the end

Endpoints are processed in registry order. Reconciliation of an endpoint
starts only after all of its probes have resolved, and the registry is
written only after every endpoint has been reconciled.
"""

import asyncio
import copy
from dataclasses import dataclass
from typing import Callable, Optional

from .analysis import RunSummary, summarize_run
from .audit_logger import AuditLogger
from .config import RunConfig, SystemConfig
from .dns_probe import DNSProbe
from .enums import LogLevel, ProbeErrorCode, TestResult, VariantKind
from .http_probe import HTTPProbe
from .models import (
    APEX_TEST_ID,
    WWW_TEST_ID,
    Endpoint,
    EndpointReport,
    ProbeResult,
    Registry,
)
from .overrides import OverridePolicy
from .reconciler import reconcile_tests
from .registry_store import RegistryStore, utc_timestamp
from .status_engine import StatusEngine
from .variant_resolver import resolve_variant, variant_url


ReportCallback = Callable[[Endpoint, EndpointReport], None]

@dataclass
class OrchestratorResult:
    """Result of a complete probing pass."""

    registry: Registry
    reports: list[EndpointReport]
    summary: RunSummary
    written: bool = False


class CheckOrchestrator:
    """
    Main orchestrator for IPv6 connectivity checks.

    Probes are injectable so the pipeline can run against fakes; by default
    a DNSProbe and an HTTPProbe built from the system configuration are used.
    """

    def __init__(
        self,
        config: Optional[SystemConfig] = None,
        dns_probe: Optional[DNSProbe] = None,
        http_probe: Optional[HTTPProbe] = None,
        override_policy: Optional[OverridePolicy] = None,
        status_engine: Optional[StatusEngine] = None,
        logger: Optional[AuditLogger] = None,
        clock: Callable[[], str] = utc_timestamp,
    ) -> None:
        """
        Initialize the check orchestrator.

        Args:
            config: System configuration (defaults are used if omitted)
            dns_probe: DNS probe; created from config if omitted
            http_probe: HTTP probe; created from config if omitted
            override_policy: Probe overrides; built from config if omitted
            status_engine: Status inference engine
            logger: Optional audit logger
            clock: Returns the timestamp stored in ``last_checked``
        """
        self._config = config or SystemConfig()
        self._logger = logger
        self._clock = clock

        self._dns_probe = dns_probe or DNSProbe(logger=logger)
        self._owns_http_probe = http_probe is None
        self._http_probe = http_probe or HTTPProbe(self._config.probe, logger=logger)

        if override_policy is None:
            override_policy = OverridePolicy.from_config(self._config.overrides, logger=logger)
        self._override_policy = override_policy
        self._status_engine = status_engine or StatusEngine()

    async def __aenter__(self) -> "CheckOrchestrator":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        if self._owns_http_probe:
            await self._http_probe.close()

    async def probe_hostname(self, url: str, hostname: Optional[str]) -> ProbeResult:
        """
        Run the AAAA, A and IPv6 HTTP probes for one hostname concurrently.

        A missing hostname short-circuits to a failed result.
        """
        if hostname is None:
            return ProbeResult(
                hostname=None,
                has_aaaa=False,
                has_a=False,
                http_works=False,
                error=ProbeErrorCode.NO_HOSTNAME.value,
            )

        aaaa, a, http = await asyncio.gather(
            self._dns_probe.lookup_aaaa(hostname),
            self._dns_probe.lookup_a(hostname),
            self._http_probe.probe(variant_url(url, hostname)),
        )

        return ProbeResult(
            hostname=hostname,
            has_aaaa=aaaa.has_records,
            has_a=a.has_records,
            http_works=http.success,
            error=http.error,
            addresses=aaaa.addresses,
            http_status_code=http.status_code,
        )

    async def check_endpoint(
        self,
        endpoint: Endpoint,
        run: Optional[RunConfig] = None,
    ) -> tuple[Endpoint, EndpointReport]:
        """
        Probe and reconcile a single endpoint.

        The given endpoint is not modified; an updated copy is returned
        together with a report of what was observed and changed.
        """
        run = run or self._config.run
        variant = resolve_variant(endpoint.url)
        kinds = variant.kinds()

        if not variant.is_valid:
            self._log(
                LogLevel.WARN,
                f"Malformed URL for {endpoint.id}, probes skipped",
                {"endpoint_id": endpoint.id, "url": endpoint.url},
            )

        raw_probes = await asyncio.gather(*(
            self.probe_hostname(endpoint.url, variant.hostname_for(kind))
            for kind in kinds
        ))

        probes: dict[VariantKind, ProbeResult] = {}
        overrides_applied: list[str] = []
        for kind, raw in zip(kinds, raw_probes):
            probe = self._override_policy.apply(endpoint.id, kind, raw)
            overrides_applied.extend(probe.overrides[len(raw.overrides):])
            probes[kind] = probe

        updated = copy.deepcopy(endpoint)
        outcome = reconcile_tests(updated.ipv6.tests, variant, probes)
        updated.ipv6.tests = outcome.tests
        updated.ipv6.last_checked = self._clock()

        changes = list(outcome.changes)
        apex_works = probes[VariantKind.APEX].works
        www_works = probes[VariantKind.WWW].works if VariantKind.WWW in probes else None

        previous_status = endpoint.ipv6.status
        if self._status_engine.apply(updated.ipv6, apex_works, www_works):
            changes.append(f"status: {previous_status.value} -> {updated.ipv6.status.value}")

        mismatch = None
        if run.detail:
            mismatch = self._status_engine.check_mismatch(updated.id, updated.ipv6)

        www_test = updated.ipv6.get_test(WWW_TEST_ID)
        apex_test = updated.ipv6.get_test(APEX_TEST_ID)
        report = EndpointReport(
            endpoint_id=endpoint.id,
            name=endpoint.name,
            url=endpoint.url,
            variant=variant,
            probes=probes,
            apex_result=apex_test.result if apex_test else TestResult.UNEVALUATED,
            www_result=www_test.result if www_test else None,
            previous_status=previous_status,
            status=updated.ipv6.status,
            dirty=bool(changes),
            changes=changes,
            mismatch=mismatch,
            overrides_applied=overrides_applied,
        )

        self._log(
            LogLevel.INFO,
            f"Checked {endpoint.id}: apex={report.apex_result.to_bool()} "
            f"www={None if report.www_result is None else report.www_result.to_bool()}",
            {
                "endpoint_id": endpoint.id,
                "dirty": report.dirty,
                "changes": changes,
                "status": report.status.value,
            },
        )

        return updated, report

    async def run(
        self,
        registry: Registry,
        run: Optional[RunConfig] = None,
        on_report: Optional[ReportCallback] = None,
    ) -> tuple[Registry, list[EndpointReport]]:
        """
        Probe every selected endpoint of ``registry``.

        Returns a new Registry; the input registry is left unchanged.
        Endpoints not selected by ``run.only_ids`` are copied unmodified.
        ``on_report`` is called with each updated endpoint and its report,
        in registry order.
        """
        run = run or self._config.run
        selected = [
            e for e in registry.endpoints
            if not run.only_ids or e.id in run.only_ids
        ]

        if run.max_parallel_endpoints > 1:
            semaphore = asyncio.Semaphore(run.max_parallel_endpoints)

            async def bounded(endpoint: Endpoint) -> tuple[Endpoint, EndpointReport]:
                async with semaphore:
                    return await self.check_endpoint(endpoint, run)

            results = await asyncio.gather(*(bounded(e) for e in selected))
            if on_report:
                for updated, report in results:
                    on_report(updated, report)
        else:
            results = []
            for endpoint in selected:
                updated, report = await self.check_endpoint(endpoint, run)
                results.append((updated, report))
                if on_report:
                    on_report(updated, report)

        updated_by_id = {updated.id: updated for updated, _ in results}
        new_registry = Registry(
            endpoints=[
                updated_by_id.get(e.id) or copy.deepcopy(e)
                for e in registry.endpoints
            ],
            extra=copy.deepcopy(registry.extra),
        )
        return new_registry, [report for _, report in results]

    async def run_pass(
        self,
        store: RegistryStore,
        run: Optional[RunConfig] = None,
        on_report: Optional[ReportCallback] = None,
    ) -> OrchestratorResult:
        """
        Load the registry, probe it, and write it back if anything changed.

        Raises:
            PersistenceError: If the registry cannot be read or written
        """
        run = run or self._config.run
        baseline = store.load()

        registry, reports = await self.run(baseline, run, on_report)

        written = False
        if run.dry_run:
            self._log(LogLevel.INFO, "Dry run, registry not written", {})
        else:
            written = store.save_if_changed(registry, baseline)

        return OrchestratorResult(
            registry=registry,
            reports=reports,
            summary=summarize_run(registry, reports, written),
            written=written,
        )

    def _log(self, level: LogLevel, message: str, data: dict) -> None:
        if self._logger:
            self._logger.log(level, "CheckOrchestrator", message, data)

    @property
    def override_policy(self) -> OverridePolicy:
        """Get the override policy in use."""
        return self._override_policy

    @property
    def config(self) -> SystemConfig:
        """Get the system configuration."""
        return self._config
