"""
Probe override policy.

Some servers reject this checker's HTTP client over IPv6 although they do
serve IPv6 clients (e.g. an edge network refusing unfamiliar TLS client
fingerprints). An override forces a probe outcome for a specific endpoint
and records why, so the exception stays visible in logs and output.
"""

from dataclasses import dataclass, replace
from typing import Iterable, Optional

from .audit_logger import AuditLogger
from .config import OverrideConfig
from .enums import VariantKind
from .exceptions import ConfigurationError
from .models import ProbeResult


@dataclass(frozen=True)
class ProbeOverride:
    """A forced probe outcome for one endpoint."""

    endpoint_id: str
    reason: str
    variant: Optional[VariantKind] = None  # None applies to every variant
    has_aaaa: Optional[bool] = None
    http_works: Optional[bool] = None

    def matches(self, endpoint_id: str, kind: VariantKind) -> bool:
        return self.endpoint_id == endpoint_id and (
            self.variant is None or self.variant == kind
        )


class OverridePolicy:
    """
    Lookup of probe overrides keyed by endpoint id.

    Applied after raw probing and before test reconciliation.
    """

    def __init__(
        self,
        overrides: Optional[Iterable[ProbeOverride]] = None,
        logger: Optional[AuditLogger] = None,
    ) -> None:
        self._overrides: dict[str, list[ProbeOverride]] = {}
        self._logger = logger
        for override in overrides or []:
            self.add(override)

    @classmethod
    def from_config(
        cls,
        configs: Iterable[OverrideConfig],
        logger: Optional[AuditLogger] = None,
    ) -> "OverridePolicy":
        """
        Build a policy from configuration entries.

        Raises:
            ConfigurationError: If an entry names an unknown variant, has no
                reason, or forces nothing
        """
        overrides = []
        for config in configs:
            variant = None
            if config.variant is not None:
                try:
                    variant = VariantKind(config.variant)
                except ValueError:
                    raise ConfigurationError(
                        code="invalid_override",
                        message=f"Unknown override variant: {config.variant}",
                        details={"endpoint_id": config.endpoint_id},
                    )
            if not config.reason:
                raise ConfigurationError(
                    code="invalid_override",
                    message=f"Override for {config.endpoint_id} has no reason",
                    details={"endpoint_id": config.endpoint_id},
                )
            if config.has_aaaa is None and config.http_works is None:
                raise ConfigurationError(
                    code="invalid_override",
                    message=f"Override for {config.endpoint_id} forces no outcome",
                    details={"endpoint_id": config.endpoint_id},
                )
            overrides.append(ProbeOverride(
                endpoint_id=config.endpoint_id,
                reason=config.reason,
                variant=variant,
                has_aaaa=config.has_aaaa,
                http_works=config.http_works,
            ))
        return cls(overrides, logger=logger)

    def add(self, override: ProbeOverride) -> None:
        self._overrides.setdefault(override.endpoint_id, []).append(override)

    def for_endpoint(self, endpoint_id: str) -> list[ProbeOverride]:
        return list(self._overrides.get(endpoint_id, []))

    def __len__(self) -> int:
        return sum(len(items) for items in self._overrides.values())

    def apply(
        self,
        endpoint_id: str,
        kind: VariantKind,
        probe: ProbeResult,
    ) -> ProbeResult:
        """
        Return ``probe`` with any matching overrides applied.

        The original result is left untouched; applied reasons are appended
        to ``ProbeResult.overrides``.
        """
        result = probe
        for override in self._overrides.get(endpoint_id, []):
            if not override.matches(endpoint_id, kind):
                continue

            changes = {}
            if override.has_aaaa is not None:
                changes["has_aaaa"] = override.has_aaaa
            if override.http_works is not None:
                changes["http_works"] = override.http_works

            before = result
            result = replace(
                result,
                overrides=result.overrides + (override.reason,),
                **changes,
            )

            if self._logger:
                self._logger.warn(
                    "OverridePolicy",
                    f"Override applied to {endpoint_id} ({kind.value})",
                    {
                        "endpoint_id": endpoint_id,
                        "variant": kind.value,
                        "hostname": probe.hostname,
                        "reason": override.reason,
                        "measured": {"has_aaaa": before.has_aaaa, "http_works": before.http_works},
                        "forced": changes,
                    },
                )

        return result
