"""
Configuration dataclasses for the IPv6 connectivity checker.

This module defines all configuration structures used throughout the system:
probe settings, registry persistence, logging, per-run options, and probe
overrides.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from . import __version__


DEFAULT_REGISTRY_PATH = Path("data") / "services.yaml"
DEFAULT_HTTP_TIMEOUT_SECONDS = 5.0


@dataclass
class ProbeConfig:
    """DNS and HTTP probe settings."""

    http_timeout_seconds: float = DEFAULT_HTTP_TIMEOUT_SECONDS
    user_agent: str = f"ipv6-checker/{__version__}"
    verify_tls: bool = True


@dataclass
class PersistenceConfig:
    """Registry store configuration."""

    registry_path: Path = DEFAULT_REGISTRY_PATH


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "info"
    output_format: str = "text"  # 'json', 'text', 'both'


@dataclass
class OverrideConfig:
    """A forced probe outcome for one endpoint, with its justification."""

    endpoint_id: str
    reason: str
    variant: Optional[str] = None  # 'apex', 'www' or None for both
    has_aaaa: Optional[bool] = None
    http_works: Optional[bool] = None


@dataclass
class RunConfig:
    """Options for a single probing pass, threaded through the call chain."""

    verbose: bool = False
    detail: bool = False
    dry_run: bool = False
    max_parallel_endpoints: int = 1
    only_ids: list[str] = field(default_factory=list)


@dataclass
class SystemConfig:
    """Main system configuration combining all sub-configurations."""

    probe: ProbeConfig = field(default_factory=ProbeConfig)
    persistence: PersistenceConfig = field(default_factory=PersistenceConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    run: RunConfig = field(default_factory=RunConfig)
    overrides: list[OverrideConfig] = field(default_factory=list)
    language: str = "en"  # 'en' or 'de'
