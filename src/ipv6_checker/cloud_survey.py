"""
DNS-only IPv6 survey of well-known cloud provider endpoints.

For each catalogued endpoint the survey resolves AAAA records; when none
exist it also resolves A records to tell "no IPv6" apart from a hostname
that does not resolve at all.
"""

import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Optional

from .dns_probe import DNSProbe
from .exceptions import ConfigurationError, PersistenceError


NXDOMAIN = "NXDOMAIN"

CLOUD_ENDPOINTS: dict[str, dict] = {
    "aws": {
        "api": [
            "amazonaws.com",
            "aws.amazon.com",
            "console.aws.amazon.com",
        ],
        "services": {
            "s3": [
                "s3.amazonaws.com",
                "s3.us-east-1.amazonaws.com",
                "s3.dualstack.us-east-1.amazonaws.com",
                "s3-accelerate.amazonaws.com",
                "s3-accelerate.dualstack.amazonaws.com",
            ],
            "ec2": [
                "ec2.amazonaws.com",
                "ec2.us-east-1.amazonaws.com",
            ],
            "cloudfront": [
                "cloudfront.amazonaws.com",
            ],
            "rds": [
                "rds.amazonaws.com",
                "rds.us-east-1.amazonaws.com",
            ],
            "lambda": [
                "lambda.amazonaws.com",
                "lambda.us-east-1.amazonaws.com",
            ],
            "dynamodb": [
                "dynamodb.amazonaws.com",
                "dynamodb.us-east-1.amazonaws.com",
                "dynamodb.dualstack.us-east-1.amazonaws.com",
            ],
        },
    },
    "gcp": {
        "api": [
            "cloud.google.com",
            "console.cloud.google.com",
            "googleapis.com",
        ],
        "services": {
            "compute": ["compute.googleapis.com", "www.googleapis.com"],
            "storage": ["storage.googleapis.com", "storage.cloud.google.com"],
            "cloud-cdn": ["cdn.googleapis.com"],
        },
    },
    "azure": {
        "api": [
            "azure.microsoft.com",
            "portal.azure.com",
            "management.azure.com",
        ],
        "services": {
            "compute": ["management.azure.com"],
            "storage": [
                "blob.core.windows.net",
                "file.core.windows.net",
                "queue.core.windows.net",
                "table.core.windows.net",
            ],
            "cdn": ["azureedge.net"],
        },
    },
    "cloudflare": {
        "api": [
            "cloudflare.com",
            "dash.cloudflare.com",
            "api.cloudflare.com",
        ],
        "services": {
            "cdn": ["cloudflare.com", "cloudflare-dns.com"],
            "workers": ["workers.dev", "workers.cloudflare.com"],
            "pages": ["pages.dev", "cloudflare.com"],
            "r2": ["r2.cloudflarestorage.com"],
        },
    },
}


@dataclass
class EndpointSurvey:
    """IPv6 outcome for one cloud endpoint."""

    hostname: str
    has_ipv6: bool
    addresses: list[str] = field(default_factory=list)
    error: Optional[str] = None


@dataclass
class CloudSurveyResult:
    """Survey outcome for one provider."""

    provider: str
    api_endpoints: dict[str, EndpointSurvey] = field(default_factory=dict)
    service_endpoints: dict[str, dict[str, EndpointSurvey]] = field(default_factory=dict)
    total: int = 0
    ipv6_enabled: int = 0

    @property
    def ipv6_percentage(self) -> int:
        if self.total == 0:
            return 0
        return round(self.ipv6_enabled / self.total * 100)

    def to_dict(self) -> dict:
        return {
            "provider": self.provider,
            "api_endpoints": {k: asdict(v) for k, v in self.api_endpoints.items()},
            "service_endpoints": {
                service: {k: asdict(v) for k, v in endpoints.items()}
                for service, endpoints in self.service_endpoints.items()
            },
            "summary": {
                "total": self.total,
                "ipv6_enabled": self.ipv6_enabled,
                "ipv6_percentage": self.ipv6_percentage,
            },
        }


async def survey_endpoint(hostname: str, dns_probe: DNSProbe) -> EndpointSurvey:
    aaaa = await dns_probe.lookup_aaaa(hostname)
    if aaaa.has_records:
        return EndpointSurvey(hostname=hostname, has_ipv6=True, addresses=list(aaaa.addresses))

    a = await dns_probe.lookup_a(hostname)
    return EndpointSurvey(
        hostname=hostname,
        has_ipv6=False,
        error=None if a.has_records else NXDOMAIN,
    )


async def survey_provider(provider: str, dns_probe: Optional[DNSProbe] = None) -> CloudSurveyResult:
    """
    Survey every catalogued endpoint of a provider.

    Raises:
        ConfigurationError: If the provider is not catalogued
    """
    catalogue = CLOUD_ENDPOINTS.get(provider.lower())
    if catalogue is None:
        raise ConfigurationError(
            code="unknown_provider",
            message=f"Unknown provider: {provider}",
            details={"providers": sorted(CLOUD_ENDPOINTS)},
        )

    dns_probe = dns_probe or DNSProbe()
    result = CloudSurveyResult(provider=provider.lower())

    for hostname in catalogue["api"]:
        outcome = await survey_endpoint(hostname, dns_probe)
        result.api_endpoints[hostname] = outcome
        result.total += 1
        result.ipv6_enabled += int(outcome.has_ipv6)

    for service, hostnames in catalogue["services"].items():
        result.service_endpoints[service] = {}
        for hostname in hostnames:
            outcome = await survey_endpoint(hostname, dns_probe)
            result.service_endpoints[service][hostname] = outcome
            result.total += 1
            result.ipv6_enabled += int(outcome.has_ipv6)

    return result


def save_survey(result: CloudSurveyResult, directory: Path) -> Path:
    """
    Write a survey result as ``<provider>-ipv6-test.json``.

    Raises:
        PersistenceError: If the file cannot be written
    """
    path = Path(directory) / f"{result.provider}-ipv6-test.json"
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(result.to_dict(), f, indent=2, ensure_ascii=False)
    except OSError as e:
        raise PersistenceError(
            code="io_error",
            message=f"Failed to write survey file: {e}",
            details={"file_path": str(path)},
        )
    return path
