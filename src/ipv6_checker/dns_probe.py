"""
DNS probe for IPv6 (AAAA) and IPv4 (A) address records.

Resolution goes through the platform resolver via the event loop's
``getaddrinfo``, restricted to one address family per lookup. A failed
resolution (NXDOMAIN, no data, resolver error) is a normal outcome and is
reported as "no records", never raised.
"""

import asyncio
import socket
from typing import Optional

from .audit_logger import AuditLogger
from .enums import LogLevel
from .models import DNSLookup


# Only the first few addresses are kept for diagnostics
MAX_ADDRESSES = 2


class DNSProbe:
    """
    Async address-record resolver.

    Lookups for different hostnames and families may run concurrently on
    the same instance.
    """

    def __init__(
        self,
        max_addresses: int = MAX_ADDRESSES,
        logger: Optional[AuditLogger] = None,
    ) -> None:
        """
        Initialize the DNS probe.

        Args:
            max_addresses: Number of addresses retained per lookup
            logger: Optional audit logger
        """
        self._max_addresses = max_addresses
        self._logger = logger

    async def lookup_aaaa(self, hostname: str) -> DNSLookup:
        """Resolve IPv6 addresses for a hostname."""
        return await self._lookup(hostname, socket.AF_INET6)

    async def lookup_a(self, hostname: str) -> DNSLookup:
        """Resolve IPv4 addresses for a hostname."""
        return await self._lookup(hostname, socket.AF_INET)

    async def _lookup(self, hostname: str, family: int) -> DNSLookup:
        loop = asyncio.get_running_loop()
        record_type = "AAAA" if family == socket.AF_INET6 else "A"

        try:
            addr_info = await loop.getaddrinfo(
                hostname,
                None,
                family=family,
                type=socket.SOCK_STREAM,
            )
        except socket.gaierror as e:
            self._log(
                LogLevel.DEBUG,
                f"No {record_type} records for {hostname}",
                {"hostname": hostname, "error": str(e)},
            )
            return DNSLookup(has_records=False)
        except (UnicodeError, OSError) as e:
            self._log(
                LogLevel.WARN,
                f"{record_type} lookup failed for {hostname}",
                {"hostname": hostname, "error": str(e), "error_type": type(e).__name__},
            )
            return DNSLookup(has_records=False)

        addresses: list[str] = []
        for info in addr_info:
            if info[0] != family:
                continue
            address = info[4][0]
            if address not in addresses:
                addresses.append(address)

        if not addresses:
            return DNSLookup(has_records=False)

        return DNSLookup(
            has_records=True,
            addresses=tuple(addresses[: self._max_addresses]),
        )

    def _log(self, level: LogLevel, message: str, data: dict) -> None:
        if self._logger:
            self._logger.log(level, "DNSProbe", message, data)
