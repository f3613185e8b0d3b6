"""
HTTP reachability probe restricted to IPv6.

The probe sends a single HEAD request over a transport bound to the IPv6
wildcard address, so the connection can only be established over IPv6.
Any response counts as reachable: the probe measures reachability, not
application correctness. Failures are classified and returned, never
raised.
"""

import asyncio
import errno
import ssl
import time
from typing import Optional

import httpx

from .audit_logger import AuditLogger
from .config import ProbeConfig
from .enums import LogLevel, ProbeErrorCode
from .models import HTTPProbeResult


# Binding the local side to "::" only allows IPv6 sockets to connect
IPV6_LOCAL_ADDRESS = "::"


def classify_error(exc: BaseException) -> str:
    """
    Map a transport exception onto an error code.

    Walks the exception chain looking for the underlying socket error and
    returns its errno name (e.g. ``ECONNREFUSED``). TLS failures map to
    ``TLS_ERROR``; anything else to ``CONNECT_ERROR``.
    """
    seen = set()
    current: Optional[BaseException] = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        if isinstance(current, ssl.SSLError):
            return ProbeErrorCode.TLS_ERROR.value
        if isinstance(current, OSError) and current.errno in errno.errorcode:
            return errno.errorcode[current.errno]
        current = current.__cause__ or current.__context__

    text = str(exc).lower()
    if "ssl" in text or "certificate" in text or "tls" in text:
        return ProbeErrorCode.TLS_ERROR.value
    return ProbeErrorCode.CONNECT_ERROR.value


class HTTPProbe:
    """
    Async HTTP reachability probe bound to the IPv6 address family.

    One instance owns a single ``httpx.AsyncClient`` for the whole run and
    can serve many concurrent probes.
    """

    def __init__(
        self,
        config: Optional[ProbeConfig] = None,
        logger: Optional[AuditLogger] = None,
    ) -> None:
        """
        Initialize the HTTP probe.

        Args:
            config: Probe settings (timeout, user agent, TLS verification)
            logger: Optional audit logger
        """
        self._config = config or ProbeConfig()
        self._logger = logger
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "HTTPProbe":
        """Async context manager entry."""
        self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            transport = httpx.AsyncHTTPTransport(
                local_address=IPV6_LOCAL_ADDRESS,
                verify=self._config.verify_tls,
                retries=0,
            )
            self._client = httpx.AsyncClient(
                transport=transport,
                timeout=httpx.Timeout(self._config.http_timeout_seconds),
                follow_redirects=False,
                headers={"User-Agent": self._config.user_agent},
            )
        return self._client

    @property
    def timeout(self) -> float:
        return self._config.http_timeout_seconds

    async def probe(self, url: str) -> HTTPProbeResult:
        """
        Attempt a HEAD request to ``url`` over IPv6.

        Args:
            url: Full URL to probe

        Returns:
            HTTPProbeResult; ``success`` is True for any HTTP response
        """
        start_time = time.perf_counter()
        client = self._ensure_client()

        try:
            status_code = await asyncio.wait_for(
                self._head(client, url),
                timeout=self._config.http_timeout_seconds,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException):
            return self._failure(url, ProbeErrorCode.TIMEOUT.value, start_time)
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as e:
            return self._failure(url, ProbeErrorCode.INVALID_URL.value, start_time, e)
        except httpx.TransportError as e:
            return self._failure(url, classify_error(e), start_time, e)
        except httpx.HTTPError as e:
            return self._failure(url, ProbeErrorCode.PROTOCOL_ERROR.value, start_time, e)
        except OSError as e:
            return self._failure(url, classify_error(e), start_time, e)

        result = HTTPProbeResult(
            success=True,
            status_code=status_code,
            error=None,
            response_time_ms=self._elapsed_ms(start_time),
        )
        self._log(
            LogLevel.DEBUG,
            f"IPv6 HTTP response from {url}",
            {"url": url, "status_code": status_code, "duration_ms": result.response_time_ms},
        )
        return result

    async def _head(self, client: httpx.AsyncClient, url: str) -> int:
        # Leaving the stream context right after the headers closes the connection
        async with client.stream("HEAD", url) as response:
            return response.status_code

    def _failure(
        self,
        url: str,
        code: str,
        start_time: float,
        error: Optional[Exception] = None,
    ) -> HTTPProbeResult:
        result = HTTPProbeResult(
            success=False,
            status_code=None,
            error=code,
            response_time_ms=self._elapsed_ms(start_time),
        )
        data = {"url": url, "error": code, "duration_ms": result.response_time_ms}
        if error is not None:
            data["error_message"] = str(error)
            data["error_type"] = type(error).__name__
        self._log(LogLevel.DEBUG, f"IPv6 HTTP probe failed for {url}", data)
        return result

    def _elapsed_ms(self, start_time: float) -> float:
        """Calculate elapsed time in milliseconds."""
        return (time.perf_counter() - start_time) * 1000

    def _log(self, level: LogLevel, message: str, data: dict) -> None:
        if self._logger:
            self._logger.log(level, "HTTPProbe", message, data)

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
