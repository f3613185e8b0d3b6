"""
Domain variant resolution.

Derives the set of hostnames to probe for an endpoint URL: the apex
hostname and, where it makes sense, its ``www.`` sibling. Service-specific
subdomains (``store.example.com``) get no www sibling, since most of them
have none and probing it would only produce false negatives.
"""

import re
from typing import Optional
from urllib.parse import urlsplit, urlunsplit

import idna

from .enums import ProvidedForm
from .models import DomainVariant


WWW_PREFIX = "www."

# Valid ASCII hostname label after IDNA encoding
LABEL_PATTERN = re.compile(r"^(?!-)[a-z0-9-]{1,63}(?<!-)$")

INVALID_VARIANT = DomainVariant(apex=None, www=None, provided_form=None)


def normalize_hostname(hostname: str) -> Optional[str]:
    """
    Convert a hostname to canonical form (lowercase, IDNA-encoded).

    Args:
        hostname: Hostname as found in the URL

    Returns:
        Canonical hostname, or None if it is not a usable DNS name
    """
    host = hostname.strip().rstrip(".").lower()
    if not host:
        return None

    if any(ord(c) > 127 for c in host):
        try:
            host = idna.encode(host, uts46=True).decode("ascii")
        except idna.IDNAError:
            return None

    labels = host.split(".")
    if not all(LABEL_PATTERN.match(label) for label in labels):
        return None

    return host


def extract_hostname(url: str) -> Optional[str]:
    """Return the canonical hostname of a URL, or None if the URL is malformed."""
    if not url or not isinstance(url, str):
        return None

    try:
        parts = urlsplit(url.strip())
        # Accessing .port validates it
        parts.port
        hostname = parts.hostname
    except ValueError:
        return None

    if not parts.scheme or not hostname:
        return None

    return normalize_hostname(hostname)


def resolve_variant(url: str) -> DomainVariant:
    """
    Derive the hostname variants to probe for an endpoint URL.

    - ``www.example.com`` -> apex ``example.com``, www ``www.example.com``
    - ``store.example.com`` -> apex ``store.example.com``, no www
    - ``example.com`` -> apex ``example.com``, www ``www.example.com``

    Malformed URLs yield a variant with every field None; this never raises.
    """
    hostname = extract_hostname(url)
    if hostname is None:
        return INVALID_VARIANT

    if hostname.startswith(WWW_PREFIX):
        apex = hostname[len(WWW_PREFIX):]
        if not apex:
            return INVALID_VARIANT
        return DomainVariant(apex=apex, www=hostname, provided_form=ProvidedForm.WWW)

    if len(hostname.split(".")) > 2:
        return DomainVariant(apex=hostname, www=None, provided_form=ProvidedForm.SUBDOMAIN)

    return DomainVariant(
        apex=hostname,
        www=WWW_PREFIX + hostname,
        provided_form=ProvidedForm.APEX,
    )


def variant_url(url: str, hostname: str) -> str:
    """
    Build the URL to probe for a variant hostname.

    Keeps the scheme, explicit port and path of the endpoint URL; drops
    credentials, query and fragment.
    """
    parts = urlsplit(url.strip())
    netloc = hostname
    if parts.port is not None:
        netloc = f"{hostname}:{parts.port}"
    return urlunsplit((parts.scheme, netloc, parts.path or "/", "", ""))
