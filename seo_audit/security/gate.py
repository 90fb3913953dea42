"""URL security gate: the SSRF defence in front of every page fetch.

Two stages, both fail-closed and exception-free:

``validate``
    Normalises the raw URL to ``https://``, then checks scheme, embedded
    credentials, domain allowlist and literal path-traversal sequences.

``resolve_and_check_ip``
    Resolves the hostname (or takes an IP literal as-is) and rejects any
    address inside a private, loopback, link-local or otherwise non-routable
    range.

Every rejection is logged on the ``seo_audit.security`` logger so security
events can be routed separately from ordinary request logs.
"""

from __future__ import annotations

import asyncio
import ipaddress
import logging
import re
import socket
from dataclasses import dataclass
from typing import Awaitable, Callable
from urllib.parse import urlsplit

from seo_audit.errors import PipelineError
from seo_audit.security.allowlist import DomainAllowlist

logger = logging.getLogger(__name__)
security_log = logging.getLogger("seo_audit.security")

Resolver = Callable[[str], Awaitable[list[str]]]

_HTTP_PREFIX = re.compile(r"^https?://", re.IGNORECASE)
_PLAIN_HTTP_PREFIX = re.compile(r"^http:", re.IGNORECASE)
_OTHER_SCHEME = re.compile(r"^[a-z][a-z0-9+.\-]*://", re.IGNORECASE)
_IPV4_RE = re.compile(r"^(\d{1,3})\.(\d{1,3})\.(\d{1,3})\.(\d{1,3})$")
_EMBEDDED_IPV4 = re.compile(r"(\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3})")

BLOCKED_NETWORKS = tuple(
    ipaddress.ip_network(cidr)
    for cidr in (
        "10.0.0.0/8",
        "172.16.0.0/12",
        "192.168.0.0/16",
        "127.0.0.0/8",
        "169.254.0.0/16",
        "0.0.0.0/8",
        "::1/128",
        "::/128",
        "fe80::/10",
        "fc00::/7",
    )
)

_LOOPBACK_LITERALS = ("127.0.0.1", "::1")


@dataclass(frozen=True)
class GateResult:
    """A URL that has passed a gate stage."""

    normalized_url: str
    hostname: str

    ok: bool = True


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def normalise_url(raw_url: str) -> str:
    """Force an ``https://`` scheme onto *raw_url*.

    Bare hosts get ``https://`` prepended and ``http://`` is upgraded.  Any
    other explicit scheme is left untouched so the protocol check rejects it.
    """
    url = raw_url.strip()
    if _HTTP_PREFIX.match(url):
        return _PLAIN_HTTP_PREFIX.sub("https:", url, count=1)
    if _OTHER_SCHEME.match(url):
        return url
    return f"https://{url}"


def is_homepage(url: str) -> bool:
    """``True`` if the URL path is ``/`` or empty; the query string is ignored."""
    try:
        path = urlsplit(url).path
    except ValueError:
        return False
    return path in ("", "/")


def _strip_brackets(hostname: str) -> str:
    return hostname[1:-1] if hostname.startswith("[") and hostname.endswith("]") else hostname


def parse_ip_literal(hostname: str) -> ipaddress.IPv4Address | ipaddress.IPv6Address | None:
    """Return the address if *hostname* is an IPv4/IPv6 literal, else ``None``."""
    try:
        return ipaddress.ip_address(_strip_brackets(hostname))
    except ValueError:
        return None


def is_blocked_address(address: str) -> bool:
    """Classify *address* against the private / loopback / link-local ranges.

    Anything that does not parse as an IP address is treated as blocked.
    """
    if not address:
        return True

    lowered = address.lower()
    if lowered in _LOOPBACK_LITERALS or lowered.startswith("127."):
        return True
    if "127.0.0.1" in lowered:
        return True

    match = _IPV4_RE.match(lowered)
    if match:
        octets = [int(part) for part in match.groups()]
        if any(octet > 255 for octet in octets):
            return True

    # An IPv4 address embedded in any other notation is classified on its own.
    embedded = _EMBEDDED_IPV4.search(lowered)
    if embedded and embedded.group(1) != lowered and is_blocked_address(embedded.group(1)):
        return True

    try:
        ip = ipaddress.ip_address(_strip_brackets(lowered).split("%", 1)[0])
    except ValueError:
        return True

    if isinstance(ip, ipaddress.IPv6Address) and ip.ipv4_mapped is not None:
        ip = ip.ipv4_mapped

    if ip.is_unspecified or ip.is_loopback or ip.is_link_local or ip.is_multicast:
        return True
    return any(ip in network for network in BLOCKED_NETWORKS if network.version == ip.version)


async def default_resolver(hostname: str) -> list[str]:
    """Resolve *hostname* to every address the system resolver returns."""
    loop = asyncio.get_running_loop()
    infos = await loop.getaddrinfo(hostname, 443, type=socket.SOCK_STREAM)
    addresses: list[str] = []
    for _family, _type, _proto, _canon, sockaddr in infos:
        address = str(sockaddr[0])
        if address not in addresses:
            addresses.append(address)
    return addresses


# ---------------------------------------------------------------------------
# Gate
# ---------------------------------------------------------------------------

class UrlSecurityGate:
    """Validates scrape targets before any outbound request is made.

    Usage::

        gate = UrlSecurityGate(allowlist, enforce_allowlist=True)
        checked = gate.validate("example.com/page")
        if isinstance(checked, PipelineError):
            ...
        resolved = await gate.resolve_and_check_ip(checked.normalized_url)
    """

    def __init__(
        self,
        allowlist: DomainAllowlist,
        enforce_allowlist: bool = True,
        resolver: Resolver | None = None,
    ) -> None:
        self._allowlist = allowlist
        self._enforce_allowlist = enforce_allowlist
        self._resolver = resolver or default_resolver

    @property
    def allowlist(self) -> DomainAllowlist:
        return self._allowlist

    def add_domain_to_allowlist(self, domain: str) -> bool:
        return self._allowlist.add(domain)

    def _reject(self, message: str, url: str) -> PipelineError:
        security_log.warning("Security rejection for %r: %s", url, message)
        return PipelineError.security(message)

    # ------------------------------------------------------------------
    # Stage 1: syntactic validation
    # ------------------------------------------------------------------

    def validate(self, raw_url: str) -> GateResult | PipelineError:
        if not isinstance(raw_url, str) or not raw_url.strip():
            return PipelineError.validation("URL is required")

        url = normalise_url(raw_url)
        try:
            parts = urlsplit(url)
            hostname = parts.hostname or ""
            _ = parts.port  # raises ValueError on a malformed port
        except ValueError:
            return PipelineError.validation("Invalid URL format")

        if parts.scheme.lower() != "https":
            return self._reject("Only HTTPS URLs are allowed", url)

        if not hostname:
            return PipelineError.validation("Invalid URL format")

        if parts.username is not None or parts.password is not None:
            return self._reject("URLs with embedded credentials are not allowed", url)

        if self._enforce_allowlist and not self._allowlist.is_allowed(hostname):
            return self._reject(f"Domain not in allowlist: {hostname}", url)

        if "../" in parts.path or "/.." in parts.path:
            return self._reject("Path traversal detected in URL path", url)

        return GateResult(normalized_url=url, hostname=hostname)

    # ------------------------------------------------------------------
    # Stage 2: DNS / IP classification
    # ------------------------------------------------------------------

    async def resolve_and_check_ip(self, normalized_url: str) -> GateResult | PipelineError:
        try:
            hostname = urlsplit(normalized_url).hostname or ""
        except ValueError:
            return PipelineError.validation("Invalid URL format")
        if not hostname:
            return PipelineError.validation("Invalid URL format")

        literal = parse_ip_literal(hostname)
        if literal is not None:
            addresses = [str(literal)]
        else:
            try:
                addresses = await self._resolver(hostname)
            except (OSError, UnicodeError) as exc:
                logger.error("DNS lookup failed for %s: %s", hostname, exc)
                return PipelineError.network("Failed to resolve hostname")

        if not addresses:
            logger.error("DNS lookup for %s returned no addresses", hostname)
            return PipelineError.network("Failed to resolve hostname")

        for address in addresses:
            if is_blocked_address(address):
                return self._reject(
                    "Requests to private IP addresses are not allowed",
                    normalized_url,
                )

        logger.debug("%s resolved to public address(es) %s", hostname, addresses)
        return GateResult(normalized_url=normalized_url, hostname=hostname)
