"""Outbound URL checks for tools that fetch user-supplied URLs.

``validate_fetch_url`` refuses anything but http(s) URLs whose host is a
public address, both as written (including decimal, octal and hex IPv4
spellings such as ``2130706433`` or ``0x7f.0.0.1``) and after DNS
resolution.  Refusals raise :class:`BlockedUrlError` with a message fit
to show the caller.
"""

import asyncio
import ipaddress
import logging
import socket
from typing import Awaitable, Callable

import httpx

logger = logging.getLogger(__name__)

DNS_TIMEOUT_SECONDS = 5.0

BLOCKED_HOSTS = frozenset(
    {
        "localhost",
        "metadata.google.internal",
        "metadata.goog",
    }
)

BLOCKED_HOST_SUFFIXES = (
    ".localhost",
    ".metadata.google.internal",
    ".metadata.goog",
)

_RESTRICTED_NETWORKS = [
    ipaddress.ip_network(network)
    for network in (
        "0.0.0.0/8",
        "10.0.0.0/8",
        "100.64.0.0/10",
        "127.0.0.0/8",
        "169.254.0.0/16",
        "172.16.0.0/12",
        "192.0.2.0/24",
        "192.168.0.0/16",
        "198.18.0.0/15",
        "198.51.100.0/24",
        "203.0.113.0/24",
        "255.255.255.255/32",
        "::/128",
        "::1/128",
        "2001::/32",
        "fc00::/7",
        "fe80::/10",
    )
]

_NAT64 = ipaddress.ip_network("64:ff9b::/96")

IpAddress = ipaddress.IPv4Address | ipaddress.IPv6Address

# (host, port) -> resolved IP address strings
Resolver = Callable[[str, int], Awaitable[list[str]]]


class BlockedUrlError(ValueError):
    """Raised when a URL may not be fetched."""


def _embedded_ipv4(ip: ipaddress.IPv6Address) -> ipaddress.IPv4Address | None:
    if ip.ipv4_mapped is not None:
        return ip.ipv4_mapped
    if ip.sixtofour is not None:
        return ip.sixtofour
    if ip in _NAT64:
        return ipaddress.IPv4Address(ip.packed[12:])
    # IPv4-compatible (::a.b.c.d), excluding :: and ::1
    if ip.packed[:12] == bytes(12) and int(ip) > 1:
        return ipaddress.IPv4Address(ip.packed[12:])
    return None


def is_restricted_ip(ip: IpAddress) -> bool:
    """Whether ``ip`` is loopback, private, link-local or otherwise non-public."""
    if isinstance(ip, ipaddress.IPv6Address):
        embedded = _embedded_ipv4(ip)
        if embedded is not None and is_restricted_ip(embedded):
            return True
    return any(ip in network for network in _RESTRICTED_NETWORKS)


def _parse_octet(part: str) -> int | None:
    if not part:
        return None
    try:
        if part.lower().startswith("0x"):
            return int(part[2:], 16)
        if len(part) > 1 and part.startswith("0"):
            return int(part, 8)
        return int(part)
    except ValueError:
        return None


def parse_ip_host(host: str) -> IpAddress | None:
    """Parse ``host`` as an IP address, accepting the legacy IPv4 spellings.

    Returns:
        The address, or ``None`` when ``host`` is a name.
    """
    try:
        return ipaddress.ip_address(host)
    except ValueError:
        pass

    if host.isdigit():
        value = int(host)
        if value < 2**32:
            return ipaddress.IPv4Address(value)
        return None

    parts = host.split(".")
    if len(parts) != 4:
        return None
    octets = [_parse_octet(part) for part in parts]
    if any(octet is None or octet > 255 for octet in octets):
        return None
    return ipaddress.IPv4Address(bytes(octets))


async def resolve_host(host: str, port: int) -> list[str]:
    """Resolve ``host`` with the event loop's ``getaddrinfo``."""
    loop = asyncio.get_running_loop()
    infos = await loop.getaddrinfo(host, port, type=socket.SOCK_STREAM)
    return [info[4][0] for info in infos]


async def validate_fetch_url(
    url: str,
    resolver: Resolver = resolve_host,
    dns_timeout: float = DNS_TIMEOUT_SECONDS,
    allow_private: bool = False,
) -> httpx.URL:
    """Check that ``url`` points at a public http(s) host.

    Args:
        url: The URL as supplied by the caller.
        resolver: Resolves a host name to IP address strings.
        dns_timeout: Seconds allowed for resolution.
        allow_private: Only check the scheme and host presence.

    Returns:
        The parsed URL.

    Raises:
        BlockedUrlError: If the URL is malformed, not http(s), names a
            blocked host, or resolves to a restricted address.
    """
    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL as exc:
        raise BlockedUrlError(f"Invalid URL: {exc}") from exc

    if parsed.scheme not in ("http", "https"):
        raise BlockedUrlError(
            f"Unsupported scheme '{parsed.scheme}': only http and https are allowed"
        )

    host = parsed.raw_host.decode("ascii").strip("[]").lower()
    if not host:
        raise BlockedUrlError("URL must have a host")
    if allow_private:
        return parsed

    ip = parse_ip_host(host)
    if ip is not None:
        if is_restricted_ip(ip):
            raise BlockedUrlError(f"Access to private/restricted IP {ip} is not allowed")
        return parsed

    if host in BLOCKED_HOSTS:
        raise BlockedUrlError(f"Access to '{host}' is not allowed")
    if host.endswith(BLOCKED_HOST_SUFFIXES):
        raise BlockedUrlError(f"Access to '{host}' is not allowed (blocked suffix)")

    port = parsed.port or (443 if parsed.scheme == "https" else 80)
    try:
        addresses = await asyncio.wait_for(resolver(host, port), dns_timeout)
    except asyncio.TimeoutError as exc:
        raise BlockedUrlError("DNS resolution timed out") from exc
    except OSError as exc:
        raise BlockedUrlError(f"DNS resolution failed: {exc}") from exc

    if not addresses:
        raise BlockedUrlError("DNS resolution returned no addresses")

    for address in addresses:
        resolved = ipaddress.ip_address(address.split("%", 1)[0])
        if is_restricted_ip(resolved):
            logger.warning("Blocked fetch of %s: resolves to %s", host, resolved)
            raise BlockedUrlError(
                f"DNS resolved to private/restricted IP {resolved} which is not allowed"
            )

    return parsed
