"""Client address resolution from request headers."""

from __future__ import annotations

import ipaddress
from typing import Mapping

_PRIVATE_NETWORKS = tuple(
    ipaddress.ip_network(block, strict=False)
    for block in (
        "127.0.0.1/8",
        "10.0.0.0/8",
        "172.16.0.0/12",
        "192.168.0.0/16",
        "169.254.0.0/16",
        "100.64.0.0/10",
        "::1/128",
        "fc00::/7",
        "fe80::/10",
    )
)


def is_private_ip(address: str) -> bool:
    """Return True if ``address`` lies in a private, loopback or link-local block.

    Raises ValueError if ``address`` is not an IP address.
    """
    try:
        ip = ipaddress.ip_address(address)
    except ValueError as exc:
        raise ValueError("address is not valid") from exc
    if isinstance(ip, ipaddress.IPv6Address) and ip.ipv4_mapped is not None:
        ip = ip.ipv4_mapped
    return any(ip.version == net.version and ip in net for net in _PRIVATE_NETWORKS)


def _header(headers: Mapping[str, str], name: str) -> str:
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            return value
    return ""


def _split_host(remote_addr: str) -> str:
    if remote_addr.startswith("["):
        end = remote_addr.find("]")
        if end < 0 or not remote_addr[end + 1:].startswith(":"):
            return ""
        return remote_addr[1:end]
    if remote_addr.count(":") != 1:
        return ""
    return remote_addr.rsplit(":", 1)[0]


def real_ip(headers: Mapping[str, str], remote_addr: str) -> str:
    """Return the client's public address from forwarding headers or the peer."""
    x_real_ip = _header(headers, "X-Real-Ip")
    forwarded_for = _header(headers, "X-Forwarded-For")
    if not x_real_ip and not forwarded_for:
        if ":" in remote_addr:
            return _split_host(remote_addr)
        return remote_addr
    for address in forwarded_for.split(","):
        address = address.strip()
        try:
            if not is_private_ip(address):
                return address
        except ValueError:
            continue
    return x_real_ip