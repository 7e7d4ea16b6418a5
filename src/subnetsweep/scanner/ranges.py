"""Predefined private subnet tables and prefix validation."""
from __future__ import annotations

import ipaddress
import logging
from typing import Iterable

from ..errors import InvalidScanConfig

logger = logging.getLogger(__name__)

# 10.0.0.0/8 segments that home and office gear tends to use.
CLASS_A_SUBNETS: tuple[str, ...] = (
    "10.0.0",
    "10.0.1",
    "10.0.10",
    "10.1.1",
    "10.1.10",
    "10.10.0",
    "10.10.10",
    "10.100.0",
    "10.100.100",
    "10.200.0",
)

# The first /24 of each 172.16.0.0/12 block, plus the Docker defaults.
CLASS_B_SUBNETS: tuple[str, ...] = tuple(f"172.{i}.0" for i in range(16, 32)) + (
    "172.17.1",
    "172.18.1",
)

CLASS_C_SUBNETS: tuple[str, ...] = (
    "192.168.0",
    "192.168.1",
    "192.168.2",
    "192.168.3",
    "192.168.4",
    "192.168.5",
    "192.168.8",
    "192.168.10",
    "192.168.11",
    "192.168.20",
    "192.168.30",
    "192.168.50",
    "192.168.88",
    "192.168.100",
    "192.168.101",
    "192.168.178",
    "192.168.200",
    "192.168.254",
)

QUICK_SCAN_SUBNETS: tuple[str, ...] = (
    "192.168.0",
    "192.168.1",
    "192.168.50",
    "10.0.0",
    "172.16.0",
)


def normalize_prefix(prefix: str) -> str:
    """Return *prefix* as a canonical ``a.b.c`` string.

    Accepts ``a.b.c``, ``a.b.c.`` and ``a.b.c.0/24``. Anything else raises
    :class:`InvalidScanConfig`.
    """

    text = str(prefix).strip()
    if "/" in text:
        try:
            network = ipaddress.IPv4Network(text, strict=False)
        except ValueError as exc:
            raise InvalidScanConfig(f"invalid subnet {prefix!r}: {exc}") from None
        if network.prefixlen != 24:
            raise InvalidScanConfig(f"only /24 subnets are supported, got {prefix!r}")
        return network.network_address.exploded.rsplit(".", 1)[0]

    text = text.rstrip(".")
    parts = text.split(".")
    if len(parts) != 3:
        raise InvalidScanConfig(
            f"subnet prefix must have three octets like 192.168.1, got {prefix!r}"
        )
    try:
        octets = [int(part) for part in parts]
    except ValueError:
        raise InvalidScanConfig(f"subnet prefix {prefix!r} is not numeric") from None
    if any(part != str(octet) for part, octet in zip(parts, octets)):
        raise InvalidScanConfig(f"subnet prefix {prefix!r} has malformed octets")
    if any(not 0 <= octet <= 255 for octet in octets):
        raise InvalidScanConfig(f"subnet prefix {prefix!r} has octets outside 0-255")
    return ".".join(str(octet) for octet in octets)


def is_private_prefix(prefix: str) -> bool:
    return ipaddress.IPv4Address(f"{prefix}.1").is_private


def normalize_prefixes(prefixes: Iterable[str]) -> list[str]:
    """Normalize every prefix, dropping duplicates while keeping order."""

    result = list(dict.fromkeys(normalize_prefix(p) for p in prefixes))
    for prefix in result:
        if not is_private_prefix(prefix):
            logger.warning("%s.0/24 is not a private range", prefix)
    return result


def full_sweep_subnets(base: str = "192.168") -> list[str]:
    """Return all 256 ``base.N`` prefixes for a two-octet *base*."""

    parts = str(base).strip().rstrip(".").split(".")
    if len(parts) != 2:
        raise InvalidScanConfig(f"sweep base must have two octets like 192.168, got {base!r}")
    return [normalize_prefix(f"{parts[0]}.{parts[1]}.{i}") for i in range(256)]


__all__ = [
    "CLASS_A_SUBNETS",
    "CLASS_B_SUBNETS",
    "CLASS_C_SUBNETS",
    "QUICK_SCAN_SUBNETS",
    "full_sweep_subnets",
    "is_private_prefix",
    "normalize_prefix",
    "normalize_prefixes",
]
