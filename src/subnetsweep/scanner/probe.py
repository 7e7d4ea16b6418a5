"""Reachability probes and the executor that isolates their failures."""
from __future__ import annotations

import logging
import math
import os
import platform
import random
import subprocess
import time
from dataclasses import dataclass
from typing import Callable, Protocol

from ..errors import InvalidScanConfig

logger = logging.getLogger(__name__)

# Extra seconds granted to the ping process beyond its own wait flag.
_PING_PROCESS_GRACE = float(os.environ.get("PING_PROCESS_GRACE", 1.5))

DEFAULT_PROBE_TIMEOUT = 1.0


class Probe(Protocol):
    """Anything able to probe one address within ``timeout`` seconds."""

    def __call__(self, address: str, timeout: float) -> bool: ...


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of a single probe."""

    reachable: bool
    elapsed: float
    error: str | None = None


def build_ping_command(
    address: str, timeout: float, *, system: str | None = None
) -> tuple[list[str], float]:
    """Return a ping command and process timeout tailored to the platform."""

    timeout = max(timeout, 0.1)
    system = (system or platform.system()).lower()
    if system == "windows":
        wait_ms = max(1, int(round(timeout * 1000)))
        cmd = ["ping", "-n", "1", "-w", str(wait_ms), address]
        effective = wait_ms / 1000.0
    else:
        wait_s = max(1, int(math.ceil(timeout)))
        cmd = ["ping", "-c", "1", "-W", str(wait_s), address]
        effective = float(wait_s)
    return cmd, max(effective, timeout) + _PING_PROCESS_GRACE


class PingCommandProbe:
    """Probe backed by the operating system ``ping`` utility."""

    name = "ping"

    def __call__(self, address: str, timeout: float) -> bool:
        cmd, proc_timeout = build_ping_command(address, timeout)
        kwargs: dict[str, object] = {}
        if platform.system().lower() == "windows":
            kwargs["creationflags"] = getattr(subprocess, "CREATE_NO_WINDOW", 0)
        try:
            proc = subprocess.run(
                cmd,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                timeout=proc_timeout,
                check=False,
                **kwargs,
            )
        except subprocess.TimeoutExpired:
            return False
        except OSError as exc:
            logger.debug("ping %s failed: %s", address, exc)
            return False
        return proc.returncode == 0


class ScapyProbe:
    """Raw ICMP echo probe using scapy. Requires raw socket privileges."""

    name = "scapy"

    def __init__(self) -> None:
        try:
            from scapy.layers.inet import ICMP, IP
            from scapy.sendrecv import sr1
        except ImportError as exc:
            raise InvalidScanConfig(
                "the scapy backend needs the 'raw' extra: pip install subnetsweep[raw]"
            ) from exc
        self._ip = IP
        self._icmp = ICMP
        self._sr1 = sr1

    def __call__(self, address: str, timeout: float) -> bool:
        packet = self._ip(dst=address) / self._icmp(
            type=8, code=0, id=random.randint(1, 65535)
        )
        reply = self._sr1(packet, timeout=timeout, verbose=0)
        return (
            reply is not None
            and reply.haslayer(self._icmp)
            and reply[self._icmp].type == 0
        )


PROBE_BACKENDS: dict[str, Callable[[], Probe]] = {
    "ping": PingCommandProbe,
    "scapy": ScapyProbe,
}


def make_probe(name: str) -> Probe:
    """Return a probe instance for backend *name*."""

    try:
        factory = PROBE_BACKENDS[name]
    except KeyError:
        choices = ", ".join(sorted(PROBE_BACKENDS))
        raise InvalidScanConfig(
            f"unknown probe backend {name!r} (choose from {choices})"
        ) from None
    return factory()


def execute_probe(
    probe: Probe, address: str, timeout: float = DEFAULT_PROBE_TIMEOUT
) -> ProbeResult:
    """Run exactly one probe and never let its failure escape.

    A backend that raises is reported as unreachable with the error text so a
    single bad probe cannot abort the batch it belongs to.
    """

    start = time.perf_counter()
    try:
        reachable = bool(probe(address, timeout))
    except Exception as exc:
        logger.debug("probe of %s failed", address, exc_info=True)
        return ProbeResult(False, time.perf_counter() - start, f"{type(exc).__name__}: {exc}")
    return ProbeResult(reachable, time.perf_counter() - start)


__all__ = [
    "DEFAULT_PROBE_TIMEOUT",
    "PROBE_BACKENDS",
    "PingCommandProbe",
    "Probe",
    "ProbeResult",
    "ScapyProbe",
    "build_ping_command",
    "execute_probe",
    "make_probe",
]
