"""Worker-count sizing for the two batching levels."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass

import psutil

from ..config.settings import ScanSettings

logger = logging.getLogger(__name__)

# One /24 never needs more probe threads than it has hosts.
HOST_CONCURRENCY_CEILING = 254
SUBNET_CONCURRENCY_CEILING = 16


def detect_cpu_count() -> int:
    """Return the logical CPU count, falling back to ``os.cpu_count``."""

    try:
        count = psutil.cpu_count(logical=True)
    except Exception:  # pragma: no cover - psutil platform quirks
        logger.debug("psutil.cpu_count failed", exc_info=True)
        count = None
    return count or os.cpu_count() or 1


def clamp(value: int, upper: int) -> int:
    return max(1, min(int(value), upper))


def compute_host_concurrency(
    cpu_count: int, io_multiplier: int, maximum: int
) -> int:
    """Return probe workers per subnet: CPUs times the I/O multiplier, bounded."""

    return clamp(cpu_count * io_multiplier, min(maximum, HOST_CONCURRENCY_CEILING))


def compute_subnet_concurrency(requested: int) -> int:
    return clamp(requested, SUBNET_CONCURRENCY_CEILING)


@dataclass(frozen=True)
class ConcurrencyLimits:
    """Upper bounds for host-level and subnet-level batches."""

    host: int
    subnet: int

    @classmethod
    def from_settings(
        cls, settings: ScanSettings, *, cpu_count: int | None = None
    ) -> "ConcurrencyLimits":
        cpus = cpu_count if cpu_count is not None else detect_cpu_count()
        return cls(
            host=compute_host_concurrency(
                cpus, settings.io_multiplier, settings.max_host_workers
            ),
            subnet=compute_subnet_concurrency(settings.max_subnet_workers),
        )

    def host_for_range(self, size: int) -> int:
        """Return the host batch size for a range of *size* addresses."""

        return clamp(size, self.host)

    def subnet_for_count(self, count: int) -> int:
        return clamp(count, self.subnet)


__all__ = [
    "ConcurrencyLimits",
    "HOST_CONCURRENCY_CEILING",
    "SUBNET_CONCURRENCY_CEILING",
    "compute_host_concurrency",
    "compute_subnet_concurrency",
    "detect_cpu_count",
]
