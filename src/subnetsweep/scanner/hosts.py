"""Host-level batch scheduler: probes one subnet's host range."""
from __future__ import annotations

import ipaddress
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable

from ..errors import InvalidScanConfig
from .batching import cancelled, partition, run_batch
from .probe import DEFAULT_PROBE_TIMEOUT, Probe, ProbeResult, execute_probe

logger = logging.getLogger(__name__)

MIN_HOST = 1
MAX_HOST = 254


def format_address(prefix: str, host: int) -> str:
    """Return the dotted-quad address for *host* within the ``a.b.c`` *prefix*."""

    if not MIN_HOST <= host <= MAX_HOST:
        raise ValueError(f"host octet {host} outside {MIN_HOST}-{MAX_HOST}")
    return str(ipaddress.IPv4Address(f"{prefix}.{host}"))


def validate_host_range(start: int, end: int) -> None:
    """Raise :class:`InvalidScanConfig` unless ``1 <= start <= end <= 254``."""

    if not (isinstance(start, int) and isinstance(end, int)):
        raise InvalidScanConfig(f"host range bounds must be integers: {start!r}-{end!r}")
    if not MIN_HOST <= start <= MAX_HOST or not MIN_HOST <= end <= MAX_HOST:
        raise InvalidScanConfig(
            f"host range {start}-{end} outside {MIN_HOST}-{MAX_HOST}"
        )
    if start > end:
        raise InvalidScanConfig(f"host range start {start} is after end {end}")


@dataclass
class ProbeTask:
    """One address to probe. Completed exactly once."""

    host: int
    address: str | None
    reachable: bool | None = None
    completed: bool = False
    elapsed: float = 0.0
    error: str | None = None

    def complete(
        self, reachable: bool, *, elapsed: float = 0.0, error: str | None = None
    ) -> None:
        if self.completed:
            raise RuntimeError(f"probe task for host {self.host} already completed")
        self.reachable = reachable
        self.elapsed = elapsed
        self.error = error
        self.completed = True


@dataclass
class HostRangeResult:
    """Tally of one host-range scan."""

    prefix: str
    start: int
    end: int
    hosts_scanned: int = 0
    responders: list[str] = field(default_factory=list)
    batches: int = 0
    cancelled: bool = False

    @property
    def responder_count(self) -> int:
        return len(self.responders)


def _make_task(prefix: str, host: int) -> ProbeTask:
    try:
        address = format_address(prefix, host)
    except ValueError as exc:
        logger.warning("skipping host %s in %s: %s", host, prefix, exc)
        task = ProbeTask(host, None)
        task.complete(False, error=str(exc))
        return task
    return ProbeTask(host, address)


def scan_host_range(
    prefix: str,
    start: int,
    end: int,
    concurrency: int,
    probe: Probe,
    *,
    timeout: float = DEFAULT_PROBE_TIMEOUT,
    progress_every: int = 50,
    on_progress: Callable[[int, int], None] | None = None,
    cancel_event: threading.Event | None = None,
) -> HostRangeResult:
    """Probe ``prefix.start`` through ``prefix.end`` in joined batches.

    At most *concurrency* probes run at once. Each batch is fully joined
    before the next one is dispatched. ``on_progress(completed, total)`` is
    called after a batch whenever the completed count crosses a multiple of
    *progress_every*. When *cancel_event* is set no further batch starts.
    """

    validate_host_range(start, end)
    if concurrency < 1:
        raise InvalidScanConfig(f"host concurrency must be >= 1, got {concurrency}")

    hosts = range(start, end + 1)
    total = len(hosts)
    workers = min(concurrency, total)
    result = HostRangeResult(prefix, start, end)

    def probe_task(task: ProbeTask) -> ProbeResult:
        if task.address is None:
            raise ValueError(f"host {task.host} in {prefix} has no address")
        return execute_probe(probe, task.address, timeout)

    with ThreadPoolExecutor(
        max_workers=workers, thread_name_prefix=f"probe-{prefix}"
    ) as executor:
        for batch in partition(hosts, workers):
            if cancelled(cancel_event):
                result.cancelled = True
                logger.info(
                    "%s: cancelled after %d of %d hosts", prefix, result.hosts_scanned, total
                )
                break

            tasks = [_make_task(prefix, host) for host in batch]
            pending = [task for task in tasks if not task.completed]
            for outcome in run_batch(executor, probe_task, pending):
                if outcome.result is not None:
                    outcome.item.complete(
                        outcome.result.reachable,
                        elapsed=outcome.result.elapsed,
                        error=outcome.result.error,
                    )
                else:
                    outcome.item.complete(False, error=str(outcome.error))

            previous = result.hosts_scanned
            result.batches += 1
            result.hosts_scanned += len(tasks)
            result.responders.extend(
                task.address for task in tasks if task.reachable and task.address
            )
            if (
                on_progress is not None
                and progress_every > 0
                and result.hosts_scanned // progress_every > previous // progress_every
            ):
                on_progress(result.hosts_scanned, total)

    return result


__all__ = [
    "HostRangeResult",
    "MAX_HOST",
    "MIN_HOST",
    "ProbeTask",
    "format_address",
    "scan_host_range",
    "validate_host_range",
]
