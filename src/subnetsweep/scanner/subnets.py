"""Subnet scan coordinator and the subnet-level batch scheduler."""
from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Iterable

from ..config.settings import ScanSettings
from .aggregation import ScanCounters
from .batching import cancelled, partition, run_batch
from .events import (
    HostProgress,
    ScanListener,
    SubnetBatchFinished,
    SubnetFinished,
    SubnetStarted,
    emit,
)
from .hosts import scan_host_range, validate_host_range
from .limits import ConcurrencyLimits
from .probe import Probe
from .ranges import normalize_prefixes

logger = logging.getLogger(__name__)


@dataclass
class SubnetTask:
    """One /24 to scan, owned by a single coordinator."""

    prefix: str
    start: int
    end: int
    label: str
    responders: list[str] = field(default_factory=list)
    responder_count: int | None = None
    hosts_scanned: int = 0
    error: str | None = None
    cancelled: bool = False

    @property
    def range_size(self) -> int:
        return self.end - self.start + 1

    @property
    def finished(self) -> bool:
        return self.responder_count is not None


class SubnetScanCoordinator:
    """Drive the host scheduler for one subnet and publish its tally."""

    def __init__(
        self,
        task: SubnetTask,
        counters: ScanCounters,
        probe: Probe,
        settings: ScanSettings,
        limits: ConcurrencyLimits,
        *,
        listener: ScanListener | None = None,
        cancel_event: threading.Event | None = None,
    ) -> None:
        self.task = task
        self.counters = counters
        self.probe = probe
        self.settings = settings
        self.limits = limits
        self.listener = listener
        self.cancel_event = cancel_event

    def _progress(self, completed: int, total: int) -> None:
        emit(self.listener, HostProgress(self.task.prefix, completed, total))

    def run(self) -> SubnetTask:
        task = self.task
        concurrency = self.limits.host_for_range(task.range_size)
        emit(
            self.listener,
            SubnetStarted(task.label, task.prefix, task.start, task.end, concurrency),
        )
        try:
            result = scan_host_range(
                task.prefix,
                task.start,
                task.end,
                concurrency,
                self.probe,
                timeout=self.settings.probe_timeout,
                progress_every=self.settings.progress_every,
                on_progress=self._progress,
                cancel_event=self.cancel_event,
            )
        except Exception as exc:
            logger.exception("scan of %s.0/24 failed", task.prefix)
            task.error = f"{type(exc).__name__}: {exc}"
            task.responder_count = 0
        else:
            task.hosts_scanned = result.hosts_scanned
            task.responders = list(result.responders)
            task.cancelled = result.cancelled
            task.responder_count = result.responder_count
            # Counters only see a subnet once its whole range has joined.
            if result.hosts_scanned or not result.cancelled:
                self.counters.add_hosts(result.hosts_scanned)
                self.counters.add_responders(result.responder_count)
                self.counters.add_subnets(1)

        emit(
            self.listener,
            SubnetFinished(
                task.label,
                task.prefix,
                task.hosts_scanned,
                tuple(task.responders),
                task.error,
            ),
        )
        return task


def _record_dispatch_failure(
    task: SubnetTask, error: BaseException, listener: ScanListener | None
) -> None:
    logger.warning("subnet %s.0/24 was not scanned: %s", task.prefix, error)
    task.error = f"{type(error).__name__}: {error}"
    task.responder_count = 0
    emit(listener, SubnetFinished(task.label, task.prefix, 0, (), task.error))


def scan_subnets(
    prefixes: Iterable[str],
    counters: ScanCounters,
    probe: Probe,
    settings: ScanSettings | None = None,
    *,
    label: str = "scan",
    start: int | None = None,
    end: int | None = None,
    limits: ConcurrencyLimits | None = None,
    listener: ScanListener | None = None,
    cancel_event: threading.Event | None = None,
) -> list[SubnetTask]:
    """Scan every subnet in *prefixes*, a joined batch of subnets at a time.

    Up to ``limits.subnet`` coordinators run concurrently and each batch is
    joined before the next starts, so no more than roughly
    ``limits.subnet * limits.host`` probes are ever in flight. Input is
    validated before any probe is sent. Tasks are returned in input order;
    subnets skipped by cancellation are returned unfinished.
    """

    settings = settings or ScanSettings()
    start = settings.host_start if start is None else start
    end = settings.host_end if end is None else end
    validate_host_range(start, end)
    subnet_list = normalize_prefixes(prefixes)
    limits = limits or ConcurrencyLimits.from_settings(settings)

    tasks = [SubnetTask(prefix, start, end, label) for prefix in subnet_list]
    if not tasks:
        return tasks

    workers = limits.subnet_for_count(len(tasks))
    batches = list(partition(tasks, workers))
    done = 0
    with ThreadPoolExecutor(
        max_workers=workers, thread_name_prefix="subnet"
    ) as executor:
        for index, batch in enumerate(batches, 1):
            if cancelled(cancel_event):
                logger.info(
                    "%s: cancelled with %d of %d subnets scanned", label, done, len(tasks)
                )
                break
            coordinators = [
                SubnetScanCoordinator(
                    task,
                    counters,
                    probe,
                    settings,
                    limits,
                    listener=listener,
                    cancel_event=cancel_event,
                )
                for task in batch
            ]
            for outcome in run_batch(executor, SubnetScanCoordinator.run, coordinators):
                if outcome.error is not None:
                    _record_dispatch_failure(outcome.item.task, outcome.error, listener)
            done += len(batch)
            emit(
                listener,
                SubnetBatchFinished(label, index, len(batches), done, len(tasks)),
            )
    return tasks


__all__ = ["SubnetScanCoordinator", "SubnetTask", "scan_subnets"]
