"""Campaign driver: runs phases of subnet scans and reports totals."""
from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field, replace
from typing import Callable, Iterable, Sequence

from ..config.settings import ScanSettings
from ..errors import InvalidScanConfig
from .aggregation import CounterSnapshot, ScanCounters
from .events import (
    CampaignFinished,
    PhaseFinished,
    PhaseStarted,
    ScanListener,
    emit,
)
from .hosts import validate_host_range
from .limits import ConcurrencyLimits
from .probe import Probe
from .ranges import (
    CLASS_A_SUBNETS,
    CLASS_B_SUBNETS,
    CLASS_C_SUBNETS,
    QUICK_SCAN_SUBNETS,
    full_sweep_subnets,
    normalize_prefixes,
)
from .subnets import SubnetTask, scan_subnets

logger = logging.getLogger(__name__)


def throughput(hosts: int, elapsed: float) -> float:
    """Return hosts per second, or ``0.0`` when no time elapsed."""

    return hosts / elapsed if elapsed > 0 else 0.0


@dataclass(frozen=True)
class CampaignPhase:
    """A labelled list of subnets scanned over the same host range."""

    label: str
    prefixes: tuple[str, ...]
    start: int = 1
    end: int = 254

    def validated(self) -> "CampaignPhase":
        """Return a normalized copy or raise :class:`InvalidScanConfig`."""

        validate_host_range(self.start, self.end)
        prefixes = tuple(normalize_prefixes(self.prefixes))
        if not prefixes:
            raise InvalidScanConfig(f"phase {self.label!r} has no subnets")
        return replace(self, prefixes=prefixes)


@dataclass
class PhaseReport:
    label: str
    counters: CounterSnapshot
    subnets: list[SubnetTask]
    elapsed: float
    cancelled: bool = False


@dataclass
class CampaignReport:
    """Final totals of a campaign."""

    phases: list[PhaseReport] = field(default_factory=list)
    totals: CounterSnapshot = field(default_factory=CounterSnapshot)
    elapsed: float = 0.0
    cancelled: bool = False

    @property
    def hosts_per_second(self) -> float:
        return throughput(self.totals.hosts_scanned, self.elapsed)

    @property
    def responders(self) -> list[str]:
        return [
            address
            for phase in self.phases
            for subnet in phase.subnets
            for address in subnet.responders
        ]

    @property
    def failed_subnets(self) -> list[SubnetTask]:
        return [
            subnet
            for phase in self.phases
            for subnet in phase.subnets
            if subnet.error is not None
        ]


def common_network_phases(start: int = 1, end: int = 254) -> list[CampaignPhase]:
    return [
        CampaignPhase("Class A (10.x)", CLASS_A_SUBNETS, start, end),
        CampaignPhase("Class B (172.16-31.x)", CLASS_B_SUBNETS, start, end),
        CampaignPhase("Class C (192.168.x)", CLASS_C_SUBNETS, start, end),
    ]


class ScanCampaign:
    """Run campaign phases one after another and collect their totals."""

    def __init__(
        self,
        probe: Probe,
        settings: ScanSettings | None = None,
        *,
        listener: ScanListener | None = None,
        cancel_event: threading.Event | None = None,
        limits: ConcurrencyLimits | None = None,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self.probe = probe
        self.settings = settings or ScanSettings()
        self.listener = listener
        self.cancel_event = cancel_event
        self.limits = limits or ConcurrencyLimits.from_settings(self.settings)
        self.clock = clock

    def run(self, phases: Iterable[CampaignPhase]) -> CampaignReport:
        """Validate every phase, then scan them sequentially."""

        checked = [phase.validated() for phase in phases]
        if not checked:
            raise InvalidScanConfig("campaign has no phases")

        report = CampaignReport()
        started = self.clock()
        for phase in checked:
            if self.cancel_event is not None and self.cancel_event.is_set():
                report.cancelled = True
                break
            phase_report = self._run_phase(phase)
            report.phases.append(phase_report)
            report.totals = report.totals + phase_report.counters
            report.cancelled = report.cancelled or phase_report.cancelled
        report.elapsed = self.clock() - started

        logger.info(
            "campaign finished: %d hosts, %d responders, %d subnets in %.1fs",
            report.totals.hosts_scanned,
            report.totals.responders,
            report.totals.subnets_scanned,
            report.elapsed,
        )
        emit(self.listener, CampaignFinished(report))
        return report

    def _run_phase(self, phase: CampaignPhase) -> PhaseReport:
        counters = ScanCounters()
        emit(
            self.listener,
            PhaseStarted(
                phase.label,
                len(phase.prefixes),
                self.limits.host,
                self.limits.subnet_for_count(len(phase.prefixes)),
            ),
        )
        started = self.clock()
        subnets = scan_subnets(
            phase.prefixes,
            counters,
            self.probe,
            self.settings,
            label=phase.label,
            start=phase.start,
            end=phase.end,
            limits=self.limits,
            listener=self.listener,
            cancel_event=self.cancel_event,
        )
        elapsed = self.clock() - started
        was_cancelled = any(
            subnet.cancelled or not subnet.finished for subnet in subnets
        )
        snapshot = counters.snapshot()
        emit(
            self.listener,
            PhaseFinished(phase.label, snapshot, elapsed, was_cancelled),
        )
        return PhaseReport(phase.label, snapshot, subnets, elapsed, was_cancelled)

    def _host_range(self, start: int | None, end: int | None) -> tuple[int, int]:
        return (
            self.settings.host_start if start is None else start,
            self.settings.host_end if end is None else end,
        )

    def common_networks(self) -> CampaignReport:
        """Sweep the class A, B and C tables as three phases."""

        return self.run(common_network_phases(*self._host_range(None, None)))

    def full_sweep(self, base: str | None = None) -> CampaignReport:
        """Sweep all 256 subnets under *base* (``192.168`` by default)."""

        base = base or self.settings.full_sweep_base
        start, end = self._host_range(None, None)
        return self.run(
            [CampaignPhase(f"Full sweep ({base}.0-255)", tuple(full_sweep_subnets(base)), start, end)]
        )

    def single_subnet(
        self, prefix: str, start: int | None = None, end: int | None = None
    ) -> CampaignReport:
        start, end = self._host_range(start, end)
        return self.run([CampaignPhase(f"Subnet {prefix}", (prefix,), start, end)])

    def quick_scan(self, prefixes: Sequence[str] = QUICK_SCAN_SUBNETS) -> CampaignReport:
        start, end = self._host_range(None, None)
        return self.run([CampaignPhase("Quick scan", tuple(prefixes), start, end)])


__all__ = [
    "CampaignPhase",
    "CampaignReport",
    "PhaseReport",
    "ScanCampaign",
    "common_network_phases",
    "throughput",
]
