"""Progress and summary events emitted while a campaign runs."""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, ClassVar

from .aggregation import CounterSnapshot

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .campaign import CampaignReport

logger = logging.getLogger(__name__)


class ScanEventType(str, Enum):
    """Kinds of events emitted by the scan engine."""

    PHASE_STARTED = "phase_started"
    SUBNET_STARTED = "subnet_started"
    HOST_PROGRESS = "host_progress"
    SUBNET_FINISHED = "subnet_finished"
    SUBNET_BATCH_FINISHED = "subnet_batch_finished"
    PHASE_FINISHED = "phase_finished"
    CAMPAIGN_FINISHED = "campaign_finished"


@dataclass(frozen=True)
class ScanEvent:
    """Base class for scan events."""

    type: ClassVar[ScanEventType]

    def as_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["type"] = self.type.value
        return data


@dataclass(frozen=True)
class PhaseStarted(ScanEvent):
    type: ClassVar[ScanEventType] = ScanEventType.PHASE_STARTED

    label: str
    subnet_count: int
    host_concurrency: int
    subnet_concurrency: int


@dataclass(frozen=True)
class SubnetStarted(ScanEvent):
    type: ClassVar[ScanEventType] = ScanEventType.SUBNET_STARTED

    label: str
    prefix: str
    start: int
    end: int
    concurrency: int


@dataclass(frozen=True)
class HostProgress(ScanEvent):
    type: ClassVar[ScanEventType] = ScanEventType.HOST_PROGRESS

    prefix: str
    completed: int
    total: int


@dataclass(frozen=True)
class SubnetFinished(ScanEvent):
    type: ClassVar[ScanEventType] = ScanEventType.SUBNET_FINISHED

    label: str
    prefix: str
    hosts_scanned: int
    responders: tuple[str, ...]
    error: str | None = None

    @property
    def responder_count(self) -> int:
        return len(self.responders)


@dataclass(frozen=True)
class SubnetBatchFinished(ScanEvent):
    type: ClassVar[ScanEventType] = ScanEventType.SUBNET_BATCH_FINISHED

    label: str
    batch: int
    batch_count: int
    subnets_done: int
    subnet_total: int


@dataclass(frozen=True)
class PhaseFinished(ScanEvent):
    type: ClassVar[ScanEventType] = ScanEventType.PHASE_FINISHED

    label: str
    counters: CounterSnapshot
    elapsed: float
    cancelled: bool = False


@dataclass(frozen=True)
class CampaignFinished(ScanEvent):
    type: ClassVar[ScanEventType] = ScanEventType.CAMPAIGN_FINISHED

    report: "CampaignReport"


ScanListener = Callable[[ScanEvent], None]


def emit(listener: ScanListener | None, event: ScanEvent) -> None:
    """Deliver *event* to *listener*; a failing listener never stops a scan."""

    if listener is None:
        return
    try:
        listener(event)
    except Exception:
        logger.warning("scan listener raised on %s", event.type.value, exc_info=True)


__all__ = [
    "CampaignFinished",
    "HostProgress",
    "PhaseFinished",
    "PhaseStarted",
    "ScanEvent",
    "ScanEventType",
    "ScanListener",
    "SubnetBatchFinished",
    "SubnetFinished",
    "SubnetStarted",
    "emit",
]
