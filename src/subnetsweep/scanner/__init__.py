"""Parallel ICMP sweep engine."""
from __future__ import annotations

from .aggregation import CounterSnapshot, ScanCounters
from .batching import BatchOutcome, partition, run_batch
from .campaign import (
    CampaignPhase,
    CampaignReport,
    PhaseReport,
    ScanCampaign,
    common_network_phases,
    throughput,
)
from .events import ScanEvent, ScanEventType, ScanListener
from .hosts import HostRangeResult, ProbeTask, format_address, scan_host_range, validate_host_range
from .limits import ConcurrencyLimits
from .probe import PingCommandProbe, Probe, ProbeResult, ScapyProbe, execute_probe, make_probe
from .ranges import (
    CLASS_A_SUBNETS,
    CLASS_B_SUBNETS,
    CLASS_C_SUBNETS,
    QUICK_SCAN_SUBNETS,
    full_sweep_subnets,
    normalize_prefix,
)
from .subnets import SubnetScanCoordinator, SubnetTask, scan_subnets

__all__ = [
    "BatchOutcome",
    "CLASS_A_SUBNETS",
    "CLASS_B_SUBNETS",
    "CLASS_C_SUBNETS",
    "CampaignPhase",
    "CampaignReport",
    "ConcurrencyLimits",
    "CounterSnapshot",
    "HostRangeResult",
    "PhaseReport",
    "PingCommandProbe",
    "Probe",
    "ProbeResult",
    "ProbeTask",
    "QUICK_SCAN_SUBNETS",
    "ScanCampaign",
    "ScanCounters",
    "ScanEvent",
    "ScanEventType",
    "ScanListener",
    "ScapyProbe",
    "SubnetScanCoordinator",
    "SubnetTask",
    "common_network_phases",
    "execute_probe",
    "format_address",
    "full_sweep_subnets",
    "make_probe",
    "normalize_prefix",
    "partition",
    "run_batch",
    "scan_host_range",
    "scan_subnets",
    "throughput",
    "validate_host_range",
]
