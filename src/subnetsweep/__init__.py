"""Parallel ICMP host discovery across private IPv4 subnets."""
from __future__ import annotations

__version__ = "0.3.0"

from .config import Config, ScanSettings
from .errors import InvalidScanConfig, SweepError
from .scanner import (
    CampaignPhase,
    CampaignReport,
    ConcurrencyLimits,
    ScanCampaign,
    ScanCounters,
    make_probe,
    scan_host_range,
    scan_subnets,
)

__all__ = [
    "CampaignPhase",
    "CampaignReport",
    "ConcurrencyLimits",
    "Config",
    "InvalidScanConfig",
    "ScanCampaign",
    "ScanCounters",
    "ScanSettings",
    "SweepError",
    "__version__",
    "make_probe",
    "scan_host_range",
    "scan_subnets",
]
