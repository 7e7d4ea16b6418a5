"""Default scan settings.

Every value can be tuned through an environment variable so large sweeps can
be adjusted without touching the stored configuration.
"""
from __future__ import annotations

import os
from typing import Any, Dict

DEFAULT_SETTINGS: Dict[str, Any] = {
    # Per-probe deadline in seconds.
    "probe_timeout": float(os.environ.get("SWEEP_PROBE_TIMEOUT", 1.0)),
    # "ping" shells out to the OS utility, "scapy" sends raw ICMP (root only).
    "probe_backend": os.environ.get("SWEEP_PROBE_BACKEND", "ping"),
    # Probes are I/O bound so host workers scale past the CPU count.
    "io_multiplier": int(os.environ.get("SWEEP_IO_MULTIPLIER", 8)),
    "max_host_workers": int(os.environ.get("SWEEP_HOST_WORKERS", 64)),
    "max_subnet_workers": int(os.environ.get("SWEEP_SUBNET_WORKERS", 8)),
    # Host progress cadence; 0 disables progress events.
    "progress_every": int(os.environ.get("SWEEP_PROGRESS_EVERY", 50)),
    "host_start": 1,
    "host_end": 254,
    "full_sweep_base": "192.168",
}

__all__ = ["DEFAULT_SETTINGS"]
