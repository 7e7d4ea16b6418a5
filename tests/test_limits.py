from subnetsweep.config import ScanSettings
from subnetsweep.scanner import limits
from subnetsweep.scanner.limits import (
    HOST_CONCURRENCY_CEILING,
    SUBNET_CONCURRENCY_CEILING,
    ConcurrencyLimits,
    compute_host_concurrency,
    compute_subnet_concurrency,
)


def test_host_concurrency_scales_with_cpus():
    assert compute_host_concurrency(4, 8, 64) == 32
    assert compute_host_concurrency(16, 8, 64) == 64


def test_host_concurrency_hard_ceiling():
    assert compute_host_concurrency(128, 8, 10_000) == HOST_CONCURRENCY_CEILING


def test_host_concurrency_at_least_one():
    assert compute_host_concurrency(0, 8, 64) == 1


def test_subnet_concurrency_clamped():
    assert compute_subnet_concurrency(4) == 4
    assert compute_subnet_concurrency(500) == SUBNET_CONCURRENCY_CEILING
    assert compute_subnet_concurrency(0) == 1


def test_limits_from_settings():
    settings = ScanSettings(io_multiplier=2, max_host_workers=100, max_subnet_workers=3)
    result = ConcurrencyLimits.from_settings(settings, cpu_count=6)
    assert result == ConcurrencyLimits(host=12, subnet=3)


def test_limits_recomputed_per_range():
    bounds = ConcurrencyLimits(host=32, subnet=8)
    assert bounds.host_for_range(254) == 32
    assert bounds.host_for_range(5) == 5
    assert bounds.subnet_for_count(3) == 3
    assert bounds.subnet_for_count(100) == 8


def test_detect_cpu_count_falls_back(monkeypatch):
    monkeypatch.setattr(limits.psutil, "cpu_count", lambda logical=True: None)
    monkeypatch.setattr(limits.os, "cpu_count", lambda: 3)
    assert limits.detect_cpu_count() == 3


def test_detect_cpu_count_uses_psutil(monkeypatch):
    monkeypatch.setattr(limits.psutil, "cpu_count", lambda logical=True: 12)
    assert limits.detect_cpu_count() == 12
