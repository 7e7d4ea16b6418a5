import random
import threading
import time

import pytest

from subnetsweep.config import ScanSettings
from subnetsweep.scanner import ConcurrencyLimits


class StubProbe:
    """Deterministic probe that records calls and concurrent activity."""

    def __init__(self, reachable=(), *, delay=0.0, jitter=0.0, fail=()):
        self.reachable = set(reachable)
        self.fail = set(fail)
        self.delay = delay
        self.jitter = jitter
        self.calls: list[str] = []
        self.spans: dict[str, tuple[float, float]] = {}
        self.active = 0
        self.max_active = 0
        self._lock = threading.Lock()

    def __call__(self, address: str, timeout: float) -> bool:
        started = time.perf_counter()
        with self._lock:
            self.calls.append(address)
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        try:
            pause = self.delay + (random.uniform(0, self.jitter) if self.jitter else 0.0)
            if pause:
                time.sleep(pause)
            if address in self.fail:
                raise OSError(f"cannot probe {address}")
            return address in self.reachable
        finally:
            with self._lock:
                self.active -= 1
                self.spans[address] = (started, time.perf_counter())


@pytest.fixture
def stub_probe():
    return StubProbe


@pytest.fixture
def settings():
    return ScanSettings(probe_timeout=0.1, progress_every=0)


@pytest.fixture
def small_limits():
    return ConcurrencyLimits(host=4, subnet=2)


@pytest.fixture
def refuse_thread_start(monkeypatch):
    """Make ``Thread.start`` fail for threads with the given names."""

    refused: set[str] = set()
    original = threading.Thread.start

    def start(self):
        if self.name in refused:
            raise RuntimeError("can't start new thread")
        return original(self)

    monkeypatch.setattr(threading.Thread, "start", start)
    return refused.update
