"""Shared counters updated by concurrent subnet coordinators."""
from __future__ import annotations

import threading
from dataclasses import dataclass


@dataclass(frozen=True)
class CounterSnapshot:
    """Point-in-time copy of :class:`ScanCounters`."""

    hosts_scanned: int = 0
    responders: int = 0
    subnets_scanned: int = 0

    def __add__(self, other: "CounterSnapshot") -> "CounterSnapshot":
        if not isinstance(other, CounterSnapshot):
            return NotImplemented
        return CounterSnapshot(
            self.hosts_scanned + other.hosts_scanned,
            self.responders + other.responders,
            self.subnets_scanned + other.subnets_scanned,
        )


class ScanCounters:
    """Aggregation context for one campaign phase.

    Contributors only ever add to the counters; each ``add_*`` call is an
    atomic fetch-add returning the previous value. Readers call
    :meth:`snapshot` once every contributor has joined.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._hosts_scanned = 0
        self._responders = 0
        self._subnets_scanned = 0

    def add_hosts(self, count: int) -> int:
        with self._lock:
            previous = self._hosts_scanned
            self._hosts_scanned += count
        return previous

    def add_responders(self, count: int) -> int:
        with self._lock:
            previous = self._responders
            self._responders += count
        return previous

    def add_subnets(self, count: int = 1) -> int:
        with self._lock:
            previous = self._subnets_scanned
            self._subnets_scanned += count
        return previous

    def snapshot(self) -> CounterSnapshot:
        with self._lock:
            return CounterSnapshot(
                self._hosts_scanned, self._responders, self._subnets_scanned
            )


__all__ = ["CounterSnapshot", "ScanCounters"]
