import pytest

from subnetsweep.errors import InvalidScanConfig
from subnetsweep.scanner import subnets as subnets_mod
from subnetsweep.scanner.aggregation import CounterSnapshot, ScanCounters
from subnetsweep.scanner.events import (
    HostProgress,
    ScanEventType,
    SubnetBatchFinished,
    SubnetFinished,
    SubnetStarted,
)
from subnetsweep.scanner.limits import ConcurrencyLimits
from subnetsweep.scanner.subnets import SubnetScanCoordinator, SubnetTask, scan_subnets


def test_counters_aggregate_across_subnets(stub_probe, settings, small_limits):
    probe = stub_probe({"10.0.0.1", "10.0.0.3", "10.0.1.2"})
    counters = ScanCounters()
    tasks = scan_subnets(
        ["10.0.0", "10.0.1", "10.0.2"],
        counters,
        probe,
        settings,
        start=1,
        end=4,
        limits=small_limits,
    )
    assert [t.prefix for t in tasks] == ["10.0.0", "10.0.1", "10.0.2"]
    assert [t.responder_count for t in tasks] == [2, 1, 0]
    assert counters.snapshot() == CounterSnapshot(12, 3, 3)


def test_two_level_concurrency_bound(stub_probe, settings, small_limits):
    probe = stub_probe(delay=0.02)
    scan_subnets(
        ["192.168.1", "192.168.2"],
        ScanCounters(),
        probe,
        settings,
        start=1,
        end=16,
        limits=small_limits,
    )
    assert probe.max_active <= 8
    assert len(probe.calls) == 32


def test_subnet_batches_are_bounded(stub_probe, settings):
    events = []
    scan_subnets(
        [f"10.9.{i}" for i in range(5)],
        ScanCounters(),
        stub_probe(),
        settings,
        start=1,
        end=2,
        limits=ConcurrencyLimits(host=2, subnet=2),
        listener=events.append,
    )
    batches = [e for e in events if isinstance(e, SubnetBatchFinished)]
    assert [(e.batch, e.batch_count, e.subnets_done) for e in batches] == [
        (1, 3, 2),
        (2, 3, 4),
        (3, 3, 5),
    ]


def test_events_describe_each_subnet(stub_probe, small_limits):
    from subnetsweep.config import ScanSettings

    events = []
    scan_subnets(
        ["10.0.0"],
        ScanCounters(),
        stub_probe({"10.0.0.3"}),
        ScanSettings(progress_every=2),
        label="demo",
        start=1,
        end=4,
        limits=small_limits,
        listener=events.append,
    )
    kinds = [e.type for e in events]
    assert kinds[0] is ScanEventType.SUBNET_STARTED
    assert ScanEventType.HOST_PROGRESS in kinds
    started = events[0]
    assert isinstance(started, SubnetStarted)
    assert (started.prefix, started.start, started.end, started.concurrency) == ("10.0.0", 1, 4, 4)
    finished = next(e for e in events if isinstance(e, SubnetFinished))
    assert finished.label == "demo"
    assert finished.responders == ("10.0.0.3",)
    assert finished.responder_count == 1
    assert any(isinstance(e, HostProgress) and e.completed == 4 for e in events)


def test_zero_responder_subnet(stub_probe, settings, small_limits):
    events = []
    tasks = scan_subnets(
        ["172.16.0"],
        ScanCounters(),
        stub_probe(),
        settings,
        start=1,
        end=20,
        limits=small_limits,
        listener=events.append,
    )
    assert tasks[0].responder_count == 0
    assert tasks[0].error is None
    finished = [e for e in events if isinstance(e, SubnetFinished)]
    assert finished[0].responder_count == 0


def test_coordinator_failure_is_isolated(monkeypatch, stub_probe, settings, small_limits):
    original = subnets_mod.scan_host_range

    def flaky(prefix, *args, **kwargs):
        if prefix == "10.0.1":
            raise RuntimeError("can't start new thread")
        return original(prefix, *args, **kwargs)

    monkeypatch.setattr(subnets_mod, "scan_host_range", flaky)
    counters = ScanCounters()
    tasks = scan_subnets(
        ["10.0.0", "10.0.1"],
        counters,
        stub_probe({"10.0.0.1"}),
        settings,
        start=1,
        end=4,
        limits=small_limits,
    )
    assert tasks[0].responder_count == 1
    assert tasks[1].responder_count == 0
    assert "can't start new thread" in tasks[1].error
    assert counters.snapshot() == CounterSnapshot(4, 1, 1)


def test_undispatched_subnet_is_zero_responder(refuse_thread_start, stub_probe, settings):
    refuse_thread_start({"subnet_1"})
    probe = stub_probe({"10.0.0.1", "10.0.1.1"})
    counters = ScanCounters()
    events = []
    tasks = scan_subnets(
        ["10.0.0", "10.0.1"],
        counters,
        probe,
        settings,
        start=1,
        end=4,
        limits=ConcurrencyLimits(host=4, subnet=2),
        listener=events.append,
    )

    assert tasks[0].responders == ["10.0.0.1"]
    assert tasks[1].responder_count == 0
    assert tasks[1].responders == []
    assert tasks[1].hosts_scanned == 0
    assert "can't start new thread" in tasks[1].error
    assert counters.snapshot() == CounterSnapshot(4, 1, 1)
    assert not [a for a in probe.calls if a.startswith("10.0.1.")]
    finished = [e.prefix for e in events if isinstance(e, SubnetFinished)]
    assert sorted(finished) == ["10.0.0", "10.0.1"]


def test_listener_errors_do_not_stop_the_scan(stub_probe, settings, small_limits):
    def broken_listener(event):
        raise ValueError("render failed")

    counters = ScanCounters()
    scan_subnets(
        ["10.0.0"],
        counters,
        stub_probe({"10.0.0.2"}),
        settings,
        start=1,
        end=4,
        limits=small_limits,
        listener=broken_listener,
    )
    assert counters.snapshot() == CounterSnapshot(4, 1, 1)


def test_invalid_input_rejected_before_scanning(stub_probe, settings, small_limits):
    probe = stub_probe()
    counters = ScanCounters()
    with pytest.raises(InvalidScanConfig):
        scan_subnets(["10.0.0"], counters, probe, settings, start=10, end=5, limits=small_limits)
    with pytest.raises(InvalidScanConfig):
        scan_subnets(["10.0.0", "banana"], counters, probe, settings, limits=small_limits)
    assert probe.calls == []
    assert counters.snapshot() == CounterSnapshot()


def test_duplicate_prefixes_scanned_once(stub_probe, settings, small_limits):
    probe = stub_probe()
    tasks = scan_subnets(
        ["10.0.0", "10.0.0.0/24", "10.0.0."],
        ScanCounters(),
        probe,
        settings,
        start=1,
        end=2,
        limits=small_limits,
    )
    assert len(tasks) == 1
    assert len(probe.calls) == 2


def test_coordinator_writes_only_its_task(stub_probe, settings, small_limits):
    task = SubnetTask("10.5.5", 1, 3, "solo")
    counters = ScanCounters()
    coordinator = SubnetScanCoordinator(
        task, counters, stub_probe({"10.5.5.2"}), settings, small_limits
    )
    assert task.finished is False
    assert coordinator.run() is task
    assert task.finished is True
    assert task.responders == ["10.5.5.2"]
    assert task.hosts_scanned == 3
    assert counters.snapshot() == CounterSnapshot(3, 1, 1)
