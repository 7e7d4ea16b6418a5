import threading

from subnetsweep.scanner.aggregation import CounterSnapshot, ScanCounters


def test_fetch_add_returns_previous_value():
    counters = ScanCounters()
    assert counters.add_hosts(4) == 0
    assert counters.add_hosts(3) == 4
    assert counters.add_responders(2) == 0
    assert counters.add_subnets() == 0
    assert counters.snapshot() == CounterSnapshot(7, 2, 1)


def test_concurrent_increments_are_not_lost():
    counters = ScanCounters()
    barrier = threading.Barrier(8)

    def worker():
        barrier.wait()
        for _ in range(2000):
            counters.add_hosts(1)
            counters.add_responders(2)
            counters.add_subnets()

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert counters.snapshot() == CounterSnapshot(16000, 32000, 16000)


def test_snapshots_add_up():
    total = CounterSnapshot(1, 2, 3) + CounterSnapshot(10, 20, 30)
    assert total == CounterSnapshot(11, 22, 33)
    assert CounterSnapshot() == CounterSnapshot(0, 0, 0)
