import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from subnetsweep.scanner.batching import cancelled, partition, run_batch


@pytest.mark.parametrize("count", [1, 2, 3, 4, 5, 31, 64, 254])
@pytest.mark.parametrize("size", [1, 3, 4, 16, 254, 300])
def test_partition_respects_limit(count, size):
    items = list(range(count))
    batches = list(partition(items, size))
    assert all(0 < len(batch) <= size for batch in batches)
    assert [item for batch in batches for item in batch] == items


def test_partition_empty():
    assert list(partition([], 4)) == []


def test_partition_accepts_ranges():
    assert list(partition(range(1, 6), 2)) == [[1, 2], [3, 4], [5]]


def test_partition_rejects_zero_size():
    with pytest.raises(ValueError):
        list(partition([1, 2], 0))


def test_run_batch_preserves_order_and_isolates_failures():
    def work(value):
        if value == 3:
            raise RuntimeError("bad item")
        return value * 10

    with ThreadPoolExecutor(max_workers=5) as executor:
        outcomes = run_batch(executor, work, [1, 2, 3, 4, 5])

    assert [o.item for o in outcomes] == [1, 2, 3, 4, 5]
    assert [o.result for o in outcomes] == [10, 20, None, 40, 50]
    assert [o.ok for o in outcomes] == [True, True, False, True, True]
    assert str(outcomes[2].error) == "bad item"


def test_run_batch_waits_for_every_item():
    finished = []
    gate = threading.Event()

    def work(value):
        gate.wait(1)
        finished.append(value)
        return value

    with ThreadPoolExecutor(max_workers=3) as executor:
        threading.Timer(0.05, gate.set).start()
        run_batch(executor, work, [1, 2, 3])
        assert sorted(finished) == [1, 2, 3]


def test_run_batch_reports_dispatch_failure(refuse_thread_start):
    calls = []

    def work(value):
        calls.append(value)
        return value.upper()

    refuse_thread_start({"refusing_1"})
    with ThreadPoolExecutor(max_workers=2, thread_name_prefix="refusing") as executor:
        outcomes = run_batch(executor, work, ["ok", "refused"])

    assert [o.result for o in outcomes] == ["OK", None]
    assert isinstance(outcomes[1].error, RuntimeError)
    # The refused item was queued by the executor but never ran.
    assert calls == ["ok"]


def test_cancelled_helper():
    event = threading.Event()
    assert cancelled(None) is False
    assert cancelled(event) is False
    event.set()
    assert cancelled(event) is True
