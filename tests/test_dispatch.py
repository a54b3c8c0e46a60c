import threading
import time

import pytest

from loghook.dispatch import AsyncDispatcher


def _blocked_dispatcher(overflow, queue_size=2):
    """Dispatcher whose single worker is parked on a gate task."""
    gate = threading.Event()
    started = threading.Event()
    dispatcher = AsyncDispatcher(workers=1, queue_size=queue_size, overflow=overflow, block_timeout=0.05)

    def hold():
        started.set()
        gate.wait(5)

    dispatcher.submit(hold)
    assert started.wait(5)
    return dispatcher, gate


def test_runs_submitted_tasks():
    dispatcher = AsyncDispatcher(workers=2, queue_size=10)
    seen = []
    lock = threading.Lock()

    def task(i):
        with lock:
            seen.append(i)

    for i in range(5):
        assert dispatcher.submit(lambda i=i: task(i))
    dispatcher.join()
    assert sorted(seen) == [0, 1, 2, 3, 4]
    assert dispatcher.stats()["completed"] == 5
    dispatcher.shutdown()


def test_failures_are_counted_not_raised(capsys):
    dispatcher = AsyncDispatcher(workers=1, queue_size=10)

    def fail():
        raise RuntimeError("backend down")

    assert dispatcher.submit(fail) is True
    assert dispatcher.submit(fail) is True
    dispatcher.join()
    stats = dispatcher.stats()
    assert stats["failed"] == 2
    assert stats["completed"] == 0
    dispatcher.shutdown()
    err = capsys.readouterr().err
    # Rate limited: one report for two failures
    assert err.count("Background write failed") == 1


def test_drop_newest_discards_incoming_task():
    dispatcher, gate = _blocked_dispatcher("drop_newest", queue_size=1)
    ran = []
    assert dispatcher.submit(lambda: ran.append("queued"))
    assert dispatcher.submit(lambda: ran.append("overflow")) is False
    gate.set()
    dispatcher.join()
    assert ran == ["queued"]
    stats = dispatcher.stats()
    assert stats["submitted"] == 2
    assert stats["dropped"] == 1
    dispatcher.shutdown()


def test_drop_oldest_evicts_queued_task():
    dispatcher, gate = _blocked_dispatcher("drop_oldest", queue_size=1)
    ran = []
    assert dispatcher.submit(lambda: ran.append("old"))
    assert dispatcher.submit(lambda: ran.append("new"))
    gate.set()
    dispatcher.join()
    assert ran == ["new"]
    stats = dispatcher.stats()
    assert stats["submitted"] == 3
    assert stats["dropped"] == 1
    dispatcher.shutdown()


def test_block_gives_up_after_timeout():
    dispatcher, gate = _blocked_dispatcher("block", queue_size=1)
    assert dispatcher.submit(lambda: None)
    assert dispatcher.submit(lambda: None) is False
    stats = dispatcher.stats()
    assert stats["submitted"] == 2
    assert stats["dropped"] == 1
    gate.set()
    dispatcher.shutdown()


def test_submit_after_shutdown_is_dropped():
    dispatcher = AsyncDispatcher(workers=1, queue_size=4)
    dispatcher.shutdown()
    assert dispatcher.submit(lambda: None) is False
    assert dispatcher.stats()["dropped"] == 1


def test_shutdown_drains_queue():
    dispatcher = AsyncDispatcher(workers=1, queue_size=10)
    ran = []
    for i in range(3):
        dispatcher.submit(lambda i=i: ran.append(i))
    dispatcher.shutdown()
    assert ran == [0, 1, 2]


def test_rejects_unknown_overflow_policy():
    with pytest.raises(ValueError):
        AsyncDispatcher(overflow="spill")


def test_shutdown_with_full_queue_honours_timeout():
    dispatcher, gate = _blocked_dispatcher("drop_oldest", queue_size=1)
    ran = []
    assert dispatcher.submit(lambda: ran.append("a"))
    assert dispatcher.submit(lambda: ran.append("b"))
    started = time.monotonic()
    assert dispatcher.shutdown(timeout=0.2) is False
    assert time.monotonic() - started < 2
    # Nothing submitted after shutdown can evict what is already queued
    assert dispatcher.submit(lambda: ran.append("late")) is False
    gate.set()
    for thread in dispatcher._threads:
        thread.join(5)
    assert not any(thread.is_alive() for thread in dispatcher._threads)
    assert ran == ["b"]


def test_shutdown_stops_all_workers():
    dispatcher = AsyncDispatcher(workers=3, queue_size=10)
    for _ in range(6):
        dispatcher.submit(lambda: None)
    assert dispatcher.shutdown(timeout=5) is True
    assert dispatcher.closed
    assert dispatcher.stats()["completed"] == 6
