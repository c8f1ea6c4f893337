import threading
import time

import pytest

from rgbdlog.sync import ThreadMutexObject


def test_initial_value_is_returned():
    obj = ThreadMutexObject(-1)
    assert obj.get_value() == -1


def test_assign_replaces_value():
    obj = ThreadMutexObject(0)
    obj.assign(42)
    assert obj.get_value() == 42


def test_increment_adds_one():
    obj = ThreadMutexObject(-1)
    obj.increment()
    obj.increment()
    assert obj.get_value() == 1


def test_concurrent_increments_are_not_lost():
    obj = ThreadMutexObject(0)
    threads_count, per_thread = 4, 1000

    def work():
        for _ in range(per_thread):
            obj.increment()

    threads = [threading.Thread(target=work) for _ in range(threads_count)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    assert obj.get_value() == threads_count * per_thread


def _keep_signalling(action, stop):
    def run():
        while not stop.is_set():
            action()
            time.sleep(0.01)

    thread = threading.Thread(target=run)
    thread.start()
    return thread


def test_wait_for_signal_receives_notified_value():
    obj = ThreadMutexObject(0)
    stop = threading.Event()
    thread = _keep_signalling(lambda: obj.assign_and_notify_all(7), stop)
    try:
        value = obj.wait_for_signal(timeout=5)
    finally:
        stop.set()
        thread.join()
    assert value == 7


def test_notify_all_wakes_waiter_with_current_value():
    obj = ThreadMutexObject("start")
    stop = threading.Event()
    thread = _keep_signalling(obj.notify_all, stop)
    try:
        value = obj.wait_for_signal(timeout=5)
    finally:
        stop.set()
        thread.join()
    assert value == "start"


def test_wait_for_signal_times_out():
    obj = ThreadMutexObject(0)
    with pytest.raises(TimeoutError):
        obj.wait_for_signal(timeout=0.01)


def test_get_value_wait_sleeps_then_returns():
    obj = ThreadMutexObject(3)
    started = time.monotonic()
    value = obj.get_value_wait(10000)
    assert value == 3
    assert time.monotonic() - started >= 0.009