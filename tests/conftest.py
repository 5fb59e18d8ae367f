"""
Shared pytest fixtures for bounded buffer tests.
"""
import threading
import time

import pytest


def _wait_until(predicate, timeout=3.0, interval=0.005):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()


@pytest.fixture
def wait_until():
    """Poll a predicate until it holds or the timeout passes."""
    return _wait_until


@pytest.fixture
def stop_event():
    event = threading.Event()
    yield event
    event.set()


@pytest.fixture
def spawn():
    """Start daemon threads and join them at teardown."""
    threads = []

    def _spawn(target, *args, name=None):
        thread = threading.Thread(target=target, args=args, name=name, daemon=True)
        threads.append(thread)
        thread.start()
        return thread

    yield _spawn
    for thread in threads:
        thread.join(timeout=2.0)
