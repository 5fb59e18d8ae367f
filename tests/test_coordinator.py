"""
Tests for partitioning and the Coordinator run lifecycle.
"""
import logging
import math
import threading
import time
from collections import Counter
from dataclasses import asdict

import pytest

from bounded_queue import ConfigurationError
from config import SAMPLE_CONFIG, RunConfig
from coordinator import Coordinator, RunReport, build_sources, partition
from events import EventType


@pytest.mark.parametrize("total, n, expected", [
    (10, 3, [4, 3, 3]),
    (10, 2, [5, 5]),
    (9, 2, [5, 4]),
    (2, 5, [1, 1, 0, 0, 0]),
    (0, 3, [0, 0, 0]),
    (7, 1, [7]),
])
def test_partition(total, n, expected):
    assert partition(total, n) == expected
    assert sum(partition(total, n)) == total


def test_partition_rejects_bad_counts():
    with pytest.raises(ConfigurationError):
        partition(10, 0)
    with pytest.raises(ConfigurationError):
        partition(-1, 2)


def test_build_sources_numbers_items_contiguously():
    assert build_sources(10, 2) == [[1, 2, 3, 4, 5], [6, 7, 8, 9, 10]]
    assert build_sources(10, 3) == [[1, 2, 3, 4], [5, 6, 7], [8, 9, 10]]


def test_sample_run_succeeds():
    """Test capacity 5, producers 1..5 and 6..10, two consumers of five each."""
    report = Coordinator(SAMPLE_CONFIG).run()

    assert report.expected_items == 10
    assert report.total_produced == 10
    assert report.total_consumed == 10
    assert report.sink_size == 10
    assert report.queue_empty_at_end
    assert not report.timed_out
    assert report.success
    assert report.produced_by == {"P1": 5, "P2": 5}
    assert report.consumed_by == {"C1": 5, "C2": 5}
    assert sorted(report.destination) == list(range(1, 11))
    assert report.monitor is None


def test_conservation_with_many_workers():
    config = RunConfig(capacity=3, num_producers=4, num_consumers=3, total_items=500)

    report = Coordinator(config).run()

    assert report.success
    assert Counter(report.destination) == Counter(range(1, 501))
    assert report.consumed_by == {"C1": 167, "C2": 167, "C3": 166}


@pytest.mark.parametrize("producers, consumers, items", [
    (3, 2, 9),
    (2, 3, 10),
    (1, 2, 20),
    (1, 1, 1),
])
def test_uneven_worker_counts(producers, consumers, items):
    config = RunConfig(capacity=2, num_producers=producers, num_consumers=consumers, total_items=items)

    report = Coordinator(config).run()

    assert report.success
    assert sorted(report.destination) == list(range(1, items + 1))


def test_timeout_cancels_workers_and_is_reported():
    config = RunConfig(capacity=2, num_producers=1, num_consumers=1, total_items=50,
                       timeout=0.2, produce_delay=0.05)
    coordinator = Coordinator(config)

    started = time.monotonic()
    report = coordinator.run()

    assert time.monotonic() - started < 3.0
    assert report.timed_out
    assert not report.success
    assert report.total_produced < 50
    assert coordinator.stop_event.is_set()
    assert all(w.cancelled for w in coordinator.workers())


def test_external_cancel_stops_run():
    config = RunConfig(capacity=2, num_producers=2, num_consumers=2, total_items=40,
                       produce_delay=0.05, consume_delay=0.05)
    coordinator = Coordinator(config)
    result = {}

    runner = threading.Thread(target=lambda: result.setdefault("report", coordinator.run()))
    runner.start()
    time.sleep(0.15)
    coordinator.cancel()
    runner.join(3.0)

    report = result["report"]
    assert not runner.is_alive()
    assert not report.timed_out
    assert not report.success
    assert report.total_produced < 40
    assert report.sink_size == report.total_consumed


@pytest.mark.parametrize("kwargs", [
    dict(capacity=0),
    dict(capacity=-3),
    dict(num_producers=0),
    dict(num_consumers=0),
    dict(total_items=0),
    dict(total_items="ten"),
    dict(timeout=0),
    dict(timeout=-1.0),
    dict(produce_delay=-0.1),
    dict(monitor_interval=0),
    dict(timeout=math.inf),
    dict(timeout=math.nan),
    dict(produce_delay=math.inf),
    dict(consume_delay=math.nan),
    dict(monitor_interval=math.inf),
    dict(monitor_interval=math.nan),
])
def test_invalid_configuration_raises_before_run(kwargs):
    base = dict(capacity=5, num_producers=2, num_consumers=2, total_items=10)
    base.update(kwargs)

    with pytest.raises(ConfigurationError):
        Coordinator(RunConfig(**base))


def test_coordinator_runs_once():
    coordinator = Coordinator(RunConfig(capacity=1, num_producers=1, num_consumers=1, total_items=1))
    coordinator.run()

    with pytest.raises(RuntimeError):
        coordinator.run()


@pytest.mark.parametrize("async_events", [False, True])
def test_event_hook_sees_every_transfer(async_events):
    events = []
    lock = threading.Lock()

    def hook(event):
        with lock:
            events.append(event)

    config = RunConfig(capacity=3, num_producers=2, num_consumers=3, total_items=12,
                       async_events=async_events)
    report = Coordinator(config, event_hook=hook).run()

    assert report.success
    kinds = Counter(e.kind for e in events)
    assert kinds[EventType.PRODUCED] == 12
    assert kinds[EventType.CONSUMED] == 12
    assert kinds[EventType.PRODUCER_FINISHED] == 2
    assert kinds[EventType.CONSUMER_FINISHED] == 3
    assert sorted(e.item for e in events if e.kind == EventType.CONSUMED) == list(range(1, 13))
    assert all(isinstance(e.timestamp, float) for e in events)


def test_monitor_summary_is_attached():
    config = RunConfig(capacity=2, num_producers=1, num_consumers=1, total_items=10,
                       produce_delay=0.01, monitor_interval=0.01)

    report = Coordinator(config).run()

    assert report.success
    assert report.monitor["samples"] >= 1
    assert 0 <= report.monitor["peak_queue"] <= 2
    assert report.monitor["peak_memory_mb"] > 0


def test_worker_crash_is_raised_after_join():
    class BrokenSink:
        def append(self, item):
            raise RuntimeError("sink unavailable")

    config = RunConfig(capacity=1, num_producers=1, num_consumers=1, total_items=3, timeout=0.3)
    coordinator = Coordinator(config)
    for consumer in coordinator.consumers:
        consumer.sink = BrokenSink()

    with pytest.raises(RuntimeError, match="sink unavailable"):
        coordinator.run()


def test_report_success_requires_every_count_to_agree():
    report = RunReport(expected_items=3, total_produced=3, total_consumed=3, sink_size=3,
                       queue_empty_at_end=True)
    assert report.success

    assert not RunReport(3, 3, 2, 2, True).success
    assert not RunReport(3, 3, 3, 3, False).success
    assert not RunReport(3, 3, 3, 3, True, timed_out=True).success


def test_success_is_part_of_the_report_record():
    report = Coordinator(RunConfig(capacity=2, num_producers=1, num_consumers=1, total_items=4)).run()

    record = asdict(report)
    assert record["success"] is True
    assert "success=True" in repr(report)
    assert asdict(RunReport(3, 3, 2, 2, True))["success"] is False


def test_monitor_summary_is_logged(caplog):
    caplog.set_level(logging.INFO, logger="bounded_buffer")
    config = RunConfig(capacity=2, num_producers=1, num_consumers=1, total_items=5,
                       monitor_interval=0.01)

    report = Coordinator(config).run()

    assert report.success
    assert "monitor summary:" in caplog.text
    assert "peak_queue" in caplog.text
