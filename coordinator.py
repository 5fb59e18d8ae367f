import logging
import threading
import time
from dataclasses import dataclass, field

from bounded_queue import BoundedQueue, ConfigurationError
from config import CANCEL_GRACE
from consumer import Consumer
from events import AsyncEventRelay
from log_monitor import Monitor
from producer import Producer
from sink import ResultSink
from thread import WatchThread


def partition(total, n) :
    """Split total across n workers; the first total % n workers get one extra."""
    if n <= 0 :
        raise ConfigurationError(f'worker count must be positive, got {n}')
    if total < 0 :
        raise ConfigurationError(f'total must not be negative, got {total}')
    base = total // n
    remainder = total % n
    return [base + 1 if i < remainder else base for i in range(n)]


def build_sources(total, n) :
    #contiguous runs of 1..total, one per producer
    sources = []
    current = 1
    for count in partition(total, n) :
        sources.append(list(range(current, current + count)))
        current += count
    return sources


@dataclass
class RunReport :
    expected_items: int
    total_produced: int
    total_consumed: int
    sink_size: int
    queue_empty_at_end: bool
    timed_out: bool = False
    produced_by: dict = field(default_factory=dict)
    consumed_by: dict = field(default_factory=dict)
    destination: list = field(default_factory=list)
    monitor: dict = None
    success: bool = field(init=False)

    def __post_init__(self) :
        self.success = (not self.timed_out
                        and self.expected_items == self.total_produced
                        and self.expected_items == self.total_consumed
                        and self.expected_items == self.sink_size
                        and self.queue_empty_at_end)


class Coordinator :
    def __init__(self, config, event_hook=None) :
        self.config = config.validate()
        self.event_hook = event_hook
        self.logger = logging.getLogger('bounded_buffer.coordinator')

        self.q = BoundedQueue(config.capacity)
        self.sink = ResultSink()
        self.stop_event = threading.Event()

        self.producers = []
        for i, source in enumerate(build_sources(config.total_items, config.num_producers)) :
            producer = Producer(self.q, source, f'P{i + 1}')
            producer.set_stop_event(self.stop_event)
            producer.set_delay(config.produce_delay)
            self.producers.append(producer)

        self.consumers = []
        for i, count in enumerate(partition(config.total_items, config.num_consumers)) :
            consumer = Consumer(self.q, self.sink, f'C{i + 1}', count)
            consumer.set_stop_event(self.stop_event)
            consumer.set_delay(config.consume_delay)
            self.consumers.append(consumer)

        self.monitor = None
        if config.monitor_interval is not None :
            self.monitor = Monitor(config.monitor_interval)
            self.monitor.set_queue(self.q)
            self.monitor.set_sink(self.sink)

        self.relay = None
        self.timed_out = False
        self.started = False

    def set_logger(self, logger_object) :
        self.logger = logger_object
        self.logger.info('coordinator object activate')
        for worker in self.producers + self.consumers :
            worker.set_logger(logger_object)
        if self.monitor is not None :
            self.monitor.set_logger(logger_object)

    def workers(self) :
        return self.producers + self.consumers

    def cancel(self) :
        self.stop_event.set()
        self.q.wake_all()

    def run(self) :
        if self.started :
            raise RuntimeError('a coordinator runs only once')
        self.started = True

        hook = self.event_hook
        if hook is not None and self.config.async_events :
            self.relay = AsyncEventRelay(hook)
            hook = self.relay
        for worker in self.workers() :
            worker.set_event_hook(hook)

        monitor_thread = None
        monitor_stop = threading.Event()
        if self.monitor is not None :
            self.monitor.set_stop_event(monitor_stop)
            monitor_thread = WatchThread(target=self.monitor.run, name='monitor')

        self.logger.info('starting %d producers and %d consumers (capacity=%d, items=%d)',
                         len(self.producers), len(self.consumers),
                         self.config.capacity, self.config.total_items)
        threads = [WatchThread(target=worker.run, name=worker.name) for worker in self.workers()]

        deadline = time.monotonic() + self.config.timeout
        for t in threads :
            t.thread_end(max(0.0, deadline - time.monotonic()))

        stragglers = [t for t in threads if t.is_alive()]
        if stragglers :
            self.timed_out = True
            self.logger.warning('execution timed out after %.2fs, cancelling %s',
                                self.config.timeout, ', '.join(t.name for t in stragglers))
            self.cancel()
            grace = time.monotonic() + CANCEL_GRACE
            for t in stragglers :
                t.thread_end(max(0.0, grace - time.monotonic()))
            stuck = [t.name for t in stragglers if t.is_alive()]
            if stuck :
                self.logger.error('workers did not stop after cancel: %s', ', '.join(stuck))

        if monitor_thread is not None :
            monitor_stop.set()
            monitor_thread.thread_end()
        if self.relay is not None :
            self.relay.close()

        failed = [t for t in threads if t.error is not None]
        if failed :
            raise failed[0].error

        report = self.report()
        if report.monitor is not None :
            self.logger.info('monitor summary: %s', report.monitor)
        if report.success :
            self.logger.info('run complete: %d items transferred', report.sink_size)
        else :
            self.logger.warning('run incomplete: expected=%d produced=%d consumed=%d sink=%d queue_empty=%s timed_out=%s',
                                report.expected_items, report.total_produced, report.total_consumed,
                                report.sink_size, report.queue_empty_at_end, report.timed_out)
        return report

    def report(self) :
        produced_by = {p.name: p.produced_count for p in self.producers}
        consumed_by = {c.name: c.consumed_count for c in self.consumers}
        destination = self.sink.snapshot()
        return RunReport(
            expected_items=self.config.total_items,
            total_produced=sum(produced_by.values()),
            total_consumed=sum(consumed_by.values()),
            sink_size=len(destination),
            queue_empty_at_end=self.q.is_empty(),
            timed_out=self.timed_out,
            produced_by=produced_by,
            consumed_by=consumed_by,
            destination=destination,
            monitor=self.monitor.summary() if self.monitor is not None else None,
        )
