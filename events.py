import logging
import queue
import threading
import time
from dataclasses import dataclass, field

logger = logging.getLogger('bounded_buffer.events')


class EventType :
    PRODUCED = 'produced'
    CONSUMED = 'consumed'
    PRODUCER_FINISHED = 'producer_finished'
    CONSUMER_FINISHED = 'consumer_finished'
    CANCELLED = 'cancelled'


@dataclass
class RunEvent :
    kind: str
    worker: str
    item: object = None
    count: int = 0
    timestamp: float = field(default_factory=time.time)


def emit(hook, event) :
    """Call hook with event; a failing hook is logged, never raised into the worker."""
    if hook is None :
        return
    try :
        hook(event)
    except Exception :
        logger.exception('event hook failed for %s from %s', event.kind, event.worker)


class AsyncEventRelay :
    """
    Queues events and hands them to the target hook on its own thread so a
    slow renderer never holds up producers or consumers.
    """

    def __init__(self, target) :
        self.target = target
        self.q = queue.Queue()
        self.delivered = 0
        self.thread = threading.Thread(target=self.run, name='event-relay', daemon=True)
        self.thread.start()

    def __call__(self, event) :
        self.q.put(event)

    def run(self) :
        while True :
            event = self.q.get()
            if event is None :
                break
            emit(self.target, event)
            self.delivered += 1

    def close(self, timeout=None) :
        #drains everything queued before the sentinel
        self.q.put(None)
        self.thread.join(timeout)
