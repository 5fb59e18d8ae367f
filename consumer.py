import logging
import time

from bounded_queue import Cancelled
from events import EventType, RunEvent, emit


class Consumer :
    def __init__(self, q, sink, name, target_count) :
        self.q = q
        self.sink = sink
        self.name = name
        self.target_count = target_count
        self.consumed_count = 0
        self.cancelled = False
        self.delay = 0.0
        self.stop_event = None
        self.event_hook = None
        self.logger = logging.getLogger('bounded_buffer.consumer')

    def set_logger(self, logger_object) :
        self.logger = logger_object
        self.logger.info('consumer %s object activate', self.name)

    def set_stop_event(self, event) :
        self.stop_event = event

    def set_event_hook(self, hook) :
        self.event_hook = hook

    def set_delay(self, seconds) :
        self.delay = seconds

    def is_stop(self) :
        if self.stop_event is None :
            return False
        return self.stop_event.is_set()

    def pause(self) :
        if self.delay <= 0 :
            return False
        if self.stop_event is None :
            time.sleep(self.delay)
            return False
        return self.stop_event.wait(self.delay)

    def run(self) :
        try :
            for _ in range(self.target_count) :
                if self.is_stop() :
                    raise Cancelled('stop requested')
                item = self.q.remove(self.stop_event)
                self.sink.append(item)
                self.consumed_count += 1
                emit(self.event_hook, RunEvent(EventType.CONSUMED, self.name, item, self.consumed_count))
                if self.pause() :
                    raise Cancelled('stop requested')
        except Cancelled :
            self.cancelled = True
            self.logger.info('consumer %s cancelled after %d/%d items',
                             self.name, self.consumed_count, self.target_count)
            emit(self.event_hook, RunEvent(EventType.CANCELLED, self.name, count=self.consumed_count))
            return
        self.logger.info('consumer %s finished. total consumed: %d', self.name, self.consumed_count)
        emit(self.event_hook, RunEvent(EventType.CONSUMER_FINISHED, self.name, count=self.consumed_count))
