import logging
import time

from bounded_queue import Cancelled
from events import EventType, RunEvent, emit


class Producer :
    def __init__(self, q, source, name) :
        self.q = q
        self.source = list(source)
        self.name = name
        self.produced_count = 0
        self.cancelled = False
        self.delay = 0.0
        self.stop_event = None
        self.event_hook = None
        self.logger = logging.getLogger('bounded_buffer.producer')

    def set_logger(self, logger_object) :
        self.logger = logger_object
        self.logger.info('producer %s object activate', self.name)

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
        #True when the stop event fired during the pause
        if self.delay <= 0 :
            return False
        if self.stop_event is None :
            time.sleep(self.delay)
            return False
        return self.stop_event.wait(self.delay)

    def run(self) :
        try :
            for item in self.source :
                if self.is_stop() :
                    raise Cancelled('stop requested')
                self.q.insert(item, self.stop_event)
                self.produced_count += 1
                emit(self.event_hook, RunEvent(EventType.PRODUCED, self.name, item, self.produced_count))
                if self.pause() :
                    raise Cancelled('stop requested')
        except Cancelled :
            self.cancelled = True
            self.logger.info('producer %s cancelled after %d/%d items',
                             self.name, self.produced_count, len(self.source))
            emit(self.event_hook, RunEvent(EventType.CANCELLED, self.name, count=self.produced_count))
            return
        self.logger.info('producer %s finished. total produced: %d', self.name, self.produced_count)
        emit(self.event_hook, RunEvent(EventType.PRODUCER_FINISHED, self.name, count=self.produced_count))
