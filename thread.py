import logging
import threading


class WatchThread :
    """Starts target on a named daemon thread and keeps whatever it raised."""

    def __init__(self, target, name) :
        self.target = target
        self.name = name
        self.error = None
        self.logger = logging.getLogger('bounded_buffer.thread')
        self.thread = threading.Thread(target=self._watch, name=self.name, daemon=True)
        self.thread.start()

    def set_logger(self, logger_object) :
        self.logger = logger_object
        self.logger.info('watch thread %s activate', self.name)

    def _watch(self) :
        try :
            self.target()
        except Exception as e :
            self.error = e
            self.logger.exception('[ERROR] %s is out', self.name)

    def is_alive(self) :
        return self.thread.is_alive()

    def thread_end(self, timeout=None) :
        #True when the thread is gone
        self.thread.join(timeout)
        return not self.thread.is_alive()
