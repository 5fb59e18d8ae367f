import logging
import threading
from collections import deque
from dataclasses import dataclass


class ConfigurationError(ValueError) :
    pass


class Cancelled(Exception) :
    """Raised from a blocked insert/remove once the caller's stop event is set."""


@dataclass
class QueueStats :
    size: int
    capacity: int
    total_inserted: int
    total_removed: int
    waiting_inserters: int
    waiting_removers: int
    peak_size: int


class BoundedQueue :
    """
    Fixed capacity FIFO shared by any number of producers and consumers.

    One lock guards all state. Both blocking calls wait on the same condition
    and every state change wakes all waiters; each waiter re-checks its own
    predicate, so whichever thread takes the lock first gets the slot/item and
    the rest go back to waiting.
    """

    def __init__(self, capacity) :
        if isinstance(capacity, bool) or not isinstance(capacity, int) :
            raise ConfigurationError(f'capacity must be an integer, got {capacity!r}')
        if capacity <= 0 :
            raise ConfigurationError(f'capacity must be positive, got {capacity}')
        self._capacity = capacity
        self._items = deque()
        self._lock = threading.Lock()
        self._changed = threading.Condition(self._lock)

        self._total_inserted = 0
        self._total_removed = 0
        self._waiting_inserters = 0
        self._waiting_removers = 0
        self._peak_size = 0
        self.logger = logging.getLogger('bounded_buffer.queue')

    @property
    def capacity(self) :
        return self._capacity

    def set_logger(self, logger_object) :
        self.logger = logger_object
        self.logger.info('bounded queue object activate (capacity=%d)', self._capacity)

    def insert(self, item, stop=None) :
        """Append item at the tail, blocking while the queue is full."""
        with self._changed :
            self._waiting_inserters += 1
            try :
                while len(self._items) >= self._capacity :
                    if stop is not None and stop.is_set() :
                        raise Cancelled('insert cancelled')
                    self._changed.wait()
            finally :
                self._waiting_inserters -= 1
            self._items.append(item)
            self._total_inserted += 1
            if len(self._items) > self._peak_size :
                self._peak_size = len(self._items)
            self._changed.notify_all()

    def remove(self, stop=None) :
        """Pop the head, blocking while the queue is empty."""
        with self._changed :
            self._waiting_removers += 1
            try :
                while not self._items :
                    if stop is not None and stop.is_set() :
                        raise Cancelled('remove cancelled')
                    self._changed.wait()
            finally :
                self._waiting_removers -= 1
            item = self._items.popleft()
            self._total_removed += 1
            self._changed.notify_all()
            return item

    def wake_all(self) :
        #waiters re-check their stop event after this
        with self._changed :
            self._changed.notify_all()

    def is_empty(self) :
        with self._lock :
            return len(self._items) == 0

    def is_full(self) :
        with self._lock :
            return len(self._items) >= self._capacity

    def size(self) :
        with self._lock :
            return len(self._items)

    def __len__(self) :
        return self.size()

    def stats(self) :
        with self._lock :
            return QueueStats(
                size=len(self._items),
                capacity=self._capacity,
                total_inserted=self._total_inserted,
                total_removed=self._total_removed,
                waiting_inserters=self._waiting_inserters,
                waiting_removers=self._waiting_removers,
                peak_size=self._peak_size,
            )

    def snapshot(self) :
        with self._lock :
            return list(self._items)
