import threading


class ResultSink :
    """Append-only destination shared by consumers, guarded by its own lock."""

    def __init__(self) :
        self._items = []
        self._lock = threading.Lock()

    def append(self, item) :
        with self._lock :
            self._items.append(item)

    def snapshot(self) :
        with self._lock :
            return list(self._items)

    def size(self) :
        with self._lock :
            return len(self._items)

    def __len__(self) :
        return self.size()
