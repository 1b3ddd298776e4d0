"""
Pull-based stream of per-hop rows handed to the output layer
"""

import queue
import threading
from typing import Optional

from .errors import TraceError
from .models import HopRow


_END = object()


class ResultSequence:
    """
    Ordered, terminating sequence of HopRow.

    The aggregator pushes rows and finally an end marker; the orchestrator
    may push a fatal error instead. Consumers pull with next() or iterate:

        for row in sequence:
            ...

    next() blocks until a row is available, raises StopIteration at the end
    of the trace and re-raises the TraceError that stopped the run.
    """

    def __init__(self):
        self._queue: queue.Queue = queue.Queue()
        self._lock = threading.Lock()
        self._closed = False
        self._error: Optional[TraceError] = None
        self._done = False

    # Producer side

    def put(self, row: HopRow):
        with self._lock:
            if self._closed:
                return
            self._queue.put(row)

    def finish(self):
        """Signal a clean end of the trace"""
        self._close(_END)

    def fail(self, error: TraceError):
        """Signal a fatal error; nothing after it is delivered"""
        self._close(error)

    @property
    def closed(self) -> bool:
        return self._closed

    def _close(self, marker):
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._queue.put(marker)

    # Consumer side

    def next(self) -> HopRow:
        if self._error is not None:
            raise self._error
        if self._done:
            raise StopIteration

        item = self._queue.get()
        if item is _END:
            self._done = True
            raise StopIteration
        if isinstance(item, TraceError):
            self._error = item
            raise item
        return item

    def __iter__(self):
        return self

    def __next__(self) -> HopRow:
        return self.next()
