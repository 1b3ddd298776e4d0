"""
Event aggregation into ordered per-hop rows
"""

import logging
import queue
import threading
from typing import Callable, Optional

from ..config import Config
from ..models import (
    EventKind, HopRow, ProbeEvent, NO_RESPONDER, NO_RESPONSE_MARK, format_rtt
)
from ..sequence import ResultSequence


logger = logging.getLogger(__name__)


_STOP = object()


class Aggregator:
    """
    Single consumer of every probe event.

    Buckets outcomes per TTL and releases rows to the result sequence
    strictly in ascending TTL order: a row goes out only once it holds
    num_probes outcomes and every lower TTL has gone out before it.
    An UNREACHABLE outcome at a TTL below the current last TTL moves the
    end of the trace down to that TTL.
    """

    def __init__(self, config: Config, events: queue.Queue, sequence: ResultSequence):
        self.config = config
        self.events = events
        self.sequence = sequence
        self.rows = [HopRow(ttl=ttl) for ttl in range(1, config.max_ttl + 1)]
        self.last_ttl = config.max_ttl
        self.finished = threading.Event()
        self._cursor = 0
        self._processed: set[int] = set()
        self._callbacks: list[Callable[[], None]] = []
        self._callbacks_lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None

    @property
    def emitted(self) -> int:
        """Number of rows already handed to the sequence"""
        return self._cursor

    def add_done_callback(self, callback: Callable[[], None]):
        """Call `callback` once the trace completes, or now if it already has"""
        with self._callbacks_lock:
            if not self.finished.is_set():
                self._callbacks.append(callback)
                return
        callback()

    def start(self):
        self._thread = threading.Thread(target=self.run, name='aggregator', daemon=True)
        self._thread.start()

    def run(self):
        """Consume events until the trace is complete or stop() is called"""
        while not self.finished.is_set():
            event = self.events.get()
            if event is _STOP:
                break
            self.process(event)

    def stop(self):
        """Abandon the trace without finishing the sequence"""
        self.events.put(_STOP)

    def join(self, timeout: Optional[float] = None):
        if self._thread:
            self._thread.join(timeout)

    def process(self, event: ProbeEvent) -> bool:
        """
        Apply one event.

        Returns:
            True once the trace is complete
        """
        if self.finished.is_set():
            return True

        if event.identity in self._processed:
            return False
        self._processed.add(event.identity)

        if not self._cursor < event.ttl <= self.config.max_ttl:
            logger.debug("ignoring %s for port %d at ttl %d",
                         event.kind.value, event.identity, event.ttl)
            return False

        row = self.rows[event.ttl - 1]

        if event.kind is EventKind.NO_RESPONSE:
            row.add(NO_RESPONDER, NO_RESPONSE_MARK)
        elif event.kind is EventKind.UNREACHABLE:
            if event.ttl < self.last_ttl:
                logger.info("destination %s reached at ttl %d", event.source, event.ttl)
                self.last_ttl = event.ttl
            row.add(event.source, format_rtt(event.rtt))
        elif event.kind is EventKind.TIME_EXCEEDED:
            row.add(event.source, format_rtt(event.rtt))
        else:
            raise ValueError(f"unknown event kind: {event.kind!r}")

        self._advance()
        return self.finished.is_set()

    def _advance(self):
        while self._cursor < self.last_ttl:
            row = self.rows[self._cursor]
            if not row.is_complete(self.config.num_probes):
                break
            self.sequence.put(row)
            self._cursor += 1

        if self._cursor >= self.last_ttl:
            self._finish()

    def _finish(self):
        with self._callbacks_lock:
            self.finished.set()
            callbacks, self._callbacks = self._callbacks, []
        self.sequence.finish()
        for callback in callbacks:
            callback()
