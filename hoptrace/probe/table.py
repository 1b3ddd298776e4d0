"""
Shared probe correlation table
"""

import threading
from contextlib import contextmanager
from typing import Optional

from ..models import ProbeRecord


class RWLock:
    """
    Reader/writer lock.

    Any number of readers may hold it at once; a writer waits for
    readers to drain and blocks new ones while it is waiting.
    """

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read(self):
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if not self._readers:
                    self._cond.notify_all()

    @contextmanager
    def write(self):
        with self._cond:
            self._writers_waiting += 1
            while self._writer or self._readers:
                self._cond.wait()
            self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class CorrelationTable:
    """
    Maps a probe identity (its destination port) to the ProbeRecord
    written when it was sent.

    Written by every probe thread, read by the ICMP listener. Records are
    never removed during a run; identities are unique so the table stays
    bounded by the probe budget.
    """

    def __init__(self):
        self._records: dict[int, ProbeRecord] = {}
        self._lock = RWLock()

    def register(self, identity: int, ttl: int, send_time: float) -> ProbeRecord:
        record = ProbeRecord(identity=identity, ttl=ttl, send_time=send_time)
        with self._lock.write():
            self._records[identity] = record
        return record

    def lookup(self, identity: int) -> Optional[ProbeRecord]:
        with self._lock.read():
            return self._records.get(identity)

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._records)
