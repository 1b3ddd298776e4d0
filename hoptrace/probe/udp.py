"""
UDP probe implementation
"""

import logging
import socket
import time
from typing import Callable, Optional

from ..models import EventKind, ProbeEvent
from .base import BaseProbe
from .table import CorrelationTable


logger = logging.getLogger(__name__)


class UDPProbe(BaseProbe):
    """
    UDP probe (Unix-style traceroute).

    Sends one empty datagram from a connected socket with a controlled TTL
    to the probe's own destination port. Outcomes:
    - Connection refused: the kernel saw ICMP Port Unreachable for this
      socket, so the destination itself answered
    - Timeout: nothing came back (intermediate answers are picked up by
      the ICMP listener, not here)
    """

    BUFFER_SIZE = 1024

    def __init__(self, src_addr: str, dst_addr: str, ttl: int, identity: int,
                 timeout: float, table: CorrelationTable,
                 emit: Callable[[ProbeEvent], None]):
        super().__init__(ttl, identity, timeout)
        self.src_addr = src_addr
        self.dst_addr = dst_addr
        self.table = table
        self.emit = emit
        self._sock: Optional[socket.socket] = None

    def open(self):
        """Create the connected UDP socket with TTL and read timeout set"""
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        try:
            sock.bind((self.src_addr, 0))
            sock.connect((self.dst_addr, self.identity))
            sock.settimeout(self.timeout)
        except OSError:
            sock.close()
            raise

        try:
            sock.setsockopt(socket.IPPROTO_IP, socket.IP_TTL, self.ttl)
        except OSError as e:
            logger.warning("couldn't assign TTL %d to probe on port %d: %s",
                           self.ttl, self.identity, e)

        self._sock = sock

    def run(self) -> Optional[ProbeEvent]:
        """Send the probe, wait for its outcome and emit it"""
        record = self.table.register(self.identity, self.ttl, time.perf_counter())

        try:
            self._sock.send(b'')
            self._sock.recv(self.BUFFER_SIZE)
        except socket.timeout:
            kind = EventKind.NO_RESPONSE
        except ConnectionRefusedError:
            kind = EventKind.UNREACHABLE
        except OSError as e:
            logger.warning("unexpected error reading probe on port %d (ttl %d): %s",
                           self.identity, self.ttl, e)
            return None
        else:
            logger.warning("unexpected reply to probe on port %d (ttl %d)",
                           self.identity, self.ttl)
            return None

        event = ProbeEvent(
            kind=kind,
            identity=self.identity,
            source=self.dst_addr,
            ttl=self.ttl,
            rtt=time.perf_counter() - record.send_time,
        )
        self.emit(event)
        return event

    def close(self):
        """Close socket"""
        if self._sock:
            self._sock.close()
            self._sock = None
