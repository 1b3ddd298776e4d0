"""
Raw ICMP listener that matches Time Exceeded messages to probes
"""

import logging
import socket
import struct
import threading
import time
from typing import Callable, Optional

from ..errors import SetupError
from ..models import EventKind, ProbeEvent
from .table import CorrelationTable


logger = logging.getLogger(__name__)


ICMP_TIME_EXCEEDED = 11

# Offsets inside the ICMP message: 8 byte ICMP header, then the
# original IPv4 header (assumed option-less) and the first UDP bytes
MIN_ICMP_LEN = 32
EMBEDDED_DST_ADDR = slice(24, 28)
EMBEDDED_DST_PORT = slice(30, 32)


def strip_ip_header(packet: bytes) -> bytes:
    """Drop the outer IPv4 header that raw sockets deliver"""
    if not packet:
        return packet
    ip_header_len = (packet[0] & 0x0F) * 4
    return packet[ip_header_len:]


def parse_time_exceeded(icmp: bytes, dst_addr: str) -> Optional[int]:
    """
    Extract the probe identity from an ICMP Time Exceeded message.

    Args:
        icmp: ICMP message, outer IP header already removed
        dst_addr: Trace destination the embedded datagram must be headed to

    Returns:
        Embedded UDP destination port, or None if the message is too short,
        is not Time Exceeded or belongs to another flow
    """
    if len(icmp) < MIN_ICMP_LEN:
        return None

    if icmp[0] != ICMP_TIME_EXCEEDED:
        return None

    if icmp[EMBEDDED_DST_ADDR] != socket.inet_aton(dst_addr):
        return None

    return struct.unpack('!H', icmp[EMBEDDED_DST_PORT])[0]


class ICMPListener:
    """
    Listens for ICMP Time Exceeded messages caused by our probes.

    One raw socket bound to the source address; a background thread
    decodes every datagram, looks the embedded destination port up in the
    correlation table and emits a TIME_EXCEEDED event. Packets for unknown
    ports are dropped.
    """

    BUFFER_SIZE = 1024
    POLL_INTERVAL = 0.5

    def __init__(self, src_addr: str, dst_addr: str, table: CorrelationTable,
                 emit: Callable[[ProbeEvent], None]):
        self.src_addr = src_addr
        self.dst_addr = dst_addr
        self.table = table
        self.emit = emit
        self._sock: Optional[socket.socket] = None
        self._thread: Optional[threading.Thread] = None
        self._stopped = threading.Event()

    def _open_socket(self) -> socket.socket:
        sock = socket.socket(socket.AF_INET, socket.SOCK_RAW, socket.IPPROTO_ICMP)
        try:
            sock.bind((self.src_addr, 0))
            sock.settimeout(self.POLL_INTERVAL)
        except OSError:
            sock.close()
            raise
        return sock

    def start(self):
        """Bind the raw socket and start the receive loop"""
        try:
            self._sock = self._open_socket()
        except PermissionError as e:
            raise SetupError(
                f"cannot open raw ICMP socket ({e}); root privileges required"
            )
        except OSError as e:
            raise SetupError(f"cannot listen for ICMP on {self.src_addr}: {e}")

        self._thread = threading.Thread(
            target=self.serve, name='icmp-listener', daemon=True
        )
        self._thread.start()
        logger.debug("listening for ICMP on %s", self.src_addr)

    def serve(self):
        try:
            while not self._stopped.is_set():
                try:
                    packet, addr = self._sock.recvfrom(self.BUFFER_SIZE)
                except socket.timeout:
                    continue
                except OSError as e:
                    if self._stopped.is_set():
                        break
                    logger.error("error reading ICMP messages: %s", e)
                    continue
                self.handle_packet(packet, addr[0], time.perf_counter())
        finally:
            self._sock.close()

    def handle_packet(self, packet: bytes, responder: str,
                      recv_time: float) -> Optional[ProbeEvent]:
        """Turn one raw datagram into an event, if it is ours"""
        identity = parse_time_exceeded(strip_ip_header(packet), self.dst_addr)
        if identity is None:
            return None

        record = self.table.lookup(identity)
        if record is None:
            logger.debug("dropping Time Exceeded from %s for unknown port %d",
                         responder, identity)
            return None

        event = ProbeEvent(
            kind=EventKind.TIME_EXCEEDED,
            identity=record.identity,
            source=responder,
            ttl=record.ttl,
            rtt=recv_time - record.send_time,
        )
        self.emit(event)
        return event

    def stop(self):
        self._stopped.set()

    def join(self, timeout: Optional[float] = None):
        if self._thread:
            self._thread.join(timeout)
