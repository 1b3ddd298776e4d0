import socket
import struct

from hoptrace.models import EventKind, ProbeEvent


DEST = "93.184.216.34"
ROUTER = "10.0.0.1"


def time_exceeded(identity, ttl, source=ROUTER, rtt=0.0124):
    return ProbeEvent(EventKind.TIME_EXCEEDED, identity, source, ttl, rtt)


def unreachable(identity, ttl, source=DEST, rtt=0.02):
    return ProbeEvent(EventKind.UNREACHABLE, identity, source, ttl, rtt)


def no_response(identity, ttl):
    return ProbeEvent(EventKind.NO_RESPONSE, identity, DEST, ttl, 0.5)


def build_icmp_packet(icmp_type=11, dst=DEST, port=33434, outer_ihl=5, truncate=None):
    """Raw-socket datagram: outer IPv4 header, ICMP header, original IP + UDP headers"""
    outer = bytes([0x40 | outer_ihl]) + bytes(outer_ihl * 4 - 1)
    icmp = struct.pack('!BBHI', icmp_type, 0, 0, 0)
    inner_ip = struct.pack(
        '!BBHHHBBH4s4s', 0x45, 0, 28, 0, 0, 1, socket.IPPROTO_UDP, 0,
        socket.inet_aton("192.168.1.10"), socket.inet_aton(dst)
    )
    udp = struct.pack('!HHHH', 50000, port, 8, 0)
    packet = outer + icmp + inner_ip + udp
    if truncate is not None:
        packet = packet[:len(outer) + truncate]
    return packet
