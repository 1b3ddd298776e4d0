"""
Host name resolution for trace targets
"""

import ipaddress
import socket

from .errors import ConfigError


def resolve_target(host: str) -> str:
    """
    Resolve a host name or dotted address to an IPv4 address.

    Raises:
        ConfigError: if the name does not resolve
    """
    try:
        return socket.gethostbyname(host)
    except (socket.gaierror, UnicodeError) as e:
        raise ConfigError(f"Cannot resolve hostname '{host}': {e}")


def resolve_source(addr: str) -> str:
    """Validate the local address probes are sent from"""
    try:
        return str(ipaddress.IPv4Address(addr))
    except ValueError:
        return resolve_target(addr)
