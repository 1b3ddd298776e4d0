"""
Probe identity allocation
"""

from ..config import MAX_PORT
from ..errors import ConfigError


class PortAllocator:
    """
    Hands out destination ports for probes.

    Starts at the base port and moves up by one for every probe of the run,
    so the port alone identifies a probe when its ICMP error comes back.
    The limit itself is never handed out.
    """

    def __init__(self, base_port: int, limit: int = MAX_PORT):
        self.base_port = base_port
        self.limit = limit
        self._next = base_port

    @property
    def remaining(self) -> int:
        return max(self.limit - self._next, 0)

    def allocate(self) -> int:
        if self._next >= self.limit:
            raise ConfigError(
                f"ran out of probe ports above {self.base_port} (limit {self.limit})"
            )
        port = self._next
        self._next += 1
        return port
