"""
Run configuration for hoptrace
"""

import ipaddress
from dataclasses import dataclass

from .errors import ConfigError


MAX_PORT = 65535
MAX_PROBES = 10
MAX_TTL = 255


@dataclass(frozen=True)
class Config:
    """
    Immutable trace parameters.

    Built once by the CLI and read by every component afterwards.
    Validation happens on construction, so an instance that exists
    is always usable.
    """
    dst_addr: str
    dst_port: int = 33434
    num_probes: int = 3
    timeout: float = 5.0
    max_ttl: int = 30
    src_addr: str = '0.0.0.0'
    parallelism: int = 16

    def __post_init__(self):
        self._check_address('destination', self.dst_addr)
        self._check_address('source', self.src_addr)

        if not 0 < self.dst_port <= MAX_PORT:
            raise ConfigError("destination port must be between 1 and 65535")
        if self.parallelism <= 0:
            raise ConfigError("parallelism must be a positive integer")
        if self.num_probes <= 0:
            raise ConfigError("number of probes must be a positive integer")
        if self.num_probes > MAX_PROBES:
            raise ConfigError(f"number of probes cannot be more than {MAX_PROBES}")
        if self.max_ttl <= 0:
            raise ConfigError("max hops must be a positive integer")
        if self.max_ttl > MAX_TTL:
            raise ConfigError(f"max hops cannot be more than {MAX_TTL}")
        if not self.timeout > 0:
            raise ConfigError("timeout must be positive")

        # Every probe gets its own destination port
        if self.probe_budget > MAX_PORT - self.dst_port:
            raise ConfigError(
                f"{self.max_ttl} hops x {self.num_probes} probes needs "
                f"{self.probe_budget} ports, only {MAX_PORT - self.dst_port} "
                f"left above port {self.dst_port}"
            )

    @property
    def probe_budget(self) -> int:
        """Total number of probes a full sweep sends"""
        return self.max_ttl * self.num_probes

    @staticmethod
    def _check_address(name: str, value: str):
        try:
            ipaddress.IPv4Address(value)
        except (ipaddress.AddressValueError, ValueError):
            raise ConfigError(f"{name} address must be an IPv4 address, got {value!r}")
