"""
Abstract base class for probe implementations
"""

from abc import ABC, abstractmethod
from typing import Optional

from ..models import ProbeEvent


class BaseProbe(ABC):
    """A single probe: opened, run once, then closed"""

    def __init__(self, ttl: int, identity: int, timeout: float = 5.0):
        self.ttl = ttl
        self.identity = identity
        self.timeout = timeout

    @abstractmethod
    def open(self):
        """
        Acquire the resources the probe needs.

        Raises:
            OSError: if the probe cannot be sent at all
        """
        pass

    @abstractmethod
    def run(self) -> Optional[ProbeEvent]:
        """
        Send the probe and wait for its outcome.

        Returns:
            The classified outcome, or None when it could not be classified
        """
        pass

    @abstractmethod
    def close(self):
        """Clean up resources"""
        pass

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
