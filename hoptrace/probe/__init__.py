"""
Probe engine for hoptrace
"""

from .base import BaseProbe
from .udp import UDPProbe
from .listener import ICMPListener
from .table import CorrelationTable
from .ports import PortAllocator
from .aggregator import Aggregator
from .tracer import Tracer

__all__ = [
    'BaseProbe', 'UDPProbe', 'ICMPListener', 'CorrelationTable',
    'PortAllocator', 'Aggregator', 'Tracer',
]
