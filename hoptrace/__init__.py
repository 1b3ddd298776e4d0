"""
hoptrace - Parallel UDP Traceroute

Sends bounded-TTL UDP probes concurrently, correlates the ICMP errors
they trigger and streams an ordered per-hop view of the path.
"""

__version__ = "1.0.0"
