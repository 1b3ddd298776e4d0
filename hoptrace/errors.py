"""
Exceptions raised by hoptrace
"""


class TraceError(Exception):
    """Base class for all trace failures"""


class ConfigError(TraceError, ValueError):
    """Invalid run parameters, detected before any probe is sent"""


class SetupError(TraceError):
    """The ICMP listener could not be brought up"""


class ProbeError(TraceError):
    """A probe socket could not be opened"""
