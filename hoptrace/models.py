"""
Data models for hoptrace
"""

from dataclasses import dataclass, field
from enum import Enum


# Bucket key for probes that got no answer, kept literal for JSON output
NO_RESPONDER = "None"
NO_RESPONSE_MARK = "*"


@dataclass(frozen=True)
class ProbeRecord:
    """What the sender knew about a probe when it left"""
    identity: int
    ttl: int
    send_time: float


class EventKind(Enum):
    """Outcome of a single probe"""
    TIME_EXCEEDED = 'time_exceeded'
    UNREACHABLE = 'unreachable'
    NO_RESPONSE = 'no_response'


@dataclass(frozen=True)
class ProbeEvent:
    """Correlated outcome of one probe, produced by the listener or a sender"""
    kind: EventKind
    identity: int
    source: str
    ttl: int
    rtt: float = 0.0


@dataclass
class HopRow:
    """All probe outcomes for one TTL, bucketed by responder address"""
    ttl: int
    responses_per_ip: dict[str, list[str]] = field(default_factory=dict)

    def add(self, responder: str, outcome: str):
        self.responses_per_ip.setdefault(responder, []).append(outcome)

    @property
    def probe_count(self) -> int:
        return sum(len(outcomes) for outcomes in self.responses_per_ip.values())

    def is_complete(self, num_probes: int) -> bool:
        return self.probe_count == num_probes

    def to_dict(self) -> dict:
        return {
            "ttl": self.ttl,
            "responses_per_ip": {
                responder: list(outcomes)
                for responder, outcomes in self.responses_per_ip.items()
            },
        }


_UNITS = (
    (1_000_000_000, 's'),
    (1_000_000, 'ms'),
    (1_000, 'µs'),
)


def format_rtt(seconds: float) -> str:
    """
    Format a round-trip time the way it appears in rows.

    The value is first rounded to whole nanoseconds, then printed in the
    largest unit that keeps it >= 1 with every remaining digit, e.g.
    0.012403217 -> "12.403217ms", 1.5 -> "1.5s", 0.0000005 -> "500ns".
    """
    nanos = round(seconds * 1e9)
    if nanos <= 0:
        return "0s"

    for size, unit in _UNITS:
        if nanos >= size:
            whole, frac = divmod(nanos, size)
            digits = len(str(size)) - 1
            text = f"{whole}.{frac:0{digits}d}".rstrip('0').rstrip('.')
            return f"{text}{unit}"

    return f"{nanos}ns"
