"""
Traceroute orchestrator
"""

import logging
import queue
import threading
from typing import Callable, Optional

from ..config import Config
from ..errors import ProbeError, TraceError
from ..models import HopRow
from ..sequence import ResultSequence
from .aggregator import Aggregator
from .base import BaseProbe
from .listener import ICMPListener
from .ports import PortAllocator
from .table import CorrelationTable
from .udp import UDPProbe


logger = logging.getLogger(__name__)


class Tracer:
    """
    Traceroute orchestrator.

    Starts the ICMP listener and the aggregator, then launches num_probes
    UDP probes per TTL from 1 up to max_ttl, each in its own thread. At most
    `parallelism` probes are in flight; launching waits only for a free
    slot, never for earlier probes to finish. Rows come out of the
    ResultSequence returned by run() as soon as each hop is complete.
    """

    def __init__(
        self,
        config: Config,
        probe_class: Callable[..., BaseProbe] = UDPProbe,
        listener_class: Callable[..., ICMPListener] = ICMPListener,
    ):
        self.config = config
        self.probe_class = probe_class
        self.listener_class = listener_class
        self.table = CorrelationTable()
        self.ports = PortAllocator(config.dst_port)
        self.events: queue.Queue = queue.Queue()
        self.aggregator: Optional[Aggregator] = None
        self._gate = threading.BoundedSemaphore(config.parallelism)

    def run(self) -> ResultSequence:
        """Start tracing in the background and return the row sequence"""
        sequence = ResultSequence()
        self.aggregator = Aggregator(self.config, self.events, sequence)
        thread = threading.Thread(
            target=self._assemble, args=(sequence,), name='tracer', daemon=True
        )
        thread.start()
        return sequence

    def trace(
        self,
        on_hop: Optional[Callable[[HopRow], None]] = None
    ) -> list[HopRow]:
        """
        Execute traceroute and wait for it to finish.

        Args:
            on_hop: Optional callback for real-time hop updates

        Returns:
            List of HopRow, one per TTL up to the last hop

        Raises:
            TraceError: if the run could not be set up or a probe failed to open
        """
        rows: list[HopRow] = []
        for row in self.run():
            rows.append(row)
            if on_hop:
                on_hop(row)
        return rows

    def _assemble(self, sequence: ResultSequence):
        cfg = self.config
        logger.info("tracing %s: %d hops max, %d probes per hop, %d in parallel",
                    cfg.dst_addr, cfg.max_ttl, cfg.num_probes, cfg.parallelism)

        self.aggregator.start()

        listener = self.listener_class(
            cfg.src_addr, cfg.dst_addr, self.table, self.events.put
        )
        try:
            listener.start()
        except TraceError as e:
            self.aggregator.stop()
            sequence.fail(e)
            return
        self.aggregator.add_done_callback(listener.stop)

        try:
            self._dispatch()
        except TraceError as e:
            logger.error("aborting trace: %s", e)
            listener.stop()
            self.aggregator.stop()
            sequence.fail(e)

    def _dispatch(self):
        cfg = self.config
        for ttl in range(1, cfg.max_ttl + 1):
            for _ in range(cfg.num_probes):
                self._gate.acquire()
                if self.aggregator.finished.is_set():
                    self._gate.release()
                    logger.debug("destination reached, not launching ttl %d", ttl)
                    return
                self._launch(ttl, self.ports.allocate())

    def _launch(self, ttl: int, identity: int):
        probe = self.probe_class(
            self.config.src_addr, self.config.dst_addr, ttl, identity,
            self.config.timeout, self.table, self.events.put
        )
        try:
            probe.open()
        except OSError as e:
            self._gate.release()
            raise ProbeError(f"cannot open probe socket for ttl {ttl}: {e}")

        thread = threading.Thread(
            target=self._serve, args=(probe,), name=f'probe-{identity}', daemon=True
        )
        thread.start()

    def _serve(self, probe: BaseProbe):
        try:
            probe.run()
        finally:
            probe.close()
            self._gate.release()
