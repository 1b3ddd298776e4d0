import threading

import pytest

from hoptrace.config import Config, MAX_PORT
from hoptrace.errors import ConfigError
from hoptrace.probe.ports import PortAllocator
from hoptrace.probe.table import CorrelationTable


def test_register_and_lookup():
    table = CorrelationTable()
    record = table.register(33434, ttl=3, send_time=12.5)

    assert table.lookup(33434) == record
    assert record.ttl == 3
    assert record.send_time == 12.5


def test_lookup_miss_returns_none():
    assert CorrelationTable().lookup(40000) is None


def test_register_overwrites():
    table = CorrelationTable()
    table.register(33434, ttl=1, send_time=1.0)
    table.register(33434, ttl=2, send_time=2.0)

    assert table.lookup(33434).ttl == 2
    assert len(table) == 1


def test_concurrent_writers_and_readers():
    """Records are never seen half-written while many threads write"""
    table = CorrelationTable()
    errors = []

    def writer(offset):
        for i in range(200):
            port = 33434 + offset * 200 + i
            table.register(port, ttl=offset + 1, send_time=float(port))

    def reader():
        for port in range(33434, 33434 + 800):
            record = table.lookup(port)
            if record is not None and record.send_time != float(record.identity):
                errors.append(record)

    threads = [threading.Thread(target=writer, args=(n,)) for n in range(4)]
    threads += [threading.Thread(target=reader) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert not errors
    assert len(table) == 800


def test_port_allocator_increments_across_run():
    ports = PortAllocator(33434)
    assert [ports.allocate() for _ in range(4)] == [33434, 33435, 33436, 33437]


def test_port_allocator_fails_fast_when_exhausted():
    ports = PortAllocator(65533)
    assert ports.remaining == 2
    assert ports.allocate() == 65533
    assert ports.allocate() == 65534
    assert ports.remaining == 0
    with pytest.raises(ConfigError):
        ports.allocate()


@pytest.mark.parametrize("base_port, max_ttl, num_probes", [(65534, 1, 1), (65445, 30, 3)])
def test_port_allocator_matches_config_budget(base_port, max_ttl, num_probes):
    """The largest probe budget Config accepts is exactly what the allocator hands out"""
    cfg = Config(dst_addr="8.8.8.8", dst_port=base_port, num_probes=num_probes, max_ttl=max_ttl)
    ports = PortAllocator(cfg.dst_port)

    assert ports.remaining == cfg.probe_budget == MAX_PORT - base_port
    for _ in range(cfg.probe_budget):
        ports.allocate()
    with pytest.raises(ConfigError):
        ports.allocate()
