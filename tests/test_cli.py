import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from hoptrace import cli
from hoptrace.errors import ConfigError, SetupError
from hoptrace.models import HopRow

from .helpers import DEST


class FakeTracer:
    rows = []
    error = None
    configs = []

    def __init__(self, config):
        FakeTracer.configs.append(config)

    def run(self):
        yield from FakeTracer.rows
        if FakeTracer.error:
            raise FakeTracer.error


@pytest.fixture
def runner():
    hop = HopRow(ttl=1)
    hop.add(DEST, "12.4ms")
    FakeTracer.rows = [hop]
    FakeTracer.error = None
    FakeTracer.configs = []

    with patch.object(cli, 'Tracer', FakeTracer), \
            patch.object(cli, 'is_admin', return_value=True), \
            patch.object(cli, 'resolve_target', return_value=DEST):
        yield CliRunner()


def test_json_output(runner):
    result = runner.invoke(cli.main, ['example.com', '--json'])

    assert result.exit_code == 0, result.output
    assert json.loads(result.output) == {
        "data": [{"ttl": 1, "responses_per_ip": {DEST: ["12.4ms"]}}]
    }


def test_options_reach_config(runner):
    result = runner.invoke(cli.main, [
        'example.com', '-j', '-p', '40000', '-q', '5', '-w', '1.5',
        '-n', '8', '-m', '12', '-s', '127.0.0.1',
    ])

    assert result.exit_code == 0, result.output
    cfg = FakeTracer.configs[-1]
    assert (cfg.dst_addr, cfg.dst_port, cfg.num_probes, cfg.timeout) == (DEST, 40000, 5, 1.5)
    assert (cfg.parallelism, cfg.max_ttl, cfg.src_addr) == (8, 12, "127.0.0.1")


def test_console_output(runner):
    result = runner.invoke(cli.main, ['example.com', '--no-dns'])

    assert result.exit_code == 0, result.output
    assert f" 1  {DEST} ({DEST}) 12.4ms" in result.output


def test_json_output_file(runner, tmp_path):
    path = tmp_path / "trace.json"
    result = runner.invoke(cli.main, ['example.com', '-o', str(path)])

    assert result.exit_code == 0, result.output
    assert json.loads(path.read_text(encoding='utf-8'))["data"][0]["ttl"] == 1


def test_invalid_arguments_exit_2(runner):
    result = runner.invoke(cli.main, ['example.com', '-q', '11'])

    assert result.exit_code == 2
    assert "number of probes" in result.output
    assert FakeTracer.configs == []


def test_unresolvable_host_exit_2(runner):
    with patch.object(cli, 'resolve_target', side_effect=ConfigError("Cannot resolve hostname 'nope'")):
        result = runner.invoke(cli.main, ['nope'])

    assert result.exit_code == 2
    assert "Cannot resolve" in result.output


def test_requires_root(runner):
    with patch.object(cli, 'is_admin', return_value=False):
        result = runner.invoke(cli.main, ['example.com'])

    assert result.exit_code == 1
    assert "Root privileges required" in result.output


def test_trace_error_exit_1(runner):
    FakeTracer.rows = []
    FakeTracer.error = SetupError("cannot listen for ICMP")
    result = runner.invoke(cli.main, ['example.com', '--json'])

    assert result.exit_code == 1
    assert "cannot listen for ICMP" in result.output


def test_interrupt_exit_130(runner):
    FakeTracer.rows = []
    FakeTracer.error = KeyboardInterrupt()
    result = runner.invoke(cli.main, ['example.com', '--json'])

    assert result.exit_code == 130
    assert "Warning: interrupted" in result.output
