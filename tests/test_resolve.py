import socket
from unittest.mock import patch

import pytest

from hoptrace import resolve
from hoptrace.errors import ConfigError


def test_resolve_target_returns_ipv4():
    with patch.object(resolve.socket, 'gethostbyname', return_value="93.184.216.34"):
        assert resolve.resolve_target("example.com") == "93.184.216.34"


def test_resolve_target_failure_is_config_error():
    error = socket.gaierror(-2, "Name or service not known")
    with patch.object(resolve.socket, 'gethostbyname', side_effect=error):
        with pytest.raises(ConfigError, match="Cannot resolve"):
            resolve.resolve_target("does-not-exist.invalid")


def test_resolve_source_keeps_literal_address():
    assert resolve.resolve_source("0.0.0.0") == "0.0.0.0"
