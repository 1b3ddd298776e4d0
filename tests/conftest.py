import pytest

from hoptrace.config import Config

from .helpers import DEST


@pytest.fixture
def config():
    return Config(dst_addr=DEST, num_probes=2, max_ttl=3, parallelism=4, timeout=0.5)
