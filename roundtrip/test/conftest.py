import pytest

from roundtrip import stat
from roundtrip.config import conf
from roundtrip.test.server import serve


@pytest.fixture
def http_server():
    return serve


@pytest.fixture(autouse=True)
def isolated_state(monkeypatch):
    monkeypatch.setattr(conf, 'proxy_addr', None)
    monkeypatch.setattr(conf, 'proxy_port', None)
    monkeypatch.setattr(conf, 'dns_override', {})
    stat.reset()
    yield
    stat.reset()
