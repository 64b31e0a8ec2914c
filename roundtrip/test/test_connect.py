import asyncio
import socket
import ssl
import pytest
import socks

from roundtrip import dns
from roundtrip.config import conf
from roundtrip.connect import tcp, open_connection


async def hello_server():
    async def handle(reader, writer):
        writer.write(b'hello')
        await writer.drain()
        writer.close()

    server = await asyncio.start_server(handle, '127.0.0.1', 0)
    return server, server.sockets[0].getsockname()[1]


def test_tcp_connects():
    async def main():
        server, port = await hello_server()
        async with server:
            reader, writer = await tcp('127.0.0.1', port)
            try:
                return await reader.read()
            finally:
                writer.close()

    assert asyncio.run(main()) == b'hello'


def test_tcp_failure_is_raised():
    with socket.socket() as s:
        s.bind(('127.0.0.1', 0))
        port = s.getsockname()[1]

    with pytest.raises(OSError):
        asyncio.run(tcp('127.0.0.1', port))


def test_dns_override(monkeypatch):
    monkeypatch.setattr(conf, 'dns_override', {'service.test': '127.0.0.1'})
    assert asyncio.run(dns.resolve('service.test')) == '127.0.0.1'


def test_dns_literal_address():
    assert asyncio.run(dns.resolve('127.0.0.1')) == '127.0.0.1'


def test_tcp_through_socks_proxy(monkeypatch):
    calls = []

    def fake_create_connection(dest_pair, **kwargs):
        calls.append((dest_pair, kwargs))
        return socket.create_connection(dest_pair)

    monkeypatch.setattr(socks, 'create_connection', fake_create_connection)
    monkeypatch.setattr(conf, 'proxy_addr', '127.0.0.9')
    monkeypatch.setattr(conf, 'proxy_port', 1080)

    async def main():
        server, port = await hello_server()
        async with server:
            reader, writer = await tcp('127.0.0.1', port)
            try:
                return port, await reader.read()
            finally:
                writer.close()

    port, data = asyncio.run(main())
    assert data == b'hello'
    assert calls == [(
        ('127.0.0.1', port),
        {'proxy_type': socks.SOCKS5, 'proxy_addr': '127.0.0.9', 'proxy_port': 1080},
    )]


def test_dns_asks_for_ipv4_only(monkeypatch):
    calls = []

    async def fake_getaddrinfo(self, host, port, *, family=0, type=0, proto=0, flags=0):
        calls.append(family)
        v4 = (socket.AF_INET, socket.SOCK_STREAM, 6, '', ('127.0.0.1', 0))
        v6 = (socket.AF_INET6, socket.SOCK_STREAM, 6, '', ('::1', 0, 0, 0))
        return [v4] if family == socket.AF_INET else [v6, v4]

    monkeypatch.setattr(asyncio.base_events.BaseEventLoop, 'getaddrinfo', fake_getaddrinfo)
    assert asyncio.run(dns.resolve('dual.test')) == '127.0.0.1'
    assert calls == [socket.AF_INET]


def test_tls_connection_uses_server_name(monkeypatch):
    calls = []

    async def fake_open_connection(host=None, port=None, **kwargs):
        calls.append((host, port, kwargs))
        return 'reader', 'writer'

    monkeypatch.setattr(asyncio, 'open_connection', fake_open_connection)
    monkeypatch.setattr(conf, 'dns_override', {'secure.test': '10.1.2.3'})

    assert asyncio.run(open_connection('secure.test', 443, tls=True)) == ('reader', 'writer')
    host, port, kwargs = calls[0]
    assert (host, port) == ('10.1.2.3', 443)
    assert isinstance(kwargs['ssl'], ssl.SSLContext)
    assert kwargs['server_hostname'] == 'secure.test'
