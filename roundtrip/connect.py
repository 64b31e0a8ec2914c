import asyncio
import functools
import logging
import ssl
import socks

from roundtrip import dns
from roundtrip.config import conf

logger = logging.getLogger(__name__)

Connection = tuple[asyncio.StreamReader, asyncio.StreamWriter]

async def tcp(host: str, port: int) -> Connection:
    """
    Open a bare TCP connection to host:port.
    Connection failures are raised (OSError) rather than left pending.
    """
    return await open_connection(host, port)

async def open_connection(host: str, port: int, *, tls: bool = False) -> Connection:
    ip = await dns.resolve(host)
    ctx = ssl.create_default_context() if tls else None
    server_hostname = host if tls else None

    if conf.proxy_addr is None:
        logger.log(logging.DEBUG, f"connecting to {host}:{port} ({ip}, tls={tls})")
        return await asyncio.open_connection(ip, port, ssl=ctx, server_hostname=server_hostname)

    # tunnel through SOCKS5; PySocks connects synchronously
    logger.log(logging.DEBUG, f"connecting to {host}:{port} ({ip}, tls={tls}) via socks5 {conf.proxy_addr}:{conf.proxy_port}")
    loop = asyncio.get_running_loop()
    sock = await loop.run_in_executor(None, functools.partial(
        socks.create_connection,
        (ip, port),
        proxy_type=socks.SOCKS5,
        proxy_addr=conf.proxy_addr,
        proxy_port=conf.proxy_port,
    ))
    try:
        return await asyncio.open_connection(sock=sock, ssl=ctx, server_hostname=server_hostname)
    except BaseException:
        sock.close()
        raise
