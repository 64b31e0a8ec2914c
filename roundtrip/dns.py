import logging
import asyncio
import socket

from roundtrip.config import conf


logger = logging.getLogger(__name__)

async def resolve(hostname: str) -> str:
    if hostname in conf.dns_override:
        ip = conf.dns_override[hostname]
        logger.log(logging.DEBUG, f"resolved {hostname} to {ip} (overrided)")
        return ip

    loop = asyncio.get_running_loop()
    infos = await loop.getaddrinfo(hostname, None, family=socket.AF_INET, type=socket.SOCK_STREAM)
    ip = infos[0][4][0]
    logger.log(logging.DEBUG, f"resolved {hostname} to {ip}")
    return ip
