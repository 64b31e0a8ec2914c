import asyncio
import contextlib
import logging
import h11
from typing import AsyncIterable, Union

from roundtrip import stat
from roundtrip.config import conf

logger = logging.getLogger(__name__)

async def read_stream(stream: AsyncIterable[Union[bytes, str]]) -> bytes:
    """
    Drain an async byte stream into one buffer, keeping chunks in arrival order.
    Errors raised by the stream propagate without a partial result.
    """
    buffer = []
    async for chunk in stream:
        if isinstance(chunk, str):
            chunk = chunk.encode('utf-8')
        buffer.append(chunk)
    return bytes().join(buffer)

class BodyStream:
    """
    Lazy response body: pulls h11 events off the connection as it is iterated.
    The transport is closed once the message ends or iteration fails.
    """

    def __init__(self, conn: h11.Connection, reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
        self._conn = conn
        self._reader = reader
        self._writer = writer
        self._consumed = False
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def __aiter__(self):
        if self._consumed:
            raise RuntimeError("response body already consumed")
        self._consumed = True
        return self

    async def __anext__(self) -> bytes:
        if self._closed:
            raise StopAsyncIteration
        try:
            while True:
                event = self._conn.next_event()
                if event is h11.NEED_DATA:
                    data = await self._reader.read(conf.read_chunk_size)
                    stat.increase_total_received(len(data))
                    self._conn.receive_data(data)
                elif isinstance(event, h11.Data):
                    return bytes(event.data)
                elif isinstance(event, (h11.EndOfMessage, h11.ConnectionClosed)):
                    break
        except BaseException:
            with contextlib.suppress(OSError):
                await self.aclose()
            raise
        await self.aclose()
        raise StopAsyncIteration

    async def read(self) -> bytes:
        return await read_stream(self)

    async def aclose(self):
        if self._closed:
            return
        self._closed = True
        self._writer.close()
        await self._writer.wait_closed()
        logger.log(logging.DEBUG, "connection closed")
