import contextlib
import json
import logging
import asyncio
import h11
from itertools import count
from typing import Any, Mapping, Optional
from urllib.parse import urlparse, ParseResult

from roundtrip import stat
from roundtrip.config import conf
from roundtrip.connect import open_connection
from roundtrip.form import build_form
from roundtrip.interface import Request, Response, FixedBody, StreamingBody, as_payload
from roundtrip.stream import BodyStream, read_stream

logger = logging.getLogger(__name__)

req_counter = count(1)

async def request(method: str, url: str, payload=None, headers: Optional[Mapping[str, str]] = None) -> Response:
    """
    Issue one HTTP request and return as soon as the response head arrives.
    The body is left unread on `Response.body`; the caller drains it.
    """
    req = Request(
        method=method.upper(),
        url=url,
        header=dict(headers or {}),
        req_id=next(req_counter),
        payload=as_payload(payload),
    )
    return await fetch(req)

async def get(url: str, headers: Optional[Mapping[str, str]] = None) -> Response:
    return await request('GET', url, None, headers)

async def post(url: str, payload, headers: Optional[Mapping[str, str]] = None) -> Response:
    return await request('POST', url, payload, headers)

async def get_json(url: str, headers: Optional[Mapping[str, str]] = None) -> Any:
    res = await get(url, headers)
    body = await read_stream(res.body)
    return json.loads(body.decode('utf-8'))

async def post_form(url: str, fields: Mapping[str, Any], headers: Optional[Mapping[str, str]] = None) -> Response:
    form = build_form(fields)
    merged = {'content-type': form.content_type, **(headers or {})}
    return await post(url, form.payload, merged)

async def fetch(req: Request) -> Response:
    if not req.url.startswith(('http://', 'https://')):
        raise ValueError(f"url must start with http:// or https://, got {req.url!r}")
    url = urlparse(req.url)
    if not url.hostname:
        raise ValueError(f"url has no host: {req.url!r}")
    tls = url.scheme == 'https'
    port = url.port or (443 if tls else 80)

    # prepare connection
    reader, writer = await open_connection(url.hostname, port, tls=tls)
    conn = h11.Connection(our_role=h11.CLIENT)

    try:
        logger.log(logging.INFO, f"> {req.method} {req.url}")
        await _send_request(conn, writer, req, url)
        head = await _receive_head(conn, reader)
    except BaseException:
        writer.close()
        with contextlib.suppress(OSError):
            await writer.wait_closed()
        raise

    res = Response(
        status_code=head.status_code,
        url=req.url,
        headers=_header_map(head.headers),
        req_id=req.req_id,
        body=BodyStream(conn, reader, writer),
        reason=head.reason.decode('latin-1'),
    )
    logger.log(logging.INFO, f"< {res.status_code} {res.url}")
    return res

def _build_headers(req: Request, url: ParseResult) -> list[tuple[bytes, bytes]]:
    headers = {
        'host': url.netloc.rpartition('@')[2],
        'user-agent': conf.user_agent,
        'accept': conf.accept,
        'connection': 'close',
        **{k.lower(): v for k, v in req.header.items()},
    }
    match req.payload:
        case FixedBody(data=data):
            if data or req.method not in ('GET', 'HEAD'):
                headers.setdefault('content-length', str(len(data)))
        case StreamingBody():
            if 'content-length' not in headers:
                headers.setdefault('transfer-encoding', 'chunked')
    # latin-1 mirrors _header_map so received values replay byte for byte
    return [(k.encode('latin-1'), v.encode('latin-1')) for k, v in headers.items()]

async def _send_request(conn: h11.Connection, writer: asyncio.StreamWriter, req: Request, url: ParseResult):
    target = url.path or '/'
    if len(url.query) > 0:
        target += '?' + url.query
    headers = _build_headers(req, url)
    await _write(writer, conn.send(h11.Request(
        method=req.method,
        headers=headers,
        target=target,
    )))

    # send request body; streams are piped as they produce
    match req.payload:
        case FixedBody(data=data):
            if data:
                await _write(writer, conn.send(h11.Data(data=data)))
        case StreamingBody(stream=stream):
            async for chunk in stream:
                if isinstance(chunk, str):
                    chunk = chunk.encode('utf-8')
                if chunk:
                    await _write(writer, conn.send(h11.Data(data=chunk)))

    # end of request
    await _write(writer, conn.send(h11.EndOfMessage()))

async def _write(writer: asyncio.StreamWriter, data: Optional[bytes]):
    if not data:
        return
    writer.write(data)
    await writer.drain()
    stat.increase_total_sent(len(data))

async def _receive_head(conn: h11.Connection, reader: asyncio.StreamReader) -> h11.Response:
    while True:
        event = conn.next_event()
        if event is h11.NEED_DATA:
            data = await reader.read(conf.read_chunk_size)
            stat.increase_total_received(len(data))
            conn.receive_data(data)
        elif isinstance(event, h11.Response):
            return event
        elif isinstance(event, h11.ConnectionClosed):
            raise h11.RemoteProtocolError("connection closed before response")
        # 1xx informational responses are skipped

def _header_map(raw) -> dict[str, list[str]]:
    headers: dict[str, list[str]] = {}
    for k, v in raw:
        headers.setdefault(k.decode('latin-1').lower(), []).append(v.decode('latin-1'))
    return headers
