from typing import AsyncIterable, Optional, Union, TYPE_CHECKING
from dataclasses import dataclass, field

if TYPE_CHECKING:
    from roundtrip.stream import BodyStream

@dataclass
class FixedBody:
    data: bytes = b''

@dataclass
class StreamingBody:
    stream: AsyncIterable[bytes]

Payload = Union[FixedBody, StreamingBody]

def as_payload(value) -> Payload:
    """ lift raw bytes/str/async iterables into a tagged payload """
    if isinstance(value, (FixedBody, StreamingBody)):
        return value
    if value is None:
        return FixedBody()
    if isinstance(value, str):
        return FixedBody(value.encode('utf-8'))
    if isinstance(value, (bytes, bytearray, memoryview)):
        return FixedBody(bytes(value))
    if hasattr(value, '__aiter__'):
        return StreamingBody(value)
    raise TypeError(f"unsupported payload type: {type(value).__name__}")

@dataclass
class Request:
    method: str
    url: str
    header: dict[str, str]
    req_id: int
    payload: Payload = field(default_factory=FixedBody)

@dataclass
class Response:
    status_code: int
    url: str
    headers: dict[str, list[str]]
    req_id: int
    body: 'BodyStream'
    reason: str = ''

    def header(self, name: str) -> Optional[str]:
        values = self.headers.get(name.lower())
        return values[0] if values else None
