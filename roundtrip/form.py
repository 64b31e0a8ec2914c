import random
import string
from time import time
from dataclasses import dataclass
from typing import Any, Callable, Mapping
from urllib.parse import quote

BASE36_DIGITS = string.digits + string.ascii_lowercase

def encode_uri_component(value: Any) -> str:
    """ percent-encode everything but A-Z a-z 0-9 - _ . ! ~ * ' ( ) """
    if not isinstance(value, (str, bytes)):
        value = str(value)
    return quote(value, safe="!~*'()")

def stringify(obj: Mapping[str, Any], *, encode: Callable[[Any], str] = encode_uri_component) -> str:
    return '&'.join(f"{encode_uri_component(key)}={encode(value)}" for key, value in obj.items())

@dataclass
class Form:
    boundary: str
    payload: bytes

    @property
    def content_type(self) -> str:
        return f"multipart/form-data; boundary={self.boundary}"

def _base36(n: int) -> str:
    digits = []
    while True:
        n, rem = divmod(n, 36)
        digits.append(BASE36_DIGITS[rem])
        if n == 0:
            return ''.join(reversed(digits))

def _boundary() -> str:
    token = _base36(int(time() * 1000) + random.randrange(10 ** 8))
    return f"----WebKitFormBoundary{token}"

def build_form(fields: Mapping[str, Any]) -> Form:
    boundary = _boundary()
    output: list[bytes] = []
    for key, value in fields.items():
        if not isinstance(value, (bytes, bytearray)):
            value = str(value).encode('utf-8')
        output.append(f"--{boundary}".encode())
        output.append(f'Content-Disposition: form-data; name="{key}"'.encode('utf-8'))
        output.append(b'')
        output.append(bytes(value))
    output.append(f"--{boundary}--".encode())
    output.append(b'')
    return Form(boundary=boundary, payload=b'\r\n'.join(output))
