import logging
from typing import Mapping, Optional

from roundtrip.interface import Response

logger = logging.getLogger(__name__)

class CookieJar:
    """
    In-memory name -> value cookie store shared across a session's requests.

    Only the leading `name=value` of each set-cookie header is kept; domain,
    path, expiry and flags are ignored, so every cookie is sent everywhere.
    Pass `jar.cookie` as the Cookie request header and feed every response
    through `jar.set_cookie()`.
    """

    def __init__(self, cookies: Optional[dict[str, str]] = None):
        self.cookies = cookies if cookies is not None else {}

    @property
    def cookie(self) -> str:
        return '; '.join(f"{k}={v}" for k, v in self.cookies.items())

    def set_cookie(self, res: Response) -> Response:
        for header in res.headers.get('set-cookie', []):
            pair = header.split(';', 1)[0]
            k, _, v = pair.partition('=')
            self.cookies[k] = v
            logger.log(logging.DEBUG, f"cookie set: {k}")
        return res

    def headers(self, extra: Optional[Mapping[str, str]] = None) -> dict[str, str]:
        headers = {'cookie': self.cookie} if self.cookies else {}
        headers.update(extra or {})
        return headers

    def save(self):
        """ hook for persisting `cookies`; the in-memory jar keeps nothing """

    def restore(self):
        """ hook for reloading `cookies`; the in-memory jar keeps nothing """
