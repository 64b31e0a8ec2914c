from typing import Callable, Sequence, Union

from roundtrip.interface import Response

class StatusCodeError(AssertionError):
    def __init__(self, expected: list[int], actual: int):
        self.expected = expected
        self.actual = actual
        rendered = ','.join(str(code) for code in expected)
        super().__init__(f'status code must be "{rendered}" but actually "{actual}"')

def ensure_status_code(expected: Union[int, Sequence[int]]) -> Callable[[Response], Response]:
    """
    Build a pass-through check that a response's status code is one of `expected`.

        res = ensure_status_code([200, 201])(await post(url, body))
    """
    if isinstance(expected, int):
        expected = [expected]
    accepted = list(expected)

    def check(res: Response) -> Response:
        if res.status_code not in accepted:
            raise StatusCodeError(accepted, res.status_code)
        return res

    return check
