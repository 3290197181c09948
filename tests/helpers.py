from dataclasses import dataclass, field
from typing import Any, Optional

import requests


@dataclass
class Canned:
    status: int = 200
    text: str = ""
    headers: dict = field(default_factory=dict)
    set_cookies: list = field(default_factory=list)  # (name, value, domain)
    exc: Optional[Exception] = None


@dataclass
class Call:
    method: str
    url: str
    data: Any
    headers: dict
    allow_redirects: bool


class RecordingResponse(requests.Response):
    """requests.Response that reports close() to its owner."""

    def __init__(self, on_close) -> None:
        super().__init__()
        self._on_close = on_close

    def close(self) -> None:
        self._on_close(self.url)
        super().close()


class FakeHTTP(requests.Session):
    """requests.Session serving canned responses keyed by (method, url).

    A route holding several responses serves them in order and repeats the last.
    """

    def __init__(self) -> None:
        super().__init__()
        self.routes: dict[tuple[str, str], list[Canned]] = {}
        self.calls: list[Call] = []
        self.closed: list[str] = []

    def add(self, method: str, url: str, *responses: Canned) -> None:
        self.routes[(method, url)] = list(responses) or [Canned()]

    def urls(self, method: str = "GET") -> list[str]:
        return [c.url for c in self.calls if c.method == method]

    def request(self, method, url, data=None, headers=None, allow_redirects=True, **kwargs):
        merged = dict(self.headers)
        merged.update(headers or {})
        self.calls.append(Call(method, url, data, merged, allow_redirects))

        queue = self.routes.get((method, url))
        if not queue:
            raise requests.ConnectionError(f"no route for {method} {url}")
        canned = queue.pop(0) if len(queue) > 1 else queue[0]
        if canned.exc is not None:
            raise canned.exc

        for name, value, domain in canned.set_cookies:
            self.cookies.set(name, value, domain=domain, path="/")

        resp = RecordingResponse(self.closed.append)
        resp.status_code = canned.status
        resp._content = canned.text.encode("utf-8")
        resp._content_consumed = True
        resp.encoding = "utf-8"
        resp.url = url
        resp.headers.update(canned.headers)
        return resp
