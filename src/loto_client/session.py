from __future__ import annotations

import logging
import urllib.parse
from dataclasses import dataclass
from http.cookiejar import Cookie
from typing import Any, Mapping, Optional

import requests

from .errors import BlockedRegionError


logger = logging.getLogger(__name__)


BASE_LOTO_URL = "https://www.loto.ro"
BASE_BILETE_URL = "https://bilete.loto.ro"

DEFAULT_UA = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/144.0.0.0 Safari/537.36"
)

BROWSER_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,image/apng,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9,ro-RO;q=0.8,ro;q=0.7",
    "Cache-Control": "no-cache",
    "DNT": "1",
    "Pragma": "no-cache",
}


@dataclass(frozen=True)
class FetchedPage:
    """Snapshot of a response; the body is read before the connection is released."""

    status_code: int
    url: str
    text: str
    location: Optional[str] = None

    @property
    def is_redirect(self) -> bool:
        return 300 <= self.status_code < 400

    @property
    def ok(self) -> bool:
        return self.status_code == 200


def domain_matches(host: str, cookie_domain: str) -> bool:
    d = (cookie_domain or "").lstrip(".").lower()
    h = (host or "").lower()
    if not d or not h:
        return False
    return h == d or h.endswith("." + d)


class SessionManager:
    """Owns the HTTP transport and its cookie jar.

    Every request carries the same browser-like headers. There are no retries
    and no custom timeout: one attempt per call.
    """

    def __init__(self, user_agent: str = DEFAULT_UA, http: Optional[requests.Session] = None) -> None:
        self.user_agent = user_agent or DEFAULT_UA
        self.http = http if http is not None else requests.Session()
        self.http.headers.update(BROWSER_HEADERS)
        self.http.headers["User-Agent"] = self.user_agent

    @property
    def cookies(self) -> requests.cookies.RequestsCookieJar:
        return self.http.cookies

    def request(
        self,
        method: str,
        url: str,
        *,
        data: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
        allow_redirects: bool = True,
    ) -> FetchedPage:
        logger.debug("%s %s (allow_redirects=%s)", method, url, allow_redirects)
        with self.http.request(
            method,
            url,
            data=data,
            headers=dict(headers or {}),
            allow_redirects=allow_redirects,
        ) as resp:
            if resp.status_code == 410:
                logger.warning("Origin rejected client region: %s", url)
                raise BlockedRegionError(url)
            return FetchedPage(
                status_code=resp.status_code,
                url=resp.url or url,
                text=resp.text,
                location=resp.headers.get("Location"),
            )

    def get(self, url: str, **kwargs: Any) -> FetchedPage:
        return self.request("GET", url, **kwargs)

    def post(self, url: str, data: Mapping[str, Any], **kwargs: Any) -> FetchedPage:
        return self.request("POST", url, data=data, **kwargs)

    def cookies_for(self, url: str) -> list[Cookie]:
        host = urllib.parse.urlparse(url).hostname or ""
        return [c for c in self.http.cookies if domain_matches(host, c.domain)]

    def set_cookie(self, cookie: Cookie) -> None:
        self.http.cookies.set_cookie(cookie)

    def clear_cookies(self) -> None:
        self.http.cookies.clear()
