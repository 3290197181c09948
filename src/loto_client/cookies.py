from __future__ import annotations

import json
import logging
import math
import os
import time
from dataclasses import asdict, dataclass
from datetime import timezone
from http.cookiejar import Cookie
from pathlib import Path
from typing import Any, Optional

from dateutil.parser import isoparse
from requests.cookies import create_cookie

from .session import BASE_BILETE_URL, SessionManager


logger = logging.getLogger(__name__)


COOKIES_FILE_NAME = "cookies.json"


def parse_expires(value: Any) -> Optional[int]:
    """Unix seconds from a saved `expires` field.

    Accepts a number or an RFC 3339 string (older cookie files). None means a
    session cookie. Raises ValueError for anything else, NaN and infinities
    included.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(f"invalid expires: {value!r}")
    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            raise ValueError(f"invalid expires: {value!r}")
        return int(value)
    if isinstance(value, str):
        dt = isoparse(value)
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return int(dt.timestamp())
    raise ValueError(f"invalid expires: {value!r}")


@dataclass(frozen=True)
class PersistedCookie:
    name: str
    value: str
    domain: str
    path: str = "/"
    expires: Optional[int] = None  # unix timestamp; None for session cookies
    secure: bool = False
    http_only: bool = False

    def is_expired(self, now: float) -> bool:
        return self.expires is not None and self.expires <= now

    @staticmethod
    def from_cookie(c: Cookie) -> "PersistedCookie":
        http_only = c.has_nonstandard_attr("HttpOnly") or c.has_nonstandard_attr("httponly")
        return PersistedCookie(
            name=c.name,
            value=c.value or "",
            domain=c.domain,
            path=c.path or "/",
            expires=int(c.expires) if c.expires is not None else None,
            secure=bool(c.secure),
            http_only=http_only,
        )

    @staticmethod
    def from_dict(d: Any) -> Optional["PersistedCookie"]:
        if not isinstance(d, dict):
            return None
        name = d.get("name")
        value = d.get("value")
        if not isinstance(name, str) or not name or not isinstance(value, str):
            return None
        try:
            expires = parse_expires(d.get("expires"))
        except (TypeError, ValueError, OverflowError):
            return None
        return PersistedCookie(
            name=name,
            value=value,
            domain=str(d.get("domain") or ""),
            path=str(d.get("path") or "/"),
            expires=expires,
            secure=bool(d.get("secure", False)),
            http_only=bool(d.get("http_only", False)),
        )

    def to_cookie(self) -> Cookie:
        return create_cookie(
            self.name,
            self.value,
            domain=self.domain,
            path=self.path,
            expires=self.expires,
            secure=self.secure,
            rest={"HttpOnly": None} if self.http_only else {},
        )


@dataclass
class CookieStore:
    """Persists the ticket origin's cookies between runs."""

    path: Path
    session: SessionManager
    origin_url: str = BASE_BILETE_URL

    def load(self) -> int:
        """Apply saved, non-expired cookies to the session.

        A missing or unreadable file means "no cookies"; the caller will fall
        back to a fresh login.
        """
        if not self.path.exists():
            return 0
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable cookie file %s (%s)", self.path, exc)
            return 0
        if not isinstance(data, list):
            logger.warning("Ignoring cookie file %s: expected a JSON array", self.path)
            return 0

        now = time.time()
        applied = 0
        for entry in data:
            try:
                pc = PersistedCookie.from_dict(entry)
                if pc is None or pc.is_expired(now):
                    continue
                cookie = pc.to_cookie()
            except (TypeError, ValueError, OverflowError) as exc:
                logger.warning("Skipping unreadable cookie entry in %s (%s)", self.path, exc)
                continue
            self.session.set_cookie(cookie)
            applied += 1
        logger.debug("Restored %d cookie(s) from %s", applied, self.path)
        return applied

    def save(self) -> int:
        now = time.time()
        saved = [
            pc
            for pc in (PersistedCookie.from_cookie(c) for c in self.session.cookies_for(self.origin_url))
            if not pc.is_expired(now)
        ]
        payload = json.dumps([asdict(pc) for pc in saved], ensure_ascii=False, indent=2)

        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(payload)
        # O_CREAT mode is ignored for a pre-existing file.
        os.chmod(self.path, 0o600)
        logger.debug("Saved %d cookie(s) to %s", len(saved), self.path)
        return len(saved)

    def clear(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
