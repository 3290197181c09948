from __future__ import annotations

import logging
from enum import Enum

import requests
from bs4 import BeautifulSoup

from .config import Config
from .cookies import CookieStore
from .errors import CSRFTokenMissingError, InvalidCredentialsError
from .session import BASE_BILETE_URL, SessionManager


logger = logging.getLogger(__name__)


LOGIN_URL = BASE_BILETE_URL + "/login"
AUTH_CHECK_URL = BASE_BILETE_URL + "/history/ticket?page_no=1"
AUTHENTICATED_TITLE = "Biletele Mele"


class AuthState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"


def is_authenticated_response(status_code: int, is_redirect: bool, html: str) -> bool:
    """Decide whether a probe response belongs to a logged-in session.

    Expired sessions are redirected to the login page, so any redirect or
    non-200 status is a negative answer.
    """
    if is_redirect or status_code != 200:
        return False
    soup = BeautifulSoup(html or "", "lxml")
    title = soup.find("title")
    if title is None:
        return False
    return AUTHENTICATED_TITLE in title.get_text()


def extract_csrf_token(html: str) -> str:
    soup = BeautifulSoup(html or "", "lxml")
    meta = soup.select_one('meta[name="csrf-token"]')
    token = (meta.get("content") or "").strip() if meta is not None else ""
    if not token:
        raise CSRFTokenMissingError()
    return token


class AuthController:
    def __init__(self, session: SessionManager, store: CookieStore, config: Config) -> None:
        self.session = session
        self.store = store
        self.config = config
        self.state = AuthState.UNAUTHENTICATED

    def probe(self) -> bool:
        """Check the session with one non-redirecting request to an authenticated page."""
        try:
            page = self.session.get(AUTH_CHECK_URL, allow_redirects=False)
        except requests.RequestException as exc:
            logger.info("Session probe failed (%s); treating session as unauthenticated", exc)
            return False
        ok = is_authenticated_response(page.status_code, page.is_redirect, page.text)
        logger.debug("Session probe status=%s authenticated=%s", page.status_code, ok)
        if not ok and self.state == AuthState.AUTHENTICATED:
            self.state = AuthState.UNAUTHENTICATED
        return ok

    def login(self) -> None:
        """Restore the saved session if it is still valid, otherwise log in.

        Raises CredentialsMissingError before any request when the config lacks
        credentials.
        """
        self.config.require_credentials()

        self.store.load()
        if self.probe():
            logger.info("Restored saved session")
            self.state = AuthState.AUTHENTICATED
            return

        self.state = AuthState.AUTHENTICATING
        try:
            token = self._fetch_csrf_token()
            self._post_login(token)
            if not self.probe():
                raise InvalidCredentialsError()
        except Exception:
            self.state = AuthState.UNAUTHENTICATED
            raise

        self.state = AuthState.AUTHENTICATED
        self.store.save()
        logger.info("Logged in as %s", self.config.email)

    def logout(self) -> None:
        self.store.clear()
        self.session.clear_cookies()
        self.state = AuthState.UNAUTHENTICATED

    def _fetch_csrf_token(self) -> str:
        page = self.session.get(LOGIN_URL)
        if not page.ok:
            raise requests.HTTPError(f"unexpected status {page.status_code} from login page")
        return extract_csrf_token(page.text)

    def _post_login(self, token: str) -> None:
        form = {
            "_token": token,
            "email": self.config.email,
            "password": self.config.password,
        }
        # A 302 is the origin's success signal; the jar already holds the new session cookie.
        page = self.session.post(LOGIN_URL, data=form, headers={"Referer": LOGIN_URL}, allow_redirects=False)
        if page.status_code not in (200, 302):
            raise requests.HTTPError(f"unexpected status {page.status_code} after login POST")
