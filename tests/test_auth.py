import json
import time

import pytest
import requests

from loto_client.auth import (
    AUTH_CHECK_URL,
    LOGIN_URL,
    AuthController,
    AuthState,
    extract_csrf_token,
    is_authenticated_response,
)
from loto_client.config import Config
from loto_client.cookies import CookieStore
from loto_client.errors import (
    BlockedRegionError,
    CredentialsMissingError,
    CSRFTokenMissingError,
    InvalidCredentialsError,
)

from helpers import Canned


LOGIN_PAGE = """
<html><head>
  <meta name="csrf-token" content="tok-123">
  <title>Autentificare</title>
</head><body><form></form></body></html>
"""

HISTORY_PAGE = "<html><head><title>Biletele Mele | Loteria Romana</title></head><body></body></html>"

REDIRECT_TO_LOGIN = Canned(status=302, headers={"Location": LOGIN_URL})


@pytest.fixture
def config():
    return Config(email="ion@example.ro", password="parola", user_agent="test-agent/1.0")


@pytest.fixture
def store(tmp_path, session):
    return CookieStore(path=tmp_path / "cookies.json", session=session)


def test_probe_decision():
    assert is_authenticated_response(302, True, HISTORY_PAGE) is False
    assert is_authenticated_response(200, False, HISTORY_PAGE) is True
    assert is_authenticated_response(200, False, "<title>Autentificare</title>") is False
    assert is_authenticated_response(200, False, "<p>no title</p>") is False
    assert is_authenticated_response(500, False, HISTORY_PAGE) is False


def test_extract_csrf_token():
    assert extract_csrf_token(LOGIN_PAGE) == "tok-123"
    with pytest.raises(CSRFTokenMissingError):
        extract_csrf_token("<html><head></head></html>")
    with pytest.raises(CSRFTokenMissingError):
        extract_csrf_token('<meta name="csrf-token" content="">')


def test_probe_does_not_follow_redirects(fake_http, session, store, config):
    fake_http.add("GET", AUTH_CHECK_URL, REDIRECT_TO_LOGIN)
    auth = AuthController(session, store, config)

    assert auth.probe() is False
    assert fake_http.calls[0].allow_redirects is False


def test_probe_transport_error_is_not_authenticated(fake_http, session, store, config):
    fake_http.add("GET", AUTH_CHECK_URL, Canned(exc=requests.ConnectionError("reset")))
    assert AuthController(session, store, config).probe() is False


def test_restored_session_skips_login(tmp_path, fake_http, session, store, config):
    store.path.write_text(
        json.dumps([{"name": "laravel_session", "value": "v", "domain": "bilete.loto.ro", "path": "/",
                     "expires": int(time.time()) + 3600, "secure": True, "http_only": True}]),
        encoding="utf-8",
    )
    fake_http.add("GET", AUTH_CHECK_URL, Canned(text=HISTORY_PAGE))

    auth = AuthController(session, store, config)
    auth.login()

    assert auth.state == AuthState.AUTHENTICATED
    assert fake_http.urls("GET") == [AUTH_CHECK_URL]
    assert fake_http.urls("POST") == []


def test_full_login_posts_form_and_persists_cookies(fake_http, session, store, config):
    fake_http.add("GET", AUTH_CHECK_URL, REDIRECT_TO_LOGIN, Canned(text=HISTORY_PAGE))
    fake_http.add("GET", LOGIN_URL, Canned(text=LOGIN_PAGE))
    fake_http.add(
        "POST",
        LOGIN_URL,
        Canned(status=302, headers={"Location": "https://bilete.loto.ro/"},
               set_cookies=[("laravel_session", "new-session", "bilete.loto.ro")]),
    )

    auth = AuthController(session, store, config)
    auth.login()

    assert auth.state == AuthState.AUTHENTICATED
    post = [c for c in fake_http.calls if c.method == "POST"][0]
    assert post.data == {"_token": "tok-123", "email": "ion@example.ro", "password": "parola"}
    assert post.headers["Referer"] == LOGIN_URL

    saved = json.loads(store.path.read_text(encoding="utf-8"))
    assert [d["name"] for d in saved] == ["laravel_session"]
    assert "parola" not in store.path.read_text(encoding="utf-8")


def test_login_still_rejected_is_invalid_credentials(fake_http, session, store, config):
    fake_http.add("GET", AUTH_CHECK_URL, REDIRECT_TO_LOGIN)
    fake_http.add("GET", LOGIN_URL, Canned(text=LOGIN_PAGE))
    fake_http.add("POST", LOGIN_URL, Canned(status=200, text=LOGIN_PAGE))

    auth = AuthController(session, store, config)
    with pytest.raises(InvalidCredentialsError):
        auth.login()
    assert auth.state == AuthState.UNAUTHENTICATED
    assert not store.path.exists()


def test_login_post_unexpected_status_is_transport_failure(fake_http, session, store, config):
    fake_http.add("GET", AUTH_CHECK_URL, REDIRECT_TO_LOGIN)
    fake_http.add("GET", LOGIN_URL, Canned(text=LOGIN_PAGE))
    fake_http.add("POST", LOGIN_URL, Canned(status=500))

    with pytest.raises(requests.HTTPError):
        AuthController(session, store, config).login()


def test_login_without_csrf_token(fake_http, session, store, config):
    fake_http.add("GET", AUTH_CHECK_URL, REDIRECT_TO_LOGIN)
    fake_http.add("GET", LOGIN_URL, Canned(text="<html><head><title>Login</title></head></html>"))

    with pytest.raises(CSRFTokenMissingError):
        AuthController(session, store, config).login()
    assert fake_http.urls("POST") == []


def test_missing_credentials_fail_before_any_request(fake_http, session, store):
    auth = AuthController(session, store, Config(email="", password="x"))
    with pytest.raises(CredentialsMissingError):
        auth.login()
    assert fake_http.calls == []


def test_logout_clears_file_and_jar(fake_http, session, store, config):
    fake_http.cookies.set("laravel_session", "v", domain="bilete.loto.ro", path="/")
    store.save()

    auth = AuthController(session, store, config)
    auth.logout()

    assert not store.path.exists()
    assert len(session.cookies) == 0
    assert auth.state == AuthState.UNAUTHENTICATED


def test_login_page_error_status_stops_before_post(fake_http, session, store, config):
    fake_http.add("GET", AUTH_CHECK_URL, REDIRECT_TO_LOGIN)
    fake_http.add("GET", LOGIN_URL, Canned(status=500))

    auth = AuthController(session, store, config)
    with pytest.raises(requests.HTTPError):
        auth.login()
    assert fake_http.urls("POST") == []
    assert auth.state == AuthState.UNAUTHENTICATED


def test_blocked_region_is_not_treated_as_logged_out(fake_http, session, store, config):
    fake_http.add("GET", AUTH_CHECK_URL, Canned(status=410))
    auth = AuthController(session, store, config)

    with pytest.raises(BlockedRegionError):
        auth.probe()
    with pytest.raises(BlockedRegionError):
        auth.login()
    assert LOGIN_URL not in fake_http.urls("GET")
    assert auth.state == AuthState.UNAUTHENTICATED
