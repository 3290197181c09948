import pytest

from loto_client.session import SessionManager

from helpers import FakeHTTP


@pytest.fixture
def fake_http():
    return FakeHTTP()


@pytest.fixture
def session(fake_http):
    return SessionManager(user_agent="test-agent/1.0", http=fake_http)
