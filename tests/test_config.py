import json
import os
import stat

import pytest

from loto_client.config import Config, ensure_config_exists, load_config
from loto_client.errors import ConfigError, CredentialsMissingError
from loto_client.session import DEFAULT_UA


def test_load_json_config_defaults_user_agent(tmp_path):
    p = tmp_path / "config.json"
    p.write_text(json.dumps({"email": "a@b.ro", "password": "pw", "user_agent": ""}), encoding="utf-8")
    cfg = load_config(p)
    assert cfg == Config(email="a@b.ro", password="pw", user_agent=DEFAULT_UA)
    assert "pw" not in repr(cfg)


def test_load_yaml_config(tmp_path):
    p = tmp_path / "config.yaml"
    p.write_text("email: a@b.ro\npassword: pw\nuser_agent: my-agent\n", encoding="utf-8")
    assert load_config(p).user_agent == "my-agent"


def test_missing_credentials(tmp_path):
    p = tmp_path / "config.json"
    p.write_text(json.dumps({"email": "a@b.ro", "password": ""}), encoding="utf-8")
    with pytest.raises(CredentialsMissingError):
        load_config(p)


def test_invalid_syntax(tmp_path):
    p = tmp_path / "config.json"
    p.write_text("{email: ", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(p)


def test_ensure_config_exists_writes_template_once(tmp_path):
    p = tmp_path / "loto-cli" / "config.json"
    assert ensure_config_exists(p) is True
    assert ensure_config_exists(p) is False

    data = json.loads(p.read_text(encoding="utf-8"))
    assert data == {"email": "", "password": "", "user_agent": DEFAULT_UA}
    assert stat.S_IMODE(os.stat(p).st_mode) == 0o600
    with pytest.raises(CredentialsMissingError):
        load_config(p)
