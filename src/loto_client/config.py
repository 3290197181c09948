from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Optional

import yaml

from .errors import ConfigError, CredentialsMissingError
from .session import DEFAULT_UA


CONFIG_DIR_NAME = ".config/loto-cli"
CONFIG_FILE_NAME = "config.json"


@dataclass(frozen=True)
class Config:
    email: str = ""
    password: str = ""
    user_agent: str = DEFAULT_UA

    def require_credentials(self) -> None:
        if not self.email or not self.password:
            raise CredentialsMissingError()

    def __repr__(self) -> str:
        return f"Config(email={self.email!r}, password=<redacted>, user_agent={self.user_agent!r})"


def get_config_dir() -> Path:
    return Path.home() / CONFIG_DIR_NAME


def get_config_path() -> Path:
    return get_config_dir() / CONFIG_FILE_NAME


def _read_config_data(path: Path) -> dict[str, Any]:
    data = path.read_text(encoding="utf-8")
    try:
        if path.suffix.lower() in {".yaml", ".yml"}:
            parsed = yaml.safe_load(data) or {}
        else:
            parsed = json.loads(data)
    except (ValueError, yaml.YAMLError) as exc:
        raise ConfigError(f"invalid syntax in config file: {exc}\nPlease check the syntax at: {path}") from exc
    if not isinstance(parsed, dict):
        raise ConfigError(f"config file must contain a mapping: {path}")
    return parsed


def load_config(path: Optional[Path] = None) -> Config:
    """Read the config file; empty email or password is a hard error."""
    path = path or get_config_path()
    d = _read_config_data(path)
    cfg = Config(
        email=str(d.get("email") or ""),
        password=str(d.get("password") or ""),
        user_agent=str(d.get("user_agent") or "") or DEFAULT_UA,
    )
    cfg.require_credentials()
    return cfg


def ensure_config_exists(path: Optional[Path] = None) -> bool:
    """Create a template config if none exists. Returns True when created."""
    path = path or get_config_path()
    if path.exists():
        return False
    path.parent.mkdir(parents=True, exist_ok=True)
    template = asdict(Config())
    if path.suffix.lower() in {".yaml", ".yml"}:
        payload = yaml.safe_dump(template, sort_keys=False)
    else:
        payload = json.dumps(template, ensure_ascii=False, indent=2)
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
    with os.fdopen(fd, "w", encoding="utf-8") as f:
        f.write(payload)
    return True
