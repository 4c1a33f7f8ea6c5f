"""Configuration file for KeyBox: where wallets live and how passwords are generated."""

from __future__ import annotations

import json
import os
import sys
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional

from .exceptions import ConfigError

CONFIG_ENV = "KEYBOX_CONFIG"
WALLET_SUFFIX = ".gpm"


def default_wallet_dir() -> Path:
    home = Path.home()
    if sys.platform == "darwin":
        return home / "Library" / "Preferences" / "keybox"
    if sys.platform.startswith("win"):
        return home / "AppData" / "Local" / "keybox"
    return home / ".config" / "keybox"


def default_config_path() -> Path:
    env = os.getenv(CONFIG_ENV)
    if env:
        return Path(env).expanduser()
    return default_wallet_dir() / "config.json"


@dataclass
class Config:
    """Settings read from ``config.json``; every key is optional."""

    wallet_dir: str = field(default_factory=lambda: str(default_wallet_dir()))
    wallet_default: str = "default"
    password_length: int = 16
    password_letter: bool = True
    password_digit: bool = True
    password_special: bool = False
    clipboard_timeout: int = 90
    select_timeout: int = 30

    def wallet_path(self, name: Optional[str] = None) -> Path:
        """Vault file for wallet ``name`` (the default wallet if omitted)."""
        return Path(self.wallet_dir).expanduser() / f"{name or self.wallet_default}{WALLET_SUFFIX}"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        if not isinstance(data, dict):
            raise ConfigError(f"configuration must be a JSON object, got {type(data).__name__}")

        config = cls()
        for f in fields(cls):
            if f.name not in data:
                continue
            value = data[f.name]
            expected = type(getattr(config, f.name))
            # bool is an int subclass, reject it for numeric settings
            if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
                raise ConfigError(f"configuration key {f.name!r} must be {expected.__name__}, got {value!r}")
            setattr(config, f.name, value)
        return config

    @classmethod
    def load(cls, path: Optional[str | Path] = None) -> "Config":
        """Read the configuration, falling back to defaults if the file is absent."""
        path = Path(path).expanduser() if path else default_config_path()
        if not path.exists():
            return cls()
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as err:
            raise ConfigError(f"cannot read configuration {path}: {err}") from err
        return cls.from_dict(data)

    def save(self, path: Optional[str | Path] = None) -> None:
        path = Path(path).expanduser() if path else default_config_path()
        try:
            path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
            fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(self.to_dict(), f, indent=2)
        except OSError as err:
            raise ConfigError(f"cannot write configuration {path}: {err}") from err
