from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from gestured.core.errors import ConfigMissing

SYSTEM_CONFIG_PATH = Path("/etc/gestured/config.toml")
SOCKET_NAME = "gestured.sock"


def app_home() -> Path:
    return Path.home() / ".gestured"


def user_config_path() -> Path:
    return app_home() / "config.toml"


def log_path() -> Path:
    home = app_home()
    home.mkdir(parents=True, exist_ok=True)
    return home / "gestured.log"


def socket_path() -> Path:
    """Well-known address of the reload endpoint for the current user."""
    runtime_dir = os.environ.get("XDG_RUNTIME_DIR")
    if runtime_dir:
        return Path(runtime_dir) / SOCKET_NAME
    return Path("/tmp") / f"gestured-{os.getuid()}.sock"


def config_file_path(override: Optional[str | Path] = None) -> Path:
    """
    Explicit override first, then ~/.gestured/config.toml, then
    /etc/gestured/config.toml.
    """
    if override is not None:
        p = Path(override).expanduser()
        if not p.exists():
            raise ConfigMissing(f"config file not found: {p}")
        return p

    for p in (user_config_path(), SYSTEM_CONFIG_PATH):
        if p.exists():
            return p
    raise ConfigMissing("nothing in ~/.gestured/config.toml or /etc/gestured/config.toml")
