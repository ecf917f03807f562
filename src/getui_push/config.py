"""
Application credentials and client settings.

Loaded from ``~/.getui/config.json`` with ``GETUI_*`` environment variables on top.
"""

import json
import os
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, field_validator

from getui_push.models.session import StalePolicy
from getui_push.transport.http import DEFAULT_BASE_URL, DEFAULT_TIMEOUT

DEFAULT_RENEWAL_INTERVAL_S = 20 * 60 * 60
CONFIG_FILE = Path.home() / ".getui" / "config.json"

ENV_VARS = {
    "app_id": "GETUI_APP_ID",
    "app_key": "GETUI_APP_KEY",
    "master_secret": "GETUI_MASTER_SECRET",
    "app_secret": "GETUI_APP_SECRET",
    "base_url": "GETUI_BASE_URL",
    "renewal_interval": "GETUI_RENEWAL_INTERVAL",
}


class ApplicationCredentials(BaseModel):
    app_id: str
    app_key: str
    master_secret: str
    app_secret: Optional[str] = None

    model_config = {"frozen": True}

    def __repr__(self) -> str:
        return f"ApplicationCredentials(app_id={self.app_id!r})"


class ClientConfig(BaseModel):
    credentials: ApplicationCredentials
    renewal_interval: Optional[float] = None  # seconds; None or 0 means 20 hours
    stale_policy: StalePolicy = StalePolicy.KEEP
    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT

    @field_validator("renewal_interval")
    @classmethod
    def _non_negative(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v < 0:
            raise ValueError("renewal_interval must not be negative")
        return v


def read_config_file(path: Path) -> dict[str, Any]:
    try:
        return json.loads(path.read_text())
    except (FileNotFoundError, json.JSONDecodeError):
        return {}


def load_config(path: Optional[Path] = None, env: Optional[dict[str, str]] = None) -> ClientConfig:
    """Build a ClientConfig from the config file and the environment (environment wins)."""
    raw = read_config_file(path or CONFIG_FILE)
    env = os.environ if env is None else env
    for key, var in ENV_VARS.items():
        if env.get(var):
            raw[key] = env[var]
    creds = {k: raw.get(k) for k in ("app_id", "app_key", "master_secret", "app_secret")}
    settings = {k: raw[k] for k in ("renewal_interval", "stale_policy", "base_url", "timeout") if raw.get(k) is not None}
    return ClientConfig(credentials=ApplicationCredentials(**creds), **settings)


def save_config(cfg: dict[str, Any], path: Optional[Path] = None) -> None:
    path = path or CONFIG_FILE
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(cfg, indent=2))
