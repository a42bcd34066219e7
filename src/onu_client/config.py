"""
Client configuration.

Read from config.json ({"onu_url": "..."}); ONU_CONFIG points to another
file and ONU_URL overrides the endpoint.
"""

import os
from pathlib import Path
from typing import Mapping, Optional

import orjson
from pydantic import BaseModel, ValidationError, field_validator

from .errors import ConfigError

DEFAULT_CONFIG_PATH = "config.json"


class ClientConfig(BaseModel):
    onu_url: str

    @field_validator("onu_url")
    @classmethod
    def _http_or_ws(cls, value: str) -> str:
        value = value.strip()
        if not value.startswith(("http://", "https://", "ws://", "wss://")):
            raise ValueError("onu_url must be an http(s) or ws(s) URL")
        return value

    def invite_url(self, lobby_id: str) -> str:
        return f"{self.onu_url.rstrip('/')}/#{lobby_id}"


def load_config(path: Optional[str] = None, env: Optional[Mapping[str, str]] = None) -> ClientConfig:
    """
    Load the client configuration.

    Raises:
        ConfigError: If no endpoint is configured or the file is invalid
    """
    env = os.environ if env is None else env
    config_path = Path(path or env.get("ONU_CONFIG", DEFAULT_CONFIG_PATH))

    data = {}
    if config_path.exists():
        try:
            data = orjson.loads(config_path.read_bytes())
        except orjson.JSONDecodeError as e:
            raise ConfigError(f"{config_path} is not valid JSON: {e}")
        if not isinstance(data, dict):
            raise ConfigError(f"{config_path} must contain a JSON object")

    if env.get("ONU_URL"):
        data = {**data, "onu_url": env["ONU_URL"]}
    if "onu_url" not in data:
        raise ConfigError(f"No onu_url configured (looked in {config_path} and ONU_URL)")

    try:
        return ClientConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}")
