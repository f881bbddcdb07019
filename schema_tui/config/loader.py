from __future__ import annotations

import datetime
import tomllib
from pathlib import Path
from typing import Any

from .env import expand_env_vars
from .store import ConfigStore


class ConfigLoader:
    """Reads TOML configuration documents into a ConfigStore."""

    @classmethod
    def from_toml_file(cls, path: Path | str, *, expand: bool = True) -> ConfigStore:
        content = Path(path).read_text(encoding="utf-8")
        return cls.from_toml_string(content, expand=expand)

    @classmethod
    def from_toml_string(cls, content: str, *, expand: bool = True) -> ConfigStore:
        data = tomllib.loads(content)
        values = {key: cls._normalize(value) for key, value in data.items()}
        if expand:
            values = {key: cls._expand(value) for key, value in values.items()}
        return ConfigStore(values)

    @classmethod
    def _normalize(cls, value: Any) -> Any:
        if isinstance(value, (datetime.date, datetime.time)):
            return value.isoformat()
        if isinstance(value, dict):
            return {key: cls._normalize(child) for key, child in value.items()}
        if isinstance(value, list):
            return [cls._normalize(item) for item in value]
        return value

    @classmethod
    def _expand(cls, value: Any) -> Any:
        if isinstance(value, str):
            return expand_env_vars(value)
        if isinstance(value, dict):
            return {key: cls._expand(child) for key, child in value.items()}
        if isinstance(value, list):
            return [cls._expand(item) for item in value]
        return value
