"""Configuration loading, storage and persistence."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .env import expand_env_vars
    from .loader import ConfigLoader
    from .paths import SchemaTuiPaths
    from .saver import ConfigSaver
    from .store import ConfigStore

__all__ = ["ConfigLoader", "ConfigSaver", "ConfigStore", "SchemaTuiPaths", "expand_env_vars"]


def __getattr__(name: str) -> Any:
    if name == "ConfigLoader":
        from .loader import ConfigLoader

        return ConfigLoader
    if name == "ConfigSaver":
        from .saver import ConfigSaver

        return ConfigSaver
    if name == "ConfigStore":
        from .store import ConfigStore

        return ConfigStore
    if name == "SchemaTuiPaths":
        from .paths import SchemaTuiPaths

        return SchemaTuiPaths
    if name == "expand_env_vars":
        from .env import expand_env_vars

        return expand_env_vars
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
