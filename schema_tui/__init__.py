"""schema-tui package initialization."""

from importlib.metadata import version

__all__ = [
    "cli",
    "config",
    "errors",
    "options",
    "process",
    "schema",
    "tui",
]

# Single source of truth comes from package metadata defined in pyproject.toml
__version__ = version("schema-tui")
