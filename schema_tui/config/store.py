from __future__ import annotations

from typing import Any, Dict, Iterator, Optional, Tuple


class ConfigStore:
    """Nested key/value view of a configuration document."""

    def __init__(self, values: Optional[Dict[str, Any]] = None) -> None:
        self._values: Dict[str, Any] = dict(values or {})

    @classmethod
    def from_flat_map(cls, values: Dict[str, Any]) -> "ConfigStore":
        store = cls()
        for key, value in values.items():
            store.set_nested(key, value)
        return store

    def get(self, key: str) -> Any:
        return self._values.get(key)

    def set(self, key: str, value: Any) -> None:
        self._values[key] = value

    def get_nested(self, path: str) -> Any:
        current: Any = self._values
        for part in path.split("."):
            if not isinstance(current, dict) or part not in current:
                return None
            current = current[part]
        return current

    def set_nested(self, path: str, value: Any) -> None:
        parts = path.split(".")
        current = self._values
        for part in parts[:-1]:
            child = current.get(part)
            if not isinstance(child, dict):
                child = {}
                current[part] = child
            current = child
        current[parts[-1]] = value

    def as_map(self) -> Dict[str, Any]:
        return self._values

    def as_flat_map(self) -> Dict[str, Any]:
        """{"general": {"theme": "x"}} -> {"general.theme": "x"}"""
        return dict(_flatten("", self._values))


def _flatten(prefix: str, value: Any) -> Iterator[Tuple[str, Any]]:
    if isinstance(value, dict):
        for key, child in value.items():
            child_key = f"{prefix}.{key}" if prefix else str(key)
            yield from _flatten(child_key, child)
        return
    yield prefix, value
