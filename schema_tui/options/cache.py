from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

Clock = Callable[[], float]


@dataclass(frozen=True)
class CachedOptions:
    options: tuple[str, ...]
    timestamp: float
    ttl: float


class OptionCache:
    """TTL cache for resolved option lists. Expired entries read as absent."""

    def __init__(self, clock: Optional[Clock] = None) -> None:
        self._clock: Clock = clock or time.monotonic
        self._entries: Dict[str, CachedOptions] = {}

    def get(self, key: str) -> Optional[list[str]]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.timestamp >= entry.ttl:
            return None
        return list(entry.options)

    def insert(self, key: str, options: list[str], ttl: float) -> None:
        self._entries[key] = CachedOptions(
            options=tuple(options), timestamp=self._clock(), ttl=ttl
        )

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
