from __future__ import annotations

import json
import traceback
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable

from ..config.paths import SchemaTuiPaths

LOG_LEVELS = ("error", "warn", "info", "debug")
LOG_TYPE_SESSION = "session"

_OFF_TOKENS = frozenset({"none", "null", "off", "false", "0", "no", "n"})
_ALL_TOKENS = frozenset({"all", "true", "1", "yes", "y", "on"})


@dataclass(frozen=True)
class LogSelection:
    """Which entry kinds a logger writes: session events and/or levels."""

    enabled_types: frozenset[str] = frozenset()
    enabled_levels: frozenset[str] = frozenset()

    @property
    def any(self) -> bool:
        return bool(self.enabled_types or self.enabled_levels)


def _levels_up_to(level: str) -> set[str]:
    return set(LOG_LEVELS[: LOG_LEVELS.index(level) + 1])


def _tokens(raw: Any) -> Iterable[str]:
    if raw is True:
        return ["all"]
    if isinstance(raw, str):
        return raw.replace(",", " ").split()
    if isinstance(raw, (list, tuple, set, frozenset)):
        return [item for item in raw if isinstance(item, str)]
    return []


def resolve_debug_config(raw: Any) -> LogSelection:
    """Parse ``--debug`` / ``SCHEMA_TUI_DEBUG``.

    ``all`` enables everything, ``session`` enables session events, and a
    level enables itself plus every more severe level. Unknown tokens are
    ignored.
    """
    types: set[str] = set()
    levels: set[str] = set()
    for token in _tokens(raw):
        name = token.strip().lower()
        if name in _OFF_TOKENS:
            continue
        if name in _ALL_TOKENS:
            types.add(LOG_TYPE_SESSION)
            levels.update(LOG_LEVELS)
        elif name == LOG_TYPE_SESSION:
            types.add(LOG_TYPE_SESSION)
        elif name in LOG_LEVELS:
            levels.update(_levels_up_to(name))
    return LogSelection(frozenset(types), frozenset(levels))


@dataclass
class LogEntry:
    source: str
    event: str
    kind: str
    content: Any = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def render(self) -> str:
        heading = f"## {self.timestamp.isoformat()} · {self.kind}/{self.source} · {self.event}"
        return f"{heading}\n{_fenced(self.content)}\n\n"


def _fenced(content: Any) -> str:
    if isinstance(content, (dict, list)):
        body, language = json.dumps(content, indent=2, ensure_ascii=False, default=str), "json"
    else:
        body, language = ("" if content is None else str(content)), "markdown"
    return f"```{language}\n{body.rstrip()}\n```"


class SessionLogger:
    """Markdown session log, newest entry first, written only when enabled."""

    def __init__(self, paths: SchemaTuiPaths, debug_config: Any) -> None:
        self.paths = paths
        self._started_at = datetime.now(timezone.utc)
        self._session_id = datetime.now().strftime("%Y%m%d_%H%M%S")
        self._path: Path | None = None
        self._selection = LogSelection()
        self.enabled = False
        self.configure(debug_config)

    @property
    def path(self) -> Path | None:
        return self._path

    def configure(self, debug_config: Any) -> None:
        self._selection = resolve_debug_config(debug_config)
        self.enabled = self._selection.any

    def close(self) -> None:
        self.enabled = False

    # Session events

    def log_session_start(self, source: str, *, schema: str, config: str | None) -> None:
        self._session(source, "session.start", {"schema": schema, "config": config})

    def log_commit(self, source: str, *, key: str, value: Any, persisted: bool) -> None:
        self._session(source, "value.commit", {"key": key, "value": value, "persisted": persisted})

    def log_command(
        self, source: str, *, command: str, returncode: int | None, cached: bool = False
    ) -> None:
        event = "command.cached" if cached else "command.run"
        self._session(source, event, {"command": command, "returncode": returncode})

    # Leveled events

    def log_level(self, source: str, level: str, event: str, content: Any | None = None) -> None:
        if self.enabled and level in self._selection.enabled_levels:
            self._write(LogEntry(source, event, level, content))

    def log_exception(self, source: str, exc: BaseException) -> None:
        frames = traceback.extract_tb(exc.__traceback__) if exc.__traceback__ else []
        location = f"{frames[-1].filename}:{frames[-1].lineno} in {frames[-1].name}" if frames else None
        self.log_level(
            source,
            "error",
            "exception",
            {
                "type": type(exc).__name__,
                "message": str(exc),
                "location": location,
                "traceback": "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
            },
        )

    def _session(self, source: str, event: str, content: Any) -> None:
        if self.enabled and LOG_TYPE_SESSION in self._selection.enabled_types:
            self._write(LogEntry(source, event, LOG_TYPE_SESSION, content))

    def _header(self) -> str:
        return (
            "# schema-tui Session Log\n\n"
            f"- Session: {self._session_id}\n"
            f"- Started: {self._started_at.isoformat()}\n\n"
            "---\n\n"
        )

    def _open(self) -> Path:
        if self._path is None:
            self.paths.logs_dir.mkdir(parents=True, exist_ok=True)
            self._path = self.paths.logs_dir / f"schema_tui_session_{self._session_id}.md"
        if not self._path.exists():
            self._path.write_text(self._header(), encoding="utf-8")
        return self._path

    def _write(self, entry: LogEntry) -> None:
        try:
            path = self._open()
            header = self._header()
            existing = path.read_text(encoding="utf-8")
            body = existing[len(header) :] if existing.startswith(header) else existing
            path.write_text(header + entry.render() + body, encoding="utf-8")
        except OSError:
            self.close()


_ACTIVE_LOGGER: SessionLogger | None = None


def set_active_logger(logger: SessionLogger | None) -> None:
    global _ACTIVE_LOGGER
    _ACTIVE_LOGGER = logger


def get_active_logger() -> SessionLogger | None:
    return _ACTIVE_LOGGER


def log_exception(source: str, exc: BaseException) -> None:
    if _ACTIVE_LOGGER is not None:
        _ACTIVE_LOGGER.log_exception(source, exc)


def _log(level: str, source: str, event: str, content: Any | None) -> None:
    if _ACTIVE_LOGGER is not None:
        _ACTIVE_LOGGER.log_level(source, level, event, content)


def log_error(source: str, event: str, content: Any | None = None) -> None:
    _log("error", source, event, content)


def log_warn(source: str, event: str, content: Any | None = None) -> None:
    _log("warn", source, event, content)


def log_info(source: str, event: str, content: Any | None = None) -> None:
    _log("info", source, event, content)


def log_debug(source: str, event: str, content: Any | None = None) -> None:
    _log("debug", source, event, content)


def log_commit(source: str, key: str, value: Any, *, persisted: bool) -> None:
    if _ACTIVE_LOGGER is not None:
        _ACTIVE_LOGGER.log_commit(source, key=key, value=value, persisted=persisted)


def log_command(source: str, command: str, returncode: int | None, *, cached: bool = False) -> None:
    if _ACTIVE_LOGGER is not None:
        _ACTIVE_LOGGER.log_command(source, command=command, returncode=returncode, cached=cached)
