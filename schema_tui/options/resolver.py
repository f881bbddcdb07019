from __future__ import annotations

import glob
import json
import os
import re
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Protocol, Union

from ..core.session_log import log_command, log_debug
from ..errors import GlobError, ScriptError, UnknownProviderError
from ..process import CommandResult, ProcessRunner
from ..schema import (
    FileListSource,
    FunctionSource,
    OptionSource,
    ProviderSource,
    ScriptSource,
    StaticSource,
)
from .cache import Clock, OptionCache

_PLACEHOLDER_RE = re.compile(r"\$\{([^}]+)\}")


class OptionProvider(Protocol):
    def get_options(self) -> list[str]: ...


ProviderLike = Union[OptionProvider, Callable[[], Iterable[str]]]
Values = Mapping[str, Any]


class OptionResolver:
    """Resolves an option source into the list of choices for an enum field.

    ``resolve`` is the suspending path used from the running event loop,
    ``resolve_sync`` the blocking one. Both share the provider registry and
    the script cache.
    """

    def __init__(
        self,
        *,
        runner: Optional[ProcessRunner] = None,
        cache: Optional[OptionCache] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self.runner = runner or ProcessRunner()
        self._cache = cache or OptionCache(clock)
        self._providers: Dict[str, ProviderLike] = {}

    def register_provider(self, name: str, provider: ProviderLike) -> None:
        self._providers[name] = provider

    def has_provider(self, name: str) -> bool:
        return name in self._providers

    def clear_cache(self) -> None:
        self._cache.clear()

    async def resolve(self, source: OptionSource, values: Values) -> list[str]:
        if isinstance(source, ScriptSource):
            return await self._resolve_script_async(source, values)
        return self._resolve_local(source)

    def resolve_sync(self, source: OptionSource, values: Values) -> list[str]:
        if isinstance(source, ScriptSource):
            return self._resolve_script(source, values)
        return self._resolve_local(source)

    def resolve_from_provider(self, name: str) -> list[str]:
        provider = self._providers.get(name)
        if provider is None:
            raise UnknownProviderError(name)
        getter = getattr(provider, "get_options", None)
        options = getter() if callable(getter) else provider()  # type: ignore[operator]
        return [str(option) for option in options]

    def resolve_from_file_list(
        self, directory: str, pattern: str, extract: Optional[str] = None
    ) -> list[str]:
        validate_glob_pattern(pattern)
        regex = None
        if extract:
            try:
                regex = re.compile(extract)
            except re.error as exc:
                raise GlobError(f"Invalid extract pattern {extract!r}: {exc}") from exc
        base = expand_home(directory).rstrip("/") or "/"
        full_pattern = f"{glob.escape(base)}/{pattern}"
        results: list[str] = []
        for path in sorted(glob.glob(full_pattern, recursive=True, include_hidden=True)):
            name = os.path.basename(path.rstrip("/"))
            if regex is None:
                results.append(name)
                continue
            match = regex.search(path)
            if match is None:
                continue
            captured = match.group(1) if regex.groups else None
            results.append(captured if captured is not None else name)
        return results

    @staticmethod
    def substitute_variables(command: str, values: Values) -> str:
        return _PLACEHOLDER_RE.sub(
            lambda match: format_substitution(values.get(match.group(1))), command
        )

    def _resolve_local(self, source: OptionSource) -> list[str]:
        if isinstance(source, StaticSource):
            return list(source.values)
        if isinstance(source, FunctionSource):
            return self.resolve_from_provider(source.name)
        if isinstance(source, ProviderSource):
            return self.resolve_from_provider(source.provider)
        if isinstance(source, FileListSource):
            return self.resolve_from_file_list(source.directory, source.pattern, source.extract)
        raise TypeError(f"Unsupported option source: {source!r}")

    def _resolve_script(self, source: ScriptSource, values: Values) -> list[str]:
        command, cache_key = self._script_command(source, values)
        cached = self._cached(source, command, cache_key)
        if cached is not None:
            return cached
        try:
            result = self.runner.run_shell(command)
        except OSError as exc:
            raise ScriptError(f"Script could not be started: {exc}") from exc
        return self._finish_script(source, command, cache_key, result)

    async def _resolve_script_async(self, source: ScriptSource, values: Values) -> list[str]:
        command, cache_key = self._script_command(source, values)
        cached = self._cached(source, command, cache_key)
        if cached is not None:
            return cached
        try:
            result = await self.runner.run_shell_async(command)
        except OSError as exc:
            raise ScriptError(f"Script could not be started: {exc}") from exc
        return self._finish_script(source, command, cache_key, result)

    def _script_command(self, source: ScriptSource, values: Values) -> tuple[str, str]:
        command = self.substitute_variables(source.command, values)
        return command, f"{source.command}:{command}"

    def _cached(self, source: ScriptSource, command: str, cache_key: str) -> Optional[list[str]]:
        if source.cache_duration is None:
            return None
        cached = self._cache.get(cache_key)
        if cached is not None:
            log_command("options", command, None, cached=True)
        return cached

    def _finish_script(
        self, source: ScriptSource, command: str, cache_key: str, result: CommandResult
    ) -> list[str]:
        log_command("options", command, result.returncode)
        if not result.ok:
            stderr = result.stderr_text()
            raise ScriptError(
                f"Script failed: {stderr}", stderr=stderr, returncode=result.returncode
            )
        options = parse_script_output(result.stdout)
        if source.cache_duration is not None:
            self._cache.insert(cache_key, options, source.cache_duration)
            log_debug("options", "cache.store", {"key": cache_key, "count": len(options)})
        return options


def format_substitution(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float, str)):
        return str(value)
    return ""


def parse_script_output(stdout: bytes) -> list[str]:
    """JSON array of strings first, newline-separated lines as a fallback."""
    try:
        text = stdout.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ScriptError(f"Script output is not valid UTF-8: {exc}") from exc
    try:
        data = json.loads(text)
    except ValueError:
        data = None
    if isinstance(data, list) and all(isinstance(item, str) for item in data):
        return list(data)
    return [line.strip() for line in text.splitlines() if line.strip()]


def expand_home(path: str) -> str:
    if path.startswith("~/") or path == "~":
        return os.path.expanduser("~") + path[1:]
    return path


def validate_glob_pattern(pattern: str) -> None:
    if not pattern:
        raise GlobError("Glob pattern is empty")
    for component in pattern.split("/"):
        if "**" in component and component != "**":
            raise GlobError(
                f"Invalid glob pattern {pattern!r}: recursive wildcards must form a single path component"
            )
    idx = 0
    while idx < len(pattern):
        if pattern[idx] != "[":
            idx += 1
            continue
        end = idx + 1
        if end < len(pattern) and pattern[end] == "!":
            end += 1
        if end < len(pattern) and pattern[end] == "]":
            end += 1
        close = pattern.find("]", end)
        if close == -1:
            raise GlobError(f"Invalid glob pattern {pattern!r}: unclosed character class")
        idx = close + 1
