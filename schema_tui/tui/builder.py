from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Mapping, Optional

from ..config.loader import ConfigLoader
from ..errors import SchemaError
from ..options import OptionResolver
from ..options.cache import OptionCache
from ..options.resolver import ProviderLike
from ..process import ProcessRunner
from ..schema import ConfigSchema, SchemaParser, SchemaValidator
from .app import SchemaTUI
from .theme import Theme


class SchemaTUIBuilder:
    """Fluent assembly of a :class:`SchemaTUI` session."""

    def __init__(self) -> None:
        self._schema: Optional[ConfigSchema] = None
        self._initial_values: dict[str, Any] = {}
        self._providers: list[tuple[str, ProviderLike]] = []
        self._theme = Theme.terminal()
        self._config_path: Optional[Path] = None
        self._runner: Optional[ProcessRunner] = None
        self._clock: Optional[Callable[[], float]] = None
        self._merge_defaults = True

    def schema(self, schema: ConfigSchema) -> "SchemaTUIBuilder":
        self._schema = schema
        return self

    def schema_file(self, path: Path | str) -> "SchemaTUIBuilder":
        self._schema = SchemaParser.from_file(path)
        return self

    def initial_values(self, values: Mapping[str, Any]) -> "SchemaTUIBuilder":
        self._initial_values = dict(values)
        return self

    def config_file(self, path: Path | str) -> "SchemaTUIBuilder":
        """Load values from ``path`` and save every commit back to it.

        A missing file is not an error; it is created on the first commit.
        Values are loaded without environment expansion so literal
        ``$VAR`` references stay editable.
        """
        target = Path(path)
        if target.exists():
            store = ConfigLoader.from_toml_file(target, expand=False)
            self._initial_values = store.as_flat_map()
        self._config_path = target
        return self

    def register_option_provider(self, name: str, provider: ProviderLike) -> "SchemaTUIBuilder":
        self._providers.append((name, provider))
        return self

    def theme(self, theme: Theme) -> "SchemaTUIBuilder":
        self._theme = theme
        return self

    def runner(self, runner: ProcessRunner) -> "SchemaTUIBuilder":
        self._runner = runner
        return self

    def clock(self, clock: Callable[[], float]) -> "SchemaTUIBuilder":
        self._clock = clock
        return self

    def merge_defaults(self, enabled: bool = True) -> "SchemaTUIBuilder":
        self._merge_defaults = enabled
        return self

    def build(self) -> SchemaTUI:
        if self._schema is None:
            raise SchemaError("Schema not provided")
        SchemaValidator.validate_schema(self._schema)
        runner = self._runner or ProcessRunner()
        resolver = OptionResolver(runner=runner, cache=OptionCache(self._clock))
        for name, provider in self._providers:
            resolver.register_provider(name, provider)
        return SchemaTUI(
            self._schema,
            self._initial_values,
            resolver=resolver,
            theme=self._theme,
            config_path=self._config_path,
            runner=runner,
            merge_defaults=self._merge_defaults,
            clock=self._clock,
        )
