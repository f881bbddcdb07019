from __future__ import annotations

import json
import math
from pathlib import Path
from typing import Any

from ..errors import PersistenceError
from ..schema import ConfigSchema
from .store import ConfigStore

AUTO_GENERATED_NOTICE = "# This file is auto-generated but safe to edit manually"


class ConfigSaver:
    """Serializes a value map as comment-annotated TOML in schema order."""

    @classmethod
    def save_toml(cls, store: ConfigStore, schema: ConfigSchema, path: Path | str) -> None:
        content = cls.render_toml(store, schema)
        target = Path(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
        except OSError as exc:
            raise PersistenceError(f"Failed to save config to {target}: {exc}") from exc

    @classmethod
    def render_toml(cls, store: ConfigStore, schema: ConfigSchema) -> str:
        lines: list[str] = []
        if schema.title:
            lines.append(f"# {schema.title}")
        if schema.description:
            lines.append(f"# {schema.description}")
        lines.append(AUTO_GENERATED_NOTICE)
        lines.append("")

        for section in schema.sections:
            lines.append(f"[{section.id}]")
            if section.description:
                lines.append(f"# {section.description}")
            for schema_field in section.fields:
                lines.append(f"# {schema_field.description}")
                value = store.get_nested(section.qualified_key(schema_field))
                if value is None:
                    value = schema_field.default_value()
                if value is None:
                    lines.append(f'{schema_field.id} = ""')
                else:
                    lines.append(f"{schema_field.id} = {format_value(value)}")
                lines.append("")
            lines.append("")
        return "\n".join(lines)


def format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isnan(value):
            return "nan"
        if math.isinf(value):
            return "inf" if value > 0 else "-inf"
        return repr(value)
    if isinstance(value, str):
        # JSON string escapes are a valid subset of TOML basic strings.
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(format_value(item) for item in value) + "]"
    if isinstance(value, dict):
        return "{}"
    return json.dumps(str(value), ensure_ascii=False)
