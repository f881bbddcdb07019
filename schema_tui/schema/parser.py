from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from ..errors import SchemaError
from .types import (
    BooleanType,
    ConfigSchema,
    EnumType,
    FieldType,
    FileListSource,
    FileTypeFilter,
    FloatType,
    FunctionSource,
    NumberType,
    OptionSource,
    PathType,
    ProviderSource,
    SchemaField,
    SchemaSection,
    ScriptSource,
    StaticSource,
    StringType,
    UIWidget,
)


class SchemaParser:
    """Builds a typed schema tree from a JSON schema document."""

    @classmethod
    def from_file(cls, path: Path | str) -> ConfigSchema:
        content = Path(path).read_text(encoding="utf-8")
        return cls.from_string(content)

    @classmethod
    def from_string(cls, content: str) -> ConfigSchema:
        try:
            data = json.loads(content)
        except json.JSONDecodeError as exc:
            raise SchemaError(f"Invalid schema JSON: {exc}") from exc
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: Any) -> ConfigSchema:
        if not isinstance(data, dict):
            raise SchemaError("Schema document must be a JSON object.")
        sections_raw = data.get("sections")
        if not isinstance(sections_raw, list):
            raise SchemaError("Schema requires a 'sections' list.")
        return ConfigSchema(
            version=str(_require(data, "version", "schema")),
            title=_optional_str(data, "title"),
            description=_optional_str(data, "description"),
            sections=tuple(cls._parse_section(item) for item in sections_raw),
        )

    @classmethod
    def _parse_section(cls, data: Any) -> SchemaSection:
        if not isinstance(data, dict):
            raise SchemaError("Each section must be an object.")
        section_id = str(_require(data, "id", "section"))
        fields_raw = data.get("fields")
        if not isinstance(fields_raw, list):
            raise SchemaError(f"Section '{section_id}' requires a 'fields' list.")
        return SchemaSection(
            id=section_id,
            title=str(_require(data, "title", f"section '{section_id}'")),
            description=_optional_str(data, "description"),
            icon=_optional_str(data, "icon"),
            visible_when=_optional_str(data, "visible_when"),
            fields=tuple(cls._parse_field(section_id, item) for item in fields_raw),
        )

    @classmethod
    def _parse_field(cls, section_id: str, data: Any) -> SchemaField:
        if not isinstance(data, dict):
            raise SchemaError(f"Fields in section '{section_id}' must be objects.")
        field_id = str(_require(data, "id", f"field in '{section_id}'"))
        where = f"field '{section_id}.{field_id}'"
        widget_raw = data.get("ui_widget")
        try:
            ui_widget = UIWidget(widget_raw) if widget_raw else UIWidget.TEXT_INPUT
        except ValueError as exc:
            raise SchemaError(f"Unknown ui_widget '{widget_raw}' for {where}.") from exc
        return SchemaField(
            id=field_id,
            label=str(_require(data, "label", where)),
            description=str(_require(data, "description", where)),
            field_type=cls._parse_field_type(data, where),
            optional=bool(data.get("optional", False)),
            env_expand=bool(data.get("env_expand", False)),
            ui_widget=ui_widget,
            keybind=_optional_str(data, "keybind"),
            subsection=_optional_str(data, "subsection"),
        )

    @classmethod
    def _parse_field_type(cls, data: Dict[str, Any], where: str) -> FieldType:
        kind = _require(data, "type", where)
        parser = _FIELD_TYPE_PARSERS.get(kind)
        if parser is None:
            raise SchemaError(f"Unknown field type '{kind}' for {where}.")
        return parser(data, where)


def parse_option_source(data: Any, where: str = "options_source") -> OptionSource:
    if not isinstance(data, dict):
        raise SchemaError(f"{where} must be an object.")
    kind = _require(data, "type", where)
    if kind == "static":
        values = data.get("values")
        if not isinstance(values, list):
            raise SchemaError(f"{where}: static source requires a 'values' list.")
        return StaticSource(values=tuple(str(value) for value in values))
    if kind == "script":
        depends_on = data.get("depends_on") or []
        if not isinstance(depends_on, list):
            raise SchemaError(f"{where}: 'depends_on' must be a list.")
        return ScriptSource(
            command=str(_require(data, "command", where)),
            cache_duration=_optional_int(data, "cache_duration", where),
            depends_on=tuple(str(item) for item in depends_on),
        )
    if kind == "function":
        return FunctionSource(name=str(_require(data, "name", where)))
    if kind == "provider":
        return ProviderSource(provider=str(_require(data, "provider", where)))
    if kind == "file_list":
        return FileListSource(
            directory=str(_require(data, "directory", where)),
            pattern=str(_require(data, "pattern", where)),
            extract=_optional_str(data, "extract"),
        )
    raise SchemaError(f"Unknown option source type '{kind}' in {where}.")


def _parse_string(data: Dict[str, Any], where: str) -> FieldType:
    return StringType(
        default=_optional_str(data, "default"),
        max_length=_optional_int(data, "max_length", where),
    )


def _parse_number(data: Dict[str, Any], where: str) -> FieldType:
    return NumberType(
        default=_optional_int(data, "default", where),
        min=_optional_int(data, "min", where),
        max=_optional_int(data, "max", where),
    )


def _parse_float(data: Dict[str, Any], where: str) -> FieldType:
    return FloatType(
        default=_optional_float(data, "default", where),
        min=_optional_float(data, "min", where),
        max=_optional_float(data, "max", where),
        step=_optional_float(data, "step", where),
    )


def _parse_boolean(data: Dict[str, Any], where: str) -> FieldType:
    default = _require(data, "default", where)
    if not isinstance(default, bool):
        raise SchemaError(f"{where}: boolean default must be true or false.")
    return BooleanType(default=default)


def _parse_enum(data: Dict[str, Any], where: str) -> FieldType:
    return EnumType(
        options_source=parse_option_source(
            _require(data, "options_source", where), f"{where} options_source"
        ),
        default=_optional_str(data, "default"),
    )


def _parse_path(data: Dict[str, Any], where: str) -> FieldType:
    file_type_raw = data.get("file_type")
    file_type: Optional[FileTypeFilter] = None
    if file_type_raw is not None:
        try:
            file_type = FileTypeFilter(file_type_raw)
        except ValueError as exc:
            raise SchemaError(f"{where}: unknown file_type '{file_type_raw}'.") from exc
    return PathType(
        default=_optional_str(data, "default"),
        file_type=file_type,
        must_exist=bool(data.get("must_exist", False)),
    )


_FIELD_TYPE_PARSERS: Dict[str, Callable[[Dict[str, Any], str], FieldType]] = {
    "string": _parse_string,
    "number": _parse_number,
    "float": _parse_float,
    "boolean": _parse_boolean,
    "enum": _parse_enum,
    "path": _parse_path,
}


def _require(data: Dict[str, Any], key: str, where: str) -> Any:
    if key not in data or data[key] is None:
        raise SchemaError(f"Missing '{key}' in {where}.")
    return data[key]


def _optional_str(data: Dict[str, Any], key: str) -> Optional[str]:
    value = data.get(key)
    if value is None:
        return None
    return str(value)


def _optional_int(data: Dict[str, Any], key: str, where: str) -> Optional[int]:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise SchemaError(f"{where}: '{key}' must be an integer.")
    return value


def _optional_float(data: Dict[str, Any], key: str, where: str) -> Optional[float]:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise SchemaError(f"{where}: '{key}' must be a number.")
    return float(value)
