from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union


class UIWidget(str, Enum):
    TEXT_INPUT = "text_input"
    NUMBER_INPUT = "number_input"
    TOGGLE = "toggle"
    DROPDOWN = "dropdown"
    DROPDOWN_SEARCHABLE = "dropdown_searchable"
    FILE_PICKER = "file_picker"


class FileTypeFilter(str, Enum):
    IMAGE = "image"
    JSON = "json"
    ANY = "any"


@dataclass(frozen=True)
class StaticSource:
    values: tuple[str, ...] = ()


@dataclass(frozen=True)
class ScriptSource:
    command: str
    cache_duration: Optional[int] = None
    depends_on: tuple[str, ...] = ()


@dataclass(frozen=True)
class FunctionSource:
    name: str


@dataclass(frozen=True)
class ProviderSource:
    provider: str


@dataclass(frozen=True)
class FileListSource:
    directory: str
    pattern: str
    extract: Optional[str] = None


OptionSource = Union[StaticSource, ScriptSource, FunctionSource, ProviderSource, FileListSource]


@dataclass(frozen=True)
class StringType:
    default: Optional[str] = None
    max_length: Optional[int] = None


@dataclass(frozen=True)
class NumberType:
    default: Optional[int] = None
    min: Optional[int] = None
    max: Optional[int] = None


@dataclass(frozen=True)
class FloatType:
    default: Optional[float] = None
    min: Optional[float] = None
    max: Optional[float] = None
    step: Optional[float] = None


@dataclass(frozen=True)
class BooleanType:
    default: bool = False


@dataclass(frozen=True)
class EnumType:
    options_source: OptionSource
    default: Optional[str] = None


@dataclass(frozen=True)
class PathType:
    default: Optional[str] = None
    file_type: Optional[FileTypeFilter] = None
    must_exist: bool = False


FieldType = Union[StringType, NumberType, FloatType, BooleanType, EnumType, PathType]


@dataclass(frozen=True)
class SchemaField:
    id: str
    label: str
    description: str
    field_type: FieldType
    optional: bool = False
    env_expand: bool = False
    ui_widget: UIWidget = UIWidget.TEXT_INPUT
    keybind: Optional[str] = None
    subsection: Optional[str] = None

    def default_value(self) -> Any:
        """Schema default for this field, or None when none is declared."""
        return self.field_type.default

    def fallback_value(self) -> Any:
        """Value shown when neither the value map nor the schema provides one."""
        default = self.default_value()
        if default is not None:
            return default
        field_type = self.field_type
        if isinstance(field_type, NumberType):
            return 0
        if isinstance(field_type, FloatType):
            return 0.0
        if isinstance(field_type, BooleanType):
            return False
        return ""


@dataclass(frozen=True)
class SchemaSection:
    id: str
    title: str
    fields: tuple[SchemaField, ...] = ()
    description: Optional[str] = None
    icon: Optional[str] = None
    visible_when: Optional[str] = None

    def qualified_key(self, schema_field: SchemaField) -> str:
        return f"{self.id}.{schema_field.id}"


@dataclass(frozen=True)
class ConfigSchema:
    version: str
    sections: tuple[SchemaSection, ...] = field(default_factory=tuple)
    title: Optional[str] = None
    description: Optional[str] = None

    def iter_fields(self):  # type: ignore[no-untyped-def]
        for section in self.sections:
            for schema_field in section.fields:
                yield section, schema_field

    def find_field(self, key: str) -> Optional[SchemaField]:
        for section, schema_field in self.iter_fields():
            if section.qualified_key(schema_field) == key:
                return schema_field
        return None

    def defaults(self) -> dict[str, Any]:
        values: dict[str, Any] = {}
        for section, schema_field in self.iter_fields():
            default = schema_field.default_value()
            if default is not None:
                values[section.qualified_key(schema_field)] = default
        return values
