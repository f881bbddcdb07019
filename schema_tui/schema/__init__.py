"""Schema types, parsing and validation."""

from .parser import SchemaParser, parse_option_source
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
from .validation import SchemaValidator

__all__ = [
    "BooleanType",
    "ConfigSchema",
    "EnumType",
    "FieldType",
    "FileListSource",
    "FileTypeFilter",
    "FloatType",
    "FunctionSource",
    "NumberType",
    "OptionSource",
    "PathType",
    "ProviderSource",
    "SchemaField",
    "SchemaParser",
    "SchemaSection",
    "SchemaValidator",
    "ScriptSource",
    "StaticSource",
    "StringType",
    "UIWidget",
    "parse_option_source",
]
