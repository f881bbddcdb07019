from __future__ import annotations

from pathlib import Path
from typing import Any

from ..errors import SchemaError
from .types import (
    BooleanType,
    ConfigSchema,
    EnumType,
    FieldType,
    FloatType,
    NumberType,
    PathType,
    StringType,
)


class SchemaValidator:
    @staticmethod
    def validate_schema(schema: ConfigSchema) -> None:
        if not schema.sections:
            raise SchemaError("Schema must have at least one section")
        for section in schema.sections:
            if not section.fields:
                raise SchemaError(f"Section '{section.id}' has no fields")

    @staticmethod
    def validate_value(field_type: FieldType, value: Any) -> None:
        """Raise SchemaError when value does not fit field_type."""
        if isinstance(field_type, StringType):
            if not isinstance(value, str):
                raise SchemaError("Value must be a string")
            if field_type.max_length is not None and len(value) > field_type.max_length:
                raise SchemaError(f"String exceeds max length of {field_type.max_length}")
        elif isinstance(field_type, NumberType):
            if isinstance(value, bool) or not isinstance(value, int):
                raise SchemaError("Value must be a number")
            _check_bounds(value, field_type.min, field_type.max)
        elif isinstance(field_type, FloatType):
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise SchemaError("Value must be a number")
            _check_bounds(value, field_type.min, field_type.max)
        elif isinstance(field_type, BooleanType):
            if not isinstance(value, bool):
                raise SchemaError("Value must be a boolean")
        elif isinstance(field_type, EnumType):
            if not isinstance(value, str):
                raise SchemaError("Enum value must be a string")
        elif isinstance(field_type, PathType):
            if not isinstance(value, str):
                raise SchemaError("Path must be a string")
            if field_type.must_exist and not Path(value).expanduser().exists():
                raise SchemaError(f"Path does not exist: {value}")


def _check_bounds(value: float, minimum: float | None, maximum: float | None) -> None:
    if minimum is not None and value < minimum:
        raise SchemaError(f"Number is below minimum of {minimum}")
    if maximum is not None and value > maximum:
        raise SchemaError(f"Number exceeds maximum of {maximum}")
