"""Editing widgets for individual schema fields."""

from .base import (
    CANCELLED,
    CONTINUE,
    ResultKind,
    Widget,
    WidgetResult,
    WidgetState,
)
from .dropdown import Dropdown
from .float_input import FloatInput
from .number_input import NumberInput
from .searchable_dropdown import SearchableDropdown
from .text_input import TextInput
from .toggle import Toggle, format_bool

__all__ = [
    "CANCELLED",
    "CONTINUE",
    "Dropdown",
    "FloatInput",
    "NumberInput",
    "ResultKind",
    "SearchableDropdown",
    "TextInput",
    "Toggle",
    "Widget",
    "WidgetResult",
    "WidgetState",
    "format_bool",
]
