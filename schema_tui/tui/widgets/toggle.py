from __future__ import annotations

from typing import Any

from ..canvas import Area, Canvas
from ..keys import ENTER, KeyEvent
from ..theme import Theme
from .base import CONTINUE, Widget, WidgetResult, WidgetState


def format_bool(value: bool) -> str:
    return "✓ true" if value else "✗ false"


class Toggle(Widget):
    """Boolean switch. Activation flips the value; it never stays in edit mode."""

    def __init__(self, label: str, initial_value: bool = False) -> None:
        self.label = label
        self.state = WidgetState.NORMAL
        self.value = bool(initial_value)

    def paint(self, canvas: Canvas, area: Area, focused: bool, theme: Theme) -> None:
        style = "class:success" if self.value else "class:dim"
        if focused:
            style += " bold"
        self.paint_line(canvas, area, format_bool(self.value), style)

    def handle_input(self, key: KeyEvent) -> WidgetResult:
        if key.key == ENTER or key.is_plain_char(" "):
            self.value = not self.value
            return WidgetResult.confirmed(self.value)
        return CONTINUE

    def get_value(self) -> Any:
        return self.value

    def set_value(self, value: Any) -> None:
        if isinstance(value, bool):
            self.value = value

    def reset(self) -> None:
        self.state = WidgetState.NORMAL

    def activate(self) -> None:
        self.value = not self.value
        self.state = WidgetState.NORMAL
