from __future__ import annotations

from typing import Any, Optional

from ..canvas import Area, Canvas
from ..keys import ENTER, ESCAPE, KeyEvent
from ..theme import Theme
from .base import CANCELLED, CONTINUE, BufferEditor, Widget, WidgetResult, WidgetState


class NumericBuffer(BufferEditor):
    """Edit buffer that only admits characters of a signed decimal number."""

    def __init__(self, text: str, *, allow_point: bool = False) -> None:
        super().__init__(text)
        self.allow_point = allow_point

    def accepts(self, char: str) -> bool:
        if char.isdigit() and char.isascii():
            return True
        if char == "-":
            return self.cursor == 0 and "-" not in self.buffer
        if char == "." and self.allow_point:
            return "." not in self.buffer
        return False


class NumberInput(Widget):
    """Integer editor with optional inclusive bounds."""

    def __init__(
        self,
        label: str,
        initial_value: int = 0,
        *,
        min: Optional[int] = None,
        max: Optional[int] = None,
    ) -> None:
        self.label = label
        self.state = WidgetState.NORMAL
        self.min = min
        self.max = max
        self._editor = NumericBuffer(str(initial_value))

    @property
    def buffer(self) -> str:
        return self._editor.buffer

    def parse(self) -> Optional[int]:
        try:
            return int(self._editor.buffer)
        except ValueError:
            return None

    def in_range(self, value: float) -> bool:
        if self.min is not None and value < self.min:
            return False
        if self.max is not None and value > self.max:
            return False
        return True

    def valid_value(self) -> Any:
        value = self.parse()
        if value is None or not self.in_range(value):
            return None
        return value

    def bounds_hint(self) -> str:
        if self.min is None and self.max is None:
            return ""
        low = "" if self.min is None else self.min
        high = "" if self.max is None else self.max
        return f" [{low}..{high}]"

    def paint(self, canvas: Canvas, area: Area, focused: bool, theme: Theme) -> None:
        text = self._editor.display(self.editing)
        if self.editing and self.valid_value() is None:
            self.paint_line(canvas, area, text, "class:error", [("class:error", " ✗")])
            return
        if self.editing:
            style = "class:editing bold"
        elif focused:
            style = "class:focused"
        else:
            style = "class:text"
        suffix = [("class:dim", self.bounds_hint())] if self.editing else None
        self.paint_line(canvas, area, text, style, suffix)

    def handle_input(self, key: KeyEvent) -> WidgetResult:
        if not self.editing:
            return CONTINUE
        if key.key == ENTER:
            value = self.valid_value()
            if value is None:
                return CONTINUE
            self.state = WidgetState.NORMAL
            return WidgetResult.confirmed(value)
        if key.key == ESCAPE:
            self.state = WidgetState.NORMAL
            return CANCELLED
        return self.handle_edit(key)

    def handle_edit(self, key: KeyEvent) -> WidgetResult:
        if self._editor.edit(key):
            value = self.valid_value()
            if value is not None:
                return WidgetResult.changed(value)
        return CONTINUE

    def get_value(self) -> Any:
        value = self.parse()
        return 0 if value is None else value

    def set_value(self, value: Any) -> None:
        if isinstance(value, int) and not isinstance(value, bool):
            self._editor.replace(str(value))

    def reset(self) -> None:
        self.state = WidgetState.NORMAL

    def activate(self) -> None:
        self.state = WidgetState.EDITING
        self._editor.cursor = len(self._editor.buffer)
