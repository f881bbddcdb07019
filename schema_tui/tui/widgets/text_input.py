from __future__ import annotations

from typing import Any, Optional

from ..canvas import Area, Canvas
from ..keys import ENTER, ESCAPE, KeyEvent
from ..theme import Theme
from .base import CANCELLED, CONTINUE, BufferEditor, Widget, WidgetResult, WidgetState


class _TextBuffer(BufferEditor):
    def __init__(self, text: str, max_length: Optional[int]) -> None:
        super().__init__(text)
        self.max_length = max_length

    def accepts(self, char: str) -> bool:
        if not char.isprintable():
            return False
        return self.max_length is None or len(self.buffer) < self.max_length


class TextInput(Widget):
    """Free-text editor used for string and path fields."""

    def __init__(self, label: str, initial_value: str = "", *, max_length: Optional[int] = None) -> None:
        self.label = label
        self.state = WidgetState.NORMAL
        self._editor = _TextBuffer(initial_value, max_length)

    @property
    def cursor(self) -> int:
        return self._editor.cursor

    def paint(self, canvas: Canvas, area: Area, focused: bool, theme: Theme) -> None:
        if self.editing:
            style = "class:editing bold"
        elif focused:
            style = "class:focused"
        else:
            style = "class:text"
        self.paint_line(canvas, area, self._editor.display(self.editing), style)

    def handle_input(self, key: KeyEvent) -> WidgetResult:
        if not self.editing:
            return CONTINUE
        if key.key == ENTER:
            self.state = WidgetState.NORMAL
            return WidgetResult.confirmed(self.get_value())
        if key.key == ESCAPE:
            self.state = WidgetState.NORMAL
            return CANCELLED
        changed = self._editor.edit(key)
        if changed:
            return WidgetResult.changed(self.get_value())
        return CONTINUE

    def get_value(self) -> Any:
        return self._editor.buffer

    def set_value(self, value: Any) -> None:
        if isinstance(value, str):
            self._editor.replace(value)

    def reset(self) -> None:
        self.state = WidgetState.NORMAL
        self._editor.cursor = len(self._editor.buffer)

    def activate(self) -> None:
        self.state = WidgetState.EDITING
        self._editor.cursor = len(self._editor.buffer)
