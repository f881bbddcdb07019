from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any

from ..canvas import Area, Canvas
from ..keys import BACKSPACE, DELETE, END, HOME, LEFT, RIGHT, KeyEvent
from ..theme import Theme

CURSOR = "█"


class WidgetState(str, Enum):
    NORMAL = "normal"
    FOCUSED = "focused"
    EDITING = "editing"


class ResultKind(str, Enum):
    CONTINUE = "continue"
    CHANGED = "changed"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class WidgetResult:
    """Outcome of a key event handled by a widget."""

    kind: ResultKind
    value: Any = None

    @classmethod
    def changed(cls, value: Any) -> "WidgetResult":
        return cls(ResultKind.CHANGED, value)

    @classmethod
    def confirmed(cls, value: Any) -> "WidgetResult":
        return cls(ResultKind.CONFIRMED, value)

    @property
    def is_continue(self) -> bool:
        return self.kind is ResultKind.CONTINUE

    @property
    def is_confirmed(self) -> bool:
        return self.kind is ResultKind.CONFIRMED


CONTINUE = WidgetResult(ResultKind.CONTINUE)
CANCELLED = WidgetResult(ResultKind.CANCELLED)


class Widget(ABC):
    """Editing widget for one field. Owns its buffer and state machine."""

    label: str
    state: WidgetState

    @abstractmethod
    def paint(self, canvas: Canvas, area: Area, focused: bool, theme: Theme) -> None: ...

    @abstractmethod
    def handle_input(self, key: KeyEvent) -> WidgetResult: ...

    @abstractmethod
    def get_value(self) -> Any: ...

    @abstractmethod
    def set_value(self, value: Any) -> None: ...

    @abstractmethod
    def reset(self) -> None: ...

    @abstractmethod
    def activate(self) -> None: ...

    @property
    def editing(self) -> bool:
        return self.state is WidgetState.EDITING

    def paint_line(
        self,
        canvas: Canvas,
        area: Area,
        value_text: str,
        value_style: str,
        suffix: list[tuple[str, str]] | None = None,
    ) -> None:
        fragments = [("bold", f"{self.label}: "), (value_style, value_text)]
        fragments.extend(suffix or [])
        canvas.write_fragments(area.x, area.y, fragments, limit=area.right)


class BufferEditor:
    """Single-line edit buffer with a cursor, shared by the text-like widgets."""

    def __init__(self, text: str = "") -> None:
        self.buffer = text
        self.cursor = len(text)

    def accepts(self, char: str) -> bool:
        return True

    def insert(self, char: str) -> bool:
        if not self.accepts(char):
            return False
        self.buffer = self.buffer[: self.cursor] + char + self.buffer[self.cursor :]
        self.cursor += 1
        return True

    def backspace(self) -> bool:
        if self.cursor == 0:
            return False
        self.buffer = self.buffer[: self.cursor - 1] + self.buffer[self.cursor :]
        self.cursor -= 1
        return True

    def delete(self) -> bool:
        if self.cursor >= len(self.buffer):
            return False
        self.buffer = self.buffer[: self.cursor] + self.buffer[self.cursor + 1 :]
        return True

    def replace(self, text: str) -> None:
        self.buffer = text
        self.cursor = len(text)

    def edit(self, key: KeyEvent) -> bool | None:
        """Apply an editing key.

        Returns True when the buffer changed, False when only the cursor moved
        or the key was refused, and None when the key is not an editing key.
        """
        if key.is_char and not key.ctrl and not key.alt:
            return self.insert(key.char)
        if key.key == BACKSPACE:
            return self.backspace()
        if key.key == DELETE:
            return self.delete()
        if key.key == LEFT:
            self.cursor = max(0, self.cursor - 1)
            return False
        if key.key == RIGHT:
            self.cursor = min(len(self.buffer), self.cursor + 1)
            return False
        if key.key == HOME:
            self.cursor = 0
            return False
        if key.key == END:
            self.cursor = len(self.buffer)
            return False
        return None

    def display(self, editing: bool) -> str:
        if not editing:
            return self.buffer
        return self.buffer[: self.cursor] + CURSOR + self.buffer[self.cursor :]
