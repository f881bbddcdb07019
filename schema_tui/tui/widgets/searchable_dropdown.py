from __future__ import annotations

from typing import Any, Optional, Sequence

from ..canvas import Area, Canvas
from ..keys import BACKSPACE, DOWN, ENTER, ESCAPE, UP, KeyEvent
from ..theme import Theme
from .base import CANCELLED, CONTINUE, Widget, WidgetResult, WidgetState
from .dropdown import paint_options, popup_area


class SearchableDropdown(Widget):
    """Dropdown whose option list is narrowed by a typed search string."""

    def __init__(self, label: str, options: Sequence[str], initial_value: Optional[str] = None) -> None:
        self.label = label
        self.state = WidgetState.NORMAL
        self.options = list(options)
        self.value = initial_value if initial_value is not None else ""
        self.search = ""
        self.filtered = list(self.options)
        self.selected = self._position(self.value)

    def _position(self, value: str) -> int:
        try:
            return self.filtered.index(value)
        except ValueError:
            return 0

    def _refilter(self) -> None:
        needle = self.search.lower()
        self.filtered = [option for option in self.options if needle in option.lower()]
        if not self.filtered:
            self.selected = 0
        else:
            self.selected = min(self.selected, len(self.filtered) - 1)

    @property
    def current(self) -> Optional[str]:
        if 0 <= self.selected < len(self.filtered):
            return self.filtered[self.selected]
        return None

    def popup_title(self) -> str:
        if not self.search:
            return f"Search {self.label}: (type to filter)"
        return f'Search {self.label}: "{self.search}" ({len(self.filtered)} results)'

    def paint(self, canvas: Canvas, area: Area, focused: bool, theme: Theme) -> None:
        style = "class:focused" if focused or self.editing else "class:text"
        self.paint_line(canvas, area, self.value, style, [("class:dim", " 🔍")])
        if self.editing:
            popup = popup_area(canvas, area, max(1, len(self.filtered)))
            paint_options(
                canvas,
                popup,
                self.popup_title(),
                self.filtered,
                self.selected,
                empty_text="(no matches)",
            )

    def handle_input(self, key: KeyEvent) -> WidgetResult:
        if not self.editing:
            return CONTINUE
        if key.key == UP or key.is_plain_char("k"):
            self._move(-1)
            return CONTINUE
        if key.key == DOWN or key.is_plain_char("j"):
            self._move(1)
            return CONTINUE
        if key.key == ENTER:
            choice = self.current
            if choice is None:
                return CONTINUE
            self.value = choice
            self.state = WidgetState.NORMAL
            return WidgetResult.confirmed(choice)
        if key.key == ESCAPE:
            self.state = WidgetState.NORMAL
            return CANCELLED
        if key.key == BACKSPACE:
            if self.search:
                self.search = self.search[:-1]
                self._refilter()
            return CONTINUE
        if key.is_plain_char() and key.char.isprintable():
            self.search += key.char
            self._refilter()
        return CONTINUE

    def _move(self, delta: int) -> None:
        if self.filtered:
            self.selected = (self.selected + delta) % len(self.filtered)

    def get_value(self) -> Any:
        return self.value

    def set_value(self, value: Any) -> None:
        if isinstance(value, str):
            self.value = value

    def reset(self) -> None:
        self.state = WidgetState.NORMAL
        self.search = ""
        self.filtered = list(self.options)

    def activate(self) -> None:
        self.state = WidgetState.EDITING
        self.search = ""
        self.filtered = list(self.options)
        self.selected = self._position(self.value)
