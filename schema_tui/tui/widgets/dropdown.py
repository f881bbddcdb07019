from __future__ import annotations

from typing import Any, Optional, Sequence

from ..canvas import Area, Canvas
from ..keys import DOWN, ENTER, ESCAPE, UP, KeyEvent
from ..theme import Theme
from .base import CANCELLED, CONTINUE, Widget, WidgetResult, WidgetState

POPUP_MAX_ROWS = 10


def popup_area(canvas: Canvas, anchor: Area, rows: int) -> Area:
    """Place a popup under the anchor row, or above it when it does not fit."""
    height = min(rows, POPUP_MAX_ROWS) + 2
    width = max(20, anchor.width)
    y = anchor.y + 1
    if y + height > canvas.height:
        y = max(0, anchor.y - height)
    height = min(height, canvas.height - y)
    return Area(anchor.x, y, min(width, canvas.width - anchor.x), height)


def paint_options(
    canvas: Canvas,
    area: Area,
    title: str,
    options: Sequence[str],
    selected: int,
    *,
    empty_text: str = "(no options)",
) -> None:
    canvas.box(area, "class:popup.border", title=title, fill_style="class:popup")
    inner = area.inner()
    if inner.height <= 0:
        return
    if not options:
        canvas.write(inner.x, inner.y, empty_text, "class:popup class:dim", limit=inner.right)
        return
    # Keep the highlighted option inside the visible window.
    first = max(0, min(selected - inner.height + 1, len(options) - inner.height))
    first = min(first, selected)
    for row, index in enumerate(range(first, min(len(options), first + inner.height))):
        marker = "▶ " if index == selected else "  "
        style = "class:popup.selected" if index == selected else "class:popup"
        canvas.fill(Area(inner.x, inner.y + row, inner.width, 1), style)
        canvas.write(inner.x, inner.y + row, marker + options[index], style, limit=inner.right)


class Dropdown(Widget):
    """Pick one option from a fixed list."""

    def __init__(self, label: str, options: Sequence[str], initial_value: Optional[str] = None) -> None:
        self.label = label
        self.state = WidgetState.NORMAL
        self.options = list(options)
        self.selected = self._index_of(initial_value)

    def _index_of(self, value: Optional[str]) -> int:
        try:
            return self.options.index(value)  # type: ignore[arg-type]
        except ValueError:
            return 0

    @property
    def current(self) -> Optional[str]:
        if 0 <= self.selected < len(self.options):
            return self.options[self.selected]
        return None

    def popup_title(self) -> str:
        return f"Select {self.label} (↑↓ navigate, Enter confirm, Esc cancel)"

    def paint(self, canvas: Canvas, area: Area, focused: bool, theme: Theme) -> None:
        style = "class:focused" if focused or self.editing else "class:text"
        self.paint_line(canvas, area, self.current or "", style, [("class:dim", " ▼")])
        if self.editing:
            popup = popup_area(canvas, area, len(self.options))
            paint_options(canvas, popup, self.popup_title(), self.options, self.selected)

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
            if self.current is None:
                return CONTINUE
            self.state = WidgetState.NORMAL
            return WidgetResult.confirmed(self.current)
        if key.key == ESCAPE:
            self.state = WidgetState.NORMAL
            return CANCELLED
        return CONTINUE

    def _move(self, delta: int) -> None:
        if self.options:
            self.selected = (self.selected + delta) % len(self.options)

    def get_value(self) -> Any:
        return self.current or ""

    def set_value(self, value: Any) -> None:
        if isinstance(value, str) and value in self.options:
            self.selected = self.options.index(value)

    def reset(self) -> None:
        self.state = WidgetState.NORMAL

    def activate(self) -> None:
        self.state = WidgetState.EDITING
