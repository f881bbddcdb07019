from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from prompt_toolkit.utils import get_cwidth

Fragment = tuple[str, str]

# Placeholder for the right half of a double-width character.
_WIDE_TAIL = ""


@dataclass(frozen=True)
class Area:
    x: int
    y: int
    width: int
    height: int

    @property
    def bottom(self) -> int:
        return self.y + self.height

    @property
    def right(self) -> int:
        return self.x + self.width

    def inner(self, margin: int = 1) -> "Area":
        return Area(
            self.x + margin,
            self.y + margin,
            max(0, self.width - 2 * margin),
            max(0, self.height - 2 * margin),
        )


class Canvas:
    """Fixed-size cell grid the widgets paint onto."""

    def __init__(self, width: int, height: int, style: str = "") -> None:
        self.width = max(0, width)
        self.height = max(0, height)
        self._rows: list[list[Fragment]] = [
            [(style, " ") for _ in range(self.width)] for _ in range(self.height)
        ]

    @property
    def area(self) -> Area:
        return Area(0, 0, self.width, self.height)

    def write(self, x: int, y: int, text: str, style: str = "", *, limit: int | None = None) -> int:
        """Write text starting at (x, y); returns the column after the last cell."""
        if y < 0 or y >= self.height:
            return x
        right = self.width if limit is None else min(self.width, limit)
        row = self._rows[y]
        col = x
        for ch in text:
            if ch == "\n":
                break
            width = max(1, get_cwidth(ch))
            if col + width > right:
                break
            if col >= 0:
                row[col] = (style, ch)
                if width == 2:
                    row[col + 1] = (style, _WIDE_TAIL)
            col += width
        return col

    def write_fragments(
        self, x: int, y: int, fragments: Iterable[Fragment], *, limit: int | None = None
    ) -> int:
        col = x
        for style, text in fragments:
            col = self.write(col, y, text, style, limit=limit)
        return col

    def fill(self, area: Area, style: str = "", char: str = " ") -> None:
        for y in range(max(0, area.y), min(self.height, area.bottom)):
            for x in range(max(0, area.x), min(self.width, area.right)):
                self._rows[y][x] = (style, char)

    def box(self, area: Area, style: str = "", title: str = "", fill_style: str | None = None) -> None:
        if area.width < 2 or area.height < 2:
            return
        if fill_style is not None:
            self.fill(area, fill_style)
        top, bottom = area.y, area.bottom - 1
        left, right = area.x, area.right - 1
        self.write(left, top, "┌" + "─" * (area.width - 2) + "┐", style)
        for y in range(top + 1, bottom):
            self.write(left, y, "│", style)
            self.write(right, y, "│", style)
        self.write(left, bottom, "└" + "─" * (area.width - 2) + "┘", style)
        if title:
            self.write(left + 2, top, f" {title} ", f"{style} bold", limit=right - 1)

    def row_text(self, y: int) -> str:
        return "".join(ch for _, ch in self._rows[y])

    def text(self) -> str:
        return "\n".join(self.row_text(y).rstrip() for y in range(self.height))

    def style_at(self, x: int, y: int) -> str:
        return self._rows[y][x][0]

    def to_formatted_text(self) -> list[Fragment]:
        fragments: list[Fragment] = []
        for y, row in enumerate(self._rows):
            fragments.extend(_merge(row))
            if y < self.height - 1:
                fragments.append(("", "\n"))
        return fragments


def _merge(row: Sequence[Fragment]) -> list[Fragment]:
    merged: list[Fragment] = []
    for style, ch in row:
        if ch == _WIDE_TAIL:
            continue
        if merged and merged[-1][0] == style:
            merged[-1] = (style, merged[-1][1] + ch)
        else:
            merged.append((style, ch))
    return merged
