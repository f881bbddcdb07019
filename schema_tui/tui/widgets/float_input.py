from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional

from ..keys import DOWN, UP, KeyEvent
from .base import CONTINUE, WidgetResult, WidgetState
from .number_input import NumberInput, NumericBuffer


def step_precision(step: float) -> int:
    """Number of decimal places in ``step`` (0.05 -> 2, 1.0 -> 0)."""
    exponent = Decimal(repr(step)).normalize().as_tuple().exponent
    if not isinstance(exponent, int):
        return 0
    return max(0, -exponent)


def format_float(value: float) -> str:
    text = repr(float(value))
    return text[:-2] if text.endswith(".0") else text


class FloatInput(NumberInput):
    """Float editor; Up/Down step a valid value when a step is declared."""

    def __init__(
        self,
        label: str,
        initial_value: float = 0.0,
        *,
        min: Optional[float] = None,
        max: Optional[float] = None,
        step: Optional[float] = None,
    ) -> None:
        self.label = label
        self.state = WidgetState.NORMAL
        self.min = min
        self.max = max
        self.step = step
        self._editor = NumericBuffer(format_float(initial_value), allow_point=True)

    def parse(self) -> Optional[float]:
        buffer = self._editor.buffer
        if not buffer or buffer in {"-", ".", "-."}:
            return None
        try:
            return float(buffer)
        except ValueError:
            return None

    def handle_edit(self, key: KeyEvent) -> WidgetResult:
        if key.key in (UP, DOWN):
            return self._step(1 if key.key == UP else -1)
        return super().handle_edit(key)

    def _step(self, direction: int) -> WidgetResult:
        current = self.valid_value()
        if current is None or not self.step:
            return CONTINUE
        value = current + direction * self.step
        if self.min is not None:
            value = max(self.min, value)
        if self.max is not None:
            value = min(self.max, value)
        value = round(value, step_precision(self.step))
        self._editor.replace(format_float(value))
        return WidgetResult.changed(value)

    def get_value(self) -> Any:
        value = self.parse()
        return 0.0 if value is None else value

    def set_value(self, value: Any) -> None:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            self._editor.replace(format_float(value))
