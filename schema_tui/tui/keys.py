from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from prompt_toolkit.keys import Keys

CHAR = "char"
ENTER = "enter"
ESCAPE = "escape"
BACKSPACE = "backspace"
DELETE = "delete"
LEFT = "left"
RIGHT = "right"
UP = "up"
DOWN = "down"
HOME = "home"
END = "end"
TAB = "tab"
BACKTAB = "backtab"
PAGE_UP = "pageup"
PAGE_DOWN = "pagedown"

_NAMED_KEYS: dict[str, str] = {
    Keys.Enter.value: ENTER,
    Keys.ControlJ.value: ENTER,
    Keys.Escape.value: ESCAPE,
    Keys.Backspace.value: BACKSPACE,
    Keys.Delete.value: DELETE,
    Keys.Left.value: LEFT,
    Keys.Right.value: RIGHT,
    Keys.Up.value: UP,
    Keys.Down.value: DOWN,
    Keys.Home.value: HOME,
    Keys.End.value: END,
    Keys.Tab.value: TAB,
    Keys.BackTab.value: BACKTAB,
    Keys.PageUp.value: PAGE_UP,
    Keys.PageDown.value: PAGE_DOWN,
}


@dataclass(frozen=True)
class KeyEvent:
    """Terminal-independent key event consumed by the controller and widgets."""

    key: str
    char: str = ""
    ctrl: bool = False
    alt: bool = False
    shift: bool = False

    @classmethod
    def named(cls, key: str, *, ctrl: bool = False, alt: bool = False, shift: bool = False) -> "KeyEvent":
        return cls(key=key, ctrl=ctrl, alt=alt, shift=shift)

    @classmethod
    def character(cls, char: str, *, ctrl: bool = False, alt: bool = False) -> "KeyEvent":
        return cls(key=CHAR, char=char, ctrl=ctrl, alt=alt)

    @property
    def is_char(self) -> bool:
        return self.key == CHAR and bool(self.char)

    def is_plain_char(self, char: str | None = None) -> bool:
        if not self.is_char or self.ctrl or self.alt:
            return False
        return char is None or self.char == char

    def matches(self, binding: str) -> bool:
        """Match a field keybind such as ``x``, ``ctrl+x`` or ``alt+enter``."""
        text = binding.strip()
        if not text:
            return False
        parts = text.split("+") if len(text) > 1 else [text]
        *modifiers, name = parts
        mods = {modifier.strip().lower() for modifier in modifiers}
        if bool(mods & {"ctrl", "control", "c"}) != self.ctrl:
            return False
        if bool(mods & {"alt", "meta", "m"}) != self.alt:
            return False
        if len(name) == 1:
            if not self.is_char:
                return False
            return self.char.lower() == name.lower() if self.ctrl else self.char == name
        return self.key == name.strip().lower()

    @classmethod
    def from_key_press(cls, key_press: Any) -> "KeyEvent":
        """Translate a prompt_toolkit KeyPress."""
        raw = key_press.key
        name = raw.value if isinstance(raw, Keys) else str(raw)
        if name in _NAMED_KEYS:
            return cls.named(_NAMED_KEYS[name])
        if len(name) == 1:
            return cls.character(name)
        if name.startswith("c-") and len(name) == 3:
            return cls.character(name[2], ctrl=True)
        if name.startswith("s-") and name[2:] in _NAMED_KEYS.values():
            return cls.named(name[2:], shift=True)
        data = getattr(key_press, "data", "") or ""
        if len(data) == 1 and data.isprintable():
            return cls.character(data)
        return cls.named(name)
