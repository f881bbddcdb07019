from __future__ import annotations

from dataclasses import dataclass

from prompt_toolkit.styles import Style


@dataclass(frozen=True)
class Theme:
    """Fixed set of color roles, expressed as prompt_toolkit color names.

    An empty string leaves the terminal's own color in place.
    """

    primary: str
    secondary: str
    accent: str
    success: str
    error: str
    warning: str
    text: str
    text_dim: str
    background: str
    border: str
    highlight_bg: str
    highlight_fg: str
    focused: str
    editing: str
    popup_bg: str
    popup_fg: str
    popup_border: str

    @classmethod
    def terminal(cls) -> "Theme":
        """Default theme using the terminal's ANSI palette."""
        return cls(
            primary="ansicyan",
            secondary="ansiblue",
            accent="ansimagenta",
            success="ansigreen",
            error="ansired",
            warning="ansiyellow",
            text="",
            text_dim="ansibrightblack",
            background="",
            border="ansigray",
            highlight_bg="",
            highlight_fg="ansicyan",
            focused="ansiyellow",
            editing="ansicyan",
            popup_bg="",
            popup_fg="",
            popup_border="ansicyan",
        )

    @classmethod
    def dark(cls) -> "Theme":
        return cls(
            primary="ansicyan",
            secondary="ansiblue",
            accent="ansimagenta",
            success="ansigreen",
            error="ansired",
            warning="ansiyellow",
            text="ansiwhite",
            text_dim="ansibrightblack",
            background="ansiblack",
            border="ansigray",
            highlight_bg="ansibrightblack",
            highlight_fg="ansiwhite",
            focused="ansiyellow",
            editing="ansicyan",
            popup_bg="ansiblack",
            popup_fg="ansiwhite",
            popup_border="ansicyan",
        )

    @classmethod
    def light(cls) -> "Theme":
        return cls(
            primary="ansiblue",
            secondary="ansicyan",
            accent="ansimagenta",
            success="ansigreen",
            error="ansired",
            warning="ansiyellow",
            text="ansiblack",
            text_dim="ansigray",
            background="ansiwhite",
            border="ansibrightblack",
            highlight_bg="ansigray",
            highlight_fg="ansiblack",
            focused="ansiblue",
            editing="ansicyan",
            popup_bg="ansiwhite",
            popup_fg="ansiblack",
            popup_border="ansiblue",
        )

    @classmethod
    def named(cls, name: str) -> "Theme":
        factories = {"terminal": cls.terminal, "dark": cls.dark, "light": cls.light}
        try:
            return factories[name.strip().lower()]()
        except KeyError:
            raise ValueError(f"Unknown theme '{name}'. Choose terminal, dark or light.") from None

    def style(self) -> Style:
        return Style.from_dict(
            {
                "": _rule(fg=self.text, bg=self.background),
                "primary": _rule(fg=self.primary),
                "secondary": _rule(fg=self.secondary),
                "accent": _rule(fg=self.accent),
                "success": _rule(fg=self.success),
                "error": _rule(fg=self.error),
                "warning": _rule(fg=self.warning),
                "text": _rule(fg=self.text),
                "dim": _rule(fg=self.text_dim),
                "border": _rule(fg=self.border),
                "highlight": _rule(fg=self.highlight_fg, bg=self.highlight_bg, extra="bold"),
                "focused": _rule(fg=self.focused),
                "editing": _rule(fg=self.editing),
                "popup": _rule(fg=self.popup_fg, bg=self.popup_bg),
                "popup.border": _rule(fg=self.popup_border, bg=self.popup_bg, extra="bold"),
                "popup.selected": _rule(extra="reverse bold"),
            }
        )


def _rule(*, fg: str = "", bg: str = "", extra: str = "") -> str:
    parts = []
    if fg:
        parts.append(f"fg:{fg}")
    if bg:
        parts.append(f"bg:{bg}")
    if extra:
        parts.append(extra)
    return " ".join(parts)
