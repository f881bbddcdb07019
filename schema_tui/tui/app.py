from __future__ import annotations

import asyncio
import time
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional

from prompt_toolkit.application import Application, get_app_or_none, run_in_terminal
from prompt_toolkit.formatted_text import StyleAndTextTuples
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.keys import Keys
from prompt_toolkit.layout import Layout, Window
from prompt_toolkit.layout.controls import FormattedTextControl
from prompt_toolkit.utils import get_cwidth

from ..config.saver import ConfigSaver
from ..config.store import ConfigStore
from ..core.session_log import log_commit, log_debug, log_exception, log_info, log_warn
from ..errors import PersistenceError, SchemaError
from ..options import OptionResolver
from ..options.resolver import format_substitution
from ..process import ProcessRunner
from ..schema import (
    BooleanType,
    ConfigSchema,
    EnumType,
    FieldType,
    FloatType,
    NumberType,
    PathType,
    SchemaField,
    SchemaSection,
    SchemaValidator,
    ScriptSource,
    StringType,
    UIWidget,
)
from .actions import CustomCommand, ExternalEditor, FieldAction
from .canvas import Area, Canvas, Fragment
from .conditions import evaluate_condition
from .keys import BACKTAB, DOWN, ENTER, ESCAPE, LEFT, RIGHT, TAB, UP, KeyEvent
from .theme import Theme
from .widgets import (
    Dropdown,
    FloatInput,
    NumberInput,
    ResultKind,
    SearchableDropdown,
    TextInput,
    Toggle,
    Widget,
    format_bool,
)
from .widgets.float_input import format_float

STATUS_TIMEOUT = 3.0
REFRESH_INTERVAL = 0.1
HIGHLIGHT_SYMBOL = "» "
SUBSECTION_RULE = "━━━"

ChangeHandler = Callable[[str, Any], None]

_ACTIVATE = "activate"
_RUN_ACTION = "run_action"


class SchemaTUI:
    """Navigation and editing controller for a schema-driven config session.

    Holds the authoritative value map. Every mutation goes through
    :meth:`_commit`, :meth:`_apply_change` or :meth:`_cancel` so that
    persistence and change listeners stay in step with the map.
    """

    def __init__(
        self,
        schema: ConfigSchema,
        initial_values: Optional[Mapping[str, Any]] = None,
        *,
        resolver: Optional[OptionResolver] = None,
        theme: Optional[Theme] = None,
        config_path: Optional[Path | str] = None,
        runner: Optional[ProcessRunner] = None,
        merge_defaults: bool = True,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self.schema = schema
        self.values: Dict[str, Any] = dict(initial_values or {})
        if merge_defaults:
            for key, value in schema.defaults().items():
                self.values.setdefault(key, value)
        self.runner = runner or ProcessRunner()
        self.resolver = resolver or OptionResolver(runner=self.runner)
        self.theme = theme or Theme.terminal()
        self.config_path = Path(config_path) if config_path is not None else None

        self.current_section = 0
        self.current_field = 0
        self.active_field: Optional[str] = None
        self.widgets: Dict[str, Widget] = {}
        self._snapshot: Optional[tuple[str, bool, Any]] = None
        self._handlers: list[ChangeHandler] = []
        self._actions: Dict[str, FieldAction] = {}

        self._clock = clock or time.monotonic
        self.message: Optional[str] = None
        self._message_at = 0.0
        self.should_quit = False
        self.busy = False
        self._app: Optional[Application[None]] = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def on_change(self, handler: ChangeHandler) -> None:
        self._handlers.append(handler)

    def get_value(self, key: str) -> Any:
        return self.values.get(key)

    def get_all_values(self) -> Dict[str, Any]:
        return dict(self.values)

    def register_field_action(self, key: str, action: FieldAction) -> None:
        self._actions[key] = action

    @property
    def edit_mode(self) -> bool:
        return self.active_field is not None

    def set_status(self, message: str) -> None:
        self.message = message
        self._message_at = self._clock()

    def tick(self) -> None:
        if self.message is not None and self._clock() - self._message_at >= STATUS_TIMEOUT:
            self.message = None

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def visible_sections(self) -> list[tuple[int, SchemaSection]]:
        return [
            (index, section)
            for index, section in enumerate(self.schema.sections)
            if section.visible_when is None or evaluate_condition(section.visible_when, self.values)
        ]

    def section(self) -> Optional[SchemaSection]:
        if 0 <= self.current_section < len(self.schema.sections):
            return self.schema.sections[self.current_section]
        return None

    def field(self) -> Optional[SchemaField]:
        section = self.section()
        if section is None or not 0 <= self.current_field < len(section.fields):
            return None
        return section.fields[self.current_field]

    def field_key(self) -> Optional[str]:
        section, schema_field = self.section(), self.field()
        if section is None or schema_field is None:
            return None
        return section.qualified_key(schema_field)

    def next_section(self) -> None:
        self._step_section(1)

    def previous_section(self) -> None:
        self._step_section(-1)

    def _step_section(self, delta: int) -> None:
        visible = [index for index, _ in self.visible_sections()]
        if not visible:
            return
        if self.current_section in visible:
            position = visible.index(self.current_section)
            self.current_section = visible[(position + delta) % len(visible)]
        else:
            self.current_section = visible[0]
        self.current_field = 0

    def next_field(self) -> None:
        self._step_field(1)

    def previous_field(self) -> None:
        self._step_field(-1)

    def _step_field(self, delta: int) -> None:
        section = self.section()
        if section is None or not section.fields:
            return
        self.current_field = (self.current_field + delta) % len(section.fields)

    # ------------------------------------------------------------------
    # Key handling
    # ------------------------------------------------------------------

    def handle_key(self, key: KeyEvent) -> None:
        """Process one key, resolving options on the blocking path."""
        if self.edit_mode:
            self._handle_edit_key(key)
            return
        command = self._navigate(key)
        if command == _ACTIVATE:
            self.activate_current_field()
        elif command == _RUN_ACTION:
            self.run_field_action()

    async def handle_key_async(self, key: KeyEvent) -> None:
        """Process one key, resolving options on the suspending path."""
        if self.edit_mode:
            self._handle_edit_key(key)
            return
        command = self._navigate(key)
        if command == _ACTIVATE:
            await self.activate_current_field_async()
        elif command == _RUN_ACTION:
            await self._run_field_action_in_terminal()

    def _navigate(self, key: KeyEvent) -> Optional[str]:
        schema_field = self.field()
        if schema_field is not None and schema_field.keybind and key.matches(schema_field.keybind):
            return _RUN_ACTION
        if key.is_plain_char("q") or key.key == ESCAPE or (key.ctrl and key.char == "c"):
            self.should_quit = True
        elif key.key in (TAB, RIGHT) or key.is_plain_char("l"):
            self.next_section()
        elif key.key in (BACKTAB, LEFT) or key.is_plain_char("h"):
            self.previous_section()
        elif key.key == DOWN or key.is_plain_char("j"):
            self.next_field()
        elif key.key == UP or key.is_plain_char("k"):
            self.previous_field()
        elif key.key == ENTER or key.is_plain_char(" "):
            return _ACTIVATE
        elif key.is_plain_char("e") and schema_field is not None:
            if isinstance(schema_field.field_type, PathType):
                return _RUN_ACTION
        return None

    def _handle_edit_key(self, key: KeyEvent) -> None:
        field_key = self.active_field
        widget = self.widgets.get(field_key) if field_key else None
        if field_key is None or widget is None:
            self.active_field = None
            return
        result = widget.handle_input(key)
        if result.kind is ResultKind.CONFIRMED:
            self._commit(field_key, result.value)
        elif result.kind is ResultKind.CANCELLED:
            self._cancel(field_key)
        elif result.kind is ResultKind.CHANGED:
            self._apply_change(field_key, result.value)

    # ------------------------------------------------------------------
    # Activation
    # ------------------------------------------------------------------

    def activate_current_field(self) -> None:
        target = self._activation_target()
        if target is None:
            return
        key, schema_field = target
        options = None
        if key not in self.widgets and isinstance(schema_field.field_type, EnumType):
            try:
                options = self.resolver.resolve_sync(schema_field.field_type.options_source, self.values)
            except Exception as exc:
                options = self._degrade(key, exc)
        self._start_editing(key, schema_field, options)

    async def activate_current_field_async(self) -> None:
        target = self._activation_target()
        if target is None:
            return
        key, schema_field = target
        options = None
        if key not in self.widgets and isinstance(schema_field.field_type, EnumType):
            self.busy = True
            try:
                options = await self.resolver.resolve(schema_field.field_type.options_source, self.values)
            except Exception as exc:
                options = self._degrade(key, exc)
            finally:
                self.busy = False
        self._start_editing(key, schema_field, options)

    def _activation_target(self) -> Optional[tuple[str, SchemaField]]:
        key, schema_field = self.field_key(), self.field()
        if key is None or schema_field is None:
            return None
        return key, schema_field

    def _degrade(self, key: str, exc: Exception) -> list[str]:
        log_warn("app", "options.unavailable", {"key": key, "error": str(exc)})
        log_exception("app", exc)
        self.set_status(f"Options unavailable for {key}: {exc}")
        return []

    def _start_editing(self, key: str, schema_field: SchemaField, options: Optional[list[str]]) -> None:
        current = self.values.get(key, schema_field.fallback_value())
        widget = self.widgets.get(key)
        if widget is None:
            widget = build_widget(schema_field, current, options or [])
            self.widgets[key] = widget
        else:
            widget.set_value(current)
        self._snapshot = (key, key in self.values, self.values.get(key))
        widget.activate()
        if isinstance(widget, Toggle):
            self._commit(key, widget.get_value())
            return
        self.active_field = key

    # ------------------------------------------------------------------
    # Value mutation
    # ------------------------------------------------------------------

    def _commit(self, key: str, value: Any, status: Optional[str] = None) -> None:
        self.values[key] = value
        self.widgets.pop(key, None)
        self._finish_editing(key)
        self._invalidate_dependents(key)
        self.set_status(status or f"Saved {key}")
        persisted = self._persist()
        log_commit("app", key, value, persisted=persisted)
        self._notify(key, value)

    def _apply_change(self, key: str, value: Any) -> None:
        self.values[key] = value
        self._notify(key, value)

    def _cancel(self, key: str) -> None:
        self.widgets.pop(key, None)
        snapshot = self._snapshot
        self._finish_editing(key)
        self.set_status("Cancelled")
        if snapshot is None or snapshot[0] != key:
            return
        _, existed, previous = snapshot
        if existed:
            if self.values.get(key) != previous:
                self.values[key] = previous
                self._notify(key, previous)
        elif key in self.values:
            del self.values[key]
            schema_field = self.schema.find_field(key)
            self._notify(key, schema_field.fallback_value() if schema_field else None)

    def _finish_editing(self, key: str) -> None:
        if self.active_field == key:
            self.active_field = None
        self._snapshot = None

    def _invalidate_dependents(self, changed_key: str) -> None:
        for section, schema_field in self.schema.iter_fields():
            field_type = schema_field.field_type
            if not isinstance(field_type, EnumType):
                continue
            source = field_type.options_source
            if isinstance(source, ScriptSource) and changed_key in source.depends_on:
                dependent = section.qualified_key(schema_field)
                if dependent != self.active_field and self.widgets.pop(dependent, None) is not None:
                    log_debug("app", "widget.invalidated", {"key": dependent, "because": changed_key})

    def _persist(self) -> bool:
        if self.config_path is None:
            return False
        try:
            ConfigSaver.save_toml(ConfigStore.from_flat_map(self.values), self.schema, self.config_path)
        except PersistenceError as exc:
            log_exception("app", exc)
            self.set_status(f"Failed to save config: {exc}")
            return False
        return True

    def _notify(self, key: str, value: Any) -> None:
        for handler in self._handlers:
            handler(key, value)

    # ------------------------------------------------------------------
    # Field actions
    # ------------------------------------------------------------------

    def field_action(self, key: str, schema_field: SchemaField) -> FieldAction:
        action = self._actions.get(key)
        if action is not None:
            return action
        file_type = schema_field.field_type.file_type if isinstance(schema_field.field_type, PathType) else None
        return ExternalEditor.for_file_type(file_type)

    def run_field_action(self) -> None:
        """Run the focused field's action and commit the value it produces."""
        key, schema_field = self.field_key(), self.field()
        if key is None or schema_field is None:
            return
        action = self.field_action(key, schema_field)
        current = format_substitution(self.values.get(key, schema_field.fallback_value()))
        log_info("app", "action.start", {"key": key, "action": type(action).__name__})
        try:
            new_text = action.execute(current, self.runner)
        except (OSError, UnicodeDecodeError) as exc:
            log_exception("app", exc)
            self.set_status(f"Action failed for {key}: {exc}")
            return
        if new_text is None:
            if isinstance(action, CustomCommand):
                self.set_status("Command failed or produced no change")
            else:
                self.set_status("External editor cancelled or no changes")
            return
        try:
            value = coerce_text(schema_field.field_type, new_text)
            SchemaValidator.validate_value(schema_field.field_type, value)
        except (ValueError, SchemaError) as exc:
            self.set_status(f"Invalid value for {key}: {exc}")
            return
        source = "external editor" if isinstance(action, ExternalEditor) else "command"
        self._commit(key, value, status=f"Updated {key} from {source}")

    async def _run_field_action_in_terminal(self) -> None:
        if self._app is None or get_app_or_none() is None:
            self.run_field_action()
            return
        await run_in_terminal(self.run_field_action)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render(self, width: int, height: int) -> Canvas:
        canvas = Canvas(width, height)
        header_height = 4 if self.schema.description else 3
        footer_lines = self._footer_lines()
        footer_height = len(footer_lines) + 2
        content_height = max(0, height - header_height - 3 - footer_height)

        y = 0
        self._render_header(canvas, Area(0, y, width, header_height))
        y += header_height
        self._render_tabs(canvas, Area(0, y, width, 3))
        y += 3
        self._render_content(canvas, Area(0, y, width, content_height))
        y += content_height
        self._render_footer(canvas, Area(0, y, width, footer_height), footer_lines)
        return canvas

    def _render_header(self, canvas: Canvas, area: Area) -> None:
        canvas.box(area, "class:border")
        inner = area.inner()
        title = self.schema.title or "Configuration"
        canvas.write(inner.x, inner.y, title, "class:primary bold", limit=inner.right)
        if self.schema.description:
            canvas.write(inner.x, inner.y + 1, self.schema.description, "class:text", limit=inner.right)

    def _render_tabs(self, canvas: Canvas, area: Area) -> None:
        visible = self.visible_sections()
        titles = [f"{section.icon} {section.title}" if section.icon else section.title for _, section in visible]
        if not titles:
            canvas.box(area, "class:border", title="Sections")
            return
        indices = [index for index, _ in visible]
        selected = indices.index(self.current_section) if self.current_section in indices else 0
        widths = [get_cwidth(title) + 3 for title in titles]
        start, end = tab_window(widths, selected, max(0, area.width - 4))
        if start > 0 and end < len(titles):
            label = "Sections ← ··· →"
        elif start > 0:
            label = "Sections ←"
        elif end < len(titles):
            label = "Sections →"
        else:
            label = "Sections"
        canvas.box(area, "class:border", title=label)
        inner = area.inner()
        x = inner.x
        for position in range(start, end):
            if position > start:
                x = canvas.write(x, inner.y, "│", "class:border", limit=inner.right)
            style = "class:primary bold" if position == selected else "class:text"
            x = canvas.write(x, inner.y, f" {titles[position]} ", style, limit=inner.right)

    def _render_content(self, canvas: Canvas, area: Area) -> None:
        section = self.section()
        if section is None or area.height < 2:
            return
        canvas.box(area, "class:border", title=f"{section.title} (↑↓ navigate, Enter edit, Space toggle)")
        inner = area.inner()
        rows, visual_index = self._content_rows(section)
        current_row = visual_index[self.current_field] if self.current_field < len(visual_index) else 0
        offset = max(0, current_row - inner.height + 1)
        for line, fragments in enumerate(rows[offset : offset + inner.height]):
            row = offset + line
            y = inner.y + line
            focused = row == current_row and not self.edit_mode
            if focused:
                canvas.fill(Area(inner.x, y, inner.width, 1), "class:highlight")
                fragments = [("class:highlight", HIGHLIGHT_SYMBOL)] + [
                    (f"{style} class:highlight", text) for style, text in fragments
                ]
            else:
                fragments = [("", " " * len(HIGHLIGHT_SYMBOL))] + fragments
            canvas.write_fragments(inner.x, y, fragments, limit=inner.right)

        widget = self.widgets.get(self.active_field) if self.active_field else None
        if widget is not None and 0 <= current_row - offset < inner.height:
            row_area = Area(
                inner.x + len(HIGHLIGHT_SYMBOL),
                inner.y + current_row - offset,
                max(0, inner.width - len(HIGHLIGHT_SYMBOL)),
                1,
            )
            canvas.fill(row_area)
            widget.paint(canvas, row_area, True, self.theme)

    def _content_rows(self, section: SchemaSection) -> tuple[list[list[Fragment]], list[int]]:
        rows: list[list[Fragment]] = []
        visual_index: list[int] = []
        subsection: Optional[str] = None
        for position, schema_field in enumerate(section.fields):
            if schema_field.subsection and schema_field.subsection != subsection:
                if rows:
                    rows.append([])
                rows.append(
                    [
                        ("class:dim", f"{SUBSECTION_RULE} "),
                        ("class:secondary bold", schema_field.subsection),
                        ("class:dim", " " + SUBSECTION_RULE * 10),
                    ]
                )
                subsection = schema_field.subsection
            key = section.qualified_key(schema_field)
            if self.active_field == key:
                style = "class:primary bold"
            elif position == self.current_field:
                style = "class:warning"
            else:
                style = "class:text"
            rows.append(
                [
                    ("bold", f"{schema_field.label}: "),
                    (style, display_value(self.values.get(key, schema_field.fallback_value()))),
                ]
            )
            visual_index.append(len(rows) - 1)
        return rows, visual_index

    def _footer_lines(self) -> list[list[Fragment]]:
        controls: list[Fragment] = [
            ("class:primary", "Tab/←→"),
            ("", " sections  "),
            ("class:primary", "↑↓"),
            ("", " fields  "),
            ("class:primary", "Enter"),
            ("", " edit  "),
        ]
        schema_field = self.field()
        if schema_field is not None and not self.edit_mode:
            if isinstance(schema_field.field_type, PathType):
                controls += [("class:primary", "e"), ("", " $EDITOR  ")]
            if schema_field.keybind:
                controls += [("class:primary", schema_field.keybind), ("", " action  ")]
        controls += [("class:primary", "q"), ("", " quit")]
        lines = [controls]
        if self.message:
            lines.append([("class:success", "Status: "), ("", self.message)])
        if schema_field is not None:
            lines.append([("class:secondary", "Help: "), ("class:text", schema_field.description)])
        return lines

    def _render_footer(self, canvas: Canvas, area: Area, lines: list[list[Fragment]]) -> None:
        canvas.box(area, "class:border", title="Controls")
        inner = area.inner()
        for offset, fragments in enumerate(lines[: inner.height]):
            canvas.write_fragments(inner.x, inner.y + offset, fragments, limit=inner.right)

    # ------------------------------------------------------------------
    # Terminal session
    # ------------------------------------------------------------------

    def run(self) -> None:
        asyncio.run(self.run_async())

    async def run_async(self) -> None:
        def _screen() -> StyleAndTextTuples:
            app = get_app_or_none()
            if app is None:
                return []
            size = app.output.get_size()
            return self.render(size.columns, size.rows).to_formatted_text()

        control = FormattedTextControl(_screen, focusable=True, show_cursor=False)
        layout = Layout(Window(content=control, always_hide_cursor=True))
        bindings = KeyBindings()

        @bindings.add(Keys.Any, eager=True)
        def _any(event) -> None:  # type: ignore[no-untyped-def]
            if self.busy:
                log_debug("app", "key.dropped", {"key": str(event.key_sequence[0].key)})
                return
            key = KeyEvent.from_key_press(event.key_sequence[0])
            self.busy = True
            event.app.create_background_task(self._dispatch(event.app, key))

        app: Application[None] = Application(
            layout=layout,
            key_bindings=bindings,
            full_screen=True,
            style=self.theme.style(),
            refresh_interval=REFRESH_INTERVAL,
            before_render=lambda _: self.tick(),
        )
        self._app = app
        try:
            await app.run_async()
        finally:
            self._app = None

    async def _dispatch(self, app: Application[None], key: KeyEvent) -> None:
        try:
            await self.handle_key_async(key)
        finally:
            self.busy = False
        if self.should_quit:
            app.exit()
        else:
            app.invalidate()


def tab_window(widths: list[int], selected: int, available: int) -> tuple[int, int]:
    """Range of tabs to show so that ``selected`` stays in view."""
    if sum(widths) <= available:
        return 0, len(widths)
    left, right = selected, selected + 1
    used = widths[selected]
    while left > 0 or right < len(widths):
        can_left = left > 0 and used + widths[left - 1] <= available
        can_right = right < len(widths) and used + widths[right] <= available
        left_has_more = left > len(widths) - right
        if can_left and (left_has_more or not can_right):
            left -= 1
            used += widths[left]
        elif can_right:
            used += widths[right]
            right += 1
        else:
            break
    return left, right


def display_value(value: Any) -> str:
    if isinstance(value, bool):
        return format_bool(value)
    if isinstance(value, float):
        return format_float(value)
    if value is None:
        return ""
    return str(value)


def coerce_text(field_type: FieldType, text: str) -> Any:
    """Convert text produced by an editor or command to the field's value type."""
    if isinstance(field_type, NumberType):
        return int(text)
    if isinstance(field_type, FloatType):
        return float(text)
    if isinstance(field_type, BooleanType):
        lowered = text.strip().lower()
        if lowered not in {"true", "false"}:
            raise ValueError(f"expected true or false, got {text!r}")
        return lowered == "true"
    return text


def build_widget(schema_field: SchemaField, value: Any, options: list[str]) -> Widget:
    field_type = schema_field.field_type
    label = schema_field.label
    if isinstance(field_type, BooleanType):
        return Toggle(label, value if isinstance(value, bool) else field_type.default)
    if isinstance(field_type, NumberType):
        initial = value if isinstance(value, int) and not isinstance(value, bool) else field_type.default
        return NumberInput(label, initial or 0, min=field_type.min, max=field_type.max)
    if isinstance(field_type, FloatType):
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            initial = float(value)
        else:
            initial = field_type.default or 0.0
        return FloatInput(label, initial, min=field_type.min, max=field_type.max, step=field_type.step)
    if isinstance(field_type, EnumType):
        selected = value if isinstance(value, str) else field_type.default
        if schema_field.ui_widget is UIWidget.DROPDOWN_SEARCHABLE:
            return SearchableDropdown(label, options, selected)
        return Dropdown(label, options, selected)
    text = value if isinstance(value, str) else (field_type.default or "")
    max_length = field_type.max_length if isinstance(field_type, StringType) else None
    return TextInput(label, text, max_length=max_length)
