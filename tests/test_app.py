import os
import tempfile
import unittest
from pathlib import Path

from schema_tui.process import CommandResult, ProcessRunner
from schema_tui.schema import SchemaParser
from schema_tui.tui import CustomCommand, SchemaTUI
from schema_tui.tui.app import STATUS_TIMEOUT, build_widget, coerce_text, display_value, tab_window
from schema_tui.tui.keys import BACKSPACE, ENTER, ESCAPE, UP, KeyEvent
from schema_tui.tui.widgets import Dropdown, FloatInput, NumberInput, SearchableDropdown, TextInput, Toggle

SCHEMA = {
    "version": "1.0",
    "title": "Demo Settings",
    "description": "Settings used by the controller tests",
    "sections": [
        {
            "id": "general",
            "title": "General",
            "icon": "⚙",
            "fields": [
                {
                    "id": "theme",
                    "label": "Theme",
                    "description": "Color scheme",
                    "type": "enum",
                    "ui_widget": "dropdown",
                    "options_source": {"type": "static", "values": ["Light", "Dark", "Auto"]},
                    "default": "Dark",
                },
                {
                    "id": "advanced",
                    "label": "Advanced",
                    "description": "Show expert settings",
                    "type": "boolean",
                    "ui_widget": "toggle",
                    "default": False,
                },
                {
                    "id": "name",
                    "label": "Name",
                    "description": "Display name",
                    "type": "string",
                    "default": "demo",
                },
                {
                    "id": "threads",
                    "label": "Threads",
                    "description": "Worker threads",
                    "type": "number",
                    "default": 4,
                    "min": 1,
                    "max": 8,
                },
                {
                    "id": "wallpaper",
                    "label": "Wallpaper",
                    "description": "Settings file",
                    "type": "path",
                    "file_type": "json",
                    "default": "/data/old.json",
                },
            ],
        },
        {
            "id": "model",
            "title": "Model",
            "fields": [
                {
                    "id": "name",
                    "label": "Model",
                    "description": "Model for the current theme",
                    "type": "enum",
                    "ui_widget": "dropdown_searchable",
                    "subsection": "Models",
                    "options_source": {
                        "type": "script",
                        "command": "list ${general.theme}",
                        "depends_on": ["general.theme"],
                    },
                }
            ],
        },
        {
            "id": "expert",
            "title": "Expert",
            "visible_when": "general.advanced == true",
            "fields": [
                {
                    "id": "level",
                    "label": "Level",
                    "description": "Expert level",
                    "type": "string",
                    "keybind": "ctrl+e",
                }
            ],
        },
    ],
}


class FakeClock:
    def __init__(self) -> None:
        self.now = 500.0

    def __call__(self) -> float:
        return self.now


class FakeRunner(ProcessRunner):
    def __init__(self, stdout: bytes = b'["a","b"]', returncode: int = 0) -> None:
        self.stdout = stdout
        self.returncode = returncode
        self.calls: list[str] = []
        self.envs: list[object] = []
        self.editor_calls: list[tuple[str, str]] = []
        self.editor_output: str | None = None

    def run_shell(self, command, *, env=None):  # type: ignore[no-untyped-def]
        self.calls.append(command)
        self.envs.append(env)
        return CommandResult(self.returncode, self.stdout, b"failed")

    async def run_shell_async(self, command, *, env=None):  # type: ignore[no-untyped-def]
        return self.run_shell(command, env=env)

    def run_editor(self, editor, path):  # type: ignore[no-untyped-def]
        self.editor_calls.append((editor, path.name))
        if self.editor_output is not None:
            path.write_text(self.editor_output, encoding="utf-8")
        return 0


def key(name: str) -> KeyEvent:
    return KeyEvent.character(name) if len(name) == 1 else KeyEvent.named(name)


class SchemaTUITestCase(unittest.TestCase):
    def make_app(self, values=None, **kwargs):  # type: ignore[no-untyped-def]
        self.runner = kwargs.pop("runner", FakeRunner())
        self.clock = FakeClock()
        schema = SchemaParser.from_dict(SCHEMA)
        return SchemaTUI(schema, values or {}, runner=self.runner, clock=self.clock, **kwargs)


class NavigationTests(SchemaTUITestCase):
    def test_defaults_are_merged(self) -> None:
        app = self.make_app({"general.name": "custom"})
        self.assertEqual(app.get_value("general.theme"), "Dark")
        self.assertEqual(app.get_value("general.name"), "custom")
        self.assertIsNone(app.get_value("model.name"))

    def test_defaults_can_be_skipped(self) -> None:
        app = self.make_app(merge_defaults=False)
        self.assertEqual(app.get_all_values(), {})

    def test_section_navigation_skips_hidden_sections(self) -> None:
        app = self.make_app()
        app.next_section()
        self.assertEqual(app.current_section, 1)
        app.next_section()
        self.assertEqual(app.current_section, 0)
        app.previous_section()
        self.assertEqual(app.current_section, 1)

    def test_hidden_current_section_falls_back_to_first_visible(self) -> None:
        app = self.make_app()
        app.current_section = 2
        app.current_field = 0
        app.previous_section()
        self.assertEqual(app.current_section, 0)

    def test_field_navigation_wraps_and_resets_on_section_change(self) -> None:
        app = self.make_app()
        app.handle_key(key(UP))
        self.assertEqual(app.current_field, 4)
        app.handle_key(key("j"))
        self.assertEqual(app.current_field, 0)
        app.handle_key(key("k"))
        app.handle_key(key("l"))
        self.assertEqual((app.current_section, app.current_field), (1, 0))

    def test_quit_keys(self) -> None:
        for event in (key("q"), key(ESCAPE), KeyEvent.character("c", ctrl=True)):
            with self.subTest(event=event):
                app = self.make_app()
                app.handle_key(event)
                self.assertTrue(app.should_quit)


class VisibilityTests(SchemaTUITestCase):
    def test_expert_section_follows_advanced_flag(self) -> None:
        app = self.make_app(merge_defaults=False)
        titles = lambda: [section.id for _, section in app.visible_sections()]  # noqa: E731
        self.assertIn("expert", titles())

        app.values["general.advanced"] = False
        self.assertNotIn("expert", titles())

        app.next_field()
        app.handle_key(key(ENTER))
        self.assertTrue(app.get_value("general.advanced"))
        self.assertIn("expert", titles())


class EditingTests(SchemaTUITestCase):
    def test_theme_dropdown_scenario(self) -> None:
        app = self.make_app()
        seen: list[tuple[str, object]] = []
        app.on_change(lambda k, v: seen.append((k, v)))

        app.handle_key(key(ENTER))
        widget = app.widgets["general.theme"]
        self.assertIsInstance(widget, Dropdown)
        self.assertEqual(widget.selected, 1)

        app.handle_key(key(UP))
        app.handle_key(key(ENTER))
        self.assertEqual(app.get_value("general.theme"), "Light")
        self.assertEqual(seen, [("general.theme", "Light")])
        self.assertFalse(app.edit_mode)
        self.assertEqual(app.widgets, {})

    def test_toggle_commits_immediately(self) -> None:
        app = self.make_app()
        app.next_field()
        app.handle_key(key(" "))
        self.assertTrue(app.get_value("general.advanced"))
        self.assertFalse(app.edit_mode)
        self.assertEqual(app.message, "Saved general.advanced")

    def test_commit_persists_then_notifies_in_order(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config = Path(tmp) / "nested" / "settings.toml"
            app = self.make_app(config_path=config)
            calls: list[tuple[str, str, object]] = []
            app.on_change(lambda k, v: calls.append(("first", k, v)))
            app.on_change(lambda k, v: calls.append(("second", k, v)))

            app.next_field()
            app.next_field()
            app.handle_key(key(ENTER))
            app.handle_key(key("x"))
            self.assertFalse(config.exists())
            app.handle_key(key(ENTER))

            self.assertEqual(app.get_value("general.name"), "demox")
            self.assertIn('name = "demox"', config.read_text(encoding="utf-8"))
            self.assertEqual(
                calls,
                [
                    ("first", "general.name", "demox"),
                    ("second", "general.name", "demox"),
                    ("first", "general.name", "demox"),
                    ("second", "general.name", "demox"),
                ],
            )

    def test_persistence_failure_keeps_value_and_notifies(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            blocker = Path(tmp) / "file"
            blocker.write_text("x", encoding="utf-8")
            app = self.make_app(config_path=blocker / "settings.toml")
            seen: list[object] = []
            app.on_change(lambda k, v: seen.append(v))

            app.next_field()
            app.handle_key(key(ENTER))

            self.assertTrue(app.get_value("general.advanced"))
            self.assertEqual(seen, [True])
            self.assertTrue(app.message.startswith("Failed to save config"))

    def test_cancel_restores_snapshot(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config = Path(tmp) / "settings.toml"
            app = self.make_app(config_path=config)
            seen: list[object] = []
            app.on_change(lambda k, v: seen.append(v))

            app.current_field = 2
            app.handle_key(key(ENTER))
            app.handle_key(key("x"))
            self.assertEqual(app.get_value("general.name"), "demox")
            app.handle_key(key(ESCAPE))

            self.assertEqual(app.get_value("general.name"), "demo")
            self.assertEqual(seen, ["demox", "demo"])
            self.assertFalse(app.edit_mode)
            self.assertEqual(app.widgets, {})
            self.assertEqual(app.message, "Cancelled")
            self.assertFalse(config.exists())

    def test_cancel_without_live_edits_is_silent(self) -> None:
        app = self.make_app()
        seen: list[object] = []
        app.on_change(lambda k, v: seen.append(v))
        app.handle_key(key(ENTER))
        app.handle_key(key(ESCAPE))
        self.assertEqual(seen, [])
        self.assertEqual(app.get_value("general.theme"), "Dark")

    def test_invalid_number_keeps_editing(self) -> None:
        app = self.make_app()
        app.current_field = 3
        app.handle_key(key(ENTER))
        app.handle_key(key("9"))
        app.handle_key(key(ENTER))
        self.assertTrue(app.edit_mode)
        self.assertEqual(app.get_value("general.threads"), 4)
        app.handle_key(key(BACKSPACE))
        app.handle_key(key(BACKSPACE))
        app.handle_key(key("7"))
        app.handle_key(key(ENTER))
        self.assertEqual(app.get_value("general.threads"), 7)

    def test_script_options_resolved_with_substitution(self) -> None:
        app = self.make_app()
        app.next_section()
        app.handle_key(key(ENTER))
        self.assertEqual(self.runner.calls, ["list Dark"])
        widget = app.widgets["model.name"]
        self.assertIsInstance(widget, SearchableDropdown)
        self.assertEqual(widget.options, ["a", "b"])

    def test_option_failure_degrades_to_empty_list(self) -> None:
        app = self.make_app(runner=FakeRunner(returncode=1))
        app.next_section()
        app.handle_key(key(ENTER))
        self.assertTrue(app.edit_mode)
        self.assertEqual(app.widgets["model.name"].options, [])
        self.assertTrue(app.message.startswith("Options unavailable for model.name"))
        app.handle_key(key(ENTER))
        self.assertTrue(app.edit_mode)

    def test_commit_discards_widgets_depending_on_key(self) -> None:
        app = self.make_app()
        app.widgets["model.name"] = Dropdown("Model", ["stale"])
        app.handle_key(key(ENTER))
        app.handle_key(key(ENTER))
        self.assertNotIn("model.name", app.widgets)


class FieldActionTests(SchemaTUITestCase):
    def setUp(self) -> None:
        self._editor = os.environ.get("EDITOR")
        os.environ["EDITOR"] = "fake-editor"

    def tearDown(self) -> None:
        if self._editor is not None:
            os.environ["EDITOR"] = self._editor
        else:
            os.environ.pop("EDITOR", None)

    def test_external_editor_on_path_field(self) -> None:
        app = self.make_app()
        self.runner.editor_output = "/data/new.json\n"
        app.current_field = 4
        app.handle_key(key("e"))
        self.assertEqual(self.runner.editor_calls, [("fake-editor", "schema-tui-edit.json")])
        self.assertEqual(app.get_value("general.wallpaper"), "/data/new.json")
        self.assertEqual(app.message, "Updated general.wallpaper from external editor")

    def test_external_editor_without_changes(self) -> None:
        app = self.make_app()
        app.current_field = 4
        app.handle_key(key("e"))
        self.assertEqual(app.get_value("general.wallpaper"), "/data/old.json")
        self.assertEqual(app.message, "External editor cancelled or no changes")

    def test_e_on_non_path_field_does_nothing(self) -> None:
        app = self.make_app()
        app.handle_key(key("e"))
        self.assertEqual(self.runner.editor_calls, [])
        self.assertFalse(app.edit_mode)

    def test_keybind_runs_registered_command(self) -> None:
        app = self.make_app({"general.advanced": True}, runner=FakeRunner(stdout=b"hello\n"))
        app.register_field_action("expert.level", CustomCommand("make-level"))
        app.next_section()
        app.next_section()
        self.assertEqual(app.current_section, 2)
        app.handle_key(KeyEvent.character("e", ctrl=True))
        self.assertEqual(self.runner.calls, ["make-level"])
        self.assertEqual(self.runner.envs, [{"CURRENT_VALUE": ""}])
        self.assertEqual(app.get_value("expert.level"), "hello")
        self.assertEqual(app.message, "Updated expert.level from command")


class StatusAndRenderTests(SchemaTUITestCase):
    def test_tick_clears_status_after_timeout(self) -> None:
        app = self.make_app()
        app.set_status("Saved")
        self.clock.now += STATUS_TIMEOUT - 1
        app.tick()
        self.assertEqual(app.message, "Saved")
        self.clock.now += 1
        app.tick()
        self.assertIsNone(app.message)

    def test_render_layout(self) -> None:
        app = self.make_app()
        text = app.render(100, 30).text()
        self.assertIn("Demo Settings", text)
        self.assertIn("Sections", text)
        self.assertIn("⚙ General", text)
        self.assertNotIn("Expert", text)
        self.assertIn("» Theme: Dark", text)
        self.assertIn("Advanced: ✗ false", text)
        self.assertIn("Help: Color scheme", text)
        self.assertIn("q quit", text)

    def test_render_subsection_and_popup(self) -> None:
        app = self.make_app()
        app.next_section()
        app.handle_key(key(ENTER))
        text = app.render(100, 30).text()
        self.assertIn("━━━ Models", text)
        self.assertIn("Search Model: (type to filter)", text)

    def test_render_path_field_shows_editor_hint(self) -> None:
        app = self.make_app()
        app.current_field = 4
        self.assertIn("e $EDITOR", app.render(100, 30).text())


class AsyncActivationTests(unittest.IsolatedAsyncioTestCase):
    async def test_async_activation_resolves_script(self) -> None:
        runner = FakeRunner()
        app = SchemaTUI(SchemaParser.from_dict(SCHEMA), {}, runner=runner)
        app.next_section()
        await app.handle_key_async(key(ENTER))
        self.assertEqual(runner.calls, ["list Dark"])
        self.assertTrue(app.edit_mode)
        self.assertFalse(app.busy)
        await app.handle_key_async(key(ENTER))
        self.assertEqual(app.get_value("model.name"), "a")

    async def test_async_activation_degrades_on_failure(self) -> None:
        app = SchemaTUI(SchemaParser.from_dict(SCHEMA), {}, runner=FakeRunner(returncode=3))
        app.next_section()
        await app.handle_key_async(key(ENTER))
        self.assertEqual(app.widgets["model.name"].options, [])
        self.assertFalse(app.busy)

    async def test_field_action_runs_inline_without_application(self) -> None:
        runner = FakeRunner(stdout=b"/srv/x.json")
        app = SchemaTUI(SchemaParser.from_dict(SCHEMA), {}, runner=runner)
        app.register_field_action("general.wallpaper", CustomCommand("pick"))
        app.current_field = 4
        await app.handle_key_async(key("e"))
        self.assertEqual(app.get_value("general.wallpaper"), "/srv/x.json")


class HelperTests(unittest.TestCase):
    def test_tab_window_keeps_selection_visible(self) -> None:
        self.assertEqual(tab_window([5, 5, 5], 1, 20), (0, 3))
        start, end = tab_window([10] * 6, 5, 25)
        self.assertTrue(start <= 5 < end)
        self.assertLessEqual((end - start) * 10, 25)

    def test_display_value(self) -> None:
        self.assertEqual(display_value(True), "✓ true")
        self.assertEqual(display_value(2.0), "2")
        self.assertEqual(display_value(None), "")

    def test_coerce_text(self) -> None:
        schema = SchemaParser.from_dict(SCHEMA)
        threads = schema.find_field("general.threads")
        advanced = schema.find_field("general.advanced")
        self.assertEqual(coerce_text(threads.field_type, "5"), 5)
        self.assertIs(coerce_text(advanced.field_type, "TRUE"), True)
        with self.assertRaises(ValueError):
            coerce_text(advanced.field_type, "maybe")

    def test_build_widget_by_field_type(self) -> None:
        schema = SchemaParser.from_dict(SCHEMA)
        cases = {
            "general.theme": Dropdown,
            "general.advanced": Toggle,
            "general.name": TextInput,
            "general.threads": NumberInput,
            "general.wallpaper": TextInput,
            "model.name": SearchableDropdown,
        }
        for field_key, widget_type in cases.items():
            with self.subTest(field=field_key):
                schema_field = schema.find_field(field_key)
                widget = build_widget(schema_field, None, [])
                self.assertIsInstance(widget, widget_type)
        self.assertNotIsInstance(build_widget(schema.find_field("general.name"), "x", []), FloatInput)


if __name__ == "__main__":
    unittest.main()
