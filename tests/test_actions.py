import os
import unittest
from pathlib import Path
from typing import Mapping, Optional

from schema_tui.process import CommandResult, ProcessRunner
from schema_tui.schema import FileTypeFilter
from schema_tui.tui.actions import (
    DEFAULT_EDITOR,
    CustomCommand,
    ExternalEditor,
    default_editor,
    extension_for,
)


class FakeRunner(ProcessRunner):
    def __init__(self, *, stdout: bytes = b"", returncode: int = 0, edit_to: Optional[str] = None) -> None:
        self.stdout = stdout
        self.returncode = returncode
        self.edit_to = edit_to
        self.shell_calls: list[tuple[str, Optional[Mapping[str, str]]]] = []
        self.editor_calls: list[tuple[str, Path]] = []
        self.seen_content: Optional[str] = None

    def run_shell(self, command: str, *, env: Optional[Mapping[str, str]] = None) -> CommandResult:
        self.shell_calls.append((command, env))
        return CommandResult(self.returncode, self.stdout, b"")

    def run_editor(self, editor: str, path: Path) -> int:
        self.editor_calls.append((editor, path))
        self.seen_content = path.read_text(encoding="utf-8")
        if self.edit_to is not None:
            path.write_text(self.edit_to, encoding="utf-8")
        return self.returncode


class ExternalEditorTests(unittest.TestCase):
    def setUp(self) -> None:
        self._saved_editor = os.environ.get("EDITOR")

    def tearDown(self) -> None:
        if self._saved_editor is None:
            os.environ.pop("EDITOR", None)
        else:
            os.environ["EDITOR"] = self._saved_editor

    def test_default_editor_falls_back(self) -> None:
        os.environ.pop("EDITOR", None)
        self.assertEqual(default_editor(), DEFAULT_EDITOR)
        os.environ["EDITOR"] = "vim -u NONE"
        self.assertEqual(ExternalEditor.for_file_type(FileTypeFilter.JSON), ExternalEditor("vim -u NONE", "json"))

    def test_extension_for(self) -> None:
        self.assertEqual(extension_for(FileTypeFilter.JSON), "json")
        self.assertEqual(extension_for(FileTypeFilter.IMAGE), "png")
        self.assertEqual(extension_for(FileTypeFilter.ANY), "txt")
        self.assertEqual(extension_for(None), "txt")

    def test_edited_content_is_returned_trimmed(self) -> None:
        runner = FakeRunner(edit_to="/srv/new.json\n")
        result = ExternalEditor("vi", "json").execute("/srv/old.json", runner)
        self.assertEqual(result, "/srv/new.json")
        self.assertEqual(runner.seen_content, "/srv/old.json")
        editor, path = runner.editor_calls[0]
        self.assertEqual(editor, "vi")
        self.assertEqual(path.suffix, ".json")
        self.assertFalse(path.exists())

    def test_unchanged_or_failed_edit_returns_none(self) -> None:
        self.assertIsNone(ExternalEditor("vi").execute("same", FakeRunner()))
        runner = FakeRunner(edit_to="changed", returncode=1)
        self.assertIsNone(ExternalEditor("vi").execute("same", runner))
        self.assertFalse(runner.editor_calls[0][1].exists())


class CustomCommandTests(unittest.TestCase):
    def test_stdout_becomes_new_value(self) -> None:
        runner = FakeRunner(stdout=b"  picked\n")
        self.assertEqual(CustomCommand("pick").execute("old", runner), "picked")
        self.assertEqual(runner.shell_calls, [("pick", {"CURRENT_VALUE": "old"})])

    def test_no_change_returns_none(self) -> None:
        self.assertIsNone(CustomCommand("pick").execute("old", FakeRunner(stdout=b"old\n")))
        self.assertIsNone(CustomCommand("pick").execute("old", FakeRunner(stdout=b"  \n")))
        self.assertIsNone(CustomCommand("pick").execute("old", FakeRunner(stdout=b"new", returncode=2)))


class ProcessRunnerTests(unittest.IsolatedAsyncioTestCase):
    def test_run_shell_passes_environment(self) -> None:
        result = ProcessRunner().run_shell('printf "%s" "$CURRENT_VALUE"', env={"CURRENT_VALUE": "abc"})
        self.assertTrue(result.ok)
        self.assertEqual(result.stdout, b"abc")

    def test_run_shell_reports_failure(self) -> None:
        result = ProcessRunner().run_shell("echo oops >&2; exit 3")
        self.assertFalse(result.ok)
        self.assertEqual(result.returncode, 3)
        self.assertEqual(result.stderr_text(), "oops")

    async def test_run_shell_async(self) -> None:
        result = await ProcessRunner().run_shell_async("echo one; echo two")
        self.assertEqual(result.stdout.decode().split(), ["one", "two"])


if __name__ == "__main__":
    unittest.main()
