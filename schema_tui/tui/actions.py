from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from ..process import ProcessRunner
from ..schema import FileTypeFilter

DEFAULT_EDITOR = "nano"
EDIT_FILE_STEM = "schema-tui-edit"


def default_editor() -> str:
    return os.environ.get("EDITOR") or DEFAULT_EDITOR


def extension_for(file_type: Optional[FileTypeFilter]) -> str:
    if file_type is FileTypeFilter.JSON:
        return "json"
    if file_type is FileTypeFilter.IMAGE:
        return "png"
    return "txt"


@dataclass(frozen=True)
class ExternalEditor:
    """Edit the value in ``$EDITOR`` through a temporary file."""

    editor: str
    extension: str = "txt"

    @classmethod
    def for_file_type(cls, file_type: Optional[FileTypeFilter] = None) -> "ExternalEditor":
        return cls(default_editor(), extension_for(file_type))

    def execute(self, current_value: str, runner: ProcessRunner) -> Optional[str]:
        path = Path(tempfile.gettempdir()) / f"{EDIT_FILE_STEM}.{self.extension}"
        path.write_text(current_value, encoding="utf-8")
        try:
            returncode = runner.run_editor(self.editor, path)
            if returncode != 0:
                return None
            content = path.read_text(encoding="utf-8")
        finally:
            path.unlink(missing_ok=True)
        if content == current_value:
            return None
        return content.strip()


@dataclass(frozen=True)
class CustomCommand:
    """Run ``sh -c command`` with ``CURRENT_VALUE`` set; stdout is the new value."""

    command: str

    def execute(self, current_value: str, runner: ProcessRunner) -> Optional[str]:
        result = runner.run_shell(self.command, env={"CURRENT_VALUE": current_value})
        if not result.ok:
            return None
        new_value = result.stdout.decode("utf-8").strip()
        if not new_value or new_value == current_value:
            return None
        return new_value


FieldAction = Union[ExternalEditor, CustomCommand]
