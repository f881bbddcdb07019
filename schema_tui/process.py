from __future__ import annotations

import asyncio
import os
import shlex
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

SHELL = "sh"


@dataclass(frozen=True)
class CommandResult:
    returncode: int
    stdout: bytes
    stderr: bytes

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def stderr_text(self) -> str:
        return self.stderr.decode("utf-8", errors="replace").strip()


class ProcessRunner:
    """Spawns every child process: option scripts, custom commands and editors."""

    def run_shell(
        self, command: str, *, env: Optional[Mapping[str, str]] = None
    ) -> CommandResult:
        proc = subprocess.run(
            [SHELL, "-c", command],
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            env=_merged_env(env),
        )
        return CommandResult(proc.returncode, proc.stdout or b"", proc.stderr or b"")

    async def run_shell_async(
        self, command: str, *, env: Optional[Mapping[str, str]] = None
    ) -> CommandResult:
        proc = await asyncio.create_subprocess_exec(
            SHELL,
            "-c",
            command,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            env=_merged_env(env),
        )
        stdout, stderr = await proc.communicate()
        return CommandResult(proc.returncode or 0, stdout or b"", stderr or b"")

    def run_editor(self, editor: str, path: Path) -> int:
        """Run editor on path attached to the terminal; returns the exit code."""
        argv = shlex.split(editor) or ["nano"]
        return subprocess.call([*argv, str(path)])


def _merged_env(extra: Optional[Mapping[str, str]]) -> Optional[dict[str, str]]:
    if not extra:
        return None
    env = dict(os.environ)
    env.update(extra)
    return env
