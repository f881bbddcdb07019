"""Edit examples/dynamic_options_schema.json with a host-registered option provider.

Run from the repository root:

    python examples/dynamic_options.py [settings.toml]
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Any, Optional

from rich.console import Console
from rich.table import Table

from schema_tui.tui import SchemaTUI, SchemaTUIBuilder

SCHEMA_PATH = Path(__file__).with_name("dynamic_options_schema.json")


class AudioDevices:
    """Provider for ``expert.device``; a real host would query the sound system."""

    def get_options(self) -> list[str]:
        return ["default", "USB Microphone", "Headset"]


def build(config_path: Optional[Path] = None) -> SchemaTUI:
    builder = (
        SchemaTUIBuilder()
        .schema_file(SCHEMA_PATH)
        .register_option_provider("audio_devices", AudioDevices())
    )
    if config_path is not None:
        builder = builder.config_file(config_path)
    return builder.build()


def main(argv: list[str]) -> None:
    app = build(Path(argv[0]) if argv else None)
    changes: list[tuple[str, Any]] = []
    app.on_change(lambda key, value: changes.append((key, value)))
    asyncio.run(app.run_async())

    table = Table(title="Changes")
    table.add_column("Key")
    table.add_column("Value")
    for key, value in changes:
        table.add_row(key, repr(value))
    Console(stderr=True).print(table)


if __name__ == "__main__":
    main(sys.argv[1:])
