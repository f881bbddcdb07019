from __future__ import annotations

import argparse
import asyncio
import os
import tomllib
from pathlib import Path
from typing import Optional, Sequence

from rich.console import Console
from rich.panel import Panel

from .config.paths import SchemaTuiPaths
from .core.session_log import SessionLogger, log_exception, log_info, set_active_logger
from .errors import SchemaTuiError
from .tui import SchemaTUI, SchemaTUIBuilder, Theme

DEBUG_ENV = "SCHEMA_TUI_DEBUG"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="schema-tui",
        description="schema-tui - edit a TOML config file in a terminal UI driven by a JSON schema",
    )
    parser.add_argument("-v", "--version", action="store_true", help="Show version and exit")
    parser.add_argument("--schema", type=Path, help="Path to the JSON schema document")
    parser.add_argument(
        "--config",
        type=Path,
        help="TOML config file to load and save (created on first change if missing)",
    )
    parser.add_argument(
        "--theme",
        choices=("terminal", "dark", "light"),
        default="terminal",
        help="Color theme (default: terminal)",
    )
    parser.add_argument(
        "--no-defaults",
        action="store_true",
        help="Do not fill missing values from schema defaults",
    )
    parser.add_argument(
        "--debug",
        nargs="?",
        const="all",
        default=None,
        help="Write a Markdown session log: all, session, error, warn, info or debug",
    )
    return parser


def build_app(args: argparse.Namespace) -> SchemaTUI:
    builder = SchemaTUIBuilder().schema_file(args.schema).theme(Theme.named(args.theme))
    if args.config is not None:
        builder = builder.config_file(args.config)
    return builder.merge_defaults(not args.no_defaults).build()


def _print_error(console: Console, title: str, message: str) -> None:
    console.print(Panel(message, title=title, border_style="red"))


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.version:
        from schema_tui import __version__

        print(f"schema-tui {__version__}")
        return
    if args.schema is None:
        parser.error("--schema is required")

    console = Console(stderr=True)
    logger = SessionLogger(SchemaTuiPaths.default(), args.debug or os.environ.get(DEBUG_ENV))
    set_active_logger(logger)
    app: Optional[SchemaTUI] = None
    try:
        logger.log_session_start(
            "cli",
            schema=str(args.schema),
            config=str(args.config) if args.config is not None else None,
        )
        try:
            app = build_app(args)
        except (OSError, tomllib.TOMLDecodeError, SchemaTuiError) as exc:
            log_exception("cli", exc)
            _print_error(console, "schema-tui", f"Failed to start: {exc}")
            raise SystemExit(1) from exc
        asyncio.run(app.run_async())
    except KeyboardInterrupt:
        return
    finally:
        if app is not None:
            log_info("cli", "session.end", app.get_all_values())
        set_active_logger(None)
        logger.close()


if __name__ == "__main__":
    main()
