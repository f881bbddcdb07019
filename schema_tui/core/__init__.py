"""Core session helpers."""

from .session_log import SessionLogger, resolve_debug_config

__all__ = ["SessionLogger", "resolve_debug_config"]
