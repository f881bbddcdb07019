"""Terminal interface: controller, builder, widgets and rendering primitives."""

from .actions import CustomCommand, ExternalEditor, FieldAction
from .app import SchemaTUI
from .builder import SchemaTUIBuilder
from .conditions import evaluate_condition
from .keys import KeyEvent
from .theme import Theme

__all__ = [
    "CustomCommand",
    "ExternalEditor",
    "FieldAction",
    "KeyEvent",
    "SchemaTUI",
    "SchemaTUIBuilder",
    "Theme",
    "evaluate_condition",
]
