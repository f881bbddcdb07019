"""Dynamic option resolution for enum fields."""

from ..errors import GlobError, OptionError, ScriptError, UnknownProviderError
from .cache import OptionCache
from .resolver import OptionProvider, OptionResolver

__all__ = [
    "GlobError",
    "OptionCache",
    "OptionError",
    "OptionProvider",
    "OptionResolver",
    "ScriptError",
    "UnknownProviderError",
]
