from __future__ import annotations

import os
import re

_BRACED_VAR_RE = re.compile(r"\$\{([^}]*)\}")
_BARE_VAR_RE = re.compile(r"\$([A-Za-z0-9_]+)")


def expand_env_vars(text: str) -> str:
    """Expand a leading ``~/`` plus ``${VAR}`` and ``$VAR`` references.

    Unset variables are left as written so the literal text survives.
    """
    result = text
    if result.startswith("~/"):
        result = str(os.path.expanduser("~")) + result[1:]

    def braced(match: re.Match[str]) -> str:
        return os.environ.get(match.group(1), match.group(0))

    def bare(match: re.Match[str]) -> str:
        return os.environ.get(match.group(1), match.group(0))

    result = _BRACED_VAR_RE.sub(braced, result)
    return _BARE_VAR_RE.sub(bare, result)
