from __future__ import annotations

from typing import Any, Mapping, Optional

OPERATORS = ("==", "!=")


def evaluate_condition(condition: str, values: Mapping[str, Any]) -> bool:
    """Evaluate a ``key == literal`` / ``key != literal`` visibility predicate.

    Anything the evaluator cannot decide (unknown key, mismatched types,
    malformed predicate) counts as visible.
    """
    parsed = _split(condition)
    if parsed is None:
        return True
    key, operator, literal = parsed
    if key not in values:
        return True
    matched = _matches(values[key], literal)
    if matched is None:
        return True
    return matched if operator == "==" else not matched


def _split(condition: str) -> Optional[tuple[str, str, str]]:
    text = condition.strip()
    for operator in OPERATORS:
        left, sep, right = text.partition(operator)
        if sep:
            key = left.strip()
            if not key:
                return None
            return key, operator, right.strip()
    return None


def _matches(actual: Any, literal: str) -> Optional[bool]:
    if isinstance(actual, bool):
        if literal == "true":
            return actual
        if literal == "false":
            return not actual
        return None
    if isinstance(actual, str):
        return actual == literal.strip("\"'")
    if isinstance(actual, int):
        try:
            return actual == int(literal)
        except ValueError:
            return None
    return None
