"""Normalizadores de input para campos de texto declarativos.

Se aplican tras la coerción a `str` y antes de los validadores del campo.
"""

from __future__ import annotations

import re

KNOWN_OPERATIONS = frozenset(
    {"identity", "none", "noop", "lower", "upper", "title", "strip", "collapse_whitespace"}
)

_WHITESPACE = re.compile(r"\s+")


def apply_input_operation(value: str, operation: str | None) -> str:
    v = value
    if operation is None:
        return v

    op = operation.strip().lower()

    if op in ("identity", "none", "noop"):
        return v
    if op == "lower":
        return v.lower()
    if op == "upper":
        return v.upper()
    if op == "title":
        return v.title()
    if op == "strip":
        return v.strip()
    if op == "collapse_whitespace":
        return _WHITESPACE.sub(" ", v).strip()

    raise ValueError(f"Unknown input operation: {operation!r}")


def apply_input_operations(value: str, operations: list[str] | tuple[str, ...]) -> str:
    for op in operations:
        value = apply_input_operation(value, op)
    return value
