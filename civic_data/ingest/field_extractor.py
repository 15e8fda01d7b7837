"""Dotted-path field extraction over loosely typed JSON documents."""

import math
from typing import Any, Optional

from ..errors import FieldNotFound, ParseError

WHOLE_DOCUMENT = "<document>"


def extract(document: Any, dotted_path: Optional[str]) -> Any:
    """
    Descend into a parsed JSON document one key at a time.

    Args:
        document: Parsed JSON (dict, list, scalar or None)
        dotted_path: Path like "data.population.total"; empty means the whole document

    Returns:
        The resolved value, never None

    Raises:
        FieldNotFound: If any segment is absent or resolves to null, or the
        whole document is null when no path is given
        ParseError: If the value is a non-finite number (JSON 1e400 loads as inf)
    """
    if dotted_path:
        value = _descend(document, dotted_path.split("."), dotted_path)
    elif document is None:
        raise FieldNotFound(WHOLE_DOCUMENT)
    else:
        value = document

    if isinstance(value, float) and not math.isfinite(value):
        raise ParseError(f"Field {dotted_path or WHOLE_DOCUMENT} is not a finite number")
    return value


def _descend(node: Any, segments: list, full_path: str) -> Any:
    if not segments:
        if node is None:
            raise FieldNotFound(full_path)
        return node

    segment, rest = segments[0], segments[1:]
    if isinstance(node, dict):
        if segment not in node:
            raise FieldNotFound(full_path, segment)
        child = node[segment]
    elif isinstance(node, list):
        # Sequences are indexed by position
        try:
            child = node[int(segment)]
        except (ValueError, IndexError):
            raise FieldNotFound(full_path, segment)
    else:
        raise FieldNotFound(full_path, segment)

    if child is None:
        raise FieldNotFound(full_path, segment)
    return _descend(child, rest, full_path)


def coerce_number(value: Any) -> float:
    """
    Parse a value as a number.

    Accepts ints, floats and numeric strings (thousands separators allowed).
    Booleans, NaN, infinities and anything else raise ParseError.
    """
    if isinstance(value, bool):
        raise ParseError(f"Expected a number, got boolean {value!r}")
    if isinstance(value, int):
        try:
            float(value)
        except OverflowError:
            raise ParseError(f"Value {value} is out of range")
        number = value
    elif isinstance(value, float):
        number = value
    elif isinstance(value, str):
        try:
            number = float(value.strip().replace(",", ""))
        except ValueError:
            raise ParseError(f"Value {value!r} is not numeric")
    else:
        raise ParseError(f"Expected a number, got {type(value).__name__}")

    if isinstance(number, float) and not math.isfinite(number):
        raise ParseError(f"Value {value!r} is not numeric")
    return number


def try_number(value: Any) -> Optional[float]:
    """coerce_number that returns None instead of raising."""
    try:
        return coerce_number(value)
    except ParseError:
        return None
