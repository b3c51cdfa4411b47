"""
equality.py - Structural equality for heterogeneous fetched values

Contract calls come back in whatever shape the decoder produced: a plain
integer, a string, or a record that exposes its fields both by name and by
position. structural_equals() compares any two such values once their
kinds agree, and refuses to compare values of different kinds.
"""

from __future__ import annotations
from collections.abc import Mapping
from typing import Any, Dict

from .core import (
    PRIMITIVE_KINDS, POSITIONAL_DUPLICATE_KEYS,
    ValueKind, value_kind,
    TypeMismatchError, UnsupportedComparisonError,
)


def _record_entries(value: Any) -> Dict[str, Any]:
    """
    Return the comparable entries of a record keyed by string.

    Lists and tuples are keyed by position. In a record that also exposes
    named keys, positions 0..3 duplicate named fields and are dropped.
    """
    if isinstance(value, Mapping):
        entries = {str(key): item for key, item in value.items()}
    else:
        entries = {str(index): item for index, item in enumerate(value)}

    has_named_keys = any(not key.isdigit() for key in entries)
    if not has_named_keys:
        return entries
    return {
        key: item for key, item in entries.items()
        if key not in POSITIONAL_DUPLICATE_KEYS
    }


def structural_equals(a: Any, b: Any) -> bool:
    """
    Deep equality over big integers, primitives and records.

    Rules:
        1. Values of different kinds raise TypeMismatchError.
        2. Big integers and primitives compare by exact equality.
        3. Records must expose the same number of keys; every key of `a`
           must exist on `b` and the entries are compared recursively.
        4. Positional duplicates (0..3) of named records are ignored.
        5. Unsupported kinds raise UnsupportedComparisonError.

    Raises:
        TypeMismatchError: If a and b are of different kinds.
        UnsupportedComparisonError: If the shared kind cannot be compared.
    """
    kind_a = value_kind(a)
    kind_b = value_kind(b)
    if kind_a is not kind_b:
        raise TypeMismatchError(
            f"Error asserting state - cannot compare objects of different types "
            f"({kind_a.value} != {kind_b.value})"
        )

    if kind_a is ValueKind.BIG_INTEGER or kind_a in PRIMITIVE_KINDS:
        return a == b

    if kind_a is ValueKind.RECORD:
        entries_a = _record_entries(a)
        entries_b = _record_entries(b)
        if len(entries_a) != len(entries_b):
            return False
        for key, item in entries_a.items():
            if key not in entries_b:
                return False
            if not structural_equals(item, entries_b[key]):
                return False
        return True

    raise UnsupportedComparisonError(
        f"Error asserting state - unsupported comparison type ({type(a).__name__})"
    )
