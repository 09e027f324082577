# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Key path normalization.

A key path is a tuple of segments addressing a location in a nested
document. Each segment is either a field name (str) or a list index
(non-negative int). The empty tuple addresses the document itself.

Accepted keys:
    - None, '' or an empty sequence: the empty key path
    - int: a single index segment
    - str: a dotted path, 'a.b.0' -> ('a', 'b', 0)
    - sequence: one segment per item, ['a', '0'] -> ('a', 0)

Digit-only strings become indices. Empty segments produced by dotted
strings ('a..b', '.a', 'a.') are dropped.

Example:
    >>> make_key_path('address.lines.0')
    ('address', 'lines', 0)
    >>> format_field(('address', 'lines', 0))
    'data.address.lines.0'
"""

from __future__ import annotations

from typing import Any, Union

from .exceptions import KeyPathError

Segment = Union[str, int]
KeyPath = tuple[Segment, ...]

FIELD_ROOT = 'data'


def _make_segment(segment: Any) -> Segment:
    """Normalize a single segment, converting digit-only strings to int."""
    if isinstance(segment, bool):
        raise KeyPathError(f"Invalid key path segment: {segment!r}")
    if isinstance(segment, int):
        if segment < 0:
            raise KeyPathError(f"Negative index in key path: {segment}")
        return segment
    if isinstance(segment, str):
        return int(segment) if segment.isdigit() else segment
    raise KeyPathError(
        f"Key path segment must be str or int, not {type(segment).__name__}"
    )


def make_key_path(key: Any = None) -> KeyPath:
    """Normalize a key into a key path.

    Args:
        key: None, a segment, a dotted string or a sequence of segments.

    Returns:
        Tuple of str/int segments.

    Raises:
        KeyPathError: If a segment is a negative int, a bool, or of an
            unsupported type.
    """
    if key is None:
        return ()
    if isinstance(key, str):
        return tuple(_make_segment(part) for part in key.split('.') if part)
    if isinstance(key, (int, bool)):
        return (_make_segment(key),)
    if isinstance(key, (list, tuple)):
        return tuple(_make_segment(part) for part in key if part != '')
    raise KeyPathError(f"Cannot make a key path from {type(key).__name__}")


def format_field(key_path: KeyPath) -> str:
    """Return the error-record field string for a key path.

    The empty key path maps to 'data'.
    """
    return '.'.join([FIELD_ROOT, *(str(segment) for segment in key_path)])


def parse_field(field: str) -> KeyPath:
    """Return the key path addressed by an error-record field string.

    Raises:
        KeyPathError: If the field is not rooted at 'data'.
    """
    head, _, rest = field.partition('.')
    if head != FIELD_ROOT:
        raise KeyPathError(f"Error field must start with '{FIELD_ROOT}': {field!r}")
    return make_key_path(rest)
