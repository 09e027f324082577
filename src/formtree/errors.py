# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Error records and key path filtering.

An error record is a plain dict with at least a 'field' key holding the
dotted field string of the location it refers to ('data' for the
document itself, 'data.a.b' for key path ('a', 'b')). Records are never
mutated: stamping a field produces a copy.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from .keypath import KeyPath, format_field

ErrorRecord = dict[str, Any]
ErrorList = tuple[ErrorRecord, ...]


def filter_errors(errors: Iterable[Mapping[str, Any]], key_path: KeyPath) -> ErrorList:
    """Select the errors attached exactly at key_path.

    Args:
        errors: Error records to filter.
        key_path: Target key path.

    Returns:
        Tuple of matching records in their original order.
    """
    field = format_field(key_path)
    return tuple(error for error in errors if error.get('field') == field)


def filter_errors_by_prefix(
    errors: Iterable[Mapping[str, Any]], key_path: KeyPath
) -> ErrorList:
    """Select the errors attached at key_path or at any descendant of it.

    'data.ab' is not a descendant of 'data.a': a prefix only matches when
    followed by a '.' separator. The empty key path matches every record.

    Args:
        errors: Error records to filter.
        key_path: Target key path.

    Returns:
        Tuple of matching records in their original order.
    """
    if not key_path:
        return tuple(errors)
    field = format_field(key_path)
    prefix = field + '.'
    return tuple(
        error for error in errors
        if error.get('field') == field
        or str(error.get('field', '')).startswith(prefix)
    )


def stamp_error(error: Mapping[str, Any], field: str) -> ErrorRecord:
    """Return a copy of error with its 'field' set to field."""
    return {**error, 'field': field}
