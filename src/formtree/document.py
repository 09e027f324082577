# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Document selector and updater.

Documents are plain nested structures of mappings and sequences. Both
functions here are pure: select_value only reads, update_value returns a
new document where every container on the edited path is copied and
everything else is shared by reference.

Example:
    >>> doc = {'user': {'emails': ['a@x.org']}}
    >>> select_value(doc, ('user', 'emails', 0))
    'a@x.org'
    >>> update_value(doc, ('user', 'emails', 1), 'b@x.org')
    {'user': {'emails': ['a@x.org', 'b@x.org']}}
    >>> doc['user']['emails']
    ['a@x.org']
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from .exceptions import DocumentUpdateError
from .keypath import KeyPath, Segment


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def _get_child(container: Any, segment: Segment) -> Any:
    """Return the child at segment, or None if it does not exist."""
    if isinstance(container, Mapping):
        return container.get(segment)
    if _is_sequence(container) and isinstance(segment, int):
        if 0 <= segment < len(container):
            return container[segment]
    return None


def select_value(document: Any, key_path: KeyPath) -> Any:
    """Read the value at key_path.

    Args:
        document: The document to read from.
        key_path: Normalized key path.

    Returns:
        The addressed value, or None if any step of the path is missing.
    """
    current = document
    for segment in key_path:
        current = _get_child(current, segment)
        if current is None:
            return None
    return current


def _set_child(container: Any, segment: Segment, value: Any) -> Any:
    """Return a shallow copy of container with segment set to value."""
    if isinstance(container, Mapping):
        updated = dict(container)
        updated[segment] = value
        return updated

    if _is_sequence(container):
        if not isinstance(segment, int):
            raise DocumentUpdateError(
                f"Cannot set key {segment!r} on a {type(container).__name__}"
            )
        items = list(container)
        if segment < len(items):
            items[segment] = value
        else:
            # Pad so that segment becomes the last index
            items.extend([None] * (segment - len(items)))
            items.append(value)
        return tuple(items) if isinstance(container, tuple) else items

    raise DocumentUpdateError(
        f"Cannot set {segment!r} on a {type(container).__name__} value"
    )


def _empty_container(segment: Segment) -> Any:
    return [] if isinstance(segment, int) else {}


def update_value(
    document: Any,
    key_path: KeyPath,
    value: Any,
    schema: Any = None,
) -> Any:
    """Return a new document with the value at key_path replaced.

    Missing intermediate containers are created: a list when the next
    segment is an index, a dict otherwise.

    Args:
        document: The document to update. Never mutated.
        key_path: Normalized key path. Empty replaces the whole document.
        value: The new value for the addressed slice.
        schema: Schema of document. Accepted so custom updaters can share
            this signature; not used here.

    Returns:
        The updated document.

    Raises:
        DocumentUpdateError: If a container on the path cannot hold the
            next segment (e.g. a field name on a list, anything on a scalar).
    """
    if not key_path:
        return value

    segment, rest = key_path[0], key_path[1:]
    container = _empty_container(segment) if document is None else document
    child = _get_child(container, segment)
    if rest:
        value = update_value(child, rest, value)
    return _set_child(container, segment, value)
