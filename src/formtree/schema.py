# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Default schema capability backed by pydantic.

A schema is any type pydantic can validate against, usually a
pydantic.BaseModel subclass, or None for "no schema". Two operations are
provided:

- validate(schema, document): run pydantic validation and convert the
  reported errors into error records
- select(schema, key_path): walk type annotations to find the schema of
  the value at key_path

Example:
    >>> class Address(BaseModel):
    ...     city: str
    >>> class User(BaseModel):
    ...     name: str
    ...     addresses: list[Address] = []
    >>> select(User, ('addresses', 0, 'city'))
    <class 'str'>
    >>> validate(User, {'addresses': [{}]})
    ({'field': 'data.name', 'message': 'Field required', 'type': 'missing'},
     {'field': 'data.addresses.0.city', 'message': 'Field required', 'type': 'missing'})
"""

from __future__ import annotations

import dataclasses
import logging
import types
import typing
from collections.abc import Mapping, MutableSequence, Sequence, Set
from functools import lru_cache
from typing import Annotated, Any, Union

from pydantic import BaseModel, TypeAdapter, ValidationError

from .errors import ErrorList
from .keypath import KeyPath, Segment, format_field

logger = logging.getLogger(__name__)

_SEQUENCE_ORIGINS = (list, set, frozenset, Sequence, MutableSequence, Set)
_MAPPING_ORIGINS = (dict, Mapping)


@lru_cache(maxsize=256)
def _type_adapter(schema: Any) -> TypeAdapter:
    return TypeAdapter(schema)


def validate(schema: Any, document: Any) -> ErrorList:
    """Validate document against schema.

    Args:
        schema: A type understood by pydantic, or None.
        document: The document to validate.

    Returns:
        Tuple of error records with 'field', 'message' and 'type' keys,
        in the order pydantic reports them. Empty when valid. Union member
        names pydantic adds to error locations are left out of 'field'.
    """
    if schema is None:
        return ()
    try:
        _type_adapter(schema).validate_python(document)
    except ValidationError as exc:
        errors = tuple(
            {
                'field': format_field(_document_key_path(schema, error['loc'])),
                'message': error['msg'],
                'type': error['type'],
            }
            for error in exc.errors()
        )
        logger.debug(f"{getattr(schema, '__name__', schema)}: {len(errors)} validation error(s)")
        return errors
    return ()


def _unwrap(annotation: Any) -> Any:
    """Strip Annotated and Optional wrappers from an annotation."""
    while True:
        origin = typing.get_origin(annotation)
        if origin is Annotated:
            annotation = typing.get_args(annotation)[0]
            continue
        if origin is Union or origin is types.UnionType:
            args = [arg for arg in typing.get_args(annotation) if arg is not type(None)]
            if len(args) == 1:
                annotation = args[0]
                continue
        return annotation


def _model_field(model: type[BaseModel], name: str) -> Any:
    """Return the field of model named name, by attribute name or alias."""
    field = model.model_fields.get(name)
    if field is not None:
        return field
    for field in model.model_fields.values():
        if field.alias == name:
            return field
        if isinstance(field.validation_alias, str) and field.validation_alias == name:
            return field
    return None


def _select_segment(schema: Any, segment: Segment) -> Any:
    """Return the schema of the child at segment, or None if unknown."""
    schema = _unwrap(schema)
    origin = typing.get_origin(schema)
    args = typing.get_args(schema)

    if origin is None and isinstance(schema, type) and issubclass(schema, BaseModel):
        if not isinstance(segment, str):
            return None
        field = _model_field(schema, segment)
        return field.annotation if field is not None else None

    if origin is None and isinstance(schema, type) and dataclasses.is_dataclass(schema):
        if not isinstance(segment, str):
            return None
        return typing.get_type_hints(schema).get(segment)

    if origin is tuple:
        if not isinstance(segment, int):
            return None
        if len(args) == 2 and args[1] is Ellipsis:
            return args[0]
        return args[segment] if segment < len(args) else None

    if origin in _SEQUENCE_ORIGINS:
        if not isinstance(segment, int):
            return None
        return args[0] if args else Any

    if origin in _MAPPING_ORIGINS:
        return args[1] if len(args) == 2 else Any

    return None


def select(schema: Any, key_path: KeyPath) -> Any:
    """Return the schema of the value at key_path.

    Args:
        schema: A type understood by pydantic, or None.
        key_path: Normalized key path.

    Returns:
        The sub-schema, or None when the path leaves the known schema.
    """
    for segment in key_path:
        if schema is None:
            return None
        schema = _select_segment(schema, segment)
    return schema


def _union_members(annotation: Any) -> tuple[Any, ...]:
    """Return the non-None members of a union with several of them, else ()."""
    annotation = _unwrap(annotation)
    origin = typing.get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        return tuple(arg for arg in typing.get_args(annotation) if arg is not type(None))
    return ()


def _member_named(members: tuple[Any, ...], tag: Any) -> Any:
    """Return the union member pydantic reports as tag, or None."""
    for member in members:
        if tag == repr(member) or tag == getattr(member, '__name__', None):
            return member
    return None


def _document_key_path(schema: Any, loc: tuple[Any, ...]) -> KeyPath:
    """Translate a pydantic error location into a document key path.

    pydantic inserts the name of the union member being tried (e.g.
    'int', 'list[int]', 'Address') into the location of errors raised
    inside a union. Those segments are not document keys and are dropped.
    """
    key_path: list[Segment] = []
    for segment in loc:
        members = _union_members(schema) if schema is not None else ()
        if members:
            schema = _member_named(members, segment)
            continue
        key_path.append(segment)
        schema = _select_segment(schema, segment) if schema is not None else None
    return tuple(key_path)
