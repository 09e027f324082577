# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Value - immutable form state addressed by key paths.

This module provides the Value tree: a Root owning the authoritative
document and a family of lightweight Branch views, each addressing a
sub-path of that document. Root and Branch share one read/update
protocol defined on the abstract Value class.

Key Features:
    - **Immutable state**: every update builds a new Root, copying only
      what changed and sharing the rest by reference
    - **Lazy branches**: a Branch stores only (root, key_path); its
      document, schema and parent are computed on first access
    - **Two-tier errors**: validation errors are recomputed on every
      document or schema change, external errors are caller-managed;
      both are merged when read
    - **Change notification**: every state-producing call reports the new
      Root and the edited key path to the root's on_change callback,
      unless suppressed

Example:
    Basic usage::

        class User(BaseModel):
            name: str
            age: int

        root = create(schema=User, document={'name': 'Ann'}, on_change=store)
        root.select('age').error_list
        # ({'field': 'data.age', 'message': 'Field required', ...},)

        age = root.select('age').update(42)
        age.root.document           # {'name': 'Ann', 'age': 42}
        age.root.error_list         # ()

    Batched edits::

        with suppressed_updates():
            value = value.select('name').update('Bob').root
            value = value.select('age').update(7).root

Suppression:
    The suppression flag is held in a ContextVar, so each thread and each
    asyncio task sees its own flag. Within one flow of control, scopes
    nest: each scope restores the value it found on entry, and the
    outermost exit clears the flag.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Callable, TypeVar

from .document import select_value, update_value
from .errors import (
    ErrorList,
    filter_errors,
    filter_errors_by_prefix,
    stamp_error,
)
from .keypath import KeyPath, format_field, make_key_path
from .schema import select as select_schema
from .schema import validate as validate_schema

logger = logging.getLogger(__name__)

T = TypeVar('T')

OnChange = Callable[['Root', KeyPath], None]
Validator = Callable[[Any, Any], Iterable[Mapping[str, Any]]]

_UNSET: Any = object()

_suppress_update: ContextVar[bool] = ContextVar('formtree_suppress_update', default=False)


# ==================== Update Suppression ====================

def is_update_suppressed() -> bool:
    """True while inside a suppression scope in the current context."""
    return _suppress_update.get()


@contextmanager
def suppressed_updates() -> Iterator[None]:
    """Context manager disabling on_change notifications for its extent.

    The previous flag value is restored on exit, including when the body
    raises.

    Example:
        >>> with suppressed_updates():
        ...     value = value.update({'a': 1})   # no on_change call
    """
    token = _suppress_update.set(True)
    try:
        yield
    finally:
        _suppress_update.reset(token)


def suppress_update(tx: Callable[[], T]) -> T:
    """Run tx with on_change notifications disabled.

    Args:
        tx: Callable taking no arguments.

    Returns:
        Whatever tx returns.
    """
    with suppressed_updates():
        return tx()


def _noop(root: Root, key_path: KeyPath) -> None:
    pass


# ==================== Value ====================

class Value(ABC):
    """Shared read/update contract of Root and Branch.

    Subclasses provide root, key_path, document, schema, params and
    parent. Everything else is written once here against those accessors.
    Mutating methods never change self: they return a Value at the same
    key path on a newly created Root.
    """

    __slots__ = ('_error_list', '_complete_error_list')

    def __init__(self) -> None:
        self._error_list: ErrorList = _UNSET
        self._complete_error_list: ErrorList = _UNSET

    # ==================== Abstract Accessors ====================

    @property
    @abstractmethod
    def root(self) -> Root:
        """The Root owning the state this value reads from."""

    @property
    @abstractmethod
    def key_path(self) -> KeyPath:
        """Key path of this value within the root document."""

    @property
    @abstractmethod
    def document(self) -> Any:
        """The document slice at key_path (None if absent)."""

    @property
    @abstractmethod
    def schema(self) -> Any:
        """The schema of the document slice at key_path."""

    @property
    @abstractmethod
    def params(self) -> dict[str, Any]:
        """Auxiliary parameters carried by the root."""

    @property
    @abstractmethod
    def parent(self) -> Value | None:
        """The value one segment up, or None for the root."""

    # ==================== Navigation ====================

    def select(self, key: Any) -> Value:
        """Return the value at key, relative to this value.

        Args:
            key: Anything make_key_path accepts ('a.b', 0, ['a', 1], ...).

        Returns:
            self if key is empty, otherwise a Branch on the same root.
        """
        key_path = make_key_path(key)
        if not key_path:
            return self
        return Branch(self.root, self.key_path + key_path)

    # ==================== Errors ====================

    @property
    def validation_error_list(self) -> ErrorList:
        """All validation errors of the root document."""
        return self.root._validation_errors

    @property
    def external_error_list(self) -> ErrorList:
        """All external errors attached to the root."""
        return self.root._external_errors

    @property
    def error_list(self) -> ErrorList:
        """Errors attached exactly at this key path.

        Validation errors come first, then external errors, each in
        source order.
        """
        if self._error_list is _UNSET:
            root = self.root
            self._error_list = (
                filter_errors(root._validation_errors, self.key_path)
                + filter_errors(root._external_errors, self.key_path)
            )
        return self._error_list

    @property
    def complete_error_list(self) -> ErrorList:
        """Errors attached at this key path or at any descendant.

        Used to tell whether a composite value (a sub-form, a list)
        holds an invalid field anywhere below it.
        """
        if self._complete_error_list is _UNSET:
            root = self.root
            self._complete_error_list = (
                filter_errors_by_prefix(root._validation_errors, self.key_path)
                + filter_errors_by_prefix(root._external_errors, self.key_path)
            )
        return self._complete_error_list

    # ==================== State Transitions ====================

    def create_root(self, **changes: Any) -> Root:
        """Return a new Root with the given fields replaced.

        Fields not named in changes are taken from the current root by
        reference. The current root is left untouched.

        Args:
            **changes: Any of schema, document, params, on_change,
                error_list, external_error_list, validate.
        """
        root = self.root
        fields = {
            'schema': root.schema,
            'document': root.document,
            'params': root.params,
            'on_change': root.on_change,
            'error_list': root._validation_errors,
            'external_error_list': root._external_errors,
            'validate': root.validate,
        }
        fields.update(changes)
        return Root(**fields)

    def _commit(self, next_root: Root, suppress_notify: bool) -> Value:
        """Notify on_change (unless suppressed) and re-select on next_root."""
        if suppress_notify or is_update_suppressed():
            logger.debug(f"on_change suppressed for {format_field(self.key_path)}")
        else:
            self.root.on_change(next_root, self.key_path)
        return next_root.select(self.key_path)

    def update(self, value: Any, suppress_notify: bool = False) -> Value:
        """Replace the document slice at this key path.

        The whole document is re-validated; external errors are kept.

        Args:
            value: The new value for this slice.
            suppress_notify: If True, on_change is not called.

        Returns:
            The value at this key path on the new root.
        """
        root = self.root
        if self.key_path:
            document = update_value(root.document, self.key_path, value, root.schema)
        else:
            document = value
        next_root = self.create_root(
            document=document,
            error_list=root.validate(root.schema, document),
        )
        logger.debug(
            f"update {format_field(self.key_path)}: "
            f"{len(next_root._validation_errors)} validation error(s)"
        )
        return self._commit(next_root, suppress_notify)

    def update_params(self, params: Mapping[str, Any], suppress_notify: bool = False) -> Value:
        """Shallow-merge params into the root params.

        Args:
            params: Keys to add or overwrite.
            suppress_notify: If True, on_change is not called.

        Returns:
            The value at this key path on the new root.
        """
        next_root = self.create_root(params={**self.root.params, **params})
        return self._commit(next_root, suppress_notify)

    def update_error(
        self,
        error: Mapping[str, Any] | Iterable[Mapping[str, Any]],
        suppress_notify: bool = False,
    ) -> Value:
        """Replace the whole external error list with error(s) at this key path.

        Every record is copied with its 'field' set to this key path,
        overwriting any field the caller supplied.

        Args:
            error: A single error record or an iterable of records.
            suppress_notify: If True, on_change is not called.

        Returns:
            The value at this key path on the new root.
        """
        field = format_field(self.key_path)
        errors = [error] if isinstance(error, Mapping) else error
        external_error_list = tuple(stamp_error(item, field) for item in errors)
        next_root = self.create_root(external_error_list=external_error_list)
        return self._commit(next_root, suppress_notify)

    def add_error(self, error: Mapping[str, Any], suppress_notify: bool = False) -> Value:
        """Append one external error at this key path.

        Args:
            error: Error record; copied with its 'field' set to this key path.
            suppress_notify: If True, on_change is not called.

        Returns:
            The value at this key path on the new root.
        """
        stamped = stamp_error(error, format_field(self.key_path))
        next_root = self.create_root(
            external_error_list=self.root._external_errors + (stamped,)
        )
        return self._commit(next_root, suppress_notify)

    def remove_error(self, error: Mapping[str, Any], suppress_notify: bool = False) -> Value:
        """Remove an external error record.

        The record is matched by identity: pass an object obtained from
        error_list or external_error_list. An equal but distinct record
        does not match.

        Args:
            error: The error record to remove.
            suppress_notify: If True, on_change is not called.

        Returns:
            The value at this key path on the new root, or self unchanged
            (without notifying) if error is not attached.
        """
        external_errors = self.root._external_errors
        for idx, item in enumerate(external_errors):
            if item is error:
                break
        else:
            return self
        next_root = self.create_root(
            external_error_list=external_errors[:idx] + external_errors[idx + 1:]
        )
        return self._commit(next_root, suppress_notify)


# ==================== Root ====================

class Root(Value):
    """The Value owning the authoritative form state.

    A Root is never modified after construction; state transitions go
    through Value.create_root. Use create() rather than instantiating
    Root directly.
    """

    __slots__ = (
        '_schema', '_document', '_params', '_on_change',
        '_validation_errors', '_external_errors', '_validate',
    )

    def __init__(
        self,
        *,
        schema: Any,
        document: Any,
        on_change: OnChange,
        params: dict[str, Any],
        error_list: Iterable[Mapping[str, Any]],
        external_error_list: Iterable[Mapping[str, Any]],
        validate: Validator,
    ) -> None:
        super().__init__()
        self._schema = schema
        self._document = document
        self._on_change = on_change
        self._params = params
        self._validation_errors: ErrorList = tuple(error_list)
        self._external_errors: ErrorList = tuple(external_error_list)
        self._validate = validate

    def __repr__(self) -> str:
        return (
            f"Root(document={self._document!r}, "
            f"errors={len(self._validation_errors) + len(self._external_errors)})"
        )

    @property
    def root(self) -> Root:
        return self

    @property
    def key_path(self) -> KeyPath:
        return ()

    @property
    def document(self) -> Any:
        return self._document

    @property
    def schema(self) -> Any:
        return self._schema

    @property
    def params(self) -> dict[str, Any]:
        return self._params

    @property
    def parent(self) -> None:
        return None

    @property
    def on_change(self) -> OnChange:
        """Callback receiving (new_root, edited_key_path)."""
        return self._on_change

    @property
    def validate(self) -> Validator:
        """Validator called as validate(schema, document)."""
        return self._validate

    def set_schema(self, schema: Any) -> Value:
        """Return a new root using schema, with the document re-validated.

        Document, params and external errors are kept. on_change is not
        called: the caller stores the returned root.
        """
        next_root = self.create_root(
            schema=schema,
            error_list=self._validate(schema, self._document),
        )
        logger.debug(f"set_schema: {len(next_root._validation_errors)} validation error(s)")
        return next_root


# ==================== Branch ====================

class Branch(Value):
    """A view of a Root at a non-empty key path.

    A Branch stores only its root and key path. Document, schema and
    parent are derived from the root on first access and cached for the
    lifetime of the instance.
    """

    __slots__ = ('_root', '_key_path', '_document', '_schema', '_parent')

    def __init__(self, root: Root, key_path: KeyPath) -> None:
        if not key_path:
            raise ValueError("Branch key path must not be empty")
        super().__init__()
        self._root = root
        self._key_path = tuple(key_path)
        self._document: Any = _UNSET
        self._schema: Any = _UNSET
        self._parent: Value = _UNSET

    def __repr__(self) -> str:
        return f"Branch({self._key_path!r}, document={self.document!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Branch):
            return NotImplemented
        return other._root is self._root and other._key_path == self._key_path

    def __hash__(self) -> int:
        return hash((id(self._root), self._key_path))

    @property
    def root(self) -> Root:
        return self._root

    @property
    def key_path(self) -> KeyPath:
        return self._key_path

    @property
    def document(self) -> Any:
        if self._document is _UNSET:
            self._document = select_value(self._root.document, self._key_path)
        return self._document

    @property
    def schema(self) -> Any:
        if self._schema is _UNSET:
            self._schema = select_schema(self._root.schema, self._key_path)
        return self._schema

    @property
    def params(self) -> dict[str, Any]:
        return self._root.params

    @property
    def parent(self) -> Value:
        if self._parent is _UNSET:
            if len(self._key_path) == 1:
                self._parent = self._root
            else:
                self._parent = Branch(self._root, self._key_path[:-1])
        return self._parent


# ==================== Factory ====================

def is_value(obj: Any) -> bool:
    """True if obj is a Root or a Branch."""
    return isinstance(obj, Value)


def create(
    *,
    schema: Any = None,
    document: Any = _UNSET,
    on_change: OnChange | None = None,
    params: Mapping[str, Any] | None = None,
    error_list: Iterable[Mapping[str, Any]] | None = None,
    external_error_list: Iterable[Mapping[str, Any]] = (),
    validate: Validator | None = None,
) -> Root:
    """Create a new Root.

    Args:
        schema: Schema understood by validate; a pydantic type by default.
        document: Initial document. Defaults to an empty dict; an
            explicit None is kept.
        on_change: Called as on_change(new_root, key_path) after every
            state transition that is not suppressed. Defaults to a no-op.
        params: Auxiliary data carried alongside the document, never
            validated. Defaults to an empty dict.
        error_list: Initial validation errors. If None, computed by
            running validate(schema, document).
        external_error_list: Initial external errors.
        validate: Validator called as validate(schema, document).
            Defaults to formtree.schema.validate.

    Returns:
        A new Root.

    Example:
        >>> root = create(schema=User, document={'name': 'Ann'})
        >>> root.select('name').document
        'Ann'
    """
    if document is _UNSET:
        document = {}
    if validate is None:
        validate = validate_schema
    if error_list is None:
        error_list = validate(schema, document)
    return Root(
        schema=schema,
        document=document,
        on_change=on_change or _noop,
        params=dict(params) if params is not None else {},
        error_list=error_list,
        external_error_list=external_error_list,
        validate=validate,
    )
