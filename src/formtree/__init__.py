# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""FormTree - Immutable form state with key-path branches and two-tier errors.

A small library modelling form state as an immutable Root document plus
lazily derived Branch views addressed by key paths, validated through a
pluggable schema capability (pydantic by default).
"""

__version__ = "0.1.0"

from .document import select_value, update_value
from .errors import filter_errors, filter_errors_by_prefix
from .exceptions import DocumentUpdateError, FormTreeError, KeyPathError
from .keypath import format_field, make_key_path, parse_field
from .value import (
    Branch,
    Root,
    Value,
    create,
    is_update_suppressed,
    is_value,
    suppress_update,
    suppressed_updates,
)

__all__ = [
    # Core classes
    "Value",
    "Root",
    "Branch",
    # Factory
    "create",
    "is_value",
    # Suppression
    "suppress_update",
    "suppressed_updates",
    "is_update_suppressed",
    # Key paths
    "make_key_path",
    "format_field",
    "parse_field",
    # Documents and errors
    "select_value",
    "update_value",
    "filter_errors",
    "filter_errors_by_prefix",
    # Exceptions
    "FormTreeError",
    "KeyPathError",
    "DocumentUpdateError",
]
