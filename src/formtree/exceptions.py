# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""FormTree exceptions."""

from __future__ import annotations


class FormTreeError(Exception):
    """Base exception for FormTree errors."""

    pass


class KeyPathError(FormTreeError, ValueError):
    """Raised when a key cannot be normalized into a key path."""

    pass


class DocumentUpdateError(FormTreeError, TypeError):
    """Raised when a document slice cannot be written at a key path."""

    pass
