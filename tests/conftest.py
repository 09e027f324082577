# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Shared fixtures for FormTree tests."""

from __future__ import annotations

import pytest

from formtree import create

from models import User


class ChangeRecorder:
    """on_change callback recording every (root, key_path) call."""

    def __init__(self):
        self.calls = []

    def __call__(self, root, key_path):
        self.calls.append((root, key_path))

    @property
    def key_paths(self):
        return [key_path for _, key_path in self.calls]


@pytest.fixture
def recorder():
    return ChangeRecorder()


@pytest.fixture
def user_root(recorder):
    """A valid User form wired to the recorder."""
    return create(
        schema=User,
        document={'name': 'Ann', 'age': 30, 'emails': ['ann@example.org']},
        on_change=recorder,
    )
