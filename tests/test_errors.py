# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Tests for error record filtering."""

from formtree import filter_errors, filter_errors_by_prefix
from formtree.errors import stamp_error

ERRORS = [
    {'field': 'data', 'message': 'root'},
    {'field': 'data.a', 'message': 'a-1'},
    {'field': 'data.ab', 'message': 'ab'},
    {'field': 'data.a.b', 'message': 'a.b'},
    {'field': 'data.a', 'message': 'a-2'},
    {'field': 'data.c.0', 'message': 'c.0'},
]


def _messages(errors):
    return [error['message'] for error in errors]


class TestFilterErrors:
    """Tests for exact-match filtering."""

    def test_exact_match(self):
        """Test only errors exactly at the path are returned, in order."""
        assert _messages(filter_errors(ERRORS, ('a',))) == ['a-1', 'a-2']

    def test_root(self):
        """Test the empty key path matches only 'data'."""
        assert _messages(filter_errors(ERRORS, ())) == ['root']

    def test_index_segment(self):
        """Test int segments are matched by their string form."""
        assert _messages(filter_errors(ERRORS, ('c', 0))) == ['c.0']

    def test_no_match(self):
        """Test absence of matches gives an empty tuple."""
        assert filter_errors(ERRORS, ('zzz',)) == ()

    def test_keeps_identity(self):
        """Test returned records are the original objects."""
        assert filter_errors(ERRORS, ('ab',))[0] is ERRORS[2]


class TestFilterErrorsByPrefix:
    """Tests for prefix-match filtering."""

    def test_prefix_includes_descendants(self):
        """Test errors at the path and below are returned."""
        assert _messages(filter_errors_by_prefix(ERRORS, ('a',))) == ['a-1', 'a.b', 'a-2']

    def test_prefix_requires_separator(self):
        """Test 'data.ab' is not below 'data.a'."""
        assert 'ab' not in _messages(filter_errors_by_prefix(ERRORS, ('a',)))

    def test_root_returns_everything(self):
        """Test the empty key path returns every record."""
        assert filter_errors_by_prefix(ERRORS, ()) == tuple(ERRORS)

    def test_no_match(self):
        """Test absence of matches gives an empty tuple."""
        assert filter_errors_by_prefix(ERRORS, ('x', 'y')) == ()


class TestStampError:
    """Tests for stamp_error."""

    def test_stamp_copies(self):
        """Test stamping returns a copy with the field overwritten."""
        error = {'field': 'data.other', 'message': 'bad'}
        stamped = stamp_error(error, 'data.a')
        assert stamped == {'field': 'data.a', 'message': 'bad'}
        assert error['field'] == 'data.other'
        assert stamped is not error
