"""Unit tests for identifier helpers."""

import pytest

from snowexplorer.utils.identifiers import is_quoted, lookup_key, strip_quotes


class TestStripQuotes:

    @pytest.mark.parametrize("name, expected", [
        ('"My Stage"', "My Stage"),
        ('"a""b"', 'a"b'),
        ("PLAIN", "PLAIN"),
        ('"', '"'),
        ("", ""),
    ])
    def test_strip_quotes(self, name, expected):
        assert strip_quotes(name) == expected

    def test_is_quoted(self):
        assert is_quoted('"x"')
        assert not is_quoted('"x')
        assert not is_quoted("x")


class TestLookupKey:
    """Matching user-supplied names against SHOW output."""

    def test_unquoted_is_case_insensitive(self):
        assert lookup_key("compute_wh") == ("COMPUTE_WH", False)

    def test_quoted_is_exact(self):
        assert lookup_key('"Mixed_Case"') == ("Mixed_Case", True)
