"""
Unit tests for depth-aware splitting and searching.
"""

import pytest

from bindcheck.compiler.nesting import (
    NestingDepth,
    char_literal_end,
    find_top_level,
    is_balanced,
    split_top_level,
    string_literal_span,
    unquote,
)


class TestSplitTopLevel:
    """Tests for split_top_level."""

    def test_simple_split(self):
        assert split_top_level("int, string, bool") == ["int", "string", "bool"]

    def test_nested_commas_are_kept(self):
        """Commas inside any bracket kind never split the outer list."""
        parts = split_top_level("(int, string), array<(a, b)>, {x: int, y: int}, [1, 2]")
        assert parts == ["(int, string)", "array<(a, b)>", "{x: int, y: int}", "[1, 2]"]

    def test_commas_in_strings_are_kept(self):
        assert split_top_level('"a,b", \'c\'') == ['"a,b"', "'c'"]

    def test_arrow_does_not_close_generic(self):
        parts = split_top_level("array<int => string>, int")
        assert parts == ["array<int => string>", "int"]

    def test_trailing_separator_dropped(self):
        assert split_top_level("a, b,") == ["a", "b"]

    def test_empty_text(self):
        assert split_top_level("") == []


class TestFindTopLevel:
    """Tests for find_top_level."""

    def test_finds_arrow_outside_parens(self):
        text = "(int => string) => unit"
        assert find_top_level(text, "=>") == text.rindex("=>")

    def test_angle_found_at_depth_zero(self):
        assert find_top_level("array<int>", "<") == 5

    def test_missing_target(self):
        assert find_top_level("array<int>", ",") == -1

    def test_ignores_target_inside_string(self):
        assert find_top_level('"=>" => int', "=>") == 5


class TestIsBalanced:
    """Tests for is_balanced."""

    @pytest.mark.parametrize(
        "text",
        ["", "int", "array<option<int>>", "(a, b) => c", "{x: [int]}", '")"'],
    )
    def test_balanced(self, text):
        assert is_balanced(text)

    @pytest.mark.parametrize("text", ["(", "array<int", "a) (b", "}{", "[[]"])
    def test_unbalanced(self, text):
        assert not is_balanced(text)


class TestLiterals:
    """Tests for quoted-span scanning."""

    def test_char_literal(self):
        assert char_literal_end("'x' rest", 0) == 3

    def test_escaped_char_literal(self):
        assert char_literal_end("'\\n'", 0) == 4
        assert char_literal_end("'\\''", 0) == 4

    def test_type_variable_is_not_char(self):
        assert char_literal_end("'a", 0) is None
        assert char_literal_end("'abc'", 0) is None

    def test_string_with_escaped_quote(self):
        text = '"a\\"b" tail'
        assert string_literal_span(text, 0) == (6, True)

    def test_unterminated_string(self):
        assert string_literal_span('"abc', 0) == (4, False)


class TestNestingDepth:
    """Tests for the per-kind depth counters."""

    def test_tracks_each_kind(self):
        depth = NestingDepth()
        for ch in "(<":
            depth.feed(ch)
        assert not depth.at_top_level
        for ch in ">)":
            depth.feed(ch)
        assert depth.at_top_level

    def test_underflow(self):
        depth = NestingDepth()
        depth.feed("]")
        assert depth.underflowed


def test_unquote():
    assert unquote('"path"') == "path"
    assert unquote("'x'") == "x"
    assert unquote('"mixed\'') == "\"mixed'"
    assert unquote("bare") == "bare"
