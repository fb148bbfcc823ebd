"""
Nesting-depth tracking shared by the lexer and the type translator.

Type expressions nest through four bracket kinds: parentheses, angle
brackets, braces and square brackets. A separator only counts when every
kind is closed, and string or character literals never affect depth.
The function arrow ``=>`` is consumed as a unit so its ``>`` is never
mistaken for the end of a generic argument list.
"""

from typing import Iterator, Optional

OPENERS: dict[str, str] = {"(": ")", "<": ">", "{": "}", "[": "]"}
CLOSERS: dict[str, str] = {close: open_ for open_, close in OPENERS.items()}
QUOTES = frozenset("\"'`")
ARROW = "=>"


class NestingDepth:
    """
    Independent open counters for each bracket kind.

    Usage:
        depth = NestingDepth()
        for ch in "array<(int, string)>":
            depth.feed(ch)
        assert depth.at_top_level
    """

    __slots__ = ("_counts",)

    def __init__(self) -> None:
        self._counts: dict[str, int] = {opener: 0 for opener in OPENERS}

    def feed(self, text: str) -> None:
        """Account for a single bracket character; anything else is ignored."""
        if text in OPENERS:
            self._counts[text] += 1
        elif text in CLOSERS:
            self._counts[CLOSERS[text]] -= 1

    @property
    def at_top_level(self) -> bool:
        return all(count == 0 for count in self._counts.values())

    @property
    def underflowed(self) -> bool:
        """True once any closer has appeared without a matching opener."""
        return any(count < 0 for count in self._counts.values())


def char_literal_end(text: str, start: int) -> Optional[int]:
    """
    Return the index just past a character literal starting at ``start``.

    Handles ``'x'`` and escaped forms such as ``'\\n'`` or ``'\\''``.
    Returns None when the quote introduces a type variable (``'a``) or is
    otherwise not a complete character literal.
    """
    n = len(text)
    if start + 1 >= n:
        return None
    if text[start + 1] == "\\":
        i = start + 3
        while i < n and text[i] not in "'\n":
            i += 1
        if i < n and text[i] == "'":
            return i + 1
        return None
    if start + 2 < n and text[start + 2] == "'" and text[start + 1] not in "'\n":
        return start + 3
    return None


def string_literal_span(text: str, start: int) -> tuple[int, bool]:
    """
    Scan a string literal starting at ``start``.

    Backslash escapes are skipped. Returns the index just past the literal
    and whether a closing quote was found; an unterminated string runs to
    the end of the text.
    """
    quote = text[start]
    i = start + 1
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        if ch == quote:
            return i + 1, True
        i += 1
    return n, False


def string_literal_end(text: str, start: int) -> int:
    """Return the index just past a string literal starting at ``start``."""
    return string_literal_span(text, start)[0]


def quoted_span_end(text: str, start: int) -> Optional[int]:
    """Return the end of a string or character literal at ``start``, or None."""
    ch = text[start]
    if ch == "'":
        return char_literal_end(text, start)
    if ch in QUOTES:
        return string_literal_end(text, start)
    return None


def scan_top_level(text: str) -> Iterator[tuple[int, str]]:
    """
    Yield ``(index, lexeme)`` for every position sitting at depth zero.

    Depth is evaluated before the lexeme's own effect, so an opening
    bracket at depth zero is yielded and its matching closer is not.
    Quoted spans are skipped entirely; ``=>`` is yielded as one lexeme.
    """
    depth = NestingDepth()
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if ch in QUOTES:
            end = quoted_span_end(text, i)
            if end is not None:
                i = end
                continue
        if text.startswith(ARROW, i):
            if depth.at_top_level:
                yield i, ARROW
            i += len(ARROW)
            continue
        if depth.at_top_level:
            yield i, ch
        depth.feed(ch)
        i += 1


def find_top_level(text: str, target: str) -> int:
    """Index of the first top-level occurrence of ``target``, or -1."""
    for index, lexeme in scan_top_level(text):
        if lexeme == target:
            return index
    return -1


def split_top_level(text: str, separator: str = ",") -> list[str]:
    """
    Split ``text`` on top-level occurrences of ``separator``.

    Parts are trimmed. Empty parts between separators are kept, but a
    trailing empty part (``a, b,``) is dropped.
    """
    parts: list[str] = []
    start = 0
    for index, lexeme in scan_top_level(text):
        if lexeme == separator:
            parts.append(text[start:index].strip())
            start = index + len(separator)
    tail = text[start:].strip()
    if tail:
        parts.append(tail)
    return parts


def is_balanced(text: str) -> bool:
    """Check that every bracket kind is closed, and never closed before it opens."""
    depth = NestingDepth()
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if ch in QUOTES:
            end = quoted_span_end(text, i)
            if end is not None:
                i = end
                continue
        if text.startswith(ARROW, i):
            i += len(ARROW)
            continue
        depth.feed(ch)
        if depth.underflowed:
            return False
        i += 1
    return depth.at_top_level


def unquote(value: str) -> str:
    """Strip one pair of matching surrounding quotes, leaving escapes as written."""
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return value[1:-1]
    return value
