"""
bindcheck Lexer (Tokenizer).

Transforms ReScript source text into a flat stream of tokens. The lexer is
total: any character it does not understand becomes a PUNCT token, and
unterminated strings or block comments simply run to the end of the file.
"""

from typing import Iterator, Optional

from bindcheck.compiler.nesting import (
    char_literal_end,
    split_top_level,
    string_literal_end,
    string_literal_span,
)
from bindcheck.compiler.tokens import (
    DOUBLE_CHAR_TOKENS,
    IDENTIFIER_CHARS,
    KEYWORDS,
    SINGLE_CHAR_TOKENS,
    AttributeValue,
    Token,
    TokenType,
)
from bindcheck.utils.errors import SourceLocation


def _is_identifier_start(char: Optional[str]) -> bool:
    return char is not None and char in IDENTIFIER_CHARS and not char.isdigit() and char != "'"


class Lexer:
    """
    Tokenizer for ReScript source code.

    The lexer recognizes:
    - Line comments (// ...) and non-nesting block comments (/* ... */)
    - String literals ("..." and `...`) and character literals ('x')
    - Type variables ('a)
    - Attributes (@name, @name(args), @bs.name(args))
    - The ``external`` keyword, identifiers and numbers
    - Brackets and the punctuation used in type expressions

    Usage:
        lexer = Lexer(source_code, "src/Foo.res")
        tokens = lexer.tokenize()
        # or iterate: for token in lexer: ...
    """

    def __init__(self, source: str, filename: Optional[str] = None) -> None:
        """
        Initialize the lexer with source code.

        Args:
            source: The ReScript source code to tokenize
            filename: Optional filename recorded in token locations
        """
        self.source = source
        self.filename = filename
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens: list[Token] = []

    @property
    def _current_char(self) -> Optional[str]:
        """Return the current character or None if at end."""
        if self.pos >= len(self.source):
            return None
        return self.source[self.pos]

    @property
    def _peek_char(self) -> Optional[str]:
        """Return the next character without consuming it."""
        peek_pos = self.pos + 1
        if peek_pos >= len(self.source):
            return None
        return self.source[peek_pos]

    def _location(self) -> SourceLocation:
        """Create a SourceLocation for the current position."""
        return SourceLocation(
            line=self.line,
            column=self.column,
            offset=self.pos,
            filename=self.filename,
        )

    def _advance(self) -> str:
        """Consume and return the current character."""
        char = self.source[self.pos]
        self.pos += 1

        if char == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1

        return char

    def _advance_to(self, end: int) -> None:
        """Consume characters up to (not including) offset ``end``."""
        while self.pos < end:
            self._advance()

    def _make_token(self, token_type: TokenType, start: SourceLocation, value=None) -> Token:
        text = self.source[start.offset:self.pos]
        return Token(token_type, text, text if value is None else value, start, self.pos)

    def _skip_whitespace(self) -> None:
        while self._current_char is not None and self._current_char.isspace():
            self._advance()

    def _read_line_comment(self) -> Token:
        start = self._location()
        while self._current_char is not None and self._current_char != "\n":
            self._advance()
        return self._make_token(TokenType.COMMENT, start)

    def _read_block_comment(self) -> Token:
        start = self._location()
        self._advance()  # /
        self._advance()  # *
        end = self.source.find("*/", self.pos)
        self._advance_to(len(self.source) if end == -1 else end + 2)
        return self._make_token(TokenType.COMMENT, start)

    def _read_string(self) -> Token:
        start = self._location()
        end, closed = string_literal_span(self.source, self.pos)
        self._advance_to(end)
        text = self.source[start.offset:end]
        inner = text[1:-1] if closed else text[1:]
        return self._make_token(TokenType.STRING, start, inner)

    def _read_quote(self) -> Token:
        """Read a character literal, a type variable, or a stray quote."""
        start = self._location()
        end = char_literal_end(self.source, self.pos)
        if end is not None:
            self._advance_to(end)
            return self._make_token(TokenType.CHAR, start, self.source[start.offset + 1:end - 1])

        self._advance()  # '
        if self._current_char is not None and self._current_char in IDENTIFIER_CHARS:
            while self._current_char is not None and self._current_char in IDENTIFIER_CHARS:
                self._advance()
            return self._make_token(TokenType.TYPE_VARIABLE, start)
        return self._make_token(TokenType.PUNCT, start)

    def _read_word(self) -> Token:
        """Read an identifier, keyword or number as one maximal run."""
        start = self._location()
        while self._current_char is not None and self._current_char in IDENTIFIER_CHARS:
            self._advance()
        text = self.source[start.offset:self.pos]
        if text[0].isdigit():
            return self._make_token(TokenType.NUMBER, start)
        return self._make_token(KEYWORDS.get(text, TokenType.IDENTIFIER), start)

    def _attribute_extent(self, at: int) -> Optional[tuple[int, AttributeValue]]:
        """
        Work out where an attribute starting at ``at`` ends.

        Returns the end offset and the decoded attribute, or None when the
        ``@`` does not start a well-formed attribute (no name, or an
        argument list whose parentheses never balance).
        """
        source = self.source
        n = len(source)
        i = at + 1
        if i >= n or not _is_identifier_start(source[i]):
            return None

        name_start = i
        while True:
            while i < n and source[i] in IDENTIFIER_CHARS:
                i += 1
            if i + 1 < n and source[i] == "." and _is_identifier_start(source[i + 1]):
                i += 1
                continue
            break
        name = source[name_start:i]
        name_end = i

        while i < n and source[i].isspace():
            i += 1
        if i >= n or source[i] != "(":
            return name_end, AttributeValue(name)

        args_start = i
        depth = 0
        while i < n:
            ch = source[i]
            if ch in "\"'`":
                end = char_literal_end(source, i) if ch == "'" else string_literal_end(source, i)
                if end is not None:
                    i = end
                    continue
            if ch == "(":
                depth += 1
            elif ch == ")":
                depth -= 1
                if depth == 0:
                    args = split_top_level(source[args_start + 1:i], ",")
                    return i + 1, AttributeValue(name, tuple(args))
            i += 1
        return None

    def _read_attribute_or_at(self) -> Token:
        start = self._location()
        extent = self._attribute_extent(self.pos)
        if extent is None:
            self._advance()
            return self._make_token(TokenType.PUNCT, start)
        end, attribute = extent
        self._advance_to(end)
        return self._make_token(TokenType.ATTRIBUTE, start, attribute)

    def _read_punctuation(self) -> Token:
        start = self._location()
        if self._peek_char is not None:
            two_char = self._current_char + self._peek_char
            if two_char in DOUBLE_CHAR_TOKENS:
                self._advance()
                self._advance()
                return self._make_token(DOUBLE_CHAR_TOKENS[two_char], start)

        char = self._advance()
        return self._make_token(SINGLE_CHAR_TOKENS.get(char, TokenType.PUNCT), start)

    def _next_token(self) -> Token:
        """Extract the next token from the source."""
        self._skip_whitespace()

        char = self._current_char
        if char is None:
            return Token(TokenType.EOF, "", None, self._location(), self.pos)

        if char == "/" and self._peek_char == "/":
            return self._read_line_comment()
        if char == "/" and self._peek_char == "*":
            return self._read_block_comment()
        if char == "@":
            return self._read_attribute_or_at()
        if char in "\"`":
            return self._read_string()
        if char == "'":
            return self._read_quote()
        if char in IDENTIFIER_CHARS:
            return self._read_word()
        return self._read_punctuation()

    def tokenize(self) -> list[Token]:
        """
        Tokenize the entire source code.

        Returns:
            A list of all tokens including the final EOF token.
        """
        self.tokens = []
        self.pos = 0
        self.line = 1
        self.column = 1

        while True:
            token = self._next_token()
            self.tokens.append(token)
            if token.type == TokenType.EOF:
                break

        return self.tokens

    def __iter__(self) -> Iterator[Token]:
        """Iterate over tokens (tokenizes on first use)."""
        if not self.tokens:
            self.tokenize()
        return iter(self.tokens)


def tokenize(source: str, filename: Optional[str] = None) -> list[Token]:
    """
    Convenience function to tokenize source code.

    Args:
        source: ReScript source code
        filename: Optional filename for token locations

    Returns:
        List of tokens
    """
    return Lexer(source, filename).tokenize()
