"""
Token definitions for the bindcheck lexer.

Only the part of the ReScript grammar that matters for external bindings
gets its own token type: attributes, the ``external`` keyword, identifiers,
literals, comments and the punctuation that appears in type expressions.
Everything else is carried as PUNCT so the lexer never has to reject input.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Optional

from bindcheck.utils.errors import SourceLocation


class TokenType(Enum):
    """Enumeration of all token types recognized by the lexer."""

    # End of file
    EOF = auto()

    # Literals
    STRING = auto()         # "..." or `...`
    CHAR = auto()           # 'x'
    NUMBER = auto()

    # Names
    IDENTIFIER = auto()
    TYPE_VARIABLE = auto()  # 'a

    # Keywords
    EXTERNAL = auto()

    # Annotations
    ATTRIBUTE = auto()      # @name or @name(args)

    # Delimiters
    LPAREN = auto()         # (
    RPAREN = auto()         # )
    LBRACE = auto()         # {
    RBRACE = auto()         # }
    LBRACKET = auto()       # [
    RBRACKET = auto()       # ]
    LANGLE = auto()         # <
    RANGLE = auto()         # >

    # Punctuation
    COLON = auto()          # :
    ASSIGN = auto()         # =
    FAT_ARROW = auto()      # =>
    COMMA = auto()          # ,
    DOT = auto()            # .
    PUNCT = auto()          # any other single character

    # Trivia
    COMMENT = auto()        # // line or /* block */


KEYWORDS: dict[str, TokenType] = {
    "external": TokenType.EXTERNAL,
}

SINGLE_CHAR_TOKENS: dict[str, TokenType] = {
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    "[": TokenType.LBRACKET,
    "]": TokenType.RBRACKET,
    "<": TokenType.LANGLE,
    ">": TokenType.RANGLE,
    ":": TokenType.COLON,
    "=": TokenType.ASSIGN,
    ",": TokenType.COMMA,
    ".": TokenType.DOT,
}

DOUBLE_CHAR_TOKENS: dict[str, TokenType] = {
    "=>": TokenType.FAT_ARROW,
}

# Characters that may appear inside an identifier (ReScript allows primes).
IDENTIFIER_CHARS = frozenset(
    "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_'"
)


@dataclass(frozen=True, slots=True)
class AttributeValue:
    """
    The payload of an ATTRIBUTE token.

    Attributes:
        name: Attribute name without the leading ``@``
        args: Raw, trimmed arguments (quotes kept), or None without parentheses
    """

    name: str
    args: Optional[tuple[str, ...]] = None


@dataclass(frozen=True, slots=True)
class Token:
    """
    Represents a single token from the source code.

    Attributes:
        type: The type of this token
        text: The exact source text the token spans
        value: Decoded payload (string contents, AttributeValue, ...)
        location: Source location of the token's first character
        end: 0-indexed offset just past the token's last character
    """

    type: TokenType
    text: str
    value: Any
    location: SourceLocation
    end: int

    @property
    def start(self) -> int:
        return self.location.offset

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.text!r}, {self.location})"

    @property
    def is_trivia(self) -> bool:
        return self.type == TokenType.COMMENT

    @property
    def is_bracket(self) -> bool:
        return self.type in {
            TokenType.LPAREN,
            TokenType.RPAREN,
            TokenType.LBRACE,
            TokenType.RBRACE,
            TokenType.LBRACKET,
            TokenType.RBRACKET,
            TokenType.LANGLE,
            TokenType.RANGLE,
        }
