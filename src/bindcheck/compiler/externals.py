"""
External declaration scanner.

A small recursive descent parser over the lexer's token stream that picks
out attributed ``external`` statements and ignores everything else:

    @module("path") @scope("Foo")
    external bar: int => string = "baz"

Attributes accumulate in an immutable ExternalAttributes value. It attaches
to the next declaration only when nothing but comments and other
attributes sit in between; any other token, including a failed declaration
attempt, replaces it with the empty value.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Optional

from bindcheck.compiler.lexer import Lexer
from bindcheck.compiler.nesting import NestingDepth, split_top_level, unquote
from bindcheck.compiler.tokens import AttributeValue, Token, TokenType
from bindcheck.utils.errors import SourceLocation


# Legacy BuckleScript spellings (@bs.module, @bs.val, ...) map onto the bare names.
_LEGACY_PREFIX = "bs."

_FLAG_ATTRIBUTES = frozenset({"val", "send", "new", "get", "set"})


@dataclass(frozen=True, slots=True)
class ExternalAttributes:
    """
    Attributes that steer how an external's binding target is resolved.

    Attributes:
        module: Module to import the binding from (``@module("path")``)
        scope: Property chain walked before the binding (``@scope("a", "b")``)
        val: ``@val`` flag
        send: ``@send`` flag
        new: ``@new`` flag
        get: ``@get`` flag
        set: ``@set`` flag
        as_: Rename of the runtime-side name (``@as("name")``)
    """

    module: Optional[str] = None
    scope: Optional[tuple[str, ...]] = None
    val: bool = False
    send: bool = False
    new: bool = False
    get: bool = False
    set: bool = False
    as_: Optional[str] = None

    def apply(self, name: str, args: Optional[tuple[str, ...]] = None) -> ExternalAttributes:
        """
        Return a copy updated by one attribute annotation.

        Unrecognized names, and recognized names missing a required
        argument, leave the value unchanged.
        """
        if name.startswith(_LEGACY_PREFIX):
            name = name[len(_LEGACY_PREFIX):]

        if name == "module" and args:
            return replace(self, module=unquote(args[0]))
        if name == "scope" and args is not None:
            return replace(self, scope=_scope_path(args))
        if name in _FLAG_ATTRIBUTES:
            return replace(self, **{name: True})
        if name == "as" and args:
            return replace(self, as_=unquote(args[0]))
        return self

    @property
    def is_empty(self) -> bool:
        return self == EMPTY_ATTRIBUTES

    def to_dict(self) -> dict[str, Any]:
        """Only the attributes that were actually set, keyed by attribute name."""
        record: dict[str, Any] = {}
        if self.module is not None:
            record["module"] = self.module
        if self.scope is not None:
            record["scope"] = list(self.scope)
        for flag in ("val", "send", "new", "get", "set"):
            if getattr(self, flag):
                record[flag] = True
        if self.as_ is not None:
            record["as"] = self.as_
        return record


EMPTY_ATTRIBUTES = ExternalAttributes()


def _scope_path(args: tuple[str, ...]) -> tuple[str, ...]:
    # @scope(("window", "location")) is the tuple spelling of @scope("window", "location")
    if len(args) == 1 and args[0].startswith("(") and args[0].endswith(")"):
        inner = split_top_level(args[0][1:-1], ",")
        if len(inner) > 1:
            args = tuple(inner)
    return tuple(unquote(arg) for arg in args)


@dataclass(frozen=True, slots=True)
class ExternalDecl:
    """
    One discovered binding declaration.

    Attributes:
        name: Declared ReScript identifier
        binding: Runtime-side name or path the declaration binds to
        res_type: Raw type expression text between ``:`` and ``=``
        attributes: Attributes that preceded the declaration
        file: File the declaration was found in
        line: 1-indexed line of the ``external`` keyword
        column: 1-indexed column of the ``external`` keyword
    """

    name: str
    binding: str
    res_type: str
    attributes: ExternalAttributes
    file: str
    line: int
    column: int

    @property
    def location(self) -> SourceLocation:
        return SourceLocation(self.line, self.column, filename=self.file)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "binding": self.binding,
            "resType": self.res_type,
            "attributes": self.attributes.to_dict(),
            "file": self.file,
            "line": self.line,
            "column": self.column,
        }


class ExternalsParser:
    """
    Recursive descent parser that extracts external declarations.

    A declaration attempt expects, in order: an identifier, ``:``, a type
    expression running to the first ``=`` outside any brackets, ``=``, and a
    string or identifier binding. If any step fails the attempt yields
    nothing and scanning resumes at the token that broke it.

    Usage:
        parser = ExternalsParser(tokens, source, "src/Foo.res")
        externals = parser.parse()
    """

    def __init__(self, tokens: list[Token], source: str, filename: str = "<input>") -> None:
        """
        Initialize the parser.

        Args:
            tokens: Token stream from the lexer, ending with EOF
            source: The source the tokens were produced from
            filename: File identifier recorded on each declaration
        """
        self.tokens = tokens
        self.pos = 0
        self._source = source
        self._filename = filename
        self._pending = EMPTY_ATTRIBUTES

    @property
    def _current(self) -> Token:
        """Get the current token."""
        if self.pos >= len(self.tokens):
            return self.tokens[-1]  # Return EOF
        return self.tokens[self.pos]

    def _is_at_end(self) -> bool:
        return self._current.type == TokenType.EOF

    def _check(self, *types: TokenType) -> bool:
        return self._current.type in types

    def _advance(self) -> Token:
        token = self._current
        if not self._is_at_end():
            self.pos += 1
        return token

    def _skip_comments(self) -> None:
        while self._check(TokenType.COMMENT):
            self._advance()

    # -------------------------------------------------------------------------
    # Top level
    # -------------------------------------------------------------------------

    def parse(self) -> list[ExternalDecl]:
        """
        Scan the whole token stream.

        Returns:
            Declarations in textual order.
        """
        externals: list[ExternalDecl] = []
        self.pos = 0
        self._pending = EMPTY_ATTRIBUTES

        while not self._is_at_end():
            token = self._current

            if token.type == TokenType.COMMENT:
                self._advance()
                continue

            if token.type == TokenType.ATTRIBUTE:
                attribute: AttributeValue = token.value
                self._pending = self._pending.apply(attribute.name, attribute.args)
                self._advance()
                continue

            if token.type == TokenType.EXTERNAL:
                self._advance()
                decl = self._parse_declaration(token)
                if decl is not None:
                    externals.append(decl)
                self._pending = EMPTY_ATTRIBUTES
                continue

            self._pending = EMPTY_ATTRIBUTES
            self._advance()

        return externals

    # -------------------------------------------------------------------------
    # Declarations
    # -------------------------------------------------------------------------

    def _parse_declaration(self, keyword: Token) -> Optional[ExternalDecl]:
        self._skip_comments()
        if not self._check(TokenType.IDENTIFIER):
            return None
        name = self._advance()

        self._skip_comments()
        if not self._check(TokenType.COLON):
            return None
        self._advance()

        resume = self.pos
        res_type = self._parse_type_text()
        if res_type is None:
            self.pos = resume
            return None
        self._advance()  # =

        self._skip_comments()
        binding = self._parse_binding()
        if binding is None:
            return None

        return ExternalDecl(
            name=name.text,
            binding=binding,
            res_type=res_type,
            attributes=self._pending,
            file=self._filename,
            line=keyword.location.line,
            column=keyword.location.column,
        )

    def _parse_type_text(self) -> Optional[str]:
        """
        Consume tokens up to the first top-level ``=``.

        Leaves the parser on the ``=``. Returns None if the stream ends
        first; the caller rewinds to where the capture started.
        """
        depth = NestingDepth()
        collected: list[Token] = []
        while True:
            token = self._current
            if token.type == TokenType.EOF:
                return None
            if token.type == TokenType.ASSIGN and depth.at_top_level:
                return self._raw_text(collected)
            if token.is_bracket:
                depth.feed(token.text)
            collected.append(token)
            self._advance()

    def _parse_binding(self) -> Optional[str]:
        if self._check(TokenType.STRING, TokenType.CHAR):
            return self._advance().value
        if self._check(TokenType.IDENTIFIER):
            return self._advance().text
        return None

    def _raw_text(self, tokens: list[Token]) -> str:
        """Source text spanned by ``tokens``, with comments blanked out."""
        parts: list[str] = []
        cursor: Optional[int] = None
        for token in tokens:
            if cursor is not None:
                parts.append(self._source[cursor:token.start])
            parts.append(" " if token.is_trivia else token.text)
            cursor = token.end
        return "".join(parts).strip()


def scan_externals(source: str, filename: str = "<input>") -> list[ExternalDecl]:
    """
    Extract every external declaration from ReScript source text.

    Args:
        source: ReScript source code
        filename: File identifier recorded on each declaration

    Returns:
        Declarations in textual order
    """
    tokens = Lexer(source, filename).tokenize()
    return ExternalsParser(tokens, source, filename).parse()
