"""
Pytest configuration and shared fixtures for bindcheck tests.
"""

import json
from pathlib import Path
from typing import Optional, Sequence

import pytest

from bindcheck.compiler.externals import ExternalDecl, scan_externals
from bindcheck.compiler.lexer import Lexer
from bindcheck.compiler.oracle import ASSIGNABLE, AssignabilityOracle, OracleVerdict
from bindcheck.compiler.synthesis import OracleRequest
from bindcheck.compiler.tokens import Token
from bindcheck.compiler.type_translator import TranslationResult, TypeTranslator
from bindcheck.utils.errors import OracleError


class FakeOracle(AssignabilityOracle):
    """
    Oracle that answers from a table instead of running a compiler.

    Verdicts are looked up by declaration name; unlisted declarations are
    assignable. When ``error`` is set, every check raises it.
    """

    def __init__(
        self,
        verdicts: Optional[dict[str, OracleVerdict]] = None,
        error: Optional[OracleError] = None,
    ) -> None:
        self.verdicts = verdicts or {}
        self.error = error
        self.calls: list[tuple[Path, list[OracleRequest]]] = []

    def check(self, root_dir: Path, requests: Sequence[OracleRequest]) -> list[OracleVerdict]:
        self.calls.append((root_dir, list(requests)))
        if self.error is not None:
            raise self.error
        return [self.verdicts.get(request.decl.name, ASSIGNABLE) for request in requests]


@pytest.fixture
def lexer_factory():
    """Factory fixture for creating lexers."""

    def _create_lexer(source: str, filename: str = "Test.res") -> Lexer:
        return Lexer(source, filename)

    return _create_lexer


@pytest.fixture
def tokenize(lexer_factory):
    """Fixture to tokenize source code."""

    def _tokenize(source: str) -> list[Token]:
        lexer = lexer_factory(source)
        return lexer.tokenize()

    return _tokenize


@pytest.fixture
def scan():
    """Fixture to scan source code for external declarations."""

    def _scan(source: str, filename: str = "Test.res") -> list[ExternalDecl]:
        return scan_externals(source, filename)

    return _scan


@pytest.fixture
def translate():
    """Fixture to translate one type expression."""

    def _translate(type_text: str) -> TranslationResult:
        return TypeTranslator().translate(type_text)

    return _translate


@pytest.fixture
def fake_oracle_factory():
    """Factory fixture for FakeOracle instances."""

    def _create(
        verdicts: Optional[dict[str, OracleVerdict]] = None,
        error: Optional[OracleError] = None,
    ) -> FakeOracle:
        return FakeOracle(verdicts, error)

    return _create


@pytest.fixture
def rescript_project(tmp_path):
    """
    Factory fixture that lays out a ReScript project under tmp_path.

    Usage:
        root = rescript_project(
            {"sources": ["src"]},
            {"src/Foo.res": 'external foo: int = "foo"'},
        )
    """

    def _create(config: Optional[dict] = None, files: Optional[dict[str, str]] = None) -> Path:
        root = tmp_path / "project"
        root.mkdir(exist_ok=True)
        (root / "rescript.json").write_text(
            json.dumps(config if config is not None else {"sources": ["src"]}),
            encoding="utf-8",
        )
        for relative, content in (files or {}).items():
            path = root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return root

    return _create
