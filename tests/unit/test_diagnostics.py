"""
Unit tests for diagnostic records and check results.
"""

import pytest

import bindcheck.utils as utils
from bindcheck.utils.diagnostics import (
    CheckResult,
    DiagnosticLevel,
    ErrorCode,
    error,
    summarize_diagnostics,
    warning,
)


class TestDiagnostic:
    """Tests for a single diagnostic record."""

    def test_to_dict_with_code(self):
        diagnostic = error("Type mismatch for f: nope", "src/A.res", 3, 5, code=ErrorCode.E0301)
        assert diagnostic.to_dict() == {
            "level": "error",
            "message": "Type mismatch for f: nope",
            "file": "src/A.res",
            "line": 3,
            "column": 5,
            "code": "E0301",
        }

    def test_to_dict_without_code(self):
        assert "code" not in warning("w", "A.res").to_dict()

    def test_render_plain(self):
        diagnostic = warning("f: unresolved type Foo.t treated as unknown", "A.res", 2, 1, code=ErrorCode.W0101)
        assert diagnostic.render(use_color=False) == (
            "A.res:2:1 WARNING[W0101] f: unresolved type Foo.t treated as unknown"
        )

    def test_render_with_source(self):
        diagnostic = error("bad", "A.res", 2, 3)
        rendered = diagnostic.render(use_color=False, source='let x = 1\n  external f: int = "f"\n')
        assert rendered.splitlines() == [
            "A.res:2:3 ERROR bad",
            '   2 |   external f: int = "f"',
            "     |   ^",
        ]

    def test_render_line_out_of_range(self):
        assert error("bad", "A.res", 9, 1).render(use_color=False, source="x") == "A.res:9:1 ERROR bad"


class TestSummary:
    """Tests for counting diagnostics."""

    def test_counts(self):
        diagnostics = [error("a", "f"), warning("b", "f"), warning("c", "f")]
        summary = summarize_diagnostics(diagnostics, externals=4)
        assert summary.to_dict() == {"externals": 4, "errors": 1, "warnings": 2}

    def test_has_errors(self):
        diagnostics = [warning("b", "f")]
        result = CheckResult(summarize_diagnostics(diagnostics, 1), diagnostics)
        assert not result.has_errors
        assert result.to_dict()["diagnostics"][0]["level"] == DiagnosticLevel.WARNING.value


@pytest.mark.parametrize("name", utils.__all__)
def test_package_exports_resolve(name):
    assert hasattr(utils, name)
