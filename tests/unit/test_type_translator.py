"""
Unit tests for the ReScript type translator.
"""

import pytest

from bindcheck.compiler.type_nodes import (
    ARRAY,
    DICT,
    NULL,
    NULLABLE,
    OPTION,
    PROMISE,
    Function,
    Generic,
    Primitive,
    Record,
    Tuple,
    TypeDescriptor,
    Unknown,
)
from bindcheck.compiler.type_translator import MAX_NESTING, translate_type

NUMBER = Primitive("number")
STRING = Primitive("string")
BOOLEAN = Primitive("boolean")
VOID = Primitive("void")


class TestPrimitives:
    """Tests for primitive type names."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("int", NUMBER),
            ("float", NUMBER),
            ("string", STRING),
            ("bool", BOOLEAN),
            ("unit", VOID),
            ("bigint", Primitive("bigint")),
            ("()", VOID),
            ("  int  ", NUMBER),
        ],
    )
    def test_primitive(self, translate, text, expected):
        result = translate(text)
        assert result.descriptor == expected
        assert result.warnings == ()


class TestGrouping:
    """Grouping parentheses versus tuples."""

    def test_grouping_is_transparent(self, translate):
        assert translate("(int)") == translate("int")
        assert translate("((int))") == translate("int")

    def test_tuple(self, translate):
        result = translate("(int, string)")
        assert result.descriptor == Tuple((NUMBER, STRING))

    def test_nested_tuple(self, translate):
        result = translate("(int, (string, bool))")
        assert result.descriptor == Tuple((NUMBER, Tuple((STRING, BOOLEAN))))


class TestFunctions:
    """Tests for function types."""

    def test_single_parameter(self, translate):
        assert translate("int => string").descriptor == Function((NUMBER,), STRING)

    def test_multiple_parameters(self, translate):
        result = translate("(int, string) => bool")
        assert result.descriptor == Function((NUMBER, STRING), BOOLEAN)

    def test_zero_parameters(self, translate):
        assert translate("() => unit").descriptor == Function((), VOID)

    def test_unit_parameter(self, translate):
        assert translate("unit => unit").descriptor == Function((VOID,), VOID)

    def test_uncurried_marker(self, translate):
        result = translate("(. int, string) => unit")
        assert result.descriptor == Function((NUMBER, STRING), VOID)

    def test_curried_result(self, translate):
        result = translate("int => string => bool")
        assert result.descriptor == Function((NUMBER,), Function((STRING,), BOOLEAN))

    def test_tuple_parameter(self, translate):
        result = translate("((int, string)) => unit")
        assert result.descriptor == Function((Tuple((NUMBER, STRING)),), VOID)

    def test_labeled_arguments(self, translate):
        result = translate("(~name: string, ~age: int=?) => unit")
        assert result.descriptor == Function(
            (STRING, Generic(OPTION, (NUMBER,))),
            VOID,
        )
        assert result.warnings == ()

    def test_balanced_nesting(self, translate):
        """Arrows inside parentheses or generics never split the outer type."""
        result = translate("(int => string) => array<int => string>")
        inner = Function((NUMBER,), STRING)
        assert result.descriptor == Function((inner,), Generic(ARRAY, (inner,)))
        assert result.warnings == ()


class TestGenerics:
    """Tests for generic applications."""

    def test_array_of_option(self, translate):
        result = translate("array<option<int>>")
        assert result.descriptor == Generic(ARRAY, (Generic(OPTION, (NUMBER,)),))
        assert result.warnings == ()

    @pytest.mark.parametrize(
        "text,wrapper",
        [
            ("list<int>", ARRAY),
            ("Js.Array.t<int>", ARRAY),
            ("promise<int>", PROMISE),
            ("Js.Promise.t<int>", PROMISE),
            ("Js.Nullable.t<int>", NULLABLE),
            ("Null.t<int>", NULL),
            ("dict<int>", DICT),
            ("Js.Dict.t<int>", DICT),
        ],
    )
    def test_wrappers(self, translate, text, wrapper):
        assert translate(text).descriptor == Generic(wrapper, (NUMBER,))

    def test_unknown_generic(self, translate):
        result = translate("Map.t<string, int>")
        assert isinstance(result.descriptor, Unknown)
        assert result.warnings == ("unresolved type Map.t treated as unknown",)

    def test_argument_warnings_are_kept(self, translate):
        result = translate("array<'a>")
        assert result.descriptor == Generic(ARRAY, (Unknown("type variable 'a treated as unknown"),))
        assert result.warnings == ("type variable 'a treated as unknown",)

    def test_missing_argument(self, translate):
        result = translate("array<>")
        assert isinstance(result.descriptor, Generic)
        assert isinstance(result.descriptor.args[0], Unknown)
        assert len(result.warnings) == 1


class TestRecords:
    """Tests for record types."""

    def test_record(self, translate):
        result = translate("{mutable x: int, y: string}")
        assert result.descriptor == Record((("x", NUMBER), ("y", STRING)))
        assert result.warnings == ()

    def test_quoted_field_name(self, translate):
        result = translate('{"data-id": string}')
        assert result.descriptor == Record((("data-id", STRING),))

    def test_field_without_colon_is_dropped(self, translate):
        result = translate("{x: int, y}")
        assert result.descriptor == Record((("x", NUMBER),))
        assert result.warnings == ("unsupported record field y",)

    def test_empty_record(self, translate):
        assert translate("{}").descriptor == Record(())

    def test_nested_record(self, translate):
        result = translate("{inner: {value: array<int>}}")
        assert result.descriptor == Record(
            (("inner", Record((("value", Generic(ARRAY, (NUMBER,))),))),)
        )


class TestUnknown:
    """Constructs that degrade to Unknown with a warning."""

    def test_type_variable(self, translate):
        result = translate("'a")
        assert isinstance(result.descriptor, Unknown)
        assert len(result.warnings) == 1

    def test_qualified_name(self, translate):
        result = translate("Dom.element")
        assert result.warnings == ("unresolved type Dom.element treated as unknown",)

    def test_bare_identifier(self, translate):
        result = translate("t")
        assert result.warnings == ("unresolved type t treated as unknown",)

    def test_unsupported_text(self, translate):
        result = translate("#red | #blue")
        assert isinstance(result.descriptor, Unknown)
        assert result.warnings[0].startswith("unsupported type")

    def test_empty_input(self, translate):
        result = translate("")
        assert isinstance(result.descriptor, Unknown)
        assert len(result.warnings) == 1

    def test_deep_nesting_is_cut_off(self, translate):
        depth = MAX_NESTING + 20
        result = translate("array<" * depth + "int" + ">" * depth)
        assert isinstance(result.descriptor, Generic)
        assert any("nested too deeply" in w for w in result.warnings)


class TestTotality:
    """The translator returns a descriptor for any input."""

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "   ",
            ")",
            "(((",
            "<<>>",
            "=>",
            "int =>",
            "=> int",
            "{",
            "}",
            "'",
            '"',
            "array<",
            "((a, b)",
            "{x:}",
            "{x: int,, y: int}",
            "@#$%",
            "\x00\n\t",
        ],
    )
    def test_never_raises(self, translate, text):
        result = translate(text)
        assert isinstance(result.descriptor, TypeDescriptor)

    def test_deterministic(self, translate):
        text = "(array<'a>, {x: Foo.t}) => promise<option<int>>"
        assert translate(text) == translate(text)

    def test_module_function(self):
        assert translate_type("int").descriptor == NUMBER


class TestComparisonOperators:
    """``<`` and ``>`` that do not form a type application."""

    @pytest.mark.parametrize("text", ["a < b", "a > b"])
    def test_comparison_is_unsupported(self, translate, text):
        result = translate(text)
        message = f"unsupported type {text} treated as unknown"
        assert result.descriptor == Unknown(message)
        assert result.warnings == (message,)

    def test_trailing_angle_after_function(self, translate):
        result = translate("(int, int) => bool <")
        message = "unsupported type bool < treated as unknown"
        assert result.descriptor == Function((NUMBER, NUMBER), Unknown(message))
        assert result.warnings == (message,)

    def test_unclosed_application(self, translate):
        result = translate("array<int")
        assert result.descriptor == Unknown("unsupported type array<int treated as unknown")
