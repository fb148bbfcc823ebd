"""
ReScript type expression translator.

Converts the raw type text captured from an external declaration into a
structural TypeDescriptor. Translation is total: every input produces a
descriptor, and constructs that cannot be resolved degrade to Unknown with
a warning explaining why.

Grammar handled (everything else becomes Unknown):

    type     := params "=>" type | primary
    params   := "(" ["."] type {"," type} ")" | primary
    primary  := "(" type "," type {"," type} ")"        tuple
              | "{" [field {"," field}] "}"              record
              | name "<" type {"," type} ">"            generic application
              | "'" ident                               type variable
              | int | float | string | bool | unit | bigint
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from bindcheck.compiler.nesting import (
    ARROW,
    find_top_level,
    is_balanced,
    split_top_level,
    unquote,
)
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

PRIMITIVE_TYPES: dict[str, str] = {
    "int": "number",
    "float": "number",
    "string": "string",
    "bool": "boolean",
    "unit": "void",
    "bigint": "bigint",
}

GENERIC_TYPES: dict[str, str] = {
    "array": ARRAY,
    "list": ARRAY,
    "Array.t": ARRAY,
    "Js.Array.t": ARRAY,
    "option": OPTION,
    "promise": PROMISE,
    "Promise": PROMISE,
    "Promise.t": PROMISE,
    "Js.Promise.t": PROMISE,
    "Js.Nullable.t": NULLABLE,
    "Nullable.t": NULLABLE,
    "Js.Null.t": NULL,
    "Null.t": NULL,
    "dict": DICT,
    "Dict.t": DICT,
    "Js.Dict.t": DICT,
}

# Beyond this depth the expression is reported as unknown rather than
# exhausting the interpreter's recursion limit.
MAX_NESTING = 100

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_LABELED_ARGUMENT = re.compile(r"^~\s*[A-Za-z_][A-Za-z0-9_']*\s*:(.*?)(=\?)?$", re.DOTALL)
_MUTABLE_PREFIX = re.compile(r"^mutable\s+")
# Uncurried marker in "(. a, b) => c".
_UNCURRIED_MARKER = "."


@dataclass(frozen=True, slots=True)
class TranslationResult:
    """
    A translated type together with everything that was lost on the way.

    Attributes:
        descriptor: The structural descriptor
        warnings: Human-readable warnings in the order they arose
    """

    descriptor: TypeDescriptor
    warnings: tuple[str, ...] = field(default=())


class TypeTranslator:
    """
    Recursive descent translator over raw type text.

    Splitting is depth-aware, so separators inside nested brackets or
    string literals never split an outer construct.

    Usage:
        result = TypeTranslator().translate("array<option<int>>")
        result.descriptor  # Generic("Array", (Generic("Option", ...),))
    """

    def __init__(self) -> None:
        self._warnings: list[str] = []
        self._depth = 0

    def translate(self, type_text: str) -> TranslationResult:
        """
        Translate one type expression.

        Args:
            type_text: Raw ReScript type text

        Returns:
            The descriptor and the warnings produced while building it
        """
        self._warnings = []
        self._depth = 0
        descriptor = self._parse_type(type_text)
        return TranslationResult(descriptor, tuple(self._warnings))

    def _unknown(self, message: str) -> Unknown:
        self._warnings.append(message)
        return Unknown(message)

    # -------------------------------------------------------------------------
    # Types
    # -------------------------------------------------------------------------

    def _parse_type(self, text: str) -> TypeDescriptor:
        if self._depth >= MAX_NESTING:
            return self._unknown(f"type nested too deeply treated as unknown: {text.strip()}")
        self._depth += 1
        try:
            return self._parse_type_inner(text)
        finally:
            self._depth -= 1

    def _parse_type_inner(self, text: str) -> TypeDescriptor:
        text = text.strip()
        if text == "()":
            return Primitive("void")
        text = _strip_grouping(text)

        arrow = find_top_level(text, ARROW)
        if arrow != -1:
            params = self._parse_function_params(text[:arrow])
            result = self._parse_type(text[arrow + len(ARROW):])
            return Function(params, result)

        return self._parse_primary(text)

    def _parse_function_params(self, text: str) -> tuple[TypeDescriptor, ...]:
        text = _strip_parens(text.strip())
        if text.startswith(_UNCURRIED_MARKER):
            text = text[len(_UNCURRIED_MARKER):].strip()
        if not text:
            return ()

        parts = split_top_level(text, ",")
        if len(parts) <= 1:
            return (self._parse_param(text),)
        return tuple(self._parse_param(part) for part in parts)

    def _parse_param(self, text: str) -> TypeDescriptor:
        labeled = _LABELED_ARGUMENT.match(text.strip())
        if labeled is None:
            return self._parse_type(text)
        param_type = self._parse_type(labeled.group(1))
        if labeled.group(2):
            return Generic(OPTION, (param_type,))
        return param_type

    def _parse_primary(self, text: str) -> TypeDescriptor:
        if not text:
            return self._unknown("empty type expression treated as unknown")

        if _is_tuple(text):
            parts = split_top_level(text[1:-1], ",")
            return Tuple(tuple(self._parse_type(part) for part in parts))

        if text.startswith("{") and text.endswith("}") and is_balanced(text[1:-1]):
            return self._parse_record(text)

        application = _split_type_application(text)
        if application is not None:
            callee, args = application
            return self._resolve_type_application(callee, args)

        if text.startswith("'"):
            return self._unknown(f"type variable {text} treated as unknown")

        if text in PRIMITIVE_TYPES:
            return Primitive(PRIMITIVE_TYPES[text])

        if "." in text or _IDENTIFIER.match(text):
            return self._unknown(f"unresolved type {text} treated as unknown")

        return self._unknown(f"unsupported type {text} treated as unknown")

    def _parse_record(self, text: str) -> TypeDescriptor:
        inner = text[1:-1].strip()
        fields: list[tuple[str, TypeDescriptor]] = []
        if not inner:
            return Record(())

        for part in split_top_level(inner, ","):
            if not part:
                continue
            cleaned = _MUTABLE_PREFIX.sub("", part)
            colon = cleaned.find(":")
            if colon == -1:
                self._warnings.append(f"unsupported record field {cleaned}")
                continue
            name = unquote(cleaned[:colon].strip())
            fields.append((name, self._parse_type(cleaned[colon + 1:])))

        return Record(tuple(fields))

    def _resolve_type_application(self, callee: str, raw_args: list[str]) -> TypeDescriptor:
        args = [self._parse_type(arg) for arg in raw_args]

        wrapper = GENERIC_TYPES.get(callee)
        if wrapper is None:
            return self._unknown(f"unresolved type {callee} treated as unknown")

        if not args:
            args = [self._unknown(f"missing type argument for {callee} treated as unknown")]
        return Generic(wrapper, (args[0],))


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------


def _strip_parens(text: str) -> str:
    """Drop one outer parenthesis pair if what remains is balanced."""
    if text.startswith("(") and text.endswith(")"):
        inner = text[1:-1]
        if is_balanced(inner):
            return inner.strip()
    return text


def _strip_grouping(text: str) -> str:
    """Drop redundant grouping parentheses, keeping tuple parentheses."""
    while True:
        stripped = _strip_parens(text)
        if stripped == text or len(split_top_level(stripped, ",")) > 1:
            return text
        text = stripped


def _is_tuple(text: str) -> bool:
    if not (text.startswith("(") and text.endswith(")")):
        return False
    inner = text[1:-1]
    return is_balanced(inner) and len(split_top_level(inner, ",")) > 1


def _split_type_application(text: str) -> tuple[str, list[str]] | None:
    angle = find_top_level(text, "<")
    if angle <= 0 or not text.endswith(">") or not is_balanced(text[angle:]):
        return None
    callee = text[:angle].strip()
    return callee, split_top_level(text[angle + 1:-1], ",")


def translate_type(type_text: str) -> TranslationResult:
    """
    Convenience function to translate a single type expression.

    Args:
        type_text: Raw ReScript type text

    Returns:
        TranslationResult with descriptor and warnings
    """
    return TypeTranslator().translate(type_text)
