"""
Oracle input synthesis.

Turns scanned declarations into what the assignability oracle consumes:
the translated expected type plus the metadata needed to find the actual
runtime value (module, scope chain, binding path). For the TypeScript
oracle this module also renders descriptors as TypeScript and lays out the
synthetic program the compiler is run over.

For a declaration such as

    @module("path") @scope("posix")
    external join: (string, string) => string = "join"

the synthetic program contains

    import * as __mod0 from "path";
    type __expected_0 = (arg0: string, arg1: string) => string;
    type __actual_0 = typeof __mod0.posix.join;
    declare const __value_0: __actual_0;
    const __check_0: __expected_0 = __value_0;
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Sequence

from bindcheck.compiler.externals import ExternalDecl
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
    TypeVisitor,
    Unknown,
)
from bindcheck.compiler.type_translator import TranslationResult, TypeTranslator

_TS_IDENTIFIER = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")

GLOBAL_ROOT = "globalThis"
MODULE_ALIAS_PREFIX = "__mod"


def is_ts_identifier(name: str) -> bool:
    return bool(_TS_IDENTIFIER.match(name))


# =============================================================================
# Binding Resolution
# =============================================================================


@dataclass(frozen=True, slots=True)
class BindingTarget:
    """
    Where the runtime value of a declaration lives.

    Attributes:
        module: Module the value is imported from, or None for a global
        scope: Property chain walked from the module (or global) root
        path: The binding's own segments, appended after the scope
    """

    module: Optional[str]
    scope: tuple[str, ...]
    path: tuple[str, ...]

    @classmethod
    def from_decl(cls, decl: ExternalDecl) -> BindingTarget:
        attributes = decl.attributes
        name = attributes.as_ or decl.binding or decl.name
        return cls(
            module=attributes.module,
            scope=attributes.scope or (),
            path=tuple(name.split(".")),
        )

    @property
    def segments(self) -> tuple[str, ...]:
        return self.scope + self.path


@dataclass(frozen=True, slots=True)
class OracleRequest:
    """One declaration as handed to the oracle."""

    decl: ExternalDecl
    expected: TranslationResult
    target: BindingTarget

    @property
    def warnings(self) -> tuple[str, ...]:
        return self.expected.warnings


def build_requests(externals: Sequence[ExternalDecl]) -> list[OracleRequest]:
    """Translate each declaration's type and resolve its binding target."""
    translator = TypeTranslator()
    return [
        OracleRequest(
            decl=decl,
            expected=translator.translate(decl.res_type),
            target=BindingTarget.from_decl(decl),
        )
        for decl in externals
    ]


# =============================================================================
# TypeScript Rendering
# =============================================================================


class TypeScriptRenderer(TypeVisitor):
    """
    Render descriptors as TypeScript type syntax.

    Usage:
        TypeScriptRenderer().visit(Generic(ARRAY, (Primitive("number"),)))
        # 'Array<number>'
    """

    def visit_primitive(self, node: Primitive) -> str:
        return node.name

    def visit_function(self, node: Function) -> str:
        params = ", ".join(
            f"arg{index}: {self.visit(param)}" for index, param in enumerate(node.params)
        )
        return f"({params}) => {self.visit(node.result)}"

    def visit_tuple(self, node: Tuple) -> str:
        return "[" + ", ".join(self.visit(element) for element in node.elements) + "]"

    def visit_record(self, node: Record) -> str:
        if not node.fields:
            return "{}"
        fields = "; ".join(
            f"{_property_key(name)}: {self.visit(value)}" for name, value in node.fields
        )
        return f"{{ {fields} }}"

    def visit_generic(self, node: Generic) -> str:
        arg = self.visit(node.args[0]) if node.args else "unknown"
        # A bare function type would swallow the union into its result type.
        operand = f"({arg})" if node.args and isinstance(node.args[0], Function) else arg

        if node.name == ARRAY:
            return f"Array<{arg}>"
        if node.name == OPTION:
            return f"({operand} | undefined)"
        if node.name == NULLABLE:
            return f"({operand} | null | undefined)"
        if node.name == NULL:
            return f"({operand} | null)"
        if node.name == PROMISE:
            return f"Promise<{arg}>"
        if node.name == DICT:
            return f"{{ [key: string]: {arg} }}"
        return "unknown"

    def visit_unknown(self, node: Unknown) -> str:
        return "unknown"


def _property_key(name: str) -> str:
    return name if is_ts_identifier(name) else json.dumps(name)


def render_typescript(descriptor: TypeDescriptor) -> str:
    """Convenience function to render one descriptor."""
    return TypeScriptRenderer().visit(descriptor)


def build_type_query(root: str, segments: Sequence[str]) -> str:
    """
    Build a type query for the value at ``root.segments``.

    Plain identifiers are chained with dots; from the first segment that
    is not an identifier onward, indexed access types with JSON-quoted keys
    are used instead.

        build_type_query("globalThis", ["JSON", "parse"])
        # 'typeof globalThis.JSON.parse'
        build_type_query("__mod0", ["default", "kebab-case"])
        # '(typeof __mod0.default)["kebab-case"]'
    """
    dotted = [root]
    rest = list(segments)
    while rest and is_ts_identifier(rest[0]):
        dotted.append(rest.pop(0))

    query = "typeof " + ".".join(dotted)
    if not rest:
        return query
    return f"({query})" + "".join(f"[{json.dumps(segment)}]" for segment in rest)


# =============================================================================
# Synthetic Program
# =============================================================================


class LineRole(Enum):
    """What a line of the synthetic program encodes."""

    EXPECTED = "expected"
    ACTUAL = "actual"
    PROBE = "probe"


@dataclass(frozen=True, slots=True)
class ProbeEntry:
    """
    Lines of the synthetic program that belong to one declaration.

    Line numbers are 1-indexed, matching compiler output.
    """

    index: int
    expected_type: str
    expected_line: int
    actual_line: int
    probe_line: int


@dataclass
class SyntheticProgram:
    """
    A generated TypeScript module plus the map back to declarations.

    Attributes:
        source_text: Complete program text
        entries: One entry per request, in request order
    """

    source_text: str
    entries: list[ProbeEntry] = field(default_factory=list)
    _lines: dict[int, tuple[int, LineRole]] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        for entry in self.entries:
            self._lines[entry.expected_line] = (entry.index, LineRole.EXPECTED)
            self._lines[entry.actual_line] = (entry.index, LineRole.ACTUAL)
            self._lines[entry.probe_line] = (entry.index, LineRole.PROBE)

    def locate(self, line: int) -> Optional[tuple[int, LineRole]]:
        """Map a 1-indexed program line to (request index, role)."""
        return self._lines.get(line)


def build_synthetic_program(requests: Sequence[OracleRequest]) -> SyntheticProgram:
    """
    Lay out the synthetic TypeScript program for a batch of requests.

    Each distinct module gets one namespace import, aliased in first-use
    order. Every request contributes its warnings as comments, an expected
    alias, an actual alias and one assignment probe.
    """
    module_aliases: dict[str, str] = {}
    for request in requests:
        module = request.target.module
        if module is not None and module not in module_aliases:
            module_aliases[module] = f"{MODULE_ALIAS_PREFIX}{len(module_aliases)}"

    lines = [
        f"import * as {alias} from {json.dumps(module)};"
        for module, alias in module_aliases.items()
    ]
    lines.append(f"type __Global = typeof {GLOBAL_ROOT};")

    renderer = TypeScriptRenderer()
    entries: list[ProbeEntry] = []
    for index, request in enumerate(requests):
        for message in request.warnings:
            lines.append("// warning: " + " ".join(message.split()))

        expected_type = renderer.visit(request.expected.descriptor)
        module = request.target.module
        root = module_aliases[module] if module is not None else GLOBAL_ROOT

        lines.append(f"type __expected_{index} = {expected_type};")
        expected_line = len(lines)
        lines.append(f"type __actual_{index} = {build_type_query(root, request.target.segments)};")
        actual_line = len(lines)
        lines.append(f"declare const __value_{index}: __actual_{index};")
        lines.append(f"const __check_{index}: __expected_{index} = __value_{index};")
        probe_line = len(lines)

        entries.append(
            ProbeEntry(
                index=index,
                expected_type=expected_type,
                expected_line=expected_line,
                actual_line=actual_line,
                probe_line=probe_line,
            )
        )

    lines.append("export {};")
    return SyntheticProgram(source_text="\n".join(lines) + "\n", entries=entries)
