"""
Structural type descriptors.

A ReScript type expression is translated into one of these immutable
nodes. The variants mirror what the assignability oracle can compare:
primitives, functions, tuples, records, a handful of generic wrappers, and
Unknown for anything that could not be resolved.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any


class TypeDescriptor(ABC):
    """Base class for all type descriptors."""

    @abstractmethod
    def accept(self, visitor: "TypeVisitor") -> Any:
        """Accept a visitor for tree traversal."""
        pass


class TypeVisitor(ABC):
    """
    Visitor pattern base class for descriptor traversal.

    Implement this to render descriptors for a particular oracle.
    """

    def visit(self, node: TypeDescriptor) -> Any:
        """Dispatch to the appropriate visit method."""
        return node.accept(self)

    @abstractmethod
    def visit_primitive(self, node: "Primitive") -> Any: ...

    @abstractmethod
    def visit_function(self, node: "Function") -> Any: ...

    @abstractmethod
    def visit_tuple(self, node: "Tuple") -> Any: ...

    @abstractmethod
    def visit_record(self, node: "Record") -> Any: ...

    @abstractmethod
    def visit_generic(self, node: "Generic") -> Any: ...

    @abstractmethod
    def visit_unknown(self, node: "Unknown") -> Any: ...


# -----------------------------------------------------------------------------
# Generic wrapper names
# -----------------------------------------------------------------------------

ARRAY = "Array"          # T[]
OPTION = "Option"        # T | undefined
NULLABLE = "Nullable"    # T | null | undefined
NULL = "Null"            # T | null
PROMISE = "Promise"      # Promise<T>
DICT = "Dict"            # { [key: string]: T }


# -----------------------------------------------------------------------------
# Descriptors
# -----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Primitive(TypeDescriptor):
    """
    A runtime primitive.

    Examples:
        number, string, boolean, void, bigint
    """

    name: str

    def accept(self, visitor: TypeVisitor) -> Any:
        return visitor.visit_primitive(self)


@dataclass(frozen=True, slots=True)
class Function(TypeDescriptor):
    """
    A function taking positional parameters.

    Example:
        (int, string) => bool
    """

    params: tuple[TypeDescriptor, ...]
    result: TypeDescriptor

    def accept(self, visitor: TypeVisitor) -> Any:
        return visitor.visit_function(self)


@dataclass(frozen=True, slots=True)
class Tuple(TypeDescriptor):
    """A fixed-length, positionally typed tuple."""

    elements: tuple[TypeDescriptor, ...]

    def accept(self, visitor: TypeVisitor) -> Any:
        return visitor.visit_tuple(self)


@dataclass(frozen=True, slots=True)
class Record(TypeDescriptor):
    """A record or object type; field order follows the source."""

    fields: tuple[tuple[str, TypeDescriptor], ...]

    def accept(self, visitor: TypeVisitor) -> Any:
        return visitor.visit_record(self)


@dataclass(frozen=True, slots=True)
class Generic(TypeDescriptor):
    """
    A resolved generic wrapper such as Array or Promise.

    ``name`` is one of the wrapper constants defined in this module.
    """

    name: str
    args: tuple[TypeDescriptor, ...]

    def accept(self, visitor: TypeVisitor) -> Any:
        return visitor.visit_generic(self)


@dataclass(frozen=True, slots=True)
class Unknown(TypeDescriptor):
    """An opaque type; ``reason`` says why translation gave up."""

    reason: str

    def accept(self, visitor: TypeVisitor) -> Any:
        return visitor.visit_unknown(self)
