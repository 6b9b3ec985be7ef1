"""Typed expression trees.

This is the closed set of node shapes the analyzer understands. Trees are
produced by the host's type resolution (or by :mod:`agentzero.expr.dsl` and
:mod:`agentzero.expr.serialization`) and are never mutated afterwards.

Every node carries:

* ``type``     - its static :class:`~agentzero.expr.types.SourceType`,
* ``text``     - its source rendering, used as the identity of opaque
                 sub-expressions and in diagnostics,
* ``constant`` - its compile-time constant value, when it has one.
"""

from __future__ import annotations

import enum
import itertools
from dataclasses import dataclass, field
from typing import Iterator, Union

from agentzero.expr.operators import OperatorResolution
from agentzero.expr.types import SourceType, TypeKind

ConstantValue = Union[bool, int, float, str, None]


@dataclass(frozen=True, slots=True)
class Constant:
    """A compile-time constant together with its runtime type code.

    The type code is the kind of the boxed runtime value, which can differ
    from the static type of the node (``'a' + 1`` folds to an ``int``).
    Decimal constants are carried as their string form.
    """

    value: ConstantValue
    type_code: TypeKind


class ElementKind(enum.Enum):
    LOCAL = "local"
    PARAMETER = "parameter"
    FIELD = "field"
    CONSTANT = "constant"
    OTHER = "other"


_element_ids = itertools.count(1)


@dataclass(frozen=True, slots=True)
class DeclaredElement:
    """A declaration a reference resolves to.

    Two references to the same declaration share one ``DeclaredElement``
    (equal ``element_id``); two locals that merely share a name do not.
    """

    name: str
    kind: ElementKind
    type: SourceType
    element_id: int = field(default_factory=lambda: next(_element_ids))

    @property
    def is_variable(self) -> bool:
        return self.kind in (ElementKind.LOCAL, ElementKind.PARAMETER)


@dataclass(frozen=True, slots=True)
class Literal:
    constant: Constant
    type: SourceType
    text: str


@dataclass(frozen=True, slots=True)
class VariableRef:
    element: DeclaredElement | None
    type: SourceType
    text: str
    constant: Constant | None = None


@dataclass(frozen=True, slots=True)
class UnaryOp:
    operator: OperatorResolution
    operand: Expression
    type: SourceType
    text: str
    constant: Constant | None = None


@dataclass(frozen=True, slots=True)
class BinaryOp:
    operator: OperatorResolution
    left: Expression
    right: Expression
    type: SourceType
    text: str
    constant: Constant | None = None


class NodeShape(enum.Enum):
    INVOCATION = "invocation"
    CAST = "cast"
    INCREMENT = "increment"
    DECREMENT = "decrement"
    MEMBER_ACCESS = "member_access"
    ELEMENT_ACCESS = "element_access"
    CONDITIONAL = "conditional"
    ASSIGNMENT = "assignment"
    OTHER = "other"


@dataclass(frozen=True, slots=True)
class Unsupported:
    """Any node shape the translator does not model (calls, casts, ``x++``...)."""

    shape: NodeShape
    type: SourceType
    text: str
    children: tuple[Expression, ...] = ()
    constant: Constant | None = None


Expression = Union[Literal, VariableRef, UnaryOp, BinaryOp, Unsupported]


def children(node: Expression) -> tuple[Expression, ...]:
    match node:
        case UnaryOp(operand=operand):
            return (operand,)
        case BinaryOp(left=left, right=right):
            return (left, right)
        case Unsupported(children=kids):
            return kids
        case _:
            return ()


def walk(node: Expression) -> Iterator[Expression]:
    """Pre-order traversal of *node* and all its descendants."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(children(current)))
