"""A small builder DSL for typed expression trees.

Trees normally come from the host's type resolution. For tests, scripts and
the command line they can be written with Python operators instead; the DSL
performs the part of type resolution the analyzer relies on: every operator
node is bound to the predefined operator C# would pick, after binary numeric
promotion of its operands.

Example:
    >>> from agentzero.expr import types as t
    >>> x = local("x", t.INT)
    >>> condition = (x > 42).and_also(x < 44)
    >>> condition.node.operator.operator.name
    'BinaryConditionalLogicalAndAlsoBool'
    >>> condition.text
    '(x > 42) && (x < 44)'

Promotion only picks the operator; no conversion nodes are inserted, so a
``byte`` operand stays a ``byte`` under an ``int`` operator.
"""

from __future__ import annotations

import typing

from agentzero.errors import OperatorResolutionError
from agentzero.expr import types as t
from agentzero.expr.ast import (
    BinaryOp,
    Constant,
    ConstantValue,
    DeclaredElement,
    ElementKind,
    Expression,
    Literal,
    NodeShape,
    UnaryOp,
    Unsupported,
    VariableRef,
)
from agentzero.expr.operators import (
    SIGNATURES,
    OperatorResolution,
    OperatorTag,
    find_operator,
)
from agentzero.expr.types import SourceType, TypeKind

INT32_RANGE = range(-(2**31), 2**31)
UINT32_RANGE = range(0, 2**32)
INT64_RANGE = range(-(2**63), 2**63)
UINT64_RANGE = range(0, 2**64)

_SMALL_INTEGRALS = frozenset(
    {TypeKind.SBYTE, TypeKind.BYTE, TypeKind.SHORT, TypeKind.USHORT, TypeKind.CHAR}
)
_SIGNED_SMALL = frozenset({TypeKind.SBYTE, TypeKind.SHORT, TypeKind.INT})
_SHIFT_TOKENS = frozenset({"<<", ">>"})
_BOOLEAN_TOKENS = frozenset({"&", "|", "^", "==", "!=", "&&", "||"})
_LITERAL_SUFFIXES = {
    TypeKind.UINT: "u",
    TypeKind.LONG: "L",
    TypeKind.ULONG: "UL",
    TypeKind.FLOAT: "f",
}

Operand = typing.Union["Term", bool, int, float]


def _cannot_apply(token: str, *types: SourceType) -> OperatorResolutionError:
    if len(types) == 1:
        return OperatorResolutionError(
            f"Operator '{token}' cannot be applied to operand of type '{types[0]}'"
        )
    return OperatorResolutionError(
        f"Operator '{token}' cannot be applied to operands of type "
        f"'{types[0]}' and '{types[1]}'"
    )


def _promote_unary(kind: TypeKind) -> TypeKind:
    return TypeKind.INT if kind in _SMALL_INTEGRALS else kind


def _is_numeric(kind: TypeKind) -> bool:
    return kind.is_integral or kind.is_floating or kind is TypeKind.DECIMAL


def _promote_numeric(token: str, left: SourceType, right: SourceType) -> TypeKind:
    """C# binary numeric promotion."""
    lk, rk = left.kind, right.kind
    kinds = {lk, rk}
    if TypeKind.DECIMAL in kinds:
        if TypeKind.FLOAT in kinds or TypeKind.DOUBLE in kinds:
            raise _cannot_apply(token, left, right)
        return TypeKind.DECIMAL
    if TypeKind.DOUBLE in kinds:
        return TypeKind.DOUBLE
    if TypeKind.FLOAT in kinds:
        return TypeKind.FLOAT
    if TypeKind.ULONG in kinds:
        other = rk if lk is TypeKind.ULONG else lk
        if other in _SIGNED_SMALL or other is TypeKind.LONG:
            raise _cannot_apply(token, left, right)
        return TypeKind.ULONG
    if TypeKind.LONG in kinds:
        return TypeKind.LONG
    if TypeKind.UINT in kinds:
        other = rk if lk is TypeKind.UINT else lk
        if other in _SIGNED_SMALL:
            return TypeKind.LONG
        return TypeKind.UINT
    return TypeKind.INT


def binary_operand_kind(token: str, left: SourceType, right: SourceType) -> TypeKind:
    """The operand kind of the predefined operator C# selects for ``left token right``."""
    lk, rk = left.kind, right.kind

    if token in _SHIFT_TOKENS:
        promoted = _promote_unary(lk)
        if not promoted.is_integral or _promote_unary(rk) is not TypeKind.INT:
            raise _cannot_apply(token, left, right)
        return promoted

    if lk is TypeKind.BOOL or rk is TypeKind.BOOL:
        if lk is rk and token in _BOOLEAN_TOKENS:
            return TypeKind.BOOL
        raise _cannot_apply(token, left, right)

    if left.is_enum or right.is_enum:
        if left == right and token in ("==", "!="):
            return TypeKind.ENUM
        raise _cannot_apply(token, left, right)

    if lk is TypeKind.STRING or rk is TypeKind.STRING:
        if token == "+" or (lk is rk and token in ("==", "!=")):
            return TypeKind.STRING
        raise _cannot_apply(token, left, right)

    if _is_numeric(lk) and _is_numeric(rk):
        return _promote_numeric(token, left, right)

    raise _cannot_apply(token, left, right)


def unary_operand_kind(token: str, operand: SourceType) -> TypeKind:
    kind = operand.kind
    if token == "!":
        if kind is not TypeKind.BOOL:
            raise _cannot_apply(token, operand)
        return kind
    if not _is_numeric(kind):
        raise _cannot_apply(token, operand)
    kind = _promote_unary(kind)
    if token == "-" and kind is TypeKind.UINT:
        return TypeKind.LONG
    return kind


def _resolve(token: str, kind: TypeKind, unary: bool, *types: SourceType) -> OperatorTag:
    tag = find_operator(token, kind, unary=unary)
    if tag is None:
        raise _cannot_apply(token, *types)
    return tag


def operand_text(node: Expression) -> str:
    if isinstance(node, BinaryOp):
        return f"({node.text})"
    return node.text


def infer_literal_type(value: ConstantValue) -> SourceType:
    """Type C# gives a literal with this value and no suffix."""
    if isinstance(value, bool):
        return t.BOOL
    if isinstance(value, int):
        for candidate, bounds in (
            (t.INT, INT32_RANGE),
            (t.UINT, UINT32_RANGE),
            (t.LONG, INT64_RANGE),
            (t.ULONG, UINT64_RANGE),
        ):
            if value in bounds:
                return candidate
        raise ValueError(f"integral literal out of range: {value}")
    if isinstance(value, float):
        return t.DOUBLE
    if isinstance(value, str):
        return t.STRING
    if value is None:
        return t.NULL
    raise TypeError(f"no literal type for {value!r}")


def literal_text(value: ConstantValue, source_type: SourceType) -> str:
    kind = source_type.kind
    if kind is TypeKind.BOOL:
        return "true" if value else "false"
    if kind is TypeKind.CHAR and isinstance(value, str):
        return f"'{value}'"
    if kind is TypeKind.STRING:
        return f'"{value}"'
    if value is None:
        return "null"
    text = repr(value) if isinstance(value, float) else str(value)
    return text + _LITERAL_SUFFIXES.get(kind, "")


_CONSTANT_TARGETS: dict[TypeKind, range | None] = {
    TypeKind.UINT: UINT32_RANGE,
    TypeKind.LONG: INT64_RANGE,
    TypeKind.ULONG: UINT64_RANGE,
    TypeKind.FLOAT: None,
    TypeKind.DOUBLE: None,
}


def convert_constant(term: Term, target: SourceType) -> Term:
    """Apply the implicit constant conversion of an ``int`` literal.

    ``u < 0`` with ``uint u`` compares two ``uint`` values: the literal is
    converted at compile time. Returns *term* unchanged when no conversion
    applies.
    """
    node = term.node
    if not isinstance(node, Literal) or node.type.kind is not TypeKind.INT:
        return term
    kind = target.kind
    if kind not in _CONSTANT_TARGETS:
        return term
    value = node.constant.value
    bounds = _CONSTANT_TARGETS[kind]
    if bounds is None:
        value = float(value)
    elif value not in bounds:
        return term
    converted = t.PRIMITIVE_TYPES[kind]
    return Term(Literal(Constant(value, kind), converted, node.text))


class Term:
    """Wraps an expression node and builds new nodes through Python operators.

    Comparisons return terms, not booleans. Python's ``and``, ``or`` and
    ``not`` cannot be overloaded; spell them :meth:`and_also`, :meth:`or_else`
    and :meth:`not_`. ``&`` and ``|`` on boolean terms are the
    non-short-circuit operators, as in C#.
    """

    __slots__ = ("node",)
    __hash__ = None  # type: ignore[assignment]

    def __init__(self, node: Expression):
        self.node = node

    @property
    def type(self) -> SourceType:
        return self.node.type

    @property
    def text(self) -> str:
        return self.node.text

    def __bool__(self):
        raise TypeError(
            "a Term has no truth value; use and_also/or_else/not_ instead of and/or/not"
        )

    def __repr__(self) -> str:
        return f"Term({self.text!r}: {self.type})"

    # -- builders ---------------------------------------------------------

    def _binary(self, token: str, other: Operand, reflected: bool = False) -> Term:
        other_term = lift(other)
        left, right = (other_term, self) if reflected else (self, other_term)
        if token not in _SHIFT_TOKENS:
            right = convert_constant(right, left.type)
            left = convert_constant(left, right.type)
        kind = binary_operand_kind(token, left.type, right.type)
        tag = _resolve(token, kind, False, left.type, right.type)
        return apply(tag, left, right)

    def _unary(self, token: str) -> Term:
        kind = unary_operand_kind(token, self.type)
        tag = _resolve(token, kind, True, self.type)
        return apply(tag, self)

    # arithmetic
    def __add__(self, other: Operand) -> Term:
        return self._binary("+", other)

    def __radd__(self, other: Operand) -> Term:
        return self._binary("+", other, reflected=True)

    def __sub__(self, other: Operand) -> Term:
        return self._binary("-", other)

    def __rsub__(self, other: Operand) -> Term:
        return self._binary("-", other, reflected=True)

    def __mul__(self, other: Operand) -> Term:
        return self._binary("*", other)

    def __rmul__(self, other: Operand) -> Term:
        return self._binary("*", other, reflected=True)

    def __truediv__(self, other: Operand) -> Term:
        return self._binary("/", other)

    def __rtruediv__(self, other: Operand) -> Term:
        return self._binary("/", other, reflected=True)

    def __mod__(self, other: Operand) -> Term:
        return self._binary("%", other)

    def __rmod__(self, other: Operand) -> Term:
        return self._binary("%", other, reflected=True)

    # bitwise and logical
    def __and__(self, other: Operand) -> Term:
        return self._binary("&", other)

    def __rand__(self, other: Operand) -> Term:
        return self._binary("&", other, reflected=True)

    def __or__(self, other: Operand) -> Term:
        return self._binary("|", other)

    def __ror__(self, other: Operand) -> Term:
        return self._binary("|", other, reflected=True)

    def __xor__(self, other: Operand) -> Term:
        return self._binary("^", other)

    def __rxor__(self, other: Operand) -> Term:
        return self._binary("^", other, reflected=True)

    def __lshift__(self, other: Operand) -> Term:
        return self._binary("<<", other)

    def __rlshift__(self, other: Operand) -> Term:
        return self._binary("<<", other, reflected=True)

    def __rshift__(self, other: Operand) -> Term:
        return self._binary(">>", other)

    def __rrshift__(self, other: Operand) -> Term:
        return self._binary(">>", other, reflected=True)

    def and_also(self, other: Operand) -> Term:
        """``self && other``"""
        return self._binary("&&", other)

    def or_else(self, other: Operand) -> Term:
        """``self || other``"""
        return self._binary("||", other)

    # unary
    def __invert__(self) -> Term:
        return self._unary("~")

    def __neg__(self) -> Term:
        return self._unary("-")

    def __pos__(self) -> Term:
        return self._unary("+")

    def not_(self) -> Term:
        """``!self``"""
        return self._unary("!")

    # comparisons
    def __eq__(self, other: Operand) -> Term:  # type: ignore[override]
        return self._binary("==", other)

    def __ne__(self, other: Operand) -> Term:  # type: ignore[override]
        return self._binary("!=", other)

    def __lt__(self, other: Operand) -> Term:
        return self._binary("<", other)

    def __le__(self, other: Operand) -> Term:
        return self._binary("<=", other)

    def __gt__(self, other: Operand) -> Term:
        return self._binary(">", other)

    def __ge__(self, other: Operand) -> Term:
        return self._binary(">=", other)


def lift(value: Operand | Expression) -> Term:
    """Turn a Python value or a bare node into a :class:`Term`."""
    if isinstance(value, Term):
        return value
    if isinstance(value, (Literal, VariableRef, UnaryOp, BinaryOp, Unsupported)):
        return Term(value)
    return literal(value)


def apply(tag: OperatorTag, operand: Operand, right: Operand | None = None) -> Term:
    """Build the node for a given predefined operator, without promotion checks.

    Useful for operators the DSL never selects on its own, such as
    ``BinaryEqualityReference``.
    """
    signature = SIGNATURES[tag]
    resolution = OperatorResolution.resolved(tag)
    first = lift(operand)
    if tag.is_unary:
        if right is not None:
            raise ValueError(f"{tag} takes one operand")
        text = f"{signature.token}{operand_text(first.node)}"
        return Term(UnaryOp(resolution, first.node, signature.result, text))

    if right is None:
        raise ValueError(f"{tag} takes two operands")
    second = lift(right)
    text = f"{operand_text(first.node)} {signature.token} {operand_text(second.node)}"
    return Term(BinaryOp(resolution, first.node, second.node, signature.result, text))


def literal(value: ConstantValue, source_type: SourceType | None = None) -> Term:
    """A literal; its type is inferred like an unsuffixed C# literal when omitted."""
    if source_type is None:
        source_type = infer_literal_type(value)
    type_code = source_type.underlying.kind if source_type.is_enum else source_type.kind
    node = Literal(Constant(value, type_code), source_type, literal_text(value, source_type))
    return Term(node)


def _reference(name: str, kind: ElementKind, source_type: SourceType) -> Term:
    element = DeclaredElement(name, kind, source_type)
    return Term(VariableRef(element, source_type, name))


def local(name: str, source_type: SourceType) -> Term:
    """A fresh local variable; each call declares a distinct variable."""
    return _reference(name, ElementKind.LOCAL, source_type)


def parameter(name: str, source_type: SourceType) -> Term:
    return _reference(name, ElementKind.PARAMETER, source_type)


def field(name: str, source_type: SourceType, constant: ConstantValue = None) -> Term:
    """A field reference; with *constant* it behaves like a ``const`` field."""
    if constant is None:
        return _reference(name, ElementKind.FIELD, source_type)
    element = DeclaredElement(name, ElementKind.CONSTANT, source_type)
    type_code = source_type.underlying.kind if source_type.is_enum else source_type.kind
    return Term(VariableRef(element, source_type, name, Constant(constant, type_code)))


def enum_member(enum: SourceType, name: str, value: int) -> Term:
    """``Enum.Member``, a named constant of an enumeration type."""
    if not enum.is_enum:
        raise ValueError(f"{enum} is not an enumeration type")
    element = DeclaredElement(name, ElementKind.CONSTANT, enum)
    constant = Constant(value, enum.underlying.kind)
    return Term(VariableRef(element, enum, f"{enum.name}.{name}", constant))


def unresolved(text: str, source_type: SourceType) -> Term:
    """A reference type resolution could not bind to a declaration."""
    return Term(VariableRef(None, source_type, text))


def call(name: str, return_type: SourceType, *args: Operand) -> Term:
    """An invocation ``name(args...)``; opaque to the analyzer."""
    arguments = tuple(lift(arg).node for arg in args)
    text = f"{name}({', '.join(arg.text for arg in arguments)})"
    return Term(Unsupported(NodeShape.INVOCATION, return_type, text, arguments))


def cast(target: SourceType, operand: Operand) -> Term:
    inner = lift(operand).node
    text = f"({target.name}){operand_text(inner)}"
    return Term(Unsupported(NodeShape.CAST, target, text, (inner,)))


def and_also(first: Operand, *rest: Operand) -> Term:
    """Left-nested ``a && b && c``."""
    result = lift(first)
    for term in rest:
        result = result.and_also(term)
    return result


def or_else(first: Operand, *rest: Operand) -> Term:
    """Left-nested ``a || b || c``."""
    result = lift(first)
    for term in rest:
        result = result.or_else(term)
    return result


def not_(operand: Operand) -> Term:
    return lift(operand).not_()
