"""Z3 semantics of the predefined operators.

Each :class:`~agentzero.expr.operators.OperatorTag` the analyzer models has
exactly one handler in one of the tables below; the tags it recognises but
never models are listed in :data:`UNSUPPORTED`. Binary handlers are grouped
by the family of the operator's declared result type, which is how the
translator dispatches:

=========  ================================  ==========================
family     result types                      table
=========  ================================  ==========================
BOOLEAN    bool                              ``BINARY_HANDLERS[BOOLEAN]``
INTEGER    int, uint, long, ulong            ``BINARY_HANDLERS[INTEGER]``
FLOAT      float, double                     ``BINARY_HANDLERS[FLOAT]``
=========  ================================  ==========================

Signedness is not part of a bitvector sort; it is chosen here from the
operand type baked into the tag (``BinaryLessInt`` vs ``BinaryLessUint``).
"""

from __future__ import annotations

import enum
import operator
import typing

import z3

from agentzero.expr.operators import SIGNATURES, OperatorTag
from agentzero.expr.types import SourceType, TypeKind
from agentzero.smt.terms import SymbolicExpr

if typing.TYPE_CHECKING:
    from agentzero.smt.session import AnalysisSession

BinaryHandler = typing.Callable[
    ["AnalysisSession", SymbolicExpr, SymbolicExpr], z3.ExprRef
]
UnaryHandler = typing.Callable[["AnalysisSession", SymbolicExpr], z3.ExprRef]

# C# shift counts are always int
SHIFT_COUNT_WIDTH = 32


class ResultFamily(enum.Enum):
    BOOLEAN = "boolean"
    INTEGER = "integer"
    FLOAT = "float"


_FAMILIES: dict[TypeKind, ResultFamily] = {
    TypeKind.BOOL: ResultFamily.BOOLEAN,
    TypeKind.INT: ResultFamily.INTEGER,
    TypeKind.UINT: ResultFamily.INTEGER,
    TypeKind.LONG: ResultFamily.INTEGER,
    TypeKind.ULONG: ResultFamily.INTEGER,
    TypeKind.FLOAT: ResultFamily.FLOAT,
    TypeKind.DOUBLE: ResultFamily.FLOAT,
}


def family_of(result_type: SourceType) -> ResultFamily | None:
    """Handler family for an operator's declared result type, if any."""
    return _FAMILIES.get(result_type.kind)


UNSUPPORTED: frozenset[OperatorTag] = frozenset(
    {
        OperatorTag.BINARY_EQUALITY_DECIMAL,
        OperatorTag.BINARY_INEQUALITY_DECIMAL,
        OperatorTag.BINARY_GREATER_DECIMAL,
        OperatorTag.BINARY_LESS_DECIMAL,
        OperatorTag.BINARY_EQUALITY_DELEGATE,
        OperatorTag.BINARY_INEQUALITY_DELEGATE,
        OperatorTag.BINARY_EQUALITY_NULLABLE,
        OperatorTag.BINARY_INEQUALITY_NULLABLE,
        OperatorTag.BINARY_EQUALITY_STRING,
        OperatorTag.BINARY_INEQUALITY_STRING,
        OperatorTag.BINARY_EQUALITY_REFERENCE,
        OperatorTag.BINARY_INEQUALITY_REFERENCE,
        OperatorTag.BINARY_PLUS_DECIMAL,
        OperatorTag.BINARY_MINUS_DECIMAL,
        OperatorTag.BINARY_PLUS_STRING,
        OperatorTag.UNARY_MINUS_DECIMAL,
        OperatorTag.UNARY_PLUS_DECIMAL,
    }
)


# ---------------------------------------------------------------------------
# primitive operations, keyed by surface token
# ---------------------------------------------------------------------------

_BOOLEAN_OPS = {
    "==": operator.eq,
    "!=": lambda a, b: z3.Xor(a, b),
    "&": lambda a, b: z3.And(a, b),
    "&&": lambda a, b: z3.And(a, b),
    "|": lambda a, b: z3.Or(a, b),
    "||": lambda a, b: z3.Or(a, b),
    "^": lambda a, b: z3.Xor(a, b),
}

_SIGNED_COMPARISONS = {
    "==": operator.eq,
    "!=": operator.ne,
    ">": operator.gt,
    ">=": operator.ge,
    "<": operator.lt,
    "<=": operator.le,
}

_UNSIGNED_COMPARISONS = {
    "==": operator.eq,
    "!=": operator.ne,
    ">": z3.UGT,
    ">=": z3.UGE,
    "<": z3.ULT,
    "<=": z3.ULE,
}

# '/' on BitVecRef is signed division; '%' would be SMod, whose sign follows
# the divisor, so the truncated remainder is spelled out.
_SIGNED_INTEGER_OPS = {
    "+": operator.add,
    "-": operator.sub,
    "*": operator.mul,
    "/": operator.truediv,
    "%": z3.SRem,
    "&": operator.and_,
    "|": operator.or_,
    "^": operator.xor,
    "<<": operator.lshift,
    ">>": operator.rshift,  # arithmetic
}

_UNSIGNED_INTEGER_OPS = {
    **_SIGNED_INTEGER_OPS,
    "/": z3.UDiv,
    "%": z3.URem,
    ">>": z3.LShR,
}

_FLOAT_COMPARISONS = {
    "==": z3.fpEQ,
    "!=": z3.fpNEQ,
    ">": z3.fpGT,
    ">=": z3.fpGEQ,
    "<": z3.fpLT,
    "<=": z3.fpLEQ,
}

_FLOAT_ROUNDED_OPS = {
    "+": z3.fpAdd,
    "-": z3.fpSub,
    "*": z3.fpMul,
    "/": z3.fpDiv,
}

_COMPARISON_TOKENS = frozenset(_SIGNED_COMPARISONS)
_SHIFT_TOKENS = frozenset({"<<", ">>"})


def shift_count(count: SymbolicExpr, width: int) -> z3.BitVecRef:
    """Bring an ``int`` shift count to *width* bits, masked like the runtime does.

    ``x << 33`` on an ``int`` shifts by 1: only the low ``log2(width)`` bits
    of the count are used.
    """
    masked = count.as_bitvec(SHIFT_COUNT_WIDTH) & (width - 1)
    if width > SHIFT_COUNT_WIDTH:
        return z3.ZeroExt(width - SHIFT_COUNT_WIDTH, masked)
    if width < SHIFT_COUNT_WIDTH:
        return z3.Extract(width - 1, 0, masked)
    return masked


# ---------------------------------------------------------------------------
# handler factories
# ---------------------------------------------------------------------------


def _boolean_handler(token: str) -> BinaryHandler:
    op = _BOOLEAN_OPS[token]

    def handler(session, left, right):
        return op(left.as_bool(), right.as_bool())

    return handler


def _enum_handler(token: str) -> BinaryHandler:
    op = _SIGNED_COMPARISONS[token]

    def handler(session, left, right):
        value = left.as_bitvec()
        return op(value, right.as_bitvec(value.size()))

    return handler


def _integer_comparison_handler(token: str, operand: TypeKind) -> BinaryHandler:
    width = operand.bit_width
    ops = _SIGNED_COMPARISONS if operand.is_signed else _UNSIGNED_COMPARISONS
    op = ops[token]

    def handler(session, left, right):
        return op(left.as_bitvec(width), right.as_bitvec(width))

    return handler


def _integer_handler(token: str, operand: TypeKind) -> BinaryHandler:
    width = operand.bit_width
    ops = _SIGNED_INTEGER_OPS if operand.is_signed else _UNSIGNED_INTEGER_OPS
    op = ops[token]

    if token in _SHIFT_TOKENS:

        def shift(session, left, right):
            return op(left.as_bitvec(width), shift_count(right, width))

        return shift

    def handler(session, left, right):
        return op(left.as_bitvec(width), right.as_bitvec(width))

    return handler


def _float_comparison_handler(token: str, operand: TypeKind) -> BinaryHandler:
    width = operand.bit_width
    op = _FLOAT_COMPARISONS[token]

    def handler(session, left, right):
        return op(left.as_float(width=width), right.as_float(like=left), session.ctx)

    return handler


def _float_handler(token: str, operand: TypeKind) -> BinaryHandler:
    width = operand.bit_width
    if token == "%":
        # IEEE remainder does not depend on the rounding mode
        def remainder(session, left, right):
            return z3.fpRem(
                left.as_float(width=width), right.as_float(like=left), session.ctx
            )

        return remainder

    op = _FLOAT_ROUNDED_OPS[token]

    def handler(session, left, right):
        return op(
            session.rounding_mode,
            left.as_float(width=width),
            right.as_float(like=left),
            session.ctx,
        )

    return handler


def _build_binary_tables() -> dict[ResultFamily, dict[OperatorTag, BinaryHandler]]:
    tables: dict[ResultFamily, dict[OperatorTag, BinaryHandler]] = {
        family: {} for family in ResultFamily
    }
    for tag, signature in SIGNATURES.items():
        if tag.is_unary or tag in UNSUPPORTED:
            continue
        token, operand = signature.token, signature.operand
        if operand is TypeKind.BOOL:
            tables[ResultFamily.BOOLEAN][tag] = _boolean_handler(token)
        elif operand is TypeKind.ENUM:
            tables[ResultFamily.BOOLEAN][tag] = _enum_handler(token)
        elif operand.is_integral:
            if token in _COMPARISON_TOKENS:
                tables[ResultFamily.BOOLEAN][tag] = _integer_comparison_handler(
                    token, operand
                )
            else:
                tables[ResultFamily.INTEGER][tag] = _integer_handler(token, operand)
        elif operand.is_floating:
            if token in _COMPARISON_TOKENS:
                tables[ResultFamily.BOOLEAN][tag] = _float_comparison_handler(
                    token, operand
                )
            else:
                tables[ResultFamily.FLOAT][tag] = _float_handler(token, operand)
    return tables


BINARY_HANDLERS: dict[ResultFamily, dict[OperatorTag, BinaryHandler]] = (
    _build_binary_tables()
)


# ---------------------------------------------------------------------------
# unary operators
# ---------------------------------------------------------------------------


def _complement(width: int) -> UnaryHandler:
    return lambda session, operand: ~operand.as_bitvec(width)


def _negate(width: int) -> UnaryHandler:
    return lambda session, operand: -operand.as_bitvec(width)


def _bitvec_identity(width: int) -> UnaryHandler:
    return lambda session, operand: operand.as_bitvec(width)


def _float_negate(session, operand):
    return z3.fpNeg(operand.as_float(), session.ctx)


def _float_identity(session, operand):
    return operand.as_float()


def _logical_negation(session, operand):
    return z3.Not(operand.as_bool())


UNARY_HANDLERS: dict[OperatorTag, UnaryHandler] = {
    OperatorTag.UNARY_BITWISE_COMPLEMENT_INT: _complement(32),
    OperatorTag.UNARY_BITWISE_COMPLEMENT_UINT: _complement(32),
    OperatorTag.UNARY_BITWISE_COMPLEMENT_LONG: _complement(64),
    OperatorTag.UNARY_BITWISE_COMPLEMENT_ULONG: _complement(64),
    OperatorTag.UNARY_LOGICAL_NEGATION: _logical_negation,
    OperatorTag.UNARY_MINUS_INT: _negate(32),
    OperatorTag.UNARY_MINUS_LONG: _negate(64),
    OperatorTag.UNARY_MINUS_FLOAT: _float_negate,
    OperatorTag.UNARY_MINUS_DOUBLE: _float_negate,
    OperatorTag.UNARY_PLUS_INT: _bitvec_identity(32),
    OperatorTag.UNARY_PLUS_UINT: _bitvec_identity(32),
    OperatorTag.UNARY_PLUS_LONG: _bitvec_identity(64),
    OperatorTag.UNARY_PLUS_ULONG: _bitvec_identity(64),
    OperatorTag.UNARY_PLUS_FLOAT: _float_identity,
    OperatorTag.UNARY_PLUS_DOUBLE: _float_identity,
}


def binary_handler(family: ResultFamily, tag: OperatorTag | None) -> BinaryHandler | None:
    if tag is None:
        return None
    return BINARY_HANDLERS[family].get(tag)


def unary_handler(tag: OperatorTag | None) -> UnaryHandler | None:
    if tag is None:
        return None
    return UNARY_HANDLERS.get(tag)
