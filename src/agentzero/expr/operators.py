"""Predefined operators of the source language.

The host's type resolution binds every unary and binary operator node to one
predefined operator, e.g. ``BinaryPlusInt`` or ``BinaryLessUlong``. That
identity, not the surface token, decides the translation: ``+`` alone denotes
a dozen different operators.

:data:`SIGNATURES` describes each :class:`OperatorTag` (token, operand type,
result type); it is the single catalogue both the builder DSL and the
translator tables are derived from.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

from agentzero.expr import types as t
from agentzero.expr.types import SourceType, TypeKind


class OperatorTag(enum.Enum):
    # boolean operators
    BINARY_EQUALITY_BOOL = "BinaryEqualityBool"
    BINARY_INEQUALITY_BOOL = "BinaryInequalityBool"
    BINARY_LOGICAL_AND_BOOL = "BinaryLogicalAndBool"
    BINARY_LOGICAL_OR_BOOL = "BinaryLogicalOrBool"
    BINARY_LOGICAL_XOR_BOOL = "BinaryLogicalXorBool"
    BINARY_CONDITIONAL_LOGICAL_AND_ALSO_BOOL = "BinaryConditionalLogicalAndAlsoBool"
    BINARY_CONDITIONAL_LOGICAL_OR_ELSE_BOOL = "BinaryConditionalLogicalOrElseBool"

    # integer arithmetic
    BINARY_PLUS_INT = "BinaryPlusInt"
    BINARY_PLUS_UINT = "BinaryPlusUint"
    BINARY_PLUS_LONG = "BinaryPlusLong"
    BINARY_PLUS_ULONG = "BinaryPlusUlong"
    BINARY_MINUS_INT = "BinaryMinusInt"
    BINARY_MINUS_UINT = "BinaryMinusUint"
    BINARY_MINUS_LONG = "BinaryMinusLong"
    BINARY_MINUS_ULONG = "BinaryMinusUlong"
    BINARY_MULTIPLICATION_INT = "BinaryMultiplicationInt"
    BINARY_MULTIPLICATION_UINT = "BinaryMultiplicationUint"
    BINARY_MULTIPLICATION_LONG = "BinaryMultiplicationLong"
    BINARY_MULTIPLICATION_ULONG = "BinaryMultiplicationUlong"
    BINARY_DIVISION_INT = "BinaryDivisionInt"
    BINARY_DIVISION_UINT = "BinaryDivisionUint"
    BINARY_DIVISION_LONG = "BinaryDivisionLong"
    BINARY_DIVISION_ULONG = "BinaryDivisionUlong"
    BINARY_REMAINDER_INT = "BinaryRemainderInt"
    BINARY_REMAINDER_UINT = "BinaryRemainderUint"
    BINARY_REMAINDER_LONG = "BinaryRemainderLong"
    BINARY_REMAINDER_ULONG = "BinaryRemainderUlong"

    # integer bitwise and shifts
    BINARY_LOGICAL_AND_INT = "BinaryLogicalAndInt"
    BINARY_LOGICAL_AND_UINT = "BinaryLogicalAndUint"
    BINARY_LOGICAL_AND_LONG = "BinaryLogicalAndLong"
    BINARY_LOGICAL_AND_ULONG = "BinaryLogicalAndUlong"
    BINARY_LOGICAL_OR_INT = "BinaryLogicalOrInt"
    BINARY_LOGICAL_OR_UINT = "BinaryLogicalOrUint"
    BINARY_LOGICAL_OR_LONG = "BinaryLogicalOrLong"
    BINARY_LOGICAL_OR_ULONG = "BinaryLogicalOrUlong"
    BINARY_LOGICAL_XOR_INT = "BinaryLogicalXorInt"
    BINARY_LOGICAL_XOR_UINT = "BinaryLogicalXorUint"
    BINARY_LOGICAL_XOR_LONG = "BinaryLogicalXorLong"
    BINARY_LOGICAL_XOR_ULONG = "BinaryLogicalXorUlong"
    BINARY_LEFT_SHIFT_INT = "BinaryLeftShiftInt"
    BINARY_LEFT_SHIFT_UINT = "BinaryLeftShiftUint"
    BINARY_LEFT_SHIFT_LONG = "BinaryLeftShiftLong"
    BINARY_LEFT_SHIFT_ULONG = "BinaryLeftShiftUlong"
    BINARY_RIGHT_SHIFT_INT = "BinaryRightShiftInt"
    BINARY_RIGHT_SHIFT_UINT = "BinaryRightShiftUint"
    BINARY_RIGHT_SHIFT_LONG = "BinaryRightShiftLong"
    BINARY_RIGHT_SHIFT_ULONG = "BinaryRightShiftUlong"

    # integer comparisons
    BINARY_EQUALITY_INT = "BinaryEqualityInt"
    BINARY_EQUALITY_UINT = "BinaryEqualityUint"
    BINARY_EQUALITY_LONG = "BinaryEqualityLong"
    BINARY_EQUALITY_ULONG = "BinaryEqualityUlong"
    BINARY_INEQUALITY_INT = "BinaryInequalityInt"
    BINARY_INEQUALITY_UINT = "BinaryInequalityUint"
    BINARY_INEQUALITY_LONG = "BinaryInequalityLong"
    BINARY_INEQUALITY_ULONG = "BinaryInequalityUlong"
    BINARY_GREATER_INT = "BinaryGreaterInt"
    BINARY_GREATER_UINT = "BinaryGreaterUint"
    BINARY_GREATER_LONG = "BinaryGreaterLong"
    BINARY_GREATER_ULONG = "BinaryGreaterUlong"
    BINARY_GREATER_EQUALITY_INT = "BinaryGreaterEqualityInt"
    BINARY_GREATER_EQUALITY_UINT = "BinaryGreaterEqualityUint"
    BINARY_GREATER_EQUALITY_LONG = "BinaryGreaterEqualityLong"
    BINARY_GREATER_EQUALITY_ULONG = "BinaryGreaterEqualityUlong"
    BINARY_LESS_INT = "BinaryLessInt"
    BINARY_LESS_UINT = "BinaryLessUint"
    BINARY_LESS_LONG = "BinaryLessLong"
    BINARY_LESS_ULONG = "BinaryLessUlong"
    BINARY_LESS_EQUALITY_INT = "BinaryLessEqualityInt"
    BINARY_LESS_EQUALITY_UINT = "BinaryLessEqualityUint"
    BINARY_LESS_EQUALITY_LONG = "BinaryLessEqualityLong"
    BINARY_LESS_EQUALITY_ULONG = "BinaryLessEqualityUlong"

    # floating point arithmetic
    BINARY_PLUS_FLOAT = "BinaryPlusFloat"
    BINARY_PLUS_DOUBLE = "BinaryPlusDouble"
    BINARY_MINUS_FLOAT = "BinaryMinusFloat"
    BINARY_MINUS_DOUBLE = "BinaryMinusDouble"
    BINARY_MULTIPLICATION_FLOAT = "BinaryMultiplicationFloat"
    BINARY_MULTIPLICATION_DOUBLE = "BinaryMultiplicationDouble"
    BINARY_DIVISION_FLOAT = "BinaryDivisionFloat"
    BINARY_DIVISION_DOUBLE = "BinaryDivisionDouble"
    BINARY_REMAINDER_FLOAT = "BinaryRemainderFloat"
    BINARY_REMAINDER_DOUBLE = "BinaryRemainderDouble"

    # floating point comparisons
    BINARY_EQUALITY_FLOAT = "BinaryEqualityFloat"
    BINARY_EQUALITY_DOUBLE = "BinaryEqualityDouble"
    BINARY_INEQUALITY_FLOAT = "BinaryInequalityFloat"
    BINARY_INEQUALITY_DOUBLE = "BinaryInequalityDouble"
    BINARY_GREATER_FLOAT = "BinaryGreaterFloat"
    BINARY_GREATER_DOUBLE = "BinaryGreaterDouble"
    BINARY_GREATER_EQUALITY_FLOAT = "BinaryGreaterEqualityFloat"
    BINARY_GREATER_EQUALITY_DOUBLE = "BinaryGreaterEqualityDouble"
    BINARY_LESS_FLOAT = "BinaryLessFloat"
    BINARY_LESS_DOUBLE = "BinaryLessDouble"
    BINARY_LESS_EQUALITY_FLOAT = "BinaryLessEqualityFloat"
    BINARY_LESS_EQUALITY_DOUBLE = "BinaryLessEqualityDouble"

    # enumerations
    BINARY_EQUALITY_ENUM = "BinaryEqualityEnum"
    BINARY_INEQUALITY_ENUM = "BinaryInequalityEnum"

    # recognised, never translated
    BINARY_EQUALITY_DECIMAL = "BinaryEqualityDecimal"
    BINARY_INEQUALITY_DECIMAL = "BinaryInequalityDecimal"
    BINARY_GREATER_DECIMAL = "BinaryGreaterDecimal"
    BINARY_LESS_DECIMAL = "BinaryLessDecimal"
    BINARY_EQUALITY_DELEGATE = "BinaryEqualityDelegate"
    BINARY_INEQUALITY_DELEGATE = "BinaryInequalityDelegate"
    BINARY_EQUALITY_NULLABLE = "BinaryEqualityNullable"
    BINARY_INEQUALITY_NULLABLE = "BinaryInequalityNullable"
    BINARY_EQUALITY_STRING = "BinaryEqualityString"
    BINARY_INEQUALITY_STRING = "BinaryInequalityString"
    BINARY_EQUALITY_REFERENCE = "BinaryEqualityReference"
    BINARY_INEQUALITY_REFERENCE = "BinaryInequalityReference"
    BINARY_PLUS_DECIMAL = "BinaryPlusDecimal"
    BINARY_MINUS_DECIMAL = "BinaryMinusDecimal"
    BINARY_PLUS_STRING = "BinaryPlusString"

    # unary operators
    UNARY_BITWISE_COMPLEMENT_INT = "UnaryBitwiseComplementInt"
    UNARY_BITWISE_COMPLEMENT_UINT = "UnaryBitwiseComplementUint"
    UNARY_BITWISE_COMPLEMENT_LONG = "UnaryBitwiseComplementLong"
    UNARY_BITWISE_COMPLEMENT_ULONG = "UnaryBitwiseComplementUlong"
    UNARY_LOGICAL_NEGATION = "UnaryLogicalNegation"
    UNARY_MINUS_INT = "UnaryMinusInt"
    UNARY_MINUS_LONG = "UnaryMinusLong"
    UNARY_MINUS_FLOAT = "UnaryMinusFloat"
    UNARY_MINUS_DOUBLE = "UnaryMinusDouble"
    UNARY_MINUS_DECIMAL = "UnaryMinusDecimal"
    UNARY_PLUS_INT = "UnaryPlusInt"
    UNARY_PLUS_UINT = "UnaryPlusUint"
    UNARY_PLUS_LONG = "UnaryPlusLong"
    UNARY_PLUS_ULONG = "UnaryPlusUlong"
    UNARY_PLUS_FLOAT = "UnaryPlusFloat"
    UNARY_PLUS_DOUBLE = "UnaryPlusDouble"
    UNARY_PLUS_DECIMAL = "UnaryPlusDecimal"

    @property
    def is_unary(self) -> bool:
        return self.value.startswith("Unary")

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class OperatorSignature:
    """Surface token, operand kind and result type of a predefined operator.

    ``operand`` is the kind both operands are converted to before the
    operator applies (for shifts: the left operand; the count is ``int``).
    """

    token: str
    operand: TypeKind
    result: SourceType


_TYPE_SUFFIXES: dict[str, TypeKind] = {
    "INT": TypeKind.INT,
    "UINT": TypeKind.UINT,
    "LONG": TypeKind.LONG,
    "ULONG": TypeKind.ULONG,
    "FLOAT": TypeKind.FLOAT,
    "DOUBLE": TypeKind.DOUBLE,
    "DECIMAL": TypeKind.DECIMAL,
    "STRING": TypeKind.STRING,
    "BOOL": TypeKind.BOOL,
    "ENUM": TypeKind.ENUM,
    "DELEGATE": TypeKind.OTHER,
    "NULLABLE": TypeKind.OTHER,
    "REFERENCE": TypeKind.OTHER,
}

_BINARY_TOKENS: dict[str, str] = {
    "PLUS": "+",
    "MINUS": "-",
    "MULTIPLICATION": "*",
    "DIVISION": "/",
    "REMAINDER": "%",
    "LOGICAL_AND": "&",
    "LOGICAL_OR": "|",
    "LOGICAL_XOR": "^",
    "LEFT_SHIFT": "<<",
    "RIGHT_SHIFT": ">>",
    "CONDITIONAL_LOGICAL_AND_ALSO": "&&",
    "CONDITIONAL_LOGICAL_OR_ELSE": "||",
    "EQUALITY": "==",
    "INEQUALITY": "!=",
    "GREATER": ">",
    "GREATER_EQUALITY": ">=",
    "LESS": "<",
    "LESS_EQUALITY": "<=",
}

_UNARY_TOKENS: dict[str, str] = {
    "BITWISE_COMPLEMENT": "~",
    "LOGICAL_NEGATION": "!",
    "MINUS": "-",
    "PLUS": "+",
}

_BOOLEAN_RESULT_TOKENS = frozenset({"==", "!=", ">", ">=", "<", "<=", "&&", "||"})


def _signature(tag: OperatorTag) -> OperatorSignature:
    prefix, _, rest = tag.name.partition("_")
    if tag is OperatorTag.UNARY_LOGICAL_NEGATION:
        return OperatorSignature("!", TypeKind.BOOL, t.BOOL)

    operation, _, suffix = rest.rpartition("_")
    operand = _TYPE_SUFFIXES[suffix]
    if prefix == "UNARY":
        token = _UNARY_TOKENS[operation]
        return OperatorSignature(token, operand, t.PRIMITIVE_TYPES[operand])

    token = _BINARY_TOKENS[operation]
    if token in _BOOLEAN_RESULT_TOKENS or operand is TypeKind.BOOL:
        result = t.BOOL
    else:
        result = t.PRIMITIVE_TYPES[operand]
    return OperatorSignature(token, operand, result)


SIGNATURES: dict[OperatorTag, OperatorSignature] = {
    tag: _signature(tag) for tag in OperatorTag
}


class ResolveStatus(enum.Enum):
    OK = "ok"
    AMBIGUOUS = "ambiguous"
    UNRESOLVED = "unresolved"


@dataclass(frozen=True, slots=True)
class Operator:
    """An operator declaration as reported by type resolution.

    ``tag`` is ``None`` for predefined operators this package does not know
    and for user-defined operator overloads.
    """

    name: str
    return_type: SourceType
    tag: OperatorTag | None = None
    is_predefined: bool = True

    @classmethod
    def predefined(cls, tag: OperatorTag) -> Operator:
        return cls(name=tag.value, return_type=SIGNATURES[tag].result, tag=tag)


@dataclass(frozen=True, slots=True)
class OperatorResolution:
    """Result of resolving an operator reference."""

    status: ResolveStatus
    operator: Operator | None = None

    @classmethod
    def resolved(cls, tag: OperatorTag) -> OperatorResolution:
        return cls(ResolveStatus.OK, Operator.predefined(tag))

    @classmethod
    def failed(cls, status: ResolveStatus = ResolveStatus.UNRESOLVED) -> OperatorResolution:
        return cls(status, None)

    @property
    def predefined_operator(self) -> Operator | None:
        """The bound operator when resolution succeeded on a predefined one."""
        if self.status is not ResolveStatus.OK or self.operator is None:
            return None
        if not self.operator.is_predefined:
            return None
        return self.operator


def find_operator(token: str, operand: TypeKind, unary: bool = False) -> OperatorTag | None:
    """Look up the predefined operator for a token applied to an operand kind."""
    return _BY_TOKEN.get((unary, token, operand))


_BY_TOKEN: dict[tuple[bool, str, TypeKind], OperatorTag] = {
    (tag.is_unary, sig.token, sig.operand): tag
    for tag, sig in SIGNATURES.items()
    if sig.operand is not TypeKind.OTHER
}
