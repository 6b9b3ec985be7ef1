"""Semantic types of source expressions.

A :class:`SourceType` is what the host's type resolution reports for a
sub-expression. Only the primitive kinds listed in :class:`TypeKind` carry
meaning for the analyzer; everything else is kept as ``OTHER`` (or one of the
named non-primitive kinds) so that operators over it can be recognised and
rejected.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass


class TypeKind(enum.Enum):
    BOOL = "bool"
    SBYTE = "sbyte"
    BYTE = "byte"
    SHORT = "short"
    USHORT = "ushort"
    CHAR = "char"
    INT = "int"
    UINT = "uint"
    LONG = "long"
    ULONG = "ulong"
    FLOAT = "float"
    DOUBLE = "double"
    DECIMAL = "decimal"
    STRING = "string"
    NULL = "null"
    ENUM = "enum"
    OTHER = "other"

    @property
    def is_integral(self) -> bool:
        return self in _INTEGRAL_WIDTHS

    @property
    def is_floating(self) -> bool:
        return self in (TypeKind.FLOAT, TypeKind.DOUBLE)

    @property
    def is_signed(self) -> bool:
        return self in _SIGNED_KINDS

    @property
    def bit_width(self) -> int | None:
        """Width in bits for integral and floating kinds, ``None`` otherwise."""
        if self in _INTEGRAL_WIDTHS:
            return _INTEGRAL_WIDTHS[self]
        if self is TypeKind.FLOAT:
            return 32
        if self is TypeKind.DOUBLE:
            return 64
        return None


_INTEGRAL_WIDTHS: dict[TypeKind, int] = {
    TypeKind.SBYTE: 8,
    TypeKind.BYTE: 8,
    TypeKind.SHORT: 16,
    TypeKind.USHORT: 16,
    TypeKind.CHAR: 16,
    TypeKind.INT: 32,
    TypeKind.UINT: 32,
    TypeKind.LONG: 64,
    TypeKind.ULONG: 64,
}

_SIGNED_KINDS = frozenset(
    {TypeKind.SBYTE, TypeKind.SHORT, TypeKind.INT, TypeKind.LONG}
)


@dataclass(frozen=True, slots=True)
class SourceType:
    """The static type of an expression.

    Attributes:
        kind: The primitive kind, ``ENUM`` or a non-primitive marker.
        name: Display name, e.g. ``"System.DayOfWeek"`` for enums or
            ``"string"`` for primitives.
        underlying: For enumerations, the underlying integral type.
    """

    kind: TypeKind
    name: str = ""
    underlying: SourceType | None = None

    def __post_init__(self):
        if not self.name:
            object.__setattr__(self, "name", self.kind.value)
        if self.kind is TypeKind.ENUM:
            if self.underlying is None or not self.underlying.kind.is_integral:
                raise ValueError(
                    f"enum type {self.name!r} needs an integral underlying type"
                )
        elif self.underlying is not None:
            raise ValueError("only enum types have an underlying type")

    @property
    def is_enum(self) -> bool:
        return self.kind is TypeKind.ENUM

    @property
    def is_bool(self) -> bool:
        return self.kind is TypeKind.BOOL

    def __str__(self) -> str:
        return self.name


def enum_type(name: str, underlying: SourceType | None = None) -> SourceType:
    """Build an enumeration type; C# enums default to an ``int`` underlying type."""
    return SourceType(TypeKind.ENUM, name, underlying or INT)


BOOL = SourceType(TypeKind.BOOL)
SBYTE = SourceType(TypeKind.SBYTE)
BYTE = SourceType(TypeKind.BYTE)
SHORT = SourceType(TypeKind.SHORT)
USHORT = SourceType(TypeKind.USHORT)
CHAR = SourceType(TypeKind.CHAR)
INT = SourceType(TypeKind.INT)
UINT = SourceType(TypeKind.UINT)
LONG = SourceType(TypeKind.LONG)
ULONG = SourceType(TypeKind.ULONG)
FLOAT = SourceType(TypeKind.FLOAT)
DOUBLE = SourceType(TypeKind.DOUBLE)
DECIMAL = SourceType(TypeKind.DECIMAL)
STRING = SourceType(TypeKind.STRING)
NULL = SourceType(TypeKind.NULL)
OBJECT = SourceType(TypeKind.OTHER, "object")

PRIMITIVE_TYPES: dict[TypeKind, SourceType] = {
    t.kind: t
    for t in (
        BOOL,
        SBYTE,
        BYTE,
        SHORT,
        USHORT,
        CHAR,
        INT,
        UINT,
        LONG,
        ULONG,
        FLOAT,
        DOUBLE,
        DECIMAL,
        STRING,
        NULL,
    )
}
