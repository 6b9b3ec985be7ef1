"""Encoding of literal values as Z3 constants."""

from __future__ import annotations

import z3

from agentzero.core.bits import AND_TABLE, float_to_bits
from agentzero.core.logging import getLogger
from agentzero.expr.ast import Constant, ConstantValue
from agentzero.expr.types import TypeKind
from agentzero.smt.terms import SymbolicExpr

logger = getLogger("AgentZero.translator")


def encode_constant(
    value: ConstantValue, type_code: TypeKind, ctx: z3.Context | None = None
) -> SymbolicExpr | None:
    """Build the solver constant for a literal of runtime type *type_code*.

    Integers become bit patterns of their declared width (two's complement
    for signed values), ``char`` values may be given as one-character strings,
    and floating-point values are built from their exact IEEE bit pattern so
    that NaN, the infinities and negative zero survive. Any other runtime type
    yields ``None``.
    """
    if type_code is TypeKind.BOOL:
        if not isinstance(value, bool):
            return None
        return SymbolicExpr.of(z3.BoolVal(value, ctx))

    if type_code.is_integral:
        width = type_code.bit_width
        if type_code is TypeKind.CHAR and isinstance(value, str):
            if len(value) != 1:
                return None
            value = ord(value)
        if isinstance(value, bool) or not isinstance(value, int):
            return None
        return SymbolicExpr.of(z3.BitVecVal(value & AND_TABLE[width], width, ctx))

    if type_code.is_floating:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        width = type_code.bit_width
        sort = z3.Float32(ctx) if width == 32 else z3.Float64(ctx)
        pattern = z3.BitVecVal(float_to_bits(float(value), width), width, ctx)
        return SymbolicExpr.of(z3.simplify(z3.fpBVToFP(pattern, sort, ctx)))

    if logger.debug_on:
        logger.debug("No constant encoding for %r of type %s", value, type_code.value)
    return None


def encode(constant: Constant, ctx: z3.Context | None = None) -> SymbolicExpr | None:
    return encode_constant(constant.value, constant.type_code, ctx)
