"""Consistency of the operator handler tables and their Z3 semantics."""

import pytest
import z3

from agentzero.expr.operators import SIGNATURES, OperatorTag
from agentzero.expr import types as t
from agentzero.smt import operators
from agentzero.smt.operators import (
    BINARY_HANDLERS,
    UNARY_HANDLERS,
    UNSUPPORTED,
    ResultFamily,
    family_of,
    shift_count,
)
from agentzero.smt.terms import SymbolicExpr


def bv(ctx, name, width=32):
    return SymbolicExpr.of(z3.BitVec(name, width, ctx))


def bv_val(ctx, value, width=32):
    return SymbolicExpr.of(z3.BitVecVal(value, width, ctx))


class TestTables:
    def test_every_tag_has_exactly_one_home(self):
        homes = {tag: [] for tag in OperatorTag}
        for family, table in BINARY_HANDLERS.items():
            for tag in table:
                homes[tag].append(family.value)
        for tag in UNARY_HANDLERS:
            homes[tag].append("unary")
        for tag in UNSUPPORTED:
            homes[tag].append("unsupported")
        misplaced = {tag: where for tag, where in homes.items() if len(where) != 1}
        assert misplaced == {}

    def test_binary_family_matches_result_type(self):
        for family, table in BINARY_HANDLERS.items():
            for tag in table:
                assert family_of(SIGNATURES[tag].result) is family, tag

    def test_family_of(self):
        assert family_of(t.BOOL) is ResultFamily.BOOLEAN
        assert family_of(t.ULONG) is ResultFamily.INTEGER
        assert family_of(t.FLOAT) is ResultFamily.FLOAT
        assert family_of(t.DECIMAL) is None
        # small integral results never come out of a predefined operator
        assert family_of(t.BYTE) is None

    def test_lookup(self):
        assert operators.binary_handler(ResultFamily.BOOLEAN, None) is None
        assert operators.binary_handler(ResultFamily.INTEGER, OperatorTag.BINARY_LESS_INT) is None
        assert operators.binary_handler(ResultFamily.BOOLEAN, OperatorTag.BINARY_LESS_INT)
        assert operators.unary_handler(OperatorTag.UNARY_MINUS_DECIMAL) is None
        assert operators.unary_handler(None) is None


def handler(tag):
    family = family_of(SIGNATURES[tag].result)
    return BINARY_HANDLERS[family][tag]


class TestIntegerSemantics:
    def test_signed_vs_unsigned_comparison(self, session, is_valid, is_satisfiable):
        x = bv(session.ctx, "x")
        zero = bv_val(session.ctx, 0)
        signed = handler(OperatorTag.BINARY_LESS_INT)(session, x, zero)
        unsigned = handler(OperatorTag.BINARY_LESS_UINT)(session, x, zero)
        assert is_satisfiable(signed)
        assert not is_satisfiable(unsigned)

    @pytest.mark.parametrize(
        "tag,left,right,expected",
        [
            # truncated towards zero
            (OperatorTag.BINARY_DIVISION_INT, -7, 2, -3),
            (OperatorTag.BINARY_REMAINDER_INT, -7, 2, -1),
            (OperatorTag.BINARY_REMAINDER_INT, 7, -2, 1),
            (OperatorTag.BINARY_DIVISION_UINT, 0xFFFFFFF9, 2, 0x7FFFFFFC),
            (OperatorTag.BINARY_REMAINDER_UINT, 0xFFFFFFF9, 2, 1),
            # arithmetic vs logical right shift
            (OperatorTag.BINARY_RIGHT_SHIFT_INT, -8, 1, -4),
            (OperatorTag.BINARY_RIGHT_SHIFT_UINT, 0xFFFFFFF8, 1, 0x7FFFFFFC),
            # counts are masked to the low five bits
            (OperatorTag.BINARY_LEFT_SHIFT_INT, 1, 33, 2),
            # wrap-around
            (OperatorTag.BINARY_PLUS_INT, 0x7FFFFFFF, 1, -(2**31)),
        ],
    )
    def test_int32(self, session, is_valid, tag, left, right, expected):
        ctx = session.ctx
        result = handler(tag)(session, bv_val(ctx, left), bv_val(ctx, right))
        assert is_valid(result == z3.BitVecVal(expected, 32, ctx))

    def test_long_shift_uses_six_bits(self, session, is_valid):
        ctx = session.ctx
        shifted = handler(OperatorTag.BINARY_LEFT_SHIFT_LONG)(
            session, bv_val(ctx, 1, 64), bv_val(ctx, 65)
        )
        assert is_valid(shifted == z3.BitVecVal(2, 64, ctx))

    def test_shift_count_widths(self, ctx):
        count = bv(ctx, "n")
        assert shift_count(count, 64).size() == 64
        assert shift_count(count, 32).size() == 32
        assert shift_count(count, 8).size() == 8

    def test_width_mismatch(self, session):
        from agentzero.errors import SortMismatchError

        ctx = session.ctx
        with pytest.raises(SortMismatchError):
            handler(OperatorTag.BINARY_PLUS_LONG)(session, bv_val(ctx, 1), bv_val(ctx, 1))

    def test_enum_equality_uses_operand_width(self, session, is_valid):
        ctx = session.ctx
        equal = handler(OperatorTag.BINARY_EQUALITY_ENUM)(
            session, bv_val(ctx, 3, 8), bv_val(ctx, 3, 8)
        )
        assert is_valid(equal)


class TestBooleanSemantics:
    @pytest.mark.parametrize(
        "short_circuit,plain",
        [
            (OperatorTag.BINARY_CONDITIONAL_LOGICAL_AND_ALSO_BOOL, OperatorTag.BINARY_LOGICAL_AND_BOOL),
            (OperatorTag.BINARY_CONDITIONAL_LOGICAL_OR_ELSE_BOOL, OperatorTag.BINARY_LOGICAL_OR_BOOL),
        ],
    )
    def test_short_circuit_is_equivalent(self, session, is_valid, short_circuit, plain):
        a = SymbolicExpr.of(z3.Bool("a", session.ctx))
        b = SymbolicExpr.of(z3.Bool("b", session.ctx))
        assert is_valid(handler(short_circuit)(session, a, b) == handler(plain)(session, a, b))

    def test_inequality_is_xor(self, session, is_valid):
        a = SymbolicExpr.of(z3.Bool("a", session.ctx))
        b = SymbolicExpr.of(z3.Bool("b", session.ctx))
        ne = handler(OperatorTag.BINARY_INEQUALITY_BOOL)(session, a, b)
        xor = handler(OperatorTag.BINARY_LOGICAL_XOR_BOOL)(session, a, b)
        assert is_valid(ne == xor)


class TestFloatSemantics:
    def test_nan_is_not_equal_to_itself(self, session, is_satisfiable):
        f = SymbolicExpr.of(z3.FP("f", z3.Float64(session.ctx)))
        assert is_satisfiable(handler(OperatorTag.BINARY_INEQUALITY_DOUBLE)(session, f, f))

    def test_arithmetic_uses_session_rounding_mode(self, session):
        f = SymbolicExpr.of(z3.FP("f", z3.Float32(session.ctx)))
        total = handler(OperatorTag.BINARY_PLUS_FLOAT)(session, f, f)
        assert total.sort().eq(z3.Float32(session.ctx))
        assert session.rounding_mode is not None

    def test_float_handler_rejects_double(self, session):
        from agentzero.errors import SortMismatchError

        d = SymbolicExpr.of(z3.FP("d", z3.Float64(session.ctx)))
        with pytest.raises(SortMismatchError):
            handler(OperatorTag.BINARY_MULTIPLICATION_FLOAT)(session, d, d)


class TestUnarySemantics:
    def test_negation(self, session, is_valid):
        ctx = session.ctx
        negated = UNARY_HANDLERS[OperatorTag.UNARY_MINUS_INT](session, bv_val(ctx, 5))
        assert is_valid(negated == z3.BitVecVal(-5, 32, ctx))

    def test_complement(self, session, is_valid):
        ctx = session.ctx
        flipped = UNARY_HANDLERS[OperatorTag.UNARY_BITWISE_COMPLEMENT_ULONG](session, bv_val(ctx, 0, 64))
        assert is_valid(flipped == z3.BitVecVal(2**64 - 1, 64, ctx))

    def test_logical_negation(self, session, is_valid):
        a = SymbolicExpr.of(z3.Bool("a", session.ctx))
        negated = UNARY_HANDLERS[OperatorTag.UNARY_LOGICAL_NEGATION](session, a)
        assert is_valid(z3.Xor(negated, a.term))
