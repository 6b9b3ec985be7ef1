"""Tests for source type to Z3 sort mapping and sort-tagged terms."""

import pytest
import z3

from agentzero.errors import SortMismatchError
from agentzero.expr import types as t
from agentzero.smt.sorts import is_supported, map_sort
from agentzero.smt.terms import SortKind, SymbolicExpr, describe_sort


class TestMapSort:
    def test_bool(self, ctx):
        assert map_sort(t.BOOL, ctx).eq(z3.BoolSort(ctx))

    @pytest.mark.parametrize(
        "source_type,width",
        [(t.SBYTE, 8), (t.BYTE, 8), (t.CHAR, 16), (t.SHORT, 16), (t.INT, 32), (t.UINT, 32), (t.ULONG, 64)],
    )
    def test_integral(self, ctx, source_type, width):
        sort = map_sort(source_type, ctx)
        assert sort.eq(z3.BitVecSort(width, ctx))

    def test_signedness_is_not_part_of_the_sort(self, ctx):
        assert map_sort(t.INT, ctx).eq(map_sort(t.UINT, ctx))

    def test_floating(self, ctx):
        assert map_sort(t.FLOAT, ctx).eq(z3.Float32(ctx))
        assert map_sort(t.DOUBLE, ctx).eq(z3.Float64(ctx))

    def test_enum_uses_underlying(self, ctx):
        assert map_sort(t.enum_type("Flags", t.USHORT), ctx).eq(z3.BitVecSort(16, ctx))

    @pytest.mark.parametrize("source_type", [t.DECIMAL, t.STRING, t.NULL, t.OBJECT])
    def test_unsupported(self, ctx, source_type):
        assert map_sort(source_type, ctx) is None
        assert not is_supported(source_type)

    def test_supported(self):
        assert is_supported(t.BOOL)
        assert is_supported(t.DOUBLE)
        assert is_supported(t.enum_type("Color"))


class TestSymbolicExpr:
    def test_kind_is_derived_from_sort(self, ctx):
        assert SymbolicExpr.of(z3.Bool("a", ctx)).kind is SortKind.BOOL
        assert SymbolicExpr.of(z3.BitVec("x", 32, ctx)).kind is SortKind.BITVEC
        assert SymbolicExpr.of(z3.FP("f", z3.Float32(ctx))).kind is SortKind.FLOAT

    def test_unsupported_sort(self, ctx):
        with pytest.raises(SortMismatchError):
            SymbolicExpr.of(z3.Int("n", ctx))

    def test_width(self, ctx):
        assert SymbolicExpr.of(z3.BitVec("x", 16, ctx)).width == 16
        assert SymbolicExpr.of(z3.Bool("a", ctx)).width is None

    def test_as_bool(self, ctx):
        value = SymbolicExpr.of(z3.BitVec("x", 32, ctx))
        with pytest.raises(SortMismatchError) as info:
            value.as_bool()
        assert info.value.expected == "Bool"
        assert info.value.actual == "BitVec(32)"

    def test_as_bitvec_checks_width(self, ctx):
        value = SymbolicExpr.of(z3.BitVec("x", 32, ctx))
        assert value.as_bitvec(32) is value.term
        with pytest.raises(SortMismatchError, match="expected BitVec\\(64\\)"):
            value.as_bitvec(64)

    def test_as_float(self, ctx):
        single = SymbolicExpr.of(z3.FP("f", z3.Float32(ctx)))
        double = SymbolicExpr.of(z3.FP("d", z3.Float64(ctx)))
        assert single.as_float(width=32) is single.term
        with pytest.raises(SortMismatchError):
            single.as_float(width=64)
        with pytest.raises(SortMismatchError):
            double.as_float(like=single)

    def test_describe_sort(self, ctx):
        assert describe_sort(z3.Float64(ctx)) == "FP(11, 53)"
        assert describe_sort(z3.BitVecSort(8, ctx)) == "BitVec(8)"
        assert describe_sort(z3.BoolSort(ctx)) == "Bool"
