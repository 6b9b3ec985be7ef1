"""Tests for the expression builder DSL.

The DSL stands in for the host's type resolution, so these tests pin down
which predefined operator each Python expression is bound to.
"""

import pytest

from agentzero.errors import OperatorResolutionError
from agentzero.expr import dsl
from agentzero.expr import types as t
from agentzero.expr.ast import (
    BinaryOp,
    ElementKind,
    Literal,
    NodeShape,
    UnaryOp,
    Unsupported,
    VariableRef,
    walk,
)
from agentzero.expr.operators import OperatorTag
from agentzero.expr.types import TypeKind


def tag_of(term):
    return term.node.operator.operator.tag


class TestReferences:
    def test_local(self):
        x = dsl.local("x", t.INT)
        assert isinstance(x.node, VariableRef)
        assert x.node.element.kind is ElementKind.LOCAL
        assert x.node.element.is_variable
        assert x.text == "x"
        assert x.type == t.INT

    def test_each_local_is_a_distinct_declaration(self):
        first, second = dsl.local("x", t.INT), dsl.local("x", t.INT)
        assert first.node.element != second.node.element

    def test_const_field(self):
        limit = dsl.field("Limit", t.INT, constant=10)
        assert limit.node.element.kind is ElementKind.CONSTANT
        assert not limit.node.element.is_variable
        assert limit.node.constant.value == 10
        assert limit.node.constant.type_code is TypeKind.INT

    def test_enum_member(self):
        color = t.enum_type("Color", t.BYTE)
        red = dsl.enum_member(color, "Red", 1)
        assert red.text == "Color.Red"
        assert red.type == color
        assert red.node.constant.type_code is TypeKind.BYTE

    def test_enum_member_needs_enum(self):
        with pytest.raises(ValueError):
            dsl.enum_member(t.INT, "Red", 1)

    def test_unresolved(self):
        ghost = dsl.unresolved("ghost", t.INT)
        assert ghost.node.element is None


class TestLiterals:
    @pytest.mark.parametrize(
        "value,expected",
        [
            (True, t.BOOL),
            (42, t.INT),
            (2**31, t.UINT),
            (2**32, t.LONG),
            (2**63, t.ULONG),
            (-1, t.INT),
            (1.5, t.DOUBLE),
            ("s", t.STRING),
            (None, t.NULL),
        ],
    )
    def test_inferred_type(self, value, expected):
        assert dsl.infer_literal_type(value) == expected

    def test_out_of_range(self):
        with pytest.raises(ValueError):
            dsl.infer_literal_type(2**64)

    @pytest.mark.parametrize(
        "value,source_type,text",
        [
            (True, t.BOOL, "true"),
            (42, t.INT, "42"),
            (42, t.UINT, "42u"),
            (42, t.LONG, "42L"),
            (42, t.ULONG, "42UL"),
            (1.5, t.FLOAT, "1.5f"),
            (1.5, t.DOUBLE, "1.5"),
            ("a", t.CHAR, "'a'"),
            ("ab", t.STRING, '"ab"'),
            (None, t.NULL, "null"),
        ],
    )
    def test_text(self, value, source_type, text):
        assert dsl.literal(value, source_type).text == text


class TestBinaryOperatorSelection:
    def test_int_comparison(self):
        x = dsl.local("x", t.INT)
        condition = x > 42
        assert tag_of(condition) is OperatorTag.BINARY_GREATER_INT
        assert condition.type == t.BOOL
        assert condition.text == "x > 42"

    def test_conditional_and(self):
        x = dsl.local("x", t.INT)
        condition = (x > 42).and_also(x < 44)
        assert tag_of(condition) is OperatorTag.BINARY_CONDITIONAL_LOGICAL_AND_ALSO_BOOL
        assert condition.text == "(x > 42) && (x < 44)"

    def test_non_short_circuit_bool_operators(self):
        a, b = dsl.local("a", t.BOOL), dsl.local("b", t.BOOL)
        assert tag_of(a & b) is OperatorTag.BINARY_LOGICAL_AND_BOOL
        assert tag_of(a | b) is OperatorTag.BINARY_LOGICAL_OR_BOOL
        assert tag_of(a ^ b) is OperatorTag.BINARY_LOGICAL_XOR_BOOL
        assert tag_of(a == b) is OperatorTag.BINARY_EQUALITY_BOOL

    def test_int_and_uint_promote_to_long(self):
        i, u = dsl.local("i", t.INT), dsl.local("u", t.UINT)
        assert tag_of(i + u) is OperatorTag.BINARY_PLUS_LONG

    def test_small_integrals_promote_to_int(self):
        b, s = dsl.local("b", t.BYTE), dsl.local("s", t.SHORT)
        assert tag_of(b + s) is OperatorTag.BINARY_PLUS_INT
        assert (b + s).type == t.INT

    def test_float_beats_integral(self):
        f, l = dsl.local("f", t.FLOAT), dsl.local("l", t.LONG)
        assert tag_of(f * l) is OperatorTag.BINARY_MULTIPLICATION_FLOAT
        d = dsl.local("d", t.DOUBLE)
        assert tag_of(d / f) is OperatorTag.BINARY_DIVISION_DOUBLE

    def test_ulong_with_signed_is_an_error(self):
        ul, l = dsl.local("ul", t.ULONG), dsl.local("l", t.LONG)
        with pytest.raises(OperatorResolutionError, match="'ulong' and 'long'"):
            ul + l

    def test_decimal_with_double_is_an_error(self):
        m, d = dsl.local("m", t.DECIMAL), dsl.local("d", t.DOUBLE)
        with pytest.raises(OperatorResolutionError):
            m == d

    def test_decimal_comparison(self):
        m = dsl.local("m", t.DECIMAL)
        assert tag_of(m > dsl.local("n", t.DECIMAL)) is OperatorTag.BINARY_GREATER_DECIMAL

    def test_shift_keeps_left_operand_kind(self):
        ul = dsl.local("ul", t.ULONG)
        assert tag_of(ul >> 3) is OperatorTag.BINARY_RIGHT_SHIFT_ULONG
        b = dsl.local("b", t.BYTE)
        assert tag_of(b << 1) is OperatorTag.BINARY_LEFT_SHIFT_INT

    def test_shift_count_must_be_int(self):
        x, count = dsl.local("x", t.INT), dsl.local("n", t.LONG)
        with pytest.raises(OperatorResolutionError):
            x << count

    def test_enum_equality(self):
        color = t.enum_type("Color")
        c = dsl.local("c", color)
        red = dsl.enum_member(color, "Red", 1)
        assert tag_of(c == red) is OperatorTag.BINARY_EQUALITY_ENUM
        with pytest.raises(OperatorResolutionError):
            c < red

    def test_bool_and_int_do_not_mix(self):
        with pytest.raises(OperatorResolutionError, match="Operator '&&'"):
            dsl.local("a", t.BOOL).and_also(1)

    def test_string_concatenation_and_equality(self):
        s = dsl.local("s", t.STRING)
        assert tag_of(s + "x") is OperatorTag.BINARY_PLUS_STRING
        assert tag_of(s == "x") is OperatorTag.BINARY_EQUALITY_STRING

    def test_reflected_operands_keep_source_order(self):
        x = dsl.local("x", t.INT)
        condition = 10 - x
        assert condition.text == "10 - x"
        assert isinstance(condition.node.left, Literal)


class TestConstantConversion:
    def test_int_literal_converts_to_uint(self):
        u = dsl.local("u", t.UINT)
        condition = u < 0
        assert tag_of(condition) is OperatorTag.BINARY_LESS_UINT
        assert condition.node.right.type == t.UINT
        assert condition.node.right.text == "0"

    def test_negative_literal_does_not_convert_to_uint(self):
        u = dsl.local("u", t.UINT)
        assert tag_of(u < -1) is OperatorTag.BINARY_LESS_LONG

    def test_int_literal_converts_to_double(self):
        d = dsl.local("d", t.DOUBLE)
        condition = d == 1
        assert tag_of(condition) is OperatorTag.BINARY_EQUALITY_DOUBLE
        assert condition.node.right.constant.value == 1.0
        assert condition.node.right.constant.type_code is TypeKind.DOUBLE

    def test_left_literal_converts_too(self):
        ul = dsl.local("ul", t.ULONG)
        assert tag_of(5 + ul) is OperatorTag.BINARY_PLUS_ULONG

    def test_variables_are_never_converted(self):
        x = dsl.local("x", t.INT)
        term = dsl.convert_constant(x, t.LONG)
        assert term is x


class TestUnary:
    def test_logical_negation(self):
        a = dsl.local("a", t.BOOL)
        negated = dsl.not_(a)
        assert tag_of(negated) is OperatorTag.UNARY_LOGICAL_NEGATION
        assert negated.text == "!a"

    def test_negation_parenthesizes_binary_operand(self):
        x = dsl.local("x", t.INT)
        assert dsl.not_(x > 0).text == "!(x > 0)"

    def test_minus_uint_is_long(self):
        u = dsl.local("u", t.UINT)
        assert tag_of(-u) is OperatorTag.UNARY_MINUS_LONG

    def test_minus_ulong_is_an_error(self):
        with pytest.raises(OperatorResolutionError, match="operand of type 'ulong'"):
            -dsl.local("ul", t.ULONG)

    def test_complement(self):
        assert tag_of(~dsl.local("b", t.BYTE)) is OperatorTag.UNARY_BITWISE_COMPLEMENT_INT

    def test_not_on_int_is_an_error(self):
        with pytest.raises(OperatorResolutionError):
            dsl.not_(dsl.local("x", t.INT))


class TestTermProtocol:
    def test_no_truth_value(self):
        x = dsl.local("x", t.INT)
        with pytest.raises(TypeError, match="and_also"):
            if x > 0:
                pass

    def test_unhashable(self):
        with pytest.raises(TypeError):
            hash(dsl.local("x", t.INT))

    def test_variadic_helpers_nest_left(self):
        a, b, c = (dsl.local(name, t.BOOL) for name in "abc")
        both = dsl.and_also(a, b, c)
        assert both.text == "(a && b) && c"
        assert isinstance(both.node.left, BinaryOp)
        either = dsl.or_else(a, b)
        assert tag_of(either) is OperatorTag.BINARY_CONDITIONAL_LOGICAL_OR_ELSE_BOOL


class TestOpaqueNodes:
    def test_call(self):
        x = dsl.local("x", t.INT)
        invocation = dsl.call("Foo", t.INT, x, 1)
        assert isinstance(invocation.node, Unsupported)
        assert invocation.node.shape is NodeShape.INVOCATION
        assert invocation.text == "Foo(x, 1)"
        assert len(invocation.node.children) == 2

    def test_cast(self):
        x = dsl.local("x", t.LONG)
        narrowed = dsl.cast(t.INT, x + 1)
        assert narrowed.node.shape is NodeShape.CAST
        assert narrowed.text == "(int)(x + 1)"
        assert narrowed.type == t.INT

    def test_opaque_nodes_combine(self):
        condition = dsl.call("Foo", t.INT) > 3
        assert tag_of(condition) is OperatorTag.BINARY_GREATER_INT
        assert condition.text == "Foo() > 3"


class TestApply:
    def test_reference_equality(self):
        a = dsl.local("a", t.OBJECT)
        b = dsl.local("b", t.OBJECT)
        same = dsl.apply(OperatorTag.BINARY_EQUALITY_REFERENCE, a, b)
        assert same.type == t.BOOL
        assert same.text == "a == b"

    def test_arity_is_checked(self):
        x = dsl.local("x", t.INT)
        with pytest.raises(ValueError):
            dsl.apply(OperatorTag.UNARY_MINUS_INT, x, x)
        with pytest.raises(ValueError):
            dsl.apply(OperatorTag.BINARY_PLUS_INT, x)


def test_walk_is_preorder():
    x = dsl.local("x", t.INT)
    condition = (x > 1).and_also(x < 3)
    texts = [node.text for node in walk(condition.node)]
    assert texts == ["(x > 1) && (x < 3)", "x > 1", "x", "1", "x < 3", "x", "3"]
    assert isinstance(next(walk(dsl.not_(x > 1).node)), UnaryOp)
