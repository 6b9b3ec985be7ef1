"""Human-readable rendering of solver models."""

from __future__ import annotations

import typing

import z3

from agentzero.core.bits import bits_to_float, shortest_repr
from agentzero.smt.terms import SortKind, sort_kind

CONSTANTS_HEADER = "CONSTANTS:"
MODEL_HEADER = "MODEL:"

POSITIVE_INFINITY = "+oo"
NEGATIVE_INFINITY = "-oo"
NEGATIVE_ZERO = "-0"
NOT_A_NUMBER = "NaN"


def format_float(value: z3.FPNumRef) -> str:
    """Render a floating-point model value.

    The four special values get fixed spellings; anything else is rebuilt
    from its sign, biased exponent and significand fields and printed as the
    shortest decimal that reads back to the same value at that precision.
    """
    if value.isNaN():
        return NOT_A_NUMBER
    if value.isInf():
        return NEGATIVE_INFINITY if value.isNegative() else POSITIVE_INFINITY
    if value.isZero():
        return NEGATIVE_ZERO if value.isNegative() else shortest_repr(0.0)

    sort = value.sort()
    ebits, sbits = sort.ebits(), sort.sbits()
    width = ebits + sbits
    if width not in (32, 64):
        return value.sexpr()

    sign = 1 if value.isNegative() else 0
    exponent = 0 if value.isSubnormal() else value.exponent_as_long(biased=True)
    pattern = (
        (sign << (width - 1))
        | (exponent << (sbits - 1))
        | value.significand_as_long()
    )
    return shortest_repr(bits_to_float(pattern, width), width)


def free_constant_names(formula: z3.ExprRef) -> set[str]:
    """Names of the uninterpreted constants occurring in *formula*."""
    names: set[str] = set()
    seen: set[int] = set()
    stack = [formula]
    while stack:
        term = stack.pop()
        if term.get_id() in seen:
            continue
        seen.add(term.get_id())
        if z3.is_const(term) and term.decl().kind() == z3.Z3_OP_UNINTERPRETED:
            names.add(term.decl().name())
        else:
            stack.extend(term.children())
    return names


def format_value(value: z3.ExprRef) -> str:
    match sort_kind(value.sort()):
        case SortKind.BITVEC if z3.is_bv_value(value):
            return str(value)
        case SortKind.BOOL if z3.is_true(value) or z3.is_false(value):
            return "True" if z3.is_true(value) else "False"
        case SortKind.FLOAT if z3.is_fp_value(value):
            return format_float(value)
        case _:
            return value.sexpr()


class ModelPresenter:
    """Renders a satisfying assignment.

    Free variables come first in the order they were bound during
    translation, then whatever else the model defines, sorted by name. The
    ``CONSTANTS:`` block is left out when there is nothing to list; the
    solver's own model dump always follows.
    """

    def render(
        self, model: z3.ModelRef, declarations: typing.Iterable[z3.FuncDeclRef] = ()
    ) -> str:
        constants: list[str] = []
        seen: set[str] = set()

        def emit(decl: z3.FuncDeclRef) -> None:
            name = decl.name()
            if name in seen or decl.arity() != 0:
                return
            seen.add(name)
            value = model.eval(decl(), model_completion=True)
            constants.append(f"{name} = {format_value(value)}")

        for decl in declarations:
            emit(decl)
        for decl in sorted(model.decls(), key=lambda d: d.name()):
            emit(decl)

        lines: list[str] = []
        if constants:
            lines.append(CONSTANTS_HEADER)
            lines.extend(constants)
            lines.append("")
        lines.append(MODEL_HEADER)
        lines.append(str(model))
        return "\n".join(lines)


def render_model(
    model: z3.ModelRef, declarations: typing.Iterable[z3.FuncDeclRef] = ()
) -> str:
    return ModelPresenter().render(model, declarations)
