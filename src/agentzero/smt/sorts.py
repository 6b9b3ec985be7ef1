"""Mapping from source types to Z3 sorts."""

from __future__ import annotations

import z3

from agentzero.expr.types import SourceType, TypeKind


def map_sort(source_type: SourceType, ctx: z3.Context | None = None) -> z3.SortRef | None:
    """Return the solver sort for *source_type*, or ``None`` when unsupported.

    Enumerations map through their underlying integral type; ``char`` is a
    16-bit unsigned value. Signedness is not part of the sort: it is carried
    by the operators applied to the term.
    """
    if source_type.is_enum:
        return map_sort(source_type.underlying, ctx)

    kind = source_type.kind
    if kind is TypeKind.BOOL:
        return z3.BoolSort(ctx)
    if kind.is_integral:
        return z3.BitVecSort(kind.bit_width, ctx)
    if kind is TypeKind.FLOAT:
        return z3.Float32(ctx)
    if kind is TypeKind.DOUBLE:
        return z3.Float64(ctx)
    return None


def is_supported(source_type: SourceType) -> bool:
    """Whether values of *source_type* can be represented at all."""
    if source_type.is_enum:
        return is_supported(source_type.underlying)
    return source_type.kind is TypeKind.BOOL or source_type.kind.bit_width is not None
