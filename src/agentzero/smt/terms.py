"""Sort-tagged handles over Z3 terms.

Z3's Python API is duck-typed: any ``ExprRef`` can be passed where a
bitvector is expected and the mistake only surfaces deep inside the solver.
:class:`SymbolicExpr` tags every term with its sort kind and offers checked
projections instead of casts.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

import z3

from agentzero.errors import SortMismatchError


class SortKind(enum.Enum):
    BOOL = "Bool"
    BITVEC = "BitVec"
    FLOAT = "FloatingPoint"
    ROUNDING_MODE = "RoundingMode"


_SORT_KINDS: dict[int, SortKind] = {
    z3.Z3_BOOL_SORT: SortKind.BOOL,
    z3.Z3_BV_SORT: SortKind.BITVEC,
    z3.Z3_FLOATING_POINT_SORT: SortKind.FLOAT,
    z3.Z3_ROUNDING_MODE_SORT: SortKind.ROUNDING_MODE,
}


def sort_kind(sort: z3.SortRef) -> SortKind | None:
    return _SORT_KINDS.get(sort.kind())


def describe_sort(sort: z3.SortRef) -> str:
    kind = sort_kind(sort)
    if kind is SortKind.BITVEC:
        return f"BitVec({sort.size()})"
    if kind is SortKind.FLOAT:
        return f"FP({sort.ebits()}, {sort.sbits()})"
    return str(sort)


@dataclass(frozen=True, slots=True)
class SymbolicExpr:
    """A Z3 term together with the kind of its sort."""

    kind: SortKind
    term: z3.ExprRef

    @classmethod
    def of(cls, term: z3.ExprRef) -> SymbolicExpr:
        kind = sort_kind(term.sort())
        if kind is None:
            raise SortMismatchError("Bool, BitVec or FloatingPoint", str(term.sort()))
        return cls(kind, term)

    @property
    def sort(self) -> z3.SortRef:
        return self.term.sort()

    @property
    def width(self) -> int | None:
        """Bit width of bitvector terms."""
        if self.kind is SortKind.BITVEC:
            return self.term.size()
        return None

    def as_bool(self) -> z3.BoolRef:
        if self.kind is not SortKind.BOOL:
            raise SortMismatchError("Bool", describe_sort(self.sort))
        return self.term

    def as_bitvec(self, width: int | None = None) -> z3.BitVecRef:
        if self.kind is not SortKind.BITVEC:
            raise SortMismatchError(
                f"BitVec({width})" if width else "BitVec", describe_sort(self.sort)
            )
        if width is not None and self.term.size() != width:
            raise SortMismatchError(f"BitVec({width})", describe_sort(self.sort))
        return self.term

    def as_float(
        self, like: SymbolicExpr | None = None, width: int | None = None
    ) -> z3.FPRef:
        """Project onto a floating-point term.

        *like* requires the same sort as another term, *width* the total
        storage width (32 for ``float``, 64 for ``double``).
        """
        if self.kind is not SortKind.FLOAT:
            raise SortMismatchError("FloatingPoint", describe_sort(self.sort))
        if like is not None and not self.sort.eq(like.sort):
            raise SortMismatchError(describe_sort(like.sort), describe_sort(self.sort))
        if width is not None and self.sort.ebits() + self.sort.sbits() != width:
            raise SortMismatchError(f"FP of {width} bits", describe_sort(self.sort))
        return self.term

    def __str__(self) -> str:
        return f"{self.term} : {describe_sort(self.sort)}"
