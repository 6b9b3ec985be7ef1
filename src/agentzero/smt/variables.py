"""Free variables of a translated formula.

Every unknown in the formula - a local, a parameter, or a sub-expression the
translator could not model - is a named Z3 constant. The table guarantees
that one key always maps to one constant within an analysis run, so that
``x > 0 && x < 0`` talks about a single ``x``.
"""

from __future__ import annotations

import typing
from collections.abc import Hashable

import z3

from agentzero.core.logging import getLogger
from agentzero.expr.ast import DeclaredElement, Expression
from agentzero.expr.types import SourceType
from agentzero.smt.sorts import map_sort
from agentzero.smt.terms import SymbolicExpr

logger = getLogger("AgentZero.translator")

OPAQUE_NAME_TEMPLATE = "variable from expr: '{0}'"


class FreeVariableTable:
    """Key -> symbolic constant, plus the solver names already handed out.

    Solver constants are identified by name *and* sort, so two different
    declarations called ``x`` would silently collapse into one variable. The
    table disambiguates them as ``x``, ``x!1``, ``x!2``...
    """

    def __init__(self):
        self._by_key: dict[Hashable, SymbolicExpr] = {}
        self._names: dict[Hashable, str] = {}
        self._taken: set[str] = set()

    def __contains__(self, key: Hashable) -> bool:
        return key in self._by_key

    def __len__(self) -> int:
        return len(self._by_key)

    def get(self, key: Hashable) -> SymbolicExpr | None:
        return self._by_key.get(key)

    def reserve_name(self, key: Hashable, name: str) -> str:
        if key in self._names:
            return self._names[key]
        unique = name
        suffix = 1
        while unique in self._taken:
            unique = f"{name}!{suffix}"
            suffix += 1
        self._taken.add(unique)
        self._names[key] = unique
        return unique

    def insert(self, key: Hashable, value: SymbolicExpr) -> None:
        self._by_key[key] = value

    def declarations(self) -> list[z3.FuncDeclRef]:
        """Declarations of all bound constants, in binding order."""
        return [value.term.decl() for value in self._by_key.values()]

    def items(self) -> typing.ItemsView[Hashable, SymbolicExpr]:
        return self._by_key.items()

    def clear(self) -> None:
        self._by_key.clear()
        self._names.clear()
        self._taken.clear()


class VariableBinder:
    """Creates and reuses the free variables of one analysis run."""

    def __init__(self, ctx: z3.Context, table: FreeVariableTable | None = None):
        self.ctx = ctx
        self.table = table if table is not None else FreeVariableTable()

    def bind(self, key: Hashable, source_type: SourceType, name: str) -> SymbolicExpr | None:
        """Return the variable for *key*, creating it on first use.

        Returns ``None`` when *source_type* has no solver sort.
        """
        existing = self.table.get(key)
        if existing is not None:
            return existing

        sort = map_sort(source_type, self.ctx)
        if sort is None:
            if logger.debug_on:
                logger.debug("No sort for %s, cannot bind %s", source_type, name)
            return None

        constant = z3.Const(self.table.reserve_name(key, name), sort)
        value = SymbolicExpr.of(constant)
        self.table.insert(key, value)
        if logger.debug_on:
            logger.debug("Bound free variable %s", value)
        return value

    def bind_element(self, element: DeclaredElement) -> SymbolicExpr | None:
        """Bind a local variable or parameter, keyed by its declaration."""
        return self.bind(element, element.type, element.name)

    def bind_opaque(self, node: Expression) -> SymbolicExpr | None:
        """Model *node* as an unconstrained value of its static type.

        Keyed by the node's text: two occurrences of ``Foo()`` share one
        unknown. This loses every relation between the node and the rest of
        the formula, so it can only add models.
        """
        key = ("opaque", node.text)
        return self.bind(key, node.type, OPAQUE_NAME_TEMPLATE.format(node.text))
