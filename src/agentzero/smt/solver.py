"""Satisfiability checks over translated formulas."""

from __future__ import annotations

import enum
import typing
from dataclasses import dataclass

import z3

from agentzero.core.config import AnalysisOptions
from agentzero.core.logging import getLogger
from agentzero.smt.model import ModelPresenter, free_constant_names

logger = getLogger("AgentZero.solver")
smt2_logger = getLogger("AgentZero.smt2")


class VerdictKind(enum.Enum):
    UNSATISFIABLE = "unsatisfiable"
    SATISFIABLE = "satisfiable"
    INCONCLUSIVE = "inconclusive"


@dataclass(frozen=True, slots=True)
class Verdict:
    """Outcome of one satisfiability check.

    ``model`` is the rendered witness for satisfiable formulas, ``reason``
    the solver's explanation for inconclusive ones.
    """

    kind: VerdictKind
    model: str | None = None
    reason: str | None = None

    @classmethod
    def unsatisfiable(cls) -> Verdict:
        return cls(VerdictKind.UNSATISFIABLE)

    @classmethod
    def satisfiable(cls, model: str) -> Verdict:
        return cls(VerdictKind.SATISFIABLE, model=model)

    @classmethod
    def inconclusive(cls, reason: str) -> Verdict:
        return cls(VerdictKind.INCONCLUSIVE, reason=reason)

    @property
    def is_unsatisfiable(self) -> bool:
        return self.kind is VerdictKind.UNSATISFIABLE

    @property
    def is_satisfiable(self) -> bool:
        return self.kind is VerdictKind.SATISFIABLE

    @property
    def is_inconclusive(self) -> bool:
        return self.kind is VerdictKind.INCONCLUSIVE

    def __str__(self) -> str:
        match self.kind:
            case VerdictKind.SATISFIABLE:
                return f"Satisfiable\n{self.model}"
            case VerdictKind.INCONCLUSIVE:
                return f"Inconclusive: {self.reason}"
            case _:
                return "Unsatisfiable"


class SatisfiabilityDriver:
    """Runs one fresh solver per formula.

    Args:
        options: Per-run settings; ``timeout_ms`` > 0 bounds each check.
        presenter: Renders models of satisfiable formulas.
    """

    def __init__(
        self,
        options: AnalysisOptions | None = None,
        presenter: ModelPresenter | None = None,
    ):
        self.options = options if options is not None else AnalysisOptions()
        self.presenter = presenter if presenter is not None else ModelPresenter()

    def check(
        self,
        formula: z3.BoolRef,
        declarations: typing.Iterable[z3.FuncDeclRef] = (),
    ) -> Verdict:
        """Check *formula* and classify the result.

        Args:
            formula: The single assertion.
            declarations: Free variables in the order the model should list them.
                Those that do not occur in *formula* are left out.
        """
        solver = z3.Solver(ctx=formula.ctx)
        if self.options.timeout_ms > 0:
            solver.set("timeout", self.options.timeout_ms)
        solver.add(formula)

        if smt2_logger.info_on:
            smt2_logger.info("%s(check-sat)\n", solver.sexpr())

        result = solver.check()
        if result == z3.unsat:
            logger.info("Formula is unsatisfiable")
            return Verdict.unsatisfiable()
        if result == z3.sat:
            # Variables bound under a sub-expression that was later replaced
            # by an opaque unknown are not part of the assertion.
            used = free_constant_names(formula)
            declarations = [decl for decl in declarations if decl.name() in used]
            model = self.presenter.render(solver.model(), declarations)
            if logger.debug_on:
                logger.debug("Formula is satisfiable:\n%s", model)
            return Verdict.satisfiable(model)

        reason = solver.reason_unknown()
        logger.info("Solver could not decide the formula: %s", reason)
        return Verdict.inconclusive(reason)
