"""Per-expression entry point of the satisfiability analysis."""

from __future__ import annotations

import typing

from agentzero.core.config import AnalysisOptions, AnalyzerConfiguration
from agentzero.core.logging import AgentZeroLogger, getLogger
from agentzero.errors import SortMismatchError
from agentzero.expr.ast import BinaryOp, Expression, UnaryOp, walk
from agentzero.highlightings import (
    Highlighting,
    SatisfiableExpressionHint,
    UnsatisfiableExpressionError,
)
from agentzero.smt.session import AnalysisSession
from agentzero.smt.solver import SatisfiabilityDriver, Verdict, VerdictKind
from agentzero.smt.translator import ExpressionTranslator

logger = getLogger("AgentZero")


def is_candidate(node: Expression) -> bool:
    """Only boolean operator expressions are worth a solver call."""
    return isinstance(node, (BinaryOp, UnaryOp)) and node.type.is_bool


class SatisfiabilityProblemAnalyzer:
    """Flags boolean expressions that can never be true.

    Args:
        config: Application configuration, or ready-made per-run options.
            Defaults to built-in defaults, not the user's options file.
    """

    def __init__(self, config: AnalyzerConfiguration | AnalysisOptions | None = None):
        if isinstance(config, AnalyzerConfiguration):
            self.options = config.analysis_options()
        elif config is not None:
            self.options = config
        else:
            self.options = AnalysisOptions()

    def analyze(self, node: Expression) -> Verdict | None:
        """Translate and check *node*.

        Returns ``None`` when *node* is not a candidate or could not be turned
        into a formula.
        """
        if not is_candidate(node):
            return None

        AgentZeroLogger.update_expression(node.text)
        try:
            with AnalysisSession(self.options) as session:
                return self._check(session, node)
        except RecursionError:
            if logger.debug_on:
                logger.debug("Expression is nested too deeply to analyze")
            return None
        finally:
            AgentZeroLogger.reset_expression()

    def _check(self, session: AnalysisSession, node: Expression) -> Verdict | None:
        symbolic = ExpressionTranslator(session).translate(node)
        if symbolic is None:
            return None
        try:
            formula = symbolic.as_bool()
        except SortMismatchError as e:
            logger.error("Boolean expression translated to a non-boolean term: %s", e)
            return None
        driver = SatisfiabilityDriver(self.options)
        return driver.check(formula, session.variables.declarations())

    def run(self, node: Expression) -> Highlighting | None:
        verdict = self.analyze(node)
        if verdict is None:
            return None
        match verdict.kind:
            case VerdictKind.UNSATISFIABLE:
                return UnsatisfiableExpressionError(node)
            case VerdictKind.SATISFIABLE if self.options.report_satisfiable_hints:
                return SatisfiableExpressionHint(node, verdict.model)
            case _:
                return None

    def run_tree(self, root: Expression) -> typing.Iterator[Highlighting]:
        """Highlight every candidate sub-expression of *root*, outermost first."""
        for node in walk(root):
            highlighting = self.run(node)
            if highlighting is not None:
                yield highlighting
