"""Run-scoped state of one satisfiability analysis."""

from __future__ import annotations

import z3

from agentzero.core.config import AnalysisOptions
from agentzero.core.logging import getLogger
from agentzero.smt.variables import FreeVariableTable, VariableBinder

logger = getLogger("AgentZero")

ROUNDING_MODE_NAME = "roundingmode"
_ROUNDING_MODE_KEY = ("rounding mode",)


class AnalysisSession:
    """Owns the Z3 context, the free variables and the rounding mode of a run.

    Every term built during the run lives in :attr:`ctx`; nothing is shared
    with other sessions, so analyses on different threads do not interfere.
    Use it as a context manager: state is dropped on every exit path.

    Example:
        >>> with AnalysisSession() as session:
        ...     x = session.binder.bind("x", INT, "x")
    """

    def __init__(self, options: AnalysisOptions | None = None):
        self.options = options if options is not None else AnalysisOptions()
        self.ctx: z3.Context | None = None
        self._binder: VariableBinder | None = None
        self._rounding_mode: z3.FPRMRef | None = None

    def __enter__(self) -> AnalysisSession:
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def is_open(self) -> bool:
        return self.ctx is not None

    def open(self) -> None:
        if self.ctx is not None:
            raise RuntimeError("analysis session is already open")
        self.ctx = z3.Context()
        table = FreeVariableTable()
        # A local called "roundingmode" must not share the solver name.
        table.reserve_name(_ROUNDING_MODE_KEY, ROUNDING_MODE_NAME)
        self._binder = VariableBinder(self.ctx, table)
        self._rounding_mode = None

    def close(self) -> None:
        if self._binder is not None:
            self._binder.table.clear()
        self._binder = None
        self._rounding_mode = None
        self.ctx = None

    def _require_open(self) -> None:
        if self.ctx is None:
            raise RuntimeError("analysis session is not open")

    @property
    def binder(self) -> VariableBinder:
        self._require_open()
        return self._binder

    @property
    def variables(self) -> FreeVariableTable:
        return self.binder.table

    @property
    def rounding_mode(self) -> z3.FPRMRef:
        """The one symbolic rounding mode shared by all FP arithmetic of this run.

        Left unconstrained: the solver picks whichever mode yields a model.
        """
        self._require_open()
        if self._rounding_mode is None:
            sort = z3.RNE(self.ctx).sort()
            self._rounding_mode = z3.Const(ROUNDING_MODE_NAME, sort)
            if logger.debug_on:
                logger.debug("Created rounding mode constant %s", ROUNDING_MODE_NAME)
        return self._rounding_mode
