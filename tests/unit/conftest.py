"""Pytest configuration for unit tests.

Unit tests run against the real Z3 bindings; every test that builds terms
gets its own analysis session so no state leaks between tests.
"""

import pytest
import z3

from agentzero.smt.session import AnalysisSession


@pytest.fixture
def session():
    with AnalysisSession() as s:
        yield s


@pytest.fixture
def ctx(session) -> z3.Context:
    return session.ctx


def _is_valid(formula: z3.BoolRef) -> bool:
    solver = z3.Solver(ctx=formula.ctx)
    solver.add(z3.Not(formula))
    return solver.check() == z3.unsat


def _is_satisfiable(formula: z3.BoolRef) -> bool:
    solver = z3.Solver(ctx=formula.ctx)
    solver.add(formula)
    return solver.check() == z3.sat


@pytest.fixture
def is_valid():
    """Returns a predicate: does the formula hold for every assignment?"""
    return _is_valid


@pytest.fixture
def is_satisfiable():
    return _is_satisfiable
