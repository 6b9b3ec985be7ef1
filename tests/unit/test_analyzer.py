"""Tests for the per-expression analyzer."""

import pytest

from agentzero.core.config import AnalysisOptions, AnalyzerConfiguration
from agentzero.core.logging import AgentZeroLogger
from agentzero.analyzer import SatisfiabilityProblemAnalyzer, is_candidate
from agentzero.expr import dsl
from agentzero.expr import types as t
from agentzero.highlightings import SatisfiableExpressionHint, UnsatisfiableExpressionError
from agentzero.smt.solver import VerdictKind


@pytest.fixture
def analyzer():
    return SatisfiabilityProblemAnalyzer()


class TestIsCandidate:
    def test_boolean_operators(self):
        x = dsl.local("x", t.INT)
        assert is_candidate((x > 0).node)
        assert is_candidate(dsl.not_(x > 0).node)

    def test_non_boolean_operator(self):
        x = dsl.local("x", t.INT)
        assert not is_candidate((x + 1).node)

    def test_leaves_and_calls(self):
        assert not is_candidate(dsl.local("a", t.BOOL).node)
        assert not is_candidate(dsl.literal(True).node)
        assert not is_candidate(dsl.call("IsReady", t.BOOL).node)


@pytest.mark.solver
class TestAnalyze:
    def test_unsatisfiable(self, analyzer):
        x = dsl.local("x", t.INT)
        verdict = analyzer.analyze(((x > 42).and_also(x < 43)).node)
        assert verdict.kind is VerdictKind.UNSATISFIABLE

    def test_satisfiable(self, analyzer):
        x = dsl.local("x", t.INT)
        verdict = analyzer.analyze(((x > 42).and_also(x < 44)).node)
        assert verdict.kind is VerdictKind.SATISFIABLE
        assert "x = 43" in verdict.model

    def test_rerun_is_stable(self, analyzer):
        x = dsl.local("x", t.INT)
        node = ((x > 42).and_also(x < 44)).node
        first, second = analyzer.analyze(node), analyzer.analyze(node)
        assert first.kind is second.kind
        assert first.model == second.model

    def test_not_a_candidate(self, analyzer):
        x = dsl.local("x", t.INT)
        assert analyzer.analyze((x + 1).node) is None

    def test_untranslatable(self, analyzer):
        m = dsl.local("m", t.DECIMAL)
        assert analyzer.analyze((m > dsl.local("n", t.DECIMAL)).node) is None

    def test_model_lists_only_constants_of_the_formula(self, analyzer):
        x = dsl.local("x", t.INT)
        b = dsl.local("b", t.BYTE)
        # b is bound, then x + b fails on the operand width and becomes opaque.
        verdict = analyzer.analyze(((x + b) > 0).and_also(x < 0).node)
        assert verdict.kind is VerdictKind.SATISFIABLE
        constants = verdict.model.split("MODEL:")[0].splitlines()
        assert any(line.startswith("x = ") for line in constants)
        assert any(line.startswith("variable from expr: 'x + b' = ") for line in constants)
        assert not any(line.startswith("b = ") for line in constants)

    def test_deeply_nested_expression(self, analyzer):
        x = dsl.local("x", t.INT)
        node = dsl.and_also(*[x != i for i in range(1000)]).node
        verdict = analyzer.analyze(node)
        assert verdict is None or verdict.kind is VerdictKind.SATISFIABLE
        assert not AgentZeroLogger.get_mdc("expression")

    def test_expression_is_cleared_from_mdc(self, analyzer):
        x = dsl.local("x", t.INT)
        analyzer.analyze((x > 0).node)
        assert not AgentZeroLogger.get_mdc("expression")


@pytest.mark.solver
class TestRun:
    def test_error_for_unsatisfiable(self, analyzer):
        x = dsl.local("x", t.INT)
        node = ((x > 0).and_also(x < 0)).node
        highlighting = analyzer.run(node)
        assert isinstance(highlighting, UnsatisfiableExpressionError)
        assert highlighting.expression is node

    def test_hint_for_satisfiable(self, analyzer):
        x = dsl.local("x", t.INT)
        highlighting = analyzer.run((x == 5).node)
        assert isinstance(highlighting, SatisfiableExpressionHint)
        assert "x = 5" in highlighting.model_dump

    def test_hints_can_be_disabled(self):
        analyzer = SatisfiabilityProblemAnalyzer(AnalysisOptions(report_satisfiable_hints=False))
        x = dsl.local("x", t.INT)
        assert analyzer.run((x == 5).node) is None

    def test_nothing_for_untranslatable(self, analyzer):
        assert analyzer.run(dsl.call("IsReady", t.BOOL).node) is None

    def test_run_tree_reports_every_candidate(self, analyzer):
        x = dsl.local("x", t.INT)
        root = ((x > 0).and_also(x < 0)).node
        highlightings = list(analyzer.run_tree(root))
        assert [type(h) for h in highlightings] == [
            UnsatisfiableExpressionError,
            SatisfiableExpressionHint,
            SatisfiableExpressionHint,
        ]
        assert [h.expression.text for h in highlightings] == [
            "(x > 0) && (x < 0)",
            "x > 0",
            "x < 0",
        ]


def test_configuration_is_accepted(user_dir):
    config = AnalyzerConfiguration(user_dir / "options.json")
    config["timeout_ms"] = 1000
    analyzer = SatisfiabilityProblemAnalyzer(config)
    assert analyzer.options.timeout_ms == 1000
