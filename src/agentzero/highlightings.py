"""Diagnostics produced by the satisfiability analyzer."""

from __future__ import annotations

import enum
import typing
from dataclasses import dataclass

from agentzero.expr.ast import Expression

GROUP_ID = "SatisfiabilityIssues"
GROUP_TITLE = "[Agent Zero] Satisfiability issues"


class Severity(enum.IntEnum):
    HINT = 1
    SUGGESTION = 2
    WARNING = 3
    ERROR = 4


@dataclass(frozen=True, slots=True)
class SeverityDescriptor:
    """Registration data for one configurable highlighting kind."""

    id: str
    title: str
    description: str
    default_severity: Severity
    group: str = GROUP_ID


class Highlighting(typing.Protocol):
    expression: Expression

    @property
    def severity(self) -> Severity: ...

    @property
    def tooltip(self) -> str: ...


@dataclass(frozen=True, slots=True)
class UnsatisfiableExpressionError:
    """The expression is false for every value of its free variables."""

    SEVERITY_ID: typing.ClassVar[str] = "AgentZero.UnsatisfiableExpression"
    MESSAGE: typing.ClassVar[str] = "Expression is unsatisfiable"

    expression: Expression

    @property
    def severity(self) -> Severity:
        return Severity.ERROR

    @property
    def tooltip(self) -> str:
        return self.MESSAGE

    def __str__(self) -> str:
        return f"{self.severity.name}: '{self.expression.text}': {self.tooltip}"


@dataclass(frozen=True, slots=True)
class SatisfiableExpressionHint:
    """The expression can be true; ``model_dump`` is one witness."""

    SEVERITY_ID: typing.ClassVar[str] = "AgentZero.SatisfiableExpression"
    MESSAGE: typing.ClassVar[str] = "Expression is satisfiable, model is: \n\n{0}"

    expression: Expression
    model_dump: str

    @property
    def severity(self) -> Severity:
        return Severity.HINT

    @property
    def tooltip(self) -> str:
        return self.MESSAGE.format(self.model_dump)

    def __str__(self) -> str:
        return f"{self.severity.name}: '{self.expression.text}': {self.tooltip}"


SEVERITIES: tuple[SeverityDescriptor, ...] = (
    SeverityDescriptor(
        id=UnsatisfiableExpressionError.SEVERITY_ID,
        title=UnsatisfiableExpressionError.MESSAGE,
        description="Expression is detected to be never satisfiable with any given variables values",
        default_severity=Severity.ERROR,
    ),
    SeverityDescriptor(
        id=SatisfiableExpressionHint.SEVERITY_ID,
        title="Expression is satisfiable",
        description="Expression is detected to be satisfiable with given model of variables",
        default_severity=Severity.HINT,
    ),
)
