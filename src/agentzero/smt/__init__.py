"""
agentzero.smt: translation of expression trees to Z3 and satisfiability checks.

Modules:
    sorts      - source type -> Z3 sort
    constants  - literal values -> Z3 constants
    terms      - SymbolicExpr, sort-tagged Z3 terms
    variables  - FreeVariableTable and VariableBinder
    session    - AnalysisSession, the run-scoped Z3 context
    operators  - Z3 semantics of the predefined operators
    translator - ExpressionTranslator
    model      - ModelPresenter
    solver     - SatisfiabilityDriver and Verdict
"""

from .constants import encode, encode_constant
from .model import ModelPresenter, render_model
from .session import AnalysisSession
from .solver import SatisfiabilityDriver, Verdict, VerdictKind
from .sorts import is_supported, map_sort
from .terms import SortKind, SymbolicExpr
from .translator import ExpressionTranslator
from .variables import FreeVariableTable, VariableBinder

__all__ = [
    "AnalysisSession",
    "ExpressionTranslator",
    "FreeVariableTable",
    "ModelPresenter",
    "SatisfiabilityDriver",
    "SortKind",
    "SymbolicExpr",
    "VariableBinder",
    "Verdict",
    "VerdictKind",
    "encode",
    "encode_constant",
    "is_supported",
    "map_sort",
    "render_model",
]
