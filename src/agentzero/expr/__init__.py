"""
agentzero.expr: typed expression trees, the analyzer's input.

Modules:
    types         - SourceType and the primitive types
    operators     - predefined operator identities and their signatures
    ast           - the closed set of node shapes
    dsl           - operator-overloading builder for trees
    serialization - JSON encoding of trees
"""

from .ast import (
    BinaryOp,
    Constant,
    DeclaredElement,
    ElementKind,
    Expression,
    Literal,
    NodeShape,
    UnaryOp,
    Unsupported,
    VariableRef,
    children,
    walk,
)
from .operators import (
    SIGNATURES,
    Operator,
    OperatorResolution,
    OperatorSignature,
    OperatorTag,
    ResolveStatus,
    find_operator,
)
from .types import SourceType, TypeKind, enum_type

__all__ = [
    # ast
    "BinaryOp",
    "Constant",
    "DeclaredElement",
    "ElementKind",
    "Expression",
    "Literal",
    "NodeShape",
    "UnaryOp",
    "Unsupported",
    "VariableRef",
    "children",
    "walk",
    # operators
    "SIGNATURES",
    "Operator",
    "OperatorResolution",
    "OperatorSignature",
    "OperatorTag",
    "ResolveStatus",
    "find_operator",
    # types
    "SourceType",
    "TypeKind",
    "enum_type",
]
