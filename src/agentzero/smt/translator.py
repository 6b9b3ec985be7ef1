"""Translation of typed expression trees into Z3 formulas."""

from __future__ import annotations

from agentzero.core.logging import getLogger
from agentzero.errors import SortMismatchError
from agentzero.expr.ast import (
    BinaryOp,
    Expression,
    Literal,
    Unsupported,
    UnaryOp,
    VariableRef,
)
from agentzero.expr.operators import Operator, OperatorResolution
from agentzero.smt import operators
from agentzero.smt.constants import encode
from agentzero.smt.session import AnalysisSession
from agentzero.smt.terms import SymbolicExpr

logger = getLogger("AgentZero.translator")


class ExpressionTranslator:
    """Turns an expression tree into a :class:`SymbolicExpr`, or ``None``.

    Translation is recursive and never raises for constructs it does not
    model: those yield ``None``. Within an operator node, an operand that
    cannot be translated is replaced by a fresh unknown of its static type
    (see :meth:`VariableBinder.bind_opaque`), so ``x > 0 && Foo()`` still
    becomes a formula. The root node gets no such substitution.

    Example:
        >>> with AnalysisSession() as session:
        ...     formula = ExpressionTranslator(session).translate(tree)
    """

    def __init__(self, session: AnalysisSession):
        self.session = session

    @property
    def binder(self):
        return self.session.binder

    def translate(self, node: Expression) -> SymbolicExpr | None:
        result = self._translate(node)
        if result is None and logger.debug_on:
            logger.debug("Could not translate '%s'", node.text)
        return result

    def _translate(self, node: Expression) -> SymbolicExpr | None:
        # Compile-time constants first, whatever the node shape.
        constant = node.constant
        if constant is not None:
            value = encode(constant, self.session.ctx)
            if value is not None:
                return value

        match node:
            case Literal():
                return None
            case VariableRef(element=element) if element is not None and element.is_variable:
                return self.binder.bind_element(element)
            case BinaryOp():
                return self._translate_binary(node)
            case UnaryOp():
                return self._translate_unary(node)
            case VariableRef() | Unsupported():
                if logger.debug_on:
                    logger.debug("Unsupported expression '%s'", node.text)
                return None
            case _:
                raise TypeError(f"not an expression node: {node!r}")

    def _translate_operand(self, node: Expression) -> SymbolicExpr | None:
        value = self._translate(node)
        if value is None:
            value = self.binder.bind_opaque(node)
        return value

    @staticmethod
    def _predefined(resolution: OperatorResolution, text: str) -> Operator | None:
        operator = resolution.predefined_operator
        if operator is None and logger.debug_on:
            logger.debug(
                "Operator of '%s' is not a resolved predefined operator (%s)",
                text,
                resolution.status.value,
            )
        return operator

    def _translate_binary(self, node: BinaryOp) -> SymbolicExpr | None:
        operator = self._predefined(node.operator, node.text)
        if operator is None:
            return None

        family = operators.family_of(operator.return_type)
        if family is None or operator.tag in operators.UNSUPPORTED:
            if logger.debug_on:
                logger.debug(
                    "Unsupported operator %s returning %s in '%s'",
                    operator.name,
                    operator.return_type,
                    node.text,
                )
            return None

        handler = operators.binary_handler(family, operator.tag)
        if handler is None:
            logger.error(
                "Unknown %s operator: %s in '%s'", family.value, operator.name, node.text
            )
            return None

        left = self._translate_operand(node.left)
        if left is None:
            return None
        right = self._translate_operand(node.right)
        if right is None:
            return None

        try:
            return SymbolicExpr.of(handler(self.session, left, right))
        except SortMismatchError as e:
            if logger.debug_on:
                logger.debug("Operand sorts do not fit %s in '%s': %s", operator.name, node.text, e)
            return None

    def _translate_unary(self, node: UnaryOp) -> SymbolicExpr | None:
        operator = self._predefined(node.operator, node.text)
        if operator is None:
            return None

        if operator.tag in operators.UNSUPPORTED:
            if logger.debug_on:
                logger.debug("Unsupported operator %s in '%s'", operator.name, node.text)
            return None

        handler = operators.unary_handler(operator.tag)
        if handler is None:
            logger.error("Unknown unary operator: %s in '%s'", operator.name, node.text)
            return None

        operand = self._translate_operand(node.operand)
        if operand is None:
            return None

        try:
            return SymbolicExpr.of(handler(self.session, operand))
        except SortMismatchError as e:
            if logger.debug_on:
                logger.debug("Operand sort does not fit %s in '%s': %s", operator.name, node.text, e)
            return None
