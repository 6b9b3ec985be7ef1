"""Exceptions raised by agentzero.

Translation failures caused by constructs the analyzer does not model are
*not* exceptions: they surface as ``None`` from the translator. The classes
below cover genuine misuse and malformed input.
"""


class AgentZeroException(Exception):
    """Base class for all agentzero errors."""


class SortMismatchError(AgentZeroException):
    """A symbolic expression was projected onto a sort it does not have."""

    def __init__(self, expected: str, actual: str):
        super().__init__(f"Sort mismatch: expected {expected}, got {actual}")
        self.expected = expected
        self.actual = actual


class ExpressionFormatError(AgentZeroException):
    """A serialized expression tree could not be decoded."""


class OperatorResolutionError(AgentZeroException):
    """The builder DSL found no predefined operator for the operand types."""
