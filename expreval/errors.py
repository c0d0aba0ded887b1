"""The exception hierarchy shared by every stage of :mod:`expreval`.

Every error is fatal for the :func:`~expreval.parser.parse` or :func:`~expreval.evaluator.evaluate` call that raised
it. Nothing is retried or recovered internally; callers decide whether to report the error, correct the input, or
abandon the session.

"""

from typing import Optional


class ExpressionError(RuntimeError):
    """Base error type of the :mod:`expreval` package."""
    def __init__(self, message: str, offset: Optional[int] = None):
        super().__init__(message)
        self.offset: Optional[int] = offset
        """The offset in the source text of the token that caused the error, if known."""

    def __str__(self):
        if self.offset is None:
            return super().__str__()
        return f"{super().__str__()} at offset {self.offset}"


class ParseError(ExpressionError):
    """Raised for structural problems: empty input, unmatched parentheses, or a misplaced argument separator.

    The scanner also raises this for text it cannot turn into tokens.

    """
    pass


class UnknownTokenError(ExpressionError):
    """Raised when a token matches none of the operand, operator, function, or structural kinds."""
    pass


class EvaluationError(ExpressionError):
    """Base class for errors raised while reducing a postfix expression."""
    pass


class InsufficientOperandsError(EvaluationError):
    """An operator or function required more operands than were available on the stack."""
    pass


class TooManyOperandsError(EvaluationError):
    """More than one operand remained after a complete evaluation pass."""
    pass


class OperandTypeError(EvaluationError, TypeError):
    """An operand's kind is not in the set accepted by an operator or function."""
    pass


class DomainError(EvaluationError, ArithmeticError):
    """An operation is undefined for the given values, *e.g.*, division by zero or the factorial of a negative."""
    pass


class UninitializedVariableError(DomainError):
    """A variable was read before anything was assigned to it."""
    def __init__(self, name: str, offset: Optional[int] = None):
        super().__init__(f"variable {name!r} not initialized", offset)
        self.name: str = name
        """The name of the variable that was read."""
