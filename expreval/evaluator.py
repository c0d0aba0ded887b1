"""A stack machine that reduces a postfix token sequence to a single operand."""

import logging
from abc import abstractmethod
from typing import Iterable, List, Optional

from typing_extensions import Protocol

from . import numeric
from .errors import InsufficientOperandsError, TooManyOperandsError, UnknownTokenError
from .operations import execute, lookup_result
from .tokens import Function, Operand, Token


log = logging.getLogger(__name__)


class ResultHistory(Protocol):
    """A protocol for the record of previous results consulted by the ``result`` function."""

    @abstractmethod
    def __len__(self) -> int:
        """Returns the number of results available."""
        raise NotImplementedError()

    @abstractmethod
    def result(self, index: int) -> Operand:
        """Returns the :obj:`index`-th most recent result, counting from one.

        Raises:
            IndexError: If :obj:`index` is not between one and ``len(self)``, inclusive.

        """
        raise NotImplementedError()


class RPNEvaluator:
    """Evaluates postfix token sequences."""

    def __init__(self, history: Optional[ResultHistory] = None,
                 precision: Optional[int] = numeric.DEFAULT_PRECISION):
        """Initializes an evaluator.

        Args:
            history: The results the ``result`` function may look up. If omitted, calling ``result`` is an error.
            precision: The number of significant digits for real arithmetic. If :const:`None`, the current
                :mod:`decimal` context is used unchanged.

        """
        self.history: Optional[ResultHistory] = history
        """The results the ``result`` function may look up."""
        self.precision: Optional[int] = precision
        """The number of significant digits for real arithmetic."""

    def apply(self, token: Token, operands: List[Operand]) -> Operand:
        """Applies an operator or function token to operands that have already been popped from the stack."""
        if token.is_function() and token.func == Function.RESULT:
            return lookup_result(self.history, numeric.resolve(operands[0]))
        return execute(token, operands)

    def evaluate(self, postfix: Iterable[Token]) -> Operand:
        """Reduces a postfix expression to its value.

        The only side effect is on variables assigned by the expression.

        Args:
            postfix: The expression in postfix order, typically the output of :func:`expreval.parser.parse`.

        Raises:
            InsufficientOperandsError: If the expression is empty, or an operator or function finds fewer operands on
                the stack than it consumes.
            TooManyOperandsError: If more than one operand remains at the end.
            UnknownTokenError: If the expression contains a structural token or a token of no known kind.
            OperandTypeError: If an operator or function is applied to operands of a kind it does not accept.
            DomainError: If an operation is undefined for its operands, or an uninitialized variable is read.

        Returns:
            Operand: The value of the expression. A lone variable is read through, so the result is never a
            :class:`~expreval.tokens.Variable`.

        """
        stack: List[Operand] = []
        empty = True
        with numeric.real_context(self.precision):
            for token in postfix:
                empty = False
                if token.is_operand():
                    stack.append(token)
                elif token.is_operator() or token.is_function():
                    arity = token.number_of_args()
                    if len(stack) < arity:
                        raise InsufficientOperandsError(
                            f"insufficient operands for {token}: expected {arity} but found {len(stack)}",
                            token.offset
                        )
                    operands = stack[len(stack) - arity:]
                    del stack[len(stack) - arity:]
                    result = self.apply(token, operands)
                    if log.isEnabledFor(logging.DEBUG):
                        log.debug(f"{token} {' '.join(map(str, operands))} -> {result}")
                    stack.append(result)
                else:
                    raise UnknownTokenError(f"Unexpected token {token!r} in a postfix expression", token.offset)
            if empty:
                raise InsufficientOperandsError("insufficient operands: the expression is empty")
            elif len(stack) > 1:
                raise TooManyOperandsError(
                    f"too many operands: {len(stack)} values remain ({', '.join(map(str, stack))})",
                    stack[1].offset
                )
            return numeric.resolve(stack[0])


def evaluate(postfix: Iterable[Token], history: Optional[ResultHistory] = None,
             precision: Optional[int] = numeric.DEFAULT_PRECISION) -> Operand:
    """Convenience function for evaluating a postfix token sequence.

    This is equivalent to::

        RPNEvaluator(history, precision).evaluate(postfix)

    """
    return RPNEvaluator(history, precision).evaluate(postfix)
