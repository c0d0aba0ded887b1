"""Evaluation sessions: the state that lives longer than a single expression.

A :class:`Session` owns a :class:`VariableTable`, so that ``x = 5`` followed by ``x * 2`` sees the same variable, and a
:class:`History` of results, consulted by the ``result`` function.

Example:
    Here is an example of its usage::

        >>> session = Session()
        >>> session.evaluate('x = 2 ^ 10')
        Integer(1024)
        >>> session.evaluate('x / 4 + result(1)')
        Integer(1280)

"""

import logging
from collections import deque
from typing import Deque, Dict, Iterable, Iterator, Optional, Tuple, Union

from .evaluator import RPNEvaluator
from .numeric import DEFAULT_PRECISION
from .parser import parse
from .scanner import Tokenizer
from .tokens import Operand, Token, TokenList, Variable


log = logging.getLogger(__name__)


class VariableTable:
    """A table of :class:`~expreval.tokens.Variable` cells keyed by name.

    Looking up a name that is not yet in the table creates an empty variable, which is then returned by every later
    lookup of that name.

    """
    def __init__(self):
        self._variables: Dict[str, Variable] = {}

    def __getitem__(self, name: str) -> Variable:
        variable = self._variables.get(name)
        if variable is None:
            variable = Variable(name)
            self._variables[name] = variable
        return variable

    def get(self, name: str) -> Optional[Variable]:
        """Returns the variable with the given name, or :const:`None` if it has never been looked up."""
        return self._variables.get(name)

    def __contains__(self, name) -> bool:
        return name in self._variables

    def __iter__(self) -> Iterator[str]:
        return iter(self._variables)

    def __len__(self):
        return len(self._variables)

    def items(self) -> Iterator[Tuple[str, Variable]]:
        return iter(self._variables.items())

    def clear(self):
        """Removes every variable from the table."""
        self._variables.clear()


class History:
    """A bounded record of results, most recent first.

    This implements the :class:`expreval.evaluator.ResultHistory` protocol.

    """
    def __init__(self, max_size: Optional[int] = None):
        """Initializes an empty history.

        Args:
            max_size: The number of results to retain. If :const:`None`, every result is retained.

        """
        self._results: Deque[Operand] = deque(maxlen=max_size)

    @property
    def max_size(self) -> Optional[int]:
        return self._results.maxlen

    def append(self, result: Operand):
        """Records a new most recent result, discarding the oldest one if the history is full."""
        self._results.appendleft(result)

    def result(self, index: int) -> Operand:
        if not 1 <= index <= len(self._results):
            raise IndexError(f"History index {index} out of range [1, {len(self._results)}]")
        return self._results[index - 1]

    def clear(self):
        self._results.clear()

    def __len__(self):
        return len(self._results)

    def __iter__(self) -> Iterator[Operand]:
        return iter(self._results)


class EvaluationOptions:
    """A class for passing options to a :class:`Session`."""

    def __init__(self, *,
                 precision: int = DEFAULT_PRECISION,
                 history_size: Optional[int] = 100,
                 **kwargs
                 ):
        """Initializes the options. All keyword values will be set as attributes of this class.

        Options not specified will default to :const:`False`.

        """
        if precision < 1:
            raise ValueError(f"Precision must be at least one digit, not {precision}")
        self.precision: int = precision
        """The number of significant digits used for real arithmetic"""
        self.history_size: Optional[int] = history_size
        """The number of previous results available to the ``result`` function, or :const:`None` for no limit"""
        for attr, value in kwargs.items():
            setattr(self, attr, value)

    def __getattr__(self, item):
        """Default all undefined options to :const:`False`"""
        return False


class Session:
    """Evaluates a series of expressions that share variables and a result history."""

    def __init__(self, options: Optional[EvaluationOptions] = None):
        if options is None:
            options = EvaluationOptions()
        self.options: EvaluationOptions = options
        """The options this session was created with."""
        self.variables: VariableTable = VariableTable()
        """The variables assigned so far."""
        self.history: History = History(max_size=options.history_size)
        """The results of previous successful evaluations."""
        self.evaluator: RPNEvaluator = RPNEvaluator(history=self.history, precision=options.precision)

    def tokenize(self, text: str) -> TokenList:
        """Scans text into infix tokens, resolving identifiers against this session's variables."""
        return list(Tokenizer(text, variables=self.variables))

    def parse(self, text: str) -> TokenList:
        """Scans and converts text to a postfix token list."""
        return parse(self.tokenize(text))

    def evaluate(self, expression: Union[str, Iterable[Token]]) -> Operand:
        """Evaluates an expression and records its result in the history.

        Args:
            expression: Either expression text, or an already parsed postfix token sequence.

        Raises:
            ExpressionError: If the expression cannot be parsed or evaluated. Failed evaluations are not recorded.

        Returns:
            Operand: The result.

        """
        if isinstance(expression, str):
            postfix = self.parse(expression)
        else:
            postfix = list(expression)
        result = self.evaluator.evaluate(postfix)
        self.history.append(result)
        if log.isEnabledFor(logging.DEBUG):
            log.debug(f"{' '.join(map(str, postfix))} evaluated to {result!s}")
        return result

    def reset(self):
        """Forgets every variable and result."""
        self.variables.clear()
        self.history.clear()
