"""Evaluation rules for every :class:`~expreval.tokens.Operator` and :class:`~expreval.tokens.Function`.

Each rule is a plain function registered against its operator or function with :func:`implements`. The evaluator
looks rules up through :func:`execute`, which resolves :class:`~expreval.tokens.Variable` arguments first, unless the
rule asks to receive a variable itself (only the target of an assignment does).

All kind checks go through :func:`expreval.numeric.promote` and :func:`expreval.numeric.require`, so the promotion
lattice in :data:`expreval.numeric.PROMOTIONS` is the single source of truth for which operand kinds combine.

"""

import math
import operator
from decimal import Decimal, ROUND_CEILING, ROUND_FLOOR
from typing import Callable, Dict, FrozenSet, Optional, Sequence, Tuple, Union

from . import numeric
from .errors import DomainError, EvaluationError, ExpressionError, OperandTypeError, UnknownTokenError
from .numeric import NUMERIC_KINDS, make_operand, promote, require, to_decimal
from .tokens import Boolean, Function, FunctionToken, Integer, Operand, Operator, OperatorToken, Real, TokenKind


Implementation = Callable[..., Operand]

IMPLEMENTATIONS: Dict[Union[Operator, Function], Implementation] = {}

BOOLEAN_KINDS: FrozenSet[TokenKind] = frozenset({TokenKind.BOOLEAN})
EQUATABLE_KINDS: FrozenSet[TokenKind] = NUMERIC_KINDS | BOOLEAN_KINDS
INTEGER_KINDS: FrozenSet[TokenKind] = frozenset({TokenKind.INTEGER})


def implements(target: Union[Operator, Function], resolve: Optional[Tuple[bool, ...]] = None):
    """A decorator that registers a function as the evaluation rule for an operator or function.

    Args:
        target: The operator or function being implemented.
        resolve: Whether each argument should be read through if it is a variable before the rule is called. If
            omitted, every argument is resolved.

    """
    if resolve is None:
        resolve = (True,) * target.arity
    elif len(resolve) != target.arity:
        raise ValueError(f"{target!s} takes {target.arity} arguments, but {len(resolve)} resolve flags were given")

    def wrapper(func: Implementation) -> Implementation:
        func.resolve = resolve
        IMPLEMENTATIONS[target] = func
        return func

    return wrapper


def execute(token: Union[OperatorToken, FunctionToken], operands: Sequence[Operand]) -> Operand:
    """Applies an operator or function token to its operands.

    Args:
        token: The operator or function token.
        operands: Exactly :meth:`token.number_of_args()<expreval.tokens.Token.number_of_args>` operands, leftmost
            first.

    Raises:
        UnknownTokenError: If :obj:`token` is neither an operator nor a function, or has no registered rule.
        ExpressionError: Whatever the rule raises. Errors without an offset are given the offset of :obj:`token`.

    Returns:
        Operand: The result.

    """
    if token.is_operator():
        target = token.op
    elif token.is_function():
        target = token.func
    else:
        raise UnknownTokenError(f"cannot apply {token!r}", token.offset)
    func = IMPLEMENTATIONS.get(target)
    if func is None:
        raise UnknownTokenError(f"no evaluation rule for {target!s}", token.offset)
    try:
        args = [
            numeric.resolve(operand) if resolve else operand for resolve, operand in zip(func.resolve, operands)
        ]
        with numeric.decimal_errors(str(token)):
            return func(*args)
    except ExpressionError as e:
        if e.offset is None:
            e.offset = token.offset
        raise


def lookup_result(history, index: Operand) -> Operand:
    """Implements the ``result`` function: the :obj:`index`-th most recent result, counting from one.

    Args:
        history: An object implementing :class:`expreval.evaluator.ResultHistory`, or :const:`None`.
        index: A resolved integer operand.

    Raises:
        EvaluationError: If there is no history.
        OperandTypeError: If :obj:`index` is not an integer.
        DomainError: If there is no result at that index.

    """
    if history is None:
        raise EvaluationError("result() requires a result history, but none is available")
    require('result', index, INTEGER_KINDS)
    available = len(history)
    if not 1 <= index.value <= available:
        raise DomainError(f"result({index}) is out of range; {available} result(s) available")
    return history.result(index.value)


# Binary arithmetic

def _arithmetic(op: Operator, compute: Callable):
    @implements(op)
    def rule(lhs: Operand, rhs: Operand) -> Operand:
        kind, a, b = promote(op.token, lhs, rhs)
        return make_operand(kind, compute(a, b))

    rule.__name__ = op.name.lower()
    return rule


addition = _arithmetic(Operator.ADDITION, operator.add)
subtraction = _arithmetic(Operator.SUBTRACTION, operator.sub)
multiplication = _arithmetic(Operator.MULTIPLICATION, operator.mul)


@implements(Operator.DIVISION)
def division(lhs: Operand, rhs: Operand) -> Operand:
    kind, a, b = promote('/', lhs, rhs)
    if b == 0:
        raise DomainError("division by zero")
    if kind == TokenKind.INTEGER:
        return Integer(numeric.truncated_divmod(a, b)[0])
    return make_operand(kind, a / b)


@implements(Operator.MODULUS)
def modulus(lhs: Operand, rhs: Operand) -> Operand:
    kind, a, b = promote('%', lhs, rhs)
    if b == 0:
        raise DomainError("modulus by zero")
    if kind == TokenKind.INTEGER:
        return Integer(numeric.truncated_divmod(a, b)[1])
    return make_operand(kind, numeric.remainder(a, b))


@implements(Operator.POWER)
def power(base: Operand, exponent: Operand) -> Operand:
    kind, b, e = promote('^', base, exponent)
    if kind == TokenKind.INTEGER:
        if e >= 0:
            return Integer(b ** e)
        elif b == 0:
            raise DomainError("zero cannot be raised to a negative power")
        return make_operand(TokenKind.REAL, 1 / Decimal(b ** -e))
    if b.is_zero() and e < 0:
        raise DomainError("zero cannot be raised to a negative power")
    return make_operand(kind, b ** e)


@implements(Operator.ASSIGNMENT, resolve=(False, True))
def assignment(target: Operand, value: Operand) -> Operand:
    if not target.is_variable():
        raise OperandTypeError(f"assignment to a non-variable: {target}", target.offset)
    target.set(value)
    return value


# Comparisons

def _comparison(op: Operator, compare: Callable[..., bool], accepted: FrozenSet[TokenKind] = NUMERIC_KINDS):
    @implements(op)
    def rule(lhs: Operand, rhs: Operand) -> Operand:
        _, a, b = promote(op.token, lhs, rhs, accepted)
        return Boolean(compare(a, b))

    rule.__name__ = op.name.lower()
    return rule


equality = _comparison(Operator.EQUALITY, operator.eq, EQUATABLE_KINDS)
inequality = _comparison(Operator.INEQUALITY, operator.ne, EQUATABLE_KINDS)
less = _comparison(Operator.LESS, operator.lt)
less_equal = _comparison(Operator.LESS_EQUAL, operator.le)
greater = _comparison(Operator.GREATER, operator.gt)
greater_equal = _comparison(Operator.GREATER_EQUAL, operator.ge)


# Logic

logical_and = _comparison(Operator.AND, lambda a, b: a and b, BOOLEAN_KINDS)
logical_nand = _comparison(Operator.NAND, lambda a, b: not (a and b), BOOLEAN_KINDS)
logical_or = _comparison(Operator.OR, lambda a, b: a or b, BOOLEAN_KINDS)
logical_nor = _comparison(Operator.NOR, lambda a, b: not (a or b), BOOLEAN_KINDS)
logical_xor = _comparison(Operator.XOR, operator.ne, BOOLEAN_KINDS)
logical_xnor = _comparison(Operator.XNOR, operator.eq, BOOLEAN_KINDS)


@implements(Operator.NOT)
def logical_not(operand: Operand) -> Operand:
    require('not', operand, BOOLEAN_KINDS)
    return Boolean(not operand.value)


# Unary and postfix arithmetic

@implements(Operator.IDENTITY)
def identity(operand: Operand) -> Operand:
    require('unary +', operand)
    return operand


@implements(Operator.NEGATION)
def negation(operand: Operand) -> Operand:
    kind = require('unary -', operand)
    return make_operand(kind, -operand.value)


@implements(Operator.FACTORIAL)
def factorial(operand: Operand) -> Operand:
    require('!', operand, INTEGER_KINDS)
    if operand.value < 0:
        raise DomainError(f"factorial of a negative integer: {operand}")
    return Integer(math.factorial(operand.value))


# Functions

def _real_function(func: Function, compute: Callable[[Decimal], Decimal]):
    @implements(func)
    def rule(operand: Operand) -> Operand:
        require(func.token, operand)
        return make_operand(TokenKind.REAL, compute(to_decimal(operand)))

    rule.__name__ = func.token
    return rule


sqrt = _real_function(Function.SQRT, numeric.sqrt)
exp = _real_function(Function.EXP, numeric.exp)
ln = _real_function(Function.LN, numeric.ln)
lb = _real_function(Function.LB, numeric.log2)
log = _real_function(Function.LOG, numeric.log10)
sin = _real_function(Function.SIN, numeric.sin)
cos = _real_function(Function.COS, numeric.cos)
tan = _real_function(Function.TAN, numeric.tan)
arcsin = _real_function(Function.ARCSIN, numeric.asin)
arccos = _real_function(Function.ARCCOS, numeric.acos)
arctan = _real_function(Function.ARCTAN, numeric.atan)


@implements(Function.ARCTAN2)
def arctan2(y: Operand, x: Operand) -> Operand:
    promote('arctan2', y, x)
    return make_operand(TokenKind.REAL, numeric.atan2(to_decimal(y), to_decimal(x)))


@implements(Function.ABS)
def absolute(operand: Operand) -> Operand:
    kind = require('abs', operand)
    return make_operand(kind, abs(operand.value))


def _rounding_function(func: Function, rounding: str):
    @implements(func)
    def rule(operand: Operand) -> Operand:
        if require(func.token, operand) == TokenKind.INTEGER:
            return operand
        return Real(operand.value.to_integral_value(rounding=rounding))

    rule.__name__ = func.token
    return rule


ceil = _rounding_function(Function.CEIL, ROUND_CEILING)
floor = _rounding_function(Function.FLOOR, ROUND_FLOOR)


@implements(Function.MAX)
def maximum(lhs: Operand, rhs: Operand) -> Operand:
    kind, a, b = promote('max', lhs, rhs)
    return make_operand(kind, max(a, b))


@implements(Function.MIN)
def minimum(lhs: Operand, rhs: Operand) -> Operand:
    kind, a, b = promote('min', lhs, rhs)
    return make_operand(kind, min(a, b))


@implements(Function.POW)
def pow_function(base: Operand, exponent: Operand) -> Operand:
    return power(base, exponent)
