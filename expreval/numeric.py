"""Numeric helpers shared by every operator and function.

This module holds three things:

#. the promotion lattice (:data:`PROMOTIONS`) that decides which kind an operation on two operands computes in;
#. helpers for creating operands from raw values and for running arithmetic under a :mod:`decimal` context; and
#. arbitrary-precision transcendental functions over :class:`decimal.Decimal`. The :mod:`decimal` module only
   provides :meth:`~decimal.Decimal.sqrt`, :meth:`~decimal.Decimal.exp`, :meth:`~decimal.Decimal.ln`, and
   :meth:`~decimal.Decimal.log10`; the trigonometric functions here are series expansions computed with guard
   digits, in the style of the recipes in the :mod:`decimal` documentation.

Every function in this module computes in the *current* decimal context. Use :func:`real_context` to set the
precision.

Attributes:
    DEFAULT_PRECISION (int): The number of significant digits used for :class:`~expreval.tokens.Real` arithmetic
        unless configured otherwise.

    PROMOTIONS (Dict[Tuple[TokenKind, TokenKind], TokenKind]): Maps the kinds of two operands to the kind in which
        a binary operation on them is computed. Pairs missing from this table cannot be combined.

    NUMERIC_KINDS (FrozenSet[TokenKind]): The kinds that take part in arithmetic.

"""

from contextlib import contextmanager
from decimal import Decimal, DivisionByZero, InvalidOperation, Overflow, localcontext
from typing import Any, Dict, FrozenSet, Iterator, Optional, Tuple

from .errors import DomainError, OperandTypeError
from .tokens import Boolean, Integer, Operand, Real, TokenKind


DEFAULT_PRECISION: int = 50

NUMERIC_KINDS: FrozenSet[TokenKind] = frozenset({TokenKind.INTEGER, TokenKind.REAL})

PROMOTIONS: Dict[Tuple[TokenKind, TokenKind], TokenKind] = {
    (TokenKind.INTEGER, TokenKind.INTEGER): TokenKind.INTEGER,
    (TokenKind.INTEGER, TokenKind.REAL): TokenKind.REAL,
    (TokenKind.REAL, TokenKind.INTEGER): TokenKind.REAL,
    (TokenKind.REAL, TokenKind.REAL): TokenKind.REAL,
    (TokenKind.BOOLEAN, TokenKind.BOOLEAN): TokenKind.BOOLEAN,
}

# extra digits carried through series expansions before the final rounding
GUARD_DIGITS = 5


@contextmanager
def real_context(precision: Optional[int] = None) -> Iterator[Any]:
    """A context manager that sets the precision of :class:`~expreval.tokens.Real` arithmetic.

    Args:
        precision: The number of significant digits. If :const:`None`, the current context is left unchanged.

    """
    with localcontext() as ctx:
        if precision is not None:
            if precision < 1:
                raise ValueError(f"Precision must be at least one digit, not {precision}")
            ctx.prec = precision
        yield ctx


@contextmanager
def decimal_errors(operation: str = 'operation') -> Iterator[None]:
    """Translates the signals trapped by :mod:`decimal` into :class:`~expreval.errors.DomainError`."""
    try:
        yield
    except DivisionByZero as e:
        raise DomainError(f"division by zero in {operation}") from e
    except Overflow as e:
        raise DomainError(f"numeric overflow in {operation}") from e
    except InvalidOperation as e:
        raise DomainError(f"undefined result for {operation}") from e


def resolve(operand: Operand) -> Operand:
    """Returns the operand a token stands for, reading through a :class:`~expreval.tokens.Variable`.

    Raises:
        UninitializedVariableError: If :obj:`operand` is an empty variable.

    """
    if operand.is_variable():
        return operand.get()
    return operand


def describe(*operands: Operand) -> str:
    return ', '.join(operand.kind.value for operand in operands)


def promote(operation: str, lhs: Operand, rhs: Operand,
            accepted: FrozenSet[TokenKind] = NUMERIC_KINDS) -> Tuple[TokenKind, Any, Any]:
    """Looks up the kind two operands combine in and converts both of their values to it.

    Args:
        operation: The name of the operation, used in error messages.
        lhs: The left operand. It must already be resolved.
        rhs: The right operand. It must already be resolved.
        accepted: The result kinds the operation supports.

    Raises:
        OperandTypeError: If the pair is not in :data:`PROMOTIONS` or combines to a kind not in :obj:`accepted`.

    Returns:
        Tuple[TokenKind, Any, Any]: The common kind followed by the two converted values.

    """
    kind = PROMOTIONS.get((lhs.kind, rhs.kind))
    if kind is None or kind not in accepted:
        raise OperandTypeError(f"unsupported operand types for {operation}: {describe(lhs, rhs)}", lhs.offset)
    if kind == TokenKind.REAL:
        return kind, to_decimal(lhs), to_decimal(rhs)
    return kind, lhs.value, rhs.value


def require(operation: str, operand: Operand, accepted: FrozenSet[TokenKind] = NUMERIC_KINDS) -> TokenKind:
    """Raises :class:`~expreval.errors.OperandTypeError` unless the (resolved) operand's kind is accepted."""
    if operand.kind not in accepted:
        raise OperandTypeError(f"unsupported operand type for {operation}: {describe(operand)}", operand.offset)
    return operand.kind


def to_decimal(operand: Operand) -> Decimal:
    """Promotes an integer or real operand to a :class:`decimal.Decimal`. Integers are converted exactly."""
    if operand.is_integer():
        return Decimal(operand.value)
    elif operand.is_real():
        return operand.value
    raise OperandTypeError(f"{operand.kind.value} operand is not numeric", operand.offset)


def make_operand(kind: TokenKind, value: Any) -> Operand:
    """Wraps a raw value in an operand token of the given kind, rounding reals to the current precision."""
    if kind == TokenKind.INTEGER:
        return Integer(value)
    elif kind == TokenKind.REAL:
        return Real(+value)
    elif kind == TokenKind.BOOLEAN:
        return Boolean(value)
    raise ValueError(f"Cannot create an operand of kind {kind}")


def truncated_divmod(dividend: int, divisor: int) -> Tuple[int, int]:
    """Integer division rounding toward zero, with a remainder that takes the sign of the dividend.

    Python's ``//`` and ``%`` round toward negative infinity instead.

    """
    quotient = abs(dividend) // abs(divisor)
    if (dividend < 0) != (divisor < 0):
        quotient = -quotient
    return quotient, dividend - divisor * quotient


def remainder(dividend: Decimal, divisor: Decimal) -> Decimal:
    """The remainder of a real division, with the sign of the dividend.

    :mod:`decimal` signals :class:`decimal.DivisionImpossible` when the integral quotient has more digits than the
    context precision, so the remainder is computed with as many digits as that quotient needs and then rounded.

    """
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, dividend.adjusted() - divisor.adjusted() + ctx.prec)
        result = dividend % divisor
    return +result


def pi() -> Decimal:
    """Computes pi to the current precision."""
    with localcontext() as ctx:
        ctx.prec += GUARD_DIGITS
        three = Decimal(3)
        lasts, t, s, n, na, d, da = 0, three, 3, 1, 0, 0, 24
        while s != lasts:
            lasts = s
            n, na = n + na, na + 8
            d, da = d + da, da + 32
            t = (t * n) / d
            s += t
    return +s


def _reduce_angle(x: Decimal) -> Decimal:
    """Reduces an angle into [-pi, pi]. Must be called with guard digits in effect."""
    two_pi = 2 * pi()
    if abs(x) <= two_pi / 2:
        return x
    return x - two_pi * (x / two_pi).to_integral_value()


def sin(x: Decimal) -> Decimal:
    with localcontext() as ctx:
        ctx.prec += GUARD_DIGITS + max(0, x.adjusted())
        x = _reduce_angle(x)
        i, lasts, s, fact, num, sign = 1, 0, x, 1, x, 1
        while s != lasts:
            lasts = s
            i += 2
            fact *= i * (i - 1)
            num *= x * x
            sign *= -1
            s += num / fact * sign
    return +s


def cos(x: Decimal) -> Decimal:
    with localcontext() as ctx:
        ctx.prec += GUARD_DIGITS + max(0, x.adjusted())
        x = _reduce_angle(x)
        i, lasts, s, fact, num, sign = 0, 0, Decimal(1), 1, 1, 1
        while s != lasts:
            lasts = s
            i += 2
            fact *= i * (i - 1)
            num *= x * x
            sign *= -1
            s += num / fact * sign
    return +s


def tan(x: Decimal) -> Decimal:
    with localcontext() as ctx:
        ctx.prec += GUARD_DIGITS
        c = cos(x)
        if c.is_zero():
            raise DomainError(f"tangent is undefined at {x}")
        result = sin(x) / c
    return +result


def atan(x: Decimal) -> Decimal:
    """Computes the arc tangent by argument halving followed by the Maclaurin series."""
    if x.is_zero():
        return +x
    with localcontext() as ctx:
        ctx.prec += GUARD_DIGITS
        negative = x < 0
        x = abs(x)
        complement = x > 1
        if complement:
            x = 1 / x
        halvings = 0
        # atan(x) = 2 * atan(x / (1 + sqrt(1 + x^2)))
        while x > Decimal('0.1'):
            x = x / (1 + (1 + x * x).sqrt())
            halvings += 1
        x2 = x * x
        term, s, lasts, n = x, x, 0, 1
        while s != lasts:
            lasts = s
            term *= -x2
            n += 2
            s += term / n
        s *= 2 ** halvings
        if complement:
            s = pi() / 2 - s
        if negative:
            s = -s
    return +s


def asin(x: Decimal) -> Decimal:
    if abs(x) > 1:
        raise DomainError(f"arcsine is undefined for {x}")
    with localcontext() as ctx:
        ctx.prec += GUARD_DIGITS
        if abs(x) == 1:
            result = pi() / 2
            if x < 0:
                result = -result
        else:
            result = atan(x / (1 - x * x).sqrt())
    return +result


def acos(x: Decimal) -> Decimal:
    if abs(x) > 1:
        raise DomainError(f"arccosine is undefined for {x}")
    with localcontext() as ctx:
        ctx.prec += GUARD_DIGITS
        result = pi() / 2 - asin(x)
    return +result


def atan2(y: Decimal, x: Decimal) -> Decimal:
    """The angle of the point ``(x, y)``, following the C library's conventions (``atan2(0, 0) == 0``)."""
    with localcontext() as ctx:
        ctx.prec += GUARD_DIGITS
        if x > 0:
            result = atan(y / x)
        elif x < 0:
            if y < 0:
                result = atan(y / x) - pi()
            else:
                result = atan(y / x) + pi()
        elif y > 0:
            result = pi() / 2
        elif y < 0:
            result = -pi() / 2
        else:
            result = Decimal(0)
    return +result


def sqrt(x: Decimal) -> Decimal:
    if x < 0:
        raise DomainError(f"square root is undefined for {x}")
    return x.sqrt()


def exp(x: Decimal) -> Decimal:
    return x.exp()


def ln(x: Decimal) -> Decimal:
    if x <= 0:
        raise DomainError(f"logarithm is undefined for {x}")
    return x.ln()


def log10(x: Decimal) -> Decimal:
    if x <= 0:
        raise DomainError(f"logarithm is undefined for {x}")
    return x.log10()


def log2(x: Decimal) -> Decimal:
    if x <= 0:
        raise DomainError(f"logarithm is undefined for {x}")
    with localcontext() as ctx:
        ctx.prec += GUARD_DIGITS
        result = x.ln() / Decimal(2).ln()
    return +result
