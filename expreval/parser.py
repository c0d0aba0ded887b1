"""Conversion of infix token sequences to postfix (`Reverse Polish Notation`_).

.. _Reverse Polish Notation:
    https://en.wikipedia.org/wiki/Reverse_Polish_notation

Example:
    Operator precedence and right associativity are resolved during conversion::

        >>> parse([Integer(2), OperatorToken('^'), Integer(3), OperatorToken('^'), Integer(2)])
        [Integer(2), Integer(3), Integer(2), OperatorToken(op=Operator.POWER), OperatorToken(op=Operator.POWER)]

"""

import logging
from typing import Iterable, Iterator, List

from .errors import ParseError, UnknownTokenError
from .tokens import Token, TokenList


log = logging.getLogger(__name__)


def _pops_before(top: Token, incoming: Token) -> bool:
    """Whether the operator :obj:`top` on the stack must be output before :obj:`incoming` is pushed.

    Operators of equal precedence only pop when left-associative, so right-associative chains such as
    ``2 ^ 3 ^ 2`` group from the right.

    """
    return top.precedence() > incoming.precedence() or (
        top.precedence() == incoming.precedence() and top.is_left_associative()
    )


def infix_to_rpn(tokens: Iterable[Token]) -> Iterator[Token]:
    """Converts an infix expression to reverse Polish notation using the Shunting Yard algorithm.

    Args:
        tokens: The infix tokens. They are assumed to be lexically valid; grouping is validated here.

    Raises:
        ParseError: If the input is empty, a parenthesis is unmatched, or an argument separator appears outside of
            a parenthesized group.
        UnknownTokenError: If a token is of no known kind.

    Returns:
        Iterator[Token]: The same operand, operator, and function tokens in postfix order, with the structural tokens
        removed.

    """
    operators: List[Token] = []
    empty = True

    for token in tokens:
        empty = False
        if token.is_operand():
            yield token
        elif token.is_operator():
            if not token.is_prefix():
                # a prefix operator has no left operand, so nothing on the stack can be waiting for it
                while operators and operators[-1].is_operator() and _pops_before(operators[-1], token):
                    yield operators.pop()
            operators.append(token)
        elif token.is_function():
            operators.append(token)
        elif token.is_left_parenthesis():
            operators.append(token)
        elif token.is_argument_separator():
            while operators and not operators[-1].is_left_parenthesis():
                yield operators.pop()
            if not operators:
                raise ParseError("Unexpected argument separator outside of parenthesis", token.offset)
        elif token.is_right_parenthesis():
            while operators and not operators[-1].is_left_parenthesis():
                yield operators.pop()
            if not operators:
                raise ParseError("Mismatched right parenthesis", token.offset)
            operators.pop()
            if operators and operators[-1].is_function():
                yield operators.pop()
        else:
            raise UnknownTokenError(f"Unknown token {token!r}", token.offset)

    if empty:
        raise ParseError("Empty expression")

    while operators:
        top = operators.pop()
        if top.is_parenthesis():
            raise ParseError("Mismatched left parenthesis", top.offset)
        yield top


def parse(infix: Iterable[Token]) -> TokenList:
    """Convenience function for converting an infix token sequence to a postfix token list.

    This is equivalent to::

        list(infix_to_rpn(infix))

    """
    postfix = list(infix_to_rpn(infix))
    if log.isEnabledFor(logging.DEBUG):
        log.debug(f"Parsed postfix expression: {' '.join(map(str, postfix))}")
    return postfix
