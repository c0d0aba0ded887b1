"""Turns expression text into an infix :obj:`~expreval.tokens.TokenList`.

The parser and evaluator never depend on this module; it exists so that applications (and the command line
interface) can go from a string to a value.

Example:
    Here is an example of its usage::

        >>> list(tokenize('max(x, 2.5) ^ 2'))
        [FunctionToken(func=Function.MAX), LeftParenthesis(), Variable(name='x', value=None), ArgumentSeparator(), Real('2.5'), RightParenthesis(), OperatorToken(op=Operator.POWER), Integer(2)]

Attributes:
    IDENTIFIER_BYTES (Set[str]): The set of characters that may appear in an identifier after its first character.
        This is currently the set of all letters and numbers plus "_".

    KEYWORD_OPERATORS (Dict[str, Operator]): Operators spelled as words, keyed by their lowercase spelling.

    BOOLEAN_LITERALS (Dict[str, bool]): The boolean literals, keyed by their lowercase spelling.

"""

from collections import deque
from decimal import Decimal, InvalidOperation
from io import StringIO
from typing import Dict, IO, Iterator, Optional, Set, Union
import itertools

from .errors import ParseError
from .tokens import ArgumentSeparator, Boolean, FunctionToken, FUNCTIONS_BY_NAME, Integer, LeftParenthesis, \
    Operator, OPERATORS_BY_SYMBOL, OperatorToken, POSTFIX_OPERATORS_BY_SYMBOL, PREFIX_OPERATORS_BY_SYMBOL, Real, \
    RightParenthesis, Token


IDENTIFIER_BYTES: Set[str] = {
    chr(i) for i in range(ord('A'), ord('Z') + 1)
} | {
    chr(i) for i in range(ord('a'), ord('z') + 1)
} | {
    chr(i) for i in range(ord('0'), ord('9') + 1)
} | {
    '_'
}

DIGITS: Set[str] = {chr(i) for i in range(ord('0'), ord('9') + 1)}

WHITESPACE: Set[str] = {' ', '\t', '\r', '\n'}

KEYWORD_OPERATORS: Dict[str, Operator] = {
    symbol: op
    for symbol, op in itertools.chain(OPERATORS_BY_SYMBOL.items(), PREFIX_OPERATORS_BY_SYMBOL.items())
    if symbol.isalpha()
}

BOOLEAN_LITERALS: Dict[str, bool] = {
    'true': True,
    'false': False
}

RADIX_PREFIXES: Dict[str, int] = {
    '0x': 16,
    '0o': 8,
    '0b': 2
}


class Tokenizer:
    """The expression tokenizer."""
    def __init__(self, stream: Union[str, IO], variables=None):
        """Initializes a tokenizer, but does not commence any tokenization.

        Args:
            stream: The input stream from which to tokenize.
            variables: The table from which identifiers are resolved to :class:`~expreval.tokens.Variable` tokens,
                usually a :class:`expreval.session.VariableTable`. If omitted, a fresh table is created, so the
                same name always yields the same variable within one tokenizer.

        """
        if isinstance(stream, str):
            stream = StringIO(stream)
        if variables is None:
            from .session import VariableTable
            variables = VariableTable()
        self._stream: IO = stream
        self._buffer: deque = deque()
        self._next_token: Optional[Token] = None
        self.prev_token: Optional[Token] = None
        """The previous token yielded by this tokenizer."""
        self.variables = variables
        """The table used to resolve identifiers."""
        self._offset: int = 0

    def _peek_byte(self, n=1) -> str:
        bytes_needed = n - len(self._buffer)
        if bytes_needed > 0:
            b = self._stream.read(bytes_needed)
            self._buffer.extend(b)
        return ''.join(itertools.islice(self._buffer, n))

    def _peek_at(self, index: int) -> str:
        """Returns the character :obj:`index` positions ahead, or the empty string at the end of input."""
        return self._peek_byte(index + 1)[index:index + 1]

    def _pop_byte(self, n=1) -> str:
        self._peek_byte(n)
        ret = ''.join(self._buffer.popleft() for _ in range(min(n, len(self._buffer))))
        self._offset += len(ret)
        return ret

    def _pop_while(self, accepted: Set[str]) -> str:
        ret = ''
        while self._peek_at(0) and self._peek_at(0) in accepted:
            ret += self._pop_byte()
        return ret

    def _unary_context(self) -> bool:
        """Whether a ``+`` or ``-`` at this position is a prefix operator rather than a binary one."""
        prev = self.prev_token
        if prev is None or prev.is_left_parenthesis() or prev.is_argument_separator():
            return True
        return prev.is_operator() and not prev.is_postfix()

    def _scan_number(self) -> Token:
        start = self._offset
        prefix = self._peek_byte(2).lower()
        if prefix in RADIX_PREFIXES:
            text = self._pop_byte(2) + self._pop_while(IDENTIFIER_BYTES)
            try:
                return Integer(int(text[2:], RADIX_PREFIXES[prefix]), start)
            except ValueError:
                raise ParseError(f"Malformed integer literal {text!r}", start)
        text = self._pop_while(DIGITS)
        is_real = False
        if self._peek_at(0) == '.':
            is_real = True
            text += self._pop_byte()
            text += self._pop_while(DIGITS)
        if self._peek_at(0) in ('e', 'E') and (
                self._peek_at(1) in DIGITS or (self._peek_at(1) in ('+', '-') and self._peek_at(2) in DIGITS)
        ):
            is_real = True
            text += self._pop_byte()
            if self._peek_at(0) in ('+', '-'):
                text += self._pop_byte()
            text += self._pop_while(DIGITS)
        trailing = self._pop_while(IDENTIFIER_BYTES | {'.'})
        if trailing or text == '.':
            raise ParseError(f"Malformed numeric literal {text + trailing!r}", start)
        if is_real:
            try:
                return Real(Decimal(text), start)
            except InvalidOperation:
                raise ParseError(f"Malformed numeric literal {text!r}", start)
        return Integer(int(Decimal(text)), start)

    def _scan_word(self) -> Token:
        start = self._offset
        word = self._pop_while(IDENTIFIER_BYTES)
        keyword = word.lower()
        if keyword in BOOLEAN_LITERALS:
            return Boolean(BOOLEAN_LITERALS[keyword], start)
        elif keyword in KEYWORD_OPERATORS:
            return OperatorToken(KEYWORD_OPERATORS[keyword], start)
        elif keyword in FUNCTIONS_BY_NAME:
            return FunctionToken(FUNCTIONS_BY_NAME[keyword], start)
        return self.variables[word]

    def _scan_symbol(self) -> Token:
        start = self._offset
        c = self._peek_byte(2)
        if len(c) == 2 and c in OPERATORS_BY_SYMBOL:
            self._pop_byte(2)
            return OperatorToken(OPERATORS_BY_SYMBOL[c], start)
        c = c[:1]
        if c == '(':
            ret = LeftParenthesis(start)
        elif c == ')':
            ret = RightParenthesis(start)
        elif c == ',':
            ret = ArgumentSeparator(start)
        elif c in PREFIX_OPERATORS_BY_SYMBOL and self._unary_context():
            ret = OperatorToken(PREFIX_OPERATORS_BY_SYMBOL[c], start)
        elif c in OPERATORS_BY_SYMBOL:
            ret = OperatorToken(OPERATORS_BY_SYMBOL[c], start)
        elif c in POSTFIX_OPERATORS_BY_SYMBOL:
            ret = OperatorToken(POSTFIX_OPERATORS_BY_SYMBOL[c], start)
        else:
            raise ParseError(f"Unexpected character {c!r}", start)
        self._pop_byte()
        return ret

    def peek(self) -> Optional[Token]:
        """Returns the next token that would be returned from a call to :meth:`Tokenizer.next`.

        This function actually computes and caches the next token if it has not already been cached.

        Raises:
            ParseError: If the upcoming text is not a valid token.

        Returns:
            Optional[Token]: The next token that would be returned from a call to :meth:`Tokenizer.next`,
            or :const:`None` if there are no more tokens.

        """
        if self._next_token is not None:
            return self._next_token
        # ignore leading whitespace
        self._pop_while(WHITESPACE)
        c = self._peek_at(0)
        if not c:
            return None
        elif c in DIGITS or (c == '.' and self._peek_at(1) in DIGITS):
            self._next_token = self._scan_number()
        elif c in IDENTIFIER_BYTES:
            self._next_token = self._scan_word()
        else:
            self._next_token = self._scan_symbol()
        return self._next_token

    def has_next(self) -> bool:
        """Returns whether another token is available.

        This is equivalent to::

            return self.peek() is not None

        """
        return self.peek() is not None

    def next(self) -> Optional[Token]:
        """Returns the next token in the stream.

        Returns:
            Optional[Token]: The next token, or :const:`None` if there are no more tokens.

        """
        ret = self.peek()
        self.prev_token = ret
        self._next_token = None
        return ret

    def __iter__(self) -> Iterator[Token]:
        """Iterates over all of the tokens in the stream."""
        while True:
            ret = self.next()
            if ret is None:
                break
            yield ret


def tokenize(stream_or_str: Union[IO, str], variables=None) -> Iterator[Token]:
    """Convenience function for tokenizing a string.

    This is equivalent to::

        yield from Tokenizer(stream_or_str, variables)

    """
    yield from Tokenizer(stream_or_str, variables)
