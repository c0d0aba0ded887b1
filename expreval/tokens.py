"""The token model shared by the scanner, the parser, and the evaluator.

Tokens form a closed set of kinds, enumerated by :class:`TokenKind`:

* operands (:class:`Integer`, :class:`Real`, :class:`Boolean`, and :class:`Variable`);
* operators (:class:`OperatorToken`, wrapping a member of :class:`Operator`);
* functions (:class:`FunctionToken`, wrapping a member of :class:`Function`); and
* the structural markers :class:`LeftParenthesis`, :class:`RightParenthesis`, and :class:`ArgumentSeparator`.

Every concrete token class fixes its :attr:`Token.kind`, and consumers branch on the capability queries
(:meth:`Token.is_operand`, :meth:`Token.is_operator`, *etc.*) rather than on the class hierarchy. This module holds
data only; the algorithms that consume tokens live in :mod:`expreval.parser` and :mod:`expreval.evaluator`.

Example:
    The infix expression ``1 + 2 * 3`` can be built by hand::

        >>> infix = [Integer(1), OperatorToken('+'), Integer(2), OperatorToken('*'), Integer(3)]

Attributes:
    OPERATORS_BY_SYMBOL (Dict[str, Operator]): A mapping of infix operator symbols and keywords to :class:`Operator`
        objects, used in scanning.

    PREFIX_OPERATORS_BY_SYMBOL (Dict[str, Operator]): The same, for prefix (unary) operators.

    POSTFIX_OPERATORS_BY_SYMBOL (Dict[str, Operator]): The same, for postfix operators.

    FUNCTIONS_BY_NAME (Dict[str, Function]): A mapping of function names to :class:`Function` objects.

"""

from decimal import Decimal
from enum import Enum, IntEnum
from typing import Any, Dict, FrozenSet, List, Optional, Tuple, Union

from .errors import UninitializedVariableError


OPERATORS_BY_SYMBOL: Dict[str, 'Operator'] = {}
PREFIX_OPERATORS_BY_SYMBOL: Dict[str, 'Operator'] = {}
POSTFIX_OPERATORS_BY_SYMBOL: Dict[str, 'Operator'] = {}
FUNCTIONS_BY_NAME: Dict[str, 'Function'] = {}


class TokenKind(Enum):
    """The closed set of token kinds."""
    INTEGER = 'integer'
    REAL = 'real'
    BOOLEAN = 'boolean'
    VARIABLE = 'variable'
    OPERATOR = 'operator'
    FUNCTION = 'function'
    LEFT_PARENTHESIS = 'left parenthesis'
    RIGHT_PARENTHESIS = 'right parenthesis'
    ARGUMENT_SEPARATOR = 'argument separator'


OPERAND_KINDS: FrozenSet[TokenKind] = frozenset({
    TokenKind.INTEGER, TokenKind.REAL, TokenKind.BOOLEAN, TokenKind.VARIABLE
})


class Precedence(IntEnum):
    """Operator precedence levels, from lowest to highest."""
    MIN = 0
    ASSIGNMENT = 1
    LOGOR = 2
    LOGXOR = 3
    LOGAND = 4
    BITOR = 5
    BITXOR = 6
    BITAND = 7
    EQUALITY = 8
    RELATIONAL = 9
    ADDITIVE = 10
    MULTIPLICATIVE = 11
    UNARY = 12
    POWER = 13
    POSTFIX = 14
    MAX = 15


class Associativity(Enum):
    """The tie-break rule for operators of equal precedence."""
    LEFT = 'left'
    RIGHT = 'right'
    NONE = 'none'


class Fixity(Enum):
    """Where an operator sits relative to its operands."""
    PREFIX = 'prefix'
    INFIX = 'infix'
    POSTFIX = 'postfix'


class Operator(Enum):
    """An enumeration of operators."""
    ASSIGNMENT = ('=', Precedence.ASSIGNMENT, Associativity.RIGHT)
    POWER = ('^', Precedence.POWER, Associativity.RIGHT)
    ADDITION = ('+', Precedence.ADDITIVE)
    SUBTRACTION = ('-', Precedence.ADDITIVE)
    MULTIPLICATION = ('*', Precedence.MULTIPLICATIVE)
    DIVISION = ('/', Precedence.MULTIPLICATIVE)
    MODULUS = ('%', Precedence.MULTIPLICATIVE)
    EQUALITY = ('==', Precedence.EQUALITY)
    INEQUALITY = ('!=', Precedence.EQUALITY)
    LESS = ('<', Precedence.RELATIONAL)
    LESS_EQUAL = ('<=', Precedence.RELATIONAL)
    GREATER = ('>', Precedence.RELATIONAL)
    GREATER_EQUAL = ('>=', Precedence.RELATIONAL)
    AND = ('and', Precedence.LOGAND)
    NAND = ('nand', Precedence.LOGAND)
    OR = ('or', Precedence.LOGOR)
    NOR = ('nor', Precedence.LOGOR)
    XOR = ('xor', Precedence.LOGXOR)
    XNOR = ('xnor', Precedence.LOGXOR)
    IDENTITY = ('+', Precedence.UNARY, Associativity.NONE, Fixity.PREFIX)
    NEGATION = ('-', Precedence.UNARY, Associativity.NONE, Fixity.PREFIX)
    NOT = ('not', Precedence.UNARY, Associativity.NONE, Fixity.PREFIX)
    FACTORIAL = ('!', Precedence.POSTFIX, Associativity.NONE, Fixity.POSTFIX)

    def __init__(self,
                 token: str,
                 precedence: Precedence,
                 associativity: Associativity = Associativity.LEFT,
                 fixity: Fixity = Fixity.INFIX):
        self.token: str = token
        """The symbol or keyword associated with this operator. It is used for automatically scanning the operators.

        Tokens must be unique within a fixity. There is no programmatic check to ensure this.
        """
        self.precedence: Precedence = precedence
        """The operator's precedence level."""
        self.associativity: Associativity = associativity
        """How the operator groups with neighbors of equal precedence."""
        self.fixity: Fixity = fixity
        """Whether the operator is written before, between, or after its operands."""
        if fixity == Fixity.INFIX:
            self.arity: int = 2
            """The number of arguments consumed by the operator."""
            OPERATORS_BY_SYMBOL[token] = self
        elif fixity == Fixity.PREFIX:
            self.arity = 1
            PREFIX_OPERATORS_BY_SYMBOL[token] = self
        else:
            self.arity = 1
            POSTFIX_OPERATORS_BY_SYMBOL[token] = self

    def __str__(self):
        return f"{self.__class__.__name__}.{self.name}"


class Function(Enum):
    """An enumeration of the built-in functions."""
    ABS = ('abs', 1)
    SQRT = ('sqrt', 1)
    EXP = ('exp', 1)
    LN = ('ln', 1)
    LB = ('lb', 1)
    LOG = ('log', 1)
    SIN = ('sin', 1)
    COS = ('cos', 1)
    TAN = ('tan', 1)
    ARCSIN = ('arcsin', 1)
    ARCCOS = ('arccos', 1)
    ARCTAN = ('arctan', 1)
    CEIL = ('ceil', 1)
    FLOOR = ('floor', 1)
    RESULT = ('result', 1)
    ARCTAN2 = ('arctan2', 2)
    MAX = ('max', 2)
    MIN = ('min', 2)
    POW = ('pow', 2)

    def __init__(self, token: str, arity: int):
        if arity not in (1, 2, 3):
            raise ValueError(f"Functions must take one, two, or three arguments, not {arity}")
        self.token: str = token
        """The name by which the function is called."""
        self.arity: int = arity
        """The number of arguments consumed by the function."""
        FUNCTIONS_BY_NAME[token] = self

    def __str__(self):
        return f"{self.__class__.__name__}.{self.name}"


class Token:
    """Base class for an expression token.

    Tokens are never copied. The same instance may appear several times in a :obj:`TokenList`; this matters for
    :class:`Variable` tokens, whose value is shared by every occurrence.

    Two tokens are equal if they are of the same kind and render identically.

    """

    kind: TokenKind = None
    """The kind of this token. Fixed by each concrete subclass."""

    def __init__(self, offset: Optional[int] = None):
        """Initializes a token.

        Args:
            offset: The offset of the token within the source text, if it was scanned from text.

        """
        self.offset: Optional[int] = offset
        """Offset of the token in the input, used only for diagnostics."""

    def is_operand(self) -> bool:
        return self.kind in OPERAND_KINDS

    def is_integer(self) -> bool:
        return self.kind == TokenKind.INTEGER

    def is_real(self) -> bool:
        return self.kind == TokenKind.REAL

    def is_boolean(self) -> bool:
        return self.kind == TokenKind.BOOLEAN

    def is_variable(self) -> bool:
        return self.kind == TokenKind.VARIABLE

    def is_operator(self) -> bool:
        return self.kind == TokenKind.OPERATOR

    def is_function(self) -> bool:
        return self.kind == TokenKind.FUNCTION

    def is_left_parenthesis(self) -> bool:
        return self.kind == TokenKind.LEFT_PARENTHESIS

    def is_right_parenthesis(self) -> bool:
        return self.kind == TokenKind.RIGHT_PARENTHESIS

    def is_parenthesis(self) -> bool:
        return self.is_left_parenthesis() or self.is_right_parenthesis()

    def is_argument_separator(self) -> bool:
        return self.kind == TokenKind.ARGUMENT_SEPARATOR

    def number_of_args(self) -> int:
        """The number of operands consumed when this token is evaluated. Zero for everything but operations."""
        return 0

    def _comparison_key(self) -> Tuple[Any, ...]:
        return self.kind, str(self)

    def __eq__(self, other):
        return isinstance(other, Token) and self._comparison_key() == other._comparison_key()

    def __ne__(self, other):
        return not (self == other)

    def __hash__(self):
        return hash(self._comparison_key())

    def __str__(self):
        raise NotImplementedError()

    def __repr__(self):
        return f"{self.__class__.__name__}({str(self)!r})"


TokenList = List[Token]


class Operand(Token):
    """Abstract base class for value-bearing tokens."""
    value: Any = None


class Integer(Operand):
    """An arbitrary-precision integer operand."""

    kind = TokenKind.INTEGER

    def __init__(self, value: int, offset: Optional[int] = None):
        super().__init__(offset)
        self.value: int = int(value)
        """The integer value of this token."""

    def __int__(self):
        return self.value

    def _comparison_key(self) -> Tuple[Any, ...]:
        return self.kind, self.value

    def __str__(self):
        # int.__str__ refuses values past sys.get_int_max_str_digits(); Decimal formatting has no such limit
        return f"{Decimal(self.value):f}"

    def __repr__(self):
        return f"{self.__class__.__name__}({self!s})"


class Real(Operand):
    """An arbitrary-precision decimal operand."""

    kind = TokenKind.REAL

    def __init__(self, value: Union[Decimal, int, str, float], offset: Optional[int] = None):
        super().__init__(offset)
        if isinstance(value, float):
            # go through the shortest repr so 0.1 stays 0.1
            value = repr(value)
        self.value: Decimal = Decimal(value)
        """The decimal value of this token."""

    def __float__(self):
        return float(self.value)

    def __str__(self):
        if not self.value.is_finite():
            return str(self.value)
        text = f"{self.value:f}"
        if '.' in text:
            text = text.rstrip('0')
            if text.endswith('.'):
                text = f"{text}0"
        else:
            text = f"{text}.0"
        return text

    def __repr__(self):
        return f"{self.__class__.__name__}({str(self)!r})"


class Boolean(Operand):
    """A boolean operand."""

    kind = TokenKind.BOOLEAN

    def __init__(self, value: bool, offset: Optional[int] = None):
        super().__init__(offset)
        self.value: bool = bool(value)
        """The truth value of this token."""

    def __bool__(self):
        return self.value

    def __str__(self):
        return 'True' if self.value else 'False'

    def __repr__(self):
        return f"{self.__class__.__name__}({self.value!r})"


class Variable(Operand):
    """A named, mutable cell.

    A variable is created once per name (usually by a :class:`expreval.session.VariableTable`) and then shared by
    every expression that mentions it. Its name never changes; its value changes through assignment.

    """

    kind = TokenKind.VARIABLE

    def __init__(self, name: str, value: Optional[Operand] = None):
        super().__init__()
        self._name: str = name
        self._value: Optional[Operand] = None
        if value is not None:
            self.set(value)

    @property
    def name(self) -> str:
        """The name of this variable."""
        return self._name

    @property
    def value(self) -> Optional[Operand]:
        """The operand currently stored in this variable, or :const:`None` if it is empty."""
        return self._value

    def is_initialized(self) -> bool:
        return self._value is not None

    def get(self) -> Operand:
        """Returns the stored operand.

        Raises:
            UninitializedVariableError: If nothing has been assigned to this variable.

        """
        if self._value is None:
            raise UninitializedVariableError(self._name, self.offset)
        return self._value

    def set(self, value: Operand):
        """Stores an operand in this variable.

        If :obj:`value` is itself a variable, its current value is stored instead, so that variables never alias.

        """
        if value.is_variable():
            value = value.get()
        self._value = value

    def clear(self):
        """Empties this variable."""
        self._value = None

    def __str__(self):
        return self._name

    def __repr__(self):
        return f"{self.__class__.__name__}(name={self._name!r}, value={self._value!r})"


class OperatorToken(Token):
    """A token associated with an :class:`Operator`."""

    kind = TokenKind.OPERATOR

    def __init__(self, op: Union[str, Operator], offset: Optional[int] = None):
        """Initializes an operator token.

        Args:
            op: The operator, or the symbol of an infix operator (see :attr:`OPERATORS_BY_SYMBOL`).
            offset: The offset of the token within the source text.

        """
        if isinstance(op, str):
            op = OPERATORS_BY_SYMBOL[op]
        super().__init__(offset)
        self.op: Operator = op
        """The operator associated with this token."""

    def number_of_args(self) -> int:
        return self.op.arity

    def precedence(self) -> Precedence:
        return self.op.precedence

    def associativity(self) -> Associativity:
        return self.op.associativity

    def is_left_associative(self) -> bool:
        return self.op.associativity == Associativity.LEFT

    def is_prefix(self) -> bool:
        return self.op.fixity == Fixity.PREFIX

    def is_postfix(self) -> bool:
        return self.op.fixity == Fixity.POSTFIX

    def _comparison_key(self) -> Tuple[Any, ...]:
        # unary and binary minus render the same
        return self.kind, self.op

    def __str__(self):
        return self.op.token

    def __repr__(self):
        return f"{self.__class__.__name__}(op={self.op!s})"


class FunctionToken(Token):
    """A token associated with a :class:`Function`."""

    kind = TokenKind.FUNCTION

    def __init__(self, func: Union[str, Function], offset: Optional[int] = None):
        if isinstance(func, str):
            func = FUNCTIONS_BY_NAME[func]
        super().__init__(offset)
        self.func: Function = func
        """The function associated with this token."""

    def number_of_args(self) -> int:
        return self.func.arity

    def __str__(self):
        return self.func.token

    def __repr__(self):
        return f"{self.__class__.__name__}(func={self.func!s})"


class LeftParenthesis(Token):
    """An opening parenthesis token."""

    kind = TokenKind.LEFT_PARENTHESIS

    def __str__(self):
        return '('

    def __repr__(self):
        return f"{self.__class__.__name__}()"


class RightParenthesis(Token):
    """A closing parenthesis token."""

    kind = TokenKind.RIGHT_PARENTHESIS

    def __str__(self):
        return ')'

    def __repr__(self):
        return f"{self.__class__.__name__}()"


class ArgumentSeparator(Token):
    """A comma separating function arguments."""

    kind = TokenKind.ARGUMENT_SEPARATOR

    def __str__(self):
        return ','

    def __repr__(self):
        return f"{self.__class__.__name__}()"
