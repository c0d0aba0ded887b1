from decimal import Decimal
from unittest import TestCase

from expreval.errors import DomainError, EvaluationError, InsufficientOperandsError, OperandTypeError, \
    TooManyOperandsError, UninitializedVariableError, UnknownTokenError
from expreval.evaluator import evaluate, RPNEvaluator
from expreval.parser import parse
from expreval.session import History
from expreval.tokens import Boolean, FunctionToken, Integer, LeftParenthesis, Operator, OperatorToken, Real, \
    Variable


def op(symbol_or_operator) -> OperatorToken:
    return OperatorToken(symbol_or_operator)


def neg(value) -> list:
    return [value, op(Operator.NEGATION)]


class TestEvaluator(TestCase):
    def assertEvaluatesTo(self, expected, postfix, **kwargs):
        result = evaluate(postfix, **kwargs)
        self.assertEqual(expected, result)
        self.assertIs(type(expected), type(result))

    def test_arithmetic(self):
        self.assertEvaluatesTo(Integer(7), [Integer(1), Integer(2), Integer(3), op('*'), op('+')])
        self.assertEvaluatesTo(Integer(512), [Integer(2), Integer(3), Integer(2), op('^'), op('^')])
        self.assertEvaluatesTo(Integer(2), [Integer(8), Integer(4), op('-'), Integer(2), op('-')])
        self.assertEvaluatesTo(Integer(2 ** 200), [Integer(2), Integer(200), op('^')])

    def test_evaluates_parsed_infix(self):
        infix = [Integer(1), op('+'), Integer(2), op('*'), Integer(3)]
        self.assertEvaluatesTo(Integer(7), parse(infix))

    def test_promotion(self):
        self.assertEvaluatesTo(Real('3.5'), [Integer(1), Real('2.5'), op('+')])
        self.assertEvaluatesTo(Real('5.0'), [Real('2.5'), Integer(2), op('*')])
        self.assertEvaluatesTo(Real('3.5'), [Integer(7), Real('2'), op('/')])

    def test_integer_division(self):
        self.assertEvaluatesTo(Integer(3), [Integer(7), Integer(2), op('/')])
        self.assertEvaluatesTo(Integer(-3), neg(Integer(7)) + [Integer(2), op('/')])
        self.assertEvaluatesTo(Integer(-1), neg(Integer(7)) + [Integer(2), op('%')])
        self.assertEvaluatesTo(Integer(1), [Integer(7)] + neg(Integer(2)) + [op('%')])
        self.assertEvaluatesTo(Real('-1.5'), neg(Real('7.5')) + [Integer(2), op('%')])

    def test_division_by_zero(self):
        with self.assertRaises(DomainError):
            evaluate([Integer(1), Integer(0), op('/')])
        with self.assertRaises(DomainError):
            evaluate([Real('1.5'), Integer(0), op('/')])
        with self.assertRaises(DomainError):
            evaluate([Integer(1), Integer(0), op('%')])
        with self.assertRaises(ArithmeticError):
            evaluate([Real('1.5'), Real('0.0'), op('%')])

    def test_power(self):
        self.assertEvaluatesTo(Real('0.125'), [Integer(2)] + neg(Integer(3)) + [op('^')])
        self.assertEvaluatesTo(Integer(1), [Integer(0), Integer(0), op('^')])
        self.assertEvaluatesTo(Real('0.25'), [Real('0.5'), Integer(2), op('^')])
        self.assertEvaluatesTo(Integer(1024), [Integer(2), Integer(10), FunctionToken('pow')])
        with self.assertRaises(DomainError):
            evaluate([Integer(0)] + neg(Integer(1)) + [op('^')])
        with self.assertRaises(DomainError):
            evaluate(neg(Real('8')) + [Real('0.5'), op('^')])

    def test_overflow(self):
        with self.assertRaises(DomainError):
            evaluate([Real(Decimal('9e999999')), Integer(10), op('*')])

    def test_precision(self):
        self.assertEvaluatesTo(Real('0.33333'), [Real('1'), Integer(3), op('/')], precision=5)
        self.assertEqual(52, len(str(evaluate([Real('1'), Integer(3), op('/')]))))

    def test_comparison(self):
        self.assertEvaluatesTo(Boolean(True), [Integer(1), Real('2.5'), op('<')])
        self.assertEvaluatesTo(Boolean(True), [Integer(2), Real('2.0'), op('==')])
        self.assertEvaluatesTo(Boolean(False), [Integer(2), Integer(2), op('!=')])
        self.assertEvaluatesTo(Boolean(True), [Integer(3), Integer(3), op('>=')])
        self.assertEvaluatesTo(Boolean(False), [Boolean(True), Boolean(False), op('==')])
        with self.assertRaises(OperandTypeError):
            evaluate([Integer(1), Boolean(True), op('==')])
        with self.assertRaises(OperandTypeError):
            evaluate([Boolean(False), Boolean(True), op('<')])

    def test_logic(self):
        t, f = Boolean(True), Boolean(False)
        self.assertEvaluatesTo(f, [t, f, op('and')])
        self.assertEvaluatesTo(t, [t, f, op('nand')])
        self.assertEvaluatesTo(t, [t, f, op('or')])
        self.assertEvaluatesTo(t, [f, f, op('nor')])
        self.assertEvaluatesTo(t, [t, f, op('xor')])
        self.assertEvaluatesTo(f, [t, f, op('xnor')])
        self.assertEvaluatesTo(f, [t, op(Operator.NOT)])
        with self.assertRaises(OperandTypeError):
            evaluate([t, Integer(1), op('and')])
        with self.assertRaises(OperandTypeError):
            evaluate([Integer(0), op(Operator.NOT)])

    def test_unary_operators(self):
        self.assertEvaluatesTo(Real('-2.5'), neg(Real('2.5')))
        self.assertEvaluatesTo(Integer(4), [Integer(4), op(Operator.IDENTITY)])
        with self.assertRaises(OperandTypeError):
            evaluate(neg(Boolean(True)))
        with self.assertRaises(OperandTypeError):
            evaluate([Boolean(True), op(Operator.IDENTITY)])

    def test_factorial(self):
        self.assertEvaluatesTo(Integer(120), [Integer(5), op(Operator.FACTORIAL)])
        self.assertEvaluatesTo(Integer(1), [Integer(0), op(Operator.FACTORIAL)])
        with self.assertRaises(DomainError):
            evaluate(neg(Integer(1)) + [op(Operator.FACTORIAL)])
        with self.assertRaises(OperandTypeError):
            evaluate([Real('5'), op(Operator.FACTORIAL)])

    def test_assignment(self):
        x = Variable('x')
        self.assertEvaluatesTo(Integer(5), [x, Integer(5), op('=')])
        self.assertEqual(Integer(5), x.value)
        self.assertEvaluatesTo(Integer(5), [x])
        self.assertEvaluatesTo(Integer(10), [x, Integer(2), op('*')])

    def test_chained_assignment(self):
        x, y = Variable('x'), Variable('y')
        self.assertEvaluatesTo(Integer(3), [x, y, Integer(3), op('='), op('=')])
        self.assertEqual(Integer(3), x.value)
        self.assertEqual(Integer(3), y.value)

    def test_assignment_copies_values(self):
        x, y = Variable('x', Integer(1)), Variable('y')
        evaluate([y, x, op('=')])
        evaluate([x, Integer(2), op('=')])
        self.assertEqual(Integer(1), y.value)

    def test_assignment_to_non_variable(self):
        with self.assertRaises(OperandTypeError):
            evaluate([Integer(1), Integer(2), op('=')])

    def test_uninitialized_variable(self):
        y = Variable('y')
        with self.assertRaises(UninitializedVariableError):
            evaluate([y, Integer(1), op('+')])
        with self.assertRaises(UninitializedVariableError):
            evaluate([y])
        with self.assertRaises(UninitializedVariableError):
            evaluate([Variable('x'), y, op('=')])

    def test_repeatable(self):
        x = Variable('x', Integer(4))
        postfix = [x, Integer(3), op('^'), Real('0.5'), op('-')]
        self.assertEqual(evaluate(postfix), evaluate(postfix))

    def test_functions(self):
        self.assertEvaluatesTo(Real('3.0'), [Integer(9), FunctionToken('sqrt')])
        self.assertEvaluatesTo(Integer(3), neg(Integer(3)) + [FunctionToken('abs')])
        self.assertEvaluatesTo(Real('2.5'), neg(Real('2.5')) + [FunctionToken('abs')])
        self.assertEvaluatesTo(Real('3.0'), [Real('2.1'), FunctionToken('ceil')])
        self.assertEvaluatesTo(Real('-3.0'), neg(Real('2.1')) + [FunctionToken('floor')])
        self.assertEvaluatesTo(Integer(4), [Integer(4), FunctionToken('floor')])
        self.assertEvaluatesTo(Real('2.5'), [Integer(1), Real('2.5'), FunctionToken('max')])
        self.assertEvaluatesTo(Integer(3), [Integer(3), Integer(2), FunctionToken('max')])
        self.assertEvaluatesTo(Real('1.5'), [Real('1.5'), Integer(2), FunctionToken('min')])
        self.assertEvaluatesTo(Real('0.0'), [Integer(0), FunctionToken('sin')])
        self.assertEvaluatesTo(Real('1.0'), [Integer(0), FunctionToken('cos')])
        self.assertEvaluatesTo(Real('3.0'), [Integer(1000), FunctionToken('log')])
        self.assertEvaluatesTo(Real('0.0'), [Integer(1), FunctionToken('ln')])

    def test_function_domains(self):
        with self.assertRaises(DomainError):
            evaluate(neg(Integer(1)) + [FunctionToken('sqrt')])
        with self.assertRaises(DomainError):
            evaluate([Integer(0), FunctionToken('ln')])
        with self.assertRaises(DomainError):
            evaluate(neg(Real('0.5')) + [FunctionToken('lb')])
        with self.assertRaises(DomainError):
            evaluate([Integer(2), FunctionToken('arcsin')])
        with self.assertRaises(OperandTypeError):
            evaluate([Boolean(True), FunctionToken('sqrt')])
        with self.assertRaises(OperandTypeError):
            evaluate([Boolean(True), Integer(1), FunctionToken('max')])

    def test_result(self):
        history = History()
        history.append(Integer(10))
        history.append(Real('2.5'))
        self.assertEvaluatesTo(Real('2.5'), [Integer(1), FunctionToken('result')], history=history)
        self.assertEvaluatesTo(Integer(20), [Integer(2), FunctionToken('result'), Integer(2), op('*')], history=history)
        with self.assertRaises(DomainError):
            evaluate([Integer(3), FunctionToken('result')], history=history)
        with self.assertRaises(DomainError):
            evaluate([Integer(0), FunctionToken('result')], history=history)
        with self.assertRaises(OperandTypeError):
            evaluate([Real('1'), FunctionToken('result')], history=history)
        with self.assertRaises(EvaluationError):
            evaluate([Integer(1), FunctionToken('result')])

    def test_insufficient_operands(self):
        with self.assertRaises(InsufficientOperandsError):
            evaluate([Integer(1), op('+')])
        with self.assertRaises(InsufficientOperandsError):
            evaluate([FunctionToken('max')])
        with self.assertRaises(InsufficientOperandsError):
            evaluate([])

    def test_too_many_operands(self):
        with self.assertRaises(TooManyOperandsError):
            evaluate([Integer(1), Integer(2)])
        with self.assertRaises(TooManyOperandsError):
            evaluate([Integer(1), Integer(2), Integer(3), op('+')])

    def test_structural_tokens_rejected(self):
        with self.assertRaises(UnknownTokenError):
            evaluate([Integer(1), LeftParenthesis()])

    def test_error_offsets(self):
        with self.assertRaises(OperandTypeError) as cm:
            evaluate([Integer(1), Boolean(True), OperatorToken('+', 2)])
        self.assertEqual(2, cm.exception.offset)
        self.assertTrue(str(cm.exception).endswith('at offset 2'))
        with self.assertRaises(DomainError) as cm:
            evaluate([Integer(1, 0), Integer(0, 4), OperatorToken('/', 2)])
        self.assertEqual(2, cm.exception.offset)

    def test_evaluator_object(self):
        history = History()
        history.append(Integer(6))
        evaluator = RPNEvaluator(history=history, precision=3)
        self.assertEqual(Real('0.333'), evaluator.evaluate([Real('1'), Integer(3), op('/')]))
        self.assertEqual(Integer(7), evaluator.evaluate([Integer(1), FunctionToken('result'), Integer(1), op('+')]))

    def test_large_integers(self):
        result = evaluate([Integer(10), Integer(5000), op('^')])
        self.assertEqual(Integer(10 ** 5000), result)
        self.assertEqual('1' + '0' * 5000, str(result))
        self.assertEvaluatesTo(Integer(10), [result, Integer(10), Integer(4999), op('^'), op('/')])
        with self.assertLogs('expreval.evaluator', level='DEBUG'):
            self.assertEvaluatesTo(Integer(10 ** 5001), [result, Integer(10), op('*')])
        with self.assertRaises(TooManyOperandsError):
            evaluate([result, result])

    def test_real_modulus_large_dividend(self):
        self.assertEvaluatesTo(Real('1.0'), [Real('1e60'), Real('7'), op('%')])
        self.assertEvaluatesTo(Real('-1.0'), neg(Real('1e60')) + [Integer(7), op('%')])
        self.assertEvaluatesTo(Real('1.0'), [Real('1e60'), Integer(7), op('%')], precision=5)
