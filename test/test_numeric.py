import math
from decimal import Decimal, localcontext
from unittest import TestCase

from expreval import numeric
from expreval.errors import DomainError, OperandTypeError
from expreval.tokens import Boolean, Integer, Real, TokenKind


class TestNumeric(TestCase):
    def assertClose(self, expected: float, actual: Decimal, places: int = 12):
        self.assertIsInstance(actual, Decimal)
        self.assertAlmostEqual(expected, float(actual), places=places)

    def test_promote(self):
        kind, a, b = numeric.promote('+', Integer(1), Real('2.5'))
        self.assertEqual(TokenKind.REAL, kind)
        self.assertEqual((Decimal(1), Decimal('2.5')), (a, b))
        self.assertEqual((TokenKind.INTEGER, 1, 2), numeric.promote('+', Integer(1), Integer(2)))
        with self.assertRaises(OperandTypeError):
            numeric.promote('+', Boolean(True), Integer(1))
        with self.assertRaises(OperandTypeError):
            numeric.promote('+', Boolean(True), Boolean(False))
        self.assertEqual(
            (TokenKind.BOOLEAN, True, False),
            numeric.promote('==', Boolean(True), Boolean(False), accepted=frozenset({TokenKind.BOOLEAN}))
        )

    def test_truncated_divmod(self):
        self.assertEqual((3, 1), numeric.truncated_divmod(7, 2))
        self.assertEqual((-3, -1), numeric.truncated_divmod(-7, 2))
        self.assertEqual((-3, 1), numeric.truncated_divmod(7, -2))
        self.assertEqual((3, -1), numeric.truncated_divmod(-7, -2))

    def test_real_context(self):
        with numeric.real_context(10):
            self.assertEqual(Decimal('0.3333333333'), Decimal(1) / Decimal(3))
        with self.assertRaises(ValueError):
            with numeric.real_context(0):
                pass

    def test_decimal_errors(self):
        with self.assertRaises(DomainError):
            with numeric.decimal_errors('/'):
                Decimal(1) / Decimal(0)
        with self.assertRaises(DomainError):
            with numeric.decimal_errors('sqrt'):
                Decimal(-1).sqrt()

    def test_make_operand_rounds(self):
        with numeric.real_context(3):
            self.assertEqual(Real('3.14'), numeric.make_operand(TokenKind.REAL, Decimal('3.14159')))
        self.assertEqual(Integer(3), numeric.make_operand(TokenKind.INTEGER, 3))

    def test_pi(self):
        with numeric.real_context(50):
            value = numeric.pi()
        self.assertTrue(str(value).startswith('3.14159265358979323846264338327950288419716939937'))
        self.assertClose(math.pi, value)

    def test_trigonometry(self):
        with numeric.real_context(30):
            self.assertClose(0.5, numeric.sin(numeric.pi() / 6))
            self.assertClose(math.sin(100), numeric.sin(Decimal(100)), places=10)
            self.assertClose(math.cos(-3), numeric.cos(Decimal(-3)))
            self.assertClose(1.0, numeric.tan(numeric.pi() / 4))
            self.assertClose(math.tan(2.5), numeric.tan(Decimal('2.5')))

    def test_inverse_trigonometry(self):
        with numeric.real_context(30):
            self.assertClose(math.pi / 4, numeric.atan(Decimal(1)))
            self.assertClose(math.atan(-5), numeric.atan(Decimal(-5)))
            self.assertClose(math.atan(0.05), numeric.atan(Decimal('0.05')))
            self.assertClose(math.pi / 2, numeric.asin(Decimal(1)))
            self.assertClose(math.asin(-0.3), numeric.asin(Decimal('-0.3')))
            self.assertClose(math.acos(0.3), numeric.acos(Decimal('0.3')))
            self.assertClose(0.0, numeric.acos(Decimal(1)))
            with self.assertRaises(DomainError):
                numeric.asin(Decimal('1.5'))
            with self.assertRaises(DomainError):
                numeric.acos(Decimal(-2))

    def test_atan2(self):
        with numeric.real_context(30):
            for y, x in ((1, 1), (1, -1), (-1, -1), (-1, 1), (0, -1), (2, 0), (-2, 0), (0, 3)):
                self.assertClose(math.atan2(y, x), numeric.atan2(Decimal(y), Decimal(x)))
            self.assertEqual(0, numeric.atan2(Decimal(0), Decimal(0)))

    def test_logarithms(self):
        with numeric.real_context(30):
            self.assertClose(3.0, numeric.log2(Decimal(8)))
            self.assertClose(math.log(10), numeric.ln(Decimal(10)))
            self.assertEqual(Decimal(2), numeric.log10(Decimal(100)))
            self.assertClose(math.e, numeric.exp(Decimal(1)))
            for func in (numeric.ln, numeric.log10, numeric.log2):
                with self.assertRaises(DomainError):
                    func(Decimal(0))
            with self.assertRaises(DomainError):
                numeric.sqrt(Decimal('-0.1'))

    def test_precision_is_honored(self):
        with localcontext() as ctx:
            ctx.prec = 20
            self.assertEqual(20, len(numeric.pi().as_tuple().digits))
            self.assertEqual(20, len(numeric.sin(Decimal(1)).as_tuple().digits))

    def test_remainder(self):
        with numeric.real_context(10):
            self.assertEqual(Decimal(1), numeric.remainder(Decimal('1e60'), Decimal(7)))
            self.assertEqual(Decimal('-1.5'), numeric.remainder(Decimal('-7.5'), Decimal(2)))
            self.assertEqual(Decimal('0.5'), numeric.remainder(Decimal('1' + '0' * 40 + '.5'), Decimal(1)))
