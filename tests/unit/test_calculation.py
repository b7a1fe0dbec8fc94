"""Tests for the Calculation value type."""

import pytest

from yomiage.services.calculation import Calculation, InvariantViolation, Operator


class TestCalculation:
    def test_result_left_fold(self):
        calc = Calculation(
            numbers=(100, 30, 20, 5),
            operators=(Operator.SUBTRACT, Operator.ADD, Operator.SUBTRACT),
        )
        assert calc.result == 85

    def test_result_can_be_negative(self):
        calc = Calculation(numbers=(1, 1000), operators=(Operator.SUBTRACT,))
        assert calc.result == -999

    def test_result_does_not_wrap(self):
        big = 10**16 - 1
        calc = Calculation(numbers=(big,) * 4, operators=(Operator.ADD,) * 3)
        assert calc.result == 4 * big

    def test_expression(self):
        calc = Calculation(
            numbers=(12345678, 23456789, 1234567),
            operators=(Operator.ADD, Operator.SUBTRACT),
        )
        assert calc.expression == "12345678 + 23456789 - 1234567"

    def test_operators_accept_symbols(self):
        calc = Calculation(numbers=(1, 2), operators=("-",))
        assert calc.operators == (Operator.SUBTRACT,)

    def test_immutable(self):
        calc = Calculation(numbers=(1, 2), operators=(Operator.ADD,))
        with pytest.raises(AttributeError):
            calc.numbers = (3, 4)

    def test_result_checks_invariant(self):
        calc = Calculation(numbers=(1, 2), operators=())
        with pytest.raises(InvariantViolation):
            calc.result

    def test_dict_round_trip(self):
        calc = Calculation(numbers=(7, 8, 9), operators=(Operator.SUBTRACT, Operator.ADD))
        data = calc.to_dict()
        assert data == {"numbers": [7, 8, 9], "operators": ["-", "+"]}
        assert Calculation.from_dict(data) == calc
