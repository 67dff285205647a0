import math
from fractions import Fraction

import pytest

from symbolic_cas.errors import InvalidArgumentError, ResourceExceededError
from symbolic_cas.expression_tree.core.node import (
    integer_node, number_node, fraction_node, operator_node, variable_node
)
from symbolic_cas.expression_tree.parsing import parse_string
from symbolic_cas.simplification.rational import (
    simplify_rational_number, simplify_rne, is_rne, rationalize_decimal,
    extract_root, factor_integer, rational_power
)
from symbolic_cas.simplification.simplifier import Simplifier


def formatted(text):
    return Simplifier().format_tree(parse_string(text))


@pytest.mark.parametrize("numerator,denominator,expected", [
    (-4, 16, fraction_node(-1, 4)),
    (4, -16, fraction_node(-1, 4)),
    (-16, 4, integer_node(-4)),
    (6, 3, integer_node(2)),
    (0, 5, integer_node(0)),
    (10, 4, fraction_node(5, 2)),
])
def test_simplify_rational_number(numerator, denominator, expected):
    result = simplify_rational_number(fraction_node(numerator, denominator))
    assert result == expected
    assert result.kind() == expected.kind()


def test_simplify_rational_number_keeps_sign_on_numerator():
    result = simplify_rational_number(fraction_node(3, -9))
    assert result.children[0].value == -1
    assert result.children[1].value == 3


def test_zero_denominator_is_undefined():
    assert simplify_rational_number(fraction_node(2, 0)).is_undefined()


def test_simplify_rational_number_rejects_other_nodes():
    with pytest.raises(InvalidArgumentError):
        simplify_rational_number(variable_node('x'))


def test_simplify_rne():
    assert simplify_rne(formatted("(1/2 + 1/3)*3")) == fraction_node(5, 2)
    assert simplify_rne(formatted("2^(-2) - 1/4")) == integer_node(0)
    assert simplify_rne(formatted("(2/3)^3")) == fraction_node(8, 27)


def test_simplify_rne_on_parsed_trees():
    assert simplify_rne(parse_string("(1/2)^2 + 3/4")) == integer_node(1)
    assert simplify_rne(parse_string("-3 + 1/2")) == fraction_node(-5, 2)
    assert simplify_rne(parse_string("2.0*3")) == integer_node(6)
    with pytest.raises(InvalidArgumentError):
        simplify_rne(parse_string("2.5*3"))


def test_simplify_rne_undefined_cases():
    assert simplify_rne(formatted("1/0")).is_undefined()
    assert simplify_rne(formatted("0^(-1)")).is_undefined()
    assert simplify_rne(operator_node('/', integer_node(3), operator_node('-', integer_node(2), integer_node(2)))).is_undefined()


def test_simplify_rne_rejects_decimals_and_symbols():
    with pytest.raises(InvalidArgumentError):
        simplify_rne(operator_node('+', number_node(1.5), integer_node(1)))
    with pytest.raises(InvalidArgumentError):
        simplify_rne(formatted("x + 1"))
    with pytest.raises(InvalidArgumentError):
        simplify_rne(formatted("4^(1/2)"))


def test_is_rne():
    assert is_rne(formatted("1/2 + 3*4"))
    assert not is_rne(formatted("x + 1"))


def test_rational_power_limits():
    assert rational_power(Fraction(2, 3), Fraction(-2)) == Fraction(9, 4)
    assert rational_power(Fraction(0), Fraction(-1)) is None
    with pytest.raises(ResourceExceededError):
        rational_power(Fraction(2), Fraction(5000), max_exponent=1000)


@pytest.mark.parametrize("value,expected", [
    (3.14159265, Fraction(355, 113)),
    (0.2, Fraction(1, 5)),
    (2.5, Fraction(5, 2)),
    (0.333, Fraction(333, 1000)),
    (0.125, Fraction(1, 8)),
    (-0.75, Fraction(-3, 4)),
])
def test_rationalize_decimal(value, expected):
    assert rationalize_decimal(value) == expected


def test_rationalize_decimal_falls_back_to_bounded_denominator():
    assert rationalize_decimal(math.pi, max_denominator=10, tolerance=1e-12) == Fraction(22, 7)


def test_rationalize_decimal_rejects_non_finite():
    with pytest.raises(InvalidArgumentError):
        rationalize_decimal(float('inf'))


def test_factor_integer():
    assert factor_integer(360) == {2: 3, 3: 2, 5: 1}
    assert factor_integer(1) == {}
    assert factor_integer(97) == {97: 1}


def test_extract_root():
    assert extract_root(8, Fraction(1, 2)) == (Fraction(2), 2)
    assert extract_root(72, Fraction(1, 2)) == (Fraction(6), 2)
    assert extract_root(16, Fraction(1, 4)) == (Fraction(2), 1)
    assert extract_root(54, Fraction(1, 3)) == (Fraction(3), 2)
    assert extract_root(7, Fraction(1, 2)) == (Fraction(1), 7)
