import pytest

from symbolic_cas.errors import InvalidArgumentError
from symbolic_cas.expression_tree.core.node import integer_node, variable_node
from symbolic_cas.expression_tree.parsing import parse_string
from symbolic_cas.expression_tree.utils.sympy_utils import SymPyBridge
from symbolic_cas.simplification.simplifier import Simplifier

X = variable_node('x')


def simplified(text):
    return Simplifier().simplify(parse_string(text))


@pytest.fixture
def simplifier():
    return Simplifier()


def test_division(simplifier):
    quotient, remainder = simplifier.polynomial_division(
        simplified("x^3 + 2x^2 + 4"), simplified("x + 1"), X)
    assert quotient == simplified("x^2 + x - 1")
    assert remainder == integer_node(5)


def test_division_exact(simplifier):
    quotient, remainder = simplifier.polynomial_division(
        simplified("x^2 - 1"), simplified("x - 1"), X)
    assert quotient == simplified("x + 1")
    assert remainder == integer_node(0)


def test_division_by_higher_degree(simplifier):
    quotient, remainder = simplifier.polynomial_division(
        simplified("x + 3"), simplified("x^2"), X)
    assert quotient == integer_node(0)
    assert remainder == simplified("x + 3")


def test_division_by_zero_polynomial(simplifier):
    quotient, remainder = simplifier.polynomial_division(simplified("x^2"), integer_node(0), X)
    assert quotient.is_undefined()
    assert remainder.is_undefined()


@pytest.mark.parametrize("text,expected", [
    ("x^2 + 5x + 6", "(x + 2)*(x + 3)"),
    ("2x^2 + 7x + 3", "(2x + 1)*(x + 3)"),
    ("6x^3 + 12x^2", "6*x^2*(x + 2)"),
    ("x^2 + 4x + 4", "(x + 2)^2"),
    ("x^2 + 1", "x^2 + 1"),
])
def test_factorization(simplifier, text, expected):
    assert simplifier.polynomial_factorization(simplified(text), X) == simplified(expected)


def test_factorization_irrational_roots(simplifier):
    result = simplifier.polynomial_factorization(simplified("x^2 - 2"), X)
    assert result.is_product()
    assert SymPyBridge().equivalent(result, parse_string("x^2 - 2"))


def test_expansion(simplifier):
    u = simplified("x^2 + 2x + 3")
    v = simplified("x + 1")
    t = variable_node('t')
    result = simplifier.polynomial_expansion(u, v, X, t)
    assert result == simplified("t^2 + 2")
    assert SymPyBridge().equivalent(result.substitute(t, v), u)


def test_expansion_needs_positive_degree(simplifier):
    with pytest.raises(InvalidArgumentError):
        simplifier.polynomial_expansion(simplified("x^2"), integer_node(3), X, variable_node('t'))


def test_polynomial_simplify_merges_factors(simplifier):
    result = simplifier.polynomial_simplify(simplified("(x^2 + 4x + 4)*(x + 2)"), X)
    assert result == simplified("(x + 2)^3")


@pytest.mark.parametrize("text", ["sin(x) + x", "1/x", "x^(1/2) + 1"])
def test_non_polynomials_are_rejected(simplifier, text):
    tree = simplified(text)
    assert not simplifier.polynomials.is_polynomial(tree, X)
    with pytest.raises(InvalidArgumentError):
        simplifier.polynomial_division(tree, simplified("x + 1"), X)


def test_variable_must_be_a_symbol(simplifier):
    with pytest.raises(InvalidArgumentError):
        simplifier.polynomials.coefficients(simplified("x^2"), integer_node(2))


def test_coefficient_views(simplifier):
    toolkit = simplifier.polynomials
    u = simplified("3x^2 + 2x + 1")
    assert toolkit.degree(u, X) == 2
    assert toolkit.leading_coefficient(u, X) == integer_node(3)
    assert toolkit.coefficient(u, X, 1) == integer_node(2)
    assert toolkit.coefficient(u, X, 5) == integer_node(0)
    assert toolkit.degree(integer_node(0), X) == -1


def test_symbolic_coefficients(simplifier):
    coefficients = simplifier.polynomials.coefficients(simplified("a*x^2 + b*x"), X)
    assert coefficients == [integer_node(0), variable_node('b'), variable_node('a')]


def test_from_coefficients_round_trip(simplifier):
    toolkit = simplifier.polynomials
    u = simplified("x^3 - 4x + 7")
    assert toolkit.from_coefficients(toolkit.coefficients(u, X), X) == u
