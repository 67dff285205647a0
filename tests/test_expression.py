import pytest
import sympy as sp

from symbolic_cas import Expression, SimplifierConfig
from symbolic_cas.errors import ExpressionSyntaxError, UnknownSymbolError


def test_simplify():
    expr = Expression.from_string("2x + 3x")
    assert expr.simplify().to_string() == "5*x"


def test_transformations_return_new_expressions():
    expr = Expression.from_string("2x + 3x")
    simplified = expr.simplify()
    assert simplified is not expr
    assert expr.to_string() == "2*x + 3*x"
    assert expr != simplified


def test_expand():
    expr = Expression.from_string("(x + 1)^2")
    assert expr.expand() == Expression.from_string("x^2 + 2x + 1").simplify()


def test_differentiate():
    expr = Expression.from_string("x^3 + y")
    assert expr.differentiate('x') == Expression.from_string("3*x^2").simplify()
    assert expr.differentiate('x', order=2) == Expression.from_string("6x").simplify()
    assert expr.differentiate('y').to_string() == "1"


def test_evaluate():
    expr = Expression.from_string("x^2 + f(x)")
    assert expr.evaluate({'x': 3}, {'f': lambda args: 2 * args[0]}) == pytest.approx(15.0)
    with pytest.raises(UnknownSymbolError):
        expr.evaluate({'x': 3})


def test_variables_and_missing_symbols():
    expr = Expression.from_string("x + y*z")
    assert expr.variables() == {'x', 'y', 'z'}
    assert expr.missing_symbols({'x': 1.0}) == {'y', 'z'}
    assert expr.missing_symbols({'x': 1.0, 'y': 2.0, 'z': 3.0}) == set()


def test_display():
    assert Expression.from_string("1/x").simplify().display() == "1/x"
    assert Expression.from_string("2/x").simplify().display() == "2/x"
    assert Expression.from_string("x^(1/2)").simplify().display() == "nroot(x, 2)"


def test_dump():
    assert Expression.from_string("x + 2y").dump() == "+\n  x\n  *\n    2\n    y"


def test_config_is_carried_through():
    config = SimplifierConfig(evaluate_functions=True)
    expr = Expression.from_string("sin(0) + x", config)
    assert expr.simplify().config is config
    assert expr.simplify().to_string() == "x"
    assert Expression.from_string("sin(0) + x").simplify().to_string() != "x"


def test_to_sympy():
    assert Expression.from_string("2x + 3x").simplify().to_sympy() == 5 * sp.Symbol('x')


def test_equality_and_hash():
    a = Expression.from_string("x + y").simplify()
    b = Expression.from_string("y + x").simplify()
    assert a == b
    assert hash(a) == hash(b)
    assert len({a, b}) == 1
    assert repr(a) == "Expression('x + y')"


def test_copy_and_size():
    expr = Expression.from_string("x*y + 1")
    assert expr.copy() == expr
    assert expr.size() == 5


def test_syntax_error():
    with pytest.raises(ExpressionSyntaxError):
        Expression.from_string("2 +")
