import math

import pytest
import sympy as sp

from symbolic_cas.errors import InvalidArgumentError
from symbolic_cas.expression_tree.core.node import (
    integer_node, fraction_node, undefined_node, variable_node
)
from symbolic_cas.expression_tree.parsing import parse_string
from symbolic_cas.expression_tree.utils.sympy_utils import SymPyBridge, to_sympy, from_sympy
from symbolic_cas.simplification.simplifier import Simplifier

x, y = sp.symbols('x y')


def simplified(text):
    return Simplifier().simplify(parse_string(text))


def test_to_sympy_of_simplified_trees():
    assert to_sympy(simplified("2x + 3x")) == 5 * x
    assert to_sympy(simplified("3/4")) == sp.Rational(3, 4)
    assert to_sympy(simplified("x^2*y")) == x ** 2 * y


def test_to_sympy_of_raw_trees():
    assert sp.expand(to_sympy(parse_string("x - y/2"))) == x - y / 2
    assert to_sympy(parse_string("nroot(x, 3)")) == sp.root(x, 3)


def test_integer_literals_stay_exact():
    assert to_sympy(parse_string("x^2 - 2")) == x ** 2 - 2
    assert to_sympy(parse_string("1.5*x")) == sp.Float(1.5) * x
    assert from_sympy(sp.Float(3.0)) == integer_node(3)
    assert SymPyBridge().equivalent(parse_string("x^2 - 2"), simplified("x*x - 2"))


def test_to_sympy_functions():
    assert float(to_sympy(parse_string("log(100, 10)"))) == pytest.approx(0.5)
    assert float(to_sympy(parse_string("log(1000)"))) == pytest.approx(3.0)
    assert to_sympy(parse_string("sin(x)")) == sp.sin(x)
    assert to_sympy(parse_string("f(x)")) == sp.Function('f')(x)


def test_to_sympy_undefined():
    assert to_sympy(undefined_node()) is sp.nan


def test_from_sympy_literals():
    assert from_sympy(sp.Integer(7)) == integer_node(7)
    assert from_sympy(sp.Rational(3, 4)) == fraction_node(3, 4)
    assert from_sympy(sp.Float(0.25)).value == pytest.approx(0.25)
    assert from_sympy(sp.pi).value == pytest.approx(math.pi)
    assert from_sympy(x) == variable_node('x')
    assert from_sympy(sp.zoo).is_undefined()
    assert from_sympy(sp.nan).is_undefined()


def test_from_sympy_euler_number():
    node = from_sympy(sp.E)
    assert node.is_function('exp')
    assert node.children == [integer_node(1)]


def test_from_sympy_structures():
    simplifier = Simplifier()
    assert simplifier.automatic_simplify(from_sympy(x ** 2 + 2 * x)) == simplified("x^2 + 2x")
    assert simplifier.automatic_simplify(from_sympy(sp.sin(x) / y)) == simplified("sin(x)/y")
    assert from_sympy(sp.log(x)).is_function('ln')
    assert from_sympy(sp.Function('g')(x, y)).is_function('g')


def test_from_sympy_rejects_unsupported():
    with pytest.raises(InvalidArgumentError):
        from_sympy(sp.gamma(x))


def test_equivalent():
    bridge = SymPyBridge()
    assert bridge.equivalent(simplified("(x + 1)^2"), simplified("x^2 + 2x + 1"))
    assert not bridge.equivalent(simplified("x"), simplified("x + 1"))


def test_simplify_expression():
    bridge = SymPyBridge()
    assert bridge.simplify_expression(parse_string("sin(x)^2 + cos(x)^2")) == integer_node(1)
    result = bridge.simplify_expression(parse_string("(x^2 - 1)/(x - 1)"))
    assert Simplifier().automatic_simplify(result) == simplified("x + 1")
