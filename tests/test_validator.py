from symbolic_cas.expression_tree.core.node import (
    ExpressionNode, integer_node, number_node, fraction_node, variable_node, operator_node
)
from symbolic_cas.expression_tree.core.tokens import Token
from symbolic_cas.expression_tree.parsing import parse_string
from symbolic_cas.expression_tree.utils.validator import ExpressionValidator
from symbolic_cas.simplification.simplifier import Simplifier


def test_parsed_and_simplified_trees_are_valid():
    for text in ["x + sin(y)", "log(2, x)/3", "-(a + b)^2", "max(1, 2, x)"]:
        tree = parse_string(text)
        assert ExpressionValidator.is_valid_expression(tree)
        assert ExpressionValidator.is_valid_expression(Simplifier().simplify(tree))


def test_leaf_with_children():
    node = ExpressionNode(Token.variable('x'), [integer_node(1)])
    problems = ExpressionValidator.find_problems(node)
    assert problems == ["leaf 'x' has 1 children"]


def test_non_finite_literal():
    assert not ExpressionValidator.is_valid_expression(number_node(float('inf')))


def test_fraction_shape():
    assert ExpressionValidator.is_valid_expression(fraction_node(1, 2))
    assert not ExpressionValidator.is_valid_expression(fraction_node(variable_node('x'), integer_node(2)))


def test_function_arity_mismatch():
    node = ExpressionNode(Token.function('sin', 2), [variable_node('x')])
    assert not ExpressionValidator.is_valid_expression(node)


def test_operator_operand_counts():
    x = variable_node('x')
    assert not ExpressionValidator.is_valid_expression(operator_node('^', x, x, x))
    assert not ExpressionValidator.is_valid_expression(operator_node('-', x, x, x))
    assert not ExpressionValidator.is_valid_expression(operator_node('+'))
    assert ExpressionValidator.is_valid_expression(operator_node('-', x))


def test_problems_are_collected_from_every_node():
    bad = ExpressionNode(Token.function('sin', 2), [variable_node('x')])
    tree = operator_node('+', bad, operator_node('^', integer_node(2)))
    assert len(ExpressionValidator.find_problems(tree)) == 2
