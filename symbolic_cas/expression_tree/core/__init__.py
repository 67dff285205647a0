"""Core expression tree components."""

from .tokens import Token, TokenKind, OPERATOR_PRECEDENCE, COMMUTATIVE_OPERATORS
from .node import (
    ExpressionNode, integer_node, number_node, fraction_node, variable_node,
    function_node, operator_node, undefined_node
)
from .operators import (
    OpType, BINARY_OP_MAP, BUILTIN_FUNCTIONS, BuiltinFunction,
    evaluate_binary_op_fast, evaluate_constant
)

__all__ = [
    'Token', 'TokenKind', 'OPERATOR_PRECEDENCE', 'COMMUTATIVE_OPERATORS',
    'ExpressionNode', 'integer_node', 'number_node', 'fraction_node', 'variable_node',
    'function_node', 'operator_node', 'undefined_node',
    'OpType', 'BINARY_OP_MAP', 'BUILTIN_FUNCTIONS', 'BuiltinFunction',
    'evaluate_binary_op_fast', 'evaluate_constant'
]
