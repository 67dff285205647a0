"""Expression Tree Module

Tokens, tree nodes, parsing and tree utilities.
"""

from .expression import Expression
from .core.node import (
    ExpressionNode,
    integer_node,
    number_node,
    fraction_node,
    variable_node,
    function_node,
    operator_node,
    undefined_node
)
from .core.tokens import Token, TokenKind
from .parsing import tokenize, parse, parse_string
from .utils import SymPyBridge, ExpressionValidator

__all__ = [
    "Expression",
    "ExpressionNode", "integer_node", "number_node", "fraction_node", "variable_node",
    "function_node", "operator_node", "undefined_node",
    "Token", "TokenKind",
    "tokenize", "parse", "parse_string",
    "SymPyBridge", "ExpressionValidator"
]
