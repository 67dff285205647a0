"""Utilities for expression trees."""

from .ordering import precedes, compare, sort_operands
from .sympy_utils import SymPyBridge, to_sympy, from_sympy
from .tree_utils import (
    get_all_nodes, calculate_tree_depth, find_nodes, find_nodes_by_operator,
    get_node_path, node_at_path, enclosing_nodes, replace_at_path, check_limits
)
from .validator import ExpressionValidator

__all__ = [
    'precedes', 'compare', 'sort_operands',
    'SymPyBridge', 'to_sympy', 'from_sympy',
    'get_all_nodes', 'calculate_tree_depth', 'find_nodes', 'find_nodes_by_operator',
    'get_node_path', 'node_at_path', 'enclosing_nodes', 'replace_at_path', 'check_limits',
    'ExpressionValidator'
]
