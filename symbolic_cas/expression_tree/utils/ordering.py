"""Canonical ordering of simplified operands.

``precedes(u, v)`` is the ordering relation used to sort the operands of
sums and products, so the simplifier produces a deterministic layout:
numbers first, then symbols and functions, with powers, products and sums
compared operand by operand from the right.
"""

import functools
from typing import List

from ..core.node import ExpressionNode, integer_node
from ..core.tokens import Token, TokenKind

# Fallback ranking for node kinds the rules below do not relate
_KIND_RANK = {
  TokenKind.INTEGER: 0,
  TokenKind.NUMBER: 0,
  TokenKind.FRACTION: 0,
  TokenKind.VARIABLE: 1,
  TokenKind.FUNCTION: 2,
  TokenKind.OPERATOR: 3,
  TokenKind.UNDEFINED: 4,
}


def _numeric_value(node: ExpressionNode) -> float:
  if node.is_fraction():
    den = node.children[1].value
    return node.children[0].value / den if den else float('inf')
  return float(node.value)


def _compare_operand_lists(u: List[ExpressionNode], v: List[ExpressionNode]) -> bool:
  m, n = len(u), len(v)
  for j in range(1, min(m, n) + 1):
    if u[m - j] != v[n - j]:
      return precedes(u[m - j], v[n - j])
  return m < n


def precedes(u: ExpressionNode, v: ExpressionNode) -> bool:
  """Strict ordering: True when ``u`` sorts before ``v``"""
  if u.is_numeric() and v.is_numeric():
    return _numeric_value(u) < _numeric_value(v)
  if u.is_symbol() and v.is_symbol():
    return u.kind() < v.kind()

  if (u.is_sum() and v.is_sum()) or (u.is_product() and v.is_product()):
    return _compare_operand_lists(u.children, v.children)

  if u.is_power() and v.is_power():
    if u.children[0] != v.children[0]:
      return precedes(u.children[0], v.children[0])
    return precedes(u.children[1], v.children[1])

  if u.is_function() and v.is_function():
    if u.kind() != v.kind():
      return u.kind() < v.kind()
    return _compare_operand_lists(list(reversed(u.children)), list(reversed(v.children)))

  if u.is_numeric():
    return True
  if v.is_numeric():
    return False

  if u.is_product() and not v.is_undefined():
    return _compare_operand_lists(u.children, [v])
  if v.is_product() and not u.is_undefined():
    return not _compare_operand_lists(v.children, [u]) and u != v

  if u.is_power() and (v.is_symbol() or v.is_sum() or v.is_function()):
    return precedes(u, ExpressionNode(Token.operator('^'), [v, integer_node(1)]))
  if v.is_power() and (u.is_symbol() or u.is_sum() or u.is_function()):
    return not precedes(v, ExpressionNode(Token.operator('^'), [u, integer_node(1)]))

  if u.is_sum() and (v.is_symbol() or v.is_function()):
    return _compare_operand_lists(u.children, [v])
  if v.is_sum() and (u.is_symbol() or u.is_function()):
    return not _compare_operand_lists(v.children, [u])

  if u.is_function() and v.is_symbol():
    return u.kind() < v.kind()
  if u.is_symbol() and v.is_function():
    return u.kind() <= v.kind()

  rank_u = _KIND_RANK[u.token.kind]
  rank_v = _KIND_RANK[v.token.kind]
  if rank_u != rank_v:
    return rank_u < rank_v
  if u.kind() != v.kind():
    return u.kind() < v.kind()
  return _compare_operand_lists(u.children, v.children)


def compare(u: ExpressionNode, v: ExpressionNode) -> int:
  if precedes(u, v):
    return -1
  if precedes(v, u):
    return 1
  return 0


def sort_operands(operands: List[ExpressionNode]) -> List[ExpressionNode]:
  return sorted(operands, key=functools.cmp_to_key(compare))
