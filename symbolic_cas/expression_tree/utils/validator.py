import math
from typing import List

from ..core.node import ExpressionNode
from ..core.tokens import TokenKind
from .tree_utils import get_all_nodes

_LEAF_KINDS = (TokenKind.INTEGER, TokenKind.NUMBER, TokenKind.VARIABLE, TokenKind.UNDEFINED)


class ExpressionValidator:
  """Checks the structural invariants of a tree"""

  @staticmethod
  def is_valid_expression(node: ExpressionNode) -> bool:
    return not ExpressionValidator.find_problems(node)

  @staticmethod
  def find_problems(node: ExpressionNode) -> List[str]:
    problems = []
    for current in get_all_nodes(node):
      problem = ExpressionValidator._check_node(current)
      if problem:
        problems.append(problem)
    return problems

  @staticmethod
  def _check_node(node: ExpressionNode) -> str:
    token = node.token
    count = len(node.children)

    if token.kind in _LEAF_KINDS:
      if count:
        return f"leaf '{node.kind()}' has {count} children"
      if token.kind == TokenKind.NUMBER and not math.isfinite(token.value):
        return f"non-finite number literal {token.text}"
      return ''

    if token.kind == TokenKind.FRACTION:
      if count != 2:
        return f"fraction has {count} children instead of 2"
      if not all(c.token.is_numeric for c in node.children):
        return "fraction children must be number literals"
      return ''

    if token.kind == TokenKind.FUNCTION:
      if count != token.arity:
        return f"function '{token.text}' has arity {token.arity} but {count} arguments"
      return ''

    if token.kind == TokenKind.OPERATOR:
      symbol = token.text
      if symbol in '/^' and count != 2:
        return f"operator '{symbol}' must be binary, found {count} operands"
      if symbol == '-' and count not in (1, 2):
        return f"operator '-' takes one or two operands, found {count}"
      if symbol in '+*' and count < 1:
        return f"operator '{symbol}' has no operands"
      return ''

    return f"token {token} cannot appear in a tree"
