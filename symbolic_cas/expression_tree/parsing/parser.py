"""Shunting-yard construction of an expression tree from tokens."""

from typing import List, Sequence

from ..core.node import ExpressionNode
from ..core.tokens import Token, TokenKind
from ...errors import ExpressionSyntaxError
from ...logging_system import log_debug
from .tokenizer import tokenize


def _reduce_operator(operator: Token, output: List[ExpressionNode]):
  if len(output) < 2:
    raise ExpressionSyntaxError(f"Operator '{operator.text}' is missing an operand")
  right = output.pop()
  left = output.pop()
  output.append(ExpressionNode(operator, [left, right]))


def _reduce_function(function: Token, output: List[ExpressionNode]):
  if len(output) < function.arity:
    raise ExpressionSyntaxError(
      f"Function '{function.text}' expects {function.arity} arguments")
  args = [output.pop() for _ in range(function.arity)]
  args.reverse()
  output.append(ExpressionNode(function, args))


def _reduce_until_left_paren(operators: List[Token], output: List[ExpressionNode]) -> bool:
  """Reduce operators until '(' is on top. Returns False if none was found."""
  while operators:
    top = operators[-1]
    if top.kind == TokenKind.LEFT_PAREN:
      return True
    operators.pop()
    if top.kind == TokenKind.FUNCTION:
      _reduce_function(top, output)
    else:
      _reduce_operator(top, output)
  return False


def parse(tokens: Sequence[Token]) -> ExpressionNode:
  """Build a single-rooted tree from a token sequence.

  Raises:
    ExpressionSyntaxError: if the tokens do not reduce to exactly one tree.
  """
  output: List[ExpressionNode] = []
  operators: List[Token] = []

  for token in tokens:
    kind = token.kind
    if kind in (TokenKind.INTEGER, TokenKind.NUMBER, TokenKind.VARIABLE, TokenKind.UNDEFINED):
      output.append(ExpressionNode(token))
    elif kind == TokenKind.FUNCTION:
      operators.append(token)
    elif kind == TokenKind.OPERATOR:
      while operators and operators[-1].kind == TokenKind.OPERATOR:
        top = operators[-1]
        if top.precedence > token.precedence or (
            top.precedence == token.precedence and not token.right_associative):
          _reduce_operator(operators.pop(), output)
        else:
          break
      operators.append(token)
    elif kind == TokenKind.ARG_SEPARATOR:
      if not _reduce_until_left_paren(operators, output):
        raise ExpressionSyntaxError("Argument separator outside of parentheses")
    elif kind == TokenKind.LEFT_PAREN:
      operators.append(token)
    elif kind == TokenKind.RIGHT_PAREN:
      if not _reduce_until_left_paren(operators, output):
        raise ExpressionSyntaxError("Unbalanced parentheses: unexpected ')'")
      operators.pop()
      if operators and operators[-1].kind == TokenKind.FUNCTION:
        _reduce_function(operators.pop(), output)
    else:
      raise ExpressionSyntaxError(f"Unexpected token {token}")

  while operators:
    top = operators.pop()
    if top.kind == TokenKind.LEFT_PAREN:
      raise ExpressionSyntaxError("Unbalanced parentheses: missing ')'")
    if top.kind == TokenKind.FUNCTION:
      _reduce_function(top, output)
    else:
      _reduce_operator(top, output)

  if len(output) != 1:
    raise ExpressionSyntaxError(
      f"Expression does not reduce to a single tree ({len(output)} operands left)")
  log_debug(f"parse: {len(tokens)} tokens -> {output[0].size()} nodes")
  return output[0]


def parse_string(text: str) -> ExpressionNode:
  """Tokenize and parse in one step"""
  return parse(tokenize(text).tokens)
