import math
from fractions import Fraction
from typing import Iterator, List, Optional, Set, Tuple, Union


from .tokens import Token, TokenKind, COMMUTATIVE_OPERATORS, OPERATOR_PRECEDENCE

# Relative tolerance for comparing decimal leaves
NUMBER_REL_TOL = 1e-9
NUMBER_ABS_TOL = 1e-12

# Numeric leaves compare with a tolerance, so they share one hash bucket
_NUMERIC_HASH = hash(('numeric-leaf',))


def _numbers_equal(a: Union[int, float], b: Union[int, float]) -> bool:
  if isinstance(a, int) and isinstance(b, int):
    return a == b
  return math.isclose(float(a), float(b), rel_tol=NUMBER_REL_TOL, abs_tol=NUMBER_ABS_TOL)


class ExpressionNode:
  """A token plus the ordered list of children it owns.

  The tree has no parent pointers. Anything that needs the enclosing
  context walks down from the root (see ``tree_utils.get_node_path``).
  """

  __slots__ = ('token', 'children')

  def __init__(self, token: Token, children: Optional[List['ExpressionNode']] = None):
    self.token = token
    self.children: List['ExpressionNode'] = list(children) if children else []

  # Basic accessors

  def kind(self) -> str:
    return self.token.text

  def num_operands(self) -> int:
    return len(self.children)

  def operand_at(self, index: int) -> 'ExpressionNode':
    if index < 0 or index >= len(self.children):
      raise IndexError(
        f"operand index {index} out of range for '{self.kind()}' with {len(self.children)} operands")
    return self.children[index]

  @property
  def value(self) -> Union[int, float, None]:
    return self.token.value

  # Classification

  def is_integer(self) -> bool:
    return self.token.kind == TokenKind.INTEGER

  def is_decimal(self) -> bool:
    return self.token.kind == TokenKind.NUMBER

  def is_fraction(self) -> bool:
    return self.token.kind == TokenKind.FRACTION

  def is_rational(self) -> bool:
    """Integer, or Fraction of two integers"""
    if self.token.kind == TokenKind.INTEGER:
      return True
    return (self.token.kind == TokenKind.FRACTION and len(self.children) == 2
            and self.children[0].is_integer() and self.children[1].is_integer())

  def is_numeric(self) -> bool:
    return self.is_rational() or self.is_decimal()

  def is_symbol(self) -> bool:
    return self.token.kind == TokenKind.VARIABLE

  def is_function(self, name: Optional[str] = None) -> bool:
    if self.token.kind != TokenKind.FUNCTION:
      return False
    return name is None or self.token.text == name

  def is_operator(self, symbol: Optional[str] = None) -> bool:
    if self.token.kind != TokenKind.OPERATOR:
      return False
    return symbol is None or self.token.text == symbol

  def is_sum(self) -> bool:
    return self.is_operator('+')

  def is_product(self) -> bool:
    return self.is_operator('*')

  def is_power(self) -> bool:
    return self.is_operator('^')

  def is_undefined(self) -> bool:
    return self.token.kind == TokenKind.UNDEFINED

  def is_value(self, number: Union[int, Fraction]) -> bool:
    """True if this is an exact rational leaf equal to ``number``"""
    if self.token.kind == TokenKind.INTEGER:
      return self.token.value == number
    if self.is_rational():
      den = self.children[1].value
      return den != 0 and Fraction(self.children[0].value, den) == number
    return False

  def is_constant(self) -> bool:
    """True iff the subtree contains no variable"""
    return not any(n.token.kind == TokenKind.VARIABLE for n in self.walk())

  def contains_undefined(self) -> bool:
    return any(n.is_undefined() for n in self.walk())

  # Structure queries

  def walk(self) -> Iterator['ExpressionNode']:
    """Pre-order traversal without recursion"""
    stack = [self]
    while stack:
      node = stack.pop()
      yield node
      stack.extend(reversed(node.children))

  def size(self) -> int:
    return sum(1 for _ in self.walk())

  def depth(self) -> int:
    best = 0
    stack = [(self, 1)]
    while stack:
      node, level = stack.pop()
      if level > best:
        best = level
      for child in node.children:
        stack.append((child, level + 1))
    return best

  def variables(self) -> Set[str]:
    return {n.token.text for n in self.walk() if n.token.kind == TokenKind.VARIABLE}

  def free_of(self, target: 'ExpressionNode') -> bool:
    return not any(n == target for n in self.walk())

  # Algebraic views used by the simplifier

  def base(self) -> Optional['ExpressionNode']:
    if self.is_numeric():
      return None
    if self.is_power():
      return self.children[0]
    return self

  def exponent(self) -> Optional['ExpressionNode']:
    if self.is_numeric():
      return None
    if self.is_power():
      return self.children[1]
    return integer_node(1)

  def split_coefficient(self) -> Tuple['ExpressionNode', Optional['ExpressionNode']]:
    """Split into (numeric coefficient, remaining term).

    The term is None for a purely numeric node. Products keep their numeric
    factor in front, so only the first factor is inspected.
    """
    if self.is_numeric():
      return self, None
    if self.is_product() and self.children and self.children[0].is_numeric():
      rest = self.children[1:]
      if len(rest) == 1:
        return self.children[0], rest[0]
      return self.children[0], ExpressionNode(self.token, rest)
    return integer_node(1), self

  def are_like_terms(self, other: 'ExpressionNode') -> bool:
    mine = self.split_coefficient()[1]
    theirs = other.split_coefficient()[1]
    return mine is not None and theirs is not None and mine == theirs

  # Mutation

  def copy(self) -> 'ExpressionNode':
    return ExpressionNode(self.token, [c.copy() for c in self.children])

  def replace(self, other: 'ExpressionNode') -> None:
    """Become a deep copy of ``other`` in place"""
    fresh = other.copy()
    self.token = fresh.token
    self.children = fresh.children

  def substitute(self, target: 'ExpressionNode', replacement: 'ExpressionNode') -> 'ExpressionNode':
    """Replace every structural match of ``target`` by a copy of ``replacement``"""
    if self == target:
      self.replace(replacement)
      return self
    for child in self.children:
      child.substitute(target, replacement)
    return self

  # Equality

  def __eq__(self, other) -> bool:
    if not isinstance(other, ExpressionNode):
      return NotImplemented
    return _nodes_equal(self, other)

  def __ne__(self, other) -> bool:
    result = self.__eq__(other)
    if result is NotImplemented:
      return result
    return not result

  def __hash__(self) -> int:
    token = self.token
    if token.is_numeric:
      return _NUMERIC_HASH
    child_hashes = [hash(c) for c in self.children]
    if token.kind == TokenKind.OPERATOR and token.text in COMMUTATIVE_OPERATORS:
      child_hashes.sort()
    return hash((int(token.kind), token.text, tuple(child_hashes)))

  # Rendering

  def dump(self, indent: int = 0) -> str:
    """Indented debug dump, one node per line, two spaces per level"""
    lines = []
    stack = [(self, indent)]
    while stack:
      node, level = stack.pop()
      lines.append('  ' * level + node.kind())
      for child in reversed(node.children):
        stack.append((child, level + 1))
    return '\n'.join(lines)

  def to_string(self) -> str:
    return _infix(self, 0, False)

  def to_sympy(self):
    from ..utils.sympy_utils import to_sympy
    return to_sympy(self)

  def __str__(self) -> str:
    return self.to_string()

  def __repr__(self) -> str:
    return f"ExpressionNode({self.to_string()!r})"


def _nodes_equal(a: ExpressionNode, b: ExpressionNode) -> bool:
  ta, tb = a.token, b.token
  if ta.is_numeric and tb.is_numeric:
    return _numbers_equal(ta.value, tb.value)
  if ta.kind != tb.kind or ta.text != tb.text:
    return False
  if len(a.children) != len(b.children):
    return False
  if ta.kind == TokenKind.OPERATOR and ta.text in COMMUTATIVE_OPERATORS:
    # first-fit multiset matching
    remaining = list(b.children)
    for child in a.children:
      for j, candidate in enumerate(remaining):
        if _nodes_equal(child, candidate):
          del remaining[j]
          break
      else:
        return False
    return True
  return all(_nodes_equal(x, y) for x, y in zip(a.children, b.children))


def _is_negative_leaf(node: ExpressionNode) -> bool:
  if node.token.is_numeric:
    return node.value < 0
  if node.is_fraction() and node.children and node.children[0].token.is_numeric:
    return node.children[0].value < 0
  return False


def _infix(node: ExpressionNode, parent_prec: int, right_side: bool) -> str:
  token = node.token
  kind = token.kind
  if kind in (TokenKind.INTEGER, TokenKind.NUMBER):
    text = token.text
    return f"({text})" if parent_prec and node.value < 0 else text
  if kind == TokenKind.VARIABLE:
    return token.text
  if kind == TokenKind.UNDEFINED:
    return 'Undefined'
  if kind == TokenKind.FUNCTION:
    args = ', '.join(_infix(c, 0, False) for c in node.children)
    return f"{token.text}({args})"
  if kind == TokenKind.FRACTION:
    text = '/'.join(_infix(c, 3, False) for c in node.children)
    return f"({text})" if parent_prec >= 2 or _is_negative_leaf(node) and parent_prec else text

  symbol = token.text
  prec = OPERATOR_PRECEDENCE[symbol]
  if symbol == '-' and len(node.children) == 1:
    text = '-' + _infix(node.children[0], 3, False)
    return f"({text})" if parent_prec else text

  needs_parens = prec < parent_prec
  if prec == parent_prec:
    # a-(b-c), a/(b/c), (a^b)^c
    if symbol == '^':
      needs_parens = not right_side
    elif right_side and symbol in '-/':
      needs_parens = True
    elif right_side and parent_prec in (1, 2):
      needs_parens = True

  # a leading negative number reads as a sign unless an operator precedes it
  bare_sign = symbol in '+*' and (needs_parens or not right_side)
  parts = []
  for i, child in enumerate(node.children):
    child_text = _infix(child, prec, i > 0)
    if i == 0 and bare_sign and child.token.is_numeric and child.value < 0:
      child_text = child.token.text
    parts.append(child_text)
  joiner = f" {symbol} " if symbol in '+-' else symbol
  text = joiner.join(parts)
  return f"({text})" if needs_parens else text


# Node factories

def integer_node(value: int) -> ExpressionNode:
  return ExpressionNode(Token.integer(value))


def number_node(value: Union[str, float]) -> ExpressionNode:
  return ExpressionNode(Token.number(value))


def fraction_node(numerator: Union[int, ExpressionNode], denominator: Union[int, ExpressionNode]) -> ExpressionNode:
  if not isinstance(numerator, ExpressionNode):
    numerator = integer_node(numerator)
  if not isinstance(denominator, ExpressionNode):
    denominator = integer_node(denominator)
  return ExpressionNode(Token.fraction(), [numerator, denominator])


def variable_node(name: str) -> ExpressionNode:
  return ExpressionNode(Token.variable(name))


def function_node(name: str, *args: ExpressionNode) -> ExpressionNode:
  return ExpressionNode(Token.function(name, len(args)), list(args))


def operator_node(symbol: str, *operands: ExpressionNode) -> ExpressionNode:
  return ExpressionNode(Token.operator(symbol), list(operands))


def undefined_node() -> ExpressionNode:
  return ExpressionNode(Token.undefined())
