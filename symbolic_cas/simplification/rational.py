"""Exact rational arithmetic over Integer and Fraction nodes.

All arithmetic is done on python ints (through ``fractions.Fraction``), never
floats. Results that are undefined, such as a zero denominator, come back as
``Undefined`` nodes rather than errors.
"""

import math
from fractions import Fraction
from typing import Dict, Optional, Tuple

from ..errors import InvalidArgumentError, ResourceExceededError
from ..expression_tree.core.node import (
  ExpressionNode, integer_node, fraction_node, undefined_node
)
from ..expression_tree.core.tokens import TokenKind
from ..logging_system import log_warning

# Largest integer we are willing to factor by trial division
MAX_FACTORABLE = 10 ** 10


def rational_value(node: ExpressionNode) -> Optional[Fraction]:
  """Value of an Integer or Fraction-of-integers node, None if undefined"""
  if node.is_integer():
    return Fraction(node.value)
  if node.is_rational():
    den = node.children[1].value
    if den == 0:
      return None
    return Fraction(node.children[0].value, den)
  raise InvalidArgumentError(f"'{node.to_string()}' is not a rational number")


def make_rational(value: Optional[Fraction]) -> ExpressionNode:
  if value is None:
    return undefined_node()
  if value.denominator == 1:
    return integer_node(value.numerator)
  return fraction_node(value.numerator, value.denominator)


def simplify_rational_number(node: ExpressionNode) -> ExpressionNode:
  """Reduce an Integer or Fraction node to lowest terms.

  The sign ends up on the numerator, a denominator of 1 collapses to an
  Integer and a zero denominator gives Undefined. Fractions with decimal
  children are returned unchanged.
  """
  if node.is_integer():
    return node.copy()
  if node.is_fraction() and len(node.children) == 2:
    num, den = node.children
    if not (num.is_integer() and den.is_integer()):
      return node.copy()
    n, d = num.value, den.value
    if d == 0:
      return undefined_node()
    if n == 0:
      return integer_node(0)
    g = math.gcd(n, d)
    n, d = n // g, d // g
    if d < 0:
      n, d = -n, -d
    return integer_node(n) if d == 1 else fraction_node(n, d)
  raise InvalidArgumentError(
    f"simplify_rational_number expects an Integer or Fraction, got '{node.kind()}'")


def _rne_value(node: ExpressionNode, max_exponent: int) -> Optional[Fraction]:
  kind = node.token.kind
  if kind == TokenKind.INTEGER:
    return Fraction(node.value)
  if kind == TokenKind.NUMBER:
    # raw parse trees carry integer literals as Number tokens
    if float(node.value).is_integer():
      return Fraction(int(node.value))
    raise InvalidArgumentError(
      f"decimal literal {node.token.text} cannot take part in exact rational arithmetic")
  if kind == TokenKind.UNDEFINED:
    return None
  if kind == TokenKind.FRACTION:
    num, den = (_rne_value(c, max_exponent) for c in node.children)
    if num is None or den is None or den == 0:
      return None
    return num / den
  if kind != TokenKind.OPERATOR:
    raise InvalidArgumentError(f"'{node.kind()}' is not part of a rational number expression")

  values = [_rne_value(c, max_exponent) for c in node.children]
  if any(v is None for v in values):
    return None
  symbol = node.token.text

  if symbol == '+':
    return sum(values, Fraction(0))
  if symbol == '*':
    result = Fraction(1)
    for v in values:
      result *= v
    return result
  if symbol == '-':
    if len(values) == 1:
      return -values[0]
    result = values[0]
    for v in values[1:]:
      result -= v
    return result
  if symbol == '/':
    result = values[0]
    for v in values[1:]:
      if v == 0:
        return None
      result /= v
    return result
  if len(values) != 2:
    raise InvalidArgumentError(f"'^' expects 2 operands, got {len(values)}")
  return rational_power(values[0], values[1], max_exponent)


def rational_power(base: Fraction, exponent: Fraction, max_exponent: int = 1000) -> Optional[Fraction]:
  if exponent.denominator != 1:
    raise InvalidArgumentError(f"exponent {exponent} is not an integer")
  n = exponent.numerator
  if abs(n) > max_exponent:
    raise ResourceExceededError('integer exponent', max_exponent, abs(n))
  if base == 0:
    return Fraction(0) if n > 0 else None
  if n < 0:
    base, n = 1 / base, -n
  return base ** n


def simplify_rne(node: ExpressionNode, max_exponent: int = 1000) -> ExpressionNode:
  """Evaluate a tree of + - * / ^ over integers and fractions exactly.

  Raises:
    InvalidArgumentError: if a non-integral decimal literal, variable or function occurs
      in the tree, or an exponent is not an integer.
  """
  return make_rational(_rne_value(node, max_exponent))


def is_rne(node: ExpressionNode) -> bool:
  for current in node.walk():
    if current.token.kind not in (TokenKind.OPERATOR, TokenKind.INTEGER, TokenKind.FRACTION):
      return False
  return True


def rationalize_decimal(value: float, max_denominator: int = 10 ** 6,
                        tolerance: float = 1e-6) -> Fraction:
  """Nice fraction close to ``value``.

  Walks the continued fraction convergents and returns the first one within
  ``tolerance`` relative error (3.14159265 -> 355/113, 0.2 -> 1/5). Past
  ``max_denominator`` it falls back to the best bounded approximation.
  """
  if not math.isfinite(value):
    raise InvalidArgumentError(f"cannot rationalize non-finite value {value}")
  exact = Fraction(value)
  if exact == 0:
    return exact

  h_prev, h = 0, 1
  k_prev, k = 1, 0
  x = exact
  while True:
    a = math.floor(x)
    h_prev, h = h, a * h + h_prev
    k_prev, k = k, a * k + k_prev
    if k > max_denominator:
      break
    approximation = Fraction(h, k)
    if abs(approximation - exact) <= tolerance * abs(exact):
      return approximation
    remainder = x - a
    if remainder == 0:
      return approximation
    x = 1 / remainder

  approximation = exact.limit_denominator(max_denominator)
  log_warning(f"decimal {value!r} rationalized to {approximation} outside tolerance {tolerance}")
  return approximation


def factor_integer(n: int) -> Optional[Dict[int, int]]:
  """Prime factorization of a positive integer by trial division"""
  if n < 1 or n > MAX_FACTORABLE:
    return None
  factors: Dict[int, int] = {}
  divisor = 2
  while divisor * divisor <= n:
    while n % divisor == 0:
      factors[divisor] = factors.get(divisor, 0) + 1
      n //= divisor
    divisor += 1 if divisor == 2 else 2
  if n > 1:
    factors[n] = factors.get(n, 0) + 1
  return factors


def extract_root(n: int, exponent: Fraction) -> Optional[Tuple[Fraction, int]]:
  """Split ``n ** exponent`` into ``coefficient * residual ** (1/q)``.

  ``exponent`` is p/q in lowest terms. The residual keeps every prime with a
  power below q, so it has no perfect q-th power factor. Returns None when
  ``n`` is too large to factor.
  """
  factors = factor_integer(n)
  if factors is None:
    return None
  p, q = exponent.numerator, exponent.denominator
  coefficient = Fraction(1)
  residual = 1
  for prime, power in factors.items():
    whole, rest = divmod(power * p, q)
    coefficient *= Fraction(prime) ** whole
    residual *= prime ** rest
  return coefficient, residual
