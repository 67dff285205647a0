import math
import time
from fractions import Fraction
from typing import List, Optional, Union

import numpy as np

from ..config import SimplifierConfig
from ..errors import InvalidArgumentError, ResourceExceededError, UnknownSymbolError
from ..evaluator import evaluate
from ..expression_tree.core.node import (
  ExpressionNode, integer_node, number_node, fraction_node, function_node,
  operator_node, undefined_node
)
from ..expression_tree.core.operators import (
  BUILTIN_FUNCTIONS, TRIG_FUNCTIONS, INVERSE_TRIG_FUNCTIONS
)
from ..expression_tree.core.tokens import Token, TokenKind
from ..expression_tree.utils.ordering import sort_operands
from ..expression_tree.utils.tree_utils import check_limits
from ..logging_system import log_debug, log_operation
from .polynomial import PolynomialToolkit
from .rational import (
  extract_root, make_rational, rational_power, rational_value,
  rationalize_decimal, simplify_rational_number, simplify_rne
)
from .trig_table import nice_angle, trig_value

Numeric = Union[Fraction, float]

# Folded function results this close to an integer are snapped to it
SNAP_TOLERANCE = 1e-9


class Simplifier:
  """Automatic simplification, expansion and display formatting.

  Every method that returns a tree returns a fresh one, except
  ``format_tree`` and ``post_format_tree`` which rewrite their argument in
  place (and return it for convenience).
  """

  def __init__(self, config: Optional[SimplifierConfig] = None):
    self.config = config or SimplifierConfig()
    self.polynomials = PolynomialToolkit(self)

  # Public entry points

  def format_tree(self, tree: ExpressionNode) -> ExpressionNode:
    """Normalize a freshly parsed tree in place.

    Division becomes a Fraction (integer operands) or a product with a -1
    power, nested sums and products are flattened and integral literals
    become Integers.
    """
    check_limits(tree, self.config.limits, 'expression')
    self._run_guarded(self._format, tree)
    return tree

  def automatic_simplify(self, tree: ExpressionNode) -> ExpressionNode:
    check_limits(tree, self.config.limits, 'expression')
    started = time.time()
    result = self._run_guarded(self._simplify, tree)
    check_limits(result, self.config.limits, 'simplified expression')
    log_operation('automatic_simplify', tree.size(), result.size(), started)
    return result

  def simplify(self, tree: ExpressionNode) -> ExpressionNode:
    """format_tree on a copy followed by automatic_simplify"""
    return self.automatic_simplify(self.format_tree(tree.copy()))

  def expand(self, tree: ExpressionNode) -> ExpressionNode:
    started = time.time()
    simplified = self.automatic_simplify(tree)
    expanded = self._run_guarded(self._expand, simplified)
    result = self.automatic_simplify(expanded)
    log_operation('expand', tree.size(), result.size(), started)
    return result

  def post_format_tree(self, tree: ExpressionNode) -> ExpressionNode:
    """Rewrite negative and unit-fraction powers for display, in place"""
    check_limits(tree, self.config.limits, 'expression')
    self._run_guarded(self._post_format, tree)
    return tree

  def simplify_rational_number(self, node: ExpressionNode) -> ExpressionNode:
    return simplify_rational_number(node)

  def simplify_rne(self, node: ExpressionNode) -> ExpressionNode:
    return simplify_rne(node, self.config.max_exponent)

  # Polynomial toolkit

  def polynomial_division(self, numerator: ExpressionNode, denominator: ExpressionNode,
                          x: ExpressionNode) -> List[ExpressionNode]:
    return self.polynomials.division(numerator, denominator, x)

  def polynomial_factorization(self, poly: ExpressionNode, x: ExpressionNode) -> ExpressionNode:
    return self.polynomials.factorization(poly, x)

  def polynomial_expansion(self, u: ExpressionNode, v: ExpressionNode,
                           x: ExpressionNode, t: ExpressionNode) -> ExpressionNode:
    return self.polynomials.expansion(u, v, x, t)

  def polynomial_simplify(self, poly: ExpressionNode, x: ExpressionNode) -> ExpressionNode:
    return self.polynomials.simplify(poly, x)

  def _run_guarded(self, func, tree):
    try:
      return func(tree)
    except RecursionError as exc:
      raise ResourceExceededError('recursion depth', self.config.max_depth) from exc

  # Numeric helpers

  def _numeric(self, node: ExpressionNode) -> Optional[Numeric]:
    """Value of a numeric leaf or fraction; None means undefined"""
    if node.is_decimal():
      return node.value
    return rational_value(node)

  def _make_numeric(self, value: Optional[Numeric]) -> ExpressionNode:
    if value is None:
      return undefined_node()
    if isinstance(value, Fraction):
      return make_rational(value)
    value = float(value)
    if not math.isfinite(value):
      return undefined_node()
    if value.is_integer() and abs(value) < 2 ** 53:
      return integer_node(int(value))
    if self.config.decimal_to_rational:
      return make_rational(rationalize_decimal(
        value, self.config.max_denominator, self.config.rational_tolerance))
    return number_node(value)

  def _float_power(self, base: float, exponent: float) -> ExpressionNode:
    with np.errstate(all='ignore'):
      result = float(np.power(np.float64(base), np.float64(exponent)))
    if math.isnan(result):
      return undefined_node()
    if math.isinf(result):
      # too large to fold, keep it symbolic
      return operator_node('^', self._make_numeric(base), self._make_numeric(exponent))
    return self._make_numeric(result)

  # FormatTree

  def _format(self, node: ExpressionNode):
    for child in node.children:
      self._format(child)

    token = node.token
    if token.kind == TokenKind.NUMBER:
      node.replace(self._normalize_decimal(node))
      return
    if token.kind != TokenKind.OPERATOR:
      return

    if token.text == '/' and len(node.children) == 2:
      num, den = node.children
      if num.is_integer() and den.is_integer():
        node.token = Token.fraction()
      else:
        node.token = Token.operator('*')
        node.children = [num, operator_node('^', den, integer_node(-1))]

    if node.token.text in '+*':
      flattened = []
      for child in node.children:
        if child.token == node.token:
          flattened.extend(child.children)
        else:
          flattened.append(child)
      node.children = flattened

  def _normalize_decimal(self, node: ExpressionNode) -> ExpressionNode:
    text = node.token.text
    if text.lstrip('-').isdigit():
      return integer_node(int(text))
    value = node.value
    if value.is_integer() and abs(value) < 2 ** 53:
      return integer_node(int(value))
    if self.config.decimal_to_rational:
      return make_rational(rationalize_decimal(
        value, self.config.max_denominator, self.config.rational_tolerance))
    return node.copy()

  # Automatic simplification

  def _simplify(self, u: ExpressionNode) -> ExpressionNode:
    kind = u.token.kind
    if kind in (TokenKind.INTEGER, TokenKind.VARIABLE, TokenKind.UNDEFINED):
      return u.copy()
    if kind == TokenKind.NUMBER:
      return self._normalize_decimal(u)

    operands = [self._simplify(c) for c in u.children]
    if any(o.is_undefined() for o in operands):
      return undefined_node()

    if kind == TokenKind.FRACTION:
      if all(o.is_integer() for o in operands):
        return simplify_rational_number(ExpressionNode(u.token, operands))
      return self._simplify_product([operands[0], self._simplify_power(operands[1], integer_node(-1))])
    if kind == TokenKind.FUNCTION:
      return self._simplify_function(u.token, operands)
    if kind != TokenKind.OPERATOR:
      raise InvalidArgumentError(f"Cannot simplify token {u.token}")

    symbol = u.token.text
    if symbol == '^':
      if len(operands) != 2:
        raise InvalidArgumentError(f"'^' expects 2 operands, got {len(operands)}")
      return self._simplify_power(operands[0], operands[1])
    if symbol == '*':
      return self._simplify_product(operands)
    if symbol == '+':
      return self._simplify_sum(operands)
    if symbol == '-':
      if len(operands) == 1:
        return self._simplify_product([integer_node(-1), operands[0]])
      negated = [self._simplify_product([integer_node(-1), o]) for o in operands[1:]]
      return self._simplify_sum([operands[0]] + negated)
    # '/'
    inverted = [self._simplify_power(o, integer_node(-1)) for o in operands[1:]]
    return self._simplify_product([operands[0]] + inverted)

  def _simplify_power(self, v: ExpressionNode, w: ExpressionNode) -> ExpressionNode:
    if v.is_undefined() or w.is_undefined():
      return undefined_node()

    if v.is_numeric() and self._numeric(v) == 0:
      if w.is_numeric():
        exponent = self._numeric(w)
        if exponent is None or exponent <= 0:
          return undefined_node()
        return integer_node(0)
      return operator_node('^', v, w)
    if v.is_value(1):
      return integer_node(1)

    if w.is_integer():
      return self._simplify_integer_power(v, w.value)
    if w.is_numeric():
      return self._simplify_numeric_exponent(v, w)
    return operator_node('^', v, w)

  def _simplify_integer_power(self, v: ExpressionNode, n: int) -> ExpressionNode:
    if n == 0:
      return integer_node(1)
    if n == 1:
      return v
    if v.is_rational():
      return make_rational(rational_power(rational_value(v), Fraction(n), self.config.max_exponent))
    if v.is_decimal():
      return self._float_power(v.value, n)
    if v.is_power():
      base, exponent = v.children
      product = self._simplify_product([exponent, integer_node(n)])
      if product.is_integer():
        return self._simplify_integer_power(base, product.value)
      return self._simplify_power(base, product)
    if v.is_product():
      return self._simplify_product([self._simplify_integer_power(f, n) for f in v.children])
    return operator_node('^', v, integer_node(n))

  def _simplify_numeric_exponent(self, v: ExpressionNode, w: ExpressionNode) -> ExpressionNode:
    # (b^e1)^e2 with both exponents non-integer numbers: root chains
    if v.is_power() and v.children[1].is_numeric() and not v.children[1].is_integer():
      return self._simplify_power(v.children[0], self._simplify_product([v.children[1], w]))

    if v.is_decimal() or w.is_decimal():
      if v.is_numeric():
        return self._float_power(float(self._numeric(v)), float(self._numeric(w)))
      return operator_node('^', v, w)

    exponent = rational_value(w)
    if v.is_integer() and v.value > 0:
      return self._root_of_integer(v.value, exponent)
    if v.is_fraction() and v.is_rational() and v.children[0].value > 0:
      return self._simplify_product([
        self._root_of_integer(v.children[0].value, exponent),
        self._root_of_integer(v.children[1].value, -exponent),
      ])
    return operator_node('^', v, w)

  def _root_of_integer(self, n: int, exponent: Fraction) -> ExpressionNode:
    """Exact root extraction, e.g. 8^(1/2) -> 2*2^(1/2)"""
    if exponent.denominator == 1:
      return make_rational(rational_power(Fraction(n), exponent, self.config.max_exponent))
    split = extract_root(n, exponent)
    if split is None:
      return operator_node('^', integer_node(n), make_rational(exponent))
    coefficient, residual = split
    if residual == 1:
      return make_rational(coefficient)
    root = operator_node('^', integer_node(residual), fraction_node(1, exponent.denominator))
    if coefficient == 1:
      return root
    return operator_node('*', make_rational(coefficient), root)

  def _simplify_product(self, operands: List[ExpressionNode]) -> ExpressionNode:
    factors: List[ExpressionNode] = []
    for operand in operands:
      if operand.is_undefined():
        return undefined_node()
      if operand.is_product():
        factors.extend(operand.children)
      else:
        factors.append(operand)

    coefficient: Numeric = Fraction(1)
    groups: List[list] = []   # [base, [exponents]]
    for factor in factors:
      if factor.is_numeric():
        value = self._numeric(factor)
        if value is None:
          return undefined_node()
        coefficient = coefficient * value
        continue
      base, exponent = factor.base(), factor.exponent()
      for group in groups:
        if group[0] == base:
          group[1].append(exponent)
          break
      else:
        groups.append([base, [exponent]])

    if coefficient == 0:
      return integer_node(0)

    rest: List[ExpressionNode] = []
    needs_second_pass = False
    for base, exponents in groups:
      if len(exponents) == 1:
        exponent = exponents[0]
        rest.append(base if exponent.is_value(1) else operator_node('^', base, exponent))
        continue
      merged = self._simplify_power(base, self._simplify_sum(exponents))
      if merged.is_undefined():
        return undefined_node()
      if merged.is_numeric():
        value = self._numeric(merged)
        if value is None:
          return undefined_node()
        coefficient = coefficient * value
      elif merged.is_product():
        rest.extend(merged.children)
        needs_second_pass = True
      else:
        rest.append(merged)

    if needs_second_pass:
      return self._simplify_product([self._make_numeric(coefficient)] + rest)
    if coefficient == 0:
      return integer_node(0)

    coefficient_node = self._make_numeric(coefficient)
    if coefficient_node.is_undefined():
      return coefficient_node
    rest = sort_operands(rest)
    if not rest:
      return coefficient_node
    if coefficient_node.is_value(1):
      return rest[0] if len(rest) == 1 else operator_node('*', *rest)
    return operator_node('*', coefficient_node, *rest)

  def _simplify_sum(self, operands: List[ExpressionNode]) -> ExpressionNode:
    terms: List[ExpressionNode] = []
    for operand in operands:
      if operand.is_undefined():
        return undefined_node()
      if operand.is_sum():
        terms.extend(operand.children)
      else:
        terms.append(operand)

    constant: Numeric = Fraction(0)
    groups: List[list] = []   # [term, coefficient]
    for term in terms:
      if term.is_numeric():
        value = self._numeric(term)
        if value is None:
          return undefined_node()
        constant = constant + value
        continue
      coefficient_node, rest = term.split_coefficient()
      coefficient = self._numeric(coefficient_node)
      for group in groups:
        if group[0] == rest:
          group[1] = group[1] + coefficient
          break
      else:
        groups.append([rest, coefficient])

    result: List[ExpressionNode] = []
    for rest, coefficient in groups:
      if coefficient == 0:
        continue
      if coefficient == 1:
        result.append(rest)
      else:
        result.append(self._simplify_product([self._make_numeric(coefficient), rest]))

    result = sort_operands(result)
    constant_node = self._make_numeric(constant)
    if constant_node.is_undefined():
      return constant_node
    if not constant_node.is_value(0):
      result.insert(0, constant_node)
    if not result:
      return integer_node(0)
    if len(result) == 1:
      return result[0]
    return operator_node('+', *result)

  # Functions

  def _simplify_function(self, token: Token, args: List[ExpressionNode]) -> ExpressionNode:
    node = ExpressionNode(token, args)
    if not self.config.evaluate_functions or not all(a.is_constant() for a in args):
      return node
    folded = self._fold_function(token.text, args)
    if folded is None:
      return node
    log_debug(f"folded {node.to_string()} -> {folded.to_string()}")
    return folded

  def _fold_function(self, name: str, args: List[ExpressionNode]) -> Optional[ExpressionNode]:
    builtin = BUILTIN_FUNCTIONS.get(name)
    if builtin is None:
      return None
    if len(args) < builtin.min_args or (builtin.max_args is not None and len(args) > builtin.max_args):
      return None

    if all(a.is_rational() for a in args):
      exact = self._fold_exact(name, [rational_value(a) for a in args])
      if exact is not None:
        return exact

    try:
      values = [evaluate(a) for a in args]
    except (UnknownSymbolError, InvalidArgumentError):
      return None

    if name in TRIG_FUNCTIONS:
      angle = nice_angle(values[0], self.config.use_radians)
      if angle is not None:
        return self._simplify(trig_value(name, angle))
      if not self.config.use_radians:
        values = [math.radians(values[0])]

    with np.errstate(all='ignore'):
      result = float(builtin.apply([np.float64(v) for v in values]))
    if name in INVERSE_TRIG_FUNCTIONS and not self.config.use_radians:
      result = math.degrees(result)
    if math.isfinite(result) and abs(result - round(result)) < SNAP_TOLERANCE * max(1.0, abs(result)):
      result = float(round(result))
    return self._make_numeric(result)

  def _fold_exact(self, name: str, values: List[Fraction]) -> Optional[ExpressionNode]:
    """Exact folding for rational arguments, None if not handled"""
    first = values[0]
    if name == 'abs':
      return make_rational(abs(first))
    if name == 'sign':
      return integer_node((first > 0) - (first < 0))
    if name == 'floor':
      return integer_node(math.floor(first))
    if name == 'ceil':
      return integer_node(math.ceil(first))
    if name == 'round':
      return integer_node(round(first))
    if name == 'min':
      return make_rational(min(values))
    if name == 'max':
      return make_rational(max(values))
    if name == 'mod':
      if values[1] == 0:
        return undefined_node()
      return make_rational(first % values[1])
    if name in ('gcd', 'lcm'):
      if any(v.denominator != 1 for v in values):
        return undefined_node()
      a, b = values[0].numerator, values[1].numerator
      g = math.gcd(a, b)
      if name == 'gcd':
        return integer_node(g)
      return integer_node(abs(a * b) // g if g else 0)
    if name == 'sqrt':
      if first < 0:
        return undefined_node()
      return self._simplify_power(make_rational(first), fraction_node(1, 2))
    if name == 'nthroot':
      degree = values[1]
      if degree.denominator != 1 or degree.numerator < 1:
        return None
      n = degree.numerator
      if first < 0:
        if n % 2 == 0:
          return undefined_node()
        return self._simplify_product([
          integer_node(-1), self._simplify_power(make_rational(-first), make_rational(Fraction(1, n)))])
      return self._simplify_power(make_rational(first), make_rational(Fraction(1, n)))
    if name == 'exp' and first == 0:
      return integer_node(1)
    if name in ('ln', 'log'):
      argument = values[-1]
      if argument <= 0:
        return undefined_node()
      if name == 'log' and len(values) == 2 and (first <= 0 or first == 1):
        return undefined_node()
      if argument == 1:
        return integer_node(0)
    return None

  # Expansion

  def _expand(self, u: ExpressionNode) -> ExpressionNode:
    if u.is_sum():
      return self._simplify_sum([self._expand(t) for t in u.children])
    if u.is_product():
      accumulated = self._expand(u.children[0])
      for factor in u.children[1:]:
        accumulated = self._expand_product(accumulated, self._expand(factor))
      return accumulated
    if u.is_power():
      base, exponent = u.children
      if exponent.is_integer() and exponent.value >= 2:
        return self._expand_power(self._expand(base), exponent.value)
    return u

  def _expand_product(self, r: ExpressionNode, s: ExpressionNode) -> ExpressionNode:
    if r.is_sum():
      return self._simplify_sum([self._expand_product(t, s) for t in r.children])
    if s.is_sum():
      return self._expand_product(s, r)
    product = self._simplify_product([r, s])
    if product.is_power() and product.children[0].is_sum():
      return self._expand(product)
    return product

  def _expand_power(self, u: ExpressionNode, n: int) -> ExpressionNode:
    if n > self.config.max_exponent:
      raise ResourceExceededError('expansion exponent', self.config.max_exponent, n)
    if not u.is_sum():
      powered = self._simplify_power(u, integer_node(n))
      if powered.is_product() and any(f.is_sum() or f.is_power() for f in powered.children):
        return self._expand(powered)
      return powered

    term_count = math.comb(n + len(u.children) - 1, len(u.children) - 1)
    if term_count > self.config.max_nodes:
      raise ResourceExceededError('expansion term count', self.config.max_nodes, term_count)

    first = u.children[0]
    rest = u.children[1] if len(u.children) == 2 else operator_node('+', *u.children[1:])
    terms = []
    for k in range(n + 1):
      left = self._simplify_product([
        integer_node(math.comb(n, k)), self._simplify_power(first, integer_node(n - k))])
      terms.append(self._expand_product(left, self._expand_power(rest, k)))
    return self._simplify_sum(terms)

  # Post-formatting

  def _post_format(self, node: ExpressionNode):
    for child in node.children:
      self._post_format(child)

    if node.is_power() and len(node.children) == 2:
      rewritten = self._display_power(node.children[0], node.children[1])
      if rewritten is not None:
        node.replace(rewritten)
    elif node.is_product():
      numerators, denominators = [], []
      for factor in node.children:
        if factor.is_operator('/') and factor.children[0].is_value(1):
          denominators.append(factor.children[1])
        else:
          numerators.append(factor)
      if denominators:
        node.replace(operator_node('/', _product_of(numerators), _product_of(denominators)))

  def _display_power(self, base: ExpressionNode, exponent: ExpressionNode) -> Optional[ExpressionNode]:
    negated = _negated_exponent(exponent)
    if negated is not None:
      return operator_node('/', integer_node(1), _power_for_display(base, negated))
    if _unit_fraction_degree(exponent):
      return _power_for_display(base, exponent)
    return None


def _product_of(factors: List[ExpressionNode]) -> ExpressionNode:
  if not factors:
    return integer_node(1)
  if len(factors) == 1:
    return factors[0]
  return operator_node('*', *factors)


def _unit_fraction_degree(exponent: ExpressionNode) -> int:
  """n for an exponent 1/n with n > 1, else 0"""
  if exponent.is_rational() and exponent.is_fraction():
    num, den = exponent.children[0].value, exponent.children[1].value
    if num == 1 and den > 1:
      return den
  return 0


def _power_for_display(base: ExpressionNode, exponent: ExpressionNode) -> ExpressionNode:
  if exponent.is_value(1):
    return base
  degree = _unit_fraction_degree(exponent)
  if degree:
    return function_node('nroot', base, integer_node(degree))
  return operator_node('^', base, exponent)


def _negated_exponent(exponent: ExpressionNode) -> Optional[ExpressionNode]:
  """Positive counterpart of a negative exponent, None if not negative"""
  if exponent.is_integer():
    return integer_node(-exponent.value) if exponent.value < 0 else None
  if exponent.is_rational():
    num, den = exponent.children
    return fraction_node(-num.value, den.value) if num.value < 0 else None
  if exponent.is_decimal():
    return number_node(-exponent.value) if exponent.value < 0 else None
  if exponent.is_product() and exponent.children[0].is_numeric():
    leading = _negated_exponent(exponent.children[0])
    if leading is None:
      return None
    rest = exponent.children[1:]
    if leading.is_value(1):
      return _product_of(rest)
    return operator_node('*', leading, *rest)
  return None
