"""Rule-based symbolic differentiation.

The rules build raw derivative trees; simplification is applied once at
the public boundary. Functions outside the rule table are renamed with a
prime marker (``f(x) -> f'(x)``) to flag an unknown derivative.
"""

import time
from typing import Callable, Dict, List

from .errors import InvalidArgumentError, ResourceExceededError
from .expression_tree.core.node import (
  ExpressionNode, integer_node, fraction_node, function_node, operator_node, undefined_node
)
from .expression_tree.core.tokens import Token
from .expression_tree.utils.tree_utils import check_limits
from .logging_system import log_debug, log_info, log_operation
from .simplification.simplifier import Simplifier


def _mul(*factors: ExpressionNode) -> ExpressionNode:
  return operator_node('*', *factors)


def _div(numerator: ExpressionNode, denominator: ExpressionNode) -> ExpressionNode:
  return operator_node('/', numerator, denominator)


def _pow(base: ExpressionNode, exponent: ExpressionNode) -> ExpressionNode:
  return operator_node('^', base, exponent)


def _neg(node: ExpressionNode) -> ExpressionNode:
  return _mul(integer_node(-1), node)


class Differentiator:
  """Differentiates expression trees with respect to one variable.

  Args:
    simplifier: Simplifier used for the final pass of every public call.
  """

  def __init__(self, simplifier: Simplifier = None):
    self.simplifier = simplifier or Simplifier()
    # name -> rule(argument list, x) returning a raw derivative
    self.function_rules: Dict[str, Callable[[List[ExpressionNode], ExpressionNode], ExpressionNode]] = {
      'ln': self._d_ln,
      'log': self._d_log,
      'exp': self._d_exp,
      'sqrt': self._d_sqrt,
      'nroot': self._d_nroot,
      'nthroot': self._d_nroot,
      'abs': self._d_abs,
      'sin': self._d_sin,
      'cos': self._d_cos,
      'tan': self._d_tan,
      'sec': self._d_sec,
      'csc': self._d_csc,
      'cot': self._d_cot,
    }
    for names, rule in ((('arcsin', 'asin'), self._d_arcsin),
                        (('arccos', 'acos'), self._d_arccos),
                        (('arctan', 'atan'), self._d_arctan),
                        (('arccot', 'acot'), self._d_arccot),
                        (('arcsec', 'asec'), self._d_arcsec),
                        (('arccsc', 'acsc'), self._d_arccsc)):
      for name in names:
        self.function_rules[name] = rule

  def differentiate(self, expr: ExpressionNode, x: ExpressionNode,
                    apply_simplify: bool = True) -> ExpressionNode:
    """d(expr)/dx; the input tree is left untouched"""
    if not x.is_symbol():
      raise InvalidArgumentError(f"Cannot differentiate with respect to '{x.to_string()}'")
    limits = self.simplifier.config.limits
    check_limits(expr, limits, 'expression')

    started = time.time()
    try:
      raw = self._derive(expr, x)
    except RecursionError as exc:
      raise ResourceExceededError('recursion depth', limits.max_depth) from exc
    check_limits(raw, limits, 'derivative')
    if not apply_simplify:
      return raw
    result = self.simplifier.automatic_simplify(raw)
    log_operation('differentiate', expr.size(), result.size(), started)
    return result

  def n_differentiate(self, expr: ExpressionNode, x: ExpressionNode, n: int) -> ExpressionNode:
    """n-th derivative, simplified once at the end"""
    if n < 1:
      raise InvalidArgumentError(f"Derivative order must be at least 1, got {n}")
    current = expr
    for order in range(1, n + 1):
      current = self.differentiate(current, x, apply_simplify=False)
      if current.contains_undefined():
        log_debug(f"n_differentiate: undefined at order {order}")
        return undefined_node()
      log_debug(f"n_differentiate: order {order} has {current.size()} nodes")
    return self.simplifier.automatic_simplify(current)

  # Rule dispatch

  def _derive(self, u: ExpressionNode, x: ExpressionNode) -> ExpressionNode:
    if u.is_undefined():
      return undefined_node()
    if u == x:
      return integer_node(1)
    if u.free_of(x):
      return integer_node(0)

    if u.is_fraction():
      return self._quotient(u.children[0], u.children[1], x)
    if u.is_function():
      return self._function(u, x)

    symbol = u.kind()
    if symbol == '^':
      return self._power(u.children[0], u.children[1], x)
    if symbol in ('+', '-'):
      if symbol == '-' and len(u.children) == 1:
        return _neg(self._derive(u.children[0], x))
      return operator_node(symbol, *[self._derive(c, x) for c in u.children])
    if symbol == '*':
      return self._product(u.children, x)
    if symbol == '/':
      numerator = u.children[0]
      denominator = u.children[1] if len(u.children) == 2 else _mul(*[c.copy() for c in u.children[1:]])
      return self._quotient(numerator, denominator, x)
    raise InvalidArgumentError(f"Cannot differentiate token {u.token}")

  def _power(self, base: ExpressionNode, exponent: ExpressionNode, x: ExpressionNode) -> ExpressionNode:
    if exponent.free_of(x):
      # a * f^(a-1) * f'
      return _mul(exponent.copy(),
                  _pow(base.copy(), operator_node('-', exponent.copy(), integer_node(1))),
                  self._derive(base, x))
    if base.free_of(x):
      # ln(b) * b^f * f'
      return _mul(function_node('ln', base.copy()),
                  _pow(base.copy(), exponent.copy()),
                  self._derive(exponent, x))
    # (ln(g)*f' + (g'*f)/g) * g^f
    return _mul(
      operator_node('+',
                    _mul(function_node('ln', base.copy()), self._derive(exponent, x)),
                    _div(_mul(self._derive(base, x), exponent.copy()), base.copy())),
      _pow(base.copy(), exponent.copy()))

  def _product(self, factors: List[ExpressionNode], x: ExpressionNode) -> ExpressionNode:
    if not factors:
      return integer_node(0)
    if len(factors) == 1:
      return self._derive(factors[0], x)
    if len(factors) > 2:
      # regroup f1*f2*...*fn as f1*(f2*...*fn)
      return self._product([factors[0], _mul(*[f.copy() for f in factors[1:]])], x)
    f, g = factors
    return operator_node('+',
                         _mul(self._derive(f, x), g.copy()),
                         _mul(f.copy(), self._derive(g, x)))

  def _quotient(self, f: ExpressionNode, g: ExpressionNode, x: ExpressionNode) -> ExpressionNode:
    # (f'*g - f*g') / g^2
    return _div(
      operator_node('-', _mul(self._derive(f, x), g.copy()), _mul(f.copy(), self._derive(g, x))),
      _pow(g.copy(), integer_node(2)))

  def _function(self, u: ExpressionNode, x: ExpressionNode) -> ExpressionNode:
    rule = self.function_rules.get(u.kind())
    if rule is None:
      log_info(f"no derivative rule for {u.kind()}(), marking it {u.kind()}'")
      marked = Token.function(u.kind() + "'", len(u.children))
      return ExpressionNode(marked, [c.copy() for c in u.children])
    return rule(u.children, x)

  # Function table, each rule receives the call's arguments

  def _chain(self, outer: ExpressionNode, inner: ExpressionNode, x: ExpressionNode) -> ExpressionNode:
    return _mul(outer, self._derive(inner, x))

  def _d_ln(self, args, x):
    return _div(self._derive(args[0], x), args[0].copy())

  def _d_log(self, args, x):
    if len(args) == 1:
      base, value = integer_node(10), args[0]
    else:
      base, value = args
    rewritten = _div(function_node('ln', value.copy()), function_node('ln', base.copy()))
    return self._derive(rewritten, x)

  def _d_exp(self, args, x):
    return self._chain(function_node('exp', args[0].copy()), args[0], x)

  def _d_sqrt(self, args, x):
    return self._derive(_pow(args[0].copy(), fraction_node(1, 2)), x)

  def _d_nroot(self, args, x):
    value, degree = args
    return self._derive(_pow(value.copy(), _pow(degree.copy(), integer_node(-1))), x)

  def _d_abs(self, args, x):
    return self._chain(function_node('sign', args[0].copy()), args[0], x)

  def _d_sin(self, args, x):
    return self._chain(function_node('cos', args[0].copy()), args[0], x)

  def _d_cos(self, args, x):
    return self._chain(_neg(function_node('sin', args[0].copy())), args[0], x)

  def _d_tan(self, args, x):
    return _div(self._derive(args[0], x), _pow(function_node('cos', args[0].copy()), integer_node(2)))

  def _d_sec(self, args, x):
    return self._derive(_div(integer_node(1), function_node('cos', args[0].copy())), x)

  def _d_csc(self, args, x):
    return self._derive(_div(integer_node(1), function_node('sin', args[0].copy())), x)

  def _d_cot(self, args, x):
    return self._derive(_div(function_node('cos', args[0].copy()), function_node('sin', args[0].copy())), x)

  def _d_arcsin(self, args, x):
    root = _pow(operator_node('-', integer_node(1), _pow(args[0].copy(), integer_node(2))), fraction_node(1, 2))
    return _div(self._derive(args[0], x), root)

  def _d_arccos(self, args, x):
    return _neg(self._d_arcsin(args, x))

  def _d_arctan(self, args, x):
    return _div(self._derive(args[0], x), operator_node('+', integer_node(1), _pow(args[0].copy(), integer_node(2))))

  def _d_arccot(self, args, x):
    return _neg(self._d_arctan(args, x))

  def _d_arcsec(self, args, x):
    root = _pow(operator_node('-', _pow(args[0].copy(), integer_node(2)), integer_node(1)), fraction_node(1, 2))
    return _div(self._derive(args[0], x), _mul(args[0].copy(), root))

  def _d_arccsc(self, args, x):
    return _neg(self._d_arcsec(args, x))
