from typing import Callable, Dict

import sympy as sp

from ...errors import InvalidArgumentError
from ...logging_system import log_debug
from ..core.node import (
  ExpressionNode, integer_node, number_node, fraction_node, variable_node,
  function_node, operator_node, undefined_node
)
from ..core.tokens import TokenKind

# Functions whose sympy counterpart takes the same argument list
_DIRECT_FUNCTIONS: Dict[str, Callable] = {
  'ln': sp.log,
  'exp': sp.exp,
  'sqrt': sp.sqrt,
  'abs': sp.Abs,
  'sign': sp.sign,
  'floor': sp.floor,
  'ceil': sp.ceiling,
  'sin': sp.sin,
  'cos': sp.cos,
  'tan': sp.tan,
  'sec': sp.sec,
  'csc': sp.csc,
  'cot': sp.cot,
  'asin': sp.asin,
  'acos': sp.acos,
  'atan': sp.atan,
  'acot': sp.acot,
  'asec': sp.asec,
  'acsc': sp.acsc,
  'arcsin': sp.asin,
  'arccos': sp.acos,
  'arctan': sp.atan,
  'arccot': sp.acot,
  'arcsec': sp.asec,
  'arccsc': sp.acsc,
  'min': sp.Min,
  'max': sp.Max,
  'mod': sp.Mod,
  'gcd': sp.gcd,
  'lcm': sp.lcm,
}

_FROM_SYMPY_NAMES = {
  sp.log: 'ln', sp.exp: 'exp', sp.Abs: 'abs', sp.sign: 'sign',
  sp.floor: 'floor', sp.ceiling: 'ceil',
  sp.sin: 'sin', sp.cos: 'cos', sp.tan: 'tan', sp.sec: 'sec', sp.csc: 'csc', sp.cot: 'cot',
  sp.asin: 'asin', sp.acos: 'acos', sp.atan: 'atan', sp.acot: 'acot', sp.asec: 'asec', sp.acsc: 'acsc',
  sp.Min: 'min', sp.Max: 'max', sp.Mod: 'mod',
}


def to_sympy(node: ExpressionNode) -> sp.Expr:
  """Convert an expression tree to a SymPy expression"""
  kind = node.token.kind
  if kind == TokenKind.INTEGER:
    return sp.Integer(node.value)
  if kind == TokenKind.NUMBER:
    if float(node.value).is_integer():
      return sp.Integer(int(node.value))
    return sp.Float(node.value)
  if kind == TokenKind.VARIABLE:
    return sp.Symbol(node.token.text)
  if kind == TokenKind.UNDEFINED:
    return sp.nan
  if kind == TokenKind.FRACTION:
    return sp.Mul(to_sympy(node.children[0]), sp.Pow(to_sympy(node.children[1]), -1))

  args = [to_sympy(c) for c in node.children]
  if kind == TokenKind.FUNCTION:
    return _function_to_sympy(node.token.text, args)

  symbol = node.token.text
  if symbol == '+':
    return sp.Add(*args)
  if symbol == '*':
    return sp.Mul(*args)
  if symbol == '-':
    if len(args) == 1:
      return -args[0]
    return sp.Add(args[0], *[sp.Mul(-1, a) for a in args[1:]])
  if symbol == '/':
    return sp.Mul(args[0], *[sp.Pow(a, -1) for a in args[1:]])
  if symbol == '^':
    result = args[-1]
    for base in reversed(args[:-1]):
      result = sp.Pow(base, result)
    return result
  raise InvalidArgumentError(f"Cannot convert token {node.token} to sympy")


def _function_to_sympy(name: str, args) -> sp.Expr:
  if name == 'log':
    if len(args) == 1:
      return sp.log(args[0], 10)
    # log(base, value)
    return sp.log(args[1], args[0])
  if name in ('nroot', 'nthroot'):
    return sp.root(args[0], args[1])
  func = _DIRECT_FUNCTIONS.get(name)
  if func is None:
    return sp.Function(name)(*args)
  return func(*args)


def from_sympy(expr) -> ExpressionNode:
  """Convert a SymPy expression to a raw (unsimplified) expression tree"""
  expr = sp.sympify(expr)
  if expr is sp.nan or expr in (sp.zoo, sp.oo, -sp.oo):
    return undefined_node()
  if expr.is_Integer:
    return integer_node(int(expr))
  if expr.is_Rational:
    return fraction_node(int(expr.p), int(expr.q))
  if expr.is_Float:
    if expr.is_finite and float(expr).is_integer():
      return integer_node(int(expr))
    return number_node(float(expr))
  if expr is sp.E:
    return function_node('exp', integer_node(1))
  if expr.is_NumberSymbol:
    return number_node(float(expr))
  if expr.is_Symbol:
    return variable_node(expr.name)

  args = [from_sympy(a) for a in expr.args]
  if expr.is_Add:
    return operator_node('+', *args)
  if expr.is_Mul:
    return operator_node('*', *args)
  if expr.is_Pow:
    return operator_node('^', *args)

  name = _FROM_SYMPY_NAMES.get(expr.func)
  if name is not None:
    return function_node(name, *args)
  if isinstance(expr, sp.core.function.AppliedUndef):
    return function_node(expr.func.__name__, *args)
  raise InvalidArgumentError(f"Cannot convert sympy expression '{expr}'")


class SymPyBridge:
  """SymPy cross-checks for expression trees"""

  def __init__(self):
    self.simplification_strategies = [
      'simplify',
      'expand',
      'factor',
      'trigsimp',
    ]

  def equivalent(self, a: ExpressionNode, b: ExpressionNode) -> bool:
    """True if SymPy proves a - b == 0"""
    difference = sp.simplify(to_sympy(a) - to_sympy(b))
    return difference == 0

  def simplify_expression(self, node: ExpressionNode) -> ExpressionNode:
    """Try each SymPy strategy and keep the least complex result"""
    sympy_expr = to_sympy(node)
    best = sympy_expr
    best_complexity = self._calculate_complexity(sympy_expr)
    for strategy in self.simplification_strategies:
      try:
        simplified = getattr(sp, strategy)(sympy_expr)
      except (sp.PolynomialError, TypeError, ValueError) as exc:
        log_debug(f"sympy {strategy} failed on {sympy_expr}: {exc}")
        continue
      complexity = self._calculate_complexity(simplified)
      if complexity < best_complexity:
        best, best_complexity = simplified, complexity
    return from_sympy(best)

  @staticmethod
  def _calculate_complexity(expr: sp.Expr) -> int:
    return len(expr.free_symbols) + len(expr.atoms(sp.Function)) + expr.count_ops()

