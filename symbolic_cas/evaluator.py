"""Numeric evaluation of expression trees.

``evaluate`` works on python/numpy scalars and follows IEEE semantics for
invalid domains (division by zero, negative base with fractional exponent)
instead of raising. ``evaluate_vectorized`` evaluates a tree over whole
sample arrays using the numba kernels from ``core.operators``.
"""

from typing import Callable, Dict, List, Mapping, Optional, Sequence

import numpy as np

from .config import ResourceLimits, DEFAULT_LIMITS
from .errors import InvalidArgumentError, ResourceExceededError, UnknownSymbolError
from .expression_tree.core.node import ExpressionNode
from .expression_tree.core.operators import (
  BINARY_OP_MAP, BUILTIN_FUNCTIONS, evaluate_binary_op_fast, evaluate_constant
)
from .expression_tree.core.tokens import TokenKind
from .expression_tree.utils.tree_utils import check_limits

SymbolTable = Mapping[str, float]
CustomFunctionTable = Mapping[str, Callable[[List[float]], float]]


def _to_float(value) -> float:
  try:
    return float(value)
  except OverflowError:
    return float('inf') if value > 0 else float('-inf')


def _check_arity(name: str, count: int):
  builtin = BUILTIN_FUNCTIONS[name]
  if count < builtin.min_args or (builtin.max_args is not None and count > builtin.max_args):
    if builtin.max_args is None:
      expected = f"at least {builtin.min_args}"
    elif builtin.min_args == builtin.max_args:
      expected = str(builtin.min_args)
    else:
      expected = f"{builtin.min_args} to {builtin.max_args}"
    raise InvalidArgumentError(f"{name}() takes {expected} arguments, got {count}")


def _fold(symbol: str, values: Sequence):
  if symbol == '+':
    result = values[0]
    for v in values[1:]:
      result = result + v
    return result
  if symbol == '*':
    result = values[0]
    for v in values[1:]:
      result = result * v
    return result
  if symbol == '-':
    if len(values) == 1:
      return -values[0]
    result = values[0]
    for v in values[1:]:
      result = result - v
    return result
  if symbol == '/':
    result = values[0]
    for v in values[1:]:
      result = np.divide(result, v)
    return result
  # '^' is right associative
  result = values[-1]
  for v in reversed(values[:-1]):
    result = np.power(v, result)
  return result


class _ScalarEvaluator:

  def __init__(self, symbol_table: SymbolTable, custom_function_table: CustomFunctionTable):
    self.symbol_table = symbol_table
    self.custom_function_table = custom_function_table

  def run(self, node: ExpressionNode):
    kind = node.token.kind
    if kind in (TokenKind.INTEGER, TokenKind.NUMBER):
      return np.float64(_to_float(node.value))
    if kind == TokenKind.VARIABLE:
      name = node.token.text
      if name not in self.symbol_table:
        raise UnknownSymbolError(name)
      return np.float64(self.symbol_table[name])
    if kind == TokenKind.UNDEFINED:
      return np.float64(np.nan)
    if kind == TokenKind.FRACTION:
      return np.divide(self.run(node.children[0]), self.run(node.children[1]))
    if kind == TokenKind.OPERATOR:
      return _fold(node.token.text, [self.run(c) for c in node.children])
    if kind == TokenKind.FUNCTION:
      return self._call(node)
    raise InvalidArgumentError(f"Cannot evaluate token {node.token}")

  def _call(self, node: ExpressionNode):
    name = node.token.text
    if name in BUILTIN_FUNCTIONS:
      _check_arity(name, len(node.children))
      args = [self.run(c) for c in node.children]
      return np.float64(BUILTIN_FUNCTIONS[name].apply(args))
    if name in self.custom_function_table:
      args = [float(self.run(c)) for c in node.children]
      return np.float64(self.custom_function_table[name](args))
    raise UnknownSymbolError(name, 'function')


def evaluate(root: ExpressionNode,
             symbol_table: Optional[SymbolTable] = None,
             custom_function_table: Optional[CustomFunctionTable] = None,
             limits: ResourceLimits = DEFAULT_LIMITS) -> float:
  """Evaluate ``root`` to a float.

  Builtin functions take precedence over ``custom_function_table``; custom
  callables receive the list of evaluated arguments.

  Raises:
    UnknownSymbolError: for a variable or function with no binding.
    InvalidArgumentError: for a builtin called with the wrong arity.
  """
  check_limits(root, limits, 'evaluated expression')
  evaluator = _ScalarEvaluator(symbol_table or {}, custom_function_table or {})
  with np.errstate(all='ignore'):
    try:
      return float(evaluator.run(root))
    except RecursionError as exc:
      raise ResourceExceededError('evaluation depth', limits.max_depth) from exc


class _VectorEvaluator:

  def __init__(self, arrays: Dict[str, np.ndarray], n_samples: int,
               custom_function_table: CustomFunctionTable):
    self.arrays = arrays
    self.n_samples = n_samples
    self.custom_function_table = custom_function_table

  def run(self, node: ExpressionNode) -> np.ndarray:
    kind = node.token.kind
    if kind in (TokenKind.INTEGER, TokenKind.NUMBER):
      return evaluate_constant(self.n_samples, _to_float(node.value))
    if kind == TokenKind.VARIABLE:
      name = node.token.text
      if name not in self.arrays:
        raise UnknownSymbolError(name)
      return self.arrays[name]
    if kind == TokenKind.UNDEFINED:
      return evaluate_constant(self.n_samples, np.nan)
    if kind == TokenKind.FRACTION:
      return self._binary('/', [self.run(c) for c in node.children])
    if kind == TokenKind.OPERATOR:
      values = [self.run(c) for c in node.children]
      if node.token.text == '-' and len(values) == 1:
        return -values[0]
      return self._binary(node.token.text, values)
    if kind == TokenKind.FUNCTION:
      return self._call(node)
    raise InvalidArgumentError(f"Cannot evaluate token {node.token}")

  def _binary(self, symbol: str, values: List[np.ndarray]) -> np.ndarray:
    op_type = int(BINARY_OP_MAP[symbol])
    if symbol == '^':
      result = values[-1]
      for v in reversed(values[:-1]):
        result = evaluate_binary_op_fast(v, result, op_type)
      return result
    result = values[0]
    for v in values[1:]:
      result = evaluate_binary_op_fast(result, v, op_type)
    return result

  def _call(self, node: ExpressionNode) -> np.ndarray:
    name = node.token.text
    args = [self.run(c) for c in node.children]
    if name in BUILTIN_FUNCTIONS:
      _check_arity(name, len(args))
      result = BUILTIN_FUNCTIONS[name].apply(args)
      return np.broadcast_to(np.asarray(result, dtype=np.float64), (self.n_samples,)).copy()
    if name in self.custom_function_table:
      func = self.custom_function_table[name]
      return np.array([func([float(v) for v in column]) for column in zip(*args)], dtype=np.float64)
    raise UnknownSymbolError(name, 'function')


def evaluate_vectorized(root: ExpressionNode,
                        variables: Mapping[str, Sequence[float]],
                        custom_function_table: Optional[CustomFunctionTable] = None,
                        limits: ResourceLimits = DEFAULT_LIMITS) -> np.ndarray:
  """Evaluate ``root`` for every sample of equally sized 1-D arrays"""
  check_limits(root, limits, 'evaluated expression')
  arrays = {name: np.ascontiguousarray(values, dtype=np.float64).ravel()
            for name, values in variables.items()}
  lengths = {len(a) for a in arrays.values()}
  if len(lengths) > 1:
    raise InvalidArgumentError(f"Sample arrays differ in length: {sorted(lengths)}")
  n_samples = lengths.pop() if lengths else 1
  evaluator = _VectorEvaluator(arrays, n_samples, custom_function_table or {})
  with np.errstate(all='ignore'):
    try:
      return evaluator.run(root)
    except RecursionError as exc:
      raise ResourceExceededError('evaluation depth', limits.max_depth) from exc
