import numpy as np
import numba
from enum import IntEnum
from typing import Callable, Dict, NamedTuple, Optional, Sequence


class OpType(IntEnum):
  ADD = 0
  SUB = 1
  MUL = 2
  DIV = 3
  POW = 4


BINARY_OP_MAP = {'+': OpType.ADD, '-': OpType.SUB, '*': OpType.MUL, '/': OpType.DIV, '^': OpType.POW}


@numba.njit(cache=True, error_model='numpy')
def evaluate_binary_op_fast(left_val, right_val, op_type):
  # IEEE semantics: division by zero gives inf/nan, invalid powers give nan
  if op_type == OpType.ADD:
    return left_val + right_val
  elif op_type == OpType.SUB:
    return left_val - right_val
  elif op_type == OpType.MUL:
    return left_val * right_val
  elif op_type == OpType.DIV:
    return left_val / right_val
  elif op_type == OpType.POW:
    return np.power(left_val, right_val)
  return np.full_like(left_val, np.nan)


@numba.njit(cache=True)
def evaluate_constant(n_samples, value):
  return np.full(n_samples, value, dtype=np.float64)


def _integral(values):
  return np.isfinite(values) & (np.floor(values) == values)


def _integer_binary(op):
  # gcd/lcm are only defined on integral arguments
  def apply(args):
    a = np.asarray(args[0], dtype=np.float64)
    b = np.asarray(args[1], dtype=np.float64)
    ok = _integral(a) & _integral(b)
    safe_a = np.where(ok, a, 0.0).astype(np.int64)
    safe_b = np.where(ok, b, 0.0).astype(np.int64)
    return np.where(ok, op(safe_a, safe_b).astype(np.float64), np.nan)
  return apply


def _log(args):
  if len(args) == 1:
    return np.log10(args[0])
  # log(base, value)
  return np.log(args[1]) / np.log(args[0])


def _nthroot(args):
  value = np.asarray(args[0], dtype=np.float64)
  degree = np.asarray(args[1], dtype=np.float64)
  odd = _integral(degree) & (np.mod(degree, 2.0) == 1.0)
  magnitude = np.power(np.abs(value), 1.0 / degree)
  return np.where(odd & (value < 0), -magnitude, np.power(value, 1.0 / degree))


class BuiltinFunction(NamedTuple):
  apply: Callable[[Sequence], object]
  min_args: int
  max_args: Optional[int]   # None means unbounded


def _unary(func) -> BuiltinFunction:
  return BuiltinFunction(lambda args: func(args[0]), 1, 1)


# Works on float64 scalars and on numpy arrays alike
BUILTIN_FUNCTIONS: Dict[str, BuiltinFunction] = {
  'abs': _unary(np.abs),
  'sign': _unary(np.sign),
  'sqrt': _unary(np.sqrt),
  'ln': _unary(np.log),
  'log': BuiltinFunction(_log, 1, 2),
  'exp': _unary(np.exp),
  'sin': _unary(np.sin),
  'cos': _unary(np.cos),
  'tan': _unary(np.tan),
  'sec': _unary(lambda v: 1.0 / np.cos(v)),
  'csc': _unary(lambda v: 1.0 / np.sin(v)),
  'cot': _unary(lambda v: np.cos(v) / np.sin(v)),
  'asin': _unary(np.arcsin),
  'acos': _unary(np.arccos),
  'atan': _unary(np.arctan),
  'arcsin': _unary(np.arcsin),
  'arccos': _unary(np.arccos),
  'arctan': _unary(np.arctan),
  'floor': _unary(np.floor),
  'ceil': _unary(np.ceil),
  'round': _unary(np.round),
  'min': BuiltinFunction(lambda args: np.minimum.reduce([np.asarray(a, dtype=np.float64) for a in args]), 1, None),
  'max': BuiltinFunction(lambda args: np.maximum.reduce([np.asarray(a, dtype=np.float64) for a in args]), 1, None),
  'mod': BuiltinFunction(lambda args: np.mod(args[0], args[1]), 2, 2),
  'gcd': BuiltinFunction(_integer_binary(np.gcd), 2, 2),
  'lcm': BuiltinFunction(_integer_binary(np.lcm), 2, 2),
  'nthroot': BuiltinFunction(_nthroot, 2, 2),
  'nroot': BuiltinFunction(_nthroot, 2, 2),
}

TRIG_FUNCTIONS = frozenset(('sin', 'cos', 'tan', 'sec', 'csc', 'cot'))
INVERSE_TRIG_FUNCTIONS = frozenset(('asin', 'acos', 'atan', 'arcsin', 'arccos', 'arctan'))
