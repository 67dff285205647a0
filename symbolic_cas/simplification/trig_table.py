"""Exact trigonometric values at multiples of 30 and 45 degrees.

Values are returned as raw (unsimplified) trees built from 1/2, 2^(1/2) and
3^(1/2); the caller runs them through automatic simplification, which also
turns poles such as tan(90) into Undefined.
"""

import math
from typing import Optional

from ..expression_tree.core.node import (
  ExpressionNode, integer_node, fraction_node, operator_node
)

ANGLE_TOLERANCE = 1e-9


def _half_root(n: int) -> ExpressionNode:
  # n^(1/2) / 2
  return operator_node('*', fraction_node(1, 2), operator_node('^', integer_node(n), fraction_node(1, 2)))


# sin on the first quadrant
_SIN_FIRST_QUADRANT = {
  0: lambda: integer_node(0),
  30: lambda: fraction_node(1, 2),
  45: lambda: _half_root(2),
  60: lambda: _half_root(3),
  90: lambda: integer_node(1),
}


def nice_angle(value: float, use_radians: bool) -> Optional[int]:
  """Degree measure in [0, 360) if ``value`` is a table angle, else None"""
  degrees = math.degrees(value) if use_radians else value
  steps = round(degrees / 15.0)
  if abs(degrees - 15.0 * steps) > ANGLE_TOLERANCE * max(1.0, abs(degrees)):
    return None
  angle = (15 * steps) % 360
  if angle % 30 and angle % 45:
    return None
  return angle


def sine_value(angle: int) -> ExpressionNode:
  if angle <= 90:
    return _SIN_FIRST_QUADRANT[angle]()
  if angle <= 180:
    return _SIN_FIRST_QUADRANT[180 - angle]()
  if angle <= 270:
    return operator_node('*', integer_node(-1), _SIN_FIRST_QUADRANT[angle - 180]())
  return operator_node('*', integer_node(-1), _SIN_FIRST_QUADRANT[360 - angle]())


def cosine_value(angle: int) -> ExpressionNode:
  return sine_value((angle + 90) % 360)


def trig_value(name: str, angle: int) -> ExpressionNode:
  sine = sine_value(angle)
  cosine = cosine_value(angle)
  minus_one = integer_node(-1)
  if name == 'sin':
    return sine
  if name == 'cos':
    return cosine
  if name == 'tan':
    return operator_node('*', sine, operator_node('^', cosine, minus_one))
  if name == 'sec':
    return operator_node('^', cosine, minus_one)
  if name == 'csc':
    return operator_node('^', sine, minus_one)
  if name == 'cot':
    return operator_node('*', cosine, operator_node('^', sine, minus_one))
  raise KeyError(name)
