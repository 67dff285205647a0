"""Error kinds raised by the algebra engine.

Mathematically undefined results (0/0, ln(0), ...) are not errors: they are
returned as ``Undefined`` nodes and propagate through simplification.
"""

from typing import Optional


class CASError(Exception):
  """Base class for every error raised by symbolic_cas"""


class ExpressionSyntaxError(CASError, SyntaxError):
  """Malformed input string or token sequence"""

  def __init__(self, message: str, position: Optional[int] = None):
    if position is not None:
      message = f"{message} (at position {position})"
    super().__init__(message)
    self.position = position


class UnknownSymbolError(CASError, LookupError):
  """Variable or function with no binding at evaluation time"""

  def __init__(self, symbol: str, kind: str = 'variable'):
    super().__init__(f"Unknown {kind} '{symbol}'")
    self.symbol = symbol
    self.kind = kind


class InvalidArgumentError(CASError, ValueError):
  """Argument outside the domain a helper accepts"""


class ResourceExceededError(CASError, RuntimeError):
  """Depth, size or exponent ceiling hit"""

  def __init__(self, what: str, limit: int, actual: Optional[int] = None):
    if actual is None:
      message = f"{what} exceeds the configured limit of {limit}"
    else:
      message = f"{what} of {actual} exceeds the configured limit of {limit}"
    super().__init__(message)
    self.limit = limit
    self.actual = actual
