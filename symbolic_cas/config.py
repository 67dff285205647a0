"""Configuration objects threaded explicitly through the engine."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ResourceLimits:
  max_depth: int = 200       # deepest tree any public operation accepts
  max_nodes: int = 100_000   # largest input or intermediate tree


@dataclass(frozen=True)
class SimplifierConfig:
  """Options recognised by the Simplifier.

  Notes:
    - evaluate_functions folds builtin calls whose arguments are all constant.
    - use_radians selects the angle unit used when folding trig calls.
    - decimal_to_rational turns decimal literals into exact fractions
      during format_tree, see ``rational.rationalize_decimal``.
  """
  evaluate_functions: bool = False
  use_radians: bool = True
  decimal_to_rational: bool = False

  max_depth: int = 200
  max_nodes: int = 100_000
  max_exponent: int = 1000
  max_denominator: int = 10 ** 6
  rational_tolerance: float = 1e-6

  @property
  def limits(self) -> ResourceLimits:
    return ResourceLimits(max_depth=self.max_depth, max_nodes=self.max_nodes)


DEFAULT_LIMITS = ResourceLimits()
