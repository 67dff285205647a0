from typing import Mapping, Optional, Set

import sympy as sp

from ..config import SimplifierConfig
from .core.node import ExpressionNode, variable_node
from .parsing import tokenize, parse


class Expression:
  """Immutable wrapper pairing a tree with the simplifier configuration.

  Every transformation returns a new Expression; the wrapped tree is never
  mutated after construction.
  """

  __slots__ = ('root', 'config', '_string_cache')

  def __init__(self, root: ExpressionNode, config: Optional[SimplifierConfig] = None):
    self.root = root
    self.config = config or SimplifierConfig()
    self._string_cache: Optional[str] = None

  @classmethod
  def from_string(cls, text: str, config: Optional[SimplifierConfig] = None) -> 'Expression':
    """Tokenize and parse ``text``, raising ExpressionSyntaxError when malformed"""
    result = tokenize(text)
    return cls(parse(result.tokens), config)

  def _simplifier(self):
    from ..simplification.simplifier import Simplifier
    return Simplifier(self.config)

  def _wrap(self, root: ExpressionNode) -> 'Expression':
    return Expression(root, self.config)

  def formatted(self) -> 'Expression':
    return self._wrap(self._simplifier().format_tree(self.root.copy()))

  def simplify(self) -> 'Expression':
    return self._wrap(self._simplifier().simplify(self.root))

  def expand(self) -> 'Expression':
    simplifier = self._simplifier()
    return self._wrap(simplifier.expand(simplifier.format_tree(self.root.copy())))

  def differentiate(self, variable: str, order: int = 1) -> 'Expression':
    from ..differentiator import Differentiator
    simplifier = self._simplifier()
    differentiator = Differentiator(simplifier)
    tree = simplifier.format_tree(self.root.copy())
    x = variable_node(variable)
    if order == 1:
      return self._wrap(differentiator.differentiate(tree, x))
    return self._wrap(differentiator.n_differentiate(tree, x, order))

  def evaluate(self, symbol_table: Optional[Mapping[str, float]] = None,
               custom_function_table=None) -> float:
    from ..evaluator import evaluate
    return evaluate(self.root, symbol_table, custom_function_table, self.config.limits)

  def variables(self) -> Set[str]:
    return self.root.variables()

  def missing_symbols(self, symbol_table: Optional[Mapping[str, float]] = None) -> Set[str]:
    """Variables with no binding in ``symbol_table``"""
    return self.variables() - set(symbol_table or {})

  def to_string(self) -> str:
    if self._string_cache is None:
      self._string_cache = self.root.to_string()
    return self._string_cache

  def display(self) -> str:
    """Display string with negative and fractional powers rewritten"""
    return self._simplifier().post_format_tree(self.root.copy()).to_string()

  def dump(self) -> str:
    return self.root.dump()

  def to_sympy(self) -> sp.Expr:
    return self.root.to_sympy()

  def size(self) -> int:
    return self.root.size()

  def copy(self) -> 'Expression':
    return Expression(self.root.copy(), self.config)

  def __hash__(self) -> int:
    return hash(self.root)

  def __eq__(self, other) -> bool:
    if not isinstance(other, Expression):
      return False
    return self.root == other.root

  def __str__(self) -> str:
    return self.to_string()

  def __repr__(self) -> str:
    return f"Expression({self.to_string()!r})"
