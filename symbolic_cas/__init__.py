"""Symbolic CAS Package

Parses infix expressions into trees, simplifies them exactly, differentiates
them symbolically and evaluates them numerically.
"""

from .config import SimplifierConfig, ResourceLimits
from .errors import (
  CASError, ExpressionSyntaxError, UnknownSymbolError,
  InvalidArgumentError, ResourceExceededError
)
from .logging_system import LogLevel, configure_logging, set_log_level, get_logger
from .expression_tree import (
  Expression, ExpressionNode, Token, TokenKind,
  tokenize, parse, parse_string, SymPyBridge, ExpressionValidator
)
from .evaluator import evaluate, evaluate_vectorized
from .simplification import Simplifier
from .differentiator import Differentiator

__version__ = "0.1.0"
__all__ = [
  "SimplifierConfig", "ResourceLimits",
  "CASError", "ExpressionSyntaxError", "UnknownSymbolError",
  "InvalidArgumentError", "ResourceExceededError",
  "LogLevel", "configure_logging", "set_log_level", "get_logger",
  "Expression", "ExpressionNode", "Token", "TokenKind",
  "tokenize", "parse", "parse_string", "SymPyBridge", "ExpressionValidator",
  "evaluate", "evaluate_vectorized",
  "Simplifier", "Differentiator"
]
