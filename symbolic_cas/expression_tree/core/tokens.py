from dataclasses import dataclass, replace
from enum import IntEnum
from typing import Optional, Union


class TokenKind(IntEnum):
  INTEGER = 0
  NUMBER = 1
  FRACTION = 2
  VARIABLE = 3
  FUNCTION = 4
  OPERATOR = 5
  LEFT_PAREN = 6
  RIGHT_PAREN = 7
  ARG_SEPARATOR = 8
  UNDEFINED = 9


# Binding strength used by the shunting-yard parser
OPERATOR_PRECEDENCE = {'+': 1, '-': 1, '*': 2, '/': 2, '^': 3}
RIGHT_ASSOCIATIVE = frozenset('^')
FUNCTION_PRECEDENCE = 4

OPERATOR_SYMBOLS = frozenset(OPERATOR_PRECEDENCE)
COMMUTATIVE_OPERATORS = frozenset('+*')

FRACTION_TAG = 'Frac'
UNDEFINED_TAG = 'Undefined'


@dataclass(frozen=True)
class Token:
  """Immutable tagged token.

  ``text`` holds the literal text for numbers, the symbol for operators and
  the name for variables/functions. ``value`` holds the numeric payload
  (int for INTEGER, float for NUMBER). ``arity`` is only meaningful for
  FUNCTION tokens.
  """
  kind: TokenKind
  text: str = ''
  value: Optional[Union[int, float]] = None
  arity: int = 0

  # Constructors

  @staticmethod
  def integer(value: int) -> 'Token':
    return Token(TokenKind.INTEGER, str(value), int(value))

  @staticmethod
  def number(text: Union[str, float]) -> 'Token':
    if not isinstance(text, str):
      text = repr(float(text))
    return Token(TokenKind.NUMBER, text, float(text))

  @staticmethod
  def fraction() -> 'Token':
    return Token(TokenKind.FRACTION, FRACTION_TAG)

  @staticmethod
  def variable(name: str) -> 'Token':
    return Token(TokenKind.VARIABLE, name)

  @staticmethod
  def function(name: str, arity: int = 1) -> 'Token':
    return Token(TokenKind.FUNCTION, name, arity=arity)

  @staticmethod
  def operator(symbol: str) -> 'Token':
    if symbol not in OPERATOR_SYMBOLS:
      raise ValueError(f"Unknown operator symbol: {symbol!r}")
    return Token(TokenKind.OPERATOR, symbol)

  @staticmethod
  def left_paren() -> 'Token':
    return Token(TokenKind.LEFT_PAREN, '(')

  @staticmethod
  def right_paren() -> 'Token':
    return Token(TokenKind.RIGHT_PAREN, ')')

  @staticmethod
  def separator() -> 'Token':
    return Token(TokenKind.ARG_SEPARATOR, ',')

  @staticmethod
  def undefined() -> 'Token':
    return Token(TokenKind.UNDEFINED, UNDEFINED_TAG)

  def with_arity(self, arity: int) -> 'Token':
    return replace(self, arity=arity)

  # Operator properties

  @property
  def precedence(self) -> int:
    if self.kind == TokenKind.OPERATOR:
      return OPERATOR_PRECEDENCE[self.text]
    if self.kind == TokenKind.FUNCTION:
      return FUNCTION_PRECEDENCE
    return 0

  @property
  def right_associative(self) -> bool:
    return self.kind == TokenKind.OPERATOR and self.text in RIGHT_ASSOCIATIVE

  @property
  def is_numeric(self) -> bool:
    return self.kind in (TokenKind.INTEGER, TokenKind.NUMBER)

  def __str__(self) -> str:
    kind = self.kind
    if kind == TokenKind.INTEGER:
      return f"Integer({self.text})"
    if kind == TokenKind.NUMBER:
      return f"Number({self.text})"
    if kind == TokenKind.VARIABLE:
      return f"Variable({self.text})"
    if kind == TokenKind.FUNCTION:
      return f"Function({self.text}, {self.arity})"
    if kind == TokenKind.OPERATOR:
      return f"Operator({self.text})"
    if kind == TokenKind.FRACTION:
      return "Fraction"
    if kind == TokenKind.LEFT_PAREN:
      return "LeftParenthesis"
    if kind == TokenKind.RIGHT_PAREN:
      return "RightParenthesis"
    if kind == TokenKind.ARG_SEPARATOR:
      return "ArgumentSeparator"
    return "Undefined"
