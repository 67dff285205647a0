"""Infix string to token sequence.

Handles implicit multiplication (``2x``, ``3(x+1)``, ``(a)(b)``, ``xy``),
function arity inference from argument separators and negation in operand
position, which is rewritten as multiplication by -1.
"""

from typing import List, NamedTuple, Optional, Set

from ..core.tokens import Token, TokenKind, OPERATOR_SYMBOLS
from ...errors import ExpressionSyntaxError
from ...logging_system import log_debug

# Kinds that can end / start an operand, used to detect implicit products
_OPERAND_END = (TokenKind.NUMBER, TokenKind.VARIABLE, TokenKind.RIGHT_PAREN)
_OPERAND_START = (TokenKind.NUMBER, TokenKind.VARIABLE, TokenKind.FUNCTION, TokenKind.LEFT_PAREN)


class TokenizeResult(NamedTuple):
  tokens: List[Token]
  symbols: Set[str]


class _OpenParen(NamedTuple):
  function_index: Optional[int]   # position of the owning Function token
  position: int


class Tokenizer:
  """Single-use scanner. Use the module level ``tokenize`` function."""

  def __init__(self, text: str):
    self.text = text
    self.tokens: List[Token] = []
    self.symbols: Set[str] = set()
    self._number = ''
    self._number_start = 0
    self._letters = ''
    self._parens: List[_OpenParen] = []
    self._separators: List[int] = []
    self._negate_literal = False

  def run(self) -> TokenizeResult:
    for position, char in enumerate(self.text):
      if char.isspace():
        continue
      if self._negate_literal and not self._number and not (char.isdigit() or char == '.'):
        raise ExpressionSyntaxError(
          "Negative exponent must be a number literal, use parentheses instead", position)

      if char.isdigit() or char == '.':
        self._flush_letters()
        if not self._number:
          self._number_start = position
        self._number += char
      elif char.isascii() and char.isalpha():
        self._flush_number()
        self._letters += char
      elif char == '(':
        self._open_paren(position)
      elif char == ')':
        self._close_paren(position)
      elif char == ',':
        self._separator(position)
      elif char in OPERATOR_SYMBOLS:
        self._operator(char, position)
      else:
        raise ExpressionSyntaxError(f"Undefined character '{char}'", position)

    self._flush_number()
    self._flush_letters()
    if self._negate_literal:
      raise ExpressionSyntaxError("Dangling '-' at end of input", len(self.text))
    if self._parens:
      raise ExpressionSyntaxError("Unbalanced parentheses: missing ')'", self._parens[-1].position)

    log_debug(f"tokenize: {len(self.tokens)} tokens, symbols={sorted(self.symbols)}")
    return TokenizeResult(self.tokens, self.symbols)

  # Buffers

  def _append(self, token: Token):
    previous = self.tokens[-1] if self.tokens else None
    if (previous is not None and previous.kind in _OPERAND_END and token.kind in _OPERAND_START
        and not (previous.kind == TokenKind.NUMBER and token.kind == TokenKind.NUMBER)):
      self.tokens.append(Token.operator('*'))
    self.tokens.append(token)

  def _flush_number(self):
    if not self._number:
      return
    text = self._number
    self._number = ''
    if text.count('.') > 1 or text == '.':
      raise ExpressionSyntaxError(f"Malformed number '{text}'", self._number_start)
    if self._negate_literal:
      text = '-' + text
      self._negate_literal = False
    self._append(Token.number(text))

  def _flush_letters(self):
    # each letter is its own variable
    for letter in self._letters:
      self.symbols.add(letter)
      self._append(Token.variable(letter))
    self._letters = ''

  def _flush(self):
    self._flush_number()
    self._flush_letters()

  def _previous_kind(self) -> Optional[TokenKind]:
    return self.tokens[-1].kind if self.tokens else None

  def _in_operand_position(self) -> bool:
    return self._previous_kind() in (None, TokenKind.OPERATOR, TokenKind.LEFT_PAREN, TokenKind.ARG_SEPARATOR)

  # Structural characters

  def _open_paren(self, position: int):
    self._flush_number()
    if self._letters:
      name, self._letters = self._letters, ''
      self._append(Token.function(name, 1))
      self._parens.append(_OpenParen(len(self.tokens) - 1, position))
    else:
      self._parens.append(_OpenParen(None, position))
    self._separators.append(0)
    self._append(Token.left_paren())

  def _close_paren(self, position: int):
    self._flush()
    previous = self._previous_kind()
    if previous == TokenKind.LEFT_PAREN:
      raise ExpressionSyntaxError("Missing function argument or useless parentheses", position)
    if previous in (TokenKind.ARG_SEPARATOR, TokenKind.OPERATOR):
      raise ExpressionSyntaxError("Missing operand before ')'", position)
    if not self._parens:
      raise ExpressionSyntaxError("Unbalanced parentheses: unexpected ')'", position)

    opened = self._parens.pop()
    separators = self._separators.pop()
    if opened.function_index is not None:
      function = self.tokens[opened.function_index]
      self.tokens[opened.function_index] = function.with_arity(separators + 1)
    self._append(Token.right_paren())

  def _separator(self, position: int):
    self._flush()
    if not self._parens or self._parens[-1].function_index is None:
      raise ExpressionSyntaxError("Argument separator outside of a function call", position)
    if self._previous_kind() in (TokenKind.LEFT_PAREN, TokenKind.ARG_SEPARATOR, TokenKind.OPERATOR):
      raise ExpressionSyntaxError("Missing function argument", position)
    self._separators[-1] += 1
    self._append(Token.separator())

  def _operator(self, symbol: str, position: int):
    self._flush()
    if not self._in_operand_position():
      self._append(Token.operator(symbol))
      return

    if symbol == '+':
      # unary plus is a no-op
      return
    if symbol != '-':
      raise ExpressionSyntaxError(f"Operator '{symbol}' is missing its left operand", position)
    if self.tokens and self.tokens[-1].kind == TokenKind.OPERATOR and self.tokens[-1].text == '^':
      self._negate_literal = True
      return
    # negation becomes multiplication by -1
    self._append(Token.number('-1'))
    self._append(Token.operator('*'))


def tokenize(text: str) -> TokenizeResult:
  """Split ``text`` into tokens and collect the variable letters it uses.

  Raises:
    ExpressionSyntaxError: on an undefined character, unbalanced or empty
      parentheses, or a misplaced argument separator.
  """
  return Tokenizer(text).run()
