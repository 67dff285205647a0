from .tokenizer import tokenize, Tokenizer, TokenizeResult
from .parser import parse, parse_string

__all__ = ["tokenize", "Tokenizer", "TokenizeResult", "parse", "parse_string"]
