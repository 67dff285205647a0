"""Automatic simplification, exact rational arithmetic and polynomials."""

from .simplifier import Simplifier
from .polynomial import PolynomialToolkit
from .rational import (
    simplify_rational_number, simplify_rne, rationalize_decimal, extract_root
)

__all__ = [
    'Simplifier', 'PolynomialToolkit',
    'simplify_rational_number', 'simplify_rne', 'rationalize_decimal', 'extract_root'
]
