"""
Polynomial toolkit

Univariate polynomial operations with respect to one designated variable:
dense coefficient extraction, long division, common-factor and quadratic
factorization, and re-expansion in a new indeterminate. Coefficients may be
arbitrary expressions free of the variable; every intermediate result is
normalized through the owning Simplifier.
"""

import math
from fractions import Fraction
from typing import Dict, List, Optional, Tuple

from ..errors import InvalidArgumentError
from ..expression_tree.core.node import (
    ExpressionNode, integer_node, fraction_node, operator_node, undefined_node
)
from ..logging_system import log_debug
from .rational import make_rational

# Largest |a*c| searched for integer factor pairs
MAX_PAIR_SEARCH = 10 ** 8


class PolynomialToolkit:
    """Polynomial operations bound to a Simplifier"""

    def __init__(self, simplifier):
        self.simplifier = simplifier

    # Coefficient views

    def coefficients(self, u: ExpressionNode, x: ExpressionNode) -> List[ExpressionNode]:
        """
        Dense coefficient list of ``u`` in ``x``.

        Args:
            u: Expression, expanded before inspection
            x: Variable node

        Returns:
            Coefficients indexed by power; empty for the zero polynomial

        Raises:
            InvalidArgumentError: if ``u`` is not a polynomial in ``x``
        """
        self._check_variable(x)
        expanded = self.simplifier.expand(u)
        terms = expanded.children if expanded.is_sum() else [expanded]

        by_degree: Dict[int, List[ExpressionNode]] = {}
        for term in terms:
            degree, coefficient = self._monomial(term, x)
            by_degree.setdefault(degree, []).append(coefficient)

        coefficients = []
        for degree in range(max(by_degree) + 1):
            parts = by_degree.get(degree)
            if not parts:
                coefficients.append(integer_node(0))
            elif len(parts) == 1:
                coefficients.append(parts[0])
            else:
                coefficients.append(self._clean(operator_node('+', *parts)))
        return _trim(coefficients)

    def from_coefficients(self, coefficients: List[ExpressionNode], x: ExpressionNode) -> ExpressionNode:
        terms = [
            operator_node('*', c.copy(), operator_node('^', x.copy(), integer_node(k)))
            for k, c in enumerate(coefficients)
        ]
        if not terms:
            return integer_node(0)
        return self.simplifier.automatic_simplify(operator_node('+', *terms))

    def is_polynomial(self, u: ExpressionNode, x: ExpressionNode) -> bool:
        try:
            self.coefficients(u, x)
        except InvalidArgumentError:
            return False
        return True

    def degree(self, u: ExpressionNode, x: ExpressionNode) -> int:
        """Degree in ``x``; -1 for the zero polynomial"""
        return len(self.coefficients(u, x)) - 1

    def coefficient(self, u: ExpressionNode, x: ExpressionNode, k: int) -> ExpressionNode:
        coefficients = self.coefficients(u, x)
        if 0 <= k < len(coefficients):
            return coefficients[k]
        return integer_node(0)

    def leading_coefficient(self, u: ExpressionNode, x: ExpressionNode) -> ExpressionNode:
        coefficients = self.coefficients(u, x)
        return coefficients[-1] if coefficients else integer_node(0)

    # Operations

    def division(self, u: ExpressionNode, v: ExpressionNode, x: ExpressionNode) -> List[ExpressionNode]:
        """Long division, returns [quotient, remainder]"""
        numerator = self.coefficients(u, x)
        denominator = self.coefficients(v, x)
        if not denominator:
            return [undefined_node(), undefined_node()]

        n = len(denominator) - 1
        m = len(numerator) - 1
        if m < n:
            return [integer_node(0), self.simplifier.automatic_simplify(u)]

        remainder = list(numerator)
        quotient: List[ExpressionNode] = [integer_node(0)] * (m - n + 1)
        lead = denominator[-1]
        for k in range(m - n, -1, -1):
            step = self._clean(operator_node(
                '*', remainder[n + k].copy(), operator_node('^', lead.copy(), integer_node(-1))))
            quotient[k] = step
            for j in range(n + 1):
                remainder[j + k] = self._clean(operator_node(
                    '-', remainder[j + k].copy(), operator_node('*', step.copy(), denominator[j].copy())))
            log_debug(f"polynomial_division: x^{k} term {step.to_string()}")

        return [self.from_coefficients(quotient, x), self.from_coefficients(_trim(remainder[:n]), x)]

    def factorization(self, u: ExpressionNode, x: ExpressionNode) -> ExpressionNode:
        """Pull out the common factor c*x^k, then try to split a quadratic rest"""
        coefficients = self.coefficients(u, x)
        if not coefficients:
            return integer_node(0)

        low = next(k for k, c in enumerate(coefficients) if not c.is_value(0))
        shifted = coefficients[low:]
        content, primitive = self._content(shifted)

        rest = None
        if len(primitive) == 3 and all(c.is_integer() for c in primitive):
            rest = self._factor_quadratic([c.value for c in primitive], x)
        if rest is None:
            rest = self.from_coefficients(primitive, x)

        product = operator_node('*', content, operator_node('^', x.copy(), integer_node(low)), rest)
        return self.simplifier.automatic_simplify(product)

    def expansion(self, u: ExpressionNode, v: ExpressionNode,
                  x: ExpressionNode, t: ExpressionNode) -> ExpressionNode:
        """Rewrite ``u`` in base ``v``: remainders become coefficients of t^k"""
        self._check_variable(t)
        if self.degree(v, x) < 1:
            raise InvalidArgumentError(f"'{v.to_string()}' must have positive degree in {x.kind()}")

        terms = []
        current = u
        k = 0
        while self.coefficients(current, x):
            quotient, remainder = self.division(current, v, x)
            terms.append(operator_node('*', remainder, operator_node('^', t.copy(), integer_node(k))))
            current = quotient
            k += 1
        if not terms:
            return integer_node(0)
        return self.simplifier.expand(operator_node('+', *terms))

    def simplify(self, poly: ExpressionNode, x: ExpressionNode) -> ExpressionNode:
        """Factor sums, recursing into products and powers so equal factors merge"""
        self._check_variable(x)
        return self._simplify_factors(self.simplifier.automatic_simplify(poly), x)

    def _simplify_factors(self, u: ExpressionNode, x: ExpressionNode) -> ExpressionNode:
        if u.is_product():
            factors = [self._simplify_factors(f, x) for f in u.children]
            return self.simplifier.automatic_simplify(operator_node('*', *factors))
        if u.is_power() and u.children[1].is_integer():
            base = self._simplify_factors(u.children[0], x)
            return self.simplifier.automatic_simplify(operator_node('^', base, u.children[1].copy()))
        if u.is_sum() and not u.free_of(x) and self.is_polynomial(u, x):
            return self.factorization(u, x)
        return u

    # Helpers

    def _clean(self, node: ExpressionNode) -> ExpressionNode:
        return self.simplifier.expand(node)

    @staticmethod
    def _check_variable(x: ExpressionNode):
        if not x.is_symbol():
            raise InvalidArgumentError(f"'{x.to_string()}' is not a variable")

    def _monomial(self, term: ExpressionNode, x: ExpressionNode) -> Tuple[int, ExpressionNode]:
        """Split a term into (degree in x, coefficient)"""
        if term.free_of(x):
            return 0, term
        if term == x:
            return 1, integer_node(1)
        if term.is_power() and term.children[0] == x:
            exponent = term.children[1]
            if exponent.is_integer() and exponent.value >= 0:
                return exponent.value, integer_node(1)
        if term.is_product():
            degree = 0
            rest = []
            for factor in term.children:
                if factor.free_of(x):
                    rest.append(factor)
                else:
                    factor_degree, _ = self._monomial(factor, x)
                    degree += factor_degree
            if not rest:
                return degree, integer_node(1)
            if len(rest) == 1:
                return degree, rest[0]
            return degree, operator_node('*', *rest)
        raise InvalidArgumentError(f"'{term.to_string()}' is not a polynomial term in {x.kind()}")

    def _content(self, coefficients: List[ExpressionNode]) -> Tuple[ExpressionNode, List[ExpressionNode]]:
        """Numeric content and primitive part, leading coefficient made positive"""
        if not all(c.is_rational() for c in coefficients):
            return integer_node(1), coefficients
        values = [_fraction_of(c) for c in coefficients]
        numerator_gcd = 0
        denominator_lcm = 1
        for value in values:
            numerator_gcd = math.gcd(numerator_gcd, value.numerator)
            denominator_lcm = denominator_lcm * value.denominator // math.gcd(denominator_lcm, value.denominator)
        content = Fraction(numerator_gcd, denominator_lcm)
        if values[-1] < 0:
            content = -content
        return make_rational(content), [make_rational(v / content) for v in values]

    def _factor_quadratic(self, values: List[int], x: ExpressionNode) -> Optional[ExpressionNode]:
        c, b, a = values
        pair = _find_factor_pair(a * c, b)
        if pair is not None:
            p, q = pair
            d1 = math.gcd(a, p)
            a1 = a // d1
            product = operator_node('*', _linear(a1, p // d1, x), _linear(d1, q // a1, x))
            return self.simplifier.automatic_simplify(product)

        discriminant = b * b - 4 * a * c
        if discriminant <= 0:
            return None
        root = self.simplifier.automatic_simplify(
            operator_node('^', integer_node(discriminant), fraction_node(1, 2)))
        half_inverse = fraction_node(1, 2 * a)
        shifts = [
            self.simplifier.expand(operator_node('*', half_inverse.copy(), operator_node(
                '+', integer_node(b), operator_node('*', integer_node(sign), root.copy()))))
            for sign in (-1, 1)
        ]
        product = operator_node('*', integer_node(a), *[
            operator_node('+', x.copy(), shift) for shift in shifts])
        return self.simplifier.automatic_simplify(product)


def _trim(coefficients: List[ExpressionNode]) -> List[ExpressionNode]:
    trimmed = list(coefficients)
    while trimmed and trimmed[-1].is_value(0):
        trimmed.pop()
    return trimmed


def _fraction_of(node: ExpressionNode) -> Fraction:
    if node.is_integer():
        return Fraction(node.value)
    return Fraction(node.children[0].value, node.children[1].value)


def _linear(slope: int, offset: int, x: ExpressionNode) -> ExpressionNode:
    return operator_node('+', operator_node('*', integer_node(slope), x.copy()), integer_node(offset))


def _find_factor_pair(product: int, total: int) -> Optional[Tuple[int, int]]:
    """Integers p, q with p*q == product and p+q == total"""
    if product == 0 or abs(product) > MAX_PAIR_SEARCH:
        return None
    magnitude = abs(product)
    divisor = 1
    while divisor * divisor <= magnitude:
        if magnitude % divisor == 0:
            for p in (divisor, -divisor, magnitude // divisor, -(magnitude // divisor)):
                q = product // p
                if p * q == product and p + q == total:
                    return p, q
        divisor += 1
    return None
