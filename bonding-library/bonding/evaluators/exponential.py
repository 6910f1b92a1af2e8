"""Evaluator for exponential curves price(S) = c * S^k + b with k = pow/frac."""

from __future__ import annotations

import math

from bonding.curves import ExponentialCurveConfig, PrimitiveCurveConfig
from bonding.errors import ArithmeticDomainError
from bonding.evaluators.base import BaseCurveEvaluator
from bonding.roots import dedupe_sorted, real_polynomial_roots

# Degree of y^(p+q) - a beyond which companion-matrix roots stop being reliable.
MAX_ROOT_DEGREE = 128


class ExponentialEvaluator(BaseCurveEvaluator):
    """Evaluator for ExponentialCurveConfig."""

    def can_evaluate(self, curve: object) -> bool:
        return isinstance(curve, ExponentialCurveConfig)

    def price(self, curve: PrimitiveCurveConfig, supply: float) -> float:
        """price(S) = c * S^k + b."""
        assert isinstance(curve, ExponentialCurveConfig)
        if supply < 0:
            raise ArithmeticDomainError("supply must be >= 0")
        if curve.c == 0:
            return curve.b
        return curve.c * math.pow(supply, curve.k) + curve.b

    def antiderivative(self, curve: PrimitiveCurveConfig, supply: float) -> float:
        r"""
        F(S) = c/(k+1) * S^(k+1) + b*S.

        Only one of the two terms is ever non-zero (see ExponentialCurveConfig).
        """
        assert isinstance(curve, ExponentialCurveConfig)
        if supply < 0:
            raise ArithmeticDomainError("supply must be >= 0")
        k1 = curve.k + 1.0
        return curve.c / k1 * math.pow(supply, k1) + curve.b * supply

    def supply_roots(self, curve: PrimitiveCurveConfig, rhs: float) -> list[float]:
        """
        Every real x with F(x) = rhs, ascending.

        Linear case (c = 0): x = rhs / b.
        Power case (b = 0), k = p/q reduced: substitute y = x^(1/q), giving
        y^(p+q) = rhs * (k+1) / c. Real y are mapped back with x = y^q; when q is
        even only the principal (non-negative) y is a valid q-th root.
        """
        assert isinstance(curve, ExponentialCurveConfig)
        if curve.c == 0:
            if curve.b == 0:
                raise ArithmeticDomainError("a zero-price curve cannot be inverted")
            return [rhs / curve.b]

        exponent = curve.exponent
        p, q = exponent.numerator, exponent.denominator
        degree = p + q
        if degree > MAX_ROOT_DEGREE:
            raise ArithmeticDomainError(
                f"exponent {p}/{q} needs a degree {degree} polynomial; numeric root "
                "finding is not supported for it"
            )
        a = rhs * (curve.k + 1.0) / curve.c
        # y^degree - a = 0
        coefficients = [1.0] + [0.0] * (degree - 1) + [-a]
        ys = real_polynomial_roots(coefficients)
        if q % 2 == 0:
            ys = [y for y in ys if y >= 0]
        if not ys:
            raise ArithmeticDomainError(
                f"no real supply solves the curve equation for exponent {p}/{q}"
            )
        return dedupe_sorted([math.pow(y, q) for y in ys])
