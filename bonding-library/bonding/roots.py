"""Real roots of polynomials, used to produce root-estimate hints for curve inversion."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from bonding.errors import ArithmeticDomainError

# Imaginary parts below this (relative to root magnitude) count as numerical noise.
IMAG_TOL_REL = 1e-7
DEDUPE_TOL_REL = 1e-9
NEWTON_STEPS = 3


def _polish(coefficients: np.ndarray, root: float) -> float:
    """A few Newton steps on a real root found via companion-matrix eigenvalues."""
    derivative = np.polyder(coefficients)
    x = root
    for _ in range(NEWTON_STEPS):
        slope = float(np.polyval(derivative, x))
        if slope == 0.0:
            break
        step = float(np.polyval(coefficients, x)) / slope
        x -= step
        if abs(step) <= DEDUPE_TOL_REL * max(abs(x), 1.0):
            break
    return x


def dedupe_sorted(values: Sequence[float]) -> list[float]:
    """Sort ascending and collapse values equal within relative tolerance."""
    out: list[float] = []
    for v in sorted(values):
        if out and abs(v - out[-1]) <= DEDUPE_TOL_REL * max(abs(v), abs(out[-1]), 1.0):
            continue
        out.append(v)
    return out


def real_polynomial_roots(coefficients: Sequence[float]) -> list[float]:
    """
    Every distinct real root of the polynomial, ascending.

    `coefficients` are highest degree first (numpy convention).
    Raises ArithmeticDomainError if the polynomial has no real root.
    """
    coeffs = np.asarray(coefficients, dtype=float)
    if coeffs.size == 0 or not np.any(coeffs):
        raise ArithmeticDomainError("polynomial is identically zero")
    roots = np.roots(coeffs)
    real: list[float] = []
    for r in roots:
        scale = max(abs(r), 1.0)
        if abs(r.imag) <= IMAG_TOL_REL * scale:
            real.append(_polish(coeffs, float(r.real)))
    if not real:
        raise ArithmeticDomainError("polynomial has no real roots")
    return dedupe_sorted(real)
