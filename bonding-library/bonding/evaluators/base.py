"""Base evaluator abstract class for primitive curve variants."""

from __future__ import annotations

from abc import ABC, abstractmethod

from bonding.curves import PrimitiveCurveConfig


class BaseCurveEvaluator(ABC):
    """Abstract base class for curve evaluators.

    Subclasses implement can_evaluate() plus the price / antiderivative / root
    functions for one curve variant, so adding a variant means adding an
    evaluator rather than branching inside the engine.
    """

    @abstractmethod
    def can_evaluate(self, curve: object) -> bool:
        """Return True if this evaluator handles the curve variant."""
        ...

    @abstractmethod
    def price(self, curve: PrimitiveCurveConfig, supply: float) -> float:
        ...

    @abstractmethod
    def antiderivative(self, curve: PrimitiveCurveConfig, supply: float) -> float:
        ...

    @abstractmethod
    def supply_roots(self, curve: PrimitiveCurveConfig, rhs: float) -> list[float]:
        ...

    def integral(self, curve: PrimitiveCurveConfig, s0: float, delta: float) -> float:
        """Integral of price over [s0, s0 + delta]."""
        return self.antiderivative(curve, s0 + delta) - self.antiderivative(curve, s0)
