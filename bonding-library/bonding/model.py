"""
Curve model: evaluates primitive curves through a registry of evaluators.

Design intent:
- Curve configs are **data only** (no evaluation methods).
- The model dispatches on the config's variant via `can_evaluate()`, so a new
  curve variant is added by registering an evaluator, not by editing callers.
- An unrecognized variant fails loudly with UnsupportedCurveKind.
"""

from __future__ import annotations

from bonding.curves import PrimitiveCurveConfig
from bonding.errors import UnsupportedCurveKind
from bonding.evaluators import BaseCurveEvaluator


class CurveModel:
    """
    Registry-based curve model.

    Evaluators are registered at initialization and dispatched based on
    can_evaluate() checks. First matching evaluator wins.
    """

    def __init__(self) -> None:
        self._evaluators: list[BaseCurveEvaluator] = []

    def register(self, evaluator: BaseCurveEvaluator) -> None:
        """Register an evaluator for dispatch.

        Order matters: first matching evaluator wins.
        """
        self._evaluators.append(evaluator)

    def evaluator_for(self, curve: object) -> BaseCurveEvaluator:
        for evaluator in self._evaluators:
            if evaluator.can_evaluate(curve):
                return evaluator
        raise UnsupportedCurveKind(
            f"No evaluator registered for {type(curve).__name__}. "
            "Register an evaluator with model.register(evaluator)."
        )

    def price(self, curve: PrimitiveCurveConfig, supply: float) -> float:
        return self.evaluator_for(curve).price(curve, supply)

    def antiderivative(self, curve: PrimitiveCurveConfig, supply: float) -> float:
        return self.evaluator_for(curve).antiderivative(curve, supply)

    def integral(self, curve: PrimitiveCurveConfig, s0: float, delta: float) -> float:
        """Integral of price over [s0, s0 + delta]."""
        return self.evaluator_for(curve).integral(curve, s0, delta)

    def supply_roots(self, curve: PrimitiveCurveConfig, rhs: float) -> list[float]:
        """Every real supply x with antiderivative(x) = rhs, ascending."""
        return self.evaluator_for(curve).supply_roots(curve, rhs)


def create_default_model() -> CurveModel:
    """Factory for a model with all built-in evaluators registered."""
    from bonding.evaluators import ExponentialEvaluator

    model = CurveModel()
    model.register(ExponentialEvaluator())
    return model
