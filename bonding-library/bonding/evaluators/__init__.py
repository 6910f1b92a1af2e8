"""Evaluator implementations for the registry-based curve model."""

from bonding.evaluators.base import BaseCurveEvaluator
from bonding.evaluators.exponential import ExponentialEvaluator

__all__ = [
    "BaseCurveEvaluator",
    "ExponentialEvaluator",
]
