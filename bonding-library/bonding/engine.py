"""
Pricing engine: buy/sell amounts and root estimates for one bonding curve.

Design intent:
- All operations are pure functions of (curve config, CurveContext snapshot).
- Amounts are UI units (decimals applied); royalties are percentages 0-100.
- Time curves are resolved to their active segment once, at construction;
  the primitive curve is then evaluated through the CurveModel registry.
- Transition fees are a pluggable TransitionFeePolicy: buy costs are scaled by
  (1 + fee), buy-with-base spend by 1 / (1 + fee), sell reclaims by (1 - fee).
"""

from __future__ import annotations

from bonding.context import CurveContext, as_fraction
from bonding.curves import (
    CurveConfig,
    PrimitiveCurveConfig,
    TimeCurveSegment,
    TransitionFee,
    as_time_curve,
)
from bonding.errors import ArithmeticDomainError, ConfigValidationError
from bonding.interfaces import TransitionFeePolicy
from bonding.model import CurveModel, create_default_model

SUPPLY_TOL_REL = 1e-9

_default_model = create_default_model()


class NoTransitionFees:
    """Transition fee policy that never charges."""

    def buy_fee(
        self, segment: TimeCurveSegment, seconds_into_segment: float, segment_index: int
    ) -> float:
        return 0.0

    def sell_fee(
        self, segment: TimeCurveSegment, seconds_into_segment: float, segment_index: int
    ) -> float:
        return 0.0


class LinearDecayTransitionFees:
    """
    Fee that starts at `percentage` when a later segment becomes active and decays
    linearly to zero over `interval` seconds. The first segment never charges.
    """

    @staticmethod
    def _decayed(fee: TransitionFee | None, seconds_into_segment: float, segment_index: int) -> float:
        if fee is None or segment_index == 0:
            return 0.0
        if seconds_into_segment >= fee.interval:
            return 0.0
        remaining = 1.0 - max(seconds_into_segment, 0.0) / fee.interval
        return fee.percentage / 100.0 * remaining

    def buy_fee(
        self, segment: TimeCurveSegment, seconds_into_segment: float, segment_index: int
    ) -> float:
        return self._decayed(segment.buy_transition_fee, seconds_into_segment, segment_index)

    def sell_fee(
        self, segment: TimeCurveSegment, seconds_into_segment: float, segment_index: int
    ) -> float:
        return self._decayed(segment.sell_transition_fee, seconds_into_segment, segment_index)


def _non_negative(name: str, value: float) -> None:
    if value < 0:
        raise ConfigValidationError(f"{name} must be >= 0, got {value}")


def _keep_fraction(percentage: float, what: str) -> float:
    """1 - royalty; rejects a 100% royalty where it would be a divisor."""
    keep = 1.0 - as_fraction(percentage)
    if keep <= 0:
        raise ArithmeticDomainError(f"{what} royalty of 100% leaves nothing to trade")
    return keep


class PricingEngine:
    """Prices trades against one curve at one CurveContext snapshot."""

    def __init__(
        self,
        curve: CurveConfig,
        context: CurveContext,
        model: CurveModel | None = None,
        fee_policy: TransitionFeePolicy | None = None,
    ) -> None:
        self.curve = as_time_curve(curve)
        self.context = context
        self.model = model if model is not None else _default_model
        self.fee_policy = fee_policy if fee_policy is not None else LinearDecayTransitionFees()
        self.segment_index = self.curve.active_index(context.elapsed)
        self.segment = self.curve.segments[self.segment_index]

    @property
    def primitive(self) -> PrimitiveCurveConfig:
        return self.segment.curve

    @property
    def seconds_into_segment(self) -> float:
        return max(self.context.elapsed, 0.0) - self.segment.offset_seconds

    def with_context(self, context: CurveContext) -> "PricingEngine":
        """Same curve, model and fee policy priced at a different snapshot."""
        return PricingEngine(self.curve, context, model=self.model, fee_policy=self.fee_policy)

    def buy_transition_fee(self) -> float:
        return self.fee_policy.buy_fee(self.segment, self.seconds_into_segment, self.segment_index)

    def sell_transition_fee(self) -> float:
        return self.fee_policy.sell_fee(self.segment, self.seconds_into_segment, self.segment_index)

    # --- curve evaluation -------------------------------------------------

    def price(self, supply: float | None = None) -> float:
        """Marginal curve price at `supply` (defaults to current supply), no royalties."""
        s = self.context.supply if supply is None else supply
        return self.model.price(self.primitive, s)

    def integral(self, s0: float, delta: float) -> float:
        return self.model.integral(self.primitive, s0, delta)

    def current(self, buy_base_royalty: float = 0.0, buy_target_royalty: float = 0.0) -> float:
        """Marginal base cost of one net target token at the current supply."""
        base_keep = _keep_fraction(buy_base_royalty, "buy base")
        target_keep = _keep_fraction(buy_target_royalty, "buy target")
        return self.price() * (1.0 + self.buy_transition_fee()) / (base_keep * target_keep)

    # --- trades -------------------------------------------------------------

    def buy_target_amount(
        self,
        desired_target_amount: float,
        buy_base_royalty: float = 0.0,
        buy_target_royalty: float = 0.0,
    ) -> float:
        """
        Base tokens needed to receive `desired_target_amount` net target tokens.

        gross = desired / (1 - target royalty); cost = integral over [S0, S0 + gross];
        total = cost / (1 - base royalty).
        """
        _non_negative("desired_target_amount", desired_target_amount)
        gross = self.gross_target_amount(desired_target_amount, buy_target_royalty)
        cost = self.integral(self.context.supply, gross)
        cost *= 1.0 + self.buy_transition_fee()
        return cost / _keep_fraction(buy_base_royalty, "buy base")

    def gross_target_amount(self, desired_target_amount: float, buy_target_royalty: float) -> float:
        """Target tokens minted so that `desired_target_amount` remain after the royalty."""
        return desired_target_amount / _keep_fraction(buy_target_royalty, "buy target")

    def buy_with_base_amount(
        self,
        base_amount: float,
        buy_base_royalty: float = 0.0,
        buy_target_royalty: float = 0.0,
    ) -> float:
        """
        Net target tokens received for spending `base_amount` base tokens.

        Solves integral over [S0, S0 + delta] = base * (1 - base royalty) for delta,
        then removes the target royalty.
        """
        _non_negative("base_amount", base_amount)
        s0 = self.context.supply
        rhs = self.model.antiderivative(self.primitive, s0) + self._net_buy_spend(
            base_amount, buy_base_royalty
        )
        roots = self.model.supply_roots(self.primitive, rhs)
        tol = SUPPLY_TOL_REL * max(s0, 1.0)
        candidates = [x for x in roots if x >= s0 - tol]
        if not candidates:
            raise ArithmeticDomainError("no supply above the current supply matches this spend")
        delta = max(min(candidates) - s0, 0.0)
        return delta * (1.0 - as_fraction(buy_target_royalty))

    def sell_target_amount(
        self,
        target_amount: float,
        sell_base_royalty: float = 0.0,
        sell_target_royalty: float = 0.0,
    ) -> float:
        """
        Base tokens reclaimed for selling `target_amount` target tokens.

        net = target * (1 - target royalty); reclaim = integral over [S0 - net, S0];
        total = reclaim * (1 - base royalty).
        """
        _non_negative("target_amount", target_amount)
        net = self._net_sold(target_amount, sell_target_royalty)
        s0 = self.context.supply
        reclaim = self.integral(s0 - net, net)
        reclaim *= 1.0 - self.sell_transition_fee()
        return reclaim * (1.0 - as_fraction(sell_base_royalty))

    # --- root estimates -----------------------------------------------------

    def buy_target_amount_root_estimates(
        self, desired_target_amount: float, buy_target_royalty: float = 0.0
    ) -> list[float]:
        """Candidate new supplies for a buy of `desired_target_amount` (ascending)."""
        _non_negative("desired_target_amount", desired_target_amount)
        gross = self.gross_target_amount(desired_target_amount, buy_target_royalty)
        rhs = self.model.antiderivative(self.primitive, self.context.supply + gross)
        return self.model.supply_roots(self.primitive, rhs)

    def buy_with_base_root_estimates(
        self, base_amount: float, buy_base_royalty: float = 0.0
    ) -> list[float]:
        """Candidate new supplies for spending `base_amount` (ascending)."""
        _non_negative("base_amount", base_amount)
        rhs = self.model.antiderivative(self.primitive, self.context.supply) + self._net_buy_spend(
            base_amount, buy_base_royalty
        )
        return self.model.supply_roots(self.primitive, rhs)

    def sell_target_amount_root_estimates(
        self, target_amount: float, sell_target_royalty: float = 0.0
    ) -> list[float]:
        """Candidate new supplies after selling `target_amount` (ascending)."""
        _non_negative("target_amount", target_amount)
        net = self._net_sold(target_amount, sell_target_royalty)
        rhs = self.model.antiderivative(self.primitive, self.context.supply - net)
        return self.model.supply_roots(self.primitive, rhs)

    # --- helpers ------------------------------------------------------------

    def _net_buy_spend(self, base_amount: float, buy_base_royalty: float) -> float:
        spend = base_amount * (1.0 - as_fraction(buy_base_royalty))
        return spend / (1.0 + self.buy_transition_fee())

    def _net_sold(self, target_amount: float, sell_target_royalty: float) -> float:
        net = target_amount * (1.0 - as_fraction(sell_target_royalty))
        if net > self.context.supply * (1.0 + SUPPLY_TOL_REL):
            raise ArithmeticDomainError(
                f"cannot sell {net} target tokens from a supply of {self.context.supply}"
            )
        return min(net, self.context.supply)
