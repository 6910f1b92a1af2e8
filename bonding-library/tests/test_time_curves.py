"""Tests for time-segmented pricing and transition fee policies."""

from bonding.context import CurveContext
from bonding.curves import ExponentialCurveConfig, TimeCurveConfig, TransitionFee
from bonding.engine import LinearDecayTransitionFees, NoTransitionFees, PricingEngine

GO_LIVE = 1_000


def stepped_curve() -> TimeCurveConfig:
    return TimeCurveConfig.single(ExponentialCurveConfig(c=1.0)).add_curve(
        100,
        ExponentialCurveConfig(c=2.0),
        buy_transition_fee=TransitionFee(percentage=20.0, interval=50),
        sell_transition_fee=TransitionFee(percentage=10.0, interval=50),
    )


def engine_at(unix_time: int, fee_policy=None) -> PricingEngine:
    context = CurveContext(reserve=0.0, supply=0.0, go_live_unix_time=GO_LIVE, unix_time=unix_time)
    return PricingEngine(stepped_curve(), context, fee_policy=fee_policy)


def test_first_segment_before_switch() -> None:
    engine = engine_at(GO_LIVE + 99)
    assert engine.segment_index == 0
    assert abs(engine.buy_target_amount(10.0) - 50.0) < 1e-9


def test_before_go_live_uses_first_segment() -> None:
    assert engine_at(GO_LIVE - 500).segment_index == 0


def test_fee_is_full_right_after_switch() -> None:
    engine = engine_at(GO_LIVE + 100)
    assert engine.segment_index == 1
    assert abs(engine.buy_transition_fee() - 0.2) < 1e-12
    # c=2 doubles the curve cost, the 20% fee scales it further
    assert abs(engine.buy_target_amount(10.0) - 100.0 * 1.2) < 1e-9


def test_fee_decays_linearly_then_vanishes() -> None:
    halfway = engine_at(GO_LIVE + 125)
    assert abs(halfway.buy_transition_fee() - 0.1) < 1e-12
    assert abs(halfway.sell_transition_fee() - 0.05) < 1e-12
    done = engine_at(GO_LIVE + 150)
    assert done.buy_transition_fee() == 0.0
    assert abs(done.buy_target_amount(10.0) - 100.0) < 1e-9


def test_sell_fee_reduces_reclaim() -> None:
    context = CurveContext(reserve=0.0, supply=10.0, go_live_unix_time=GO_LIVE, unix_time=GO_LIVE + 100)
    engine = PricingEngine(stepped_curve(), context)
    assert abs(engine.sell_target_amount(10.0) - 100.0 * 0.9) < 1e-9


def test_buy_with_base_is_inverse_under_fee() -> None:
    engine = engine_at(GO_LIVE + 110)
    cost = engine.buy_target_amount(7.0)
    assert abs(engine.buy_with_base_amount(cost) - 7.0) < 1e-6


def test_no_fee_policy_ignores_configured_fees() -> None:
    engine = engine_at(GO_LIVE + 100, fee_policy=NoTransitionFees())
    assert engine.buy_transition_fee() == 0.0
    assert abs(engine.buy_target_amount(10.0) - 100.0) < 1e-9


def test_first_segment_never_charges() -> None:
    """A fee configured on segment 0 is ignored: nothing was switched from."""
    segment = stepped_curve().segments[1]
    policy = LinearDecayTransitionFees()
    assert policy.buy_fee(segment, 0.0, 0) == 0.0
    assert abs(policy.buy_fee(segment, 0.0, 1) - 0.2) < 1e-12
