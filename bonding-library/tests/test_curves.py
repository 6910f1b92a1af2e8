"""Tests for curve configuration validation and time-curve segment selection."""

import pytest

from bonding.curves import (
    ExponentialCurveConfig,
    TimeCurveConfig,
    TimeCurveSegment,
    TransitionFee,
    as_time_curve,
)
from bonding.errors import ConfigValidationError


def test_exponential_rejects_both_c_and_b_positive() -> None:
    with pytest.raises(ConfigValidationError):
        ExponentialCurveConfig(c=1.0, b=1.0)


def test_exponential_accepts_constant_price() -> None:
    curve = ExponentialCurveConfig(c=0.0, b=2.5)
    assert curve.b == 2.5


@pytest.mark.parametrize(
    "kwargs",
    [
        {"c": -1.0},
        {"c": 0.0, "b": -1.0},
        {"frac": 0},
        {"pow": -1},
    ],
)
def test_exponential_rejects_invalid_parameters(kwargs) -> None:
    with pytest.raises(ConfigValidationError):
        ExponentialCurveConfig(**kwargs)


def test_exponent_is_reduced_fraction() -> None:
    curve = ExponentialCurveConfig(c=1.0, pow=2, frac=4)
    assert curve.k == 0.5
    assert curve.exponent.numerator == 1
    assert curve.exponent.denominator == 2


def test_time_curve_first_offset_must_be_zero() -> None:
    seg = TimeCurveSegment(offset_seconds=10, curve=ExponentialCurveConfig())
    with pytest.raises(ConfigValidationError):
        TimeCurveConfig(segments=(seg,))


def test_time_curve_rejects_empty_and_unordered_segments() -> None:
    with pytest.raises(ConfigValidationError):
        TimeCurveConfig(segments=())
    base = TimeCurveConfig.single(ExponentialCurveConfig()).add_curve(60, ExponentialCurveConfig())
    with pytest.raises(ConfigValidationError):
        base.add_curve(60, ExponentialCurveConfig())
    with pytest.raises(ConfigValidationError):
        base.add_curve(30, ExponentialCurveConfig())


def test_add_curve_returns_new_config() -> None:
    first = TimeCurveConfig.single(ExponentialCurveConfig(c=1.0))
    second = first.add_curve(
        100, ExponentialCurveConfig(c=2.0), buy_transition_fee=TransitionFee(10.0, 50)
    )
    assert len(first.segments) == 1
    assert len(second.segments) == 2
    assert second.segments[1].buy_transition_fee == TransitionFee(10.0, 50)


def test_active_segment_is_last_offset_not_after_elapsed() -> None:
    curve = (
        TimeCurveConfig.single(ExponentialCurveConfig(c=1.0))
        .add_curve(100, ExponentialCurveConfig(c=2.0))
        .add_curve(200, ExponentialCurveConfig(c=3.0))
    )
    assert curve.active_index(-5) == 0
    assert curve.active_index(0) == 0
    assert curve.active_index(99.9) == 0
    assert curve.active_index(100) == 1
    assert curve.active_index(199) == 1
    assert curve.active_segment(10_000).curve.c == 3.0


def test_as_time_curve_wraps_primitive() -> None:
    primitive = ExponentialCurveConfig(c=4.0)
    wrapped = as_time_curve(primitive)
    assert wrapped.segments[0].offset_seconds == 0
    assert wrapped.segments[0].curve is primitive
    assert as_time_curve(wrapped) is wrapped


@pytest.mark.parametrize("percentage,interval", [(-1.0, 10), (101.0, 10), (5.0, 0)])
def test_transition_fee_validation(percentage, interval) -> None:
    with pytest.raises(ConfigValidationError):
        TransitionFee(percentage=percentage, interval=interval)
