"""
Bonding curve configurations.

Curves are **data only**; evaluation lives in `bonding.evaluators` and is
dispatched by `bonding.model.CurveModel`.

- `ExponentialCurveConfig` is price(S) = c * S^(pow/frac) + b. Supply S is in
  UI units (decimals applied), price is base tokens per target token.
- `TimeCurveConfig` switches between primitive curves at fixed offsets (seconds)
  from the go-live time, optionally charging a transition fee right after a switch.

A primitive curve on its own behaves like a time curve with a single segment at
offset 0 (see `as_time_curve`).
"""

from __future__ import annotations

from dataclasses import dataclass
from fractions import Fraction
from typing import TypeAlias

from bonding.errors import ConfigValidationError


@dataclass(frozen=True)
class ExponentialCurveConfig:
    """
    price(S) = c * S^(pow/frac) + b.

    `c` and `b` cannot both be positive: the inverse of the integral (base amount
    to target amount) has no closed form for that shape.
    """

    c: float = 1.0
    b: float = 0.0
    pow: int = 1
    frac: int = 1

    def __post_init__(self) -> None:
        if self.c < 0 or self.b < 0:
            raise ConfigValidationError("c and b must be >= 0")
        if self.c > 0 and self.b > 0:
            raise ConfigValidationError(
                "Unsupported: cannot define an exponential curve with both c and b; "
                "the base to target inversion becomes intractable"
            )
        if self.frac <= 0:
            raise ConfigValidationError("frac must be positive")
        if self.pow < 0:
            raise ConfigValidationError("pow must be >= 0")

    @property
    def k(self) -> float:
        """Exponent pow/frac."""
        return self.pow / self.frac

    @property
    def exponent(self) -> Fraction:
        """Exponent as a reduced fraction."""
        return Fraction(self.pow, self.frac)


PrimitiveCurveConfig: TypeAlias = ExponentialCurveConfig


@dataclass(frozen=True)
class TransitionFee:
    """Fee charged right after a segment becomes active: `percentage` (0-100) decaying over `interval` seconds."""

    percentage: float
    interval: int

    def __post_init__(self) -> None:
        if not 0 <= self.percentage <= 100:
            raise ConfigValidationError("transition fee percentage must be in [0, 100]")
        if self.interval <= 0:
            raise ConfigValidationError("transition fee interval must be positive")


@dataclass(frozen=True)
class TimeCurveSegment:
    offset_seconds: int
    curve: PrimitiveCurveConfig
    buy_transition_fee: TransitionFee | None = None
    sell_transition_fee: TransitionFee | None = None


@dataclass(frozen=True)
class TimeCurveConfig:
    """
    Ordered segments switching curve shape at time offsets from go-live.

    Offsets are seconds; the first must be 0 and they must be strictly increasing.
    """

    segments: tuple[TimeCurveSegment, ...]

    def __post_init__(self) -> None:
        if not self.segments:
            raise ConfigValidationError("time curve needs at least one segment")
        if self.segments[0].offset_seconds != 0:
            raise ConfigValidationError("First time offset must be 0")
        for i in range(1, len(self.segments)):
            if self.segments[i].offset_seconds <= self.segments[i - 1].offset_seconds:
                raise ConfigValidationError("time offsets must be strictly increasing")

    @classmethod
    def single(cls, curve: PrimitiveCurveConfig) -> "TimeCurveConfig":
        return cls(segments=(TimeCurveSegment(offset_seconds=0, curve=curve),))

    def add_curve(
        self,
        offset_seconds: int,
        curve: PrimitiveCurveConfig,
        buy_transition_fee: TransitionFee | None = None,
        sell_transition_fee: TransitionFee | None = None,
    ) -> "TimeCurveConfig":
        """Return a new config with one more segment appended."""
        segment = TimeCurveSegment(
            offset_seconds=offset_seconds,
            curve=curve,
            buy_transition_fee=buy_transition_fee,
            sell_transition_fee=sell_transition_fee,
        )
        return TimeCurveConfig(segments=self.segments + (segment,))

    def active_index(self, elapsed_seconds: float) -> int:
        """Index of the last segment whose offset is <= elapsed time (clamped at 0)."""
        elapsed = max(elapsed_seconds, 0.0)
        index = 0
        for i, segment in enumerate(self.segments):
            if segment.offset_seconds <= elapsed:
                index = i
            else:
                break
        return index

    def active_segment(self, elapsed_seconds: float) -> TimeCurveSegment:
        return self.segments[self.active_index(elapsed_seconds)]


CurveConfig: TypeAlias = PrimitiveCurveConfig | TimeCurveConfig


def as_time_curve(config: CurveConfig) -> TimeCurveConfig:
    """Normalize any curve config into a time curve."""
    if isinstance(config, TimeCurveConfig):
        return config
    return TimeCurveConfig.single(config)
