"""
Curve state snapshot and royalty settings.

`CurveContext` is intentionally a *simple* immutable snapshot of what pricing
needs from the ledger:
- reserve held in base storage and circulating target supply (UI units)
- base/target decimals
- go-live and freeze-buy timestamps, plus the time the snapshot is priced at

Pricing functions stay pure (snapshot in -> number out); `with_*` helpers
return new contexts instead of mutating.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from bonding.errors import ConfigValidationError


@dataclass(frozen=True)
class CurveContext:
    """Reserve/supply/time snapshot for one bonding curve."""

    reserve: float
    supply: float
    base_decimals: int = 9
    target_decimals: int = 9
    go_live_unix_time: int = 0
    freeze_buy_unix_time: int | None = None
    unix_time: int = 0

    def __post_init__(self) -> None:
        if self.reserve < 0:
            raise ConfigValidationError("reserve must be >= 0")
        if self.supply < 0:
            raise ConfigValidationError("supply must be >= 0")
        if self.base_decimals < 0 or self.target_decimals < 0:
            raise ConfigValidationError("decimals must be >= 0")

    @property
    def elapsed(self) -> float:
        """Seconds since go-live (negative before go-live)."""
        return float(self.unix_time - self.go_live_unix_time)

    def with_supply(self, supply: float) -> "CurveContext":
        return replace(self, supply=supply)

    def with_reserve(self, reserve: float) -> "CurveContext":
        return replace(self, reserve=reserve)

    def at_time(self, unix_time: int) -> "CurveContext":
        return replace(self, unix_time=unix_time)


@dataclass(frozen=True)
class RoyaltyPercentages:
    """
    Royalty percentages, each a number from 0 to 100.

    Base royalties are taken in base tokens, target royalties in target tokens.
    """

    buy_base: float = 0.0
    buy_target: float = 0.0
    sell_base: float = 0.0
    sell_target: float = 0.0

    def __post_init__(self) -> None:
        for name in ("buy_base", "buy_target", "sell_base", "sell_target"):
            value = getattr(self, name)
            if not 0 <= value <= 100:
                raise ConfigValidationError(f"{name} royalty must be in [0, 100], got {value}")


def as_fraction(percentage: float) -> float:
    """Royalty percentage (0-100) to a fraction (0-1)."""
    if not 0 <= percentage <= 100:
        raise ConfigValidationError(f"royalty percentage must be in [0, 100], got {percentage}")
    return percentage / 100.0
