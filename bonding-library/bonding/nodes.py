"""Bonding curve node: an immutable, request-scoped snapshot of one token bonding."""

from __future__ import annotations

from dataclasses import dataclass, field

from bonding.context import CurveContext, RoyaltyPercentages
from bonding.curves import CurveConfig
from bonding.engine import PricingEngine
from bonding.interfaces import TransitionFeePolicy
from bonding.model import CurveModel


@dataclass(frozen=True)
class BondingCurveNode:
    """
    One bonding curve linking `base_mint` (reserve asset) to `target_mint` (minted asset).

    - `reserve` and `supply` are UI amounts read when the snapshot was taken.
    - `index` 0 is the canonical curve for `target_mint`, the one allowed to mint it;
      other indices are marketplace curves and never join a hierarchy.
    - `mint_cap` bounds total supply, `purchase_cap` bounds a single buy (UI units).
    """

    address: str
    base_mint: str
    target_mint: str
    curve: CurveConfig
    reserve: float
    supply: float
    base_decimals: int = 9
    target_decimals: int = 9
    royalties: RoyaltyPercentages = field(default_factory=RoyaltyPercentages)
    go_live_unix_time: int = 0
    freeze_buy_unix_time: int | None = None
    buy_frozen: bool = False
    sell_frozen: bool = False
    index: int = 0
    curve_address: str | None = None
    base_storage: str | None = None
    mint_cap: float | None = None
    purchase_cap: float | None = None

    @property
    def is_canonical(self) -> bool:
        return self.index == 0

    def context(self, unix_time: int) -> CurveContext:
        return CurveContext(
            reserve=self.reserve,
            supply=self.supply,
            base_decimals=self.base_decimals,
            target_decimals=self.target_decimals,
            go_live_unix_time=self.go_live_unix_time,
            freeze_buy_unix_time=self.freeze_buy_unix_time,
            unix_time=unix_time,
        )

    def engine(
        self,
        unix_time: int,
        model: CurveModel | None = None,
        fee_policy: TransitionFeePolicy | None = None,
    ) -> PricingEngine:
        """Pricing engine for this node at `unix_time`."""
        return PricingEngine(self.curve, self.context(unix_time), model=model, fee_policy=fee_policy)

    def current_price(self, unix_time: int, model: CurveModel | None = None) -> float:
        """Marginal base cost of one net target token, buy royalties included."""
        return self.engine(unix_time, model=model).current(
            self.royalties.buy_base, self.royalties.buy_target
        )
