"""GraphQL types for the bonding curve quote and routing API."""

from __future__ import annotations

from typing import Optional

import strawberry


# --- Input types (request payloads) ---


@strawberry.input
class ExponentialCurveInput:
    """Exponential curve: price(S) = c * S^(pow/frac) + b. c and b cannot both be positive."""

    c: float = 1.0
    b: float = 0.0
    pow: int = 1
    frac: int = 1


@strawberry.input
class TransitionFeeInput:
    """Fee (percent) charged right after a segment switch, decaying over `interval` seconds."""

    percentage: float
    interval: int


@strawberry.input
class CurveSegmentInput:
    """One time-curve segment, active from `offset_seconds` after go-live."""

    offset_seconds: int
    curve: ExponentialCurveInput
    buy_transition_fee: Optional[TransitionFeeInput] = None
    sell_transition_fee: Optional[TransitionFeeInput] = None


@strawberry.input
class RoyaltiesInput:
    """Royalty percentages (0-100)."""

    buy_base: float = 0.0
    buy_target: float = 0.0
    sell_base: float = 0.0
    sell_target: float = 0.0


@strawberry.input
class BondingNodeInput:
    """
    Snapshot of one bonding curve. Reserve and supply are UI amounts.

    Give either `curve` (a single exponential curve) or `time_curve` (segments).
    """

    address: str
    base_mint: str
    target_mint: str
    reserve: float
    supply: float
    curve: Optional[ExponentialCurveInput] = None
    time_curve: Optional[list[CurveSegmentInput]] = None
    base_decimals: int = 9
    target_decimals: int = 9
    royalties: Optional[RoyaltiesInput] = None
    go_live_unix_time: int = 0
    freeze_buy_unix_time: Optional[int] = None
    buy_frozen: bool = False
    sell_frozen: bool = False
    index: int = 0
    mint_cap: Optional[float] = None
    purchase_cap: Optional[float] = None


# --- Output types (response payloads) ---
# Raw amounts are strings: they routinely exceed GraphQL's 32-bit Int.


@strawberry.type
class BuyQuoteResult:
    """Buy quote: amount and bound are UI units; root estimates are candidate new supplies."""

    amount: float
    bound: float
    expected: float
    is_base_amount: bool
    root_estimates: list[float]
    raw_amount: str
    raw_bound: str


@strawberry.type
class SellQuoteResult:
    """Sell quote: expected base reclaimed and the minimum accepted after slippage."""

    target_amount: float
    base_amount: float
    minimum_bound: float
    root_estimates: list[float]
    raw_target_amount: str
    raw_minimum_bound: str


@strawberry.type
class HierarchyNode:
    address: str
    base_mint: str
    target_mint: str
    current_price: float


@strawberry.type
class HierarchyResult:
    """Chain of canonical curves, base-most first."""

    nodes: list[HierarchyNode]
    mints: list[str]
    tip_price: float


@strawberry.type
class SwapEstimate:
    """Theoretical swap output (each link applies its own royalties)."""

    base_mint: str
    target_mint: str
    is_buy: bool
    hops: int
    target_amount: float
    path: list[str]
