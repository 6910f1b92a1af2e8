"""Client-side types for the Bonding GraphQL API (mirror API contracts)."""

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class ExponentialCurveInput:
    """Exponential curve: price(S) = c * S^(pow/frac) + b."""

    c: float = 1.0
    b: float = 0.0
    pow: int = 1
    frac: int = 1


@dataclass
class TransitionFeeInput:
    percentage: float
    interval: int


@dataclass
class CurveSegmentInput:
    """One time-curve segment, active from `offset_seconds` after go-live."""

    offset_seconds: int
    curve: ExponentialCurveInput
    buy_transition_fee: Optional[TransitionFeeInput] = None
    sell_transition_fee: Optional[TransitionFeeInput] = None


@dataclass
class RoyaltiesInput:
    """Royalty percentages (0-100)."""

    buy_base: float = 0.0
    buy_target: float = 0.0
    sell_base: float = 0.0
    sell_target: float = 0.0


@dataclass
class BondingNodeInput:
    """Snapshot of one bonding curve (UI amounts). Set either `curve` or `time_curve`."""

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


@dataclass
class BuyQuote:
    """Buy quote. Raw amounts are integers in the smallest unit."""

    amount: float
    bound: float
    expected: float
    is_base_amount: bool
    root_estimates: list[float]
    raw_amount: int
    raw_bound: int


@dataclass
class SellQuote:
    target_amount: float
    base_amount: float
    minimum_bound: float
    root_estimates: list[float]
    raw_target_amount: int
    raw_minimum_bound: int


@dataclass
class HierarchyNode:
    address: str
    base_mint: str
    target_mint: str
    current_price: float


@dataclass
class Hierarchy:
    """Chain of canonical curves, base-most first."""

    nodes: list[HierarchyNode]
    mints: list[str]
    tip_price: float


@dataclass
class SwapEstimate:
    base_mint: str
    target_mint: str
    is_buy: bool
    hops: int
    target_amount: float
    path: list[str] = field(default_factory=list)
