"""Service layer: convert GraphQL inputs to bonding library objects and run quotes/estimates."""

from __future__ import annotations

from typing import Optional

from bonding.config import ProtocolConfig
from bonding.context import RoyaltyPercentages
from bonding.curves import (
    CurveConfig,
    ExponentialCurveConfig,
    TimeCurveConfig,
    TimeCurveSegment,
    TransitionFee,
)
from bonding.errors import NoRouteFound
from bonding.hierarchy import Hierarchy
from bonding.nodes import BondingCurveNode
from bonding.pricing import BondingPricing
from bonding.quotes import compute_buy as quote_buy
from bonding.quotes import compute_sell as quote_sell

from app.types import (
    BondingNodeInput,
    BuyQuoteResult,
    CurveSegmentInput,
    ExponentialCurveInput,
    HierarchyNode,
    HierarchyResult,
    SellQuoteResult,
    SwapEstimate,
    TransitionFeeInput,
)

_config = ProtocolConfig.from_env()


def _exponential_from_input(c: ExponentialCurveInput) -> ExponentialCurveConfig:
    return ExponentialCurveConfig(c=c.c, b=c.b, pow=c.pow, frac=c.frac)


def _fee_from_input(f: Optional[TransitionFeeInput]) -> Optional[TransitionFee]:
    if f is None:
        return None
    return TransitionFee(percentage=f.percentage, interval=f.interval)


def _segment_from_input(s: CurveSegmentInput) -> TimeCurveSegment:
    return TimeCurveSegment(
        offset_seconds=s.offset_seconds,
        curve=_exponential_from_input(s.curve),
        buy_transition_fee=_fee_from_input(s.buy_transition_fee),
        sell_transition_fee=_fee_from_input(s.sell_transition_fee),
    )


def curve_from_input(n: BondingNodeInput) -> CurveConfig:
    """Curve config from a node input: exactly one of curve / time_curve."""
    if (n.curve is None) == (n.time_curve is None):
        raise ValueError(f"node {n.address}: provide exactly one of curve or timeCurve")
    if n.curve is not None:
        return _exponential_from_input(n.curve)
    return TimeCurveConfig(segments=tuple(_segment_from_input(s) for s in n.time_curve))


def node_from_input(n: BondingNodeInput) -> BondingCurveNode:
    """Build BondingCurveNode from GraphQL BondingNodeInput."""
    r = n.royalties
    royalties = (
        RoyaltyPercentages(
            buy_base=r.buy_base, buy_target=r.buy_target, sell_base=r.sell_base, sell_target=r.sell_target
        )
        if r is not None
        else RoyaltyPercentages()
    )
    return BondingCurveNode(
        address=n.address,
        base_mint=_config.canonical_mint(n.base_mint),
        target_mint=n.target_mint,
        curve=curve_from_input(n),
        reserve=n.reserve,
        supply=n.supply,
        base_decimals=n.base_decimals,
        target_decimals=n.target_decimals,
        royalties=royalties,
        go_live_unix_time=n.go_live_unix_time,
        freeze_buy_unix_time=n.freeze_buy_unix_time,
        buy_frozen=n.buy_frozen,
        sell_frozen=n.sell_frozen,
        index=n.index,
        mint_cap=n.mint_cap,
        purchase_cap=n.purchase_cap,
    )


def compute_buy(
    node: BondingNodeInput,
    unix_time: int,
    slippage: float,
    desired_target_amount: Optional[float] = None,
    base_amount: Optional[float] = None,
) -> BuyQuoteResult:
    """Quote a buy by desired target amount or by base amount."""
    quote = quote_buy(
        node_from_input(node),
        unix_time,
        slippage=slippage,
        desired_target_amount=desired_target_amount,
        base_amount=base_amount,
    )
    return BuyQuoteResult(
        amount=quote.amount,
        bound=quote.bound,
        expected=quote.expected,
        is_base_amount=quote.is_base_amount,
        root_estimates=list(quote.root_estimates),
        raw_amount=str(quote.raw_amount),
        raw_bound=str(quote.raw_bound),
    )


def compute_sell(
    node: BondingNodeInput, unix_time: int, target_amount: float, slippage: float
) -> SellQuoteResult:
    """Quote selling target tokens back to the curve."""
    quote = quote_sell(node_from_input(node), unix_time, target_amount, slippage=slippage)
    return SellQuoteResult(
        target_amount=quote.target_amount,
        base_amount=quote.base_amount,
        minimum_bound=quote.minimum_bound,
        root_estimates=list(quote.root_estimates),
        raw_target_amount=str(quote.raw_target_amount),
        raw_minimum_bound=str(quote.raw_minimum_bound),
    )


def _nodes_from_input(nodes: list[BondingNodeInput]) -> list[BondingCurveNode]:
    if not nodes:
        raise ValueError("nodes must not be empty")
    return [node_from_input(n) for n in nodes]


def build_hierarchy(
    nodes: list[BondingNodeInput],
    node_key: str,
    unix_time: int,
    stop_at_mint: Optional[str] = None,
) -> HierarchyResult:
    """Resolve the hierarchy starting at `node_key` over the given snapshots."""
    hierarchy = Hierarchy.from_snapshots(
        _nodes_from_input(nodes), node_key, stop_at_mint=stop_at_mint, config=_config
    )
    pricing = BondingPricing(hierarchy, unix_time)
    return HierarchyResult(
        nodes=[
            HierarchyNode(
                address=n.address,
                base_mint=n.base_mint,
                target_mint=n.target_mint,
                current_price=n.current_price(unix_time),
            )
            for n in hierarchy.to_array()
        ],
        mints=hierarchy.mints,
        tip_price=pricing.current(),
    )


def _find_route(
    snapshots: list[BondingCurveNode], base_mint: str, target_mint: str
) -> tuple[Hierarchy, bool]:
    """Same route selection as the swap router, over in-memory snapshots."""
    canonical = {n.target_mint: n for n in snapshots if n.is_canonical}
    for start_mint, stop_mint in ((target_mint, base_mint), (base_mint, target_mint)):
        start = canonical.get(start_mint)
        if start is None:
            continue
        hierarchy = Hierarchy.from_snapshots(snapshots, start.address, stop_mint, config=_config)
        if hierarchy.contains(base_mint, target_mint):
            return hierarchy, hierarchy.tip.target_mint == target_mint
    raise NoRouteFound(f"No bonding hierarchy connects {base_mint} and {target_mint}")


def estimate_swap(
    nodes: list[BondingNodeInput],
    base_mint: str,
    target_mint: str,
    base_amount: float,
    unix_time: int,
) -> SwapEstimate:
    """Theoretical output of swapping `base_amount` of `base_mint` into `target_mint`."""
    if base_amount < 0:
        raise ValueError("baseAmount must be >= 0")
    base_mint = _config.canonical_mint(base_mint)
    target_mint = _config.canonical_mint(target_mint)
    hierarchy, is_buy = _find_route(_nodes_from_input(nodes), base_mint, target_mint)
    chain = hierarchy.between(base_mint, target_mint)
    path = [n.address for n in (chain if is_buy else reversed(chain))]
    amount = BondingPricing(hierarchy, unix_time).swap(base_amount, base_mint, target_mint)
    return SwapEstimate(
        base_mint=base_mint,
        target_mint=target_mint,
        is_buy=is_buy,
        hops=len(path),
        target_amount=amount,
        path=path,
    )
