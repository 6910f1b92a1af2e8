"""
Trade quotes: the validated amount, slippage bound and root estimates an
instruction builder needs for one buy or sell.

Raw (integer) amounts round in the trader's favour for bounds: maximum prices
round up and minimum amounts round down, so a quote never rejects itself on
rounding alone.
"""

from __future__ import annotations

from dataclasses import dataclass

from bonding.accounts import to_raw, to_raw_ceil
from bonding.errors import ConfigValidationError, FrozenCurveError, PurchaseCapExceeded
from bonding.interfaces import TransitionFeePolicy
from bonding.model import CurveModel
from bonding.nodes import BondingCurveNode


@dataclass(frozen=True)
class BuyQuote:
    """
    Buy quote.

    With a desired target amount: `amount` is the gross target amount to mint and
    `bound` the maximum base price. With a base amount: `amount` is the base
    amount spent and `bound` the minimum target amount received.
    """

    amount: float
    bound: float
    root_estimates: list[float]
    raw_amount: int
    raw_bound: int
    is_base_amount: bool
    expected: float


@dataclass(frozen=True)
class SellQuote:
    """Sell quote: expected base reclaimed and the minimum accepted after slippage."""

    target_amount: float
    base_amount: float
    minimum_bound: float
    root_estimates: list[float]
    raw_target_amount: int
    raw_minimum_bound: int


def _validate_slippage(slippage: float) -> None:
    if not 0 <= slippage < 1:
        raise ConfigValidationError(f"slippage must be in [0, 1), got {slippage}")


def check_buy_allowed(node: BondingCurveNode, unix_time: int) -> None:
    """Raise FrozenCurveError if buying is disabled on `node` at `unix_time`."""
    if node.buy_frozen:
        raise FrozenCurveError(f"Buy is frozen on bonding curve {node.address}")
    if unix_time < node.go_live_unix_time:
        raise FrozenCurveError(f"Bonding curve {node.address} is not live yet")
    if node.freeze_buy_unix_time is not None and unix_time >= node.freeze_buy_unix_time:
        raise FrozenCurveError(f"Buy window closed on bonding curve {node.address}")


def check_sell_allowed(node: BondingCurveNode, unix_time: int) -> None:
    """Raise FrozenCurveError if selling is disabled on `node` at `unix_time`."""
    if node.sell_frozen:
        raise FrozenCurveError(f"Sell is frozen on bonding curve {node.address}")
    if unix_time < node.go_live_unix_time:
        raise FrozenCurveError(f"Bonding curve {node.address} is not live yet")


def _check_caps(node: BondingCurveNode, gross_target: float) -> None:
    if node.purchase_cap is not None and gross_target > node.purchase_cap:
        raise PurchaseCapExceeded(
            f"buy of {gross_target} exceeds purchase cap {node.purchase_cap}"
        )
    if node.mint_cap is not None and node.supply + gross_target > node.mint_cap:
        raise PurchaseCapExceeded(
            f"buy of {gross_target} would exceed mint cap {node.mint_cap}"
        )


def compute_buy(
    node: BondingCurveNode,
    unix_time: int,
    *,
    slippage: float,
    desired_target_amount: float | None = None,
    base_amount: float | None = None,
    model: CurveModel | None = None,
    fee_policy: TransitionFeePolicy | None = None,
) -> BuyQuote:
    """Quote a buy by desired target amount or by base amount (exactly one)."""
    if (desired_target_amount is None) == (base_amount is None):
        raise ConfigValidationError("Must provide either base amount or desired target amount")
    _validate_slippage(slippage)
    check_buy_allowed(node, unix_time)
    engine = node.engine(unix_time, model=model, fee_policy=fee_policy)
    royalties = node.royalties

    if desired_target_amount is not None:
        gross = engine.gross_target_amount(desired_target_amount, royalties.buy_target)
        _check_caps(node, gross)
        cost = engine.buy_target_amount(
            desired_target_amount, royalties.buy_base, royalties.buy_target
        )
        max_price = cost * (1 + slippage)
        return BuyQuote(
            amount=gross,
            bound=max_price,
            root_estimates=engine.buy_target_amount_root_estimates(
                desired_target_amount, royalties.buy_target
            ),
            raw_amount=to_raw(gross, node.target_decimals),
            raw_bound=to_raw_ceil(max_price, node.base_decimals),
            is_base_amount=False,
            expected=cost,
        )

    assert base_amount is not None
    received = engine.buy_with_base_amount(base_amount, royalties.buy_base, royalties.buy_target)
    if node.purchase_cap is not None or node.mint_cap is not None:
        _check_caps(node, engine.gross_target_amount(received, royalties.buy_target))
    minimum = received * (1 - slippage)
    return BuyQuote(
        amount=base_amount,
        bound=minimum,
        root_estimates=engine.buy_with_base_root_estimates(base_amount, royalties.buy_base),
        raw_amount=to_raw(base_amount, node.base_decimals),
        raw_bound=to_raw(minimum, node.target_decimals),
        is_base_amount=True,
        expected=received,
    )


def compute_sell(
    node: BondingCurveNode,
    unix_time: int,
    target_amount: float,
    *,
    slippage: float,
    model: CurveModel | None = None,
    fee_policy: TransitionFeePolicy | None = None,
) -> SellQuote:
    """Quote selling `target_amount` target tokens back to the curve."""
    _validate_slippage(slippage)
    check_sell_allowed(node, unix_time)
    engine = node.engine(unix_time, model=model, fee_policy=fee_policy)
    royalties = node.royalties
    reclaimed = engine.sell_target_amount(
        target_amount, royalties.sell_base, royalties.sell_target
    )
    minimum = reclaimed * (1 - slippage)
    return SellQuote(
        target_amount=target_amount,
        base_amount=reclaimed,
        minimum_bound=minimum,
        root_estimates=engine.sell_target_amount_root_estimates(
            target_amount, royalties.sell_target
        ),
        raw_target_amount=to_raw(target_amount, node.target_decimals),
        raw_minimum_bound=to_raw(minimum, node.base_decimals),
    )
