"""Demo: two chained curves on a local ledger, quotes, composed pricing and a SOL -> X -> Y swap."""

import asyncio

from bonding.config import configure_logging
from bonding.context import RoyaltyPercentages
from bonding.curves import ExponentialCurveConfig
from bonding.hierarchy import build_hierarchy
from bonding.pricing import BondingPricing
from bonding.quotes import compute_buy, compute_sell
from bonding.retry import RetryPolicy
from bonding.router import SwapRouter
from bonding.simulator import LocalLedger

NOW = 1_700_000_000


async def run() -> None:
    ledger = LocalLedger(clock=lambda: NOW)
    sol = ledger.config.wrapped_native_mint

    # X is bonded to SOL on a linear curve, Y to X on a square-root curve with royalties
    x_mint = ledger.create_mint(decimals=9)
    y_mint = ledger.create_mint(decimals=6)
    ledger.create_token_bonding(sol, x_mint, ExponentialCurveConfig(c=0.01, pow=1, frac=1))
    y_key = ledger.create_token_bonding(
        x_mint,
        y_mint,
        ExponentialCurveConfig(c=1.0, pow=1, frac=2),
        royalties=RoyaltyPercentages(buy_target=5.0, sell_base=5.0),
    )
    owner = ledger.create_wallet(lamports=1_000 * 10**9)

    # 1) Hierarchy and composed prices
    hierarchy = await build_hierarchy(ledger.repository, y_key)
    assert hierarchy is not None
    pricing = BondingPricing(hierarchy, NOW)
    print(f"Hierarchy: {hierarchy!r}")
    print(f"Y price in X:   {pricing.current(x_mint):.6f}")
    print(f"Y price in SOL: {pricing.current():.6f}")
    print(f"Estimated Y for 100 SOL: {pricing.swap(100.0, sol, y_mint):.6f}")

    # 2) Single-curve quotes
    y_node = hierarchy.tip
    buy = compute_buy(y_node, NOW, slippage=0.01, desired_target_amount=10.0)
    print(f"Buy 10 Y: max price {buy.bound:.6f} X, root estimates {buy.root_estimates}")

    # 3) Execute the swap against the local ledger
    router = SwapRouter(
        ledger.repository,
        builder=ledger,
        executor=ledger,
        retry_policy=RetryPolicy(max_attempts=4, delay=0.0),
        clock=lambda: NOW,
    )
    result = await router.swap(sol, y_mint, 100.0, slippage=0.05, owner=owner)
    print(f"Swap {result.state.value}: received {result.target_amount} Y in {len(result.hops)} hops")
    for hop in result.hops:
        print(f"  {hop.node_address}: {hop.input_amount} -> {hop.output_amount} ({hop.signature})")

    # 4) Quote selling the proceeds back
    y_node = await ledger.repository.get_node(y_key)
    assert y_node is not None
    sell = compute_sell(y_node, NOW, result.target_amount, slippage=0.01)
    print(f"Sell {result.target_amount} Y: ~{sell.base_amount:.6f} X (min {sell.minimum_bound:.6f})")


def main() -> None:
    configure_logging()
    asyncio.run(run())


if __name__ == "__main__":
    main()
