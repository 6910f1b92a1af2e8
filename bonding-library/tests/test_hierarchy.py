"""Tests for hierarchy resolution and composed BondingPricing."""

import asyncio

import pytest
from solders.pubkey import Pubkey

from bonding.config import NATIVE_MINT, ProtocolConfig
from bonding.context import RoyaltyPercentages
from bonding.curves import ExponentialCurveConfig
from bonding.errors import ConfigValidationError, NoRouteFound
from bonding.hierarchy import Hierarchy, build_hierarchy
from bonding.nodes import BondingCurveNode
from bonding.pricing import BondingPricing
from bonding.simulator import LocalLedger

NOW = 5_000
LINEAR = ExponentialCurveConfig(c=1.0, pow=1, frac=1)


def chain_ledger(config: ProtocolConfig | None = None):
    """SOL <- X <- Y, plus a marketplace curve for Y at index 1."""
    ledger = LocalLedger(config=config, clock=lambda: NOW)
    sol = ledger.config.wrapped_native_mint
    x, y = ledger.create_mint(), ledger.create_mint()
    x_key = ledger.create_token_bonding(sol, x, LINEAR)
    y_key = ledger.create_token_bonding(x, y, LINEAR)
    ledger.create_token_bonding(sol, y, LINEAR, index=1)
    return ledger, sol, x, y, x_key, y_key


def node(address: str, base: str, target: str, index: int = 0, supply: float = 0.0) -> BondingCurveNode:
    return BondingCurveNode(
        address=address, base_mint=base, target_mint=target, curve=LINEAR,
        reserve=0.0, supply=supply, index=index,
    )


def test_build_walks_canonical_parents_base_most_first() -> None:
    ledger, sol, x, y, x_key, y_key = chain_ledger()
    hierarchy = asyncio.run(build_hierarchy(ledger.repository, y_key))
    assert [n.address for n in hierarchy.to_array()] == [x_key, y_key]
    assert hierarchy.mints == [sol, x, y]
    assert hierarchy.root.address == x_key
    assert hierarchy.tip.address == y_key
    assert hierarchy.parent(hierarchy.tip).address == x_key
    assert hierarchy.child(hierarchy.root).address == y_key
    assert hierarchy.parent(hierarchy.root) is None
    assert hierarchy.node_for(x).address == x_key


def test_build_stops_at_mint() -> None:
    ledger, sol, x, y, x_key, y_key = chain_ledger()
    hierarchy = asyncio.run(build_hierarchy(ledger.repository, y_key, stop_at_mint=x))
    assert len(hierarchy) == 1
    assert hierarchy.mints == [x, y]


def test_native_mint_stop_is_canonicalized() -> None:
    wrapped = str(Pubkey.new_unique())
    ledger, sol, x, y, x_key, y_key = chain_ledger(ProtocolConfig(wrapped_native_mint=wrapped))
    assert sol == wrapped
    hierarchy = asyncio.run(build_hierarchy(ledger.repository, y_key, stop_at_mint=NATIVE_MINT))
    assert hierarchy.mints == [wrapped, x, y]


def test_missing_start_returns_none() -> None:
    ledger, *_ = chain_ledger()
    missing = ledger.repository.bonding_key(ledger.create_mint())
    assert asyncio.run(build_hierarchy(ledger.repository, missing)) is None


def test_contains_is_symmetric_and_chain_bound() -> None:
    ledger, sol, x, y, x_key, y_key = chain_ledger()
    hierarchy = asyncio.run(build_hierarchy(ledger.repository, y_key))
    assert hierarchy.contains(sol, y)
    assert hierarchy.contains(y, sol)
    assert hierarchy.contains(x, y)
    assert not hierarchy.contains(sol, "Unrelated")


def test_between_returns_connecting_subchain() -> None:
    ledger, sol, x, y, x_key, y_key = chain_ledger()
    hierarchy = asyncio.run(build_hierarchy(ledger.repository, y_key))
    assert [n.address for n in hierarchy.between(x, y)] == [y_key]
    assert [n.address for n in hierarchy.between(y, sol)] == [x_key, y_key]
    with pytest.raises(NoRouteFound):
        hierarchy.between(sol, "Unrelated")


def test_from_snapshots_ignores_marketplace_curves() -> None:
    nodes = [
        node("x", "sol", "X"),
        node("y", "X", "Y"),
        node("y-market", "sol", "Y", index=1),
    ]
    hierarchy = Hierarchy.from_snapshots(nodes, "y")
    assert [n.address for n in hierarchy] == ["x", "y"]
    market = Hierarchy.from_snapshots(nodes, "y-market")
    assert market.mints == ["sol", "Y"]


def test_from_snapshots_detects_cycles() -> None:
    nodes = [node("a", "B", "A"), node("b", "A", "B")]
    with pytest.raises(ConfigValidationError):
        Hierarchy.from_snapshots(nodes, "a")


def test_build_from_repository_detects_cycles() -> None:
    ledger = LocalLedger(clock=lambda: NOW)
    a, b = ledger.create_mint(), ledger.create_mint()
    ledger.create_token_bonding(b, a, LINEAR)
    b_key = ledger.create_token_bonding(a, b, LINEAR)
    with pytest.raises(ConfigValidationError):
        asyncio.run(build_hierarchy(ledger.repository, b_key))


def test_unlinked_nodes_are_rejected() -> None:
    with pytest.raises(ConfigValidationError):
        Hierarchy([node("x", "sol", "X"), node("y", "Z", "Y")])


def test_composed_pricing_multiplies_and_chains() -> None:
    nodes = [
        node("x", "sol", "X", supply=10.0),
        BondingCurveNode(
            address="y", base_mint="X", target_mint="Y", curve=LINEAR, reserve=0.0, supply=3.0,
            royalties=RoyaltyPercentages(buy_base=50.0),
        ),
    ]
    pricing = BondingPricing(Hierarchy(nodes), NOW)
    # X costs 10 SOL, Y costs 3 X / (1 - 50%) = 6 X
    assert abs(pricing.current("X") - 6.0) < 1e-12
    assert abs(pricing.current() - 60.0) < 1e-12

    # 1 Y costs integral over [3, 4] = 3.5 X, doubled by royalty = 7 X; 7 X from supply 10 cost 94.5 SOL
    assert abs(pricing.buy_target_amount(1.0, "X") - 7.0) < 1e-9
    assert abs(pricing.buy_target_amount(1.0) - 94.5) < 1e-9


def test_composed_swap_matches_step_by_step() -> None:
    nodes = [node("x", "sol", "X", supply=10.0), node("y", "X", "Y", supply=3.0)]
    pricing = BondingPricing(Hierarchy(nodes), NOW)
    x_out = nodes[0].engine(NOW).buy_with_base_amount(10.0)
    y_out = nodes[1].engine(NOW).buy_with_base_amount(x_out)
    assert abs(pricing.swap(10.0, "sol", "Y") - y_out) < 1e-9
    assert abs(pricing.buy_with_base_amount(10.0) - y_out) < 1e-9

    # Selling 1 Y reclaims integral over [2, 3] = 2.5 X, then 2.5 X sells on the SOL curve
    x_back = nodes[1].engine(NOW).sell_target_amount(1.0)
    sol_back = nodes[0].engine(NOW).sell_target_amount(x_back)
    assert abs(pricing.swap(1.0, "Y", "sol") - sol_back) < 1e-9
    assert abs(pricing.sell_target_amount(1.0) - sol_back) < 1e-9
