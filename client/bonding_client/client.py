"""Bonding API client using sgqlc."""

from __future__ import annotations

from typing import Any

from sgqlc.endpoint.http import HTTPEndpoint

from bonding_client.types import (
    BondingNodeInput,
    BuyQuote,
    CurveSegmentInput,
    ExponentialCurveInput,
    Hierarchy,
    HierarchyNode,
    SellQuote,
    SwapEstimate,
    TransitionFeeInput,
)


def _curve_to_vars(c: ExponentialCurveInput) -> dict[str, Any]:
    return {"c": c.c, "b": c.b, "pow": c.pow, "frac": c.frac}


def _fee_to_vars(f: TransitionFeeInput | None) -> dict[str, Any] | None:
    if f is None:
        return None
    return {"percentage": f.percentage, "interval": f.interval}


def _segment_to_vars(s: CurveSegmentInput) -> dict[str, Any]:
    """Serialize CurveSegmentInput to GraphQL variables (camelCase)."""
    result: dict[str, Any] = {
        "offsetSeconds": s.offset_seconds,
        "curve": _curve_to_vars(s.curve),
    }
    if s.buy_transition_fee is not None:
        result["buyTransitionFee"] = _fee_to_vars(s.buy_transition_fee)
    if s.sell_transition_fee is not None:
        result["sellTransitionFee"] = _fee_to_vars(s.sell_transition_fee)
    return result


def _node_to_vars(n: BondingNodeInput) -> dict[str, Any]:
    """Serialize BondingNodeInput to GraphQL variables (camelCase); unset optionals are omitted."""
    result: dict[str, Any] = {
        "address": n.address,
        "baseMint": n.base_mint,
        "targetMint": n.target_mint,
        "reserve": n.reserve,
        "supply": n.supply,
        "baseDecimals": n.base_decimals,
        "targetDecimals": n.target_decimals,
        "goLiveUnixTime": n.go_live_unix_time,
        "buyFrozen": n.buy_frozen,
        "sellFrozen": n.sell_frozen,
        "index": n.index,
    }
    if n.curve is not None:
        result["curve"] = _curve_to_vars(n.curve)
    if n.time_curve is not None:
        result["timeCurve"] = [_segment_to_vars(s) for s in n.time_curve]
    if n.royalties is not None:
        r = n.royalties
        result["royalties"] = {
            "buyBase": r.buy_base,
            "buyTarget": r.buy_target,
            "sellBase": r.sell_base,
            "sellTarget": r.sell_target,
        }
    if n.freeze_buy_unix_time is not None:
        result["freezeBuyUnixTime"] = n.freeze_buy_unix_time
    if n.mint_cap is not None:
        result["mintCap"] = n.mint_cap
    if n.purchase_cap is not None:
        result["purchaseCap"] = n.purchase_cap
    return result


class BondingClient:
    """
    Client for the Bonding GraphQL API.
    Use from notebooks or scripts; configurable base URL for local vs Docker.
    """

    def __init__(self, url: str = "http://api:8000/graphql", timeout: float = 30.0) -> None:
        self._url = url.rstrip("/")
        self._timeout = timeout
        self._endpoint = HTTPEndpoint(self._url, timeout=timeout)

    def _request(self, query: str, variables: dict | None = None) -> dict:
        result = self._endpoint(query, variables or {})
        if "errors" in result and result["errors"]:
            raise RuntimeError(f"GraphQL errors: {result['errors']}")
        return result.get("data", {})

    def hello(self, name: str = "World") -> str:
        """Call the hello query."""
        query = """
            query Hello($name: String!) {
                hello(name: $name)
            }
        """
        data = self._request(query, {"name": name})
        return data["hello"]

    def version(self) -> str:
        """Call the version query."""
        query = """
            query Version {
                version
            }
        """
        data = self._request(query)
        return data["version"]

    def compute_buy(
        self,
        node: BondingNodeInput,
        slippage: float,
        desired_target_amount: float | None = None,
        base_amount: float | None = None,
        unix_time: int = 0,
    ) -> BuyQuote:
        """Quote a buy by desired target amount or by base amount (exactly one)."""
        query = """
            query ComputeBuy(
                $node: BondingNodeInput!,
                $slippage: Float!,
                $unixTime: Int!,
                $desiredTargetAmount: Float,
                $baseAmount: Float
            ) {
                computeBuy(
                    node: $node,
                    slippage: $slippage,
                    unixTime: $unixTime,
                    desiredTargetAmount: $desiredTargetAmount,
                    baseAmount: $baseAmount
                ) {
                    amount
                    bound
                    expected
                    isBaseAmount
                    rootEstimates
                    rawAmount
                    rawBound
                }
            }
        """
        variables: dict[str, Any] = {
            "node": _node_to_vars(node),
            "slippage": slippage,
            "unixTime": unix_time,
        }
        if desired_target_amount is not None:
            variables["desiredTargetAmount"] = desired_target_amount
        if base_amount is not None:
            variables["baseAmount"] = base_amount
        raw = self._request(query, variables)["computeBuy"]
        return BuyQuote(
            amount=raw["amount"],
            bound=raw["bound"],
            expected=raw["expected"],
            is_base_amount=raw["isBaseAmount"],
            root_estimates=list(raw["rootEstimates"]),
            raw_amount=int(raw["rawAmount"]),
            raw_bound=int(raw["rawBound"]),
        )

    def compute_sell(
        self,
        node: BondingNodeInput,
        target_amount: float,
        slippage: float,
        unix_time: int = 0,
    ) -> SellQuote:
        """Quote selling target tokens back to the curve."""
        query = """
            query ComputeSell(
                $node: BondingNodeInput!,
                $targetAmount: Float!,
                $slippage: Float!,
                $unixTime: Int!
            ) {
                computeSell(
                    node: $node,
                    targetAmount: $targetAmount,
                    slippage: $slippage,
                    unixTime: $unixTime
                ) {
                    targetAmount
                    baseAmount
                    minimumBound
                    rootEstimates
                    rawTargetAmount
                    rawMinimumBound
                }
            }
        """
        variables: dict[str, Any] = {
            "node": _node_to_vars(node),
            "targetAmount": target_amount,
            "slippage": slippage,
            "unixTime": unix_time,
        }
        raw = self._request(query, variables)["computeSell"]
        return SellQuote(
            target_amount=raw["targetAmount"],
            base_amount=raw["baseAmount"],
            minimum_bound=raw["minimumBound"],
            root_estimates=list(raw["rootEstimates"]),
            raw_target_amount=int(raw["rawTargetAmount"]),
            raw_minimum_bound=int(raw["rawMinimumBound"]),
        )

    def build_hierarchy(
        self,
        nodes: list[BondingNodeInput],
        node_key: str,
        stop_at_mint: str | None = None,
        unix_time: int = 0,
    ) -> Hierarchy:
        """Resolve the chain of canonical curves from `node_key` down to its root base."""
        query = """
            query BuildHierarchy(
                $nodes: [BondingNodeInput!]!,
                $nodeKey: String!,
                $stopAtMint: String,
                $unixTime: Int!
            ) {
                buildHierarchy(
                    nodes: $nodes,
                    nodeKey: $nodeKey,
                    stopAtMint: $stopAtMint,
                    unixTime: $unixTime
                ) {
                    mints
                    tipPrice
                    nodes {
                        address
                        baseMint
                        targetMint
                        currentPrice
                    }
                }
            }
        """
        variables: dict[str, Any] = {
            "nodes": [_node_to_vars(n) for n in nodes],
            "nodeKey": node_key,
            "unixTime": unix_time,
        }
        if stop_at_mint is not None:
            variables["stopAtMint"] = stop_at_mint
        raw = self._request(query, variables)["buildHierarchy"]
        return Hierarchy(
            nodes=[
                HierarchyNode(
                    address=n["address"],
                    base_mint=n["baseMint"],
                    target_mint=n["targetMint"],
                    current_price=n["currentPrice"],
                )
                for n in raw["nodes"]
            ],
            mints=list(raw["mints"]),
            tip_price=raw["tipPrice"],
        )

    def estimate_swap(
        self,
        nodes: list[BondingNodeInput],
        base_mint: str,
        target_mint: str,
        base_amount: float,
        unix_time: int = 0,
    ) -> SwapEstimate:
        """Theoretical swap output along the hierarchy connecting both mints."""
        query = """
            query EstimateSwap(
                $nodes: [BondingNodeInput!]!,
                $baseMint: String!,
                $targetMint: String!,
                $baseAmount: Float!,
                $unixTime: Int!
            ) {
                estimateSwap(
                    nodes: $nodes,
                    baseMint: $baseMint,
                    targetMint: $targetMint,
                    baseAmount: $baseAmount,
                    unixTime: $unixTime
                ) {
                    baseMint
                    targetMint
                    isBuy
                    hops
                    targetAmount
                    path
                }
            }
        """
        variables: dict[str, Any] = {
            "nodes": [_node_to_vars(n) for n in nodes],
            "baseMint": base_mint,
            "targetMint": target_mint,
            "baseAmount": base_amount,
            "unixTime": unix_time,
        }
        raw = self._request(query, variables)["estimateSwap"]
        return SwapEstimate(
            base_mint=raw["baseMint"],
            target_mint=raw["targetMint"],
            is_buy=raw["isBuy"],
            hops=raw["hops"],
            target_amount=raw["targetAmount"],
            path=list(raw["path"]),
        )
