"""GraphQL schema: bonding curve quotes, hierarchies and swap estimates."""

from typing import Optional

import strawberry

from app.services import build_hierarchy, compute_buy, compute_sell, estimate_swap
from app.types import (
    BondingNodeInput,
    BuyQuoteResult,
    HierarchyResult,
    SellQuoteResult,
    SwapEstimate,
)

API_VERSION = "0.1.0"


@strawberry.type
class Query:
    @strawberry.field
    def hello(self, name: str = "World") -> str:
        return f"Hello {name} from Bonding API!"

    @strawberry.field
    def version(self) -> str:
        return API_VERSION

    @strawberry.field
    def compute_buy(
        self,
        node: BondingNodeInput,
        slippage: float,
        unix_time: int = 0,
        desired_target_amount: Optional[float] = None,
        base_amount: Optional[float] = None,
    ) -> BuyQuoteResult:
        """Quote a buy by desired target amount or by base amount (exactly one)."""
        return compute_buy(
            node=node,
            unix_time=unix_time,
            slippage=slippage,
            desired_target_amount=desired_target_amount,
            base_amount=base_amount,
        )

    @strawberry.field
    def compute_sell(
        self,
        node: BondingNodeInput,
        target_amount: float,
        slippage: float,
        unix_time: int = 0,
    ) -> SellQuoteResult:
        """Quote selling target tokens back to the curve."""
        return compute_sell(
            node=node, unix_time=unix_time, target_amount=target_amount, slippage=slippage
        )

    @strawberry.field
    def build_hierarchy(
        self,
        nodes: list[BondingNodeInput],
        node_key: str,
        stop_at_mint: Optional[str] = None,
        unix_time: int = 0,
    ) -> HierarchyResult:
        """Resolve the chain of canonical curves from `nodeKey` down to its root base."""
        return build_hierarchy(
            nodes=nodes, node_key=node_key, unix_time=unix_time, stop_at_mint=stop_at_mint
        )

    @strawberry.field
    def estimate_swap(
        self,
        nodes: list[BondingNodeInput],
        base_mint: str,
        target_mint: str,
        base_amount: float,
        unix_time: int = 0,
    ) -> SwapEstimate:
        """Theoretical swap output along the hierarchy connecting both mints."""
        return estimate_swap(
            nodes=nodes,
            base_mint=base_mint,
            target_mint=target_mint,
            base_amount=base_amount,
            unix_time=unix_time,
        )


schema = strawberry.Schema(query=Query)
