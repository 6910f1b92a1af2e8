"""
Protocol-based interfaces for all extension points in the bonding library.

Using typing.Protocol enables structural subtyping: any class that implements
the required methods satisfies the protocol without explicit inheritance.
Curve evaluators and transition-fee rules plug into the pricing side; account
stores, instruction builders and transaction executors are the ledger-facing
collaborators the swap router is handed.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from bonding.accounts import Confirmation, MintInfo, TokenAccountInfo
    from bonding.curves import PrimitiveCurveConfig, TimeCurveSegment
    from bonding.nodes import BondingCurveNode
    from bonding.quotes import BuyQuote, SellQuote


class CurveEvaluator(Protocol):
    """Protocol for evaluating one primitive curve variant.

    Each evaluator handles one variant and is registered with the CurveModel.
    """

    def can_evaluate(self, curve: object) -> bool:
        """Return True if this evaluator handles the given curve variant."""
        ...

    def price(self, curve: PrimitiveCurveConfig, supply: float) -> float:
        """Marginal price at `supply`."""
        ...

    def antiderivative(self, curve: PrimitiveCurveConfig, supply: float) -> float:
        """F(supply) with F(0) = 0; integrals are differences of F."""
        ...

    def supply_roots(self, curve: PrimitiveCurveConfig, rhs: float) -> list[float]:
        """Every real x with F(x) = rhs, ascending."""
        ...


class TransitionFeePolicy(Protocol):
    """Hook deciding the fee fraction charged after a time-curve segment switch."""

    def buy_fee(
        self, segment: TimeCurveSegment, seconds_into_segment: float, segment_index: int
    ) -> float:
        ...

    def sell_fee(
        self, segment: TimeCurveSegment, seconds_into_segment: float, segment_index: int
    ) -> float:
        ...


@runtime_checkable
class AccountStore(Protocol):
    """Read access to ledger accounts."""

    async def fetch(self, address: str) -> bytes | None:
        """Raw account payload, or None if the account does not exist."""
        ...

    async def fetch_mint(self, address: str) -> MintInfo | None:
        ...

    async def fetch_token_account(self, address: str) -> TokenAccountInfo | None:
        ...


class InstructionBuilder(Protocol):
    """Turns a validated quote into executable instructions (opaque to the router)."""

    async def build_buy(
        self, node: BondingCurveNode, quote: BuyQuote, owner: str
    ) -> Sequence[Any]:
        ...

    async def build_sell(
        self, node: BondingCurveNode, quote: SellQuote, owner: str
    ) -> Sequence[Any]:
        ...


class TransactionExecutor(Protocol):
    """Submits one transaction's worth of instructions."""

    async def submit(self, instructions: Sequence[Any]) -> Confirmation:
        ...
