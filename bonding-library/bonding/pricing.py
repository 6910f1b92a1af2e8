"""
Composed, read-only pricing over a bonding hierarchy.

Every link applies its own royalties and transition fees. These numbers are
estimates for display and planning; swaps are driven by observed balances.
"""

from __future__ import annotations

from bonding.hierarchy import Hierarchy
from bonding.interfaces import TransitionFeePolicy
from bonding.model import CurveModel
from bonding.nodes import BondingCurveNode


class BondingPricing:
    """Prices the tip of a hierarchy in terms of any base mint below it."""

    def __init__(
        self,
        hierarchy: Hierarchy,
        unix_time: int,
        model: CurveModel | None = None,
        fee_policy: TransitionFeePolicy | None = None,
    ) -> None:
        self.hierarchy = hierarchy
        self.unix_time = unix_time
        self.model = model
        self.fee_policy = fee_policy

    def _engine(self, node: BondingCurveNode):
        return node.engine(self.unix_time, model=self.model, fee_policy=self.fee_policy)

    def _chain(self, base_mint: str | None) -> tuple[BondingCurveNode, ...]:
        base = base_mint if base_mint is not None else self.hierarchy.root.base_mint
        return self.hierarchy.between(base, self.hierarchy.tip.target_mint)

    def current(self, base_mint: str | None = None) -> float:
        """Marginal price of one tip token in `base_mint` (root base by default)."""
        price = 1.0
        for node in self._chain(base_mint):
            r = node.royalties
            price *= self._engine(node).current(r.buy_base, r.buy_target)
        return price

    def buy_target_amount(self, target_amount: float, base_mint: str | None = None) -> float:
        """Base cost of `target_amount` tip tokens, buying down the chain from the tip."""
        amount = target_amount
        for node in reversed(self._chain(base_mint)):
            r = node.royalties
            amount = self._engine(node).buy_target_amount(amount, r.buy_base, r.buy_target)
        return amount

    def buy_with_base_amount(self, base_amount: float, base_mint: str | None = None) -> float:
        """Tip tokens received for `base_amount`, buying up the chain."""
        amount = base_amount
        for node in self._chain(base_mint):
            r = node.royalties
            amount = self._engine(node).buy_with_base_amount(amount, r.buy_base, r.buy_target)
        return amount

    def sell_target_amount(self, target_amount: float, base_mint: str | None = None) -> float:
        """Base reclaimed for selling `target_amount` tip tokens down to `base_mint`."""
        amount = target_amount
        for node in reversed(self._chain(base_mint)):
            r = node.royalties
            amount = self._engine(node).sell_target_amount(amount, r.sell_base, r.sell_target)
        return amount

    def swap(self, base_amount: float, base_mint: str, target_mint: str) -> float:
        """Theoretical `target_mint` received for `base_amount` of `base_mint`."""
        chain = self.hierarchy.between(base_mint, target_mint)
        mints = self.hierarchy.mints
        amount = base_amount
        if mints.index(base_mint) < mints.index(target_mint):
            for node in chain:
                r = node.royalties
                amount = self._engine(node).buy_with_base_amount(amount, r.buy_base, r.buy_target)
        else:
            for node in reversed(chain):
                r = node.royalties
                amount = self._engine(node).sell_target_amount(amount, r.sell_base, r.sell_target)
        return amount
