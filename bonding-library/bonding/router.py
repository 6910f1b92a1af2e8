"""
Multi-hop swap router.

Design intent:
- The route is one bonding hierarchy holding both mints; hops run from the
  base mint toward the target mint, one buy or sell per hop.
- Each hop's input is the balance change observed on the ledger after the
  previous hop, never the theoretical curve output.
- A trade submission is never retried. Only the post-trade balance read is,
  through a RetryPolicy, because reads may lag behind confirmation.
- Once a hop has executed, a later failing hop aborts the swap and the result
  still reports the hops that completed. Failures before the first submission
  raise.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from bonding.accounts import to_raw, to_ui
from bonding.config import ProtocolConfig
from bonding.errors import BondingError, NoRouteFound, SourceAccountMissing, StateUnavailable
from bonding.hierarchy import Hierarchy, build_hierarchy
from bonding.interfaces import InstructionBuilder, TransactionExecutor
from bonding.nodes import BondingCurveNode
from bonding.quotes import BuyQuote, SellQuote, compute_buy, compute_sell
from bonding.repository import BondingRepository
from bonding.retry import RetryPolicy

logger = logging.getLogger(__name__)

ExtraInstructions = Callable[[BondingCurveNode, bool, int], Awaitable[Sequence[Any]]]


class SwapState(str, Enum):
    ROUTING = "routing"
    HOPPING = "hopping"
    COMPLETED = "completed"
    ABORTED = "aborted"


@dataclass(frozen=True)
class HopResult:
    """One executed hop. Amounts are raw units of the hop's input/output mints."""

    node_address: str
    is_buy: bool
    input_mint: str
    output_mint: str
    input_amount: int
    output_amount: int
    quote: BuyQuote | SellQuote
    signature: str | None = None


@dataclass
class SwapResult:
    """
    Outcome of a swap.

    `target_amount` is the UI amount of `target_mint` received (0 unless the swap
    completed); `held_amount`/`held_mint` is what the last successful hop left
    with the owner (the untouched input if no hop succeeded).
    """

    target_amount: float
    target_mint: str
    state: SwapState
    hops: list[HopResult] = field(default_factory=list)
    held_amount: float = 0.0
    held_mint: str | None = None
    error: str | None = None

    @property
    def completed(self) -> bool:
        return self.state == SwapState.COMPLETED


class SwapRouter:
    """Routes and executes swaps between any two mints on one hierarchy."""

    def __init__(
        self,
        repository: BondingRepository,
        builder: InstructionBuilder,
        executor: TransactionExecutor,
        config: ProtocolConfig | None = None,
        retry_policy: RetryPolicy | None = None,
        clock: Callable[[], float] = time.time,
        extra_instructions: ExtraInstructions | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.repository = repository
        self.builder = builder
        self.executor = executor
        self.config = config if config is not None else repository.config
        self.retry_policy = retry_policy if retry_policy is not None else self.config.balance_retry
        self.clock = clock
        self.extra_instructions = extra_instructions
        self.sleep = sleep

    async def find_route(self, base_mint: str, target_mint: str) -> tuple[Hierarchy, bool]:
        """
        Hierarchy holding both mints and whether the swap buys up it.

        Tries the chain below `target_mint` first, then the chain below `base_mint`.
        """
        repo = self.repository
        candidates = (
            (target_mint, base_mint),
            (base_mint, target_mint),
        )
        for start_mint, stop_mint in candidates:
            hierarchy = await build_hierarchy(repo, repo.bonding_key(start_mint), stop_mint)
            if hierarchy is not None and hierarchy.contains(base_mint, target_mint):
                return hierarchy, hierarchy.tip.target_mint == target_mint
        raise NoRouteFound(f"No bonding hierarchy connects {base_mint} and {target_mint}")

    async def swap(
        self,
        base_mint: str,
        target_mint: str,
        base_amount: float,
        slippage: float,
        owner: str,
    ) -> SwapResult:
        """
        Swap `base_amount` (UI units) of `base_mint` into `target_mint` for `owner`.

        `slippage` bounds each hop independently, so it compounds across hops.
        Errors before the first submission raise; once a hop has executed, a
        failing hop aborts the swap and the result reports what is held.
        """
        base_mint = self.config.canonical_mint(base_mint)
        target_mint = self.config.canonical_mint(target_mint)
        if base_mint == target_mint:
            raise NoRouteFound(f"Cannot swap {base_mint} into itself")
        hierarchy, is_buy = await self.find_route(base_mint, target_mint)
        chain = hierarchy.between(base_mint, target_mint)
        ordered = chain if is_buy else tuple(reversed(chain))
        logger.info(
            "Swapping %s %s -> %s over %d hop(s) (%s)",
            base_amount, base_mint, target_mint, len(ordered), "buy" if is_buy else "sell",
        )

        first = ordered[0]
        input_decimals = first.base_decimals if is_buy else first.target_decimals
        amount = to_raw(base_amount, input_decimals)
        held_mint = base_mint
        hops: list[HopResult] = []

        for i, link in enumerate(ordered):
            try:
                node = await self.repository.get_node(link.address)
                if node is None:
                    raise StateUnavailable(f"Token bonding {link.address} disappeared mid-swap")
                hop, error = await self._hop(node, is_buy, amount, slippage, owner)
            except BondingError as e:
                if not hops:
                    raise
                hop, error = None, str(e)
            if hop is None:
                logger.warning("Swap aborted at hop %d/%d: %s", i + 1, len(ordered), error)
                return SwapResult(
                    target_amount=0.0,
                    target_mint=target_mint,
                    state=SwapState.ABORTED,
                    hops=hops,
                    held_amount=to_ui(amount, input_decimals),
                    held_mint=held_mint,
                    error=error,
                )
            hops.append(hop)
            amount = hop.output_amount
            held_mint = hop.output_mint
            input_decimals = node.target_decimals if is_buy else node.base_decimals

        received = to_ui(amount, input_decimals)
        logger.info("Swap completed: received %s %s", received, target_mint)
        return SwapResult(
            target_amount=received,
            target_mint=target_mint,
            state=SwapState.COMPLETED,
            hops=hops,
            held_amount=received,
            held_mint=held_mint,
        )

    async def _hop(
        self,
        node: BondingCurveNode,
        is_buy: bool,
        amount: int,
        slippage: float,
        owner: str,
    ) -> tuple[HopResult | None, str | None]:
        unix_time = int(self.clock())
        if is_buy:
            input_mint, output_mint = node.base_mint, node.target_mint
            quote: BuyQuote | SellQuote = compute_buy(
                node, unix_time, slippage=slippage, base_amount=to_ui(amount, node.base_decimals)
            )
            if not self.config.is_wrapped_native(input_mint):
                await self._require_source(owner, input_mint)
        else:
            input_mint, output_mint = node.target_mint, node.base_mint
            quote = compute_sell(
                node, unix_time, to_ui(amount, node.target_decimals), slippage=slippage
            )
            await self._require_source(owner, input_mint)

        read = self._balance_reader(owner, output_mint, native=not is_buy)
        before = await read()

        if is_buy:
            instructions = list(await self.builder.build_buy(node, quote, owner))
        else:
            instructions = list(await self.builder.build_sell(node, quote, owner))
        if self.extra_instructions is not None:
            instructions.extend(await self.extra_instructions(node, is_buy, amount))

        logger.info(
            "Hop on %s: %s %d raw %s", node.address, "buy" if is_buy else "sell", amount, input_mint
        )
        confirmation = await self.executor.submit(instructions)
        if not confirmation.success:
            return None, f"transaction rejected: {confirmation.error}"

        outcome = await self.retry_policy.poll(read, lambda after: after != before, self.sleep)
        if outcome.attempts > 1:
            logger.warning(
                "Balance of %s on %s needed %d reads", output_mint, node.address, outcome.attempts
            )
        delta = outcome.value - before
        if delta <= 0:
            return None, f"no {output_mint} received from {node.address}"

        return (
            HopResult(
                node_address=node.address,
                is_buy=is_buy,
                input_mint=input_mint,
                output_mint=output_mint,
                input_amount=amount,
                output_amount=delta,
                quote=quote,
                signature=confirmation.signature,
            ),
            None,
        )

    async def _require_source(self, owner: str, mint: str) -> None:
        address = self.repository.ata(owner, mint)
        if not await self.repository.account_exists(address):
            raise SourceAccountMissing(f"Source account does not exist: {address} ({mint})")

    def _balance_reader(
        self, owner: str, mint: str, native: bool
    ) -> Callable[[], Awaitable[int]]:
        """Reader for the raw balance a hop pays into."""
        repo = self.repository
        if native and self.config.is_wrapped_native(mint):
            return lambda: repo.native_balance(owner)
        address = repo.ata(owner, mint)
        return lambda: repo.token_balance(address)
