"""Tests for multi-hop swap routing against the local ledger."""

import asyncio

import pytest

from bonding.accounts import Confirmation, to_raw
from bonding.config import NATIVE_MINT
from bonding.curves import ExponentialCurveConfig
from bonding.errors import FrozenCurveError, NoRouteFound, SourceAccountMissing
from bonding.repository import BondingRepository
from bonding.retry import RetryPolicy
from bonding.router import SwapRouter, SwapState
from bonding.simulator import LocalLedger, MemoInstruction
from bonding.stores import InMemoryAccountStore

NOW = 1_700_000_000
LAMPORTS = 10**9


class SleepRecorder:
    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


class CountingExecutor:
    """Delegates to the ledger; counts submissions and can reject or skim output."""

    def __init__(self, ledger: LocalLedger, reject_on: int | None = None, skim=None) -> None:
        self.ledger = ledger
        self.reject_on = reject_on
        self.skim = skim
        self.submissions = 0

    async def submit(self, instructions):
        self.submissions += 1
        if self.submissions == self.reject_on:
            return Confirmation(success=False, error="blockhash expired")
        confirmation = await self.ledger.submit(instructions)
        if self.skim is not None and self.submissions == 1:
            address, amount = self.skim
            account = self.ledger.store.get_token_account(address)
            self.ledger.store.put_token_account(address, account.mint, account.owner, account.amount - amount)
        return confirmation


class LaggingStore:
    """Serves token account reads from a stale snapshot for a number of reads after arm()."""

    def __init__(self, inner: InMemoryAccountStore) -> None:
        self.inner = inner
        self.stale = InMemoryAccountStore()
        self.lag = 0

    def arm(self, lag: int) -> None:
        self.stale = InMemoryAccountStore(self.inner.snapshot())
        self.lag = lag

    async def fetch(self, address):
        return await self.inner.fetch(address)

    async def fetch_mint(self, address):
        return await self.inner.fetch_mint(address)

    async def fetch_token_account(self, address):
        if self.lag > 0:
            self.lag -= 1
            return self.stale.get_token_account(address)
        return await self.inner.fetch_token_account(address)


class LaggingExecutor:
    def __init__(self, ledger: LocalLedger, store: LaggingStore, lag: int) -> None:
        self.ledger = ledger
        self.store = store
        self.lag = lag

    async def submit(self, instructions):
        self.store.arm(self.lag)
        return await self.ledger.submit(instructions)


def setup_chain():
    """SOL <- X (9 decimals) <- Y (6 decimals), owner holding 1000 SOL."""
    ledger = LocalLedger(clock=lambda: NOW)
    sol = ledger.config.wrapped_native_mint
    x, y = ledger.create_mint(9), ledger.create_mint(6)
    ledger.create_token_bonding(sol, x, ExponentialCurveConfig(c=1.0))
    ledger.create_token_bonding(x, y, ExponentialCurveConfig(c=1.0, pow=1, frac=2))
    owner = ledger.create_wallet(lamports=1_000 * LAMPORTS)
    return ledger, sol, x, y, owner


def make_router(ledger, executor=None, repository=None, sleep=None, **kwargs) -> SwapRouter:
    return SwapRouter(
        repository if repository is not None else ledger.repository,
        builder=ledger,
        executor=executor if executor is not None else ledger,
        clock=lambda: NOW,
        sleep=sleep if sleep is not None else SleepRecorder(),
        **kwargs,
    )


def test_two_hop_buy_uses_observed_output_as_next_input() -> None:
    ledger, sol, x, y, owner = setup_chain()
    skimmed = 1_000
    executor = CountingExecutor(ledger, skim=(ledger.repository.ata(owner, x), skimmed))
    router = make_router(ledger, executor=executor)

    result = asyncio.run(router.swap(sol, y, 100.0, slippage=0.05, owner=owner))

    assert result.state == SwapState.COMPLETED
    assert executor.submissions == 2
    first, second = result.hops
    assert first.input_mint == sol and first.output_mint == x
    assert second.input_mint == x and second.output_mint == y
    assert first.output_amount == to_raw(first.quote.expected, 9) - skimmed
    assert second.input_amount == first.output_amount
    y_balance = asyncio.run(ledger.repository.token_balance(ledger.repository.ata(owner, y)))
    assert y_balance == second.output_amount
    assert abs(result.target_amount - y_balance / 10**6) < 1e-12
    assert result.held_mint == y


def test_buy_spends_native_balance_without_token_account() -> None:
    ledger, sol, x, _y, owner = setup_chain()
    router = make_router(ledger)
    result = asyncio.run(router.swap(NATIVE_MINT, x, 50.0, slippage=0.01, owner=owner))
    assert result.completed
    assert asyncio.run(ledger.repository.native_balance(owner)) == 950 * LAMPORTS
    assert abs(result.target_amount - 10.0) < 1e-6


def test_sell_route_runs_target_to_base_and_pays_native() -> None:
    ledger, sol, x, y, owner = setup_chain()
    router = make_router(ledger)
    bought = asyncio.run(router.swap(sol, y, 100.0, slippage=0.05, owner=owner))
    lamports_before = asyncio.run(ledger.repository.native_balance(owner))

    sold = asyncio.run(router.swap(y, NATIVE_MINT, bought.target_amount, slippage=0.05, owner=owner))

    assert sold.state == SwapState.COMPLETED
    assert [h.is_buy for h in sold.hops] == [False, False]
    assert [h.output_mint for h in sold.hops] == [x, sol]
    assert sold.hops[1].input_amount == sold.hops[0].output_amount
    lamports_after = asyncio.run(ledger.repository.native_balance(owner))
    assert lamports_after - lamports_before == sold.hops[1].output_amount
    # Rounding only loses dust on the way back
    assert 99.99 < sold.target_amount <= 100.0


def test_stale_balance_reads_are_retried() -> None:
    ledger, sol, x, _y, owner = setup_chain()
    lagging = LaggingStore(ledger.store)
    sleep = SleepRecorder()
    router = make_router(
        ledger,
        executor=LaggingExecutor(ledger, lagging, lag=2),
        repository=BondingRepository(lagging, ledger.config),
        sleep=sleep,
        retry_policy=RetryPolicy(max_attempts=4, delay=5.0),
    )
    result = asyncio.run(router.swap(sol, x, 10.0, slippage=0.01, owner=owner))
    assert result.completed
    assert sleep.calls == [5.0, 5.0]


def test_unchanged_balance_after_all_reads_aborts() -> None:
    ledger, sol, x, _y, owner = setup_chain()
    lagging = LaggingStore(ledger.store)
    sleep = SleepRecorder()
    router = make_router(
        ledger,
        executor=LaggingExecutor(ledger, lagging, lag=10),
        repository=BondingRepository(lagging, ledger.config),
        sleep=sleep,
    )
    result = asyncio.run(router.swap(sol, x, 10.0, slippage=0.01, owner=owner))
    assert result.state == SwapState.ABORTED
    assert result.hops == []
    assert result.target_amount == 0.0
    assert result.held_mint == sol and result.held_amount == 10.0
    assert len(sleep.calls) == 3


def test_rejected_second_hop_reports_first_hop() -> None:
    ledger, sol, x, y, owner = setup_chain()
    executor = CountingExecutor(ledger, reject_on=2)
    router = make_router(ledger, executor=executor)
    result = asyncio.run(router.swap(sol, y, 100.0, slippage=0.05, owner=owner))
    assert result.state == SwapState.ABORTED
    assert len(result.hops) == 1
    assert result.held_mint == x
    assert result.held_amount == result.hops[0].output_amount / 10**9
    assert "blockhash expired" in result.error
    assert executor.submissions == 2


def test_no_route_between_unrelated_mints() -> None:
    ledger, sol, x, _y, owner = setup_chain()
    stray = ledger.create_mint()
    with pytest.raises(NoRouteFound):
        asyncio.run(make_router(ledger).swap(x, stray, 1.0, slippage=0.0, owner=owner))


def test_missing_source_account() -> None:
    ledger, _sol, x, y, owner = setup_chain()
    with pytest.raises(SourceAccountMissing):
        asyncio.run(make_router(ledger).swap(x, y, 1.0, slippage=0.0, owner=owner))


def test_frozen_sell_fails_before_any_submission() -> None:
    ledger = LocalLedger(clock=lambda: NOW)
    sol = ledger.config.wrapped_native_mint
    x = ledger.create_mint()
    ledger.create_token_bonding(sol, x, ExponentialCurveConfig(c=1.0), sell_frozen=True)
    owner = ledger.create_wallet(lamports=10 * LAMPORTS)
    ledger.fund(owner, x, 5 * LAMPORTS)
    executor = CountingExecutor(ledger)
    with pytest.raises(FrozenCurveError):
        asyncio.run(make_router(ledger, executor=executor).swap(x, sol, 1.0, slippage=0.0, owner=owner))
    assert executor.submissions == 0


def test_extra_instructions_ride_along_each_hop() -> None:
    ledger, sol, _x, y, owner = setup_chain()

    async def memo(node, is_buy, amount):
        return [MemoInstruction(text=f"{node.target_mint}:{is_buy}:{amount}")]

    router = make_router(ledger, extra_instructions=memo)
    result = asyncio.run(router.swap(sol, y, 10.0, slippage=0.05, owner=owner))
    assert result.completed
    assert len(ledger.memos) == 2
    assert ledger.memos[0].endswith(f":True:{10 * LAMPORTS}")


def test_frozen_second_link_aborts_with_first_hop_reported() -> None:
    ledger = LocalLedger(clock=lambda: NOW)
    sol = ledger.config.wrapped_native_mint
    x, y = ledger.create_mint(9), ledger.create_mint(6)
    ledger.create_token_bonding(sol, x, ExponentialCurveConfig(c=1.0))
    ledger.create_token_bonding(x, y, ExponentialCurveConfig(c=1.0), buy_frozen=True)
    owner = ledger.create_wallet(lamports=1_000 * LAMPORTS)
    executor = CountingExecutor(ledger)

    result = asyncio.run(make_router(ledger, executor=executor).swap(sol, y, 10.0, slippage=0.05, owner=owner))
    assert result.state == SwapState.ABORTED
    assert executor.submissions == 1
    assert len(result.hops) == 1
    assert result.held_mint == x
    held_raw = ledger.store.get_token_account(ledger.repository.ata(owner, x)).amount
    assert result.hops[0].output_amount == held_raw
    assert result.held_amount == held_raw / 10**9
    assert "frozen" in result.error.lower()


def test_swap_into_same_mint_is_rejected() -> None:
    ledger, sol, x, _y, owner = setup_chain()
    router = make_router(ledger)
    with pytest.raises(NoRouteFound):
        asyncio.run(router.swap(x, x, 1.0, slippage=0.05, owner=owner))
    with pytest.raises(NoRouteFound):
        asyncio.run(router.swap(NATIVE_MINT, sol, 1.0, slippage=0.05, owner=owner))


def test_concurrent_swaps_on_one_router_keep_their_own_outcome() -> None:
    ledger, sol, x, y, owner = setup_chain()
    other = ledger.create_wallet(lamports=10 * LAMPORTS)
    executor = CountingExecutor(ledger, reject_on=2)
    router = make_router(ledger, executor=executor)

    async def scenario():
        return await asyncio.gather(
            router.swap(sol, x, 5.0, slippage=0.05, owner=owner),
            router.swap(sol, x, 5.0, slippage=0.05, owner=other),
        )

    first, second = asyncio.run(scenario())
    assert {first.state, second.state} == {SwapState.COMPLETED, SwapState.ABORTED}
    assert not hasattr(router, "state")
