"""
Local reference ledger.

`LocalLedger` plays the external program against an InMemoryAccountStore: it
builds opaque buy/sell instructions, and on submit re-derives every amount from
fresh state, enforces the quoted bounds, rounds to raw units and moves
balances, mint supply and reserve. A transaction applies all of its
instructions or none of them.

Used by the demo, the API's example data and the tests.
"""

from __future__ import annotations

import itertools
import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from solders.pubkey import Pubkey

from bonding.accounts import Confirmation, to_raw, to_raw_ceil, to_ui
from bonding.codec import TokenBondingRecord, encode_curve, encode_token_bonding
from bonding.config import ProtocolConfig
from bonding.context import RoyaltyPercentages
from bonding.curves import CurveConfig
from bonding.errors import BondingError
from bonding.interfaces import TransitionFeePolicy
from bonding.model import CurveModel
from bonding.nodes import BondingCurveNode
from bonding.quotes import BuyQuote, SellQuote, check_buy_allowed, check_sell_allowed
from bonding.repository import BondingRepository
from bonding.stores import InMemoryAccountStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BuyInstruction:
    token_bonding: str
    owner: str
    quote: BuyQuote


@dataclass(frozen=True)
class SellInstruction:
    token_bonding: str
    owner: str
    quote: SellQuote


@dataclass(frozen=True)
class MemoInstruction:
    text: str


class InstructionRejected(BondingError):
    """The local ledger refused an instruction."""


class LocalLedger:
    """In-process ledger implementing InstructionBuilder and TransactionExecutor."""

    def __init__(
        self,
        store: InMemoryAccountStore | None = None,
        config: ProtocolConfig | None = None,
        clock: Callable[[], float] = time.time,
        model: CurveModel | None = None,
        fee_policy: TransitionFeePolicy | None = None,
    ) -> None:
        self.store = store if store is not None else InMemoryAccountStore()
        self.config = config if config is not None else ProtocolConfig()
        self.repository = BondingRepository(self.store, self.config)
        self.clock = clock
        self.model = model
        self.fee_policy = fee_policy
        self.memos: list[str] = []
        self._signatures = itertools.count(1)
        if not self.store.exists(self.config.wrapped_native_mint):
            self.store.put_mint(self.config.wrapped_native_mint, self.config.native_decimals)

    # --- setup --------------------------------------------------------------

    def create_mint(self, decimals: int = 9, supply: int = 0) -> str:
        address = str(Pubkey.new_unique())
        self.store.put_mint(address, decimals, supply)
        return address

    def create_wallet(self, lamports: int = 0) -> str:
        address = str(Pubkey.new_unique())
        self.store.put_system_account(address, lamports)
        return address

    def fund(self, owner: str, mint: str, amount: int) -> str:
        """Credit `amount` raw tokens to `owner`'s associated account (minting them)."""
        address = self.repository.ata(owner, mint)
        self._credit_token(address, mint, owner, amount)
        self._change_supply(mint, amount)
        return address

    def create_token_bonding(
        self,
        base_mint: str,
        target_mint: str,
        curve: CurveConfig,
        *,
        royalties: RoyaltyPercentages | None = None,
        index: int = 0,
        go_live_unix_time: int = 0,
        freeze_buy_unix_time: int | None = None,
        buy_frozen: bool = False,
        sell_frozen: bool = False,
        mint_cap: float | None = None,
        purchase_cap: float | None = None,
    ) -> str:
        """Store a curve, an empty base storage and the token bonding; return its address."""
        key = self.repository.bonding_key(target_mint, index)
        curve_address = str(Pubkey.new_unique())
        storage = str(Pubkey.new_unique())
        self.store.put(curve_address, encode_curve(curve))
        self.store.put_token_account(storage, base_mint, key, 0)
        record = TokenBondingRecord(
            address=key,
            base_mint=base_mint,
            target_mint=target_mint,
            curve=curve_address,
            base_storage=storage,
            royalties=royalties if royalties is not None else RoyaltyPercentages(),
            index=index,
            go_live_unix_time=go_live_unix_time,
            freeze_buy_unix_time=freeze_buy_unix_time,
            buy_frozen=buy_frozen,
            sell_frozen=sell_frozen,
            mint_cap=mint_cap,
            purchase_cap=purchase_cap,
        )
        self.store.put(key, encode_token_bonding(record))
        logger.debug("Created token bonding %s (%s -> %s)", key, base_mint, target_mint)
        return key

    # --- InstructionBuilder -------------------------------------------------

    async def build_buy(
        self, node: BondingCurveNode, quote: BuyQuote, owner: str
    ) -> Sequence[Any]:
        return [BuyInstruction(token_bonding=node.address, owner=owner, quote=quote)]

    async def build_sell(
        self, node: BondingCurveNode, quote: SellQuote, owner: str
    ) -> Sequence[Any]:
        return [SellInstruction(token_bonding=node.address, owner=owner, quote=quote)]

    # --- TransactionExecutor ------------------------------------------------

    async def submit(self, instructions: Sequence[Any]) -> Confirmation:
        snapshot = self.store.snapshot()
        try:
            for instruction in instructions:
                if isinstance(instruction, BuyInstruction):
                    await self._execute_buy(instruction)
                elif isinstance(instruction, SellInstruction):
                    await self._execute_sell(instruction)
                elif isinstance(instruction, MemoInstruction):
                    self.memos.append(instruction.text)
                else:
                    raise InstructionRejected(f"Unknown instruction {instruction!r}")
        except BondingError as e:
            self.store.restore(snapshot)
            logger.info("Transaction rejected: %s", e)
            return Confirmation(success=False, error=str(e))
        signature = f"local-{next(self._signatures)}"
        return Confirmation(success=True, signature=signature)

    async def _load(self, address: str) -> BondingCurveNode:
        node = await self.repository.get_node(address)
        if node is None:
            raise InstructionRejected(f"Token bonding {address} does not exist")
        return node

    async def _execute_buy(self, ix: BuyInstruction) -> None:
        node = await self._load(ix.token_bonding)
        unix_time = int(self.clock())
        check_buy_allowed(node, unix_time)
        engine = node.engine(unix_time, model=self.model, fee_policy=self.fee_policy)
        r = node.royalties
        quote = ix.quote

        if quote.is_base_amount:
            spend = quote.raw_amount
            received = engine.buy_with_base_amount(
                to_ui(spend, node.base_decimals), r.buy_base, r.buy_target
            )
            net = to_raw(received, node.target_decimals)
            if net < quote.raw_bound:
                raise InstructionRejected(
                    f"would receive {net} raw target, below minimum {quote.raw_bound}"
                )
        else:
            gross_ui = to_ui(quote.raw_amount, node.target_decimals)
            desired = gross_ui * (1 - r.buy_target / 100.0)
            spend = to_raw_ceil(
                engine.buy_target_amount(desired, r.buy_base, r.buy_target), node.base_decimals
            )
            if spend > quote.raw_bound:
                raise InstructionRejected(f"price {spend} exceeds maximum {quote.raw_bound}")
            net = to_raw(desired, node.target_decimals)

        # Supply never grows by less than what the buyer receives
        gross = max(
            to_raw(
                engine.gross_target_amount(to_ui(net, node.target_decimals), r.buy_target),
                node.target_decimals,
            ),
            net,
        )
        if node.purchase_cap is not None and to_ui(gross, node.target_decimals) > node.purchase_cap:
            raise InstructionRejected("purchase cap exceeded")
        if node.mint_cap is not None and node.supply + to_ui(gross, node.target_decimals) > node.mint_cap:
            raise InstructionRejected("mint cap exceeded")

        await self._debit_source(ix.owner, node.base_mint, spend)
        reserve_in = to_raw(to_ui(spend, node.base_decimals) * (1 - r.buy_base / 100.0), node.base_decimals)
        await self._credit_storage(node, reserve_in)
        self._change_supply(node.target_mint, gross)
        self._credit_token(self.repository.ata(ix.owner, node.target_mint), node.target_mint, ix.owner, net)

    async def _execute_sell(self, ix: SellInstruction) -> None:
        node = await self._load(ix.token_bonding)
        unix_time = int(self.clock())
        check_sell_allowed(node, unix_time)
        engine = node.engine(unix_time, model=self.model, fee_policy=self.fee_policy)
        r = node.royalties
        quote = ix.quote

        sold = quote.raw_target_amount
        reclaimed = to_raw(
            engine.sell_target_amount(to_ui(sold, node.target_decimals), r.sell_base, r.sell_target),
            node.base_decimals,
        )
        if reclaimed < quote.raw_minimum_bound:
            raise InstructionRejected(
                f"would reclaim {reclaimed} raw base, below minimum {quote.raw_minimum_bound}"
            )
        burned = to_raw(
            to_ui(sold, node.target_decimals) * (1 - r.sell_target / 100.0), node.target_decimals
        )
        mint = self.store.get_mint(node.target_mint)
        if mint is not None:
            burned = min(burned, mint.supply)

        source = self.repository.ata(ix.owner, node.target_mint)
        await self._debit_token(source, sold)
        self._change_supply(node.target_mint, -burned)
        await self._credit_storage(node, -reclaimed)
        if self.config.is_wrapped_native(node.base_mint):
            await self._credit_lamports(ix.owner, reclaimed)
        else:
            self._credit_token(
                self.repository.ata(ix.owner, node.base_mint), node.base_mint, ix.owner, reclaimed
            )

    # --- balance moves ------------------------------------------------------

    async def _debit_source(self, owner: str, mint: str, amount: int) -> None:
        if self.config.is_wrapped_native(mint):
            await self._credit_lamports(owner, -amount)
        else:
            await self._debit_token(self.repository.ata(owner, mint), amount)

    async def _debit_token(self, address: str, amount: int) -> None:
        account = self.store.get_token_account(address)
        if account is None:
            raise InstructionRejected(f"Token account {address} does not exist")
        if account.amount < amount:
            raise InstructionRejected(f"Insufficient funds in {address}")
        self.store.put_token_account(address, account.mint, account.owner, account.amount - amount)

    def _credit_token(self, address: str, mint: str, owner: str, amount: int) -> None:
        account = self.store.get_token_account(address)
        current = account.amount if account is not None else 0
        self.store.put_token_account(address, mint, owner, current + amount)

    async def _credit_lamports(self, owner: str, amount: int) -> None:
        lamports = await self.repository.native_balance(owner)
        if lamports + amount < 0:
            raise InstructionRejected(f"Insufficient lamports for {owner}")
        self.store.put_system_account(owner, lamports + amount)

    async def _credit_storage(self, node: BondingCurveNode, amount: int) -> None:
        if node.base_storage is None:
            raise InstructionRejected(f"Token bonding {node.address} has no base storage")
        account = self.store.get_token_account(node.base_storage)
        if account is None:
            raise InstructionRejected(f"Base storage {node.base_storage} does not exist")
        if account.amount + amount < 0:
            raise InstructionRejected("reserve cannot go negative")
        self.store.put_token_account(
            node.base_storage, account.mint, account.owner, account.amount + amount
        )

    def _change_supply(self, mint: str, amount: int) -> None:
        info = self.store.get_mint(mint)
        if info is None:
            raise InstructionRejected(f"Mint {mint} does not exist")
        self.store.put_mint(mint, info.decimals, info.supply + amount)
