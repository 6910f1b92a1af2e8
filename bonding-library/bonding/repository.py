"""Resolves ledger accounts into BondingCurveNode snapshots."""

from __future__ import annotations

import logging

from bonding.accounts import MintInfo, to_ui
from bonding.codec import decode_curve, decode_lamports, decode_token_bonding
from bonding.config import ProtocolConfig
from bonding.errors import StateUnavailable
from bonding.interfaces import AccountStore
from bonding.keys import associated_token_address, token_bonding_key
from bonding.nodes import BondingCurveNode

logger = logging.getLogger(__name__)


class BondingRepository:
    """
    Read-side facade over an AccountStore.

    Every `get_node` call fetches fresh state; nothing is cached, so callers get
    an immutable snapshot per request.
    """

    def __init__(self, store: AccountStore, config: ProtocolConfig | None = None) -> None:
        self.store = store
        self.config = config if config is not None else ProtocolConfig()

    def bonding_key(self, target_mint: str, index: int = 0) -> str:
        return token_bonding_key(self.config, target_mint, index)

    def ata(self, owner: str, mint: str) -> str:
        return associated_token_address(self.config, owner, mint)

    async def account_exists(self, address: str) -> bool:
        return (await self.store.fetch(address)) is not None

    async def get_mint(self, mint: str) -> MintInfo:
        info = await self.store.fetch_mint(mint)
        if info is None:
            raise StateUnavailable(f"Mint {mint} not found")
        return info

    async def token_balance(self, address: str) -> int:
        """Raw balance of a token account; 0 if it does not exist."""
        account = await self.store.fetch_token_account(address)
        return account.amount if account is not None else 0

    async def native_balance(self, owner: str) -> int:
        """Lamports held by `owner`; 0 if the account does not exist."""
        payload = await self.store.fetch(owner)
        return decode_lamports(payload, owner) if payload is not None else 0

    async def get_node(self, key: str) -> BondingCurveNode | None:
        """Snapshot of the token bonding at `key`, or None if it does not exist."""
        payload = await self.store.fetch(key)
        if payload is None:
            return None
        record = decode_token_bonding(payload, key)

        curve_payload = await self.store.fetch(record.curve)
        if curve_payload is None:
            raise StateUnavailable(f"Curve {record.curve} for token bonding {key} not found")
        curve = decode_curve(curve_payload, record.curve)

        base_mint = await self.get_mint(record.base_mint)
        target_mint = await self.get_mint(record.target_mint)
        storage = await self.store.fetch_token_account(record.base_storage)
        if storage is None:
            raise StateUnavailable(
                f"Base storage {record.base_storage} for token bonding {key} not found"
            )

        logger.debug("Loaded token bonding %s (%s -> %s)", key, record.base_mint, record.target_mint)
        return BondingCurveNode(
            address=key,
            base_mint=record.base_mint,
            target_mint=record.target_mint,
            curve=curve,
            reserve=to_ui(storage.amount, base_mint.decimals),
            supply=to_ui(target_mint.supply, target_mint.decimals),
            base_decimals=base_mint.decimals,
            target_decimals=target_mint.decimals,
            royalties=record.royalties,
            go_live_unix_time=record.go_live_unix_time,
            freeze_buy_unix_time=record.freeze_buy_unix_time,
            buy_frozen=record.buy_frozen,
            sell_frozen=record.sell_frozen,
            index=record.index,
            curve_address=record.curve,
            base_storage=record.base_storage,
            mint_cap=record.mint_cap,
            purchase_cap=record.purchase_cap,
        )

    async def get_canonical_node(self, target_mint: str) -> BondingCurveNode | None:
        """The index-0 token bonding for `target_mint`, if any."""
        return await self.get_node(self.bonding_key(target_mint, 0))
