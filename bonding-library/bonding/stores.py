"""
Account stores: in-memory and Redis-backed implementations of AccountStore.

Both hold raw JSON payloads (see `bonding.codec`) keyed by address. The
in-memory store also offers seeding helpers used by the local ledger, the
demo and the tests.
"""

from __future__ import annotations

import logging
from typing import Any

from bonding.accounts import MintInfo, TokenAccountInfo
from bonding.codec import (
    decode_mint,
    decode_token_account,
    encode_mint,
    encode_system_account,
    encode_token_account,
)
from bonding.redis_client import get_redis

logger = logging.getLogger(__name__)

ACCOUNT_KEY_PREFIX = "account"


class InMemoryAccountStore:
    """Dict-backed account store."""

    def __init__(self, accounts: dict[str, bytes] | None = None) -> None:
        self._accounts: dict[str, bytes] = dict(accounts) if accounts else {}

    async def fetch(self, address: str) -> bytes | None:
        return self._accounts.get(address)

    async def fetch_mint(self, address: str) -> MintInfo | None:
        return self.get_mint(address)

    async def fetch_token_account(self, address: str) -> TokenAccountInfo | None:
        return self.get_token_account(address)

    def get(self, address: str) -> bytes | None:
        return self._accounts.get(address)

    def get_mint(self, address: str) -> MintInfo | None:
        payload = self._accounts.get(address)
        return decode_mint(payload, address) if payload is not None else None

    def get_token_account(self, address: str) -> TokenAccountInfo | None:
        payload = self._accounts.get(address)
        return decode_token_account(payload, address) if payload is not None else None

    def put(self, address: str, payload: bytes) -> None:
        self._accounts[address] = payload

    def delete(self, address: str) -> None:
        self._accounts.pop(address, None)

    def exists(self, address: str) -> bool:
        return address in self._accounts

    def snapshot(self) -> dict[str, bytes]:
        return dict(self._accounts)

    def restore(self, snapshot: dict[str, bytes]) -> None:
        self._accounts = dict(snapshot)

    def put_mint(self, address: str, decimals: int, supply: int = 0) -> None:
        self.put(address, encode_mint(decimals, supply))

    def put_token_account(self, address: str, mint: str, owner: str, amount: int) -> None:
        self.put(address, encode_token_account(mint, owner, amount))

    def put_system_account(self, address: str, lamports: int) -> None:
        self.put(address, encode_system_account(lamports))


class RedisAccountStore:
    """
    Account store backed by Redis string keys `account:<address>`.

    Expects a client created with `decode_responses=True` (see
    `connect`); payloads are stored as UTF-8 JSON text.
    """

    def __init__(self, redis: Any, prefix: str = ACCOUNT_KEY_PREFIX) -> None:
        self._redis = redis
        self._prefix = prefix

    @classmethod
    async def connect(cls, url: str | None = None, prefix: str = ACCOUNT_KEY_PREFIX) -> "RedisAccountStore":
        """Store over the shared connection from `get_redis` (REDIS_URL by default)."""
        return cls(await get_redis(url), prefix)

    def _key(self, address: str) -> str:
        return f"{self._prefix}:{address}"

    async def fetch(self, address: str) -> bytes | None:
        value = await self._redis.get(self._key(address))
        if value is None:
            return None
        return value.encode("utf-8") if isinstance(value, str) else value

    async def fetch_mint(self, address: str) -> MintInfo | None:
        payload = await self.fetch(address)
        return decode_mint(payload, address) if payload is not None else None

    async def fetch_token_account(self, address: str) -> TokenAccountInfo | None:
        payload = await self.fetch(address)
        return decode_token_account(payload, address) if payload is not None else None

    async def put(self, address: str, payload: bytes) -> None:
        logger.debug("Storing account %s", address)
        await self._redis.set(self._key(address), payload.decode("utf-8"))
