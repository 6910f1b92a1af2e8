"""Tests for account payload codec, account stores and the node repository."""

import asyncio

import pytest
from solders.pubkey import Pubkey

from bonding import redis_client
from bonding.codec import (
    TokenBondingRecord,
    curve_from_dict,
    curve_to_dict,
    decode_curve,
    decode_lamports,
    decode_mint,
    decode_token_bonding,
    encode_mint,
    encode_token_bonding,
)
from bonding.config import ProtocolConfig
from bonding.context import RoyaltyPercentages
from bonding.curves import ExponentialCurveConfig, TimeCurveConfig, TransitionFee
from bonding.errors import StateUnavailable, UnsupportedCurveKind
from bonding.keys import token_bonding_key
from bonding.repository import BondingRepository
from bonding.stores import InMemoryAccountStore, RedisAccountStore


def key() -> str:
    return str(Pubkey.new_unique())


def test_time_curve_dict_preserves_segments_and_fees() -> None:
    curve = TimeCurveConfig.single(ExponentialCurveConfig(c=1.0, pow=1, frac=2)).add_curve(
        60, ExponentialCurveConfig(c=0.0, b=3.0), sell_transition_fee=TransitionFee(5.0, 30)
    )
    assert curve_from_dict(curve_to_dict(curve)) == curve


def test_unknown_curve_tag() -> None:
    with pytest.raises(UnsupportedCurveKind):
        curve_from_dict({"logarithmic": {"c": 1}})


def test_malformed_payloads_raise_state_unavailable() -> None:
    with pytest.raises(StateUnavailable):
        decode_mint(b"not json", "m")
    with pytest.raises(StateUnavailable):
        decode_mint(b'{"kind": "token_account"}', "m")
    with pytest.raises(StateUnavailable):
        decode_mint(b'{"kind": "mint", "decimals": 6}', "m")
    with pytest.raises(StateUnavailable):
        decode_curve(b'{"kind": "curve"}', "c")


def test_token_bonding_record_fields_survive_encoding() -> None:
    record = TokenBondingRecord(
        address="tb",
        base_mint="base",
        target_mint="target",
        curve="curve",
        base_storage="storage",
        royalties=RoyaltyPercentages(buy_base=1.0, sell_target=2.0),
        index=3,
        freeze_buy_unix_time=99,
        sell_frozen=True,
        purchase_cap=12.5,
    )
    assert decode_token_bonding(encode_token_bonding(record), "tb") == record


def test_lamports_default_to_zero_for_token_accounts() -> None:
    assert decode_lamports(encode_mint(6, 100), "m") == 0


def test_in_memory_store_helpers() -> None:
    store = InMemoryAccountStore()
    store.put_mint("m", 6, 1_000)
    store.put_token_account("a", "m", "owner", 42)

    async def scenario():
        mint = await store.fetch_mint("m")
        account = await store.fetch_token_account("a")
        missing = await store.fetch("nope")
        return mint, account, missing

    mint, account, missing = asyncio.run(scenario())
    assert (mint.decimals, mint.supply) == (6, 1_000)
    assert (account.mint, account.owner, account.amount) == ("m", "owner", 42)
    assert missing is None


class FakeRedis:
    """Minimal async stand-in for redis.asyncio.Redis with decode_responses=True."""

    def __init__(self) -> None:
        self.data: dict[str, str] = {}

    async def get(self, name: str):
        return self.data.get(name)

    async def set(self, name: str, value: str) -> None:
        self.data[name] = value

    async def aclose(self) -> None:
        self.closed = True


def test_connect_uses_shared_connection_until_closed(monkeypatch) -> None:
    shared = FakeRedis()
    monkeypatch.setattr(redis_client, "_redis", shared)

    async def scenario():
        store = await RedisAccountStore.connect(prefix="snap")
        await store.put("m", encode_mint(6, 0))
        await redis_client.close_redis()
        return store

    asyncio.run(scenario())
    assert "snap:m" in shared.data
    assert shared.closed is True
    assert redis_client._redis is None


def test_redis_store_round_trips_through_string_keys() -> None:
    redis = FakeRedis()
    store = RedisAccountStore(redis)

    async def scenario():
        await store.put("m", encode_mint(9, 5))
        return await store.fetch_mint("m"), await store.fetch_token_account("x")

    mint, missing = asyncio.run(scenario())
    assert "account:m" in redis.data
    assert mint.supply == 5
    assert missing is None


def seed_bonding(store: InMemoryAccountStore, config: ProtocolConfig) -> tuple[str, str, str]:
    base, target = key(), key()
    curve_addr, storage = key(), key()
    bonding = token_bonding_key(config, target)
    store.put_mint(base, 9)
    store.put_mint(target, 6, 2_000_000)
    store.put(curve_addr, b'{"kind": "curve", "definition": {"exponential": {"c": 1.0}}}')
    store.put_token_account(storage, base, bonding, 3 * 10**9)
    record = TokenBondingRecord(
        address=bonding,
        base_mint=base,
        target_mint=target,
        curve=curve_addr,
        base_storage=storage,
        royalties=RoyaltyPercentages(),
    )
    store.put(bonding, encode_token_bonding(record))
    return bonding, base, target


def test_repository_builds_node_snapshot_in_ui_units() -> None:
    config = ProtocolConfig()
    store = InMemoryAccountStore()
    bonding, base, target = seed_bonding(store, config)
    repo = BondingRepository(store, config)

    node = asyncio.run(repo.get_node(bonding))
    assert node.base_mint == base and node.target_mint == target
    assert node.reserve == 3.0
    assert node.supply == 2.0
    assert node.target_decimals == 6
    assert node.curve == ExponentialCurveConfig(c=1.0)
    assert asyncio.run(repo.get_canonical_node(target)).address == bonding


def test_repository_missing_node_is_none_and_missing_curve_raises() -> None:
    config = ProtocolConfig()
    store = InMemoryAccountStore()
    bonding, _base, _target = seed_bonding(store, config)
    repo = BondingRepository(store, config)
    assert asyncio.run(repo.get_node(key())) is None

    record = decode_token_bonding(store.get(bonding), bonding)
    store.delete(record.curve)
    with pytest.raises(StateUnavailable):
        asyncio.run(repo.get_node(bonding))


def test_bonding_keys_are_deterministic_per_index() -> None:
    config = ProtocolConfig()
    mint = key()
    assert token_bonding_key(config, mint) == token_bonding_key(config, mint, 0)
    assert token_bonding_key(config, mint, 0) != token_bonding_key(config, mint, 1)
