"""
JSON account payloads for curves, token bondings, mints and token accounts.

Every payload is a JSON object with a `kind` field. Curve definitions are tagged
objects: `{"exponential": {...}}` for a primitive curve and `{"time": [...]}` for
a time curve; an unknown tag raises UnsupportedCurveKind.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from bonding.accounts import MintInfo, TokenAccountInfo
from bonding.context import RoyaltyPercentages
from bonding.curves import (
    CurveConfig,
    ExponentialCurveConfig,
    TimeCurveConfig,
    TimeCurveSegment,
    TransitionFee,
)
from bonding.errors import StateUnavailable, UnsupportedCurveKind


@dataclass(frozen=True)
class TokenBondingRecord:
    """Token bonding account as stored on the ledger (no reserve/supply yet)."""

    address: str
    base_mint: str
    target_mint: str
    curve: str
    base_storage: str
    royalties: RoyaltyPercentages
    index: int = 0
    go_live_unix_time: int = 0
    freeze_buy_unix_time: int | None = None
    buy_frozen: bool = False
    sell_frozen: bool = False
    mint_cap: float | None = None
    purchase_cap: float | None = None


# --- curve definitions ------------------------------------------------------


def _fee_to_dict(fee: TransitionFee | None) -> dict[str, Any] | None:
    if fee is None:
        return None
    return {"percentage": fee.percentage, "interval": fee.interval}


def _fee_from_dict(raw: dict[str, Any] | None) -> TransitionFee | None:
    if raw is None:
        return None
    return TransitionFee(percentage=raw["percentage"], interval=raw["interval"])


def curve_to_dict(config: CurveConfig) -> dict[str, Any]:
    """Tagged dict for a curve config."""
    if isinstance(config, ExponentialCurveConfig):
        return {
            "exponential": {
                "c": config.c,
                "b": config.b,
                "pow": config.pow,
                "frac": config.frac,
            }
        }
    if isinstance(config, TimeCurveConfig):
        return {
            "time": [
                {
                    "offset": s.offset_seconds,
                    "curve": curve_to_dict(s.curve),
                    "buy_transition_fee": _fee_to_dict(s.buy_transition_fee),
                    "sell_transition_fee": _fee_to_dict(s.sell_transition_fee),
                }
                for s in config.segments
            ]
        }
    raise UnsupportedCurveKind(f"Cannot encode curve of type {type(config).__name__}")


def curve_from_dict(raw: dict[str, Any]) -> CurveConfig:
    """Curve config from its tagged dict."""
    if "exponential" in raw:
        e = raw["exponential"]
        return ExponentialCurveConfig(
            c=e.get("c", 1.0), b=e.get("b", 0.0), pow=e.get("pow", 1), frac=e.get("frac", 1)
        )
    if "time" in raw:
        segments = []
        for s in raw["time"]:
            curve = curve_from_dict(s["curve"])
            if isinstance(curve, TimeCurveConfig):
                raise UnsupportedCurveKind("time curve segments must be primitive curves")
            segments.append(
                TimeCurveSegment(
                    offset_seconds=s["offset"],
                    curve=curve,
                    buy_transition_fee=_fee_from_dict(s.get("buy_transition_fee")),
                    sell_transition_fee=_fee_from_dict(s.get("sell_transition_fee")),
                )
            )
        return TimeCurveConfig(segments=tuple(segments))
    raise UnsupportedCurveKind(f"Unknown curve kind(s): {sorted(raw)}")


# --- account payloads -------------------------------------------------------


def _dumps(payload: dict[str, Any]) -> bytes:
    return json.dumps(payload, sort_keys=True).encode("utf-8")


def _loads(payload: bytes, kind: str, address: str) -> dict[str, Any]:
    try:
        data = json.loads(payload)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise StateUnavailable(f"Account {address} is not valid JSON: {e}") from e
    if not isinstance(data, dict) or data.get("kind") != kind:
        raise StateUnavailable(f"Account {address} is not a {kind} account")
    return data


def encode_curve(config: CurveConfig) -> bytes:
    return _dumps({"kind": "curve", "definition": curve_to_dict(config)})


def decode_curve(payload: bytes, address: str = "?") -> CurveConfig:
    data = _loads(payload, "curve", address)
    try:
        return curve_from_dict(data["definition"])
    except (KeyError, TypeError) as e:
        raise StateUnavailable(f"Curve {address} is malformed: {e}") from e


def encode_token_bonding(record: TokenBondingRecord) -> bytes:
    r = record.royalties
    return _dumps(
        {
            "kind": "token_bonding",
            "base_mint": record.base_mint,
            "target_mint": record.target_mint,
            "curve": record.curve,
            "base_storage": record.base_storage,
            "index": record.index,
            "go_live_unix_time": record.go_live_unix_time,
            "freeze_buy_unix_time": record.freeze_buy_unix_time,
            "buy_frozen": record.buy_frozen,
            "sell_frozen": record.sell_frozen,
            "mint_cap": record.mint_cap,
            "purchase_cap": record.purchase_cap,
            "royalties": {
                "buy_base": r.buy_base,
                "buy_target": r.buy_target,
                "sell_base": r.sell_base,
                "sell_target": r.sell_target,
            },
        }
    )


def decode_token_bonding(payload: bytes, address: str) -> TokenBondingRecord:
    d = _loads(payload, "token_bonding", address)
    try:
        royalties = RoyaltyPercentages(**d.get("royalties", {}))
        return TokenBondingRecord(
            address=address,
            base_mint=d["base_mint"],
            target_mint=d["target_mint"],
            curve=d["curve"],
            base_storage=d["base_storage"],
            royalties=royalties,
            index=d.get("index", 0),
            go_live_unix_time=d.get("go_live_unix_time", 0),
            freeze_buy_unix_time=d.get("freeze_buy_unix_time"),
            buy_frozen=d.get("buy_frozen", False),
            sell_frozen=d.get("sell_frozen", False),
            mint_cap=d.get("mint_cap"),
            purchase_cap=d.get("purchase_cap"),
        )
    except (KeyError, TypeError) as e:
        raise StateUnavailable(f"Token bonding {address} is malformed: {e}") from e


def encode_mint(decimals: int, supply: int) -> bytes:
    return _dumps({"kind": "mint", "decimals": decimals, "supply": supply})


def decode_mint(payload: bytes, address: str) -> MintInfo:
    d = _loads(payload, "mint", address)
    try:
        return MintInfo(address=address, decimals=int(d["decimals"]), supply=int(d["supply"]))
    except (KeyError, TypeError, ValueError) as e:
        raise StateUnavailable(f"Mint {address} is malformed: {e}") from e


def encode_token_account(mint: str, owner: str, amount: int) -> bytes:
    return _dumps({"kind": "token_account", "mint": mint, "owner": owner, "amount": amount})


def decode_token_account(payload: bytes, address: str) -> TokenAccountInfo:
    d = _loads(payload, "token_account", address)
    try:
        return TokenAccountInfo(
            address=address, mint=d["mint"], owner=d["owner"], amount=int(d["amount"])
        )
    except (KeyError, TypeError, ValueError) as e:
        raise StateUnavailable(f"Token account {address} is malformed: {e}") from e


def encode_system_account(lamports: int) -> bytes:
    return _dumps({"kind": "system", "lamports": lamports})


def decode_lamports(payload: bytes, address: str) -> int:
    """Native balance of any account payload (token/mint accounts carry none)."""
    try:
        data = json.loads(payload)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise StateUnavailable(f"Account {address} is not valid JSON: {e}") from e
    return int(data.get("lamports", 0)) if isinstance(data, dict) else 0
