"""Decoded ledger account snapshots and unit conversion."""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class MintInfo:
    """Mint account: decimals and raw (integer) circulating supply."""

    address: str
    decimals: int
    supply: int


@dataclass(frozen=True)
class TokenAccountInfo:
    """Token account: mint, owner and raw balance."""

    address: str
    mint: str
    owner: str
    amount: int


@dataclass(frozen=True)
class Confirmation:
    """Outcome of submitting one transaction."""

    success: bool
    signature: str | None = None
    error: str | None = None


def to_raw(amount: float, decimals: int) -> int:
    """UI amount to raw integer units, rounding down."""
    return math.floor(amount * 10**decimals)


def to_raw_ceil(amount: float, decimals: int) -> int:
    """UI amount to raw integer units, rounding up."""
    return math.ceil(amount * 10**decimals)


def to_ui(raw: int, decimals: int) -> float:
    """Raw integer units to UI amount."""
    return raw / 10**decimals
