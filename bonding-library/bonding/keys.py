"""Program-derived addresses for token bondings and associated token accounts."""

from __future__ import annotations

from solders.pubkey import Pubkey

from bonding.config import ProtocolConfig

TOKEN_BONDING_SEED = b"token-bonding"


def token_bonding_key(config: ProtocolConfig, target_mint: str, index: int = 0) -> str:
    """
    Address of the token bonding for `target_mint` at `index`.

    Index 0 is the canonical curve that can mint `target_mint`; all other
    indices are marketplace curves for the same target.
    """
    seeds = [
        TOKEN_BONDING_SEED,
        bytes(Pubkey.from_string(target_mint)),
        index.to_bytes(2, "little"),
    ]
    address, _bump = Pubkey.find_program_address(seeds, Pubkey.from_string(config.program_id))
    return str(address)


def associated_token_address(config: ProtocolConfig, owner: str, mint: str) -> str:
    """Associated token account of `owner` for `mint`."""
    seeds = [
        bytes(Pubkey.from_string(owner)),
        bytes(Pubkey.from_string(config.token_program_id)),
        bytes(Pubkey.from_string(mint)),
    ]
    address, _bump = Pubkey.find_program_address(
        seeds, Pubkey.from_string(config.associated_token_program_id)
    )
    return str(address)
