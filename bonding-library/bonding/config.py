"""
Deployment configuration.

Well-known program and mint addresses differ per cluster (mainnet, devnet,
localnet), so they are injected through `ProtocolConfig` rather than compiled
in. `ProtocolConfig.from_env()` reads overrides from the environment.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from bonding.retry import RetryPolicy

TOKEN_BONDING_PROGRAM_ID = "TBondmkCYxaPCKG4CHYfVTcwQ8on31xnJrPzk8F8WsS"
NATIVE_MINT = "So11111111111111111111111111111111111111112"
TOKEN_PROGRAM_ID = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
ASSOCIATED_TOKEN_PROGRAM_ID = "ATokenGPvbdGVxr1b2hvZbsiqW5xWH25efTNsLJA8knL"
NATIVE_DECIMALS = 9


@dataclass(frozen=True)
class ProtocolConfig:
    """Addresses and policies for one deployment of the bonding program."""

    program_id: str = TOKEN_BONDING_PROGRAM_ID
    native_mint: str = NATIVE_MINT
    # Mint the program uses to represent the native asset on curves. Equal to
    # native_mint when the deployment bonds directly against wrapped SOL.
    wrapped_native_mint: str = NATIVE_MINT
    token_program_id: str = TOKEN_PROGRAM_ID
    associated_token_program_id: str = ASSOCIATED_TOKEN_PROGRAM_ID
    native_decimals: int = NATIVE_DECIMALS
    balance_retry: RetryPolicy = field(default_factory=RetryPolicy)

    def canonical_mint(self, mint: str | None) -> str | None:
        """Map the native mint onto its wrapped representation."""
        if mint is not None and mint == self.native_mint:
            return self.wrapped_native_mint
        return mint

    def is_wrapped_native(self, mint: str) -> bool:
        return mint == self.wrapped_native_mint

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ProtocolConfig":
        """Build a config from `BONDING_*` environment variables (defaults otherwise)."""
        env = os.environ if environ is None else environ
        native_mint = env.get("BONDING_NATIVE_MINT", NATIVE_MINT)
        deadline = env.get("BONDING_BALANCE_RETRY_DEADLINE_SEC")
        retry = RetryPolicy(
            max_attempts=int(env.get("BONDING_BALANCE_RETRY_ATTEMPTS", "4")),
            delay=float(env.get("BONDING_BALANCE_RETRY_DELAY_SEC", "5.0")),
            deadline=float(deadline) if deadline else None,
        )
        return cls(
            program_id=env.get("BONDING_PROGRAM_ID", TOKEN_BONDING_PROGRAM_ID),
            native_mint=native_mint,
            wrapped_native_mint=env.get("BONDING_WRAPPED_NATIVE_MINT", native_mint),
            token_program_id=env.get("BONDING_TOKEN_PROGRAM_ID", TOKEN_PROGRAM_ID),
            associated_token_program_id=env.get(
                "BONDING_ASSOCIATED_TOKEN_PROGRAM_ID", ASSOCIATED_TOKEN_PROGRAM_ID
            ),
            balance_retry=retry,
        )


def configure_logging(level: str | None = None) -> None:
    """Basic logging setup for scripts and services (level from BONDING_LOG_LEVEL)."""
    name = (level or os.environ.get("BONDING_LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(
        level=getattr(logging, name, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
