"""Bonding library: curves, pricing engine, hierarchies, composed pricing and swap routing."""

from bonding.accounts import Confirmation, MintInfo, TokenAccountInfo
from bonding.config import ProtocolConfig, configure_logging
from bonding.context import CurveContext, RoyaltyPercentages
from bonding.curves import (
    ExponentialCurveConfig,
    TimeCurveConfig,
    TimeCurveSegment,
    TransitionFee,
)
from bonding.engine import LinearDecayTransitionFees, NoTransitionFees, PricingEngine
from bonding.errors import (
    ArithmeticDomainError,
    BondingError,
    ConfigValidationError,
    FrozenCurveError,
    NoRouteFound,
    PurchaseCapExceeded,
    SourceAccountMissing,
    StateUnavailable,
    UnsupportedCurveKind,
)
from bonding.hierarchy import Hierarchy, build_hierarchy
from bonding.interfaces import (
    AccountStore,
    CurveEvaluator,
    InstructionBuilder,
    TransactionExecutor,
    TransitionFeePolicy,
)
from bonding.model import CurveModel, create_default_model
from bonding.nodes import BondingCurveNode
from bonding.pricing import BondingPricing
from bonding.quotes import BuyQuote, SellQuote, compute_buy, compute_sell
from bonding.repository import BondingRepository
from bonding.retry import RetryPolicy
from bonding.router import HopResult, SwapResult, SwapRouter, SwapState
from bonding.simulator import LocalLedger
from bonding.stores import InMemoryAccountStore, RedisAccountStore

__all__ = [
    "AccountStore",
    "CurveEvaluator",
    "InstructionBuilder",
    "TransactionExecutor",
    "TransitionFeePolicy",
    "ExponentialCurveConfig",
    "TimeCurveConfig",
    "TimeCurveSegment",
    "TransitionFee",
    "CurveModel",
    "create_default_model",
    "CurveContext",
    "RoyaltyPercentages",
    "PricingEngine",
    "NoTransitionFees",
    "LinearDecayTransitionFees",
    "BuyQuote",
    "SellQuote",
    "compute_buy",
    "compute_sell",
    "BondingCurveNode",
    "Hierarchy",
    "build_hierarchy",
    "BondingPricing",
    "SwapRouter",
    "SwapResult",
    "SwapState",
    "HopResult",
    "RetryPolicy",
    "ProtocolConfig",
    "configure_logging",
    "MintInfo",
    "TokenAccountInfo",
    "Confirmation",
    "BondingRepository",
    "InMemoryAccountStore",
    "RedisAccountStore",
    "LocalLedger",
    "BondingError",
    "ConfigValidationError",
    "UnsupportedCurveKind",
    "ArithmeticDomainError",
    "NoRouteFound",
    "SourceAccountMissing",
    "StateUnavailable",
    "FrozenCurveError",
    "PurchaseCapExceeded",
]
