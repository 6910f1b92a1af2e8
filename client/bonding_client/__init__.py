"""Python client for the Bonding GraphQL API."""

from bonding_client.client import BondingClient
from bonding_client.types import (
    BondingNodeInput,
    BuyQuote,
    CurveSegmentInput,
    ExponentialCurveInput,
    Hierarchy,
    HierarchyNode,
    RoyaltiesInput,
    SellQuote,
    SwapEstimate,
    TransitionFeeInput,
)

__all__ = [
    "BondingClient",
    "BondingNodeInput",
    "BuyQuote",
    "CurveSegmentInput",
    "ExponentialCurveInput",
    "Hierarchy",
    "HierarchyNode",
    "RoyaltiesInput",
    "SellQuote",
    "SwapEstimate",
    "TransitionFeeInput",
]
