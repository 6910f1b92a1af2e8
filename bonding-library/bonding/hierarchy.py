"""
Bonding hierarchy: the chain of canonical curves from a token back to its root base.

Design intent:
- A hierarchy is an immutable tuple of nodes ordered base-most -> target-most,
  where each node's target mint is the next node's base mint.
- Parent/child are derived from position; there are no back-pointers.
- Built per request from fresh node snapshots and discarded afterwards.
"""

from __future__ import annotations

import logging
from collections.abc import Generator, Iterable, Iterator
from typing import Optional

from bonding.config import ProtocolConfig
from bonding.errors import ConfigValidationError, NoRouteFound
from bonding.nodes import BondingCurveNode
from bonding.repository import BondingRepository

logger = logging.getLogger(__name__)


ParentWalk = Generator[str, Optional[BondingCurveNode], list[BondingCurveNode]]


def _walk_parents(start: BondingCurveNode, stop: str | None) -> ParentWalk:
    """
    Collect `start` and its canonical ancestors, target-most first.

    Yields the base mint whose canonical curve is needed next and expects that
    curve (or None) to be sent back, so sync and async lookups share one walk.
    """
    chain = [start]
    seen = {start.address}
    current = start
    while stop is None or current.base_mint != stop:
        parent = yield current.base_mint
        if parent is None:
            break
        if parent.address in seen:
            raise ConfigValidationError(f"Cycle in bonding hierarchy at {parent.address}")
        seen.add(parent.address)
        chain.append(parent)
        current = parent
    return chain


class Hierarchy:
    """Ordered chain of bonding curves, base-most first."""

    def __init__(self, nodes: Iterable[BondingCurveNode]) -> None:
        self._nodes: tuple[BondingCurveNode, ...] = tuple(nodes)
        if not self._nodes:
            raise ConfigValidationError("a hierarchy needs at least one node")
        for lower, upper in zip(self._nodes, self._nodes[1:]):
            if lower.target_mint != upper.base_mint:
                raise ConfigValidationError(
                    f"{upper.address} does not bond against the target of {lower.address}"
                )
        self._by_target = {node.target_mint: node for node in self._nodes}

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[BondingCurveNode]:
        return iter(self._nodes)

    def __repr__(self) -> str:
        return f"Hierarchy({' -> '.join(self.mints)})"

    def to_array(self) -> tuple[BondingCurveNode, ...]:
        return self._nodes

    @property
    def root(self) -> BondingCurveNode:
        """Base-most node."""
        return self._nodes[0]

    @property
    def tip(self) -> BondingCurveNode:
        """Target-most node."""
        return self._nodes[-1]

    @property
    def mints(self) -> list[str]:
        """Every mint on the chain, root base first."""
        return [self._nodes[0].base_mint] + [node.target_mint for node in self._nodes]

    def contains(self, mint_a: str, mint_b: str) -> bool:
        mints = self.mints
        return mint_a in mints and mint_b in mints

    def node_for(self, target_mint: str) -> BondingCurveNode | None:
        """The node minting `target_mint`, if it is on this chain."""
        return self._by_target.get(target_mint)

    def _position(self, node: BondingCurveNode) -> int:
        for i, candidate in enumerate(self._nodes):
            if candidate.address == node.address:
                return i
        raise ConfigValidationError(f"{node.address} is not part of this hierarchy")

    def parent(self, node: BondingCurveNode) -> BondingCurveNode | None:
        """The node minting `node`'s base mint."""
        i = self._position(node)
        return self._nodes[i - 1] if i > 0 else None

    def child(self, node: BondingCurveNode) -> BondingCurveNode | None:
        """The node bonding against `node`'s target mint."""
        i = self._position(node)
        return self._nodes[i + 1] if i + 1 < len(self._nodes) else None

    def between(self, mint_a: str, mint_b: str) -> tuple[BondingCurveNode, ...]:
        """Nodes connecting two mints on this chain, base-most first."""
        mints = self.mints
        if mint_a not in mints or mint_b not in mints:
            raise NoRouteFound(f"{mint_a} and {mint_b} are not both on {self!r}")
        i, j = mints.index(mint_a), mints.index(mint_b)
        lo, hi = min(i, j), max(i, j)
        return self._nodes[lo:hi]

    @classmethod
    def from_snapshots(
        cls,
        nodes: Iterable[BondingCurveNode],
        start_address: str,
        stop_at_mint: str | None = None,
        config: ProtocolConfig | None = None,
    ) -> "Hierarchy":
        """Resolve a hierarchy over an in-memory collection of node snapshots."""
        config = config if config is not None else ProtocolConfig()
        pool = list(nodes)
        by_address = {node.address: node for node in pool}
        canonical = {node.target_mint: node for node in pool if node.is_canonical}
        start = by_address.get(start_address)
        if start is None:
            raise NoRouteFound(f"No bonding curve at {start_address}")
        stop = config.canonical_mint(stop_at_mint)

        walk = _walk_parents(start, stop)
        try:
            mint = next(walk)
            while True:
                mint = walk.send(canonical.get(mint))
        except StopIteration as done:
            return cls(reversed(done.value))


async def build_hierarchy(
    repository: BondingRepository,
    node_key: str,
    stop_at_mint: str | None = None,
) -> Hierarchy | None:
    """
    Walk from the node at `node_key` up through canonical parents.

    Stops when the current node's base has no canonical curve or equals
    `stop_at_mint`. Returns None if `node_key` does not exist.
    """
    start = await repository.get_node(node_key)
    if start is None:
        return None
    stop = repository.config.canonical_mint(stop_at_mint)

    walk = _walk_parents(start, stop)
    try:
        mint = next(walk)
        while True:
            mint = walk.send(await repository.get_canonical_node(mint))
    except StopIteration as done:
        chain = done.value

    hierarchy = Hierarchy(reversed(chain))
    logger.debug("Built hierarchy %r from %s", hierarchy, node_key)
    return hierarchy
