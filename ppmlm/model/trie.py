"""Bounded-depth context trie backing the PPM model.

Each node stands for one context: the path of symbol IDs from the root, oldest
symbol first. A node at order `k` carries sparse counts of the symbols observed
right after its context, and a backoff link to the order `k-1` node for the
same context with its oldest symbol dropped.

Nodes live in a flat arena (`list[TrieNode]`) and refer to each other by index.
The parent -> child edges own the nodes; backoff links are plain indices used
only for traversal. Nodes are never relocated or removed, so every index handed
out stays valid for the lifetime of the trie.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator

import numpy as np

from ppmlm.model.vocabulary import ROOT_ID


ROOT_NODE = 0

# Counts saturate here instead of growing without bound.
COUNT_MAX = int(np.iinfo(np.int64).max)


@dataclass(slots=True)
class TrieNode:
    """One context and the sparse next-symbol counts observed after it."""

    order: int
    symbol: int
    parent: int | None
    backoff: int | None
    total: int = 0
    counts: dict[int, int] = field(default_factory=dict)
    children: dict[int, int] = field(default_factory=dict)


class ContextTrie:
    """Arena of context nodes up to depth `max_order`."""

    def __init__(self, max_order: int) -> None:
        if max_order < 1:
            raise ValueError("max_order must be at least 1.")
        self.max_order = int(max_order)
        self._nodes: list[TrieNode] = [
            TrieNode(order=0, symbol=ROOT_ID, parent=None, backoff=None)
        ]

    @property
    def root(self) -> int:
        return ROOT_NODE

    def node(self, index: int) -> TrieNode:
        return self._nodes[index]

    def child_of(self, node: int, symbol_id: int) -> int | None:
        """Return the child of `node` reached by `symbol_id`, without creating it."""

        return self._nodes[node].children.get(symbol_id)

    def get_or_create_child(self, node: int, symbol_id: int) -> int:
        """Return the child of `node` for `symbol_id`, creating it if needed.

        A new node's backoff target is resolved (and created, recursively,
        lowest order first) before the node itself is appended. This keeps the
        invariant that a backoff node is never younger than the nodes pointing
        at it.
        """

        parent = self._nodes[node]
        existing = parent.children.get(symbol_id)
        if existing is not None:
            return existing
        if parent.order >= self.max_order:
            raise ValueError(
                f"Cannot extend a context of order {parent.order} past max_order={self.max_order}."
            )

        if parent.backoff is None:
            backoff = ROOT_NODE
        else:
            backoff = self.get_or_create_child(parent.backoff, symbol_id)

        index = len(self._nodes)
        self._nodes.append(
            TrieNode(order=parent.order + 1, symbol=symbol_id, parent=node, backoff=backoff)
        )
        parent.children[symbol_id] = index
        return index

    def increment_count(self, node: int, symbol_id: int, delta: int = 1) -> None:
        """Add `delta` occurrences of `symbol_id` after the context of `node`.

        Counts only grow. Both the per-symbol count and the cached total
        saturate at `COUNT_MAX` and never wrap.
        """

        if delta < 1:
            raise ValueError("delta must be a positive integer.")
        stats = self._nodes[node]
        stats.counts[symbol_id] = min(stats.counts.get(symbol_id, 0) + delta, COUNT_MAX)
        stats.total = min(stats.total + delta, COUNT_MAX)

    def count_of(self, node: int, symbol_id: int) -> int:
        return self._nodes[node].counts.get(symbol_id, 0)

    def distinct_symbol_count(self, node: int) -> int:
        return len(self._nodes[node].counts)

    def backoff_of(self, node: int) -> int | None:
        return self._nodes[node].backoff

    def backoff_chain(self, node: int) -> list[int]:
        """Return `node` followed by its backoff nodes, ending at the root."""

        chain: list[int] = []
        current: int | None = node
        while current is not None:
            chain.append(current)
            current = self._nodes[current].backoff
        return chain

    def context_of(self, node: int) -> tuple[int, ...]:
        """Return the symbol IDs spelling the context of `node`, oldest first."""

        path: list[int] = []
        current = self._nodes[node]
        while current.parent is not None:
            path.append(current.symbol)
            current = self._nodes[current.parent]
        path.reverse()
        return tuple(path)

    def iter_nodes(self) -> Iterator[tuple[int, TrieNode]]:
        return iter(enumerate(self._nodes))

    def __len__(self) -> int:
        return len(self._nodes)

    def __repr__(self) -> str:
        return f"ContextTrie(max_order={self.max_order}, nodes={len(self._nodes)})"
