"""PPM next-symbol estimation with escapes and exclusion.

Starting from a context node, the estimator walks the backoff chain down to the
root. At every order, the symbols not already priced at a longer context share
`1 - escape` of the remaining mass in proportion to their counts; the escape
share is carried down to the next shorter context. Symbols priced at an order
are excluded from every shorter one. Whatever mass is left after the root goes
to the OOV symbol, so a truly novel symbol always keeps a nonzero probability.

With `T` distinct non-excluded symbols whose counts sum to `C` at an order:

    method  symbol s              escape
    A       c_s / (C + 1)         1 / (C + 1)
    C       c_s / (C + T)         T / (C + T)
    D       (2 c_s - 1) / (2 C)   T / (2 C)

An order with `T == 0` (no children, or every child already excluded) is
skipped: it consumes no mass and prices nothing.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import numpy as np
from numpy.typing import NDArray

from ppmlm.model.trie import ContextTrie
from ppmlm.model.vocabulary import OOV_ID, Vocabulary


class EscapeMethod(str, Enum):
    """Escape-probability formula used at every order of the walk."""

    A = "A"
    C = "C"
    D = "D"

    @classmethod
    def parse(cls, value: "EscapeMethod | str") -> "EscapeMethod":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            valid = ", ".join(m.value for m in cls)
            raise ValueError(f"Unknown escape method {value!r}; expected one of {valid}.") from None


@dataclass(frozen=True)
class OrderContribution:
    """What one order of the backoff walk contributed to a prediction."""

    node: int
    order: int
    assigned: tuple[int, ...]
    mass: float
    escape_probability: float


class PPMEstimator:
    """Blends counts along a backoff chain into a full next-symbol distribution."""

    def __init__(
        self,
        trie: ContextTrie,
        vocabulary: Vocabulary,
        *,
        escape_method: EscapeMethod | str = EscapeMethod.C,
    ) -> None:
        self.trie = trie
        self.vocabulary = vocabulary
        self.escape_method = EscapeMethod.parse(escape_method)

    def estimate(self, node: int) -> NDArray[np.float64]:
        """Return probabilities indexed by symbol ID for the context at `node`.

        The array has length `vocabulary.size()` and sums to 1. Entries for
        IDs that were never observed in any context on the chain are zero,
        except OOV, which receives the leftover escape mass.
        """

        probs, _ = self._walk(node, record=False)
        return probs

    def contributions(self, node: int) -> list[OrderContribution]:
        """Per-order breakdown of `estimate(node)`, longest context first."""

        _, trail = self._walk(node, record=True)
        return trail

    def _weights(self, total: int, distinct: int) -> tuple[float, float]:
        """Return `(denominator, escape weight)` for one order."""

        if self.escape_method is EscapeMethod.A:
            return float(total) + 1.0, 1.0
        if self.escape_method is EscapeMethod.C:
            return float(total) + float(distinct), float(distinct)
        return 2.0 * float(total), float(distinct)

    def _symbol_weight(self, count: int) -> float:
        if self.escape_method is EscapeMethod.D:
            return 2.0 * float(count) - 1.0
        return float(count)

    def _walk(
        self, node: int, *, record: bool
    ) -> tuple[NDArray[np.float64], list[OrderContribution]]:
        probs = np.zeros(self.vocabulary.size(), dtype=np.float64)
        trail: list[OrderContribution] = []
        excluded: set[int] = set()
        remaining = 1.0

        for current in self.trie.backoff_chain(node):
            stats = self.trie.node(current)
            if excluded:
                active = [(s, c) for s, c in stats.counts.items() if s not in excluded]
            else:
                active = list(stats.counts.items())
            if not active:
                continue

            distinct = len(active)
            total = sum(count for _, count in active)
            denom, escape_weight = self._weights(total, distinct)
            scale = remaining / denom
            for symbol, count in active:
                probs[symbol] = scale * self._symbol_weight(count)
                excluded.add(symbol)

            escape_probability = escape_weight / denom
            if record:
                trail.append(
                    OrderContribution(
                        node=current,
                        order=stats.order,
                        assigned=tuple(s for s, _ in active),
                        mass=remaining * (1.0 - escape_probability),
                        escape_probability=escape_probability,
                    )
                )
            remaining *= escape_probability

        probs[OOV_ID] += remaining
        return probs, trail
