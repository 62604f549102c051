"""Online PPM language model: observe symbols, predict the next one.

The controller owns the context pointer, the trie node for the last
`min(max_order, position)` observed symbols. `observe()` records the new symbol
in every suffix context of the current history (the pointer and its backoff
chain) and then advances the pointer. `predict()` is read-only.

Unseen symbols never raise. An open vocabulary gives them a fresh ID. A closed
vocabulary maps them to OOV; such an OOV event records no counts and moves
the pointer back to the root, because no modelled context contains an unknown
symbol.
"""

from __future__ import annotations

import logging
from typing import Hashable, Iterable

import numpy as np
from numpy.typing import NDArray

from ppmlm.model.config import PPMConfig
from ppmlm.model.estimator import EscapeMethod, PPMEstimator
from ppmlm.model.trie import ContextTrie
from ppmlm.model.vocabulary import NUM_RESERVED_IDS, OOV_ID, ROOT_ID, Vocabulary


class PPMLanguageModel:
    """Adaptive PPM model over an externally defined symbol alphabet.

    Parameters:
        max_order: Longest context used (N). Must be positive.
        closed_vocabulary: Build a closed vocabulary (unseen symbols -> OOV).
            Only used when `vocabulary` is not supplied.
        vocabulary: Optional shared `Vocabulary` instance.
        trie: Optional shared `ContextTrie`. Its `max_order` must match.
        escape_method: One of "A", "C" (default) or "D".
        debug: Log OOV events and per-order prediction breakdowns at DEBUG level.
        debug_max_messages: Cap on debug messages between resets.

    Several models may share one vocabulary and trie (one pointer each) as long
    as callers serialize their `observe()` calls.
    """

    def __init__(
        self,
        max_order: int,
        *,
        closed_vocabulary: bool = False,
        vocabulary: Vocabulary | None = None,
        trie: ContextTrie | None = None,
        escape_method: EscapeMethod | str = EscapeMethod.C,
        debug: bool = False,
        debug_max_messages: int = 20,
    ) -> None:
        if max_order < 1:
            raise ValueError("max_order must be at least 1.")
        if debug_max_messages < 0:
            raise ValueError("debug_max_messages must be non-negative.")
        if trie is not None and trie.max_order != max_order:
            raise ValueError(
                f"Shared trie has max_order={trie.max_order}, model asked for {max_order}."
            )

        self.max_order = int(max_order)
        self.vocabulary = vocabulary if vocabulary is not None else Vocabulary(closed=closed_vocabulary)
        self.trie = trie if trie is not None else ContextTrie(self.max_order)
        self.estimator = PPMEstimator(self.trie, self.vocabulary, escape_method=escape_method)
        self.debug = bool(debug)
        self.debug_max_messages = int(debug_max_messages)

        self._context = self.trie.root
        self._debug_messages_emitted = 0
        self._logger = logging.getLogger(__name__)

    @classmethod
    def from_config(
        cls,
        config: PPMConfig,
        *,
        vocabulary: Vocabulary | None = None,
        trie: ContextTrie | None = None,
    ) -> "PPMLanguageModel":
        config.validate()
        return cls(
            config.max_order,
            closed_vocabulary=config.closed_vocabulary,
            vocabulary=vocabulary,
            trie=trie,
            escape_method=config.escape_method,
            debug=config.debug,
            debug_max_messages=config.debug_max_messages,
        )

    @property
    def escape_method(self) -> EscapeMethod:
        return self.estimator.escape_method

    @property
    def context_node(self) -> int:
        """Arena index of the current context pointer."""

        return self._context

    @property
    def order(self) -> int:
        return self.trie.node(self._context).order

    @property
    def context(self) -> tuple[Hashable, ...]:
        """Symbols of the current context, oldest first."""

        return tuple(self.vocabulary.symbol_of(i) for i in self.trie.context_of(self._context))

    def observe(self, symbol: Hashable) -> None:
        """Record `symbol` in every suffix context, then advance the pointer."""

        symbol_id = self.vocabulary.id_of(symbol)
        if symbol_id < NUM_RESERVED_IDS:
            self._on_oov(symbol)
            return

        for node in self.trie.backoff_chain(self._context):
            self.trie.increment_count(node, symbol_id)

        current = self.trie.node(self._context)
        if current.order >= self.max_order:
            # Drop the oldest symbol so the extended context stays at order N.
            assert current.backoff is not None
            base = current.backoff
        else:
            base = self._context
        self._context = self.trie.get_or_create_child(base, symbol_id)

    def observe_many(self, symbols: Iterable[Hashable]) -> None:
        for symbol in symbols:
            self.observe(symbol)

    def predict_ids(self) -> NDArray[np.float64]:
        """Return next-symbol probabilities indexed by vocabulary ID."""

        probs = self.estimator.estimate(self._context)
        if self.debug and self._logger.isEnabledFor(logging.DEBUG):
            self._log_prediction()
        return probs

    def predict(self) -> dict[Hashable, float]:
        """Return `{symbol: probability}` for OOV and every known symbol.

        Symbols never observed in the current context or any of its suffixes
        map to 0.0; OOV always carries the leftover escape mass.
        """

        probs = self.predict_ids()
        symbol_of = self.vocabulary.symbol_of
        return {
            symbol_of(symbol_id): float(probs[symbol_id])
            for symbol_id in range(probs.shape[0])
            if symbol_id != ROOT_ID
        }

    def probability(self, symbol: Hashable) -> float:
        """Probability that `symbol` comes next.

        Symbols never observed so far (unknown, or known but never counted)
        are priced at the OOV probability, the mass reserved for novel symbols.
        """

        probs = self.estimator.estimate(self._context)
        prob = float(probs[self.vocabulary.lookup(symbol)])
        if prob <= 0.0:
            return float(probs[OOV_ID])
        return prob

    def top_k(self, k: int) -> list[tuple[Hashable, float]]:
        """Return up to `k` most likely known symbols, most likely first."""

        if k < 0:
            raise ValueError("k must be non-negative.")
        probs = self.estimator.estimate(self._context)
        user_probs = probs[NUM_RESERVED_IDS:]
        order = np.argsort(-user_probs, kind="stable")
        ranked: list[tuple[Hashable, float]] = []
        for offset in order[:k]:
            prob = float(user_probs[offset])
            if prob <= 0.0:
                break
            ranked.append((self.vocabulary.symbol_of(int(offset) + NUM_RESERVED_IDS), prob))
        return ranked

    def reset(self) -> None:
        """Forget the current history but keep everything learned."""

        self._context = self.trie.root
        self._debug_messages_emitted = 0

    def _on_oov(self, symbol: Hashable) -> None:
        if (
            self.debug
            and self._logger.isEnabledFor(logging.DEBUG)
            and self._debug_messages_emitted < self.debug_max_messages
        ):
            self._logger.debug(
                "PPMLanguageModel OOV event: symbol=%r context_order=%d; context reset to root",
                symbol,
                self.order,
            )
            self._debug_messages_emitted += 1
        self._context = self.trie.root

    def _log_prediction(self) -> None:
        if self._debug_messages_emitted >= self.debug_max_messages:
            return
        breakdown = [
            (c.order, len(c.assigned), round(c.escape_probability, 6))
            for c in self.estimator.contributions(self._context)
        ]
        self._logger.debug(
            "PPMLanguageModel predict: context_order=%d orders(order, priced, escape)=%s",
            self.order,
            breakdown,
        )
        self._debug_messages_emitted += 1

    def __repr__(self) -> str:
        return (
            f"PPMLanguageModel(max_order={self.max_order}, escape_method={self.escape_method.value}, "
            f"vocabulary_size={self.vocabulary.size()}, nodes={len(self.trie)})"
        )
