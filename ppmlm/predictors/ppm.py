"""Integer-alphabet adapter exposing `PPMLanguageModel` as a `Predictor`.

The wrapped model uses a closed vocabulary holding exactly the symbols
`0..alphabet_size-1`. Its OOV mass (the probability left for symbols never
observed so far) is spread evenly over the whole alphabet, so every symbol
keeps a finite code length even before it has been seen once.
"""

from __future__ import annotations

from typing import Iterable

import numpy as np
from numpy.typing import NDArray

from ppmlm.model.controller import PPMLanguageModel
from ppmlm.model.estimator import EscapeMethod
from ppmlm.model.vocabulary import NUM_RESERVED_IDS, OOV_ID, Vocabulary
from ppmlm.predictors.base import Predictor


class PPMPredictor(Predictor):
    """Adaptive PPM predictor scored in log2 probabilities.

    The model learns from every `update()`. `fit()` primes it on a training
    sequence first; `initialize()` forgets the current history but keeps all
    counts, so evaluation starts from an empty context.
    """

    def __init__(
        self,
        alphabet_size: int,
        *,
        max_order: int = 5,
        escape_method: EscapeMethod | str = EscapeMethod.C,
        debug: bool = False,
    ) -> None:
        super().__init__(alphabet_size=alphabet_size)
        vocabulary = Vocabulary(range(self.alphabet_size), closed=True)
        self.model = PPMLanguageModel(
            max_order,
            vocabulary=vocabulary,
            escape_method=escape_method,
            debug=debug,
        )
        self._log_probs_buffer = np.empty(self.alphabet_size, dtype=np.float64)
        self._awaiting_update = False

    def initialize(self) -> None:
        self.model.reset()
        self._awaiting_update = False

    def fit(self, sequence: Iterable[int]) -> "PPMPredictor":
        """Observe a training sequence, then reset the history."""

        for raw_symbol in sequence:
            symbol = int(raw_symbol)
            self._validate_symbol(symbol)
            self.model.observe(symbol)
        self.initialize()
        return self

    def predict_next(self) -> NDArray[np.float64]:
        probs = self.model.predict_ids()
        novel_share = probs[OOV_ID] / self.alphabet_size
        np.add(probs[NUM_RESERVED_IDS:], novel_share, out=self._log_probs_buffer)
        np.log2(self._log_probs_buffer, out=self._log_probs_buffer)
        self._awaiting_update = True
        return self._log_probs_buffer

    def update(self, observed_symbol: int) -> None:
        symbol = int(observed_symbol)
        self._validate_symbol(symbol)
        if not self._awaiting_update:
            raise RuntimeError(
                "update() called before predict_next() or predictor state was not initialized."
            )
        self.model.observe(symbol)
        self._awaiting_update = False
