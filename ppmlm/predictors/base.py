"""Abstract predictor interface for integer-alphabet sequential evaluation."""

from __future__ import annotations

from abc import ABC, abstractmethod

import numpy as np
from numpy.typing import NDArray


class Predictor(ABC):
    """Base class for online predictors scored by `evaluate_sequence`.

    Predictors operate strictly online over the alphabet `0..alphabet_size-1`:
    - `predict_next` prices the next symbol from the history seen so far.
    - `update` receives the revealed symbol afterwards.
    - No lookahead is possible; predictors keep their own history.

    Notes:
    - The array returned by `predict_next` may be an internal buffer reused on
      the next call. Copy it if you need to keep it.
    """

    def __init__(self, alphabet_size: int) -> None:
        if alphabet_size <= 0:
            raise ValueError("alphabet_size must be positive.")
        self.alphabet_size = int(alphabet_size)

    @abstractmethod
    def initialize(self) -> None:
        """Reset per-sequence state before evaluating a new sequence."""

    @abstractmethod
    def predict_next(self) -> NDArray[np.float64]:
        """Return a length-`alphabet_size` array of log2 probabilities."""

    @abstractmethod
    def update(self, observed_symbol: int) -> None:
        """Incorporate the symbol revealed after the last prediction."""

    def reset(self) -> None:
        """Alias for `initialize`."""
        self.initialize()

    def _validate_symbol(self, symbol: int) -> None:
        if symbol < 0 or symbol >= self.alphabet_size:
            raise ValueError(
                f"Observed symbol {symbol} out of range [0, {self.alphabet_size})."
            )
