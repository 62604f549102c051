"""Uniform reference predictor: log2(alphabet_size) bits per symbol."""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from ppmlm.predictors.base import Predictor


class UniformPredictor(Predictor):
    """Assigns every symbol the same probability, whatever the history."""

    def __init__(self, alphabet_size: int) -> None:
        super().__init__(alphabet_size=alphabet_size)
        self._log_probs = np.full(
            self.alphabet_size, -np.log2(float(self.alphabet_size)), dtype=np.float64
        )

    def initialize(self) -> None:
        """Stateless."""

    def predict_next(self) -> NDArray[np.float64]:
        return self._log_probs

    def update(self, observed_symbol: int) -> None:
        self._validate_symbol(int(observed_symbol))
