"""Sequential evaluation: code length, bits per symbol and perplexity.

Two entry points:
- `evaluate_sequence` scores any integer-alphabet `Predictor` in log2 units.
- `evaluate_stream` scores a `PPMLanguageModel` directly over arbitrary
  symbols, with perplexity `exp(-mean(ln p))`. Every `predict()` is followed
  by the matching `observe()`, so the model keeps adapting.
"""

from __future__ import annotations

from dataclasses import dataclass
import math
from time import perf_counter
from typing import Hashable, Iterable

import numpy as np
from numpy.typing import NDArray

from ppmlm.model.controller import PPMLanguageModel
from ppmlm.model.vocabulary import OOV_ID
from ppmlm.predictors.base import Predictor


@dataclass(frozen=True)
class EvaluationResult:
    """Summary of a sequential evaluation run."""

    num_tokens: int
    total_bits: float
    bits_per_symbol: float
    perplexity: float
    elapsed_seconds: float
    tokens_per_second: float
    timed_out: bool


@dataclass(frozen=True)
class StreamEvaluation:
    """Summary of a symbol-level evaluation of a `PPMLanguageModel`."""

    num_symbols: int
    total_nats: float
    perplexity: float
    bits_per_symbol: float
    novel_symbols: int
    elapsed_seconds: float
    timed_out: bool

    @property
    def total_bits(self) -> float:
        return self.total_nats / math.log(2.0)


def _validate_log_probs(log_probs: NDArray[np.float64], alphabet_size: int) -> None:
    if log_probs.shape != (alphabet_size,):
        raise ValueError(
            f"predict_next must return shape ({alphabet_size},), got {log_probs.shape}."
        )
    if np.any(np.isnan(log_probs)) or np.any(np.isposinf(log_probs)):
        raise ValueError("predict_next returned invalid log2 probabilities (NaN or +inf).")
    if np.any(log_probs > 0.0):
        raise ValueError("Log2 probabilities cannot be positive.")

    prob_sum = float(np.sum(np.exp2(log_probs)))
    if not np.isclose(prob_sum, 1.0, atol=1e-6):
        raise ValueError(f"Predicted probabilities must sum to 1 (got {prob_sum:.8f}).")


def _rate(count: int, elapsed_seconds: float) -> float:
    if elapsed_seconds > 0:
        return count / elapsed_seconds
    return float("inf") if count > 0 else 0.0


def evaluate_sequence(
    predictor: Predictor,
    sequence: Iterable[int],
    *,
    max_seconds: float | None = None,
    validate_probabilities: bool = True,
) -> EvaluationResult:
    """Evaluate a predictor on an integer sequence in strictly sequential mode."""

    if max_seconds is not None and max_seconds < 0:
        raise ValueError("max_seconds must be non-negative or None.")

    predictor.initialize()

    total_bits = 0.0
    num_tokens = 0
    start = perf_counter()
    timed_out = False

    for raw_symbol in sequence:
        if max_seconds is not None and (perf_counter() - start) >= max_seconds:
            timed_out = True
            break

        symbol = int(raw_symbol)
        if symbol < 0 or symbol >= predictor.alphabet_size:
            raise ValueError(
                f"Observed symbol {symbol} out of range [0, {predictor.alphabet_size})."
            )

        log_probs = np.asarray(predictor.predict_next(), dtype=np.float64)
        if validate_probabilities:
            _validate_log_probs(log_probs, predictor.alphabet_size)

        total_bits += -float(log_probs[symbol])
        predictor.update(symbol)
        num_tokens += 1

    elapsed_seconds = perf_counter() - start
    bits_per_symbol = total_bits / num_tokens if num_tokens else float("nan")

    return EvaluationResult(
        num_tokens=num_tokens,
        total_bits=total_bits,
        bits_per_symbol=bits_per_symbol,
        perplexity=float(np.exp2(bits_per_symbol)),
        elapsed_seconds=elapsed_seconds,
        tokens_per_second=_rate(num_tokens, elapsed_seconds),
        timed_out=timed_out,
    )


def evaluate_stream(
    model: PPMLanguageModel,
    stream: Iterable[Hashable],
    *,
    max_seconds: float | None = None,
) -> StreamEvaluation:
    """Score a held-out stream with interleaved `predict()` / `observe()` calls.

    A symbol the model has never observed (unknown to the vocabulary, or known
    but never counted) is priced at the OOV probability and counted in
    `novel_symbols`.
    """

    if max_seconds is not None and max_seconds < 0:
        raise ValueError("max_seconds must be non-negative or None.")

    total_nats = 0.0
    num_symbols = 0
    novel_symbols = 0
    start = perf_counter()
    timed_out = False

    for symbol in stream:
        if max_seconds is not None and (perf_counter() - start) >= max_seconds:
            timed_out = True
            break

        probs = model.predict_ids()
        symbol_id = model.vocabulary.lookup(symbol)
        prob = float(probs[symbol_id])
        if symbol_id == OOV_ID or prob <= 0.0:
            prob = float(probs[OOV_ID])
            novel_symbols += 1
        total_nats += -math.log(prob)
        model.observe(symbol)
        num_symbols += 1

    elapsed_seconds = perf_counter() - start
    if num_symbols:
        mean_nats = total_nats / num_symbols
        perplexity = math.exp(mean_nats)
        bits_per_symbol = mean_nats / math.log(2.0)
    else:
        perplexity = float("nan")
        bits_per_symbol = float("nan")

    return StreamEvaluation(
        num_symbols=num_symbols,
        total_nats=total_nats,
        perplexity=perplexity,
        bits_per_symbol=bits_per_symbol,
        novel_symbols=novel_symbols,
        elapsed_seconds=elapsed_seconds,
        timed_out=timed_out,
    )


def perplexity(model: PPMLanguageModel, stream: Iterable[Hashable]) -> float:
    """Shorthand for `evaluate_stream(model, stream).perplexity`."""

    return evaluate_stream(model, stream).perplexity
