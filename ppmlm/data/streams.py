"""Symbol streams for training and evaluating the PPM model.

- `repeating_stream`: a pattern tiled to a given length (highly predictable).
- `iid_stream`: uniformly random integer symbols (incompressible).
- `load_text` / `load_sequence`: character streams from text files and
  integer streams from `.npy` files.
"""

from __future__ import annotations

from pathlib import Path
from typing import Hashable, Sequence

import numpy as np
from numpy.typing import NDArray


IntArray = NDArray[np.int64]


def repeating_stream(pattern: Sequence[Hashable], length: int) -> list[Hashable]:
    """Tile `pattern` until `length` symbols have been produced."""

    if length < 0:
        raise ValueError("length must be non-negative.")
    if len(pattern) == 0:
        raise ValueError("pattern must contain at least one symbol.")
    reps, tail = divmod(length, len(pattern))
    return list(pattern) * reps + list(pattern[:tail])


def iid_stream(alphabet_size: int, length: int, *, seed: int = 0) -> IntArray:
    """Draw `length` i.i.d. uniform symbols from `0..alphabet_size-1`."""

    if alphabet_size <= 0:
        raise ValueError("alphabet_size must be positive.")
    if length < 0:
        raise ValueError("length must be non-negative.")
    rng = np.random.default_rng(seed)
    return rng.integers(0, alphabet_size, size=length, dtype=np.int64)


def load_text(path: str | Path, *, encoding: str = "utf-8") -> str:
    """Read a text file to be consumed one character at a time."""

    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Missing text file: {p}")
    return p.read_text(encoding=encoding)


def load_sequence(path: str | Path) -> IntArray:
    """Load a 1D integer sequence from a `.npy` file as int64."""

    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Missing sequence file: {p}")
    arr = np.load(p)
    if arr.ndim != 1:
        raise ValueError(f"Expected 1D sequence at {p}, got shape {arr.shape}.")
    return np.asarray(arr, dtype=np.int64)


def infer_alphabet_size(*sequences: IntArray) -> int:
    """Smallest alphabet covering every symbol in `sequences`."""

    max_symbol = -1
    for seq in sequences:
        if seq.size:
            if int(seq.min()) < 0:
                raise ValueError("Sequences must not contain negative symbols.")
            max_symbol = max(max_symbol, int(seq.max()))
    if max_symbol < 0:
        raise ValueError("Cannot infer alphabet size from empty sequences.")
    return max_symbol + 1
