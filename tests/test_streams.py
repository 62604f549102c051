"""Tests for stream generators and loaders."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest

from ppmlm.data.streams import (
    infer_alphabet_size,
    iid_stream,
    load_sequence,
    load_text,
    repeating_stream,
)


def test_repeating_stream_tiles_and_truncates() -> None:
    assert repeating_stream("abc", 7) == list("abcabca")
    assert repeating_stream([1, 2], 0) == []
    with pytest.raises(ValueError):
        repeating_stream([], 3)


def test_iid_stream_is_seeded_and_in_range() -> None:
    first = iid_stream(5, 1000, seed=42)
    second = iid_stream(5, 1000, seed=42)

    np.testing.assert_array_equal(first, second)
    assert first.dtype == np.int64
    assert first.min() >= 0 and first.max() < 5


def test_loaders_round_trip_files(tmp_path: Path) -> None:
    text_path = tmp_path / "t.txt"
    text_path.write_text("héllo", encoding="utf-8")
    seq_path = tmp_path / "s.npy"
    np.save(seq_path, np.array([3, 0, 2], dtype=np.int32))

    assert load_text(text_path) == "héllo"
    seq = load_sequence(seq_path)
    assert seq.dtype == np.int64
    assert infer_alphabet_size(seq) == 4


def test_loaders_report_missing_files(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_text(tmp_path / "missing.txt")
    with pytest.raises(FileNotFoundError):
        load_sequence(tmp_path / "missing.npy")


def test_load_sequence_rejects_2d_arrays(tmp_path: Path) -> None:
    path = tmp_path / "m.npy"
    np.save(path, np.zeros((2, 2), dtype=np.int64))

    with pytest.raises(ValueError):
        load_sequence(path)


def test_infer_alphabet_size_rejects_empty_input() -> None:
    with pytest.raises(ValueError):
        infer_alphabet_size(np.array([], dtype=np.int64))
