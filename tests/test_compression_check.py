"""Lightweight tests for the optional compression sanity check."""

from __future__ import annotations

import math

from ppmlm.model.controller import PPMLanguageModel
from ppmlm.sanity_checks.compression_check import (
    compress_bytes,
    model_code_length,
    summarize_compression,
    text_to_bytes,
)


def test_text_to_bytes_uses_utf8() -> None:
    assert text_to_bytes("abc") == b"abc"
    assert len(text_to_bytes("é")) == 2


def test_compress_bytes_returns_all_keys() -> None:
    out = compress_bytes(b"abcabcabcabc" * 100)

    assert set(out.keys()) == {"zlib", "lzma", "bz2"}
    assert all(isinstance(v, int) and v > 0 for v in out.values())


def test_summary_without_model_bits() -> None:
    summary = summarize_compression("hello world")

    assert summary["num_characters"] == 11
    assert summary["raw_bpc"] == 8.0
    assert "model" not in summary


def test_ppm_codes_repetitive_text_well_below_raw_size() -> None:
    text = "the cat sat on the mat. " * 60
    result = model_code_length(PPMLanguageModel(4), text)
    summary = summarize_compression(text, model_bits=result.total_bits)

    model = summary["model"]
    assert model["bits_per_character"] < 1.0
    assert summary["deltas_vs_model_bpc"]["raw_minus_model"] > 7.0
    assert set(summary["deltas_vs_model_bpc"]) == {
        "raw_minus_model",
        "zlib_minus_model",
        "lzma_minus_model",
        "bz2_minus_model",
    }


def test_empty_text_rates_are_nan() -> None:
    summary = summarize_compression("", model_bits=0.0)

    assert math.isnan(summary["raw_bpc"])
    assert math.isnan(summary["model"]["bits_per_character"])
