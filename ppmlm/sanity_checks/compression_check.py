"""Compare the PPM model's code length for a text with standard compressors.

Optional and purely informative. The model's code length is the sum of
`-log2 p` over the text when every character is predicted and then observed,
i.e. what an arithmetic coder driven by the model would emit (up to a couple
of bits). Compressors see the UTF-8 bytes of the same text.
"""

from __future__ import annotations

import bz2
import lzma
import zlib

from ppmlm.evaluation.harness import StreamEvaluation, evaluate_stream
from ppmlm.model.controller import PPMLanguageModel


def text_to_bytes(text: str, *, encoding: str = "utf-8") -> bytes:
    return text.encode(encoding)


def compress_bytes(payload: bytes) -> dict[str, int]:
    """Compress payload with standard-library compressors and return sizes in bytes."""

    return {
        "zlib": len(zlib.compress(payload, level=9)),
        "lzma": len(lzma.compress(payload, preset=9)),
        "bz2": len(bz2.compress(payload, compresslevel=9)),
    }


def model_code_length(
    model: PPMLanguageModel, text: str, *, max_seconds: float | None = None
) -> StreamEvaluation:
    """Adaptively code `text` with `model`, starting from its current state."""

    return evaluate_stream(model, text, max_seconds=max_seconds)


def summarize_compression(text: str, *, model_bits: float | None = None) -> dict:
    """Return raw, compressed and (optionally) model code lengths for `text`.

    Rates are in bits per character so that multi-byte UTF-8 characters are
    compared on the same footing as the character-level model.
    """

    n = len(text)
    payload = text_to_bytes(text)
    raw_bytes = len(payload)
    compressed = compress_bytes(payload)

    def _bpc(num_bytes: int) -> float:
        return float("nan") if n == 0 else (8.0 * float(num_bytes) / float(n))

    compressors = {
        name: {"compressed_bytes": size_bytes, "compressed_bpc": _bpc(size_bytes)}
        for name, size_bytes in compressed.items()
    }
    summary: dict[str, object] = {
        "num_characters": n,
        "raw_bytes": raw_bytes,
        "raw_bpc": _bpc(raw_bytes),
        "compressors": compressors,
    }

    if model_bits is not None:
        model_bits = float(model_bits)
        model_bpc = float("nan") if n == 0 else (model_bits / float(n))
        summary["model"] = {"total_bits": model_bits, "bits_per_character": model_bpc}
        deltas = {"raw_minus_model": _bpc(raw_bytes) - model_bpc}
        for name, stats in compressors.items():
            deltas[f"{name}_minus_model"] = stats["compressed_bpc"] - model_bpc
        summary["deltas_vs_model_bpc"] = deltas

    return summary
