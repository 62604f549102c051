"""Optional sanity check: compare PPM code length for a text with standard compressors.

Usage (from repo root):
    python -m baselines.run_sanity_check --text-path data/test.txt --max-order 5
"""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from ppmlm.data.streams import load_text
from ppmlm.model.config import PPMConfig
from ppmlm.model.controller import PPMLanguageModel
from ppmlm.sanity_checks.compression_check import model_code_length, summarize_compression


def _print_summary(*, max_order: int, escape_method: str, summary: dict) -> None:
    print("Sanity Check: PPM Code Length vs Compression")
    print(f"  max_order: {max_order}")
    print(f"  escape_method: {escape_method}")
    print(f"  num_characters: {summary['num_characters']}")
    print(f"  raw_bpc: {summary['raw_bpc']:.6f}")

    for name, stats in summary["compressors"].items():
        print(
            f"  {name}_bpc: {stats['compressed_bpc']:.6f} "
            f"({stats['compressed_bytes']} bytes)"
        )

    model = summary.get("model")
    if model is not None:
        print(f"  model_bpc: {model['bits_per_character']:.6f}")
        for name, delta in summary["deltas_vs_model_bpc"].items():
            print(f"  delta_{name}_bpc: {delta:.6f}")
    else:
        print("  model_bpc: unavailable (evaluation timed out)")


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Compare adaptive PPM code length with zlib/lzma/bz2 on one text file."
    )
    parser.add_argument("--text-path", type=str, required=True)
    parser.add_argument("--max-order", type=int, default=5)
    parser.add_argument("--escape-method", choices=("A", "C", "D"), default="C")
    parser.add_argument("--max-seconds", type=float, default=None)
    parser.add_argument("--json-out", type=str, default=None)
    parser.add_argument("--debug", action="store_true", help="Log model internals at DEBUG level.")
    args = parser.parse_args()

    if args.debug:
        logging.basicConfig(level=logging.DEBUG)

    config = PPMConfig(max_order=args.max_order, escape_method=args.escape_method, debug=args.debug)
    model = PPMLanguageModel.from_config(config)
    text = load_text(args.text_path)

    result = model_code_length(model, text, max_seconds=args.max_seconds)

    summary = summarize_compression(
        text, model_bits=None if result.timed_out else result.total_bits
    )
    _print_summary(max_order=args.max_order, escape_method=args.escape_method, summary=summary)

    if args.json_out is not None:
        out_path = Path(args.json_out)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            "tool": "compression_sanity_check",
            "text_path": str(args.text_path),
            "params": {"max_order": args.max_order, "escape_method": args.escape_method},
            "evaluation": {
                "num_symbols": result.num_symbols,
                "bits_per_symbol": result.bits_per_symbol,
                "perplexity": result.perplexity,
                "timed_out": result.timed_out,
            },
            "compression": summary,
        }
        with out_path.open("w", encoding="utf-8") as fh:
            json.dump(payload, fh, indent=2)
        print(f"  json_written_to: {out_path}")


if __name__ == "__main__":
    main()
