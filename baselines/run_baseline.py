"""Train an adaptive PPM model on a text file and evaluate it on another.

Usage (from repo root):
    python -m baselines.run_baseline --train-path data/train.txt --test-path data/test.txt
    python -m baselines.run_baseline --train-path a.txt --test-path b.txt --max-order 3 --escape-method D
    python -m baselines.run_baseline --train-path a.txt --test-path b.txt --closed-vocabulary
"""

from __future__ import annotations

import argparse
from dataclasses import replace
import json
import logging
from pathlib import Path
from typing import Any

from ppmlm.data.streams import load_text
from ppmlm.evaluation.harness import StreamEvaluation, evaluate_stream
from ppmlm.model.config import PPMConfig
from ppmlm.model.controller import PPMLanguageModel


def _train_model(config: PPMConfig, train_text: str) -> PPMLanguageModel:
    # The vocabulary stays open while training; --closed-vocabulary closes it
    # afterwards so that test-only characters are priced as OOV.
    model = PPMLanguageModel.from_config(replace(config, closed_vocabulary=False))
    model.observe_many(train_text)
    if config.closed_vocabulary:
        model.vocabulary.close()
    model.reset()
    return model


def _summary(
    *, config: PPMConfig, model: PPMLanguageModel, train_chars: int, result: StreamEvaluation
) -> dict[str, Any]:
    return {
        "max_order": config.max_order,
        "escape_method": model.escape_method.value,
        "closed_vocabulary": config.closed_vocabulary,
        "train_characters": train_chars,
        "vocabulary_size": model.vocabulary.size(),
        "trie_nodes": len(model.trie),
        "num_symbols_evaluated": result.num_symbols,
        "novel_symbols": result.novel_symbols,
        "total_bits": result.total_bits,
        "bits_per_symbol": result.bits_per_symbol,
        "perplexity": result.perplexity,
        "elapsed_seconds": result.elapsed_seconds,
        "timed_out": result.timed_out,
    }


def _print_summary(summary: dict[str, Any]) -> None:
    print("PPM Evaluation Summary")
    for key, value in summary.items():
        if isinstance(value, float):
            print(f"  {key}: {value:.6f}")
        else:
            print(f"  {key}: {value}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Train and evaluate an adaptive PPM text model.")
    parser.add_argument("--train-path", type=str, required=True)
    parser.add_argument("--test-path", type=str, required=True)
    parser.add_argument("--max-order", type=int, default=5)
    parser.add_argument("--escape-method", choices=("A", "C", "D"), default="C")
    parser.add_argument("--closed-vocabulary", action="store_true")
    parser.add_argument("--max-seconds", type=float, default=None)
    parser.add_argument("--json-out", type=str, default=None)
    parser.add_argument("--debug", action="store_true", help="Log model internals at DEBUG level.")
    args = parser.parse_args()

    if args.debug:
        logging.basicConfig(level=logging.DEBUG)

    config = PPMConfig(
        max_order=args.max_order,
        escape_method=args.escape_method,
        closed_vocabulary=args.closed_vocabulary,
        debug=args.debug,
    )
    config.validate()

    train_text = load_text(args.train_path)
    test_text = load_text(args.test_path)

    model = _train_model(config, train_text)
    result = evaluate_stream(model, test_text, max_seconds=args.max_seconds)
    summary = _summary(config=config, model=model, train_chars=len(train_text), result=result)
    _print_summary(summary)

    if args.json_out is not None:
        out_path = Path(args.json_out)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        with out_path.open("w", encoding="utf-8") as fh:
            json.dump(summary, fh, indent=2)
        print(f"  json_written_to: {out_path}")


if __name__ == "__main__":
    main()
