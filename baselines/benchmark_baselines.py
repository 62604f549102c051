"""Benchmark table for the uniform baseline and PPM configurations.

Usage (from repo root):
    python -m baselines.benchmark_baselines --train-path train.npy --test-path test.npy
    python -m baselines.benchmark_baselines --test-path test.npy --include "uniform,ppm:order=2,escape=A"
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any

from ppmlm.data.streams import infer_alphabet_size, load_sequence
from ppmlm.evaluation.harness import evaluate_sequence
from ppmlm.predictors.base import Predictor
from ppmlm.predictors.ppm import PPMPredictor
from ppmlm.predictors.uniform import UniformPredictor


_SPEC_HEADS = ("uniform", "ppm")


def _default_specs() -> list[str]:
    return [
        "uniform",
        "ppm:order=2,escape=C",
        "ppm:order=3,escape=C",
        "ppm:order=5,escape=C",
        "ppm:order=5,escape=A",
        "ppm:order=5,escape=D",
    ]


def _split_include_specs(text: str) -> list[str]:
    # Spec parameters are comma-separated too: a token starts a new spec only
    # when it begins with a known baseline name.
    parts = [p.strip() for p in text.split(",") if p.strip()]
    specs: list[str] = []
    for token in parts:
        if token.startswith(_SPEC_HEADS):
            specs.append(token)
        elif specs:
            specs[-1] = specs[-1] + "," + token
        else:
            raise ValueError(f"Invalid --include token: {token}")
    return specs


def _parse_spec(spec: str) -> tuple[str, dict[str, Any], str]:
    spec = spec.strip()
    if not spec:
        raise ValueError("Empty baseline spec.")

    name, _, param_str = spec.partition(":")
    name = name.strip()
    if name not in {"uniform", "ppm"}:
        raise ValueError(f"Unsupported baseline spec: {spec}")

    params: dict[str, Any] = {}
    for item in param_str.split(","):
        item = item.strip()
        if not item:
            continue
        key, sep, value = item.partition("=")
        if not sep:
            raise ValueError(f"Invalid parameter in spec '{spec}': {item}")
        key = key.strip()
        value = value.strip()
        if name == "ppm" and key == "order":
            params[key] = int(value)
        elif name == "ppm" and key == "escape":
            params[key] = value.upper()
        else:
            raise ValueError(f"Unsupported parameter '{key}' in spec '{spec}'.")

    label = name
    if params:
        label = f"{name}:" + ",".join(f"{k}={v}" for k, v in params.items())
    return name, params, label


def _build_predictor(name: str, params: dict[str, Any], *, alphabet_size: int) -> Predictor:
    if name == "uniform":
        return UniformPredictor(alphabet_size=alphabet_size)
    return PPMPredictor(
        alphabet_size=alphabet_size,
        max_order=int(params.get("order", 5)),
        escape_method=str(params.get("escape", "C")),
    )


def _markdown_table(rows: list[dict[str, Any]]) -> str:
    headers = [
        "baseline",
        "bits_per_symbol",
        "perplexity",
        "elapsed_seconds",
        "tokens_per_second",
        "timed_out",
        "evaluated_tokens",
    ]
    table_rows = [
        [
            str(row["name"]),
            f"{row['bits_per_symbol']:.6f}",
            f"{row['perplexity']:.4f}",
            f"{row['elapsed_seconds']:.6f}",
            f"{row['tokens_per_second']:.2f}",
            str(row["timed_out"]),
            str(row["evaluated_tokens"]),
        ]
        for row in rows
    ]
    widths = [len(h) for h in headers]
    for r in table_rows:
        for i, cell in enumerate(r):
            widths[i] = max(widths[i], len(cell))

    def fmt(cells: list[str]) -> str:
        return "| " + " | ".join(cells[i].ljust(widths[i]) for i in range(len(cells))) + " |"

    lines = [fmt(headers), "|-" + "-|-".join("-" * w for w in widths) + "-|"]
    lines.extend(fmt(r) for r in table_rows)
    return "\n".join(lines)


def run_benchmark(
    *,
    test_path: str | Path,
    train_path: str | Path | None,
    time_limit_seconds: float | None,
    num_tokens: int | None,
    include_specs: list[str] | None = None,
) -> dict[str, Any]:
    test = load_sequence(test_path)
    if num_tokens is not None:
        if num_tokens <= 0:
            raise ValueError("num_tokens must be positive.")
        test = test[:num_tokens]
    if test.size == 0:
        raise ValueError("Selected test prefix is empty.")
    train = load_sequence(train_path) if train_path is not None else test[:0]

    alphabet_size = infer_alphabet_size(train, test)
    specs = include_specs if include_specs is not None else _default_specs()

    rows: list[dict[str, Any]] = []
    for spec in specs:
        name, params, label = _parse_spec(spec)
        predictor = _build_predictor(name, params, alphabet_size=alphabet_size)
        if isinstance(predictor, PPMPredictor):
            predictor.fit(train)
        result = evaluate_sequence(
            predictor,
            test,
            max_seconds=time_limit_seconds,
            validate_probabilities=False,
        )
        rows.append(
            {
                "name": label,
                "family": name,
                "params": params,
                "bits_per_symbol": result.bits_per_symbol,
                "perplexity": result.perplexity,
                "elapsed_seconds": result.elapsed_seconds,
                "tokens_per_second": result.tokens_per_second,
                "timed_out": result.timed_out,
                "evaluated_tokens": result.num_tokens,
            }
        )

    return {
        "test_path": str(Path(test_path)),
        "train_path": None if train_path is None else str(Path(train_path)),
        "num_tokens": int(test.size),
        "time_limit_seconds": time_limit_seconds,
        "alphabet_size": int(alphabet_size),
        "rows": rows,
    }


def main() -> None:
    parser = argparse.ArgumentParser(description="Benchmark uniform and PPM predictors on a test set.")
    parser.add_argument("--test-path", type=str, required=True)
    parser.add_argument("--train-path", type=str, default=None)
    parser.add_argument("--time-limit-seconds", type=float, default=None)
    parser.add_argument("--num-tokens", type=int, default=None)
    parser.add_argument("--json-out", type=str, default=None)
    parser.add_argument("--markdown-out", type=str, default=None)
    parser.add_argument(
        "--include",
        type=str,
        default=None,
        help="Comma-separated specs, e.g. 'uniform,ppm:order=3,escape=C,ppm:order=5,escape=D'",
    )
    args = parser.parse_args()

    include_specs = _split_include_specs(args.include) if args.include else None
    report = run_benchmark(
        test_path=args.test_path,
        train_path=args.train_path,
        time_limit_seconds=args.time_limit_seconds,
        num_tokens=args.num_tokens,
        include_specs=include_specs,
    )

    md = _markdown_table(report["rows"])
    print("# Baseline Benchmark Table")
    print()
    print(md)

    if args.markdown_out:
        path = Path(args.markdown_out)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(md + "\n", encoding="utf-8")

    if args.json_out:
        path = Path(args.json_out)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as fh:
            json.dump(report, fh, indent=2)


if __name__ == "__main__":
    main()
