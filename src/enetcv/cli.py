"""
Command-line driver: run the cross-validated evaluation on a CSV file.

Usage (quick start):
  enetcv --csv breast_cancer.csv --target class --positive-label 4 \
      --na-values ? --drop-columns id --folds 10 --alphas 0 0.5 1
"""

from __future__ import annotations

import argparse
import json
import logging
import math
import sys
from pathlib import Path
from typing import List, Optional, Sequence

import pandas as pd

from .config import HarnessConfig, load_config_json
from .dataset import Dataset
from .exceptions import EnetcvError
from .pipeline import run_harness
from .serialization import save_model_npz

__all__ = ["main", "build_parser", "load_csv_dataset"]

logger = logging.getLogger(__name__)


def _coerce_label(raw: str):
    """CSV labels are usually numeric; match the column dtype pandas will infer."""
    for cast in (int, float):
        try:
            return cast(raw)
        except ValueError:
            continue
    return raw


def load_csv_dataset(
    path: str | Path,
    target: str,
    positive_label,
    *,
    na_values: Sequence[str] = (),
    drop_columns: Sequence[str] = (),
) -> Dataset:
    """Read a CSV, turn placeholder tokens into NaN and build a :class:`Dataset`."""
    df = pd.read_csv(path, na_values=list(na_values) or None)
    absent = [c for c in drop_columns if c not in df.columns]
    if absent:
        raise EnetcvError(f"Cannot drop unknown columns: {absent}")
    df = df.drop(columns=list(drop_columns))
    return Dataset.from_frame(df, target, positive_label)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="enetcv",
        description="Cross-validated elastic-net logistic regression evaluation on a CSV file.",
    )
    ap.add_argument("--csv", type=str, required=True, help="Input CSV with features and a binary target.")
    ap.add_argument("--target", type=str, required=True, help="Name of the label column.")
    ap.add_argument("--positive-label", type=str, required=True,
                    help="Raw target value treated as the positive class (e.g. 4).")
    ap.add_argument("--na-values", type=str, nargs="*", default=[],
                    help="Extra tokens to read as missing (e.g. '?').")
    ap.add_argument("--drop-columns", type=str, nargs="*", default=[],
                    help="Columns to discard before modelling (e.g. an id column).")
    ap.add_argument("--config", type=str, default=None, help="JSON file with HarnessConfig fields.")
    ap.add_argument("--folds", type=int, default=None)
    ap.add_argument("--alphas", type=float, nargs="+", default=None)
    ap.add_argument("--lambdas", type=float, nargs="+", default=None)
    ap.add_argument("--seed", type=int, default=None)
    ap.add_argument("--train-fraction", type=float, default=None)
    ap.add_argument("--scaling", type=str, default=None, choices=["standardize", "minmax"])
    ap.add_argument("--cv-rule", type=str, default=None, choices=["max", "1se"])
    ap.add_argument("--n-jobs", type=int, default=None)
    ap.add_argument("--save-model", type=str, default=None, help="Write the fitted model to this npz file.")
    ap.add_argument("--log-level", type=str, default="WARNING",
                    choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return ap


def _config_from_args(args: argparse.Namespace) -> HarnessConfig:
    config = load_config_json(args.config) if args.config else HarnessConfig()
    overrides = {
        "n_folds": args.folds,
        "alphas": args.alphas,
        "lambdas": args.lambdas,
        "seed": args.seed,
        "train_fraction": args.train_fraction,
        "scaling": args.scaling,
        "cv_rule": args.cv_rule,
        "n_jobs": args.n_jobs,
    }
    overrides = {k: v for k, v in overrides.items() if v is not None}
    return config.replace(**overrides) if overrides else config


def _json_safe(value):
    if isinstance(value, float) and math.isnan(value):
        return None
    if isinstance(value, dict):
        return {k: _json_safe(v) for k, v in value.items()}
    return value


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = _config_from_args(args)
        dataset = load_csv_dataset(
            args.csv,
            args.target,
            _coerce_label(args.positive_label),
            na_values=args.na_values,
            drop_columns=args.drop_columns,
        )
        result = run_harness(dataset, config)
    except (EnetcvError, ValueError, FileNotFoundError) as exc:
        logger.error("%s", exc)
        print(f"error: {exc}", file=sys.stderr)
        return 2

    if args.save_model:
        save_model_npz(result.model, args.save_model)
        logger.info("Model written to %s", args.save_model)

    print(json.dumps(_json_safe(result.summary()), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
