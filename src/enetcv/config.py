"""
Run configuration for the cross-validated evaluation harness.

All knobs live on one frozen dataclass so a run can be reproduced from a
single JSON file.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Mapping, Optional, Tuple

import numpy as np

from ._solvers import lambda_grid
from .impute import KNNImputer
from .preprocessing import SCALING_MODES
from .selection import CV_RULES

__all__ = ["HarnessConfig", "save_config_json", "load_config_json"]


@dataclass(frozen=True)
class HarnessConfig:
    """
    Parameters
    ----------
    n_folds :
        Cross-validation folds (K).
    alphas :
        Elastic-net mixing values to sweep; ``(1.0,)`` is pure LASSO.
    lambdas :
        Explicit lambda grid. If None, a data-driven path of ``n_lambdas``
        values is built per alpha from lambda_max down to
        ``lambda_min_ratio * lambda_max``.
    seed :
        Seed for the train/test split and the fold shuffle.
    train_fraction :
        Probability that a row lands in the training partition.
    positive_label :
        Encoded class (0 or 1) reported as "positive" by the evaluator.
    """

    n_folds: int = 10
    alphas: Tuple[float, ...] = (1.0,)
    lambdas: Optional[Tuple[float, ...]] = None
    n_lambdas: int = 20
    lambda_min_ratio: Optional[float] = None
    seed: int = 42
    train_fraction: float = 0.7
    tol: float = 1e-7
    max_iter: int = 1000
    positive_label: int = 1
    impute_neighbors: int = 10
    impute_weights: str = "distance"
    scaling: str = "standardize"
    strict_scaling: bool = False
    cv_rule: str = "max"
    warm_start: bool = True
    n_jobs: Optional[int] = 1

    def __post_init__(self) -> None:
        alphas = tuple(float(a) for a in np.atleast_1d(self.alphas))
        object.__setattr__(self, "alphas", alphas)
        if self.lambdas is not None:
            object.__setattr__(self, "lambdas", tuple(float(l) for l in np.atleast_1d(self.lambdas)))

        if int(self.n_folds) < 2:
            raise ValueError("n_folds must be at least 2.")
        if not alphas or any(not 0.0 <= a <= 1.0 for a in alphas):
            raise ValueError(f"alphas must be a non-empty set of values in [0, 1], got {alphas}.")
        if self.lambdas is not None and (not self.lambdas or any(l <= 0.0 for l in self.lambdas)):
            raise ValueError("lambdas must be positive.")
        if int(self.n_lambdas) < 1:
            raise ValueError("n_lambdas must be at least 1.")
        if self.lambda_min_ratio is not None and not 0.0 < float(self.lambda_min_ratio) < 1.0:
            raise ValueError("lambda_min_ratio must lie in (0, 1).")
        if not 0.0 < float(self.train_fraction) < 1.0:
            raise ValueError("train_fraction must lie in (0, 1).")
        if not float(self.tol) > 0.0:
            raise ValueError("tol must be positive.")
        if int(self.max_iter) < 1:
            raise ValueError("max_iter must be at least 1.")
        if self.positive_label not in (0, 1):
            raise ValueError("positive_label refers to the encoded class and must be 0 or 1.")
        if str(self.scaling).lower() not in SCALING_MODES:
            raise ValueError(f"scaling must be one of {SCALING_MODES}.")
        if str(self.cv_rule).lower() not in CV_RULES:
            raise ValueError(f"cv_rule must be one of {CV_RULES}.")
        # validates neighbour count and weighting scheme
        KNNImputer(self.impute_neighbors, self.impute_weights)

    # ------------------------------------------------------------------ #
    # Grid construction
    # ------------------------------------------------------------------ #

    def lambda_values(self, X: np.ndarray, y: np.ndarray, alpha: float) -> np.ndarray:
        """The lambda grid for ``alpha`` on training data ``(X, y)``."""
        if self.lambdas is not None:
            return np.asarray(sorted(self.lambdas, reverse=True), dtype=np.float64)
        return lambda_grid(X, y, alpha, self.n_lambdas, self.lambda_min_ratio)

    # ------------------------------------------------------------------ #
    # (De)serialisation
    # ------------------------------------------------------------------ #

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "HarnessConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown configuration keys: {unknown}")
        return cls(**dict(data))

    def to_dict(self) -> dict:
        out = asdict(self)
        out["alphas"] = list(self.alphas)
        out["lambdas"] = None if self.lambdas is None else list(self.lambdas)
        return out

    def replace(self, **changes: Any) -> "HarnessConfig":
        merged = self.to_dict()
        merged.update(changes)
        return HarnessConfig.from_dict(merged)


def save_config_json(config: HarnessConfig, path: str | Path) -> None:
    Path(path).write_text(json.dumps(config.to_dict(), indent=2))


def load_config_json(path: str | Path) -> HarnessConfig:
    return HarnessConfig.from_dict(json.loads(Path(path).read_text()))
