"""
Value objects for hyperparameters and fitted models.

A :class:`FittedModel` always carries the :class:`ScalingParams` of the matrix
it was fit on and applies them to raw inputs itself, so coefficients can never
be paired with the wrong preprocessing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import numpy as np
import pandas as pd

from ._math import _sigmoid
from .exceptions import DataIntegrityError
from .preprocessing import Preprocessor, ScalingParams

__all__ = ["HyperParameterPoint", "FittedModel"]


@dataclass(frozen=True, order=True)
class HyperParameterPoint:
    """Elastic-net mixing parameter ``alpha`` in [0, 1] and strength ``lam`` > 0."""

    alpha: float
    lam: float

    def __post_init__(self) -> None:
        alpha, lam = float(self.alpha), float(self.lam)
        if not 0.0 <= alpha <= 1.0:
            raise ValueError(f"alpha must lie in [0, 1], got {alpha}.")
        if not (lam > 0.0 and np.isfinite(lam)):
            raise ValueError(f"lambda must be a positive finite number, got {lam}.")
        object.__setattr__(self, "alpha", alpha)
        object.__setattr__(self, "lam", lam)

    def as_dict(self) -> dict:
        return {"alpha": self.alpha, "lambda": self.lam}


@dataclass(frozen=True, eq=False)
class FittedModel:
    """
    Intercept + coefficients for one hyperparameter point, bound to the
    scaling parameters of its training matrix.
    """

    intercept: float
    coef: np.ndarray
    point: HyperParameterPoint
    scaling: ScalingParams
    feature_names: Tuple[str, ...] = ()
    n_iter: int = 0
    converged: bool = True

    def __post_init__(self) -> None:
        coef = np.array(self.coef, dtype=np.float64, copy=True).ravel()
        if coef.shape[0] != len(self.scaling):
            raise DataIntegrityError(
                f"Model has {coef.shape[0]} coefficients but scaling covers {len(self.scaling)} features."
            )
        names = tuple(map(str, self.feature_names)) or tuple(f"x{j}" for j in range(coef.shape[0]))
        if len(names) != coef.shape[0]:
            raise DataIntegrityError("feature_names must match the number of coefficients.")
        coef.setflags(write=False)
        object.__setattr__(self, "coef", coef)
        object.__setattr__(self, "intercept", float(self.intercept))
        object.__setattr__(self, "feature_names", names)

    @property
    def n_features(self) -> int:
        return int(self.coef.shape[0])

    @property
    def n_nonzero(self) -> int:
        return int(np.count_nonzero(self.coef))

    def _scaled(self, X: np.ndarray) -> np.ndarray:
        X = Preprocessor.apply(X, self.scaling)
        if np.isnan(X).any():
            raise DataIntegrityError("Input contains missing values; impute before predicting.")
        return X

    def decision_function(self, X: np.ndarray) -> np.ndarray:
        """Logits for raw (unscaled) rows."""
        return self._scaled(X) @ self.coef + self.intercept

    def predict_proba(self, X: np.ndarray) -> np.ndarray:
        p = _sigmoid(self.decision_function(X))
        return np.column_stack([1.0 - p, p])

    def predict(self, X: np.ndarray, threshold: float = 0.5) -> np.ndarray:
        proba = self.predict_proba(X)
        return (proba[:, 1] >= float(threshold)).astype(int)

    def coef_frame(self) -> pd.Series:
        """Coefficients indexed by feature name (on the scaled feature axis)."""
        return pd.Series(self.coef, index=list(self.feature_names), name="coef")

