"""
Elastic-net penalised logistic regression with a scikit-learn style API.

``ElasticNetLogistic`` fits a single (alpha, lambda) point; :func:`fit_path`
walks a decreasing lambda path with warm starts.
"""

from __future__ import annotations

from typing import Optional, Sequence, Tuple

import numpy as np
from sklearn.base import BaseEstimator, ClassifierMixin

from ._math import _sigmoid
from ._solvers import _CDLogistic, _fit_path
from .exceptions import DataIntegrityError

__all__ = ["ElasticNetLogistic", "fit_path", "check_xy"]


def check_xy(X, y) -> Tuple[np.ndarray, np.ndarray]:
    """Validate a design matrix and 0/1 label vector for fitting."""
    X = np.asarray(X, dtype=np.float64)
    y = np.asarray(y)
    if X.ndim != 2:
        raise DataIntegrityError(f"X must be 2-D, got shape {X.shape}.")
    if y.ndim != 1:
        raise DataIntegrityError("y must be a 1-D array of binary labels.")
    if X.shape[0] != y.shape[0]:
        raise DataIntegrityError("X and y must have the same number of rows.")
    if X.shape[0] == 0:
        raise DataIntegrityError("Cannot fit on an empty matrix.")
    if not np.isfinite(X).all():
        raise DataIntegrityError("X contains missing or infinite values; impute first.")
    if not np.isin(y, (0, 1)).all():
        raise DataIntegrityError("y must contain only 0/1 labels.")
    return X, y.astype(np.int64)


class ElasticNetLogistic(BaseEstimator, ClassifierMixin):
    """
    Binary logistic regression with penalty
    ``lam * (alpha * |w|_1 + (1 - alpha) / 2 * |w|_2^2)`` on the summed
    negative log-likelihood, fitted by cyclic coordinate descent.

    Parameters
    ----------
    alpha :
        Mixing parameter; 1 is LASSO, 0 is ridge.
    lam :
        Regularisation strength (> 0).
    tol :
        Stop once no coefficient moves more than ``tol`` in a full sweep.
    max_iter :
        Sweep cap. Reaching it emits a ``ConvergenceWarning`` and keeps the
        best iterate.

    Attributes: coef_ (1, p), intercept_ (1,), classes_, n_iter_, converged_
    """

    def __init__(self, alpha=1.0, lam=1.0, tol=1e-7, max_iter=1000):
        self.alpha = alpha
        self.lam = lam
        self.tol = tol
        self.max_iter = max_iter

    def _check_params(self) -> None:
        if not 0.0 <= float(self.alpha) <= 1.0:
            raise ValueError(f"alpha must lie in [0, 1], got {self.alpha}.")
        if not float(self.lam) > 0.0:
            raise ValueError(f"lam must be positive, got {self.lam}.")
        if not float(self.tol) > 0.0:
            raise ValueError("tol must be positive.")
        if int(self.max_iter) < 1:
            raise ValueError("max_iter must be at least 1.")

    def fit(
        self,
        X,
        y,
        *,
        w0: Optional[np.ndarray] = None,
        b0: Optional[float] = None,
        lam_prev: Optional[float] = None,
    ) -> "ElasticNetLogistic":
        self._check_params()
        X, y = check_xy(X, y)
        if w0 is not None and np.asarray(w0).shape != (X.shape[1],):
            raise DataIntegrityError("Warm-start coefficients do not match the feature count.")

        solver = _CDLogistic(lam=self.lam, alpha=self.alpha, tol=self.tol, max_iter=self.max_iter)
        solver.fit(X, y, w0=w0, b0=b0, lam_prev=lam_prev)

        self.classes_ = np.array([0, 1], dtype=int)
        self.coef_ = solver.w_.reshape(1, -1)
        self.intercept_ = np.array([solver.b_], dtype=np.float64)
        self.n_iter_ = solver.n_iter_
        self.converged_ = solver.converged_
        self.objective_ = solver.objective_
        self.n_features_in_ = X.shape[1]
        return self

    def _check_fitted(self, X) -> np.ndarray:
        if not hasattr(self, "coef_"):
            raise RuntimeError("fit must be called before predict.")
        X = np.asarray(X, dtype=np.float64)
        if X.ndim != 2 or X.shape[1] != self.n_features_in_:
            raise DataIntegrityError(
                f"Expected {self.n_features_in_} features, got shape {X.shape}."
            )
        return X

    def decision_function(self, X) -> np.ndarray:
        X = self._check_fitted(X)
        return X @ self.coef_.ravel() + float(self.intercept_[0])

    def predict_proba(self, X) -> np.ndarray:
        p = _sigmoid(self.decision_function(X))
        return np.column_stack([1.0 - p, p])

    def predict(self, X, threshold: float = 0.5) -> np.ndarray:
        proba = self.predict_proba(X)
        return (proba[:, 1] >= float(threshold)).astype(int)


def fit_path(
    X,
    y,
    alpha: float,
    lambdas: Sequence[float],
    tol: float = 1e-7,
    max_iter: int = 1000,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Coefficients and intercepts along a lambda path.

    The path is solved from the largest lambda to the smallest with warm
    starts; results come back in the order of ``lambdas``.

    Returns
    -------
    coefs : (len(lambdas), p) array
    intercepts : (len(lambdas),) array
    """
    X, y = check_xy(X, y)
    if not 0.0 <= float(alpha) <= 1.0:
        raise ValueError(f"alpha must lie in [0, 1], got {alpha}.")
    lams = np.asarray(lambdas, dtype=np.float64)
    if lams.ndim != 1 or lams.size == 0 or np.any(lams <= 0.0):
        raise ValueError("lambdas must be a non-empty sequence of positive values.")
    coefs, intercepts, _, _ = _fit_path(X, y, float(alpha), lams, tol=tol, max_iter=max_iter)
    return coefs, intercepts
