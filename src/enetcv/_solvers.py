"""
Low-level coordinate descent solver for elastic-net logistic regression.

Minimises the summed negative log-likelihood plus
``lam * (alpha * |w|_1 + (1 - alpha) / 2 * |w|_2^2)``; the intercept is not
penalised. Supports warm starts and sequential strong-rule screening so a
whole regularisation path can be walked cheaply.
"""

from __future__ import annotations

import logging
import warnings
from typing import Optional, Sequence, Tuple

import numpy as np

from ._math import _enet_objective, _enet_penalty, _log_loss_sum, _sigmoid, _soft_threshold
from .exceptions import ConvergenceWarning, InsufficientDataError

__all__ = ["_CDLogistic", "_fit_path", "lambda_max", "lambda_grid", "geometric_grid"]

logger = logging.getLogger(__name__)


def _initial_intercept(y: np.ndarray) -> float:
    py = float(np.clip(np.mean(y), 1e-6, 1 - 1e-6)) if y.size else 0.5
    return float(np.log(py / (1 - py)))


class _CDLogistic:
    """
    Cyclic coordinate descent with sequential strong rules and KKT screening.

    Each coordinate takes a proximal Newton step on the exact diagonal
    curvature. If that step fails to lower the objective the coordinate falls
    back to the majorisation step (curvature bound 1/4 per row), which always
    does, so the objective never increases across a sweep.
    """

    def __init__(
        self,
        lam: float = 1.0,
        alpha: float = 1.0,
        tol: float = 1e-7,
        max_iter: int = 1000,
    ) -> None:
        self.lam = float(lam)
        self.alpha = float(alpha)
        self.tol = float(tol)
        self.max_iter = int(max_iter)
        self.w_: Optional[np.ndarray] = None
        self.b_: float = 0.0
        self.n_iter_: int = 0
        self.converged_: bool = False
        self.objective_: float = np.inf

    def fit(
        self,
        X: np.ndarray,
        y: np.ndarray,
        *,
        w0: Optional[np.ndarray] = None,
        b0: Optional[float] = None,
        lam_prev: Optional[float] = None,
    ) -> "_CDLogistic":
        X = np.asarray(X, dtype=np.float64, order="F")
        y = np.asarray(y, dtype=np.float64)

        n, p = X.shape
        w = np.zeros(p, dtype=np.float64) if w0 is None else np.asarray(w0, dtype=np.float64).copy()
        b = _initial_intercept(y) if b0 is None else float(b0)

        lam, alpha = self.lam, self.alpha
        l1 = lam * alpha
        l2 = lam * (1.0 - alpha)

        z = X @ w + b
        loss = _log_loss_sum(y, z)
        col_bound = 0.25 * np.sum(X * X, axis=0)

        # Strong rule: features whose gradient is well below the L1 threshold
        # start outside the active set; the KKT check below recovers mistakes.
        if l1 > 0.0:
            grad = X.T @ (_sigmoid(z) - y)
            if lam_prev is None or lam_prev <= 0:
                strong_thr = l1
            else:
                strong_thr = max(0.0, alpha * (2 * lam - float(lam_prev)))
            active = np.abs(grad) >= strong_thr
        else:
            active = np.ones(p, dtype=bool)
        active |= w != 0.0

        best_obj = loss + self._penalty(w)
        best_w, best_b = w.copy(), b
        converged = False

        it = 0
        for it in range(1, self.max_iter + 1):
            max_dw = 0.0
            for j in np.flatnonzero(active):
                xj = X[:, j]
                wj = w[j]
                p_hat = _sigmoid(z)
                g = float(xj @ (p_hat - y))
                h = float((xj * xj) @ (p_hat * (1.0 - p_hat)))

                f_old = loss + self._penalty_j(wj)
                w_new = self._coordinate_step(wj, g, h, l1, l2)
                if w_new is not None:
                    z_new = z + (w_new - wj) * xj
                    loss_new = _log_loss_sum(y, z_new)
                if w_new is None or loss_new + self._penalty_j(w_new) > f_old:
                    w_new = self._coordinate_step(wj, g, col_bound[j], l1, l2)
                    if w_new is None:
                        # all-zero column: only the penalty depends on w_j
                        w_new = 0.0
                    z_new = z + (w_new - wj) * xj
                    loss_new = _log_loss_sum(y, z_new)

                dw = w_new - wj
                if dw != 0.0:
                    w[j] = w_new
                    z = z_new
                    loss = loss_new
                    max_dw = max(max_dw, abs(dw))

            # Unpenalised intercept: Newton step with the same safeguard.
            p_hat = _sigmoid(z)
            g0 = float(np.sum(p_hat - y))
            h0 = float(np.sum(p_hat * (1.0 - p_hat)))
            db = -g0 / h0 if h0 > 1e-12 else 0.0
            loss_new = _log_loss_sum(y, z + db)
            if loss_new > loss and n > 0:
                db = -g0 / (0.25 * n)
                loss_new = _log_loss_sum(y, z + db)
            if db != 0.0:
                b += db
                z = z + db
                loss = loss_new
                max_dw = max(max_dw, abs(db))

            obj = loss + self._penalty(w)
            if obj <= best_obj:
                best_obj, best_w, best_b = obj, w.copy(), b

            if max_dw <= self.tol:
                if l1 > 0.0 and not active.all():
                    grad = X.T @ (_sigmoid(z) - y)
                    viol = ~active & (np.abs(grad) > l1)
                    if viol.any():
                        logger.debug("KKT check re-activated %d features.", int(viol.sum()))
                        active |= viol
                        continue
                converged = True
                break

        self.n_iter_ = it
        self.converged_ = converged
        if converged:
            self.w_, self.b_ = w, b
            self.objective_ = float(obj)
        else:
            self.w_, self.b_ = best_w, best_b
            self.objective_ = float(best_obj)
            msg = (
                f"Coordinate descent did not converge in {self.max_iter} sweeps "
                f"(alpha={alpha:g}, lambda={lam:.4g}); returning the best iterate."
            )
            logger.warning(msg)
            warnings.warn(msg, ConvergenceWarning, stacklevel=2)
        return self

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    def _coordinate_step(wj: float, g: float, h: float, l1: float, l2: float) -> Optional[float]:
        denom = h + l2
        if denom <= 1e-12:
            return None
        return float(_soft_threshold(h * wj - g, l1)) / denom

    def _penalty_j(self, wj: float) -> float:
        return self.lam * (self.alpha * abs(wj) + 0.5 * (1.0 - self.alpha) * wj * wj)

    def _penalty(self, w: np.ndarray) -> float:
        return _enet_penalty(w, self.lam, self.alpha)

    def objective(self, X: np.ndarray, y: np.ndarray) -> float:
        if self.w_ is None:
            raise RuntimeError("Model must be fitted before calling objective().")
        X = np.asarray(X, dtype=np.float64)
        return _enet_objective(np.asarray(y, dtype=np.float64), X @ self.w_ + self.b_, self.w_, self.lam, self.alpha)

    def predict_proba(self, X: np.ndarray) -> np.ndarray:
        if self.w_ is None:
            raise RuntimeError("Model must be fitted before calling predict_proba().")
        z = X @ self.w_ + self.b_
        p = _sigmoid(z)
        return np.column_stack([1.0 - p, p])


def _fit_path(
    X: np.ndarray,
    y: np.ndarray,
    alpha: float,
    lambdas: Sequence[float],
    tol: float = 1e-7,
    max_iter: int = 1000,
) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """
    Fit the whole lambda path, largest to smallest, warm-starting each fit.

    Returns
    -------
    coefs : (L, p) array
    intercepts : (L,) array
    n_iter : (L,) int array
    converged : (L,) bool array
        All in the order of ``lambdas`` as given.
    """
    X = np.asarray(X, dtype=np.float64, order="F")
    y = np.asarray(y, dtype=np.float64)
    lams = np.asarray(lambdas, dtype=np.float64)
    p = X.shape[1]

    order = np.argsort(-lams, kind="mergesort")
    coefs = np.empty((lams.size, p), dtype=np.float64)
    intercepts = np.empty(lams.size, dtype=np.float64)
    n_iter = np.empty(lams.size, dtype=np.int64)
    converged = np.empty(lams.size, dtype=bool)

    w_ws: Optional[np.ndarray] = None
    b_ws: Optional[float] = None
    prev: Optional[float] = None
    for t in order:
        solver = _CDLogistic(lam=lams[t], alpha=alpha, tol=tol, max_iter=max_iter)
        solver.fit(X, y, w0=w_ws, b0=b_ws, lam_prev=prev)
        coefs[t] = solver.w_
        intercepts[t] = solver.b_
        n_iter[t] = solver.n_iter_
        converged[t] = solver.converged_
        w_ws, b_ws, prev = solver.w_, solver.b_, float(lams[t])
    return coefs, intercepts, n_iter, converged


def lambda_max(X: np.ndarray, y: np.ndarray, alpha: float = 1.0) -> float:
    """
    Smallest lambda at which every coefficient is zero.

    For ridge (alpha=0) no such value exists; as in glmnet, the value for
    alpha=0.001 is returned so a path can still be built.
    """
    X = np.asarray(X, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    if y.size == 0 or np.all(y == y[0]):
        raise InsufficientDataError("Both classes must be present to build a lambda path.")
    grad = X.T @ (np.mean(y) - y)
    lmax = float(np.max(np.abs(grad))) / max(float(alpha), 1e-3)
    if lmax <= 0.0:
        raise InsufficientDataError("Features carry no signal (zero gradient at the null model).")
    return lmax


def geometric_grid(lo: float, hi: float, num: int) -> np.ndarray:
    """``num`` geometrically spaced values from ``hi`` down to ``lo``."""
    lo, hi = float(lo), float(hi)
    if lo <= 0.0 or hi <= 0.0:
        raise ValueError("Grid bounds must be positive.")
    if int(num) < 1:
        raise ValueError("Grid size must be at least 1.")
    return np.geomspace(max(lo, hi), min(lo, hi), int(num))


def lambda_grid(
    X: np.ndarray,
    y: np.ndarray,
    alpha: float = 1.0,
    n_lambdas: int = 20,
    min_ratio: Optional[float] = None,
) -> np.ndarray:
    """glmnet-style decreasing path from :func:`lambda_max` down to ``min_ratio * lambda_max``."""
    X = np.asarray(X, dtype=np.float64)
    n, p = X.shape
    if min_ratio is None:
        min_ratio = 1e-4 if n > p else 1e-2
    lmax = lambda_max(X, y, alpha)
    return geometric_grid(lmax * float(min_ratio), lmax, n_lambdas)
