"""
Cross-validated selection of elastic-net hyperparameters.

Every (grid point, fold) fit is an independent unit of work. With warm starts
enabled the units are grouped per (alpha, fold) so each one can walk its
lambda path from the strongest penalty down, reusing the previous solution;
the warm-start state never leaves the unit. Units run through joblib and the
selector only reduces their immutable results.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from joblib import Parallel, delayed

from ._solvers import _CDLogistic, _fit_path
from .exceptions import InsufficientDataError
from .linear_model import check_xy
from .model import HyperParameterPoint
from .split import FoldAssignment, kfold

__all__ = ["build_grid", "CrossValidatedSelector", "SelectionResult", "CV_RULES"]

logger = logging.getLogger(__name__)

CV_RULES = ("max", "1se")


def build_grid(alphas: Iterable[float], lambdas: Iterable[float]) -> List[HyperParameterPoint]:
    """Cartesian product of mixing parameters and strengths, lambdas descending."""
    alphas = sorted({float(a) for a in alphas})
    lambdas = sorted({float(l) for l in lambdas}, reverse=True)
    if not alphas or not lambdas:
        raise ValueError("Both the alpha and the lambda grid must be non-empty.")
    return [HyperParameterPoint(a, l) for a in alphas for l in lambdas]


def _holdout_accuracy(X_val: np.ndarray, y_val: np.ndarray, w: np.ndarray, b: float) -> float:
    # p >= 0.5 exactly when the logit is >= 0
    pred = (X_val @ w + b >= 0.0).astype(np.int64)
    return float(np.mean(pred == y_val))


def _path_unit(
    X: np.ndarray,
    y: np.ndarray,
    train_idx: np.ndarray,
    val_idx: np.ndarray,
    alpha: float,
    lambdas: np.ndarray,
    tol: float,
    max_iter: int,
) -> Tuple[np.ndarray, int]:
    """One (alpha, fold) unit: accuracy at each lambda (given order) and the unconverged count."""
    coefs, intercepts, _, converged = _fit_path(
        X[train_idx], y[train_idx], alpha, lambdas, tol=tol, max_iter=max_iter
    )
    X_val, y_val = X[val_idx], y[val_idx]
    acc = np.array(
        [_holdout_accuracy(X_val, y_val, coefs[t], intercepts[t]) for t in range(len(lambdas))],
        dtype=np.float64,
    )
    return acc, int(np.sum(~converged))


def _point_unit(
    X: np.ndarray,
    y: np.ndarray,
    train_idx: np.ndarray,
    val_idx: np.ndarray,
    alpha: float,
    lam: float,
    tol: float,
    max_iter: int,
) -> Tuple[np.ndarray, int]:
    """One (grid point, fold) unit fitted from a cold start."""
    solver = _CDLogistic(lam=lam, alpha=alpha, tol=tol, max_iter=max_iter)
    solver.fit(X[train_idx], y[train_idx])
    acc = _holdout_accuracy(X[val_idx], y[val_idx], solver.w_, solver.b_)
    return np.array([acc], dtype=np.float64), int(not solver.converged_)


@dataclass(frozen=True, eq=False)
class SelectionResult:
    """Outcome of a cross-validated grid search plus the champion refit."""

    champion: HyperParameterPoint
    best_score: float
    cv_results: pd.DataFrame
    n_fits: int
    coef: np.ndarray
    intercept: float
    n_iter: int
    converged: bool

    @property
    def n_points(self) -> int:
        return int(self.cv_results.shape[0])


class CrossValidatedSelector:
    """
    K-fold grid search over (alpha, lambda) scored by held-out accuracy.

    Parameters
    ----------
    n_folds :
        Number of folds (K).
    seed :
        Seed of the fold shuffle.
    tol, max_iter :
        Passed to the coordinate descent solver.
    cv_rule :
        ``"max"`` picks the highest mean accuracy; ``"1se"`` picks the
        strongest penalty whose mean accuracy is within one standard error
        of the best.
    tie_tol :
        Mean accuracies closer than this are ties; ties go to the larger
        lambda, then the larger alpha.
    warm_start :
        Walk each lambda path with warm starts (one unit per alpha and fold)
        instead of fitting every grid point from scratch.
    n_jobs :
        joblib worker count; results do not depend on it.
    """

    def __init__(
        self,
        n_folds: int = 10,
        seed: int = 42,
        tol: float = 1e-7,
        max_iter: int = 1000,
        cv_rule: str = "max",
        tie_tol: float = 1e-9,
        warm_start: bool = True,
        n_jobs: Optional[int] = 1,
    ) -> None:
        if int(n_folds) < 2:
            raise ValueError("n_folds must be at least 2.")
        cv_rule = str(cv_rule).lower()
        if cv_rule not in CV_RULES:
            raise ValueError(f"Unsupported cv_rule '{cv_rule}'. Use one of {CV_RULES}.")
        self.n_folds = int(n_folds)
        self.seed = int(seed)
        self.tol = float(tol)
        self.max_iter = int(max_iter)
        self.cv_rule = cv_rule
        self.tie_tol = float(tie_tol)
        self.warm_start = bool(warm_start)
        self.n_jobs = n_jobs
        self.result_: Optional[SelectionResult] = None

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    def fit(
        self,
        X: np.ndarray,
        y: np.ndarray,
        grid: Sequence[HyperParameterPoint],
        folds: Optional[FoldAssignment] = None,
    ) -> SelectionResult:
        X, y = check_xy(X, y)
        X = np.asfortranarray(X)
        points = list(dict.fromkeys(grid))
        if not points:
            raise ValueError("The hyperparameter grid is empty.")

        n = X.shape[0]
        if folds is None:
            folds = kfold(n, self.n_folds, self.seed)
        elif folds.n_rows != n:
            raise ValueError(f"Fold assignment covers {folds.n_rows} rows, data has {n}.")
        fold_list = list(folds)
        for f, (train_idx, _) in enumerate(fold_list):
            if np.unique(y[train_idx]).size < 2:
                raise InsufficientDataError(
                    f"Training part of fold {f} contains a single class; use fewer folds."
                )

        acc, n_fits, n_unconverged = self._score_grid(X, y, points, fold_list)
        cv_results = self._results_frame(points, acc)
        pick = self._select(cv_results)
        champion = points[pick]
        best_score = float(cv_results["mean_accuracy"].iloc[pick])
        logger.info(
            "Champion alpha=%g lambda=%.4g with mean CV accuracy %.4f (%d fits, rule=%s).",
            champion.alpha, champion.lam, best_score, n_fits, self.cv_rule,
        )
        if n_unconverged:
            logger.warning("%d of %d CV fits hit the iteration cap.", n_unconverged, n_fits)

        coef, intercept, n_iter, converged = self._refit(X, y, champion, points)
        self.result_ = SelectionResult(
            champion=champion,
            best_score=best_score,
            cv_results=cv_results,
            n_fits=n_fits,
            coef=coef,
            intercept=intercept,
            n_iter=n_iter,
            converged=converged,
        )
        return self.result_

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    def _score_grid(
        self,
        X: np.ndarray,
        y: np.ndarray,
        points: List[HyperParameterPoint],
        fold_list: List[Tuple[np.ndarray, np.ndarray]],
    ) -> Tuple[np.ndarray, int, int]:
        """Accuracy matrix (n_points, K), number of fits, number of unconverged fits."""
        k = len(fold_list)
        acc = np.full((len(points), k), np.nan, dtype=np.float64)

        if self.warm_start:
            by_alpha: Dict[float, List[int]] = {}
            for i, pt in enumerate(points):
                by_alpha.setdefault(pt.alpha, []).append(i)
            units = []
            for alpha, idx in by_alpha.items():
                idx = sorted(idx, key=lambda i: -points[i].lam)
                lams = np.array([points[i].lam for i in idx], dtype=np.float64)
                for f, (train_idx, val_idx) in enumerate(fold_list):
                    units.append((idx, f, delayed(_path_unit)(
                        X, y, train_idx, val_idx, alpha, lams, self.tol, self.max_iter
                    )))
        else:
            units = []
            for i, pt in enumerate(points):
                for f, (train_idx, val_idx) in enumerate(fold_list):
                    units.append(([i], f, delayed(_point_unit)(
                        X, y, train_idx, val_idx, pt.alpha, pt.lam, self.tol, self.max_iter
                    )))

        outputs = Parallel(n_jobs=self.n_jobs)(task for _, _, task in units)

        n_unconverged = 0
        for (idx, f, _), (scores, unconverged) in zip(units, outputs):
            acc[idx, f] = scores
            n_unconverged += unconverged
        n_fits = int(np.sum(~np.isnan(acc)))
        return acc, n_fits, n_unconverged

    def _results_frame(self, points: List[HyperParameterPoint], acc: np.ndarray) -> pd.DataFrame:
        k = acc.shape[1]
        mean = acc.mean(axis=1)
        std = acc.std(axis=1, ddof=1) if k > 1 else np.zeros_like(mean)
        frame = pd.DataFrame({
            "alpha": [pt.alpha for pt in points],
            "lambda": [pt.lam for pt in points],
            "mean_accuracy": mean,
            "std_accuracy": std,
            "se_accuracy": std / math.sqrt(k),
        })
        for f in range(k):
            frame[f"fold{f}_accuracy"] = acc[:, f]

        for pt, m, se in zip(points, mean, frame["se_accuracy"]):
            logger.info("[CV] alpha=%g lambda=%.4g -> mean=%.4f +/- %.4f", pt.alpha, pt.lam, m, se)
        return frame

    def _select(self, cv_results: pd.DataFrame) -> int:
        mean = cv_results["mean_accuracy"].to_numpy()
        lam = cv_results["lambda"].to_numpy()
        alpha = cv_results["alpha"].to_numpy()

        best = float(np.max(mean))
        candidates = np.where(mean >= best - self.tie_tol)[0]
        if self.cv_rule == "1se":
            j_best = self._prefer_simple(candidates, lam, alpha)
            thr = best - float(cv_results["se_accuracy"].iloc[j_best])
            candidates = np.where(mean >= thr - self.tie_tol)[0]
        return self._prefer_simple(candidates, lam, alpha)

    @staticmethod
    def _prefer_simple(candidates: np.ndarray, lam: np.ndarray, alpha: np.ndarray) -> int:
        # largest lambda first, then largest alpha
        return int(max(candidates, key=lambda i: (lam[i], alpha[i])))

    def _refit(
        self,
        X: np.ndarray,
        y: np.ndarray,
        champion: HyperParameterPoint,
        points: List[HyperParameterPoint],
    ) -> Tuple[np.ndarray, float, int, bool]:
        """Refit on all training rows, warm-starting down this alpha's path to the champion."""
        lams = sorted(
            {pt.lam for pt in points if pt.alpha == champion.alpha and pt.lam >= champion.lam},
            reverse=True,
        )
        coefs, intercepts, n_iter, converged = _fit_path(
            X, y, champion.alpha, np.asarray(lams), tol=self.tol, max_iter=self.max_iter
        )
        logger.info(
            "Refit on %d rows: %d of %d coefficients non-zero.",
            X.shape[0], int(np.count_nonzero(coefs[-1])), X.shape[1],
        )
        return coefs[-1].copy(), float(intercepts[-1]), int(n_iter[-1]), bool(converged[-1])
