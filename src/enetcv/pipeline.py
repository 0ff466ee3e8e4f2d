"""End-to-end harness: impute, split, scale, select, refit, evaluate."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

import numpy as np

from .config import HarnessConfig
from .dataset import Dataset
from .impute import KNNImputer
from .metrics import ConfusionCounts, evaluate
from .model import FittedModel, HyperParameterPoint
from .preprocessing import Preprocessor, ScalingParams
from .selection import CrossValidatedSelector, SelectionResult, build_grid
from .split import train_test_split

__all__ = ["HarnessResult", "EvaluationHarness", "run_harness"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class HarnessResult:
    """Everything a reporting collaborator needs from one run."""

    champion: HyperParameterPoint
    model: FittedModel
    counts: ConfusionCounts
    selection: SelectionResult
    scaling: ScalingParams
    n_train: int
    n_test: int
    imputed: int

    def summary(self) -> Dict[str, object]:
        out: Dict[str, object] = {
            "alpha": self.champion.alpha,
            "lambda": self.champion.lam,
            "cv_accuracy": self.selection.best_score,
            "n_fits": self.selection.n_fits,
            "n_train": self.n_train,
            "n_test": self.n_test,
            "n_imputed": self.imputed,
            "intercept": self.model.intercept,
            "n_nonzero": self.model.n_nonzero,
            "coefficients": dict(zip(self.model.feature_names, self.model.coef.tolist())),
        }
        out.update(self.counts.as_dict())
        return out


class EvaluationHarness:
    """
    Runs the full evaluation for one dataset under a :class:`HarnessConfig`.

    The dataset is never modified; each stage returns a new value.
    """

    def __init__(self, config: Optional[HarnessConfig] = None) -> None:
        self.config = config or HarnessConfig()

    def run(self, dataset: Dataset) -> HarnessResult:
        cfg = self.config

        n_missing = int(dataset.missing_mask().sum())
        if n_missing:
            logger.info("Imputing %d missing entries (k=%d).", n_missing, cfg.impute_neighbors)
            dataset = KNNImputer(cfg.impute_neighbors, cfg.impute_weights).transform(dataset)

        train, test = train_test_split(dataset, cfg.train_fraction, cfg.seed)
        logger.info("Split %d rows into %d train / %d test.", dataset.n_rows, train.n_rows, test.n_rows)

        prep = Preprocessor(cfg.scaling, strict=cfg.strict_scaling, feature_names=dataset.feature_names)
        X_train, params = prep.fit_apply(train.X)

        grid = self._grid(X_train, train.y)
        selector = CrossValidatedSelector(
            n_folds=cfg.n_folds,
            seed=cfg.seed,
            tol=cfg.tol,
            max_iter=cfg.max_iter,
            cv_rule=cfg.cv_rule,
            warm_start=cfg.warm_start,
            n_jobs=cfg.n_jobs,
        )
        selection = selector.fit(X_train, train.y, grid)

        model = FittedModel(
            intercept=selection.intercept,
            coef=selection.coef,
            point=selection.champion,
            scaling=params,
            feature_names=dataset.feature_names,
            n_iter=selection.n_iter,
            converged=selection.converged,
        )
        counts = evaluate(model, params, test, positive_label=cfg.positive_label)

        return HarnessResult(
            champion=selection.champion,
            model=model,
            counts=counts,
            selection=selection,
            scaling=params,
            n_train=train.n_rows,
            n_test=test.n_rows,
            imputed=n_missing,
        )

    def _grid(self, X: np.ndarray, y: np.ndarray) -> List[HyperParameterPoint]:
        grid: List[HyperParameterPoint] = []
        for alpha in self.config.alphas:
            grid.extend(build_grid([alpha], self.config.lambda_values(X, y, alpha)))
        return grid


def run_harness(dataset: Dataset, config: Optional[HarnessConfig] = None) -> HarnessResult:
    return EvaluationHarness(config).run(dataset)
