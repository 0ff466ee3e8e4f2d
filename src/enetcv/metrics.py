"""
Confusion-matrix metrics and the held-out evaluator.

Ratios with a zero denominator are reported as ``NaN`` (never 0.0) together
with an :class:`UndefinedMetricWarning`, so "undefined" stays distinguishable
from "zero".
"""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass
from typing import Dict, Iterable, Optional

import numpy as np

from ._math import _sigmoid
from .dataset import Dataset
from .exceptions import DataIntegrityError, UndefinedMetricWarning
from .model import FittedModel
from .preprocessing import Preprocessor, ScalingParams

__all__ = ["ConfusionCounts", "confusion_counts", "evaluate"]

logger = logging.getLogger(__name__)


def _ratio(num: int, den: int, name: str) -> float:
    if den == 0:
        warnings.warn(
            f"{name} is undefined (zero denominator); reporting NaN.",
            UndefinedMetricWarning,
            stacklevel=3,
        )
        return float("nan")
    return num / den


@dataclass(frozen=True)
class ConfusionCounts:
    """True/false positive/negative tallies and the metrics derived from them."""

    tp: int
    tn: int
    fp: int
    fn: int

    def __post_init__(self) -> None:
        for name in ("tp", "tn", "fp", "fn"):
            value = int(getattr(self, name))
            if value < 0:
                raise ValueError(f"{name} must be non-negative, got {value}.")
            object.__setattr__(self, name, value)

    @property
    def total(self) -> int:
        return self.tp + self.tn + self.fp + self.fn

    @property
    def accuracy(self) -> float:
        return _ratio(self.tp + self.tn, self.total, "accuracy")

    @property
    def precision(self) -> float:
        return _ratio(self.tp, self.tp + self.fp, "precision")

    @property
    def recall(self) -> float:
        return _ratio(self.tp, self.tp + self.fn, "recall")

    @property
    def specificity(self) -> float:
        return _ratio(self.tn, self.tn + self.fp, "specificity")

    @property
    def f1(self) -> float:
        p, r = self.precision, self.recall
        if np.isnan(p) or np.isnan(r):
            return float("nan")
        if p + r == 0.0:
            return 0.0
        return 2.0 * p * r / (p + r)

    @property
    def youden_j(self) -> float:
        """Sensitivity + specificity - 1."""
        return self.recall + self.specificity - 1.0

    def as_dict(self) -> Dict[str, float]:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", UndefinedMetricWarning)
            return {
                "tp": self.tp,
                "tn": self.tn,
                "fp": self.fp,
                "fn": self.fn,
                "accuracy": self.accuracy,
                "precision": self.precision,
                "recall": self.recall,
                "specificity": self.specificity,
                "f1": self.f1,
                "youden_j": self.youden_j,
            }


def confusion_counts(
    y_true: Iterable[int] | np.ndarray,
    y_pred: Iterable[int] | np.ndarray,
    positive_label: int = 1,
) -> ConfusionCounts:
    """
    Tally predictions against ground truth.

    Parameters
    ----------
    y_true, y_pred :
        Labels in {0, 1}.
    positive_label :
        Which of the two labels counts as "positive".
    """
    if positive_label not in (0, 1):
        raise DataIntegrityError(f"positive_label must be 0 or 1, got {positive_label!r}.")
    yt = np.asarray(y_true)
    yp = np.asarray(y_pred)
    if yt.shape != yp.shape or yt.ndim != 1:
        raise DataIntegrityError("y_true and y_pred must be 1-D arrays of equal length.")
    if not (np.isin(yt, (0, 1)).all() and np.isin(yp, (0, 1)).all()):
        raise DataIntegrityError("Labels must be encoded as 0/1.")

    yt = yt == positive_label
    yp = yp == positive_label
    return ConfusionCounts(
        tp=int(np.sum(yt & yp)),
        tn=int(np.sum(~yt & ~yp)),
        fp=int(np.sum(~yt & yp)),
        fn=int(np.sum(yt & ~yp)),
    )


def evaluate(
    model: FittedModel,
    params: Optional[ScalingParams],
    test: Dataset,
    positive_label: int = 1,
    threshold: float = 0.5,
) -> ConfusionCounts:
    """
    Score ``model`` on a held-out dataset.

    ``params`` must be the training-time scaling parameters; they are applied
    as is and never refit on the test rows. ``None`` uses the parameters
    stored on the model.
    """
    if test.n_features != model.n_features:
        raise DataIntegrityError(
            f"Test set has {test.n_features} features, model expects {model.n_features}."
        )
    if test.has_missing:
        raise DataIntegrityError("Test set contains missing values; impute before evaluating.")

    if params is None:
        params = model.scaling
    X = Preprocessor.apply(test.X, params)
    proba = _sigmoid(X @ model.coef + model.intercept)
    y_pred = (proba >= float(threshold)).astype(np.int64)
    counts = confusion_counts(test.y, y_pred, positive_label=positive_label)
    logger.info("Held-out evaluation on %d rows: %s", test.n_rows, counts)
    return counts
