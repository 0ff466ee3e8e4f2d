"""Error and warning classes raised by enetcv."""

from __future__ import annotations

from sklearn.exceptions import ConvergenceWarning as _SklearnConvergenceWarning
from sklearn.exceptions import UndefinedMetricWarning as _SklearnUndefinedMetricWarning

__all__ = [
    "EnetcvError",
    "DataIntegrityError",
    "InsufficientDataError",
    "DegenerateFeatureError",
    "DegenerateFeatureWarning",
    "ConvergenceWarning",
    "UndefinedMetricWarning",
]


class EnetcvError(Exception):
    """Base class for errors raised by this package."""


class DataIntegrityError(EnetcvError, ValueError):
    """Malformed input: bad shapes, mismatched feature counts, non-binary labels."""


class InsufficientDataError(EnetcvError, ValueError):
    """Too little data to impute, split or fit."""


class DegenerateFeatureError(EnetcvError, ValueError):
    """A feature has zero spread and cannot be scaled."""

    def __init__(self, features) -> None:
        self.features = list(features)
        super().__init__(f"Features with zero spread cannot be scaled: {self.features}")


class DegenerateFeatureWarning(UserWarning):
    """A zero-spread feature was left unscaled."""


class ConvergenceWarning(_SklearnConvergenceWarning):
    """The coordinate descent solver hit its iteration cap."""


class UndefinedMetricWarning(_SklearnUndefinedMetricWarning):
    """A metric had a zero denominator and was reported as NaN."""
