"""
Preprocessing utilities for the enetcv package.

Scaling parameters are computed once on a reference matrix (normally the
training partition) and carried around as an immutable :class:`ScalingParams`
so the exact same transform can be replayed on held-out data or inverted.
"""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np

from .exceptions import DataIntegrityError, DegenerateFeatureError, DegenerateFeatureWarning

__all__ = ["ScalingParams", "Preprocessor", "SCALING_MODES"]

logger = logging.getLogger(__name__)

SCALING_MODES = ("standardize", "minmax")


@dataclass(frozen=True, eq=False)
class ScalingParams:
    """
    Per-feature affine transform ``(x - center) / scale``.

    ``unscaled`` lists the column indices that were left untouched because
    their spread on the reference set was zero.
    """

    mode: str
    center: np.ndarray
    scale: np.ndarray
    unscaled: Tuple[int, ...] = ()

    def __post_init__(self) -> None:
        center = np.array(self.center, dtype=np.float64, copy=True).ravel()
        scale = np.array(self.scale, dtype=np.float64, copy=True).ravel()
        if center.shape != scale.shape:
            raise DataIntegrityError("center and scale must have the same length.")
        if np.any(scale == 0.0):
            raise DataIntegrityError("scale must not contain zeros.")
        center.setflags(write=False)
        scale.setflags(write=False)
        object.__setattr__(self, "center", center)
        object.__setattr__(self, "scale", scale)
        object.__setattr__(self, "unscaled", tuple(int(j) for j in self.unscaled))

    def __len__(self) -> int:
        return int(self.center.shape[0])

    @classmethod
    def identity(cls, n_features: int) -> "ScalingParams":
        """Parameters that leave every feature as is."""
        return cls("identity", np.zeros(n_features), np.ones(n_features))


def _check_matrix(X: np.ndarray, params: Optional[ScalingParams] = None) -> np.ndarray:
    X = np.asarray(X, dtype=np.float64)
    if X.ndim != 2:
        raise DataIntegrityError(f"Expected a 2-D matrix, got shape {X.shape}.")
    if params is not None and X.shape[1] != len(params):
        raise DataIntegrityError(
            f"Matrix has {X.shape[1]} features but the scaling parameters cover {len(params)}."
        )
    return X


class Preprocessor:
    """
    Standardisation or min-max normalisation fitted on a reference set.

    Parameters
    ----------
    mode :
        ``"standardize"`` subtracts the mean and divides by the (population)
        standard deviation; ``"minmax"`` maps the reference range onto [0, 1].
    strict :
        If True a zero-spread feature raises :class:`DegenerateFeatureError`;
        otherwise it is left unscaled and a warning is emitted.
    feature_names :
        Optional names used in diagnostics.
    """

    def __init__(
        self,
        mode: str = "standardize",
        strict: bool = False,
        feature_names: Optional[Sequence[str]] = None,
    ) -> None:
        mode = str(mode).lower()
        if mode not in SCALING_MODES:
            raise ValueError(f"Unsupported scaling mode '{mode}'. Use one of {SCALING_MODES}.")
        self.mode = mode
        self.strict = bool(strict)
        self.feature_names = None if feature_names is None else list(map(str, feature_names))

    def fit(self, reference: np.ndarray) -> ScalingParams:
        X = _check_matrix(reference)
        if X.shape[0] == 0:
            raise DataIntegrityError("Cannot fit scaling parameters on an empty matrix.")

        with warnings.catch_warnings():
            # all-NaN columns are reported as degenerate below
            warnings.simplefilter("ignore", category=RuntimeWarning)
            if self.mode == "standardize":
                center = np.nanmean(X, axis=0)
                scale = np.nanstd(X, axis=0)
            else:
                center = np.nanmin(X, axis=0)
                scale = np.nanmax(X, axis=0) - center

        degenerate = np.where(~np.isfinite(scale) | (scale <= 0.0))[0]
        if degenerate.size:
            names = self._names(degenerate)
            if self.strict:
                raise DegenerateFeatureError(names)
            logger.warning("Leaving zero-spread features unscaled: %s", names)
            warnings.warn(
                f"Features with zero spread left unscaled: {names}",
                DegenerateFeatureWarning,
                stacklevel=2,
            )
            center[degenerate] = 0.0
            scale[degenerate] = 1.0

        return ScalingParams(self.mode, center, scale, tuple(degenerate.tolist()))

    @staticmethod
    def apply(X: np.ndarray, params: ScalingParams) -> np.ndarray:
        """Transform ``X`` with previously fitted parameters (never refits)."""
        X = _check_matrix(X, params)
        return (X - params.center) / params.scale

    @staticmethod
    def inverse(X: np.ndarray, params: ScalingParams) -> np.ndarray:
        X = _check_matrix(X, params)
        return X * params.scale + params.center

    def fit_apply(self, X: np.ndarray) -> Tuple[np.ndarray, ScalingParams]:
        params = self.fit(X)
        return self.apply(X, params), params

    def _names(self, idx: np.ndarray) -> list:
        if self.feature_names is not None and len(self.feature_names) > int(idx.max()):
            return [self.feature_names[int(j)] for j in idx]
        return [int(j) for j in idx]
