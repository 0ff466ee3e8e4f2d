"""
Dataset container: a numeric feature matrix paired with binary labels.

Missing feature values are stored as ``NaN``. Labels are always encoded as
{0, 1}, with 1 marking the designated positive class; the raw values the
encoding came from are kept on :attr:`Dataset.classes`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from .exceptions import DataIntegrityError

__all__ = ["Dataset"]


def _default_names(p: int) -> Tuple[str, ...]:
    return tuple(f"x{j}" for j in range(p))


@dataclass(frozen=True, eq=False)
class Dataset:
    """
    Immutable feature matrix + binary label vector.

    Parameters
    ----------
    X :
        Array-like of shape (n, p). ``NaN`` marks a missing entry.
    y :
        Array-like of shape (n,) with values in {0, 1}.
    feature_names :
        Optional names, one per column. Defaults to ``x0 .. x{p-1}``.
    classes :
        Raw label values that 0 and 1 stand for, ``(negative, positive)``.
    """

    X: np.ndarray
    y: np.ndarray
    feature_names: Tuple[str, ...] = ()
    classes: Tuple[Any, Any] = (0, 1)
    _missing: np.ndarray = field(init=False, repr=False)

    def __post_init__(self) -> None:
        X = np.array(self.X, dtype=np.float64, copy=True)
        if X.ndim != 2:
            raise DataIntegrityError(f"X must be 2-D, got shape {X.shape}.")
        n, p = X.shape

        y_raw = np.asarray(self.y)
        if y_raw.ndim != 1:
            raise DataIntegrityError("y must be a 1-D array of binary labels.")
        if y_raw.shape[0] != n:
            raise DataIntegrityError(
                f"X and y must have the same number of rows ({n} != {y_raw.shape[0]})."
            )
        if y_raw.size and not np.isin(y_raw, (0, 1)).all():
            bad = sorted(set(np.unique(y_raw).tolist()) - {0, 1})
            raise DataIntegrityError(f"Labels must be encoded as 0/1, found {bad}.")
        y = y_raw.astype(np.int64)

        if np.isinf(X).any():
            raise DataIntegrityError("X contains infinite values.")

        names = tuple(str(f) for f in self.feature_names) if self.feature_names else _default_names(p)
        if len(names) != p:
            raise DataIntegrityError(
                f"Expected {p} feature names, got {len(names)}."
            )
        if len(set(names)) != p:
            raise DataIntegrityError("Feature names must be unique.")
        if len(self.classes) != 2:
            raise DataIntegrityError("classes must hold exactly two raw label values.")

        X.setflags(write=False)
        y.setflags(write=False)
        object.__setattr__(self, "X", X)
        object.__setattr__(self, "y", y)
        object.__setattr__(self, "feature_names", names)
        object.__setattr__(self, "classes", tuple(self.classes))
        object.__setattr__(self, "_missing", np.isnan(X))

    # ------------------------------------------------------------------ #
    # Shape / integrity helpers
    # ------------------------------------------------------------------ #

    @property
    def n_rows(self) -> int:
        return int(self.X.shape[0])

    @property
    def n_features(self) -> int:
        return int(self.X.shape[1])

    @property
    def has_missing(self) -> bool:
        return bool(self._missing.any())

    def missing_mask(self) -> np.ndarray:
        return self._missing.copy()

    def complete_rows(self) -> np.ndarray:
        """Boolean mask of rows with every feature observed."""
        return ~self._missing.any(axis=1)

    def __len__(self) -> int:
        return self.n_rows

    # ------------------------------------------------------------------ #
    # Derivations (always return new datasets)
    # ------------------------------------------------------------------ #

    def subset(self, indices: Sequence[int] | np.ndarray) -> "Dataset":
        idx = np.asarray(indices)
        return Dataset(self.X[idx], self.y[idx], self.feature_names, self.classes)

    def with_features(self, X: np.ndarray) -> "Dataset":
        """Same labels and names, different feature values."""
        X = np.asarray(X, dtype=np.float64)
        if X.shape != self.X.shape:
            raise DataIntegrityError(
                f"Replacement matrix has shape {X.shape}, expected {self.X.shape}."
            )
        return Dataset(X, self.y, self.feature_names, self.classes)

    # ------------------------------------------------------------------ #
    # pandas interop
    # ------------------------------------------------------------------ #

    @classmethod
    def from_frame(
        cls,
        df: pd.DataFrame,
        target: str,
        positive_label: Any,
        *,
        feature_columns: Optional[Sequence[str]] = None,
    ) -> "Dataset":
        """
        Build a dataset from a DataFrame, encoding ``positive_label`` as 1.

        The positive class must be named explicitly; it is never inferred from
        the data, so e.g. a 2/4 coded outcome cannot be silently inverted.
        """
        if target not in df.columns:
            raise DataIntegrityError(f"Target column '{target}' not found in data.")
        if feature_columns is None:
            feature_columns = [c for c in df.columns if c != target]
        missing = [c for c in feature_columns if c not in df.columns]
        if missing:
            raise DataIntegrityError(f"Input is missing features: {missing}")

        labels = df[target]
        if labels.isna().any():
            raise DataIntegrityError(f"Target column '{target}' contains missing labels.")
        raw = pd.unique(labels)
        if len(raw) > 2:
            raise DataIntegrityError(
                f"Target column '{target}' must be binary, found values {sorted(raw.tolist())}."
            )
        if positive_label not in set(raw.tolist()):
            raise DataIntegrityError(
                f"Positive label {positive_label!r} not among target values {sorted(raw.tolist())}."
            )
        others = [v for v in raw.tolist() if v != positive_label]
        negative_label = others[0] if others else None

        try:
            X = df[list(feature_columns)].to_numpy(dtype=np.float64)
        except (TypeError, ValueError) as exc:
            raise DataIntegrityError(f"Feature columns must be numeric: {exc}") from exc
        y = (labels == positive_label).to_numpy().astype(np.int64)
        return cls(X, y, tuple(map(str, feature_columns)), (negative_label, positive_label))

    def to_frame(self, target: str = "target") -> pd.DataFrame:
        df = pd.DataFrame(self.X, columns=list(self.feature_names))
        df[target] = self.y
        return df
