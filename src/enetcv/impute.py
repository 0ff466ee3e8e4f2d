"""
Distance-weighted k-nearest-neighbour imputation.

Missing entries are estimated from the *complete* rows only. Distances are
Euclidean over standardised features, restricted to the dimensions observed
in the incomplete row and normalised by how many dimensions were compared.
"""

from __future__ import annotations

import logging
from typing import Tuple

import numpy as np

from .dataset import Dataset
from .exceptions import InsufficientDataError

__all__ = ["KNNImputer", "impute_knn"]

logger = logging.getLogger(__name__)


def _standardise_reference(complete: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    mu = complete.mean(axis=0)
    sd = complete.std(axis=0)
    sd[sd <= 0.0] = 1.0
    return mu, sd


def _partial_distances(row: np.ndarray, observed: np.ndarray, reference: np.ndarray) -> np.ndarray:
    """Distance from one (standardised) row to every reference row over ``observed`` dims."""
    m = int(observed.sum())
    if m == 0:
        return np.zeros(reference.shape[0], dtype=np.float64)
    diff = reference[:, observed] - row[observed]
    return np.sqrt(np.sum(diff * diff, axis=1) / m)


def _select_neighbours(dist: np.ndarray, k: int) -> np.ndarray:
    """Indices of the k nearest rows, plus any row tied with the k-th distance."""
    if k >= dist.shape[0]:
        return np.arange(dist.shape[0])
    kth = np.partition(dist, k - 1)[k - 1]
    return np.where(dist <= kth)[0]


class KNNImputer:
    """
    Fill missing feature values from the ``k`` nearest complete rows.

    Parameters
    ----------
    n_neighbors :
        Number of complete rows consulted per incomplete row. If fewer
        complete rows exist, all of them are used.
    weights :
        ``"distance"`` (inverse-distance weighted mean) or ``"uniform"``.
    """

    def __init__(self, n_neighbors: int = 10, weights: str = "distance") -> None:
        if int(n_neighbors) < 1:
            raise ValueError("n_neighbors must be at least 1.")
        weights = str(weights).lower()
        if weights not in ("distance", "uniform"):
            raise ValueError(f"Unsupported weights '{weights}'. Use 'distance' or 'uniform'.")
        self.n_neighbors = int(n_neighbors)
        self.weights = weights

    def transform(self, dataset: Dataset) -> Dataset:
        """Return a new dataset with every missing entry filled in."""
        if not dataset.has_missing:
            return dataset.with_features(dataset.X)

        X = dataset.X
        complete_mask = dataset.complete_rows()
        if not complete_mask.any():
            raise InsufficientDataError(
                "KNN imputation needs at least one complete row; none were found."
            )

        complete = X[complete_mask]
        if complete.shape[0] < self.n_neighbors:
            logger.info(
                "Only %d complete rows available; using all of them as neighbours (k=%d).",
                complete.shape[0], self.n_neighbors,
            )

        mu, sd = _standardise_reference(complete)
        ref_std = (complete - mu) / sd

        filled = X.copy()
        missing = dataset.missing_mask()
        rows = np.where(missing.any(axis=1))[0]
        for i in rows:
            observed = ~missing[i]
            row_std = (X[i] - mu) / sd
            if observed.any():
                dist = _partial_distances(row_std, observed, ref_std)
                nbrs = _select_neighbours(dist, self.n_neighbors)
            else:
                # nothing to measure against: every complete row is equally near
                dist = np.zeros(complete.shape[0], dtype=np.float64)
                nbrs = np.arange(complete.shape[0])
            w = self._weights(dist[nbrs])
            cols = np.where(missing[i])[0]
            filled[i, cols] = w @ complete[np.ix_(nbrs, cols)]

        logger.debug("Imputed %d entries across %d rows.", int(missing.sum()), rows.size)
        return dataset.with_features(filled)

    def _weights(self, d: np.ndarray) -> np.ndarray:
        if self.weights == "uniform":
            return np.full(d.shape[0], 1.0 / d.shape[0])
        zero = d <= 0.0
        if zero.any():
            w = zero.astype(np.float64)
        else:
            w = 1.0 / d
        return w / w.sum()


def impute_knn(dataset: Dataset, n_neighbors: int = 10, weights: str = "distance") -> Dataset:
    """Functional shorthand for ``KNNImputer(n_neighbors, weights).transform(dataset)``."""
    return KNNImputer(n_neighbors=n_neighbors, weights=weights).transform(dataset)
