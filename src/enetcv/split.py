"""Seeded train/test partitioning and balanced k-fold assignment."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Tuple

import numpy as np

from .dataset import Dataset
from .exceptions import InsufficientDataError

__all__ = ["FoldAssignment", "kfold", "train_test_indices", "train_test_split"]


@dataclass(frozen=True, eq=False)
class FoldAssignment:
    """
    Row -> fold mapping for one cross-validation run.

    ``fold_of[i]`` is the fold (0 .. k-1) that row ``i`` is held out in.
    """

    fold_of: np.ndarray
    k: int

    def __post_init__(self) -> None:
        fold_of = np.array(self.fold_of, dtype=np.int64, copy=True)
        fold_of.setflags(write=False)
        object.__setattr__(self, "fold_of", fold_of)
        object.__setattr__(self, "k", int(self.k))

    @property
    def n_rows(self) -> int:
        return int(self.fold_of.shape[0])

    def sizes(self) -> np.ndarray:
        return np.bincount(self.fold_of, minlength=self.k)

    def validation_indices(self, fold: int) -> np.ndarray:
        return np.where(self.fold_of == fold)[0]

    def training_indices(self, fold: int) -> np.ndarray:
        return np.where(self.fold_of != fold)[0]

    def __iter__(self) -> Iterator[Tuple[np.ndarray, np.ndarray]]:
        for f in range(self.k):
            yield self.training_indices(f), self.validation_indices(f)

    def __len__(self) -> int:
        return self.k


def kfold(data: Dataset | int, k: int = 10, seed: int = 42) -> FoldAssignment:
    """
    Shuffle rows with ``seed`` and cut them into ``k`` contiguous blocks.

    Every fold holds ``floor(n/k)`` or ``ceil(n/k)`` rows.
    """
    n = data.n_rows if isinstance(data, Dataset) else int(data)
    k = int(k)
    if k < 2:
        raise ValueError("k-fold cross-validation needs k >= 2.")
    if k > n:
        raise InsufficientDataError(f"Cannot build {k} non-empty folds from {n} rows.")

    rng = np.random.default_rng(seed)
    idx = np.arange(n)
    rng.shuffle(idx)
    fold_of = np.empty(n, dtype=np.int64)
    for f, block in enumerate(np.array_split(idx, k)):
        fold_of[block] = f
    return FoldAssignment(fold_of, k)


def train_test_indices(n: int, fraction: float, seed: int = 42) -> Tuple[np.ndarray, np.ndarray]:
    """Independent seeded draw per row: train when the draw falls below ``fraction``."""
    fraction = float(fraction)
    if not 0.0 < fraction < 1.0:
        raise ValueError(f"Training fraction must lie in (0, 1), got {fraction}.")
    draws = np.random.default_rng(seed).random(int(n))
    in_train = draws < fraction
    train_idx = np.where(in_train)[0]
    test_idx = np.where(~in_train)[0]
    if train_idx.size == 0 or test_idx.size == 0:
        raise InsufficientDataError(
            f"Split of {n} rows at fraction {fraction} (seed {seed}) left an empty partition."
        )
    return train_idx, test_idx


def train_test_split(dataset: Dataset, fraction: float = 0.7, seed: int = 42) -> Tuple[Dataset, Dataset]:
    train_idx, test_idx = train_test_indices(dataset.n_rows, fraction, seed)
    return dataset.subset(train_idx), dataset.subset(test_idx)
