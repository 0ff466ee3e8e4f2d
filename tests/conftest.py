import numpy as np
import pytest

from enetcv import Dataset


def _separable(n, p, seed, margin=0.5):
    """Rows on both sides of a fixed hyperplane, none closer than ``margin``."""
    rng = np.random.default_rng(seed)
    w = np.array([2.0, -1.5, 1.0, 0.5, -1.0, 0.75, -0.5][:p])
    rows = []
    while len(rows) < n:
        x = rng.standard_normal(p)
        if abs(x @ w) >= margin:
            rows.append(x)
    X = np.vstack(rows)
    y = (X @ w > 0).astype(int)
    return X, y


def _noisy(n, p, seed):
    rng = np.random.default_rng(seed)
    X = rng.standard_normal((n, p))
    w = np.linspace(1.5, -1.0, p)
    prob = 1.0 / (1.0 + np.exp(-(X @ w + 0.3)))
    y = (rng.random(n) < prob).astype(int)
    return X, y


@pytest.fixture
def separable_dataset():
    X, y = _separable(100, 5, seed=7)
    return Dataset(X, y, feature_names=[f"f{j}" for j in range(5)])


@pytest.fixture
def noisy_xy():
    return _noisy(200, 4, seed=3)


@pytest.fixture
def make_separable():
    return _separable


@pytest.fixture
def make_noisy():
    return _noisy
