"""
Low-level numerical helpers used throughout the enetcv package.

The functions in this module are intentionally lightweight so they can be
imported by both the solvers and the higher level estimators without creating
cyclic dependencies.
"""

from __future__ import annotations

import numpy as np

__all__ = [
    "_sigmoid",
    "_softplus",
    "_log_loss_sum",
    "_soft_threshold",
    "_enet_penalty",
    "_enet_objective",
]


def _sigmoid(z: np.ndarray | float) -> np.ndarray | float:
    """Numerically stable logistic sigmoid."""
    z = np.clip(z, -40.0, 40.0)
    return 1.0 / (1.0 + np.exp(-z))


def _softplus(z: np.ndarray | float) -> np.ndarray | float:
    """Stable computation of log(1 + exp(z))."""
    z = np.asarray(z)
    return np.log1p(np.exp(-np.abs(z))) + np.maximum(z, 0.0)


def _log_loss_sum(y: np.ndarray, z: np.ndarray) -> float:
    """
    Negative log-likelihood of a logistic model, summed over rows.

    Parameters
    ----------
    y :
        Binary labels in {0, 1}.
    z :
        Logits (X w + b).
    """
    return float(np.sum(_softplus(z) - y * z))


def _soft_threshold(w: np.ndarray | float, thresh: float) -> np.ndarray | float:
    """Proximal operator for the L1 norm."""
    return np.sign(w) * np.maximum(np.abs(w) - thresh, 0.0)


def _enet_penalty(w: np.ndarray, lam: float, alpha: float) -> float:
    """lam * (alpha * |w|_1 + (1 - alpha) / 2 * |w|_2^2)."""
    return float(lam * (alpha * np.sum(np.abs(w)) + 0.5 * (1.0 - alpha) * np.dot(w, w)))


def _enet_objective(
    y: np.ndarray,
    z: np.ndarray,
    w: np.ndarray,
    lam: float,
    alpha: float,
) -> float:
    """Penalised negative log-likelihood minimised by the coordinate descent solver."""
    return _log_loss_sum(y, z) + _enet_penalty(w, lam, alpha)
