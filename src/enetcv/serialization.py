"""Persistence helpers for fitted enetcv models."""

from __future__ import annotations

from pathlib import Path

import numpy as np

from .exceptions import DataIntegrityError
from .model import FittedModel, HyperParameterPoint
from .preprocessing import ScalingParams

__all__ = [
    "save_model_npz",
    "load_model_npz",
]

_FORMAT_VERSION = 1


def save_model_npz(model: FittedModel, path: str | Path) -> None:
    """
    Persist coefficients together with their scaling parameters to a
    compressed npz file. The two are always stored and loaded as a unit.
    """
    state = {
        "format_version": np.array([_FORMAT_VERSION], dtype=np.int64),
        "feature_names": np.array(model.feature_names, dtype=str),
        "lr.coef_": model.coef.astype(np.float64),
        "lr.intercept_": np.array([model.intercept], dtype=np.float64),
        "lr.alpha": np.array([model.point.alpha], dtype=np.float64),
        "lr.lambda": np.array([model.point.lam], dtype=np.float64),
        "lr.n_iter": np.array([model.n_iter], dtype=np.int64),
        "lr.converged": np.array([model.converged], dtype=bool),
        "scaler.mode": np.array([model.scaling.mode], dtype=str),
        "scaler.center": model.scaling.center.astype(np.float64),
        "scaler.scale": model.scaling.scale.astype(np.float64),
        "scaler.unscaled": np.array(model.scaling.unscaled, dtype=np.int64),
    }
    np.savez_compressed(path, **state)


def load_model_npz(path: str | Path) -> FittedModel:
    """Load a model stored by :func:`save_model_npz`."""
    with np.load(path, allow_pickle=False) as blob:
        version = int(blob["format_version"][0]) if "format_version" in blob else 0
        if version != _FORMAT_VERSION:
            raise DataIntegrityError(f"Unsupported model file format version {version}.")
        scaling = ScalingParams(
            mode=str(blob["scaler.mode"][0]),
            center=blob["scaler.center"].astype(np.float64),
            scale=blob["scaler.scale"].astype(np.float64),
            unscaled=tuple(blob["scaler.unscaled"].tolist()),
        )
        return FittedModel(
            intercept=float(blob["lr.intercept_"][0]),
            coef=blob["lr.coef_"].astype(np.float64),
            point=HyperParameterPoint(float(blob["lr.alpha"][0]), float(blob["lr.lambda"][0])),
            scaling=scaling,
            feature_names=tuple(str(f) for f in blob["feature_names"].tolist()),
            n_iter=int(blob["lr.n_iter"][0]),
            converged=bool(blob["lr.converged"][0]),
        )
