"""
enetcv package
--------------

Cross-validated elastic-net logistic regression: KNN imputation, scaling,
seeded splitting, coordinate descent along a regularisation path, grid
selection by held-out accuracy and confusion-matrix evaluation.
"""

from __future__ import annotations

from ._solvers import geometric_grid, lambda_grid, lambda_max
from ._version import __version__
from .config import HarnessConfig, load_config_json, save_config_json
from .dataset import Dataset
from .exceptions import (
    ConvergenceWarning,
    DataIntegrityError,
    DegenerateFeatureError,
    DegenerateFeatureWarning,
    EnetcvError,
    InsufficientDataError,
    UndefinedMetricWarning,
)
from .impute import KNNImputer, impute_knn
from .linear_model import ElasticNetLogistic, fit_path
from .metrics import ConfusionCounts, confusion_counts, evaluate
from .model import FittedModel, HyperParameterPoint
from .pipeline import EvaluationHarness, HarnessResult, run_harness
from .preprocessing import Preprocessor, ScalingParams
from .selection import CrossValidatedSelector, SelectionResult, build_grid
from .serialization import load_model_npz, save_model_npz
from .split import FoldAssignment, kfold, train_test_indices, train_test_split

__all__ = [
    "__version__",
    "ConfusionCounts",
    "ConvergenceWarning",
    "CrossValidatedSelector",
    "DataIntegrityError",
    "Dataset",
    "DegenerateFeatureError",
    "DegenerateFeatureWarning",
    "ElasticNetLogistic",
    "EnetcvError",
    "EvaluationHarness",
    "FittedModel",
    "FoldAssignment",
    "HarnessConfig",
    "HarnessResult",
    "HyperParameterPoint",
    "InsufficientDataError",
    "KNNImputer",
    "Preprocessor",
    "ScalingParams",
    "SelectionResult",
    "UndefinedMetricWarning",
    "build_grid",
    "confusion_counts",
    "evaluate",
    "fit_path",
    "geometric_grid",
    "impute_knn",
    "kfold",
    "lambda_grid",
    "lambda_max",
    "load_config_json",
    "load_model_npz",
    "run_harness",
    "save_config_json",
    "save_model_npz",
    "train_test_indices",
    "train_test_split",
]
