import numpy as np
import pytest

from enetcv import Dataset, EvaluationHarness, HarnessConfig, run_harness

FAST = dict(n_folds=5, lambdas=(10.0, 3.0, 1.0, 0.3, 0.1), seed=42, train_fraction=0.7)


def test_separable_data_is_classified_well(separable_dataset):
    result = run_harness(separable_dataset, HarnessConfig(**FAST))
    assert result.n_train + result.n_test == 100
    assert result.counts.total == result.n_test
    assert result.counts.accuracy >= 0.9
    assert result.selection.n_fits == 25
    assert result.champion.lam in FAST["lambdas"]
    assert result.imputed == 0
    assert result.model.feature_names == separable_dataset.feature_names


def test_same_seed_same_result(separable_dataset):
    config = HarnessConfig(**FAST)
    a = run_harness(separable_dataset, config)
    b = run_harness(separable_dataset, config)
    assert a.champion == b.champion
    assert np.array_equal(a.model.coef, b.model.coef)
    assert a.counts == b.counts


def test_missing_entries_are_imputed_first(separable_dataset):
    X = np.array(separable_dataset.X)
    X[[2, 11, 30, 57, 88], [0, 1, 2, 3, 4]] = np.nan
    holey = Dataset(X, separable_dataset.y, feature_names=separable_dataset.feature_names)

    result = EvaluationHarness(HarnessConfig(**FAST)).run(holey)
    assert result.imputed == 5
    assert result.counts.accuracy >= 0.85
    assert holey.has_missing


def test_data_driven_grid_and_elastic_net(separable_dataset):
    config = HarnessConfig(n_folds=4, alphas=(0.5, 1.0), n_lambdas=6, lambda_min_ratio=0.01)
    result = run_harness(separable_dataset, config)
    assert result.selection.n_points == 12
    assert result.selection.n_fits == 48
    assert result.champion.alpha in (0.5, 1.0)


def test_model_scaling_is_the_training_scaling(separable_dataset):
    result = run_harness(separable_dataset, HarnessConfig(scaling="minmax", **FAST))
    assert result.model.scaling is result.scaling
    assert result.scaling.mode == "minmax"


def test_summary_is_flat_and_complete(separable_dataset):
    summary = run_harness(separable_dataset, HarnessConfig(**FAST)).summary()
    for key in ("alpha", "lambda", "cv_accuracy", "n_fits", "tp", "tn", "fp", "fn",
                "accuracy", "precision", "recall", "specificity", "coefficients"):
        assert key in summary
    assert set(summary["coefficients"]) == set(separable_dataset.feature_names)


def test_too_many_folds_for_training_rows():
    X = np.random.default_rng(0).normal(size=(12, 2))
    y = np.array([0, 1] * 6)
    with pytest.raises(ValueError):
        run_harness(Dataset(X, y), HarnessConfig(n_folds=50, lambdas=(1.0,)))
