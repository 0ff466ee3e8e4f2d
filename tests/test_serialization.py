import numpy as np
import pytest

from enetcv import DataIntegrityError, HarnessConfig, load_model_npz, run_harness, save_model_npz


def test_round_trip_preserves_predictions(tmp_path, separable_dataset):
    config = HarnessConfig(n_folds=3, lambdas=(1.0, 0.1), scaling="minmax")
    model = run_harness(separable_dataset, config).model

    path = tmp_path / "model.npz"
    save_model_npz(model, path)
    loaded = load_model_npz(path)

    assert loaded.point == model.point
    assert loaded.feature_names == model.feature_names
    assert loaded.scaling.mode == "minmax"
    assert np.array_equal(loaded.coef, model.coef)
    assert np.array_equal(
        loaded.predict_proba(separable_dataset.X), model.predict_proba(separable_dataset.X)
    )


def test_unknown_format_version_is_rejected(tmp_path):
    path = tmp_path / "bogus.npz"
    np.savez(path, format_version=np.array([99]))
    with pytest.raises(DataIntegrityError):
        load_model_npz(path)
