import numpy as np
import pytest
from sklearn.base import clone
from sklearn.linear_model import LogisticRegression

from enetcv import (
    ConvergenceWarning,
    DataIntegrityError,
    ElasticNetLogistic,
    InsufficientDataError,
    fit_path,
    geometric_grid,
    lambda_grid,
    lambda_max,
)
from enetcv._math import _sigmoid
from enetcv._solvers import _CDLogistic


def _gradient(X, y, model):
    p = _sigmoid(X @ model.coef_.ravel() + model.intercept_[0])
    return X.T @ (p - y)


def test_huge_lambda_zeroes_every_coefficient(noisy_xy):
    X, y = noisy_xy
    lam = 10 * lambda_max(X, y, alpha=1.0)
    model = ElasticNetLogistic(alpha=1.0, lam=lam).fit(X, y)
    assert np.all(model.coef_ == 0.0)
    ybar = y.mean()
    assert model.intercept_[0] == pytest.approx(np.log(ybar / (1 - ybar)), abs=1e-8)
    assert model.converged_


def test_lambda_max_is_the_first_point_with_a_nonzero_coefficient(noisy_xy):
    X, y = noisy_xy
    lmax = lambda_max(X, y, alpha=1.0)
    above = ElasticNetLogistic(alpha=1.0, lam=lmax * 1.0001).fit(X, y)
    below = ElasticNetLogistic(alpha=1.0, lam=lmax * 0.9).fit(X, y)
    assert np.count_nonzero(above.coef_) == 0
    assert np.count_nonzero(below.coef_) >= 1


def test_lambda_max_scales_with_alpha(noisy_xy):
    X, y = noisy_xy
    assert lambda_max(X, y, alpha=0.5) == pytest.approx(2 * lambda_max(X, y, alpha=1.0))
    # ridge borrows the alpha=0.001 value
    assert lambda_max(X, y, alpha=0.0) == pytest.approx(1000 * lambda_max(X, y, alpha=1.0))


def test_lambda_max_needs_both_classes():
    X = np.random.default_rng(0).normal(size=(10, 2))
    with pytest.raises(InsufficientDataError):
        lambda_max(X, np.ones(10))


def test_ridge_matches_sklearn(noisy_xy):
    X, y = noisy_xy
    lam = 2.0
    ours = ElasticNetLogistic(alpha=0.0, lam=lam, tol=1e-10, max_iter=5000).fit(X, y)
    ref = LogisticRegression(C=1.0 / lam, tol=1e-10, max_iter=10000).fit(X, y)
    assert np.allclose(ours.coef_, ref.coef_, atol=1e-4)
    assert np.allclose(ours.intercept_, ref.intercept_, atol=1e-4)
    assert np.all(ours.coef_ != 0.0)


def test_lasso_solution_satisfies_optimality(noisy_xy):
    X, y = noisy_xy
    lam = 0.2 * lambda_max(X, y, alpha=1.0)
    model = ElasticNetLogistic(alpha=1.0, lam=lam, tol=1e-10).fit(X, y)
    w = model.coef_.ravel()
    g = _gradient(X, y, model)
    active = w != 0.0
    assert active.any()
    assert np.allclose(g[active], -lam * np.sign(w[active]), atol=1e-4)
    assert np.all(np.abs(g[~active]) <= lam + 1e-6)


def test_elastic_net_solution_satisfies_optimality(noisy_xy):
    X, y = noisy_xy
    alpha = 0.5
    lam = 0.1 * lambda_max(X, y, alpha=alpha)
    model = ElasticNetLogistic(alpha=alpha, lam=lam, tol=1e-10).fit(X, y)
    w = model.coef_.ravel()
    g = _gradient(X, y, model) + lam * (1 - alpha) * w
    active = w != 0.0
    assert np.allclose(g[active], -lam * alpha * np.sign(w[active]), atol=1e-4)
    assert np.all(np.abs(g[~active]) <= lam * alpha + 1e-6)


def test_warm_path_agrees_with_cold_fits(noisy_xy):
    X, y = noisy_xy
    lambdas = lambda_grid(X, y, alpha=0.7, n_lambdas=6, min_ratio=0.05)
    coefs, intercepts = fit_path(X, y, 0.7, lambdas, tol=1e-10)
    for lam, coef, b in zip(lambdas, coefs, intercepts):
        cold = ElasticNetLogistic(alpha=0.7, lam=lam, tol=1e-10).fit(X, y)
        assert np.allclose(coef, cold.coef_.ravel(), atol=1e-5)
        assert b == pytest.approx(cold.intercept_[0], abs=1e-5)


def test_path_results_follow_caller_order(noisy_xy):
    X, y = noisy_xy
    coefs_desc, _ = fit_path(X, y, 1.0, [5.0, 1.0, 0.2])
    coefs_mixed, _ = fit_path(X, y, 1.0, [1.0, 0.2, 5.0])
    assert np.allclose(coefs_mixed, coefs_desc[[1, 2, 0]], atol=1e-6)


def test_iteration_cap_warns_and_flags_non_convergence(noisy_xy):
    X, y = noisy_xy
    with pytest.warns(ConvergenceWarning):
        model = ElasticNetLogistic(alpha=0.5, lam=0.01, max_iter=1).fit(X, y)
    assert not model.converged_
    assert model.n_iter_ == 1
    assert np.all(np.isfinite(model.coef_))


def test_sklearn_estimator_protocol(noisy_xy):
    X, y = noisy_xy
    est = ElasticNetLogistic(alpha=0.3, lam=0.5)
    copy = clone(est)
    assert copy.get_params() == {"alpha": 0.3, "lam": 0.5, "tol": 1e-7, "max_iter": 1000}
    copy.fit(X, y)
    proba = copy.predict_proba(X)
    assert proba.shape == (len(y), 2)
    assert np.allclose(proba.sum(axis=1), 1.0)
    assert copy.predict(X).tolist() == (proba[:, 1] >= 0.5).astype(int).tolist()
    assert 0.0 <= copy.score(X, y) <= 1.0


def test_invalid_input_is_rejected(noisy_xy):
    X, y = noisy_xy
    with pytest.raises(ValueError):
        ElasticNetLogistic(alpha=1.5).fit(X, y)
    with pytest.raises(ValueError):
        ElasticNetLogistic(lam=0.0).fit(X, y)
    X_nan = X.copy()
    X_nan[0, 0] = np.nan
    with pytest.raises(DataIntegrityError):
        ElasticNetLogistic().fit(X_nan, y)
    with pytest.raises(DataIntegrityError):
        ElasticNetLogistic().fit(X, y + 1)
    with pytest.raises(RuntimeError):
        ElasticNetLogistic().predict(X)
    fitted = ElasticNetLogistic(lam=0.5).fit(X, y)
    with pytest.raises(DataIntegrityError):
        fitted.predict(X[:, :2])


def test_geometric_grid():
    grid = geometric_grid(0.01, 1.0, 3)
    assert grid.tolist() == pytest.approx([1.0, 0.1, 0.01])
    with pytest.raises(ValueError):
        geometric_grid(0.0, 1.0, 3)


def test_lambda_grid_default_ratio_depends_on_shape(noisy_xy):
    X, y = noisy_xy
    grid = lambda_grid(X, y, alpha=1.0, n_lambdas=5)
    assert grid[0] == pytest.approx(lambda_max(X, y, 1.0))
    assert grid[-1] == pytest.approx(1e-4 * grid[0])
    assert np.all(np.diff(grid) < 0)

    wide = lambda_grid(X[:3], np.array([0, 1, 0]), alpha=1.0, n_lambdas=5)
    assert wide[-1] == pytest.approx(1e-2 * wide[0])


def test_solution_beats_the_null_model(noisy_xy):
    X, y = noisy_xy
    solver = _CDLogistic(lam=1.0, alpha=0.5).fit(X, y)
    null = _CDLogistic(lam=1.0, alpha=0.5)
    null.w_, null.b_ = np.zeros(X.shape[1]), 0.0
    assert solver.objective(X, y) == pytest.approx(solver.objective_)
    assert solver.objective_ < null.objective(X, y)
