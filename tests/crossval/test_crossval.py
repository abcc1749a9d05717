"""
Tests for k-fold cross-validation.

Validates fold partitioning, per-fold scoring against a manual
fit/predict loop, seeding, error propagation and the train/test gap of
an overfit model.
"""

from itertools import combinations

import numpy as np
import pytest

from pylinmod.core.exceptions import SingularMatrixError, ValidationError
from pylinmod.crossval import (
    CrossValidationSolution,
    cross_validate,
    cross_validate_arrays,
    kfold_indices,
)
from pylinmod.regression import (
    Categorical,
    Intercept,
    Interaction,
    Numeric,
    fit,
    simulate_linear,
)


class TestKFoldIndices:

    def test_partition(self):
        folds = kfold_indices(23, 5, seed=0)
        combined = np.sort(np.concatenate(folds))
        np.testing.assert_array_equal(combined, np.arange(23))

    def test_sizes_differ_by_at_most_one(self):
        sizes = [len(f) for f in kfold_indices(23, 5, seed=0)]
        assert sorted(sizes) == [4, 4, 5, 5, 5]

    def test_folds_sorted(self):
        for fold in kfold_indices(30, 4, seed=1):
            np.testing.assert_array_equal(fold, np.sort(fold))

    def test_no_shuffle_contiguous(self):
        folds = kfold_indices(6, 3, shuffle=False)
        assert [f.tolist() for f in folds] == [[0, 1], [2, 3], [4, 5]]

    def test_seed_reproducible(self):
        a = kfold_indices(50, 5, seed=9)
        b = kfold_indices(50, 5, seed=9)
        for fa, fb in zip(a, b):
            np.testing.assert_array_equal(fa, fb)

    def test_leave_one_out(self):
        folds = kfold_indices(4, 4, shuffle=False)
        assert [f.tolist() for f in folds] == [[0], [1], [2], [3]]

    def test_k_too_small(self):
        with pytest.raises(ValidationError, match="k must be >= 2"):
            kfold_indices(10, 1)

    def test_k_larger_than_n(self):
        with pytest.raises(ValidationError, match="k must be <="):
            kfold_indices(3, 4)


class TestCrossValidateArrays:

    def test_matches_manual_loop(self, simple_regression_data):
        X, y, _ = simple_regression_data
        cv = cross_validate_arrays(X, y, k=5, seed=3)
        folds = kfold_indices(len(y), 5, seed=3)

        for score, test_idx in zip(cv.folds, folds):
            train_idx = np.setdiff1d(np.arange(len(y)), test_idx)
            solution = fit(X[train_idx], y[train_idx])
            err = y[test_idx] - solution.predict(X[test_idx])
            rmse = np.sqrt(np.mean(err ** 2))
            r2 = 1 - np.sum(err ** 2) / np.sum((y[test_idx] - y[test_idx].mean()) ** 2)
            assert score.n_test == len(test_idx)
            assert score.n_train == len(train_idx)
            assert score.rmse == pytest.approx(rmse, rel=1e-10)
            assert score.r_squared == pytest.approx(r2, rel=1e-10)
            assert score.train_r_squared == pytest.approx(solution.r_squared, rel=1e-12)

    def test_means_are_simple_averages(self, simple_regression_data):
        X, y, _ = simple_regression_data
        cv = cross_validate_arrays(X, y, k=4, seed=0)
        assert isinstance(cv, CrossValidationSolution)
        assert cv.k == 4
        assert cv.n_obs == 100
        assert cv.mean_rmse == pytest.approx(np.mean([f.rmse for f in cv.folds]))
        assert cv.mean_r_squared == pytest.approx(np.mean([f.r_squared for f in cv.folds]))

    def test_good_model_scores_well(self, simple_regression_data):
        X, y, _ = simple_regression_data
        cv = cross_validate_arrays(X, y, k=5, seed=0)
        assert cv.mean_r_squared > 0.95
        assert cv.mean_rmse < 0.2

    def test_deterministic_with_seed(self, simple_regression_data):
        X, y, _ = simple_regression_data
        a = cross_validate_arrays(X, y, seed=1)
        b = cross_validate_arrays(X, y, seed=1)
        assert a.mean_rmse == b.mean_rmse

    def test_info_and_timing(self, simple_regression_data):
        X, y, _ = simple_regression_data
        cv = cross_validate_arrays(X, y, k=3, shuffle=False, backend='cpu_svd')
        assert cv.info == {'k': 3, 'shuffle': False, 'seed': None}
        assert cv.backend_name == 'cpu_svd'
        assert 'fit_predict' in cv.timing

    def test_singular_fold_propagates(self, collinear_data):
        X, y = collinear_data
        with pytest.raises(SingularMatrixError):
            cross_validate_arrays(X, y, k=5, seed=0)

    def test_no_warnings_on_well_conditioned_data(self, simple_regression_data):
        X, y, _ = simple_regression_data
        assert cross_validate_arrays(X, y, k=3, seed=0).warnings == ()

    def test_fold_warnings_collected(self, rng):
        n, p = 50, 4
        U, _ = np.linalg.qr(rng.standard_normal((n, p)))
        V, _ = np.linalg.qr(rng.standard_normal((p, p)))
        X = U @ np.diag([1e10, 1e6, 1e3, 1.0]) @ V.T
        y = X @ np.array([1.0, -1.0, 2.0, 0.5])

        with pytest.warns(UserWarning, match="ill-conditioned"):
            cv = cross_validate_arrays(X, y, k=5, shuffle=False)

        assert len(cv.warnings) == 5
        assert all('ill-conditioned' in w for w in cv.warnings)
        assert [w.split(':')[0] for w in cv.warnings] == [f"fold {i}" for i in range(5)]

    def test_summary_and_repr(self, simple_regression_data):
        X, y, _ = simple_regression_data
        cv = cross_validate_arrays(X, y, k=3, seed=0)
        assert "3-fold Cross-Validation" in cv.summary()
        assert repr(cv).startswith("CrossValidationSolution(k=3, n=100")


class TestCrossValidateTable:

    def test_table_matches_arrays(self):
        table = simulate_linear(60, [1.0, 2.0, -1.0], seed=4)
        terms = [Intercept(), Numeric('x1'), Numeric('x2')]
        cv_table = cross_validate(table, terms, 'y', k=5, seed=8)

        X = np.column_stack([np.ones(60), table['x1'], table['x2']])
        cv_arrays = cross_validate_arrays(X, table['y'], k=5, seed=8)
        assert cv_table.mean_rmse == pytest.approx(cv_arrays.mean_rmse, rel=1e-10)
        assert cv_table.mean_r_squared == pytest.approx(cv_arrays.mean_r_squared, rel=1e-10)

    def test_categorical_predictor(self, rng):
        n = 90
        group = np.array(['a', 'b', 'c'] * (n // 3), dtype=object)
        x = rng.standard_normal(n)
        y = x + (group == 'b') * 2.0 + rng.standard_normal(n) * 0.1
        table = {'x': x, 'group': group, 'y': y}
        cv = cross_validate(table, [Intercept(), Numeric('x'), Categorical('group')], 'y',
                            k=3, seed=0)
        assert cv.mean_r_squared > 0.95

    def test_unseen_level_in_held_out_fold(self):
        table = {
            'x': np.arange(10.0),
            'group': np.array(['c', 'a', 'b', 'a', 'b', 'a', 'b', 'a', 'b', 'a'], dtype=object),
            'y': np.arange(10.0) * 2.0,
        }
        with pytest.raises(ValidationError, match="was not seen"):
            cross_validate(table, [Intercept(), Numeric('x'), Categorical('group')], 'y',
                           k=2, shuffle=False)

    def test_overfit_gap(self):
        predictors = [Numeric(f"x{j}") for j in range(1, 6)]
        full = [Intercept()] + predictors + [
            Interaction(*combo)
            for size in range(2, 6)
            for combo in combinations(predictors, size)
        ]
        table = simulate_linear(120, [0.0, 1.0, 0.0, 0.0, 0.0, 0.0], seed=2024)

        cv_full = cross_validate(table, full, 'y', k=3, seed=0)
        cv_additive = cross_validate(table, [Intercept()] + predictors, 'y', k=3, seed=0)

        assert cv_full.mean_train_r_squared - cv_full.mean_r_squared > 0.2
        assert cv_additive.mean_r_squared > cv_full.mean_r_squared
