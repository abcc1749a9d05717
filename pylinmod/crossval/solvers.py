"""
K-fold cross-validation.

The harness treats the estimator as a black box: for each fold it fits
on the other k-1 folds with regression.fit() and scores
regression.predict() on the held-out fold. Per-fold R² and RMSE are
aggregated by simple averaging.

Categorical encodings are resolved on each training split and re-applied
unchanged to the held-out fold, exactly as a model would be applied to
new data. A held-out level that never occurs in the training split is
therefore an error rather than a silent reference-level prediction.
"""

from collections.abc import Mapping
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray
from sklearn.model_selection import KFold

from pylinmod.core.compute.timing import Timer
from pylinmod.core.datasource import DataSource, as_datasource
from pylinmod.core.exceptions import ValidationError
from pylinmod.core.result import Result
from pylinmod.core.validation import check_array
from pylinmod.regression.design import RegressionDesign
from pylinmod.regression.solution import LinearSolution
from pylinmod.regression.solvers import BackendChoice, fit
from pylinmod.regression.terms import Term
from pylinmod.crossval._common import CrossValidationParams, FoldScore
from pylinmod.crossval.solution import CrossValidationSolution


def kfold_indices(
    n: int,
    k: int,
    *,
    shuffle: bool = True,
    seed: int | None = None,
) -> list[NDArray[np.intp]]:
    """
    Partition range(n) into k disjoint held-out folds.

    Fold sizes differ by at most one (the first n % k folds get the extra
    row). Without shuffling, folds are contiguous blocks in row order.

    Args:
        n: Number of observations
        k: Number of folds, 2 <= k <= n
        shuffle: Permute rows before splitting
        seed: Seed for the permutation; ignored without shuffling

    Returns:
        List of k index arrays; each is sorted
    """
    if k < 2:
        raise ValidationError(f"k must be >= 2, got {k}")
    if k > n:
        raise ValidationError(f"k must be <= number of observations ({n}), got {k}")

    splitter = KFold(
        n_splits=k,
        shuffle=shuffle,
        random_state=(seed if shuffle else None),
    )
    return [np.sort(test_idx) for _, test_idx in splitter.split(np.empty((n, 1)))]


def _score(y_true: NDArray, y_pred: NDArray) -> tuple[float, float]:
    """Out-of-sample (R², RMSE). R² is 0 for a constant held-out outcome."""
    err = y_true - y_pred
    sse = float(err @ err)
    rmse = float(np.sqrt(sse / len(y_true)))
    if np.ptp(y_true) == 0:
        return 0.0, rmse
    sst = float(np.sum((y_true - np.mean(y_true)) ** 2))
    return 1.0 - sse / sst, rmse


def _run_folds(
    n: int,
    k: int,
    shuffle: bool,
    seed: int | None,
    fit_fold,
) -> Result[CrossValidationParams]:
    """
    Drive the fold loop.

    `fit_fold(train_idx, test_idx)` returns (solution, y_test, y_pred).
    Any exception from a fold propagates unchanged.
    """
    timer = Timer()
    timer.start()

    folds = kfold_indices(n, k, shuffle=shuffle, seed=seed)
    scores: list[FoldScore] = []
    fold_warnings: list[str] = []
    backend_name = ''

    for i, test_idx in enumerate(folds):
        train_idx = np.sort(np.concatenate([f for j, f in enumerate(folds) if j != i]))
        with timer.section('fit_predict'):
            solution, y_test, y_pred = fit_fold(train_idx, test_idx)
        r2, rmse = _score(y_test, y_pred)
        backend_name = solution.backend_name
        fold_warnings.extend(f"fold {i}: {w}" for w in solution.warnings)
        scores.append(FoldScore(
            fold=i,
            n_train=len(train_idx),
            n_test=len(test_idx),
            r_squared=r2,
            rmse=rmse,
            train_r_squared=solution.r_squared,
        ))

    timer.stop()

    params = CrossValidationParams(
        folds=tuple(scores),
        k=k,
        n_obs=n,
        mean_r_squared=float(np.mean([s.r_squared for s in scores])),
        mean_rmse=float(np.mean([s.rmse for s in scores])),
        mean_train_r_squared=float(np.mean([s.train_r_squared for s in scores])),
    )
    info: dict[str, Any] = {'k': k, 'shuffle': shuffle, 'seed': seed}

    return Result(
        params=params,
        info=info,
        timing=timer.result(),
        backend_name=backend_name,
        warnings=tuple(fold_warnings),
    )


def cross_validate(
    table: DataSource | Mapping,
    terms: list[Term] | tuple,
    y: str,
    *,
    k: int = 5,
    shuffle: bool = True,
    seed: int | None = None,
    backend: BackendChoice = 'auto',
) -> CrossValidationSolution:
    """
    K-fold cross-validation of a model specified by terms.

    Args:
        table: Observation table
        terms: Model terms, as for design_matrix()
        y: Outcome column
        k: Number of folds
        shuffle: Shuffle rows before splitting
        seed: Seed for the shuffle
        backend: Regression backend passed to fit()

    Returns:
        CrossValidationSolution with per-fold and mean scores

    Raises:
        ValidationError: Invalid k, or a held-out categorical level unseen
            in its training split
        SingularMatrixError / DegreesOfFreedomError: From any fold's fit
    """
    table = as_datasource(table)

    def fit_fold(train_idx: NDArray, test_idx: NDArray):
        train = table.take(train_idx)
        test = table.take(test_idx)
        solution = fit(RegressionDesign.from_datasource(train, terms, y=y), backend=backend)
        y_test = check_array(test[y], y)
        return solution, y_test, solution.predict(test)

    result = _run_folds(table.n_observations, k, shuffle, seed, fit_fold)
    return CrossValidationSolution(_result=result)


def cross_validate_arrays(
    X: ArrayLike,
    y: ArrayLike,
    *,
    k: int = 5,
    shuffle: bool = True,
    seed: int | None = None,
    backend: BackendChoice = 'auto',
) -> CrossValidationSolution:
    """
    K-fold cross-validation on a ready-made design matrix.

    Same behaviour as cross_validate(), with X's columns used as-is in
    every fold.
    """
    full = RegressionDesign.build(X, y)

    def fit_fold(train_idx: NDArray, test_idx: NDArray):
        solution: LinearSolution = fit(full.X[train_idx], full.y[train_idx], backend=backend)
        return solution, full.y[test_idx], solution.predict(full.X[test_idx])

    result = _run_folds(full.n, k, shuffle, seed, fit_fold)
    return CrossValidationSolution(_result=result)
