"""
Solver dispatch for regression.

This module provides the fit() and predict() functions (public API) and
backend selection.
"""

import warnings
from collections.abc import Mapping
from typing import Literal
from numpy.typing import ArrayLike, NDArray

from pylinmod.core.datasource import DataSource
from pylinmod.core.protocols import Backend
from pylinmod.regression.design import RegressionDesign
from pylinmod.regression.solution import LinearParams, LinearSolution
from pylinmod.regression.backends.cpu import CPUQRBackend, CPUSVDBackend


BackendChoice = Literal['auto', 'cpu', 'cpu_qr', 'cpu_svd']


def fit(
    X: ArrayLike | RegressionDesign,
    y: ArrayLike | None = None,
    *,
    backend: BackendChoice = 'auto',
) -> LinearSolution:
    """
    Fit a linear model by ordinary least squares.

    Solves:
        min_β ||y - Xβ||²

    Args:
        X: Design matrix (n x p), or a RegressionDesign (then y must be None).
            Include a column of ones for an intercept.
        y: Outcome vector (n,). Required when X is an array.
        backend: Computational backend:
            - 'auto' / 'cpu' / 'cpu_qr': QR, with SVD fallback when
              cond(X) > 1e8
            - 'cpu_svd': SVD pseudo-inverse

    Returns:
        LinearSolution with coefficients, inference statistics and summary

    Raises:
        ValidationError: Non-numeric or non-finite input
        DimensionError: X and y have different numbers of rows
        SingularMatrixError: X is not of full column rank (includes p > n)
        DegreesOfFreedomError: n - p <= 0
        ValueError: Unknown backend, or y missing / given twice

    Example:
        >>> import numpy as np
        >>> from pylinmod.regression import fit
        >>> x = np.array([1.0, 2.0, 3.0, 4.0, 5.0])
        >>> X = np.column_stack([np.ones(5), x])
        >>> result = fit(X, 2 * x)
        >>> result.coefficients  # approximately [0, 2]
    """
    if isinstance(X, RegressionDesign):
        if y is not None:
            raise ValueError("y must not be given when X is a RegressionDesign")
        design = X
    else:
        if y is None:
            raise ValueError("y required when X is an array")
        design = RegressionDesign.build(X, y)

    backend_impl = _get_backend(backend)
    result = backend_impl.solve(design)

    for message in result.warnings:
        warnings.warn(message, UserWarning, stacklevel=2)

    return LinearSolution(_result=result, _design=design)


def predict(
    solution: LinearSolution,
    X_new: ArrayLike | DataSource | Mapping,
) -> NDArray:
    """
    Predict the outcome for new observations: X_new @ β̂.

    X_new must have the same column structure as the fitted design. A
    table may be passed instead when the model was fitted from a table
    and model terms; it is encoded with the fitted model's terms.

    Raises:
        ColumnMismatchError: If X_new does not have p columns
    """
    return solution.predict(X_new)


def _get_backend(choice: BackendChoice) -> Backend[RegressionDesign, LinearParams]:
    """
    Instantiate the requested backend.

    Raises:
        ValueError: If unknown backend specified
    """
    if choice in ('auto', 'cpu', 'cpu_qr'):
        return CPUQRBackend()
    elif choice == 'cpu_svd':
        return CPUSVDBackend()
    else:
        raise ValueError(f"Unknown backend: {choice!r}")
