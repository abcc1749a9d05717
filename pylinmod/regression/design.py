"""
Regression Design.

RegressionDesign is the validated (X, y) pair a backend solves. It is
the boundary of the regression package: arrays are checked once here
and trusted everywhere downstream.

A design built from a table also keeps its ModelMatrix, so a fitted
model can encode new tables identically when predicting.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any
import numpy as np
from numpy.typing import ArrayLike, NDArray

from pylinmod.core.datasource import DataSource, as_datasource
from pylinmod.core.exceptions import ValidationError
from pylinmod.core.validation import (
    check_array,
    check_finite,
    check_2d,
    check_1d,
    check_consistent_length,
    check_min_samples,
)
from pylinmod.regression.terms import ModelMatrix, Term, design_matrix


@dataclass(frozen=True)
class RegressionDesign:
    """
    Regression design matrix and outcome. Immutable after construction.

    Construction:
        RegressionDesign.build(X, y)                          # validated arrays
        RegressionDesign.from_arrays(X, y, column_names=...)  # same, named columns
        RegressionDesign.from_datasource(ds, terms, y='bmi')  # encode terms
    """
    _X: NDArray[np.floating[Any]]
    _y: NDArray[np.floating[Any]]
    _n: int
    _p: int
    _column_names: tuple[str, ...]
    _model_matrix: ModelMatrix | None = None

    @classmethod
    def build(
        cls,
        X: ArrayLike,
        y: ArrayLike,
        *,
        column_names: list[str] | tuple[str, ...] | None = None,
        model_matrix: ModelMatrix | None = None,
    ) -> RegressionDesign:
        """
        Validate arrays and build a design.

        A 1D X is treated as a single column; an (n, 1) y is squeezed.

        Raises:
            ValidationError: Non-numeric or non-finite input, or no columns
            DimensionError: Wrong array rank, or X and y row counts differ
        """
        X_arr = check_array(X, 'X')
        y_arr = check_array(y, 'y')

        if X_arr.ndim == 1:
            X_arr = X_arr.reshape(-1, 1)
        if y_arr.ndim == 2 and y_arr.shape[1] == 1:
            y_arr = y_arr.ravel()

        check_2d(X_arr, 'X')
        check_1d(y_arr, 'y')
        check_consistent_length(X_arr, y_arr, names=('X', 'y'))
        check_finite(X_arr, 'X')
        check_finite(y_arr, 'y')
        check_min_samples(X_arr, 1, 'X')

        n, p = X_arr.shape
        if p == 0:
            raise ValidationError("X: design matrix has no columns")

        if column_names is None:
            names = tuple(f"x{j}" for j in range(p))
        else:
            names = tuple(str(c) for c in column_names)
            if len(names) != p:
                raise ValidationError(
                    f"column_names: expected {p} names to match X, got {len(names)}"
                )

        # check_array copied; freeze so the design can't drift from its fit
        X_arr.setflags(write=False)
        y_arr.setflags(write=False)

        return cls(
            _X=X_arr,
            _y=y_arr,
            _n=n,
            _p=p,
            _column_names=names,
            _model_matrix=model_matrix,
        )

    @classmethod
    def from_arrays(
        cls,
        X: ArrayLike,
        y: ArrayLike,
        *,
        column_names: list[str] | tuple[str, ...] | None = None,
    ) -> RegressionDesign:
        """Build a design directly from a design matrix and outcome."""
        return cls.build(X, y, column_names=column_names)

    @classmethod
    def from_datasource(
        cls,
        source: DataSource | Mapping,
        terms: list[Term] | tuple,
        *,
        y: str,
    ) -> RegressionDesign:
        """
        Encode model terms from a table.

        Args:
            source: Observation table
            terms: Ordered term descriptors (see pylinmod.regression.terms)
            y: Outcome column name

        Returns:
            RegressionDesign carrying the ModelMatrix for later prediction
        """
        table = as_datasource(source)
        mm = design_matrix(table, terms)
        if y not in table:
            raise ValidationError(
                f"table has no outcome column '{y}'. Available: {sorted(table.keys())}"
            )
        return cls.build(mm.X, table[y], column_names=mm.column_names, model_matrix=mm)

    # === Properties ===

    @property
    def X(self) -> NDArray[np.floating[Any]]:
        """Design matrix (n x p)."""
        return self._X

    @property
    def y(self) -> NDArray[np.floating[Any]]:
        """Outcome vector (n,)."""
        return self._y

    @property
    def n(self) -> int:
        """Number of observations."""
        return self._n

    @property
    def p(self) -> int:
        """Number of design columns."""
        return self._p

    @property
    def column_names(self) -> tuple[str, ...]:
        return self._column_names

    @property
    def model_matrix(self) -> ModelMatrix | None:
        """Term encoding, if the design was built from a table."""
        return self._model_matrix

    def XtX(self) -> NDArray[np.floating[Any]]:
        """Compute X'X."""
        return self._X.T @ self._X

    def Xty(self) -> NDArray[np.floating[Any]]:
        """Compute X'y."""
        return self._X.T @ self._y
