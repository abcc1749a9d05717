"""
Regression solution types.

LinearParams is the immutable payload a backend computes. LinearSolution
is the user-facing wrapper: it derives the inference statistics
(standard errors, t, p, R², F) from the payload and never changes after
construction.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, TYPE_CHECKING
import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy import stats

from pylinmod.core.datasource import DataSource
from pylinmod.core.exceptions import ValidationError
from pylinmod.core.result import Result
from pylinmod.core.validation import check_array, check_finite, check_2d, check_column_count

if TYPE_CHECKING:
    from pylinmod.regression.design import RegressionDesign


@dataclass(frozen=True)
class LinearParams:
    """
    Parameter payload for linear regression.

    Attributes:
        coefficients: β̂ (p,)
        residuals: y - Xβ̂ (n,)
        fitted_values: Xβ̂ (n,)
        rss: SS_error, sum of squared residuals
        tss: SS_total, squared deviations of y from its mean
            (exactly 0.0 for a constant outcome)
        rank: Numerical rank of X (always p for a returned fit)
        df_residual: n - p
        unscaled_cov: (X'X)⁻¹ (p, p)
        condition_number: s_max / s_min of X
    """
    coefficients: NDArray[np.floating[Any]]
    residuals: NDArray[np.floating[Any]]
    fitted_values: NDArray[np.floating[Any]]
    rss: float
    tss: float
    rank: int
    df_residual: int
    unscaled_cov: NDArray[np.floating[Any]]
    condition_number: float


@dataclass(frozen=True)
class CoefficientRow:
    """One row of the coefficient table."""
    name: str
    estimate: float
    std_error: float
    t_value: float
    p_value: float


def _significance_stars(p: float) -> str:
    if np.isnan(p):
        return ''
    if p < 0.001:
        return '***'
    if p < 0.01:
        return '**'
    if p < 0.05:
        return '*'
    if p < 0.1:
        return '.'
    return ''


@dataclass(frozen=True)
class LinearSolution:
    """
    User-facing regression results.

    Wraps the backend Result and the design it was computed from.
    Every statistic is a pure function of those two, so repeated
    access always returns the same values.
    """
    _result: Result[LinearParams]
    _design: 'RegressionDesign'

    # === Estimates ===

    @property
    def coefficients(self) -> NDArray[np.floating[Any]]:
        return self._result.params.coefficients

    @property
    def residuals(self) -> NDArray[np.floating[Any]]:
        return self._result.params.residuals

    @property
    def fitted_values(self) -> NDArray[np.floating[Any]]:
        return self._result.params.fitted_values

    @property
    def column_names(self) -> tuple[str, ...]:
        return self._design.column_names

    @property
    def design(self) -> 'RegressionDesign':
        return self._design

    # === Sums of squares ===

    @property
    def rss(self) -> float:
        """SS_error."""
        return self._result.params.rss

    @property
    def tss(self) -> float:
        """SS_total."""
        return self._result.params.tss

    @property
    def ess(self) -> float:
        """SS_model = SS_total - SS_error."""
        return self.tss - self.rss

    @property
    def df_residual(self) -> int:
        return self._result.params.df_residual

    @property
    def has_intercept(self) -> bool:
        mm = self._design.model_matrix
        if mm is not None:
            return mm.has_intercept
        return bool(np.any(np.all(self._design.X == 1.0, axis=0)))

    @property
    def df_model(self) -> int:
        """Model degrees of freedom, not counting the intercept."""
        return self.rank - int(self.has_intercept)

    @property
    def mse(self) -> float:
        """MS_error = SS_error / df_residual."""
        return self.rss / self.df_residual

    @property
    def residual_std_error(self) -> float:
        """SE_model = sqrt(MS_error)."""
        return float(np.sqrt(self.mse))

    # === Fit quality ===

    @property
    def r_squared(self) -> float:
        """SS_model / SS_total, defined as 0 for a constant outcome."""
        if self.tss == 0:
            return 0.0
        return self.ess / self.tss

    @property
    def adjusted_r_squared(self) -> float:
        n = self._design.n
        if self.tss == 0:
            return self.r_squared
        dof_total = n - int(self.has_intercept)
        return 1.0 - (1.0 - self.r_squared) * dof_total / self.df_residual

    @property
    def f_statistic(self) -> float:
        """Overall F test of all non-intercept terms; NaN if there are none."""
        if self.df_model <= 0:
            return float('nan')
        with np.errstate(divide='ignore', invalid='ignore'):
            return float(np.float64(self.ess / self.df_model) / np.float64(self.mse))

    @property
    def f_p_value(self) -> float:
        f = self.f_statistic
        if np.isnan(f):
            return float('nan')
        return float(stats.f.sf(f, self.df_model, self.df_residual))

    # === Inference ===

    @property
    def standard_errors(self) -> NDArray[np.floating[Any]]:
        """
        Standard errors of coefficients.

            SE(β_j) = SE_model * sqrt(diag((X'X)⁻¹)_j)

        The general form holds for every column: intercept, numeric,
        dummy and interaction columns alike.
        """
        diag = np.diag(self._result.params.unscaled_cov)
        return self.residual_std_error * np.sqrt(diag)

    @property
    def t_statistics(self) -> NDArray[np.floating[Any]]:
        """β_j / SE(β_j). An exact fit gives ±inf (or NaN for a zero coefficient)."""
        with np.errstate(divide='ignore', invalid='ignore'):
            return self.coefficients / self.standard_errors

    @property
    def p_values(self) -> NDArray[np.floating[Any]]:
        """Two-sided p-values from Student's t with df_residual degrees of freedom."""
        return 2.0 * stats.t.sf(np.abs(self.t_statistics), self.df_residual)

    def conf_int(self, level: float = 0.95) -> NDArray[np.floating[Any]]:
        """
        Confidence intervals for the coefficients.

        Args:
            level: Coverage probability, strictly between 0 and 1

        Returns:
            (p, 2) array of [lower, upper]
        """
        if not 0.0 < level < 1.0:
            raise ValueError(f"level must be in (0, 1), got {level}")
        t_crit = stats.t.ppf(0.5 + level / 2.0, self.df_residual)
        half = t_crit * self.standard_errors
        return np.column_stack([self.coefficients - half, self.coefficients + half])

    def coef_table(self) -> tuple[CoefficientRow, ...]:
        return tuple(
            CoefficientRow(
                name=name,
                estimate=float(b),
                std_error=float(se),
                t_value=float(t),
                p_value=float(p),
            )
            for name, b, se, t, p in zip(
                self.column_names,
                self.coefficients,
                self.standard_errors,
                self.t_statistics,
                self.p_values,
            )
        )

    # === Prediction ===

    def predict(self, X_new: ArrayLike | DataSource | Mapping) -> NDArray[np.floating[Any]]:
        """
        Predict the outcome for new observations.

        Args:
            X_new: Either a design matrix with the same p columns (a 1D
                array of length p is one row), or a table when the model
                was fitted from a table with model terms.

        Returns:
            X_new @ β̂

        Raises:
            ColumnMismatchError: If X_new does not have p columns
            ValidationError: If a table is given for an array-fitted model,
                or X_new is non-numeric / non-finite
        """
        if isinstance(X_new, (DataSource, Mapping)) or hasattr(X_new, 'columns'):
            mm = self._design.model_matrix
            if mm is None:
                raise ValidationError(
                    "X_new: a table can only be used with a model fitted from a "
                    "table and model terms; pass a design matrix instead"
                )
            X_arr = mm.transform(X_new).X
        else:
            X_arr = check_array(X_new, 'X_new')
            if X_arr.ndim == 1:
                X_arr = X_arr.reshape(1, -1)
            check_2d(X_arr, 'X_new')
            check_finite(X_arr, 'X_new')

        check_column_count(X_arr, self._design.p, 'X_new')
        return X_arr @ self.coefficients

    # === Metadata ===

    @property
    def rank(self) -> int:
        return self._result.params.rank

    @property
    def condition_number(self) -> float:
        return self._result.params.condition_number

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    @property
    def provenance(self) -> dict[str, str]:
        return self._result.provenance

    def summary(self) -> str:
        """Generate R-style summary output."""
        lines = [
            "Linear Regression Results",
            "=" * 78,
            f"Observations: {self._design.n}",
            f"Columns: {self._design.p}",
            "",
            "Coefficients:",
            "-" * 78,
            f"{'':<24} {'Estimate':>12} {'Std.Error':>12} {'t value':>10} {'Pr(>|t|)':>12}",
            "-" * 78,
        ]

        for row in self.coef_table():
            p_str = "<2e-16" if row.p_value < 2e-16 else f"{row.p_value:.4g}"
            lines.append(
                f"{row.name:<24.24} {row.estimate:12.6f} {row.std_error:12.6f} "
                f"{row.t_value:10.3f} {p_str:>12} {_significance_stars(row.p_value)}"
            )

        lines.append("-" * 78)
        lines.append("Signif. codes:  0 '***' 0.001 '**' 0.01 '*' 0.05 '.' 0.1 ' ' 1")
        lines.append("")
        lines.append(
            f"Residual standard error: {self.residual_std_error:.6f} "
            f"on {self.df_residual} degrees of freedom"
        )
        lines.append(
            f"R-squared: {self.r_squared:.6f},  Adj. R-squared: {self.adjusted_r_squared:.6f}"
        )
        if not np.isnan(self.f_statistic):
            lines.append(
                f"F-statistic: {self.f_statistic:.4g} on {self.df_model} and "
                f"{self.df_residual} DF,  p-value: {self.f_p_value:.4g}"
            )
        lines.append(f"Backend: {self.backend_name} ({self.info.get('method', '?')})")
        for w in self.warnings:
            lines.append(f"Warning: {w}")
        if self.timing:
            lines.append(f"Time: {self.timing.get('total_seconds', 0):.4f}s")

        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"LinearSolution(n={self._design.n}, p={self._design.p}, "
            f"r_squared={self.r_squared:.4f})"
        )
