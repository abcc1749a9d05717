"""
Nested model comparison.

The extra-sum-of-squares F test: does the larger model explain enough
additional variance to justify its extra columns? This is how adding an
interaction term is judged, equivalent to R's anova(reduced, full).

    F = ((RSS_r - RSS_f) / (df_r - df_f)) / (RSS_f / df_f)

No new solver math: both models are ordinary fit() results and only
their residual sums of squares and degrees of freedom are compared.
"""

from dataclasses import dataclass

import numpy as np
from scipy import stats as sp_stats

from pylinmod.core.exceptions import DimensionError, ValidationError
from pylinmod.regression.solution import LinearSolution


@dataclass(frozen=True)
class ModelComparison:
    """
    Result of comparing a reduced model against a full model.

    Attributes:
        rss_reduced, rss_full: Residual sums of squares
        df_reduced, df_full: Residual degrees of freedom
        df_diff: Number of extra columns in the full model
        ss_diff: Reduction in RSS from the extra columns
        f_value: F statistic
        p_value: Upper-tail probability of F(df_diff, df_full)
    """
    rss_reduced: float
    rss_full: float
    df_reduced: int
    df_full: int
    df_diff: int
    ss_diff: float
    f_value: float
    p_value: float

    def summary(self) -> str:
        lines = [
            "Analysis of Variance Table",
            "",
            f"{'Model':<6} {'Res.Df':>8} {'RSS':>14} {'Df':>4} {'Sum of Sq':>14} "
            f"{'F':>10} {'Pr(>F)':>12}",
            f"{'1':<6} {self.df_reduced:>8d} {self.rss_reduced:>14.6g}",
            f"{'2':<6} {self.df_full:>8d} {self.rss_full:>14.6g} {self.df_diff:>4d} "
            f"{self.ss_diff:>14.6g} {self.f_value:>10.4g} {self.p_value:>12.4g}",
        ]
        return "\n".join(lines)


def _compute_f_and_p(
    ss: float,
    df: int,
    rss_error: float,
    df_error: int,
) -> tuple[float, float]:
    """F statistic and p-value for `ss` on `df` against the error term."""
    if rss_error == 0:
        if ss > 0:
            return float('inf'), 0.0
        return float('nan'), float('nan')

    f_val = (ss / df) / (rss_error / df_error)
    p_val = float(sp_stats.f.sf(f_val, df, df_error))
    return f_val, p_val


def compare(reduced: LinearSolution, full: LinearSolution) -> ModelComparison:
    """
    Compare nested linear models with an F test.

    The caller is responsible for the models actually being nested (the
    reduced model's columns span a subspace of the full model's).

    Args:
        reduced: Fit of the smaller model
        full: Fit of the larger model, on the same observations

    Returns:
        ModelComparison

    Raises:
        DimensionError: If the models were fitted on different numbers of rows
        ValidationError: If the models were fitted to different outcomes, or
            `full` does not have fewer residual df than `reduced`

    Example:
        >>> additive = fit(RegressionDesign.from_datasource(ds, [Intercept(), x, g], y='y'))
        >>> with_int = fit(RegressionDesign.from_datasource(
        ...     ds, [Intercept(), x, g, Interaction(x, g)], y='y'))
        >>> compare(additive, with_int).p_value
    """
    n_reduced = len(reduced.residuals)
    n_full = len(full.residuals)
    if n_reduced != n_full:
        raise DimensionError(
            f"Models fitted on different observations: reduced n={n_reduced}, full n={n_full}"
        )
    if not np.array_equal(reduced.design.y, full.design.y):
        raise ValidationError(
            "Models were fitted to different outcomes; compare() needs both fits "
            "on the same y"
        )

    df_diff = reduced.df_residual - full.df_residual
    if df_diff <= 0:
        raise ValidationError(
            f"full model must have fewer residual df than reduced model: "
            f"reduced df={reduced.df_residual}, full df={full.df_residual}"
        )

    ss_diff = reduced.rss - full.rss
    f_val, p_val = _compute_f_and_p(ss_diff, df_diff, full.rss, full.df_residual)

    return ModelComparison(
        rss_reduced=reduced.rss,
        rss_full=full.rss,
        df_reduced=reduced.df_residual,
        df_full=full.df_residual,
        df_diff=df_diff,
        ss_diff=ss_diff,
        f_value=float(f_val),
        p_value=p_val,
    )
