"""
Seeded data generators for regression examples and tests.

Both generators return a DataSource so their output feeds straight into
design_matrix() / RegressionDesign.from_datasource(). All randomness
comes from numpy.random.default_rng(seed): the same seed gives the same
table.
"""

from collections.abc import Sequence

import numpy as np

from pylinmod.core.datasource import DataSource
from pylinmod.core.exceptions import ValidationError


def simulate_linear(
    n: int,
    coefficients: Sequence[float],
    *,
    noise_sd: float = 1.0,
    seed: int | None = None,
) -> DataSource:
    """
    Outcome linear in independent standard normal predictors.

        y = b0 + b1*x1 + ... + bk*xk + N(0, noise_sd²)

    Args:
        n: Number of rows
        coefficients: [b0, b1, ..., bk]; k predictors x1..xk are generated
        noise_sd: Standard deviation of the additive noise
        seed: Seed for numpy.random.default_rng

    Returns:
        DataSource with columns x1..xk and y
    """
    beta = np.asarray(coefficients, dtype=np.float64)
    if n < 1:
        raise ValidationError(f"n must be >= 1, got {n}")
    if beta.ndim != 1 or beta.size < 1:
        raise ValidationError("coefficients must contain at least the intercept")
    if noise_sd < 0:
        raise ValidationError(f"noise_sd must be >= 0, got {noise_sd}")

    rng = np.random.default_rng(seed)
    k = beta.size - 1
    X = rng.standard_normal((n, k))
    y = beta[0] + X @ beta[1:] + rng.standard_normal(n) * noise_sd

    columns = {f"x{j + 1}": X[:, j] for j in range(k)}
    columns['y'] = y
    return DataSource.from_arrays(**columns)


def simulate_groups(
    n: int,
    slopes: Sequence[float],
    *,
    intercepts: Sequence[float] | None = None,
    noise_sd: float = 1.0,
    seed: int | None = None,
) -> DataSource:
    """
    One numeric predictor whose slope may differ between groups.

        y = intercept_g + slope_g * x + N(0, noise_sd²)

    Groups are labelled 'g0', 'g1', ... and assigned round-robin, so
    'g0' is the first level seen and therefore the default reference.
    Equal slopes give data with no true interaction; unequal slopes give
    a true group-by-x interaction.

    Returns:
        DataSource with columns x, group and y
    """
    slope_arr = np.asarray(slopes, dtype=np.float64)
    k = slope_arr.size
    if k < 1:
        raise ValidationError("slopes must name at least one group")
    if intercepts is None:
        intercept_arr = np.zeros(k, dtype=np.float64)
    else:
        intercept_arr = np.asarray(intercepts, dtype=np.float64)
        if intercept_arr.size != k:
            raise ValidationError(
                f"intercepts: expected {k} values to match slopes, got {intercept_arr.size}"
            )
    if n < k:
        raise ValidationError(f"n must be >= number of groups ({k}), got {n}")
    if noise_sd < 0:
        raise ValidationError(f"noise_sd must be >= 0, got {noise_sd}")

    rng = np.random.default_rng(seed)
    codes = np.arange(n) % k
    x = rng.standard_normal(n)
    y = intercept_arr[codes] + slope_arr[codes] * x + rng.standard_normal(n) * noise_sd
    group = np.array([f"g{c}" for c in codes], dtype=object)

    return DataSource.from_arrays(x=x, group=group, y=y)
