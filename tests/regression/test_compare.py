"""
Tests for nested model comparison and the interaction scenarios.

Validates the extra-sum-of-squares F test against its closed form, and
that it behaves as expected on simulated data with and without a true
group-by-slope interaction.
"""

import numpy as np
import pytest
from scipy import stats

from pylinmod.core.exceptions import DimensionError, ValidationError
from pylinmod.regression import (
    Categorical,
    Intercept,
    Interaction,
    Numeric,
    RegressionDesign,
    compare,
    fit,
    simulate_groups,
)

ADDITIVE = [Intercept(), Numeric('x'), Categorical('group')]
WITH_INTERACTION = ADDITIVE + [Interaction(Numeric('x'), Categorical('group'))]


def _fit_pair(table):
    reduced = fit(RegressionDesign.from_datasource(table, ADDITIVE, y='y'))
    full = fit(RegressionDesign.from_datasource(table, WITH_INTERACTION, y='y'))
    return reduced, full


class TestCompare:

    def test_closed_form(self):
        table = simulate_groups(60, [1.0, 1.5], seed=3)
        reduced, full = _fit_pair(table)
        cmp = compare(reduced, full)

        assert cmp.df_diff == 1
        assert cmp.df_full == 60 - 4
        assert cmp.ss_diff == pytest.approx(reduced.rss - full.rss)
        f = (cmp.ss_diff / 1) / (full.rss / full.df_residual)
        assert cmp.f_value == pytest.approx(f)
        assert cmp.p_value == pytest.approx(stats.f.sf(f, 1, full.df_residual))

    def test_single_extra_column_f_is_t_squared(self):
        table = simulate_groups(80, [0.5, 2.0], seed=11)
        reduced, full = _fit_pair(table)
        cmp = compare(reduced, full)
        assert cmp.f_value == pytest.approx(full.t_statistics[-1] ** 2, rel=1e-8)
        assert cmp.p_value == pytest.approx(full.p_values[-1], rel=1e-6)

    def test_summary(self):
        reduced, full = _fit_pair(simulate_groups(40, [1.0, 1.0], seed=0))
        text = compare(reduced, full).summary()
        assert "Analysis of Variance Table" in text
        assert "Pr(>F)" in text

    def test_not_nested_df(self):
        reduced, full = _fit_pair(simulate_groups(40, [1.0, 1.0], seed=0))
        with pytest.raises(ValidationError, match="fewer residual df"):
            compare(full, reduced)

    def test_different_observations(self):
        reduced, _ = _fit_pair(simulate_groups(40, [1.0, 1.0], seed=0))
        _, full = _fit_pair(simulate_groups(50, [1.0, 1.0], seed=0))
        with pytest.raises(DimensionError, match="different observations"):
            compare(reduced, full)

    def test_different_outcomes(self):
        reduced, _ = _fit_pair(simulate_groups(40, [1.0, 1.0], seed=0))
        _, full = _fit_pair(simulate_groups(40, [1.0, 1.0], seed=1))
        with pytest.raises(ValidationError, match="different outcomes"):
            compare(reduced, full)

    def test_same_design_different_y(self, rng):
        x = rng.standard_normal(30)
        X = np.column_stack([np.ones(30), x, x ** 2])
        reduced = fit(X[:, :2], 1.0 + x + rng.standard_normal(30))
        full = fit(X, 1.0 + x + rng.standard_normal(30))
        with pytest.raises(ValidationError, match="different outcomes"):
            compare(reduced, full)

    def test_exact_full_fit(self):
        x = np.arange(6.0)
        group = np.array(['a', 'b'] * 3, dtype=object)
        y = np.where(group == 'a', x, 3.0 * x)
        table = {'x': x, 'group': group, 'y': y}
        reduced, full = _fit_pair(table)
        cmp = compare(reduced, full)
        # rss_full is zero up to rounding
        assert cmp.f_value > 1e10
        assert cmp.p_value < 1e-10


class TestInteractionScenarios:

    def test_equal_slopes_no_detectable_interaction(self):
        table = simulate_groups(200, [1.5, 1.5], intercepts=[0.0, 2.0], noise_sd=1.0, seed=42)
        reduced, full = _fit_pair(table)
        cmp = compare(reduced, full)
        assert cmp.p_value > 0.001
        assert full.r_squared >= reduced.r_squared

    def test_different_slopes_interaction_significant(self):
        table = simulate_groups(200, [0.5, 2.0], intercepts=[0.0, 2.0], noise_sd=1.0, seed=42)
        reduced, full = _fit_pair(table)
        assert full.column_names[-1] == 'x:group[g1]'
        assert full.p_values[-1] < 1e-6
        assert full.coefficients[-1] == pytest.approx(1.5, abs=0.4)
        assert compare(reduced, full).p_value < 1e-6
