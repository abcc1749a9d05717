"""
Ordinary least squares for the general linear model.

Public API:
    design_matrix(table, terms) -> ModelMatrix
    fit(X, y, ...) -> LinearSolution
    predict(solution, X_new) -> ndarray
    compare(reduced, full) -> ModelComparison

fit() is the single entry point for estimation. It handles input
validation, backend selection and result wrapping.

Example:
    >>> from pylinmod.regression import (
    ...     RegressionDesign, Intercept, Numeric, Categorical, Interaction, fit,
    ... )
    >>> terms = [Intercept(), Numeric('age'), Categorical('sex'),
    ...          Interaction(Numeric('age'), Categorical('sex'))]
    >>> result = fit(RegressionDesign.from_datasource(ds, terms, y='bmi'))
    >>> print(result.summary())
"""

from pylinmod.regression.terms import (
    Intercept,
    Numeric,
    Categorical,
    Interaction,
    ModelMatrix,
    design_matrix,
)
from pylinmod.regression.design import RegressionDesign
from pylinmod.regression.solution import LinearSolution, LinearParams, CoefficientRow
from pylinmod.regression.solvers import fit, predict
from pylinmod.regression.compare import compare, ModelComparison
from pylinmod.regression.simulate import simulate_linear, simulate_groups

__all__ = [
    # Terms
    "Intercept",
    "Numeric",
    "Categorical",
    "Interaction",
    "ModelMatrix",
    "design_matrix",
    # Estimation
    "fit",
    "predict",
    "RegressionDesign",
    "LinearSolution",
    "LinearParams",
    "CoefficientRow",
    # Model comparison
    "compare",
    "ModelComparison",
    # Simulation
    "simulate_linear",
    "simulate_groups",
]
