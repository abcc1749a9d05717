"""
K-fold cross-validation of linear models.

Usage:
    from pylinmod.crossval import cross_validate

    result = cross_validate(ds, terms, 'bmi', k=10, seed=42)
    result.mean_r_squared        # out-of-sample
    result.mean_train_r_squared  # in-sample, for the overfitting gap
"""

from pylinmod.crossval.solvers import cross_validate, cross_validate_arrays, kfold_indices
from pylinmod.crossval.solution import CrossValidationSolution
from pylinmod.crossval._common import FoldScore, CrossValidationParams

__all__ = [
    "cross_validate",
    "cross_validate_arrays",
    "kfold_indices",
    "CrossValidationSolution",
    "CrossValidationParams",
    "FoldScore",
]
