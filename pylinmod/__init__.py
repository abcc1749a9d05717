"""
PyLinMod: ordinary least squares for the general linear model.

Design matrices from explicit model terms (numeric, dummy-coded
categorical, interactions), OLS fits with standard errors, t and p
values and R², nested model comparison, and k-fold cross-validation.

Submodules:
    regression: Terms, design matrices, fit/predict, model comparison
    crossval: K-fold cross-validation
    core: Data source, exceptions, validation, numeric kernels
"""

__version__ = "0.1.0"

from pylinmod.core.datasource import DataSource
from pylinmod import regression
from pylinmod import crossval

__all__ = [
    "__version__",
    "DataSource",
    "regression",
    "crossval",
]
