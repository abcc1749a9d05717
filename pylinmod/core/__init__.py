"""
Core infrastructure for PyLinMod.

Shared abstractions used by the domain packages (regression, crossval).

Key components:
    datasource: DataSource observation table
    protocols: Backend protocol
    result: Generic Result[P] envelope
    exceptions: Exception hierarchy
    validation: Input validators
    compute: Tolerances, timing, linear algebra kernels
"""

from pylinmod.core.datasource import DataSource
from pylinmod.core.protocols import Backend
from pylinmod.core.result import Result
from pylinmod.core.exceptions import (
    PyLinModError,
    ValidationError,
    DimensionError,
    ColumnMismatchError,
    NumericalError,
    SingularMatrixError,
    DegreesOfFreedomError,
)

__all__ = [
    "DataSource",
    "Backend",
    "Result",
    # Exceptions
    "PyLinModError",
    "ValidationError",
    "DimensionError",
    "ColumnMismatchError",
    "NumericalError",
    "SingularMatrixError",
    "DegreesOfFreedomError",
]
