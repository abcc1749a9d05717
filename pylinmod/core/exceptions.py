"""
Exception hierarchy for PyLinMod.

Every error raised by the library derives from PyLinModError. Input
problems are ValidationErrors (shape problems are DimensionErrors);
problems discovered while solving are NumericalErrors.

Exceptions carry their diagnostics as attributes, and messages quote
the actual value next to the expected one.
"""


class PyLinModError(Exception):
    """Base exception for all PyLinMod errors."""
    pass


class ValidationError(PyLinModError):
    """
    Input validation failed.

    Raised for non-numeric or non-finite data, malformed model terms,
    and categorical levels that cannot be encoded.
    """
    pass


class DimensionError(ValidationError):
    """
    Array dimensions are incorrect or inconsistent.

    Raised when the design matrix and outcome vector disagree on the
    number of observations, or when an array has the wrong rank.
    """
    pass


class ColumnMismatchError(DimensionError):
    """
    A new design matrix does not match the fitted column structure.

    Attributes:
        expected: Number of columns the model was fitted with
        actual: Number of columns supplied
    """

    def __init__(
        self,
        message: str,
        expected: int | None = None,
        actual: int | None = None,
    ):
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class NumericalError(PyLinModError):
    """
    Numerical computation failed.

    Base class for conditions that make the least squares solution or
    its inference statistics undefined.
    """
    pass


class SingularMatrixError(NumericalError):
    """
    Design matrix is not of full column rank.

    Raised when columns are linearly dependent or when there are more
    columns than observations. No regularized fallback is attempted.

    Attributes:
        matrix_name: Name/description of the problematic matrix
        condition_number: Ratio of largest to smallest singular value
        rank: Numerical rank
        expected_rank: Rank required for identifiability (number of columns)
    """

    def __init__(
        self,
        message: str,
        matrix_name: str | None = None,
        condition_number: float | None = None,
        rank: int | None = None,
        expected_rank: int | None = None
    ):
        super().__init__(message)
        self.matrix_name = matrix_name
        self.condition_number = condition_number
        self.rank = rank
        self.expected_rank = expected_rank


class DegreesOfFreedomError(NumericalError):
    """
    No residual degrees of freedom remain (n - p <= 0).

    The coefficients may be computable, but the error variance, standard
    errors and p-values are undefined, so no result is produced.

    Attributes:
        n: Number of observations
        p: Number of design columns
    """

    def __init__(self, message: str, n: int | None = None, p: int | None = None):
        super().__init__(message)
        self.n = n
        self.p = p

    @property
    def df(self) -> int | None:
        if self.n is None or self.p is None:
            return None
        return self.n - self.p
