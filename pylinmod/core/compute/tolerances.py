"""
Numerical tolerance policy.

Two separate questions are answered here:

- When is a design matrix rank-deficient? rank_tolerance() is the only
  definition of the singular-value cutoff used by every backend.
- How closely should two results agree? ToleranceTier values are used by
  the test suite when comparing backends or reference values.
"""

from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

# cond(X) above this switches the QR backend to the SVD pseudo-inverse.
# At cond(X) = 1e8, cond(X'X) = 1e16, which is past float64 resolution.
ILL_CONDITIONED_THRESHOLD = 1e8


@dataclass(frozen=True)
class ToleranceTier:
    """Tolerance specification for numerical comparison."""
    rtol: float
    atol: float
    name: str
    description: str


CPU_FP64 = ToleranceTier(
    rtol=1e-10,
    atol=1e-12,
    name='cpu_fp64',
    description='CPU double precision, well-conditioned design',
)

CPU_FP64_ILL_CONDITIONED = ToleranceTier(
    rtol=1e-4,
    atol=1e-6,
    name='cpu_fp64_ill_conditioned',
    description='CPU double precision, ill-conditioned design (cond > 1e4)',
)


def rank_tolerance(singular_values: NDArray, shape: tuple[int, int]) -> float:
    """
    Singular-value cutoff for numerical rank.

    tol = s_max * max(n, p) * eps(float64), the same convention as
    numpy.linalg.matrix_rank and MATLAB's rank().

    Args:
        singular_values: Singular values of X, in any order
        shape: (n, p) of X
    """
    if singular_values.size == 0:
        return 0.0
    return float(np.max(singular_values)) * max(shape) * np.finfo(np.float64).eps


def numerical_rank(singular_values: NDArray, shape: tuple[int, int]) -> int:
    """Number of singular values above rank_tolerance()."""
    tol = rank_tolerance(singular_values, shape)
    return int(np.sum(singular_values > tol))


def condition_number(singular_values: NDArray) -> float:
    """s_max / s_min, or inf when the smallest singular value is zero."""
    if singular_values.size == 0:
        return float('inf')
    s_min = float(np.min(singular_values))
    if s_min == 0.0:
        return float('inf')
    return float(np.max(singular_values)) / s_min


def select_tolerance(is_ill_conditioned: bool = False) -> ToleranceTier:
    """Select the comparison tier for a design's conditioning."""
    if is_ill_conditioned:
        return CPU_FP64_ILL_CONDITIONED
    return CPU_FP64
