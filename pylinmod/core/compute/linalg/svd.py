"""
Singular value decomposition kernels.

The SVD serves two purposes:

1. Rank and conditioning checks for every backend. Singular values are
   the most reliable rank indicator available, and the cutoff is
   defined once in pylinmod.core.compute.tolerances.
2. The pseudo-inverse solve used when X'X is too ill-conditioned for
   QR to be trusted:

       X = U Σ Vᵀ
       β = V Σ⁻¹ Uᵀ y
       (X'X)⁻¹ = V Σ⁻² Vᵀ
"""

from dataclasses import dataclass
from typing import Any
import numpy as np
from numpy.typing import NDArray

from pylinmod.core.exceptions import SingularMatrixError
from pylinmod.core.compute.tolerances import numerical_rank, condition_number


@dataclass(frozen=True)
class SVDResult:
    """
    Thin SVD X = U diag(s) Vt.

    Attributes:
        U: Left singular vectors (n x k)
        s: Singular values, descending (k,)
        Vt: Right singular vectors, transposed (k x p)
        rank: Numerical rank under rank_tolerance()
    """
    U: NDArray[np.floating[Any]]
    s: NDArray[np.floating[Any]]
    Vt: NDArray[np.floating[Any]]
    rank: int


def svd_cpu(X: NDArray[np.floating[Any]]) -> SVDResult:
    """Thin SVD via LAPACK (gesdd through NumPy)."""
    U, s, Vt = np.linalg.svd(X, full_matrices=False)
    return SVDResult(U=U, s=s, Vt=Vt, rank=numerical_rank(s, X.shape))


def singular_values(X: NDArray[np.floating[Any]]) -> NDArray[np.floating[Any]]:
    """Singular values only, descending."""
    if X.size == 0:
        return np.empty(0, dtype=np.float64)
    return np.linalg.svd(X, compute_uv=False)


def check_full_column_rank(
    s: NDArray[np.floating[Any]],
    shape: tuple[int, int],
    name: str = 'X',
) -> float:
    """
    Refuse a matrix that is not of full column rank.

    More columns than rows is always rank-deficient: only min(n, p)
    singular values exist.

    Args:
        s: Singular values of the matrix
        shape: (n, p) of the matrix
        name: Matrix name for error messages

    Returns:
        Condition number s_max / s_min

    Raises:
        SingularMatrixError: If rank < p
    """
    n, p = shape
    rank = numerical_rank(s, shape)
    if rank < p:
        cond = condition_number(s) if s.size == p else float('inf')
        if p > n:
            detail = f"{p} columns but only {n} observations"
        else:
            detail = "columns are linearly dependent (perfect multicollinearity)"
        raise SingularMatrixError(
            f"{name} is rank-deficient: rank={rank}, expected={p}; {detail}",
            matrix_name=name,
            condition_number=cond,
            rank=rank,
            expected_rank=p,
        )
    return condition_number(s)


def svd_solve(svd: SVDResult, y: NDArray[np.floating[Any]]) -> NDArray[np.floating[Any]]:
    """Minimum-norm least squares coefficients, β = V Σ⁻¹ Uᵀ y."""
    k = svd.rank
    Uty = svd.U[:, :k].T @ y
    return svd.Vt[:k].T @ (Uty / svd.s[:k])


def svd_unscaled_cov(svd: SVDResult) -> NDArray[np.floating[Any]]:
    """(X'X)⁻¹ = V Σ⁻² Vᵀ over the retained singular values."""
    k = svd.rank
    V = svd.Vt[:k].T
    return (V / svd.s[:k] ** 2) @ V.T
