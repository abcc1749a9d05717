"""
QR decomposition kernels.

Householder QR via LAPACK (through NumPy), plus the two products a
least squares fit needs from it: the coefficient solve and the unscaled
covariance (X'X)^-1 = R^-1 R^-T.

Rank is NOT decided here. Callers check rank with
pylinmod.core.compute.linalg.svd.check_full_column_rank first, so R is
known to be nonsingular by the time these functions run.
"""

from dataclasses import dataclass
from typing import Any
import numpy as np
from numpy.typing import NDArray
from scipy.linalg import solve_triangular


@dataclass(frozen=True)
class QRResult:
    """
    Reduced QR decomposition X = QR.

    Attributes:
        Q: Orthonormal columns (n x p)
        R: Upper triangular (p x p)
    """
    Q: NDArray[np.floating[Any]]
    R: NDArray[np.floating[Any]]


def qr_cpu(X: NDArray[np.floating[Any]]) -> QRResult:
    """Reduced QR decomposition of an n x p matrix with n >= p."""
    Q, R = np.linalg.qr(X, mode='reduced')
    return QRResult(Q=Q, R=R)


def qr_solve(qr: QRResult, y: NDArray[np.floating[Any]]) -> NDArray[np.floating[Any]]:
    """
    Least squares coefficients from a QR decomposition.

        β = R⁻¹ Q'y

    Solved by back substitution, R is never inverted explicitly.
    """
    Qty = qr.Q.T @ y
    return solve_triangular(qr.R, Qty, lower=False)


def qr_unscaled_cov(qr: QRResult) -> NDArray[np.floating[Any]]:
    """
    (X'X)⁻¹ from the R factor.

    X'X = R'R, so (X'X)⁻¹ = R⁻¹ R⁻ᵀ.
    """
    p = qr.R.shape[0]
    R_inv = solve_triangular(qr.R, np.eye(p), lower=False)
    return R_inv @ R_inv.T
