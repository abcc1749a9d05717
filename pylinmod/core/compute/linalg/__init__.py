"""
Linear algebra kernels for PyLinMod.

All kernels run on the CPU in float64 through NumPy/SciPy (LAPACK),
return frozen result dataclasses, and are deterministic for a given
input.

Submodules:
    qr: Householder QR, triangular solve, (X'X)^-1 from R
    svd: Singular values, rank check, pseudo-inverse solve
"""

from pylinmod.core.compute.linalg.qr import (
    QRResult,
    qr_cpu,
    qr_solve,
    qr_unscaled_cov,
)
from pylinmod.core.compute.linalg.svd import (
    SVDResult,
    svd_cpu,
    singular_values,
    check_full_column_rank,
    svd_solve,
    svd_unscaled_cov,
)

__all__ = [
    # QR decomposition
    "QRResult",
    "qr_cpu",
    "qr_solve",
    "qr_unscaled_cov",
    # SVD
    "SVDResult",
    "svd_cpu",
    "singular_values",
    "check_full_column_rank",
    "svd_solve",
    "svd_unscaled_cov",
]
