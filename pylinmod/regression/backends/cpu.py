"""
CPU backends for linear regression.

Both backends share the same contract:

    1. Singular values of X decide rank and conditioning. A design that
       is not of full column rank is refused (SingularMatrixError), and
       n - p <= 0 is refused (DegreesOfFreedomError). No partial result
       is ever produced.
    2. Coefficients and (X'X)⁻¹ come from a decomposition of X, never
       from forming and inverting X'X.
    3. Residuals, fitted values, RSS and TSS complete the payload.

CPUQRBackend uses Householder QR and switches to the SVD pseudo-inverse
when cond(X) exceeds ILL_CONDITIONED_THRESHOLD. CPUSVDBackend always
uses the SVD.
"""

from typing import Any
import numpy as np
from numpy.typing import NDArray

from pylinmod.core.exceptions import DegreesOfFreedomError
from pylinmod.core.result import Result
from pylinmod.core.compute.timing import Timer
from pylinmod.core.compute.tolerances import ILL_CONDITIONED_THRESHOLD
from pylinmod.core.compute.linalg.qr import qr_cpu, qr_solve, qr_unscaled_cov
from pylinmod.core.compute.linalg.svd import (
    singular_values,
    check_full_column_rank,
    svd_cpu,
    svd_solve,
    svd_unscaled_cov,
)
from pylinmod.regression.design import RegressionDesign
from pylinmod.regression.solution import LinearParams


def _check_solvable(design: RegressionDesign, timer: Timer) -> float:
    """Rank and degrees-of-freedom checks. Returns cond(X)."""
    with timer.section('rank_check'):
        s = singular_values(design.X)
        cond = check_full_column_rank(s, design.X.shape, 'X')

    df = design.n - design.p
    if df <= 0:
        raise DegreesOfFreedomError(
            f"No residual degrees of freedom: n={design.n}, p={design.p}, df={df}. "
            f"Standard errors and p-values are undefined.",
            n=design.n,
            p=design.p,
        )
    return cond


def _solve_svd(X: NDArray, y: NDArray) -> tuple[NDArray, NDArray]:
    svd = svd_cpu(X)
    return svd_solve(svd, y), svd_unscaled_cov(svd)


def _build_params(
    design: RegressionDesign,
    coefficients: NDArray,
    unscaled_cov: NDArray,
    cond: float,
    timer: Timer,
) -> LinearParams:
    X, y = design.X, design.y

    with timer.section('residuals'):
        fitted_values = X @ coefficients
        residuals = y - fitted_values

    with timer.section('statistics'):
        rss = float(residuals @ residuals)
        if np.ptp(y) == 0:
            tss = 0.0
        else:
            tss = float(np.sum((y - np.mean(y)) ** 2))

    for arr in (coefficients, residuals, fitted_values, unscaled_cov):
        arr.setflags(write=False)

    return LinearParams(
        coefficients=coefficients,
        residuals=residuals,
        fitted_values=fitted_values,
        rss=rss,
        tss=tss,
        rank=design.p,
        df_residual=design.n - design.p,
        unscaled_cov=unscaled_cov,
        condition_number=cond,
    )


class CPUQRBackend:
    """
    CPU backend using Householder QR.

        X = QR,  β = R⁻¹ Q'y,  (X'X)⁻¹ = R⁻¹ R⁻ᵀ

    Falls back to the SVD when the design is full rank but too
    ill-conditioned for the triangular solve to be trusted. The fallback
    is recorded in info['method'] and in the result warnings.
    """

    @property
    def name(self) -> str:
        return 'cpu_qr'

    def solve(self, design: RegressionDesign) -> Result[LinearParams]:
        timer = Timer()
        timer.start()

        cond = _check_solvable(design, timer)
        warnings: tuple[str, ...] = ()

        if cond > ILL_CONDITIONED_THRESHOLD:
            method = 'svd'
            warnings = (
                f"design is ill-conditioned (condition number {cond:.3g} > "
                f"{ILL_CONDITIONED_THRESHOLD:.0e}); solved via SVD pseudo-inverse",
            )
            with timer.section('decomposition'):
                coefficients, unscaled_cov = _solve_svd(design.X, design.y)
        else:
            method = 'qr'
            with timer.section('decomposition'):
                qr = qr_cpu(design.X)
            with timer.section('solve'):
                coefficients = qr_solve(qr, design.y)
                unscaled_cov = qr_unscaled_cov(qr)

        params = _build_params(design, coefficients, unscaled_cov, cond, timer)
        timer.stop()

        info: dict[str, Any] = {
            'method': method,
            'rank': params.rank,
            'condition_number': cond,
        }

        return Result(
            params=params,
            info=info,
            timing=timer.result(),
            backend_name=self.name,
            warnings=warnings,
        )


class CPUSVDBackend:
    """
    CPU backend using the SVD pseudo-inverse.

        X = UΣVᵀ,  β = VΣ⁻¹Uᵀy,  (X'X)⁻¹ = VΣ⁻²Vᵀ

    Slower than QR but the most stable option for nearly collinear
    designs.
    """

    @property
    def name(self) -> str:
        return 'cpu_svd'

    def solve(self, design: RegressionDesign) -> Result[LinearParams]:
        timer = Timer()
        timer.start()

        cond = _check_solvable(design, timer)

        with timer.section('decomposition'):
            coefficients, unscaled_cov = _solve_svd(design.X, design.y)

        params = _build_params(design, coefficients, unscaled_cov, cond, timer)
        timer.stop()

        return Result(
            params=params,
            info={'method': 'svd', 'rank': params.rank, 'condition_number': cond},
            timing=timer.result(),
            backend_name=self.name,
            warnings=(),
        )
