"""
Solution wrapper for cross-validation results.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pylinmod.core.result import Result
from pylinmod.crossval._common import CrossValidationParams, FoldScore


@dataclass(frozen=True)
class CrossValidationSolution:
    """
    User-facing k-fold cross-validation results.

    The gap between mean_train_r_squared and mean_r_squared is the
    overfitting signal: a model that memorizes its training folds scores
    well in-sample and poorly on the held-out folds.
    """
    _result: Result[CrossValidationParams]

    @property
    def folds(self) -> tuple[FoldScore, ...]:
        return self._result.params.folds

    @property
    def k(self) -> int:
        return self._result.params.k

    @property
    def n_obs(self) -> int:
        return self._result.params.n_obs

    @property
    def mean_r_squared(self) -> float:
        """Simple average of out-of-sample R² over folds."""
        return self._result.params.mean_r_squared

    @property
    def mean_rmse(self) -> float:
        """Simple average of out-of-sample RMSE over folds."""
        return self._result.params.mean_rmse

    @property
    def mean_train_r_squared(self) -> float:
        return self._result.params.mean_train_r_squared

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    def summary(self) -> str:
        lines = [
            f"{self.k}-fold Cross-Validation",
            "=" * 60,
            f"Observations: {self.n_obs}",
            f"Shuffled: {self.info.get('shuffle')}  Seed: {self.info.get('seed')}",
            "",
            f"{'Fold':>4} {'n_train':>8} {'n_test':>7} {'Train R²':>10} {'Test R²':>10} {'RMSE':>12}",
            "-" * 60,
        ]
        for f in self.folds:
            lines.append(
                f"{f.fold:>4d} {f.n_train:>8d} {f.n_test:>7d} {f.train_r_squared:>10.4f} "
                f"{f.r_squared:>10.4f} {f.rmse:>12.6g}"
            )
        lines.append("-" * 60)
        lines.append(
            f"{'Mean':>4} {'':>8} {'':>7} {self.mean_train_r_squared:>10.4f} "
            f"{self.mean_r_squared:>10.4f} {self.mean_rmse:>12.6g}"
        )
        lines.append(f"Backend: {self.backend_name}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"CrossValidationSolution(k={self.k}, n={self.n_obs}, "
            f"mean_r_squared={self.mean_r_squared:.4f}, mean_rmse={self.mean_rmse:.4g})"
        )
