"""
Common data types for cross-validation.

Frozen payloads that go inside Result[P] envelopes: pure data, no
computation.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class FoldScore:
    """Scores for one held-out fold."""
    fold: int
    n_train: int
    n_test: int
    r_squared: float          # out-of-sample, against the fold's own mean
    rmse: float               # out-of-sample
    train_r_squared: float    # in-sample R² of the fold's training fit


@dataclass(frozen=True)
class CrossValidationParams:
    """Parameter payload for k-fold cross-validation."""
    folds: tuple[FoldScore, ...]
    k: int
    n_obs: int
    mean_r_squared: float
    mean_rmse: float
    mean_train_r_squared: float
