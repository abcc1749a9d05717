"""
Shared compute infrastructure for PyLinMod.

Numeric policy and kernels shared by the domain backends. Domain
backends themselves live in {domain}/backends/.

Submodules:
    tolerances: Rank cutoff, conditioning threshold, comparison tiers
    timing: Execution timing utilities
    linalg: QR and SVD kernels
"""

from pylinmod.core.compute.timing import Timer, timed

__all__ = [
    "Timer",
    "timed",
]
