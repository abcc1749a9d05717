"""
Regression backends.

Available backends:
    CPUQRBackend: Householder QR with SVD fallback for ill-conditioned X
    CPUSVDBackend: SVD pseudo-inverse
"""

from pylinmod.regression.backends.cpu import CPUQRBackend, CPUSVDBackend

__all__ = [
    "CPUQRBackend",
    "CPUSVDBackend",
]
