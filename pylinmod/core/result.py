"""
Generic result container for PyLinMod computations.

Every backend returns a Result[P]: the domain payload plus the metadata
needed to reproduce and audit it (method, timing, backend, warnings and
library versions). Domain solution classes wrap a Result rather than
re-declaring these fields.
"""

from dataclasses import dataclass, field
from typing import TypeVar, Generic, Any

P = TypeVar('P')  # Parameter payload type


def _default_provenance() -> dict[str, str]:
    """Library versions in effect when the result was produced."""
    import numpy
    import scipy

    from pylinmod import __version__

    return {
        'pylinmod_version': __version__,
        'numpy_version': numpy.__version__,
        'scipy_version': scipy.__version__,
    }


@dataclass(frozen=True)
class Result(Generic[P]):
    """
    Immutable result envelope.

    Attributes:
        params: Domain-specific payload (coefficients, fold scores, ...)
        info: Structured metadata ('method', 'rank', 'condition_number', ...)
        timing: Section timings in seconds, or None if not measured
        backend_name: Identifier of the backend that produced the payload
        warnings: Non-fatal issues encountered during computation
        provenance: Library versions, filled in automatically

    Example:
        >>> Result(
        ...     params=LinearParams(...),
        ...     info={'method': 'qr', 'rank': 3},
        ...     timing={'total_seconds': 0.001},
        ...     backend_name='cpu_qr',
        ... )
    """
    params: P
    info: dict[str, Any]
    timing: dict[str, float] | None
    backend_name: str
    warnings: tuple[str, ...] = field(default_factory=tuple)
    provenance: dict[str, str] = field(default_factory=_default_provenance)

    def has_warning(self, substring: str) -> bool:
        """Check if any warning contains the given substring."""
        return any(substring in w for w in self.warnings)
