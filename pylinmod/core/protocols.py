"""
Core protocols for PyLinMod.

Backends are structurally typed: anything with a `name` and a
`solve(design) -> Result[P]` method can be dispatched by a solver. This
keeps the numeric backend swappable behind the public fit() contract.
"""

from typing import Protocol, TypeVar, runtime_checkable

from pylinmod.core.result import Result

P = TypeVar('P')  # Parameter payload type
D = TypeVar('D')  # Design type


@runtime_checkable
class Backend(Protocol[D, P]):
    """
    Protocol for computational backends.

    Backends are stateless: everything they need arrives in the design.
    The same design must always produce the same Result.
    """

    @property
    def name(self) -> str:
        """
        Backend identifier, '{device}_{algorithm}'.

        Examples: 'cpu_qr', 'cpu_svd'
        """
        ...

    def solve(self, design: D) -> Result[P]:
        """
        Execute the computation.

        Raises:
            NumericalError: If the design cannot be solved (singular, no df)
        """
        ...
