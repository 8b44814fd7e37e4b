"""
qpgraph Exception Classes
=========================

Custom exceptions for qpgraph error handling.
"""

from typing import Any, Optional


class QPGraphError(Exception):
    """Base exception for all qpgraph errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InfeasibleStartError(QPGraphError):
    """
    Raised when the initial point violates an inequality or equality.

    The active-set iteration assumes a feasible start; pass a feasible
    point or let the solver compute one.
    """

    def __init__(
        self,
        message: str = "Initial point is infeasible",
        violation: Optional[float] = None,
    ) -> None:
        self.violation = violation
        super().__init__(message)


class InfeasibleError(QPGraphError):
    """
    Raised when the problem is primal infeasible.

    This means there is no x that satisfies all constraints.
    """

    def __init__(self, message: str = "Problem is infeasible") -> None:
        super().__init__(message)


class UnboundedError(QPGraphError):
    """
    Raised when the problem is unbounded (dual infeasible).

    This means the objective can be made arbitrarily small.
    """

    def __init__(self, message: str = "Problem is unbounded") -> None:
        super().__init__(message)


class SingularSystemError(QPGraphError):
    """
    Raised when a linear system is rank deficient.

    For the dual system this usually means redundant active constraints.
    """

    def __init__(
        self,
        message: str = "Linear system is singular",
        rank: Optional[int] = None,
        size: Optional[int] = None,
    ) -> None:
        self.rank = rank
        self.size = size
        super().__init__(message)


class NonConvergenceError(QPGraphError):
    """
    Raised when the iteration cap is reached before convergence.

    The last solver state is attached for inspection.
    """

    def __init__(
        self,
        message: str = "Maximum iterations reached",
        iterations: Optional[int] = None,
        state: Any = None,
    ) -> None:
        self.iterations = iterations
        self.state = state
        super().__init__(message)


class CyclingError(QPGraphError):
    """
    Raised when the same working set is revisited at the same point.
    """

    def __init__(
        self,
        message: str = "Active-set iteration is cycling",
        iterations: Optional[int] = None,
        state: Any = None,
    ) -> None:
        self.iterations = iterations
        self.state = state
        super().__init__(message)


class DimensionError(QPGraphError):
    """
    Raised when matrix/vector dimensions are incompatible.
    """

    def __init__(self, message: str) -> None:
        super().__init__(f"Dimension mismatch: {message}")


class InvalidInputError(QPGraphError):
    """
    Raised when input data is invalid.

    Examples: NaN values, unknown parameters, non-positive tolerances.
    """

    def __init__(self, message: str) -> None:
        super().__init__(f"Invalid input: {message}")
