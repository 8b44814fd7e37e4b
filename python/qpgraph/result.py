"""
qpgraph Result Classes
======================

Data classes for solver results and status.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .keys import Key
from .linear.vector_values import VectorValues
from .working_set import WorkingSet


class Status(Enum):
    """
    Solver status codes.

    Attributes:
        OPTIMAL: KKT point found within tolerance
        PRIMAL_INFEASIBLE: Problem (or the given start) has no feasible point
        DUAL_INFEASIBLE: Problem is unbounded (objective → -∞)
        MAX_ITERATIONS: Iteration cap reached before convergence
        CYCLING: Working set revisited without progress
        NUMERICAL_ERROR: Singular linear system or other numerical failure
        INVALID_INPUT: Problem data rejected
        UNSOLVED: Problem not yet solved
    """
    OPTIMAL = "optimal"
    PRIMAL_INFEASIBLE = "primal_infeasible"
    DUAL_INFEASIBLE = "dual_infeasible"
    MAX_ITERATIONS = "max_iterations"
    CYCLING = "cycling"
    NUMERICAL_ERROR = "numerical_error"
    INVALID_INPUT = "invalid_input"
    UNSOLVED = "unsolved"

    def __str__(self) -> str:
        return self.value

    @property
    def is_successful(self) -> bool:
        """True if an optimal solution was found."""
        return self == Status.OPTIMAL

    @property
    def has_solution(self) -> bool:
        """True if a (possibly suboptimal) feasible point is available."""
        return self in (
            Status.OPTIMAL,
            Status.MAX_ITERATIONS,
            Status.CYCLING,
        )


@dataclass
class SolveResult:
    """
    Result of an active-set solve.

    Attributes:
        status: Solver status
        objective: Objective value at x
        x: Primal solution
        duals: Lagrange multipliers keyed by constraint dual key
        working_set: Final working set (which inequalities are active)
        iterations: Number of outer iterations performed
        solve_time: Wall clock time in seconds

    Example:
        >>> result = QPSolver(qp).optimize(x0)
        >>> if result.status == Status.OPTIMAL:
        ...     print(result.x.at("x"), result.active_constraints)
    """

    status: Status
    objective: float
    x: VectorValues
    duals: VectorValues
    working_set: Optional[WorkingSet]
    iterations: int
    solve_time: float = 0.0

    # Optional metadata
    problem_info: Dict[str, Any] = field(default_factory=dict)

    def __repr__(self) -> str:
        return (
            f"SolveResult(status={self.status}, "
            f"objective={self.objective:.6g}, "
            f"iterations={self.iterations}, "
            f"time={self.solve_time:.4f}s)"
        )

    @property
    def active_constraints(self) -> List[int]:
        """Indices of the inequalities active at the solution."""
        if self.working_set is None:
            return []
        return self.working_set.active_indices()

    def get_dual(self, dual_key: Key) -> float:
        """
        Multiplier of a scalar constraint; 0.0 if the constraint is inactive.
        """
        if not self.duals.exists(dual_key):
            return 0.0
        return float(self.duals.at(dual_key)[0])

    def summary(self) -> str:
        """Return a formatted summary of the solve result."""
        lines = [
            "=" * 50,
            "qpgraph Solve Summary",
            "=" * 50,
            f"Status:           {self.status}",
            f"Objective:        {self.objective:.10g}",
            f"Iterations:       {self.iterations}",
            f"Solve time:       {self.solve_time:.4f} s",
            "-" * 50,
            f"Active set:       {self.active_constraints}",
            f"Multipliers:      {len(self.duals)}",
            "=" * 50,
        ]
        return "\n".join(lines)
