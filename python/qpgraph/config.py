"""Solver parameters."""

from dataclasses import dataclass, fields
from typing import Any, Dict, Optional

from .exceptions import InvalidInputError

# Alternative spellings accepted in params dicts
_ALIASES = {
    "max_iters": "max_iterations",
    "tol": "tolerance",
}


@dataclass
class SolverParams:
    """
    Parameters of the active-set iteration.

    Attributes:
        max_iterations: Cap on outer iterations before NonConvergenceError
        tolerance: Norm below which a direction counts as zero
        active_tolerance: Slack below which an inequality is seeded active
        detect_cycling: Fail when a working set repeats before the point moves
        feasibility_tolerance: Violation allowed at the start point
        check_feasibility: Validate the start point before iterating
        verbose: Log iteration summaries at INFO level
    """

    max_iterations: int = 1000
    tolerance: float = 1e-7
    active_tolerance: float = 1e-7
    feasibility_tolerance: float = 1e-6
    detect_cycling: bool = True
    check_feasibility: bool = True
    verbose: bool = False

    def __post_init__(self) -> None:
        if int(self.max_iterations) <= 0:
            raise InvalidInputError(
                f"max_iterations must be positive, got {self.max_iterations}"
            )
        if min(self.tolerance, self.active_tolerance, self.feasibility_tolerance) <= 0:
            raise InvalidInputError("tolerances must be positive")
        self.max_iterations = int(self.max_iterations)

    @classmethod
    def from_dict(cls, params: Optional[Dict[str, Any]] = None) -> "SolverParams":
        """Build parameters from a plain dict, accepting alias keys."""
        params = params or {}
        known = {f.name for f in fields(cls)}
        kwargs: Dict[str, Any] = {}
        for name, value in params.items():
            name = _ALIASES.get(name, name)
            if name not in known:
                raise InvalidInputError(f"unknown solver parameter '{name}'")
            kwargs[name] = value
        return cls(**kwargs)
