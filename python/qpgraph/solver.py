"""qpgraph Matrix Interface."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple, Union

import numpy as np
from scipy import linalg

from .active_set import ActiveSetSolver
from .config import SolverParams
from .exceptions import (
    CyclingError,
    DimensionError,
    InfeasibleError,
    InfeasibleStartError,
    InvalidInputError,
    NonConvergenceError,
    SingularSystemError,
    UnboundedError,
)
from .keys import DualKey
from .linear.vector_values import VectorValues
from .lp import LP, LPSolver
from .qp import QP, QPSolver
from .result import SolveResult, Status
from .utils.validation import MatrixLike, as_matrix, as_vector

logger = logging.getLogger(__name__)

VAR = "x"


def _cost_factor(P: np.ndarray, q: np.ndarray, tol: float = 1e-10) -> Tuple[np.ndarray, np.ndarray]:
    """
    Factor ½xᵀPx + qᵀx as ½‖Lx − r‖² + const.

    Uses the eigendecomposition P = V diag(s) Vᵀ, L = diag(√s) Vᵀ over the
    positive eigenvalues; q must lie in range(P).
    """
    P = 0.5 * (P + P.T)
    s, V = linalg.eigh(P)
    scale = max(1.0, float(np.max(np.abs(s))) if s.size else 1.0)
    if s.size and s.min() < -tol * scale:
        raise InvalidInputError(f"P is not positive semidefinite (min eigenvalue {s.min():.3e})")
    keep = s > tol * scale
    L = np.sqrt(s[keep])[:, None] * V[:, keep].T
    r = -(V[:, keep].T @ q) / np.sqrt(s[keep])
    if np.linalg.norm(L.T @ r + q) > 1e-8 * max(1.0, np.linalg.norm(q)):
        raise InvalidInputError("q has a component outside range(P); the QP is not bounded below")
    return L, r


def _add_constraints(
    problem: Union[QP, LP],
    n: int,
    A_eq: Optional[np.ndarray],
    b_eq: Optional[np.ndarray],
    A_ub: Optional[np.ndarray],
    b_ub: Optional[np.ndarray],
    lb: Optional[np.ndarray],
    ub: Optional[np.ndarray],
) -> None:
    if A_eq is not None:
        if b_eq is None or len(b_eq) != A_eq.shape[0]:
            raise DimensionError("b_eq must have one entry per row of A_eq")
        problem.add_equality({VAR: A_eq}, b_eq, dual_key=DualKey("eq", 0))
    if A_ub is not None:
        if b_ub is None or len(b_ub) != A_ub.shape[0]:
            raise DimensionError("b_ub must have one entry per row of A_ub")
        for i, (row, bi) in enumerate(zip(A_ub, b_ub)):
            problem.add_inequality({VAR: row}, bi, dual_key=DualKey("ub", i))
    eye = np.eye(n)
    if ub is not None:
        for j in np.flatnonzero(np.isfinite(ub)):
            problem.add_inequality({VAR: eye[j]}, ub[j], dual_key=DualKey("upper", int(j)))
    if lb is not None:
        for j in np.flatnonzero(np.isfinite(lb)):
            problem.add_inequality({VAR: -eye[j]}, -lb[j], dual_key=DualKey("lower", int(j)))


def _multipliers(duals: VectorValues, role: str, size: int) -> np.ndarray:
    y = np.zeros(size)
    for key, value in duals.items():
        if isinstance(key, DualKey) and key.role == role:
            if role == "eq":
                y[: value.shape[0]] = value
            else:
                y[key.index] = value[0]
    return y


def solve(
    c: Optional[np.ndarray] = None,
    P: Optional[MatrixLike] = None,
    A_eq: Optional[MatrixLike] = None,
    b_eq: Optional[np.ndarray] = None,
    A_ub: Optional[MatrixLike] = None,
    b_ub: Optional[np.ndarray] = None,
    lb: Optional[np.ndarray] = None,
    ub: Optional[np.ndarray] = None,
    x0: Optional[np.ndarray] = None,
    params: Optional[Dict[str, Any]] = None,
) -> SolveResult:
    """
    Solve  min ½xᵀPx + cᵀx  s.t.  A_eq x = b_eq,  A_ub x <= b_ub,  lb <= x <= ub.

    Without P the problem is solved as an LP. Solver failures are reported
    through ``result.status``; malformed input raises.

    Args:
        c: Linear cost (n,)
        P: Positive semidefinite Hessian (n, n), dense or sparse
        A_eq, b_eq: Equality constraints
        A_ub, b_ub: Inequality constraints
        lb, ub: Variable bounds (infinite entries are skipped)
        x0: Feasible start; found by phase one if omitted
        params: Solver parameters (see SolverParams)

    Returns:
        SolveResult; ``x`` holds the solution under key "x" and
        ``problem_info`` holds the multipliers as arrays
        (``y_eq``, ``y_ub``, ``y_lower``, ``y_upper``)
    """
    import time
    start_time = time.perf_counter()
    solver_params = SolverParams.from_dict(params)

    if c is None and P is None:
        raise InvalidInputError("at least one of c and P is required")
    n = int(P.shape[0]) if P is not None else len(np.asarray(c).ravel())
    c = as_vector(c, "c", n) if c is not None else np.zeros(n)
    b_eq = as_vector(b_eq, "b_eq")
    b_ub = as_vector(b_ub, "b_ub")
    lb = as_vector(lb, "lb", n)
    ub = as_vector(ub, "ub", n)
    A_eq = as_matrix(A_eq, n, "A_eq")
    A_ub = as_matrix(A_ub, n, "A_ub")

    solver: ActiveSetSolver
    if P is not None:
        P_dense = as_matrix(P, n, "P")
        if P_dense.shape != (n, n):
            raise DimensionError(f"P must be ({n},{n}), got {P_dense.shape}")
        L, r = _cost_factor(P_dense, c)
        problem: Union[QP, LP] = QP()
        if L.shape[0] > 0:
            problem.add_cost({VAR: L}, r)
        else:
            problem.add_cost({VAR: np.zeros((1, n))}, [0.0])
        _add_constraints(problem, n, A_eq, b_eq, A_ub, b_ub, lb, ub)
        solver = QPSolver(problem, solver_params)

        def objective(x: np.ndarray) -> float:
            return float(0.5 * x @ P_dense @ x + c @ x)
    else:
        problem = LP({VAR: c})
        _add_constraints(problem, n, A_eq, b_eq, A_ub, b_ub, lb, ub)
        solver = LPSolver(problem, solver_params)

        def objective(x: np.ndarray) -> float:
            return float(c @ x)

    initial = VectorValues({VAR: as_vector(x0, "x0", n)}) if x0 is not None else None
    n_ub = 0 if A_ub is None else A_ub.shape[0]
    n_eq = 0 if A_eq is None else A_eq.shape[0]

    def finish(status: Status, x: Optional[VectorValues], result: Optional[SolveResult] = None) -> SolveResult:
        if result is None:
            values = x if x is not None else VectorValues({VAR: np.zeros(n)})
            result = SolveResult(
                status=status,
                objective=float("nan"),
                x=values,
                duals=VectorValues(),
                working_set=None,
                iterations=0,
            )
        if x is not None or status == Status.OPTIMAL:
            result.objective = objective(result.x.at(VAR))
        result.problem_info.update(
            n=n,
            y_eq=_multipliers(result.duals, "eq", n_eq),
            y_ub=_multipliers(result.duals, "ub", n_ub),
            y_lower=_multipliers(result.duals, "lower", n),
            y_upper=_multipliers(result.duals, "upper", n),
        )
        result.solve_time = time.perf_counter() - start_time
        return result

    try:
        result = solver.optimize(initial)
    except (InfeasibleStartError, InfeasibleError) as e:
        logger.warning("Infeasible problem: %s", e)
        return finish(Status.PRIMAL_INFEASIBLE, None)
    except UnboundedError as e:
        logger.warning("Unbounded problem: %s", e)
        return finish(Status.DUAL_INFEASIBLE, None)
    except NonConvergenceError as e:
        logger.warning("%s", e)
        failed = finish(Status.MAX_ITERATIONS, e.state.values)
        failed.iterations = e.iterations or 0
        failed.working_set = e.state.working_set
        return failed
    except CyclingError as e:
        logger.warning("%s", e)
        failed = finish(Status.CYCLING, e.state.values)
        failed.iterations = e.iterations or 0
        failed.working_set = e.state.working_set
        return failed
    except SingularSystemError as e:
        logger.warning("Numerical failure: %s", e)
        return finish(Status.NUMERICAL_ERROR, None)

    return finish(result.status, result.x, result)


def solve_batch(problems: List[Dict[str, Any]], params: Optional[Dict[str, Any]] = None) -> List[SolveResult]:
    """Solve multiple problems in batch."""
    return [solve(c=p.get('c'), P=p.get('P'), A_eq=p.get('A_eq'), b_eq=p.get('b_eq'),
                  A_ub=p.get('A_ub'), b_ub=p.get('b_ub'), lb=p.get('lb'), ub=p.get('ub'),
                  x0=p.get('x0'), params=params) for p in problems]
