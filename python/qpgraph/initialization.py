"""
Feasible starting points.

The active-set iteration must start from a feasible point. When the
caller has none, a phase-one LP maximizing the smallest inequality slack
is solved with scipy's HiGHS backend.
"""

import logging
from typing import Dict, Sequence

import numpy as np
from scipy import sparse
from scipy.optimize import linprog

from .exceptions import InfeasibleError, QPGraphError
from .keys import Key
from .linear.factor_graph import EqualityFactorGraph, GaussianFactorGraph, InequalityFactorGraph
from .linear.vector_values import VectorValues

logger = logging.getLogger(__name__)


def find_feasible_point(
    equalities: EqualityFactorGraph,
    inequalities: InequalityFactorGraph,
    ordering: Sequence[Key],
    dims: Dict[Key, int],
    tol: float = 1e-6,
) -> VectorValues:
    """
    Find x with Cx = d and Ax <= b.

    Solves  max t  s.t.  Ax + t <= b,  Cx = d,  t <= 1,
    so the returned point is strictly interior whenever the inequalities
    admit an interior.

    Raises:
        InfeasibleError: If no feasible point exists
    """
    n = sum(dims[key] for key in ordering)
    if n == 0 or (len(equalities) == 0 and len(inequalities) == 0):
        return VectorValues.zero({key: dims[key] for key in ordering})

    C, d = equalities.jacobian(ordering, dims)
    A, b = GaussianFactorGraph(f.to_equality() for f in inequalities).jacobian(ordering, dims)

    c = np.zeros(n + 1)
    c[-1] = -1.0
    A_ub = b_ub = A_eq = b_eq = None
    if A.shape[0] > 0:
        A_ub = sparse.hstack([A, np.ones((A.shape[0], 1))]).tocsr()
        b_ub = b
    if C.shape[0] > 0:
        A_eq = sparse.hstack([C, sparse.csr_matrix((C.shape[0], 1))]).tocsr()
        b_eq = d
    bounds = [(None, None)] * n + [(None, 1.0)]

    result = linprog(c, A_ub=A_ub, b_ub=b_ub, A_eq=A_eq, b_eq=b_eq, bounds=bounds, method="highs")
    if result.status == 2:
        raise InfeasibleError("equality constraints are inconsistent")
    if result.status != 0 or result.x is None:
        raise QPGraphError(f"phase-one LP failed: {result.message}")

    slack = float(result.x[-1])
    if slack < -tol:
        raise InfeasibleError(f"inequalities cannot be satisfied (max slack {slack:.3e})")
    logger.info("Phase one found a start point with minimum slack %.3e", slack)
    return VectorValues.from_vector(result.x[:n], ordering, dims)
