"""
qpgraph: Active-Set QP/LP Solving over Linear Factor Graphs
===========================================================

qpgraph solves the linear and quadratic subproblems that arise inside
constrained nonlinear least-squares (e.g. SLAM with inequality
constraints) using a primal active-set method. Costs and constraints are
sparse factors over named variables; the solver maintains a working set
of active inequalities and certifies optimality with Lagrange multipliers
obtained from a dual factor graph.

Quick Start
-----------
>>> import qpgraph
>>> qp = qpgraph.QP()
>>> qp.add_cost({"x": [[1.0]]}, [5.0])          # ½(x − 5)²
0
>>> qp.add_inequality({"x": [1.0]}, 3.0)        # x ≤ 3
0
>>> result = qpgraph.QPSolver(qp).optimize(qpgraph.VectorValues({"x": [0.0]}))
>>> result.x.at("x"), result.active_constraints
(array([3.]), [0])

For dense or scipy.sparse problem data, use the matrix interface:

>>> import numpy as np
>>> result = qpgraph.solve(P=np.eye(2), c=np.array([-1.0, -1.0]),
...                        A_ub=np.array([[1.0, 1.0]]), b_ub=np.array([1.0]))
>>> print(result.status)
optimal
"""

__version__ = "0.1.0"
__author__ = "qpgraph Contributors"

# Import public API
from .keys import DualKey, Key, KeyGenerator
from .config import SolverParams
from .linear import (
    EqualityFactorGraph,
    GaussianFactorGraph,
    InequalityFactorGraph,
    JacobianFactor,
    LinearEquality,
    LinearInequality,
    VariableIndex,
    VectorValues,
)
from .working_set import WorkingSet
from .active_set import ActiveSetSolver, Phase, SolverState
from .qp import QP, QPSolver
from .lp import LP, LPSolver
from .initialization import find_feasible_point
from .solver import solve, solve_batch
from .result import SolveResult, Status
from .exceptions import (
    QPGraphError,
    InfeasibleStartError,
    InfeasibleError,
    UnboundedError,
    SingularSystemError,
    NonConvergenceError,
    CyclingError,
    DimensionError,
    InvalidInputError,
)

__all__ = [
    # Version
    "__version__",

    # Keys and parameters
    "Key",
    "DualKey",
    "KeyGenerator",
    "SolverParams",

    # Linear building blocks
    "VectorValues",
    "JacobianFactor",
    "LinearEquality",
    "LinearInequality",
    "GaussianFactorGraph",
    "EqualityFactorGraph",
    "InequalityFactorGraph",
    "VariableIndex",

    # Solving
    "WorkingSet",
    "ActiveSetSolver",
    "Phase",
    "SolverState",
    "QP",
    "QPSolver",
    "LP",
    "LPSolver",
    "find_feasible_point",
    "solve",
    "solve_batch",

    # Results
    "SolveResult",
    "Status",

    # Exceptions
    "QPGraphError",
    "InfeasibleStartError",
    "InfeasibleError",
    "UnboundedError",
    "SingularSystemError",
    "NonConvergenceError",
    "CyclingError",
    "DimensionError",
    "InvalidInputError",
]


def info() -> str:
    """Return information about the qpgraph installation."""
    import platform

    import numpy
    import scipy

    lines = [
        f"qpgraph version: {__version__}",
        f"Python version: {platform.python_version()}",
        f"Platform: {platform.platform()}",
        f"NumPy version: {numpy.__version__}",
        f"SciPy version: {scipy.__version__}",
    ]
    return "\n".join(lines)
