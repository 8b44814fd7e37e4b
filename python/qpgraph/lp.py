"""
Linear Programs
===============

LP over factor graphs:

    minimize    Σ c_kᵀ x_k
    subject to  C x = d
                aⱼᵀx ≤ bⱼ

solved with the same active-set iteration as the QP. The direction is
the steepest-descent direction −c projected onto the active constraints,
followed until an inactive inequality blocks it.
"""

from __future__ import annotations

import math
from typing import Dict, Iterable, List, Optional

import numpy as np

from .active_set import ActiveSetSolver
from .config import SolverParams
from .exceptions import DimensionError
from .keys import Key
from .linear.factor_graph import EqualityFactorGraph, InequalityFactorGraph
from .linear.factors import JacobianFactor
from .linear.vector_values import VectorValues
from .problem import ConstrainedProblem
from .working_set import WorkingSet


class LP(ConstrainedProblem):
    """
    Linear program with a per-key cost vector.

    Example:
        >>> lp = LP()
        >>> lp.add_cost("x", [-1.0, -1.0])
        >>> lp.add_inequality({"x": [1.0, 2.0]}, 4.0)
        0
    """

    def __init__(
        self,
        cost: Optional[Dict[Key, Iterable[float]]] = None,
        equalities: Optional[EqualityFactorGraph] = None,
        inequalities: Optional[InequalityFactorGraph] = None,
    ) -> None:
        super().__init__(equalities, inequalities)
        self.cost: Dict[Key, np.ndarray] = {}
        for key, c in (cost or {}).items():
            self.add_cost(key, c)

    def __repr__(self) -> str:
        return (
            f"LP(cost_keys={len(self.cost)}, "
            f"equalities={len(self.equalities)}, inequalities={len(self.inequalities)})"
        )

    def add_cost(self, key: Key, c: Iterable[float]) -> None:
        """Add cᵀx_key to the objective, accumulating on repeated keys."""
        c = np.atleast_1d(np.asarray(c, dtype=np.float64)).ravel()
        if key in self.cost:
            if self.cost[key].shape != c.shape:
                raise DimensionError(f"cost for {key!r} has dims {self.cost[key].size} and {c.size}")
            self.cost[key] = self.cost[key] + c
        else:
            self.cost[key] = c.copy()

    def cost_keys(self) -> List[Key]:
        return list(self.cost)

    def cost_dims(self) -> Dict[Key, int]:
        return {key: int(c.shape[0]) for key, c in self.cost.items()}

    def objective(self, x: VectorValues) -> float:
        return float(sum(c @ x.at(key) for key, c in self.cost.items() if key in x))


class LPSolver(ActiveSetSolver):
    """
    Active-set solver for :class:`LP`.

    The direction subproblem is  min cᵀp + ½‖p‖²  subject to the active
    constraints, whose solution is −c projected onto their null space.
    Steps are not capped, so a direction no inequality blocks means the
    LP is unbounded.

    Args:
        lp: Problem to solve
        params: Solver parameters
    """

    start_alpha = math.inf

    def __init__(self, lp: LP, params: Optional[SolverParams] = None) -> None:
        self.lp = lp
        dims = lp.dims()
        # ½‖p + c‖² in delta coordinates, one factor per variable
        proximal = [
            JacobianFactor({key: np.eye(d)}, -lp.cost.get(key, np.zeros(d)))
            for key, d in dims.items()
        ]
        super().__init__(proximal, lp.equalities, lp.inequalities, params)

    def compute_direction(self, working_set: WorkingSet, xk: VectorValues) -> VectorValues:
        return self.solve_direction(self.base_graph, working_set, xk)

    def create_dual_factor(
        self,
        key: Key,
        working_set: WorkingSet,
        delta: VectorValues,
    ) -> JacobianFactor:
        """Stationarity at ``key``: Σ A_jᵀ λ_j = c_key over active constraints j."""
        terms = self.dual_jacobians(key, working_set)
        if not terms:
            return JacobianFactor({}, np.zeros(self.dims[key]))
        return JacobianFactor(dict(terms), self.lp.cost.get(key, np.zeros(self.dims[key])))

    def objective(self, values: VectorValues) -> float:
        return self.lp.objective(values)
