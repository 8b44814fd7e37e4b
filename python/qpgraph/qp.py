"""
Quadratic Programs
==================

QP over factor graphs:

    minimize    Σ ½‖A_i x − b_i‖²
    subject to  C x = d
                aⱼᵀx ≤ bⱼ

and its active-set solver.
"""

from __future__ import annotations

from typing import Dict, List, Mapping, Optional

import numpy as np

from .active_set import ActiveSetSolver
from .config import SolverParams
from .keys import Key
from .linear.factor_graph import EqualityFactorGraph, GaussianFactorGraph, InequalityFactorGraph
from .linear.factors import BlockLike, JacobianFactor
from .linear.vector_values import VectorValues
from .problem import ConstrainedProblem
from .working_set import WorkingSet


class QP(ConstrainedProblem):
    """
    Quadratic program made of least-squares cost factors and linear constraints.

    Example:
        >>> qp = QP()
        >>> qp.add_cost({"x": [[1.0]]}, [5.0])        # ½(x − 5)²
        0
        >>> qp.add_inequality({"x": [1.0]}, 3.0)      # x ≤ 3
        0
    """

    def __init__(
        self,
        cost: Optional[GaussianFactorGraph] = None,
        equalities: Optional[EqualityFactorGraph] = None,
        inequalities: Optional[InequalityFactorGraph] = None,
    ) -> None:
        super().__init__(equalities, inequalities)
        self.cost = cost if cost is not None else GaussianFactorGraph()

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(cost={len(self.cost)}, "
            f"equalities={len(self.equalities)}, inequalities={len(self.inequalities)})"
        )

    def add_cost(self, terms: Mapping[Key, BlockLike], b: BlockLike) -> int:
        """Add ½‖Σ A_k x_k − b‖²; returns the factor index."""
        return self.cost.push_back(JacobianFactor(terms, b))

    def cost_keys(self) -> List[Key]:
        return self.cost.keys()

    def cost_dims(self) -> Dict[Key, int]:
        return self.cost.dims()

    def objective(self, x: VectorValues) -> float:
        return self.cost.error(x)


class QPSolver(ActiveSetSolver):
    """
    Active-set solver for :class:`QP`.

    The direction is the step to the minimizer of the cost restricted to
    the equalities and active inequalities; full steps are capped at 1.

    Args:
        qp: Problem to solve
        params: Solver parameters

    Example:
        >>> result = QPSolver(qp).optimize(VectorValues({"x": [0.0]}))
        >>> result.x.at("x")
        array([3.])
    """

    start_alpha = 1.0

    def __init__(self, qp: QP, params: Optional[SolverParams] = None) -> None:
        self.qp = qp
        super().__init__(qp.cost, qp.equalities, qp.inequalities, params)

    def compute_direction(self, working_set: WorkingSet, xk: VectorValues) -> VectorValues:
        return self.solve_direction(self.base_graph.shifted(xk), working_set, xk)

    def create_dual_factor(
        self,
        key: Key,
        working_set: WorkingSet,
        delta: VectorValues,
    ) -> JacobianFactor:
        """
        Stationarity at ``key``: Σ A_jᵀ λ_j = ∇f(delta)_key over active constraints j.
        """
        terms = self.dual_jacobians(key, working_set)
        if not terms:
            return JacobianFactor({}, np.zeros(self.dims[key]))
        gradient = np.zeros(self.dims[key])
        for ix in self.cost_variable_index.get(key):
            gradient += self.base_graph[ix].gradient(key, delta)
        return JacobianFactor(dict(terms), gradient)

    def objective(self, values: VectorValues) -> float:
        return self.base_graph.error(values)
