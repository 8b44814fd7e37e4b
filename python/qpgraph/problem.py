"""Constraint container shared by QP and LP."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, List, Mapping, Optional

from .keys import Key, KeyGenerator
from .linear.factor_graph import EqualityFactorGraph, InequalityFactorGraph
from .linear.factors import BlockLike, LinearEquality, LinearInequality
from .linear.vector_values import VectorValues


class ConstrainedProblem(ABC):
    """
    Equality and inequality constraints with auto-generated dual keys.

    Dual keys are assigned in insertion order (``lambda_eq0``,
    ``lambda_ineq0``, ...) unless given explicitly.
    """

    def __init__(
        self,
        equalities: Optional[EqualityFactorGraph] = None,
        inequalities: Optional[InequalityFactorGraph] = None,
    ) -> None:
        self.equalities = equalities if equalities is not None else EqualityFactorGraph()
        self.inequalities = inequalities if inequalities is not None else InequalityFactorGraph()
        self._eq_keys = KeyGenerator("eq")
        self._eq_keys.skip(f.dual_key for f in self.equalities)
        self._ineq_keys = KeyGenerator("ineq")
        self._ineq_keys.skip(f.dual_key for f in self.inequalities)

    def add_equality(
        self, terms: Mapping[Key, BlockLike], b: BlockLike, dual_key: Optional[Key] = None
    ) -> int:
        """Add Σ A_k x_k = b; returns the factor index."""
        dual_key = dual_key if dual_key is not None else self._eq_keys.next()
        return self.equalities.push_back(LinearEquality(terms, b, dual_key))

    def add_inequality(
        self, terms: Mapping[Key, BlockLike], b: float, dual_key: Optional[Key] = None
    ) -> int:
        """Add aᵀx ≤ b; returns the factor index (its working-set index)."""
        dual_key = dual_key if dual_key is not None else self._ineq_keys.next()
        return self.inequalities.push_back(LinearInequality(terms, b, dual_key))

    def cost_keys(self) -> List[Key]:
        return []

    def cost_dims(self) -> Dict[Key, int]:
        return {}

    def keys(self) -> List[Key]:
        return list(
            dict.fromkeys(self.cost_keys() + self.equalities.keys() + self.inequalities.keys())
        )

    def dims(self) -> Dict[Key, int]:
        dims = self.cost_dims()
        dims.update(self.equalities.dims())
        dims.update(self.inequalities.dims())
        return dims

    def is_feasible(self, x: VectorValues, tol: float = 1e-6) -> bool:
        return self.equalities.violation(x) <= tol and self.inequalities.is_feasible(x, tol)

    @abstractmethod
    def objective(self, x: VectorValues) -> float:
        """Objective value at ``x``."""
