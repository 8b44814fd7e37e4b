"""
Linear Factor Graphs
====================

Sparse linear building blocks consumed by the active-set solvers:

- VectorValues: named vectors for points, directions and multipliers
- JacobianFactor / LinearEquality / LinearInequality: row-block factors
- GaussianFactorGraph and friends: factor containers with least-squares solves
- VariableIndex: key -> factor index lookup
"""

from .factor_graph import (
    EqualityFactorGraph,
    FactorGraph,
    GaussianFactorGraph,
    InequalityFactorGraph,
)
from .factors import JacobianFactor, LinearEquality, LinearInequality
from .variable_index import VariableIndex
from .vector_values import VectorValues

__all__ = [
    "VectorValues",
    "JacobianFactor",
    "LinearEquality",
    "LinearInequality",
    "FactorGraph",
    "GaussianFactorGraph",
    "EqualityFactorGraph",
    "InequalityFactorGraph",
    "VariableIndex",
]
