"""
Linear Factor Graphs
====================

Ordered factor containers and the least-squares solves the active-set
solver delegates to.
"""

from __future__ import annotations

import logging
from typing import Dict, Generic, Iterable, Iterator, List, Optional, Sequence, Tuple, TypeVar

import numpy as np
from scipy import linalg, sparse

from ..exceptions import DimensionError, SingularSystemError
from ..keys import Key
from .factors import JacobianFactor, LinearEquality, LinearInequality
from .vector_values import VectorValues

logger = logging.getLogger(__name__)

F = TypeVar("F")


class FactorGraph(Generic[F]):
    """Ordered, index-addressable list of factors."""

    def __init__(self, factors: Optional[Iterable[F]] = None) -> None:
        self._factors: List[F] = []
        if factors is not None:
            self.extend(factors)

    def push_back(self, factor: F) -> int:
        """Append a factor and return its index."""
        self._factors.append(factor)
        return len(self._factors) - 1

    def extend(self, factors: Iterable[F]) -> None:
        for factor in factors:
            self.push_back(factor)

    def at(self, ix: int) -> F:
        return self._factors[ix]

    def __getitem__(self, ix: int) -> F:
        return self._factors[ix]

    def __len__(self) -> int:
        return len(self._factors)

    def __iter__(self) -> Iterator[F]:
        return iter(self._factors)

    def size(self) -> int:
        return len(self._factors)

    def is_active(self, ix: int) -> bool:
        """Whether factor ``ix`` constrains the current iterate."""
        return True

    def keys(self) -> List[Key]:
        """All keys, in order of first appearance."""
        seen: Dict[Key, None] = {}
        for factor in self._factors:
            for key in factor.keys():
                seen.setdefault(key, None)
        return list(seen)

    def dims(self) -> Dict[Key, int]:
        """Dimension of every key; raises DimensionError on disagreement."""
        dims: Dict[Key, int] = {}
        for factor in self._factors:
            for key, d in factor.dims().items():
                if dims.setdefault(key, d) != d:
                    raise DimensionError(f"{key!r} used with dims {dims[key]} and {d}")
        return dims

    def __repr__(self) -> str:
        return f"{type(self).__name__}(size={len(self)})"


def _stack(
    factors: Sequence[JacobianFactor],
    ordering: Sequence[Key],
    dims: Dict[Key, int],
) -> Tuple[sparse.csr_matrix, np.ndarray]:
    offsets: Dict[Key, int] = {}
    n = 0
    for key in ordering:
        offsets[key] = n
        n += dims[key]

    rows, cols, vals, rhs = [], [], [], []
    row0 = 0
    for factor in factors:
        for key, block in factor.terms().items():
            if block.shape[1] != dims[key]:
                raise DimensionError(f"{key!r} has dim {dims[key]}, block has {block.shape[1]}")
            r, c = np.nonzero(block)
            rows.append(r + row0)
            cols.append(c + offsets[key])
            vals.append(block[r, c])
        rhs.append(factor.get_b())
        row0 += factor.rows

    if row0 == 0:
        return sparse.csr_matrix((0, n)), np.zeros(0)
    if not vals:
        return sparse.csr_matrix((row0, n)), np.concatenate(rhs)
    A = sparse.coo_matrix(
        (np.concatenate(vals), (np.concatenate(rows), np.concatenate(cols))),
        shape=(row0, n),
    ).tocsr()
    return A, np.concatenate(rhs)


class GaussianFactorGraph(FactorGraph[JacobianFactor]):
    """
    Sum of least-squares factors ½‖Ax − b‖².

    Example:
        >>> graph = GaussianFactorGraph([JacobianFactor({"x": [[1.0]]}, [5.0])])
        >>> graph.optimize().at("x")
        array([5.])
    """

    def error(self, x: VectorValues) -> float:
        return float(sum(factor.error(x) for factor in self))

    def gradient(self, key: Key, x: VectorValues) -> np.ndarray:
        """Gradient of the total error with respect to ``key``."""
        grads = [factor.gradient(key, x) for factor in self if key in factor]
        if not grads:
            return np.zeros(0)
        return np.sum(grads, axis=0)

    def shifted(self, x: VectorValues) -> "GaussianFactorGraph":
        """All factors rewritten in delta coordinates around ``x``."""
        return type(self)(factor.shifted(x) for factor in self)

    def jacobian(
        self,
        ordering: Optional[Sequence[Key]] = None,
        dims: Optional[Dict[Key, int]] = None,
    ) -> Tuple[sparse.csr_matrix, np.ndarray]:
        """Stacked sparse Jacobian and rhs over ``ordering``."""
        ordering = self.keys() if ordering is None else list(ordering)
        dims = self.dims() if dims is None else dims
        return _stack(list(self), ordering, dims)

    def optimize(
        self,
        constraints: Optional["GaussianFactorGraph"] = None,
        ordering: Optional[Sequence[Key]] = None,
        require_full_rank: bool = False,
        dims: Optional[Dict[Key, int]] = None,
    ) -> VectorValues:
        """
        Minimize the graph error, optionally subject to ``constraints``.

        Unconstrained problems are solved as least squares; constrained
        ones through the KKT system [[AᵀA, Cᵀ], [C, 0]]. Rank-deficient
        systems yield the minimum-norm solution, or raise
        SingularSystemError when ``require_full_rank`` is set.

        Args:
            constraints: Graph whose rows must hold with equality
            ordering: Variable ordering (first appearance by default)
            require_full_rank: Fail instead of returning a min-norm solution
            dims: Dimensions of keys in ``ordering`` that no factor touches;
                they get zero columns and a zero solution

        Returns:
            Minimizer over every key in the graph and constraints
        """
        constraints = constraints if constraints is not None else GaussianFactorGraph()
        dims = dict(dims) if dims is not None else {}
        for key, d in list(self.dims().items()) + list(constraints.dims().items()):
            if dims.setdefault(key, d) != d:
                raise DimensionError(f"{key!r} used with dims {dims[key]} and {d}")
        if ordering is None:
            ordering = list(dict.fromkeys(self.keys() + constraints.keys()))
        n = sum(dims[key] for key in ordering)
        if n == 0:
            return VectorValues()

        A, b = _stack(list(self), ordering, dims)
        C, d = _stack(list(constraints), ordering, dims)
        m = C.shape[0]

        if m == 0:
            M, rhs = A.toarray(), b
            if M.shape[0] == 0:
                M, rhs = np.zeros((1, n)), np.zeros(1)
        else:
            AtA = (A.T @ A).toarray()
            M = np.block([[AtA, C.toarray().T], [C.toarray(), np.zeros((m, m))]])
            rhs = np.concatenate([A.T @ b, d])

        solution, _, rank, _ = linalg.lstsq(M, rhs)
        if rank < n + m:
            if require_full_rank:
                raise SingularSystemError(
                    f"system over {len(ordering)} variables has rank {rank} < {n + m}",
                    rank=int(rank),
                    size=n + m,
                )
            logger.debug("Rank-deficient system (rank %d < %d); using min-norm solution", rank, n + m)
        return VectorValues.from_vector(solution[:n], ordering, dims)


class EqualityFactorGraph(GaussianFactorGraph):
    """Graph of LinearEquality factors; every factor is active."""

    def push_back(self, factor: JacobianFactor) -> int:
        if not isinstance(factor, LinearEquality):
            raise TypeError(f"EqualityFactorGraph holds LinearEquality, got {type(factor).__name__}")
        return super().push_back(factor)

    def shifted(self, x: VectorValues) -> "EqualityFactorGraph":
        return EqualityFactorGraph(factor.shifted(x) for factor in self)

    def violation(self, x: VectorValues) -> float:
        """Largest absolute residual over all equalities."""
        return max((float(np.max(np.abs(f.residual(x)))) for f in self), default=0.0)


class InequalityFactorGraph(FactorGraph[LinearInequality]):
    """Graph of single-row inequalities aᵀx ≤ b."""

    def push_back(self, factor: LinearInequality) -> int:
        if not isinstance(factor, LinearInequality):
            raise TypeError(
                f"InequalityFactorGraph holds LinearInequality, got {type(factor).__name__}"
            )
        return super().push_back(factor)

    def violations(self, x: VectorValues) -> np.ndarray:
        """Positive part of aᵀx − b for every factor."""
        return np.array([max(f.error(x), 0.0) for f in self])

    def is_feasible(self, x: VectorValues, tol: float = 1e-9) -> bool:
        return all(f.is_satisfied(x, tol) for f in self)
