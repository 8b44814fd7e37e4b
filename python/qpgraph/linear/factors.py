"""
Linear Factors
==============

Row-block factors over named variables.

- JacobianFactor: least-squares term ½‖Σ A_k x_k − b‖²
- LinearEquality: hard constraint Σ A_k x_k = b
- LinearInequality: single row aᵀx ≤ b
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Optional, Union

import numpy as np

from ..exceptions import DimensionError, InvalidInputError
from ..keys import Key
from .vector_values import VectorValues

BlockLike = Union[float, Iterable[float], Iterable[Iterable[float]], np.ndarray]


def _as_block(value: BlockLike) -> np.ndarray:
    block = np.atleast_2d(np.asarray(value, dtype=np.float64))
    if block.ndim != 2:
        raise DimensionError(f"coefficient block must be 2-D, got {block.ndim}-D")
    return block


class JacobianFactor:
    """
    Least-squares factor ½‖Σ A_k x_k − b‖².

    Args:
        terms: Mapping key -> block (rows x dim(key)); order is kept
        b: Right-hand side vector (rows,)

    Example:
        >>> f = JacobianFactor({"x": [[1.0]]}, [5.0])
        >>> f.error(VectorValues({"x": [3.0]}))
        2.0
    """

    def __init__(self, terms: Mapping[Key, BlockLike], b: BlockLike) -> None:
        self._terms: Dict[Key, np.ndarray] = {}
        self._b = np.atleast_1d(np.asarray(b, dtype=np.float64)).ravel()
        for key, value in terms.items():
            block = _as_block(value)
            if block.shape[0] != self._b.shape[0]:
                raise DimensionError(
                    f"block for {key!r} has {block.shape[0]} rows, b has {self._b.shape[0]}"
                )
            self._terms[key] = block
        if np.any(np.isnan(self._b)) or any(np.any(np.isnan(a)) for a in self._terms.values()):
            raise InvalidInputError("factor contains NaN values")

    def __repr__(self) -> str:
        return f"{type(self).__name__}(keys={self.keys()}, rows={self.rows})"

    @property
    def rows(self) -> int:
        return int(self._b.shape[0])

    def keys(self) -> List[Key]:
        return list(self._terms.keys())

    def empty(self) -> bool:
        return not self._terms

    def find(self, key: Key) -> Optional[int]:
        """Position of ``key`` among this factor's keys, or None."""
        for pos, k in enumerate(self._terms):
            if k == key:
                return pos
        return None

    def __contains__(self, key: object) -> bool:
        return key in self._terms

    def get_a(self, key: Key) -> np.ndarray:
        return self._terms[key]

    def get_b(self) -> np.ndarray:
        return self._b

    def dims(self) -> Dict[Key, int]:
        return {key: int(a.shape[1]) for key, a in self._terms.items()}

    def terms(self) -> Dict[Key, np.ndarray]:
        return dict(self._terms)

    def _product(self, x: VectorValues) -> np.ndarray:
        out = np.zeros(self.rows)
        for key, a in self._terms.items():
            if key in x:
                value = x.at(key)
                if value.shape[0] != a.shape[1]:
                    raise DimensionError(
                        f"{key!r} has dim {value.shape[0]}, factor expects {a.shape[1]}"
                    )
                out += a @ value
        return out

    def residual(self, x: VectorValues) -> np.ndarray:
        """Σ A_k x_k − b, keys absent from ``x`` taken as zero."""
        return self._product(x) - self._b

    def error(self, x: VectorValues) -> float:
        r = self.residual(x)
        return 0.5 * float(r @ r)

    def gradient(self, key: Key, x: VectorValues) -> np.ndarray:
        """Gradient of ½‖Ax − b‖² with respect to the block at ``key``."""
        return self._terms[key].T @ self.residual(x)

    def shifted(self, x: VectorValues) -> "JacobianFactor":
        """Same blocks with rhs b − Ax, i.e. the factor in delta coordinates."""
        return JacobianFactor(self._terms, -self.residual(x))


class LinearEquality(JacobianFactor):
    """
    Equality constraint Σ A_k x_k = b with an attached multiplier key.

    Equalities are always active.
    """

    def __init__(self, terms: Mapping[Key, BlockLike], b: BlockLike, dual_key: Key) -> None:
        super().__init__(terms, b)
        self.dual_key = dual_key

    def active(self) -> bool:
        return True

    def shifted(self, x: VectorValues) -> "LinearEquality":
        return LinearEquality(self._terms, -self.residual(x), self.dual_key)


class LinearInequality:
    """
    Single-row inequality aᵀx ≤ b.

    The factor itself is immutable; whether it is enforced at the current
    iterate is tracked by the :class:`~qpgraph.working_set.WorkingSet`.

    Args:
        terms: Mapping key -> row coefficients (dim(key),)
        b: Scalar bound
        dual_key: Key of the associated multiplier

    Example:
        >>> c = LinearInequality({"x": [1.0]}, 3.0, dual_key=0)
        >>> c.error(VectorValues({"x": [2.0]}))
        -1.0
    """

    def __init__(self, terms: Mapping[Key, BlockLike], b: float, dual_key: Key) -> None:
        self._terms: Dict[Key, np.ndarray] = {}
        for key, value in terms.items():
            row = np.atleast_1d(np.asarray(value, dtype=np.float64))
            if row.ndim == 2 and row.shape[0] == 1:
                row = row[0]
            if row.ndim != 1:
                raise DimensionError(f"inequality row for {key!r} must be a single row")
            self._terms[key] = row.copy()
        bound = np.asarray(b, dtype=np.float64).ravel()
        if bound.shape[0] != 1:
            raise DimensionError(f"inequality bound must be scalar, got {bound.shape[0]} entries")
        self._b = float(bound[0])
        if np.isnan(self._b) or any(np.any(np.isnan(r)) for r in self._terms.values()):
            raise InvalidInputError("inequality contains NaN values")
        self.dual_key = dual_key

    def __repr__(self) -> str:
        lhs = " + ".join(f"{r}*{k!r}" for k, r in self._terms.items())
        return f"LinearInequality({lhs} <= {self._b}, dual={self.dual_key!r})"

    @property
    def rows(self) -> int:
        return 1

    def keys(self) -> List[Key]:
        return list(self._terms.keys())

    def empty(self) -> bool:
        return not self._terms

    def __contains__(self, key: object) -> bool:
        return key in self._terms

    def find(self, key: Key) -> Optional[int]:
        for pos, k in enumerate(self._terms):
            if k == key:
                return pos
        return None

    def get_a(self, key: Key) -> np.ndarray:
        """Coefficient block at ``key`` as a 1 x dim(key) matrix."""
        return self._terms[key].reshape(1, -1)

    def get_b(self) -> np.ndarray:
        return np.array([self._b])

    @property
    def bound(self) -> float:
        return self._b

    def dims(self) -> Dict[Key, int]:
        return {key: int(r.shape[0]) for key, r in self._terms.items()}

    def dot_product_row(self, x: VectorValues) -> float:
        """aᵀx; keys absent from ``x`` contribute zero."""
        total = 0.0
        for key, row in self._terms.items():
            if key in x:
                value = x.at(key)
                if value.shape[0] != row.shape[0]:
                    raise DimensionError(
                        f"{key!r} has dim {value.shape[0]}, inequality expects {row.shape[0]}"
                    )
                total += float(row @ value)
        return total

    def error(self, x: VectorValues) -> float:
        """Signed slack aᵀx − b; non-positive when satisfied."""
        return self.dot_product_row(x) - self._b

    def is_satisfied(self, x: VectorValues, tol: float = 1e-9) -> bool:
        return self.error(x) <= tol

    def is_tight(self, x: VectorValues, tol: float = 1e-9) -> bool:
        return abs(self.error(x)) <= tol

    def to_equality(self) -> LinearEquality:
        """The constraint aᵀx = b, as enforced while active."""
        return LinearEquality(
            {key: row.reshape(1, -1) for key, row in self._terms.items()},
            [self._b],
            self.dual_key,
        )
