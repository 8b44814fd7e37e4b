"""
Working Set
===========

Inequality constraints addressed by stable index, with their activity
held in a separate boolean array.
"""

from __future__ import annotations

from typing import Iterable, Iterator, List, Optional, Tuple

import numpy as np

from .exceptions import DimensionError, InvalidInputError
from .linear.factor_graph import EqualityFactorGraph
from .linear.factors import LinearInequality
from .linear.vector_values import VectorValues


class WorkingSet:
    """
    Inequality factors plus the flags saying which are enforced.

    The factor list is fixed at construction; only the activity flags
    change, one activation or deactivation at a time.

    Args:
        inequalities: Inequality factors (graph or any iterable)
        active: Optional initial activity mask; all inactive by default

    Example:
        >>> ws = WorkingSet(inequalities)
        >>> ws.activate(1)
        >>> ws.active_indices()
        [1]
    """

    def __init__(
        self,
        inequalities: Iterable[LinearInequality],
        active: Optional[Iterable[bool]] = None,
    ) -> None:
        self._factors: Tuple[LinearInequality, ...] = tuple(inequalities)
        if active is None:
            self._active = np.zeros(len(self._factors), dtype=bool)
        else:
            self._active = np.asarray(list(active), dtype=bool)
            if self._active.shape != (len(self._factors),):
                raise DimensionError(
                    f"active mask has {self._active.size} entries for {len(self._factors)} factors"
                )

    @classmethod
    def from_initial(
        cls,
        inequalities: Iterable[LinearInequality],
        x0: VectorValues,
        duals: Optional[VectorValues] = None,
        tol: float = 1e-7,
    ) -> "WorkingSet":
        """
        Seed activity from a start point.

        With warm-start ``duals`` a factor is active iff its dual key is
        present; otherwise it is active iff it is tight at ``x0``.
        """
        factors = list(inequalities)
        if duals is not None and len(duals) > 0:
            mask = [duals.exists(f.dual_key) for f in factors]
        else:
            mask = [f.is_tight(x0, tol) for f in factors]
        return cls(factors, mask)

    def __len__(self) -> int:
        return len(self._factors)

    def __getitem__(self, ix: int) -> LinearInequality:
        return self._factors[ix]

    def __iter__(self) -> Iterator[LinearInequality]:
        return iter(self._factors)

    def at(self, ix: int) -> LinearInequality:
        return self._factors[ix]

    def size(self) -> int:
        return len(self._factors)

    def is_active(self, ix: int) -> bool:
        return bool(self._active[ix])

    def activate(self, ix: int) -> None:
        if self._active[ix]:
            raise InvalidInputError(f"inequality {ix} is already active")
        self._active[ix] = True

    def deactivate(self, ix: int) -> None:
        if not self._active[ix]:
            raise InvalidInputError(f"inequality {ix} is already inactive")
        self._active[ix] = False

    def active_indices(self) -> List[int]:
        return [int(i) for i in np.flatnonzero(self._active)]

    def inactive_indices(self) -> List[int]:
        return [int(i) for i in np.flatnonzero(~self._active)]

    @property
    def n_active(self) -> int:
        return int(self._active.sum())

    @property
    def mask(self) -> np.ndarray:
        """Read-only copy of the activity flags."""
        return self._active.copy()

    def signature(self) -> Tuple[int, ...]:
        return tuple(self.active_indices())

    def copy(self) -> "WorkingSet":
        return WorkingSet(self._factors, self._active.copy())

    def as_equalities(self) -> EqualityFactorGraph:
        """Active factors as equality constraints."""
        return EqualityFactorGraph(self._factors[ix].to_equality() for ix in self.active_indices())

    def __repr__(self) -> str:
        return f"WorkingSet(size={len(self)}, active={self.active_indices()})"
