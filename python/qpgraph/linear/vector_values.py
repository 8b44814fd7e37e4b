"""
VectorValues
============

Mapping from keys to dense vectors, used for points, directions and
Lagrange multipliers alike.
"""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from ..exceptions import DimensionError
from ..keys import Key


class VectorValues:
    """
    Collection of named vectors.

    Keys missing from one operand of ``+`` or ``-`` are treated as zero.

    Example:
        >>> x = VectorValues({"x": [1.0, 2.0]})
        >>> p = VectorValues({"x": [0.5, 0.5], "y": [1.0]})
        >>> (x + 2.0 * p).at("y")
        array([2.])
    """

    def __init__(self, values: Optional[Mapping[Key, Iterable[float]]] = None) -> None:
        self._values: Dict[Key, np.ndarray] = {}
        if values is not None:
            for key, value in values.items():
                self.insert(key, value)

    # ------------------------------------------------------------------
    # Container protocol
    # ------------------------------------------------------------------

    def insert(self, key: Key, value: Iterable[float]) -> None:
        """Insert or replace the vector at ``key``."""
        self._values[key] = np.atleast_1d(np.asarray(value, dtype=np.float64)).ravel().copy()

    def at(self, key: Key) -> np.ndarray:
        """Vector stored at ``key``; raises KeyError when absent."""
        return self._values[key]

    def exists(self, key: Key) -> bool:
        return key in self._values

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __getitem__(self, key: Key) -> np.ndarray:
        return self._values[key]

    def __setitem__(self, key: Key, value: Iterable[float]) -> None:
        self.insert(key, value)

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[Key]:
        return iter(self._values)

    def keys(self) -> List[Key]:
        return list(self._values.keys())

    def items(self) -> List[Tuple[Key, np.ndarray]]:
        return list(self._values.items())

    def dim(self, key: Key) -> int:
        return int(self._values[key].shape[0])

    def dims(self) -> Dict[Key, int]:
        return {key: int(v.shape[0]) for key, v in self._values.items()}

    def copy(self) -> "VectorValues":
        return VectorValues(self._values)

    def zero_like(self) -> "VectorValues":
        return VectorValues({key: np.zeros_like(v) for key, v in self._values.items()})

    @classmethod
    def zero(cls, dims: Mapping[Key, int]) -> "VectorValues":
        return cls({key: np.zeros(d) for key, d in dims.items()})

    def __repr__(self) -> str:
        body = ", ".join(f"{k!r}: {v}" for k, v in self._values.items())
        return f"VectorValues({{{body}}})"

    # ------------------------------------------------------------------
    # Arithmetic
    # ------------------------------------------------------------------

    def _combine(self, other: "VectorValues", sign: float) -> "VectorValues":
        result = self.copy()
        for key, value in other._values.items():
            if key in result._values:
                if result._values[key].shape != value.shape:
                    raise DimensionError(
                        f"key {key!r} has dim {result._values[key].shape[0]} "
                        f"and {value.shape[0]}"
                    )
                result._values[key] = result._values[key] + sign * value
            else:
                result._values[key] = sign * value
        return result

    def __add__(self, other: "VectorValues") -> "VectorValues":
        return self._combine(other, 1.0)

    def __sub__(self, other: "VectorValues") -> "VectorValues":
        return self._combine(other, -1.0)

    def __mul__(self, alpha: float) -> "VectorValues":
        return self.scale(alpha)

    def __rmul__(self, alpha: float) -> "VectorValues":
        return self.scale(alpha)

    def __neg__(self) -> "VectorValues":
        return self.scale(-1.0)

    def scale(self, alpha: float) -> "VectorValues":
        return VectorValues({key: alpha * v for key, v in self._values.items()})

    def dot(self, other: "VectorValues") -> float:
        """Inner product over the keys both operands share."""
        return float(
            sum(np.dot(v, other._values[key]) for key, v in self._values.items() if key in other._values)
        )

    def norm(self) -> float:
        if not self._values:
            return 0.0
        return float(np.sqrt(sum(np.dot(v, v) for v in self._values.values())))

    def equals(self, other: "VectorValues", tol: float = 1e-9) -> bool:
        """True if both hold the same keys with entries within ``tol``."""
        if set(self._values) != set(other._values):
            return False
        for key, value in self._values.items():
            theirs = other._values[key]
            if value.shape != theirs.shape or not np.all(np.abs(value - theirs) <= tol):
                return False
        return True

    # ------------------------------------------------------------------
    # Stacking
    # ------------------------------------------------------------------

    def vector(self, ordering: Optional[Sequence[Key]] = None) -> np.ndarray:
        """Concatenate the vectors in ``ordering`` (insertion order by default)."""
        ordering = list(self._values) if ordering is None else ordering
        if not ordering:
            return np.zeros(0)
        return np.concatenate([self._values[key] for key in ordering])

    @classmethod
    def from_vector(
        cls,
        vector: np.ndarray,
        ordering: Sequence[Key],
        dims: Mapping[Key, int],
    ) -> "VectorValues":
        """Split a stacked vector back into named blocks."""
        vector = np.asarray(vector, dtype=np.float64).ravel()
        total = sum(dims[key] for key in ordering)
        if total != vector.shape[0]:
            raise DimensionError(f"vector has {vector.shape[0]} entries, expected {total}")
        result = cls()
        offset = 0
        for key in ordering:
            d = dims[key]
            result._values[key] = vector[offset:offset + d].copy()
            offset += d
        return result
